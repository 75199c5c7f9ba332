"""
Query result helpers.

COUNT queries may come back as a plain int or as a 1-tuple/Row depending on
how they are executed; scalar_int() coerces both.
"""
from typing import Any


def scalar_int(x: Any) -> int:
    """Convert COUNT/aggregate result to int. Handles int or 1-tuple/Row."""
    if isinstance(x, (tuple, list)) or hasattr(x, "_mapping"):
        return int(x[0])
    return int(x or 0)
