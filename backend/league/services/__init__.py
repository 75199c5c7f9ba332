"""
Services Layer

Pure league logic that:
- Accepts domain inputs (IDs, sessions, settings)
- Returns domain outputs (models, dataclasses, dicts)
- Does NOT depend on HTTP request/response objects
- Raises league.exceptions errors; routes translate them to HTTP
"""
