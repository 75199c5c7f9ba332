# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from league.models.category import Category  # noqa: F401
from league.models.match import Match  # noqa: F401
from league.models.player import Player  # noqa: F401
from league.models.round import Round  # noqa: F401
from league.models.standing import Standing  # noqa: F401
