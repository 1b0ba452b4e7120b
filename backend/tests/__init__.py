# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from match_scheduler.models.match import Match  # noqa: F401
from match_scheduler.models.team import Team  # noqa: F401
from match_scheduler.models.tournament import Tournament  # noqa: F401
