from match_scheduler.models.match import Match
from match_scheduler.models.team import Team
from match_scheduler.models.tournament import Tournament

__all__ = [
    "Tournament",
    "Team",
    "Match",
]
