"""
Feasibility Checker

Pre-flight gate run before anything is deleted or written. Every failure
carries the exact figures so the organiser can see what to change.
"""

from typing import List, Sequence

from match_scheduler.utils.errors import CapacityError
from match_scheduler.utils.round_robin import Pairing
from match_scheduler.utils.schedule_config import TournamentConfig
from match_scheduler.utils.time_grid import Cell


def check_team_bounds(team_count: int, min_teams: int, max_teams: int) -> None:
    if team_count < min_teams:
        raise CapacityError(f"not enough teams: {team_count}/{min_teams}")
    if team_count > max_teams:
        raise CapacityError(f"too many teams: {team_count}/{max_teams}")


def check_capacity(required: int, available: int) -> None:
    if required > available:
        raise CapacityError(f"{required} matches required, {available} slots available")


def check_feasibility(
    config: TournamentConfig,
    team_count: int,
    pairings: Sequence[Pairing],
    open_cells: List[Cell],
) -> None:
    """
    Raises CapacityError when:
    - team count is below min_teams or above max_teams
    - more pairings are required than there are open cells
    """
    check_team_bounds(team_count, config.min_teams, config.max_teams)
    check_capacity(len(pairings), len(open_cells))
