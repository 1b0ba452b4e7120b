"""
Schedule Orchestrator Service - one-click generation and manual edit saves

Generation pipeline (one logical transaction):
1. Validate configuration (ConfigurationError)
2. Build the time grid and drop paused cells
3. Generate the pairing sequence (flat or interleaved pools)
4. Feasibility gate (CapacityError) - nothing has been touched yet
5. Greedy assignment
6. Atomic replace of the stored match set (PersistenceError)

Runs for the same tournament are serialized with an in-process lock.
"""

import logging
import math
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlmodel import Session

from match_scheduler.config import LOOKAHEAD_WINDOW
from match_scheduler.models.match import Match
from match_scheduler.models.team import Team
from match_scheduler.models.tournament import Tournament
from match_scheduler.services.match_store import (
    apply_position_updates,
    load_matches,
    load_roster,
    replace_matches,
)
from match_scheduler.utils.auto_assign import assign_pairings
from match_scheduler.utils.clock import format_hhmm, time_to_minutes
from match_scheduler.utils.feasibility import check_feasibility
from match_scheduler.utils.manual_assignment import GridMatch, ManualScheduleEditor, MatchPositionUpdate
from match_scheduler.utils.pauses import FilteredGrid, filter_cells
from match_scheduler.utils.round_robin import Pairing, RosterTeam, build_pairing_sequence
from match_scheduler.utils.schedule_config import TournamentConfig
from match_scheduler.utils.time_grid import build_time_grid, build_timeline

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]

_locks: Dict[int, threading.Lock] = {}
_locks_guard = threading.Lock()


@contextmanager
def tournament_lock(tournament_id: int) -> Iterator[None]:
    """Serialize schedule mutations per tournament."""
    with _locks_guard:
        lock = _locks.setdefault(tournament_id, threading.Lock())
    with lock:
        yield


# ============================================================================
# Response Models
# ============================================================================


class BuildWarning:
    """Warning during schedule generation"""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message

    def to_dict(self):
        return {"code": self.code, "message": self.message}


class ScheduleBuildResult:
    """Complete result of a generation run"""

    def __init__(self, tournament_id: int):
        self.status = "success"
        self.tournament_id = tournament_id
        self.team_count = 0
        self.open_cells = 0
        self.blocked_cells = 0
        self.assignment: Dict[str, Any] = {}
        self.warnings: List[BuildWarning] = []

    def to_dict(self):
        return {
            "status": self.status,
            "tournament_id": self.tournament_id,
            "summary": {
                "team_count": self.team_count,
                "open_cells": self.open_cells,
                "blocked_cells": self.blocked_cells,
                **self.assignment,
            },
            "warnings": [w.to_dict() for w in self.warnings],
        }


# ============================================================================
# Pipeline pieces
# ============================================================================


def roster_for_scheduler(teams: Sequence[Team]) -> List[RosterTeam]:
    return [RosterTeam(team_id=t.id, pool_index=t.pool_index, name=t.name) for t in teams]


def playable_grid(config: TournamentConfig) -> FilteredGrid:
    cells = build_time_grid(config.start_minute, config.end_minute, config.slot_minutes, config.num_fields)
    return filter_cells(cells, config.slot_minutes, config.pauses)


def pairing_sequence(config: TournamentConfig, teams: Sequence[Team]) -> List[Pairing]:
    return build_pairing_sequence(roster_for_scheduler(teams), pooled=config.pooled, pool_count=config.pool_count)


def generate_schedule(
    session: Session,
    tournament: Tournament,
    window: Optional[int] = None,
) -> ScheduleBuildResult:
    """
    Generate and store a fresh schedule for the tournament.

    Raises ConfigurationError / CapacityError before anything is written and
    PersistenceError if the atomic replace fails. A shortfall in placement is
    reported as an UNDER_PLACEMENT warning, with the counts in the summary.
    """
    tournament_id = tournament.id
    with tournament_lock(tournament_id):
        config = TournamentConfig.from_tournament(tournament)
        teams = load_roster(session, tournament_id)
        grid = playable_grid(config)
        pairings = pairing_sequence(config, teams)

        check_feasibility(config, len(teams), pairings, grid.open_cells)

        assignment = assign_pairings(
            grid.open_cells,
            pairings,
            num_fields=config.num_fields,
            pooled=config.pooled,
            window=window or LOOKAHEAD_WINDOW,
        )

        replace_matches(session, tournament_id, assignment.matches)

    result = ScheduleBuildResult(tournament_id)
    result.team_count = len(teams)
    result.open_cells = len(grid.open_cells)
    result.blocked_cells = len(grid.blocked_cells)
    result.assignment = assignment.to_dict()

    if not assignment.complete:
        result.status = "partial"
        result.warnings.append(
            BuildWarning(
                "UNDER_PLACEMENT",
                f"{assignment.assigned_count} of {assignment.required_count} matches placed; "
                f"{assignment.unplaced_count} could not fit the rest and equity rules",
            )
        )
    if assignment.relaxed_count:
        result.warnings.append(
            BuildWarning(
                "REST_RELAXED",
                f"{assignment.relaxed_count} matches were placed without the minimum rest between games",
            )
        )

    logger.info(
        f"Tournament {tournament_id}: generated {assignment.assigned_count}/{assignment.required_count} matches "
        f"for {len(teams)} teams on {len(grid.open_cells)} open cells"
    )
    return result


# ============================================================================
# Manual edits
# ============================================================================


def grid_matches(matches: Sequence[Match]) -> List[GridMatch]:
    return [
        GridMatch(
            match_id=m.id,
            home_team_id=m.home_team_id,
            away_team_id=m.away_team_id,
            start_minute=time_to_minutes(m.start_time),
            field_index=m.field_index,
        )
        for m in matches
    ]


def apply_manual_edits(
    session: Session,
    tournament: Tournament,
    gestures: Sequence[Tuple[CellKey, CellKey]],
) -> List[MatchPositionUpdate]:
    """
    Replay swap/move gestures on the stored grid and save the moved rows.

    Any rejected gesture raises ConflictError and nothing is saved.
    """
    with tournament_lock(tournament.id):
        config = TournamentConfig.from_tournament(tournament)
        editor = ManualScheduleEditor.for_config(config, grid_matches(load_matches(session, tournament.id)))

        for source, target in gestures:
            editor.swap(source, target)

        updates = editor.prepare_save()
        if updates:
            apply_position_updates(session, tournament.id, updates)

    logger.info(f"Tournament {tournament.id}: saved {len(updates)} manual match moves")
    return updates


# ============================================================================
# Read-only views
# ============================================================================


def build_estimate(session: Session, tournament: Tournament) -> Dict[str, Any]:
    """Capacity figures shown before generating: required vs. playable, theoretical end."""
    config = TournamentConfig.from_tournament(tournament)
    teams = load_roster(session, tournament.id)
    grid = playable_grid(config)
    required = len(pairing_sequence(config, teams))

    rounds_needed = math.ceil(required / config.num_fields) if required else 0
    theoretical_end = config.start_minute + rounds_needed * config.slot_minutes

    return {
        "team_count": len(teams),
        "min_teams": config.min_teams,
        "max_teams": config.max_teams,
        "slot_minutes": config.slot_minutes,
        "num_fields": config.num_fields,
        "required_matches": required,
        "playable_slots": len(grid.open_cells),
        "blocked_slots": len(grid.blocked_cells),
        "theoretical_slots": rounds_needed * config.num_fields,
        "theoretical_end": format_hhmm(theoretical_end) if required else None,
        "exceeds_window": theoretical_end > config.end_minute,
        "fits_capacity": required <= len(grid.open_cells),
    }


def build_schedule_grid(session: Session, tournament: Tournament) -> Dict[str, Any]:
    """
    Timeline x fields with every cell marked match / empty / paused.

    Stored matches outside the current grid go to off_grid_matches; a second
    match in an occupied cell goes to conflicting_matches.
    """
    config = TournamentConfig.from_tournament(tournament)
    grid = playable_grid(config)
    blocked = grid.blocked_keys
    teams = {t.id: t for t in load_roster(session, tournament.id)}

    by_cell: Dict[CellKey, Match] = {}
    off_grid: List[Match] = []
    conflicting: List[Match] = []
    timeline = build_timeline(config.start_minute, config.end_minute, config.slot_minutes)
    valid_minutes = set(timeline)
    for match in load_matches(session, tournament.id):
        key = (time_to_minutes(match.start_time), match.field_index)
        if not (key[0] in valid_minutes and 1 <= key[1] <= config.num_fields):
            off_grid.append(match)
        elif key in by_cell:
            # Cell already taken (e.g. after a partially saved edit); keep the first, list the rest
            conflicting.append(match)
        else:
            by_cell[key] = match

    def match_payload(match: Match) -> Dict[str, Any]:
        home = teams.get(match.home_team_id)
        away = teams.get(match.away_team_id)
        return {
            "id": match.id,
            "home_team_id": match.home_team_id,
            "away_team_id": match.away_team_id,
            "home_team_name": home.name if home else None,
            "away_team_name": away.name if away else None,
            "pool_index": match.pool_index,
        }

    rows = []
    for minute in timeline:
        cells = []
        for field_index in range(1, config.num_fields + 1):
            key = (minute, field_index)
            if key in blocked:
                cells.append({"field_index": field_index, "status": "paused", "match": None})
            elif key in by_cell:
                cells.append({"field_index": field_index, "status": "match", "match": match_payload(by_cell[key])})
            else:
                cells.append({"field_index": field_index, "status": "empty", "match": None})
        rows.append({"start_time": format_hhmm(minute), "cells": cells})

    return {
        "tournament_id": tournament.id,
        "slot_minutes": config.slot_minutes,
        "fields": [{"field_index": i + 1, "name": name} for i, name in enumerate(config.field_names)],
        "rows": rows,
        "off_grid_matches": [match_payload(m) for m in off_grid],
        "conflicting_matches": [match_payload(m) for m in conflicting],
    }
