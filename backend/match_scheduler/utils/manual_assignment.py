"""
Manual Schedule Editor: in-memory swap/move of assigned matches

Editing works on a working copy of the persisted match set:

1. Entering edit mode snapshots every match position.
2. Selecting a cell, then a second cell, swaps their contents (either side
   may be empty, which makes it a move).
3. Each gesture is validated before it is kept:
   - neither cell may be paused (blocked by a pause window)
   - both cells must exist in the tournament grid
   - after the change, no team may appear twice at the same start time
   A rejected gesture leaves the working copy exactly as it was.
4. Saving diffs the working copy against the snapshot; only moved matches
   are returned for persistence.
"""

from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import time
from typing import Dict, Hashable, Iterable, List, Optional, Set, Tuple

from match_scheduler.utils.clock import format_hhmm, minutes_to_time
from match_scheduler.utils.errors import ConflictError
from match_scheduler.utils.pauses import filter_cells
from match_scheduler.utils.schedule_config import TournamentConfig
from match_scheduler.utils.time_grid import Cell, build_time_grid

CellKey = Tuple[int, int]  # (start_minute, field_index)


@dataclass(frozen=True)
class GridMatch:
    """Working-copy view of a persisted match."""

    match_id: int
    home_team_id: Hashable
    away_team_id: Hashable
    start_minute: int
    field_index: int

    @property
    def key(self) -> CellKey:
        return (self.start_minute, self.field_index)


@dataclass(frozen=True)
class MatchPositionUpdate:
    match_id: int
    start_minute: int
    field_index: int

    @property
    def start_time(self) -> time:
        return minutes_to_time(self.start_minute)


def _describe(key: CellKey) -> str:
    return f"{format_hhmm(key[0])} on field {key[1]}"


def find_double_bookings(matches: Iterable[GridMatch]) -> List[Tuple[int, Hashable]]:
    """(start_minute, team_id) for every team assigned more than once at a start time."""
    seen: Dict[int, Set[Hashable]] = defaultdict(set)
    duplicates: List[Tuple[int, Hashable]] = []
    for match in sorted(matches, key=lambda m: (m.start_minute, m.field_index, m.match_id)):
        teams_at_time = seen[match.start_minute]
        for team_id in (match.home_team_id, match.away_team_id):
            if team_id in teams_at_time:
                duplicates.append((match.start_minute, team_id))
            teams_at_time.add(team_id)
    return duplicates


class ManualScheduleEditor:
    """Interactive editing session over one tournament's match grid."""

    def __init__(self, matches: Iterable[GridMatch], cells: Iterable[Cell], blocked_cells: Iterable[Cell]):
        self._blocked: Set[CellKey] = {c.key for c in blocked_cells}
        self._cells: Set[CellKey] = {c.key for c in cells} | self._blocked
        self._matches: Dict[int, GridMatch] = {m.match_id: m for m in matches}
        self._snapshot: Dict[int, CellKey] = {m.match_id: m.key for m in self._matches.values()}
        self.selected: Optional[CellKey] = None

    @classmethod
    def for_config(cls, config: TournamentConfig, matches: Iterable[GridMatch]) -> "ManualScheduleEditor":
        grid = build_time_grid(config.start_minute, config.end_minute, config.slot_minutes, config.num_fields)
        filtered = filter_cells(grid, config.slot_minutes, config.pauses)
        return cls(matches, filtered.open_cells, filtered.blocked_cells)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def matches(self) -> List[GridMatch]:
        return sorted(self._matches.values(), key=lambda m: (m.start_minute, m.field_index, m.match_id))

    def match_at(self, start_minute: int, field_index: int) -> Optional[GridMatch]:
        for match in self._matches.values():
            if match.key == (start_minute, field_index):
                return match
        return None

    def is_paused(self, start_minute: int, field_index: int) -> bool:
        return (start_minute, field_index) in self._blocked

    @property
    def has_changes(self) -> bool:
        return bool(self.pending_updates())

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def _check_cell(self, key: CellKey) -> None:
        if key in self._blocked:
            raise ConflictError(f"Cell {_describe(key)} is paused")
        if key not in self._cells:
            raise ConflictError(f"Cell {_describe(key)} is not part of the schedule grid")

    def select(self, start_minute: int, field_index: int) -> Optional[CellKey]:
        """
        Click a cell.

        First click selects; clicking the selected cell again clears the
        selection; clicking another cell swaps the two. Returns the current
        selection afterwards (None once a gesture completed or was rejected).
        """
        key = (start_minute, field_index)
        if self.selected is None:
            try:
                self._check_cell(key)
            except ConflictError:
                self.selected = None
                raise
            self.selected = key
            return self.selected

        if self.selected == key:
            self.selected = None
            return None

        source = self.selected
        self.selected = None
        self.swap(source, key)
        return None

    def swap(self, source: CellKey, target: CellKey) -> None:
        """
        Exchange the contents of two cells (a move when one is empty).

        Raises ConflictError and leaves the grid unchanged if either cell is
        paused/unknown or if the result double-books a team.
        """
        self._check_cell(source)
        self._check_cell(target)
        if source == target:
            return

        a = self.match_at(*source)
        b = self.match_at(*target)
        if a is None and b is None:
            return

        tentative = dict(self._matches)
        if a is not None:
            tentative[a.match_id] = replace(a, start_minute=target[0], field_index=target[1])
        if b is not None:
            tentative[b.match_id] = replace(b, start_minute=source[0], field_index=source[1])

        duplicates = find_double_bookings(tentative.values())
        if duplicates:
            minute, team_id = duplicates[0]
            raise ConflictError(f"Team {team_id} would play twice at {format_hhmm(minute)}")

        self._matches = tentative

    def cancel(self) -> None:
        """Drop every gesture since edit mode was entered."""
        for match_id, (minute, field_index) in self._snapshot.items():
            match = self._matches.get(match_id)
            if match is not None:
                self._matches[match_id] = replace(match, start_minute=minute, field_index=field_index)
        self.selected = None

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def pending_updates(self) -> List[MatchPositionUpdate]:
        """Matches whose (start_time, field_index) differs from the snapshot."""
        updates: List[MatchPositionUpdate] = []
        for match in self.matches:
            original = self._snapshot.get(match.match_id)
            if original is None or original == match.key:
                continue
            updates.append(
                MatchPositionUpdate(match_id=match.match_id, start_minute=match.start_minute, field_index=match.field_index)
            )
        return updates

    def prepare_save(self) -> List[MatchPositionUpdate]:
        """Re-validate the whole grid and return the rows to persist."""
        duplicates = find_double_bookings(self._matches.values())
        if duplicates:
            minute, team_id = duplicates[0]
            raise ConflictError(f"Team {team_id} is scheduled twice at {format_hhmm(minute)}")
        return self.pending_updates()
