"""
Pause Filter

A pause window makes cells unavailable when the cell's occupied interval
[start, start + slot) overlaps it. Three kinds exist:

- GlobalPause: every field
- ExceptPause: every field except an allow-list
- FieldPause: a single field

Stored form (tournament.pauses / tournament.field_pauses):
    pauses = [{"type": "global", "from": "12:00", "to": "12:30"},
              {"type": "except", "from": "13:00", "to": "13:30", "except_fields": [1]}]
    field_pauses = {"2": [{"from": "10:00", "to": "10:15"}]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from match_scheduler.utils.clock import format_hhmm, time_to_minutes
from match_scheduler.utils.errors import ConfigurationError
from match_scheduler.utils.time_grid import Cell


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap: [a_start, a_end) and [b_start, b_end); touching ends do not overlap."""
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class PauseWindow:
    start_minute: int
    end_minute: int

    def applies_to(self, field_index: int) -> bool:
        return True

    def blocks(self, start_minute: int, end_minute: int, field_index: int) -> bool:
        if not self.applies_to(field_index):
            return False
        return intervals_overlap(start_minute, end_minute, self.start_minute, self.end_minute)

    def describe(self) -> str:
        return f"{format_hhmm(self.start_minute)}-{format_hhmm(self.end_minute)}"


@dataclass(frozen=True)
class GlobalPause(PauseWindow):
    pass


@dataclass(frozen=True)
class ExceptPause(PauseWindow):
    allowed_fields: FrozenSet[int] = field(default_factory=frozenset)

    def applies_to(self, field_index: int) -> bool:
        return field_index not in self.allowed_fields


@dataclass(frozen=True)
class FieldPause(PauseWindow):
    field_index: int = 1

    def applies_to(self, field_index: int) -> bool:
        return field_index == self.field_index


@dataclass
class FilteredGrid:
    open_cells: List[Cell]
    blocked_cells: List[Cell]

    @property
    def blocked_keys(self) -> set:
        return {c.key for c in self.blocked_cells}


def is_cell_blocked(cell: Cell, slot_minutes: int, pauses: List[PauseWindow]) -> bool:
    end = cell.start_minute + slot_minutes
    return any(p.blocks(cell.start_minute, end, cell.field_index) for p in pauses)


def filter_cells(cells: List[Cell], slot_minutes: int, pauses: List[PauseWindow]) -> FilteredGrid:
    """Split cells into open and blocked, preserving grid order."""
    open_cells: List[Cell] = []
    blocked_cells: List[Cell] = []
    for cell in cells:
        if is_cell_blocked(cell, slot_minutes, pauses):
            blocked_cells.append(cell)
        else:
            open_cells.append(cell)
    return FilteredGrid(open_cells=open_cells, blocked_cells=blocked_cells)


# ============================================================================
# Parsing stored pause JSON
# ============================================================================


def _parse_bounds(raw: Dict[str, Any], where: str) -> Tuple[int, int]:
    try:
        start = time_to_minutes(raw["from"])
        end = time_to_minutes(raw["to"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"{where}: invalid pause window {raw!r} ({e})")
    if end <= start:
        raise ConfigurationError(f'{where}: pause end {raw["to"]} must be after start {raw["from"]}')
    return start, end


def parse_pause_windows(
    pauses: Optional[List[Dict[str, Any]]],
    field_pauses: Optional[Dict[str, List[Dict[str, Any]]]],
) -> List[PauseWindow]:
    """Build typed pause windows from the stored JSON columns."""
    windows: List[PauseWindow] = []

    for raw in pauses or []:
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Tournament pause: expected an object, got {raw!r}")
        kind = raw.get("type", "global")
        start, end = _parse_bounds(raw, "Tournament pause")
        if kind == "global":
            windows.append(GlobalPause(start, end))
        elif kind == "except":
            try:
                allowed = frozenset(int(f) for f in raw.get("except_fields") or [])
            except (TypeError, ValueError):
                raise ConfigurationError(f"Tournament pause: invalid except_fields {raw.get('except_fields')!r}")
            windows.append(ExceptPause(start, end, allowed_fields=allowed))
        else:
            raise ConfigurationError(f"Tournament pause: unknown type '{kind}'")

    for key, entries in (field_pauses or {}).items():
        try:
            field_index = int(key)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Field pause: invalid field index '{key}'")
        for raw in entries or []:
            start, end = _parse_bounds(raw, f"Field {field_index} pause")
            windows.append(FieldPause(start, end, field_index=field_index))

    return windows
