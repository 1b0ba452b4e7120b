"""
Time Grid Builder

Turns a tournament window into the ordered list of bookable (time, field)
cells. Pure functions, no database access.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import List

from match_scheduler.utils.clock import format_hhmm, minutes_to_time


@dataclass(frozen=True)
class Cell:
    """One bookable unit: a start minute on one field."""

    start_minute: int
    field_index: int  # 1-based
    time_order_index: int  # position of start_minute in the timeline

    @property
    def start_time(self) -> time:
        return minutes_to_time(self.start_minute)

    @property
    def key(self) -> tuple:
        return (self.start_minute, self.field_index)

    def __str__(self):
        return f"{format_hhmm(self.start_minute)} / field {self.field_index}"


def build_timeline(start_minute: int, end_minute: int, slot_minutes: int) -> List[int]:
    """Every start minute t such that [t, t + slot) fits inside [start, end)."""
    if slot_minutes < 1:
        return []
    times: List[int] = []
    cur = start_minute
    while cur + slot_minutes <= end_minute:
        times.append(cur)
        cur += slot_minutes
    return times


def build_time_grid(start_minute: int, end_minute: int, slot_minutes: int, num_fields: int) -> List[Cell]:
    """
    Cross the timeline with every field.

    Ordered by time ascending, then field ascending; cells sharing a start
    minute share a time_order_index.
    """
    cells: List[Cell] = []
    for order, minute in enumerate(build_timeline(start_minute, end_minute, slot_minutes)):
        for field_index in range(1, num_fields + 1):
            cells.append(Cell(start_minute=minute, field_index=field_index, time_order_index=order))
    return cells
