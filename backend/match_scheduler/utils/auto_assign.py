"""
Auto-Assign: deterministic greedy assignment of pairings to open cells

Cells are visited in time order (then field). For each cell a bounded window
of pending pairings is scanned twice:

- Pass A (strict): no team busy at this time, both teams rested for at least
  MIN_REST_INTERVALS timeline steps, and the played-count spread stays <= 1
  (globally, and per pool in pooled mode).
- Pass B (relaxed): only when Pass A finds nothing. Rest becomes a penalty;
  busy and equity rules still apply.

Surviving candidates are scored (lower is better) and the first minimum wins.
A cell with no candidate in either pass is left empty. No randomness.

Shortfall is not an error here: the result reports required vs. assigned and
the caller decides what to do with unplaced pairings.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Set, Tuple

from match_scheduler.utils.clock import format_hhmm, minutes_to_time
from match_scheduler.utils.round_robin import Pairing
from match_scheduler.utils.time_grid import Cell

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_WINDOW = 180
MIN_REST_INTERVALS = 2
MAX_PLAYED_SPREAD = 1

# Score weights
FIELD_USAGE_WEIGHT = 2.0
WINDOW_POSITION_WEIGHT = 1.2
RELAX_PENALTY = 80.0
PLAYED_COUNT_WEIGHT = 0.5

NEVER_PLAYED = float("-inf")


@dataclass(frozen=True)
class PlannedMatch:
    """A pairing placed on a cell; becomes a Match row on persistence."""

    team_a: Hashable
    team_b: Hashable
    field_index: int
    start_minute: int
    time_order_index: int
    pool_index: int = 1

    @property
    def start_time(self) -> time:
        return minutes_to_time(self.start_minute)


class ScheduleRun:
    """
    Ephemeral state of one generation run.

    Created fresh for every run and discarded afterwards; nothing here is
    shared between runs.
    """

    def __init__(self, pairings: Sequence[Pairing], num_fields: int, pooled: bool = False):
        self.pending: List[Pairing] = list(pairings)
        self.pooled = pooled

        # Only teams that take part in a pairing count towards equity
        self.played: Dict[Hashable, int] = {}
        self.played_by_pool: Dict[int, Dict[Hashable, int]] = defaultdict(dict)
        self.last_time_index: Dict[Hashable, float] = {}
        for pairing in self.pending:
            for team_id in pairing.teams:
                self.played.setdefault(team_id, 0)
                self.last_time_index.setdefault(team_id, NEVER_PLAYED)
                self.played_by_pool[pairing.pool_index].setdefault(team_id, 0)

        self.field_usage: Dict[int, int] = {f: 0 for f in range(1, num_fields + 1)}
        self.busy_at_time: Dict[int, Set[Hashable]] = defaultdict(set)
        self.relaxed_count = 0

    def busy_set(self, start_minute: int) -> Set[Hashable]:
        return self.busy_at_time[start_minute]

    def rest_ok(self, team_id: Hashable, time_order_index: int) -> bool:
        return time_order_index - self.last_time_index.get(team_id, NEVER_PLAYED) >= MIN_REST_INTERVALS

    @staticmethod
    def _spread_after(counts: Dict[Hashable, int], team_a: Hashable, team_b: Hashable) -> int:
        """max - min of counts once team_a and team_b have each played one more game."""
        after = dict(counts)
        after[team_a] = after.get(team_a, 0) + 1
        after[team_b] = after.get(team_b, 0) + 1
        return max(after.values()) - min(after.values())

    def equity_ok(self, pairing: Pairing) -> bool:
        if self._spread_after(self.played, pairing.team_a, pairing.team_b) > MAX_PLAYED_SPREAD:
            return False
        if self.pooled:
            pool_counts = self.played_by_pool.get(pairing.pool_index, {})
            if self._spread_after(pool_counts, pairing.team_a, pairing.team_b) > MAX_PLAYED_SPREAD:
                return False
        return True

    def record(self, pairing: Pairing, cell: Cell) -> PlannedMatch:
        """Apply a placement to every counter."""
        busy = self.busy_set(cell.start_minute)
        pool_counts = self.played_by_pool[pairing.pool_index]
        for team_id in pairing.teams:
            busy.add(team_id)
            self.last_time_index[team_id] = cell.time_order_index
            self.played[team_id] = self.played.get(team_id, 0) + 1
            pool_counts[team_id] = pool_counts.get(team_id, 0) + 1
        self.field_usage[cell.field_index] = self.field_usage.get(cell.field_index, 0) + 1
        return PlannedMatch(
            team_a=pairing.team_a,
            team_b=pairing.team_b,
            field_index=cell.field_index,
            start_minute=cell.start_minute,
            time_order_index=cell.time_order_index,
            pool_index=pairing.pool_index,
        )


class AutoAssignResult:
    """Structured result from an assignment run"""

    def __init__(self, required_count: int = 0, total_cells: int = 0):
        self.required_count = required_count
        self.total_cells = total_cells
        self.matches: List[PlannedMatch] = []
        self.unplaced: List[Pairing] = []
        self.relaxed_count = 0

    @property
    def assigned_count(self) -> int:
        return len(self.matches)

    @property
    def unplaced_count(self) -> int:
        return len(self.unplaced)

    @property
    def complete(self) -> bool:
        return self.assigned_count == self.required_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "required_count": self.required_count,
            "assigned_count": self.assigned_count,
            "unplaced_count": self.unplaced_count,
            "total_cells": self.total_cells,
            "relaxed_count": self.relaxed_count,
            "unplaced_pairings": [
                {"team_a": p.team_a, "team_b": p.team_b, "pool_index": p.pool_index} for p in self.unplaced
            ],
        }


def score_candidate(run: ScheduleRun, pairing: Pairing, cell: Cell, position: int, strict: bool) -> float:
    """Lower is better."""
    field_penalty = run.field_usage.get(cell.field_index, 0) * FIELD_USAGE_WEIGHT
    order_penalty = position * WINDOW_POSITION_WEIGHT

    relax_penalty = 0.0
    if not strict:
        if not run.rest_ok(pairing.team_a, cell.time_order_index) or not run.rest_ok(
            pairing.team_b, cell.time_order_index
        ):
            relax_penalty = RELAX_PENALTY

    played_penalty = (run.played.get(pairing.team_a, 0) + run.played.get(pairing.team_b, 0)) * PLAYED_COUNT_WEIGHT
    return field_penalty + order_penalty + relax_penalty + played_penalty


def select_candidate(run: ScheduleRun, cell: Cell, window: int) -> Tuple[Optional[int], bool]:
    """
    Pick the pending pairing for this cell.

    Returns (index into run.pending or None, strict pass used).
    """
    busy = run.busy_set(cell.start_minute)
    candidates = run.pending[: max(1, window)]

    for strict in (True, False):
        best_index: Optional[int] = None
        best_score = float("inf")
        for position, pairing in enumerate(candidates):
            if pairing.team_a in busy or pairing.team_b in busy:
                continue
            if strict and not (
                run.rest_ok(pairing.team_a, cell.time_order_index)
                and run.rest_ok(pairing.team_b, cell.time_order_index)
            ):
                continue
            if not run.equity_ok(pairing):
                continue
            score = score_candidate(run, pairing, cell, position, strict)
            # Strict '<' keeps the earliest position on ties
            if score < best_score:
                best_score = score
                best_index = position
        if best_index is not None:
            return best_index, strict

    return None, False


def assign_pairings(
    open_cells: Iterable[Cell],
    pairings: Sequence[Pairing],
    num_fields: int,
    pooled: bool = False,
    window: int = DEFAULT_LOOKAHEAD_WINDOW,
) -> AutoAssignResult:
    """
    Place pairings on open cells (already in time, field order).

    Deterministic for identical cells and pairing order.
    """
    cells = list(open_cells)
    run = ScheduleRun(pairings, num_fields=num_fields, pooled=pooled)
    result = AutoAssignResult(required_count=len(run.pending), total_cells=len(cells))

    for cell in cells:
        if not run.pending:
            break

        index, strict = select_candidate(run, cell, window)
        if index is None:
            continue

        pairing = run.pending.pop(index)
        result.matches.append(run.record(pairing, cell))
        if not strict:
            run.relaxed_count += 1

    result.unplaced = list(run.pending)
    result.relaxed_count = run.relaxed_count

    if result.unplaced:
        last = format_hhmm(cells[-1].start_minute) if cells else "-"
        logger.warning(
            f"Auto-assign left {result.unplaced_count} of {result.required_count} pairings unplaced "
            f"({len(cells)} open cells, last start {last})"
        )
    logger.info(
        f"Auto-assign placed {result.assigned_count}/{result.required_count} pairings "
        f"({result.relaxed_count} via relaxed rest)"
    )
    return result
