"""
Pairing Generator

Circle-method round robin, either over the whole roster (flat) or per pool
with the pools interleaved (A1, B1, C1, A2, B2, ...), so that scheduling
progresses through every pool at a comparable pace.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence

from match_scheduler.utils.fields import clamp_pool_index

_BYE = object()


@dataclass(frozen=True)
class RosterTeam:
    """Lightweight struct for scheduler input."""

    team_id: Hashable
    pool_index: Optional[int] = None
    name: str = ""


@dataclass(frozen=True)
class Pairing:
    """Two teams that must meet exactly once."""

    team_a: Hashable
    team_b: Hashable
    pool_index: int = 1
    round_number: int = 1

    @property
    def teams(self) -> tuple:
        return (self.team_a, self.team_b)


def round_robin_pairings(team_ids: Sequence[Hashable], pool_index: int = 1) -> List[Pairing]:
    """
    Circle method: fix the first team, rotate the rest by one position per round
    and pair position i with position n-1-i.

    Odd counts get a bye; pairings against it are dropped. Yields n*(n-1)/2
    pairings, round by round.
    """
    positions = list(team_ids)
    if len(positions) < 2:
        return []
    if len(positions) % 2 == 1:
        positions.append(_BYE)

    n = len(positions)
    half = n // 2
    result: List[Pairing] = []

    for round_number in range(1, n):
        for i in range(half):
            a, b = positions[i], positions[n - 1 - i]
            if a is _BYE or b is _BYE:
                continue
            result.append(Pairing(team_a=a, team_b=b, pool_index=pool_index, round_number=round_number))
        # Rotate: keep first, move last to second, shift others
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return result


def interleave_pools(pairings_by_pool: Dict[int, List[Pairing]]) -> List[Pairing]:
    """Take one pending pairing per pool, pools in increasing index order, until all are used."""
    queues = [list(pairings_by_pool[idx]) for idx in sorted(pairings_by_pool)]
    result: List[Pairing] = []
    made_progress = True
    while made_progress:
        made_progress = False
        for queue in queues:
            if queue:
                result.append(queue.pop(0))
                made_progress = True
    return result


def group_by_pool(teams: Sequence[RosterTeam], pool_count: int) -> Dict[int, List[RosterTeam]]:
    """Bucket teams by (clamped) pool index, keeping roster order within each pool."""
    pools: Dict[int, List[RosterTeam]] = defaultdict(list)
    for team in teams:
        pools[clamp_pool_index(team.pool_index, pool_count)].append(team)
    return dict(pools)


def build_pairing_sequence(teams: Sequence[RosterTeam], pooled: bool, pool_count: int = 1) -> List[Pairing]:
    """Full pairing sequence for a run, in the order the assignment engine consumes it."""
    if not pooled:
        return round_robin_pairings([t.team_id for t in teams], pool_index=1)

    pools = group_by_pool(teams, pool_count)
    per_pool: Dict[int, List[Pairing]] = {}
    for pool_index in range(1, pool_count + 1):
        members = pools.get(pool_index, [])
        if len(members) < 2:
            continue
        per_pool[pool_index] = round_robin_pairings([t.team_id for t in members], pool_index=pool_index)
    return interleave_pools(per_pool)
