"""
Pool Auto-Assign: random distribution of auto-eligible teams over pools

Teams flagged manual keep their pool. Every other team is shuffled and
dealt to the currently smallest pool (lowest index on ties), so pool sizes
differ by at most one among the auto-dealt teams.

Uses its own random.Random instance; it shares no state with the assignment
engine, whose output must stay deterministic.
"""

import random
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence

from match_scheduler.utils.fields import MAX_POOLS, clamp_pool_index


@dataclass(frozen=True)
class PoolCandidate:
    team_id: Hashable
    pool_index: Optional[int] = None
    manual: bool = False


def auto_assign_pools(
    teams: Sequence[PoolCandidate],
    pool_count: int,
    seed: Optional[int] = None,
) -> Dict[Hashable, int]:
    """
    Return {team_id: pool_index} for every non-manual team.

    The same seed and roster always give the same result.
    """
    if not 1 <= pool_count <= MAX_POOLS:
        raise ValueError(f"pool_count must be between 1 and {MAX_POOLS}, got {pool_count}")

    rng = random.Random(seed)

    sizes = {idx: 0 for idx in range(1, pool_count + 1)}
    for team in teams:
        if team.manual:
            sizes[clamp_pool_index(team.pool_index, pool_count)] += 1

    remaining: List[PoolCandidate] = [t for t in teams if not t.manual]
    rng.shuffle(remaining)

    result: Dict[Hashable, int] = {}
    for team in remaining:
        target = min(sizes, key=lambda idx: (sizes[idx], idx))
        result[team.team_id] = target
        sizes[target] += 1
    return result
