"""
Pool Allocator

Serpentine distribution of seeded entrants into pools of near-equal size.

Ranked entrants are seeded by rank position; newcomers without a season
ranking are appended after them in the order given, so they take the lowest
seeds without disturbing established ranks.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

from league.services.match_scheduler import Match, match_to_dict
from league.services.ranking_engine import RankedEntrant

logger = logging.getLogger(__name__)


class PoolAllocationError(Exception):
    """Raised when pools cannot be built"""

    pass


class InvalidPoolCountError(PoolAllocationError):
    """Pool count < 1 or greater than the number of entrants"""

    pass


class DuplicateEntrantError(PoolAllocationError):
    """The same licence was handed in more than once"""

    pass


@dataclass(frozen=True)
class Newcomer:
    """Registered entrant with no ranking in the category/season."""

    licence: str
    player_name: str


@dataclass(frozen=True)
class PoolEntrant:
    seed: int  # 1-based position in the combined seeding list
    licence: str
    player_name: str
    rank_position: Optional[int]  # None for newcomers
    is_new: bool = False


@dataclass
class Pool:
    number: int
    entrants: List[PoolEntrant] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.entrants)


def serpentine_order(entrant_count: int, pool_count: int) -> List[int]:
    """
    Return the 0-based pool index for each seed, best seed first.

    Rows of pool_count seeds are swept left-to-right on even rows and
    right-to-left on odd rows:

        9 seeds, 3 pools -> [0, 1, 2, 2, 1, 0, 0, 1, 2]
    """
    order: List[int] = []
    for index in range(entrant_count):
        row, column = divmod(index, pool_count)
        if row % 2 == 1:
            column = pool_count - 1 - column
        order.append(column)
    return order


def seed_entrants(
    ranked: Sequence[RankedEntrant],
    newcomers: Sequence[Newcomer] = (),
) -> List[PoolEntrant]:
    """
    Build the combined seeding list: ranked by position, then newcomers.

    Raises:
        DuplicateEntrantError: If a licence appears twice across ranked and newcomers
    """
    seeded: List[PoolEntrant] = []
    for entrant in sorted(ranked, key=lambda e: e.rank_position):
        seeded.append(
            PoolEntrant(
                seed=len(seeded) + 1,
                licence=entrant.licence,
                player_name=entrant.player_name,
                rank_position=entrant.rank_position,
            )
        )
    for newcomer in newcomers:
        seeded.append(
            PoolEntrant(
                seed=len(seeded) + 1,
                licence=newcomer.licence,
                player_name=newcomer.player_name,
                rank_position=None,
                is_new=True,
            )
        )

    seen: Set[str] = set()
    for entrant in seeded:
        if entrant.licence in seen:
            raise DuplicateEntrantError(f"Licence {entrant.licence} is seeded more than once")
        seen.add(entrant.licence)
    return seeded


def allocate(
    ranked: Sequence[RankedEntrant],
    pool_count: int,
    newcomers: Sequence[Newcomer] = (),
) -> List[Pool]:
    """
    Allocate entrants into pool_count pools using serpentine seeding.

    Args:
        ranked: Ranked entrants (any order; sorted by rank_position here)
        pool_count: Number of pools to build
        newcomers: Unranked entrants, appended after ranked ones in this order

    Returns:
        Pools numbered 1..pool_count, each in ascending seed order

    Raises:
        InvalidPoolCountError: If pool_count < 1 or pool_count > entrant count
        DuplicateEntrantError: If a licence is handed in more than once
    """
    seeded = seed_entrants(ranked, newcomers)
    if pool_count < 1 or pool_count > len(seeded):
        raise InvalidPoolCountError(
            f"pool_count must be between 1 and {len(seeded)} (entrant count), got {pool_count}"
        )

    pools = [Pool(number=i + 1) for i in range(pool_count)]
    for entrant, pool_index in zip(seeded, serpentine_order(len(seeded), pool_count)):
        pools[pool_index].entrants.append(entrant)

    logger.debug(
        "Allocated %d entrants (%d new) into %d pools: sizes=%s",
        len(seeded),
        len(newcomers),
        pool_count,
        pool_sizes(pools),
    )
    return pools


def pool_sizes(pools: Sequence[Pool]) -> List[int]:
    return [pool.size for pool in pools]


def pool_to_dict(pool: Pool, matches: Sequence[Match] = ()) -> Dict[str, Any]:
    """Serialize a pool and its match list for rendering callers."""
    return {
        "pool_number": pool.number,
        "entrants": [
            {
                "slot": slot,
                "seed": entrant.seed,
                "licence": entrant.licence,
                "player_name": entrant.player_name,
                "rank_position": entrant.rank_position,
                "is_new": entrant.is_new,
            }
            for slot, entrant in enumerate(pool.entrants, start=1)
        ],
        "matches": [match_to_dict(m) for m in matches],
    }
