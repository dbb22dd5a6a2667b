"""
Ranking Rules: Single Source of Truth

Constants and step functions shared by the aggregator, ranking engine,
pool allocator and match scheduler. Do NOT duplicate these rules elsewhere.
"""

from datetime import date
from typing import Dict, List, Sequence, Tuple

# =============================================================================
# Season structure
# =============================================================================

# Qualifier tournaments that count toward the season ranking
RANKED_TOURNAMENT_NUMBERS: Tuple[int, ...] = (1, 2, 3)

# The finale is played by the qualified entrants and never counts toward ranking
FINALE_TOURNAMENT_NUMBER = 4

# Seasons start in September: 2025-09-01 belongs to "2025-2026"
SEASON_START_MONTH = 9


def season_for_date(day: date) -> str:
    """Return the season label ("YYYY-YYYY") a calendar date belongs to."""
    if day.month >= SEASON_START_MONTH:
        return f"{day.year}-{day.year + 1}"
    return f"{day.year - 1}-{day.year}"


# =============================================================================
# Qualification
# =============================================================================

QUALIFICATION_BREAKPOINT = 9
QUALIFIED_SMALL_FIELD = 4
QUALIFIED_LARGE_FIELD = 6


def qualified_count(total_entrants: int) -> int:
    """
    Number of ranked entrants qualified for the finale.

    Rules:
    - fewer than 9 entrants: top 4
    - 9 or more entrants: top 6
    """
    if total_entrants < QUALIFICATION_BREAKPOINT:
        return QUALIFIED_SMALL_FIELD
    return QUALIFIED_LARGE_FIELD


# =============================================================================
# Pool sizing
# =============================================================================

PREFERRED_POOL_SIZE = 3


def recommended_pool_count(entrant_count: int) -> int:
    """
    Default number of pools for a draw: pools of three, remainder spread.

    6 entrants -> 2 pools, 8 -> 2 (4+4), 9 -> 3, 20 -> 6. Fewer than six
    entrants play a single pool.
    """
    if entrant_count <= 0:
        return 0
    return max(1, entrant_count // PREFERRED_POOL_SIZE)


def describe_pool_sizes(sizes: Sequence[int]) -> str:
    """
    Human-readable summary of a pool layout.

    Examples:
        [5]        -> "1 pool of 5"
        [4, 3, 3]  -> "2 pools of 3 and 1 pool of 4 (3 pools)"
    """
    if not sizes:
        return "-"
    if len(sizes) == 1:
        return f"1 pool of {sizes[0]}"

    counts: Dict[int, int] = {}
    for size in sizes:
        counts[size] = counts.get(size, 0) + 1

    parts = []
    for size in sorted(counts):
        count = counts[size]
        parts.append(f"{count} pool{'s' if count > 1 else ''} of {size}")
    return f"{' and '.join(parts)} ({len(sizes)} pools)"


# =============================================================================
# Round robin
# =============================================================================

def rr_matches_per_pool(pool_size: int) -> int:
    """Return number of RR matches in a pool: C(n, 2) = n*(n-1)/2."""
    if pool_size < 2:
        return 0
    return (pool_size * (pool_size - 1)) // 2


def rr_pairings_by_round(pool_size: int) -> List[Tuple[int, int, int, int]]:
    """
    Round-robin pairings as (round, order_in_round, index_a, index_b).

    Indexes are 0-based pool positions, index_a < index_b. Circle method on an
    even ring: seat 0 stays put while the others turn one seat per round. An
    odd pool gets a phantom seat and whoever faces it sits the round out.
    """
    if pool_size < 2:
        return []

    ring = list(range(pool_size + pool_size % 2))
    phantom = pool_size if pool_size % 2 else None

    pairings: List[Tuple[int, int, int, int]] = []
    for round_index in range(1, len(ring)):
        facing = [(ring[i], ring[-1 - i]) for i in range(len(ring) // 2)]
        played = [tuple(sorted(pair)) for pair in facing if phantom not in pair]
        for order, (a, b) in enumerate(played, start=1):
            pairings.append((round_index, order, a, b))
        ring = ring[:1] + ring[-1:] + ring[1:-1]

    return pairings
