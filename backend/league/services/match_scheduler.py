"""
Match Scheduler

Produces the match list of one pool from its size. Slots are 1-based
positions inside the pool (slot 1 = top seed); the caller maps slots to
entrants.

Qualifier pools of 3, 4 and 5 use fixed templates in which later matches
depend on the outcome of earlier ones. Every other size plays a full round
robin. Finale pools play everyone-vs-everyone in fixed orders.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from league.services.ranking_rules import rr_pairings_by_round


class InvalidPoolSizeError(ValueError):
    """Raised when a negative pool size is passed to the scheduler"""

    pass


@dataclass(frozen=True)
class StaticMatch:
    """Both participants are known at draw time."""

    number: int
    slot_a: int
    slot_b: int
    table: Optional[int] = None


@dataclass(frozen=True)
class DynamicFromWinners:
    """
    Participants are the winner(s) of match_refs.

    With one ref, the winner meets the seated ``slot``. With two refs, the two
    winners meet each other.
    """

    number: int
    match_refs: Tuple[int, ...]
    slot: Optional[int] = None


@dataclass(frozen=True)
class DynamicFromLosers:
    """Same as DynamicFromWinners, for the loser(s) of match_refs."""

    number: int
    match_refs: Tuple[int, ...]
    slot: Optional[int] = None


Match = Union[StaticMatch, DynamicFromWinners, DynamicFromLosers]


def _qualifier_template(pool_size: int) -> Optional[List[Match]]:
    if pool_size == 3:
        return [
            StaticMatch(1, 2, 3),
            DynamicFromLosers(2, (1,), slot=1),
            DynamicFromWinners(3, (1,), slot=1),
        ]
    if pool_size == 4:
        return [
            StaticMatch(1, 1, 4),
            StaticMatch(2, 2, 3),
            DynamicFromLosers(3, (1, 2)),
            DynamicFromWinners(4, (1, 2)),
        ]
    if pool_size == 5:
        return [
            StaticMatch(1, 1, 5),
            StaticMatch(2, 2, 4),
            DynamicFromLosers(3, (1,), slot=3),
            DynamicFromLosers(4, (2,), slot=3),
            DynamicFromWinners(5, (1, 2)),
        ]
    return None


# Finale orders: (slot_a, slot_b, table)
_FINALE_TEMPLATES: Dict[int, List[Tuple[int, int, Optional[int]]]] = {
    3: [(1, 2, None), (1, 3, None), (2, 3, None)],
    4: [(2, 3, None), (1, 4, None), (3, 4, None), (1, 2, None), (1, 3, None), (2, 4, None)],
    6: [
        # Round 1
        (1, 6, 1), (2, 5, 2), (3, 4, 3),
        # Round 2
        (2, 3, 1), (4, 6, 2), (1, 5, 3),
        # Round 3
        (1, 4, 1), (3, 5, 2), (2, 6, 3),
        # Round 4
        (5, 6, 1), (1, 3, 2), (2, 4, 3),
        # Round 5
        (4, 5, 1), (1, 2, 2), (3, 6, 3),
    ],
}


def _check_size(pool_size: int) -> None:
    if pool_size < 0:
        raise InvalidPoolSizeError(f"pool_size must be >= 0, got {pool_size}")


def round_robin(pool_size: int) -> List[Match]:
    """Every unordered pair of slots exactly once, played round by round."""
    _check_size(pool_size)
    return [
        StaticMatch(number, idx_a + 1, idx_b + 1)
        for number, (_, _, idx_a, idx_b) in enumerate(rr_pairings_by_round(pool_size), start=1)
    ]


def schedule(pool_size: int) -> List[Match]:
    """
    Match list of a qualifier pool, in play order.

    Raises:
        InvalidPoolSizeError: If pool_size < 0
    """
    _check_size(pool_size)
    template = _qualifier_template(pool_size)
    if template is not None:
        return template
    return round_robin(pool_size)


def schedule_finale(pool_size: int) -> List[Match]:
    """Match list of a finale pool (everyone plays everyone)."""
    _check_size(pool_size)
    template = _FINALE_TEMPLATES.get(pool_size)
    if template is None:
        return round_robin(pool_size)
    return [
        StaticMatch(number, slot_a, slot_b, table=table)
        for number, (slot_a, slot_b, table) in enumerate(template, start=1)
    ]


def _refs_text(refs: Tuple[int, ...]) -> str:
    if len(refs) == 1:
        return f"match {refs[0]}"
    return "matches " + " and ".join(str(r) for r in refs)


def describe(match: Match) -> str:
    """Human-readable label used on printed schedules."""
    if isinstance(match, StaticMatch):
        return f"Slot {match.slot_a} vs slot {match.slot_b}"
    outcome = "winner" if isinstance(match, DynamicFromWinners) else "loser"
    if match.slot is not None:
        return f"Slot {match.slot} vs {outcome} of {_refs_text(match.match_refs)}"
    return f"{outcome.capitalize()}s of {_refs_text(match.match_refs)}"


def match_to_dict(match: Match) -> Dict[str, Any]:
    if isinstance(match, StaticMatch):
        return {
            "number": match.number,
            "kind": "static",
            "slots": [match.slot_a, match.slot_b],
            "table": match.table,
            "description": describe(match),
        }
    return {
        "number": match.number,
        "kind": "winners" if isinstance(match, DynamicFromWinners) else "losers",
        "match_refs": list(match.match_refs),
        "slot": match.slot,
        "description": describe(match),
    }
