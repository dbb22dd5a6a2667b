"""
Identity normalization for licences and club names.

Licences arrive from result imports, registrations and the player directory
with inconsistent spacing and case ("12 345 A", "12345a"). Every lookup keyed
by licence goes through normalize_licence() so the ranking tables never hold
two spellings of the same player.
"""

import re
from typing import Mapping, Optional

_WHITESPACE = re.compile(r"\s+")
_CLUB_NOISE = re.compile(r"[\s.\-]+")


def normalize_licence(licence: Optional[str]) -> str:
    """Strip all whitespace and upper-case. None becomes an empty string."""
    if licence is None:
        return ""
    return _WHITESPACE.sub("", licence).upper()


def club_key(name: Optional[str]) -> str:
    """Comparison key for club names: upper-case, no spaces, dots or dashes."""
    if not name:
        return ""
    return _CLUB_NOISE.sub("", name).upper()


def resolve_club_name(name: Optional[str], aliases: Mapping[str, str]) -> Optional[str]:
    """
    Resolve a club display name through an alias table.

    Args:
        name: Club name as typed on the source row
        aliases: Mapping of club_key(alias) -> canonical display name

    Returns:
        The canonical name when an alias matches, otherwise the stripped input.
    """
    if name is None:
        return None
    return aliases.get(club_key(name), name.strip())
