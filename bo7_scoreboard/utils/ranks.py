"""
Rank catalog for the BO7 scoreboard.

The eight Rocket League tiers a best-of-7 can be played at, in ascending order.
Every ledger key and match record uses one of these exact strings.
"""

import re
from typing import Tuple

from bo7_scoreboard.utils.ledger_exceptions import InvalidRankError

RANKS: Tuple[str, ...] = (
    'Bronze',
    'Silver',
    'Gold',
    'Platinum',
    'Diamond',
    'Champion',
    'Grand Champion',
    'Super Sonic Legend',
)

RANK_ALIASES = {
    'plat': 'Platinum',
    'champ': 'Champion',
    'gc': 'Grand Champion',
    'ssl': 'Super Sonic Legend',
}

_SEPARATORS = re.compile(r'[\s_\-]+')


def _canonical_case(value: str) -> str:
    """First letter upper, the rest lower."""
    return value[:1].upper() + value[1:].lower()


_CATALOG = {_canonical_case(rank): rank for rank in RANKS}


def all_ranks() -> Tuple[str, ...]:
    """Return the catalog in declaration order."""
    return RANKS


def normalize_rank(value: str) -> str:
    """
    Resolve user input to a catalog rank.

    Args:
        value: Raw rank text such as "gold", "GRAND_champion" or "ssl"

    Returns:
        The canonical rank name

    Raises:
        InvalidRankError: If the input does not name a catalog rank
    """
    if not isinstance(value, str):
        raise InvalidRankError(str(value), RANKS)

    cleaned = _SEPARATORS.sub(' ', value).strip()
    if not cleaned:
        raise InvalidRankError(value, RANKS)

    alias = RANK_ALIASES.get(cleaned.lower())
    if alias:
        return alias

    rank = _CATALOG.get(_canonical_case(cleaned))
    if rank is None:
        raise InvalidRankError(value, RANKS)
    return rank

