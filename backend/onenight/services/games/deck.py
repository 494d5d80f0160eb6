"""Deck construction and dealing.

A deck holds one token per requested role instance and always has exactly
``len(players) + CENTER_CARD_COUNT`` cards.
"""

import random
from collections import Counter
from typing import Dict, Iterable, List, Sequence, Tuple

from onenight.errors import ValidationError
from onenight.models import Player
from .roles import is_known_role

CENTER_CARD_COUNT = 3


def counts_from_list(role_list: Iterable[str]) -> Dict[str, int]:
    """Turn a flat list of role names (the older client format) into counts."""
    return dict(Counter(role_list))


def expand_role_counts(role_counts: Dict[str, int], player_count: int) -> List[str]:
    """Validate a role-count mapping and expand it into a flat token list."""
    expected = player_count + CENTER_CARD_COUNT
    if not isinstance(role_counts, dict):
        raise ValidationError(f"Error: Need exactly {expected} roles.", expected=expected)

    total = 0
    for name, count in role_counts.items():
        if not is_known_role(name):
            raise ValidationError(f"Error: Unknown role {name}.", expected=expected)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError(f"Error: Invalid count for {name}.", expected=expected)
        total += count

    # Totals are checked before anything is expanded
    if total != expected:
        raise ValidationError(f"Error: Need exactly {expected} roles.", expected=expected)
    tokens: List[str] = []
    for name, count in role_counts.items():
        tokens.extend([name] * count)
    return tokens


def build_deck(role_counts: Dict[str, int], player_count: int, rng: random.Random) -> List[str]:
    deck = expand_role_counts(role_counts, player_count)
    # random.Random.shuffle is an in-place Fisher-Yates pass
    rng.shuffle(deck)
    return deck


def deal(deck: Sequence[str], players: Sequence[Player]) -> Tuple[List[str], List[str]]:
    """Hand the first cards to players in roster order; the rest go to the center.

    Returns ``(dealt, center)``.
    """
    if len(deck) != len(players) + CENTER_CARD_COUNT:
        raise ValueError(f"deck of {len(deck)} cannot be dealt to {len(players)} players")
    dealt = list(deck[:len(players)])
    for player, role in zip(players, dealt):
        player.deal(role)
    return dealt, list(deck[len(players):])
