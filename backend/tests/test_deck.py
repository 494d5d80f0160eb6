import random
from collections import Counter

import pytest

from onenight.errors import ValidationError
from onenight.models import Player
from onenight.services.games.deck import build_deck, counts_from_list, deal, expand_role_counts


COUNTS = {'Werewolf': 2, 'Seer': 1, 'Robber': 1, 'Villager': 3}


def test_deck_has_one_card_per_player_plus_center():
    deck = build_deck(COUNTS, 4, random.Random(7))
    assert len(deck) == 4 + 3
    assert Counter(deck) == Counter(COUNTS)


def test_same_seed_same_shuffle():
    assert build_deck(COUNTS, 4, random.Random(42)) == build_deck(COUNTS, 4, random.Random(42))


@pytest.mark.parametrize('counts', [
    {'Werewolf': 2, 'Villager': 3},
    {'Werewolf': 2, 'Villager': 6},
    {'Werewolf': 2, 'Mystery': 5},
    {'Werewolf': -1, 'Villager': 8},
    {'Werewolf': '2', 'Villager': 5},
    ['Werewolf'] * 7,
])
def test_bad_counts_rejected(counts):
    with pytest.raises(ValidationError):
        expand_role_counts(counts, 4)


def test_mismatch_message_names_expected_size():
    with pytest.raises(ValidationError) as exc:
        expand_role_counts({'Villager': 2}, 4)
    assert str(exc.value) == 'Error: Need exactly 7 roles.'
    assert exc.value.expected == 7


def test_zero_counts_allowed():
    assert sorted(expand_role_counts({'Villager': 4, 'Seer': 0}, 1)) == ['Villager'] * 4


def test_deal_sets_both_roles_and_center():
    players = [Player('a', 'A'), Player('b', 'B')]
    dealt, center = deal(['Seer', 'Robber', 'Villager', 'Werewolf', 'Drunk'], players)
    assert dealt == ['Seer', 'Robber']
    assert center == ['Villager', 'Werewolf', 'Drunk']
    assert players[0].original_role == players[0].current_role == 'Seer'
    assert players[1].original_role == players[1].current_role == 'Robber'


def test_original_role_is_write_once():
    player = Player('a', 'A')
    player.deal('Seer')
    with pytest.raises(RuntimeError):
        player.deal('Werewolf')
    assert player.original_role == 'Seer'


def test_counts_from_list():
    assert counts_from_list(['Villager', 'Seer', 'Villager']) == {'Villager': 2, 'Seer': 1}


def test_huge_count_is_rejected_before_expanding():
    # Expanding this many tokens would never finish; the total check comes first
    with pytest.raises(ValidationError) as exc:
        expand_role_counts({'Villager': 10 ** 15}, 3)
    assert exc.value.expected == 6
