import pytest

from ito.actions import (
    EVENTS,
    JoinGame,
    MoveCard,
    PlaceCard,
    RejoinGame,
    SetCategory,
    parse_action,
)
from ito.exceptions import BadArgument


def test_every_event_has_a_parser():
    assert 'rejoin_game' in EVENTS
    assert 'reveal_next' in EVENTS


def test_join_requires_code_id_and_name():
    assert parse_action('join_game', {'code': ' wxyz ', 'player_id': 'B', 'name': ' Ben '}) == JoinGame('WXYZ', 'B', 'Ben')
    for payload in ({'player_id': 'B', 'name': 'Ben'}, {'code': 'WXYZ', 'name': 'Ben'}, {'code': 'WXYZ', 'player_id': 'B'}):
        with pytest.raises(BadArgument):
            parse_action('join_game', payload)
    with pytest.raises(BadArgument):
        parse_action('join_game', 'WXYZ')


def test_rejoin_is_never_rejected_while_parsing():
    assert parse_action('rejoin_game', {'code': 'wxyz', 'player_id': 'B'}) == RejoinGame('WXYZ', 'B', None)
    assert parse_action('rejoin_game', {'code': 'WXYZ', 'player_id': 'B', 'name': 'Ben'}).name == 'Ben'
    assert parse_action('rejoin_game', {'player_id': 'B'}) == RejoinGame('', 'B')
    assert parse_action('rejoin_game', {'code': 'WXYZ', 'player_id': 7}) == RejoinGame('WXYZ', '')
    assert parse_action('rejoin_game', 'WXYZ') == RejoinGame('', '')
    assert parse_action('rejoin_game') == RejoinGame('', '')


def test_card_payloads():
    assert parse_action('place_card', 2) == PlaceCard(2)
    assert parse_action('place_card', {'position': 0}) == PlaceCard(0)
    assert parse_action('move_card', {'from_index': 1, 'to_index': 0}) == MoveCard(1, 0)
    for payload in ('x', True, {'position': '1'}):
        with pytest.raises(BadArgument):
            parse_action('place_card', payload)


def test_category_is_trimmed_and_limited():
    assert parse_action('set_category', '  Fruit ') == SetCategory('Fruit')
    assert parse_action('set_category', {'category': ''}) == SetCategory(None)
    assert parse_action('set_category', 'x' * 50, category_length=10) == SetCategory('x' * 10)


def test_unknown_event():
    with pytest.raises(BadArgument):
        parse_action('shuffle', {})
