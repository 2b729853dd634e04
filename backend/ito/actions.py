"""Inbound client actions.

Each Socket.IO event name maps to exactly one frozen action type, built
from the raw payload by :func:`parse_action`.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from ito.exceptions import BadArgument
from ito.models import normalize_code


@dataclass(frozen=True)
class CreateGame:
    player_id: str
    name: str


@dataclass(frozen=True)
class JoinGame:
    code: str
    player_id: str
    name: str


@dataclass(frozen=True)
class RejoinGame:
    code: str
    player_id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class LeaveGame:
    pass


@dataclass(frozen=True)
class StartRound:
    pass


@dataclass(frozen=True)
class PlayAgain:
    pass


@dataclass(frozen=True)
class PlaceCard:
    position: int


@dataclass(frozen=True)
class MoveCard:
    from_index: int
    to_index: int


@dataclass(frozen=True)
class SetCategory:
    category: Optional[str]


@dataclass(frozen=True)
class StartReveal:
    pass


@dataclass(frozen=True)
class RevealNext:
    pass


Action = Union[
    CreateGame, JoinGame, RejoinGame, LeaveGame, StartRound, PlayAgain,
    PlaceCard, MoveCard, SetCategory, StartReveal, RevealNext,
]


def _text(data: Dict[str, Any], key: str, label: str, max_length: int = None) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BadArgument(f'{label} is required')
    value = value.strip()
    if max_length:
        value = value[:max_length]
    return value


def _int(data: Dict[str, Any], key: str, label: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadArgument(f'{label} must be an integer')
    return value


def _code(data: Dict[str, Any]) -> str:
    code = normalize_code(data.get('code'))
    if not code:
        raise BadArgument('Game code is required')
    return code


def _rejoin(data):
    # Never rejected here: a malformed rejoin is just a rejoin that fails
    if not isinstance(data, dict):
        data = {}
    player_id = data.get('player_id')
    name = data.get('name')
    return RejoinGame(
        code=normalize_code(data.get('code')),
        player_id=player_id.strip() if isinstance(player_id, str) else '',
        name=name.strip() if isinstance(name, str) else None,
    )


def _scalar(data, key):
    # place_card and set_category may send a bare value instead of an object
    if isinstance(data, dict):
        return data
    return {key: data}


def _seat(cls, name_length):
    def build(data):
        return cls(
            code=_code(data),
            player_id=_text(data, 'player_id', 'Player id'),
            name=_text(data, 'name', 'Player name', name_length),
        )
    return build


def parsers(name_length: int = 24, category_length: int = 100) -> Dict[str, Callable[[Any], Action]]:
    def create(data):
        return CreateGame(
            player_id=_text(data, 'player_id', 'Player id'),
            name=_text(data, 'name', 'Player name', name_length),
        )

    def place(data):
        return PlaceCard(position=_int(_scalar(data, 'position'), 'position', 'Position'))

    def move(data):
        return MoveCard(
            from_index=_int(data, 'from_index', 'From index'),
            to_index=_int(data, 'to_index', 'To index'),
        )

    def category(data):
        value = _scalar(data, 'category').get('category')
        if value is not None and not isinstance(value, str):
            raise BadArgument('Category must be text')
        if value is not None:
            value = value.strip()[:category_length] or None
        return SetCategory(category=value)

    return {
        'create_game': create,
        'join_game': _seat(JoinGame, name_length),
        'rejoin_game': _rejoin,
        'leave_game': lambda data: LeaveGame(),
        'start_round': lambda data: StartRound(),
        'play_again': lambda data: PlayAgain(),
        'place_card': place,
        'move_card': move,
        'set_category': category,
        'start_reveal': lambda data: StartReveal(),
        'reveal_next': lambda data: RevealNext(),
    }


EVENTS = tuple(parsers())


def parse_action(event: str, data: Any = None, **limits) -> Action:
    """Build the typed action for ``event`` from its raw payload."""
    table = parsers(**limits)
    if event not in table:
        raise BadArgument(f'Unknown action: {event}')
    if data is None:
        data = {}
    if not isinstance(data, dict) and event not in ('place_card', 'set_category', 'rejoin_game'):
        raise BadArgument('Payload must be an object')
    return table[event](data)
