"""Domain errors raised by rooms, the registry and action parsing.

Every error is recoverable: it is reported to the client that caused it
and leaves the room exactly as it was before the call.
"""

from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    NOT_FOUND = 'not-found'
    INVALID_STATE = 'invalid-state'
    NOT_AUTHORIZED = 'not-authorized'
    CAPACITY = 'capacity'
    DUPLICATE = 'duplicate'
    BAD_ARGUMENT = 'bad-argument'


# HTTP status used when an error surfaces through a blueprint
HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.NOT_AUTHORIZED: 403,
    ErrorKind.CAPACITY: 409,
    ErrorKind.DUPLICATE: 409,
    ErrorKind.BAD_ARGUMENT: 400,
}


class GameError(Exception):
    """Base class for every game-level failure."""

    kind = ErrorKind.INVALID_STATE
    default_message = 'Action not allowed'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.kind.value, 'message': self.message}


class RoomNotFound(GameError):
    kind = ErrorKind.NOT_FOUND
    default_message = 'Game not found'


class PlayerNotFound(GameError):
    kind = ErrorKind.NOT_FOUND
    default_message = 'Player not in this game'


class NotInGame(GameError):
    kind = ErrorKind.NOT_FOUND
    default_message = 'You are not in a game'


class InvalidState(GameError):
    kind = ErrorKind.INVALID_STATE


class AlreadyStarted(InvalidState):
    default_message = 'Game already started'


class InsufficientPlayers(InvalidState):
    default_message = 'Need at least 2 players'


class IncompleteLine(InvalidState):
    default_message = 'All players must place their cards first'


class AlreadyComplete(InvalidState):
    default_message = 'All cards revealed'


class NotHost(GameError):
    kind = ErrorKind.NOT_AUTHORIZED
    default_message = 'Only the host can do that'


class RoomFull(GameError):
    kind = ErrorKind.CAPACITY
    default_message = 'Game is full'


class DuplicatePlayer(GameError):
    kind = ErrorKind.DUPLICATE
    default_message = 'Already in game'


class BadArgument(GameError):
    kind = ErrorKind.BAD_ARGUMENT
    default_message = 'Invalid argument'
