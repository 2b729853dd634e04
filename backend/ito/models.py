import random
import string
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from ito.constants import ENDED, LOBBY, LOSE, PLAYING, REVEALING, WIN
from ito.exceptions import (
    AlreadyComplete,
    AlreadyStarted,
    BadArgument,
    DuplicatePlayer,
    IncompleteLine,
    InsufficientPlayers,
    InvalidState,
    NotHost,
    PlayerNotFound,
    RoomFull,
    RoomNotFound,
)
from ito.services.games.reveal import RevealStep, disclosed, reveal_step

# Uppercase letters and digits without the easily confused 0/O and 1/I
CODE_ALPHABET = ''.join(c for c in string.ascii_uppercase + string.digits if c not in '0O1I')


def generate_room_code(length=4):
    """Generate a short, speakable room code. Uniqueness is the registry's job."""
    return ''.join(random.choices(CODE_ALPHABET, k=length))


def normalize_code(code) -> str:
    if not isinstance(code, str):
        return ''
    return code.strip().upper()


def deal_numbers(count: int, low: int = 1, high: int = 100) -> List[int]:
    """Draw ``count`` distinct numbers from [low, high]."""
    return random.sample(range(low, high + 1), count)


class CardLine:
    """Ordered sequence of player ids with no duplicates.

    All placement goes through :meth:`reposition`, which removes the id if
    present, clamps the target index to the shortened line and inserts.
    """

    def __init__(self, ids: Sequence[str] = ()):
        self._ids: List[str] = []
        for player_id in ids:
            self.reposition(player_id, len(self._ids))

    def __len__(self):
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __getitem__(self, index):
        return self._ids[index]

    def __contains__(self, player_id):
        return player_id in self._ids

    def __eq__(self, other):
        if isinstance(other, CardLine):
            return self._ids == other._ids
        if isinstance(other, list):
            return self._ids == other
        return NotImplemented

    def __repr__(self):
        return f'CardLine({self._ids!r})'

    def remove(self, player_id) -> Optional[int]:
        """Remove ``player_id``; return its former index or None if absent."""
        try:
            idx = self._ids.index(player_id)
        except ValueError:
            return None
        del self._ids[idx]
        return idx

    def reposition(self, player_id, index: int) -> int:
        self.remove(player_id)
        pos = min(max(0, index), len(self._ids))
        self._ids.insert(pos, player_id)
        return pos

    def move(self, from_index: int, to_index: int) -> Tuple[str, int]:
        if not 0 <= from_index < len(self._ids):
            raise BadArgument('Invalid from index')
        player_id = self._ids[from_index]
        return player_id, self.reposition(player_id, to_index)

    def clear(self):
        self._ids = []

    def to_list(self) -> List[str]:
        return list(self._ids)


@dataclass
class Player:
    id: str
    name: str
    number: Optional[int] = None

    def to_dict(self):
        # Never exposes the number; see services.games.projection
        return {
            'id': self.id,
            'name': self.name,
            'has_number': self.number is not None,
        }


@dataclass
class Departure:
    """Outcome of removing a player from a room."""
    player: Player
    card_index: Optional[int]
    host_changed: bool
    host_id: Optional[str]
    room_empty: bool


class Room:
    """Authoritative state of one game session.

    Every public method validates before it mutates, so a raised
    :class:`~ito.exceptions.GameError` leaves the room untouched. Callers
    that need several operations (or an operation plus projections) to be
    seen atomically hold ``room.lock`` around them; the lock is reentrant.
    """

    def __init__(self, code: str, host_id: str, host_name: str, now: float = None):
        self.code = code
        self.host_id = host_id
        self.status = LOBBY
        self.players: List[Player] = [Player(id=host_id, name=host_name)]
        self.card_line = CardLine()
        self.reveal_index = 0
        self.category: Optional[str] = None
        self.result: Optional[str] = None
        self.last_activity = time.time() if now is None else now
        self.closed = False
        self.lock = threading.RLock()
        # Bumped by every change; snapshots carry it so clients can drop stale ones
        self.version = 0

    # ---- lookups ----

    def player(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id) -> bool:
        return self.player(player_id) is not None

    def require_player(self, player_id) -> Player:
        player = self.player(player_id)
        if player is None:
            raise PlayerNotFound()
        return player

    def touch(self, now: float):
        self.last_activity = now

    def _changed(self):
        self.version += 1

    def _require_open(self):
        if self.closed:
            raise RoomNotFound()

    def _require_status(self, *allowed, message=None):
        if self.status not in allowed:
            raise InvalidState(message or f'Game not in {" or ".join(allowed)} state')

    def _require_host(self, player_id):
        if player_id != self.host_id:
            raise NotHost()

    # ---- membership ----

    def add_player(self, player_id, name, max_players=10) -> Player:
        with self.lock:
            self._require_open()
            if self.status != LOBBY:
                raise AlreadyStarted()
            if len(self.players) >= max_players:
                raise RoomFull()
            if self.has_player(player_id):
                raise DuplicatePlayer()
            player = Player(id=player_id, name=name)
            self.players.append(player)
            self._changed()
            return player

    def remove_player(self, player_id) -> Optional[Departure]:
        """Remove a player in any status. Returns None when they were not seated."""
        with self.lock:
            player = self.player(player_id)
            if player is None:
                return None
            self.players.remove(player)
            card_index = self.card_line.remove(player_id)
            if card_index is not None and card_index < self.reveal_index:
                self.reveal_index -= 1
            host_changed = False
            if self.host_id == player_id and self.players:
                self.host_id = self.players[0].id
                host_changed = True
            if self.status == REVEALING and self.players:
                self._settle_after_removal()
            self._changed()
            return Departure(
                player=player,
                card_index=card_index,
                host_changed=host_changed,
                host_id=self.host_id if self.players else None,
                room_empty=not self.players,
            )

    def _settle_after_removal(self):
        # A removed card can leave every remaining card already disclosed
        if self.reveal_index < len(self.card_line):
            return
        steps = disclosed(self)
        self.status = ENDED
        self.result = LOSE if any(not s.is_correct for s in steps) else WIN

    # ---- round lifecycle ----

    def start_round(self, player_id, dealer: Callable[[int], Sequence[int]] = deal_numbers,
                    min_players=2):
        with self.lock:
            self._require_open()
            self._require_status(LOBBY, ENDED)
            self._require_host(player_id)
            if len(self.players) < min_players:
                raise InsufficientPlayers(f'Need at least {min_players} players')
            numbers = list(dealer(len(self.players)))
            if len(numbers) != len(self.players) or len(set(numbers)) != len(numbers):
                raise ValueError(f'dealer must return {len(self.players)} distinct numbers, got {numbers!r}')
            for player, number in zip(self.players, numbers):
                player.number = number
            self.card_line.clear()
            self.reveal_index = 0
            self.result = None
            self.status = PLAYING
            self._changed()

    def play_again(self, player_id, dealer=deal_numbers, min_players=2):
        with self.lock:
            self._require_status(ENDED, message='Round has not ended yet')
            self.start_round(player_id, dealer=dealer, min_players=min_players)

    def place_card(self, player_id, position) -> int:
        with self.lock:
            self._require_open()
            self._require_status(PLAYING)
            self.require_player(player_id)
            if isinstance(position, bool) or not isinstance(position, int):
                raise BadArgument('Position must be an integer')
            position = self.card_line.reposition(player_id, position)
            self._changed()
            return position

    def move_card(self, from_index, to_index) -> Tuple[str, int]:
        """Move the card at ``from_index``; returns (player_id, new position)."""
        with self.lock:
            self._require_open()
            self._require_status(PLAYING)
            for value in (from_index, to_index):
                if isinstance(value, bool) or not isinstance(value, int):
                    raise BadArgument('Indices must be integers')
            moved = self.card_line.move(from_index, to_index)
            self._changed()
            return moved

    def set_category(self, player_id, category: Optional[str]):
        with self.lock:
            self._require_open()
            self._require_host(player_id)
            if category is not None and not isinstance(category, str):
                raise BadArgument('Category must be text')
            self.category = (category or '').strip() or None
            self._changed()

    def start_reveal(self, player_id) -> RevealStep:
        with self.lock:
            self._require_open()
            self._require_status(PLAYING)
            self._require_host(player_id)
            if len(self.card_line) != len(self.players):
                raise IncompleteLine()
            self.status = REVEALING
            self.reveal_index = 0
            step = reveal_step(self)
            self._changed()
            return step

    def reveal_next(self, player_id) -> RevealStep:
        with self.lock:
            self._require_open()
            self._require_status(REVEALING)
            self._require_host(player_id)
            if self.reveal_index >= len(self.card_line):
                raise AlreadyComplete()
            step = reveal_step(self)
            self._changed()
            return step

    def final_order(self):
        """Settled line with every number and its correctness, once ended."""
        with self.lock:
            if self.status != ENDED:
                return None
            flags = {s.index: s.is_correct for s in disclosed(self)}
            order = []
            for idx, pid in enumerate(self.card_line):
                player = self.player(pid)
                order.append({
                    'player_id': pid,
                    'name': player.name,
                    'number': player.number,
                    'is_correct': flags.get(idx),
                })
            return order

    def to_dict(self):
        """Public summary; contains no numbers."""
        return {
            'code': self.code,
            'status': self.status,
            'host_id': self.host_id,
            'player_count': len(self.players),
        }
