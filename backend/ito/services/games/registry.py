import threading
import time
from typing import Callable, Dict, List, Optional

from ito.exceptions import RoomNotFound
from ito.models import Departure, Room, generate_room_code, normalize_code

# One hour of inactivity
ROOM_TIMEOUT_SEC = 60 * 60


class RoomRegistry:
    """Owns the code -> Room mapping.

    The registry lock only guards the mapping itself. Room contents are
    guarded by each room's own lock, and whenever both are needed the room
    lock is taken first.
    """

    def __init__(self, clock: Callable[[], float] = time.time,
                 code_factory: Callable[[], str] = generate_room_code,
                 timeout: float = ROOM_TIMEOUT_SEC):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()
        self.clock = clock
        self.code_factory = code_factory
        self.timeout = timeout

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code):
        with self._lock:
            return normalize_code(code) in self._rooms

    def codes(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def rooms(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def create(self, host_id: str, host_name: str) -> Room:
        with self._lock:
            code = self.code_factory()
            while code in self._rooms:
                code = self.code_factory()
            room = Room(code, host_id, host_name, now=self.clock())
            self._rooms[code] = room
            return room

    def peek(self, code) -> Optional[Room]:
        """Look a room up without counting it as activity."""
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def get(self, code) -> Optional[Room]:
        room = self.peek(code)
        if room is not None:
            room.touch(self.clock())
        return room

    def require(self, code) -> Room:
        room = self.get(code)
        if room is None:
            raise RoomNotFound()
        return room

    def _discard(self, room: Room):
        with self._lock:
            if self._rooms.get(room.code) is room:
                del self._rooms[room.code]

    def remove_player(self, code, player_id) -> Optional[Departure]:
        """Remove a player; an emptied room is deleted from the registry."""
        room = self.get(code)
        if room is None:
            return None
        with room.lock:
            departure = room.remove_player(player_id)
            if departure is not None and departure.room_empty:
                room.closed = True
                self._discard(room)
            return departure

    def sweep(self, now: float = None) -> List[str]:
        """Delete every room idle for longer than the timeout, whatever its status."""
        now = self.clock() if now is None else now
        candidates = [r for r in self.rooms() if now - r.last_activity > self.timeout]
        removed = []
        for room in candidates:
            with room.lock:
                # Re-check under the room lock: it may have been used meanwhile
                if room.closed or now - room.last_activity <= self.timeout:
                    continue
                room.closed = True
                self._discard(room)
                removed.append(room.code)
        return removed
