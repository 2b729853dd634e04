import threading
from typing import Dict, Optional, Tuple

Seat = Tuple[str, str]


class ConnectionBinder:
    """Tracks which live connection currently speaks for each seated player.

    ``bind`` always overwrites: the most recent join, rejoin or reconnect
    wins. Losing a connection never touches room membership.
    """

    def __init__(self):
        self._sid_by_seat: Dict[Seat, str] = {}
        self._seat_by_sid: Dict[str, Seat] = {}
        self._lock = threading.Lock()

    def bind(self, code: str, player_id: str, sid: str) -> Optional[str]:
        """Point (code, player_id) at ``sid``. Returns the sid it replaced, if any."""
        with self._lock:
            previous = self._sid_by_seat.get((code, player_id))
            self._sid_by_seat[(code, player_id)] = sid
            self._seat_by_sid[sid] = (code, player_id)
            return previous

    def sid_for(self, code: str, player_id: str) -> Optional[str]:
        with self._lock:
            return self._sid_by_seat.get((code, player_id))

    def seat_for(self, sid: str) -> Optional[Seat]:
        with self._lock:
            return self._seat_by_sid.get(sid)

    def release(self, sid: str) -> Optional[Seat]:
        """Forget a dropped connection. The player keeps their seat."""
        with self._lock:
            seat = self._seat_by_sid.pop(sid, None)
            if seat is not None and self._sid_by_seat.get(seat) == sid:
                del self._sid_by_seat[seat]
            return seat

    def unbind(self, code: str, player_id: str) -> Optional[str]:
        """Drop a seat entirely, e.g. on an explicit leave."""
        with self._lock:
            sid = self._sid_by_seat.pop((code, player_id), None)
            for other_sid, seat in list(self._seat_by_sid.items()):
                if seat == (code, player_id):
                    del self._seat_by_sid[other_sid]
            return sid

    def forget_room(self, code: str) -> None:
        with self._lock:
            for seat in [s for s in self._sid_by_seat if s[0] == code]:
                del self._sid_by_seat[seat]
            for sid in [s for s, seat in self._seat_by_sid.items() if seat[0] == code]:
                del self._seat_by_sid[sid]
