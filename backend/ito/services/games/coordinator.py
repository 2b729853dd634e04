"""Routes inbound actions to rooms and decides what goes back out.

The coordinator knows nothing about Socket.IO. It returns a
:class:`Dispatch` describing the messages to emit and the broadcast
channel the sender should join or leave; ``ito.socketio_events`` carries
that out.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from ito.actions import (
    CreateGame,
    JoinGame,
    LeaveGame,
    MoveCard,
    PlaceCard,
    PlayAgain,
    RejoinGame,
    RevealNext,
    SetCategory,
    StartReveal,
    StartRound,
)
from ito.constants import ENDED
from ito.exceptions import BadArgument, GameError, NotInGame, RoomNotFound
from ito.models import deal_numbers
from .binder import ConnectionBinder
from .projection import project, project_all, round_summary
from .registry import RoomRegistry


def channel(code: str) -> str:
    return f"room:{code}"


@dataclass
class Message:
    event: str
    payload: Any = None
    # sid or channel name; None means the sender
    to: Optional[str] = None
    include_self: bool = True


@dataclass
class Dispatch:
    messages: List[Message] = field(default_factory=list)
    join: Optional[str] = None
    leave: Optional[str] = None

    def events(self) -> List[str]:
        return [m.event for m in self.messages]


class Coordinator:
    def __init__(self, registry: RoomRegistry = None, binder: ConnectionBinder = None,
                 dealer: Callable[[int], Sequence[int]] = deal_numbers,
                 max_players: int = 10, min_players: int = 2, logger=None):
        self.registry = registry if registry is not None else RoomRegistry()
        self.binder = binder if binder is not None else ConnectionBinder()
        self.dealer = dealer
        self.max_players = max_players
        self.min_players = min_players
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self._session_operations = {
            CreateGame: self._create,
            JoinGame: self._join,
            RejoinGame: self._rejoin,
            LeaveGame: self._leave,
        }
        self._room_operations = {
            StartRound: self._start_round,
            PlayAgain: self._play_again,
            PlaceCard: self._place_card,
            MoveCard: self._move_card,
            SetCategory: self._set_category,
            StartReveal: self._start_reveal,
            RevealNext: self._reveal_next,
        }

    # ---- entry points ----

    def handle(self, sid: str, action) -> Dispatch:
        try:
            operation = self._session_operations.get(type(action))
            if operation is not None:
                return operation(sid, action)
            operation = self._room_operations.get(type(action))
            if operation is None:
                raise BadArgument(f'Unknown action: {type(action).__name__}')
            seat = self.binder.seat_for(sid)
            if seat is None:
                raise NotInGame()
            code, player_id = seat
            room = self.registry.require(code)
            with room.lock:
                if room.closed:
                    raise RoomNotFound()
                room.require_player(player_id)
                return operation(room, player_id, action)
        except GameError as exc:
            self.logger.info(
                f"[action-rejected] sid={sid} action={type(action).__name__} "
                f"kind={exc.kind.value} reason={exc.message}"
            )
            return self.error(exc)

    @staticmethod
    def error(exc: GameError) -> Dispatch:
        return Dispatch([Message('error', exc.to_dict())])

    def disconnect(self, sid: str):
        """Transport dropped. The seat, number and card stay in the room."""
        seat = self.binder.release(sid)
        if seat:
            self.logger.info(f"[disconnect] sid={sid} code={seat[0]} player={seat[1]}")
        return seat

    def state_for(self, code, player_id):
        room = self.registry.require(code)
        with room.lock:
            room.require_player(player_id)
            return project(room, player_id)

    def sweep(self, now: float = None) -> List[Message]:
        removed = self.registry.sweep(now)
        messages = []
        for code in removed:
            self.binder.forget_room(code)
            messages.append(Message('session_ended', {'code': code}, to=channel(code)))
        if removed:
            self.logger.info(f"[sweep] removed={len(removed)} codes={','.join(removed)}")
        return messages

    # ---- helpers ----

    def _snapshots(self, room) -> List[Message]:
        messages = []
        for player_id, snapshot in project_all(room):
            sid = self.binder.sid_for(room.code, player_id)
            if sid:
                messages.append(Message('game_state', snapshot, to=sid))
        return messages

    def _attach(self, sid, code, player_id, dispatch: Dispatch):
        previous = self.binder.release(sid)
        if previous and previous[0] != code:
            dispatch.leave = channel(previous[0])
        self.binder.bind(code, player_id, sid)
        dispatch.join = channel(code)

    def _round_ended(self, room) -> Message:
        return Message('round_ended', round_summary(room), to=channel(room.code))

    # ---- session operations ----

    def _create(self, sid, action: CreateGame) -> Dispatch:
        room = self.registry.create(action.player_id, action.name)
        dispatch = Dispatch()
        with room.lock:
            self._attach(sid, room.code, action.player_id, dispatch)
            dispatch.messages.append(Message('game_created', {'code': room.code}))
            dispatch.messages.append(Message('game_state', project(room, action.player_id)))
        self.logger.info(f"[room-created] code={room.code} host={action.player_id}")
        return dispatch

    def _join(self, sid, action: JoinGame) -> Dispatch:
        room = self.registry.require(action.code)
        dispatch = Dispatch()
        with room.lock:
            player = room.add_player(action.player_id, action.name, max_players=self.max_players)
            self._attach(sid, room.code, player.id, dispatch)
            dispatch.messages.append(Message(
                'player_joined', {'player_id': player.id, 'player_name': player.name},
                to=channel(room.code), include_self=False,
            ))
            dispatch.messages.append(Message('game_joined', {'code': room.code}))
            dispatch.messages.extend(self._snapshots(room))
        self.logger.info(f"[player-joined] code={room.code} player={player.id} count={len(room.players)}")
        return dispatch

    def _rejoin(self, sid, action: RejoinGame) -> Dispatch:
        room = self.registry.get(action.code)
        dispatch = Dispatch()
        if room is not None:
            with room.lock:
                if not room.closed and room.has_player(action.player_id):
                    self._attach(sid, room.code, action.player_id, dispatch)
                    dispatch.messages.append(Message('rejoin_success', {'code': room.code}))
                    dispatch.messages.append(Message('game_state', project(room, action.player_id)))
                    if room.status == ENDED:
                        dispatch.messages.append(Message('round_ended', round_summary(room)))
                    self.logger.info(f"[player-rejoined] code={room.code} player={action.player_id} sid={sid}")
                    return dispatch
        # Back to the landing state: nothing is bound to this connection any more
        previous = self.binder.release(sid)
        if previous:
            dispatch.leave = channel(previous[0])
        dispatch.messages.append(Message(
            'rejoin_failed', {'code': action.code, 'message': 'Game or seat no longer exists'},
        ))
        return dispatch

    def _leave(self, sid, action: LeaveGame) -> Dispatch:
        seat = self.binder.seat_for(sid)
        if seat is None:
            return Dispatch([Message('left_game', {'code': None})])
        code, player_id = seat
        dispatch = Dispatch(leave=channel(code))
        self.binder.unbind(code, player_id)
        room = self.registry.get(code)
        if room is None:
            dispatch.messages.append(Message('left_game', {'code': code}))
            return dispatch
        with room.lock:
            status_before = room.status
            departure = self.registry.remove_player(code, player_id)
            dispatch.messages.append(Message('left_game', {'code': code}))
            if departure is None:
                return dispatch
            if departure.room_empty:
                self.binder.forget_room(code)
                self.logger.info(f"[room-deleted] code={code} reason=empty")
                return dispatch
            dispatch.messages.append(Message(
                'player_left', {'player_id': player_id, 'player_name': departure.player.name},
                to=channel(code), include_self=False,
            ))
            if departure.host_changed:
                dispatch.messages.append(Message(
                    'host_changed', {'host_id': departure.host_id},
                    to=channel(code), include_self=False,
                ))
            if status_before != ENDED and room.status == ENDED:
                dispatch.messages.append(self._round_ended(room))
            dispatch.messages.extend(self._snapshots(room))
        self.logger.info(f"[player-left] code={code} player={player_id} host={departure.host_id}")
        return dispatch

    # ---- room operations (room.lock held) ----

    def _deal(self, room, start) -> Dispatch:
        start(dealer=self.dealer, min_players=self.min_players)
        dispatch = Dispatch()
        for player_id, snapshot in project_all(room):
            sid = self.binder.sid_for(room.code, player_id)
            if sid:
                dispatch.messages.append(Message('round_started', {'your_number': snapshot['my_number']}, to=sid))
                dispatch.messages.append(Message('game_state', snapshot, to=sid))
        self.logger.info(f"[round-started] code={room.code} players={len(room.players)}")
        return dispatch

    def _start_round(self, room, player_id, action: StartRound) -> Dispatch:
        return self._deal(room, lambda **kw: room.start_round(player_id, **kw))

    def _play_again(self, room, player_id, action: PlayAgain) -> Dispatch:
        return self._deal(room, lambda **kw: room.play_again(player_id, **kw))

    def _place_card(self, room, player_id, action: PlaceCard) -> Dispatch:
        position = room.place_card(player_id, action.position)
        player = room.player(player_id)
        dispatch = Dispatch([Message(
            'card_placed',
            {'player_id': player_id, 'player_name': player.name, 'position': position},
            to=channel(room.code),
        )])
        dispatch.messages.extend(self._snapshots(room))
        return dispatch

    def _move_card(self, room, player_id, action: MoveCard) -> Dispatch:
        moved_id, position = room.move_card(action.from_index, action.to_index)
        dispatch = Dispatch([Message(
            'card_moved',
            {'player_id': moved_id, 'from_index': action.from_index, 'to_index': position},
            to=channel(room.code),
        )])
        dispatch.messages.extend(self._snapshots(room))
        return dispatch

    def _set_category(self, room, player_id, action: SetCategory) -> Dispatch:
        room.set_category(player_id, action.category)
        dispatch = Dispatch([Message('category_updated', {'category': room.category}, to=channel(room.code))])
        dispatch.messages.extend(self._snapshots(room))
        return dispatch

    def _revealed(self, room, step, dispatch: Dispatch) -> Dispatch:
        dispatch.messages.append(Message('card_revealed', step.to_dict(), to=channel(room.code)))
        if step.outcome is not None:
            dispatch.messages.append(self._round_ended(room))
            self.logger.info(f"[round-ended] code={room.code} result={room.result} revealed={room.reveal_index}")
        dispatch.messages.extend(self._snapshots(room))
        return dispatch

    def _start_reveal(self, room, player_id, action: StartReveal) -> Dispatch:
        step = room.start_reveal(player_id)
        dispatch = Dispatch([Message('reveal_started', {'code': room.code}, to=channel(room.code))])
        return self._revealed(room, step, dispatch)

    def _reveal_next(self, room, player_id, action: RevealNext) -> Dispatch:
        step = room.reveal_next(player_id)
        return self._revealed(room, step, Dispatch())
