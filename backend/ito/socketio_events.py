from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from ito import socketio
from ito.actions import EVENTS, parse_action
from ito.exceptions import GameError


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _coordinator():
    return current_app.extensions['ito']


def _deliver(dispatch) -> None:
    """Apply a coordinator Dispatch to the current connection."""
    if dispatch.join:
        join_room(dispatch.join)
    for message in dispatch.messages:
        if message.to is None:
            emit(message.event, message.payload)
        else:
            emit(message.event, message.payload, to=message.to, include_self=message.include_self)
    if dispatch.leave:
        leave_room(dispatch.leave)


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    # Keep the seat: the player may reconnect and rejoin
    _coordinator().disconnect(_get_sid())


def handle_ping(data=None):
    emit('pong', data or {})


def make_action_handler(event: str):
    def handler(data=None):
        cfg = current_app.config
        coordinator = _coordinator()
        try:
            action = parse_action(
                event, data,
                name_length=int(cfg.get('MAX_NAME_LENGTH', 24)),
                category_length=int(cfg.get('MAX_CATEGORY_LENGTH', 100)),
            )
        except GameError as exc:
            current_app.logger.info(f"[bad-payload] sid={_get_sid()} event={event} reason={exc.message}")
            _deliver(coordinator.error(exc))
            return
        _deliver(coordinator.handle(_get_sid(), action))
    handler.__name__ = f"handle_{event}"
    return handler


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
        for event in EVENTS:
            socketio.on_event(event, make_action_handler(event), namespace=namespace)
