from flask import Blueprint, current_app, jsonify, request

from ito.constants import LOBBY
from ito.exceptions import GameError, RoomNotFound

rooms = Blueprint('rooms', __name__)


@rooms.errorhandler(GameError)
def handle_game_error(exc):
    return jsonify({'error': exc.message, 'code': exc.kind.value}), exc.status_code


@rooms.route('/<string:code>', methods=['GET'])
def get_room(code):
    """
    Public summary of a room, e.g. to check a code before joining.
    Does not count as activity for the inactivity sweep.
    """
    coordinator = current_app.extensions['ito']
    room = coordinator.registry.peek(code)
    if room is None:
        raise RoomNotFound()
    with room.lock:
        payload = room.to_dict()
        payload['players'] = [p.to_dict() for p in room.players]
        payload['max_players'] = coordinator.max_players
        payload['joinable'] = room.status == LOBBY and len(room.players) < coordinator.max_players
    return jsonify(payload)


@rooms.route('/<string:code>/state', methods=['GET'])
def get_room_state(code):
    """
    Censored snapshot for one seated player (the same payload as the
    ``game_state`` Socket.IO event).
    """
    player_id = request.args.get('player_id')
    if not player_id:
        return jsonify({'error': 'player_id is required', 'code': 'bad-argument'}), 400
    state = current_app.extensions['ito'].state_for(code, player_id)
    return jsonify(state)
