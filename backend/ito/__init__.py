from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One coordinator per app owns the room registry and connection binder
    from functools import partial
    from ito.models import deal_numbers, generate_room_code
    from ito.services.games.coordinator import Coordinator
    from ito.services.games.registry import RoomRegistry
    cfg = flask_app.config
    number_low, number_high = int(cfg.get('NUMBER_LOW', 1)), int(cfg.get('NUMBER_HIGH', 100))
    max_players = int(cfg.get('MAX_PLAYERS', 10))
    if max_players > number_high - number_low + 1:
        raise ValueError(
            f'MAX_PLAYERS={max_players} needs at least that many numbers, '
            f'but NUMBER_LOW..NUMBER_HIGH is {number_low}..{number_high}'
        )
    registry = RoomRegistry(
        code_factory=partial(generate_room_code, int(cfg.get('ROOM_CODE_LENGTH', 4))),
        timeout=int(cfg.get('ROOM_TIMEOUT_SEC', 3600)),
    )
    flask_app.extensions['ito'] = Coordinator(
        registry=registry,
        dealer=partial(deal_numbers, low=number_low, high=number_high),
        max_players=max_players,
        min_players=int(cfg.get('MIN_PLAYERS', 2)),
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from ito.main import main
    flask_app.register_blueprint(main)

    from ito.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    from ito.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from ito.services.games.sweeper import start_room_sweeper, sweep_once
    start_room_sweeper(flask_app)

    @click.command('rooms')
    def rooms_command():
        """Lists live rooms."""
        coordinator = flask_app.extensions['ito']
        live = coordinator.registry.rooms()
        if not live:
            click.echo('No live rooms.')
        for room in live:
            summary = room.to_dict()
            click.echo(f"{summary['code']}  {summary['status']:<9}  players={summary['player_count']}  host={summary['host_id']}")

    @click.command('sweep-rooms')
    def sweep_rooms_command():
        """Drops rooms idle for longer than ROOM_TIMEOUT_SEC."""
        with flask_app.app_context():
            removed = sweep_once(flask_app)
        click.echo(f'Removed {len(removed)} idle room(s).')

    flask_app.cli.add_command(rooms_command)
    flask_app.cli.add_command(sweep_rooms_command)

    return flask_app
