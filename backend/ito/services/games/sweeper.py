from ito import socketio


def sweep_once(app):
    """Run one inactivity sweep and tell any connected clients their room is gone."""
    coordinator = app.extensions['ito']
    messages = coordinator.sweep()
    for message in messages:
        socketio.emit(message.event, message.payload, to=message.to, namespace='/ws')
    return [m.payload['code'] for m in messages]


def start_room_sweeper(app) -> bool:
    """Start the background task that drops idle rooms.

    - No-ops in TESTING mode unless ENABLE_SWEEPER_IN_TESTS is set
    - Sweeps every SWEEP_INTERVAL_SEC seconds for the process lifetime
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SWEEPER_IN_TESTS'):
        return False
    if app.extensions.get('ito_sweeper_started'):
        return False
    app.extensions['ito_sweeper_started'] = True

    try:
        interval = int(app.config.get('SWEEP_INTERVAL_SEC', 60))
    except (TypeError, ValueError):
        interval = 60

    def _worker(delay: int):
        app.logger.info(f"[sweeper-start] interval={delay}s timeout={app.config.get('ROOM_TIMEOUT_SEC')}s")
        while True:
            socketio.sleep(delay)
            with app.app_context():
                try:
                    sweep_once(app)
                except Exception:
                    app.logger.exception("[sweeper-error] sweep failed")

    socketio.start_background_task(_worker, interval)
    return True
