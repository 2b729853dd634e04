import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed for HTTP and Socket.IO
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ).split(',') if o.strip()]
    # Room limits
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '10'))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    # Idle rooms are dropped after this many seconds
    ROOM_TIMEOUT_SEC = int(os.environ.get('ROOM_TIMEOUT_SEC', '3600'))
    SWEEP_INTERVAL_SEC = int(os.environ.get('SWEEP_INTERVAL_SEC', '60'))
    # Dealt numbers are drawn from [NUMBER_LOW, NUMBER_HIGH]
    NUMBER_LOW = int(os.environ.get('NUMBER_LOW', '1'))
    NUMBER_HIGH = int(os.environ.get('NUMBER_HIGH', '100'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '24'))
    MAX_CATEGORY_LENGTH = int(os.environ.get('MAX_CATEGORY_LENGTH', '100'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    ENABLE_SWEEPER_IN_TESTS = False
