"""Room statuses and round results shared across the package."""

LOBBY = 'lobby'
PLAYING = 'playing'
REVEALING = 'revealing'
ENDED = 'ended'

WIN = 'win'
LOSE = 'lose'
