import os


def _origins(value):
    value = (value or '').strip()
    if not value or value == '*':
        return '*'
    return [o.strip() for o in value.split(',') if o.strip()]


def parse_seed(value):
    """Integer seed for master reassignment, or None when unset."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"MASTER_RNG_SEED must be an integer, got {value!r}") from None


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS', '*'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    PORT = int(os.environ.get('PORT', '4000'))
    # Round timer (seconds)
    ROUND_DURATION_SEC = float(os.environ.get('ROUND_DURATION_SEC', '60'))
    # Game rules
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '3'))
    MAX_ATTEMPTS = int(os.environ.get('MAX_ATTEMPTS', '3'))
    CORRECT_GUESS_POINTS = int(os.environ.get('CORRECT_GUESS_POINTS', '10'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Optional: fixed seed for master reassignment. Unset means system randomness.
    MASTER_RNG_SEED = parse_seed(os.environ.get('MASTER_RNG_SEED'))
    # Optional: heartbeat interval for round timer logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
