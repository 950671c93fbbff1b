"""Session domain services: registry, controller, round timers and scoring.

This package holds the room state machine. Socket handlers and HTTP routes
call into it; it never imports Flask request state itself.
"""

from .controller import GameRules, SessionController
from .registry import SessionRegistry
from .scheduler import BackgroundScheduler, TimerHandle

__all__ = [
    'BackgroundScheduler',
    'GameRules',
    'SessionController',
    'SessionRegistry',
    'TimerHandle',
]
