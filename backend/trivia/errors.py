"""Caller-recoverable game errors.

Every failure a command can hit is reported back to the issuing
connection through its acknowledgement; none of them mutate a session.
"""
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = 'InvalidInput'
    ALREADY_JOINED = 'AlreadyJoined'
    ROUND_ACTIVE = 'RoundActive'
    NOT_ACTIVE = 'NotActive'
    FORBIDDEN = 'Forbidden'
    NOT_FOUND = 'NotFound'
    INSUFFICIENT_PLAYERS = 'InsufficientPlayers'
    QUESTION_MISSING = 'QuestionMissing'
    NOT_A_MEMBER = 'NotAMember'
    MASTER_CANNOT_GUESS = 'MasterCannotGuess'
    ALREADY_WON = 'AlreadyWon'
    NO_ATTEMPTS_LEFT = 'NoAttemptsLeft'


class GameError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_ack(self) -> dict:
        return {'success': False, 'error': self.kind.value, 'message': self.message}

    def __repr__(self):
        return f"GameError({self.kind.value!r}, {self.message!r})"
