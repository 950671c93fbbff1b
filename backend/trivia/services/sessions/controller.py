import logging
import random
from contextlib import contextmanager
from functools import partial
from typing import NamedTuple, Optional

from trivia.errors import ErrorKind, GameError
from trivia.models import Phase, Session
from .registry import SessionRegistry
from .scoring import award_win, is_correct, normalize_answer


NO_ANSWER = 'N/A'


class GameRules(NamedTuple):
    round_duration: float = 60.0
    min_players: int = 3
    max_attempts: int = 3
    correct_points: int = 10

    @classmethod
    def from_config(cls, config) -> 'GameRules':
        return cls(
            round_duration=float(config.get('ROUND_DURATION_SEC', 60)),
            min_players=int(config.get('MIN_PLAYERS', 3)),
            max_attempts=int(config.get('MAX_ATTEMPTS', 3)),
            correct_points=int(config.get('CORRECT_GUESS_POINTS', 10)),
        )


def _filled(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


class SessionController:
    """Applies player commands and round timeouts to sessions.

    Every operation runs under the session's lock from validation to the
    last broadcast, so a command on a session observes either all or none of
    another command's effects. Validation raises ``GameError`` before
    anything is mutated.

    ``broadcaster`` needs ``enter(connection_id, session_id)``,
    ``exit(connection_id, session_id)`` and ``emit(session_id, event,
    payload)``. ``scheduler`` needs ``schedule(delay, callback, label)``
    returning a handle with ``cancel()``, ``cancelled`` and ``deadline``
    (epoch seconds).
    """

    def __init__(self, registry: SessionRegistry, broadcaster, scheduler,
                 rules: Optional[GameRules] = None, rng: Optional[random.Random] = None,
                 logger: Optional[logging.Logger] = None):
        self.registry = registry
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.rules = rules or GameRules()
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)

    # ---- commands ----

    def join(self, session_id, connection_id: str, name) -> dict:
        if not _filled(session_id) or not _filled(name):
            self.logger.info(f"[join-reject] sid={connection_id} reason=invalid-input")
            raise GameError(ErrorKind.INVALID_INPUT, 'Invalid input')

        while True:
            session = self.registry.get_or_create(session_id)
            with session.lock:
                # Emptied and dropped between lookup and lock: use the fresh entry
                if session.closed:
                    continue
                if session.in_progress:
                    self.logger.info(f"[join-reject] session={session_id} sid={connection_id} reason=round-active")
                    raise GameError(ErrorKind.ROUND_ACTIVE, 'Game in progress')
                if session.has_member(connection_id):
                    self.logger.info(f"[join-reject] session={session_id} sid={connection_id} reason=already-joined")
                    raise GameError(ErrorKind.ALREADY_JOINED, 'Already joined')

                session.add_member(connection_id, name)
                self.broadcaster.enter(connection_id, session_id)
                self.logger.info(
                    f"[join] session={session_id} sid={connection_id} players={len(session.members)} master={session.master_id}"
                )
                self._emit(session, 'sessionUpdate', session.to_update())
                return {'success': True, 'master': session.master_id == connection_id}

    def leave(self, session_id, connection_id: str) -> None:
        session = self.registry.get(session_id) if isinstance(session_id, str) else None
        if session is None:
            return
        with session.lock:
            if session.closed or not session.has_member(connection_id):
                return
            self._depart(session, connection_id, 'leave')

    def disconnect(self, connection_id: str) -> None:
        """Apply a leave to every session that still lists ``connection_id``."""
        for session in self.registry.sessions():
            with session.lock:
                if session.closed or not session.has_member(connection_id):
                    continue
                self._depart(session, connection_id, 'disconnect')

    def set_question(self, session_id, connection_id: str, question, answer) -> dict:
        with self._locked(session_id) as session:
            if session.master_id != connection_id:
                raise GameError(ErrorKind.FORBIDDEN, 'Only master can set question')
            if session.in_progress:
                raise GameError(ErrorKind.ROUND_ACTIVE, 'Game already in progress')
            if not _filled(question) or not _filled(answer):
                raise GameError(ErrorKind.INVALID_INPUT, 'Invalid input')

            session.question = question
            session.answer = normalize_answer(answer)
            session.phase = Phase.QUESTION_SET
            self.logger.info(f"[question-set] session={session.id} master={connection_id}")
            self._emit(session, 'questionSet', {'question': question})
            return {'success': True}

    def start_game(self, session_id, connection_id: str) -> dict:
        with self._locked(session_id) as session:
            if session.master_id != connection_id:
                raise GameError(ErrorKind.FORBIDDEN, 'Only master can start game')
            if session.in_progress:
                raise GameError(ErrorKind.ROUND_ACTIVE, 'Game already in progress')
            if len(session.members) < self.rules.min_players:
                raise GameError(
                    ErrorKind.INSUFFICIENT_PLAYERS,
                    f'At least {self.rules.min_players} players required',
                )
            if not session.question or not session.answer:
                raise GameError(ErrorKind.QUESTION_MISSING, 'Set question/answer first')

            # Arm the timer first: if scheduling fails the session is untouched
            round_number = session.round_number + 1
            timer = self.scheduler.schedule(
                self.rules.round_duration,
                partial(self._expire_round, session.id),
                label=f"session={session.id} round={round_number}",
            )
            session.phase = Phase.IN_PROGRESS
            session.attempts = {}
            session.winner_id = None
            session.round_number = round_number
            session.round_timer = timer
            self.logger.info(
                f"[round-start] session={session.id} round={session.round_number} players={len(session.members)}"
            )
            self._emit(session, 'gameStarted', {
                'question': session.question,
                'duration': self.rules.round_duration,
                'deadline': timer.deadline,
            })
            return {'success': True}

    def guess(self, session_id, connection_id: str, text) -> dict:
        with self._locked(session_id) as session:
            if not session.in_progress:
                raise GameError(ErrorKind.NOT_ACTIVE, 'Game not in progress')
            if session.winner_id:
                raise GameError(ErrorKind.ALREADY_WON, 'Game already won')
            if not session.has_member(connection_id):
                raise GameError(ErrorKind.NOT_A_MEMBER, 'Not in session')
            if connection_id == session.master_id:
                raise GameError(ErrorKind.MASTER_CANNOT_GUESS, 'Master cannot guess')

            # The rejected attempt is still recorded
            count = session.attempts.get(connection_id, 0) + 1
            session.attempts[connection_id] = count
            if count > self.rules.max_attempts:
                self.logger.info(f"[guess] session={session.id} sid={connection_id} attempt={count} rejected=no-attempts-left")
                raise GameError(ErrorKind.NO_ATTEMPTS_LEFT, 'No attempts left')

            if is_correct(text if isinstance(text, str) else '', session.answer):
                total = award_win(session, connection_id, self.rules.correct_points)
                session.phase = Phase.RESOLVED
                session.cancel_timer()
                self.logger.info(
                    f"[round-win] session={session.id} round={session.round_number} winner={connection_id} score={total}"
                )
                self._end_round(session, connection_id)
                return {'success': True, 'correct': True}

            remaining = self.rules.max_attempts - count
            self.logger.info(f"[guess] session={session.id} sid={connection_id} attempt={count} remaining={remaining}")
            return {'success': True, 'correct': False, 'attemptsRemaining': remaining}

    # ---- introspection ----

    def summaries(self) -> list:
        result = []
        for session in self.registry.sessions():
            with session.lock:
                if not session.closed:
                    result.append(session.to_summary())
        return result

    def summary(self, session_id) -> dict:
        with self._locked(session_id) as session:
            payload = session.to_summary()
            payload['phase'] = session.phase.value
            return payload

    # ---- internals (caller holds session.lock) ----

    @contextmanager
    def _locked(self, session_id):
        session = self.registry.get(session_id) if isinstance(session_id, str) else None
        if session is None:
            raise GameError(ErrorKind.NOT_FOUND, 'Session not found')
        with session.lock:
            if session.closed:
                raise GameError(ErrorKind.NOT_FOUND, 'Session not found')
            yield session

    def _depart(self, session: Session, connection_id: str, reason: str) -> None:
        was_master = session.master_id == connection_id
        session.remove_member(connection_id)
        self.broadcaster.exit(connection_id, session.id)
        self.logger.info(
            f"[{reason}] session={session.id} sid={connection_id} players={len(session.members)}"
        )

        if not session.members:
            session.reset_round()
            session.master_id = None
            self.registry.remove(session.id, session)
            return

        if was_master:
            session.master_id = self.rng.choice(session.members).id
            self.logger.info(f"[master-reassign] session={session.id} master={session.master_id}")
            if session.in_progress:
                self.logger.info(f"[round-end] session={session.id} round={session.round_number} reason=master-{reason}")
                self._end_round(session, None)

        self._emit(session, 'sessionUpdate', session.to_update())

    def _expire_round(self, session_id: str, handle) -> None:
        session = self.registry.get(session_id)
        if session is None:
            self.logger.info(f"[timer-abort] session={session_id} reason=session-gone")
            return
        with session.lock:
            if session.closed or session.round_timer is not handle or handle.cancelled or not session.in_progress:
                self.logger.info(f"[timer-abort] session={session_id} reason=stale-round")
                return
            self.logger.info(f"[round-end] session={session_id} round={session.round_number} reason=timeout")
            self._end_round(session, None)

    def _end_round(self, session: Session, winner_id: Optional[str]) -> None:
        self._emit(session, 'gameEnd', {
            'winner': winner_id,
            'answer': session.answer or NO_ANSWER,
            'scores': dict(session.scores),
        })
        session.reset_round()

    def _emit(self, session: Session, event: str, payload: dict) -> None:
        self.broadcaster.emit(session.id, event, payload)
