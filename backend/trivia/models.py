import threading
from enum import Enum
from typing import Dict, List, Optional


class Phase(str, Enum):
    IDLE = 'idle'
    QUESTION_SET = 'question_set'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'


class Member:
    __slots__ = ('id', 'name')

    def __init__(self, connection_id: str, name: str):
        self.id = connection_id
        self.name = name

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }


class Session:
    """Runtime state of one room.

    Only the registry and the controller touch these fields, and only while
    holding ``lock``.
    """

    def __init__(self, session_id: str):
        self.id = session_id
        self.lock = threading.RLock()
        self.members: List[Member] = []  # join order
        self.master_id: Optional[str] = None
        self.phase = Phase.IDLE
        self.question: Optional[str] = None
        self.answer: Optional[str] = None  # canonical form, see scoring.normalize_answer
        self.attempts: Dict[str, int] = {}
        self.winner_id: Optional[str] = None
        self.scores: Dict[str, int] = {}
        self.round_timer = None
        self.round_number = 0
        # Set once the registry has dropped this session
        self.closed = False

    @property
    def in_progress(self) -> bool:
        return self.phase == Phase.IN_PROGRESS

    def has_member(self, connection_id: str) -> bool:
        return any(m.id == connection_id for m in self.members)

    def add_member(self, connection_id: str, name: str) -> None:
        self.members.append(Member(connection_id, name))
        self.scores.setdefault(connection_id, 0)
        if self.master_id is None:
            self.master_id = connection_id

    def remove_member(self, connection_id: str) -> None:
        self.members = [m for m in self.members if m.id != connection_id]
        self.scores.pop(connection_id, None)
        self.attempts.pop(connection_id, None)

    def cancel_timer(self) -> None:
        if self.round_timer is not None:
            self.round_timer.cancel()
            self.round_timer = None

    def reset_round(self) -> None:
        """Clear every per-round field. Scores are kept."""
        self.phase = Phase.IDLE
        self.question = None
        self.answer = None
        self.attempts = {}
        self.winner_id = None
        self.cancel_timer()

    def to_update(self):
        return {
            'members': [m.to_dict() for m in self.members],
            'masterId': self.master_id,
            'scores': dict(self.scores),
        }

    def to_summary(self):
        return {
            'id': self.id,
            'playerCount': len(self.members),
            'inProgress': self.in_progress,
        }
