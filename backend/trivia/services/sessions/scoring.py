from trivia.models import Session


def normalize_answer(text: str) -> str:
    """Canonical comparison form for answers and guesses: trimmed, lower-cased."""
    return text.strip().lower()


def is_correct(guess: str, canonical_answer) -> bool:
    if not canonical_answer:
        return False
    return normalize_answer(guess) == canonical_answer


def award_win(session: Session, winner_id: str, points: int) -> int:
    """Record ``winner_id`` as the round winner and credit its score.

    Returns the winner's new total.
    """
    session.winner_id = winner_id
    session.scores[winner_id] = session.scores.get(winner_id, 0) + points
    return session.scores[winner_id]
