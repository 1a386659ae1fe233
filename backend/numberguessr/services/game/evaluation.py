from typing import Tuple

HIGHER = 'higher'
LOWER = 'lower'
CORRECT = 'correct'

_INVERTED = {HIGHER: LOWER, LOWER: HIGHER}


def truthful_feedback(value: int, secret: int) -> str:
    """Tell the guesser which way to move: the secret is higher/lower than the guess."""
    if value < secret:
        return HIGHER
    if value > secret:
        return LOWER
    return CORRECT


def evaluate_guess(value: int, secret: int, lie_requested: bool, lie_available: bool) -> Tuple[str, bool]:
    """Return ``(feedback, lie_consumed)`` for one guess.

    A lie is only honoured while still available. It inverts higher/lower and
    turns a correct guess into ``higher``, so a lying guesser cannot win on
    that turn. An unavailable lie is ignored and the truth is reported.
    """
    truth = truthful_feedback(value, secret)
    if not (lie_requested and lie_available):
        return truth, False
    # Lying on the exact number masks the hit
    return _INVERTED.get(truth, HIGHER), True
