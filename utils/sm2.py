"""
Day-granularity SM-2 variant.

Every graded review moves a card to the ``review`` state and pushes ``due``
forward by a whole number of calendar days:

    again  lapses+1, reps=0, ease-0.2, interval=1
    hard   reps+1, ease-0.15, interval=max(1, interval)*1.2
    good   reps+1, interval 1, then 6, then interval*ease
    easy   reps+1, ease+0.15, interval 4, then interval*(ease+0.2)

Ease is clamped to [1.3, 3.5]. All right-hand sides use the values the card
had before the review.
"""
import math
from datetime import datetime, timedelta
from typing import Dict, TypeVar, Union

from errors import InvalidGradeError
from models.card import CardState, CardStatus, MIN_EASE, MAX_EASE
from models.review import Grade

AGAIN_EASE_PENALTY = 0.2
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15
EASY_INTERVAL_BONUS = 0.2
HARD_INTERVAL_FACTOR = 1.2

FIRST_GOOD_INTERVAL = 1
SECOND_GOOD_INTERVAL = 6
FIRST_EASY_INTERVAL = 4

S = TypeVar("S", bound=CardState)

def parse_grade(value: Union[Grade, str]) -> Grade:
    """Map a grade name to the Grade enum, rejecting anything else."""
    if isinstance(value, Grade):
        return value
    try:
        return Grade(value)
    except (ValueError, TypeError):
        raise InvalidGradeError(value) from None

def round_half_up(value: float) -> int:
    """Round .5 away from zero (builtin round() rounds half to even)."""
    return int(math.floor(value + 0.5))

def schedule(card: S, grade: Union[Grade, str], now: datetime) -> S:
    """Return a copy of ``card`` with its next scheduling state; ``card`` is left untouched."""
    grade = parse_grade(grade)
    interval, ease, reps, lapses = card.interval, card.ease, card.reps, card.lapses

    if grade is Grade.AGAIN:
        new_lapses = lapses + 1
        new_reps = 0
        new_ease = max(MIN_EASE, ease - AGAIN_EASE_PENALTY)
        new_interval = 1
    elif grade is Grade.HARD:
        new_lapses = lapses
        new_reps = reps + 1
        new_ease = max(MIN_EASE, ease - HARD_EASE_PENALTY)
        new_interval = max(1, round_half_up(max(1, interval) * HARD_INTERVAL_FACTOR))
    elif grade is Grade.GOOD:
        new_lapses = lapses
        new_reps = reps + 1
        new_ease = ease
        if reps == 0:
            new_interval = FIRST_GOOD_INTERVAL
        elif reps == 1:
            new_interval = SECOND_GOOD_INTERVAL
        else:
            new_interval = max(1, round_half_up(interval * ease))
    else:
        new_lapses = lapses
        new_reps = reps + 1
        new_ease = min(MAX_EASE, ease + EASY_EASE_BONUS)
        if reps == 0:
            new_interval = FIRST_EASY_INTERVAL
        else:
            new_interval = max(1, round_half_up(interval * (ease + EASY_INTERVAL_BONUS)))

    # Aware datetime arithmetic is wall-clock: the date moves, the time of day stays.
    due = now + timedelta(days=new_interval)
    return card.model_copy(update={
        "due": due,
        "interval": new_interval,
        "ease": new_ease,
        "reps": new_reps,
        "lapses": new_lapses,
        "state": CardStatus.REVIEW,
    })

def preview_intervals(card: CardState, now: datetime) -> Dict[Grade, int]:
    """Interval in days each grade would produce, for labelling grade buttons."""
    return {grade: schedule(card, grade, now).interval for grade in Grade}
