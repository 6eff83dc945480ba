"""
Mastery progression - new / learning / mastered status transitions.

A card's status for a user is driven by how they answer it:

- A correct answer on the very first attempt masters the card immediately.
- Otherwise a card is mastered once it has 2 correct answers in total.
- Any incorrect answer puts the card (back) into learning, even if it was
  already mastered.

Users can also classify a card by hand ("still learning" / "already know"),
which sets the status without touching the answer counters.

Everything here is pure: the caller loads the prior counters, calls
:func:`next_state` or :func:`classify` and persists the result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Correct answers needed to master a card that was not right first time
MASTERY_CORRECT_THRESHOLD = 2


class MasteryStatus(str, Enum):
    """Learning status of a flashcard for one user."""
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


@dataclass(frozen=True)
class ProgressCounters:
    """Status and answer counters of one (user, flashcard) pair."""
    status: MasteryStatus
    correct_count: int = 0
    incorrect_count: int = 0


# State of a card with no progress record
INITIAL_COUNTERS = ProgressCounters(status=MasteryStatus.NEW)


def is_first_try(prior: Optional[ProgressCounters]) -> bool:
    """True when the card has never been answered by this user."""
    return prior is None or (prior.correct_count == 0 and prior.incorrect_count == 0)


def next_state(prior: Optional[ProgressCounters], correct: bool) -> ProgressCounters:
    """
    Calculate the counters after one answer.

    Args:
        prior: Existing counters, or None if the user never touched the card
        correct: Whether the latest answer was correct

    Returns:
        New ProgressCounters
    """
    base = prior or INITIAL_COUNTERS

    if correct:
        correct_count = base.correct_count + 1
        mastered = correct_count >= MASTERY_CORRECT_THRESHOLD or is_first_try(prior)
        return ProgressCounters(
            status=MasteryStatus.MASTERED if mastered else MasteryStatus.LEARNING,
            correct_count=correct_count,
            incorrect_count=base.incorrect_count,
        )

    return ProgressCounters(
        status=MasteryStatus.LEARNING,
        correct_count=base.correct_count,
        incorrect_count=base.incorrect_count + 1,
    )


def classify(prior: Optional[ProgressCounters], status: MasteryStatus) -> ProgressCounters:
    """
    Apply a manual self-assessment.

    Raises:
        ValueError: If status is not learning or mastered
    """
    if status not in (MasteryStatus.LEARNING, MasteryStatus.MASTERED):
        raise ValueError(f"Cannot classify a card as {status.value!r}")

    base = prior or INITIAL_COUNTERS
    return ProgressCounters(
        status=status,
        correct_count=base.correct_count,
        incorrect_count=base.incorrect_count,
    )
