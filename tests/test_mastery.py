"""
Tests for the mastery progression engine.

Tests cover:
- First-try mastery
- Two-correct mastery after a miss
- Regression on incorrect answers
- Manual classification
"""

import pytest

from app.progress.mastery import (
    MASTERY_CORRECT_THRESHOLD,
    MasteryStatus,
    ProgressCounters,
    classify,
    is_first_try,
    next_state,
)


class TestNextState:
    """Test status transitions after an answer."""

    def test_first_answer_correct_masters(self):
        state = next_state(None, correct=True)

        assert state == ProgressCounters(MasteryStatus.MASTERED, correct_count=1, incorrect_count=0)

    def test_second_correct_stays_mastered(self):
        first = next_state(None, correct=True)
        second = next_state(first, correct=True)

        assert second == ProgressCounters(MasteryStatus.MASTERED, correct_count=2, incorrect_count=0)

    def test_first_answer_incorrect_is_learning(self):
        state = next_state(None, correct=False)

        assert state == ProgressCounters(MasteryStatus.LEARNING, correct_count=0, incorrect_count=1)

    def test_mastery_after_a_miss_needs_two_correct(self):
        state = next_state(None, correct=False)
        state = next_state(state, correct=True)

        assert state.status == MasteryStatus.LEARNING
        assert state.correct_count == 1

        state = next_state(state, correct=True)

        assert state.status == MasteryStatus.MASTERED
        assert state.correct_count == MASTERY_CORRECT_THRESHOLD
        assert state.incorrect_count == 1

    def test_incorrect_answer_regresses_mastered_card(self):
        mastered = ProgressCounters(MasteryStatus.MASTERED, correct_count=3, incorrect_count=0)

        state = next_state(mastered, correct=False)

        assert state == ProgressCounters(MasteryStatus.LEARNING, correct_count=3, incorrect_count=1)

    def test_initialized_record_counts_as_first_try(self):
        """A learning record with zero counts was never answered."""
        initialized = ProgressCounters(MasteryStatus.LEARNING)

        assert is_first_try(initialized) is True
        assert next_state(initialized, correct=True).status == MasteryStatus.MASTERED


class TestClassify:
    """Test manual self-assessment."""

    def test_keeps_counters(self):
        prior = ProgressCounters(MasteryStatus.LEARNING, correct_count=1, incorrect_count=4)

        state = classify(prior, MasteryStatus.MASTERED)

        assert state == ProgressCounters(MasteryStatus.MASTERED, correct_count=1, incorrect_count=4)

    def test_without_prior_record(self):
        assert classify(None, MasteryStatus.LEARNING) == ProgressCounters(MasteryStatus.LEARNING)

    def test_new_is_rejected(self):
        with pytest.raises(ValueError):
            classify(None, MasteryStatus.NEW)
