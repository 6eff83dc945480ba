"""
Tests for random selection, question generation and grading.
"""

import random

import pytest

from app.grading.questions import (
    DISTRACTOR_COUNT,
    Card,
    Question,
    QuestionType,
    build_match_board,
    build_multiple_choice_options,
    build_test,
    grade_test,
)
from app.grading.shuffle import get_random_items, get_random_items_excluding, shuffle


def make_cards(count):
    return [Card(id=f"c{i}", term=f"term {i}", definition=f"definition {i}") for i in range(count)]


class TestShuffle:
    """Test the random selection helpers."""

    def test_shuffle_returns_copy_with_same_items(self):
        items = list(range(20))

        result = shuffle(items, random.Random(1))

        assert items == list(range(20))
        assert sorted(result) == items

    def test_shuffle_is_deterministic_with_seeded_rng(self):
        assert shuffle(range(10), random.Random(7)) == shuffle(range(10), random.Random(7))

    def test_get_random_items_caps_at_length(self):
        assert sorted(get_random_items([1, 2, 3], 10, random.Random(0))) == [1, 2, 3]
        assert get_random_items([1, 2, 3], 0) == []

    def test_get_random_items_excluding(self):
        result = get_random_items_excluding(["a", "b", "c", "b"], 10, ["b"], random.Random(0))

        assert sorted(result) == ["a", "c"]


class TestBuildTest:
    """Test test-mode question generation."""

    def test_question_count_is_capped_by_cards(self):
        questions = build_test(make_cards(5), 10, list(QuestionType), random.Random(3))

        assert [q.id for q in questions] == ["q-0", "q-1", "q-2", "q-3", "q-4"]
        assert len({q.card.id for q in questions}) == 5

    def test_question_types_rotate(self):
        types = [QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE, QuestionType.WRITTEN]

        questions = build_test(make_cards(5), 5, types, random.Random(3))

        assert [q.type for q in questions] == [
            QuestionType.MULTIPLE_CHOICE,
            QuestionType.TRUE_FALSE,
            QuestionType.WRITTEN,
            QuestionType.MULTIPLE_CHOICE,
            QuestionType.TRUE_FALSE,
        ]

    def test_multiple_choice_options(self):
        cards = make_cards(8)

        questions = build_test(cards, 8, [QuestionType.MULTIPLE_CHOICE], random.Random(5))

        for question in questions:
            assert question.correct_answer == question.card.definition
            assert question.card.definition in question.options
            assert len(question.options) == DISTRACTOR_COUNT + 1
            assert len(set(question.options)) == len(question.options)

    def test_multiple_choice_with_few_cards(self):
        cards = make_cards(2)

        options = build_multiple_choice_options(cards[0], cards, random.Random(0))

        assert sorted(options) == ["definition 0", "definition 1"]

    def test_duplicate_definitions_are_not_repeated(self):
        cards = [
            Card(id="a", term="a", definition="same"),
            Card(id="b", term="b", definition="other"),
            Card(id="c", term="c", definition="other"),
        ]

        options = build_multiple_choice_options(cards[0], cards, random.Random(0))

        assert sorted(options) == ["other", "same"]

    def test_true_false_answer_matches_displayed_pair(self):
        cards = make_cards(6)

        questions = build_test(cards, 6, [QuestionType.TRUE_FALSE], random.Random(11))

        for question in questions:
            is_pair = question.displayed_definition == question.card.definition
            assert question.is_pair_correct is is_pair
            assert question.correct_answer == ("true" if is_pair else "false")

    def test_true_false_single_card_shows_real_definition(self):
        for seed in range(10):
            [question] = build_test(make_cards(1), 1, [QuestionType.TRUE_FALSE], random.Random(seed))

            assert question.displayed_definition == "definition 0"
            assert question.correct_answer == "true"

    def test_written_expects_definition(self):
        [question] = build_test(make_cards(1), 1, [QuestionType.WRITTEN], random.Random(0))

        assert question.correct_answer == "definition 0"
        assert question.options == ()

    def test_requires_question_type(self):
        with pytest.raises(ValueError):
            build_test(make_cards(3), 3, [])

    def test_empty_set(self):
        assert build_test([], 5, list(QuestionType)) == []


class TestGradeTest:
    """Test grading of submitted answers."""

    def _question(self, index, question_type, correct_answer):
        card = Card(id=f"c{index}", term=f"term {index}", definition=correct_answer)
        return Question(id=f"q-{index}", type=question_type, card=card, correct_answer=correct_answer)

    def test_written_answers_are_lenient(self):
        question = self._question(0, QuestionType.WRITTEN, "The Eiffel Tower")

        graded = grade_test([question], {"q-0": "the eiffel tower!"})

        assert graded.answers[0].is_correct is True
        assert graded.score == 100

    def test_other_answers_are_case_insensitive(self):
        questions = [
            self._question(0, QuestionType.MULTIPLE_CHOICE, "Paris"),
            self._question(1, QuestionType.TRUE_FALSE, "false"),
        ]

        graded = grade_test(questions, {"q-0": "PARIS", "q-1": "False"})

        assert graded.correct_answers == 2

    def test_multiple_choice_is_not_lenient(self):
        question = self._question(0, QuestionType.MULTIPLE_CHOICE, "Paris.")

        graded = grade_test([question], {"q-0": "paris"})

        assert graded.answers[0].is_correct is False

    def test_missing_answer_is_wrong(self):
        question = self._question(0, QuestionType.WRITTEN, "answer")

        graded = grade_test([question], {})

        assert graded.answers[0].user_answer == ""
        assert graded.answers[0].is_correct is False
        assert graded.score == 0

    def test_score_rounds_half_up(self):
        """1 of 8 is 12.5%."""
        questions = [self._question(i, QuestionType.MULTIPLE_CHOICE, f"d{i}") for i in range(8)]

        graded = grade_test(questions, {"q-0": "d0"})

        assert graded.score == 13

    def test_no_questions(self):
        graded = grade_test([], {})

        assert graded.total_questions == 0
        assert graded.score == 0

    def test_question_type_counts(self):
        questions = [
            self._question(0, QuestionType.WRITTEN, "a"),
            self._question(1, QuestionType.WRITTEN, "b"),
            self._question(2, QuestionType.TRUE_FALSE, "true"),
        ]

        graded = grade_test(questions, {})

        assert graded.question_type_counts == {"written": 2, "true-false": 1}


class TestMatchBoard:
    """Test match-game board layout."""

    def test_pairs_are_capped(self):
        tiles = build_match_board(make_cards(10), 6, random.Random(2))

        assert len(tiles) == 12
        flashcard_ids = [t.flashcard_id for t in tiles]
        assert all(flashcard_ids.count(fid) == 2 for fid in flashcard_ids)

    def test_tiles_carry_term_and_definition(self):
        tiles = build_match_board(make_cards(1), 6, random.Random(2))

        assert sorted((t.id, t.kind, t.content) for t in tiles) == [
            ("def-c0", "definition", "definition 0"),
            ("term-c0", "term", "term 0"),
        ]
