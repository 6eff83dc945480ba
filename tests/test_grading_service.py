"""
Tests for the study modes and test history against a real database.
"""

import random

import pytest

from app.core import exceptions
from app.grading import schemas as grading_schemas
from app.grading.normalize import DISTANCE_MAX_LENGTH
from app.grading.questions import QuestionType
from app.grading.service import GradingService
from app.progress.mastery import MasteryStatus
from app.progress.service import ProgressService
from app.study_sets.schemas import FlashcardContent, StudySetCreate
from app.study_sets.service import StudySetService
from app.test_results import service as result_services

CARDS = [
    ("France", "Paris"),
    ("Italy", "Rome"),
    ("Spain", "Madrid"),
    ("Portugal", "Lisbon"),
    ("Austria", "Vienna"),
]


async def create_set(session, user_id, cards=CARDS):
    detail = await StudySetService(session).create_study_set(
        StudySetCreate(title="Capitals", flashcards=[FlashcardContent(term=t, definition=d) for t, d in cards]),
        user_id=user_id,
    )
    await session.commit()
    return detail


def correct_answers(test, definitions):
    """Answer every generated question correctly."""
    answers = {}
    for question in test.questions:
        definition = definitions[question.flashcard_id]
        if question.type == QuestionType.TRUE_FALSE:
            answers[question.id] = "true" if question.displayed_definition == definition else "false"
        else:
            answers[question.id] = definition
    return answers


def submission_for(test, answers, save=False):
    return grading_schemas.TestSubmission(
        questions=[q.model_dump() for q in test.questions],
        answers=answers,
        save=save,
    )


class TestCompare:
    """Test the answer comparison report."""

    async def test_reports_normalized_answers_and_distance(self, session):
        response = GradingService(session).compare("Pariss!", "Paris")

        assert response.correct is False
        assert response.normalized_user == "pariss"
        assert response.normalized_correct == "paris"
        assert response.distance == 1

    async def test_distance_is_skipped_for_long_answers(self, session):
        long_answer = "a" * (DISTANCE_MAX_LENGTH + 1)

        response = GradingService(session).compare(long_answer, long_answer + "b")

        assert response.correct is False
        assert response.distance is None

    async def test_distance_at_the_length_bound(self, session):
        answer = "a" * DISTANCE_MAX_LENGTH

        assert GradingService(session).compare(answer, answer).distance == 0


class TestTestMode:
    """Test generation and grading of tests."""

    async def test_generated_questions_hide_answers(self, session, owner_id):
        study_set = await create_set(session, owner_id)

        test = await GradingService(session, rng=random.Random(4)).generate_test(
            study_set.id, 3, [QuestionType.MULTIPLE_CHOICE]
        )

        assert len(test.questions) == 3
        dumped = test.questions[0].model_dump()
        assert "correct_answer" not in dumped
        assert len(dumped["options"]) == 4

    async def test_all_correct_scores_100_and_saves(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        definitions = {c.id: c.definition for c in study_set.flashcards}
        service = GradingService(session, rng=random.Random(9))
        test = await service.generate_test(study_set.id, 5, list(QuestionType))

        graded = await service.grade_submission(
            study_set.id,
            submission_for(test, correct_answers(test, definitions), save=True),
            owner_id,
        )

        assert graded.score == 100
        assert graded.correct_answers == 5
        assert graded.question_types == {"multiple-choice": 2, "true-false": 2, "written": 1}
        assert graded.saved_result_id is not None

        saved = await result_services.get_test_result_service(session).get_result(
            graded.saved_result_id, owner_id
        )
        assert saved.score == 5
        assert saved.percentage == 100
        assert saved.study_set_title == "Capitals"
        assert len(saved.answers) == 5

    async def test_expected_answers_come_from_stored_cards(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        card = study_set.flashcards[0]
        submission = grading_schemas.TestSubmission(
            questions=[{"id": "q-0", "type": "written", "flashcard_id": card.id, "correct_answer": "forged"}],
            answers={"q-0": "forged"},
        )

        graded = await GradingService(session).grade_submission(study_set.id, submission, owner_id)

        assert graded.answers[0].correct_answer == "Paris"
        assert graded.answers[0].is_correct is False
        assert graded.saved_result_id is None

    async def test_true_false_is_checked_against_displayed_definition(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        card = study_set.flashcards[0]
        submission = grading_schemas.TestSubmission(
            questions=[
                {"id": "q-0", "type": "true-false", "flashcard_id": card.id, "displayed_definition": "Rome"},
                {"id": "q-1", "type": "true-false", "flashcard_id": card.id, "displayed_definition": "Paris"},
            ],
            answers={"q-0": "false", "q-1": "true"},
        )

        graded = await GradingService(session).grade_submission(study_set.id, submission, owner_id)

        assert graded.score == 100

    async def test_card_from_another_set_is_rejected(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        other_set = await create_set(session, owner_id, cards=[("x", "y")])
        submission = grading_schemas.TestSubmission(
            questions=[{"id": "q-0", "type": "written", "flashcard_id": other_set.flashcards[0].id}],
        )

        with pytest.raises(exceptions.FlashcardNotFoundError):
            await GradingService(session).grade_submission(study_set.id, submission, owner_id)


class TestLearnMode:
    """Test learn-mode question selection."""

    async def test_only_unmastered_cards_are_asked(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        progress = ProgressService(session)
        for card in study_set.flashcards[1:]:
            await progress.record_answer(card.id, True, owner_id)

        question = await GradingService(session, rng=random.Random(1)).next_learn_question(study_set.id, owner_id)

        assert question.complete is False
        assert question.remaining == 1
        assert question.flashcard.id == study_set.flashcards[0].id
        assert question.options[question.correct_index] == "Paris"

    async def test_complete_when_everything_is_mastered(self, session, owner_id):
        study_set = await create_set(session, owner_id, cards=[("France", "Paris")])
        await ProgressService(session).mark_status(study_set.flashcards[0].id, MasteryStatus.MASTERED, owner_id)

        question = await GradingService(session).next_learn_question(study_set.id, owner_id)

        assert question.complete is True
        assert question.flashcard is None

    async def test_empty_set_is_complete(self, session, owner_id):
        study_set = await create_set(session, owner_id, cards=[])

        question = await GradingService(session).next_learn_question(study_set.id, owner_id)

        assert question.complete is True


class TestMatchMode:
    """Test match boards."""

    async def test_default_pair_count(self, session, owner_id):
        study_set = await create_set(session, owner_id)

        board = await GradingService(session, rng=random.Random(0)).match_board(study_set.id)

        assert board.pair_count == 5
        assert len(board.tiles) == 10

    async def test_explicit_pair_count(self, session, owner_id):
        study_set = await create_set(session, owner_id)

        board = await GradingService(session).match_board(study_set.id, pair_count=2)

        assert board.pair_count == 2
        assert {t.kind for t in board.tiles} == {"term", "definition"}

    async def test_unknown_set(self, session):
        with pytest.raises(exceptions.StudySetNotFoundError):
            await GradingService(session).match_board("missing")


class TestTestHistory:
    """Test saved results browsing."""

    async def _save(self, session, study_set, user_id):
        definitions = {c.id: c.definition for c in study_set.flashcards}
        service = GradingService(session)
        test = await service.generate_test(study_set.id, 2, [QuestionType.WRITTEN])
        graded = await service.grade_submission(
            study_set.id,
            submission_for(test, correct_answers(test, definitions), save=True),
            user_id,
        )
        return graded.saved_result_id

    async def test_history_is_per_user_and_filterable(self, session, owner_id, other_id):
        first_set = await create_set(session, owner_id)
        second_set = await create_set(session, owner_id, cards=[("a", "b")])
        await self._save(session, first_set, owner_id)
        await self._save(session, second_set, owner_id)
        await self._save(session, first_set, other_id)
        results = result_services.get_test_result_service(session)

        history = await results.get_history(owner_id)
        filtered = await results.get_history(owner_id, study_set_id=second_set.id)

        assert len(history.results) == 2
        assert [r.study_set_id for r in filtered.results] == [second_set.id]

    async def test_other_users_result_is_not_found(self, session, owner_id, other_id):
        study_set = await create_set(session, owner_id)
        result_id = await self._save(session, study_set, owner_id)
        results = result_services.get_test_result_service(session)

        with pytest.raises(exceptions.TestResultNotFoundError):
            await results.get_result(result_id, other_id)
        with pytest.raises(exceptions.TestResultNotFoundError):
            await results.delete_result(result_id, other_id)

    async def test_delete(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        result_id = await self._save(session, study_set, owner_id)
        results = result_services.get_test_result_service(session)

        await results.delete_result(result_id, owner_id)

        assert (await results.get_history(owner_id)).results == []
