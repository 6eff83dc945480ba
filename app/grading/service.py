"""
Grading service - Study modes built on a study set's cards.
Test generation and grading, learn-mode questions and match boards.
"""

import logging
import random
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import FlashcardNotFoundError
from app.grading.normalize import (
    DISTANCE_MAX_LENGTH,
    compare_answers,
    levenshtein_distance,
    normalize_answer,
)
from app.grading.questions import (
    Card,
    Question,
    QuestionType,
    build_match_board,
    build_multiple_choice_options,
    build_test,
    grade_test,
)
from app.grading.schemas import (
    CompareResponse,
    LearnQuestionResponse,
    MatchBoardResponse,
    MatchTileRead,
    QuestionRead,
    TestGradeResponse,
    TestResponse,
    TestSubmission,
)
from app.grading.shuffle import get_random_items
from app.progress.mastery import MasteryStatus
from app.progress.repository import ProgressRepository
from app.study_sets.models import Flashcard
from app.study_sets.repository import FlashcardRepository, StudySetRepository
from app.study_sets.schemas import FlashcardRead
from app.test_results.repository import TestResultRepository
from app.test_results.schemas import TestAnswerDetail, TestResultCreate

logger = logging.getLogger(__name__)
settings = get_settings()


class GradingService:
    """Service for answer grading and the study modes."""

    def __init__(self, db: AsyncSession, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng
        self.study_set_repo = StudySetRepository(db)
        self.flashcard_repo = FlashcardRepository(db)
        self.progress_repo = ProgressRepository(db)
        self.result_repo = TestResultRepository(db)

    def compare(self, user_answer: str, correct_answer: str) -> CompareResponse:
        """Grade a written answer and report how far off it was."""
        normalized_user = normalize_answer(user_answer)
        normalized_correct = normalize_answer(correct_answer)

        distance = None
        if max(len(normalized_user), len(normalized_correct)) <= DISTANCE_MAX_LENGTH:
            distance = levenshtein_distance(normalized_user, normalized_correct)

        return CompareResponse(
            correct=compare_answers(user_answer, correct_answer),
            normalized_user=normalized_user,
            normalized_correct=normalized_correct,
            distance=distance,
        )

    # ═══════════════════════════════════════════════════════════════════════
    # TEST MODE
    # ═══════════════════════════════════════════════════════════════════════

    async def generate_test(
        self,
        study_set_id: str,
        question_count: int,
        question_types: Sequence[QuestionType],
    ) -> TestResponse:
        """
        Generate a test from a study set.

        Raises:
            StudySetNotFoundError: If the study set does not exist
        """
        logger.info(
            f"[GradingService] Generating test for study set: {study_set_id}, "
            f"count={question_count}, types={[t.value for t in question_types]}"
        )

        await self.study_set_repo.get_by_id(study_set_id)
        cards = self._to_cards(await self.flashcard_repo.get_for_set(study_set_id))
        questions = build_test(cards, question_count, question_types, self.rng)

        return TestResponse(
            study_set_id=study_set_id,
            questions=[self._question_to_read_dto(q) for q in questions],
        )

    async def grade_submission(
        self,
        study_set_id: str,
        submission: TestSubmission,
        user_id: str,
    ) -> TestGradeResponse:
        """
        Grade submitted answers against the stored cards.

        Expected answers are rebuilt from the database, never taken from the
        client. With ``save`` set, the result goes into the user's history.

        Raises:
            StudySetNotFoundError: If the study set does not exist
            FlashcardNotFoundError: If a question refers to a card outside the set
        """
        logger.info(
            f"[GradingService] Grading {len(submission.questions)} questions for study set: {study_set_id}, "
            f"user: {user_id}"
        )

        await self.study_set_repo.get_by_id(study_set_id)
        cards_by_id = {c.id: c for c in self._to_cards(await self.flashcard_repo.get_for_set(study_set_id))}

        questions: List[Question] = []
        for submitted in submission.questions:
            card = cards_by_id.get(submitted.flashcard_id)
            if card is None:
                raise FlashcardNotFoundError(
                    f"Flashcard {submitted.flashcard_id} is not in study set {study_set_id}"
                )

            if submitted.type == QuestionType.TRUE_FALSE:
                is_pair_correct = submitted.displayed_definition == card.definition
                correct_answer = "true" if is_pair_correct else "false"
            else:
                correct_answer = card.definition

            questions.append(
                Question(
                    id=submitted.id,
                    type=submitted.type,
                    card=card,
                    correct_answer=correct_answer,
                    displayed_definition=submitted.displayed_definition,
                )
            )

        graded = grade_test(questions, submission.answers)
        answers = [
            TestAnswerDetail(
                question_id=a.question_id,
                question_type=a.question_type,
                term=a.term,
                correct_answer=a.correct_answer,
                user_answer=a.user_answer,
                is_correct=a.is_correct,
            )
            for a in graded.answers
        ]

        saved_result_id = None
        if submission.save and graded.total_questions > 0:
            saved = await self.result_repo.create(
                TestResultCreate(
                    study_set_id=study_set_id,
                    score=graded.correct_answers,
                    total_questions=graded.total_questions,
                    percentage=graded.score,
                    question_types=graded.question_type_counts,
                    answers=answers,
                ),
                user_id=user_id,
            )
            saved_result_id = saved.id

        return TestGradeResponse(
            total_questions=graded.total_questions,
            correct_answers=graded.correct_answers,
            score=graded.score,
            question_types=graded.question_type_counts,
            answers=answers,
            saved_result_id=saved_result_id,
        )

    # ═══════════════════════════════════════════════════════════════════════
    # LEARN & MATCH MODES
    # ═══════════════════════════════════════════════════════════════════════

    async def next_learn_question(self, study_set_id: str, user_id: str) -> LearnQuestionResponse:
        """
        Pick a random card the user has not mastered and build a multiple-choice question.

        Raises:
            StudySetNotFoundError: If the study set does not exist
        """
        logger.info(f"[GradingService] Next learn question for study set: {study_set_id}, user: {user_id}")

        await self.study_set_repo.get_by_id(study_set_id)
        flashcards = await self.flashcard_repo.get_for_set(study_set_id)
        progress_map = await self.progress_repo.get_for_flashcards(user_id, (f.id for f in flashcards))

        pending = [
            f for f in flashcards
            if f.id not in progress_map or progress_map[f.id].status != MasteryStatus.MASTERED
        ]
        if not pending:
            return LearnQuestionResponse(complete=True, remaining=0)

        flashcard = get_random_items(pending, 1, self.rng)[0]
        card = self._to_card(flashcard)
        options = build_multiple_choice_options(card, self._to_cards(flashcards), self.rng)

        return LearnQuestionResponse(
            complete=False,
            remaining=len(pending),
            flashcard=FlashcardRead.model_validate(flashcard),
            options=options,
            correct_index=options.index(card.definition),
        )

    async def match_board(self, study_set_id: str, pair_count: Optional[int] = None) -> MatchBoardResponse:
        """
        Lay out a match-game board.

        Raises:
            StudySetNotFoundError: If the study set does not exist
        """
        pairs = pair_count or settings.match_pair_count
        logger.info(f"[GradingService] Building match board for study set: {study_set_id}, pairs={pairs}")

        await self.study_set_repo.get_by_id(study_set_id)
        cards = self._to_cards(await self.flashcard_repo.get_for_set(study_set_id))
        tiles = build_match_board(cards, pairs, self.rng)

        return MatchBoardResponse(
            study_set_id=study_set_id,
            pair_count=len(tiles) // 2,
            tiles=[
                MatchTileRead(id=t.id, flashcard_id=t.flashcard_id, content=t.content, kind=t.kind)
                for t in tiles
            ],
        )

    # ═══════════════════════════════════════════════════════════════════════
    # DTO TRANSFORMATIONS
    # ═══════════════════════════════════════════════════════════════════════

    def _to_card(self, flashcard: Flashcard) -> Card:
        return Card(id=flashcard.id, term=flashcard.term, definition=flashcard.definition)

    def _to_cards(self, flashcards: Sequence[Flashcard]) -> List[Card]:
        return [self._to_card(f) for f in flashcards]

    def _question_to_read_dto(self, question: Question) -> QuestionRead:
        """Convert a generated Question to QuestionRead DTO."""
        return QuestionRead(
            id=question.id,
            type=question.type,
            flashcard_id=question.card.id,
            term=question.card.term,
            options=list(question.options),
            displayed_definition=question.displayed_definition,
        )


def get_grading_service(db: AsyncSession, rng: Optional[random.Random] = None) -> GradingService:
    """Factory function for GradingService."""
    return GradingService(db, rng=rng)
