"""
Question generation and grading for the study modes.

- Test mode: a mix of multiple-choice, true/false and written questions.
- Learn mode: one multiple-choice question for a card still being learned.
- Match mode: shuffled term and definition tiles to pair up.
"""

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from app.grading.normalize import compare_answers
from app.grading.shuffle import get_random_items, get_random_items_excluding, shuffle

# Wrong options shown next to the right one in multiple-choice questions
DISTRACTOR_COUNT = 3


class QuestionType(str, Enum):
    """Question formats available in test mode."""
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    WRITTEN = "written"


@dataclass(frozen=True)
class Card:
    """The parts of a flashcard needed to build questions."""
    id: str
    term: str
    definition: str


@dataclass(frozen=True)
class Question:
    """One generated test question."""
    id: str
    type: QuestionType
    card: Card
    correct_answer: str
    options: Tuple[str, ...] = ()
    displayed_definition: Optional[str] = None
    is_pair_correct: Optional[bool] = None


@dataclass(frozen=True)
class GradedAnswer:
    """Outcome of one answered question."""
    question_id: str
    question_type: QuestionType
    term: str
    correct_answer: str
    user_answer: str
    is_correct: bool


@dataclass(frozen=True)
class GradedTest:
    """Outcome of a whole test."""
    total_questions: int
    correct_answers: int
    score: int
    answers: Tuple[GradedAnswer, ...] = field(default_factory=tuple)

    @property
    def question_type_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for answer in self.answers:
            counts[answer.question_type.value] = counts.get(answer.question_type.value, 0) + 1
        return counts


@dataclass(frozen=True)
class MatchTile:
    """One tile of the match game board."""
    id: str
    flashcard_id: str
    content: str
    kind: str  # "term" or "definition"


def build_multiple_choice_options(
    card: Card,
    cards: Sequence[Card],
    rng: Optional[random.Random] = None,
) -> List[str]:
    """The correct definition plus up to 3 other definitions, shuffled."""
    distractors = get_random_items_excluding(
        [c.definition for c in cards],
        DISTRACTOR_COUNT,
        [card.definition],
        rng,
    )
    # Duplicate definitions across cards would otherwise repeat an option
    unique_distractors = list(dict.fromkeys(distractors))
    return shuffle([card.definition, *unique_distractors], rng)


def build_test(
    cards: Sequence[Card],
    question_count: int,
    question_types: Sequence[QuestionType],
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """
    Generate test questions from a study set's cards.

    Picks ``question_count`` random cards (or all of them if there are fewer)
    and cycles through ``question_types`` in order.

    Raises:
        ValueError: If no question type is given
    """
    if not question_types:
        raise ValueError("At least one question type is required")

    rand = rng or random
    selected = get_random_items(cards, question_count, rng)
    questions: List[Question] = []

    for index, card in enumerate(selected):
        question_type = question_types[index % len(question_types)]
        question_id = f"q-{index}"

        if question_type == QuestionType.MULTIPLE_CHOICE:
            questions.append(
                Question(
                    id=question_id,
                    type=question_type,
                    card=card,
                    correct_answer=card.definition,
                    options=tuple(build_multiple_choice_options(card, cards, rng)),
                )
            )
        elif question_type == QuestionType.TRUE_FALSE:
            if rand.random() > 0.5:
                displayed, is_pair_correct = card.definition, True
            else:
                wrong = get_random_items_excluding(
                    [c.definition for c in cards],
                    1,
                    [card.definition],
                    rng,
                )
                # A set where every definition is the same has no wrong pair
                displayed = wrong[0] if wrong else card.definition
                is_pair_correct = not wrong
            questions.append(
                Question(
                    id=question_id,
                    type=question_type,
                    card=card,
                    correct_answer="true" if is_pair_correct else "false",
                    displayed_definition=displayed,
                    is_pair_correct=is_pair_correct,
                )
            )
        else:
            questions.append(
                Question(
                    id=question_id,
                    type=question_type,
                    card=card,
                    correct_answer=card.definition,
                )
            )

    return questions


def is_answer_correct(question_type: QuestionType, user_answer: str, correct_answer: str) -> bool:
    """Written answers are graded leniently, the others case-insensitively."""
    if question_type == QuestionType.WRITTEN:
        return compare_answers(user_answer, correct_answer)
    return user_answer.lower() == correct_answer.lower()


def grade_test(questions: Sequence[Question], answers: Mapping[str, str]) -> GradedTest:
    """
    Grade a test.

    Args:
        questions: The questions that were asked
        answers: User answers keyed by question ID; missing means unanswered

    Returns:
        GradedTest with a 0-100 score rounded half up
    """
    graded = []
    for question in questions:
        user_answer = answers.get(question.id) or ""
        graded.append(
            GradedAnswer(
                question_id=question.id,
                question_type=question.type,
                term=question.card.term,
                correct_answer=question.correct_answer,
                user_answer=user_answer,
                is_correct=is_answer_correct(question.type, user_answer, question.correct_answer),
            )
        )

    correct_count = sum(1 for answer in graded if answer.is_correct)
    total = len(questions)
    score = math.floor(correct_count / total * 100 + 0.5) if total else 0

    return GradedTest(
        total_questions=total,
        correct_answers=correct_count,
        score=score,
        answers=tuple(graded),
    )


def build_match_board(
    cards: Sequence[Card],
    pair_count: int,
    rng: Optional[random.Random] = None,
) -> List[MatchTile]:
    """Pick up to ``pair_count`` cards and lay out their terms and definitions shuffled."""
    selected = get_random_items(cards, pair_count, rng)
    tiles: List[MatchTile] = []

    for card in selected:
        tiles.append(MatchTile(id=f"term-{card.id}", flashcard_id=card.id, content=card.term, kind="term"))
        tiles.append(
            MatchTile(id=f"def-{card.id}", flashcard_id=card.id, content=card.definition, kind="definition")
        )

    return shuffle(tiles, rng)
