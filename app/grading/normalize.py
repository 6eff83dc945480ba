"""
Lenient comparison of written answers.

Answers are compared after normalization (case, whitespace, punctuation and
accents are ignored). Longer answers also get partial credit when most of the
expected key words are present.
"""

import re
import unicodedata
from typing import List

# Share of key words that must appear in a longer answer
MATCH_THRESHOLD = 0.8

# Answers with at most this many words must match exactly
EXACT_MATCH_MAX_WORDS = 2

# Words longer than this count as key words
KEY_WORD_MIN_LENGTH = 2

# Edit distance is only reported when both answers fit in this many characters
DISTANCE_MAX_LENGTH = 200

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[.,!?;:'\"()\[\]{}]")


def normalize_answer(text: str) -> str:
    """
    Normalize a string for comparison.

    Lowercases, trims, collapses whitespace, strips common punctuation and
    folds accented letters to their base letter ("Café!" -> "cafe").
    """
    normalized = text.lower().strip()
    normalized = _WHITESPACE.sub(" ", normalized)
    normalized = _PUNCTUATION.sub("", normalized)
    decomposed = unicodedata.normalize("NFD", normalized)
    return "".join(ch for ch in decomposed if not "\u0300" <= ch <= "\u036f")


def compare_answers(user_answer: str, correct_answer: str) -> bool:
    """
    Decide whether a written answer should be graded correct.

    Exact match after normalization is always correct. For expected answers
    of more than two words, the answer is also correct when at least 80% of
    the expected key words (longer than two characters) appear anywhere in it.
    Word order and repetition are ignored.
    """
    normalized_user = normalize_answer(user_answer)
    normalized_correct = normalize_answer(correct_answer)

    if normalized_user == normalized_correct:
        return True

    correct_words = normalized_correct.split(" ")
    if len(correct_words) <= EXACT_MATCH_MAX_WORDS:
        return False

    key_words = _key_words(correct_words)
    if not key_words:
        return False

    user_words = set(normalized_user.split(" "))
    matched = [word for word in key_words if word in user_words]
    return len(matched) / len(key_words) >= MATCH_THRESHOLD


def _key_words(words: List[str]) -> List[str]:
    return [word for word in words if len(word) > KEY_WORD_MIN_LENGTH]


def levenshtein_distance(a: str, b: str) -> int:
    """Number of single-character edits needed to turn ``a`` into ``b``."""
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], current[j - 1], previous[j]) + 1)
        previous = current

    return previous[-1]
