"""
CSV import/export for study set flashcards.

Format: one ``term,definition`` pair per line, optional header row,
double-quoted fields may contain commas and doubled quotes.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

logger = logging.getLogger(__name__)

CSV_HEADER = "term,definition"
MAX_FIELD_LENGTH = 5000

_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class FlashcardInput:
    """A term/definition pair produced by parsing."""
    term: str
    definition: str


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one CSV document."""
    success: bool
    flashcards: Tuple[FlashcardInput, ...] = field(default_factory=tuple)
    errors: Tuple[str, ...] = field(default_factory=tuple)


def parse_csv(content: str) -> ParseResult:
    """
    Parse CSV content into flashcard data.

    Blank lines are dropped before numbering, so ``Line N`` in an error
    refers to the N-th non-blank line (header included). A line that fails
    validation is reported and skipped; it never aborts the whole parse.

    Args:
        content: Raw CSV text with ``\\n`` or ``\\r\\n`` line endings

    Returns:
        ParseResult with valid flashcards and per-line errors, both in line order
    """
    lines = [line for line in _LINE_SPLIT.split(content) if line.strip()]
    flashcards: List[FlashcardInput] = []
    errors: List[str] = []

    first_line = lines[0].lower() if lines else ""
    has_header = "term" in first_line or "definition" in first_line
    start_index = 1 if has_header else 0

    for index in range(start_index, len(lines)):
        line_number = index + 1
        line = lines[index].strip()

        try:
            fields = _parse_line(line)

            if len(fields) < 2:
                errors.append(f"Line {line_number}: Expected at least 2 columns (term, definition)")
                continue

            term = fields[0].strip()
            definition = fields[1].strip()

            if not term:
                errors.append(f"Line {line_number}: Term is empty")
                continue

            if not definition:
                errors.append(f"Line {line_number}: Definition is empty")
                continue

            if len(term) > MAX_FIELD_LENGTH:
                errors.append(f"Line {line_number}: Term exceeds {MAX_FIELD_LENGTH} characters")
                continue

            if len(definition) > MAX_FIELD_LENGTH:
                errors.append(f"Line {line_number}: Definition exceeds {MAX_FIELD_LENGTH} characters")
                continue

            flashcards.append(FlashcardInput(term=term, definition=definition))
        except Exception as e:
            errors.append(f"Line {line_number}: {str(e) or 'Parse error'}")

    logger.debug(f"[CSVParser] Parsed {len(flashcards)} flashcards with {len(errors)} errors")

    return ParseResult(
        success=len(flashcards) > 0,
        flashcards=tuple(flashcards),
        errors=tuple(errors),
    )


def _parse_line(line: str) -> List[str]:
    """Split a single CSV line into fields, honouring double quotes."""
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]

        if char == '"':
            if in_quotes and line[i + 1:i + 2] == '"':
                # Escaped quote
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def generate_csv(flashcards: Iterable[FlashcardInput]) -> str:
    """
    Generate CSV content from flashcards.

    The output always starts with the ``term,definition`` header and
    parses back to the same pairs with :func:`parse_csv`.
    """
    rows = [
        f"{_escape_value(card.term)},{_escape_value(card.definition)}"
        for card in flashcards
    ]
    return "\n".join([CSV_HEADER, *rows])


def _escape_value(value: str) -> str:
    """Quote a value if it contains a comma, a quote or a newline."""
    if "," in value or '"' in value or "\n" in value:
        escaped = value.replace('"', '""')
        return f'"{escaped}"'
    return value
