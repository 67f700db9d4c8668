"""Turn raw generated text into a bounded list of question strings."""

from __future__ import annotations

import re

MAX_QUESTIONS = 10
MIN_QUESTION_LENGTH = 5

# "1." / "12)" at the start of a line
_ENUMERATION = re.compile(r"^\d+[.)]")
_ENUMERATION_PREFIX = re.compile(r"^\d+[.)]\s*")

# "-", "*", "•" and the cp1252 mojibake of "•" ("â€¢")
_BULLET_PREFIX = re.compile(r"^(?:â€¢|[-*•])\s*")


def is_question_line(line: str) -> bool:
    """A trimmed line is a candidate if it has a '?' or starts enumerated."""
    return "?" in line or bool(_ENUMERATION.match(line))


def clean_question_line(line: str) -> str:
    """Strip one enumeration prefix, then one bullet marker."""
    cleaned = _ENUMERATION_PREFIX.sub("", line, count=1)
    cleaned = _BULLET_PREFIX.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_questions(
    raw_text: str,
    *,
    max_questions: int = MAX_QUESTIONS,
    min_length: int = MIN_QUESTION_LENGTH,
) -> list[str]:
    """Extract up to *max_questions* questions from model output.

    Lines are kept when they contain a question mark or start with an
    enumeration (``1.`` / ``1)``). Bullet-only lines without either are
    dropped before any cleaning. Cleaned lines of *min_length* characters
    or fewer are discarded. Original order is preserved.
    """
    questions: list[str] = []
    for line in raw_text.split("\n"):
        if len(questions) >= max_questions:
            break
        line = line.strip()
        if not line or not is_question_line(line):
            continue
        cleaned = clean_question_line(line)
        if len(cleaned) <= min_length:
            continue
        questions.append(cleaned)
    return questions
