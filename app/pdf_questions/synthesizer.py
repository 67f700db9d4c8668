"""Question Synthesizer - extracted text → raw generated questions.

Third stage of the pipeline. Only the first ``max_chars`` characters of
the text are sent to the model; anything beyond is never used.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional

from app.llm_clients import LLMUsage, OpenAIClient
from app.pdf_questions.agent import Agent
from app.pdf_questions.errors import GenerationTooShortError
from app.pdf_questions.parser import (
    MAX_QUESTIONS,
    MIN_QUESTION_LENGTH,
    parse_questions,
)
from app.pdf_questions.prompts import (
    QUESTION_GENERATOR_INSTRUCTIONS,
    build_question_prompt,
)

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 4000
MIN_GENERATION_LENGTH = 20


def question_generator_agent(model: Optional[str] = None) -> Agent:
    """The tool-less persona used for question synthesis."""
    return Agent(
        name="question-generator",
        instructions=QUESTION_GENERATOR_INSTRUCTIONS,
        model=model,
    )


class QuestionSynthesizer:
    """Generates study questions from extracted text with a streamed LLM call."""

    def __init__(
        self,
        client: OpenAIClient,
        *,
        agent: Optional[Agent] = None,
        max_questions: int = MAX_QUESTIONS,
        min_question_length: int = MIN_QUESTION_LENGTH,
        min_generation_length: int = MIN_GENERATION_LENGTH,
    ) -> None:
        self._client = client
        self._agent = agent or question_generator_agent()
        self._max_questions = max_questions
        self._min_question_length = min_question_length
        self._min_generation_length = min_generation_length

    def synthesize(
        self,
        text: str,
        max_chars: int = MAX_INPUT_CHARS,
        *,
        on_usage: Optional[Callable[[LLMUsage], None]] = None,
    ) -> str:
        """Stream generated questions for *text* and return the raw output.

        Chunks are concatenated in the order they arrive. Token usage, when
        the server reports it, is passed to *on_usage*.

        Raises:
            GenerationTooShortError: If the output is not longer than
                ``min_generation_length`` characters.
            LLMError: On transport failure.
        """
        excerpt = text[:max_chars]
        logger.info(
            "Generating questions from %d of %d characters",
            len(excerpt), len(text),
        )
        prompt = build_question_prompt(excerpt, self._max_questions)

        def record_usage(usage: LLMUsage) -> None:
            _log_usage(usage)
            if on_usage is not None:
                on_usage(usage)

        chunks: list[str] = []
        for chunk in self._agent.stream(
            prompt, client=self._client, on_usage=record_usage,
        ):
            chunks.append(chunk)
        raw = "".join(chunks)

        if len(raw) <= self._min_generation_length:
            raise GenerationTooShortError(len(raw), self._min_generation_length)

        logger.info("Generated %d characters in %d chunks", len(raw), len(chunks))
        return raw

    def generate(self, text: str, max_chars: int = MAX_INPUT_CHARS) -> list[str]:
        """Synthesize and parse in one call."""
        return parse_questions(
            self.synthesize(text, max_chars),
            max_questions=self._max_questions,
            min_length=self._min_question_length,
        )


def _log_usage(usage: LLMUsage) -> None:
    logger.debug(
        "Question generation usage: %d input / %d output tokens (%s)",
        usage.input_tokens, usage.output_tokens, usage.model,
    )
