"""Data models for the PDF → questions pipeline.

Covers the values passed between stages (downloaded bytes, extracted
text), the run state machine, and the terminal result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from app.llm_clients import LLMUsage

# ---------------------------------------------------------------------------
# Stage values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PdfBytes:
    """Raw bytes of a downloaded PDF."""

    content: bytes
    source_url: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ExtractedText:
    """Text extracted from a PDF, page by page.

    Attributes:
        text: All page texts joined with blank lines.
        page_count: Number of pages processed.
        pages: Per-page text in page order.
    """

    text: str
    page_count: int
    pages: tuple[str, ...] = ()

    @property
    def character_count(self) -> int:
        return len(self.text)

    def is_blank(self) -> bool:
        return not self.text.strip()


# ---------------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------------


class PipelineState(str, Enum):
    """Stage a pipeline run is in. ``DONE`` and ``FAILED`` are terminal."""

    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class StepResult:
    """Outcome of a single pipeline stage, kept for traceability."""

    step_name: str
    success: bool
    elapsed_s: float = 0.0
    detail: str = ""
    error: str | None = None


# ---------------------------------------------------------------------------
# Pipeline-level result
# ---------------------------------------------------------------------------


@dataclass
class PipelineResult:
    """Terminal value of a pipeline run.

    ``success`` is False only when question synthesis failed. A run whose
    synthesis succeeded but produced no parseable questions is still a
    success with an empty ``questions`` list. ``usage`` holds the token
    counts of this run's generation call when the server reported them.
    """

    questions: list[str] = field(default_factory=list)
    success: bool = False
    state: PipelineState = PipelineState.DONE
    error: str | None = None
    steps: list[StepResult] = field(default_factory=list)
    usage: LLMUsage | None = None

    def to_dict(self) -> dict[str, Any]:
        """External output shape: ``{"questions": [...], "success": bool}``."""
        return {"questions": list(self.questions), "success": self.success}
