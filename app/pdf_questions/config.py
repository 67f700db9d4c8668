"""Configuration for the PDF → questions pipeline.

Settings are loaded once at process start (``load_settings``) and passed
explicitly to every component. Components never read the environment.
"""

from __future__ import annotations

from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.pdf_questions.errors import ConfigurationError

OcrMode = Literal["vision", "text", "auto"]


class PipelineSettings(BaseSettings):
    """Pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(extra="ignore")

    # Credentials
    openai_api_key: Optional[str] = None

    # Models
    question_model: str = "gpt-4.1-mini"
    ocr_model: str = "gpt-4o"

    # Question synthesis / parsing
    max_input_chars: int = Field(default=4000, gt=0)
    max_questions: int = Field(default=10, gt=0)
    min_question_length: int = Field(default=5, ge=0)
    min_generation_length: int = Field(default=20, ge=0)
    max_tool_rounds: int = Field(default=3, ge=0)

    # Text extraction
    ocr_mode: OcrMode = "vision"
    ocr_dpi: int = Field(default=150, gt=0)
    max_pages: Optional[int] = Field(default=None, gt=0)

    # HTTP (None = no timeout, the requests default)
    download_timeout: Optional[float] = None
    llm_timeout: Optional[float] = 300

    def require_api_key(self) -> str:
        """Return the OpenAI API key or raise ``ConfigurationError``."""
        if not self.openai_api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is required. "
                'Example: export OPENAI_API_KEY="your-api-key-here"'
            )
        return self.openai_api_key


def load_settings(**overrides) -> PipelineSettings:
    """Load ``.env`` (if present) and build settings from the environment.

    Keyword overrides take precedence over environment values.
    """
    load_dotenv()
    return PipelineSettings(**overrides)
