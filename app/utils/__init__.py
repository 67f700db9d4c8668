"""Shared utilities for the pdf-questions application."""

from app.utils.logging_config import setup_logging

__all__ = [
    "setup_logging",
]
