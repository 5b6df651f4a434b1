"""LLM-backed classification and summarization."""

from .llm import (
    GeminiTextGenerator,
    TextGenerator,
    EmptyResponseError,
    MalformedResponseError,
    extract_json,
)
from .classifier import ContentClassifier
from .summarizer import Summarizer

__all__ = [
    "GeminiTextGenerator",
    "TextGenerator",
    "EmptyResponseError",
    "MalformedResponseError",
    "extract_json",
    "ContentClassifier",
    "Summarizer",
]
