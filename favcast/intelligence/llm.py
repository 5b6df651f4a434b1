"""Gemini text generation used for classification, summaries and narration."""

import json
import os
import re
from typing import Optional, Protocol
import logging

from google import genai
from google.genai import types


logger = logging.getLogger(__name__)


class EmptyResponseError(Exception):
    """The model returned no text."""


class MalformedResponseError(Exception):
    """The model returned text that could not be parsed."""


class TextGenerator(Protocol):
    """Text in, text out. Raises on failure."""

    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        ...


class GeminiTextGenerator:
    """
    Thin async wrapper around the Gemini API.
    Every call either returns non-empty stripped text or raises.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.0-flash"):
        self.api_key = api_key
        self.model = model
        self._client: Optional[genai.Client] = None

    @property
    def client(self) -> genai.Client:
        """Lazy load the Gemini client."""
        if self._client is None:
            api_key = self.api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
            if not api_key:
                raise ValueError("GEMINI_API_KEY or GOOGLE_API_KEY not set")
            self._client = genai.Client(api_key=api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=temperature,
            ),
        )
        text = (response.text or "").strip()
        if not text:
            raise EmptyResponseError("Model returned an empty response")
        return text


def extract_json(text: str) -> dict:
    """
    Pull the first JSON object out of a model response.
    Tolerates markdown fences and chatter around the object.
    """
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]

    match = re.search(r"\{[\s\S]*\}", text)
    if not match:
        raise MalformedResponseError("No JSON object in response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError("Response JSON is not an object")
    return data
