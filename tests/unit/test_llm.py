"""
Unit tests for the Gemini text generator and JSON extraction.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from favcast.intelligence.llm import (
    EmptyResponseError,
    GeminiTextGenerator,
    MalformedResponseError,
    extract_json,
)


@pytest.mark.unit
class TestExtractJson:
    """Tests for extract_json."""

    def test_plain_object(self):
        assert extract_json('{"category": "TECH"}') == {"category": "TECH"}

    def test_fenced_object(self):
        assert extract_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_object_with_chatter(self):
        assert extract_json('Sure! {"a": 1} Hope that helps.') == {"a": 1}

    def test_no_object(self):
        with pytest.raises(MalformedResponseError):
            extract_json("TECH")

    def test_invalid_json(self):
        with pytest.raises(MalformedResponseError):
            extract_json("{category: TECH}")


@pytest.mark.unit
class TestGeminiTextGenerator:
    """Tests for GeminiTextGenerator with a mocked client."""

    def make_generator(self, text):
        generator = GeminiTextGenerator(api_key="test-key", model="gemini-test")
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=text))
        generator._client = client
        return generator, client

    @pytest.mark.asyncio
    async def test_generate_returns_stripped_text(self):
        generator, client = self.make_generator("  Hello there.  ")

        text = await generator.generate("prompt", system_instruction="system", temperature=0.2)

        assert text == "Hello there."
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == "prompt"
        assert kwargs["config"].temperature == 0.2
        assert kwargs["config"].system_instruction == "system"

    @pytest.mark.asyncio
    async def test_empty_response_raises(self):
        generator, _ = self.make_generator(None)

        with pytest.raises(EmptyResponseError):
            await generator.generate("prompt")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        with pytest.raises(ValueError):
            GeminiTextGenerator().client
