"""
Pytest configuration and fixtures for Favcast tests.
"""

import os
import sys
import wave
import pytest
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep tests away from real credentials
os.environ['TESTING'] = '1'


# ============================================================
# Settings / Persistence Fixtures
# ============================================================

@pytest.fixture
def settings(tmp_path):
    """Settings isolated in a temp directory, ignoring any .env file."""
    from favcast.config.settings import Settings

    return Settings(
        _env_file=None,
        gemini_api_key="g" * 40,
        elevenlabs_api_key="test-elevenlabs-key",
        google_sheets_id="sheet-id",
        google_sheets_api_key="sheet-key",
        database_url=f"sqlite:///{tmp_path / 'favcast.db'}",
        podcast_name="Test Favorites",
        output_dir=str(tmp_path / "output"),
        logs_dir=str(tmp_path / "logs"),
        assets_dir=str(tmp_path / "assets"),
    )


@pytest.fixture
def repository(tmp_path):
    """A fresh SQLite repository for each test."""
    from favcast.storage.database import Repository

    repo = Repository(f"sqlite:///{tmp_path / 'test.db'}")
    yield repo
    repo.close()


@pytest.fixture
def no_retry():
    """One retry, no waiting."""
    from favcast.utils.retry import RetryPolicy

    return RetryPolicy(attempts=1, delay_ms=0)


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def make_item():
    """Factory for bookmark items."""
    from favcast.models.content import BookmarkItem

    def _make(index: int = 1, author: str = "alice", text: Optional[str] = None,
              enrichment_link: Optional[str] = None, posted_at: Optional[datetime] = None):
        link = f"https://x.com/{author}/status/{index}"
        return BookmarkItem(
            external_id=link,
            posted_at=posted_at or datetime(2025, 3, 17, 22, 35),
            author=author,
            source_link=link,
            enrichment_link=enrichment_link,
            raw_text=text if text is not None else f"Post number {index} about something",
        )

    return _make


@pytest.fixture
def make_summarized(make_item):
    """Factory for summarized items."""
    from favcast.config.settings import ContentCategory
    from favcast.models.content import SummarizedItem

    def _make(index: int = 1, category=ContentCategory.TECH, sub_category: Optional[str] = "AI_ML",
              author: str = "alice", summary: Optional[str] = None):
        return SummarizedItem(
            item=make_item(index, author=author),
            category=category,
            sub_category=sub_category,
            summary=summary or f"Summary of item {index}.",
            target_summary_length=500 if category == ContentCategory.TECH else 300,
        )

    return _make


# ============================================================
# Audio Fixtures
# ============================================================

def wav_bytes(duration_ms: int = 200, frame_rate: int = 24000) -> bytes:
    """16-bit mono silence as a complete WAV file."""
    import io

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(frame_rate)
        wav.writeframes(bytes(int(frame_rate * duration_ms / 1000) * 2))
    return buffer.getvalue()


@pytest.fixture
def make_wav(tmp_path):
    """Write a WAV file of the given length and return its path."""

    def _make(name: str, duration_ms: int = 200) -> Path:
        path = tmp_path / name
        path.write_bytes(wav_bytes(duration_ms))
        return path

    return _make


# ============================================================
# Fake External Services
# ============================================================

class FakeTextGenerator:
    """
    Stand-in for the Gemini black-box.
    ``responder(prompt, system_instruction)`` returns text or raises.
    """

    def __init__(self, responder: Optional[Callable[[str, Optional[str]], str]] = None):
        self.responder = responder or (lambda prompt, system: "Generated text.")
        self.calls: list[str] = []

    async def generate(self, prompt, system_instruction=None, temperature=0.7):
        self.calls.append(prompt)
        return self.responder(prompt, system_instruction)


class FakeSpeechClient:
    """Returns WAV audio; requests for which ``fail_on(text)`` is true always fail."""

    def __init__(self, fail_on: Optional[Callable[[str], bool]] = None, duration_ms: int = 200):
        self.fail_on = fail_on or (lambda text: False)
        self.duration_ms = duration_ms
        self.calls: list[str] = []

    async def synthesize(self, text, voice_id):
        self.calls.append(text)
        if self.fail_on(text):
            raise ConnectionError("speech service unreachable")
        return wav_bytes(self.duration_ms)


@pytest.fixture
def generator_factory():
    """The FakeTextGenerator class, for tests that need a custom responder."""
    return FakeTextGenerator


@pytest.fixture
def speech_factory():
    return FakeSpeechClient


@pytest.fixture
def fake_generator():
    return FakeTextGenerator()


@pytest.fixture
def fake_speech():
    return FakeSpeechClient()
