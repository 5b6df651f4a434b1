"""
Configuration settings for Favcast
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..utils.retry import RetryPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google Gemini (classification, summaries, narration)
    gemini_api_key: str = Field(default="")
    text_model: str = Field(default="gemini-2.0-flash")

    # ElevenLabs
    elevenlabs_api_key: str = Field(default="")
    default_voice_id: str = Field(default="8EkOjt4xTPGMclNlh1pk")
    jingle_voice_id: str = Field(default="GKDaBI8TKSBJVhsCLD6n")
    tts_model_id: str = Field(default="eleven_multilingual_v2")

    # Google Sheets (bookmark feed written by IFTTT)
    google_sheets_id: str = Field(default="")
    google_sheets_api_key: str = Field(default="")

    # Persistence
    database_url: str = Field(default="sqlite:///favcast.db")

    # Podcast
    podcast_name: str = Field(default="Weekly Favorites")
    lookback_days: int = Field(default=7)

    # Budgets
    max_text_length: int = Field(default=4000)  # speech API characters per request
    narration_max_chars: int = Field(default=4000)  # summary text per narration prompt
    narration_chunk_size: int = Field(default=5)
    min_bucket_size: int = Field(default=3)
    scrape_concurrency: int = Field(default=5)
    pipeline_timeout_seconds: float = Field(default=0)

    # Audio
    audio_bitrate: str = Field(default="192k")
    silence_between_seconds: float = Field(default=0)

    # Paths
    output_dir: str = Field(default="output")
    logs_dir: str = Field(default="logs")
    assets_dir: str = Field(default="assets")

    log_level: str = Field(default="INFO")

    @property
    def jingles_dir(self) -> Path:
        return Path(self.assets_dir) / "jingles"

    @property
    def intro_jingle_path(self) -> Path:
        return self.jingles_dir / "podcast_intro_jingle.mp3"

    @property
    def outro_jingle_path(self) -> Path:
        return self.jingles_dir / "podcast_outro_jingle.mp3"


class ContentCategory(str, Enum):
    TECH = "TECH"
    OTHER = "OTHER"


class TechSubCategory(str, Enum):
    PROGRAMMING_LANGUAGE = "PROGRAMMING_LANGUAGE"
    FRAMEWORK = "FRAMEWORK"
    AI_ML = "AI_ML"
    TOOLS = "TOOLS"
    WEB_DEV = "WEB_DEV"
    OTHER_TECH = "OTHER_TECH"


class OtherSubCategory(str, Enum):
    NEWS = "NEWS"
    ENTERTAINMENT = "ENTERTAINMENT"
    LIFESTYLE = "LIFESTYLE"
    HOBBY = "HOBBY"
    OTHER_GENERAL = "OTHER_GENERAL"


SUBCATEGORIES = {
    ContentCategory.TECH: [s.value for s in TechSubCategory],
    ContentCategory.OTHER: [s.value for s in OtherSubCategory],
}

FALLBACK_SUBCATEGORY = {
    ContentCategory.TECH: TechSubCategory.OTHER_TECH.value,
    ContentCategory.OTHER: OtherSubCategory.OTHER_GENERAL.value,
}

SUBCATEGORY_NAMES = {
    TechSubCategory.PROGRAMMING_LANGUAGE.value: "Programming Languages",
    TechSubCategory.FRAMEWORK.value: "Frameworks",
    TechSubCategory.AI_ML.value: "AI and Machine Learning",
    TechSubCategory.TOOLS.value: "Developer Tools",
    TechSubCategory.WEB_DEV.value: "Web Development",
    TechSubCategory.OTHER_TECH.value: "Other Tech Topics",
    OtherSubCategory.NEWS.value: "News",
    OtherSubCategory.ENTERTAINMENT.value: "Entertainment",
    OtherSubCategory.LIFESTYLE.value: "Lifestyle",
    OtherSubCategory.HOBBY.value: "Hobbies",
    OtherSubCategory.OTHER_GENERAL.value: "Other Topics",
}

SUBCATEGORY_DESCRIPTIONS = {
    TechSubCategory.PROGRAMMING_LANGUAGE.value: "programming languages (JavaScript, Python, Rust, ...)",
    TechSubCategory.FRAMEWORK.value: "frameworks (React, Vue, Laravel, Django, ...)",
    TechSubCategory.AI_ML.value: "AI and machine learning (ChatGPT, models, LLMs, ...)",
    TechSubCategory.TOOLS.value: "developer tools (Git, Docker, VSCode, CI/CD, ...)",
    TechSubCategory.WEB_DEV.value: "web development in general (HTML, CSS, frontend, backend, ...)",
    TechSubCategory.OTHER_TECH.value: "any other technical topic",
    OtherSubCategory.NEWS.value: "news and current affairs",
    OtherSubCategory.ENTERTAINMENT.value: "entertainment (movies, music, games, ...)",
    OtherSubCategory.LIFESTYLE.value: "lifestyle (health, food, work, ...)",
    OtherSubCategory.HOBBY.value: "hobbies (travel, reading, sports, ...)",
    OtherSubCategory.OTHER_GENERAL.value: "any other general topic",
}

SUMMARY_LENGTH = {
    ContentCategory.TECH: 500,
    ContentCategory.OTHER: 300,
}

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
}

# Column layout of the bookmark sheet
SHEET_SETTINGS = {
    "range": "A:F",
    "date_col": 0,
    "account_col": 1,
    "content_link_col": 2,
    "tweet_link_col": 3,
    "content_col": 4,
}

# Attempt/delay budget per external call site
RETRY_POLICIES = {
    "sheets": RetryPolicy(attempts=3, delay_ms=1000),
    "scrape": RetryPolicy(attempts=2, delay_ms=2000),
    "classify": RetryPolicy(attempts=2, delay_ms=1000),
    "summarize": RetryPolicy(attempts=2, delay_ms=1000),
    "narrate": RetryPolicy(attempts=2, delay_ms=1000),
    "trend": RetryPolicy(attempts=2, delay_ms=1000),
    "synthesize": RetryPolicy(attempts=2, delay_ms=2000),
}


def fallback_subcategory(category: ContentCategory) -> str:
    return FALLBACK_SUBCATEGORY[ContentCategory(category)]


def normalize_subcategory(category: ContentCategory, sub_category: Optional[str]) -> str:
    """Return ``sub_category`` when it belongs to ``category``'s taxonomy, else its fallback."""
    category = ContentCategory(category)
    if sub_category:
        candidate = str(getattr(sub_category, "value", sub_category)).strip().upper()
        if candidate in SUBCATEGORIES[category]:
            return candidate
    return FALLBACK_SUBCATEGORY[category]


def subcategory_label(sub_category: str) -> str:
    return SUBCATEGORY_NAMES.get(sub_category, sub_category.replace("_", " ").title())


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()
