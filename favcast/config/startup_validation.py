"""
Startup validation for Favcast.

Checks credentials, the ffmpeg toolchain and the output directory before a
run, so a misconfigured environment fails with a clear message instead of
half way through an episode.
"""

import os
import shutil
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .settings import Settings

logger = logging.getLogger(__name__)

RULE = "=" * 60


class StartupValidationError(RuntimeError):
    """A required service is unavailable."""


class ServiceStatus(Enum):
    AVAILABLE = "available"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


STATUS_ICONS = {
    ServiceStatus.AVAILABLE: "✅",
    ServiceStatus.DEGRADED: "⚠️",
    ServiceStatus.UNAVAILABLE: "❌",
}


@dataclass
class ValidationResult:
    """Outcome of one check. Optional services only produce warnings."""
    service: str
    status: ServiceStatus
    message: str
    required: bool = True
    details: Optional[Dict[str, Any]] = None


def _available(service: str, message: str, **details) -> ValidationResult:
    return ValidationResult(service, ServiceStatus.AVAILABLE, message, details=details or None)


def _unavailable(service: str, message: str, **details) -> ValidationResult:
    return ValidationResult(service, ServiceStatus.UNAVAILABLE, message, details=details or None)


@dataclass
class StartupValidation:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    services: Dict[str, ValidationResult] = field(default_factory=dict)

    def add_result(self, result: ValidationResult):
        self.services[result.service] = result
        line = f"[{result.service}] {result.message}"

        if result.status == ServiceStatus.AVAILABLE:
            return
        if result.status == ServiceStatus.UNAVAILABLE and result.required:
            self.is_valid = False
            self.errors.append(line)
        else:
            self.warnings.append(line)

    def summary_lines(self) -> List[str]:
        lines = ["", RULE, "Favcast Startup Validation", RULE]
        for name, result in self.services.items():
            lines.append(f"{STATUS_ICONS[result.status]} {name}: {result.status.value}")
            if result.status != ServiceStatus.AVAILABLE:
                lines.append(f"   → {result.message}")
        lines.append("-" * 60)

        if self.errors:
            lines += ["", "❌ Must be fixed before a run:"] + [f"   • {e}" for e in self.errors]
        if self.warnings:
            lines += ["", "⚠️  Warnings:"] + [f"   • {w}" for w in self.warnings]

        lines += ["", "✅ Validation PASSED" if self.is_valid else "❌ Validation FAILED", RULE, ""]
        return lines

    def print_summary(self):
        print("\n".join(self.summary_lines()))


def validate_gemini_api(settings: Settings) -> ValidationResult:
    key = settings.gemini_api_key
    if not key:
        return _unavailable("Gemini API", "GEMINI_API_KEY not set. Classification and narration will not work.")
    if len(key) < 20:
        return _unavailable("Gemini API", "GEMINI_API_KEY looks invalid (too short).")
    return _available("Gemini API", f"Using {settings.text_model}", model=settings.text_model)


def validate_elevenlabs(settings: Settings) -> ValidationResult:
    if not settings.elevenlabs_api_key:
        return _unavailable("ElevenLabs", "ELEVENLABS_API_KEY not set. Episodes cannot be voiced.")
    return _available(
        "ElevenLabs",
        f"Voice {settings.default_voice_id}",
        voice_id=settings.default_voice_id,
        model_id=settings.tts_model_id,
    )


def validate_google_sheets(settings: Settings) -> ValidationResult:
    """Both the spreadsheet id and an API key are needed to read bookmarks."""
    wanted = {
        "GOOGLE_SHEETS_ID": settings.google_sheets_id,
        "GOOGLE_SHEETS_API_KEY": settings.google_sheets_api_key,
    }
    missing = [name for name, value in wanted.items() if not value]
    if missing:
        return _unavailable("Google Sheets", f"Missing {', '.join(missing)}.", missing=missing)
    return _available("Google Sheets", "Bookmark sheet configured")


def validate_ffmpeg() -> ValidationResult:
    """ffmpeg encodes MP3 output and ffprobe measures durations."""
    missing = [tool for tool in ("ffmpeg", "ffprobe") if shutil.which(tool) is None]
    if missing:
        return _unavailable(
            "ffmpeg",
            f"{', '.join(missing)} not found on PATH. MP3 concatenation and duration probing will fail.",
            missing=missing,
        )
    return _available("ffmpeg", "ffmpeg and ffprobe found")


def validate_output_dir(settings: Settings) -> ValidationResult:
    path = Path(settings.output_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return _unavailable("Output directory", f"Cannot create {path}: {e}")

    if not os.access(path, os.W_OK):
        return _unavailable("Output directory", f"{path} is not writable")
    return _available("Output directory", f"Writing episodes to {path}")


def run_startup_validation(
    settings: Settings,
    require_audio: bool = True,
    raise_on_failure: bool = False,
    print_summary: bool = True,
) -> StartupValidation:
    """
    Run every check against ``settings``.

    ElevenLabs and ffmpeg only matter for runs that produce audio; with
    ``require_audio=False`` their failures are reported as warnings.
    """
    validation = StartupValidation()

    for result in (validate_gemini_api(settings), validate_google_sheets(settings)):
        validation.add_result(result)
    for result in (validate_elevenlabs(settings), validate_ffmpeg()):
        result.required = require_audio
        validation.add_result(result)
    validation.add_result(validate_output_dir(settings))

    if print_summary:
        validation.print_summary()

    if not validation.is_valid:
        reason = "; ".join(validation.errors)
        logger.error(f"Startup validation failed: {reason}")
        if raise_on_failure:
            raise StartupValidationError(reason)

    return validation
