"""ElevenLabs speech synthesis and the chunked script-to-audio driver."""

import uuid
from pathlib import Path
from typing import Callable, Optional, Protocol
import logging

import httpx

from ..config.settings import RETRY_POLICIES, VOICE_SETTINGS
from ..models.content import AudioArtifact
from ..utils.retry import RetryPolicy
from ..utils.text_chunker import chunk_text
from .audio_stitcher import AudioConcatenator, probe_duration


logger = logging.getLogger(__name__)

DurationProbe = Callable[[str], float]


class SpeechSynthesisError(Exception):
    """The speech API did not return audio."""


class VoiceQuotaError(SpeechSynthesisError):
    """The account ran out of characters or is not authorized."""


class EmptyScriptError(ValueError):
    """Nothing to synthesize."""


class SpeechClient(Protocol):
    async def synthesize(self, text: str, voice_id: str) -> bytes:
        ...


class ElevenLabsSpeechClient:
    """Text in, MP3 bytes out."""

    BASE_URL = "https://api.elevenlabs.io/v1"

    def __init__(
        self,
        api_key: str,
        model_id: str = "eleven_multilingual_v2",
        voice_settings: Optional[dict] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model_id = model_id
        self.voice_settings = voice_settings or dict(VOICE_SETTINGS)
        self.timeout = timeout
        self.transport = transport

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        url = f"{self.BASE_URL}/text-to-speech/{voice_id}"

        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
        }

        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": self.voice_settings,
        }

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            response = await client.post(url, json=payload, headers=headers)

        if response.status_code == 200:
            if not response.content:
                raise SpeechSynthesisError("Speech API returned no audio")
            return response.content

        detail = response.text[:200]
        if response.status_code == 401 or "quota" in detail.lower():
            raise VoiceQuotaError(f"TTS request rejected: {response.status_code} - {detail}")
        raise SpeechSynthesisError(f"TTS request failed: {response.status_code} - {detail}")


class SpeechSynthesisDriver:
    """
    Synthesizes a whole script into one audio file.

    Scripts longer than ``max_text_length`` are split with chunk_text, each
    chunk is synthesized to its own temporary file next to the output, and the
    pieces are concatenated in order. Any chunk that exhausts its retries
    aborts the call and no output file is produced.
    """

    def __init__(
        self,
        client: SpeechClient,
        concatenator: AudioConcatenator,
        max_text_length: int = 4000,
        retry_policy: RetryPolicy = RETRY_POLICIES["synthesize"],
        duration_probe: DurationProbe = probe_duration,
    ):
        self.client = client
        self.concatenator = concatenator
        self.max_text_length = max_text_length
        self.retry_policy = retry_policy
        self.duration_probe = duration_probe

    async def _synthesize_text(self, text: str, voice_id: str, site: str) -> bytes:
        async def call() -> bytes:
            return await self.client.synthesize(text, voice_id)

        return await self.retry_policy.run(call, self.retry_policy.observer(site))

    @staticmethod
    def temp_chunk_path(output: Path, index: int) -> Path:
        return output.parent / f"temp_chunk_{index}_{uuid.uuid4().hex[:8]}_{output.name}"

    async def synthesize(self, script: str, voice_id: str, output_path: str) -> AudioArtifact:
        if not script or not script.strip():
            raise EmptyScriptError("Script is empty")

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        if len(script) <= self.max_text_length:
            logger.info(f"Synthesizing {len(script)} characters in one request")
            audio = await self._synthesize_text(script, voice_id, "Speech synthesis")
            output.write_bytes(audio)
        else:
            await self._synthesize_chunked(script, voice_id, output)

        duration = self.duration_probe(str(output))
        logger.info(f"Audio saved: {output} ({duration:.1f}s)")
        return AudioArtifact(path=str(output), duration_seconds=duration)

    async def _synthesize_chunked(self, script: str, voice_id: str, output: Path) -> None:
        chunks = chunk_text(script, self.max_text_length)
        logger.info(f"Script is {len(script)} characters, synthesizing in {len(chunks)} chunks")

        temp_files: list[Path] = []
        try:
            for i, chunk in enumerate(chunks):
                audio = await self._synthesize_text(
                    chunk, voice_id, f"Speech synthesis chunk {i + 1}/{len(chunks)}"
                )
                path = self.temp_chunk_path(output, i)
                path.write_bytes(audio)
                temp_files.append(path)
                logger.info(f"Chunk {i + 1}/{len(chunks)} synthesized")

            self.concatenator.concatenate([str(p) for p in temp_files], str(output))
        finally:
            for path in temp_files:
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    logger.warning(f"Could not remove temporary file {path}: {e}")
