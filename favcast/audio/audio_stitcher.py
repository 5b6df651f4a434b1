"""
Audio concatenation with pydub.
Also handles the cached silence clips, jingle framing and duration probing.
"""

import shutil
from pathlib import Path
from typing import Optional
import logging

from pydub import AudioSegment
from pydub.utils import mediainfo


logger = logging.getLogger(__name__)


class NothingToConcatenateError(ValueError):
    """Concatenation was asked to join zero inputs."""


class ConcatenationError(RuntimeError):
    """The audio backend failed to join or export the inputs."""


def probe_duration(path: str) -> float:
    """Duration in seconds; 0.0 when the file cannot be inspected."""
    try:
        return float(mediainfo(str(path))["duration"])
    except Exception as e:
        logger.debug(f"ffprobe could not read {path}: {e}")

    try:
        return AudioSegment.from_file(str(path)).duration_seconds
    except Exception as e:
        logger.warning(f"Could not determine duration of {path}: {e}")
        return 0.0


class AudioConcatenator:
    """
    Joins audio files in order.

    A single input is copied as is. Two or more are decoded, optionally
    separated by silence, and re-encoded (MP3 at ``bitrate`` unless the output
    is a .wav file).
    """

    def __init__(self, cache_dir: str = "output/cache", bitrate: str = "192k"):
        self.cache_dir = Path(cache_dir)
        self.bitrate = bitrate

    def silence_file(self, seconds: float) -> Path:
        """Silence clip of the given length, created once and reused."""
        duration_ms = int(round(seconds * 1000))
        path = self.cache_dir / f"silence_{duration_ms}ms.wav"
        if not path.exists():
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            AudioSegment.silent(duration=duration_ms).export(str(path), format="wav")
            logger.info(f"Created silence clip: {path}")
        return path

    def _export(self, audio: AudioSegment, output_path: Path) -> None:
        fmt = output_path.suffix.lstrip(".").lower() or "mp3"
        if fmt == "wav":
            audio.export(str(output_path), format="wav")
        elif fmt == "mp3":
            audio.export(str(output_path), format="mp3", codec="libmp3lame", bitrate=self.bitrate)
        else:
            audio.export(str(output_path), format=fmt, bitrate=self.bitrate)

    def concatenate(
        self,
        inputs: list[str],
        output_path: str,
        silence_between_seconds: Optional[float] = None,
    ) -> str:
        if not inputs:
            raise NothingToConcatenateError("Nothing to concatenate")

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        if len(inputs) == 1:
            source = Path(inputs[0])
            if source.resolve() != output.resolve():
                shutil.copyfile(source, output)
            logger.info(f"Copied single input {source} to {output}")
            return str(output)

        sequence = [str(p) for p in inputs]
        if silence_between_seconds and silence_between_seconds > 0:
            silence = str(self.silence_file(silence_between_seconds))
            interleaved = []
            for i, path in enumerate(sequence):
                if i > 0:
                    interleaved.append(silence)
                interleaved.append(path)
            sequence = interleaved

        logger.info(f"Concatenating {len(inputs)} files into {output}")

        try:
            combined = AudioSegment.empty()
            for path in sequence:
                combined += AudioSegment.from_file(path)
            self._export(combined, output)
        except Exception as e:
            if output.exists():
                output.unlink()
            raise ConcatenationError(f"Failed to concatenate into {output}: {e}") from e

        logger.info(f"Concatenated audio saved: {output} ({combined.duration_seconds:.1f}s)")
        return str(output)


def add_jingles(
    concatenator: AudioConcatenator,
    episode_path: str,
    intro_path: str,
    outro_path: str,
    output_path: Optional[str] = None,
    silence_between_seconds: Optional[float] = None,
) -> str:
    """Frame an episode with the intro and outro jingles, optionally with silence around it."""
    for path in (intro_path, outro_path, episode_path):
        if not Path(path).exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

    if output_path is None:
        episode = Path(episode_path)
        output_path = str(episode.with_name(f"{episode.stem}_with_jingles{episode.suffix}"))

    return concatenator.concatenate(
        [str(intro_path), str(episode_path), str(outro_path)],
        output_path,
        silence_between_seconds,
    )


async def get_or_create_jingle(
    speech_client,
    name: str,
    text: str,
    voice_id: str,
    jingles_dir: str,
    force: bool = False,
) -> Path:
    """Synthesize a jingle into ``jingles_dir`` unless it already exists."""
    path = Path(jingles_dir) / f"{name}.mp3"
    if path.exists() and not force:
        logger.info(f"Using cached jingle: {path}")
        return path

    audio = await speech_client.synthesize(text, voice_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(audio)
    logger.info(f"Generated jingle: {path}")
    return path
