"""
Main Pipeline - bookmarks in, podcast episode out.

Usage:
    python -m favcast.pipeline process-all --limit 20 --with-jingles
    python -m favcast.pipeline merge-audio a.mp3 b.mp3 --output merged.mp3 --silence 1
    python -m favcast.pipeline validate
"""

import asyncio
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv

from .audio.audio_stitcher import AudioConcatenator, add_jingles, get_or_create_jingle
from .audio.tts_generator import ElevenLabsSpeechClient, SpeechSynthesisDriver
from .config.settings import RETRY_POLICIES, Settings, VOICE_SETTINGS, get_settings
from .config.startup_validation import run_startup_validation
from .ingestion.scraper import WebScraper
from .ingestion.sheets import SheetsClient
from .intelligence.classifier import ContentClassifier
from .intelligence.llm import GeminiTextGenerator, TextGenerator
from .intelligence.summarizer import Summarizer
from .models.content import BookmarkItem, PodcastEpisode, ScrapedContent, SummarizedItem
from .storage.database import Repository, open_repository
from .synthesis.grouper import ContentGrouper
from .synthesis.script_assembler import ScriptAssembler, ScriptBuilder, TrendSummarizer
from .synthesis.section_narrator import SectionNarrator
from .utils.dates import file_stamp, format_display_date, get_date_range
from .utils.logger import setup_logging


logger = logging.getLogger(__name__)

JINGLE_TEXTS = {
    "podcast_intro_jingle": "{podcast_name}. Your saved posts, read back to you.",
    "podcast_outro_jingle": "That was {podcast_name}. Until next time.",
}


class EpisodePipeline:
    """
    Runs one episode end to end.

    Every collaborator can be injected; anything left out is built from
    ``settings``. ``stage`` names the step currently running so failures can
    be reported with context.
    """

    def __init__(
        self,
        settings: Settings,
        repository: Repository,
        sheets: Optional[SheetsClient] = None,
        scraper: Optional[WebScraper] = None,
        classifier: Optional[ContentClassifier] = None,
        summarizer: Optional[Summarizer] = None,
        script_builder: Optional[ScriptBuilder] = None,
        synthesizer: Optional[SpeechSynthesisDriver] = None,
        concatenator: Optional[AudioConcatenator] = None,
        generator: Optional[TextGenerator] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.repository = repository
        self.clock = clock
        self.stage = "init"

        self.output_dir = Path(settings.output_dir)

        self._generator = generator
        self.sheets = sheets or SheetsClient(settings.google_sheets_id, settings.google_sheets_api_key)
        self.scraper = scraper or WebScraper(concurrency=settings.scrape_concurrency)
        self.classifier = classifier or ContentClassifier(self.generator)
        self.summarizer = summarizer or Summarizer(self.generator)
        self.script_builder = script_builder or ScriptBuilder(
            grouper=ContentGrouper(min_bucket_size=settings.min_bucket_size),
            narrator=SectionNarrator(
                self.generator,
                chunk_size=settings.narration_chunk_size,
                max_chars=settings.narration_max_chars,
            ),
            trend_summarizer=TrendSummarizer(self.generator),
            assembler=ScriptAssembler(settings.podcast_name),
        )
        self.concatenator = concatenator or AudioConcatenator(
            cache_dir=str(self.output_dir / "cache"),
            bitrate=settings.audio_bitrate,
        )
        self.synthesizer = synthesizer or SpeechSynthesisDriver(
            ElevenLabsSpeechClient(
                settings.elevenlabs_api_key,
                model_id=settings.tts_model_id,
                voice_settings=dict(VOICE_SETTINGS),
            ),
            self.concatenator,
            max_text_length=settings.max_text_length,
        )

    @property
    def generator(self) -> TextGenerator:
        if self._generator is None:
            self._generator = GeminiTextGenerator(
                api_key=self.settings.gemini_api_key or None,
                model=self.settings.text_model,
            )
        return self._generator

    def _persist(self, description: str, operation: Callable, *args, **kwargs):
        """Run a persistence call; failures are logged and return None."""
        try:
            return operation(*args, **kwargs)
        except Exception:
            logger.exception(f"Could not {description}")
            return None

    async def collect_items(self, start: datetime, end: datetime) -> list[BookmarkItem]:
        """Fetch the window from the sheet and keep what has not been narrated yet."""
        fetched = await self.sheets.fetch_recent_bookmarks(start, end)
        for item in fetched:
            self._persist(f"record bookmark {item.source_link}", self.repository.save_item, item)

        pending = self._persist("load unprocessed bookmarks", self.repository.get_unprocessed_items, start, end)
        if pending is None:
            return fetched
        return pending

    async def process_items(
        self,
        items: list[BookmarkItem],
        scraped: dict[str, ScrapedContent],
    ) -> list[SummarizedItem]:
        summarized = []
        for index, item in enumerate(items, start=1):
            logger.info(f"[{index}/{len(items)}] Processing {item.source_link}")
            page = scraped.get(item.enrichment_link) if item.enrichment_link else None
            try:
                classified = await self.classifier.classify_item(item, page)
                item_id = self._persist(
                    f"save bookmark {item.source_link}",
                    self.repository.save_item,
                    item,
                    classified.category.value,
                    classified.sub_category,
                )
                summary = await self.summarizer.summarize_item(classified, page)
            except Exception:
                logger.exception(f"Skipping {item.source_link}")
                continue

            item_id = item_id if item_id is not None else item.db_id
            if item_id is not None:
                self._persist(f"mark bookmark {item_id} processed", self.repository.mark_processed, item_id)
            summarized.append(summary)

        return summarized

    async def run(
        self,
        max_items: Optional[int] = None,
        voice_id: Optional[str] = None,
        with_jingles: bool = False,
    ) -> Optional[PodcastEpisode]:
        now = self.clock()
        start, end = get_date_range(self.settings.lookback_days, now)

        self.stage = "fetch"
        items = await self.collect_items(start, end)
        if max_items is not None:
            items = items[:max_items]
        if not items:
            logger.info("No new bookmarks to process")
            return None
        logger.info(f"Processing {len(items)} bookmarks")

        self.stage = "scrape"
        links = [item.enrichment_link for item in items if item.enrichment_link]
        scraped = await self.scraper.scrape_many(links) if links else {}

        self.stage = "classify"
        summarized = await self.process_items(items, scraped)
        if not summarized:
            logger.warning(f"None of the {len(items)} bookmarks could be processed")
            return None

        self.stage = "script"
        script = await self.script_builder.build(summarized)

        stamp = file_stamp(now)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        script_path = self.output_dir / f"podcast_script_{stamp}.txt"
        script_path.write_text(script, encoding="utf-8")
        logger.info(f"Script saved: {script_path}")

        self.stage = "synthesize"
        artifact = await self.synthesizer.synthesize(
            script,
            voice_id or self.settings.default_voice_id,
            str(self.output_dir / f"podcast_{stamp}.mp3"),
        )
        final_path = artifact.path
        duration = artifact.duration_seconds

        if with_jingles:
            self.stage = "jingles"
            try:
                final_path = add_jingles(
                    self.concatenator,
                    artifact.path,
                    str(self.settings.intro_jingle_path),
                    str(self.settings.outro_jingle_path),
                    silence_between_seconds=self.settings.silence_between_seconds,
                )
                duration = self.synthesizer.duration_probe(final_path)
            except (FileNotFoundError, RuntimeError) as e:
                logger.error(f"Jingles not added, keeping plain episode: {e}")

        self.stage = "save"
        episode = PodcastEpisode(
            title=f"{self.settings.podcast_name} - {format_display_date(now)}",
            final_artifact_path=final_path,
            duration_seconds=duration,
            included_item_ids=[s.external_id for s in summarized],
            script_path=str(script_path),
            generated_at=now,
        )
        self._persist("save episode", self.repository.save_episode, episode)

        self.stage = "done"
        logger.info(
            f"Episode ready: {episode.final_artifact_path} "
            f"({len(episode.included_item_ids)} items, {episode.duration_seconds:.1f}s)"
        )
        return episode


async def run_pipeline(
    settings: Settings,
    max_items: Optional[int] = None,
    voice_id: Optional[str] = None,
    with_jingles: bool = False,
) -> Optional[PodcastEpisode]:
    """
    Run the complete pipeline with a persistence handle scoped to the run.
    Fatal failures are logged with the stage name and re-raised.
    """
    with open_repository(settings.database_url) as repository:
        setup_logging(settings.logs_dir, settings.log_level, repository=repository)
        pipeline = EpisodePipeline(settings, repository)

        run = pipeline.run(max_items=max_items, voice_id=voice_id, with_jingles=with_jingles)
        try:
            if settings.pipeline_timeout_seconds > 0:
                return await asyncio.wait_for(run, timeout=settings.pipeline_timeout_seconds)
            return await run
        except asyncio.TimeoutError:
            logger.error(
                f"Pipeline timed out after {settings.pipeline_timeout_seconds}s "
                f"during stage '{pipeline.stage}'"
            )
            raise
        except Exception:
            logger.exception(f"Pipeline failed during stage '{pipeline.stage}'")
            raise
        finally:
            # the handler holds the repository that is about to be closed
            setup_logging(settings.logs_dir, settings.log_level)


def print_episode(episode: Optional[PodcastEpisode]) -> None:
    print("\n" + "=" * 60)
    if episode is None:
        print("NOTHING TO PROCESS")
        print("=" * 60 + "\n")
        return
    print("PIPELINE COMPLETE")
    print("=" * 60)
    print(f"Episode: {episode.title}")
    print(f"Items: {len(episode.included_item_ids)}")
    print(f"Duration: ~{episode.duration_seconds / 60:.1f} minutes")
    print(f"Audio: {episode.final_artifact_path}")
    print(f"Script: {episode.script_path}")
    print("=" * 60 + "\n")


async def generate_jingles(settings: Settings, force: bool = False) -> list[Path]:
    client = ElevenLabsSpeechClient(settings.elevenlabs_api_key, model_id=settings.tts_model_id)
    paths = []
    for name, text in JINGLE_TEXTS.items():

        async def create(name: str = name, text: str = text) -> Path:
            return await get_or_create_jingle(
                client,
                name,
                text.format(podcast_name=settings.podcast_name),
                settings.jingle_voice_id,
                str(settings.jingles_dir),
                force=force,
            )

        policy = RETRY_POLICIES["synthesize"]
        paths.append(await policy.run(create, policy.observer(f"Jingle {name}")))
    return paths


async def generate_audio_file(
    settings: Settings,
    text_path: str,
    output_path: Optional[str] = None,
    voice_id: Optional[str] = None,
):
    script = Path(text_path).read_text(encoding="utf-8")
    output_path = output_path or str(Path(text_path).with_suffix(".mp3"))
    driver = SpeechSynthesisDriver(
        ElevenLabsSpeechClient(settings.elevenlabs_api_key, model_id=settings.tts_model_id),
        AudioConcatenator(str(Path(settings.output_dir) / "cache"), settings.audio_bitrate),
        max_text_length=settings.max_text_length,
    )
    return await driver.synthesize(script, voice_id or settings.default_voice_id, output_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="favcast", description="Favcast - podcast episodes from saved posts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process-all", help="Process recent bookmarks into an episode")
    process.add_argument("--limit", type=int, default=None, help="Maximum number of bookmarks")
    process.add_argument(
        "--with-jingles",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Frame the episode with intro/outro jingles",
    )
    process.add_argument("--voice", default=None, help="ElevenLabs voice id")
    process.add_argument("--output-dir", default=None, help="Directory for scripts and audio")

    jingles = subparsers.add_parser("generate-jingles", help="Create the intro and outro jingles")
    jingles.add_argument("--force", action="store_true", help="Regenerate existing jingles")

    merge = subparsers.add_parser("merge-audio", help="Concatenate audio files")
    merge.add_argument("files", nargs="+", help="Input files, in order")
    merge.add_argument("--output", required=True, help="Output file")
    merge.add_argument(
        "--silence",
        type=float,
        default=None,
        help="Seconds of silence between files (default: SILENCE_BETWEEN_SECONDS)",
    )

    frame = subparsers.add_parser("add-jingles", help="Add intro/outro jingles to an audio file")
    frame.add_argument("file", help="Episode audio file")
    frame.add_argument("--output", default=None, help="Output file")

    audio = subparsers.add_parser("generate-audio", help="Synthesize a text file")
    audio.add_argument("file", help="Script text file")
    audio.add_argument("--output", default=None, help="Output audio file")
    audio.add_argument("--voice", default=None, help="ElevenLabs voice id")

    subparsers.add_parser("validate", help="Check configuration and external tools")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if getattr(args, "output_dir", None):
        settings = settings.model_copy(update={"output_dir": args.output_dir})
    setup_logging(settings.logs_dir, settings.log_level)

    try:
        if args.command == "validate":
            validation = run_startup_validation(settings, print_summary=True)
            return 0 if validation.is_valid else 1

        if args.command == "process-all":
            validation = run_startup_validation(settings, print_summary=False)
            if not validation.is_valid:
                return 1
            episode = asyncio.run(
                run_pipeline(
                    settings,
                    max_items=args.limit,
                    voice_id=args.voice,
                    with_jingles=args.with_jingles,
                )
            )
            print_episode(episode)

        elif args.command == "generate-jingles":
            for path in asyncio.run(generate_jingles(settings, force=args.force)):
                print(f"Jingle: {path}")

        elif args.command == "merge-audio":
            concatenator = AudioConcatenator(str(Path(settings.output_dir) / "cache"), settings.audio_bitrate)
            silence = args.silence if args.silence is not None else settings.silence_between_seconds
            print(f"Merged: {concatenator.concatenate(args.files, args.output, silence)}")

        elif args.command == "add-jingles":
            concatenator = AudioConcatenator(str(Path(settings.output_dir) / "cache"), settings.audio_bitrate)
            path = add_jingles(
                concatenator,
                args.file,
                str(settings.intro_jingle_path),
                str(settings.outro_jingle_path),
                args.output,
                settings.silence_between_seconds,
            )
            print(f"With jingles: {path}")

        elif args.command == "generate-audio":
            artifact = asyncio.run(generate_audio_file(settings, args.file, args.output, args.voice))
            print(f"Audio: {artifact.path} ({artifact.duration_seconds:.1f}s)")

    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
