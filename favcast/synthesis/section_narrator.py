"""Turns a bucket of summarized items into spoken narration, a few items per call."""

import logging

from ..config.settings import RETRY_POLICIES
from ..intelligence.llm import TextGenerator
from ..models.content import SummarizedItem
from ..utils.retry import RetryPolicy
from ..utils.text_chunker import chunk_text
from .text_cleanup import clean_narration


logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Some of the stories in this part could not be prepared for narration."
CHUNK_SEPARATOR = "\n\n"


class SectionNarrator:
    """
    Narrates one bucket.

    Items are split into chunks of ``chunk_size``; each chunk is one generation
    call. A chunk whose call keeps failing is replaced by a placeholder
    sentence and the remaining chunks are still narrated.
    """

    SYSTEM_PROMPT = (
        "You are the host of a weekly podcast about the posts your listener saved. "
        "You write natural, spoken English meant to be read aloud."
    )

    NARRATION_PROMPT = """Write the narration for part {part} of {total} of the "{label}" segment.
{position}

Posts in this part:
{items}

RULES:
- Plain spoken prose. No speaker labels, no stage directions, no markdown.
- Do not describe posts as "this tweet", "this post" or "this link". Weave the items together by theme.
- Always name the concrete people, products, companies and services involved.
- Do not greet the listener and do not sign off.
- Never use closing phrases such as "in conclusion", "to sum up", "finally" or "today's topics were". Other segments follow this one.
- Target length: about {length} characters."""

    POSITION_HINTS = {
        "only": "This part covers the whole segment. Open directly with the first story.",
        "first": "This is the opening part of the segment. Open directly with the first story.",
        "middle": "This continues the segment. Pick up naturally from the previous part.",
        "last": "This is the last part of the segment. Keep the same tone as the earlier parts.",
    }

    def __init__(
        self,
        generator: TextGenerator,
        chunk_size: int = 5,
        max_chars: int = 4000,
        retry_policy: RetryPolicy = RETRY_POLICIES["narrate"],
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.generator = generator
        self.chunk_size = chunk_size
        self.max_chars = max_chars
        self.retry_policy = retry_policy

    def chunk_items(self, items: list[SummarizedItem]) -> list[list[SummarizedItem]]:
        return [items[i:i + self.chunk_size] for i in range(0, len(items), self.chunk_size)]

    @staticmethod
    def _position(index: int, total: int) -> str:
        if total == 1:
            return "only"
        if index == 0:
            return "first"
        if index == total - 1:
            return "last"
        return "middle"

    @staticmethod
    def format_items(items: list[SummarizedItem]) -> str:
        lines = []
        for item in items:
            author = f"@{item.author.lstrip('@')}" if item.author else "unknown"
            lines.append(f"- From {author}: {item.summary}")
        return "\n".join(lines)

    def build_prompts(self, chunk: list[SummarizedItem], label: str, index: int, total: int) -> list[str]:
        """One prompt per narration budget slice of the chunk's item text."""
        position = self.POSITION_HINTS[self._position(index, total)]
        length = sum(item.target_summary_length for item in chunk)
        return [
            self.NARRATION_PROMPT.format(
                part=index + 1,
                total=total,
                label=label,
                position=position,
                items=piece,
                length=length,
            )
            for piece in chunk_text(self.format_items(chunk), self.max_chars)
        ]

    async def _narrate_chunk(self, chunk: list[SummarizedItem], label: str, index: int, total: int) -> str:
        texts = []
        for prompt in self.build_prompts(chunk, label, index, total):

            async def call(prompt: str = prompt) -> str:
                return await self.generator.generate(
                    prompt, system_instruction=self.SYSTEM_PROMPT, temperature=0.7
                )

            texts.append(
                await self.retry_policy.run(call, self.retry_policy.observer(f"Narration of {label} part {index + 1}"))
            )
        return CHUNK_SEPARATOR.join(clean_narration(t) for t in texts)

    async def narrate(self, items: list[SummarizedItem], label: str) -> str:
        if not items:
            return ""

        chunks = self.chunk_items(items)
        logger.info(f"Narrating {label}: {len(items)} items in {len(chunks)} chunks")

        parts = []
        for index, chunk in enumerate(chunks):
            try:
                parts.append(await self._narrate_chunk(chunk, label, index, len(chunks)))
            except Exception as e:
                logger.error(f"Narration of {label} chunk {index + 1}/{len(chunks)} failed, using placeholder: {e}")
                parts.append(PLACEHOLDER_TEXT)

        narration = clean_narration(CHUNK_SEPARATOR.join(parts))
        return narration or PLACEHOLDER_TEXT
