"""Builds the full episode script from narrated sections."""

import logging

from ..config.settings import ContentCategory, RETRY_POLICIES
from ..intelligence.llm import TextGenerator
from ..models.content import NarratedSection, SummarizedItem
from ..utils.retry import RetryPolicy
from .grouper import ContentGrouper
from .section_narrator import SectionNarrator


logger = logging.getLogger(__name__)

OPENING_TEMPLATE = (
    "Welcome to {podcast_name}. This is your roundup of the posts you saved recently, "
    "starting with technology and then everything else."
)
CLOSING_TEMPLATE = (
    "That wraps up this edition of {podcast_name}. Thanks for listening, "
    "and see you next time."
)
NO_ITEMS_TEXT = "There were no notable items this period."
TECH_INTRO = "Let's start with technology. You saved {count} tech posts."
OTHER_INTRO = "Now for everything else. You saved {count} posts on other topics."
SECTION_HEADING = "{label}, {count} {noun}."


def counts_sentence(tech_count: int, other_count: int) -> str:
    total = tech_count + other_count
    return (
        f"In total you saved {total} posts: {tech_count} about technology "
        f"and {other_count} on other topics."
    )


class TrendSummarizer:
    """One generation call describing the period's statistics and trends."""

    MAX_SAMPLES = 10

    TREND_PROMPT = """Write one to three short spoken paragraphs about trends in the posts saved this period.

Statistics:
- Tech posts: {tech_count}
- Other posts: {other_count}
- Distinct accounts: {author_count}

Sample summaries:
{samples}

Do not greet or sign off. Plain spoken prose, no markdown, no lists."""

    def __init__(
        self,
        generator: TextGenerator,
        retry_policy: RetryPolicy = RETRY_POLICIES["trend"],
    ):
        self.generator = generator
        self.retry_policy = retry_policy

    async def summarize(self, items: list[SummarizedItem]) -> str:
        tech_count = sum(1 for i in items if i.category == ContentCategory.TECH)
        other_count = len(items) - tech_count
        if not items:
            return ""

        authors = {i.author.lstrip("@").lower() for i in items if i.author}
        samples = "\n".join(f"- {i.summary}" for i in items[: self.MAX_SAMPLES])

        prompt = self.TREND_PROMPT.format(
            tech_count=tech_count,
            other_count=other_count,
            author_count=len(authors),
            samples=samples,
        )

        async def call() -> str:
            return await self.generator.generate(prompt, temperature=0.5)

        try:
            text = await self.retry_policy.run(call, self.retry_policy.observer("Trend summary"))
            return text.strip() or counts_sentence(tech_count, other_count)
        except Exception as e:
            logger.error(f"Trend summary failed, using counts: {e}")
            return counts_sentence(tech_count, other_count)


class ScriptAssembler:
    """
    Lays out the script: opening, tech sections, other sections, trends, closing.
    Opening and closing are fixed templates.
    """

    def __init__(self, podcast_name: str):
        self.podcast_name = podcast_name

    @property
    def opening(self) -> str:
        return OPENING_TEMPLATE.format(podcast_name=self.podcast_name)

    @property
    def closing(self) -> str:
        return CLOSING_TEMPLATE.format(podcast_name=self.podcast_name)

    @staticmethod
    def _section_block(section: NarratedSection) -> str:
        heading = SECTION_HEADING.format(
            label=section.bucket_label,
            count=section.item_count,
            noun="post" if section.item_count == 1 else "posts",
        )
        return f"{heading}\n\n{section.narration_text.strip()}"

    def assemble(
        self,
        tech_sections: list[NarratedSection],
        other_sections: list[NarratedSection],
        tech_count: int,
        other_count: int,
        trend_text: str = "",
    ) -> str:
        blocks = [self.opening]

        tech_sections = [s for s in tech_sections if s.narration_text.strip()]
        other_sections = [s for s in other_sections if s.narration_text.strip()]

        if tech_sections:
            blocks.append(TECH_INTRO.format(count=tech_count))
            blocks.extend(self._section_block(s) for s in tech_sections)
        if other_sections:
            blocks.append(OTHER_INTRO.format(count=other_count))
            blocks.extend(self._section_block(s) for s in other_sections)

        if not tech_sections and not other_sections:
            blocks.append(NO_ITEMS_TEXT)
        elif trend_text.strip():
            blocks.append(trend_text.strip())

        blocks.append(self.closing)
        return "\n\n".join(blocks)

    def fallback_script(self, tech_count: int, other_count: int) -> str:
        middle = counts_sentence(tech_count, other_count) if tech_count + other_count else NO_ITEMS_TEXT
        return "\n\n".join([self.opening, middle, self.closing])


class ScriptBuilder:
    """Groups, narrates and assembles a script for a list of summarized items."""

    def __init__(
        self,
        grouper: ContentGrouper,
        narrator: SectionNarrator,
        trend_summarizer: TrendSummarizer,
        assembler: ScriptAssembler,
    ):
        self.grouper = grouper
        self.narrator = narrator
        self.trend_summarizer = trend_summarizer
        self.assembler = assembler

    async def _narrate_category(self, grouped, category: ContentCategory) -> list[NarratedSection]:
        sections = []
        for bucket in self.grouper.ordered_buckets(grouped, category):
            text = await self.narrator.narrate(bucket.items, bucket.label)
            sections.append(
                NarratedSection(
                    bucket_label=bucket.label,
                    item_count=bucket.count,
                    narration_text=text,
                )
            )
        return sections

    async def build(self, items: list[SummarizedItem]) -> str:
        tech_count = sum(1 for i in items if i.category == ContentCategory.TECH)
        other_count = len(items) - tech_count

        try:
            grouped = self.grouper.group(items)
            tech_sections = await self._narrate_category(grouped, ContentCategory.TECH)
            other_sections = await self._narrate_category(grouped, ContentCategory.OTHER)
            trend_text = await self.trend_summarizer.summarize(items)

            script = self.assembler.assemble(
                tech_sections, other_sections, tech_count, other_count, trend_text
            )
        except Exception:
            logger.exception(
                f"Script assembly failed for {tech_count} tech / {other_count} other items, "
                "using fallback script"
            )
            return self.assembler.fallback_script(tech_count, other_count)

        logger.info(f"Script assembled: {len(script)} characters")
        return script
