"""Summaries sized by category, with a truncated-text fallback."""

from typing import Optional
import logging

from ..config.settings import ContentCategory, RETRY_POLICIES, SUMMARY_LENGTH
from ..models.content import ClassifiedItem, ScrapedContent, SummarizedItem
from ..utils.retry import RetryPolicy
from .llm import TextGenerator


logger = logging.getLogger(__name__)

MAX_SUMMARY_INPUT_CHARS = 8000
FALLBACK_PREFIX_CHARS = 200
FALLBACK_MARKER = " ... (summary unavailable)"
EMPTY_SUMMARY = "There was no content to summarize."


def fallback_summary(text: str) -> str:
    """First 200 characters plus a marker; short text is returned as is."""
    if len(text) > FALLBACK_PREFIX_CHARS:
        return text[:FALLBACK_PREFIX_CHARS] + FALLBACK_MARKER
    return text


def build_summary_text(item: ClassifiedItem, scraped: Optional[ScrapedContent] = None) -> str:
    text = item.item.raw_text
    if scraped and scraped.content:
        title = f"Title: {scraped.title}\n\n" if scraped.title else ""
        site = f"Site: {scraped.site_name}\n" if scraped.site_name else ""
        text = f"{item.item.raw_text}\n\n{title}{site}{scraped.content}"
    return text


class Summarizer:
    """Summarizes bookmark content; never raises."""

    SYSTEM_PROMPT = "You write faithful, compact summaries that keep the important points."

    SUMMARY_PROMPT = """Summarize the following content. It is about {topic}.
{focus}

Content:
\"\"\"
{content}
\"\"\"

{detail}

Target length: about {length} characters."""

    def __init__(
        self,
        generator: TextGenerator,
        retry_policy: RetryPolicy = RETRY_POLICIES["summarize"],
    ):
        self.generator = generator
        self.retry_policy = retry_policy

    async def summarize(self, text: str, category: ContentCategory) -> str:
        if not text or not text.strip():
            return EMPTY_SUMMARY

        category = ContentCategory(category)
        is_tech = category == ContentCategory.TECH
        content = text[:MAX_SUMMARY_INPUT_CHARS] + "..." if len(text) > MAX_SUMMARY_INPUT_CHARS else text

        prompt = self.SUMMARY_PROMPT.format(
            topic="technology" if is_tech else "a general, non-technical subject",
            focus=(
                "Keep the technical details while extracting the key points."
                if is_tech
                else "Extract the key points."
            ),
            content=content,
            detail=(
                "Preserve concepts, programming languages, frameworks, tools and techniques by name."
                if is_tech
                else "Keep it short and plain."
            ),
            length=SUMMARY_LENGTH[category],
        )

        async def call() -> str:
            return await self.generator.generate(
                prompt, system_instruction=self.SYSTEM_PROMPT, temperature=0.3
            )

        try:
            return await self.retry_policy.run(call, self.retry_policy.observer("Summarization"))
        except Exception as e:
            logger.error(f"Summarization failed, falling back to truncated text: {e}")
            return fallback_summary(text)

    async def summarize_item(
        self,
        item: ClassifiedItem,
        scraped: Optional[ScrapedContent] = None,
    ) -> SummarizedItem:
        if scraped and scraped.content:
            logger.info(f"Summarizing post and linked page: {item.item.source_link}")
        else:
            logger.info(f"Summarizing post text only: {item.item.source_link}")

        summary = await self.summarize(build_summary_text(item, scraped), item.category)

        return SummarizedItem(
            item=item.item,
            category=item.category,
            sub_category=item.sub_category,
            summary=summary,
            target_summary_length=SUMMARY_LENGTH[ContentCategory(item.category)],
        )
