"""Two-level classification: tech vs. everything else, then a subcategory."""

from typing import Optional
import logging

from ..config.settings import (
    ContentCategory,
    RETRY_POLICIES,
    SUBCATEGORIES,
    SUBCATEGORY_DESCRIPTIONS,
    fallback_subcategory,
    normalize_subcategory,
)
from ..models.content import (
    BookmarkItem,
    ClassificationResult,
    ClassifiedItem,
    ScrapedContent,
    SubCategoryResult,
)
from ..utils.retry import RetryPolicy
from .llm import MalformedResponseError, TextGenerator, extract_json


logger = logging.getLogger(__name__)

MAX_CLASSIFY_CHARS = 4000
MAX_ENRICHMENT_CHARS = 1000


def _confidence(value, default: float = 0.5) -> float:
    try:
        return float(value) or default
    except (TypeError, ValueError):
        return default


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def build_classification_text(item: BookmarkItem, scraped: Optional[ScrapedContent] = None) -> str:
    """Post text plus the title and the head of the linked page, when we have one."""
    text = item.raw_text
    if scraped and scraped.content:
        title = f"Title: {scraped.title}\n" if scraped.title else ""
        text = f"{item.raw_text}\n\n{title}{_truncate(scraped.content, MAX_ENRICHMENT_CHARS)}"
    return text


class ContentClassifier:
    """
    Classifies bookmark text with the LLM.
    Never raises: empty, malformed or failed responses fall back to defaults.
    """

    SYSTEM_PROMPT = "You are a text classifier. You separate technical content from everything else."
    SUBCATEGORY_SYSTEM_PROMPT = "You are a text classifier. You pick the best subcategory for a piece of content."

    CLASSIFY_PROMPT = """Decide whether the following content is technical or not.
Technical content covers programming, software development, the IT industry, computer science,
hardware, networking, security, artificial intelligence, data science, web services,
mobile apps and cloud technology.

Content:
\"\"\"
{content}
\"\"\"

Answer format: {{"category": "TECH" or "OTHER", "confidence": number between 0 and 1, "reasoning": "short explanation"}}"""

    SUBCATEGORY_PROMPT = """Pick the subcategory for the following content.
It has already been classified as {category_name} content.

Content:
\"\"\"
{content}
\"\"\"

Choose exactly one of: {choices}

{descriptions}

Answer format: {{"subCategory": "CHOSEN_VALUE", "confidence": number between 0 and 1, "reasoning": "short explanation"}}"""

    def __init__(
        self,
        generator: TextGenerator,
        retry_policy: RetryPolicy = RETRY_POLICIES["classify"],
    ):
        self.generator = generator
        self.retry_policy = retry_policy

    async def classify(self, text: str) -> ClassificationResult:
        if not text or not text.strip():
            return ClassificationResult(
                category=ContentCategory.OTHER,
                confidence=1.0,
                reasoning="Empty content",
            )

        prompt = self.CLASSIFY_PROMPT.format(content=_truncate(text, MAX_CLASSIFY_CHARS))

        async def call() -> ClassificationResult:
            response = await self.generator.generate(
                prompt, system_instruction=self.SYSTEM_PROMPT, temperature=0.2
            )
            try:
                data = extract_json(response)
            except MalformedResponseError:
                # a bare answer still tells us something
                return ClassificationResult(
                    category=ContentCategory.TECH if "TECH" in response else ContentCategory.OTHER,
                    confidence=0.6,
                    reasoning=f"Unparseable response: {response[:200]}",
                )
            category = (
                ContentCategory.TECH
                if str(data.get("category", "")).strip().upper() == "TECH"
                else ContentCategory.OTHER
            )
            return ClassificationResult(
                category=category,
                confidence=_confidence(data.get("confidence")),
                reasoning=data.get("reasoning"),
            )

        try:
            return await self.retry_policy.run(call, self.retry_policy.observer("Classification"))
        except Exception as e:
            logger.error(f"Classification failed, using default category: {e}")
            return ClassificationResult(
                category=ContentCategory.OTHER,
                confidence=0.5,
                reasoning="Classification failed; default category used",
            )

    async def classify_subcategory(self, text: str, category: ContentCategory) -> SubCategoryResult:
        category = ContentCategory(category)
        fallback = fallback_subcategory(category)

        if not text or not text.strip():
            return SubCategoryResult(sub_category=fallback, confidence=1.0, reasoning="Empty content")

        choices = SUBCATEGORIES[category]
        prompt = self.SUBCATEGORY_PROMPT.format(
            category_name="technical" if category == ContentCategory.TECH else "general",
            content=_truncate(text, MAX_CLASSIFY_CHARS),
            choices=", ".join(choices),
            descriptions="\n".join(f"{c}: {SUBCATEGORY_DESCRIPTIONS[c]}" for c in choices),
        )

        async def call() -> SubCategoryResult:
            response = await self.generator.generate(
                prompt, system_instruction=self.SUBCATEGORY_SYSTEM_PROMPT, temperature=0.2
            )
            try:
                data = extract_json(response)
            except MalformedResponseError as e:
                logger.warning(f"Could not parse subcategory response: {e}")
                return SubCategoryResult(
                    sub_category=fallback,
                    reasoning="Unparseable response",
                )
            raw = data.get("subCategory") or data.get("sub_category")
            return SubCategoryResult(
                sub_category=normalize_subcategory(category, raw),
                confidence=_confidence(data.get("confidence")),
                reasoning=data.get("reasoning"),
            )

        try:
            return await self.retry_policy.run(call, self.retry_policy.observer("Subcategory classification"))
        except Exception as e:
            logger.error(f"Subcategory classification failed, using {fallback}: {e}")
            return SubCategoryResult(
                sub_category=fallback,
                reasoning="Classification failed; fallback subcategory used",
            )

    async def classify_item(
        self,
        item: BookmarkItem,
        scraped: Optional[ScrapedContent] = None,
    ) -> ClassifiedItem:
        text = build_classification_text(item, scraped)
        primary = await self.classify(text)
        sub = await self.classify_subcategory(text, primary.category)

        logger.info(f"Classified {item.source_link}: {primary.category.value}/{sub.sub_category}")

        return ClassifiedItem(
            item=item,
            category=primary.category,
            sub_category=sub.sub_category,
        )
