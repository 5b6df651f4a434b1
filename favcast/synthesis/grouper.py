"""Groups summarized items into per-subcategory buckets."""

from typing import Optional
import logging

from ..config.settings import (
    ContentCategory,
    fallback_subcategory,
    normalize_subcategory,
    subcategory_label,
)
from ..models.content import ContentBucket, SummarizedItem


logger = logging.getLogger(__name__)

GroupedItems = dict[ContentCategory, dict[str, list[SummarizedItem]]]


class ContentGrouper:
    """
    Partitions items by primary category and subcategory.

    Bucket order follows first appearance in the input and items keep their
    input order inside a bucket, so grouping the same items twice gives the
    same result.
    """

    def __init__(self, min_bucket_size: int = 3):
        self.min_bucket_size = min_bucket_size

    def group(self, items: list[SummarizedItem]) -> GroupedItems:
        grouped: GroupedItems = {category: {} for category in ContentCategory}

        for item in items:
            category = ContentCategory(item.category)
            sub_category = normalize_subcategory(category, item.sub_category)
            grouped[category].setdefault(sub_category, []).append(item)

        for category, buckets in grouped.items():
            if buckets:
                logger.info(
                    f"{category.value}: "
                    + ", ".join(f"{sub}={len(members)}" for sub, members in buckets.items())
                )
        return grouped

    @staticmethod
    def counts(grouped: GroupedItems) -> dict[ContentCategory, dict[str, int]]:
        return {
            category: {sub: len(members) for sub, members in buckets.items()}
            for category, buckets in grouped.items()
        }

    @staticmethod
    def sorted_by_count(buckets: dict[str, list[SummarizedItem]]) -> list[tuple[str, list[SummarizedItem]]]:
        """Largest bucket first; ties keep first-insertion order (``sorted`` is stable)."""
        return sorted(buckets.items(), key=lambda entry: -len(entry[1]))

    def ordered_buckets(
        self,
        grouped: GroupedItems,
        category: ContentCategory,
        min_bucket_size: Optional[int] = None,
    ) -> list[ContentBucket]:
        """
        Buckets for one category in narration order.

        Buckets smaller than ``min_bucket_size`` are folded into the category's
        fallback bucket, which is always narrated last.
        """
        category = ContentCategory(category)
        threshold = self.min_bucket_size if min_bucket_size is None else min_bucket_size
        fallback = fallback_subcategory(category)

        main: list[ContentBucket] = []
        leftovers: list[SummarizedItem] = []

        for sub_category, members in self.sorted_by_count(grouped.get(category, {})):
            if sub_category == fallback or len(members) < threshold:
                leftovers.extend(members)
                continue
            main.append(
                ContentBucket(
                    category=category,
                    sub_category=sub_category,
                    label=subcategory_label(sub_category),
                    items=list(members),
                )
            )

        if leftovers:
            main.append(
                ContentBucket(
                    category=category,
                    sub_category=fallback,
                    label=subcategory_label(fallback),
                    items=leftovers,
                )
            )
        return main
