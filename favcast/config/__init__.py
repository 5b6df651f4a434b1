"""Settings, taxonomy tables and startup checks."""

from .settings import (
    Settings,
    ContentCategory,
    TechSubCategory,
    OtherSubCategory,
    RETRY_POLICIES,
    get_settings,
    normalize_subcategory,
    fallback_subcategory,
    subcategory_label,
)

__all__ = [
    "Settings",
    "ContentCategory",
    "TechSubCategory",
    "OtherSubCategory",
    "RETRY_POLICIES",
    "get_settings",
    "normalize_subcategory",
    "fallback_subcategory",
    "subcategory_label",
]
