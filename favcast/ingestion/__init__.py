"""Bookmark feed and link enrichment."""

from .sheets import SheetsClient, SheetsFetchError
from .scraper import WebScraper

__all__ = ["SheetsClient", "SheetsFetchError", "WebScraper"]
