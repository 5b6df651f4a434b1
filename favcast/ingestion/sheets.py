"""Bookmark feed from a Google Sheet populated by IFTTT."""

from datetime import datetime
from typing import Optional
import logging

import httpx

from ..config.settings import RETRY_POLICIES, SHEET_SETTINGS
from ..models.content import BookmarkItem
from ..utils.dates import is_date_in_range, parse_sheet_date
from ..utils.retry import RetryPolicy


logger = logging.getLogger(__name__)


class SheetsFetchError(Exception):
    """The spreadsheet could not be read."""


class SheetsClient:
    """
    Reads bookmark rows through the Sheets values API.

    Row layout: date, account, content link, post link, text.
    """

    BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

    def __init__(
        self,
        spreadsheet_id: str,
        api_key: str,
        retry_policy: RetryPolicy = RETRY_POLICIES["sheets"],
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.api_key = api_key
        self.retry_policy = retry_policy
        self.transport = transport
        self.timeout = timeout

    async def fetch_rows(self) -> list[list[str]]:
        url = f"{self.BASE_URL}/{self.spreadsheet_id}/values/{SHEET_SETTINGS['range']}"

        async def call() -> list[list[str]]:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.get(url, params={"key": self.api_key})
                response.raise_for_status()
                return response.json().get("values", [])

        try:
            return await self.retry_policy.run(call, self.retry_policy.observer("Google Sheets fetch"))
        except Exception as e:
            logger.error(f"Failed to read spreadsheet {self.spreadsheet_id}: {e}")
            raise SheetsFetchError(str(e)) from e

    async def fetch_recent_bookmarks(self, start: datetime, end: datetime) -> list[BookmarkItem]:
        """Rows dated inside [start, end], in sheet order."""
        rows = await self.fetch_rows()
        if not rows:
            logger.info("Spreadsheet has no rows")
            return []

        if rows[0] and str(rows[0][0]).strip() == "Date":
            rows = rows[1:]

        logger.info(f"Collecting bookmarks from {start.isoformat()} to {end.isoformat()}")

        items = []
        for row in rows:
            if len(row) < 5:
                continue
            try:
                item = self._row_to_item(row)
            except ValueError as e:
                logger.warning(f"Skipping unparseable row {row[:2]}: {e}")
                continue
            if is_date_in_range(item.posted_at, start, end):
                items.append(item)

        logger.info(f"Fetched {len(items)} bookmarks")
        return items

    def _row_to_item(self, row: list[str]) -> BookmarkItem:
        link = row[SHEET_SETTINGS["tweet_link_col"]].strip()
        if not link:
            raise ValueError("missing post link")
        return BookmarkItem(
            external_id=link,
            posted_at=parse_sheet_date(row[SHEET_SETTINGS["date_col"]]),
            author=row[SHEET_SETTINGS["account_col"]].strip(),
            source_link=link,
            enrichment_link=row[SHEET_SETTINGS["content_link_col"]].strip() or None,
            raw_text=row[SHEET_SETTINGS["content_col"]],
        )
