"""
Unit tests for the spreadsheet client.
"""

import pytest
import httpx
from datetime import datetime

from favcast.ingestion.sheets import SheetsClient, SheetsFetchError


ROWS = [
    ["Date", "Account", "Content link", "Tweet link", "Text"],
    ["March 17, 2025 at 10:35PM", "alice", "https://blog.example.com/a", "https://x.com/alice/status/1", "Rust 2.0!"],
    ["March 18, 2025 at 09:05AM", "bob", "", "https://x.com/bob/status/2", "Sourdough tips"],
    ["January 01, 2025 at 08:00AM", "carol", "", "https://x.com/carol/status/3", "Too old"],
    ["March 18, 2025 at 10:00AM", "dave"],
    ["not a date", "erin", "", "https://x.com/erin/status/5", "Broken date"],
]

START = datetime(2025, 3, 12)
END = datetime(2025, 3, 19)


def sheets_transport(payload=None, status=200, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, json=payload if payload is not None else {})

    return httpx.MockTransport(handler)


@pytest.mark.unit
class TestSheetsClient:
    """Tests for SheetsClient."""

    @pytest.mark.asyncio
    async def test_fetch_recent_bookmarks(self, no_retry):
        calls = []
        client = SheetsClient("sheet-id", "api-key", retry_policy=no_retry,
                              transport=sheets_transport({"values": ROWS}, calls=calls))

        items = await client.fetch_recent_bookmarks(START, END)

        assert [i.author for i in items] == ["alice", "bob"]
        alice = items[0]
        assert alice.external_id == "https://x.com/alice/status/1"
        assert alice.source_link == alice.external_id
        assert alice.enrichment_link == "https://blog.example.com/a"
        assert alice.posted_at == datetime(2025, 3, 17, 22, 35)
        assert items[1].enrichment_link is None

        request = calls[0]
        assert request.url.path == "/v4/spreadsheets/sheet-id/values/A:F"
        assert request.url.params["key"] == "api-key"

    @pytest.mark.asyncio
    async def test_iso_date_with_offset(self, no_retry):
        rows = [
            ROWS[1],
            ["2025-03-18T09:00:00+00:00", "frank", "", "https://x.com/frank/status/6", "Zig 1.0"],
        ]
        client = SheetsClient("id", "key", retry_policy=no_retry,
                              transport=sheets_transport({"values": rows}))

        items = await client.fetch_recent_bookmarks(START, END)

        assert [i.author for i in items] == ["alice", "frank"]
        assert items[1].posted_at.tzinfo is None

    @pytest.mark.asyncio
    async def test_empty_sheet(self, no_retry):
        client = SheetsClient("id", "key", retry_policy=no_retry, transport=sheets_transport({}))

        assert await client.fetch_recent_bookmarks(START, END) == []

    @pytest.mark.asyncio
    async def test_rows_without_header(self, no_retry):
        client = SheetsClient("id", "key", retry_policy=no_retry,
                              transport=sheets_transport({"values": ROWS[1:3]}))

        items = await client.fetch_recent_bookmarks(START, END)

        assert len(items) == 2

    @pytest.mark.asyncio
    async def test_exhaustion_raises(self, no_retry):
        calls = []
        client = SheetsClient("id", "key", retry_policy=no_retry,
                              transport=sheets_transport(status=500, calls=calls))

        with pytest.raises(SheetsFetchError):
            await client.fetch_rows()
        assert len(calls) == 2
