"""
Unit tests for the web scraper.
"""

import asyncio
import pytest
import httpx

from favcast.ingestion.scraper import WebScraper


ARTICLE_HTML = """
<html>
<head>
  <title> Rust 2.0 Released </title>
  <meta property="og:site_name" content="Rust Blog">
  <meta property="article:published_time" content="2025-03-17T10:00:00Z">
</head>
<body>
  <nav>Home | About</nav>
  <article><h1>Rust 2.0</h1>
    <p>The Rust team   announced
    version 2.0.</p></article>
  <footer>Copyright</footer>
</body>
</html>
"""

BODY_ONLY_HTML = """
<html><head><title>Plain</title></head>
<body><nav>Menu</nav><script>var x = 1;</script><p>Just a paragraph.</p><footer>Foot</footer></body>
</html>
"""


def transport_for(pages: dict, calls: list = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))
        page = pages.get(str(request.url))
        if page is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=page, headers={"content-type": "text/html"})

    return httpx.MockTransport(handler)


@pytest.mark.unit
class TestParseHtml:
    """Tests for HTML extraction."""

    def test_article_extraction(self):
        result = WebScraper().parse_html("https://blog.rust-lang.org/2", ARTICLE_HTML)

        assert result.title == "Rust 2.0 Released"
        assert result.site_name == "Rust Blog"
        assert result.publish_date == "2025-03-17T10:00:00Z"
        assert result.content == "Rust 2.0 The Rust team announced version 2.0."
        assert result.ok

    def test_body_fallback_drops_noise(self):
        result = WebScraper().parse_html("https://e.com", BODY_ONLY_HTML)

        assert result.content == "Just a paragraph."

    def test_title_fallback(self):
        result = WebScraper().parse_html("https://e.com", "<html><head><title>Only title</title></head><body></body></html>")

        assert result.content == "Only title"


@pytest.mark.unit
class TestScrapeUrl:
    """Tests for scrape_url."""

    @pytest.mark.asyncio
    async def test_invalid_url_returns_error_marker(self):
        calls = []
        scraper = WebScraper(transport=transport_for({}, calls))

        result = await scraper.scrape_url("ftp://example.com/file")

        assert result.error == "Invalid URL"
        assert not result.ok
        assert calls == []

    @pytest.mark.asyncio
    async def test_success(self, no_retry):
        url = "https://blog.example.com/post"
        scraper = WebScraper(retry_policy=no_retry, transport=transport_for({url: ARTICLE_HTML}))

        result = await scraper.scrape_url(url)

        assert result.error is None
        assert result.title == "Rust 2.0 Released"

    @pytest.mark.asyncio
    async def test_http_error_after_retries(self, no_retry):
        calls = []
        scraper = WebScraper(retry_policy=no_retry, transport=transport_for({}, calls))

        result = await scraper.scrape_url("https://missing.example.com/")

        assert result.error
        assert len(calls) == 2


@pytest.mark.unit
class TestScrapeMany:
    """Tests for batched scraping."""

    @pytest.mark.asyncio
    async def test_deduplicates_and_keeps_order(self, no_retry):
        pages = {f"https://e.com/{i}": ARTICLE_HTML for i in range(3)}
        calls = []
        scraper = WebScraper(retry_policy=no_retry, transport=transport_for(pages, calls))

        results = await scraper.scrape_many(
            ["https://e.com/0", "https://e.com/1", "https://e.com/0", "", "https://e.com/2"]
        )

        assert list(results) == ["https://e.com/0", "https://e.com/1", "https://e.com/2"]
        assert sorted(calls) == sorted(pages)

    @pytest.mark.asyncio
    async def test_batches_limit_concurrency(self, no_retry, monkeypatch):
        """Test no more than `concurrency` requests are in flight at once."""
        scraper = WebScraper(retry_policy=no_retry, concurrency=2)
        state = {"active": 0, "peak": 0}

        async def fake_scrape(url):
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
            await asyncio.sleep(0)
            state["active"] -= 1
            from favcast.models.content import ScrapedContent
            return ScrapedContent(url=url, content="x")

        monkeypatch.setattr(scraper, "scrape_url", fake_scrape)

        results = await scraper.scrape_many([f"https://e.com/{i}" for i in range(5)])

        assert len(results) == 5
        assert state["peak"] == 2
