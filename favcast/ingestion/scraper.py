"""Fetches linked pages to enrich bookmarks with their article text."""

import asyncio
import re
from typing import Optional
import logging

import httpx
from bs4 import BeautifulSoup

from ..config.settings import RETRY_POLICIES
from ..models.content import ScrapedContent
from ..utils.retry import RetryPolicy


logger = logging.getLogger(__name__)


class WebScraper:
    """
    Extracts title, site name, publish date and body text from a URL.
    Failures come back as a ScrapedContent with ``error`` set.
    """

    CONTENT_SELECTORS = [
        "article",
        ".article",
        ".post-content",
        ".entry-content",
        "main",
        "#main",
        ".main-content",
        ".content",
    ]

    NOISE_TAGS = ["header", "nav", "footer", "script", "style", "noscript", "iframe", "form"]

    PUBLISH_DATE_META = [
        {"property": "article:published_time"},
        {"name": "pubdate"},
        {"name": "publishdate"},
        {"name": "date"},
    ]

    HEADERS = {
        "User-Agent": "Mozilla/5.0 (compatible; FavcastBot/1.0)",
        "Accept": "text/html,application/xhtml+xml",
    }

    def __init__(
        self,
        retry_policy: RetryPolicy = RETRY_POLICIES["scrape"],
        concurrency: int = 5,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.retry_policy = retry_policy
        self.concurrency = max(1, concurrency)
        self.timeout = timeout
        self.transport = transport

    async def scrape_url(self, url: str) -> ScrapedContent:
        if not url or not url.startswith("http"):
            return ScrapedContent(url=url or "", error="Invalid URL")

        logger.info(f"Scraping {url}")

        async def call() -> ScrapedContent:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=self.timeout,
                follow_redirects=True,
                headers=self.HEADERS,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return self.parse_html(url, response.text)

        def on_error(error: BaseException, remaining: int) -> None:
            logger.warning(f"Scraping {url} failed, retrying ({remaining} left): {error}")

        try:
            return await self.retry_policy.run(call, on_error)
        except Exception as e:
            logger.error(f"Scraping failed for {url}: {e}")
            return ScrapedContent(url=url, error=str(e) or type(e).__name__)

    def parse_html(self, url: str, html: str) -> ScrapedContent:
        soup = BeautifulSoup(html, "html.parser")

        title = soup.title.get_text().strip() if soup.title else ""

        site_name = ""
        site_meta = soup.find("meta", attrs={"property": "og:site_name"})
        if site_meta and site_meta.get("content"):
            site_name = site_meta["content"]

        publish_date = ""
        for attrs in self.PUBLISH_DATE_META:
            meta = soup.find("meta", attrs=attrs)
            if meta and meta.get("content"):
                publish_date = meta["content"]
                break

        content = ""
        for selector in self.CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                content = self._clean_text(element.get_text(" "))
                break

        if not content:
            for tag in soup(self.NOISE_TAGS):
                tag.decompose()
            body = soup.body or soup
            content = self._clean_text(body.get_text(" "))

        if not content:
            content = title

        return ScrapedContent(
            url=url,
            title=title,
            content=content,
            site_name=site_name,
            publish_date=publish_date,
        )

    async def scrape_many(self, urls: list[str]) -> dict[str, ScrapedContent]:
        """
        Scrape unique URLs in batches of ``concurrency``.
        Each batch finishes before the next one starts.
        """
        unique_urls = list(dict.fromkeys(u for u in urls if u))
        logger.info(f"Scraping {len(unique_urls)} URLs")

        results: dict[str, ScrapedContent] = {}
        for i in range(0, len(unique_urls), self.concurrency):
            batch = unique_urls[i:i + self.concurrency]
            batch_results = await asyncio.gather(*(self.scrape_url(u) for u in batch))
            for url, result in zip(batch, batch_results):
                results[url] = result

        failed = sum(1 for r in results.values() if r.error)
        logger.info(f"Scraped {len(results)} URLs ({failed} failed)")
        return results

    @staticmethod
    def _clean_text(text: str) -> str:
        return re.sub(r"\s+", " ", text).strip()
