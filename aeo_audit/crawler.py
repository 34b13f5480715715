"""
Bounded single-host crawler that builds a Site Snapshot.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from .config import CrawlConfig
from .extractor import extract_links, extract_page
from .models import PageRecord, SiteSnapshot, utc_now
from .net import fetch, looks_like_html, new_session, normalize_url, probe_site_files, same_host
from .structured_data import soup_of

logger = logging.getLogger(__name__)


class Crawler:
    """Depth-first traversal over an explicit stack.

    Fetches are strictly sequential, so the visited set and the page limit
    need no locking: no URL is fetched twice and ``pages`` never exceeds
    ``config.max_pages``. When the seed redirects to another host (apex to
    ``www.``, say), links are followed on the host that actually answered.
    """

    def __init__(self, seed_url: str, config: CrawlConfig | None = None, session: Any = None):
        self.seed_url = normalize_url(seed_url)
        self.site_url = self.seed_url
        self.config = config or CrawlConfig()
        self.session = session or new_session(self.config.user_agent)
        self.visited: set[str] = set()
        self.pages: list[PageRecord] = []

    def _visit(self, url: str) -> list[str]:
        """Fetch and record one page; return same-host links to traverse."""
        logger.info("Crawling: %s", url)
        fetched = fetch(self.session, url, self.config.timeout, self.config.user_agent)
        if fetched["error"]:
            logger.warning("Error crawling %s: %s", url, fetched["error"])
            self.pages.append(PageRecord.failed(url, fetched["error"]))
            return []

        final_url = fetched["final_url"]
        try:
            final_url = normalize_url(final_url)
        except ValueError:
            final_url = url
        self.visited.add(final_url)
        if url == self.seed_url:
            if not same_host(final_url, url):
                logger.info("Seed redirected to %s", final_url)
            self.site_url = final_url

        if not looks_like_html(fetched):
            self.pages.append(PageRecord(url=url, status_code=fetched["status_code"]))
            return []

        soup = soup_of(fetched["text"])
        internal, _ = extract_links(soup, final_url)
        fields = extract_page(soup, final_url)
        self.pages.append(PageRecord(url=url, status_code=fetched["status_code"], **fields))
        return [link for link in internal if same_host(link, self.site_url)]

    def crawl(self) -> SiteSnapshot:
        started = time.perf_counter()
        crawled_at = utc_now()
        stack = [self.seed_url]
        while stack and len(self.pages) < self.config.max_pages:
            url = stack.pop()
            if url in self.visited:
                continue
            self.visited.add(url)
            links = self._visit(url)
            # Reverse so the first link on the page is explored first.
            stack.extend(link for link in reversed(links) if link not in self.visited)

        robots_txt: dict[str, bool] = {"exists": False}
        sitemaps: list[str] = []
        if self.config.check_site_files:
            robots_txt, sitemaps = probe_site_files(self.session, self.seed_url, self.config.timeout, self.config.user_agent)

        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info("Crawl complete: %d pages in %dms", len(self.pages), duration_ms)
        return SiteSnapshot(
            website_url=self.seed_url,
            crawled_at=crawled_at,
            crawl_duration_ms=duration_ms,
            pages=list(self.pages),
            robots_txt=robots_txt,
            sitemaps=sitemaps,
        )


def crawl_site(seed_url: str, config: CrawlConfig | None = None, session: Any = None) -> SiteSnapshot:
    return Crawler(seed_url, config, session).crawl()
