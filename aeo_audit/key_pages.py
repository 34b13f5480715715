"""
Key-page ranking and entity mining over a snapshot's pages.
"""

from __future__ import annotations

import re
from typing import Any, Iterable
from urllib.parse import urlparse

from .models import PageRecord
from .net import is_root_url

ASSET_EXTENSIONS = (".css", ".js", ".ico", ".png", ".jpg", ".gif")
MAX_KEY_PAGES = 10
# First match wins, so order is precedence.
PAGE_TYPE_MARKERS = (
    ("/blog", "blog"),
    ("/about", "about"),
    ("/contact", "contact"),
    ("/product", "product"),
    ("/service", "product"),
)
MIN_PATH_SEGMENT_CHARS = 3
MIN_WORD_CHARS = 4


def is_asset_url(url: str) -> bool:
    return url.lower().endswith(ASSET_EXTENSIONS)


def is_candidate(page: PageRecord) -> bool:
    return page.status_code == 200 and not is_asset_url(page.url) and "/static/" not in page.url.lower()


def has_root_bonus(url: str) -> bool:
    path = urlparse(url).path
    return not [s for s in path.split("/") if s] or path.endswith("/")


def content_score(page: PageRecord) -> float:
    score = min(page.word_count / 10, 40)
    # Deliberately uncapped: hub pages with many internal links rank highest.
    score += page.internal_links * 10
    if page.h1:
        score += 20
    if page.h2:
        score += 10
    if has_root_bonus(page.url):
        score += 15
    return score


def classify_page(url: str) -> str:
    if is_root_url(url):
        return "homepage"
    lowered = url.lower()
    for marker, page_type in PAGE_TYPE_MARKERS:
        if marker in lowered:
            return page_type
    return "content"


def detect_key_pages(pages: Iterable[PageRecord], limit: int = MAX_KEY_PAGES) -> list[dict[str, Any]]:
    scored = [(content_score(p), p) for p in pages if is_candidate(p)]
    # sorted() is stable, so equal scores keep discovery order.
    scored = sorted(scored, key=lambda item: item[0], reverse=True)[:limit]
    return [
        {
            "url": page.url,
            "title": page.title or "",
            "type": classify_page(page.url),
            "word_count": page.word_count,
            "internal_links": page.internal_links,
            "key_headings": (page.h1 + page.h2)[:5],
            "importance_score": round(score),
        }
        for score, page in scored
    ]


def _words(text: str) -> list[str]:
    return [w for w in re.split(r"\s+", text.lower()) if w]


def extract_entities(pages: Iterable[PageRecord]) -> list[dict[str, str]]:
    """Tokens from URL paths, titles and H1/H2 headings, de-duplicated across the site."""
    entities: list[dict[str, str]] = []
    seen: set[str] = set()

    def add(kind: str, value: str, display: str, source: str) -> None:
        if display in seen:
            return
        seen.add(display)
        entities.append({"type": kind, "value": value, "display": display, "source": source})

    for page in pages:
        segments = [s for s in urlparse(page.url).path.split("/") if s and s != "index.html"]
        for segment in segments:
            normalized = re.sub(r"[-_]", " ", segment.lower())
            if len(normalized) >= MIN_PATH_SEGMENT_CHARS:
                add("url_path", segment, normalized, page.url)
        for word in _words(page.title or ""):
            if len(word) >= MIN_WORD_CHARS:
                add("title", word, word, page.url)
        for heading in page.h1 + page.h2:
            for word in _words(heading):
                if len(word) >= MIN_WORD_CHARS:
                    add("heading", word, word, page.url)
    return entities


def detect(pages: list[PageRecord]) -> dict[str, list[dict[str, Any]]]:
    return {"key_pages": detect_key_pages(pages), "key_entities": extract_entities(pages)}
