"""Page Extractor: raw HTML in, Page Record fields out. No network or filesystem access."""

from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString

from .net import resolve_href, same_host
from .structured_data import extract_jsonld, soup_of


def _texts(soup: BeautifulSoup, tag: str) -> list[str]:
    out: list[str] = []
    for node in soup.find_all(tag):
        text = node.get_text(" ", strip=True)
        if text:
            out.append(" ".join(text.split()))
    return out


def extract_links(html: str | BeautifulSoup, base_url: str) -> tuple[list[str], list[str]]:
    """Deduplicated (internal, external) absolute links of one page, in document order.

    Every ``href`` counts, not only anchors, so stylesheets and icons show up
    as same-host links the way a raw-HTML link scan sees them.
    """
    soup = html if isinstance(html, BeautifulSoup) else soup_of(html)
    internal: list[str] = []
    external: list[str] = []
    seen: set[str] = set()
    for node in soup.find_all(href=True):
        url = resolve_href(str(node.get("href") or ""), base_url)
        if url is None or url in seen:
            continue
        seen.add(url)
        (internal if same_host(url, base_url) else external).append(url)
    return internal, external


def word_count(soup: BeautifulSoup) -> int:
    """Whitespace-token count of the markup-stripped text.

    An approximation: tags are removed, whitespace collapsed, and every
    whitespace-delimited token counts as a word, punctuation runs and
    script or style bodies included. Comments and doctypes are markup.
    """
    text = " ".join(
        node for node in soup.descendants
        if isinstance(node, NavigableString) and not isinstance(node, PreformattedString)
    )
    return len(text.split())


def extract_page(html: str | BeautifulSoup, base_url: str) -> dict[str, Any]:
    """Page Record fields except ``url`` and ``status_code``."""
    soup = html if isinstance(html, BeautifulSoup) else soup_of(html)

    title_tag = soup.find("title")
    title = " ".join(title_tag.get_text(" ", strip=True).split()) if title_tag else ""

    meta_description = ""
    for meta in soup.find_all("meta", attrs={"name": True}):
        if str(meta.get("name")).strip().lower() == "description":
            meta_description = str(meta.get("content") or "").strip()
            break

    images: list[dict[str, Any]] = []
    for img in soup.find_all("img"):
        src = str(img.get("src") or "").strip()
        if not src:
            continue
        alt = str(img.get("alt") or "")
        images.append({"src": src, "alt": alt, "has_alt": len(alt) > 0})

    internal, external = extract_links(soup, base_url)
    structured = extract_jsonld(soup)
    h1, h2, h3 = _texts(soup, "h1"), _texts(soup, "h2"), _texts(soup, "h3")

    return {
        "title": title,
        "meta_description": meta_description,
        "h1": h1,
        "h2": h2,
        "h3": h3,
        "structured_data": structured,
        "images": images,
        "word_count": word_count(soup),
        "internal_links": len(internal),
        "external_links": len(external),
    }
