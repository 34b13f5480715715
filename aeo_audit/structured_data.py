"""
Structured-data extraction (JSON-LD, OpenGraph, Twitter Card, Microdata)
and the collector pass that re-fetches a snapshot's pages to enrich them.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from bs4 import BeautifulSoup

from .config import CrawlConfig
from .models import SiteSnapshot
from .net import fetch, new_session

logger = logging.getLogger(__name__)

JSONLD_TYPE_RE = re.compile(r"application/ld\+json", re.IGNORECASE)
PUBLISHER_PROPERTIES = ("og:publisher", "article:publisher")
AUTHOR_NAMES = ("author", "creator")


def soup_of(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "lxml")
    except Exception:
        return BeautifulSoup(html, "html.parser")


def jsonld_payloads(soup: BeautifulSoup) -> list[Any]:
    """Parsed JSON-LD scripts in document order. Malformed blocks are skipped individually."""
    out: list[Any] = []
    scripts = soup.find_all("script", attrs={"type": JSONLD_TYPE_RE})
    for idx, script in enumerate(scripts, start=1):
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            continue
        try:
            out.append(json.loads(raw))
        except json.JSONDecodeError as exc:
            logger.debug("Skipping JSON-LD block %d: invalid JSON (%s)", idx, exc)
    return out


def extract_jsonld(soup: BeautifulSoup) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    for payload in jsonld_payloads(soup):
        schema = payload.get("@type") if isinstance(payload, dict) else None
        blocks.append({"type": "json-ld", "schema": schema or "Unknown", "data": payload})
    return blocks


def _meta_values(soup: BeautifulSoup, attr: str, prefix: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for meta in soup.find_all("meta", attrs={attr: True}):
        key = str(meta.get(attr) or "").strip()
        if key.lower().startswith(prefix) and meta.get("content") is not None:
            values[key] = str(meta.get("content"))
    return values


def extract_opengraph(soup: BeautifulSoup) -> list[dict[str, Any]]:
    tags = _meta_values(soup, "property", "og:")
    if not tags:
        return []
    return [{"type": "opengraph", "schema": tags.get("og:type") or "website", "data": tags}]


def extract_twitter_card(soup: BeautifulSoup) -> list[dict[str, Any]]:
    tags = {**_meta_values(soup, "property", "twitter:"), **_meta_values(soup, "name", "twitter:")}
    if not tags:
        return []
    return [{"type": "twitter-card", "schema": tags.get("twitter:card") or "summary", "data": tags}]


def extract_microdata(soup: BeautifulSoup) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    for node in soup.find_all(attrs={"itemscope": True, "itemtype": True}):
        item_type = str(node.get("itemtype") or "").strip()
        if not item_type:
            continue
        schema = item_type.rstrip("/").rsplit("/", 1)[-1].replace("]", "")
        blocks.append({"type": "microdata", "schema": schema, "data": {"element": node.name, "itemType": item_type}})
    return blocks


def extract_structured_data(soup: BeautifulSoup) -> list[dict[str, Any]]:
    """All four structured-data families as separate typed entries."""
    return extract_jsonld(soup) + extract_opengraph(soup) + extract_twitter_card(soup) + extract_microdata(soup)


def _add(entities: list[str], value: Any) -> None:
    if isinstance(value, str) and value.strip() and value not in entities:
        entities.append(value)


def extract_key_entities(soup: BeautifulSoup) -> list[str]:
    """Publisher/author names and JSON-LD types, de-duplicated by exact string."""
    entities: list[str] = []
    for prop in PUBLISHER_PROPERTIES:
        meta = soup.find("meta", attrs={"property": prop})
        if meta is not None:
            _add(entities, meta.get("content"))
            break
    for name in AUTHOR_NAMES:
        meta = soup.find("meta", attrs={"name": name})
        if meta is not None:
            _add(entities, meta.get("content"))
            break

    for payload in jsonld_payloads(soup):
        nodes = payload if isinstance(payload, list) else [payload]
        for node in nodes:
            if not isinstance(node, dict):
                continue
            raw_type = node.get("@type")
            for t in raw_type if isinstance(raw_type, list) else [raw_type]:
                _add(entities, t)
            publisher = node.get("publisher")
            if isinstance(publisher, dict):
                _add(entities, publisher.get("name"))
            author = node.get("author")
            if isinstance(author, list):
                author = author[0] if author else None
            if isinstance(author, dict):
                _add(entities, author.get("name"))
            else:
                _add(entities, author)
    return entities


def collect_structured_data(
    snapshot: SiteSnapshot,
    config: CrawlConfig | None = None,
    session: Any = None,
) -> SiteSnapshot:
    """Re-fetch every 200 page, replace its structured data, and set ``key_entities``.

    Pages are processed one at a time; a page that cannot be fetched gets an
    empty ``structured_data`` list and the pass moves on.
    """
    config = config or CrawlConfig()
    session = session or new_session(config.user_agent)
    entities: list[str] = []
    total = 0
    for page in snapshot.pages:
        if page.status_code != 200:
            continue
        logger.info("Extracting structured data from: %s", page.url)
        fetched = fetch(session, page.url, config.timeout, config.user_agent)
        if fetched["error"]:
            logger.warning("Error processing %s: %s", page.url, fetched["error"])
            page.structured_data = []
            continue
        soup = soup_of(fetched["text"])
        page.structured_data = extract_structured_data(soup)
        total += len(page.structured_data)
        for entity in extract_key_entities(soup):
            _add(entities, entity)

    snapshot.key_entities = entities
    logger.info("Structured data entries: %d, key entities: %d", total, len(entities))
    return snapshot
