"""URL helpers and the HTTP primitives shared by the crawler and collector."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin, urlparse, urlunparse

import requests

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "AEO-Audit-Bot/1.0 (Automated Audit Crawler)"
HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.8",
}
SKIPPED_HREF_PREFIXES = ("#", "javascript:", "mailto:", "tel:")


def normalize_url(raw: str) -> str:
    value = raw.strip()
    parsed = urlparse(value)
    if not parsed.scheme:
        value = f"https://{value}"
        parsed = urlparse(value)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise ValueError(f"URL has no host: {raw!r}")
    path = parsed.path or "/"
    return urlunparse((parsed.scheme, parsed.netloc.lower(), path, "", parsed.query, ""))


def resolve_href(href: str, base_url: str) -> str | None:
    """Resolve an href against its page, or None for anchors and non-web links."""
    value = (href or "").strip()
    if not value or value.lower().startswith(SKIPPED_HREF_PREFIXES):
        return None
    try:
        return normalize_url(urljoin(base_url, value))
    except ValueError:
        return None


def hostname(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def same_host(url_a: str, url_b: str) -> bool:
    a = hostname(url_a)
    return bool(a) and a == hostname(url_b)


def is_root_url(url: str) -> bool:
    return urlparse(url).path in ("", "/")


def site_root(url: str) -> str:
    parsed = urlparse(url)
    return urlunparse((parsed.scheme, parsed.netloc, "/", "", "", ""))


def new_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({**HEADERS, "User-Agent": user_agent})
    return session


def fetch(session: Any, url: str, timeout: float, user_agent: str = DEFAULT_USER_AGENT) -> dict[str, Any]:
    """GET a URL once. Network errors and timeouts land in ``error``; HTTP errors do not."""
    result: dict[str, Any] = {
        "url": url,
        "final_url": url,
        "status_code": 0,
        "text": "",
        "content_type": "",
        "error": None,
    }
    try:
        response = session.get(url, headers={**HEADERS, "User-Agent": user_agent}, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        result["error"] = str(exc) or exc.__class__.__name__
        return result
    result["status_code"] = int(response.status_code)
    result["final_url"] = str(getattr(response, "url", "") or url)
    result["text"] = response.text or ""
    result["content_type"] = str(response.headers.get("Content-Type", ""))
    return result


def looks_like_html(fetched: dict[str, Any]) -> bool:
    content_type = fetched["content_type"].lower()
    if "text/html" in content_type or "application/xhtml+xml" in content_type:
        return True
    # Content-Type can be wrong or absent; fall back to document sniffing.
    return "<html" in fetched["text"][:2048].lower()


def try_fetch_text(session: Any, url: str, timeout: float, user_agent: str = DEFAULT_USER_AGENT) -> str | None:
    """Body of ``url`` when it answers below 400, else None."""
    fetched = fetch(session, url, timeout, user_agent)
    if fetched["error"] or fetched["status_code"] >= 400:
        return None
    return fetched["text"]


def parse_sitemap_lines(robots_text: str) -> list[str]:
    out: list[str] = []
    for line in robots_text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        key, value = [x.strip() for x in line.split(":", 1)]
        if key.lower() == "sitemap" and value and value not in out:
            out.append(value)
    return out


def probe_site_files(session: Any, seed_url: str, timeout: float, user_agent: str = DEFAULT_USER_AGENT) -> tuple[dict[str, bool], list[str]]:
    """Existence check for robots.txt plus the sitemaps it declares (or /sitemap.xml)."""
    root = site_root(seed_url)
    robots_text = try_fetch_text(session, urljoin(root, "/robots.txt"), timeout, user_agent)
    sitemaps = parse_sitemap_lines(robots_text) if robots_text is not None else []
    if not sitemaps:
        fallback = urljoin(root, "/sitemap.xml")
        if try_fetch_text(session, fallback, timeout, user_agent) is not None:
            sitemaps.append(fallback)
    logger.debug("robots.txt exists=%s, sitemaps=%s", robots_text is not None, sitemaps)
    return {"exists": robots_text is not None}, sitemaps
