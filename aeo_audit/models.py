"""
Page Record and Site Snapshot, plus their JSON persistence.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .config import AuditInputError, read_json

PAGE_FIELDS = (
    "url",
    "status_code",
    "title",
    "meta_description",
    "h1",
    "h2",
    "h3",
    "structured_data",
    "images",
    "word_count",
    "internal_links",
    "external_links",
)
SNAPSHOT_FIELDS = {
    "website_url",
    "crawled_at",
    "crawl_duration_ms",
    "pages_crawled",
    "pages",
    "robots_txt",
    "sitemaps",
    "key_pages",
    "key_entities",
}


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class PageRecord:
    url: str
    status_code: int
    title: str = ""
    meta_description: str = ""
    h1: list[str] = field(default_factory=list)
    h2: list[str] = field(default_factory=list)
    h3: list[str] = field(default_factory=list)
    structured_data: list[dict[str, Any]] = field(default_factory=list)
    images: list[dict[str, Any]] = field(default_factory=list)
    word_count: int = 0
    internal_links: int = 0
    external_links: int = 0
    error: str | None = None

    def __post_init__(self) -> None:
        # status_code 0 <=> fetch failure <=> error present
        if (self.status_code == 0) != (self.error is not None):
            raise ValueError(
                f"inconsistent page record for {self.url}: status_code={self.status_code}, error={self.error!r}"
            )
        if self.word_count < 0:
            raise ValueError("word_count must be >= 0")

    @classmethod
    def failed(cls, url: str, error: str) -> "PageRecord":
        return cls(url=url, status_code=0, error=error or "fetch failed")

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    def to_dict(self) -> dict[str, Any]:
        out = {name: getattr(self, name) for name in PAGE_FIELDS}
        if self.error is not None:
            out["error"] = self.error
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageRecord":
        if not isinstance(data, dict) or "url" not in data:
            raise AuditInputError(f"page entry must be an object with a url: {data!r}")
        return cls(
            url=str(data["url"]),
            status_code=int(data.get("status_code") or 0),
            title=data.get("title") or "",
            meta_description=data.get("meta_description") or "",
            h1=list(data.get("h1") or []),
            h2=list(data.get("h2") or []),
            h3=list(data.get("h3") or []),
            structured_data=list(data.get("structured_data") or []),
            images=list(data.get("images") or []),
            word_count=int(data.get("word_count") or 0),
            internal_links=int(data.get("internal_links") or 0),
            external_links=int(data.get("external_links") or 0),
            error=data.get("error"),
        )


@dataclass
class SiteSnapshot:
    website_url: str
    crawled_at: str = field(default_factory=utc_now)
    crawl_duration_ms: int = 0
    pages: list[PageRecord] = field(default_factory=list)
    robots_txt: dict[str, bool] = field(default_factory=lambda: {"exists": False})
    sitemaps: list[str] = field(default_factory=list)
    key_pages: list[dict[str, Any]] | None = None
    key_entities: list[Any] = field(default_factory=list)
    # Top-level keys this model does not own (stored analyzer summaries, baseline stamps).
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def pages_crawled(self) -> int:
        return len(self.pages)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "website_url": self.website_url,
            "crawled_at": self.crawled_at,
            "crawl_duration_ms": self.crawl_duration_ms,
            "pages_crawled": self.pages_crawled,
            "pages": [p.to_dict() for p in self.pages],
            "robots_txt": dict(self.robots_txt),
            "sitemaps": list(self.sitemaps),
            "key_entities": list(self.key_entities),
        }
        if self.key_pages is not None:
            out["key_pages"] = list(self.key_pages)
        out.update(self.extra)
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "SiteSnapshot":
        if not isinstance(data, dict):
            raise AuditInputError("site snapshot must be a JSON object")
        if not data.get("website_url"):
            raise AuditInputError("site snapshot is missing 'website_url'")
        pages_raw = data.get("pages") or []
        if not isinstance(pages_raw, list):
            raise AuditInputError("'pages' must be a list")
        try:
            pages = [PageRecord.from_dict(p) for p in pages_raw]
        except (TypeError, ValueError) as exc:
            raise AuditInputError(f"invalid page entry: {exc}") from exc
        robots = data.get("robots_txt") or {}
        return cls(
            website_url=str(data["website_url"]),
            crawled_at=str(data.get("crawled_at") or ""),
            crawl_duration_ms=int(data.get("crawl_duration_ms") or 0),
            pages=pages,
            robots_txt={"exists": bool(robots.get("exists"))} if isinstance(robots, dict) else {"exists": False},
            sitemaps=list(data.get("sitemaps") or []),
            key_pages=data.get("key_pages"),
            key_entities=list(data.get("key_entities") or []),
            extra={k: v for k, v in data.items() if k not in SNAPSHOT_FIELDS},
        )


def write_json_atomic(path: str | Path, payload: Any) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(f".{p.name}.tmp")
    tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    os.replace(tmp, p)


def load_snapshot(path: str | Path) -> SiteSnapshot:
    return SiteSnapshot.from_dict(read_json(path, "site snapshot"))


def save_snapshot(snapshot: SiteSnapshot, path: str | Path) -> None:
    write_json_atomic(path, snapshot.to_dict())
