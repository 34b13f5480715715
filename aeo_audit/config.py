"""
Configuration objects and input-file loading.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .net import DEFAULT_USER_AGENT, normalize_url


class AuditInputError(ValueError):
    """A top-level input file (customer, snapshot, monitoring state) is unreadable or malformed."""


@dataclass
class CrawlConfig:
    """Bounds and identity for one crawl run."""

    max_pages: int = 10
    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    check_site_files: bool = True

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")


@dataclass
class AlertThresholds:
    new_issues_critical: int = 5
    score_drop_above: float = 10
    pages_removed_above: int = 3

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "AlertThresholds":
        raw = raw or {}
        defaults = cls()
        return cls(
            new_issues_critical=raw.get("new_issues_critical", defaults.new_issues_critical),
            score_drop_above=raw.get("score_drop_above", defaults.score_drop_above),
            pages_removed_above=raw.get("pages_removed_above", defaults.pages_removed_above),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "new_issues_critical": self.new_issues_critical,
            "score_drop_above": self.score_drop_above,
            "pages_removed_above": self.pages_removed_above,
        }


@dataclass
class Customer:
    website_url: str
    brand_name: str | None = None
    target_queries: list[str] = field(default_factory=list)
    competitors: list[dict[str, str | None]] = field(default_factory=list)

    @property
    def domain(self) -> str:
        return self.website_url


def read_json(path: str | Path, label: str) -> Any:
    p = Path(path)
    if not p.exists():
        raise AuditInputError(f"{label} file not found: {p}")
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise AuditInputError(f"{label} file is not valid JSON ({p}): {exc}") from exc


def normalize_competitor(raw: Any) -> dict[str, str | None] | None:
    if isinstance(raw, str):
        domain = raw.strip()
        return {"domain": domain, "brand_name": None} if domain else None
    if isinstance(raw, dict):
        domain = str(raw.get("domain") or raw.get("website_url") or "").strip()
        if not domain:
            return None
        brand = raw.get("brand_name")
        return {"domain": domain, "brand_name": str(brand).strip() if brand else None}
    raise AuditInputError(f"Unsupported competitor entry: {raw!r}")


def customer_from_dict(data: Any) -> Customer:
    if not isinstance(data, dict):
        raise AuditInputError("customer record must be a JSON object")
    site = data.get("website_url") or data.get("domain")
    if not site or not isinstance(site, str):
        raise AuditInputError("customer record needs 'domain' or 'website_url'")
    try:
        website_url = normalize_url(site)
    except ValueError as exc:
        raise AuditInputError(f"customer site URL is invalid: {exc}") from exc

    queries = data.get("target_queries") or []
    if not isinstance(queries, list):
        raise AuditInputError("'target_queries' must be a list")
    competitors_raw = data.get("competitors") or []
    if not isinstance(competitors_raw, list):
        raise AuditInputError("'competitors' must be a list")
    competitors = [c for c in (normalize_competitor(x) for x in competitors_raw) if c]
    brand = data.get("brand_name")
    return Customer(
        website_url=website_url,
        brand_name=str(brand) if brand else None,
        target_queries=[str(q) for q in queries if str(q).strip()],
        competitors=competitors,
    )


def load_customer(path: str | Path) -> Customer:
    return customer_from_dict(read_json(path, "customer"))
