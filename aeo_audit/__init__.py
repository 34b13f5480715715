"""AI answer-engine readiness audit: crawl, analyze, compile issues, monitor."""

from .config import AlertThresholds, AuditInputError, CrawlConfig, Customer, load_customer
from .crawler import Crawler, crawl_site
from .models import PageRecord, SiteSnapshot, load_snapshot, save_snapshot

__version__ = "0.1.0"

__all__ = [
    "AlertThresholds",
    "AuditInputError",
    "CrawlConfig",
    "Crawler",
    "Customer",
    "PageRecord",
    "SiteSnapshot",
    "crawl_site",
    "load_customer",
    "load_snapshot",
    "save_snapshot",
]
