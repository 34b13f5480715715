"""
Snapshot enrichment, analyzer fan-out and issue compilation.
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable

from . import key_pages
from .analyzers import (
    analyze_competitor_gaps,
    analyze_content_coverage,
    check_citation_readiness,
    run_health_checks,
)
from .config import CrawlConfig, Customer
from .issues import compile_issues
from .models import SiteSnapshot
from .structured_data import collect_structured_data

logger = logging.getLogger(__name__)


def enrich_snapshot(snapshot: SiteSnapshot, config: CrawlConfig | None = None, session: Any = None) -> SiteSnapshot:
    """Structured-data pass, then key-page detection. Must finish before any analyzer runs."""
    collect_structured_data(snapshot, config, session)
    return apply_key_pages(snapshot)


def apply_key_pages(snapshot: SiteSnapshot) -> SiteSnapshot:
    detected = key_pages.detect(snapshot.pages)
    carried = [
        {"type": "structured_data", "value": name, "display": name, "source": snapshot.website_url}
        for name in snapshot.key_entities
        if isinstance(name, str)
    ]
    snapshot.key_pages = detected["key_pages"]
    snapshot.key_entities = carried + detected["key_entities"]
    return snapshot


def analyzer_jobs(snapshot: SiteSnapshot, customer: Customer) -> dict[str, Callable[[], dict[str, Any]]]:
    return {
        "content_coverage": lambda: analyze_content_coverage(snapshot),
        "health_checks": lambda: run_health_checks(snapshot),
        "citation_readiness": lambda: check_citation_readiness(snapshot),
        "competitor_gap": lambda: analyze_competitor_gaps(customer, snapshot),
    }


def run_analyzers(snapshot: SiteSnapshot, customer: Customer, parallel: bool = False) -> dict[str, dict[str, Any]]:
    jobs = analyzer_jobs(snapshot, customer)
    if not parallel:
        return {name: job() for name, job in jobs.items()}

    results: dict[str, dict[str, Any]] = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=len(jobs)) as pool:
        futures = {pool.submit(job): name for name, job in jobs.items()}
        for fut in concurrent.futures.as_completed(futures):
            results[futures[fut]] = fut.result()
    return {name: results[name] for name in jobs}


def record_audit(snapshot: SiteSnapshot, results: dict[str, dict[str, Any]], compiled: dict[str, Any]) -> SiteSnapshot:
    """Store the headline numbers on the snapshot so monitoring can diff them later."""
    if "health_checks" in results:
        snapshot.extra["health_checks"] = {"health_score": results["health_checks"]["health_score"]}
    if "citation_readiness" in results:
        snapshot.extra["citation_readiness"] = {"citation_score": results["citation_readiness"]["citation_score"]}
    if "content_coverage" in results:
        snapshot.extra["content_coverage"] = {"coverage_score": results["content_coverage"]["summary"]["coverage_score"]}
    snapshot.extra["compilation_summary"] = dict(compiled["summary"])
    return snapshot


def audit(snapshot: SiteSnapshot, customer: Customer, parallel: bool = False) -> tuple[dict[str, dict[str, Any]], dict[str, Any]]:
    results = run_analyzers(snapshot, customer, parallel=parallel)
    compiled = compile_issues(results)
    logger.info(
        "Audit compiled %d issues (score %s/100)",
        compiled["summary"]["total_issues"],
        compiled["summary"]["score"],
    )
    return results, compiled
