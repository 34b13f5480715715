"""Crawl and index health checks."""

from __future__ import annotations

from typing import Any

from ..models import SiteSnapshot, utc_now
from .common import count_by_severity, is_non_html, make_issue

THIN_CONTENT_WORDS = 100


def run_health_checks(snapshot: SiteSnapshot) -> dict[str, Any]:
    issues: list[dict[str, Any]] = []
    score = 100
    site = snapshot.website_url

    for page in snapshot.pages:
        if page.status_code >= 400:
            issues.append(make_issue(type="http_error", severity="critical", page=page.url, message=f"Page returned HTTP {page.status_code}"))
            score -= 20
        elif 300 <= page.status_code < 400:
            issues.append(make_issue(type="redirect", severity="medium", page=page.url, message=f"Page redirects (HTTP {page.status_code})"))
            score -= 10

    first_with_title: dict[str, str] = {}
    for page in snapshot.pages:
        if not page.title:
            continue
        if page.title in first_with_title:
            issues.append(make_issue(
                type="duplicate_title",
                severity="medium",
                page=page.url,
                message=f'Duplicate title: "{page.title}" also used by {first_with_title[page.title]}',
            ))
            score -= 5
        else:
            first_with_title[page.title] = page.url

    key_pages = [p for p in snapshot.pages if p.url == site or p.internal_links > 0]
    for page in key_pages:
        if not page.title:
            issues.append(make_issue(type="missing_title", severity="high", page=page.url, message="Key page missing title tag"))
            score -= 10
    for page in key_pages:
        if not page.meta_description:
            issues.append(make_issue(
                type="missing_meta_description",
                severity="high",
                page=page.url,
                message="Key page missing meta description",
            ))
            score -= 10

    if not snapshot.robots_txt.get("exists"):
        issues.append(make_issue(
            type="missing_robots_txt",
            severity="medium",
            page=site,
            message="robots.txt not found - search engines may not discover all pages",
            recommendation="Publish /robots.txt and reference the sitemap from it.",
        ))
        score -= 10
    if not snapshot.sitemaps:
        issues.append(make_issue(
            type="missing_sitemap",
            severity="high",
            page=site,
            message="No sitemap.xml found - may hinder deep crawling",
            recommendation="Generate an XML sitemap and declare it in robots.txt.",
        ))
        score -= 15

    for page in snapshot.pages:
        if page.word_count and page.word_count < THIN_CONTENT_WORDS and page.status_code == 200:
            issues.append(make_issue(type="thin_content", severity="low", page=page.url, message=f"Very low word count ({page.word_count})"))
            score -= 3

    non_html = [p for p in snapshot.pages if is_non_html(p.url)]
    if non_html:
        issues.append(make_issue(
            type="non_html_crawled",
            severity="low",
            page=site,
            message=f"Crawled {len(non_html)} non-HTML resources (css, images) - may want to exclude",
        ))
        score -= 2

    score = max(0, score)
    return {
        "timestamp": utc_now(),
        "health_score": score,
        "score": score,
        "total_issues": len(issues),
        "critical_issues": count_by_severity(issues, "critical"),
        "high_issues": count_by_severity(issues, "high"),
        "medium_issues": count_by_severity(issues, "medium"),
        "low_issues": count_by_severity(issues, "low"),
        "issues": issues,
        "summary": {
            "pages_crawled": snapshot.pages_crawled,
            "html_pages": snapshot.pages_crawled - len(non_html),
            "key_pages_identified": len(snapshot.key_pages or []),
            "crawl_duration_ms": snapshot.crawl_duration_ms,
            "score": score,
        },
    }
