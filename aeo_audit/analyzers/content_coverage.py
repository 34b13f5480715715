"""Content coverage: per-page metadata, heading and depth checks."""

from __future__ import annotations

from typing import Any

from ..models import PageRecord, SiteSnapshot
from .common import count_by_severity, is_non_html, make_issue

# Images other than png/jpg are still checked as content pages.
SKIPPED_EXTENSIONS = (".css", ".js", ".ico", ".png", ".jpg")
MIN_META_DESCRIPTION_CHARS = 50
THIN_CONTENT_WORDS = 50
HIGH_PENALTY = 15
MEDIUM_PENALTY = 5


def coverage_score(content_pages: list[PageRecord], issues: list[dict[str, Any]]) -> int:
    if not content_pages:
        return 0
    score = 100
    score -= count_by_severity(issues, "high") * HIGH_PENALTY
    score -= count_by_severity(issues, "medium") * MEDIUM_PENALTY
    return max(0, min(100, score))


def analyze_content_coverage(snapshot: SiteSnapshot) -> dict[str, Any]:
    pages = [p for p in snapshot.pages if not is_non_html(p.url, SKIPPED_EXTENSIONS)]
    issues: list[dict[str, Any]] = []

    for page in pages:
        desc = (page.meta_description or "").strip()
        if not desc:
            issues.append(make_issue(
                type="missing_meta_description",
                severity="high",
                page=page.url,
                message="Page missing meta description",
                recommendation="Write a unique 150-160 character meta description summarising the page.",
            ))
        elif len(page.meta_description) < MIN_META_DESCRIPTION_CHARS:
            issues.append(make_issue(
                type="short_meta_description",
                severity="medium",
                page=page.url,
                message=f"Meta description too short ({len(page.meta_description)} chars). Recommended: 150-160",
            ))

    for page in pages:
        if not page.h1:
            issues.append(make_issue(
                type="missing_h1",
                severity="high",
                page=page.url,
                message="Page missing H1 heading",
            ))
        elif len(page.h1) > 1:
            issues.append(make_issue(
                type="multiple_h1",
                severity="medium",
                page=page.url,
                message=f"Multiple H1 headings found ({len(page.h1)}). Should have exactly one.",
            ))

    for page in pages:
        if not (page.title or "").strip():
            issues.append(make_issue(
                type="missing_title",
                severity="high",
                page=page.url,
                message="Page missing title tag",
            ))

    for page in pages:
        if page.word_count < THIN_CONTENT_WORDS:
            issues.append(make_issue(
                type="thin_content",
                severity="medium",
                page=page.url,
                message=f"Very low word count ({page.word_count}). Pages should have substantial content.",
            ))

    for page in pages:
        missing_alt = [img for img in page.images if not str(img.get("alt") or "").strip()]
        if missing_alt:
            issues.append(make_issue(
                type="images_missing_alt",
                severity="medium",
                page=page.url,
                message=f"{len(missing_alt)} images missing alt text",
            ))

    summary = {
        "total_content_pages": len(pages),
        "pages_with_meta_description": sum(1 for p in pages if (p.meta_description or "").strip()),
        "pages_with_h1": sum(1 for p in pages if p.h1),
        "pages_with_title": sum(1 for p in pages if (p.title or "").strip()),
        "total_issues": len(issues),
        "high_severity": count_by_severity(issues, "high"),
        "medium_severity": count_by_severity(issues, "medium"),
        "coverage_score": coverage_score(pages, issues),
    }
    return {"issues": issues, "summary": summary, "score": summary["coverage_score"]}
