"""
Issue Compiler: merges analyzer outputs into one canonical, numbered issue list.
"""

from __future__ import annotations

from typing import Any

# result key -> (category, id prefix)
CATEGORIES = {
    "content_coverage": ("content", "CONTENT"),
    "health_checks": ("health", "HEALTH"),
    "citation_readiness": ("citation", "CITATION"),
    "competitor_gap": ("competitor", "COMPETITOR"),
}
SEVERITY_MAP = {"critical": "critical", "high": "warning", "medium": "warning", "low": "info", "info": "info"}
SEVERITY_ORDER = {"critical": 0, "warning": 1, "info": 2}
SCORED_RESULTS = ("content_coverage", "health_checks", "citation_readiness")

TITLES = {
    "missing_meta_description": "Missing meta description",
    "short_meta_description": "Meta description too short",
    "missing_h1": "Missing H1 heading",
    "multiple_h1": "Multiple H1 headings",
    "missing_title": "Missing title tag",
    "thin_content": "Thin content",
    "images_missing_alt": "Images missing alt text",
    "http_error": "HTTP error responses",
    "redirect": "Redirecting URLs",
    "duplicate_title": "Duplicate titles",
    "missing_robots_txt": "robots.txt not found",
    "missing_sitemap": "XML sitemap not found",
    "non_html_crawled": "Non-HTML resources crawled",
    "missing_schema_org": "No Schema.org structured data",
    "missing_author_info": "No author information",
    "missing_organization_schema": "No Organization schema",
    "missing_faq_schema": "No FAQ schema",
    "missing_howto_schema": "No HowTo schema",
    "no_competitors_configured": "No competitors configured",
    "competitor_crawl_required": "Competitor crawl required",
}
RECOMMENDATIONS = {
    "missing_meta_description": "Add a unique 150-160 character meta description to every page.",
    "short_meta_description": "Expand meta descriptions to 150-160 characters that answer the page's main question.",
    "missing_h1": "Give every page exactly one descriptive H1.",
    "multiple_h1": "Keep a single H1 per page and demote the rest to H2.",
    "missing_title": "Add a unique, descriptive <title> to every page.",
    "thin_content": "Expand thin pages with substantive, self-contained answers.",
    "images_missing_alt": "Describe every meaningful image in its alt attribute.",
    "http_error": "Fix or redirect URLs that return 4xx/5xx responses.",
    "redirect": "Link directly to final URLs instead of redirecting ones.",
    "duplicate_title": "Make every page title unique.",
    "missing_robots_txt": "Publish /robots.txt and reference the sitemap from it.",
    "missing_sitemap": "Generate an XML sitemap and declare it in robots.txt.",
    "non_html_crawled": "Keep asset URLs out of crawlable navigation.",
    "missing_schema_org": "Add Schema.org JSON-LD (Organization, WebSite, Article) to key pages.",
    "missing_author_info": "Add bylines, author pages and Person schema.",
    "missing_organization_schema": "Add Organization schema with name, url, logo and sameAs links.",
    "missing_faq_schema": "Mark up genuine FAQ sections with FAQPage schema.",
    "missing_howto_schema": "Mark up step-by-step guides with HowTo schema.",
}
EFFORT = {
    "missing_meta_description": "low",
    "short_meta_description": "low",
    "missing_h1": "low",
    "multiple_h1": "low",
    "missing_title": "low",
    "images_missing_alt": "low",
    "missing_robots_txt": "low",
    "missing_sitemap": "low",
    "non_html_crawled": "low",
    "duplicate_title": "medium",
    "redirect": "medium",
    "http_error": "medium",
    "missing_organization_schema": "medium",
    "missing_faq_schema": "medium",
    "missing_howto_schema": "medium",
    "missing_schema_org": "medium",
    "missing_author_info": "medium",
    "thin_content": "high",
    "competitor_crawl_required": "high",
}


def result_score(result: dict[str, Any] | None) -> float | None:
    if not result:
        return None
    score = result.get("score")
    return float(score) if isinstance(score, (int, float)) else None


def compile_issues(results: dict[str, dict[str, Any] | None]) -> dict[str, Any]:
    grouped: dict[tuple[str, str], dict[str, Any]] = {}
    counters: dict[str, int] = {}
    raw_total = 0

    for key, (category, prefix) in CATEGORIES.items():
        result = results.get(key)
        if not result:
            continue
        for issue in result.get("issues", []):
            raw_total += 1
            severity = SEVERITY_MAP[issue["severity"]]
            group_key = (category, issue["type"])
            compiled = grouped.get(group_key)
            if compiled is None:
                counters[prefix] = counters.get(prefix, 0) + 1
                compiled = {
                    "id": f"{prefix}-{counters[prefix]:03d}",
                    "category": category,
                    "type": issue["type"],
                    "severity": severity,
                    "title": TITLES.get(issue["type"], issue["type"].replace("_", " ").capitalize()),
                    "description": issue["message"],
                    "recommendation": issue.get("recommendation") or RECOMMENDATIONS.get(issue["type"], ""),
                    "affected_pages": [],
                    "effort_estimate": EFFORT.get(issue["type"], "medium"),
                }
                grouped[group_key] = compiled
            elif SEVERITY_ORDER[severity] < SEVERITY_ORDER[compiled["severity"]]:
                compiled["severity"] = severity
            page = issue.get("page")
            if page and page not in compiled["affected_pages"]:
                compiled["affected_pages"].append(page)

    issues = list(grouped.values())
    scores = [s for s in (result_score(results.get(k)) for k in SCORED_RESULTS) if s is not None]
    summary = {
        "total_issues": len(issues),
        "critical_count": sum(1 for i in issues if i["severity"] == "critical"),
        "warning_count": sum(1 for i in issues if i["severity"] == "warning"),
        "info_count": sum(1 for i in issues if i["severity"] == "info"),
        "total_issues_found": raw_total,
        "score": round(sum(scores) / len(scores)) if scores else 0,
    }
    return {"issues": issues, "summary": summary}
