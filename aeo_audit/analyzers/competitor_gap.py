"""Competitor gap analysis.

Cross-site comparison needs competitor crawling, which does not exist yet:
configured competitors each get a "crawl required" placeholder and a fixed
partial score. Without competitors the result describes the comparison
framework from the site's own numbers.
"""

from __future__ import annotations

from typing import Any

from ..config import Customer
from ..models import SiteSnapshot, utc_now
from .common import make_issue

MAX_SCORE = 100
PLACEHOLDER_SCORE = 50
OPPORTUNITIES = [
    {
        "priority": "high",
        "title": "Define Competitor List",
        "description": "Add competitors to customer.json to enable detailed gap analysis",
        "effort": "low",
    },
    {
        "priority": "medium",
        "title": "Implement Competitor Crawling",
        "description": "Build competitor site crawling capability for automated comparison",
        "effort": "high",
    },
]


def structured_data_types(snapshot: SiteSnapshot) -> list[str]:
    out: list[str] = []
    for page in snapshot.pages:
        for block in page.structured_data:
            raw = block.get("schema", block.get("@type")) if isinstance(block, dict) else None
            for value in raw if isinstance(raw, list) else [raw or "unknown"]:
                if str(value) not in out:
                    out.append(str(value))
    return out


def analysis_framework(snapshot: SiteSnapshot) -> dict[str, Any]:
    return {
        "content_depth": {
            "description": "Compare word counts and content richness against competitors",
            "current_site_word_count": sum(p.word_count for p in snapshot.pages),
        },
        "structured_data": {
            "description": "Compare structured data presence (JSON-LD, Schema.org)",
            "current_site_structured_data_types": structured_data_types(snapshot),
        },
        "key_pages": {
            "description": "Compare key page types and coverage",
            "current_site_key_pages": [kp.get("type") for kp in snapshot.key_pages or []],
        },
        "seo_signals": {
            "description": "Compare meta tags, headings, and SEO optimization",
            "current_site_has_meta_descriptions": sum(1 for p in snapshot.pages if p.meta_description),
            "current_site_has_h1": sum(1 for p in snapshot.pages if p.h1),
        },
    }


def analyze_competitor_gaps(customer: Customer, snapshot: SiteSnapshot) -> dict[str, Any]:
    results: dict[str, Any] = {
        "analysis_date": utc_now(),
        "target_domain": customer.domain,
        "target_brand": customer.brand_name,
        "competitors_analyzed": [],
        "gaps": [],
        "opportunities": [dict(o) for o in OPPORTUNITIES],
        "score": 0,
        "max_score": MAX_SCORE,
    }

    if not customer.competitors:
        results["gaps"].append(make_issue(
            type="no_competitors_configured",
            severity="info",
            page=customer.domain,
            message="No competitors defined in customer configuration. Add competitors to customer.json to enable gap analysis.",
            recommendation='Add a "competitors" array to customer.json with competitor domains for analysis.',
        ))
        results["status"] = "pending_competitor_config"
        results["analysis_framework"] = analysis_framework(snapshot)
        results["issues"] = list(results["gaps"])
        return results

    total = 0
    for competitor in customer.competitors:
        domain = competitor["domain"]
        gap = make_issue(
            type="competitor_crawl_required",
            severity="info",
            page=domain,
            message=f"Competitor analysis for {domain} requires crawling competitor sites",
            recommendation="Implement competitor site crawling in future iteration",
        )
        results["competitors_analyzed"].append({
            "domain": domain,
            "brand": competitor.get("brand_name") or "Unknown",
            "gaps": [gap],
            "opportunities": [],
        })
        results["gaps"].append(gap)
        total += PLACEHOLDER_SCORE

    results["score"] = min(total, MAX_SCORE)
    results["status"] = "analyzed"
    results["issues"] = list(results["gaps"])
    return results
