"""Markdown audit report."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .config import Customer
from .issues import SEVERITY_ORDER
from .models import utc_now

SEVERITY_MARKERS = {"critical": "[CRITICAL]", "warning": "[WARNING]", "info": "[INFO]"}
SCORE_ROWS = (
    ("content_coverage", "Content Coverage"),
    ("health_checks", "Crawl Health"),
    ("citation_readiness", "Citation Readiness"),
)
EFFORT_SECTIONS = (
    ("low", "Quick Wins (Low Effort)"),
    ("medium", "Medium Effort"),
    ("high", "Major Projects (High Effort)"),
)


def render_issue(issue: dict[str, Any]) -> str:
    pages = "\n".join(f"- {p}" for p in issue["affected_pages"])
    affected = f"**Affected Pages:**\n{pages}\n\n" if pages else ""
    return (
        f"#### {SEVERITY_MARKERS.get(issue['severity'], '')} {issue['id']}: {issue['title']}\n\n"
        f"**Severity:** {issue['severity']}\n\n"
        f"**Description:** {issue['description']}\n\n"
        f"**Recommendation:** {issue['recommendation'] or '-'}\n\n"
        f"{affected}---\n"
    )


def render_categories(issues: list[dict[str, Any]]) -> str:
    grouped: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        grouped.setdefault(issue["category"], []).append(issue)
    if not grouped:
        return "No issues found.\n"
    blocks = []
    for category, members in grouped.items():
        ordered = sorted(members, key=lambda i: SEVERITY_ORDER.get(i["severity"], 99))
        body = "\n".join(render_issue(i) for i in ordered)
        blocks.append(f"### {category.capitalize()} ({len(members)} issues)\n\n{body}")
    return "\n".join(blocks)


def render_priorities(issues: list[dict[str, Any]]) -> str:
    actionable = [i for i in issues if i["severity"] in ("critical", "warning")]
    sections = []
    for effort, heading in EFFORT_SECTIONS:
        rows = "\n".join(f"- **[{i['id']}]** {i['title']}" for i in actionable if i.get("effort_estimate") == effort)
        sections.append(f"### {heading}\n\n{rows or '- None'}\n")
    return "\n".join(sections)


def render_report(customer: Customer, compiled: dict[str, Any], results: dict[str, dict[str, Any]] | None = None) -> str:
    results = results or {}
    summary = compiled["summary"]
    queries = "\n".join(f"- {q}" for q in customer.target_queries)
    query_section = f"## Target Queries\n\n{queries}\n\n" if queries else ""
    score_rows = "\n".join(
        f"| {label} | {results[key]['score']}/100 |" for key, label in SCORE_ROWS if results.get(key)
    )
    if score_rows:
        score_rows += "\n"

    return f"""# AEO Audit Report

**Website:** {customer.domain}
**Brand:** {customer.brand_name or 'N/A'}
**Generated:** {utc_now()}

## Executive Summary

This audit measures how ready the website is to be indexed and cited by AI answer engines.

| Metric | Value |
|--------|-------|
| Total Issues | {summary['total_issues']} |
| Critical | {summary['critical_count']} |
| Warnings | {summary['warning_count']} |
| Info | {summary['info_count']} |
| Overall Score | {summary['score']}/100 |

{query_section}## Analysis Scores

| Analysis | Score |
|----------|-------|
{score_rows}| **Overall** | **{summary['score']}/100** |

## Issues by Category

{render_categories(compiled['issues'])}
## Priority Recommendations

{render_priorities(compiled['issues'])}
---
*Report generated by aeo-audit*
"""


def write_report(path: str | Path, customer: Customer, compiled: dict[str, Any], results: dict[str, dict[str, Any]] | None = None) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(render_report(customer, compiled, results), encoding="utf-8")
    return out
