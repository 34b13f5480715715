from __future__ import annotations

from typing import Any, Iterable

SEVERITIES = ("critical", "high", "medium", "low", "info")
NON_HTML_EXTENSIONS = (".css", ".js", ".ico", ".png", ".jpg", ".gif")


def make_issue(
    *,
    type: str,
    severity: str,
    page: str,
    message: str,
    recommendation: str | None = None,
) -> dict[str, Any]:
    if severity not in SEVERITIES:
        raise ValueError(f"Unknown severity: {severity}")
    issue: dict[str, Any] = {"type": type, "severity": severity, "page": page, "message": message}
    if recommendation:
        issue["recommendation"] = recommendation
    return issue


def count_by_severity(issues: Iterable[dict[str, Any]], severity: str) -> int:
    return sum(1 for i in issues if i["severity"] == severity)


def is_non_html(url: str, extensions: tuple[str, ...] = NON_HTML_EXTENSIONS) -> bool:
    return url.lower().endswith(extensions)
