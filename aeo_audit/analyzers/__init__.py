"""Read-only analyzers over a Site Snapshot. None of them mutate it or read each other's output."""

from .citation import check_citation_readiness
from .competitor_gap import analyze_competitor_gaps
from .content_coverage import analyze_content_coverage
from .health import run_health_checks

__all__ = [
    "analyze_content_coverage",
    "analyze_competitor_gaps",
    "check_citation_readiness",
    "run_health_checks",
]
