"""
Monitoring Engine: diff a current snapshot against the stored baseline and
raise alerts against configured thresholds.

State lives in one JSON file::

    {"monitoring": {"enabled": true,
                    "baseline_snapshot": "data/baseline_snapshot.json",
                    "alert_thresholds": {...}},
     "history": [{"checked_at": ..., "diff": ..., "alerts": [...]}]}

Every mutation loads the whole file, applies a pure change and rewrites it
atomically. Two processes running checks against the same file at once can
still lose one history entry; only one operator is expected per workspace.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .config import AlertThresholds, AuditInputError, read_json
from .models import SiteSnapshot, utc_now, write_json_atomic

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30
DEFAULT_BASELINE_PATH = "data/baseline_snapshot.json"

# diff change type -> (snapshot section, field)
SCORE_METRICS = {
    "health_score": ("health_checks", "health_score"),
    "citation_score": ("citation_readiness", "citation_score"),
    "content_coverage_score": ("content_coverage", "coverage_score"),
}


def as_dict(snapshot: SiteSnapshot | dict[str, Any]) -> dict[str, Any]:
    return snapshot.to_dict() if isinstance(snapshot, SiteSnapshot) else snapshot


def metric_value(snapshot: dict[str, Any], section: str, field: str) -> float | None:
    value = (snapshot.get(section) or {}).get(field)
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else None


def structured_data_count(snapshot: dict[str, Any]) -> int:
    return sum(len(p.get("structured_data") or []) for p in snapshot.get("pages") or [])


def page_count(snapshot: dict[str, Any]) -> int:
    if isinstance(snapshot.get("pages_crawled"), int):
        return snapshot["pages_crawled"]
    return len(snapshot.get("pages") or [])


def compare_snapshots(current: SiteSnapshot | dict[str, Any], baseline: SiteSnapshot | dict[str, Any]) -> dict[str, Any]:
    """Build a Diff. A score metric absent on either side is not compared."""
    cur = as_dict(current)
    base = as_dict(baseline)
    changes: list[dict[str, Any]] = []
    summary: dict[str, Any] = {"has_changes": False, "pages_added": 0, "pages_removed": 0, "scores": {}}

    def change(kind: str, old: Any, new: Any) -> dict[str, Any]:
        entry = {"type": kind, "baseline": old, "current": new, "delta": new - old}
        changes.append(entry)
        return entry

    cur_pages, base_pages = page_count(cur), page_count(base)
    if cur_pages != base_pages:
        change("page_count", base_pages, cur_pages)
        summary["pages_added"] = max(0, cur_pages - base_pages)
        summary["pages_removed"] = max(0, base_pages - cur_pages)

    for name, (section, field) in SCORE_METRICS.items():
        new = metric_value(cur, section, field)
        old = metric_value(base, section, field)
        if new is None or old is None or new == old:
            continue
        entry = change(name, old, new)
        summary["scores"][name] = {"baseline": old, "current": new, "delta": entry["delta"]}

    cur_issues = (cur.get("compilation_summary") or {}).get("total_issues_found") or 0
    base_issues = (base.get("compilation_summary") or {}).get("total_issues_found") or 0
    if cur_issues != base_issues:
        change("issues_count", base_issues, cur_issues)

    cur_sd, base_sd = structured_data_count(cur), structured_data_count(base)
    if cur_sd != base_sd:
        change("structured_data_count", base_sd, cur_sd)

    summary["has_changes"] = bool(changes)
    return {"timestamp": utc_now(), "changes": changes, "summary": summary}


def check_thresholds(diff: dict[str, Any], thresholds: AlertThresholds) -> list[dict[str, str]]:
    alerts: list[dict[str, str]] = []
    for change in diff["changes"]:
        kind, delta = change["type"], change["delta"]
        if kind == "issues_count" and delta > thresholds.new_issues_critical:
            alerts.append({"level": "critical", "message": f"{delta} new issues detected"})
        if "score" in kind and delta < -thresholds.score_drop_above:
            alerts.append({"level": "warning", "message": f"{kind} dropped by {abs(delta)} points"})
        if kind == "page_count" and delta < -thresholds.pages_removed_above:
            alerts.append({"level": "warning", "message": f"{abs(delta)} pages removed"})
    return alerts


def default_state() -> dict[str, Any]:
    return {
        "monitoring": {
            "enabled": True,
            "baseline_snapshot": None,
            "alert_thresholds": AlertThresholds().to_dict(),
        },
        "history": [],
    }


def append_history(state: dict[str, Any], entry: dict[str, Any], limit: int = HISTORY_LIMIT) -> dict[str, Any]:
    history = list(state.get("history") or []) + [entry]
    return {**state, "history": history[-limit:]}


class MonitoringEngine:
    def __init__(self, config_path: str | Path, workspace_dir: str | Path | None = None) -> None:
        self.config_path = Path(config_path)
        self.workspace_dir = Path(workspace_dir) if workspace_dir is not None else self.config_path.parent

    def load_state(self) -> dict[str, Any] | None:
        if not self.config_path.exists():
            return None
        state = read_json(self.config_path, "monitoring config")
        if not isinstance(state, dict) or not isinstance(state.get("monitoring", {}), dict):
            raise AuditInputError(f"monitoring config must be an object with a 'monitoring' section: {self.config_path}")
        state.setdefault("monitoring", {})
        return state

    def save_state(self, state: dict[str, Any]) -> None:
        write_json_atomic(self.config_path, state)

    def baseline_path(self, state: dict[str, Any]) -> Path | None:
        pointer = state["monitoring"].get("baseline_snapshot")
        if not pointer:
            return None
        path = Path(pointer)
        return path if path.is_absolute() else self.workspace_dir / path

    def load_baseline(self, state: dict[str, Any]) -> dict[str, Any] | None:
        path = self.baseline_path(state)
        if path is None or not path.exists():
            return None
        baseline = read_json(path, "baseline snapshot")
        if not isinstance(baseline, dict):
            raise AuditInputError(f"baseline snapshot must be a JSON object: {path}")
        return baseline

    def status(self) -> str:
        state = self.load_state()
        if state is None or not state["monitoring"].get("enabled"):
            return "disabled"
        if self.load_baseline(state) is None:
            return "no_baseline"
        return "ready"

    def create_baseline(self, snapshot: SiteSnapshot | dict[str, Any], baseline_path: str = DEFAULT_BASELINE_PATH) -> Path:
        """Write the snapshot as the new baseline and point the config at it."""
        created_at = utc_now()
        data = as_dict(snapshot)
        baseline = {**data, "baseline_created_at": created_at, "original_crawled_at": data.get("crawled_at")}

        state = self.load_state() or default_state()
        state["monitoring"] = {
            **state["monitoring"],
            "baseline_snapshot": baseline_path,
            "baseline_created_at": created_at,
        }
        target = self.baseline_path(state)
        write_json_atomic(target, baseline)
        self.save_state(state)
        logger.info("Baseline created: %s", target)
        return target

    def run_check(self, current: SiteSnapshot | dict[str, Any]) -> dict[str, Any]:
        state = self.load_state()
        if state is None or not state["monitoring"].get("enabled"):
            logger.info("Monitoring disabled")
            return {"status": "disabled"}

        baseline = self.load_baseline(state)
        if baseline is None:
            logger.info("No baseline snapshot found")
            return {"status": "no_baseline", "message": "No baseline snapshot found. Create one with 'monitor baseline'."}

        diff = compare_snapshots(current, baseline)
        alerts = check_thresholds(diff, AlertThresholds.from_dict(state["monitoring"].get("alert_thresholds")))
        self.save_state(append_history(state, {"checked_at": diff["timestamp"], "diff": diff, "alerts": alerts}))

        status = "alerts" if alerts else "ok"
        logger.info("Monitoring check: %s (%d changes, %d alerts)", status, len(diff["changes"]), len(alerts))
        return {
            "status": status,
            "diff": diff,
            "alerts": alerts,
            "baseline_date": baseline.get("baseline_created_at") or baseline.get("crawled_at"),
        }
