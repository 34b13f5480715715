#!/usr/bin/env python3
"""
aeo-audit: crawl a site, audit its AI-search readiness, and monitor changes.

Workspace layout (all paths overridable by flag):

    data/customer.json        customer record
    data/site_snapshot.json   latest crawl
    data/*.json               analyzer outputs and compiled issues
    data/AUDIT-REPORT.md      markdown report
    config/monitoring.json    monitoring config + history
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from . import __version__
from .config import CrawlConfig, Customer, load_customer
from .crawler import crawl_site
from .models import SiteSnapshot, load_snapshot, save_snapshot, write_json_atomic
from .monitoring import MonitoringEngine
from .pipeline import audit, enrich_snapshot, record_audit
from .report import write_report
from .validation import validate_json_file

logger = logging.getLogger("aeo_audit")

DEFAULT_SNAPSHOT = "data/site_snapshot.json"
DEFAULT_CUSTOMER = "data/customer.json"
DEFAULT_OUTPUT_DIR = "data"
DEFAULT_MONITORING_CONFIG = "config/monitoring.json"
REPORT_NAME = "AUDIT-REPORT.md"


def customer_for(path: Path, snapshot: SiteSnapshot) -> Customer:
    if path.exists():
        return load_customer(path)
    logger.warning("No customer record at %s; auditing %s without one", path, snapshot.website_url)
    return Customer(website_url=snapshot.website_url)


def run_full_audit(snapshot: SiteSnapshot, customer: Customer, output_dir: Path, parallel: bool) -> dict[str, Any]:
    results, compiled = audit(snapshot, customer, parallel=parallel)
    output_dir.mkdir(parents=True, exist_ok=True)
    for name, result in results.items():
        write_json_atomic(output_dir / f"{name}.json", result)
    write_json_atomic(output_dir / "issues.json", compiled)
    report_path = write_report(output_dir / REPORT_NAME, customer, compiled, results)
    record_audit(snapshot, results, compiled)
    print(f"Issues: {compiled['summary']['total_issues']} (score {compiled['summary']['score']}/100)")
    print(f"Report: {report_path}")
    return compiled


def run_crawl(args: argparse.Namespace) -> int:
    config = CrawlConfig(max_pages=args.max_pages, timeout=args.timeout, check_site_files=not args.no_site_files)
    snapshot = crawl_site(args.url, config)
    save_snapshot(snapshot, args.output)
    print(f"Pages crawled: {snapshot.pages_crawled}")
    print(f"Snapshot: {args.output}")
    return 0 if snapshot.pages else 1


def run_enrich(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)
    enrich_snapshot(snapshot, CrawlConfig(timeout=args.timeout))
    save_snapshot(snapshot, args.snapshot)
    print(f"Key pages: {len(snapshot.key_pages or [])}")
    print(f"Key entities: {len(snapshot.key_entities)}")
    return 0


def run_audit(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)
    if not snapshot.pages:
        print("Error: snapshot has no pages; run 'aeo-audit crawl' first.")
        return 1
    customer = customer_for(Path(args.customer), snapshot)
    run_full_audit(snapshot, customer, Path(args.output_dir), args.parallel)
    save_snapshot(snapshot, args.snapshot)
    return 0


def print_check(result: dict[str, Any]) -> None:
    print(f"Status: {result['status']}")
    if "message" in result:
        print(result["message"])
    diff = result.get("diff")
    if diff:
        print(f"Has changes: {'Yes' if diff['summary']['has_changes'] else 'No'}")
        print(f"Changes: {len(diff['changes'])}")
    for alert in result.get("alerts", []):
        print(f"[{alert['level'].upper()}] {alert['message']}")


def run_monitor(args: argparse.Namespace) -> int:
    workspace = Path(args.workspace)
    config_path = Path(args.config) if args.config else workspace / DEFAULT_MONITORING_CONFIG
    snapshot_path = Path(args.snapshot) if args.snapshot else workspace / DEFAULT_SNAPSHOT
    engine = MonitoringEngine(config_path, workspace)

    if not snapshot_path.exists():
        print(f"Error: no site snapshot at {snapshot_path}; run an audit first.")
        return 1
    snapshot = load_snapshot(snapshot_path)

    if args.action == "baseline":
        target = engine.create_baseline(snapshot)
        print(f"Baseline: {target}")
        return 0

    if args.action == "crawl":
        config = CrawlConfig(max_pages=args.max_pages, timeout=args.timeout)
        fresh = crawl_site(snapshot.website_url, config)
        if not fresh.pages:
            print("Error: crawl returned no pages.")
            return 1
        enrich_snapshot(fresh, config)
        customer = customer_for(workspace / DEFAULT_CUSTOMER, fresh)
        run_full_audit(fresh, customer, workspace / DEFAULT_OUTPUT_DIR, parallel=False)
        save_snapshot(fresh, snapshot_path)
        snapshot = fresh

    print_check(engine.run_check(snapshot))
    return 0


def run_validate(args: argparse.Namespace) -> int:
    result = validate_json_file(args.data_path, args.schema_name)
    print(json.dumps({"valid": result["valid"], "errors": result["errors"]}, indent=2))
    return 0 if result["valid"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aeo-audit", description="Audit a website's readiness for AI answer engines.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_crawl = sub.add_parser("crawl", help="Crawl a site into a snapshot")
    p_crawl.add_argument("url", help="Seed URL")
    p_crawl.add_argument("--max-pages", type=int, default=10)
    p_crawl.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds")
    p_crawl.add_argument("--no-site-files", action="store_true", help="Skip robots.txt / sitemap probes")
    p_crawl.add_argument("--output", default=DEFAULT_SNAPSHOT)
    p_crawl.set_defaults(func=run_crawl)

    p_enrich = sub.add_parser("enrich", help="Collect structured data and detect key pages")
    p_enrich.add_argument("--snapshot", default=DEFAULT_SNAPSHOT)
    p_enrich.add_argument("--timeout", type=float, default=10.0)
    p_enrich.set_defaults(func=run_enrich)

    p_audit = sub.add_parser("audit", help="Run analyzers, compile issues and write the report")
    p_audit.add_argument("--customer", default=DEFAULT_CUSTOMER)
    p_audit.add_argument("--snapshot", default=DEFAULT_SNAPSHOT)
    p_audit.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR)
    p_audit.add_argument("--parallel", action="store_true", help="Run analyzers in a thread pool")
    p_audit.set_defaults(func=run_audit)

    p_monitor = sub.add_parser("monitor", help="Compare the current snapshot with the baseline")
    p_monitor.add_argument("action", choices=["check", "baseline", "crawl"])
    p_monitor.add_argument("--workspace", default=".")
    p_monitor.add_argument("--config", default="", help=f"Default: <workspace>/{DEFAULT_MONITORING_CONFIG}")
    p_monitor.add_argument("--snapshot", default="", help=f"Default: <workspace>/{DEFAULT_SNAPSHOT}")
    p_monitor.add_argument("--max-pages", type=int, default=10)
    p_monitor.add_argument("--timeout", type=float, default=10.0)
    p_monitor.set_defaults(func=run_monitor)

    p_validate = sub.add_parser("validate", help="Validate a JSON file against a bundled schema")
    p_validate.add_argument("data_path")
    p_validate.add_argument("schema_name", choices=["customer", "site_snapshot", "issues"])
    p_validate.set_defaults(func=run_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    try:
        return args.func(args)
    except ValueError as exc:
        # AuditInputError, bad URLs and out-of-range crawl settings
        print(f"Error: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
