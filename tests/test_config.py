import json

import pytest

from aeo_audit.config import (
    AlertThresholds,
    AuditInputError,
    CrawlConfig,
    customer_from_dict,
    load_customer,
)
from aeo_audit.models import PageRecord, SiteSnapshot, load_snapshot, save_snapshot


class TestCrawlConfig:
    def test_defaults(self):
        config = CrawlConfig()

        assert config.max_pages == 10
        assert config.timeout == 10.0
        assert config.user_agent.startswith("AEO-Audit-Bot/1.0")
        assert config.check_site_files is True

    def test_rejects_bad_bounds(self):
        with pytest.raises(ValueError):
            CrawlConfig(max_pages=0)
        with pytest.raises(ValueError):
            CrawlConfig(timeout=0)


class TestAlertThresholds:
    def test_partial_dict_falls_back_to_defaults(self):
        thresholds = AlertThresholds.from_dict({"pages_removed_above": 1})

        assert thresholds.to_dict() == {"new_issues_critical": 5, "score_drop_above": 10, "pages_removed_above": 1}

    def test_none(self):
        assert AlertThresholds.from_dict(None) == AlertThresholds()


class TestCustomer:
    def test_domain_normalised(self):
        customer = customer_from_dict({"domain": "example.com", "brand_name": "Acme"})

        assert customer.website_url == "https://example.com/"
        assert customer.domain == "https://example.com/"
        assert customer.target_queries == []
        assert customer.competitors == []

    def test_competitors_normalised_at_boundary(self):
        customer = customer_from_dict({
            "website_url": "https://example.com",
            "competitors": ["rival.com", "  ", {"domain": "other.com", "brand_name": " Other "}, {"brand_name": "No domain"}],
        })

        assert customer.competitors == [
            {"domain": "rival.com", "brand_name": None},
            {"domain": "other.com", "brand_name": "Other"},
        ]

    def test_missing_site(self):
        with pytest.raises(AuditInputError):
            customer_from_dict({"brand_name": "Acme"})

    def test_bad_competitor_entry(self):
        with pytest.raises(AuditInputError):
            customer_from_dict({"domain": "example.com", "competitors": [42]})

    def test_load_errors_surface(self, tmp_path):
        with pytest.raises(AuditInputError, match="not found"):
            load_customer(tmp_path / "customer.json")

        broken = tmp_path / "broken.json"
        broken.write_text("{", encoding="utf-8")
        with pytest.raises(AuditInputError, match="not valid JSON"):
            load_customer(broken)


class TestPageRecord:
    def test_failure_requires_error(self):
        with pytest.raises(ValueError):
            PageRecord(url="https://example.com/", status_code=0)

    def test_error_requires_zero_status(self):
        with pytest.raises(ValueError):
            PageRecord(url="https://example.com/", status_code=200, error="boom")

    def test_failed_record(self):
        page = PageRecord.failed("https://example.com/x", "timeout")

        assert page.to_dict()["error"] == "timeout"
        assert page.to_dict()["status_code"] == 0
        assert "error" not in PageRecord(url="https://example.com/", status_code=404).to_dict()


class TestSnapshotPersistence:
    def test_round_trip_preserves_unknown_keys(self, tmp_path):
        snapshot = SiteSnapshot(
            website_url="https://example.com/",
            pages=[PageRecord(url="https://example.com/", status_code=200, title="Home", word_count=12)],
            robots_txt={"exists": True},
            sitemaps=["https://example.com/sitemap.xml"],
            key_pages=[{"url": "https://example.com/", "type": "homepage"}],
        )
        snapshot.extra["health_checks"] = {"health_score": 88}
        path = tmp_path / "data" / "site_snapshot.json"

        save_snapshot(snapshot, path)
        loaded = load_snapshot(path)

        assert loaded.to_dict() == snapshot.to_dict()
        assert loaded.extra == {"health_checks": {"health_score": 88}}
        assert json.loads(path.read_text(encoding="utf-8"))["pages_crawled"] == 1
        assert path.read_text(encoding="utf-8").startswith('{\n  "website_url"')
        assert list(path.parent.iterdir()) == [path]

    def test_invalid_snapshot(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text(json.dumps({"website_url": "https://example.com/", "pages": [{"status_code": 200}]}), encoding="utf-8")

        with pytest.raises(AuditInputError):
            load_snapshot(path)

    def test_inconsistent_page_rejected_on_load(self):
        with pytest.raises(AuditInputError):
            SiteSnapshot.from_dict({"website_url": "https://example.com/", "pages": [{"url": "https://example.com/", "status_code": 0}]})
