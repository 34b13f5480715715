from aeo_audit.analyzers.common import make_issue
from aeo_audit.issues import compile_issues

SITE = "https://example.com/"


def issue(type, severity, page=SITE, message="msg", recommendation=None):
    return make_issue(type=type, severity=severity, page=page, message=message, recommendation=recommendation)


class TestCompileIssues:
    def setup_method(self):
        self.results = {
            "content_coverage": {
                "score": 60,
                "issues": [
                    issue("missing_h1", "high", SITE + "a", "Page missing H1 heading"),
                    issue("thin_content", "medium", SITE + "a"),
                    issue("missing_h1", "high", SITE + "b"),
                    issue("missing_h1", "high", SITE + "a"),
                ],
            },
            "health_checks": {
                "score": 80,
                "issues": [
                    issue("redirect", "medium", SITE + "old"),
                    issue("http_error", "critical", SITE + "gone", recommendation="Restore the page."),
                    issue("thin_content", "low", SITE + "a"),
                ],
            },
            "citation_readiness": {"score": 40, "issues": [issue("missing_faq_schema", "low")]},
            "competitor_gap": {"score": 0, "issues": [issue("no_competitors_configured", "info", "example.com")]},
        }
        self.compiled = compile_issues(self.results)
        self.by_id = {i["id"]: i for i in self.compiled["issues"]}

    def test_grouped_by_category_and_type(self):
        h1 = self.by_id["CONTENT-001"]

        assert h1["type"] == "missing_h1"
        assert h1["affected_pages"] == [SITE + "a", SITE + "b"]
        assert h1["description"] == "Page missing H1 heading"

    def test_same_type_in_different_categories_stays_separate(self):
        thin = [i for i in self.compiled["issues"] if i["type"] == "thin_content"]

        assert [(i["id"], i["severity"]) for i in thin] == [("CONTENT-002", "warning"), ("HEALTH-003", "info")]

    def test_ids_numbered_per_category(self):
        assert list(self.by_id) == [
            "CONTENT-001",
            "CONTENT-002",
            "HEALTH-001",
            "HEALTH-002",
            "HEALTH-003",
            "CITATION-001",
            "COMPETITOR-001",
        ]

    def test_severity_mapping(self):
        assert self.by_id["HEALTH-001"]["severity"] == "warning"
        assert self.by_id["HEALTH-002"]["severity"] == "critical"
        assert self.by_id["CITATION-001"]["severity"] == "info"
        assert self.by_id["COMPETITOR-001"]["severity"] == "info"

    def test_recommendation_and_effort(self):
        assert self.by_id["HEALTH-002"]["recommendation"] == "Restore the page."
        assert self.by_id["HEALTH-001"]["recommendation"]
        assert self.by_id["CONTENT-001"]["effort_estimate"] == "low"
        assert self.by_id["CONTENT-002"]["effort_estimate"] == "high"
        assert self.by_id["COMPETITOR-001"]["effort_estimate"] == "medium"

    def test_summary(self):
        assert self.compiled["summary"] == {
            "total_issues": 7,
            "critical_count": 1,
            "warning_count": 3,
            "info_count": 3,
            "total_issues_found": 9,
            "score": 60,
        }

    def test_worst_severity_wins(self):
        compiled = compile_issues({
            "health_checks": {
                "score": 50,
                "issues": [issue("http_error", "medium", SITE + "x"), issue("http_error", "critical", SITE + "y")],
            },
        })

        assert compiled["issues"][0]["severity"] == "critical"
        assert compiled["summary"]["score"] == 50

    def test_missing_results_tolerated(self):
        compiled = compile_issues({"content_coverage": None})

        assert compiled["issues"] == []
        assert compiled["summary"]["score"] == 0
