import requests

from aeo_audit.config import CrawlConfig
from aeo_audit.models import PageRecord, SiteSnapshot
from aeo_audit.structured_data import (
    collect_structured_data,
    extract_key_entities,
    extract_structured_data,
    soup_of,
)

from conftest import FakeSession, page_html

SITE = "https://example.com/"

RICH_HEAD = """
<meta property="og:type" content="article">
<meta property="og:title" content="Launch notes">
<meta property="og:publisher" content="Acme">
<meta name="twitter:card" content="summary_large_image">
<meta name="author" content="Jane Doe">
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "Organization", "name": "Acme",
 "publisher": {"@type": "Organization", "name": "Acme"}}
</script>
<script type="application/ld+json">
[{"@type": "Article", "author": [{"@type": "Person", "name": "Jane Doe"}, {"name": "Second"}]}]
</script>
"""
MICRODATA_BODY = '<div itemscope itemtype="https://schema.org/Product"><span itemprop="name">Widget</span></div>'


class TestExtractors:
    def setup_method(self):
        self.soup = soup_of(page_html("Launch", MICRODATA_BODY, head=RICH_HEAD))

    def test_all_families_detected(self):
        blocks = extract_structured_data(self.soup)
        kinds = [b["type"] for b in blocks]

        assert kinds == ["json-ld", "json-ld", "opengraph", "twitter-card", "microdata"]

    def test_block_schemas(self):
        blocks = extract_structured_data(self.soup)

        assert blocks[0]["schema"] == "Organization"
        assert blocks[1]["schema"] == "Unknown"  # top-level array has no single @type
        assert blocks[2]["schema"] == "article"
        assert blocks[2]["data"]["og:publisher"] == "Acme"
        assert blocks[3]["schema"] == "summary_large_image"
        assert blocks[4]["schema"] == "Product"
        assert blocks[4]["data"] == {"element": "div", "itemType": "https://schema.org/Product"}

    def test_key_entities_deduplicated(self):
        entities = extract_key_entities(self.soup)

        assert entities == ["Acme", "Jane Doe", "Organization", "Article"]

    def test_page_without_markup(self):
        soup = soup_of(page_html("Plain", "<p>nothing here</p>"))

        assert extract_structured_data(soup) == []
        assert extract_key_entities(soup) == []


class TestCollector:
    def setup_method(self):
        self.config = CrawlConfig(timeout=5)

    def snapshot(self, *pages):
        return SiteSnapshot(website_url=SITE, pages=list(pages))

    def test_valid_and_malformed_jsonld_yield_one_entry(self):
        head = (
            '<script type="application/ld+json">{"@type": "WebSite", "name": "Example"}</script>'
            '<script type="application/ld+json">{"@type": "WebPage", </script>'
        )
        session = FakeSession({SITE: page_html("Home", "<p>hi</p>", head=head)})
        snapshot = self.snapshot(PageRecord(url=SITE, status_code=200))

        collect_structured_data(snapshot, self.config, session)

        jsonld = [b for b in snapshot.pages[0].structured_data if b["type"] == "json-ld"]
        assert len(jsonld) == 1
        assert jsonld[0]["schema"] == "WebSite"

    def test_fetch_failure_clears_page_and_continues(self):
        session = FakeSession({
            SITE: requests.exceptions.Timeout("timed out"),
            SITE + "about": page_html("About", head=RICH_HEAD),
        })
        stale = [{"type": "json-ld", "schema": "Old", "data": {}}]
        snapshot = self.snapshot(
            PageRecord(url=SITE, status_code=200, structured_data=stale),
            PageRecord(url=SITE + "about", status_code=200),
        )

        collect_structured_data(snapshot, self.config, session)

        assert snapshot.pages[0].structured_data == []
        assert len(snapshot.pages[1].structured_data) == 4
        assert "Acme" in snapshot.key_entities

    def test_only_ok_pages_refetched(self):
        session = FakeSession({SITE: page_html("Home")})
        kept = [{"type": "json-ld", "schema": "Thing", "data": {}}]
        snapshot = self.snapshot(
            PageRecord(url=SITE, status_code=200),
            PageRecord(url=SITE + "gone", status_code=404, structured_data=kept),
            PageRecord.failed(SITE + "down", "connection refused"),
        )

        collect_structured_data(snapshot, self.config, session)

        assert session.calls == [SITE]
        assert snapshot.pages[1].structured_data == kept

    def test_entities_deduplicated_across_pages(self):
        session = FakeSession({
            SITE: page_html("Home", head=RICH_HEAD),
            SITE + "blog": page_html("Blog", head=RICH_HEAD),
        })
        snapshot = self.snapshot(
            PageRecord(url=SITE, status_code=200),
            PageRecord(url=SITE + "blog", status_code=200),
        )

        collect_structured_data(snapshot, self.config, session)

        assert snapshot.key_entities == ["Acme", "Jane Doe", "Organization", "Article"]
