from aeo_audit.extractor import extract_links, extract_page

BASE = "https://example.com/guide/"

HTML = """<html>
<head>
  <title>  Field   Guide </title>
  <meta name="Description" content=" A practical guide to the field. ">
  <script type="application/ld+json">{"@context": "https://schema.org", "@type": "Article", "headline": "Guide"}</script>
  <script type="application/ld+json">{"@type": "Broken",</script>
  <style>.x { color: red }</style>
</head>
<body>
  <h1>Field Guide</h1>
  <h1>Second <em>Heading</em></h1>
  <h2>Getting started</h2>
  <h3>Tools</h3>
  <h3>   </h3>
  <p>one two three</p>
  <img src="/a.png" alt="A diagram">
  <img src="/b.png">
  <img alt="no source">
  <a href="/about">About</a>
  <a href="https://example.com/about#team">Team</a>
  <a href="../pricing">Pricing</a>
  <a href="https://other.org/ref">Ref</a>
  <a href="mailto:hi@example.com">Mail</a>
  <a href="#top">Top</a>
  <a href="javascript:void(0)">Noop</a>
  <script>var hidden = "not counted";</script>
</body>
</html>"""


class TestExtractLinks:
    def test_internal_external_split(self):
        internal, external = extract_links(HTML, BASE)

        assert internal == ["https://example.com/about", "https://example.com/pricing"]
        assert external == ["https://other.org/ref"]

    def test_relative_links_resolved_against_page(self):
        internal, _ = extract_links('<a href="step-2">next</a>', BASE)

        assert internal == ["https://example.com/guide/step-2"]


class TestExtractPage:
    def setup_method(self):
        self.fields = extract_page(HTML, BASE)

    def test_title_and_description(self):
        assert self.fields["title"] == "Field Guide"
        assert self.fields["meta_description"] == "A practical guide to the field."

    def test_headings(self):
        assert self.fields["h1"] == ["Field Guide", "Second Heading"]
        assert self.fields["h2"] == ["Getting started"]
        assert self.fields["h3"] == ["Tools"]

    def test_images_require_src(self):
        assert self.fields["images"] == [
            {"src": "/a.png", "alt": "A diagram", "has_alt": True},
            {"src": "/b.png", "alt": "", "has_alt": False},
        ]

    def test_malformed_jsonld_block_skipped(self):
        blocks = self.fields["structured_data"]

        assert len(blocks) == 1
        assert blocks[0]["type"] == "json-ld"
        assert blocks[0]["schema"] == "Article"

    def test_link_counts(self):
        assert self.fields["internal_links"] == 2
        assert self.fields["external_links"] == 1

    def test_word_count_counts_every_text_token(self):
        fields = extract_page(
            "<html><head><title>Hi there</title><style>p { margin: 0 }</style></head>"
            "<body><!-- hidden note --><p>one two three</p><script>var a = 1;</script>"
            "<noscript>enable js</noscript></body></html>",
            BASE,
        )

        # title 2 + style 5 + paragraph 3 + script 4 + noscript 2; the comment is markup
        assert fields["word_count"] == 16

    def test_empty_document(self):
        fields = extract_page("", BASE)

        assert fields["title"] == ""
        assert fields["h1"] == []
        assert fields["word_count"] == 0
        assert fields["structured_data"] == []
