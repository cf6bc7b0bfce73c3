"""Tests for tree queries and aggregation."""

from letmedown.model import ContentElement, HeadingElement


class TestDocumentQueries:
    def test_headings_unique_across_sections(self, parser):
        doc = parser.parse("<!-- section -->\n# Same\n<!-- section -->\n# Same\n\n## Other")
        assert [(h.text, h.get("level")) for h in doc.headings] == [("Same", 1), ("Other", 2)]

    def test_same_text_different_level_kept(self, parser):
        doc = parser.parse("# Name\n\n## Name")
        assert [h.get("level") for h in doc.headings] == [1, 2]

    def test_unique_sections(self, parser, sample_markdown):
        doc = parser.parse(sample_markdown)
        assert len(doc.sections) == 5
        assert [s.name for s in doc.unique_sections()] == ["hero", "features", None]

    def test_blocks_skip_synthetic_roots(self, parser, sample_markdown):
        doc = parser.parse(sample_markdown)
        assert [b.heading.text for b in doc.blocks] == ["Welcome", "Fast", "Simple", "Contact"]

    def test_elements(self, parser, sample_markdown):
        doc = parser.parse(sample_markdown)
        assert [img.get("src") for img in doc.images] == ["images/hero.jpg"]
        assert [link.text for link in doc.links] == ["Get started", "Twitter", "GitHub"]
        assert [lst.get("items") for lst in doc.lists] == [
            ["One", "Two"],
            ["Twitter", "GitHub"],
        ]
        assert "Renders in milliseconds." in [p.text for p in doc.paragraphs]

    def test_empty_document(self):
        from letmedown.model import Document
        doc = Document()
        assert doc.section(0) is None
        assert doc.headings == []
        assert doc.images == []
        assert doc.title == ""


class TestSectionQueries:
    def test_no_duplicate_images_under_synthetic_root(self, parser):
        section = parser.parse("## A\n\n![x](x.png)\n\n### B\n\n![y](y.png)")[0]
        assert [img.get("src") for img in section.images] == ["x.png", "y.png"]

    def test_nested_elements_counted_once(self, parser):
        section = parser.parse("# A\n\n[a](/a)\n\n## B\n\n[b](/b)")[0]
        assert [link.get("href") for link in section.links] == ["/a", "/b"]
        assert [link.get("href") for link in section.blocks[0].all_links()] == ["/a", "/b"]
        assert [link.get("href") for link in section.blocks[0].links] == ["/a"]

    def test_headings(self, parser):
        section = parser.parse("## One\n\n### Two")[0]
        assert [h.text for h in section.headings] == ["One", "Two"]

    def test_missing_lookups(self, parser, sample_markdown):
        doc = parser.parse(sample_markdown)
        assert doc.section("nope") is None
        assert doc["hero"].field("nope") is None
        assert doc["hero"].subsection("nope") is None
        assert doc["hero"].blocks[0].field("nope") is None


class TestBlock:
    def test_headings_include_descendants(self, parser):
        top = parser.parse("# Top\n\n## Child\n\n### Grand")[0].blocks[0]
        assert [(h.text, h.get("level")) for h in top.headings] == [
            ("Top", 1),
            ("Child", 2),
            ("Grand", 3),
        ]
        assert top.headings[1].html == "<h2>Child</h2>"

    def test_to_dict(self, parser):
        block = parser.parse("# Top\n\n<!-- note -->\nHi\n\n## Child")[0].blocks[0]
        data = block.to_dict()
        assert data["heading"] == "Top"
        assert data["level"] == 1
        assert data["fields"]["note"]["text"] == "Hi"
        assert data["children"][0]["heading"] == "Child"


class TestElements:
    def test_content_element(self):
        element = ContentElement(text="Docs", html='<a href="/d">Docs</a>', data={"href": "/d"})
        assert str(element) == "Docs"
        assert element.get("href") == "/d"
        assert element.get("missing", "x") == "x"
        assert element.to_dict() == {"text": "Docs", "html": '<a href="/d">Docs</a>', "href": "/d"}

    def test_heading_element(self):
        heading = HeadingElement.from_html("<h2>Hi <em>there</em></h2>")
        assert heading.text == "Hi there"
        assert str(heading) == "<h2>Hi <em>there</em></h2>"
        assert heading
        assert not HeadingElement()
