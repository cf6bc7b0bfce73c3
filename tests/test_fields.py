"""Tests for field resolution and type inference."""

from letmedown.model import ContentElement
from letmedown.parser.fields import (
    build_field,
    classify_field,
    parse_fields,
    parse_segment_fields,
)


LIST_FIELD = """- Plain item
- [A link](https://example.com)
- ![An image](pic.png)
- [![Both](both.png)](https://both.example)"""


class TestClassifyField:
    def _classify(self, renderer, markdown):
        return classify_field(markdown, renderer(markdown))

    def test_heading(self, renderer):
        field_type, data = self._classify(renderer, "## Our story")
        assert field_type == "heading"
        assert data == {}

    def test_list_items_keep_their_own_links_and_images(self, renderer):
        field_type, items = self._classify(renderer, LIST_FIELD)
        assert field_type == "list"
        assert len(items) == 4

        assert items[0]["text"] == "Plain item"
        assert items[0]["links"] == []
        assert items[0]["images"] == []

        assert items[1]["links"] == [{"href": "https://example.com", "text": "A link"}]
        assert items[1]["images"] == []

        assert items[2]["links"] == []
        assert items[2]["images"] == [{"src": "pic.png", "alt": "An image"}]

        assert items[3]["links"][0]["href"] == "https://both.example"
        assert items[3]["images"] == [{"src": "both.png", "alt": "Both"}]

    def test_list_wins_over_images(self, renderer):
        field_type, _ = self._classify(renderer, "![a](a.png)\n\n- item")
        assert field_type == "list"

    def test_single_image(self, renderer):
        field_type, data = self._classify(renderer, "![alt](x.jpg)")
        assert field_type == "image"
        assert data == {"src": "x.jpg", "alt": "alt"}

    def test_multiple_images(self, renderer):
        field_type, data = self._classify(renderer, "![a](a.png) ![b](b.png)")
        assert field_type == "images"
        assert [img["src"] for img in data] == ["a.png", "b.png"]

    def test_image_wins_over_link(self, renderer):
        field_type, _ = self._classify(renderer, "[![logo](logo.png)](/home)")
        assert field_type == "image"

    def test_single_link(self, renderer):
        field_type, data = self._classify(renderer, "[Docs](/docs)")
        assert field_type == "link"
        assert data == {"href": "/docs", "text": "Docs"}

    def test_multiple_links(self, renderer):
        field_type, data = self._classify(renderer, "[One](/1) and [Two](/2)")
        assert field_type == "links"
        assert [link["text"] for link in data] == ["One", "Two"]

    def test_plain_text(self, renderer):
        field_type, data = self._classify(renderer, "Just some *words*.")
        assert field_type == "text"
        assert data == {}


class TestParseFields:
    def test_regular_field_stops_at_blank_line(self, renderer):
        fields = parse_fields("<!-- note -->\nLine one.\n\nLine two.", renderer)
        assert fields["note"].text == "Line one."
        assert fields["note"].markdown == "Line one."

    def test_extended_field_keeps_full_range(self, renderer):
        fields = parse_fields("<!-- note... -->\nLine one.\n\nLine two.\n<!-- / -->", renderer)
        assert "Line one." in fields["note"].text
        assert "Line two." in fields["note"].text

    def test_regular_field_truncated_even_when_closed(self, renderer):
        fields = parse_fields("<!-- note -->\nFirst.\n\nSecond.\n<!-- /note -->", renderer)
        assert fields["note"].text == "First."

    def test_first_occurrence_wins(self, renderer):
        fields = parse_fields("<!-- title -->\nFirst\n\n<!-- title -->\nSecond", renderer)
        assert fields["title"].text == "First"

    def test_empty_occurrence_does_not_claim_the_name(self, renderer):
        markdown = "<!-- title --><!-- other -->\nx\n<!-- title -->\nSecond"
        fields = parse_fields(markdown, renderer)
        assert fields["title"].text == "Second"
        assert fields["other"].text == "x"

    def test_empty_field_dropped(self, renderer):
        assert parse_fields("<!-- empty -->\n\n", renderer) == {}

    def test_nested_markers_removed_from_content(self, renderer):
        markdown = "<!-- card... -->\n<!-- heading -->\n# Hi\n\nBody text\n<!-- /card -->"
        fields = parse_fields(markdown, renderer)
        assert fields["card"].type == "heading"
        assert "<!--" not in fields["card"].markdown
        assert "Body text" in fields["card"].text
        assert fields["heading"].markdown == "# Hi"

    def test_segments_bound_fields(self, renderer):
        fields = parse_segment_fields(["<!-- intro... -->\nBefore\n", "After\n<!-- / -->"], renderer)
        assert fields["intro"].text == "Before"

    def test_segments_share_first_occurrence(self, renderer):
        fields = parse_segment_fields(["<!-- a -->\none", "<!-- a -->\ntwo"], renderer)
        assert fields["a"].text == "one"


class TestFieldData:
    def test_build_field(self, renderer):
        field = build_field("image", "![alt](x.jpg)", renderer)
        assert field.name == "image"
        assert field.type == "image"
        assert field.get("src") == "x.jpg"
        assert "<img" in field.html
        assert str(field) == field.text

    def test_list_items_are_records(self, renderer):
        field = build_field("menu", LIST_FIELD, renderer)
        assert field.items is field.data
        assert len(field.items) == 4

    def test_image_items_are_cached_elements(self, renderer):
        field = build_field("gallery", "![a](a.png) ![b](b.png)", renderer)
        items = field.items
        assert all(isinstance(item, ContentElement) for item in items)
        assert [item.get("src") for item in items] == ["a.png", "b.png"]
        assert items[0].text == "a"
        assert field.items is items

    def test_link_items(self, renderer):
        field = build_field("nav", "[One](/1) [Two](/2)", renderer)
        assert [item.get("href") for item in field.items] == ["/1", "/2"]
        assert field.items[1].html == '<a href="/2">Two</a>'

    def test_text_has_no_items(self, renderer):
        field = build_field("body", "Words only.", renderer)
        assert field.items == []
        assert field.get("src") is None
