"""Tests for rendering and HTML text helpers."""

from letmedown.parser.html import html_to_text, parse_fragment, raw_markup


class TestHtmlToText:
    def test_adjacent_paragraphs_get_blank_line(self):
        assert html_to_text("<p>A</p><p>B</p>") == "A\n\nB"

    def test_rendered_layout_newlines(self, renderer):
        assert html_to_text(renderer("# T\n\nOne.\n\nTwo.")) == "T\n\nOne.\n\nTwo."

    def test_list_items_one_per_line(self, renderer):
        assert html_to_text(renderer("Intro\n\n- One\n- Two\n\nAfter")) == "Intro\n\nOne\nTwo\n\nAfter"

    def test_blockquote(self):
        assert html_to_text("<blockquote><p>Quoted</p></blockquote><p>Next</p>") == "Quoted\n\nNext"

    def test_inline_spacing_kept(self):
        assert html_to_text("<p><em>a</em> <strong>b</strong></p>") == "a b"

    def test_entities_decoded(self):
        assert html_to_text("<p>Fish &amp; chips</p>") == "Fish & chips"

    def test_empty(self):
        assert html_to_text("") == ""


class TestRawMarkup:
    def test_comments_kept(self):
        soup = parse_fragment("<h1>T</h1><!-- note --><p>V</p><h2>U</h2>")
        assert raw_markup(soup, soup.find("h1"), soup.find("h2")) == "<!-- note --><p>V</p>"
