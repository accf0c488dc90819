"""Tests for the text-level XML repair stage."""

import pytest

from xml_to_xls.utils.repair import (
    collapse_whitespace,
    escape_bare_ampersands,
    normalize_tag_whitespace,
    repair,
)


SAMPLES = [
    "",
    "hello",
    "\ufeff<a>1</a>",
    "<a>A & B</a>",
    "< a >\n  <b> x </b>\n</ a >",
    "<root><x>&amp; &lt; &#169; &copy;</x></root>",
    "plain text with & and < sign",
    "  \ufeff  <doc>\x00\x01ok\x7f</doc>  ",
    "<a>1</a><b>2</b>",
    "<?xml version=\"1.0\"?>\n<orders>\r\n\t<order id='1'>x</order>\n</orders>",
]


class TestRepair:
    """Test suite for repair()."""

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text):
        once = repair(text)
        assert repair(once) == once

    def test_wraps_text_without_tags(self):
        assert repair("hello") == "<root>hello</root>"

    def test_wraps_empty_input(self):
        assert repair("") == "<root></root>"

    def test_escapes_bare_ampersand(self):
        assert repair("<a>A & B</a>") == "<a>A &amp; B</a>"

    def test_does_not_double_escape(self):
        assert repair("<a>A &amp; B</a>") == "<a>A &amp; B</a>"

    def test_keeps_named_entities(self):
        assert repair("<a>&quot;&apos;</a>") == "<a>&quot;&apos;</a>"

    def test_escapes_numeric_references(self):
        assert repair("<a>&#169;&#xA9;</a>") == "<a>&amp;#169;&amp;#xA9;</a>"

    def test_strips_bom_and_control_characters(self):
        assert repair("\ufeff<a>x\x00\x1fy\x85</a>") == "<a>xy</a>"

    def test_keeps_tabs_and_newlines_as_spaces(self):
        assert repair("<a>x\ty\nz</a>") == "<a>x y z</a>"

    def test_normalizes_whitespace_inside_tags(self):
        assert repair("< tag >x</ tag >") == "<tag>x</tag>"

    def test_removes_whitespace_between_tags(self):
        assert repair("<a>\n    <b>1</b>\n</a>\n") == "<a><b>1</b></a>"


class TestRepairSteps:
    """Test suite for the individual repair steps."""

    def test_escape_leaves_named_entities(self):
        text = "&amp;&lt;&gt;&quot;&apos;"
        assert escape_bare_ampersands(text) == text

    def test_escape_unknown_entity(self):
        assert escape_bare_ampersands("&nbsp;") == "&amp;nbsp;"

    def test_closing_tag_whitespace(self):
        assert normalize_tag_whitespace("< / item >") == "</item>"

    def test_attributes_keep_inner_spacing(self):
        assert normalize_tag_whitespace('< item id="1" >') == '<item id="1">'

    def test_collapse_keeps_text_spacing(self):
        assert collapse_whitespace("<a> two  words </a>  <b/>") == "<a> two words </a><b/>"
