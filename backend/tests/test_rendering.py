"""Tests for the allow-list explanation renderer and clipboard text."""

import re

import pytest

from threadify.rendering import Span, parse_explanation, strip_markup, to_html

TAG = re.compile(r"<[^>]*>")


def test_bold_markers_become_bold_spans():
	rendered = parse_explanation("**Photosynthesis** makes sugar")

	assert rendered.lines == ((Span("Photosynthesis", bold=True), Span(" makes sugar")),)
	assert rendered.html == "<strong>Photosynthesis</strong> makes sugar"


def test_multiple_bold_spans_on_one_line():
	rendered = parse_explanation("**light** and **water** in")
	assert rendered.html == "<strong>light</strong> and <strong>water</strong> in"


def test_newlines_become_line_breaks():
	rendered = parse_explanation("first\r\nsecond\nthird")
	assert rendered.html == "first<br />second<br />third"
	assert rendered.plain_text == "first\nsecond\nthird"


def test_unmatched_marker_stays_literal():
	assert parse_explanation("a ** b").html == "a ** b"


def test_remote_markup_is_escaped():
	rendered = parse_explanation('<script>alert(1)</script> **<img src=x onerror=y>**')
	html = rendered.html

	assert "<script>" not in html
	assert "<img" not in html
	assert "&lt;script&gt;" in html
	assert set(TAG.findall(html)) <= {"<strong>", "</strong>"}


def test_empty_text_is_falsy():
	assert not parse_explanation("")
	assert not parse_explanation("  \n ")
	assert parse_explanation("x")


def test_to_html_matches_property():
	rendered = parse_explanation("**a** b")
	assert to_html(rendered) == rendered.html


@pytest.mark.parametrize(
	"markup",
	[
		"<strong>Photosynthesis</strong> makes sugar",
		"&lt;script&gt;alert(1)&lt;/script&gt;",
		"&amp;lt;b&amp;gt;nested&amp;lt;/b&amp;gt;",
		"<<b>script>x</script>",
		'<a href="x">link</a><br />next',
	],
)
def test_strip_markup_leaves_no_tags(markup):
	assert not TAG.search(strip_markup(markup))


def test_strip_markup_keeps_text_and_line_breaks():
	html = parse_explanation("**Photosynthesis** uses light\nand water & air").html
	assert strip_markup(html) == "Photosynthesis uses light\nand water & air"


def test_strip_markup_keeps_comparison_operators():
	html = parse_explanation("If x < 3 and y > 2 then **z**").html
	assert strip_markup(html) == "If x < 3 and y > 2 then z"
