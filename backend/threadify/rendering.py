"""
Allow-list renderer for generated explanations.

Generated text comes from a remote service and is untrusted. It is parsed into
lines of ``Span`` objects where the only formatting kept is bold (``**term**``),
then rendered with every span HTML-escaped. The page never receives any markup
other than ``<strong>`` and ``<br />``.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import List, Tuple

_BOLD = re.compile(r"\*\*(.+?)\*\*")
# A tag starts with a letter, "/" or "!" right after "<"; "x < 3" is text
_TAG = re.compile(r"<[A-Za-z/!][^>]*>")
_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)


@dataclass(frozen=True)
class Span:
	text: str
	bold: bool = False


@dataclass(frozen=True)
class RenderedExplanation:
	lines: Tuple[Tuple[Span, ...], ...]

	@property
	def html(self) -> str:
		return to_html(self)

	@property
	def plain_text(self) -> str:
		return "\n".join("".join(span.text for span in line) for line in self.lines)

	def __bool__(self) -> bool:
		return any(span.text.strip() for line in self.lines for span in line)


def _parse_line(line: str) -> Tuple[Span, ...]:
	spans: List[Span] = []
	pos = 0
	for match in _BOLD.finditer(line):
		if match.start() > pos:
			spans.append(Span(line[pos:match.start()]))
		spans.append(Span(match.group(1), bold=True))
		pos = match.end()
	if pos < len(line):
		spans.append(Span(line[pos:]))
	return tuple(spans)


def parse_explanation(text: str) -> RenderedExplanation:
	normalized = (text or "").replace("\r\n", "\n").replace("\r", "\n")
	return RenderedExplanation(lines=tuple(_parse_line(line) for line in normalized.split("\n")))


def to_html(explanation: RenderedExplanation) -> str:
	rendered_lines = []
	for line in explanation.lines:
		parts = []
		for span in line:
			escaped = html.escape(span.text, quote=False)
			parts.append(f"<strong>{escaped}</strong>" if span.bold else escaped)
		rendered_lines.append("".join(parts))
	return "<br />".join(rendered_lines)


def strip_markup(markup: str) -> str:
	"""Plain text suitable for the clipboard: no tags survive, even ones hidden behind entities."""
	text = html.unescape(_TAG.sub("", _LINE_BREAK.sub("\n", markup or "")))
	# Unescaping can reveal new tags ("&lt;b&gt;"); strip until nothing tag-like is left
	while True:
		stripped = _TAG.sub("", text)
		if stripped == text:
			return stripped
		text = stripped
