"""Scan annotation comments and resolve them into named content ranges.

Three marker families are recognized:

- sections: ``<!-- section -->`` / ``<!-- section:name -->``, a linear split
- subsections: ``<!-- sub:name -->`` closed by ``<!-- /sub -->`` or
  ``<!-- /sub:name -->``
- fields: ``<!-- name -->`` (regular) or ``<!-- name... -->`` (extended),
  closed by ``<!-- /name -->`` or ``<!-- / -->``

Subsections and fields share the same stack matching: a plain closer pops the
most recent opener, a named closer splices out the nearest opener with that
name, and openers still open at the end extend to the next opener of their
family (or end of text).
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

REGULAR = "regular"
EXTENDED = "extended"

# Never treated as field names
RESERVED_NAMES = frozenset({"section", "sub"})

SECTION_PATTERN = re.compile(r'<!--\s*section(?::([A-Za-z0-9_-]+))?\s*-->')
SUBSECTION_PATTERN = re.compile(
    r'<!--\s*(?:sub:(?P<open>[A-Za-z0-9_-]+)|/sub(?::(?P<close>[A-Za-z0-9_-]+))?)\s*-->'
)
FIELD_PATTERN = re.compile(
    r'<!--\s*(?:/(?P<close>[A-Za-z0-9_-]*)|(?P<open>[A-Za-z0-9_-]+)(?P<extended>\.\.\.)?)\s*-->'
)
PARAGRAPH_BREAK = re.compile(r'\n[ \t]*\n')


@dataclass
class MarkerRange:
    """A resolved marker region.

    ``start:end`` is the content between the markers. ``marker_start`` is the
    offset of the opening marker and ``marker_end`` the offset just past the
    closing marker (equal to ``end`` when the range was closed implicitly).
    """
    name: Optional[str]
    start: int
    end: int
    mode: str = REGULAR
    marker_start: int = 0
    marker_end: int = 0

    def content(self, text: str) -> str:
        """Return the raw text covered by this range."""
        return text[self.start:self.end]


@dataclass
class _Token:
    name: Optional[str]
    opens: bool
    start: int
    end: int
    mode: str = REGULAR


def split_sections(text: str) -> list[MarkerRange]:
    """
    Split text at section markers.

    Each region runs from just after its marker to the next section marker
    or the end of text. Text without markers is one unnamed section.
    """
    matches = list(SECTION_PATTERN.finditer(text))
    if not matches:
        return [MarkerRange(name=None, start=0, end=len(text), marker_end=len(text))]

    ranges: list[MarkerRange] = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        ranges.append(MarkerRange(
            name=match.group(1) or None,
            start=match.end(),
            end=end,
            marker_start=match.start(),
            marker_end=end,
        ))
    return ranges


def _is_field_marker(match: re.Match) -> bool:
    name = match.group('open') if match.group('open') is not None else match.group('close')
    return name not in RESERVED_NAMES


def _subsection_tokens(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    for match in SUBSECTION_PATTERN.finditer(text):
        if match.group('open'):
            tokens.append(_Token(match.group('open'), True, match.start(), match.end()))
        else:
            tokens.append(_Token(match.group('close'), False, match.start(), match.end()))
    return tokens


def _field_tokens(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    for match in FIELD_PATTERN.finditer(text):
        if not _is_field_marker(match):
            continue
        if match.group('open') is not None:
            mode = EXTENDED if match.group('extended') else REGULAR
            tokens.append(_Token(match.group('open'), True, match.start(), match.end(), mode))
        else:
            # An empty name is the generic closer
            tokens.append(_Token(match.group('close') or None, False, match.start(), match.end()))
    return tokens


def _pop_opener(stack: list[_Token], name: Optional[str]) -> Optional[_Token]:
    """Pop the opener a closer refers to: LIFO for plain closers, nearest match for named ones."""
    if not stack:
        return None
    if name is None:
        return stack.pop()
    for i in range(len(stack) - 1, -1, -1):
        if stack[i].name == name:
            return stack.pop(i)
    return None


def _resolve(tokens: list[_Token], text_length: int, kind: str) -> list[MarkerRange]:
    """Match openers with closers in a single left-to-right pass."""
    openers = [t for t in tokens if t.opens]
    next_opener_start = {
        opener.start: openers[i + 1].start if i + 1 < len(openers) else text_length
        for i, opener in enumerate(openers)
    }

    stack: list[_Token] = []
    ranges: list[MarkerRange] = []

    for token in tokens:
        if token.opens:
            stack.append(token)
            continue

        opener = _pop_opener(stack, token.name)
        if opener is None:
            logger.debug("Ignoring unmatched %s closer at offset %d", kind, token.start)
            continue

        ranges.append(MarkerRange(
            name=opener.name,
            start=opener.end,
            end=token.start,
            mode=opener.mode,
            marker_start=opener.start,
            marker_end=token.end,
        ))

    # Anything left open runs to the next opener of the same family
    for opener in stack:
        end = next_opener_start[opener.start]
        logger.debug("Closing %s %r implicitly at offset %d", kind, opener.name, end)
        ranges.append(MarkerRange(
            name=opener.name,
            start=opener.end,
            end=end,
            mode=opener.mode,
            marker_start=opener.start,
            marker_end=end,
        ))

    ranges.sort(key=lambda r: r.marker_start)
    return ranges


def scan_subsections(text: str) -> list[MarkerRange]:
    """
    Resolve subsection ranges, ordered by opener position.

    Only one nesting level exists: a range lying entirely inside another
    range is dropped and its text stays part of the outer subsection.
    """
    ranges = _resolve(_subsection_tokens(text), len(text), "subsection")

    outer: list[MarkerRange] = []
    for candidate in ranges:
        if any(
            kept.marker_start <= candidate.marker_start and candidate.marker_end <= kept.marker_end
            for kept in outer
        ):
            logger.debug("Treating nested subsection %r as plain content", candidate.name)
            continue
        outer.append(candidate)
    return outer


def scan_fields(text: str) -> list[MarkerRange]:
    """Resolve field ranges, ordered by opener position."""
    return _resolve(_field_tokens(text), len(text), "field")


def split_outside(text: str, ranges: list[MarkerRange]) -> list[str]:
    """Return the pieces of text not covered by any of the (sorted) ranges."""
    segments: list[str] = []
    cursor = 0
    for r in ranges:
        if r.marker_start > cursor:
            segments.append(text[cursor:r.marker_start])
        cursor = max(cursor, r.marker_end)
    segments.append(text[cursor:])
    return segments


def strip_section_markers(text: str) -> str:
    return SECTION_PATTERN.sub('', text)


def strip_subsection_markers(text: str) -> str:
    return SUBSECTION_PATTERN.sub('', text)


def strip_field_markers(text: str) -> str:
    return FIELD_PATTERN.sub(lambda m: '' if _is_field_marker(m) else m.group(0), text)


def strip_markers(text: str) -> str:
    """Remove every recognized marker, leaving malformed ones in place."""
    return strip_field_markers(strip_subsection_markers(strip_section_markers(text)))


def first_paragraph(text: str) -> str:
    """Return text up to (not including) its first blank-line break."""
    return PARAGRAPH_BREAK.split(text.strip(), maxsplit=1)[0].strip()
