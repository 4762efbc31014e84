"""Parsing of STIL entry text into blocks of typed fields.

An entry, as stored in STIL.txt after its key line, looks like this::

    COMMENT: Tunes 1-3 are covers, the rest is original music.
             Thanks to Jason for the info.
    (#1)
      TITLE: Ghostbusters (0:32-1:05)
     ARTIST: Ray Parker Jr.
    (#2)
       NAME: Ingame
     AUTHOR: Rob Hubbard

Pipeline:

  1. classify_field()          - 8-character tag prefix -> FieldKind
  2. parse_tune_number()       - ``(#N)`` subtune markers
  3. parse_timestamp()         - ``M:SS`` / ``M:SS-M:SS`` ranges in TITLE fields
  4. accumulate_comment()      - tag line + nine-space continuation lines
  5. BlockBuilder              - the state machine assembling a StilDocument
"""

import logging
import re

from ..exceptions import TimestampError
from ..models import Block, Field, FieldKind, StilDocument, Timestamp, WorkingBlock

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lexical conventions
# ---------------------------------------------------------------------------

# Field tags are right-aligned in an 8-character column.  BUG only shows up in
# BUGlist.txt.
FIELD_TAGS: dict[str, FieldKind] = {
    " ARTIST:": FieldKind.ARTIST,
    " AUTHOR:": FieldKind.AUTHOR,
    "    BUG:": FieldKind.BUG,
    "COMMENT:": FieldKind.COMMENT,
    "   NAME:": FieldKind.NAME,
    "  TITLE:": FieldKind.TITLE,
}

TAG_WIDTH = 8

# Tag plus the separating space
CONTENT_OFFSET = TAG_WIDTH + 1

CONTINUATION_INDENT = " " * CONTENT_OFFSET

TUNE_MARKER_RE = re.compile(r"^\s*\(#([0-9]+)\)")

# Minutes of any width, seconds exactly two digits
SIMPLE_TIMESTAMP_RE = re.compile(r"([0-9]+):([0-9]{2})(?![0-9])")

ALBUM_RE = re.compile(r"\[from ([^\]]+)\]")


# ---------------------------------------------------------------------------
# Field tags and tune markers
# ---------------------------------------------------------------------------


def classify_field(line: str) -> FieldKind | None:
    """Return the FieldKind of *line*'s tag, or None for untagged lines."""
    prefix = line[:TAG_WIDTH]
    for tag, kind in FIELD_TAGS.items():
        if prefix == tag:
            return kind
    return None


def strip_tag(line: str) -> str:
    """Return the field content of a tagged line (everything after ``TAG: ``)."""
    return line[CONTENT_OFFSET:]


def parse_tune_number(line: str) -> int | None:
    """Return N for a ``(#N)`` marker line, None for anything else.

    Leading whitespace is ignored.  ``(#0)`` is not a valid marker.
    """
    m = TUNE_MARKER_RE.match(line)
    if not m:
        return None
    number = int(m.group(1))
    return number if number > 0 else None


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def parse_simple_timestamp(text: str) -> tuple[int, str]:
    """Parse a single ``M:SS`` value at the start of *text*.

    Returns ``(seconds, remaining_text)``.  The seconds part is not checked
    against 59.

    Raises TimestampError when *text* doesn't start with a timestamp.
    """
    m = SIMPLE_TIMESTAMP_RE.match(text)
    if not m:
        raise TimestampError(text, "expected M:SS")
    minutes, seconds = int(m.group(1)), int(m.group(2))
    return minutes * 60 + seconds, text[m.end():]


def parse_timestamp(text: str) -> tuple[Timestamp, str]:
    """Parse ``M:SS`` or ``M:SS-M:SS`` at the start of *text*.

    Returns the Timestamp and the text following it.

    Raises TimestampError if either half is malformed.
    """
    start, rest = parse_simple_timestamp(text)
    if not rest.startswith("-"):
        return Timestamp(start), rest
    try:
        end, rest = parse_simple_timestamp(rest[1:])
    except TimestampError:
        raise TimestampError(text, "malformed end of range") from None
    return Timestamp(start, end), rest


def find_timestamp(text: str) -> Timestamp | None:
    """Return the timestamp in a trailing ``(...)`` of *text*, if any.

    Plenty of titles end in remarks like ``(lyrics)`` or ``(music)``, so a
    parenthesized tail that is not a timestamp simply yields None.
    """
    if not text.endswith(")"):
        return None
    opening = text.rfind("(")
    if opening < 0:
        logger.debug("no opening '(' in %r, ignoring", text)
        return None
    try:
        timestamp, _ = parse_timestamp(text[opening + 1:-1])
    except TimestampError as exc:
        logger.debug("ignoring %s", exc)
        return None
    return timestamp


def find_album(text: str) -> str | None:
    """Return the album of a ``[from <album>]`` cover note, if any."""
    m = ALBUM_RE.search(text)
    return m.group(1) if m else None


# ---------------------------------------------------------------------------
# Multi-line fields
# ---------------------------------------------------------------------------


def accumulate_comment(lines: list[str], start: int) -> tuple[str, int]:
    """Merge the tagged line at *start* with its continuation lines.

    Continuation lines start with nine spaces.  They are appended from their
    ninth character on, so the last space of the indent separates the merged
    segments; no newlines are inserted.

    Returns ``(text, next_index)`` where *next_index* is the first line that
    was not consumed.
    """
    parts = [strip_tag(lines[start])]
    index = start + 1
    while index < len(lines) and lines[index].startswith(CONTINUATION_INDENT):
        parts.append(lines[index][TAG_WIDTH:])
        index += 1
    return "".join(parts), index


# ---------------------------------------------------------------------------
# Block builder
# ---------------------------------------------------------------------------


class BlockBuilder:
    """Assemble the lines of one STIL entry into a :class:`StilDocument`.

    The builder owns a working block.  It starts out as tune 0 (the part of
    the entry before any ``(#N)`` marker) and becomes a real subtune when a
    marker, a comment or a field is seen.  Finished blocks are frozen into
    the document in the order their markers appear.

    A field seen while the working block is still tune 0 is dropped and the
    block is promoted to tune 1, which is how the STIL has always been read
    here.  Pass ``keep_preamble_fields=True`` to keep such fields in tune 1
    instead.
    """

    def __init__(self, key: str, keep_preamble_fields: bool = False):
        self.key = key
        self.keep_preamble_fields = keep_preamble_fields
        self._blocks: list[Block] = []
        self._working = WorkingBlock()
        self._comment: str | None = None

    def build(self, lines: list[str]) -> StilDocument:
        """Parse *lines* and return the finished document."""
        index = 0
        while index < len(lines):
            line = lines[index]

            tune = parse_tune_number(line)
            if tune is not None:
                self._start_tune(tune)
                index += 1
                continue

            kind = classify_field(line)
            if kind is None:
                # Continuations of tagged lines are consumed with their field,
                # so anything left here is stray text.
                logger.debug("%s: skipping untagged line %r", self.key, line)
                index += 1
                continue

            first = strip_tag(line)
            text, index = accumulate_comment(lines, index)
            if kind is FieldKind.COMMENT and self._working.tune == 0:
                self._comment = text
                self._working.tune = 1
                continue

            self._add_field(_make_field(kind, text, first))

        self._finalize()
        document = StilDocument(
            key=self.key,
            blocks=tuple(self._blocks),
            global_comment=self._comment,
        )
        logger.debug("%s: parsed %d block(s)", self.key, len(document.blocks))
        return document

    def _start_tune(self, tune: int) -> None:
        logger.debug("%s: tune marker #%d", self.key, tune)
        if self._working.tune == 0:
            # The preamble block turns out to be this tune's block
            self._working.tune = tune
        elif self._working.tune != tune:
            self._finalize()
            self._working = WorkingBlock(tune=tune)

    def _add_field(self, field: Field) -> None:
        if self._working.tune == 0:
            self._working.tune = 1
            if not self.keep_preamble_fields:
                logger.debug("%s: dropping preamble field %r", self.key, field.text)
                return
        self._working.fields.append(field)

    def _finalize(self) -> None:
        working = self._working
        self._blocks.append(Block(tune=working.tune, fields=tuple(working.fields)))
        self._working = WorkingBlock()


def _make_field(kind: FieldKind, text: str, first: str) -> Field:
    if kind is FieldKind.TITLE:
        # the tag line's own timestamp wins over one at the end of a continuation
        timestamp = find_timestamp(first)
        if timestamp is None and text != first:
            timestamp = find_timestamp(text)
        return Field(kind=kind, text=text, timestamp=timestamp, album=find_album(text))
    return Field(kind=kind, text=text)


def build_document(key: str, lines: list[str], keep_preamble_fields: bool = False) -> StilDocument:
    """Convenience wrapper: parse *lines* of the entry for *key*."""
    return BlockBuilder(key, keep_preamble_fields=keep_preamble_fields).build(lines)
