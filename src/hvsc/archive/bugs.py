"""Reader for the list of known playback issues (``DOCUMENTS/BUGlist.txt``).

Entries share the STIL layout: a key line, then ``BUG:`` fields with
nine-space continuation lines, optionally split per subtune with ``(#N)``
markers.  The person reporting the bug is credited in parentheses at the end
of the text::

    /DEMOS/A-F/Flowers.sid
    (#2)
        BUG: Plays too fast on PAL machines, the original used the CIA
             timer.  (Wilfred Bos)
"""

import logging
import re
from pathlib import Path

from ..models import BugEntry, FieldKind
from .base import ArchiveReader
from .parsing import accumulate_comment, classify_field, parse_tune_number

logger = logging.getLogger(__name__)

_REPORTER_RE = re.compile(r"\s*\(([^()]+)\)\s*$")


class BugListReader(ArchiveReader):
    """Look up BUGlist entries; ``lookup()`` returns a list of BugEntry."""

    @property
    def archive_path(self) -> Path:
        return self.paths.bugs

    def parse(self, key: str, lines: list[str]) -> list[BugEntry]:
        entries: list[BugEntry] = []
        tune = 0
        index = 0
        while index < len(lines):
            number = parse_tune_number(lines[index])
            if number is not None:
                tune = number
                index += 1
                continue
            if classify_field(lines[index]) is not FieldKind.BUG:
                logger.debug("%s: skipping line %r", key, lines[index])
                index += 1
                continue
            text, index = accumulate_comment(lines, index)
            entries.append(split_reporter(text, tune))
        return entries


def split_reporter(text: str, tune: int = 0) -> BugEntry:
    """Split the trailing ``(reporter)`` credit off a bug description."""
    m = _REPORTER_RE.search(text)
    if not m:
        return BugEntry(description=text.strip(), tune=tune)
    return BugEntry(
        description=text[: m.start()].strip(),
        reporter=m.group(1).strip(),
        tune=tune,
    )
