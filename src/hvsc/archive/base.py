import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..config import HvscPaths
from .textfile import DEFAULT_ENCODING, TextFile

logger = logging.getLogger(__name__)


class ArchiveReader(ABC):
    """Base class for the keyed HVSC text archives (STIL.txt, BUGlist.txt).

    Both files are a sequence of entries.  Each entry starts with a key line
    holding the SID file's path relative to the HVSC root and ends at the first
    blank line or at end of file.
    """

    def __init__(self, paths: HvscPaths, encoding: str = DEFAULT_ENCODING):
        self.paths = paths
        self.encoding = encoding

    @property
    @abstractmethod
    def archive_path(self) -> Path:
        """Path of the text file this reader looks entries up in."""

    @abstractmethod
    def parse(self, key: str, lines: list[str]) -> Any:
        """Turn the raw lines of the entry for *key* into a result object."""

    def locate(self, source: TextFile, key: str) -> bool:
        """Advance *source* past the line that equals *key*.

        Returns False when the end of file is reached without a match.
        Raises ArchiveIOError on read failures.
        """
        for line in source:
            if line.text == key:
                logger.debug("found %r at line %d", key, line.number)
                return True
        logger.debug("%r not found in %s", key, source.path)
        return False

    def read_entry(self, source: TextFile) -> list[str]:
        """Return the lines of the entry *source* is positioned at.

        Reading stops at the first blank line or at end of file; an entry
        without any lines is valid.
        """
        lines: list[str] = []
        for line in source:
            if not line.text.strip():
                break
            lines.append(line.text)
        logger.debug("read %d line(s) of entry text", len(lines))
        return lines

    def entry_lines(self, key: str) -> list[str] | None:
        """Return the raw lines of the entry for archive *key*.

        Returns None when the archive has no entry for *key*.
        Raises ArchiveIOError when the archive cannot be read.
        """
        with TextFile(self.archive_path, encoding=self.encoding) as source:
            if not self.locate(source, key):
                return None
            return self.read_entry(source)

    def lookup_key(self, key: str) -> Any | None:
        """Locate, read and parse the entry for archive *key*.

        Returns None when the archive has no entry for *key*.
        """
        lines = self.entry_lines(key)
        if lines is None:
            return None
        return self.parse(key, lines)

    def lookup(self, sid_path: str | os.PathLike) -> Any | None:
        """Convenience method: normalize a SID file path and look it up."""
        return self.lookup_key(self.paths.strip_root(sid_path))
