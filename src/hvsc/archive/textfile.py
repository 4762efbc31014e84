"""Line reader for the HVSC text files (STIL.txt, BUGlist.txt, Songlengths.md5).

The files are plain ISO-8859-1 text with DOS or Unix line endings.  A
:class:`TextFile` hands them out one :class:`Line` at a time, keeping track
of the 1-based line number for log and error messages::

    with TextFile(paths.stil) as source:
        for line in source:
            print(line.number, line.text)
"""

import logging
import os
from dataclasses import dataclass
from typing import IO, Iterator

from ..exceptions import ArchiveIOError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "latin-1"


@dataclass(frozen=True)
class Line:
    number: int  # 1-based
    text: str  # without line terminator


class TextFile:
    """Sequential, non-restartable reader over a text file."""

    def __init__(self, path: str | os.PathLike, encoding: str = DEFAULT_ENCODING):
        self.path = os.fspath(path)
        self.encoding = encoding
        self.lineno = 0
        self._fp: IO[str] | None = None

    def open(self) -> "TextFile":
        """Open the file.

        Raises ArchiveIOError if it cannot be opened.
        """
        # reopening starts over from the first line
        self.close()
        try:
            # newline="" keeps "\r\n" intact so read_line() can strip it itself
            self._fp = open(self.path, encoding=self.encoding, newline="")
        except OSError as exc:
            raise ArchiveIOError(self.path, exc.strerror or str(exc)) from exc
        self.lineno = 0
        logger.debug("opened %s", self.path)
        return self

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "TextFile":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def read_line(self) -> Line | None:
        """Return the next line, or None at end of file.

        Raises ArchiveIOError on read failures.
        """
        if self._fp is None:
            raise ArchiveIOError(self.path, "file is not open")
        try:
            text = self._fp.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise ArchiveIOError(self.path, str(exc), self.lineno + 1) from exc
        if not text:
            return None
        self.lineno += 1
        return Line(number=self.lineno, text=text.rstrip("\r\n"))

    def __iter__(self) -> Iterator[Line]:
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line
