"""Song length database (``DOCUMENTS/Songlengths.md5``).

Entries are keyed by the MD5 digest of the complete SID file, each followed by
one length per subtune::

    [Database]
    ; /MUSICIANS/H/Hubbard_Rob/Commando.sid
    3a6ab5e1c9cd4c8d0a39f1e6cb6e6fb1=4:47 0:06 0:11.250

Older releases mark lengths with attributes such as ``(G)``; fractions of a
second and attributes are dropped.
"""

import hashlib
import logging
import os
import re

from .archive.parsing import parse_simple_timestamp
from .archive.textfile import TextFile
from .config import HvscPaths
from .exceptions import ArchiveIOError, TimestampError

logger = logging.getLogger(__name__)

DIGEST_LENGTH = 32  # hex characters

_LENGTH_SUFFIX_RE = re.compile(r"^(?:\.[0-9]{1,3})?(?:\([A-Za-z]+\))*$")


def md5_digest(sid_path: str | os.PathLike) -> str:
    """Return the lower-case hex MD5 digest of the SID file at *sid_path*."""
    try:
        with open(sid_path, "rb") as f:
            digest = hashlib.md5(f.read()).hexdigest()
    except OSError as exc:
        raise ArchiveIOError(os.fspath(sid_path), exc.strerror or str(exc)) from exc
    logger.debug("md5 of %s is %s", sid_path, digest)
    return digest


def find_entry(sldb_path: str | os.PathLike, digest: str) -> str | None:
    """Return the database line for *digest*, or None if there is none."""
    digest = digest.lower()
    with TextFile(sldb_path) as source:
        for line in source:
            text = line.text
            if text.startswith((";", "[")) or len(text) <= DIGEST_LENGTH:
                continue
            if text[DIGEST_LENGTH] == "=" and text[:DIGEST_LENGTH] == digest:
                logger.debug("found %s at line %d", digest, line.number)
                return text
    return None


def parse_entry(line: str) -> list[int]:
    """Return the subtune lengths in seconds of a database line.

    Raises TimestampError when a length is malformed.
    """
    _, sep, lengths = line.partition("=")
    if not sep:
        raise TimestampError(line, "missing '=' after digest")
    result = []
    for token in lengths.split():
        seconds, rest = parse_simple_timestamp(token)
        if not _LENGTH_SUFFIX_RE.match(rest):
            raise TimestampError(token, f"unexpected trailing text {rest!r}")
        result.append(seconds)
    return result


class SongLengths:
    """Look up subtune lengths of SID files."""

    def __init__(self, paths: HvscPaths):
        self.paths = paths

    def lookup_digest(self, digest: str) -> list[int] | None:
        line = find_entry(self.paths.sldb, digest)
        if line is None:
            return None
        return parse_entry(line)

    def lookup(self, sid_path: str | os.PathLike) -> list[int] | None:
        """Return the lengths of each subtune of *sid_path*, or None if unknown."""
        return self.lookup_digest(md5_digest(sid_path))
