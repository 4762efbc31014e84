"""Reader for the SID Tune Information List (``DOCUMENTS/STIL.txt``).

Usage::

    from hvsc.archive.stil import StilReader
    from hvsc.config import HvscPaths

    reader = StilReader(HvscPaths.from_root("/data/C64Music"))
    document = reader.lookup("/data/C64Music/MUSICIANS/H/Hubbard_Rob/Commando.sid")
    if document is not None:
        fields = document.get_tune(1)
"""

from pathlib import Path

from ..config import HvscPaths
from ..models import StilDocument
from .base import ArchiveReader
from .parsing import build_document
from .textfile import DEFAULT_ENCODING


class StilReader(ArchiveReader):
    """Look up and parse STIL entries."""

    def __init__(self, paths: HvscPaths, keep_preamble_fields: bool = False,
                 encoding: str = DEFAULT_ENCODING):
        super().__init__(paths, encoding=encoding)
        self.keep_preamble_fields = keep_preamble_fields

    @property
    def archive_path(self) -> Path:
        return self.paths.stil

    def parse(self, key: str, lines: list[str]) -> StilDocument:
        return build_document(key, lines, keep_preamble_fields=self.keep_preamble_fields)
