"""Locations of the HVSC documentation files.

All paths are derived from the HVSC root directory (the directory holding
``C64Music``'s ``DEMOS``, ``GAMES``, ``MUSICIANS`` and ``DOCUMENTS``)::

    paths = HvscPaths.from_root("/data/C64Music")
    paths.stil            # /data/C64Music/DOCUMENTS/STIL.txt
    paths.strip_root("/data/C64Music/MUSICIANS/H/Hubbard_Rob/Commando.sid")
    # -> "/MUSICIANS/H/Hubbard_Rob/Commando.sid"
"""

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .exceptions import PathError

STIL_FILE = "DOCUMENTS/STIL.txt"
BUGS_FILE = "DOCUMENTS/BUGlist.txt"
SLDB_FILE = "DOCUMENTS/Songlengths.md5"

# Environment variable read by the CLI when --root is not given
ROOT_ENVVAR = "HVSC_ROOT"


@dataclass(frozen=True)
class HvscPaths:
    root: Path
    stil: Path
    bugs: Path
    sldb: Path

    @classmethod
    def from_root(cls, root: str | os.PathLike) -> "HvscPaths":
        root = Path(root).expanduser()
        return cls(
            root=root,
            stil=root / STIL_FILE,
            bugs=root / BUGS_FILE,
            sldb=root / SLDB_FILE,
        )

    def strip_root(self, sid_path: str | os.PathLike) -> str:
        """Return the archive key for *sid_path*.

        Keys are the path relative to the HVSC root, with forward slashes and a
        leading ``/``, exactly as they appear in STIL.txt and BUGlist.txt.
        Relative *sid_path* values are taken relative to the root.

        Raises PathError if the file is not inside the root.
        """
        path = Path(sid_path).expanduser()
        if not path.is_absolute():
            path = self.root / path
        root = Path(os.path.normpath(self.root.absolute()))
        path = Path(os.path.normpath(path.absolute()))
        try:
            relative = path.relative_to(root)
        except ValueError:
            raise PathError(str(sid_path), str(self.root)) from None
        if not relative.parts:
            raise PathError(str(sid_path), str(self.root))
        return "/" + str(PurePosixPath(*relative.parts))
