from dataclasses import dataclass, field
from enum import Enum


class FieldKind(Enum):
    """Type of a STIL field, in the order of the tag table."""

    ARTIST = "artist"
    AUTHOR = "author"
    BUG = "bug"  # BUGlist.txt only
    COMMENT = "comment"
    NAME = "name"
    TITLE = "title"


@dataclass(frozen=True)
class Timestamp:
    """A playback offset or range in seconds.

    ``"(0:30)"`` is ``Timestamp(30)``, ``"(0:30-2:15)"`` is ``Timestamp(30, 135)``.
    A field without any timestamp holds ``None`` instead of a Timestamp.
    """

    start: int
    end: int | None = None  # None for a single instant

    @property
    def is_range(self) -> bool:
        return self.end is not None


@dataclass(frozen=True)
class Field:
    """One typed piece of STIL metadata.

    ``text`` never includes the tag prefix.  For TITLE fields the optional
    timestamp and ``[from ...]`` album are parsed out of the text but the text
    itself is kept verbatim.
    """

    kind: FieldKind
    text: str
    timestamp: Timestamp | None = None
    album: str | None = None


@dataclass(frozen=True)
class Block:
    """The fields of one subtune, in source order."""

    tune: int
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class StilDocument:
    """Parsed STIL entry of a single SID file.

    Blocks are kept in the order their tune markers appear in STIL.txt,
    which is not necessarily numeric order.
    """

    key: str  # e.g. "/MUSICIANS/H/Hubbard_Rob/Commando.sid"
    blocks: tuple[Block, ...] = ()
    global_comment: str | None = None

    def get_tune(self, tune: int) -> tuple[Field, ...] | None:
        """Return the fields recorded for *tune*, or None if it has no block."""
        for block in self.blocks:
            if block.tune == tune:
                return block.fields
        return None

    @property
    def tunes(self) -> list[int]:
        return [block.tune for block in self.blocks]


@dataclass(frozen=True)
class BugEntry:
    """A known issue from BUGlist.txt."""

    description: str
    reporter: str | None = None
    tune: int = 0  # 0 when the bug concerns the whole file


@dataclass
class WorkingBlock:
    """Mutable scratch block used while an entry is being parsed."""

    tune: int = 0
    fields: list[Field] = field(default_factory=list)
