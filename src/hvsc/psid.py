"""PSID/RSID file header decoding.

Layout (big-endian words, see ``DOCUMENTS/SID_file_format.txt`` in the HVSC)::

    +00  magic        "PSID" or "RSID"
    +04  version      1-4
    +06  dataOffset   0x0076 (v1) or 0x007c (v2+)
    +08  loadAddress  0 means: first two bytes of the data
    +0A  initAddress
    +0C  playAddress
    +0E  songs
    +10  startSong
    +12  speed        longword, one bit per subtune
    +16  name         32 bytes, NUL padded
    +36  author       32 bytes
    +56  released     32 bytes (copyright)
    +76  flags        v2+
    +78  startPage    v2+
    +79  pageLength   v2+
    +7A  secondSIDAddress, +7B thirdSIDAddress  v2+
"""

import logging
import os
import struct
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ArchiveIOError, InvalidFileError

logger = logging.getLogger(__name__)

MAGIC_IDS = (b"PSID", b"RSID")

_V1_HEADER = struct.Struct(">4sHHHHHHHI32s32s32s")
_V2_HEADER = struct.Struct(">HBBBB")

V1_HEADER_SIZE = _V1_HEADER.size  # 0x76
V2_HEADER_SIZE = V1_HEADER_SIZE + _V2_HEADER.size  # 0x7c

TEXT_ENCODING = "cp1252"


def sid_address_is_valid(address: int) -> bool:
    """Return True for a valid second/third SID address byte.

    The byte holds bits 4-11 of the I/O address, $42 meaning $d420.  Only even
    values in $d420-$d7e0 and $de00-$dfe0 are valid.
    """
    if address & 0x01:
        return False
    if address < 0x42 or 0x80 <= address <= 0xDF:
        return False
    return True


def _text(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode(TEXT_ENCODING, "replace")


@dataclass(frozen=True)
class PsidHeader:
    magic: str
    version: int
    data_offset: int
    load_address: int
    init_address: int
    play_address: int
    songs: int
    start_song: int
    speed: int
    name: str
    author: str
    copyright: str
    # v2+ only, 0 otherwise
    flags: int = 0
    start_page: int = 0
    page_length: int = 0
    second_sid: int = 0
    third_sid: int = 0

    @classmethod
    def decode(cls, data: bytes, path: str = "<bytes>") -> "PsidHeader":
        """Decode the header at the start of *data*.

        Raises InvalidFileError on short data or unknown magic.
        """
        if len(data) < V1_HEADER_SIZE:
            raise InvalidFileError(path, f"file too small ({len(data)} bytes)")
        (magic, version, data_offset, load, init, play, songs, start_song, speed,
         name, author, released) = _V1_HEADER.unpack_from(data)
        if magic not in MAGIC_IDS:
            raise InvalidFileError(path, f"bad magic {magic!r}")

        extra = {}
        if version >= 2:
            if len(data) < V2_HEADER_SIZE:
                raise InvalidFileError(path, f"v{version} header truncated")
            flags, start_page, page_length, second, third = _V2_HEADER.unpack_from(
                data, V1_HEADER_SIZE
            )
            extra = dict(
                flags=flags,
                start_page=start_page,
                page_length=page_length,
                second_sid=second if sid_address_is_valid(second) else 0,
                third_sid=third if sid_address_is_valid(third) else 0,
            )

        return cls(
            magic=magic.decode("ascii"),
            version=version,
            data_offset=data_offset,
            load_address=load,
            init_address=init,
            play_address=play,
            songs=songs,
            start_song=start_song,
            speed=speed,
            name=_text(name),
            author=_text(author),
            copyright=_text(released),
            **extra,
        )


@dataclass(frozen=True)
class PsidFile:
    path: str
    header: PsidHeader
    data: bytes

    @property
    def load_range(self) -> tuple[int, int]:
        """Return the first and last address the C64 program occupies."""
        offset = self.header.data_offset
        if self.header.load_address == 0:
            # load address is stored in the data, little-endian
            load = int.from_bytes(self.data[offset:offset + 2], "little")
            end = len(self.data) - offset - 2 - 1 + load
        else:
            load = self.header.load_address
            end = len(self.data) - offset - 1 + load
        return load, end & 0xFFFF

    @property
    def payload(self) -> bytes:
        """The C64 program, load address first (.prg layout)."""
        body = self.data[self.header.data_offset:]
        if self.header.load_address == 0:
            return body
        return self.header.load_address.to_bytes(2, "little") + body

    def write_binary(self, dest: str | os.PathLike) -> None:
        try:
            Path(dest).write_bytes(self.payload)
        except OSError as exc:
            raise ArchiveIOError(os.fspath(dest), exc.strerror or str(exc)) from exc


def read_psid(path: str | os.PathLike) -> PsidFile:
    """Read the SID file at *path* and decode its header.

    Raises ArchiveIOError if it cannot be read, InvalidFileError if it is not a
    PSID/RSID file.
    """
    path = os.fspath(path)
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ArchiveIOError(path, exc.strerror or str(exc)) from exc
    header = PsidHeader.decode(data, path)
    logger.debug("%s: %s v%d, %d song(s)", path, header.magic, header.version, header.songs)
    return PsidFile(path=path, header=header, data=data)
