"""Human-readable dumps of parsed HVSC data.

The STIL layout makes parser mistakes easy to spot (a ``NAME:`` showing up
inside a field's text, a timestamp missing from a title)::

    {File: /MUSICIANS/H/Hubbard_Rob/Commando.sid}

    {SID-wide comment}
    Music for the game by Elite.

    {Per-tune info}

      {#1}
        {  title} Commando (0:00-1:30)
          {timestamp} 0:00-1:30

Usage::

    from hvsc.dump import StilFormatter
    print(StilFormatter().render(document), end="")
"""

from .models import BugEntry, Field, FieldKind, StilDocument, Timestamp
from .psid import PsidFile

# Tags right-aligned in a 7-character column
FIELD_DISPLAYS = {
    FieldKind.ARTIST: "{ artist}",
    FieldKind.AUTHOR: "{ author}",
    FieldKind.BUG: "{    bug}",
    FieldKind.COMMENT: "{comment}",
    FieldKind.NAME: "{   name}",
    FieldKind.TITLE: "{  title}",
}


def format_seconds(seconds: int) -> str:
    return f"{seconds // 60}:{seconds % 60:02d}"


def format_timestamp(timestamp: Timestamp) -> str:
    if not timestamp.is_range:
        return format_seconds(timestamp.start)
    return f"{format_seconds(timestamp.start)}-{format_seconds(timestamp.end)}"


class StilFormatter:
    """Render a :class:`~hvsc.models.StilDocument` as indented text."""

    def render(self, document: StilDocument) -> str:
        """Return the dump of *document*, ending with a single newline."""
        parts = [f"{{File: {document.key}}}"]
        if document.global_comment is not None:
            parts += ["", "{SID-wide comment}", document.global_comment]
        parts += ["", "{Per-tune info}"]
        for block in document.blocks:
            parts.append("")
            parts.extend(_render_block(block.tune, block.fields))
        return "\n".join(parts) + "\n"

    def render_tune(self, tune: int, fields: tuple[Field, ...]) -> str:
        return "\n".join(_render_block(tune, fields)) + "\n"


def _render_block(tune: int, fields: tuple[Field, ...]) -> list[str]:
    lines = [f"  {{#{tune}}}"]
    for field in fields:
        lines.append(f"    {FIELD_DISPLAYS[field.kind]} {field.text}")
        if field.timestamp is not None:
            lines.append(f"      {{timestamp}} {format_timestamp(field.timestamp)}")
        if field.album is not None:
            lines.append(f"      {{album}} {field.album}")
    return lines


def render_bugs(entries: list[BugEntry]) -> str:
    lines = []
    for entry in entries:
        prefix = f"{{#{entry.tune}}} " if entry.tune else ""
        lines.append(f"{prefix}{{ bug}} {entry.description}")
        lines.append(f"{prefix}{{user}} {entry.reporter or '-'}")
    return "\n".join(lines) + "\n" if lines else ""


def render_lengths(lengths: list[int]) -> str:
    lines = [f"Got {len(lengths)} song(s):"]
    lines += [f"    {seconds // 60:02d}:{seconds % 60:02d}" for seconds in lengths]
    return "\n".join(lines) + "\n"


def render_psid(psid: PsidFile) -> str:
    header = psid.header
    load, end = psid.load_range
    lines = [
        f"file name  : {psid.path}",
        f"file size  : {len(psid.data)}",
        f"magic      : {header.magic}",
        f"version    : {header.version}",
        f"data offset: ${header.data_offset:04x}",
        f"load       : ${load:04x}-${end:04x}",
        f"init       : ${header.init_address:04x}",
        f"play       : ${header.play_address:04x}",
        f"songs      : {header.songs} (default {header.start_song})",
        f"speed      : ${header.speed:08x}",
        f"name       : {header.name}",
        f"author     : {header.author}",
        f"copyright  : {header.copyright}",
    ]
    if header.version >= 2:
        lines += [
            f"flags      : ${header.flags:04x}",
            f"start page : ${header.start_page * 256:04x}",
            f"page length: ${header.page_length * 256:04x}",
            f"second SID : {_sid_address(header.second_sid)}",
            f"third SID  : {_sid_address(header.third_sid)}",
        ]
    return "\n".join(lines) + "\n"


def _sid_address(value: int) -> str:
    return f"${value * 16 + 0xD000:04x}" if value else "none"
