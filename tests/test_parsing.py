import logging

import pytest

from hvsc.archive.parsing import (
    FIELD_TAGS,
    BlockBuilder,
    accumulate_comment,
    build_document,
    classify_field,
    find_album,
    find_timestamp,
    parse_simple_timestamp,
    parse_timestamp,
    parse_tune_number,
    strip_tag,
)
from hvsc.exceptions import TimestampError
from hvsc.models import FieldKind, Timestamp

KEY = "/MUSICIANS/H/Hubbard_Rob/Commando.sid"
INDENT = " " * 9

# ---------------------------------------------------------------------------
# classify_field / strip_tag
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("tag,kind", list(FIELD_TAGS.items()))
def test_classify_every_tag(tag, kind):
    line = f"{tag} some text"
    assert classify_field(line) is kind
    assert strip_tag(line) == line[9:] == "some text"


def test_tags_are_eight_characters():
    assert all(len(tag) == 8 for tag in FIELD_TAGS)


def test_classify_untagged_line():
    assert classify_field("just some text") is None
    assert classify_field(INDENT + "continued") is None
    assert classify_field("") is None


def test_classify_requires_exact_alignment():
    # tag shifted by one column is not a tag
    assert classify_field("TITLE: Commando") is None
    assert classify_field("   TITLE: Commando") is None


def test_classify_is_case_sensitive():
    assert classify_field("  title: Commando") is None


def test_classify_marker_line_is_untagged():
    assert classify_field("(#1)") is None


# ---------------------------------------------------------------------------
# parse_tune_number
# ---------------------------------------------------------------------------


def test_tune_number_basic():
    assert parse_tune_number("(#1)") == 1
    assert parse_tune_number("(#12)") == 12


def test_tune_number_leading_whitespace():
    assert parse_tune_number("   (#3)") == 3
    assert parse_tune_number("\t(#3)") == 3


def test_tune_number_rejects_non_markers():
    assert parse_tune_number("(#)") is None
    assert parse_tune_number("(#x)") is None
    assert parse_tune_number("(#2") is None
    assert parse_tune_number("#2") is None
    assert parse_tune_number("  TITLE: (#2)") is None


def test_tune_number_zero_is_not_a_marker():
    assert parse_tune_number("(#0)") is None


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def test_simple_timestamp():
    assert parse_simple_timestamp("1:30") == (90, "")
    assert parse_simple_timestamp("12:05 rest") == (725, " rest")


def test_simple_timestamp_seconds_not_range_checked():
    assert parse_simple_timestamp("0:75") == (75, "")


def test_simple_timestamp_requires_two_digit_seconds():
    with pytest.raises(TimestampError):
        parse_simple_timestamp("1:3")
    with pytest.raises(TimestampError):
        parse_simple_timestamp("1:300")


def test_timestamp_single():
    assert parse_timestamp("1:30") == (Timestamp(90), "")


def test_timestamp_range():
    assert parse_timestamp("0:30-2:15") == (Timestamp(30, 135), "")


def test_timestamp_returns_remaining_text():
    ts, rest = parse_timestamp("0:30-2:15 and more")
    assert ts == Timestamp(30, 135)
    assert rest == " and more"


def test_timestamp_long_minutes():
    assert parse_timestamp("123:00") == (Timestamp(7380), "")


@pytest.mark.parametrize("text", ["lyrics", "", "1.30", ":30", "a:30", "1-30"])
def test_timestamp_malformed(text):
    with pytest.raises(TimestampError):
        parse_timestamp(text)


def test_timestamp_rejects_non_ascii_digits():
    with pytest.raises(TimestampError):
        parse_timestamp("\u0661:\u0663\u0660")
    assert parse_tune_number("(#\u0661)") is None


def test_timestamp_malformed_second_half():
    with pytest.raises(TimestampError):
        parse_timestamp("0:30-")
    with pytest.raises(TimestampError):
        parse_timestamp("0:30-x:15")


def test_find_timestamp_in_title():
    assert find_timestamp("Commando (0:30)") == Timestamp(30)
    assert find_timestamp("Commando (0:30-2:15)") == Timestamp(30, 135)


def test_find_timestamp_ignores_remarks():
    assert find_timestamp("Commando (lyrics)") is None
    assert find_timestamp("Commando (music)") is None


def test_find_timestamp_needs_closing_paren_at_end():
    assert find_timestamp("Commando (0:30) remix") is None
    assert find_timestamp("Commando") is None
    assert find_timestamp("Commando 0:30)") is None


def test_find_timestamp_uses_last_parenthesis():
    assert find_timestamp("Theme (live) (1:00)") == Timestamp(60)


def test_find_album():
    assert find_album("Hot Stuff [from Bad Girls] (1:30)") == "Bad Girls"
    assert find_album("Hot Stuff") is None


# ---------------------------------------------------------------------------
# accumulate_comment
# ---------------------------------------------------------------------------


def test_comment_single_line():
    lines = ["COMMENT: Just one line.", "(#1)"]
    assert accumulate_comment(lines, 0) == ("Just one line.", 1)


def test_comment_two_continuations():
    lines = [
        "COMMENT: First part,",
        INDENT + "second part,",
        INDENT + "third part.",
    ]
    text, index = accumulate_comment(lines, 0)
    assert text == "First part, second part, third part."
    assert "\n" not in text
    assert index == 3


def test_comment_stops_at_first_non_continuation():
    lines = [
        "(#1)",
        "COMMENT: Start",
        INDENT + "more",
        "   NAME: Not a continuation",
        INDENT + "orphan",
    ]
    text, index = accumulate_comment(lines, 1)
    assert text == "Start more"
    assert index == 3


def test_comment_eight_spaces_is_not_a_continuation():
    lines = ["COMMENT: Start", " " * 8 + "short indent"]
    assert accumulate_comment(lines, 0) == ("Start", 1)


def test_comment_extra_indent_is_kept():
    lines = ["COMMENT: Table:", INDENT + "  indented"]
    assert accumulate_comment(lines, 0)[0] == "Table:   indented"


# ---------------------------------------------------------------------------
# BlockBuilder
# ---------------------------------------------------------------------------


def test_build_two_tunes_in_order():
    lines = [
        "(#1)",
        "   NAME: Main theme",
        "(#2)",
        "   NAME: High score",
    ]
    document = build_document(KEY, lines)
    assert document.key == KEY
    assert [b.tune for b in document.blocks] == [1, 2]
    assert document.get_tune(1)[0].text == "Main theme"
    assert document.get_tune(2)[0].text == "High score"


def test_build_keeps_marker_order_not_numeric_order():
    lines = [
        "(#2)",
        "  TITLE: Second",
        "(#1)",
        "  TITLE: First",
    ]
    document = build_document(KEY, lines)
    assert [b.tune for b in document.blocks] == [2, 1]


def test_build_global_comment_promotes_to_tune_one():
    lines = [
        "COMMENT: Whole file",
        INDENT + "comment.",
        "   NAME: Main theme",
    ]
    document = build_document(KEY, lines)
    assert document.global_comment == "Whole file comment."
    assert [b.tune for b in document.blocks] == [1]
    fields = document.get_tune(1)
    assert len(fields) == 1
    assert fields[0].kind is FieldKind.NAME


def test_build_global_comment_then_marker_one_is_same_block():
    lines = [
        "COMMENT: Whole file",
        "(#1)",
        "   NAME: Main theme",
        "(#2)",
        "   NAME: High score",
    ]
    document = build_document(KEY, lines)
    assert [b.tune for b in document.blocks] == [1, 2]
    assert [f.text for f in document.get_tune(1)] == ["Main theme"]


def test_build_per_tune_comment_is_a_field():
    lines = [
        "(#1)",
        "COMMENT: Only the chorus",
        INDENT + "is covered.",
        "  TITLE: Hot Stuff",
    ]
    document = build_document(KEY, lines)
    assert document.global_comment is None
    fields = document.get_tune(1)
    assert fields[0].kind is FieldKind.COMMENT
    assert fields[0].text == "Only the chorus is covered."
    assert fields[1].kind is FieldKind.TITLE


def test_build_title_timestamp_and_album():
    lines = ["(#1)", "  TITLE: Hot Stuff [from Bad Girls] (0:30-2:15)"]
    field = build_document(KEY, lines).get_tune(1)[0]
    assert field.text == "Hot Stuff [from Bad Girls] (0:30-2:15)"
    assert field.timestamp == Timestamp(30, 135)
    assert field.album == "Bad Girls"


def test_build_title_with_remark_is_not_an_error():
    lines = ["(#1)", "  TITLE: Commando (lyrics)"]
    field = build_document(KEY, lines).get_tune(1)[0]
    assert field.text == "Commando (lyrics)"
    assert field.timestamp is None


def test_build_timestamp_only_parsed_for_titles():
    lines = ["(#1)", "   NAME: Intro (0:30)"]
    assert build_document(KEY, lines).get_tune(1)[0].timestamp is None


def test_build_field_text_excludes_tag():
    lines = ["(#1)", " ARTIST: Donna Summer", " AUTHOR: Rob Hubbard"]
    fields = build_document(KEY, lines).get_tune(1)
    assert [(f.kind, f.text) for f in fields] == [
        (FieldKind.ARTIST, "Donna Summer"),
        (FieldKind.AUTHOR, "Rob Hubbard"),
    ]


def test_build_preamble_field_dropped_by_default():
    lines = [" AUTHOR: Somebody", "   NAME: Kept"]
    document = build_document(KEY, lines)
    assert [b.tune for b in document.blocks] == [1]
    assert [f.text for f in document.get_tune(1)] == ["Kept"]


def test_build_preamble_field_kept_when_asked():
    lines = [" AUTHOR: Somebody", "   NAME: Kept"]
    document = build_document(KEY, lines, keep_preamble_fields=True)
    assert [f.text for f in document.get_tune(1)] == ["Somebody", "Kept"]


def test_build_preamble_field_then_marker_two():
    lines = [" AUTHOR: Somebody", "(#2)", "   NAME: Second"]
    document = build_document(KEY, lines)
    assert [b.tune for b in document.blocks] == [1, 2]
    assert document.get_tune(1) == ()


def test_build_repeated_marker_is_a_no_op():
    lines = ["(#1)", "   NAME: A", "(#1)", "   NAME: B"]
    document = build_document(KEY, lines)
    assert [b.tune for b in document.blocks] == [1]
    assert [f.text for f in document.get_tune(1)] == ["A", "B"]


def test_build_stray_lines_are_skipped():
    lines = ["(#1)", "   NAME: A", "stray text", "(#0)", "   NAME: B"]
    fields = build_document(KEY, lines).get_tune(1)
    assert [f.text for f in fields] == ["A", "B"]


def test_build_stray_lines_are_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="hvsc.archive.parsing"):
        build_document(KEY, ["(#1)", "stray text"])
    assert "stray text" in caplog.text


def test_build_continuation_folds_into_preceding_field():
    lines = ["(#1)", "  TITLE: A very long", INDENT + "title (1:00)"]
    field = build_document(KEY, lines).get_tune(1)[0]
    assert field.text == "A very long title (1:00)"
    assert field.timestamp == Timestamp(60)


def test_build_title_line_timestamp_survives_continuation():
    lines = ["(#1)", "  TITLE: Foo (0:30)", INDENT + "[from Bar]"]
    field = build_document(KEY, lines).get_tune(1)[0]
    assert field.text == "Foo (0:30) [from Bar]"
    assert field.timestamp == Timestamp(30)
    assert field.album == "Bar"


def test_build_orphan_continuation_after_marker_is_skipped():
    lines = ["(#1)", INDENT + "orphan", "   NAME: A"]
    fields = build_document(KEY, lines).get_tune(1)
    assert [f.text for f in fields] == ["A"]


def test_build_empty_entry():
    document = build_document(KEY, [])
    assert document.global_comment is None
    assert [b.tune for b in document.blocks] == [0]
    assert document.get_tune(1) is None


def test_build_blocks_do_not_share_field_storage():
    lines = ["(#1)", "   NAME: A", "(#2)", "   NAME: B"]
    document = build_document(KEY, lines)
    assert isinstance(document.blocks[0].fields, tuple)
    assert document.blocks[0].fields is not document.blocks[1].fields


def test_builder_key_is_used():
    document = BlockBuilder("/other.sid").build(["(#1)"])
    assert document.key == "/other.sid"
