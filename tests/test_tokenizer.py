import time

import pytest

from fsm_csv.config import ParserConfig
from fsm_csv.exceptions import ConfigError, OverlappingDelimitersError
from fsm_csv.models import CsvWarning, SkipEmptyLines, WarningType
from fsm_csv.tokenizer import CsvParser, parse_csv


def _parse_in_chunks(chunks: list[str], config: ParserConfig | None = None) -> CsvParser:
    parser = CsvParser(config)
    for chunk in chunks:
        parser.feed(chunk)
    parser.flush()
    return parser


def test_splits_lines_and_fields():
    rows, warnings = parse_csv("a,b\nc,d")

    assert rows == [["a", "b"], ["c", "d"]]
    assert warnings == []


def test_quoted_fields_keep_separators_and_line_breaks():
    rows, warnings = parse_csv('a,"b,c"\n"d\ne",f')

    assert rows == [["a", "b,c"], ["d\ne", "f"]]
    assert warnings == []


def test_doubled_delimiter_is_a_literal_delimiter():
    rows, warnings = parse_csv('"say ""hi""",x')

    assert rows == [['say "hi"', "x"]]
    assert warnings == []


def test_empty_fields_are_kept():
    rows, _ = parse_csv(',a,,\n""')

    assert rows == [["", "a", "", ""], [""]]


def test_stray_delimiter_in_unquoted_field_is_reported():
    rows, warnings = parse_csv('a"b,c')

    assert rows == [['a"b', "c"]]
    assert len(warnings) == 1
    assert warnings[0].type is WarningType.DELIMITER_NOT_ESCAPED
    assert warnings[0].context == "DelimitedField"
    assert warnings[0].line_pos == 1


def test_unescaped_delimiter_in_quoted_field_is_reported():
    rows, warnings = parse_csv('"a"b,c')

    # the field is reopened after the unescaped delimiter, so ',c' stays inside
    assert rows == [['a"b,c']]
    assert [warning.type for warning in warnings] == [
        WarningType.DELIMITER_NOT_ESCAPED,
        WarningType.DELIMITER_NOT_TERMINATED,
    ]
    assert warnings[0].message == 'Expects field delimiter (") but got character b'


def test_unterminated_delimiter_is_reported_on_flush():
    rows, warnings = parse_csv('x\n"abc')

    assert rows == [["x"], ["abc"]]
    assert warnings == [
        CsvWarning(
            type=WarningType.DELIMITER_NOT_TERMINATED,
            message='Expects field delimiter (") but reached end of line',
            line_pos=2,
        )
    ]


def test_warning_positions_follow_committed_rows():
    _, warnings = parse_csv('a"b\nc"d')

    assert [warning.line_pos for warning in warnings] == [1, 2]


def test_warnings_snapshot_includes_current_line():
    parser = CsvParser()
    parser.feed('a"b')

    assert parser.rows_snapshot() == []
    assert len(parser.warnings_snapshot()) == 1


def test_has_pending_data():
    parser = CsvParser()
    assert parser.has_pending_data() is False

    parser.feed("a")
    assert parser.has_pending_data() is True

    parser.flush()
    assert parser.has_pending_data() is False

    parser.feed('"')
    assert parser.has_pending_data() is True

    parser.feed('"')
    assert parser.has_pending_data() is True


def test_flush_without_pending_data_commits_nothing():
    parser = CsvParser()
    parser.feed("a\n")
    parser.flush()
    parser.flush()

    assert parser.rows_snapshot() == [["a"]]


def test_snapshots_are_copies():
    parser = _parse_in_chunks(['a"b,c'])

    rows = parser.rows_snapshot()
    rows[0].append("mutated")
    rows.append(["extra"])
    warnings = parser.warnings_snapshot()
    warnings.clear()

    assert parser.rows_snapshot() == [['a"b', "c"]]
    assert len(parser.warnings_snapshot()) == 1


def test_reset_discards_data_but_keeps_config():
    config = ParserConfig(field_separators=(";",))
    parser = CsvParser(config)
    parser.feed("a;b\nc")

    parser.reset()

    assert parser.rows_snapshot() == []
    assert parser.warnings_snapshot() == []
    assert parser.has_pending_data() is False
    assert parser.config == config

    parser.feed("d;e")
    parser.flush()
    assert parser.rows_snapshot() == [["d", "e"]]


def test_smart_mode_requires_single_characters_and_standard_line_breaks():
    assert CsvParser().smart_mode is True
    assert CsvParser(ParserConfig(smart_regex=False)).smart_mode is False
    assert CsvParser(ParserConfig(field_separators=("::",))).smart_mode is False
    assert CsvParser(ParserConfig(line_separators=("\r\n", "\r"))).smart_mode is True
    assert CsvParser(ParserConfig(line_separators=("|",))).smart_mode is False


def test_multi_character_separators():
    config = ParserConfig(field_separators=("::",), line_separators=("<br>",))

    rows, warnings = parse_csv('a::b<br>"c::d"::e', config)

    assert rows == [["a", "b"], ["c::d", "e"]]
    assert warnings == []


def test_longer_literal_is_matched_before_its_prefix():
    config = ParserConfig(field_separators=(",", ",,"))

    rows, _ = parse_csv("a,,b,c", config)

    assert rows == [["a", "b", "c"]]


@pytest.mark.parametrize("smart_regex", [True, False])
def test_crlf_split_across_chunks(smart_regex):
    config = ParserConfig(line_separators=("\r\n",), smart_regex=smart_regex)

    parser = _parse_in_chunks(["a\r", "\nb"], config)

    assert parser.rows_snapshot() == [["a"], ["b"]]


def test_pending_prefix_is_flushed_as_text():
    config = ParserConfig(line_separators=("\r\n",))

    parser = _parse_in_chunks(["a\r"], config)

    assert parser.rows_snapshot() == [["a\r"]]


@pytest.mark.parametrize("smart_regex", [True, False])
def test_unconfigured_line_breaks_are_text(smart_regex):
    config = ParserConfig(smart_regex=smart_regex)

    rows, _ = parse_csv("a\r\nb", config)

    assert rows == [["a\r"], ["b"]]


@pytest.mark.parametrize(
    ("policy", "expected"),
    [
        (SkipEmptyLines.NEVER, [["a"], [""], ["  "], [""], ["", ""], ["b"]]),
        (SkipEmptyLines.WHEN_FULLY_EMPTY, [["a"], ["  "], [""], ["", ""], ["b"]]),
        (SkipEmptyLines.WHEN_BLANK, [["a"], [""], ["", ""], ["b"]]),
        (SkipEmptyLines.WHEN_ALL_FIELDS_BLANK, [["a"], ["b"]]),
    ],
)
def test_skip_empty_lines_policies(policy, expected):
    config = ParserConfig(skip_empty_lines_when=policy)

    rows, _ = parse_csv('a\n\n  \n""\n,\nb', config)

    assert rows == expected


def test_skip_policy_accepts_its_name():
    rows, _ = parse_csv("a\n\nb", ParserConfig(skip_empty_lines_when="fully-empty"))

    assert rows == [["a"], ["b"]]


def test_skip_lines_with_warnings_drops_line_and_warnings():
    rows, warnings = parse_csv('a"b\nc', ParserConfig(skip_lines_with_warnings=True))

    assert rows == [["c"]]
    assert warnings == []


def test_custom_delimiter():
    config = ParserConfig(field_delimiter="'", field_separators=(";",))

    rows, warnings = parse_csv("'it''s';\"x\"", config)

    assert rows == [["it's", '"x"']]
    assert warnings == []


@pytest.mark.parametrize(
    "config",
    [
        ParserConfig(field_delimiter=""),
        ParserConfig(field_separators=()),
        ParserConfig(field_separators=(",", ",")),
        ParserConfig(line_separators=("",)),
        ParserConfig(line_separators=()),
        ParserConfig(smart_regex="yes"),
        ParserConfig(skip_empty_lines_when="sometimes"),
    ],
)
def test_invalid_configuration_is_rejected(config):
    with pytest.raises(ConfigError):
        CsvParser(config)


@pytest.mark.parametrize(
    "config",
    [
        ParserConfig(field_separators=('"',)),
        ParserConfig(line_separators=(",",)),
        ParserConfig(field_separators=(",", "\n")),
        ParserConfig(field_delimiter="\n"),
    ],
)
def test_shared_values_are_rejected(config):
    with pytest.raises(OverlappingDelimitersError):
        CsvParser(config)


@pytest.mark.parametrize("smart_regex", [True, False])
def test_large_chunk_is_scanned_in_linear_time(smart_regex):
    config = ParserConfig(line_separators=("\r\n",), smart_regex=smart_regex)
    parser = CsvParser(config)
    line = "a," * 200_000

    started = time.perf_counter()
    parser.feed(line + '"' + "x," * 200_000 + '"\r')
    parser.flush()
    elapsed = time.perf_counter() - started

    rows = parser.rows_snapshot()
    assert len(rows) == 1
    assert len(rows[0]) == 200_001
    assert rows[0][-1] == "x," * 200_000 + '"\r'
    assert elapsed < 10


def test_hold_back_only_looks_at_the_tail():
    parser = CsvParser(ParserConfig(field_separators=("::",), line_separators=("<br>",)))
    text = "a::" * 1_000 + "b<b"
    tokens = [(match.start(), match.group()) for match in parser._pattern.finditer(text)]

    assert parser._hold_back_position(text, tokens) == len(text) - 2
    assert parser._hold_back_position("a::b", [(0, "a"), (1, "::"), (3, "b")]) == 4
