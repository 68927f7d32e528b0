from __future__ import annotations

import string

from hypothesis import given
from hypothesis import strategies as st

from fsm_csv.builder import build_fsm_model
from fsm_csv.config import ParserConfig
from fsm_csv.models import Edge, Node
from fsm_csv.table import sort_fsm_model
from fsm_csv.tokenizer import CsvParser, parse_csv

CONFIGS = [
    ParserConfig(),
    ParserConfig(smart_regex=False),
    ParserConfig(line_separators=("\r\n", "\r", "\n")),
    ParserConfig(field_delimiter="'", field_separators=(";", "; "), line_separators=("\r\n",)),
    ParserConfig(field_separators=("::", ":"), line_separators=("<br>", "\n")),
]

csv_text = st.text(alphabet="ab ,;:'\"\r\n<br>", max_size=40)


def _feed_all(config: ParserConfig, chunks: list[str]) -> CsvParser:
    parser = CsvParser(config)
    for chunk in chunks:
        parser.feed(chunk)
    parser.flush()
    return parser


@st.composite
def text_and_split_points(draw):
    text = draw(csv_text)
    points = draw(st.lists(st.integers(min_value=0, max_value=len(text)), max_size=6))
    return text, sorted(points)


@given(st.sampled_from(CONFIGS), text_and_split_points())
def test_streaming_matches_single_feed(config, data):
    """Property: splitting the input into chunks never changes the output."""
    text, points = data
    bounds = [0, *points, len(text)]
    chunks = [text[start:end] for start, end in zip(bounds, bounds[1:])]

    whole = _feed_all(config, [text])
    streamed = _feed_all(config, chunks)

    assert streamed.rows_snapshot() == whole.rows_snapshot()
    assert streamed.warnings_snapshot() == whole.warnings_snapshot()


@given(st.sampled_from(CONFIGS), csv_text)
def test_flush_is_idempotent(config, text):
    parser = _feed_all(config, [text])
    rows, warnings = parser.rows_snapshot(), parser.warnings_snapshot()

    parser.flush()

    assert parser.rows_snapshot() == rows
    assert parser.warnings_snapshot() == warnings
    assert parser.has_pending_data() is False


def _quote(value: str, delimiter: str) -> str:
    return delimiter + value.replace(delimiter, delimiter * 2) + delimiter


@given(
    st.sampled_from(CONFIGS),
    st.lists(st.text(alphabet="ab ,;:'\"\r\n<br>", max_size=10), min_size=1, max_size=5),
)
def test_quoted_fields_round_trip(config, values):
    """Property: quoting with doubled delimiters preserves any field value."""
    line = config.field_separators[0].join(_quote(value, config.field_delimiter) for value in values)

    rows, warnings = parse_csv(line, config)

    assert rows == [values]
    assert warnings == []


@given(st.sampled_from(CONFIGS), csv_text)
def test_parser_never_raises_and_counts_lines(config, text):
    rows, warnings = parse_csv(text, config)

    assert all(isinstance(field, str) for row in rows for field in row)
    assert all(1 <= warning.line_pos <= len(rows) for warning in warnings)


state_names = st.text(alphabet=string.ascii_lowercase + "_0123456789", min_size=1, max_size=4)
symbols = st.sampled_from(["a", "b", "c", "\\alpha", "\\beta", "_1", "_2", "z"])


@given(
    st.lists(state_names, min_size=1, max_size=6, unique=True),
    st.lists(symbols, min_size=1, max_size=6, unique=True),
    st.lists(st.tuples(st.integers(0, 5), st.integers(0, 5), symbols), max_size=12),
    st.booleans(),
)
def test_sort_is_idempotent(names, alphabet, links, compare_normalized):
    nodes = [Node(name, is_initial=index == 0, is_accept=index % 2 == 1) for index, name in enumerate(names)]
    edges = [
        Edge(symbol, nodes[source % len(nodes)], nodes[target % len(nodes)])
        for source, target, symbol in links
    ]

    once = sort_fsm_model(build_fsm_model(nodes, edges, ", ".join(alphabet)), compare_normalized)
    twice = sort_fsm_model(
        sort_fsm_model(build_fsm_model(nodes, edges, ", ".join(alphabet)), compare_normalized),
        compare_normalized,
    )

    assert once.errors == twice.errors
    assert once.alphabet == twice.alphabet
    assert once.states == twice.states
    assert once.transitions == twice.transitions


@given(
    st.lists(state_names, min_size=1, max_size=6),
    st.lists(st.tuples(st.integers(0, 5), st.integers(0, 5), st.text(max_size=6)), max_size=8),
    st.text(max_size=12),
)
def test_build_is_deterministic(names, links, alphabet_text):
    nodes = [Node(name, is_initial=index == 0) for index, name in enumerate(names)]
    edges = [
        Edge(text, nodes[source % len(nodes)], nodes[target % len(nodes)])
        for source, target, text in links
    ]

    first = build_fsm_model(nodes, edges, alphabet_text)
    second = build_fsm_model(nodes, edges, alphabet_text)

    assert first == second
