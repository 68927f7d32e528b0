"""Parsing of comma-separated symbol lists (alphabets and transition inputs)."""

from __future__ import annotations

import re

from .config import ParserConfig
from .constants import DEFAULT_FIELD_DELIMITER, SYMBOL_FIELD_SEPARATORS, SYMBOL_LINE_SEPARATOR
from .models import SymbolParseResult
from .shortcuts import is_single_symbol
from .tokenizer import CsvParser

ALPHABET_LABEL = "alphabet"
TRANSITION_LABEL = "transition"

SYMBOL_PARSER_CONFIG = ParserConfig(
    field_delimiter=DEFAULT_FIELD_DELIMITER,
    field_separators=SYMBOL_FIELD_SEPARATORS,
    line_separators=(SYMBOL_LINE_SEPARATOR,),
)

_LINE_BREAKS = re.compile(r"\r|\n")


def parse_delimited_symbols(
    text: str,
    allow_blank: bool = False,
    allow_duplicates: bool = False,
    error_label: str = "",
) -> SymbolParseResult:
    """Parse a comma-separated list of symbols.

    Fields are separated by ``,`` optionally followed by up to four spaces and
    may be quoted with ``"``. Line breaks are removed beforehand so the text
    always forms a single row. Each field must be one character or one
    shortcut once normalized.

    Args:
        text: The list to parse.
        allow_blank: Accept text that is empty or contains only whitespace.
        allow_duplicates: Accept symbols that appear more than once. Duplicates
            are kept in `symbols` either way.
        error_label: Prefix for error messages, such as ``"alphabet"``.

    Returns:
        SymbolParseResult: Errors, symbols in input order and per-symbol counts.

    Examples:
        parse_delimited_symbols("a, b, \\\\alpha").symbols  # ["a", "b", "\\\\alpha"]
        parse_delimited_symbols('",", a').symbols  # [",", "a"]
    """
    result = SymbolParseResult()

    label_colon = f"{error_label}: " if error_label else ""
    label_input = f"{error_label} input " if error_label else ""

    text = _LINE_BREAKS.sub("", text)
    if text.strip() == "":
        if not allow_blank:
            result.errors.append(
                f"{label_colon}the entire string is empty or contains only whitespace"
            )
        return result

    parser = CsvParser(SYMBOL_PARSER_CONFIG)
    parser.feed(text)
    parser.flush()

    rows = parser.rows_snapshot()
    fields = rows[0] if rows else []
    result.errors.extend(f"{label_colon}{warning.message}" for warning in parser.warnings_snapshot())

    for field in fields:
        if not is_single_symbol(field):
            result.errors.append(f"{label_input}'{field}' is neither a character nor a shortcut")
            continue

        result.symbols.append(field)
        count = result.symbol_counts.get(field, 0) + 1
        result.symbol_counts[field] = count
        if count == 2 and not allow_duplicates:
            result.errors.append(f"{label_input}'{field}' is duplicated")

    return result


def parse_alphabet(text: str) -> SymbolParseResult:
    return parse_delimited_symbols(
        text, allow_blank=True, allow_duplicates=False, error_label=ALPHABET_LABEL
    )


def parse_transition_input(text: str) -> SymbolParseResult:
    return parse_delimited_symbols(
        text, allow_blank=False, allow_duplicates=True, error_label=TRANSITION_LABEL
    )
