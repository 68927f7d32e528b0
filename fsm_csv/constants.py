"""Constants used across the fsm-csv package."""

from __future__ import annotations

# Tokenizer defaults
DEFAULT_FIELD_DELIMITER = '"'
DEFAULT_FIELD_SEPARATORS = (",",)
DEFAULT_LINE_SEPARATORS = ("\n",)
STANDARD_LINE_SEPARATORS = ("\r", "\n", "\r\n")

WARNING_CONTEXT = "DelimitedField"

# Comma-separated symbol lists: ',' followed by up to four spaces
SYMBOL_FIELD_SEPARATORS = tuple("," + " " * count for count in range(5))
SYMBOL_LINE_SEPARATOR = "\n"

# State markers used in transition tables
INITIAL_STATE_SYMBOL = "->"
ACCEPT_STATE_SYMBOL = "*"

TRANSITION_DESTINATION_SEPARATOR = ", "
NESTED_ERROR_INDENT = "    "
