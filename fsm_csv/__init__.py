"""
fsm-csv: comma-separated text tokenizer and finite-state machine validator.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    fsm-csv check --alphabet "a, b" --state q0 --initial q0 --transition q0 a q0

Library Usage:
    from fsm_csv import Edge, Node, build_fsm_model, build_transition_table_rows

    q0 = Node("q0", is_initial=True)
    model = build_fsm_model([q0], [Edge("a", q0, q0)], "a, b")
    if model.is_valid:
        rows = build_transition_table_rows(model)
"""

from .builder import build_fsm_model
from .config import FsmCsvConfig, ParserConfig
from .exceptions import ConfigError, FsmCsvError, OverlappingDelimitersError
from .models import CsvWarning, Edge, FsmModel, Node, SkipEmptyLines, StateSets, WarningType
from .shortcuts import normalize
from .symbols import parse_alphabet, parse_delimited_symbols, parse_transition_input
from .table import build_transition_table_rows, format_transition_table, sort_fsm_model
from .tokenizer import CsvParser, parse_csv

__version__ = "0.1.0"

__all__ = [
    # Tokenizer
    "CsvParser",
    "parse_csv",
    # Model building
    "parse_delimited_symbols",
    "parse_alphabet",
    "parse_transition_input",
    "build_fsm_model",
    "sort_fsm_model",
    "build_transition_table_rows",
    "format_transition_table",
    "normalize",
    # Data models
    "CsvWarning",
    "Edge",
    "FsmModel",
    "Node",
    "SkipEmptyLines",
    "StateSets",
    "WarningType",
    # Configuration
    "FsmCsvConfig",
    "ParserConfig",
    # Exceptions
    "ConfigError",
    "FsmCsvError",
    "OverlappingDelimitersError",
    # Version
    "__version__",
]
