"""Data models for fsm-csv."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from .constants import ACCEPT_STATE_SYMBOL, INITIAL_STATE_SYMBOL, WARNING_CONTEXT


class SkipEmptyLines(Enum):
    """Policies deciding when a parsed line counts as empty and is dropped.

    Attributes:
        NEVER: Keep every line.
        WHEN_FULLY_EMPTY: Drop lines whose raw text is the empty string.
        WHEN_BLANK: Drop lines whose raw text contains only whitespace.
        WHEN_ALL_FIELDS_BLANK: Drop lines whose fields, joined, contain only
            whitespace (quoted blank fields included).
    """

    NEVER = "never"
    WHEN_FULLY_EMPTY = "fully-empty"
    WHEN_BLANK = "blank"
    WHEN_ALL_FIELDS_BLANK = "all-fields-blank"


class ScanState(Enum):
    """Tokenizer states used while scanning delimited text.

    Attributes:
        UNQUOTED: Start of a field.
        BUILDING: Inside a field not enclosed with delimiters.
        IN_QUOTED: Inside a field enclosed with delimiters.
        CHECK_ESCAPE: Just read a delimiter inside a quoted field; the next
            token decides whether it closed the field or escaped a delimiter.
    """

    UNQUOTED = auto()
    BUILDING = auto()
    IN_QUOTED = auto()
    CHECK_ESCAPE = auto()


class TokenKind(Enum):
    """Classification of a matched token."""

    DELIMITER = auto()
    SEPARATOR = auto()
    LINE_BREAK = auto()
    TEXT = auto()


class Effect(Enum):
    """Side effects requested by a tokenizer transition, applied in order.

    Attributes:
        APPEND: Append the token to the current field.
        APPEND_AFTER_DELIMITER: Append the delimiter then the token.
        COMMIT_FIELD: Save the current field on the current line.
        COMMIT_LINE: Save the current field, then the current line.
        WARN_UNESCAPED: Record a delimiter that neither closes nor escapes.
        WARN_STRAY: Record a delimiter found inside an unquoted field.
    """

    APPEND = auto()
    APPEND_AFTER_DELIMITER = auto()
    COMMIT_FIELD = auto()
    COMMIT_LINE = auto()
    WARN_UNESCAPED = auto()
    WARN_STRAY = auto()


class WarningType(Enum):
    DELIMITER_NOT_ESCAPED = "DelimiterNotEscaped"
    DELIMITER_NOT_TERMINATED = "DelimiterNotTerminated"


@dataclass(frozen=True)
class CsvWarning:
    """A recoverable syntax problem found while tokenizing.

    Attributes:
        type: Kind of problem.
        message: Human-readable description.
        line_pos: One-based row number at the time of the warning.
        context: Tokenizer context; always ``"DelimitedField"``.
    """

    type: WarningType
    message: str
    line_pos: int
    context: str = WARNING_CONTEXT


@dataclass
class SymbolParseResult:
    """Outcome of parsing a comma-separated list of symbols.

    Attributes:
        errors: Error messages; empty when the text parsed cleanly.
        symbols: Valid symbols in input order, duplicates included.
        symbol_counts: Occurrence count of each valid symbol.
    """

    errors: list[str] = field(default_factory=list)
    symbols: list[str] = field(default_factory=list)
    symbol_counts: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class StateSymbols:
    initial: str
    accept: str


@dataclass
class StateSets:
    """State ids of a finite-state machine.

    Attributes:
        all: Every state id, without duplicates.
        initial: Initial state ids; a subset of `all`.
        accept: Accept state ids; a subset of `all`.
        initial_symbol: Marker used for initial states in tables.
        accept_symbol: Marker used for accept states in tables.
    """

    all: list[str] = field(default_factory=list)
    initial: list[str] = field(default_factory=list)
    accept: list[str] = field(default_factory=list)
    initial_symbol: str = INITIAL_STATE_SYMBOL
    accept_symbol: str = ACCEPT_STATE_SYMBOL

    def symbols_for(self, initial: bool, accept: bool) -> StateSymbols:
        """Return the markers describing a state; unused markers are empty.

        Examples:
            StateSets().symbols_for(True, False)  # StateSymbols("->", "")
        """
        return StateSymbols(
            initial=self.initial_symbol if initial else "",
            accept=self.accept_symbol if accept else "",
        )

    def symbols_string(self, initial: bool, accept: bool) -> str:
        symbols = self.symbols_for(initial, accept)
        return " ".join(s for s in (symbols.initial, symbols.accept) if s)

    def some_initial_in(self, state_ids: list[str]) -> bool:
        return any(state_id in self.initial for state_id in state_ids)

    def some_accept_in(self, state_ids: list[str]) -> bool:
        return any(state_id in self.accept for state_id in state_ids)

    def all_initial_in(self, state_ids: list[str]) -> bool:
        return all(state_id in self.initial for state_id in state_ids)

    def all_accept_in(self, state_ids: list[str]) -> bool:
        return all(state_id in self.accept for state_id in state_ids)


@dataclass
class FsmModel:
    """Finite-state machine built from graph data.

    A model is valid only when `errors` is empty; the other attributes may be
    partially populated for an invalid model and must not be relied upon.

    Attributes:
        errors: Validation failures, in the order they were found.
        alphabet: Alphabet symbols without duplicates.
        states: State ids grouped as all, initial and accept.
        transitions: Maps a source state id to a mapping from symbol to the
            destination state ids. Missing keys mean no transition.
        state_nodes: Graph node that declared each state id.
        transition_edges: Graph edge that declared each
            ``(source, symbol, target)`` triple.
    """

    errors: list[str] = field(default_factory=list)
    alphabet: list[str] = field(default_factory=list)
    states: StateSets = field(default_factory=StateSets)
    transitions: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    state_nodes: dict[str, Any] = field(default_factory=dict)
    transition_edges: dict[tuple[str, str, str], Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def destinations_of(self, state_id: str, symbol: str) -> list[str]:
        """Return the states reachable from `state_id` on `symbol`.

        An empty list is returned when no such transition exists. The list is
        a copy: changing it leaves the model untouched.
        """
        return list(self.transitions.get(state_id, {}).get(symbol, []))

    def node_for(self, state_id: str) -> Any:
        return self.state_nodes.get(state_id)

    def edge_for(self, source: str, symbol: str, target: str) -> Any:
        return self.transition_edges.get((source, symbol, target))

    def add_transition(self, source: str, symbol: str, target: str, edge: Any) -> bool:
        """Register a transition triple unless it already exists.

        Returns:
            bool: False when the triple was already registered.
        """
        key = (source, symbol, target)
        if key in self.transition_edges:
            return False
        self.transition_edges[key] = edge
        self.transitions.setdefault(source, {}).setdefault(symbol, []).append(target)
        return True


@dataclass(eq=False)
class Node:
    """Minimal graph node: a labelled state.

    Attributes:
        text: Label of the node; trimmed to obtain the state id.
        is_initial: Whether the node is flagged as an initial state.
        is_accept: Whether the node is flagged as an accept state.
    """

    text: str
    is_initial: bool = False
    is_accept: bool = False


@dataclass(eq=False)
class Edge:
    """Minimal graph edge between two nodes.

    A self-loop uses the same node for both ends. An edge with a missing end,
    such as an arrow pointing at the initial state, is not a transition.

    Attributes:
        text: Comma-separated transition inputs.
        source: Node the edge leaves from.
        target: Node the edge points to.
    """

    text: str
    source: Node | None
    target: Node | None
