"""Incremental tokenizer for delimited, separated text."""

from __future__ import annotations

import re

from .config import ParserConfig, normalize_parser_config, validate_parser_config
from .constants import STANDARD_LINE_SEPARATORS
from .models import CsvWarning, Effect, ScanState, SkipEmptyLines, TokenKind, WarningType

_Transition = tuple[ScanState, tuple[Effect, ...]]

# One entry per (state, token kind); a missing entry is a programming error.
TRANSITIONS: dict[tuple[ScanState, TokenKind], _Transition] = {
    (ScanState.UNQUOTED, TokenKind.DELIMITER): (ScanState.IN_QUOTED, ()),
    (ScanState.UNQUOTED, TokenKind.SEPARATOR): (ScanState.UNQUOTED, (Effect.COMMIT_FIELD,)),
    (ScanState.UNQUOTED, TokenKind.LINE_BREAK): (ScanState.UNQUOTED, (Effect.COMMIT_LINE,)),
    (ScanState.UNQUOTED, TokenKind.TEXT): (ScanState.BUILDING, (Effect.APPEND,)),
    (ScanState.BUILDING, TokenKind.DELIMITER): (
        ScanState.BUILDING,
        (Effect.WARN_STRAY, Effect.APPEND),
    ),
    (ScanState.BUILDING, TokenKind.SEPARATOR): (ScanState.UNQUOTED, (Effect.COMMIT_FIELD,)),
    (ScanState.BUILDING, TokenKind.LINE_BREAK): (ScanState.UNQUOTED, (Effect.COMMIT_LINE,)),
    (ScanState.BUILDING, TokenKind.TEXT): (ScanState.BUILDING, (Effect.APPEND,)),
    (ScanState.IN_QUOTED, TokenKind.DELIMITER): (ScanState.CHECK_ESCAPE, ()),
    (ScanState.IN_QUOTED, TokenKind.SEPARATOR): (ScanState.IN_QUOTED, (Effect.APPEND,)),
    (ScanState.IN_QUOTED, TokenKind.LINE_BREAK): (ScanState.IN_QUOTED, (Effect.APPEND,)),
    (ScanState.IN_QUOTED, TokenKind.TEXT): (ScanState.IN_QUOTED, (Effect.APPEND,)),
    (ScanState.CHECK_ESCAPE, TokenKind.DELIMITER): (ScanState.IN_QUOTED, (Effect.APPEND,)),
    (ScanState.CHECK_ESCAPE, TokenKind.SEPARATOR): (ScanState.UNQUOTED, (Effect.COMMIT_FIELD,)),
    (ScanState.CHECK_ESCAPE, TokenKind.LINE_BREAK): (ScanState.UNQUOTED, (Effect.COMMIT_LINE,)),
    (ScanState.CHECK_ESCAPE, TokenKind.TEXT): (
        ScanState.IN_QUOTED,
        (Effect.WARN_UNESCAPED, Effect.APPEND_AFTER_DELIMITER),
    ),
}


def next_transition(state: ScanState, kind: TokenKind) -> _Transition:
    """Return the next state and the effects to apply for a token.

    Args:
        state: Current tokenizer state.
        kind: Classification of the token just matched.

    Returns:
        tuple[ScanState, tuple[Effect, ...]]: Next state and ordered effects.

    Examples:
        next_transition(ScanState.IN_QUOTED, TokenKind.DELIMITER)
        # (ScanState.CHECK_ESCAPE, ())
    """
    return TRANSITIONS[(state, kind)]


def is_smart_mode(config: ParserConfig) -> bool:
    """Check whether the narrow single-character pattern can be used."""
    return (
        config.smart_regex
        and len(config.field_delimiter) == 1
        and all(len(separator) == 1 for separator in config.field_separators)
        and all(separator in STANDARD_LINE_SEPARATORS for separator in config.line_separators)
    )


def build_token_pattern(config: ParserConfig, smart: bool) -> str:
    """Build the alternation used to split input into tokens.

    Literal alternatives are sorted in descending order so that a literal is
    always tried before any of its prefixes (``"\\r\\n"`` before ``"\\r"``).

    Args:
        config: Normalized parser configuration.
        smart: Whether to build the single-character pattern.

    Returns:
        str: Regular expression pattern matching every character of the input.
    """
    if smart:
        specials = "".join(
            re.escape(value) for value in (config.field_delimiter, *config.field_separators)
        )
        line_breaks = sorted(set(config.line_separators) | {"\r", "\n"}, reverse=True)
        return "|".join(
            [
                rf"[^{specials}\r\n]+",
                rf"[{specials}]",
                *(re.escape(value) for value in line_breaks),
            ]
        )

    literals = sorted(
        (config.field_delimiter, *config.field_separators, *config.line_separators),
        reverse=True,
    )
    return "|".join([*(re.escape(value) for value in literals), "."])


class CsvParser:
    """Finite-state tokenizer splitting delimited text into rows of fields.

    Input can be fed in successive chunks; `flush` ends the stream. Malformed
    quoting never raises: it is reported through warnings attached to the
    offending line, which is still emitted unless
    `ParserConfig.skip_lines_with_warnings` is set.

    Args:
        config: Parser options; defaults to a new `ParserConfig`.

    Raises:
        ConfigError: If the configuration is invalid.

    Examples:
        parser = CsvParser()
        parser.feed('a,"b,c"\\nd')
        parser.flush()
        parser.rows_snapshot()  # [["a", "b,c"], ["d"]]
    """

    def __init__(self, config: ParserConfig | None = None):
        config = normalize_parser_config(config or ParserConfig())
        validate_parser_config(config)

        self._config = config
        self._smart_mode = is_smart_mode(config)
        self._regex_pattern = build_token_pattern(config, self._smart_mode)
        self._pattern = re.compile(self._regex_pattern, re.DOTALL)
        self._literals = (config.field_delimiter, *config.field_separators, *config.line_separators)
        self._longest_literal = max(len(value) for value in self._literals)

        self.reset()

    @property
    def config(self) -> ParserConfig:
        return self._config

    @property
    def smart_mode(self) -> bool:
        return self._smart_mode

    @property
    def regex_pattern(self) -> str:
        return self._regex_pattern

    def reset(self) -> None:
        """Discard pending and committed data; the configuration is kept."""
        # about the line being parsed
        self._state = ScanState.UNQUOTED
        self._held_back = ""
        self._field_parts: list[str] = []
        self._line_parts: list[str] = []
        self._line_fields: list[str] = []
        self._line_warnings: list[CsvWarning] = []

        # about lines already parsed
        self._rows: list[list[str]] = []
        self._warnings: list[CsvWarning] = []

    def feed(self, chunk: str) -> None:
        """Scan a chunk of the input stream.

        A trailing piece that could still grow into a longer delimiter or
        separator is kept until the next call to `feed` or `flush`, so
        splitting the input differently never changes the output.
        """
        text = self._held_back + chunk
        self._held_back = ""

        tokens = [(match.start(), match.group()) for match in self._pattern.finditer(text)]
        cut = self._hold_back_position(text, tokens)
        for start, token in tokens:
            if start >= cut:
                break
            self._consume(token)
        self._held_back = text[cut:]

    def flush(self) -> None:
        """Signal the end of the input and commit the pending line, if any."""
        if self._held_back:
            held_back, self._held_back = self._held_back, ""
            for match in self._pattern.finditer(held_back):
                self._consume(match.group())

        if not self.has_pending_data():
            return

        if self._state is ScanState.IN_QUOTED:
            self._warn(
                WarningType.DELIMITER_NOT_TERMINATED,
                f"Expects field delimiter ({self._config.field_delimiter}) "
                "but reached end of line",
            )
        self._commit_line()
        self._state = ScanState.UNQUOTED

    def has_pending_data(self) -> bool:
        """Tell whether `flush` would change the committed output."""
        # '"' or '""' alone leaves the field and line empty, hence the state check
        return (
            self._held_back != ""
            or len(self._field_parts) != 0
            or len(self._line_fields) != 0
            or self._state in (ScanState.IN_QUOTED, ScanState.CHECK_ESCAPE)
        )

    def rows_snapshot(self) -> list[list[str]]:
        return [list(row) for row in self._rows]

    def warnings_snapshot(self) -> list[CsvWarning]:
        """Return committed warnings followed by those of the current line.

        Warnings of the line in progress are included because they explain
        why the committed rows may not yet show the expected output.
        """
        return [*self._warnings, *self._line_warnings]

    def _hold_back_position(self, text: str, tokens: list[tuple[int, str]]) -> int:
        # only tokens starting within the last literal length can be held back
        cut = len(text)
        for start, _ in reversed(tokens):
            if len(text) - start >= self._longest_literal:
                break
            tail = text[start:]
            if any(len(value) > len(tail) and value.startswith(tail) for value in self._literals):
                cut = start
        return cut

    def _classify(self, token: str) -> TokenKind:
        if token == self._config.field_delimiter:
            return TokenKind.DELIMITER
        if token in self._config.field_separators:
            return TokenKind.SEPARATOR
        if token in self._config.line_separators:
            return TokenKind.LINE_BREAK
        return TokenKind.TEXT

    def _consume(self, token: str) -> None:
        self._state, effects = next_transition(self._state, self._classify(token))
        if Effect.COMMIT_LINE not in effects:
            self._line_parts.append(token)
        for effect in effects:
            self._apply(effect, token)

    def _apply(self, effect: Effect, token: str) -> None:
        delimiter = self._config.field_delimiter
        if effect is Effect.APPEND:
            self._field_parts.append(token)
        elif effect is Effect.APPEND_AFTER_DELIMITER:
            self._field_parts.extend((delimiter, token))
        elif effect is Effect.COMMIT_FIELD:
            self._commit_field()
        elif effect is Effect.COMMIT_LINE:
            self._commit_line()
        elif effect is Effect.WARN_UNESCAPED:
            self._warn(
                WarningType.DELIMITER_NOT_ESCAPED,
                f"Expects field delimiter ({delimiter}) but got character {token[0]}",
            )
        elif effect is Effect.WARN_STRAY:
            self._warn(
                WarningType.DELIMITER_NOT_ESCAPED,
                f"Field delimiter ({delimiter}) found inside an unquoted field",
            )

    def _warn(self, warning_type: WarningType, message: str) -> None:
        self._line_warnings.append(
            CsvWarning(type=warning_type, message=message, line_pos=len(self._rows) + 1)
        )

    def _commit_field(self) -> None:
        self._line_fields.append("".join(self._field_parts))
        self._field_parts = []

    def _commit_line(self) -> None:
        self._commit_field()

        if not self._should_skip_line():
            self._rows.append(self._line_fields)
            self._warnings.extend(self._line_warnings)

        self._line_parts = []
        self._line_fields = []
        self._line_warnings = []

    def _should_skip_line(self) -> bool:
        policy = self._config.skip_empty_lines_when
        line_text = "".join(self._line_parts)
        if policy is SkipEmptyLines.WHEN_FULLY_EMPTY and line_text == "":
            return True
        if policy is SkipEmptyLines.WHEN_BLANK and line_text.strip() == "":
            return True
        if (
            policy is SkipEmptyLines.WHEN_ALL_FIELDS_BLANK
            and "".join(self._line_fields).strip() == ""
        ):
            return True
        return self._config.skip_lines_with_warnings and len(self._line_warnings) != 0


def parse_csv(
    text: str, config: ParserConfig | None = None
) -> tuple[list[list[str]], list[CsvWarning]]:
    """Tokenize a complete string in one go.

    Args:
        text: Input to tokenize.
        config: Parser options; defaults to a new `ParserConfig`.

    Returns:
        tuple[list[list[str]], list[CsvWarning]]: Committed rows and warnings.

    Raises:
        ConfigError: If the configuration is invalid.

    Examples:
        parse_csv("a,b\\nc")  # ([["a", "b"], ["c"]], [])
    """
    parser = CsvParser(config)
    parser.feed(text)
    parser.flush()
    return parser.rows_snapshot(), parser.warnings_snapshot()
