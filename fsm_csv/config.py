"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib

from .constants import (
    DEFAULT_FIELD_DELIMITER,
    DEFAULT_FIELD_SEPARATORS,
    DEFAULT_LINE_SEPARATORS,
)
from .exceptions import ConfigError, OverlappingDelimitersError
from .models import SkipEmptyLines

__all__ = [
    "ConfigError",
    "FsmCsvConfig",
    "ParserConfig",
    "apply_overrides",
    "build_config",
    "load_config",
    "normalize_config",
    "normalize_parser_config",
    "validate_config",
    "validate_parser_config",
]


@dataclass(frozen=True)
class ParserConfig:
    """Options of a `CsvParser`.

    Attributes:
        field_delimiter: String enclosing fields that contain separators.
        field_separators: Strings separating fields on a line.
        line_separators: Strings separating lines.
        smart_regex: Request the faster matching pattern; only honoured when
            every delimiter and separator is a single character and every line
            separator is CR, LF or CRLF.
        skip_empty_lines_when: Policy for dropping empty lines.
        skip_lines_with_warnings: Drop lines that raised warnings.

    Examples:
        ParserConfig(field_separators=(";",), line_separators=("\\r\\n",))
    """

    field_delimiter: str = DEFAULT_FIELD_DELIMITER
    field_separators: tuple[str, ...] = DEFAULT_FIELD_SEPARATORS
    line_separators: tuple[str, ...] = DEFAULT_LINE_SEPARATORS
    smart_regex: bool = True
    skip_empty_lines_when: SkipEmptyLines = SkipEmptyLines.NEVER
    skip_lines_with_warnings: bool = False


@dataclass(frozen=True)
class FsmCsvConfig:
    """Configuration of the fsm-csv command line tool.

    Attributes:
        require_initial_state: Treat a machine without initial state as invalid.
        sort_model: Sort a valid model before printing its table.
        compare_normalized: Compare shortcuts after normalization when sorting.
        normalize_output: Print shortcuts as the characters they stand for.
        tokenizer: Options for the `tokenize` command.
    """

    require_initial_state: bool = True
    sort_model: bool = True
    compare_normalized: bool = True
    normalize_output: bool = False
    tokenizer: ParserConfig = field(default_factory=ParserConfig)


# Files checked in each directory, in order, with the tables read from them
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "fsm-csv"),)),
    (".fsm-csv.toml", (("fsm-csv",), ("tool", "fsm-csv"))),
)


def load_config(search_path: Path) -> FsmCsvConfig:
    """Find the fsm-csv settings that apply to `search_path`.

    The directory and then each of its parents is checked for the files in
    `CONFIG_SOURCES`. The first file holding an fsm-csv table wins, so a
    project's `pyproject.toml` shadows a `.fsm-csv.toml` higher up. Files that
    are not valid TOML are ignored.

    Args:
        search_path: Directory where the lookup starts, usually the working
            directory of the command.

    Returns:
        FsmCsvConfig: Normalized settings; defaults when no file defines them.

    Raises:
        ConfigError: If an fsm-csv table is not a table, has unknown keys or
            has a `tokenizer` entry that is not a table.

    Examples:
        load_config(Path("machines")).tokenizer.field_separators  # (",",)
    """
    directory = search_path.resolve()

    for candidate in (directory, *directory.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config = _load_from_file(candidate / filename, table_paths)
            if config is not None:
                return normalize_config(config)

    return FsmCsvConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: tuple[tuple[str, ...], ...]
) -> FsmCsvConfig | None:
    """Read the first of `table_paths` present in `config_file`, if any."""
    if not config_file.is_file():
        return None

    try:
        data = tomllib.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is not _MISSING:
            return _build_config_from_raw(raw_config, config_file, table_path)
    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    for key in table_path:
        if not isinstance(data, dict) or key not in data:
            return _MISSING
        data = data[key]
    return data


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> FsmCsvConfig:
    table_display = ".".join(table_path)

    if raw_config is None or raw_config == {}:
        return FsmCsvConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    raw_config = dict(raw_config)
    raw_tokenizer = raw_config.pop("tokenizer", {})
    if not isinstance(raw_tokenizer, dict):
        raise ConfigError(f"Invalid `[{table_display}.tokenizer]` settings in {config_file}")

    try:
        return FsmCsvConfig(tokenizer=ParserConfig(**raw_tokenizer), **raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def normalize_parser_config(config: ParserConfig) -> ParserConfig:
    """Coerce TOML and CLI friendly values into their canonical types.

    Lists become tuples, a bare string becomes a one-element tuple, and policy
    names become `SkipEmptyLines` members.

    Raises:
        ConfigError: If the empty-line policy name is unknown.
    """
    policy = config.skip_empty_lines_when
    if not isinstance(policy, SkipEmptyLines):
        try:
            policy = SkipEmptyLines(policy)
        except ValueError as error:
            choices = ", ".join(member.value for member in SkipEmptyLines)
            raise ConfigError(f"`skip_empty_lines_when` must be one of: {choices}") from error

    return replace(
        config,
        field_separators=_as_tuple(config.field_separators),
        line_separators=_as_tuple(config.line_separators),
        skip_empty_lines_when=policy,
    )


def normalize_config(config: FsmCsvConfig) -> FsmCsvConfig:
    return replace(config, tokenizer=normalize_parser_config(config.tokenizer))


def _as_tuple(value: object) -> object:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(value)
    return value


def validate_parser_config(config: ParserConfig) -> None:
    """Validate a `ParserConfig` instance.

    The delimiter, the field separators and the line separators must be
    non-empty strings, free of duplicates, and no value may appear in more
    than one of the three groups.

    Raises:
        ConfigError: If any of the rules above is broken or a flag is not a
            boolean.

    Examples:
        validate_parser_config(ParserConfig(field_separators=(";", ",")))
    """
    config = normalize_parser_config(config)

    if not isinstance(config.field_delimiter, str):
        raise ConfigError("`field_delimiter` must be a string")

    groups = {
        "field_delimiter": (config.field_delimiter,),
        "field_separators": config.field_separators,
        "line_separators": config.line_separators,
    }
    for name, values in groups.items():
        if not isinstance(values, tuple) or not values:
            raise ConfigError(f"`{name}` must be a non-empty list of strings")
        if not all(isinstance(value, str) and value for value in values):
            raise ConfigError(f"`{name}` must only contain non-empty strings")
        if len(set(values)) != len(values):
            raise ConfigError(f"`{name}` must not contain duplicates")

    seen: set[str] = set()
    for values in groups.values():
        for value in values:
            if value in seen:
                raise OverlappingDelimitersError(value)
        seen.update(values)

    _ensure_booleans(
        {
            "smart_regex": config.smart_regex,
            "skip_lines_with_warnings": config.skip_lines_with_warnings,
        }
    )


def validate_config(config: FsmCsvConfig) -> None:
    """Validate a `FsmCsvConfig` instance, tokenizer options included.

    Raises:
        ConfigError: If a flag is not a boolean or the tokenizer options are
            invalid.
    """
    _ensure_booleans(
        {
            "require_initial_state": config.require_initial_state,
            "sort_model": config.sort_model,
            "compare_normalized": config.compare_normalized,
            "normalize_output": config.normalize_output,
        }
    )
    if not isinstance(config.tokenizer, ParserConfig):
        raise ConfigError("`tokenizer` must be a table")
    validate_parser_config(config.tokenizer)


def apply_overrides(config: FsmCsvConfig, **overrides: object) -> FsmCsvConfig:
    """Apply override values to a `FsmCsvConfig`.

    Overrides named after a `ParserConfig` field update the nested tokenizer
    options; the others update the top-level configuration.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by field name; values set to None are
            ignored.

    Returns:
        FsmCsvConfig: Updated configuration, or `config` itself when there is
        nothing to change.

    Raises:
        TypeError: If an override name is not a known field.

    Examples:
        updated = apply_overrides(config, field_delimiter="'", sort_model=False)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config

    parser_fields = {item.name for item in fields(ParserConfig)}
    parser_changes = {key: changes.pop(key) for key in list(changes) if key in parser_fields}
    if parser_changes:
        changes["tokenizer"] = replace(config.tokenizer, **parser_changes)
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> FsmCsvConfig:
    """Load, override, and validate configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), field_delimiter="'")
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_booleans(values: dict[str, object]) -> None:
    for key, value in values.items():
        if not isinstance(value, bool):
            raise ConfigError(f"`{key}` must be a boolean")
