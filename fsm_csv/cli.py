"""
Command line interface for fsm-csv.

`tokenize` splits delimited text into rows; `check` validates a finite-state
machine described with options and prints its state-transition table.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import click
from .builder import build_fsm_model, state_id_of
from .config import ConfigError, build_config
from .models import Edge, Node, SkipEmptyLines
from .table import build_transition_table_rows, format_transition_table, sort_fsm_model
from .tokenizer import CsvParser

__all__ = ["cli"]

DEFAULT_CHUNK_SIZE = 64 * 1024

_ESCAPES = {"\\n": "\n", "\\r": "\r", "\\t": "\t", "\\\\": "\\"}


def _unescape(value: str) -> str:
    result = []
    index = 0
    while index < len(value):
        pair = value[index : index + 2]
        if pair in _ESCAPES:
            result.append(_ESCAPES[pair])
            index += 2
        else:
            result.append(value[index])
            index += 1
    return "".join(result)


def _unescape_option(ctx: click.Context, param: click.Parameter, value):
    if value is None:
        return None
    if isinstance(value, tuple):
        return tuple(_unescape(item) for item in value) or None
    return _unescape(value)


def _open_source(source: str) -> io.TextIOBase:
    # newline="" keeps CR and CRLF intact for the tokenizer
    if source == "-":
        return io.TextIOWrapper(click.get_binary_stream("stdin"), encoding="utf-8", newline="")
    return open(source, encoding="utf-8", newline="")


def _declared_ids(state_ids: tuple[str, ...], declared_ids: set[str], param_hint: str) -> set[str]:
    result = set()
    for state_id in state_ids:
        state_id = state_id.strip()
        if state_id not in declared_ids:
            raise click.BadParameter(
                f"state '{state_id}' is not declared with --state", param_hint=param_hint
            )
        result.add(state_id)
    return result


@click.group()
@click.version_option()
def cli():
    """Tokenize comma-separated text and validate finite-state machines."""


@cli.command()
@click.option("--delimiter", "field_delimiter", callback=_unescape_option, help="Field delimiter")
@click.option(
    "--separator",
    "field_separators",
    multiple=True,
    callback=_unescape_option,
    help="Field separator (repeatable)",
)
@click.option(
    "--line-separator",
    "line_separators",
    multiple=True,
    callback=_unescape_option,
    help="Line separator (repeatable); \\n, \\r and \\t are unescaped",
)
@click.option(
    "--skip-empty-lines",
    "skip_empty_lines_when",
    type=click.Choice([policy.value for policy in SkipEmptyLines]),
    help="When to drop empty lines",
)
@click.option("--skip-lines-with-warnings", is_flag=True, help="Drop lines that raised warnings")
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=DEFAULT_CHUNK_SIZE,
    show_default=True,
    help="Characters read per chunk",
)
@click.argument("source", type=click.Path(dir_okay=False, allow_dash=True), default="-")
def tokenize(
    source: str,
    field_delimiter: str | None = None,
    field_separators: tuple[str, ...] | None = None,
    line_separators: tuple[str, ...] | None = None,
    skip_empty_lines_when: str | None = None,
    skip_lines_with_warnings: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
):
    """
    Split SOURCE (standard input by default) into rows of fields.

    Each row is printed as a JSON array; warnings go to standard error.

    Raises:
        click.BadParameter: If the tokenizer options are invalid.
        click.ClickException: If SOURCE cannot be read or decoded.

    Examples:
        printf 'a,"b,c"\\n' | fsm-csv tokenize --separator ';'
    """
    try:
        config = build_config(
            Path.cwd(),
            field_delimiter=field_delimiter,
            field_separators=field_separators,
            line_separators=line_separators,
            skip_empty_lines_when=skip_empty_lines_when,
            skip_lines_with_warnings=True if skip_lines_with_warnings else None,
        )
        parser = CsvParser(config.tokenizer)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        with _open_source(source) as stream:
            for chunk in iter(lambda: stream.read(chunk_size), ""):
                parser.feed(chunk)
    except UnicodeDecodeError as error:
        raise click.ClickException(f"Invalid UTF-8 sequence in {source}: {error}") from error
    except OSError as error:
        raise click.ClickException(str(error)) from error
    parser.flush()

    for warning in parser.warnings_snapshot():
        click.echo(f"line {warning.line_pos}: {warning.message}", err=True)
    for row in parser.rows_snapshot():
        click.echo(json.dumps(row, ensure_ascii=False))


@cli.command()
@click.option("--alphabet", default="", help="Comma-separated alphabet")
@click.option("--state", "states", multiple=True, help="State id (repeatable)")
@click.option("--initial", "initial_states", multiple=True, help="Initial state id (repeatable)")
@click.option("--accept", "accept_states", multiple=True, help="Accept state id (repeatable)")
@click.option(
    "--transition",
    "transitions",
    multiple=True,
    type=(str, str, str),
    metavar="FROM INPUTS TO",
    help="Transition with comma-separated inputs (repeatable)",
)
@click.option("--allow-no-initial", is_flag=True, help="Accept machines without initial state")
@click.option("--no-sort", is_flag=True, help="Keep declaration order in the table")
@click.option("--raw-order", is_flag=True, help="Sort shortcuts as typed, not as characters")
@click.option("--normalize", "normalize_output", is_flag=True, help="Print shortcuts as characters")
def check(
    alphabet: str = "",
    states: tuple[str, ...] = (),
    initial_states: tuple[str, ...] = (),
    accept_states: tuple[str, ...] = (),
    transitions: tuple[tuple[str, str, str], ...] = (),
    allow_no_initial: bool = False,
    no_sort: bool = False,
    raw_order: bool = False,
    normalize_output: bool = False,
):
    """
    Validate a finite-state machine and print its state-transition table.

    Raises:
        click.BadParameter: If a transition refers to an undeclared state or
            the configuration is invalid.
        click.ClickException: If the machine is invalid; every error is listed.

    Examples:
        fsm-csv check --alphabet "a, b" --state q0 --state q1 --initial q0 \\
            --accept q1 --transition q0 "a, b" q1
    """
    try:
        config = build_config(
            Path.cwd(),
            require_initial_state=False if allow_no_initial else None,
            sort_model=False if no_sort else None,
            compare_normalized=False if raw_order else None,
            normalize_output=True if normalize_output else None,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    declared_ids = {text.strip() for text in states}
    initial_ids = _declared_ids(initial_states, declared_ids, "'--initial'")
    accept_ids = _declared_ids(accept_states, declared_ids, "'--accept'")
    nodes = [
        Node(text, is_initial=text.strip() in initial_ids, is_accept=text.strip() in accept_ids)
        for text in states
    ]

    nodes_by_id: dict[str, Node] = {}
    for node in nodes:
        nodes_by_id.setdefault(state_id_of(node), node)

    edges = []
    for source, text, target in transitions:
        endpoints = []
        for state_id in (source, target):
            node = nodes_by_id.get(state_id.strip())
            if node is None:
                raise click.BadParameter(
                    f"state '{state_id.strip()}' is not declared with --state",
                    param_hint="'--transition'",
                )
            endpoints.append(node)
        edges.append(Edge(text, *endpoints))

    model = build_fsm_model(
        nodes, edges, alphabet, require_initial_state=config.require_initial_state
    )
    if config.sort_model:
        sort_fsm_model(model, compare_normalized=config.compare_normalized)

    rows = build_transition_table_rows(model)
    if rows is None:
        bullets = "\n".join(f"- {error}" for error in model.errors)
        raise click.ClickException(f"Finite state machine is invalid:\n{bullets}")

    click.echo("".join(format_transition_table(rows, config.normalize_output)), nl=False)


if __name__ == "__main__":
    cli()
