"""Canonical ordering and state-transition tables for FSM models."""

from __future__ import annotations

from .constants import TRANSITION_DESTINATION_SEPARATOR
from .models import FsmModel
from .shortcuts import normalize


def sort_fsm_model(model: FsmModel, compare_normalized: bool = True) -> FsmModel:
    """Sort a valid model in place; an invalid model is left untouched.

    Sorts the alphabet, the three lists of state ids and every list of
    destination states in ascending order. Destination lists are visited in
    the order of `states.all`.

    Args:
        model: Model built by `build_fsm_model`.
        compare_normalized: Compare entries after shortcut normalization.
            Sorting then normalizing can order entries differently from
            normalizing then sorting (``"\\\\alpha"`` sorts before ``"b"``
            while ``"α"`` sorts after it).

    Returns:
        FsmModel: The same model, for chaining.

    Examples:
        sort_fsm_model(build_fsm_model(nodes, edges, "b, a")).alphabet  # ["a", "b"]
    """
    if model.errors:
        return model

    key = normalize if compare_normalized else None

    model.alphabet.sort(key=key)
    model.states.all.sort(key=key)
    model.states.initial.sort(key=key)
    model.states.accept.sort(key=key)

    for state_id in model.states.all:
        for destinations in model.transitions.get(state_id, {}).values():
            destinations.sort(key=key)

    return model


def build_transition_table_rows(model: FsmModel) -> list[list[str]] | None:
    """Build the state-transition table of a valid model.

    The first row holds two empty cells followed by the alphabet. Each other
    row describes one state: its initial/accept markers, its id, then for
    every symbol the destination states joined with ``", "`` (empty when
    there are none).

    Args:
        model: Model built by `build_fsm_model`.

    Returns:
        list[list[str]] | None: Table rows, or None when the model is invalid.

    Examples:
        build_transition_table_rows(model)
        # [["", "", "a"], ["->", "q0", "q1"], ["*", "q1", ""]]
    """
    if model.errors:
        return None

    states = model.states
    rows = [["", "", *model.alphabet]]
    for state_id in states.all:
        row = [
            states.symbols_string(state_id in states.initial, state_id in states.accept),
            state_id,
        ]
        row.extend(
            TRANSITION_DESTINATION_SEPARATOR.join(model.destinations_of(state_id, symbol))
            for symbol in model.alphabet
        )
        rows.append(row)

    return rows


def format_transition_table(rows: list[list[str]], normalize_entries: bool = False) -> list[str]:
    """Render table rows as aligned plain-text lines.

    Args:
        rows: Rows from `build_transition_table_rows`.
        normalize_entries: Show shortcuts as the characters they stand for.

    Returns:
        list[str]: Lines of the rendered table, each ending with a newline.
    """
    if normalize_entries:
        rows = [[normalize(cell) for cell in row] for row in rows]

    widths = [max(len(row[column]) for row in rows) for column in range(len(rows[0]))]
    lines = []
    for index, row in enumerate(rows):
        cells = [cell.ljust(width) for cell, width in zip(row, widths)]
        lines.append("| " + " | ".join(cells) + " |\n")
        if index == 0:
            lines.append("|" + "|".join("-" * (width + 2) for width in widths) + "|\n")
    return lines
