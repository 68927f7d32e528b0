"""Construction and validation of finite-state machine models."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .constants import NESTED_ERROR_INDENT
from .models import FsmModel
from .symbols import parse_alphabet, parse_transition_input


def state_id_of(node: Any) -> str:
    """Return the state id of a node: its label without surrounding spaces."""
    return node.text.strip()


def build_fsm_model(
    nodes: Iterable[Any],
    edges: Iterable[Any],
    alphabet_text: str,
    require_initial_state: bool = True,
) -> FsmModel:
    """Build and validate a finite-state machine from graph data.

    Nodes must provide ``text``, ``is_initial`` and ``is_accept``; edges must
    provide ``text``, ``source`` and ``target``. Edges without both ends are
    not transitions and are skipped. Nodes and edges are only read: the model
    keeps references to them for lookups but never changes them.

    All problems are collected in `FsmModel.errors`, in input order, instead of
    stopping at the first one.

    Args:
        nodes: Graph nodes, one per declared state.
        edges: Graph edges labelled with comma-separated transition inputs.
        alphabet_text: Comma-separated alphabet.
        require_initial_state: Report an error when no state is initial.

    Returns:
        FsmModel: The model; valid only when its `errors` list is empty.

    Examples:
        q0 = Node("q0", is_initial=True)
        model = build_fsm_model([q0], [Edge("a", q0, q0)], "a")
        model.destinations_of("q0", "a")  # ["q0"]
    """
    model = FsmModel()
    errors = model.errors
    states = model.states

    alphabet = parse_alphabet(alphabet_text)
    if alphabet.errors:
        errors.extend(alphabet.errors)
        declared_symbols: dict[str, int] = {}
    else:
        model.alphabet = list(alphabet.symbols)
        declared_symbols = alphabet.symbol_counts

    for node in nodes:
        state_id = state_id_of(node)
        if state_id == "":
            errors.append("state id is empty")
            continue
        if state_id in model.state_nodes:
            errors.append(f"state '{state_id}' is declared more than once")
            continue

        model.state_nodes[state_id] = node
        states.all.append(state_id)
        if node.is_initial:
            states.initial.append(state_id)
        if node.is_accept:
            states.accept.append(state_id)

    if require_initial_state and not states.initial:
        errors.append("no state has been marked initial")

    for edge in edges:
        if edge.source is None or edge.target is None:
            continue

        source = state_id_of(edge.source)
        target = state_id_of(edge.target)
        text = edge.text.strip()

        inputs = parse_transition_input(text)
        if inputs.errors:
            errors.append(
                f"transition ('{source}', '{text}', '{target}') "
                "has an invalid comma-separated string"
            )
            errors.extend(NESTED_ERROR_INDENT + error for error in inputs.errors)
            continue

        for symbol in inputs.symbols:
            if symbol not in declared_symbols:
                errors.append(f"transition input '{symbol}' is not declared in alphabet")
            elif not model.add_transition(source, symbol, target, edge):
                errors.append(f"transition ('{source}', '{symbol}', '{target}') is duplicated")

    return model
