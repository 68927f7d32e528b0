import pytest
from click.testing import CliRunner

from fsm_csv.models import Edge, Node


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def two_state_graph() -> tuple[list[Node], list[Edge]]:
    """Initial s0 and accept s1 joined by an edge labelled 'a'."""
    s0 = Node("s0", is_initial=True)
    s1 = Node("s1", is_accept=True)
    return [s0, s1], [Edge("a", s0, s1)]
