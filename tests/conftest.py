from collections import Counter

import pytest

from graph import Graph


SQUARE_TEXT = "1:10,3:15\n2:10\n3:10\n\n"


def edge_multiset(graph):
    return Counter((min(u, v), max(u, v)) for u, v, _ in graph.edges)


def step_multiset(trail):
    return Counter((min(a, b), max(a, b)) for a, b in zip(trail, trail[1:]))


def assert_euler_circuit(trail, graph, start=0):
    assert trail[0] == trail[-1] == start
    assert len(trail) == len(graph.edges) + 1
    assert step_multiset(trail) == edge_multiset(graph)


@pytest.fixture
def square():
    return Graph(4, [(0, 1, 10), (0, 3, 15), (1, 2, 10), (2, 3, 10)])


@pytest.fixture
def square_file(tmp_path):
    path = tmp_path / "square.txt"
    path.write_text(SQUARE_TEXT)
    return path
