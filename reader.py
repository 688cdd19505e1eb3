# reader.py
import logging
from typing import List, Tuple

from graph import Graph


class FormatError(ValueError):
    '''A node or weight token in the input is not a non-negative integer.'''


def _parse_int(token: str, lineno: int, what: str) -> int:
    try:
        value = int(token)
    except ValueError:
        raise FormatError(f"line {lineno + 1}: invalid {what} {token.strip()!r}") from None
    if value < 0:
        raise FormatError(f"line {lineno + 1}: negative {what} {value}")
    return value


def parse_edges(text: str) -> Tuple[int, List[Tuple[int, int, int]]]:
    '''
    Parse the adjacency text into (line_count, edges).

    Line i lists the neighbors of node i as comma separated
    "neighbor:weight" tokens. Tokens without ":" are skipped.
    Every token becomes one edge, duplicates included.
    '''
    edges = []
    # only "\n" and "\r\n" end a node line
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    for lineno, line in enumerate(lines):
        for token in line.split(","):
            fields = token.split(":")
            if len(fields) == 1:
                continue
            v = _parse_int(fields[0], lineno, "node index")
            w = _parse_int(fields[1], lineno, "weight")
            edges.append((lineno, v, w))
    return len(lines), edges


def parse_text(text: str) -> Graph:
    '''
    Build a Graph from adjacency text. The node count covers both the
    number of lines and every referenced endpoint.
    '''
    n, edges = parse_edges(text)
    graph = Graph(n, edges)
    logging.info(f"Parsed graph: {graph.n} nodes, {len(graph.edges)} edges")
    return graph


def parse_file(path: str) -> Graph:
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    return parse_text(text)
