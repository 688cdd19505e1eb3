# graph.py
from collections import defaultdict
from typing import Dict, Iterator, List, Tuple

import networkx as nx


# ============================================================
# Errors
# ============================================================
class GraphError(Exception):
    '''Base class for failures raised while building or solving a route.'''


class InvariantError(GraphError):
    '''
    A contract between two pipeline stages was broken (missing neighbor of a
    dead end, odd number of odd-degree nodes, walk step with no edge...).
    Always a bug, never bad user data.
    '''


class DisconnectedGraphError(GraphError):
    '''The edges do not form one component reachable from the start node.'''


# ============================================================
# Graph model
# ============================================================
class Graph:
    ''' Undirected weighted multigraph over dense integer nodes.

    Attributes
    ----------
    n : int
        Number of nodes, identified by 0..n-1.
    edges : List[Tuple[int, int, int]]
        Edge list (u, v, weight), parallel edges kept as separate entries.
        The position of an edge in this list is its edge id.
    adj : Dict[int, List[int]]
        node -> ids of incident edges (a self-loop is listed twice).

    Methods
    -------
    add_edge(u, v, weight) -> int
        Appends an edge and returns its id.
    degree(u) -> int
        Number of edge endpoints at u.
    neighbors(u) -> List[(target, weight)]
        One entry per incident edge, in edge id order.
    '''
    def __init__(self, n: int = 0, edges: List[Tuple[int, int, int]] = ()):
        self.n = n
        self.edges: List[Tuple[int, int, int]] = []
        self.adj: Dict[int, List[int]] = defaultdict(list)
        for u, v, w in edges:
            self.add_edge(u, v, w)

    def __repr__(self):
        return f"Graph(n={self.n}, edges={len(self.edges)})"

    def add_edge(self, u: int, v: int, weight: int) -> int:
        '''
        Adds an undirected edge and returns its id.
        The node count grows if an endpoint lies past it.
        '''
        if u < 0 or v < 0:
            raise InvariantError(f"negative node index in edge ({u}, {v})")
        if weight < 0:
            raise InvariantError(f"negative weight {weight} on edge ({u}, {v})")
        eid = len(self.edges)
        self.edges.append((u, v, weight))
        self.adj[u].append(eid)
        self.adj[v].append(eid)
        self.n = max(self.n, u + 1, v + 1)
        return eid

    def nodes(self) -> range:
        return range(self.n)

    def degree(self, u: int) -> int:
        return len(self.adj.get(u, ()))

    def other_end(self, eid: int, u: int) -> int:
        a, b, _ = self.edges[eid]
        return b if a == u else a

    def incident(self, u: int) -> Iterator[Tuple[int, int, int]]:
        '''
        Yields (edge_id, target, weight) for every edge occurrence at u.
        '''
        for eid in self.adj.get(u, ()):
            yield eid, self.other_end(eid, u), self.edges[eid][2]

    def neighbors(self, u: int) -> List[Tuple[int, int]]:
        return [(t, w) for _, t, w in self.incident(u)]

    def edges_between(self, u: int, v: int) -> List[int]:
        '''
        Ids of all parallel edges joining u and v, in insertion order.
        '''
        out = []
        for eid, t, _ in self.incident(u):
            # a self-loop shows up twice in adj[u]
            if t == v and eid not in out:
                out.append(eid)
        return out

    def lightest_edge(self, u: int, v: int) -> int:
        '''
        Id of the lowest-weight edge between u and v (first one on ties).
        '''
        ids = self.edges_between(u, v)
        if not ids:
            raise InvariantError(f"no edge between {u} and {v}")
        return min(ids, key=lambda e: self.edges[e][2])

    def total_weight(self) -> int:
        return sum(w for _, _, w in self.edges)

    def non_isolated(self) -> List[int]:
        return [u for u in self.nodes() if self.degree(u) > 0]

    def to_networkx(self) -> nx.MultiGraph:
        '''
        Export to a networkx MultiGraph (edge id stored as the key).
        '''
        G = nx.MultiGraph()
        G.add_nodes_from(self.nodes())
        for eid, (u, v, w) in enumerate(self.edges):
            G.add_edge(u, v, key=eid, weight=w)
        return G
