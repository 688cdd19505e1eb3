# postman.py
import heapq
import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import networkx as nx
from tqdm import tqdm

from graph import DisconnectedGraphError, Graph, InvariantError

DEFAULT_START = 0
MATCHING_MODES = ("greedy", "blossom")


# ============================================================
# Degree utils
# ============================================================
def odd_degree_vertices(graph: Graph) -> List[int]:
    '''
    Return vertices with odd degree, in ascending order.
    '''
    return [u for u in graph.nodes() if graph.degree(u) % 2 == 1]

def check_connected(graph: Graph, start: int = DEFAULT_START):
    '''
    Raise DisconnectedGraphError unless all non-isolated vertices form one
    component and the start vertex belongs to it. Graphs without edges pass.
    '''
    active = graph.non_isolated()
    if not active:
        return
    if graph.degree(start) == 0:
        raise DisconnectedGraphError(f"start node {start} has no edges")
    G = graph.to_networkx().subgraph(active)
    if not nx.is_connected(G):
        parts = nx.number_connected_components(G)
        raise DisconnectedGraphError(f"graph has {parts} disconnected components; no circuit covers every edge")

# ============================================================
# Cul-de-sacs
# ============================================================
def fix_culdesacs(graph: Graph) -> List[int]:
    '''
    Duplicate the only edge of every degree-1 vertex, in place.

    A dead end can only be covered by walking in and back out, so its edge
    has to be traversed twice. Dead ends are collected before any edge is
    added. Must run exactly once per graph. Returns the dead ends.
    '''
    dead_ends = [u for u in graph.nodes() if graph.degree(u) == 1]
    for u in dead_ends:
        incident = list(graph.incident(u))
        if not incident:
            raise InvariantError(f"dead end {u} has no neighbor")
        _, target, weight = incident[0]
        graph.add_edge(u, target, weight)
        logging.debug(f"Cul-de-sac {u}: duplicated edge {u}-{target} ({weight})")
    logging.info(f"Cul-de-sacs fixed: {len(dead_ends)}")
    return dead_ends

# ============================================================
# Dijkstra + reconstruction
# ============================================================
def dijkstra(graph: Graph, source: int) -> Tuple[Dict, Dict]:
    '''
    Dijkstra from source over the multigraph.
    Returns parent map and distance map; unreachable vertices are absent
    from both. Equal distances are settled lowest vertex first.
    '''
    dist, parent = {source: 0}, {source: None}
    pq, visited = [(0, source)], set()
    while pq:
        d, u = heapq.heappop(pq)
        if u in visited: continue
        visited.add(u)
        for v, w in graph.neighbors(u):
            nd = d + w
            if v not in dist or nd < dist[v]:
                dist[v], parent[v] = nd, u
                heapq.heappush(pq, (nd, v))
    return parent, dist

def shortest_path_vertices(parent: Dict, s: int, t: int) -> Optional[List[int]]:
    '''
    Reconstruct shortest path from s to t using parent map.
    If no path, return None.
    '''
    if t not in parent: return None
    path, cur = [], t
    while cur is not None:
        path.append(cur); cur = parent[cur]
    path.reverse()
    return path if path and path[0] == s else None

def odd_pair_distances(graph: Graph, odds: List[int], progress: bool = False) -> Tuple[Dict, Dict]:
    '''
    Run Dijkstra from each odd vertex and keep only distances to other odd
    vertices (the complete graph over odd vertices).
    Returns parents map and distance matrix.
    '''
    odd_set = set(odds)
    parents, dist_matrix = {}, defaultdict(dict)
    for u in tqdm(odds, desc="Dijkstra (odd nodes)", disable=not progress):
        pu, du = dijkstra(graph, u)
        parents[u] = pu
        for v, d in du.items():
            if v in odd_set and v != u:
                dist_matrix[u][v] = d
    return parents, dist_matrix

# ============================================================
# Matching of odd vertices
# ============================================================
def greedy_nearest_matching(odds: List[int], dist_matrix: Dict) -> List[Tuple[int, int]]:
    '''
    Pair every odd vertex, visited in ascending order, with its nearest
    still unmatched odd vertex (lowest index on equal distance).
    Heuristic: not guaranteed to be a minimum-weight matching.
    '''
    matched, pairs = set(), []
    for u in sorted(odds):
        if u in matched: continue
        candidates = [v for v in dist_matrix.get(u, {}) if v not in matched and v != u]
        if not candidates:
            raise InvariantError(f"odd node {u} has no reachable unmatched partner")
        v = min(candidates, key=lambda x: (dist_matrix[u][x], x))
        matched.add(u); matched.add(v)
        pairs.append((u, v))
    return pairs

def blossom_matching(odds: List[int], dist_matrix: Dict) -> List[Tuple[int, int]]:
    '''
    Exact minimum-weight perfect matching on the complete odd-vertex graph
    (networkx Blossom implementation).
    '''
    G = nx.Graph()
    G.add_nodes_from(odds)
    for u in odds:
        for v, d in dist_matrix.get(u, {}).items():
            if u < v:
                G.add_edge(u, v, weight=d)
    M = nx.min_weight_matching(G, weight="weight")
    pairs = sorted((min(a, b), max(a, b)) for a, b in M)
    if 2 * len(pairs) != len(odds):
        raise InvariantError(f"no perfect matching over {len(odds)} odd nodes")
    return pairs

# ============================================================
# Duplication & eulerization
# ============================================================
def duplicate_path(graph: Graph, path: List[int]) -> int:
    '''
    Add a parallel copy of the lightest edge for each step of the path.
    Returns the number of edges added.
    '''
    for a, b in zip(path, path[1:]):
        eid = graph.lightest_edge(a, b)
        graph.add_edge(a, b, graph.edges[eid][2])
    return len(path) - 1

def eulerize(graph: Graph, matching: str = "greedy", progress: bool = False) -> Dict:
    '''
    Make every vertex degree even, in place, by duplicating the edges along
    the shortest paths between matched odd vertices.

    Parameters
    ----------
    graph : Graph
        Graph to augment (mutated).
    matching : str
        "greedy" (nearest unmatched odd vertex) or "blossom" (exact).
    progress : bool
        Show a tqdm bar over the Dijkstra runs.

    Returns
    -------
    Dict
        k, pairs, dup_edges and added_length of the augmentation.
    '''
    if matching not in MATCHING_MODES:
        raise ValueError(f"unknown matching mode {matching!r}")
    odds = odd_degree_vertices(graph)
    k = len(odds)
    logging.info(f"Odd-degree vertices: k={k}")
    meta = {"k": k, "pairs": 0, "dup_edges": 0, "added_length": 0}
    if k == 0:
        return meta
    if k % 2:
        raise InvariantError(f"odd number of odd-degree nodes ({k})")

    parents, dist_matrix = odd_pair_distances(graph, odds, progress=progress)
    if matching == "blossom":
        pairs = blossom_matching(odds, dist_matrix)
    else:
        pairs = greedy_nearest_matching(odds, dist_matrix)
    logging.info(f"Matched {len(pairs)} pairs of odd nodes ({matching})")

    for u, v in pairs:
        path = shortest_path_vertices(parents[u], u, v)
        if path is None:
            raise InvariantError(f"no shortest path between {u} and {v}")
        meta["dup_edges"] += duplicate_path(graph, path)
        meta["added_length"] += dist_matrix[u][v]
        logging.debug(f"Pair {u}-{v}: distance {dist_matrix[u][v]}, path {path}")
    meta["pairs"] = len(pairs)
    logging.info(f"Duplicated {meta['dup_edges']} edges, added length {meta['added_length']}")
    return meta

# ============================================================
# Hierholzer
# ============================================================
def hierholzer_circuit(graph: Graph, start: int = DEFAULT_START) -> List[int]:
    '''
    Euler circuit from start using Hierholzer's algorithm.

    Each vertex consumes its unused edges lowest id first, so the result is
    fixed for a given edge order. Expects a connected graph with all degrees
    even; otherwise the returned walk silently misses edges.
    '''
    if graph.n == 0:
        return []
    used = [False] * len(graph.edges)
    cursor = defaultdict(int)  # next position to look at in adj[u]
    stack, path = [start], []
    while stack:
        u = stack[-1]
        incident = graph.adj.get(u, ())
        i = cursor[u]
        while i < len(incident) and used[incident[i]]:
            i += 1
        cursor[u] = i
        if i < len(incident):
            # use edge, move to the other end
            eid = incident[i]
            used[eid] = True
            stack.append(graph.other_end(eid, u))
        else:
            # backtrack
            path.append(stack.pop())
    return list(reversed(path))

# ============================================================
# Orchestration
# ============================================================
def solve_route(graph: Graph, start: int = DEFAULT_START, matching: str = "greedy",
                progress: bool = False) -> Tuple[List[int], Dict]:
    '''
    Full pipeline on a parsed graph: connectivity check, cul-de-sacs,
    eulerization, Euler circuit. The graph is augmented in place.
    Returns the circuit and a meta dict.
    '''
    timings = {}

    t0 = time.time()
    check_connected(graph, start)
    timings["connectivity_sec"] = round(time.time() - t0, 3)

    input_edges = len(graph.edges)
    dead_ends = fix_culdesacs(graph)

    t1 = time.time()
    meta = eulerize(graph, matching=matching, progress=progress)
    timings["eulerize_sec"] = round(time.time() - t1, 3)

    odds = odd_degree_vertices(graph)
    if odds:
        raise InvariantError(f"vertices still odd after eulerization: {odds}")

    t2 = time.time()
    trail = hierholzer_circuit(graph, start)
    timings["hierholzer_sec"] = round(time.time() - t2, 3)
    if graph.edges and len(trail) != len(graph.edges) + 1:
        raise InvariantError(f"circuit uses {len(trail) - 1} of {len(graph.edges)} edges")

    meta.update({
        "matching": matching,
        "input_edges": input_edges,
        "culdesacs": len(dead_ends),
        "total_edges": len(graph.edges),
        "total_feet": graph.total_weight(),
        "timings_sec": timings,
    })
    return trail, meta
