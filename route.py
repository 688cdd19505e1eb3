# route.py
import json
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from graph import Graph, InvariantError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LABEL_SEPARATOR = " -- "
FEET_PER_MILE = 5280


class LabelError(ValueError):
    '''A node index has no single-letter label.'''


# ============================================================
# Formatting
# ============================================================
def alphabetize(path: List[int]) -> str:
    '''
    Map node indices to letters (0 -> A ... 25 -> Z) joined by " -- ",
    matching the hand-drawn map labels.
    '''
    labels = []
    for node in path:
        if not 0 <= node < len(ALPHABET):
            raise LabelError(f"node {node} has no letter label (only {len(ALPHABET)} nodes supported)")
        labels.append(ALPHABET[node])
    return LABEL_SEPARATOR.join(labels)

def length_feet(path: List[int], graph: Graph) -> int:
    '''
    Sum the weights of the edges walked by path.
    Parallel edges between a pair are consumed in insertion order; once
    exhausted the lightest one is reused.
    '''
    taken = defaultdict(int)
    ft = 0
    for a, b in zip(path, path[1:]):
        ids = graph.edges_between(a, b)
        if not ids:
            raise InvariantError(f"walk step {a}->{b} has no matching edge")
        key = (min(a, b), max(a, b))
        if taken[key] < len(ids):
            eid = ids[taken[key]]
        else:
            eid = graph.lightest_edge(a, b)
        taken[key] += 1
        ft += graph.edges[eid][2]
    return ft

def length_miles(path: List[int], graph: Graph) -> float:
    '''
    Walk length converted from feet to miles, truncated to two decimals.
    '''
    hundredths = length_feet(path, graph) * 100 // FEET_PER_MILE
    return hundredths / 100

# ============================================================
# Route & printing utils
# ============================================================
def edges_from_trail(trail: List) -> List[Tuple]:
    '''
    Convert trail of vertices to list of edges (u,v).
    '''
    return [(trail[i], trail[i+1]) for i in range(len(trail)-1)]

def print_route_to_console(trail: List, limit: int = 100, full: bool = False):
    '''
    Print the numeric route. If full is False and the route is longer than
    limit, print head and tail with ellipsis.
    '''
    if not trail:
        print("Route: <empty>"); return
    print(f"Route (nodes) length = {len(trail)}")
    if full or len(trail) <= limit: print(trail)
    else:
        head, tail = trail[: limit//2], trail[-(limit - limit//2):]
        print(head + ["..."] + tail)

def print_summary(meta: Dict, trail: List):
    '''
    Print solution summary to the console.
    '''
    print("\n=== Solution Summary ===")
    print(f"Matching               : {meta.get('matching')}")
    print(f"Total vertices         : {meta.get('nodes', '-')}")
    print(f"Input edges            : {meta.get('input_edges', '-')}")
    print(f"Cul-de-sacs            : {meta.get('culdesacs', '-')}")
    print(f"Odd-degree vertices (k): {meta.get('k')}")
    print(f"Matched pairs          : {meta.get('pairs', '-')}")
    print(f"Duplicated edges       : {meta.get('dup_edges', '-')}")
    print(f"Added length (ft)      : {meta.get('added_length', '-')}")
    print(f"Final trail length     : {len(trail)}")
    print(f"Total time             : {meta.get('total_time_sec')} s")
    print("========================\n")

# ============================================================
# Export
# ============================================================
def export_trail(path: Optional[str], trail: List, meta: Dict, fmt: str = "json"):
    '''
    Export trail and meta to file in JSON or CSV format.
    '''
    if not path: return
    extra_stats = {"total_nodes": len(trail), "total_steps": len(edges_from_trail(trail))}
    meta = {**meta, **extra_stats}
    if fmt == "json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"trail": trail, "meta": meta}, f, ensure_ascii=False, indent=2)
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write("node\n")
            for v in trail: f.write(f"{v}\n")
