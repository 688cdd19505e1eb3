# main.py
from reader import parse_file
from graph import GraphError
from postman import DEFAULT_START, MATCHING_MODES, solve_route
from route import (LABEL_SEPARATOR, LabelError, alphabetize, export_trail, length_miles,
                   print_route_to_console, print_summary)

import argparse
import logging
import sys
import time
from typing import Dict, List, Optional, Tuple

# ============================================================
# Default params
# ============================================================
DEFAULT_MATCHING = "greedy"  # nearest unmatched odd node
DEFAULT_PRINT_LIMIT = 100
PROMPT = "File Path >"

# ============================================================
# CLI & Logging
# ============================================================
def build_argparser():
    p = argparse.ArgumentParser(description="Route inspection (Chinese Postman) solver for trail networks")
    p.add_argument("-i", "--input", help="Path to the graph file (prompted for when omitted)")

    # Algorithm parameters
    p.add_argument("--start", type=int, default=DEFAULT_START, help="Start and end node of the circuit")
    p.add_argument("--matching", choices=MATCHING_MODES, default=DEFAULT_MATCHING)
    # greedy = pair each odd node with its nearest unmatched odd node
    # blossom = exact minimum-weight perfect matching (networkx)

    # Export & logs
    p.add_argument("--export", help="Output path for the route (JSON/CSV)")
    p.add_argument("--export-format", choices=["json", "csv"], default="json")
    p.add_argument("-v", "--verbose", action="count", default=1)
    # verbosity: 0=warning, 1=info, 2=debug
    p.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    # Print route options
    p.add_argument("--print-route", action="store_true", help="Print the numeric node sequence")
    p.add_argument("--print-limit", type=int, default=DEFAULT_PRINT_LIMIT)
    p.add_argument("--summary", action="store_true", help="Print a summary of the computed route")

    return p


def configure_logging(verbosity: int, quiet: bool = False):
    """Set the root logger level: 0 = warning, 1 = info, 2+ = debug.
    quiet forces warning whatever the -v count.
    """
    if quiet:
        verbosity = 0
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def prompt_file_path() -> str:
    print(PROMPT)
    return input().strip()

# ============================================================
# Pipeline
# ============================================================
def run(file_path: str, start: int = DEFAULT_START, matching: str = DEFAULT_MATCHING,
        progress: bool = False) -> Tuple[List[int], Optional[str], float, Dict]:
    '''
    Parse, augment and solve the graph stored at file_path.

    Returns the circuit, its letter labels (None when the graph has too
    many nodes to label), its length in miles and the solver meta.
    '''
    t0 = time.time()
    graph = parse_file(file_path)
    trail, meta = solve_route(graph, start=start, matching=matching, progress=progress)
    miles = length_miles(trail, graph)
    try:
        labels = alphabetize(trail)
    except LabelError as e:
        logging.warning(f"Alphabetic labels unavailable: {e}")
        labels = None
    meta["miles"] = miles
    meta["total_time_sec"] = round(time.time() - t0, 3)
    meta["nodes"] = graph.n
    return trail, labels, miles, meta

# ============================================================
# Main
# ============================================================
def main(argv=None) -> int:
    args = build_argparser().parse_args(argv)
    if args.quiet: args.verbose = 0
    configure_logging(args.verbose, quiet=args.quiet)

    try:
        file_path = args.input if args.input else prompt_file_path()
        trail, labels, miles, meta = run(file_path, start=args.start, matching=args.matching,
                                         progress=args.verbose >= 1)
    except (GraphError, ValueError, OSError, EOFError) as e:
        print(f"Problem: {e}", file=sys.stderr)
        return 1

    print(labels if labels is not None else LABEL_SEPARATOR.join(str(v) for v in trail))
    print(f"{miles:.2f} miles")

    if args.summary:
        print_summary(meta, trail)
    if args.print_route:
        print_route_to_console(trail, limit=args.print_limit)
    if args.export:
        export_trail(args.export, trail, meta, fmt=args.export_format)
    return 0


if __name__=="__main__":
    sys.exit(main())
