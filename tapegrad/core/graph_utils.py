"""
Graph inspection utilities.

Statistics about what is recorded on a tape, and how much of it a given root
actually depends on. The reachable fraction decides which backward strategy is
cheaper: LINEAR touches the whole tape prefix, DFS only the reachable part.
"""

import numpy as np
from collections import Counter

from .engine import Strategy, topological_order
from .node import NO_CHILD, Op
from .tape import Tape
from .var import Value


def get_graph_stats(tape: Tape) -> dict:
    """
    Statistics of the live nodes on `tape`.

    Keys: nodes, leaves, edges, parameters, max/avg fan-in, max/avg fan-out
    (tape children only), fill (share of capacity in use) and ops, a
    histogram of lower-case op names.
    """
    n = len(tape)
    c0 = tape.child0[:n]
    c1 = tape.child1[:n]
    codes = tape.op[:n]

    fan_in = (c0 != NO_CHILD).astype(np.int64) + (c1 != NO_CHILD).astype(np.int64)
    used = np.concatenate([c0[c0 >= 0], c1[c1 >= 0]])
    fan_out = np.bincount(used, minlength=n)

    stats = dict(
        nodes=n,
        leaves=int(np.count_nonzero(codes == Op.LEAF)),
        edges=int(fan_in.sum()),
        parameters=len(tape.bound_parameters),
        max_fan_in=int(fan_in.max()) if n else 0,
        avg_fan_in=float(fan_in.mean()) if n else 0.0,
        max_fan_out=int(fan_out.max()) if n else 0,
        avg_fan_out=float(fan_out.mean()) if n else 0.0,
        fill=n / tape.capacity,
        ops=dict(Counter(Op(int(c)).name.lower() for c in codes)),
    )
    return stats


def reachable_count(root: Value) -> int:
    """Number of non-leaf tape nodes the root depends on (including itself)."""
    root.check()
    return len(topological_order(root.tape, root.index))


def reachable_fraction(root: Value) -> float:
    """Share of the non-leaf nodes up to the root that the root depends on."""
    root.check()
    tape = root.tape
    if tape.op[root.index] == Op.LEAF:
        return 1.0
    prefix = int(np.count_nonzero(tape.op[:root.index + 1] != Op.LEAF))
    return reachable_count(root) / prefix


def recommend_strategy(root: Value, threshold: float = 0.5) -> Strategy:
    """
    DFS when less than `threshold` of the tape prefix is reachable from the root,
    LINEAR otherwise.
    """
    return Strategy.DFS if reachable_fraction(root) < threshold else Strategy.LINEAR


def analyze_graph_complexity(tape: Tape) -> str:
    """Human-readable summary of `get_graph_stats` for benchmark output."""
    s = get_graph_stats(tape)
    if not s['nodes']:
        return "Empty computation graph"

    interior = s['nodes'] - s['leaves']
    lines = [
        "Graph Complexity Analysis:",
        f"  Total nodes: {s['nodes']:,} ({s['leaves']:,} leaves, {interior:,} ops)",
        f"  Tape fill: {100.0 * s['fill']:.1f}% of {tape.capacity:,}",
        f"  Edges: {s['edges']:,}, bound parameters: {s['parameters']:,}",
        f"  Fan-out: max {s['max_fan_out']}, mean {s['avg_fan_out']:.2f}",
    ]
    size = "Low" if s['nodes'] < 1_000 else "Medium" if s['nodes'] < 10_000 else "High"
    lines.append(f"  Complexity level: {size}")
    mix = ", ".join(f"{name} {count}" for name, count in Counter(s['ops']).most_common())
    lines.append(f"  Op mix: {mix}")
    return "\n".join(lines)
