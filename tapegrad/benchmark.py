"""
Controlled benchmarks for the two backward strategies.

Two scenarios, both built on a dedicated tape:

1. Disjoint graph: `noise` mul nodes that the loss never uses, followed by a
   chain of `signal` add nodes that forms the loss. DFS skips the noise.
2. Dense chain: a chain of `length` add nodes, all of them on the loss path.
   LINEAR walks it sequentially without building a visit order.

Each strategy is timed over repeated `retain_graph=True` passes, zeroing the
tape gradients before every pass.
"""

import time
import numpy as np
from typing import Dict, Tuple

from .core.engine import Strategy, backward
from .core.tape import Tape
from .core.var import Value
from .ops import add, mul


def build_disjoint_graph(tape: Tape, noise: int = 10000, signal: int = 500) -> Value:
    """Record `noise` unused mul nodes, then an add chain of length `signal`; return its head."""
    for i in range(noise):
        a = tape.create_leaf(float(i))
        b = tape.create_leaf(float(i))
        mul(a, b)
    head = tape.create_leaf(1.0)
    for _ in range(signal):
        head = add(head, tape.create_leaf(0.5))
    return head


def build_dense_chain(tape: Tape, length: int = 5000) -> Value:
    """Record an add chain of `length` nodes; every node is on the loss path."""
    head = tape.create_leaf(1.0)
    for _ in range(length):
        head = add(head, tape.create_leaf(0.5))
    return head


def time_strategy(root: Value, strategy, repeats: int = 100) -> Tuple[float, int]:
    """
    Run `repeats` backward passes with retained graph.

    Returns:
        (elapsed seconds, nodes visited per pass)
    """
    tape = root.tape
    visited = 0
    t0 = time.perf_counter()
    for _ in range(repeats):
        tape.zero_grad()
        visited = backward(root, retain_graph=True, strategy=strategy)
    return time.perf_counter() - t0, visited


def compare_strategies(root: Value, repeats: int = 100) -> Dict:
    """
    Time both strategies on the same retained graph and check that they leave
    identical gradients on every node.

    Returns:
        dict with per-strategy 'time' and 'visited', 'winner', 'speedup'
        and 'grads_match'
    """
    tape = root.tape
    results = {}
    grads = {}
    for strategy in (Strategy.LINEAR, Strategy.DFS):
        elapsed, visited = time_strategy(root, strategy, repeats)
        results[strategy.value] = {'time': elapsed, 'visited': visited}
        grads[strategy.value] = tape.grad[:len(tape)].copy()
    tape.zero_grad()

    t_lin = results['linear']['time']
    t_dfs = results['dfs']['time']
    winner = 'dfs' if t_dfs < t_lin else 'linear'
    fast, slow = sorted((t_lin, t_dfs))
    results['winner'] = winner
    results['speedup'] = slow / fast if fast > 0 else float('inf')
    results['grads_match'] = bool(np.allclose(grads['linear'], grads['dfs'], equal_nan=True))
    return results
