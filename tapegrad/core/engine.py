# tapegrad/core/engine.py
from __future__ import annotations
import logging
import numpy as np
from enum import Enum
from typing import List, Optional, Union

from .node import NO_CHILD, Op, param_slot
from .registry import ParameterRegistry
from .rules import local_partials
from .tape import Tape, current_tape
from .var import Value

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    """
    Backward traversal algorithm.

    LINEAR : sweep every tape index from the root down to 0. Sequential access,
             cost proportional to the tape prefix. Best for dense tapes.
    DFS    : depth-first post-order from the root, then apply rules in reverse.
             Cost proportional to the nodes reachable from the root. Best for
             tapes holding many nodes unrelated to the root.
    """
    LINEAR = "linear"
    DFS = "dfs"


def backward(root: Value, retain_graph: bool = False,
             strategy: Union[Strategy, str] = Strategy.LINEAR) -> int:
    """
    Run one reverse pass from `root`, accumulating gradients into every node and
    parameter the root depends on.

    Args:
        root         : live Value handle to differentiate.
        retain_graph : if False the tape is reset after the pass; if True node
                       gradients stay readable, and must be zeroed explicitly
                       (Tape.zero_grad / zero_grad_all) before another pass over
                       an overlapping graph.
        strategy     : Strategy.LINEAR or Strategy.DFS (or "linear" / "dfs").

    Returns:
        Number of tape nodes the traversal visited.

    Notes:
        - The root is seeded with d(root)/d(root) = 1.
        - Children receive: child.grad += node.grad * (d node / d child).
        - A node whose gradient is exactly 0 propagates nothing, in both
          strategies, so 0 * inf never produces a spurious NaN.
    """
    if not isinstance(root, Value):
        raise TypeError(f"backward() expects a Value, got {type(root).__name__}")
    strategy = Strategy(strategy)
    root.check()
    tape = root.tape

    tape.grad[root.index] = 1.0
    if strategy is Strategy.LINEAR:
        order = range(root.index, -1, -1)
        visited = root.index + 1
    else:
        topo = topological_order(tape, root.index)
        order = reversed(topo)
        visited = len(topo)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        _sweep(tape, order)

    logger.debug("backward[%s]: root=%d visited=%d tape=%d",
                 strategy.value, root.index, visited, len(tape))

    if not retain_graph:
        tape.reset()
    return visited


def _sweep(tape: Tape, order):
    ops, grads, data, consts = tape.op, tape.grad, tape.data, tape.const
    child0, child1 = tape.child0, tape.child1
    params = tape.bound_parameters
    leaf = Op.LEAF

    for i in order:
        op = ops[i]
        if op == leaf:
            continue
        g = grads[i]
        if g == 0.0:
            continue  # nothing to propagate
        c0 = child0[i]
        c1 = child1[i]
        x = data[c0] if c0 >= 0 else params[param_slot(c0)]._data
        y = None
        if c1 != NO_CHILD:
            y = data[c1] if c1 >= 0 else params[param_slot(c1)]._data
        d0, d1 = local_partials(op, x, y, data[i], consts[i])

        # Accumulate: child.grad += node.grad * (d node / d child)
        if c0 >= 0:
            grads[c0] += g * d0
        else:
            p = params[param_slot(c0)]
            p._grad = p._grad + g * d0
        if d1 is not None:
            if c1 >= 0:
                grads[c1] += g * d1
            else:
                p = params[param_slot(c1)]
                p._grad = p._grad + g * d1


def topological_order(tape: Tape, root_index: int) -> List[int]:
    """
    Post-order of the non-leaf tape nodes reachable from `root_index`.

    Every node appears after all of its children, so iterating the result in
    reverse visits each node after all of its consumers. Parameters and leaves
    are not listed (they carry no rule). Uses an explicit stack, so deep chains
    do not hit the recursion limit.
    """
    if tape.op[root_index] == Op.LEAF:
        return [root_index]
    visited = np.zeros(root_index + 1, dtype=bool)
    order: List[int] = []

    ops, child0, child1 = tape.op, tape.child0, tape.child1
    leaf = Op.LEAF
    stack = [(root_index, False)]
    while stack:
        i, expanded = stack.pop()
        if expanded:
            order.append(i)
            continue
        if visited[i]:
            continue  # shared sub-expression, already expanded
        visited[i] = True
        stack.append((i, True))
        for c in (child1[i], child0[i]):
            if c >= 0 and not visited[c] and ops[c] != leaf:
                stack.append((c, False))
    return order


def zero_grad_all(registry: Optional[ParameterRegistry] = None, tape: Optional[Tape] = None):
    """
    Zero parameter gradients (if a registry is given) and the gradients of every
    live node on `tape` (default: the current tape). Needed before repeating a
    backward pass with retain_graph=True.
    """
    if registry is not None:
        registry.zero_grad()
    (tape if tape is not None else current_tape()).zero_grad()
