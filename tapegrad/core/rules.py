# tapegrad/core/rules.py
"""
Local-derivative rules for the fixed operation set.

`local_partials` is a pure function of a node's operation and operand values;
the backward engine multiplies each partial by the node's accumulated gradient
and adds the product into the corresponding child.

    op    | forward        | d/child0         | d/child1
    ------+----------------+------------------+---------
    ADD   | x + y          | 1                | 1
    SUB   | x - y          | 1                | -1
    MUL   | x * y          | y                | x
    DIV   | x / y          | 1/y              | -x/y^2
    POW   | x^n            | n * x^(n-1)      | -   (n is the node constant)
    EXP   | e^x            | out              | -
    TANH  | tanh(x)        | 1 - out^2        | -
    RELU  | max(x, 0)      | 1 if x>0 else 0  | -
    LEAF  | x              | -                | -
"""

import numpy as np

from .node import Op

_ONE = np.float64(1.0)
_ZERO = np.float64(0.0)


def local_partials(op, x, y, out, const):
    """
    Return (d_out/d_child0, d_out/d_child1) for one node.

    Args:
        op    : Op of the node
        x     : value of child 0 (None for LEAF)
        y     : value of child 1 (None for unary ops)
        out   : the node's own forward value
        const : the node's constant (POW exponent)

    Returns:
        Tuple of partials; entries are None for absent children.
        Values follow IEEE float64 semantics (inf / nan are returned, not raised).
    """
    if op == Op.ADD:
        return _ONE, _ONE
    if op == Op.SUB:
        return _ONE, -_ONE
    if op == Op.MUL:
        return y, x
    if op == Op.DIV:
        return _ONE / y, -x / (y * y)
    if op == Op.POW:
        return const * np.power(x, const - _ONE), None
    if op == Op.EXP:
        return out, None
    if op == Op.TANH:
        return _ONE - out * out, None
    if op == Op.RELU:
        return (_ONE if x > 0 else _ZERO), None
    if op == Op.LEAF:
        return None, None
    raise ValueError(f"Unknown operation code {op!r}")
