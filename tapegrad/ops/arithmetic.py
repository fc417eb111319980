# tapegrad/ops/arithmetic.py
import numpy as np
from ..core.node import NO_CHILD, Op
from ..core.registry import Parameter
from ..core.var import Value
from ..core import tape as tape_mod  # Use module access for use_tape() compatibility


def _tape_for(*operands):
    """Tape of the first Value operand; the current default tape otherwise."""
    for x in operands:
        if isinstance(x, Value):
            return x.tape
    return tape_mod.global_tape


def _ref(tape, x):
    """Child reference for x; plain numbers are recorded as constant leaves."""
    if isinstance(x, (Value, Parameter)):
        return tape.ref(x)
    return tape.allocate_leaf(x).index


def _binary(x, y, f, op):
    """
    Generic binary primitive:
      - resolves both operands on a common tape (numbers become leaves)
      - computes out = f(x, y) in float64
      - records a node whose children are (x, y)
    """
    tape = _tape_for(x, y)
    rx = _ref(tape, x)
    ry = _ref(tape, y)
    out = f(tape.value_of(rx), tape.value_of(ry))
    return tape.push_ref(out, op, rx, ry)


def _unary(x, f, op, const=0.0):
    tape = _tape_for(x)
    rx = _ref(tape, x)
    out = f(tape.value_of(rx))
    return tape.push_ref(out, op, rx, NO_CHILD, const)


def _ieee_div(a, b):
    # x/0 -> +-inf, 0/0 -> nan
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.divide(a, b)


def add(x, y): return _binary(x, y, lambda a, b: a + b, Op.ADD)
def sub(x, y): return _binary(x, y, lambda a, b: a - b, Op.SUB)
def mul(x, y): return _binary(x, y, lambda a, b: a * b, Op.MUL)
def div(x, y): return _binary(x, y, _ieee_div, Op.DIV)


def neg(x):
    """Unary negation, recorded as x * (-1)."""
    return mul(x, -1.0)


def pow(x, n):
    """
    Power with a constant exponent:
      out = x ** n

    The exponent is stored in the node's constant slot, not as a graph node, so
    it never receives a gradient. Negative bases with fractional exponents
    give nan, following float64 semantics.
    """
    if isinstance(n, (bool, np.bool_, Value, Parameter)) or \
            not isinstance(n, (int, float, np.integer, np.floating)):
        raise TypeError(f"pow() exponent must be a real number, got {type(n).__name__}")
    n = np.float64(n)

    def f(a):
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return np.power(a, n)

    return _unary(x, f, Op.POW, const=n)


# Bind Python operators to Value and Parameter
for _cls in (Value, Parameter):
    _cls.__add__ = lambda self, other: add(self, other)
    _cls.__radd__ = lambda self, other: add(other, self)
    _cls.__sub__ = lambda self, other: sub(self, other)
    _cls.__rsub__ = lambda self, other: sub(other, self)
    _cls.__mul__ = lambda self, other: mul(self, other)
    _cls.__rmul__ = lambda self, other: mul(other, self)
    _cls.__truediv__ = lambda self, other: div(self, other)
    _cls.__rtruediv__ = lambda self, other: div(other, self)
    _cls.__neg__ = lambda self: neg(self)
    _cls.__pow__ = lambda self, other: pow(self, other)
del _cls
