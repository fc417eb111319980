# tapegrad/core/var.py
from __future__ import annotations
from typing import TYPE_CHECKING, Tuple

from .errors import StaleHandleError
from .node import Op

if TYPE_CHECKING:
    from .tape import Tape


class Value:
    """
    Handle to a node on a Tape.

    Attributes
    ----------
    tape : Tape
        The arena the node lives on.
    index : int
        Creation index of the node.
    generation : int
        Tape generation at allocation time. A reset bumps the tape's generation,
        after which every dereference of this handle raises StaleHandleError.

    Arithmetic operators (+, -, *, /, **, unary -) are bound by
    `tapegrad.ops.arithmetic` and record new nodes on the same tape.
    """

    __slots__ = ("tape", "index", "generation")
    __array_ufunc__ = None  # numpy scalars defer to our reflected operators

    def __init__(self, tape: "Tape", index: int, generation: int):
        self.tape = tape
        self.index = index
        self.generation = generation

    def check(self):
        """Raise StaleHandleError unless the handle is still live."""
        if self.generation != self.tape.generation:
            raise StaleHandleError(self.index, self.generation, self.tape.generation)

    @property
    def is_live(self) -> bool:
        return self.generation == self.tape.generation

    @property
    def data(self) -> float:
        self.check()
        return float(self.tape.data[self.index])

    @property
    def grad(self) -> float:
        self.check()
        return float(self.tape.grad[self.index])

    @property
    def op(self) -> Op:
        self.check()
        return Op(int(self.tape.op[self.index]))

    @property
    def children(self) -> Tuple:
        """Operands of this node as Value / Parameter objects."""
        self.check()
        return self.tape.children_of(self.index)

    def __float__(self):
        return self.data

    def __repr__(self):
        if not self.is_live:
            return f"Value(<stale>, index={self.index}, generation={self.generation})"
        return (f"Value({self.data!r}, grad={self.grad!r}, "
                f"op={self.op.name}, index={self.index})")
