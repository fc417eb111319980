# tapegrad/core/node.py
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple


class Op(IntEnum):
    """Closed set of operations a tape node can record."""
    LEAF = 0
    ADD = 1
    SUB = 2
    MUL = 3
    DIV = 4
    POW = 5
    EXP = 6
    TANH = 7
    RELU = 8

    @property
    def arity(self) -> int:
        if self is Op.LEAF:
            return 0
        if self in (Op.ADD, Op.SUB, Op.MUL, Op.DIV):
            return 2
        return 1


# Child reference encoding used by the tape columns:
#   ref >= 0        -> tape index
#   ref == NO_CHILD -> empty slot
#   ref <= -2       -> parameter bound to the tape, slot = -2 - ref
NO_CHILD = -1


def param_ref(slot: int) -> int:
    return -2 - slot


def param_slot(ref: int) -> int:
    return -2 - ref


@dataclass
class Node:
    """
    Read-only snapshot of one tape node.

    Attributes
    ----------
    index    : int
        Creation index on the tape.
    op       : Op
        Operation that produced the node.
    data     : float
        Forward value.
    grad     : float
        Accumulated gradient at the time of the snapshot.
    children : Tuple[int, ...]
        Child references, encoded as in the tape columns (negative values
        name parameters bound to the tape).
    const    : float
        Per-node constant; the exponent for POW, 0.0 otherwise.
    """
    index: int
    op: Op
    data: float
    grad: float
    children: Tuple[int, ...]
    const: float = 0.0

    @property
    def op_tag(self) -> str:
        return self.op.name.lower()
