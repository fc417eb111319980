# tapegrad/core/tape.py
from __future__ import annotations
import logging
import numpy as np
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from ..config import TapeConfig
from .errors import CapacityExceededError, ReleasedParameterError
from .node import NO_CHILD, Node, Op, param_ref, param_slot
from .registry import Parameter
from .var import Value

logger = logging.getLogger(__name__)


class Tape:
    """
    Append-only arena of scalar nodes, stored column-wise in numpy arrays.

    Columns (valid for indices < len(tape)):
        data, grad, const : float64
        op                : int8 (an Op value)
        child0, child1    : int64 child references (see node.NO_CHILD)

    A node's children always have smaller indices than the node itself, so
    creation order is a valid reverse-topological order for backward passes.
    Parameters are never stored on the tape: the first time a Parameter is used
    as an operand in the current generation it is bound to a slot in
    `bound_parameters` and referenced by a negative child code.
    """

    def __init__(self, capacity: Optional[int] = None, *, config: Optional[TapeConfig] = None):
        config = config or TapeConfig()
        capacity = config.capacity if capacity is None else int(capacity)
        if capacity <= 0:
            raise ValueError(f"Tape capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.generation = 0
        self.bound_parameters: List[Parameter] = []
        self._param_slots: Dict[int, int] = {}   # id(Parameter) -> slot
        self._head = 0

        size = min(capacity, config.initial_size)
        self.data = np.zeros(size, dtype=np.float64)
        self.grad = np.zeros(size, dtype=np.float64)
        self.const = np.zeros(size, dtype=np.float64)
        self.op = np.zeros(size, dtype=np.int8)
        self.child0 = np.full(size, NO_CHILD, dtype=np.int64)
        self.child1 = np.full(size, NO_CHILD, dtype=np.int64)

    def __len__(self):
        return self._head

    def __repr__(self):
        return (f"Tape(nodes={self._head}, capacity={self.capacity}, "
                f"generation={self.generation})")

    # ------------------------------------------------------------------ #
    # Allocation
    # ------------------------------------------------------------------ #
    def _reserve(self):
        size = self.data.shape[0]
        if self._head < size:
            return
        if size >= self.capacity:
            raise CapacityExceededError(self.capacity)
        new_size = min(self.capacity, 2 * size)
        for name in ("data", "grad", "const", "op", "child0", "child1"):
            old = getattr(self, name)
            fill = NO_CHILD if name.startswith("child") else 0
            new = np.full(new_size, fill, dtype=old.dtype)
            new[:size] = old
            setattr(self, name, new)
        logger.debug("Tape columns grown from %d to %d slots", size, new_size)

    def _push(self, data, op: Op, c0: int = NO_CHILD, c1: int = NO_CHILD, const=0.0) -> Value:
        self._reserve()
        i = self._head
        self.data[i] = data
        self.grad[i] = 0.0
        self.const[i] = const
        self.op[i] = op
        self.child0[i] = c0
        self.child1[i] = c1
        self._head = i + 1
        return Value(self, i, self.generation)

    def allocate_leaf(self, data) -> Value:
        """Record a leaf node holding `data`; raises CapacityExceededError when full."""
        return self._push(_as_float(data), Op.LEAF)

    create_leaf = allocate_leaf

    def allocate_op(self, data, op: Op, children, const=0.0) -> Value:
        """
        Record a node produced by `op` from `children` (Value or Parameter operands).

        The number of children must match the operation's arity, and every Value
        child must be a live handle on this tape.
        """
        op = Op(op)
        children = tuple(children)
        if op is Op.LEAF or len(children) != op.arity:
            raise ValueError(f"{op.name} expects {op.arity} children, got {len(children)}")
        refs = [self.ref(c) for c in children]
        refs += [NO_CHILD] * (2 - len(refs))
        return self._push(_as_float(data), op, refs[0], refs[1], _as_float(const))

    def push_ref(self, data, op: Op, c0: int, c1: int = NO_CHILD, const=0.0) -> Value:
        """Fast path for op constructors that already resolved their child references."""
        return self._push(data, op, c0, c1, const)

    # ------------------------------------------------------------------ #
    # Child references
    # ------------------------------------------------------------------ #
    def ref(self, operand) -> int:
        """Resolve a Value or Parameter operand to a child reference on this tape."""
        if isinstance(operand, Value):
            if operand.tape is not self:
                raise ValueError("Cannot combine Values recorded on different tapes")
            operand.check()
            return operand.index
        if isinstance(operand, Parameter):
            if operand.released:
                raise ReleasedParameterError(operand.name)
            slot = self._param_slots.get(id(operand))
            if slot is None:
                slot = len(self.bound_parameters)
                self.bound_parameters.append(operand)
                self._param_slots[id(operand)] = slot
            return param_ref(slot)
        raise TypeError(f"Expected a Value or Parameter operand, got {type(operand).__name__}")

    def value_of(self, ref: int):
        """Forward value behind a child reference."""
        if ref >= 0:
            return self.data[ref]
        return self.bound_parameters[param_slot(ref)]._data

    def operand(self, ref: int):
        if ref >= 0:
            return Value(self, ref, self.generation)
        return self.bound_parameters[param_slot(ref)]

    def children_of(self, index: int) -> Tuple:
        refs = (int(self.child0[index]), int(self.child1[index]))
        return tuple(self.operand(r) for r in refs if r != NO_CHILD)

    # ------------------------------------------------------------------ #
    # Inspection / lifecycle
    # ------------------------------------------------------------------ #
    def node(self, index: int) -> Node:
        """Snapshot of the node at `index` (must be < len(tape))."""
        if not 0 <= index < self._head:
            raise IndexError(f"Node index {index} out of range for tape of {self._head} nodes")
        refs = tuple(int(r) for r in (self.child0[index], self.child1[index]) if r != NO_CHILD)
        return Node(
            index=index,
            op=Op(int(self.op[index])),
            data=float(self.data[index]),
            grad=float(self.grad[index]),
            children=refs,
            const=float(self.const[index]),
        )

    def nodes(self) -> Iterator[Node]:
        for i in range(self._head):
            yield self.node(i)

    def zero_grad(self):
        """Zero the gradient of every live node (bound parameters are untouched)."""
        self.grad[:self._head] = 0.0

    def reset(self):
        """
        Discard every node in O(1): the cursor returns to 0 and the generation is
        bumped, so all handles issued so far become stale.
        """
        logger.debug("Tape reset: %d nodes discarded (generation %d -> %d)",
                     self._head, self.generation, self.generation + 1)
        self._head = 0
        self.generation += 1
        self.bound_parameters = []
        self._param_slots = {}


def _as_float(x):
    if isinstance(x, (bool, np.bool_)) or not isinstance(x, (int, float, np.integer, np.floating)):
        raise TypeError(f"Tape values must be real numbers, got {type(x).__name__}")
    return np.float64(x)


# Global default tape (ops fall back to it when no operand carries a tape)
global_tape = Tape()


def current_tape() -> Tape:
    """Return the tape currently installed as the global default."""
    from . import tape as _tape_mod
    return _tape_mod.global_tape


@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily use a fresh (or given) tape as the default:
        with use_tape() as t:
            x = create_leaf(2.0)
            ...
    """
    from . import tape as _tape_mod  # module access so the swap is visible everywhere
    prev = _tape_mod.global_tape
    try:
        _tape_mod.global_tape = tape if tape is not None else Tape()
        yield _tape_mod.global_tape
    finally:
        _tape_mod.global_tape = prev


def create_leaf(data) -> Value:
    """Record a leaf on the current default tape."""
    return current_tape().create_leaf(data)


def reset_tape():
    """Reset the current default tape."""
    current_tape().reset()
