# tapegrad/core/__init__.py

"""
Core public API for tapegrad.

Exports:
    Tape               : Append-only arena of scalar nodes.
    Value              : Generation-checked handle to a tape node.
    Op, Node           : Operation tags and node snapshots.
    Parameter          : Long-lived scalar outside the tape.
    ParameterRegistry  : Explicit owner of Parameters (zero_grad / update / release).
    Strategy           : Backward traversal choice (LINEAR or DFS).
    backward           : Run one backward pass from a root Value.
    zero_grad_all      : Zero parameter and tape-node gradients.
    use_tape           : Context manager to temporarily switch the default tape.
    current_tape       : The default tape in effect.
    create_leaf        : Record a leaf on the default tape.
    reset_tape         : Reset the default tape.
    grad, grads, grads_list, value : Convenience wrappers on isolated tapes.
"""

from .errors import (
    TapeError,
    CapacityExceededError,
    StaleHandleError,
    ReleasedParameterError,
)
from .node import Node, Op
from .var import Value
from .registry import Parameter, ParameterRegistry
from .tape import Tape, current_tape, use_tape, create_leaf, reset_tape
from .engine import Strategy, backward, topological_order, zero_grad_all
from .seeds import grad, grads, grads_list, value

__all__ = [
    "TapeError", "CapacityExceededError", "StaleHandleError", "ReleasedParameterError",
    "Node", "Op",
    "Value",
    "Parameter", "ParameterRegistry",
    "Tape", "current_tape", "use_tape", "create_leaf", "reset_tape",
    "Strategy", "backward", "topological_order", "zero_grad_all",
    "grad", "grads", "grads_list", "value",
]
