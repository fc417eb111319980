# tapegrad/ops/special.py
import numpy as np
from ..core.node import Op
from .arithmetic import _unary


def relu(x):
    """
    Primitive: max(x, 0). Local derivative is 1 for x > 0 and 0 otherwise.
    A nan input stays nan (np.maximum propagates it).
    """
    return _unary(x, lambda a: np.maximum(a, 0.0), Op.RELU)
