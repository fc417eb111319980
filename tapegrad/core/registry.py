# tapegrad/core/registry.py
from __future__ import annotations
import logging
import numpy as np
from typing import Iterator, List, Optional

from .errors import ReleasedParameterError

logger = logging.getLogger(__name__)


class Parameter:
    """
    Long-lived scalar that lives outside the tape.

    A Parameter takes part in graphs exactly like a tape leaf, but its storage
    belongs to a ParameterRegistry, so it survives any number of tape resets.
    Its gradient only changes when a backward pass reaches it, and is only
    cleared by an explicit `ParameterRegistry.zero_grad()`.
    """

    __slots__ = ("_data", "_grad", "name", "_released")
    __array_ufunc__ = None

    def __init__(self, data, name: Optional[str] = None):
        self._data = np.float64(data)
        self._grad = np.float64(0.0)
        self.name = name
        self._released = False

    def _check(self):
        if self._released:
            raise ReleasedParameterError(self.name)

    @property
    def data(self) -> float:
        self._check()
        return float(self._data)

    @data.setter
    def data(self, value):
        self._check()
        self._data = np.float64(value)

    @property
    def grad(self) -> float:
        self._check()
        return float(self._grad)

    @grad.setter
    def grad(self, value):
        self._check()
        self._grad = np.float64(value)

    @property
    def released(self) -> bool:
        return self._released

    def __repr__(self):
        if self._released:
            return f"Parameter(<released>, name={self.name!r})"
        return f"Parameter({float(self._data)!r}, grad={float(self._grad)!r}, name={self.name!r})"


class ParameterRegistry:
    """
    Explicit collection of Parameters owned by a model.

    The registry lifetime is independent of any tape: resetting a tape never
    touches parameters, and releasing the registry never touches a tape.
    """

    def __init__(self):
        self._params: List[Parameter] = []

    def create_parameter(self, data, name: Optional[str] = None) -> Parameter:
        """Allocate a parameter with value `data` and gradient 0."""
        p = Parameter(data, name=name)
        self._params.append(p)
        return p

    def parameters(self) -> List[Parameter]:
        return list(self._params)

    def __len__(self):
        return len(self._params)

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._params)

    def zero_grad(self):
        """Set every registered parameter's gradient to 0 (tape nodes are untouched)."""
        zero = np.float64(0.0)
        for p in self._params:
            p._grad = zero

    def update_params(self, learning_rate: float):
        """
        Plain gradient descent step on every registered parameter:
            data <- data - learning_rate * grad
        """
        lr = np.float64(learning_rate)
        for p in self._params:
            p._data = p._data - lr * p._grad

    def release_parameters(self):
        """Tear down all parameters; later access to them raises ReleasedParameterError."""
        n = len(self._params)
        for p in self._params:
            p._released = True
        self._params.clear()
        logger.debug("Released %d parameters", n)
