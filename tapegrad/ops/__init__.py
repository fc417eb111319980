# tapegrad/ops/__init__.py

# Ensure operator overloading is registered
from . import arithmetic
from . import transcendental
from . import special

# Convenience re-exports so users can do: from tapegrad.ops import mul, tanh, ...
from .arithmetic import add, sub, mul, div, neg, pow
from .transcendental import exp, tanh
from .special import relu

__all__ = [
    "add", "sub", "mul", "div", "neg", "pow",
    "exp", "tanh",
    "relu",
]
