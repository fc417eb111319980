# tapegrad/__init__.py
# Reverse-mode automatic differentiation on a scalar tape

from .config import TapeConfig, TrainConfig
from .core import (
    TapeError,
    CapacityExceededError,
    StaleHandleError,
    ReleasedParameterError,
    Node,
    Op,
    Value,
    Parameter,
    ParameterRegistry,
    Tape,
    current_tape,
    use_tape,
    create_leaf,
    reset_tape,
    Strategy,
    backward,
    zero_grad_all,
    grad,
    grads,
    grads_list,
    value,
)

# Operations (importing registers the Python operators on Value / Parameter)
from . import ops
from .ops import add, sub, mul, div, neg, pow, exp, tanh, relu

# Network built on the core
from . import nn
from .nn import build_model, forward, free_model, train, predict, mse_loss

__all__ = [
    # Config
    'TapeConfig',
    'TrainConfig',
    # Errors
    'TapeError',
    'CapacityExceededError',
    'StaleHandleError',
    'ReleasedParameterError',
    # Core
    'Node',
    'Op',
    'Value',
    'Parameter',
    'ParameterRegistry',
    'Tape',
    'current_tape',
    'use_tape',
    'create_leaf',
    'reset_tape',
    # Engine
    'Strategy',
    'backward',
    'zero_grad_all',
    'grad',
    'grads',
    'grads_list',
    'value',
    # Ops
    'ops',
    'add', 'sub', 'mul', 'div', 'neg', 'pow', 'exp', 'tanh', 'relu',
    # Network
    'nn',
    'build_model',
    'forward',
    'free_model',
    'train',
    'predict',
    'mse_loss',
]
