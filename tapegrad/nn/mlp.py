"""
Feed-forward network built from tapegrad primitives.

    Neuron : activation(sum_i w_i * x_i + b)
    Layer  : ordered neurons sharing the same inputs
    MLP    : ordered layers; tanh on every layer except the last (identity)

Weights and biases are Parameters held in the model's ParameterRegistry. Every
forward call records a brand-new subgraph on the tape, so callers must reset
the tape between independent forward/backward cycles (backward with
retain_graph=False does this).
"""

import logging
import numpy as np
from typing import Callable, List, Optional, Sequence

from ..core import tape as tape_mod
from ..core.registry import Parameter, ParameterRegistry
from ..core.tape import Tape
from ..core.var import Value
from ..ops import add, mul, tanh

logger = logging.getLogger(__name__)


class Neuron:
    """
    Single neuron with `nin` weight parameters and one bias parameter.

    Attributes:
        nin (int): Number of inputs
        weights (List[Parameter]): One weight per input
        bias (Parameter): Bias, initialised to 0
        activation (Callable): Applied to the pre-activation, or None for identity
        output (Value): Handle produced by the last forward call (debugging aid)
    """

    def __init__(self, nin: int, registry: ParameterRegistry, rng: np.random.Generator,
                 activation: Optional[Callable] = None, init_scale: float = 1.0):
        self.nin = nin
        self.weights: List[Parameter] = [
            registry.create_parameter(rng.uniform(-init_scale, init_scale))
            for _ in range(nin)
        ]
        self.bias = registry.create_parameter(0.0)
        self.activation = activation
        self.output: Optional[Value] = None

    def __call__(self, x: Sequence) -> Value:
        if len(x) != self.nin:
            raise ValueError(f"Neuron expects {self.nin} inputs, got {len(x)}")
        total = mul(self.weights[0], x[0])
        for w, xi in zip(self.weights[1:], x[1:]):
            total = add(total, mul(w, xi))
        out = add(total, self.bias)
        if self.activation is not None:
            out = self.activation(out)
        self.output = out
        return out

    def parameters(self) -> List[Parameter]:
        return self.weights + [self.bias]


class Layer:
    """Fully connected layer of `nout` neurons over `nin` inputs."""

    def __init__(self, nin: int, nout: int, registry: ParameterRegistry,
                 rng: np.random.Generator, activation: Optional[Callable] = None,
                 init_scale: float = 1.0):
        self.nin = nin
        self.nout = nout
        self.neurons = [Neuron(nin, registry, rng, activation, init_scale) for _ in range(nout)]

    def __call__(self, x: Sequence) -> List[Value]:
        return [n(x) for n in self.neurons]

    def parameters(self) -> List[Parameter]:
        return [p for n in self.neurons for p in n.parameters()]


class MLP:
    """
    Multi-layer perceptron.

    Attributes:
        input_dim (int): Number of inputs
        layers (List[Layer]): Layers in evaluation order
        registry (ParameterRegistry): Owner of every weight and bias
    """

    def __init__(self, input_dim: int, layer_widths: Sequence[int],
                 registry: Optional[ParameterRegistry] = None,
                 seed: Optional[int] = None, init_scale: float = 1.0):
        if input_dim <= 0:
            raise ValueError(f"input_dim must be positive, got {input_dim}")
        if not layer_widths or any(w <= 0 for w in layer_widths):
            raise ValueError(f"layer_widths must be non-empty and positive, got {list(layer_widths)}")

        self.input_dim = input_dim
        self.registry = registry if registry is not None else ParameterRegistry()
        rng = np.random.default_rng(seed)

        self.layers: List[Layer] = []
        nlayers = len(layer_widths)
        for i, nout in enumerate(layer_widths):
            nin = input_dim if i == 0 else layer_widths[i - 1]
            activation = None if i == nlayers - 1 else tanh
            self.layers.append(Layer(nin, nout, self.registry, rng, activation, init_scale))

        logger.debug("Built MLP %d -> %s (%d parameters)",
                     input_dim, list(layer_widths), len(self.parameters()))

    def __call__(self, x: Sequence) -> List[Value]:
        for layer in self.layers:
            x = layer(x)
        return x

    def parameters(self) -> List[Parameter]:
        return [p for layer in self.layers for p in layer.parameters()]

    @property
    def output_dim(self) -> int:
        return self.layers[-1].nout


def build_model(input_dim: int, layer_widths: Sequence[int],
                registry: Optional[ParameterRegistry] = None,
                seed: Optional[int] = None, init_scale: float = 1.0) -> MLP:
    """
    Create an MLP whose weights are drawn from uniform(-init_scale, init_scale)
    with a numpy Generator seeded by `seed`; biases start at 0.
    """
    return MLP(input_dim, layer_widths, registry=registry, seed=seed, init_scale=init_scale)


def forward(model: MLP, inputs: Sequence, tape: Optional[Tape] = None) -> List[Value]:
    """
    Evaluate the model on one input row.

    Plain numbers in `inputs` are recorded as leaves on `tape` (default: the
    current tape); Value / Parameter inputs are used as they are.
    """
    if len(inputs) != model.input_dim:
        raise ValueError(f"Model expects {model.input_dim} inputs, got {len(inputs)}")
    tape = tape if tape is not None else tape_mod.global_tape
    x = [v if isinstance(v, (Value, Parameter)) else tape.create_leaf(v) for v in inputs]
    return model(x)


def free_model(model: MLP, tape: Optional[Tape] = None):
    """
    Tear down the model: release its parameters and reset the tape its
    activations were recorded on (default: the current tape).
    """
    model.registry.release_parameters()
    model.layers = []
    (tape if tape is not None else tape_mod.global_tape).reset()
