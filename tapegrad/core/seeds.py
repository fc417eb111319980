# tapegrad/core/seeds.py
"""
One-shot gradient helpers.

Each helper records `f` on its own throwaway tape, seeds d(out)/d(out) = 1 at
the scalar result and returns the partials as plain floats. The caller's
default tape is restored afterwards and never sees the recorded nodes.
"""
from typing import Any, Callable, Dict, Iterable, List, Union

from .var import Value
from .registry import Parameter
from .tape import use_tape
from .engine import Strategy, backward


def value(x: Any) -> Any:
    """Forward value of a Value or Parameter; anything else is returned as is."""
    return x.data if isinstance(x, (Value, Parameter)) else x


def _run(f, args, strategy) -> bool:
    out = f(args)
    if not isinstance(out, Value):
        return False  # constant in every input
    backward(out, retain_graph=True, strategy=strategy)
    return True


def grad(f: Callable[[Value], Value], x0: float,
         strategy: Union[Strategy, str] = Strategy.LINEAR) -> float:
    """df/dx at x0."""
    with use_tape() as tape:
        x = tape.create_leaf(x0)
        return x.grad if _run(f, x, strategy) else 0.0


def grads(f: Callable[[Dict[str, Value]], Value],
          inputs: Dict[str, float],
          strategy: Union[Strategy, str] = Strategy.LINEAR) -> Dict[str, float]:
    """
    Partials of f with respect to every named input, from a single backward pass.

    Args:
        f      : callable taking {name: Value} and returning a Value
        inputs : {name: point of evaluation}

    Returns:
        {name: partial}, keyed in the order of `inputs`
    """
    with use_tape() as tape:
        xs = {name: tape.create_leaf(v) for name, v in inputs.items()}
        live = _run(f, xs, strategy)
        return {name: (xs[name].grad if live else 0.0) for name in inputs}


def grads_list(f: Callable[[List[Value]], Value],
               x0_list: Iterable[float],
               strategy: Union[Strategy, str] = Strategy.LINEAR) -> List[float]:
    """
    Positional form of `grads`:

        grads_list(lambda xs: xs[0] * xs[1] + xs[1], [2.0, 5.0]) -> [5.0, 3.0]
    """
    with use_tape() as tape:
        xs = [tape.create_leaf(v) for v in x0_list]
        live = _run(f, xs, strategy)
        return [x.grad if live else 0.0 for x in xs]
