"""
Training loop for tapegrad MLPs: full-batch plain gradient descent on the
mean squared error.

Each step follows the tape discipline the network relies on:
    forward over the batch -> zero_grad -> backward (tape reset) -> update
"""

import logging
import math
from typing import List, Optional, Sequence

from ..config import TrainConfig
from ..core import tape as tape_mod
from ..core.engine import backward
from ..core.errors import CapacityExceededError
from ..core.tape import Tape
from ..core.var import Value
from ..ops import add, div, pow, sub
from .mlp import MLP, forward

logger = logging.getLogger(__name__)


def mse_loss(predictions: Sequence[Value], targets: Sequence) -> Value:
    """Mean of (prediction - target)^2, recorded on the predictions' tape."""
    if len(predictions) != len(targets):
        raise ValueError(f"Got {len(predictions)} predictions for {len(targets)} targets")
    if not predictions:
        raise ValueError("mse_loss() needs at least one prediction")
    total = None
    for p, t in zip(predictions, targets):
        sq = pow(sub(p, t), 2)
        total = sq if total is None else add(total, sq)
    return div(total, float(len(predictions)))


def _as_row(t) -> List:
    return list(t) if hasattr(t, "__len__") else [t]


def train(model: MLP, X: Sequence[Sequence[float]], y: Sequence,
          config: Optional[TrainConfig] = None, tape: Optional[Tape] = None) -> List[float]:
    """
    Fit `model` to (X, y) with full-batch gradient descent.

    Args:
        model  : MLP to train in place
        X      : input rows, each of length model.input_dim
        y      : targets; scalars for single-output models, rows otherwise
        config : TrainConfig (learning rate, steps, strategy, tolerance, logging)
        tape   : tape to record on (default: the current tape)

    Returns:
        Loss value of every step performed.
    """
    config = config or TrainConfig()
    tape = tape if tape is not None else tape_mod.global_tape
    if len(X) != len(y):
        raise ValueError(f"Got {len(X)} input rows for {len(y)} targets")
    targets = [v for t in y for v in _as_row(t)]

    history: List[float] = []
    for step in range(config.steps):
        try:
            preds = [p for row in X for p in forward(model, row, tape=tape)]
            loss = mse_loss(preds, targets)
        except CapacityExceededError:
            tape.reset()
            raise
        loss_val = loss.data

        model.registry.zero_grad()
        backward(loss, retain_graph=False, strategy=config.strategy)
        model.registry.update_params(config.learning_rate)
        history.append(loss_val)

        if config.log_every and step % config.log_every == 0:
            logger.info("Step: %-5d | Loss: %.8f", step, loss_val)
        if math.isnan(loss_val):
            logger.warning("Loss became NaN at step %d; stopping", step)
            break
        if loss_val < config.tolerance:
            logger.info("Converged at step %d (loss %.3e < %.3e)", step, loss_val, config.tolerance)
            break

    return history


def predict(model: MLP, X: Sequence[Sequence[float]], tape: Optional[Tape] = None) -> List[List[float]]:
    """Model outputs for every row of X, as floats; the tape is reset afterwards."""
    tape = tape if tape is not None else tape_mod.global_tape
    results = []
    for row in X:
        results.append([o.data for o in forward(model, row, tape=tape)])
        tape.reset()
    return results
