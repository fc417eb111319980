# tapegrad/nn/__init__.py

from .mlp import Neuron, Layer, MLP, build_model, forward, free_model
from .train import mse_loss, train, predict

__all__ = [
    "Neuron", "Layer", "MLP",
    "build_model", "forward", "free_model",
    "mse_loss", "train", "predict",
]
