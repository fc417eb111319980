"""
MLP construction, forward pass and training on XOR.
"""

import math

import numpy as np
import pytest

from tapegrad import (
    Op,
    ParameterRegistry,
    StaleHandleError,
    ReleasedParameterError,
    TrainConfig,
    backward,
    build_model,
    forward,
    free_model,
    mse_loss,
    predict,
    train,
)
from tapegrad.nn import Neuron
from tapegrad.ops import tanh

XOR_X = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
XOR_Y = [0.0, 1.0, 1.0, 0.0]


def test_parameter_count():
    model = build_model(2, [4, 1], seed=0)
    assert len(model.parameters()) == 17
    assert len(model.registry) == 17
    assert model.output_dim == 1


def test_same_seed_same_weights():
    a = build_model(2, [4, 1], seed=7)
    b = build_model(2, [4, 1], seed=7)
    c = build_model(2, [4, 1], seed=8)
    assert [p.data for p in a.parameters()] == [p.data for p in b.parameters()]
    assert [p.data for p in a.parameters()] != [p.data for p in c.parameters()]


def test_initialisation_ranges():
    model = build_model(3, [5, 2], seed=1, init_scale=0.5)
    for layer in model.layers:
        for neuron in layer.neurons:
            assert all(-0.5 <= w.data <= 0.5 for w in neuron.weights)
            assert neuron.bias.data == 0.0


def test_invalid_dimensions():
    with pytest.raises(ValueError):
        build_model(0, [1])
    with pytest.raises(ValueError):
        build_model(2, [])
    with pytest.raises(ValueError):
        build_model(2, [3, 0])


def test_output_layer_is_linear(tape):
    model = build_model(2, [4, 1], seed=0)
    out = forward(model, [0.5, -0.5])
    assert len(out) == 1
    assert out[0].op is Op.ADD
    for neuron in model.layers[0].neurons:
        assert neuron.output.op is Op.TANH


def test_forward_rejects_wrong_input_length(tape):
    model = build_model(2, [1], seed=0)
    with pytest.raises(ValueError):
        forward(model, [1.0])


def test_neuron_by_hand(tape):
    registry = ParameterRegistry()
    neuron = Neuron(2, registry, np.random.default_rng(0), activation=tanh)
    neuron.weights[0].data = 0.5
    neuron.weights[1].data = -1.0
    neuron.bias.data = 0.25

    x = [tape.create_leaf(2.0), tape.create_leaf(1.0)]
    out = neuron(x)
    expected = math.tanh(0.25)
    assert out.data == pytest.approx(expected)

    backward(out, retain_graph=True)
    dact = 1.0 - expected ** 2
    assert neuron.weights[0].grad == pytest.approx(dact * 2.0)
    assert neuron.weights[1].grad == pytest.approx(dact * 1.0)
    assert neuron.bias.grad == pytest.approx(dact)
    assert x[0].grad == pytest.approx(dact * 0.5)


def test_free_model(tape):
    model = build_model(2, [3, 1], seed=0)
    p = model.parameters()[0]
    out = forward(model, [1.0, 2.0])
    free_model(model, tape)

    assert len(tape) == 0
    assert model.layers == []
    assert p.released
    with pytest.raises(ReleasedParameterError):
        p.data
    with pytest.raises(StaleHandleError):
        out[0].data


def test_mse_loss(tape):
    preds = [tape.create_leaf(1.0), tape.create_leaf(3.0)]
    loss = mse_loss(preds, [0.0, 1.0])
    assert loss.data == pytest.approx((1.0 + 4.0) / 2)
    backward(loss, retain_graph=True)
    assert preds[0].grad == pytest.approx(1.0)
    assert preds[1].grad == pytest.approx(2.0)

    with pytest.raises(ValueError):
        mse_loss(preds, [1.0])
    with pytest.raises(ValueError):
        mse_loss([], [])


def test_training_step_reduces_loss(tape):
    model = build_model(2, [4, 1], seed=3)
    history = train(model, XOR_X, XOR_Y, TrainConfig(steps=50, log_every=0))
    assert len(history) == 50
    assert history[-1] < history[0]
    assert len(tape) == 0


def test_strategies_train_identically():
    histories = []
    for strategy in ("linear", "dfs"):
        model = build_model(2, [4, 1], seed=11)
        config = TrainConfig(learning_rate=0.1, steps=20, strategy=strategy, log_every=0)
        histories.append(train(model, XOR_X, XOR_Y, config))
        free_model(model)
    assert histories[0] == pytest.approx(histories[1], rel=1e-9)


def test_xor_converges(tape):
    model = build_model(2, [4, 1], seed=0)
    config = TrainConfig(learning_rate=0.2, steps=10000, tolerance=1e-3, log_every=0)
    history = train(model, XOR_X, XOR_Y, config)

    assert history[-1] < 1e-2
    preds = predict(model, XOR_X)
    for (p,), target in zip(preds, XOR_Y):
        assert abs(p - target) < 0.1
    assert len(tape) == 0
