import numpy as np
import pytest

from xornet.core.activations import sigmoid
from xornet.core.errors import ShapeError
from xornet.core.losses import bce_with_confidence_penalty
from xornet.core.network import Network, create_network

XOR_INPUTS = [[0, 0], [0, 1], [1, 0], [1, 1]]


def test_same_seed_gives_identical_networks():
    net1 = create_network([2, 4, 1], seed=123)
    net2 = create_network([2, 4, 1], seed=123)
    for w1, w2 in zip(net1.weights, net2.weights):
        assert np.array_equal(w1, w2)
    for x in XOR_INPUTS + [[0.5, 0.5]]:
        assert np.array_equal(net1.forward(x), net2.forward(x))


def test_different_seeds_give_different_weights():
    net1 = Network([2, 4, 1], seed=123)
    net2 = Network([2, 4, 1], seed=456)
    assert net1.weights[0][0, 0] != net2.weights[0][0, 0]
    assert net1.forward([0.5, 0.5])[0] != net2.forward([0.5, 0.5])[0]


@pytest.mark.parametrize("topology", [[2, 4, 1], [2, 3, 5, 2], [2, 1]])
def test_forward_output_width(topology):
    net = Network(topology, seed=1)
    for x in XOR_INPUTS:
        out = net.forward(x)
        assert out.shape == (topology[-1],)
    assert len(net.activations) == len(topology)
    assert len(net.pre_activations) == len(topology) - 1
    assert np.array_equal(net.activations[0], np.array(XOR_INPUTS[-1], dtype=float))


def test_forward_hidden_layers_are_relu_output_is_linear():
    net = Network([2, 4, 1], seed=5)
    net.forward([0.3, -2.0])
    assert np.all(net.activations[1] >= 0)
    assert np.array_equal(net.activations[1], np.maximum(net.pre_activations[0], 0))
    assert np.array_equal(net.activations[-1], net.pre_activations[-1])


def test_forward_rejects_wrong_input_length():
    net = Network([2, 4, 1], seed=1)
    with pytest.raises(ShapeError):
        net.forward([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        net.forward([1.0])


def test_backward_rejects_wrong_target_length():
    net = Network([2, 4, 1], seed=1)
    net.forward([0, 1])
    with pytest.raises(ShapeError):
        net.backward([1.0, 0.0])


def test_backward_before_forward_raises():
    net = Network([2, 4, 1], seed=1)
    with pytest.raises(RuntimeError):
        net.backward([1.0])


def test_backward_rejects_negative_penalty():
    net = Network([2, 4, 1], seed=1)
    net.forward([0, 1])
    with pytest.raises(ValueError):
        net.backward([1.0], confidence_penalty=-0.1)


def test_step_before_backward_is_noop():
    net = Network([2, 4, 1], seed=1)
    before = net.get_state()
    net.step(0.5)
    after = net.get_state()
    for w0, w1 in zip(before.weights, after.weights):
        assert np.array_equal(w0, w1)
    for b0, b1 in zip(before.biases, after.biases):
        assert np.array_equal(b0, b1)


def test_step_requires_positive_learning_rate():
    net = Network([2, 4, 1], seed=1)
    with pytest.raises(ValueError):
        net.step(0.0)


def test_backward_leaves_parameters_and_intermediates_untouched():
    net = Network([2, 4, 1], seed=3)
    net.forward([1, 0])
    before = net.get_state()
    net.backward([1.0])
    after = net.get_state()
    for w0, w1 in zip(before.weights, after.weights):
        assert np.array_equal(w0, w1)
    for a0, a1 in zip(before.activations, after.activations):
        assert np.array_equal(a0, a1)
    assert [g.shape for g in after.weight_grads] == [(2, 4), (4, 1)]


def _loss(net: Network, x, y, strength: float) -> float:
    p = sigmoid(net.forward(x))
    return bce_with_confidence_penalty(p, np.asarray(y, dtype=float), penalty_strength=strength)


@pytest.mark.parametrize("strength", [0.0, 0.5])
@pytest.mark.parametrize("x,y", [([0.2, 0.9], [1.0]), ([1.0, 1.0], [0.0]), ([0.7, 0.1], [1.0])])
def test_gradients_match_central_differences(x, y, strength):
    net = Network([2, 4, 1], seed=11)
    # Shift biases so no hidden unit sits on the ReLU kink.
    net.biases[0] += 0.05
    net.forward(x)
    net.backward(y, strength)
    analytic_w = [g.copy() for g in net.weight_grads]
    analytic_b = [g.copy() for g in net.bias_grads]

    h = 1e-6
    for layer in range(len(net.weights)):
        W = net.weights[layer]
        for idx in np.ndindex(W.shape):
            orig = W[idx]
            W[idx] = orig + h
            plus = _loss(net, x, y, strength)
            W[idx] = orig - h
            minus = _loss(net, x, y, strength)
            W[idx] = orig
            assert analytic_w[layer][idx] == pytest.approx((plus - minus) / (2 * h), abs=1e-4)
        b = net.biases[layer]
        for j in range(b.shape[0]):
            orig = b[j]
            b[j] = orig + h
            plus = _loss(net, x, y, strength)
            b[j] = orig - h
            minus = _loss(net, x, y, strength)
            b[j] = orig
            assert analytic_b[layer][j] == pytest.approx((plus - minus) / (2 * h), abs=1e-4)


def test_relu_subgradient_at_zero_is_zero():
    net = Network([1, 1, 1], seed=2)
    net.weights[0][:] = 1.0
    net.biases[0][:] = 0.0
    net.weights[1][:] = 1.0
    net.forward([0.0])
    net.backward([1.0])
    assert net.weight_grads[0][0, 0] == 0.0
    assert net.bias_grads[0][0] == 0.0
    assert net.bias_grads[1][0] != 0.0


def test_state_round_trip_reproduces_outputs():
    net = Network([2, 4, 1], seed=9)
    for x, y in zip(XOR_INPUTS, [[0.0], [1.0], [1.0], [0.0]]):
        net.forward(x)
        net.backward(y)
        net.step(0.5)
    state = net.get_state()
    fresh = Network.from_state([2, 4, 1], state)
    assert fresh.get_state().equals(state)
    for x in XOR_INPUTS + [[0.25, 0.8]]:
        assert np.array_equal(fresh.forward(x), net.forward(x))


def test_get_state_is_a_deep_copy():
    net = Network([2, 4, 1], seed=9)
    state = net.get_state()
    state.weights[0][0, 0] += 10.0
    assert net.weights[0][0, 0] != state.weights[0][0, 0]


def test_set_state_rejects_mismatched_shapes():
    donor = Network([2, 3, 1], seed=1)
    net = Network([2, 4, 1], seed=1)
    with pytest.raises(ShapeError):
        net.set_state(donor.get_state())
