"""
Tests for the Network
=====================

Construction, forward propagation, the activation cache and a gradient
check of the online update.

Gradient check:
    One train_step moves every weight by ``-lr * dE/dW`` where
    ``E = 0.5 * sum((target - output)^2)``. The expected step is taken
    from centered finite differences of E.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from neuralnet.network import Network
from neuralnet.matrix import Matrix
from neuralnet.errors import (ActivationCacheError, DimensionMismatchError,
                              InvalidConfigurationError, ShapeMismatchError)


def numerical_gradient(f, x, epsilon=1e-6):
    """
    Centered finite-difference gradient of ``f`` with respect to the
    1-D array ``x``, which is perturbed in place and restored.
    """
    grad = np.zeros_like(x)
    for idx in range(x.size):
        original = x[idx]

        x[idx] = original + epsilon
        loss_plus = f()

        x[idx] = original - epsilon
        loss_minus = f()

        x[idx] = original
        grad[idx] = (loss_plus - loss_minus) / (2 * epsilon)

    return grad


class TestConstruction:
    """Tests for building networks."""

    def test_shapes(self):
        """Weights are (n_out, n_in), biases (n_out, 1)."""
        net = Network([3, 5, 2], seed=0)
        assert net.weight_shapes() == [(5, 3), (2, 5)]
        assert [b.shape for b in net.biases] == [(5, 1), (2, 1)]
        assert net.parameter_count() == 15 + 5 + 10 + 2

    def test_initial_range(self):
        net = Network([4, 8, 3], seed=1)
        for m in net.weights + net.biases:
            assert np.all(m.data >= -1.0) and np.all(m.data < 1.0)

    def test_seed_reproducible(self):
        assert Network([2, 3, 1], seed=42).same_parameters(Network([2, 3, 1], seed=42))
        assert not Network([2, 3, 1], seed=42).same_parameters(Network([2, 3, 1], seed=43))

    @pytest.mark.parametrize('sizes', [[], [3], [2, 0, 1], [2, -1]])
    def test_invalid_layer_sizes(self, sizes):
        with pytest.raises(InvalidConfigurationError):
            Network(sizes)

    @pytest.mark.parametrize('rate', [0, -0.1, float('nan'), float('inf')])
    def test_invalid_learning_rate(self, rate):
        with pytest.raises(InvalidConfigurationError):
            Network([2, 1], learning_rate=rate)

    def test_unknown_activation(self):
        with pytest.raises(InvalidConfigurationError):
            Network([2, 1], activation='swish')

    def test_from_parameters_checks_shapes(self):
        net = Network([2, 3, 1], seed=0)
        with pytest.raises(ShapeMismatchError):
            Network.from_parameters([2, 4, 1], net.weights, net.biases, 0.5)

    def test_from_parameters_copies(self):
        net = Network([2, 3, 1], seed=0)
        clone = Network.from_parameters(net.layer_sizes, net.weights, net.biases,
                                        net.learning_rate)
        assert clone.same_parameters(net)
        clone.weights[0].set(0, 0, 123.0)
        assert net.weights[0].get(0, 0) != 123.0


class TestForward:
    """Tests for forward propagation."""

    def test_output_length_and_range(self):
        net = Network([3, 4, 2], seed=5)
        out = net.evaluate([0.1, -0.2, 0.3])
        assert len(out) == 2
        assert all(0.0 < v < 1.0 for v in out)

    def test_matches_manual_computation(self):
        """Output equals sigmoid(W2 sigmoid(W1 x + b1) + b2)."""
        net = Network([2, 3, 1], seed=11)
        x = np.array([[0.7], [-0.4]])
        sigmoid = lambda z: 1.0 / (1.0 + np.exp(-z))
        h = sigmoid(net.weights[0].to_numpy() @ x + net.biases[0].to_numpy())
        y = sigmoid(net.weights[1].to_numpy() @ h + net.biases[1].to_numpy())
        np.testing.assert_allclose(net.evaluate([0.7, -0.4]), y.ravel(), rtol=1e-12)

    def test_evaluate_idempotent(self):
        """Repeated evaluation without training gives identical outputs."""
        net = Network([2, 3, 1], seed=2)
        first = net.evaluate([1.0, 0.0])
        assert net.evaluate([1.0, 0.0]) == first
        assert net.predict([1.0, 0.0]) == first

    def test_accepts_matrix(self):
        net = Network([2, 1], seed=2)
        assert net.forward(Matrix.from_vector([1.0, 0.0])).shape == (1, 1)

    def test_wrong_input_length(self):
        net = Network([2, 3, 1], seed=2)
        with pytest.raises(DimensionMismatchError) as exc_info:
            net.evaluate([1.0, 0.0, 1.0])
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3

    @pytest.mark.parametrize('inputs', [[], Matrix(3, 1)])
    def test_empty_or_long_input(self, inputs):
        """Any wrong length, empty included, is a dimension mismatch."""
        net = Network([2, 1], seed=2)
        before = net.copy()
        with pytest.raises(DimensionMismatchError) as exc_info:
            net.evaluate(inputs)
        assert exc_info.value.expected == 2
        assert net.same_parameters(before)

    def test_empty_target(self):
        net = Network([2, 1], seed=2)
        with pytest.raises(DimensionMismatchError):
            net.train_step([1.0, 0.0], [])

    def test_cache_contents(self):
        """One cached output per layer, input included."""
        net = Network([2, 3, 1], seed=2)
        net.forward([1.0, 0.0])
        cached = net.activations
        assert [len(a) for a in cached] == [2, 3, 1]
        assert cached[0] == [1.0, 0.0]

    def test_predict_class(self):
        net = Network([2, 3], seed=2)
        assert net.predict_class([1.0, 0.0]) == int(np.argmax(net.evaluate([1.0, 0.0])))


class TestBackpropagation:
    """Tests for the training step."""

    def test_backpropagate_without_forward(self):
        net = Network([2, 2, 1], seed=0)
        with pytest.raises(ActivationCacheError):
            net.backpropagate([1.0])
        with pytest.raises(ActivationCacheError):
            net.activations

    def test_cache_consumed(self):
        """Backpropagation invalidates the cache."""
        net = Network([2, 2, 1], seed=0)
        net.forward([1.0, 1.0])
        net.backpropagate([1.0])
        with pytest.raises(ActivationCacheError):
            net.backpropagate([1.0])

    def test_bad_target_leaves_network_untouched(self):
        net = Network([2, 3, 1], seed=0)
        before = net.copy()
        with pytest.raises(DimensionMismatchError):
            net.train_step([1.0, 0.0], [1.0, 0.0])
        with pytest.raises(DimensionMismatchError):
            net.train_step([1.0], [1.0])
        assert net.same_parameters(before)

    def test_returns_loss_before_update(self):
        net = Network([2, 3, 1], seed=0)
        output = net.evaluate([1.0, 0.0])[0]
        loss = net.train_step([1.0, 0.0], [1.0])
        assert loss == pytest.approx((1.0 - output) ** 2)

    def test_step_reduces_loss(self):
        net = Network([2, 3, 1], learning_rate=0.1, seed=0)
        first = net.train_step([1.0, 0.0], [1.0])
        second = net.train_step([1.0, 0.0], [1.0])
        assert second < first

    @pytest.mark.parametrize('sizes,activation', [
        ([2, 3, 1], 'sigmoid'),
        ([3, 4, 5, 2], 'sigmoid'),
        ([2, 3, 2], 'tanh'),
    ])
    def test_output_layer_matches_numerical_gradient(self, sizes, activation):
        """The output layer's weights and bias move by -lr * dE/dparam."""
        net = Network(sizes, learning_rate=0.3, activation=activation, seed=9)
        rng = np.random.default_rng(0)
        x = rng.uniform(-1, 1, size=sizes[0]).tolist()
        t = rng.uniform(0, 1, size=sizes[-1]).tolist()

        def half_sse():
            y = np.array(net.evaluate(x))
            return 0.5 * np.sum((np.array(t) - y) ** 2)

        output_params = [net.weights[-1], net.biases[-1]]
        expected_steps = [-net.learning_rate * numerical_gradient(half_sse, m.data)
                          for m in output_params]

        before = [m.data.copy() for m in output_params]
        net.train_step(x, t)

        for b, m, expected in zip(before, output_params, expected_steps):
            np.testing.assert_allclose(m.data - b, expected, rtol=1e-4, atol=1e-9)

    @pytest.mark.parametrize('sizes,activation', [
        ([2, 3, 1], 'sigmoid'),
        ([3, 4, 5, 2], 'sigmoid'),
        ([2, 3, 2], 'tanh'),
    ])
    def test_hidden_delta_uses_updated_weights(self, sizes, activation):
        """Each hidden delta is propagated through the already updated next layer."""
        net = Network(sizes, learning_rate=0.3, activation=activation, seed=9)
        rng = np.random.default_rng(1)
        x = rng.uniform(-1, 1, size=(sizes[0], 1))
        t = rng.uniform(0, 1, size=(sizes[-1], 1))

        f = net.activation
        weights = [w.to_numpy() for w in net.weights]
        biases = [b.to_numpy() for b in net.biases]
        layers = [x]
        for w, b in zip(weights, biases):
            layers.append(f.forward(w @ layers[-1] + b))

        delta = (t - layers[-1]) * f.derivative(layers[-1])
        for i in reversed(range(len(weights))):
            weights[i] = weights[i] + net.learning_rate * (delta @ layers[i].T)
            biases[i] = biases[i] + net.learning_rate * delta
            if i > 0:
                delta = (weights[i].T @ delta) * f.derivative(layers[i])

        net.train_step(x.ravel().tolist(), t.ravel().tolist())

        for expected, actual in zip(weights + biases, net.weights + net.biases):
            np.testing.assert_allclose(actual.to_numpy(), expected, rtol=1e-12, atol=1e-15)

    def test_hidden_update_differs_from_pre_update_rule(self):
        """Propagating through pre-update weights would give a different hidden step."""
        net = Network([2, 3, 1], learning_rate=0.5, seed=4)
        x = np.array([[1.0], [0.0]])
        t = np.array([[1.0]])
        f = net.activation
        w0, b0 = net.weights[0].to_numpy(), net.biases[0].to_numpy()
        w1, b1 = net.weights[1].to_numpy(), net.biases[1].to_numpy()
        h = f.forward(w0 @ x + b0)
        y = f.forward(w1 @ h + b1)
        delta_out = (t - y) * f.derivative(y)
        stale_hidden_step = net.learning_rate * ((w1.T @ delta_out) * f.derivative(h)) @ x.T

        net.train_step([1.0, 0.0], [1.0])
        actual_step = net.weights[0].to_numpy() - w0
        assert not np.allclose(actual_step, stale_hidden_step, rtol=1e-12, atol=0)

class TestHelpers:
    """Tests for copy and summary."""

    def test_copy_is_independent(self):
        net = Network([2, 3, 1], seed=0)
        clone = net.copy()
        clone.train_step([1.0, 1.0], [0.0])
        assert not clone.same_parameters(net)

    def test_summary(self):
        text = Network([2, 3, 1], seed=0).summary()
        assert 'Total parameters: 13' in text
        assert 'Dense(2 -> 3)' in text
