"""
Feedforward Network
===================

The main class that ties the matrix engine and activations together:
- Layer construction with seeded random weights
- Forward pass with an activation cache
- Backward pass (backpropagation) with in-place gradient-descent updates
- Inference and summaries

Shapes:
    For layer sizes [n0, n1, ..., nk] each transition l -> l+1 owns a weight
    matrix of shape (n_{l+1}, n_l) and a bias column of shape (n_{l+1}, 1).
    Inputs, activations and targets are column vectors.

Training is fully online: every call to :meth:`Network.train_step` runs a
forward pass, computes the error for that single example and immediately
updates every weight and bias. There is no batching or gradient averaging.

Example:
    >>> net = Network([2, 3, 1], learning_rate=0.5, seed=42)
    >>> loss = net.train_step([1.0, 0.0], [1.0])
    >>> len(net.evaluate([1.0, 0.0]))
    1
"""

import copy

import numpy as np

from .activations import get_activation
from .errors import (ActivationCacheError, DimensionMismatchError,
                     InvalidConfigurationError, ShapeMismatchError)
from .losses import MSELoss
from .matrix import Matrix


class Network:
    """
    Fully connected feedforward neural network.

    Args:
        layer_sizes: Neurons per layer, input first, e.g. [2, 3, 1]
        learning_rate: Gradient-descent step size (> 0)
        activation: Activation name or instance (default: 'sigmoid')
        seed: Seed for weight initialization; None draws fresh entropy

    Weights and biases start uniformly distributed in [-1, 1). One random
    stream feeds every layer, weights before biases, so a given seed always
    yields the same network.

    Raises:
        InvalidConfigurationError: Fewer than two layers, a non-positive layer
            size, a non-positive learning rate or an unknown activation
    """

    def __init__(self, layer_sizes, learning_rate=0.5, activation='sigmoid', seed=None):
        self.layer_sizes = _validate_layer_sizes(layer_sizes)
        self.learning_rate = _validate_learning_rate(learning_rate)
        self.activation = get_activation(activation)
        self.seed = seed

        rng = np.random.default_rng(seed)
        self.weights = []
        self.biases = []
        for n_in, n_out in zip(self.layer_sizes[:-1], self.layer_sizes[1:]):
            self.weights.append(Matrix.random(n_out, n_in, rng=rng))
            self.biases.append(Matrix.random(n_out, 1, rng=rng))

        self.loss_fn = MSELoss()
        self._cache = []

    @classmethod
    def from_parameters(cls, layer_sizes, weights, biases, learning_rate,
                        activation='sigmoid'):
        """
        Rebuild a network from explicit weight and bias matrices.

        Used when restoring checkpoints. Every matrix shape is checked
        against ``layer_sizes``.

        Raises:
            ShapeMismatchError: If a matrix does not fit its layer
        """
        network = cls.__new__(cls)
        network.layer_sizes = _validate_layer_sizes(layer_sizes)
        network.learning_rate = _validate_learning_rate(learning_rate)
        network.activation = get_activation(activation)
        network.seed = None
        network.loss_fn = MSELoss()
        network._cache = []

        n_transitions = len(network.layer_sizes) - 1
        if len(weights) != n_transitions or len(biases) != n_transitions:
            raise ShapeMismatchError(
                f"Architecture {network.layer_sizes} needs {n_transitions} weight and "
                f"bias matrices, got {len(weights)} and {len(biases)}")

        for i, (weight, bias) in enumerate(zip(weights, biases)):
            expected_w = (network.layer_sizes[i + 1], network.layer_sizes[i])
            expected_b = (network.layer_sizes[i + 1], 1)
            if weight.shape != expected_w:
                raise ShapeMismatchError(
                    f"Weight {i} has shape {weight.shape}, expected {expected_w}",
                    left=weight.shape, right=expected_w)
            if bias.shape != expected_b:
                raise ShapeMismatchError(
                    f"Bias {i} has shape {bias.shape}, expected {expected_b}",
                    left=bias.shape, right=expected_b)

        network.weights = [w.copy() for w in weights]
        network.biases = [b.copy() for b in biases]
        return network

    # ------------------------------------------------------------------
    # Properties

    @property
    def input_size(self):
        return self.layer_sizes[0]

    @property
    def output_size(self):
        return self.layer_sizes[-1]

    @property
    def activations(self):
        """
        Layer outputs of the most recent forward pass, input layer first.

        Raises:
            ActivationCacheError: If no forward pass is cached
        """
        if not self._cache:
            raise ActivationCacheError(
                "No activations cached: run a forward pass first")
        return [m.to_list() for m in self._cache]

    def parameter_count(self):
        """Total number of weights plus biases."""
        return self.weight_count() + self.bias_count()

    def weight_count(self):
        return sum(len(w) for w in self.weights)

    def bias_count(self):
        return sum(len(b) for b in self.biases)

    def weight_shapes(self):
        """(rows, cols) of each weight matrix."""
        return [w.shape for w in self.weights]

    # ------------------------------------------------------------------
    # Forward / backward

    def forward(self, inputs):
        """
        Forward pass through the network.

        Each layer computes ``activation(W x + b)``. All layer outputs,
        including the input itself, replace the activation cache.

        Args:
            inputs: Matrix column vector or a sequence of floats

        Returns:
            Output column vector as a Matrix

        Raises:
            DimensionMismatchError: If the input length differs from the
                first layer size (nothing is modified)
        """
        current = self._as_vector(inputs, self.input_size, 'Input')

        cache = [current]
        for weight, bias in zip(self.weights, self.biases):
            current = weight.dot(current).add(bias).map_array(self.activation.forward)
            cache.append(current)

        self._cache = cache
        return current

    def backpropagate(self, targets):
        """
        Backward pass for the cached forward pass, updating weights in place.

        For the output layer the delta is ``error * f'(output)``; for a hidden
        layer it is ``(W_next^T delta_next) * f'(activation)``. Layers are
        processed from the output backwards: each gets ``W += lr * delta a_prev^T``
        and ``b += lr * delta`` first, and the next delta is then propagated
        through the weights it was just given.

        The cache is consumed: a second call without a new forward pass
        raises.

        Args:
            targets: Matrix column vector or a sequence of floats

        Returns:
            Mean squared error of the cached output against ``targets``

        Raises:
            ActivationCacheError: If no forward pass is cached
            DimensionMismatchError: If the target length differs from the
                output layer size
        """
        if not self._cache:
            raise ActivationCacheError(
                "Backpropagation needs a cached forward pass")
        targets = self._as_vector(targets, self.output_size, 'Target')

        cache, self._cache = self._cache, []
        outputs = cache[-1]
        loss = self.loss_fn(outputs, targets)

        errors = self.loss_fn.error(outputs, targets)
        delta = errors.elementwise_multiply(outputs.map_array(self.activation.derivative))

        for i in reversed(range(len(self.weights))):
            previous = cache[i]
            weight_gradient = delta.dot(previous.transpose()).scale(self.learning_rate)
            bias_gradient = delta.scale(self.learning_rate)

            self.weights[i].add_inplace(weight_gradient)
            self.biases[i].add_inplace(bias_gradient)

            if i > 0:
                # Propagates through the weights just updated
                delta = (self.weights[i].transpose().dot(delta)
                         .elementwise_multiply(previous.map_array(self.activation.derivative)))

        return loss

    def train_step(self, inputs, targets):
        """
        One online gradient-descent step on a single example.

        Both vectors are validated before anything is computed, so a bad
        example leaves the network untouched.

        Returns:
            Mean squared error of the output before the update
        """
        inputs = self._as_vector(inputs, self.input_size, 'Input')
        targets = self._as_vector(targets, self.output_size, 'Target')
        self.forward(inputs)
        return self.backpropagate(targets)

    # ------------------------------------------------------------------
    # Inference

    def evaluate(self, inputs):
        """
        Output vector for ``inputs`` as a list of floats.

        Calling it repeatedly without training in between returns identical
        results.
        """
        return self.forward(inputs).to_list()

    def predict(self, inputs):
        """Alias for :meth:`evaluate`."""
        return self.evaluate(inputs)

    def predict_class(self, inputs):
        """
        Class index: 0/1 at a 0.5 threshold for a single output,
        otherwise the index of the largest output.
        """
        outputs = self.evaluate(inputs)
        if len(outputs) == 1:
            return int(outputs[0] > 0.5)
        return int(np.argmax(outputs))

    # ------------------------------------------------------------------
    # Helpers

    def copy(self):
        """Independent deep copy (weights, biases and settings)."""
        clone = copy.deepcopy(self)
        clone._cache = []
        return clone

    def same_parameters(self, other):
        """True when architecture, activation, learning rate and every value match exactly."""
        return (self.layer_sizes == other.layer_sizes
                and self.activation == other.activation
                and self.learning_rate == other.learning_rate
                and all(a == b for a, b in zip(self.weights, other.weights))
                and all(a == b for a, b in zip(self.biases, other.biases)))

    def summary(self):
        """Human readable architecture summary, one line per layer transition."""
        lines = []
        lines.append("=" * 60)
        lines.append(f"Network {self.layer_sizes} "
                     f"activation={self.activation.name} lr={self.learning_rate}")
        lines.append("-" * 60)
        for i, (weight, bias) in enumerate(zip(self.weights, self.biases)):
            n_params = len(weight) + len(bias)
            lines.append(f"{i:3d}. Dense({weight.cols} -> {weight.rows})"
                         f"{'':<20} Params: {n_params:,}")
        lines.append("-" * 60)
        lines.append(f"Total parameters: {self.parameter_count():,} "
                     f"({self.weight_count()} weights + {self.bias_count()} biases)")
        lines.append("=" * 60)
        return '\n'.join(lines)

    @staticmethod
    def _as_vector(values, expected, label):
        if isinstance(values, Matrix):
            if values.cols != 1:
                raise DimensionMismatchError(
                    f"{label} must be a column vector, got {values.rows}x{values.cols}",
                    expected=expected, actual=len(values))
            if values.rows != expected:
                raise DimensionMismatchError(
                    f"{label} has {values.rows} values, network expects {expected}",
                    expected=expected, actual=values.rows)
            return values

        array = np.asarray(values, dtype=np.float64).reshape(-1)
        if array.size != expected:
            raise DimensionMismatchError(
                f"{label} has {array.size} values, network expects {expected}",
                expected=expected, actual=array.size)
        return Matrix.from_vector(array)

    def __repr__(self):
        return (f"Network(layer_sizes={self.layer_sizes}, "
                f"learning_rate={self.learning_rate}, "
                f"activation='{self.activation.name}')")


def _validate_layer_sizes(layer_sizes):
    sizes = list(layer_sizes) if layer_sizes is not None else []
    if len(sizes) < 2:
        raise InvalidConfigurationError(
            f"A network needs at least an input and an output layer, got {sizes}")
    for size in sizes:
        if (isinstance(size, bool) or not isinstance(size, (int, float, np.integer))
                or int(size) != size or size <= 0):
            raise InvalidConfigurationError(
                f"Layer sizes must be positive integers, got {sizes}")
    return [int(size) for size in sizes]


def _validate_learning_rate(learning_rate):
    try:
        rate = float(learning_rate)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(
            f"Learning rate must be a number, got {learning_rate!r}") from None
    if not np.isfinite(rate) or rate <= 0:
        raise InvalidConfigurationError(
            f"Learning rate must be positive, got {learning_rate}")
    return rate
