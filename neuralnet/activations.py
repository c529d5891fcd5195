"""
Activation Functions
====================

Element-wise non-linearities applied to each layer's pre-activation sum.

Every activation supplies its derivative in terms of its own *output*
rather than its input. Backpropagation only keeps the activated values of
each layer, so this is a hard requirement for anything added here:

    sigmoid:  y = 1 / (1 + e^-x)      dy/dx = y * (1 - y)
    tanh:     y = tanh(x)             dy/dx = 1 - y^2
    relu:     y = max(0, x)           dy/dx = 1 if y > 0 else 0
    linear:   y = x                   dy/dx = 1

Activations are a closed set looked up by name. A network stores the
activation object, a checkpoint stores only its ``name``, and
:func:`get_activation` rebuilds it on load.
"""

import numpy as np

from .errors import InvalidConfigurationError


class Activation:
    """Base class for all activation functions."""

    name = None

    def forward(self, x):
        """Apply activation function."""
        raise NotImplementedError

    def derivative(self, y):
        """Derivative of the activation, given the activation output ``y``."""
        raise NotImplementedError

    def __call__(self, x):
        return self.forward(x)

    def __eq__(self, other):
        return isinstance(other, Activation) and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"{type(self).__name__}()"


class Sigmoid(Activation):
    """
    Sigmoid: f(x) = 1 / (1 + exp(-x))

    Squashes output to (0, 1), which matches the 0/1 targets of every
    built-in example.

    Derivative:
        f'(x) = y * (1 - y) where y = f(x)
    """

    name = 'sigmoid'

    def forward(self, x):
        # Clip for numerical stability
        x_clipped = np.clip(x, -500, 500)
        return 1.0 / (1.0 + np.exp(-x_clipped))

    def derivative(self, y):
        return y * (1.0 - y)


class Tanh(Activation):
    """
    Hyperbolic Tangent: output range (-1, 1), zero-centered.

    Derivative:
        f'(x) = 1 - y^2
    """

    name = 'tanh'

    def forward(self, x):
        return np.tanh(x)

    def derivative(self, y):
        return 1.0 - y ** 2


class ReLU(Activation):
    """
    Rectified Linear Unit: f(x) = max(0, x)

    y > 0 exactly when x > 0, so the derivative is recoverable from y.
    """

    name = 'relu'

    def forward(self, x):
        return np.maximum(0.0, x)

    def derivative(self, y):
        return (y > 0).astype(np.float64)


class Linear(Activation):
    """Identity activation, for regression-style outputs."""

    name = 'linear'

    def forward(self, x):
        return x

    def derivative(self, y):
        return np.ones_like(y)


# ====================================
# Activation Registry
# ====================================

ACTIVATIONS = {
    'sigmoid': Sigmoid,
    'tanh': Tanh,
    'relu': ReLU,
    'linear': Linear,
}

SIGMOID = Sigmoid()


def get_activation(name):
    """
    Get activation function by name.

    Args:
        name: String name ('sigmoid', 'tanh', ...) or Activation instance

    Returns:
        Activation instance

    Raises:
        InvalidConfigurationError: If the name is not registered

    Example:
        >>> act = get_activation('sigmoid')
        >>> float(act(np.array(0.0)))
        0.5
    """
    if isinstance(name, Activation):
        return name

    if name is None:
        return SIGMOID

    if not isinstance(name, str):
        raise InvalidConfigurationError(
            f"Activation must be a name or an Activation instance, got {name!r}")

    name_lower = name.lower().replace('-', '_')
    if name_lower not in ACTIVATIONS:
        available = ', '.join(ACTIVATIONS.keys())
        raise InvalidConfigurationError(f"Unknown activation '{name}'. Available: {available}")

    return ACTIVATIONS[name_lower]()
