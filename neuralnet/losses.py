"""
Loss Functions
==============

Squared-error loss for online (one example at a time) training.

Sign convention:
    The error signal is ``target - output``. Backpropagation multiplies it
    by the activation derivative and *adds* the resulting update to the
    weights, which moves them downhill on the loss below. Flipping the
    sign in one place but not the other makes training diverge.
"""

import numpy as np

from .errors import DimensionMismatchError


class MSELoss:
    """
    Mean Squared Error over a single output vector.

    Formula: L = (1/n) * sum((target - output)^2)

    The value is reported for progress tracking. The weight update itself
    follows the gradient of 0.5 * sum((target - output)^2), whose negative
    is exactly ``error(output, target)`` times the activation derivative.
    """

    def forward(self, predictions, targets):
        """Compute mean squared error between two equally shaped matrices."""
        self._check(predictions, targets)
        diff = targets.data - predictions.data
        return float(np.mean(diff ** 2))

    def error(self, predictions, targets):
        """Error signal ``targets - predictions`` as a Matrix."""
        self._check(predictions, targets)
        return targets.subtract(predictions)

    def __call__(self, predictions, targets):
        return self.forward(predictions, targets)

    @staticmethod
    def _check(predictions, targets):
        if predictions.shape != targets.shape:
            raise DimensionMismatchError(
                f"Target has {len(targets)} values but the output has {len(predictions)}",
                expected=len(predictions), actual=len(targets))
