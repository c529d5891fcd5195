"""
Errors
======

Every failure the library raises derives from :class:`NeuralNetError`, so
callers can catch the whole family at once or a single kind precisely.
Each class also derives from the closest built-in exception, which keeps
``except ValueError`` style handlers working.

Nothing here is retried internally. If training diverges or lands in a
poor local minimum, re-running with another seed is the caller's call.
"""


class NeuralNetError(Exception):
    """Base class for all library errors."""


class ShapeMismatchError(NeuralNetError, ValueError):
    """Matrix operation on incompatible (or degenerate) dimensions."""

    def __init__(self, message, left=None, right=None):
        super().__init__(message)
        self.left = left
        self.right = right


class DimensionMismatchError(NeuralNetError, ValueError):
    """Input or target vector length does not match the network."""

    def __init__(self, message, expected=None, actual=None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class UnknownExampleError(NeuralNetError, LookupError):
    """Dataset name is not in the built-in catalog."""

    def __init__(self, name, available=()):
        self.name = name
        self.available = tuple(available)
        message = f"Unknown example '{name}'"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)

    def __str__(self):
        # LookupError would otherwise repr() the message
        return self.args[0]


class UnsupportedVersionError(NeuralNetError):
    """Checkpoint format version is not one this library can read."""

    def __init__(self, version, supported=()):
        self.version = version
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported checkpoint version {version!r} "
            f"(supported: {', '.join(str(v) for v in self.supported)})"
        )


class CheckpointIOError(NeuralNetError, OSError):
    """Checkpoint could not be read, parsed or written."""


class InvalidConfigurationError(NeuralNetError, ValueError):
    """Bad hyperparameters: learning rate, layer sizes, epochs, intervals."""


class ActivationCacheError(NeuralNetError, RuntimeError):
    """Backpropagation requested without a preceding forward pass."""
