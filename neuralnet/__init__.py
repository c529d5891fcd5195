"""
Neural Network Library from Scratch
===================================

A small feedforward neural network library built on a NumPy matrix engine.
This library demonstrates the mechanics of training a network by hand:
- Dense layers with sigmoid (and other) activations
- Forward propagation with an activation cache
- Backpropagation with online gradient descent
- Versioned JSON checkpoints
- Built-in example problems (logic gates, parity, iris, ...)
"""

from .errors import (NeuralNetError, ShapeMismatchError, DimensionMismatchError,
                     UnknownExampleError, UnsupportedVersionError, CheckpointIOError,
                     InvalidConfigurationError, ActivationCacheError)
from .matrix import Matrix
from .activations import Sigmoid, Tanh, ReLU, Linear, get_activation
from .losses import MSELoss
from .network import Network
from .training import (TrainingController, TrainingConfig, TrainingResult,
                       TrainingStatus, CancellationToken, run_training)
from .checkpoint import (Checkpoint, CheckpointMetadata, save_checkpoint,
                         load_checkpoint)
from .examples import Example, EXAMPLES, get_example, list_examples, truth_table
from .utils import one_hot_encode, accuracy_score, confusion_matrix
from . import visualizations

__version__ = "1.0.0"
__all__ = [
    # Errors
    'NeuralNetError', 'ShapeMismatchError', 'DimensionMismatchError',
    'UnknownExampleError', 'UnsupportedVersionError', 'CheckpointIOError',
    'InvalidConfigurationError', 'ActivationCacheError',
    # Matrix engine
    'Matrix',
    # Activations and loss
    'Sigmoid', 'Tanh', 'ReLU', 'Linear', 'get_activation', 'MSELoss',
    # Main class
    'Network',
    # Training
    'TrainingController', 'TrainingConfig', 'TrainingResult', 'TrainingStatus',
    'CancellationToken', 'run_training',
    # Checkpoints
    'Checkpoint', 'CheckpointMetadata', 'save_checkpoint', 'load_checkpoint',
    # Examples
    'Example', 'EXAMPLES', 'get_example', 'list_examples', 'truth_table',
    # Utilities
    'one_hot_encode', 'accuracy_score', 'confusion_matrix',
]
