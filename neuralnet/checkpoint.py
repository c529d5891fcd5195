"""
Checkpoint Persistence
======================

Versioned JSON snapshots of a network plus its training metadata.

A checkpoint is self-describing: architecture, activation name, learning
rate and every weight and bias travel with the metadata, so a file can be
resumed, evaluated or inspected with no other context.

File layout (version 1)::

    {
      "version": 1,
      "network": {
        "layers": [2, 3, 1],
        "activation": "sigmoid",
        "learning_rate": 0.5,
        "weights": [{"rows": 3, "cols": 2, "data": [...]}, ...],
        "biases":  [{"rows": 3, "cols": 1, "data": [...]}, ...]
      },
      "metadata": {
        "example": "xor",
        "epoch": 10000,
        "total_epochs": 10000,
        "learning_rate": 0.5,
        "timestamp": "2024-01-01T12:00:00+00:00",
        "seed": 42
      }
    }

Matrices are stored layer by layer, values in row-major order. Floats are
written with Python's shortest round-trip representation, so loading
gives back bit-identical weights.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .errors import CheckpointIOError, UnsupportedVersionError
from .matrix import Matrix
from .network import Network

# Configure module logger
logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
SUPPORTED_VERSIONS = (1,)


@dataclass
class CheckpointMetadata:
    """Training context stored next to the network."""

    example: Optional[str]
    epoch: int
    total_epochs: int
    learning_rate: float
    timestamp: str
    seed: Optional[int] = None

    @classmethod
    def create(cls, example, epoch, total_epochs, learning_rate, seed=None):
        """Metadata stamped with the current UTC time."""
        return cls(
            example=example,
            epoch=int(epoch),
            total_epochs=int(total_epochs),
            learning_rate=float(learning_rate),
            timestamp=datetime.now(timezone.utc).isoformat(),
            seed=seed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CheckpointMetadata':
        return cls(
            example=data.get('example'),
            epoch=int(data['epoch']),
            total_epochs=int(data.get('total_epochs', data['epoch'])),
            learning_rate=float(data['learning_rate']),
            timestamp=str(data['timestamp']),
            seed=data.get('seed'),
        )


@dataclass
class Checkpoint:
    """A loaded checkpoint. Unpacks as ``network, metadata``."""

    network: Network
    metadata: CheckpointMetadata

    def __iter__(self):
        return iter((self.network, self.metadata))


def _matrix_to_dict(matrix: Matrix) -> Dict[str, Any]:
    return {'rows': matrix.rows, 'cols': matrix.cols, 'data': matrix.to_list()}


def _matrix_from_dict(data: Dict[str, Any]) -> Matrix:
    return Matrix(data['rows'], data['cols'], data['data'])


def network_to_dict(network: Network) -> Dict[str, Any]:
    """Serializable description of the full network state."""
    return {
        'layers': list(network.layer_sizes),
        'activation': network.activation.name,
        'learning_rate': network.learning_rate,
        'weights': [_matrix_to_dict(w) for w in network.weights],
        'biases': [_matrix_to_dict(b) for b in network.biases],
    }


def network_from_dict(data: Dict[str, Any]) -> Network:
    """Inverse of :func:`network_to_dict`."""
    return Network.from_parameters(
        layer_sizes=data['layers'],
        weights=[_matrix_from_dict(w) for w in data['weights']],
        biases=[_matrix_from_dict(b) for b in data['biases']],
        learning_rate=data['learning_rate'],
        activation=data.get('activation', 'sigmoid'),
    )


def checkpoint_to_dict(network: Network, metadata: CheckpointMetadata) -> Dict[str, Any]:
    return {
        'version': FORMAT_VERSION,
        'network': network_to_dict(network),
        'metadata': metadata.to_dict(),
    }


def checkpoint_from_dict(data: Dict[str, Any]) -> Checkpoint:
    """
    Build a Checkpoint from a parsed document.

    Raises:
        UnsupportedVersionError: Unknown or missing ``version``
        CheckpointIOError: Missing fields or inconsistent shapes
    """
    if not isinstance(data, dict):
        raise CheckpointIOError(
            f"Checkpoint must be a JSON object, got {type(data).__name__}")

    version = data.get('version')
    if type(version) is not int or version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(version, SUPPORTED_VERSIONS)

    try:
        network = network_from_dict(data['network'])
        metadata = CheckpointMetadata.from_dict(data['metadata'])
    except (KeyError, TypeError, ValueError) as e:
        raise CheckpointIOError(f"Malformed checkpoint: {e}") from e

    return Checkpoint(network=network, metadata=metadata)


def _ensure_directory(path: str) -> None:
    """Create the parent directory of ``path`` if it doesn't exist."""
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)


def save_checkpoint(network: Network, metadata: CheckpointMetadata, path) -> str:
    """
    Write ``network`` and ``metadata`` to ``path`` as a version 1 checkpoint.

    The document goes to a temporary sibling first and is then moved over
    ``path``, so a reader never observes a partially written file.

    Returns:
        The path written

    Raises:
        CheckpointIOError: If the file cannot be written
    """
    path = os.fspath(path)
    document = checkpoint_to_dict(network, metadata)
    tmp_path = f"{path}.tmp"

    try:
        _ensure_directory(path)
        with open(tmp_path, 'w', encoding='utf-8') as handle:
            json.dump(document, handle, indent=2)
            handle.write('\n')
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error(f"Failed to write checkpoint '{path}': {e}")
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise CheckpointIOError(f"Failed to write checkpoint '{path}': {e}") from e

    logger.info(
        f"Saved checkpoint '{path}' with architecture {network.layer_sizes}, "
        f"epoch={metadata.epoch}/{metadata.total_epochs}"
    )
    return path


def load_checkpoint(path) -> Checkpoint:
    """
    Read a checkpoint written by :func:`save_checkpoint`.

    Returns:
        Checkpoint (unpackable as ``network, metadata``)

    Raises:
        CheckpointIOError: Missing or unreadable file, invalid JSON or
            malformed content
        UnsupportedVersionError: Unknown format version
    """
    path = os.fspath(path)
    try:
        with open(path, 'r', encoding='utf-8') as handle:
            data = json.load(handle)
    except FileNotFoundError as e:
        raise CheckpointIOError(f"Checkpoint not found: '{path}'") from e
    except OSError as e:
        raise CheckpointIOError(f"Failed to read checkpoint '{path}': {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CheckpointIOError(f"Failed to parse checkpoint '{path}': {e}") from e

    checkpoint = checkpoint_from_dict(data)
    logger.info(
        f"Loaded checkpoint '{path}' with architecture "
        f"{checkpoint.network.layer_sizes}"
    )
    return checkpoint
