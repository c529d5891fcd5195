"""
Training Loop
=============

Drives online gradient descent over a dataset for a number of epochs.

Per epoch every example gets exactly one :meth:`Network.train_step`, in
dataset order (never shuffled, so runs with the same seed are
reproducible). The mean loss of the epoch is appended to the loss history
and reported to the progress sinks.

Progress sinks:
    Any callable ``sink(epoch, loss)``. Sinks are pure output channels:
    their return value is ignored and an exception raised by one is logged
    and swallowed so it can never abort or corrupt training.

Cancellation:
    A :class:`CancellationToken` may be set from another thread. It is
    checked before each epoch, never in the middle of one, so a stopped
    run always returns the network exactly as it was after its last
    completed epoch.

State machine::

    IDLE -> RUNNING -> COMPLETED
                    -> STOPPED   (cancelled between epochs)
                    -> FAILED    (bad data or checkpoint write error)
"""

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .checkpoint import CheckpointMetadata, save_checkpoint
from .errors import DimensionMismatchError, InvalidConfigurationError
from .examples import Example
from .network import Network

logger = logging.getLogger(__name__)

ProgressSink = Callable[[int, float], object]


class TrainingStatus(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    COMPLETED = 'completed'
    STOPPED = 'stopped'
    FAILED = 'failed'


class CancellationToken:
    """Thread-safe flag a caller sets to stop training at the next epoch boundary."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()


def _positive_int(name, value, allow_none=False):
    if value is None and allow_none:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return value


@dataclass
class TrainingConfig:
    """
    Settings for one training run.

    Args:
        epochs: Number of full passes over the dataset (> 0)
        progress_every: Report progress every N epochs (the last epoch is
            always reported)
        checkpoint_path: Where to write checkpoints; None disables them
        checkpoint_interval: Also checkpoint every N epochs; None means
            only at the end of the run
        example_name: Recorded in checkpoint metadata
        seed: Recorded in checkpoint metadata
    """

    epochs: int
    progress_every: int = 1
    checkpoint_path: Optional[str] = None
    checkpoint_interval: Optional[int] = None
    example_name: Optional[str] = None
    seed: Optional[int] = None

    def __post_init__(self):
        _positive_int('epochs', self.epochs)
        _positive_int('progress_every', self.progress_every)
        _positive_int('checkpoint_interval', self.checkpoint_interval, allow_none=True)


@dataclass
class TrainingResult:
    """Outcome of a training run."""

    status: TrainingStatus
    network: Network
    loss_history: List[float] = field(default_factory=list)
    epochs_completed: int = 0
    checkpoint_path: Optional[str] = None

    @property
    def final_loss(self):
        return self.loss_history[-1] if self.loss_history else None


class TrainingController:
    """
    Runs the epoch loop for one network.

    The controller trains ``network`` in place; clone it first with
    :meth:`Network.copy` if the original must stay untouched. Only one
    controller should drive a given network at a time.

    Args:
        network: Network to train
        config: TrainingConfig
        callbacks: Progress sinks called as ``sink(epoch, loss)``
        cancel_token: Optional CancellationToken
    """

    def __init__(self, network, config, callbacks=None, cancel_token=None):
        self.network = network
        self.config = config
        self.callbacks = list(callbacks or [])
        self.cancel_token = cancel_token or CancellationToken()
        self.status = TrainingStatus.IDLE
        self.loss_history = []
        self.epochs_completed = 0

    def add_callback(self, callback):
        self.callbacks.append(callback)

    def cancel(self):
        """Request a stop at the next epoch boundary."""
        self.cancel_token.cancel()

    def train(self, inputs, targets):
        """
        Train on parallel lists of input and target vectors.

        Returns:
            TrainingResult with status COMPLETED or STOPPED

        Raises:
            DimensionMismatchError: Empty or inconsistent data (status FAILED,
                weights untouched)
            CheckpointIOError: A checkpoint could not be written (status FAILED)
        """
        try:
            self._validate_data(inputs, targets)
        except DimensionMismatchError:
            self.status = TrainingStatus.FAILED
            raise

        self.status = TrainingStatus.RUNNING
        self.loss_history = []
        self.epochs_completed = 0
        epochs = self.config.epochs
        logger.info(
            f"Training {self.network.layer_sizes} on {len(inputs)} examples "
            f"for {epochs} epochs (lr={self.network.learning_rate})"
        )

        try:
            for epoch in range(1, epochs + 1):
                if self.cancel_token.cancelled:
                    logger.info(f"Training stopped after {self.epochs_completed} epochs")
                    self.status = TrainingStatus.STOPPED
                    break

                epoch_loss = 0.0
                for x, y in zip(inputs, targets):
                    epoch_loss += self.network.train_step(x, y)
                avg_loss = epoch_loss / len(inputs)

                self.loss_history.append(avg_loss)
                self.epochs_completed = epoch

                if epoch % self.config.progress_every == 0 or epoch == epochs:
                    self._emit_progress(epoch, avg_loss)

                interval = self.config.checkpoint_interval
                if interval and epoch % interval == 0 and epoch != epochs:
                    self._save_checkpoint()
            else:
                self.status = TrainingStatus.COMPLETED

            checkpoint_path = self._save_checkpoint()
        except Exception:
            self.status = TrainingStatus.FAILED
            raise

        logger.info(
            f"Training {self.status.value} after {self.epochs_completed} epochs, "
            f"final loss {self.loss_history[-1] if self.loss_history else float('nan'):.6f}"
        )
        return TrainingResult(
            status=self.status,
            network=self.network,
            loss_history=list(self.loss_history),
            epochs_completed=self.epochs_completed,
            checkpoint_path=checkpoint_path,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _validate_data(self, inputs, targets):
        if len(inputs) == 0:
            raise DimensionMismatchError("Training data is empty", expected=1, actual=0)
        if len(inputs) != len(targets):
            raise DimensionMismatchError(
                f"Got {len(inputs)} inputs but {len(targets)} targets",
                expected=len(inputs), actual=len(targets))
        n_in = self.network.input_size
        n_out = self.network.output_size
        for i, (x, y) in enumerate(zip(inputs, targets)):
            if len(x) != n_in:
                raise DimensionMismatchError(
                    f"Input {i} has {len(x)} values, network expects {n_in}",
                    expected=n_in, actual=len(x))
            if len(y) != n_out:
                raise DimensionMismatchError(
                    f"Target {i} has {len(y)} values, network outputs {n_out}",
                    expected=n_out, actual=len(y))

    def _emit_progress(self, epoch, loss):
        for callback in self.callbacks:
            try:
                callback(epoch, loss)
            except Exception as e:
                logger.warning(f"Progress callback {callback!r} failed at epoch {epoch}: {e}")

    def _save_checkpoint(self):
        path = self.config.checkpoint_path
        if not path:
            return None
        metadata = CheckpointMetadata.create(
            example=self.config.example_name,
            epoch=self.epochs_completed,
            total_epochs=self.config.epochs,
            learning_rate=self.network.learning_rate,
            seed=self.config.seed,
        )
        return save_checkpoint(self.network, metadata, path)


def run_training(network, dataset, epochs, progress_sink=None, *,
                 progress_every=1, checkpoint_path=None, checkpoint_interval=None,
                 cancel_token=None, seed=None):
    """
    Train ``network`` on ``dataset`` for ``epochs`` epochs.

    Args:
        network: Network to train in place
        dataset: An Example or an ``(inputs, targets)`` pair
        epochs: Number of epochs
        progress_sink: Optional ``sink(epoch, loss)``
        progress_every: Sink cadence in epochs
        checkpoint_path, checkpoint_interval: Auto-checkpointing
        cancel_token: Optional CancellationToken
        seed: Recorded in checkpoint metadata

    Returns:
        TrainingResult
    """
    if isinstance(dataset, Example):
        inputs = [list(x) for x in dataset.inputs]
        targets = [list(y) for y in dataset.targets]
        example_name = dataset.name
    else:
        inputs, targets = dataset
        example_name = None

    config = TrainingConfig(
        epochs=epochs,
        progress_every=progress_every,
        checkpoint_path=checkpoint_path,
        checkpoint_interval=checkpoint_interval,
        example_name=example_name,
        seed=seed,
    )
    callbacks = [progress_sink] if progress_sink is not None else []
    controller = TrainingController(network, config, callbacks=callbacks,
                                    cancel_token=cancel_token)
    return controller.train(inputs, targets)
