"""
Utility Functions
=================

Helper functions for:
- One-hot encoding of class targets
- Classification metrics
- Parsing vectors typed on the command line
"""

import numpy as np


def one_hot_encode(labels, num_classes=None):
    """
    Convert integer labels to one-hot encoded vectors.

    Args:
        labels: Integer labels, shape (N,)
        num_classes: Number of classes (inferred if None)

    Returns:
        One-hot matrix, shape (N, num_classes)

    Example:
        >>> one_hot_encode([0, 2], 3).tolist()
        [[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]]
    """
    labels = np.asarray(labels).astype(int)

    if num_classes is None:
        num_classes = labels.max() + 1

    one_hot = np.zeros((len(labels), num_classes), dtype=np.float64)
    one_hot[np.arange(len(labels)), labels] = 1.0

    return one_hot


def to_class_labels(vectors):
    """
    Reduce output or target vectors to class indices.

    Single-value vectors are thresholded at 0.5; longer vectors use argmax.
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    if vectors.ndim == 1:
        vectors = vectors[:, np.newaxis]
    if vectors.shape[1] == 1:
        return (vectors[:, 0] > 0.5).astype(int)
    return np.argmax(vectors, axis=1)


def accuracy_score(y_true, y_pred):
    """
    Compute classification accuracy.

    Args:
        y_true: Target vectors, shape (N, outputs)
        y_pred: Network outputs, shape (N, outputs)

    Returns:
        Accuracy as float
    """
    return float(np.mean(to_class_labels(y_true) == to_class_labels(y_pred)))


def confusion_matrix(y_true, y_pred, num_classes=None):
    """
    Compute confusion matrix.

    Args:
        y_true: Target vectors or labels
        y_pred: Output vectors or labels
        num_classes: Number of classes

    Returns:
        Confusion matrix, shape (num_classes, num_classes)
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if y_true.ndim > 1:
        y_true = to_class_labels(y_true)
    if y_pred.ndim > 1:
        y_pred = to_class_labels(y_pred)

    if num_classes is None:
        num_classes = max(y_true.max(), y_pred.max()) + 1

    cm = np.zeros((num_classes, num_classes), dtype=int)
    for t, p in zip(y_true, y_pred):
        cm[t, p] += 1

    return cm


def parse_vector(text):
    """
    Parse a comma separated list of numbers, e.g. ``"1.0, 0, -2.5"``.

    Raises:
        ValueError: If the text is empty or a value is not a number
    """
    parts = [part.strip() for part in text.split(',')]
    if not any(parts):
        raise ValueError("Expected at least one comma separated number")
    try:
        return [float(part) for part in parts]
    except ValueError:
        raise ValueError(f"Could not parse '{text}' as comma separated numbers") from None
