"""
Built-in Examples
=================

Small, fixed training problems with a recommended architecture and the
hyperparameters known to train them:

    and, or      linearly separable logic gates          [2, 2, 1]
    xor          the classic non-linear gate             [2, 3, 1]
    parity3      odd number of ones among three bits     [3, 6, 1]
    quadrant     which quadrant a 2D point lies in       [2, 4, 4]
    adder2       sum of two 2-bit numbers as 3 bits      [4, 8, 3]
    iris         Fisher's iris species from measurements [4, 8, 3]
    pattern3x3   X, O, + and - on a 3x3 pixel grid       [9, 6, 4]

Multi-class examples use one-hot targets. Everything here is read-only.

Parity and the adder can settle in poor local minima for unlucky
initializations; the recommended seeds are ones that converge.
"""

from collections import namedtuple
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .errors import UnknownExampleError
from .utils import one_hot_encode, to_class_labels


@dataclass(frozen=True)
class Example:
    """A named training problem."""

    name: str
    description: str
    inputs: Tuple[Tuple[float, ...], ...]
    targets: Tuple[Tuple[float, ...], ...]
    recommended_arch: Tuple[int, ...]
    epochs: int
    learning_rate: float
    seed: Optional[int] = None
    class_names: Tuple[str, ...] = field(default=())

    @property
    def input_size(self):
        return len(self.inputs[0])

    @property
    def output_size(self):
        return len(self.targets[0])

    def __len__(self):
        return len(self.inputs)

    def pairs(self):
        """(input, target) pairs as lists, in dataset order."""
        return [(list(x), list(y)) for x, y in zip(self.inputs, self.targets)]


TruthTableRow = namedtuple('TruthTableRow', ['input', 'target', 'output', 'correct'])


def _tuples(rows):
    return tuple(tuple(float(v) for v in row) for row in rows)


def _bits(n, width):
    return [(n >> shift) & 1 for shift in reversed(range(width))]


def _gate(name, description, truth, epochs, learning_rate, seed=42):
    inputs = [[a, b] for a in (0, 1) for b in (0, 1)]
    targets = [[truth(a, b)] for a, b in inputs]
    return Example(
        name=name,
        description=description,
        inputs=_tuples(inputs),
        targets=_tuples(targets),
        recommended_arch=(2, 2, 1) if name != 'xor' else (2, 3, 1),
        epochs=epochs,
        learning_rate=learning_rate,
        seed=seed,
    )


def _parity3():
    inputs = [_bits(n, 3) for n in range(8)]
    targets = [[sum(bits) % 2] for bits in inputs]
    return Example(
        name='parity3',
        description='3-bit parity: 1 when an odd number of inputs are 1',
        inputs=_tuples(inputs),
        targets=_tuples(targets),
        recommended_arch=(3, 6, 1),
        epochs=20000,
        learning_rate=0.5,
        seed=123,
    )


def _quadrant():
    # Points at several radii in each quadrant, class 0..3 = I..IV
    offsets = [(0.2, 0.8), (0.5, 0.5), (0.8, 0.3), (1.0, 1.0), (0.3, 0.2)]
    signs = [(1, 1), (-1, 1), (-1, -1), (1, -1)]
    inputs = []
    labels = []
    for label, (sx, sy) in enumerate(signs):
        for dx, dy in offsets:
            inputs.append([sx * dx, sy * dy])
            labels.append(label)
    return Example(
        name='quadrant',
        description='Classify a 2D point into quadrant I, II, III or IV',
        inputs=_tuples(inputs),
        targets=_tuples(one_hot_encode(labels, 4)),
        recommended_arch=(2, 4, 4),
        epochs=15000,
        learning_rate=0.3,
        seed=42,
        class_names=('I', 'II', 'III', 'IV'),
    )


def _adder2():
    inputs = []
    targets = []
    for a in range(4):
        for b in range(4):
            inputs.append(_bits(a, 2) + _bits(b, 2))
            targets.append(_bits(a + b, 3))
    return Example(
        name='adder2',
        description='2-bit binary adder: [A1, A0, B1, B0] -> [S2, S1, S0]',
        inputs=_tuples(inputs),
        targets=_tuples(targets),
        recommended_arch=(4, 8, 3),
        epochs=20000,
        learning_rate=0.5,
        seed=42,
    )


# Sepal length, sepal width, petal length, petal width (cm), from Fisher (1936)
_IRIS = {
    0: [
        [5.1, 3.5, 1.4, 0.2], [4.9, 3.0, 1.4, 0.2], [4.7, 3.2, 1.3, 0.2],
        [4.6, 3.1, 1.5, 0.2], [5.0, 3.6, 1.4, 0.2], [5.4, 3.9, 1.7, 0.4],
        [4.6, 3.4, 1.4, 0.3], [5.0, 3.4, 1.5, 0.2], [4.4, 2.9, 1.4, 0.2],
        [4.9, 3.1, 1.5, 0.1],
    ],
    1: [
        [7.0, 3.2, 4.7, 1.4], [6.4, 3.2, 4.5, 1.5], [6.9, 3.1, 4.9, 1.5],
        [5.5, 2.3, 4.0, 1.3], [6.5, 2.8, 4.6, 1.5], [5.7, 2.8, 4.5, 1.3],
        [6.3, 3.3, 4.7, 1.6], [4.9, 2.4, 3.3, 1.0], [6.6, 2.9, 4.6, 1.3],
        [5.2, 2.7, 3.9, 1.4],
    ],
    2: [
        [6.3, 3.3, 6.0, 2.5], [5.8, 2.7, 5.1, 1.9], [7.1, 3.0, 5.9, 2.1],
        [6.3, 2.9, 5.6, 1.8], [6.5, 3.0, 5.8, 2.2], [7.6, 3.0, 6.6, 2.1],
        [4.9, 2.5, 4.5, 1.7], [7.3, 2.9, 6.3, 1.8], [6.7, 2.5, 5.8, 1.8],
        [7.2, 3.6, 6.1, 2.5],
    ],
}


def _iris():
    inputs = []
    labels = []
    for label, rows in _IRIS.items():
        inputs.extend(rows)
        labels.extend([label] * len(rows))
    return Example(
        name='iris',
        description='Iris species (setosa, versicolor, virginica) from sepal and petal size',
        inputs=_tuples(inputs),
        targets=_tuples(one_hot_encode(labels, 3)),
        recommended_arch=(4, 8, 3),
        epochs=15000,
        learning_rate=0.3,
        seed=42,
        class_names=('setosa', 'versicolor', 'virginica'),
    )


def _pattern3x3():
    patterns = [
        [1, 0, 1,
         0, 1, 0,
         1, 0, 1],
        [1, 1, 1,
         1, 0, 1,
         1, 1, 1],
        [0, 1, 0,
         1, 1, 1,
         0, 1, 0],
        [0, 0, 0,
         1, 1, 1,
         0, 0, 0],
    ]
    return Example(
        name='pattern3x3',
        description='Recognize X, O, + and - drawn on a 3x3 pixel grid',
        inputs=_tuples(patterns),
        targets=_tuples(one_hot_encode(range(4), 4)),
        recommended_arch=(9, 6, 4),
        epochs=15000,
        learning_rate=0.5,
        seed=42,
        class_names=('X', 'O', '+', '-'),
    )


EXAMPLES = {
    example.name: example
    for example in (
        _gate('and', 'AND gate: 1 only when both inputs are 1',
              lambda a, b: a & b, epochs=5000, learning_rate=0.5),
        _gate('or', 'OR gate: 1 when at least one input is 1',
              lambda a, b: a | b, epochs=5000, learning_rate=0.5),
        _gate('xor', 'XOR gate: 1 when the inputs differ (not linearly separable)',
              lambda a, b: a ^ b, epochs=10000, learning_rate=0.5),
        _parity3(),
        _quadrant(),
        _adder2(),
        _iris(),
        _pattern3x3(),
    )
}


def list_examples():
    """Names of all built-in examples, in catalog order."""
    return list(EXAMPLES)


def get_example(name):
    """
    Look up a built-in example by name (case-insensitive).

    Raises:
        UnknownExampleError: If no example has that name
    """
    key = name.lower() if isinstance(name, str) else name
    if key not in EXAMPLES:
        raise UnknownExampleError(name, available=EXAMPLES)
    return EXAMPLES[key]


def truth_table(network, example):
    """
    Evaluate ``network`` on every input of ``example``.

    Returns:
        List of TruthTableRow(input, target, output, correct). One-hot
        (classified) examples compare argmax; bit-valued examples such as
        the gates and the adder need every output on the right side of 0.5.
    """
    rows = []
    for inputs, targets in example.pairs():
        outputs = network.evaluate(inputs)
        if example.class_names:
            correct = to_class_labels([outputs])[0] == to_class_labels([targets])[0]
        else:
            correct = all((o > 0.5) == (t > 0.5) for o, t in zip(outputs, targets))
        rows.append(TruthTableRow(inputs, targets, outputs, bool(correct)))
    return rows


def example_accuracy(network, example):
    """Fraction of ``example`` rows the network classifies correctly."""
    rows = truth_table(network, example)
    return float(np.mean([row.correct for row in rows]))
