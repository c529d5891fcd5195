"""
Tests for the Example Catalog and Utilities
===========================================
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from neuralnet.examples import (EXAMPLES, example_accuracy, get_example, list_examples,
                                truth_table)
from neuralnet.errors import UnknownExampleError
from neuralnet.network import Network
from neuralnet.utils import (accuracy_score, confusion_matrix, one_hot_encode,
                             parse_vector, to_class_labels)


class TestCatalog:
    """Tests for the built-in examples."""

    def test_names(self):
        assert list_examples() == ['and', 'or', 'xor', 'parity3', 'quadrant',
                                   'adder2', 'iris', 'pattern3x3']

    @pytest.mark.parametrize('name', list(EXAMPLES))
    def test_consistent_shapes(self, name):
        """Every row fits the recommended architecture."""
        example = EXAMPLES[name]
        assert len(example.inputs) == len(example.targets) == len(example) > 0
        assert example.recommended_arch[0] == example.input_size
        assert example.recommended_arch[-1] == example.output_size
        assert all(len(x) == example.input_size for x in example.inputs)
        assert all(len(t) == example.output_size for t in example.targets)
        assert example.epochs > 0 and example.learning_rate > 0

    def test_gate_truth_values(self):
        xor = get_example('xor')
        assert dict(zip(xor.inputs, xor.targets)) == {
            (0.0, 0.0): (0.0,), (0.0, 1.0): (1.0,), (1.0, 0.0): (1.0,), (1.0, 1.0): (0.0,)}
        assert get_example('and').targets == ((0.0,), (0.0,), (0.0,), (1.0,))
        assert get_example('and').recommended_arch == (2, 2, 1)
        assert xor.recommended_arch == (2, 3, 1)

    def test_adder_sums(self):
        for x, t in get_example('adder2').pairs():
            a = int(x[0]) * 2 + int(x[1])
            b = int(x[2]) * 2 + int(x[3])
            assert int(t[0]) * 4 + int(t[1]) * 2 + int(t[2]) == a + b

    def test_parity(self):
        for x, t in get_example('parity3').pairs():
            assert t[0] == sum(x) % 2

    @pytest.mark.parametrize('name', ['quadrant', 'iris', 'pattern3x3'])
    def test_one_hot_targets(self, name):
        example = get_example(name)
        assert len(example.class_names) == example.output_size
        for target in example.targets:
            assert sorted(target) == [0.0] * (len(target) - 1) + [1.0]

    def test_case_insensitive(self):
        assert get_example('XOR') is get_example('xor')

    def test_unknown(self):
        with pytest.raises(UnknownExampleError) as exc_info:
            get_example('nand')
        assert exc_info.value.name == 'nand'
        assert 'xor' in exc_info.value.available
        assert "Unknown example 'nand'" in str(exc_info.value)

    def test_unknown_is_lookup_error(self):
        with pytest.raises(LookupError):
            get_example('nand')

    def test_read_only(self):
        with pytest.raises(AttributeError):
            get_example('xor').epochs = 1


class TestTruthTable:
    """Tests for evaluating a network on an example."""

    def test_rows(self):
        network = Network([2, 3, 1], seed=0)
        rows = truth_table(network, get_example('xor'))
        assert len(rows) == 4
        for row in rows:
            assert row.output == network.evaluate(row.input)
            assert row.correct == ((row.output[0] > 0.5) == (row.target[0] > 0.5))

    def test_argmax_for_classes(self):
        network = Network([2, 4, 4], seed=0)
        example = get_example('quadrant')
        rows = truth_table(network, example)
        for row in rows:
            assert row.correct == (np.argmax(row.output) == np.argmax(row.target))
        assert example_accuracy(network, example) == sum(r.correct for r in rows) / len(rows)


class TestUtils:
    """Tests for encoding, metrics and parsing helpers."""

    def test_one_hot(self):
        encoded = one_hot_encode([0, 2, 1])
        assert encoded.shape == (3, 3)
        np.testing.assert_array_equal(encoded.argmax(axis=1), [0, 2, 1])

    def test_class_labels(self):
        assert to_class_labels([[0.2], [0.7]]).tolist() == [0, 1]
        assert to_class_labels([[0.1, 0.8, 0.1]]).tolist() == [1]

    def test_accuracy_and_confusion(self):
        y_true = [[1, 0], [0, 1], [0, 1]]
        y_pred = [[0.9, 0.1], [0.4, 0.6], [0.7, 0.3]]
        assert accuracy_score(y_true, y_pred) == pytest.approx(2 / 3)
        np.testing.assert_array_equal(confusion_matrix(y_true, y_pred), [[1, 0], [1, 1]])

    def test_parse_vector(self):
        assert parse_vector('1, 0.5,-2') == [1.0, 0.5, -2.0]

    @pytest.mark.parametrize('text', ['', '1,,2', 'a,b'])
    def test_parse_vector_invalid(self, text):
        with pytest.raises(ValueError):
            parse_vector(text)
