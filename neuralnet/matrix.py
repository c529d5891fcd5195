"""
Matrix Engine
=============

A dense 2D grid of float64 values and the handful of linear-algebra
primitives that forward and backward propagation need.

Storage:
    Values live in one contiguous 1-D NumPy array in row-major order,
    so element (i, j) sits at index ``i * cols + j``. The length of the
    backing array is always ``rows * cols`` and the shape never changes
    after construction.

Purity:
    ``add``, ``subtract``, ``elementwise_multiply``, ``dot``,
    ``transpose``, ``map``, ``map_array`` and ``scale`` allocate and return
    a new matrix.
    The only mutating operation is :meth:`Matrix.add_inplace`, which the
    network uses for the weight-update step.

Example:
    >>> a = Matrix.from_rows([[1, 2], [3, 4]])
    >>> a.dot(Matrix.identity(2)) == a
    True
    >>> a.transpose().to_rows()
    [[1.0, 3.0], [2.0, 4.0]]
"""

import numpy as np

from .errors import ShapeMismatchError


class Matrix:
    """
    Row-major dense matrix.

    Args:
        rows: Number of rows (> 0)
        cols: Number of columns (> 0)
        data: Optional flat sequence of ``rows * cols`` values in row-major
            order. Zero-filled when omitted. The values are copied.

    Raises:
        ShapeMismatchError: Degenerate shape or wrong data length
    """

    __slots__ = ('rows', 'cols', 'data')

    def __init__(self, rows, cols, data=None):
        rows = int(rows)
        cols = int(cols)
        if rows <= 0 or cols <= 0:
            raise ShapeMismatchError(
                f"Matrix dimensions must be positive, got {rows}x{cols}",
                left=(rows, cols))

        if data is None:
            values = np.zeros(rows * cols, dtype=np.float64)
        else:
            values = np.array(data, dtype=np.float64).reshape(-1)
            if values.size != rows * cols:
                raise ShapeMismatchError(
                    f"Expected {rows * cols} values for a {rows}x{cols} matrix, "
                    f"got {values.size}",
                    left=(rows, cols))

        self.rows = rows
        self.cols = cols
        self.data = values

    # ------------------------------------------------------------------
    # Constructors

    @classmethod
    def zeros(cls, rows, cols):
        """Zero-filled matrix."""
        return cls(rows, cols)

    @classmethod
    def random(cls, rows, cols, low=-1.0, high=1.0, seed=None, rng=None):
        """
        Matrix with values drawn uniformly from ``[low, high)``.

        Args:
            rows, cols: Shape
            low, high: Bounds of the uniform distribution
            seed: Seed for a fresh generator (ignored when ``rng`` is given)
            rng: Existing ``numpy.random.Generator`` to draw from, so several
                matrices can share one reproducible stream

        Returns:
            New Matrix
        """
        if rng is None:
            rng = np.random.default_rng(seed)
        matrix = cls(rows, cols)
        matrix.data = rng.uniform(low, high, size=matrix.rows * matrix.cols)
        return matrix

    @classmethod
    def from_vector(cls, values):
        """Column vector (n x 1) from a flat sequence."""
        values = np.array(values, dtype=np.float64).reshape(-1)
        return cls(values.size, 1, values)

    @classmethod
    def from_rows(cls, rows):
        """Matrix from a list of equally long rows."""
        array = np.array(rows, dtype=np.float64)
        if array.ndim != 2:
            raise ShapeMismatchError(
                f"Rows must form a 2D grid, got array with shape {array.shape}")
        return cls(array.shape[0], array.shape[1], array)

    @classmethod
    def from_numpy(cls, array):
        """Matrix from a 2D NumPy array (1-D arrays become column vectors)."""
        array = np.asarray(array, dtype=np.float64)
        if array.ndim == 1:
            return cls.from_vector(array)
        if array.ndim != 2:
            raise ShapeMismatchError(
                f"Expected a 1D or 2D array, got shape {array.shape}")
        return cls(array.shape[0], array.shape[1], array)

    @classmethod
    def identity(cls, n):
        """n x n identity matrix."""
        return cls(n, n, np.eye(n, dtype=np.float64))

    # ------------------------------------------------------------------
    # Accessors

    @property
    def shape(self):
        return (self.rows, self.cols)

    def __len__(self):
        return self.data.size

    def get(self, i, j):
        """Element at row ``i``, column ``j``."""
        self._check_index(i, j)
        return float(self.data[i * self.cols + j])

    def set(self, i, j, value):
        """Overwrite element at row ``i``, column ``j``."""
        self._check_index(i, j)
        self.data[i * self.cols + j] = value

    def __getitem__(self, index):
        i, j = index
        return self.get(i, j)

    def _check_index(self, i, j):
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(
                f"Index ({i}, {j}) out of range for {self.rows}x{self.cols} matrix")

    def to_numpy(self):
        """Copy of the contents as a (rows, cols) NumPy array."""
        return self._grid().copy()

    def to_list(self):
        """Flat row-major list of floats."""
        return self.data.tolist()

    def to_rows(self):
        """Contents as a list of row lists."""
        return self._grid().tolist()

    def copy(self):
        return Matrix(self.rows, self.cols, self.data)

    def _grid(self):
        # View, not a copy
        return self.data.reshape(self.rows, self.cols)

    # ------------------------------------------------------------------
    # Pure operations

    def add(self, other):
        """Element-wise sum."""
        self._require_same_shape(other, 'add')
        return Matrix(self.rows, self.cols, self.data + other.data)

    def subtract(self, other):
        """Element-wise difference ``self - other``."""
        self._require_same_shape(other, 'subtract')
        return Matrix(self.rows, self.cols, self.data - other.data)

    def elementwise_multiply(self, other):
        """Hadamard product."""
        self._require_same_shape(other, 'multiply')
        return Matrix(self.rows, self.cols, self.data * other.data)

    def dot(self, other):
        """
        Matrix product ``self x other``.

        Raises:
            ShapeMismatchError: If ``self.cols != other.rows``
        """
        if self.cols != other.rows:
            raise ShapeMismatchError(
                f"Cannot multiply {self.rows}x{self.cols} by "
                f"{other.rows}x{other.cols}: inner dimensions differ",
                left=self.shape, right=other.shape)
        product = self._grid() @ other._grid()
        return Matrix(self.rows, other.cols, product)

    def transpose(self):
        return Matrix(self.cols, self.rows, self._grid().T)

    def map(self, func):
        """
        Apply an element-wise transform to every value.

        ``func`` maps one float to one float (``math.exp``,
        ``lambda x: 1.0 if x > 0 else 0.0``). NumPy ufuncs are applied to
        the whole backing array at once.
        """
        if isinstance(func, np.ufunc):
            return self.map_array(func)
        return self.map_array(np.vectorize(func, otypes=[np.float64]))

    def map_array(self, func):
        """
        Apply ``func`` to a copy of the whole backing array.

        ``func`` must act element by element and keep the number of values,
        e.g. an activation's ``forward``.
        """
        mapped = np.asarray(func(self.data.copy()), dtype=np.float64)
        if mapped.shape != self.data.shape:
            raise ShapeMismatchError(
                f"Mapped function changed the number of values from "
                f"{self.data.size} to {mapped.size}")
        return Matrix(self.rows, self.cols, mapped)

    def scale(self, scalar):
        """Multiply every element by ``scalar``."""
        return Matrix(self.rows, self.cols, self.data * float(scalar))

    # ------------------------------------------------------------------
    # In-place update path

    def add_inplace(self, other):
        """
        ``self += other`` without reallocating the backing array.

        Only the weight-update step uses this; everything else stays pure.
        """
        self._require_same_shape(other, 'add_inplace')
        self.data += other.data
        return self

    # ------------------------------------------------------------------
    # Operators and comparisons

    def __add__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, other):
        if isinstance(other, Matrix):
            return self.elementwise_multiply(other)
        if isinstance(other, (int, float, np.floating, np.integer)):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, (int, float, np.floating, np.integer)):
            return self.scale(other)
        return NotImplemented

    def __matmul__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.dot(other)

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.data, other.data))

    __hash__ = None

    def allclose(self, other, rtol=1e-9, atol=1e-12):
        """Shape equality plus element-wise closeness."""
        return self.shape == other.shape and bool(
            np.allclose(self.data, other.data, rtol=rtol, atol=atol))

    def _require_same_shape(self, other, operation):
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"Cannot {operation} {self.rows}x{self.cols} and "
                f"{other.rows}x{other.cols} matrices: shapes differ",
                left=self.shape, right=other.shape)

    def __repr__(self):
        return f"Matrix({self.rows}x{self.cols}, {self.to_rows()})"
