from collections.abc import Iterable, Mapping
from numbers import Integral

import numpy as np
import scipy.sparse

from ._common import INT64_MAX, entry_arrays, multiply_entries
from ._coordinate_map import make_storage
from ._errors import DimensionMismatchError, IncompatibleDimensionsError


class SparseMatrix:
    """
    A two-dimensional sparse matrix of integers.

    Only the non-zero entries are kept, in a coordinate map keyed by
    ``(row, col)``. Reading an entry that was never written returns zero, and
    writing a zero deletes the entry.

    Parameters
    ----------
    shape : tuple[int, int]
        The number of rows and columns. Both must be positive and fit into
        ``int64``. A
        :obj:`numpy.ndarray` or a :obj:`scipy.sparse` matrix can be passed
        instead, in which case it is converted.
    data : dict, optional
        Initial entries as ``{(row, col): value}``. Zeros are ignored.
    storage : str, optional
        ``"hashed"`` or ``"dict"``, see :obj:`make_storage`.

    Attributes
    ----------
    shape : tuple[int, int]
        The dimensions of the matrix. They never change.

    See Also
    --------
    load : Read a matrix from a text file.

    Examples
    --------
    >>> s = SparseMatrix((3, 4), {(0, 1): 5, (2, 3): -1, (1, 1): 0})
    >>> s
    <SparseMatrix: shape=(3, 4), nnz=2, storage=hashed>
    >>> s[0, 1], s[1, 1]
    (5, 0)
    >>> s[1, 1] = 9
    >>> s.nnz
    3
    """

    def __init__(self, shape, data=None, storage=None):
        if isinstance(shape, np.ndarray):
            ar = SparseMatrix.from_numpy(shape, storage=storage)
            self._make_shallow_copy_of(ar)
            return

        if scipy.sparse.issparse(shape):
            ar = SparseMatrix.from_scipy_sparse(shape, storage=storage)
            self._make_shallow_copy_of(ar)
            return

        if isinstance(shape, Iterable):
            shape = tuple(shape)

        if (
            not isinstance(shape, tuple)
            or len(shape) != 2
            or not all(isinstance(l, Integral) and int(l) > 0 for l in shape)
        ):
            raise ValueError(
                f"shape must be a tuple of two positive integers, got {shape!r}."
            )
        if any(int(l) > INT64_MAX for l in shape):
            raise ValueError(f"shape must fit into int64, got {shape!r}.")

        self.shape = tuple(int(l) for l in shape)
        self._storage = make_storage(storage)

        if data is None:
            return

        if not isinstance(data, Mapping):
            raise ValueError("data must be a dict.")

        for (row, col), value in data.items():
            self.set_element(row, col, value)

    def _make_shallow_copy_of(self, other):
        self.__dict__ = other.__dict__.copy()

    @classmethod
    def from_numpy(cls, x, storage=None):
        """
        Convert a two-dimensional integer :obj:`numpy.ndarray`.

        Examples
        --------
        >>> s = SparseMatrix.from_numpy(np.eye(3, dtype=np.int64))
        >>> s.nnz
        3
        """
        x = np.asarray(x)
        if x.ndim != 2:
            raise ValueError(f"Only 2-D arrays can be converted, got {x.ndim}-D.")
        if not np.issubdtype(x.dtype, np.integer):
            raise TypeError(f"Only integer arrays are supported, got {x.dtype}.")

        ar = cls(x.shape, storage=storage)
        rows, cols = np.nonzero(x)
        for r, c, v in zip(rows.tolist(), cols.tolist(), x[rows, cols].tolist()):
            ar._storage.put(r, c, v)

        return ar

    @classmethod
    def from_scipy_sparse(cls, x, storage=None):
        """
        Convert an integer :obj:`scipy.sparse` matrix or array.

        Duplicate entries are summed, as :obj:`scipy.sparse` does.
        """
        if not np.issubdtype(x.dtype, np.integer):
            raise TypeError(f"Only integer matrices are supported, got {x.dtype}.")

        x = scipy.sparse.coo_matrix(x, copy=True)
        x.sum_duplicates()

        ar = cls(x.shape, storage=storage)
        for r, c, v in zip(x.row.tolist(), x.col.tolist(), x.data.tolist()):
            if v != 0:
                ar._storage.put(r, c, v)

        return ar

    @classmethod
    def from_file(cls, path, storage=None):
        """Read a matrix from a text file. See :obj:`load`."""
        from ._io import load

        return load(path, storage=storage)

    @property
    def num_rows(self):
        return self.shape[0]

    @property
    def num_cols(self):
        return self.shape[1]

    @property
    def nnz(self):
        """
        The number of non-zero entries in this matrix.

        Examples
        --------
        >>> SparseMatrix((2, 2), {(0, 0): 1, (1, 0): 0}).nnz
        1
        """
        return len(self._storage)

    @property
    def size(self):
        return self.shape[0] * self.shape[1]

    @property
    def density(self):
        """The fraction of entries that are non-zero."""
        return self.nnz / self.size

    @property
    def storage(self):
        """The name of the coordinate map backing this matrix."""
        return self._storage.name

    def dimensions(self):
        return self.shape

    def non_zero_count(self):
        return self.nnz

    def _check_index(self, row, col):
        if not (isinstance(row, Integral) and isinstance(col, Integral)):
            raise IndexError("Matrix indices must be integers.")
        if not (0 <= row < self.shape[0] and 0 <= col < self.shape[1]):
            raise IndexError(
                f"Index ({row}, {col}) is out of bounds for a matrix of shape {self.shape}."
            )

    def get_element(self, row, col):
        """
        The value at ``(row, col)``, zero if nothing is stored there.

        Raises
        ------
        IndexError
            If the position lies outside the matrix.
        """
        self._check_index(row, col)
        return self._storage.get(int(row), int(col))

    def set_element(self, row, col, value):
        """
        Store ``value`` at ``(row, col)``. A zero deletes the entry.

        Raises
        ------
        IndexError
            If the position lies outside the matrix.
        TypeError
            If ``value`` is not an integer.
        """
        self._check_index(row, col)
        if not isinstance(value, Integral):
            raise TypeError(f"Only integer values are supported, got {value!r}.")

        row, col, value = int(row), int(col), int(value)
        if value == 0:
            self._storage.remove(row, col)
        else:
            self._storage.put(row, col, value)

    def __getitem__(self, key):
        row, col = self._split_key(key)
        return self.get_element(row, col)

    def __setitem__(self, key, value):
        row, col = self._split_key(key)
        self.set_element(row, col, value)

    @staticmethod
    def _split_key(key):
        if not isinstance(key, tuple) or len(key) != 2:
            raise IndexError("Index with exactly two integers: m[row, col].")
        return key

    def entries(self):
        """
        The non-zero entries as ``(row, col, value)`` tuples, in no
        particular order.
        """
        return self._storage.entries()

    def copy(self):
        new = SparseMatrix(self.shape, storage=self.storage)
        new._storage = self._storage.copy()
        return new

    def _combine(self, other, sign):
        result = self.copy()
        for row, col, value in other.entries():
            result.set_element(row, col, result._storage.get(row, col) + sign * value)

        return result

    def add(self, other):
        """
        Add two matrices of the same shape.

        Raises
        ------
        DimensionMismatchError
            If the shapes differ.

        Examples
        --------
        >>> a = SparseMatrix((2, 2), {(0, 0): 1, (1, 1): 2})
        >>> b = SparseMatrix((2, 2), {(0, 0): -1, (0, 1): 3})
        >>> sorted(a.add(b).entries())
        [(0, 1, 3), (1, 1, 2)]
        """
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Matrix dimensions must match for addition: {self.shape} != {other.shape}."
            )

        return self._combine(other, 1)

    def subtract(self, other):
        """
        Subtract a matrix of the same shape from this one.

        Raises
        ------
        DimensionMismatchError
            If the shapes differ.
        """
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Matrix dimensions must match for subtraction: {self.shape} != {other.shape}."
            )

        return self._combine(other, -1)

    def multiply(self, other):
        """
        The matrix product ``self @ other``.

        Raises
        ------
        IncompatibleDimensionsError
            If ``self.num_cols != other.num_rows``.

        Examples
        --------
        >>> a = SparseMatrix((2, 2), {(0, 0): 1, (1, 1): 2})
        >>> b = SparseMatrix((2, 2), {(0, 1): 3, (1, 0): 4})
        >>> sorted(a.multiply(b).entries())
        [(0, 1, 3), (1, 0, 8)]
        """
        if self.num_cols != other.num_rows:
            raise IncompatibleDimensionsError(
                "Matrix dimensions incompatible for multiplication: "
                f"{self.shape} @ {other.shape}."
            )

        result = SparseMatrix((self.num_rows, other.num_cols), storage=self.storage)
        return multiply_entries(self.entries(), other.entries(), result)

    dot = multiply

    def __add__(self, other):
        if not isinstance(other, SparseMatrix):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, SparseMatrix):
            return NotImplemented
        return self.subtract(other)

    def __matmul__(self, other):
        if not isinstance(other, SparseMatrix):
            return NotImplemented
        return self.multiply(other)

    def transpose(self):
        """
        A new matrix with rows and columns swapped.

        Examples
        --------
        >>> s = SparseMatrix((2, 3), {(0, 2): 4})
        >>> s.T.shape, s.T[2, 0]
        ((3, 2), 4)
        """
        result = SparseMatrix((self.num_cols, self.num_rows), storage=self.storage)
        for row, col, value in self.entries():
            result._storage.put(col, row, value)

        return result

    @property
    def T(self):
        return self.transpose()

    def todense(self):
        """
        Convert this matrix into a dense ``int64`` :obj:`numpy.ndarray`.

        This allocates ``num_rows * num_cols`` integers.

        Raises
        ------
        OverflowError
            If a value does not fit into ``int64``.
        """
        result = np.zeros(self.shape, dtype=np.int64)

        for row, col, value in self.entries():
            result[row, col] = value

        return result

    def to_scipy_sparse(self):
        """
        Convert this matrix into a :obj:`scipy.sparse.coo_matrix`.

        Raises
        ------
        OverflowError
            If a value does not fit into ``int64``.
        """
        rows, cols, data = entry_arrays(self.entries())
        if data is None:
            raise OverflowError("Matrix values do not fit into int64.")

        return scipy.sparse.coo_matrix((data, (rows, cols)), shape=self.shape)

    def save(self, path):
        """Write this matrix to a text file. See :obj:`save`."""
        from ._io import save

        save(self, path)

    def __str__(self):
        return "<SparseMatrix: shape={!s}, nnz={:d}, storage={!s}>".format(
            self.shape, self.nnz, self.storage
        )

    __repr__ = __str__
