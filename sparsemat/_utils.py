from numbers import Integral

import numpy as np
import scipy.sparse

from ._matrix import SparseMatrix


def assert_eq(x, y):
    """
    Assert that two matrices have the same shape and the same entries.

    Either side can be a :obj:`SparseMatrix`, a :obj:`numpy.ndarray` or a
    :obj:`scipy.sparse` matrix.
    """
    xs = _as_sparse_matrix(x)
    ys = _as_sparse_matrix(y)

    assert xs.shape == ys.shape
    assert xs.nnz == ys.nnz
    assert sorted(xs.entries()) == sorted(ys.entries())
    assert all(v != 0 for _, _, v in xs.entries())
    assert all(v != 0 for _, _, v in ys.entries())


def _as_sparse_matrix(x):
    if isinstance(x, SparseMatrix):
        return x
    return SparseMatrix(np.asarray(x) if not scipy.sparse.issparse(x) else x)


def zeros(rows, cols, storage=None):
    """
    An all-zero matrix of the given shape.

    Examples
    --------
    >>> zeros(3, 2)
    <SparseMatrix: shape=(3, 2), nnz=0, storage=hashed>
    """
    return SparseMatrix((rows, cols), storage=storage)


def identity(n, storage=None):
    """
    The ``n`` by ``n`` identity matrix.

    Examples
    --------
    >>> identity(3).todense()  # doctest: +NORMALIZE_WHITESPACE
    array([[1, 0, 0],
           [0, 1, 0],
           [0, 0, 1]])
    """
    result = SparseMatrix((n, n), storage=storage)
    for i in range(n):
        result.set_element(i, i, 1)
    return result


def random(
    shape,
    density=None,
    nnz=None,
    random_state=None,
    low=-9,
    high=9,
    storage=None,
):
    """
    Generate a random sparse integer matrix.

    Parameters
    ----------
    shape : tuple[int, int]
        Shape of the matrix.
    density : float, optional
        Fraction of non-zero entries; default is 0.01. Mutually exclusive
        with ``nnz``.
    nnz : int, optional
        Number of non-zero entries. Mutually exclusive with ``density``.
    random_state : Union[numpy.random.Generator, int], optional
        Random number generator or seed.
    low, high : int, optional
        Inclusive bounds of the generated values. Zero is never generated.
    storage : str, optional
        The coordinate map to use, see :obj:`make_storage`.

    Returns
    -------
    SparseMatrix
        The generated matrix.

    Examples
    --------
    >>> s = random((10, 10), density=0.2, random_state=42)
    >>> s.nnz
    20
    """
    if nnz is not None and density is not None:
        raise ValueError("'density' and 'nnz' are mutually exclusive")

    if low > high or (low == 0 and high == 0):
        raise ValueError(f"Cannot draw non-zero values from [{low}, {high}].")

    result = SparseMatrix(shape, storage=storage)
    size = result.size

    if nnz is None:
        if density is None:
            density = 0.01
        if not 0 <= density <= 1:
            raise ValueError(f"density {density} is not in the unit interval")
        nnz = int(density * size)

    if not isinstance(nnz, Integral) or not 0 <= nnz <= size:
        raise ValueError(f"nnz={nnz} must be between 0 and {size}")

    rng = np.random.default_rng(random_state)

    flat = rng.choice(size, size=nnz, replace=False)
    rows, cols = np.unravel_index(flat, result.shape)

    candidates = np.array([v for v in range(low, high + 1) if v != 0], dtype=np.int64)
    values = rng.choice(candidates, size=nnz)

    for r, c, v in zip(rows.tolist(), cols.tolist(), values.tolist()):
        result.set_element(r, c, v)

    return result
