import operator

import pytest
from hypothesis import settings, given
from _utils import (
    big_values,
    dense_matmul,
    dense_of,
    gen_matmul_pair,
    gen_matrix,
    gen_same_shape_pair,
)

import numpy as np

import sparsemat
from sparsemat import (
    DimensionError,
    DimensionMismatchError,
    IncompatibleDimensionsError,
    SparseMatrix,
)
from sparsemat._common import _multiply_coo_coo, _multiply_python
from sparsemat._utils import assert_eq


def test_multiply_example(small_pair):
    a, b = small_pair
    c = a.multiply(b)

    assert c.shape == (2, 2)
    np.testing.assert_array_equal(c.todense(), [[0, 3], [8, 0]])


def test_add_subtract_example(small_pair):
    a, b = small_pair

    np.testing.assert_array_equal(a.add(b).todense(), [[1, 3], [4, 2]])
    np.testing.assert_array_equal(a.subtract(b).todense(), [[1, -3], [-4, 2]])


def test_cancelling_entries_are_removed(storage):
    a = SparseMatrix((2, 2), {(0, 0): 5, (1, 0): 1}, storage=storage)
    b = SparseMatrix((2, 2), {(0, 0): -5}, storage=storage)

    c = a.add(b)
    assert c.nnz == 1
    assert c.entries() == [(1, 0, 1)]

    d = a.subtract(a)
    assert d.nnz == 0


def test_multiply_cancellation_is_pruned(storage):
    a = SparseMatrix((1, 2), {(0, 0): 1, (0, 1): 1}, storage=storage)
    b = SparseMatrix((2, 1), {(0, 0): 3, (1, 0): -3}, storage=storage)

    c = a @ b
    assert c.shape == (1, 1)
    assert c.nnz == 0


@pytest.mark.parametrize("func", [operator.add, operator.sub])
def test_add_sub_shape_mismatch(func):
    a = SparseMatrix((2, 3))
    b = SparseMatrix((3, 2))

    with pytest.raises(DimensionMismatchError):
        func(a, b)
    with pytest.raises(DimensionError):
        a.add(b) if func is operator.add else a.subtract(b)


def test_multiply_incompatible():
    a = SparseMatrix((2, 3))
    b = SparseMatrix((2, 3))

    with pytest.raises(IncompatibleDimensionsError):
        a @ b
    with pytest.raises(DimensionError):
        a.multiply(b)


def test_multiply_rectangular():
    a = SparseMatrix((2, 3), {(0, 0): 1, (0, 2): 2, (1, 1): 3})
    b = SparseMatrix((3, 4), {(0, 3): 4, (2, 3): 5, (1, 0): 6, (2, 1): -1})

    c = a.dot(b)
    assert c.shape == (2, 4)
    np.testing.assert_array_equal(c.todense(), a.todense() @ b.todense())


@pytest.mark.parametrize("func", [operator.add, operator.sub, operator.matmul])
def test_foreign_operand(func):
    a = SparseMatrix((2, 2), {(0, 0): 1})

    with pytest.raises(TypeError):
        func(a, np.eye(2, dtype=np.int64).tolist())


@settings(deadline=None)
@given(gen_same_shape_pair())
def test_operands_not_mutated(pair):
    a, b = pair
    a_before = sorted(a.entries())
    b_before = sorted(b.entries())

    a + b
    a - b
    a @ b.T

    assert sorted(a.entries()) == a_before
    assert sorted(b.entries()) == b_before


@given(gen_same_shape_pair())
def test_add_matches_dense(pair):
    a, b = pair
    assert_eq(a + b, a.todense() + b.todense())
    assert_eq(a - b, a.todense() - b.todense())


@given(gen_matrix())
def test_additive_identity(s):
    z = sparsemat.zeros(*s.shape)
    assert_eq(s.add(z), s)
    assert_eq(s.subtract(z), s)


@given(gen_same_shape_pair())
def test_add_subtract_inverse(pair):
    a, b = pair
    assert_eq(a.add(b).subtract(b), a)


@settings(deadline=None)
@given(gen_matrix())
def test_multiply_identity(s):
    assert_eq(s @ sparsemat.identity(s.num_cols), s)
    assert_eq(sparsemat.identity(s.num_rows) @ s, s)


@settings(deadline=None)
@given(gen_matmul_pair())
def test_multiply_matches_dense(pair):
    a, b = pair
    c = a @ b

    assert c.shape == (a.num_rows, b.num_cols)
    assert_eq(c, a.todense() @ b.todense())


@settings(deadline=None)
@given(gen_matmul_pair(values=big_values))
def test_multiply_big_values(pair):
    a, b = pair
    c = a @ b

    expected = dense_matmul(dense_of(a), dense_of(b))
    assert dense_of(c) == expected


@given(gen_same_shape_pair(values=big_values))
def test_add_big_values(pair):
    a, b = pair
    c = a + b

    da, db = dense_of(a), dense_of(b)
    assert dense_of(c) == [[x + y for x, y in zip(ra, rb)] for ra, rb in zip(da, db)]


@settings(deadline=None)
@given(gen_matmul_pair())
def test_kernel_agrees_with_python_join(pair):
    a, b = pair
    expected = SparseMatrix((a.num_rows, b.num_cols))
    _multiply_python(a.entries(), b.entries(), expected.set_element, expected.get_element)

    assert sorted((a @ b).entries()) == sorted(expected.entries())


def test_multiply_overflow_boundary():
    big = 2**40
    a = SparseMatrix((1, 2), {(0, 0): big, (0, 1): big})
    b = SparseMatrix((2, 1), {(0, 0): big, (1, 0): big})

    # 2 * 2**80 does not fit into int64, the exact value must come back
    assert (a @ b)[0, 0] == 2 * big * big


def test_multiply_kernel_empty_right_operand():
    a_rows = np.array([0, 0, 1], dtype=np.int64)
    a_cols = np.array([0, 2, 1], dtype=np.int64)
    a_data = np.array([1, 2, 3], dtype=np.int64)
    empty = np.empty(0, dtype=np.int64)

    rows, labels, data = _multiply_coo_coo(
        a_rows, a_cols, a_data, empty, np.zeros(1, dtype=np.int64), empty, empty, 0
    )
    assert len(rows) == len(labels) == len(data) == 0


def test_multiply_kernel_accumulates_per_row():
    # a = [[1, 2], [0, 3]], b rows 0 and 1, columns relabelled to 0 and 1
    a_rows = np.array([0, 0, 1], dtype=np.int64)
    a_cols = np.array([0, 1, 1], dtype=np.int64)
    a_data = np.array([1, 2, 3], dtype=np.int64)
    b_keys = np.array([0, 1], dtype=np.int64)
    b_indptr = np.array([0, 2, 3], dtype=np.int64)
    b_labels = np.array([0, 1, 0], dtype=np.int64)
    b_data = np.array([4, -2, 2], dtype=np.int64)

    rows, labels, data = _multiply_coo_coo(
        a_rows, a_cols, a_data, b_keys, b_indptr, b_labels, b_data, 2
    )
    result = sorted(zip(rows.tolist(), labels.tolist(), data.tolist()))

    # (0, 0): 1 * 4 + 2 * 2, (0, 1): 1 * -2, (1, 0): 3 * 2
    assert result == [(0, 0, 8), (0, 1, -2), (1, 0, 6)]


def test_multiply_wide_sparse_operands():
    n = 10**12
    a = SparseMatrix((3, n), {(0, n - 1): 2, (0, 5): 1, (2, 5): -1})
    b = SparseMatrix((n, n), {(n - 1, n - 2): 3, (5, n - 2): 4, (5, 0): 7})

    c = a @ b
    assert c.shape == (3, n)
    assert sorted(c.entries()) == [(0, 0, 7), (0, n - 2, 10), (2, 0, -7), (2, n - 2, -4)]


def test_multiply_empty_operands(storage):
    a = SparseMatrix((3, 4), storage=storage)
    b = SparseMatrix((4, 2), {(0, 0): 1}, storage=storage)

    c = a @ b
    assert c.shape == (3, 2)
    assert c.nnz == 0
    assert c.storage == storage
