from collections import defaultdict

import numba
import numpy as np

INT64_MAX = np.iinfo(np.int64).max


def entry_arrays(entries):
    """
    Split ``(row, col, value)`` triples into three ``int64`` arrays.

    Parameters
    ----------
    entries : list[tuple[int, int, int]]
        The entries, as returned by ``CoordinateMap.entries``.

    Returns
    -------
    rows, cols, data : numpy.ndarray
        The coordinates and values. ``data`` is ``None`` when a value does not
        fit into ``int64``.
    """
    n = len(entries)
    rows = np.empty(n, dtype=np.int64)
    cols = np.empty(n, dtype=np.int64)
    values = []
    for i, (r, c, v) in enumerate(entries):
        rows[i] = r
        cols[i] = c
        values.append(v)

    if values and max(abs(min(values)), abs(max(values))) > INT64_MAX:
        return rows, cols, None

    return rows, cols, np.array(values, dtype=np.int64)


def row_major_order(rows, cols):
    """
    The stable permutation that sorts coordinates by row, then column.

    Examples
    --------
    >>> row_major_order(np.array([1, 0, 1]), np.array([0, 2, -1]))
    array([1, 2, 0])
    """
    return np.lexsort((cols, rows))


@numba.jit(nopython=True, nogil=True)  # pragma: no cover
def _find_group(keys, k):
    g = np.searchsorted(keys, k)
    if g == len(keys) or keys[g] != k:
        return -1
    return g


@numba.jit(nopython=True, nogil=True)  # pragma: no cover
def _multiply_count_nnz(a_rows, a_cols, b_keys, b_indptr, b_labels, n_labels):
    """
    Count the coordinates of ``a @ b`` reached by at least one product.

    ``a`` is sorted by row. ``b`` is grouped by row: the entries of row
    ``b_keys[g]`` are ``b_indptr[g]:b_indptr[g + 1]``, and their columns are
    relabelled to ``0 .. n_labels - 1``.
    """
    next_ = np.full(n_labels, -1)
    nnz = 0
    start = 0

    while start < len(a_rows):
        end = start
        while end < len(a_rows) and a_rows[end] == a_rows[start]:
            end += 1

        head = -2
        length = 0
        for ii in range(start, end):
            g = _find_group(b_keys, a_cols[ii])
            if g == -1:
                continue
            for jj in range(b_indptr[g], b_indptr[g + 1]):
                k = b_labels[jj]
                if next_[k] == -1:
                    next_[k] = head
                    head = k
                    length += 1

        for _ in range(length):
            temp = head
            head = next_[head]
            next_[temp] = -1

        nnz += length
        start = end

    return nnz


@numba.jit(nopython=True, nogil=True)  # pragma: no cover
def _multiply_coo_coo(a_rows, a_cols, a_data, b_keys, b_indptr, b_labels, b_data, n_labels):
    """
    Utility function computing ``a @ b`` one output row at a time.

    Parameters
    ----------
    a_rows, a_cols, a_data : np.ndarray
        The entries of ``a``, sorted by row.
    b_keys, b_indptr : np.ndarray
        The distinct rows of ``b`` and where each one starts.
    b_labels, b_data : np.ndarray
        The relabelled columns and the values of ``b``, grouped by row.
    n_labels : int
        The number of distinct columns of ``b``.

    Returns
    -------
    rows, labels, data : np.ndarray
        The non-zero entries of the product, with relabelled columns.
    """
    # much of this is borrowed from:
    # https://github.com/scipy/scipy/blob/main/scipy/sparse/sparsetools/csr.h

    # calculate nnz before multiplying so we can use static arrays
    nnz = _multiply_count_nnz(a_rows, a_cols, b_keys, b_indptr, b_labels, n_labels)
    rows = np.empty(nnz, dtype=np.int64)
    labels = np.empty(nnz, dtype=np.int64)
    data = np.empty(nnz, dtype=np.int64)
    next_ = np.full(n_labels, -1)
    sums = np.zeros(n_labels, dtype=np.int64)
    nnz = 0
    start = 0

    while start < len(a_rows):
        i = a_rows[start]
        end = start
        while end < len(a_rows) and a_rows[end] == i:
            end += 1

        head = -2
        length = 0
        for ii in range(start, end):
            g = _find_group(b_keys, a_cols[ii])
            if g == -1:
                continue
            av = a_data[ii]
            for jj in range(b_indptr[g], b_indptr[g + 1]):
                k = b_labels[jj]
                sums[k] += av * b_data[jj]
                if next_[k] == -1:
                    next_[k] = head
                    head = k
                    length += 1

        for _ in range(length):
            if sums[head] != 0:
                rows[nnz] = i
                labels[nnz] = head
                data[nnz] = sums[head]
                nnz += 1

            temp = head
            head = next_[head]

            next_[temp] = -1
            sums[temp] = 0

        start = end

    return rows[:nnz], labels[:nnz], data[:nnz]


def _fits_int64(a_data, b_data):
    if a_data is None or b_data is None:
        return False
    if len(a_data) == 0 or len(b_data) == 0:
        return True

    a_max = int(np.abs(a_data).max())
    b_max = int(np.abs(b_data).max())
    # a single output cell sums at most min(nnz(a), nnz(b)) products
    return a_max * b_max * min(len(a_data), len(b_data)) <= INT64_MAX


def _multiply_python(a_entries, b_entries, put, get):
    b_by_row = defaultdict(list)
    for k, j, b in b_entries:
        b_by_row[k].append((j, b))

    for i, k, a in a_entries:
        for j, b in b_by_row.get(k, ()):
            put(i, j, get(i, j) + a * b)


def multiply_entries(a_entries, b_entries, out):
    """
    Accumulate the product of two entry lists into ``out``.

    Parameters
    ----------
    a_entries, b_entries : list[tuple[int, int, int]]
        The non-zero entries of the left and right operands.
    out : SparseMatrix
        An empty matrix of the result's shape. It is filled in place.

    Notes
    -----
    Each output row is accumulated on its own, joining the entries of ``a``
    in that row with the rows of ``b`` they reference, so only pairs that
    share an inner index are visited and memory grows with ``nnz(b)`` and
    the size of the result. The columns of ``b`` are relabelled to
    ``0 .. len(unique(cols)) - 1`` so the row accumulator does not depend on
    the width of ``b``. The compiled kernel handles everything that fits
    into ``int64``; larger magnitudes go through an equivalent pure Python
    join on arbitrary precision integers.
    """
    a_rows, a_cols, a_data = entry_arrays(a_entries)
    b_rows, b_cols, b_data = entry_arrays(b_entries)

    if not _fits_int64(a_data, b_data):
        _multiply_python(a_entries, b_entries, out.set_element, out.get_element)
        return out

    a_order = np.argsort(a_rows, kind="mergesort")
    b_order = np.argsort(b_rows, kind="mergesort")
    b_rows = b_rows[b_order]

    b_keys, b_starts = np.unique(b_rows, return_index=True)
    b_indptr = np.append(b_starts, len(b_rows)).astype(np.int64)
    b_columns, b_labels = np.unique(b_cols[b_order], return_inverse=True)

    rows, labels, data = _multiply_coo_coo(
        a_rows[a_order],
        a_cols[a_order],
        a_data[a_order],
        b_keys.astype(np.int64),
        b_indptr,
        b_labels.reshape(-1).astype(np.int64),
        b_data[b_order],
        len(b_columns),
    )
    cols = b_columns[labels]

    for r, c, v in zip(rows.tolist(), cols.tolist(), data.tolist()):
        out.set_element(r, c, v)

    return out
