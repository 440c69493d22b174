from hypothesis import strategies as st
from hypothesis.strategies import composite

import sparsemat

values = st.integers(min_value=-50, max_value=50)
big_values = st.integers(min_value=-(2**70), max_value=2**70)


@composite
def gen_shape(draw, max_side=8):
    rows = draw(st.integers(min_value=1, max_value=max_side))
    cols = draw(st.integers(min_value=1, max_value=max_side))
    return rows, cols


@composite
def gen_entries(draw, shape, values=values):
    rows, cols = shape
    return draw(
        st.dictionaries(
            keys=st.tuples(
                st.integers(min_value=0, max_value=rows - 1),
                st.integers(min_value=0, max_value=cols - 1),
            ),
            values=values,
            max_size=rows * cols,
        )
    )


@composite
def gen_matrix(draw, shape=None, values=values, storage=None):
    if shape is None:
        shape = draw(gen_shape())
    if storage is None:
        storage = draw(st.sampled_from(["hashed", "dict"]))
    data = draw(gen_entries(shape, values=values))
    return sparsemat.SparseMatrix(shape, data, storage=storage)


@composite
def gen_same_shape_pair(draw, values=values):
    shape = draw(gen_shape())
    return draw(gen_matrix(shape, values=values)), draw(gen_matrix(shape, values=values))


@composite
def gen_matmul_pair(draw, values=values):
    n, k = draw(gen_shape())
    m = draw(st.integers(min_value=1, max_value=8))
    return (
        draw(gen_matrix((n, k), values=values)),
        draw(gen_matrix((k, m), values=values)),
    )


def dense_of(matrix):
    """Dense nested lists of Python ints, safe for values beyond int64."""
    out = [[0] * matrix.num_cols for _ in range(matrix.num_rows)]
    for r, c, v in matrix.entries():
        out[r][c] = v
    return out


def dense_matmul(a, b):
    n, k, m = len(a), len(b), len(b[0])
    return [[sum(a[i][t] * b[t][j] for t in range(k)) for j in range(m)] for i in range(n)]
