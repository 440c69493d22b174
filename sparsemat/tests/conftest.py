import pytest

import sparsemat


@pytest.fixture(params=["hashed", "dict"])
def storage(request):
    return request.param


@pytest.fixture(scope="module")
def example_text():
    return "rows=3\ncols=3\n(0,0,5)\n(1,2,3)\n(5,5,9)"


@pytest.fixture
def small_pair():
    a = sparsemat.SparseMatrix((2, 2), {(0, 0): 1, (1, 1): 2})
    b = sparsemat.SparseMatrix((2, 2), {(0, 1): 3, (1, 0): 4})
    return a, b
