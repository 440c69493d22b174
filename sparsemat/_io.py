import os
import re
import tempfile
import warnings
from collections import namedtuple
from contextlib import suppress
from pathlib import Path

import numpy as np

from ._common import INT64_MAX, row_major_order
from ._errors import FormatError, MatrixIOError, SkippedEntriesWarning
from ._matrix import SparseMatrix

ParseStats = namedtuple("ParseStats", ["processed", "skipped"])

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_int(text):
    """
    Parse a strict decimal integer.

    Surrounding whitespace is ignored. Otherwise only an optional leading
    sign followed by ASCII digits is accepted.

    Raises
    ------
    ValueError
        If ``text`` is empty, contains a decimal point, or contains anything
        besides the sign and the digits.

    Examples
    --------
    >>> parse_int(" -42 ")
    -42
    >>> parse_int("+7")
    7
    >>> parse_int("1.0")
    Traceback (most recent call last):
        ...
    ValueError: Floating point values are not allowed: '1.0'
    """
    text = text.strip()

    if "." in text:
        raise ValueError(f"Floating point values are not allowed: {text!r}")
    if not text:
        raise ValueError("Empty string is not an integer")
    if _INT_PATTERN.fullmatch(text) is None:
        raise ValueError(f"Invalid integer format: {text!r}")

    return int(text)


def _parse_dimension(line, prefix, lineno):
    if line is None or not line.startswith(prefix):
        raise FormatError(f"Expected a line starting with {prefix!r}", lineno)

    try:
        value = parse_int(line[len(prefix) :])
    except ValueError as e:
        raise FormatError(str(e), lineno) from e

    if value <= 0:
        raise FormatError(f"{prefix[:-1]} must be positive, got {value}", lineno)
    if value > INT64_MAX:
        raise FormatError(f"{prefix[:-1]} is too large: {value}", lineno)

    return value


def _parse_entry(line, lineno):
    if not (line.startswith("(") and line.endswith(")")):
        raise FormatError("Entry must be wrapped in parentheses", lineno)

    fields = line[1:-1].split(",")
    if len(fields) != 3:
        raise FormatError(f"Expected 3 fields, got {len(fields)}", lineno)

    try:
        return tuple(parse_int(f) for f in fields)
    except ValueError as e:
        raise FormatError(str(e), lineno) from e


def _parse_lines(lines, storage=None):
    lines = iter(lines)
    num_rows = _parse_dimension(next(lines, None), "rows=", 1)
    num_cols = _parse_dimension(next(lines, None), "cols=", 2)

    matrix = SparseMatrix((num_rows, num_cols), storage=storage)
    processed = 0
    skipped = 0

    for lineno, line in enumerate(lines, start=3):
        line = line.strip()
        if not line:
            continue

        row, col, value = _parse_entry(line, lineno)

        if not (0 <= row < num_rows and 0 <= col < num_cols):
            skipped += 1
            continue

        matrix.set_element(row, col, value)
        processed += 1

    from ._settings import WARN_ON_SKIPPED

    if WARN_ON_SKIPPED and skipped:
        warnings.warn(
            f"Skipped {skipped} entries outside of the declared shape "
            f"({num_rows}, {num_cols}); processed {processed}.",
            SkippedEntriesWarning,
            stacklevel=3,
        )

    return matrix, ParseStats(processed, skipped)


def loads(text, storage=None, return_stats=False):
    """
    Parse a matrix from its text description.

    The description is a ``rows=<n>`` line, a ``cols=<m>`` line, then one
    ``(<row>, <col>, <value>)`` line per entry. Blank entry lines are ignored.
    Entries outside of the declared shape are dropped and counted as skipped.

    Parameters
    ----------
    text : str
        The matrix description.
    storage : str, optional
        The coordinate map to use, see :obj:`make_storage`.
    return_stats : bool, optional
        Whether to also return the :obj:`ParseStats` of this parse.

    Returns
    -------
    SparseMatrix
        The parsed matrix.
    ParseStats
        The number of processed and skipped entries, only when
        ``return_stats`` is set.

    Raises
    ------
    FormatError
        If the description is malformed. No matrix is returned.

    Examples
    --------
    >>> s, stats = loads("rows=3\\ncols=3\\n(0,0,5)\\n(1,2,3)\\n(5,5,9)", return_stats=True)
    >>> s.nnz, stats
    (2, ParseStats(processed=2, skipped=1))
    """
    matrix, stats = _parse_lines(text.splitlines(), storage=storage)
    if return_stats:
        return matrix, stats
    return matrix


def load(path, storage=None, return_stats=False):
    """
    Read a matrix from a text file. See :obj:`loads` for the format.

    Parameters
    ----------
    path : str or pathlib.Path
        The file to read.
    storage : str, optional
        The coordinate map to use, see :obj:`make_storage`.
    return_stats : bool, optional
        Whether to also return the :obj:`ParseStats` of this parse.

    Raises
    ------
    FormatError
        If the file is malformed or is not UTF-8 text.
    MatrixIOError
        If the file cannot be read.

    See Also
    --------
    save
    """
    try:
        with open(path, encoding="utf-8") as f:
            matrix, stats = _parse_lines(f, storage=storage)
    except UnicodeDecodeError as e:
        raise FormatError(f"File is not valid UTF-8 text: {path}") from e
    except OSError as e:
        raise MatrixIOError(e.errno, f"Error reading file: {e.strerror}", str(path)) from e

    if return_stats:
        return matrix, stats
    return matrix


def _iter_lines(matrix):
    yield f"rows={matrix.num_rows}\n"
    yield f"cols={matrix.num_cols}\n"

    entries = matrix.entries()
    rows = np.fromiter((e[0] for e in entries), dtype=np.int64, count=len(entries))
    cols = np.fromiter((e[1] for e in entries), dtype=np.int64, count=len(entries))

    for i in row_major_order(rows, cols).tolist():
        yield "({}, {}, {})\n".format(*entries[i])


def dump(matrix, fp):
    """Write ``matrix`` to the open text file ``fp``. See :obj:`dumps`."""
    fp.writelines(_iter_lines(matrix))


def dumps(matrix):
    """
    The text description of ``matrix``.

    Entries are written in row-major order, one per line.

    Examples
    --------
    >>> s = SparseMatrix((2, 3), {(1, 0): 4, (0, 2): -1})
    >>> print(dumps(s), end="")
    rows=2
    cols=3
    (0, 2, -1)
    (1, 0, 4)
    """
    return "".join(_iter_lines(matrix))


def save(matrix, path):
    """
    Write ``matrix`` to a text file, creating missing parent directories.

    Parameters
    ----------
    matrix : SparseMatrix
        The matrix to save.
    path : str or pathlib.Path
        The file to write. An existing file is replaced once the new
        contents are completely written, and is left untouched on failure.

    Raises
    ------
    MatrixIOError
        If the file cannot be written.

    Examples
    --------
    >>> import os, tempfile
    >>> s = SparseMatrix((2, 2), {(0, 1): 3})
    >>> with tempfile.TemporaryDirectory() as d:
    ...     path = os.path.join(d, "out", "mat.txt")
    ...     save(s, path)
    ...     load(path).entries()
    [(0, 1, 3)]
    """
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            dump(matrix, f)

        # mkstemp creates the file as 0o600
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_name, 0o666 & ~umask)

        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise MatrixIOError(e.errno, f"Could not write to file: {e.strerror}", str(path)) from e
    finally:
        if tmp_name is not None:
            with suppress(FileNotFoundError):
                os.remove(tmp_name)
