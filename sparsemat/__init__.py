from ._version import __version__, __version_tuple__  # noqa: F401

from ._coordinate_map import CoordinateMap, DictCoordinateMap, make_storage
from ._errors import (
    DimensionError,
    DimensionMismatchError,
    FormatError,
    IncompatibleDimensionsError,
    MatrixIOError,
    SkippedEntriesWarning,
)
from ._io import ParseStats, dump, dumps, load, loads, parse_int, save
from ._matrix import SparseMatrix
from ._utils import identity, random, zeros

__all__ = [
    "CoordinateMap",
    "DictCoordinateMap",
    "DimensionError",
    "DimensionMismatchError",
    "FormatError",
    "IncompatibleDimensionsError",
    "MatrixIOError",
    "ParseStats",
    "SkippedEntriesWarning",
    "SparseMatrix",
    "dump",
    "dumps",
    "identity",
    "load",
    "loads",
    "make_storage",
    "parse_int",
    "random",
    "save",
    "zeros",
]
