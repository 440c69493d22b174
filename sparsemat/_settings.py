import os
import warnings

STORAGE_TYPES = ("hashed", "dict")

INITIAL_CAPACITY = int(os.environ.get("SPARSEMAT_INITIAL_CAPACITY", "16384"))
WARN_ON_SKIPPED = bool(int(os.environ.get("SPARSEMAT_WARN_ON_SKIPPED", "0")))


def _storage_from_env():
    name = os.environ.get("SPARSEMAT_STORAGE", "")
    if name == "":
        return STORAGE_TYPES[0]

    if name not in STORAGE_TYPES:
        warnings.warn(
            f"Invalid storage identifier: {name}. Selecting {STORAGE_TYPES[0]} storage.",
            UserWarning,
            stacklevel=2,
        )
        return STORAGE_TYPES[0]

    return name


DEFAULT_STORAGE = _storage_from_env()

if INITIAL_CAPACITY <= 0:
    raise ValueError(
        f"SPARSEMAT_INITIAL_CAPACITY must be a positive integer, got {INITIAL_CAPACITY}."
    )
