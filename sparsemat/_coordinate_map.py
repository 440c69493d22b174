import copy as _copy

MAX_LOAD_FACTOR = 0.75


class CoordinateMap:
    """
    A hash map from ``(row, col)`` coordinates to non-zero integers.

    Collisions are resolved by chaining: every bucket holds a list of
    ``[row, col, value]`` entries whose coordinates hash to it. When the
    number of entries exceeds :obj:`MAX_LOAD_FACTOR` times the number of
    buckets, the bucket array is doubled and every entry is rehashed.

    Zero is never stored. Writing a zero removes the entry, and reading a
    missing entry returns zero.

    Parameters
    ----------
    capacity : int, optional
        The initial number of buckets. Defaults to ``SPARSEMAT_INITIAL_CAPACITY``
        (16384).

    Examples
    --------
    >>> m = CoordinateMap(capacity=4)
    >>> m.put(1, 2, 7)
    >>> m.get(1, 2), m.get(2, 1)
    (7, 0)
    >>> m.put(1, 2, 0)
    >>> len(m)
    0
    """

    name = "hashed"

    def __init__(self, capacity=None):
        if capacity is None:
            from ._settings import INITIAL_CAPACITY

            capacity = INITIAL_CAPACITY

        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}.")

        self._capacity = int(capacity)
        self._buckets = [None] * self._capacity
        self._size = 0

    def _hash(self, row, col):
        return ((row << 16) | col) % self._capacity

    @property
    def capacity(self):
        """The current number of buckets."""
        return self._capacity

    @property
    def load_factor(self):
        return self._size / self._capacity

    def put(self, row, col, value):
        """
        Store ``value`` at ``(row, col)``, overwriting any previous value.

        A zero ``value`` is the same as :obj:`CoordinateMap.remove`.
        """
        if value == 0:
            self.remove(row, col)
            return

        index = self._hash(row, col)
        bucket = self._buckets[index]

        if bucket is None:
            bucket = self._buckets[index] = []
        else:
            for entry in bucket:
                if entry[0] == row and entry[1] == col:
                    entry[2] = value
                    return

        bucket.insert(0, [row, col, value])
        self._size += 1

        if self._size > self._capacity * MAX_LOAD_FACTOR:
            self.resize()

    def get(self, row, col):
        bucket = self._buckets[self._hash(row, col)]

        if bucket is not None:
            for entry in bucket:
                if entry[0] == row and entry[1] == col:
                    return entry[2]

        return 0

    def remove(self, row, col):
        index = self._hash(row, col)
        bucket = self._buckets[index]

        if bucket is None:
            return

        for i, entry in enumerate(bucket):
            if entry[0] == row and entry[1] == col:
                del bucket[i]
                self._size -= 1
                if not bucket:
                    self._buckets[index] = None
                return

    def resize(self):
        """
        Double the number of buckets and rehash every entry.

        This touches every entry, so it costs O(n).
        """
        old_buckets = self._buckets

        self._capacity *= 2
        self._buckets = [None] * self._capacity
        self._size = 0

        for bucket in old_buckets:
            if bucket is None:
                continue
            for row, col, value in bucket:
                self.put(row, col, value)

    def entries(self):
        """
        All stored entries as ``(row, col, value)`` tuples.

        The order follows the bucket layout and is not meaningful.
        """
        return [tuple(entry) for bucket in self._buckets if bucket for entry in bucket]

    def copy(self):
        return _copy.deepcopy(self)

    def __len__(self):
        return self._size

    def __contains__(self, key):
        row, col = key
        bucket = self._buckets[self._hash(row, col)]
        return bucket is not None and any(e[0] == row and e[1] == col for e in bucket)

    def __iter__(self):
        return iter(self.entries())

    def __str__(self):
        return "<CoordinateMap: size={:d}, capacity={:d}>".format(
            self._size, self._capacity
        )

    __repr__ = __str__


class DictCoordinateMap:
    """
    A :obj:`CoordinateMap` replacement backed by a built-in :obj:`dict`.

    Unlike :obj:`CoordinateMap`, storing a zero is an error: callers delete
    entries explicitly with :obj:`DictCoordinateMap.remove`.

    Examples
    --------
    >>> m = DictCoordinateMap()
    >>> m.put(0, 3, -2)
    >>> m.entries()
    [(0, 3, -2)]
    >>> m.put(0, 3, 0)
    Traceback (most recent call last):
        ...
    ValueError: Zero is not stored; remove (0, 3) instead.
    """

    name = "dict"

    def __init__(self):
        self.data = dict()

    def put(self, row, col, value):
        if value == 0:
            raise ValueError(f"Zero is not stored; remove ({row}, {col}) instead.")
        self.data[(row, col)] = value

    def get(self, row, col):
        return self.data.get((row, col), 0)

    def remove(self, row, col):
        self.data.pop((row, col), None)

    def entries(self):
        return [(r, c, v) for (r, c), v in self.data.items()]

    def copy(self):
        new = DictCoordinateMap()
        new.data = self.data.copy()
        return new

    def __len__(self):
        return len(self.data)

    def __contains__(self, key):
        return tuple(key) in self.data

    def __iter__(self):
        return iter(self.entries())

    def __str__(self):
        return f"<DictCoordinateMap: size={len(self.data):d}>"

    __repr__ = __str__


_STORAGE_TYPES = {
    CoordinateMap.name: CoordinateMap,
    DictCoordinateMap.name: DictCoordinateMap,
}


def make_storage(name=None):
    """
    Create an empty coordinate map.

    Parameters
    ----------
    name : str, optional
        ``"hashed"`` for :obj:`CoordinateMap` or ``"dict"`` for
        :obj:`DictCoordinateMap`. Defaults to ``SPARSEMAT_STORAGE``.

    Raises
    ------
    ValueError
        If ``name`` is not a known storage kind.
    """
    if name is None:
        from ._settings import DEFAULT_STORAGE

        name = DEFAULT_STORAGE

    try:
        return _STORAGE_TYPES[name]()
    except KeyError:
        raise ValueError(
            f"Invalid storage: {name!r}. Expected one of {sorted(_STORAGE_TYPES)}."
        ) from None
