"""
Index tables: named, row-unique tables of small integers.

Index tables describe which sample each row of a descriptor corresponds
to, and which feature each column measures.

"""

import enum
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import InvalidParameterError

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"

INDEX_DTYPE = np.int32

_INDEX_MIN = np.iinfo(INDEX_DTYPE).min
_INDEX_MAX = np.iinfo(INDEX_DTYPE).max


class IndexKind(enum.IntEnum):
    FEATURES = 0
    SAMPLES = 1
    GRADIENT_SAMPLES = 2


def is_valid_name(name: str) -> bool:
    """
    Index names must be non-empty ASCII identifiers.

    """
    return (isinstance(name, str) and name.isascii()
            and name.isidentifier())


class Indexes(object):
    """
    An immutable table of named integer columns without duplicated rows.

    Rows are stored in a row-major (count, size) array of 32-bit integers
    and can be looked up by value with `position`.

    """

    def __init__(self, names: Sequence[str],
                 values: Optional[Iterable[Sequence[int]]] = None):
        """
        Arguments:
          names    column names, each a valid identifier
          values   candidate rows; duplicated rows are removed, keeping
                   the first occurrence
        """
        names = tuple(names)
        for name in names:
            if not is_valid_name(name):
                raise InvalidParameterError(
                    "all index names must be valid identifiers, "
                    "'{}' is not".format(name))
        if len(set(names)) != len(names):
            raise InvalidParameterError(
                "duplicated index names in [{}]".format(", ".join(names)))
        self._names = names

        rows = _as_rows(values, len(names))
        positions = {}
        unique = []
        for row in rows:
            key = tuple(int(v) for v in row)
            if key not in positions:
                positions[key] = len(unique)
                unique.append(key)
        self._positions = positions
        if len(unique) > 0:
            self._values = np.array(unique, dtype=INDEX_DTYPE)
        else:
            self._values = np.zeros((0, len(names)), dtype=INDEX_DTYPE)
        self._values.setflags(write=False)

    @classmethod
    def empty(cls):
        """
        Index table without columns and rows.

        """
        return cls([])

    def __str__(self):
        ostr = "Indexes [{}] with {} rows".format(
            ", ".join(self._names), self.count)
        return ostr

    def __repr__(self):
        return self.__str__()

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def size(self) -> int:
        """
        Number of columns.
        """
        return len(self._names)

    @property
    def count(self) -> int:
        """
        Number of rows.
        """
        if self.size == 0:
            return 0
        return self._values.shape[0]

    @property
    def values(self) -> np.ndarray:
        """
        Read-only (count, size) array with the rows.
        """
        return self._values

    def __len__(self):
        return self.count

    def __getitem__(self, i):
        return tuple(int(v) for v in self._values[i])

    def __iter__(self):
        for i in range(self.count):
            yield self[i]

    def __contains__(self, row):
        return self.position(row) is not None

    def __eq__(self, other):
        if not isinstance(other, Indexes):
            return NotImplemented
        return (self._names == other._names
                and np.array_equal(self._values, other._values))

    def __hash__(self):
        return hash((self._names, self._values.tobytes()))

    def position(self, row: Sequence[int]) -> Optional[int]:
        """
        Position of `row` in this table, or None if it is not present.

        """
        return self._positions.get(tuple(int(v) for v in row))

    def column(self, name: str) -> np.ndarray:
        try:
            i = self._names.index(name)
        except ValueError:
            raise InvalidParameterError(
                "'{}' is not one of the index names [{}]".format(
                    name, ", ".join(self._names)))
        return self._values[:, i]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Table view of the index, one column per name.

        """
        return pd.DataFrame(np.asarray(self._values), columns=list(self._names))

    def to_multiindex(self) -> pd.MultiIndex:
        if self.size == 0:
            return pd.MultiIndex.from_tuples([], names=["index"])
        return pd.MultiIndex.from_arrays(
            [self._values[:, i] for i in range(self.size)],
            names=list(self._names))


class IndexesBuilder(object):
    """
    Accumulate rows one at a time and freeze them into `Indexes`.

    """

    def __init__(self, names: Sequence[str]):
        self.names = list(names)
        self._rows: List[Tuple[int, ...]] = []

    @property
    def size(self):
        return len(self.names)

    def add(self, row: Sequence[int]):
        if len(row) != self.size:
            raise InvalidParameterError(
                "expected {} values for indexes [{}], got {}".format(
                    self.size, ", ".join(self.names), len(row)))
        self._rows.append(tuple(row))

    def extend(self, rows: Iterable[Sequence[int]]):
        for row in rows:
            self.add(row)

    def finish(self) -> Indexes:
        return Indexes(self.names, self._rows)


def as_indexes(names: Sequence[str], rows, what: str = "rows") -> Indexes:
    """
    Convert user-provided rows to `Indexes` with the given `names`.

    `rows` can be an `Indexes` instance (whose names must then match) or
    anything that converts to a 2-dimensional integer array with one
    column per name.

    """
    if isinstance(rows, Indexes):
        if rows.names != tuple(names):
            raise InvalidParameterError(
                "{} have names [{}], expected [{}]".format(
                    what, ", ".join(rows.names), ", ".join(names)))
        return rows
    return Indexes(names, _as_rows(rows, len(names), what))


def _as_rows(values, size, what="rows"):
    if values is None:
        return np.zeros((0, size), dtype=np.int64)
    array = np.asarray(values)
    if array.size == 0:
        return np.zeros((0, size), dtype=np.int64)
    if array.ndim == 1 and size == 1:
        array = array.reshape(-1, 1)
    if array.ndim != 2 or array.shape[1] != size:
        raise InvalidParameterError(
            "{} must be a 2-dimensional array with {} columns, got an "
            "array of shape {}".format(what, size, array.shape))
    if not np.issubdtype(array.dtype, np.integer):
        if not np.all(np.equal(np.mod(array, 1), 0)):
            raise InvalidParameterError(
                "{} must contain integer values".format(what))
        array = array.astype(np.int64)
    if np.any(array < _INDEX_MIN) or np.any(array > _INDEX_MAX):
        raise InvalidParameterError(
            "{} contain values outside of the 32-bit integer range".format(
                what))
    return array
