"""
Structural sources: the interface through which calculators read atomic
structures and their neighbor lists.

A system is supplied by the caller.  It goes through two states: after
construction only the atomic data (size, species, positions, cell) can be
read; `compute_neighbors(cutoff)` then makes `pairs()` and
`pairs_containing()` valid for this cutoff, until the next call to
`compute_neighbors`.

The pair list must contain each unordered pair of atoms closer than the
cutoff exactly once, without self pairs.  This is assumed and not checked.

"""

import abc
from typing import Any, Callable, List, NamedTuple, Optional, Tuple

import numpy as np

from .exceptions import InvalidParameterError
from .status import contain

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


class Pair(NamedTuple):
    """
    Pair of atoms from a neighbor list.

    `vector` goes from `first` to `second`, using the shortest periodic
    image if the system is periodic.
    """
    first: int
    second: int
    vector: Tuple[float, float, float]

    @property
    def distance(self):
        return float(np.linalg.norm(self.vector))

    def other(self, center):
        """
        The atom of this pair that is not `center`.
        """
        if self.first == center:
            return self.second
        return self.first


class SystemBase(abc.ABC):
    """
    Abstract structural source.

    Implementations must provide all abstract methods.  A default
    `pairs_containing` is derived from `pairs`, which implementations can
    replace with something faster.

    """

    @abc.abstractmethod
    def size(self) -> int:
        """
        Number of atoms.
        """

    @abc.abstractmethod
    def species(self) -> np.ndarray:
        """
        Integer species identifier of each atom.
        """

    @abc.abstractmethod
    def positions(self) -> np.ndarray:
        """
        (N, 3) array of Cartesian positions.
        """

    @abc.abstractmethod
    def cell(self) -> np.ndarray:
        """
        (3, 3) matrix with the lattice vectors as rows; all zeros for a
        non-periodic system.
        """

    @abc.abstractmethod
    def compute_neighbors(self, cutoff: float):
        pass

    @abc.abstractmethod
    def pairs(self) -> List[Pair]:
        pass

    def pairs_containing(self, center: int) -> List[Pair]:
        return [p for p in self.pairs()
                if p.first == center or p.second == center]

    def is_periodic(self) -> bool:
        return bool(np.any(np.asarray(self.cell()) != 0.0))


class CallbackSystem(SystemBase):
    """
    A system defined by a set of functions and an opaque `user_data` value.

    Every function receives `user_data` as its first argument:

      size(user_data) -> int
      species(user_data) -> sequence of int
      positions(user_data) -> (N, 3) sequence of float
      cell(user_data) -> (3, 3) sequence of float
      compute_neighbors(user_data, cutoff)
      pairs(user_data) -> sequence of (first, second, vector)
      pairs_containing(user_data, center) -> same as pairs (optional)

    """

    _REQUIRED = ("size", "species", "positions", "cell",
                 "compute_neighbors", "pairs")

    def __init__(self, user_data: Any = None,
                 size: Callable = None,
                 species: Callable = None,
                 positions: Callable = None,
                 cell: Callable = None,
                 compute_neighbors: Callable = None,
                 pairs: Callable = None,
                 pairs_containing: Optional[Callable] = None):
        self.user_data = user_data
        self._functions = {
            "size": size,
            "species": species,
            "positions": positions,
            "cell": cell,
            "compute_neighbors": compute_neighbors,
            "pairs": pairs,
            "pairs_containing": pairs_containing,
        }

    def _function(self, name):
        function = self._functions[name]
        if function is None:
            raise InvalidParameterError(
                "system function '{}' is not set".format(name))
        return function

    def size(self):
        return int(self._function("size")(self.user_data))

    def species(self):
        return np.asarray(self._function("species")(self.user_data),
                          dtype=np.int64)

    def positions(self):
        return np.asarray(self._function("positions")(self.user_data),
                          dtype=np.float64).reshape(-1, 3)

    def cell(self):
        return np.asarray(self._function("cell")(self.user_data),
                          dtype=np.float64).reshape(3, 3)

    def compute_neighbors(self, cutoff):
        self._function("compute_neighbors")(self.user_data, cutoff)

    def pairs(self):
        return _as_pairs(self._function("pairs")(self.user_data))

    def pairs_containing(self, center):
        function = self._functions["pairs_containing"]
        if function is None:
            return super().pairs_containing(center)
        return _as_pairs(function(self.user_data, center))


class GuardedSystem(SystemBase):
    """
    Wrap a caller-supplied system, converting any unexpected exception
    raised by one of its methods into `InternalFault`.

    """

    def __init__(self, system: SystemBase, index: int = 0):
        self.system = system
        self.index = index

    def _call(self, name, convert, *args):
        def call():
            return convert(getattr(self.system, name)(*args))
        return contain("system {}: '{}'".format(self.index, name), call)

    def size(self):
        return self._call("size", int)

    def species(self):
        species = self._call(
            "species", lambda s: np.asarray(s, dtype=np.int64).reshape(-1))
        self._check_length(species, "species")
        return species

    def positions(self):
        positions = self._call(
            "positions",
            lambda p: np.asarray(p, dtype=np.float64).reshape(-1, 3))
        self._check_length(positions, "positions")
        return positions

    def cell(self):
        return self._call(
            "cell", lambda c: np.asarray(c, dtype=np.float64).reshape(3, 3))

    def compute_neighbors(self, cutoff):
        self._call("compute_neighbors", lambda _: None, float(cutoff))

    def pairs(self):
        return self._call("pairs", _as_pairs)

    def pairs_containing(self, center):
        return self._call("pairs_containing", _as_pairs, int(center))

    def _check_length(self, array, what):
        size = self.size()
        if len(array) != size:
            raise InvalidParameterError(
                "system {}: expected {} values for {}, got {}".format(
                    self.index, size, what, len(array)))


def _as_pairs(pairs):
    result = []
    for p in pairs:
        if isinstance(p, Pair):
            result.append(p)
        else:
            first, second, vector = p
            result.append(Pair(int(first), int(second),
                               tuple(float(v) for v in vector)))
    return result
