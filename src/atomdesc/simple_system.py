"""
In-process structural source storing its own copy of the atomic data.

"""

from typing import List

import numpy as np

from .exceptions import InvalidParameterError
from .nblist.neighborlist import NeighborList
from .system import Pair, SystemBase

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


class SimpleSystem(SystemBase):
    """
    A system holding species, positions and cell in numpy arrays, and
    computing its neighbor list with `atomdesc.nblist.NeighborList`.

    Parameters
    ----------
    species : sequence of int
        N integer species identifiers (usually atomic numbers)
    positions : array_like
        (N, 3) Cartesian positions
    cell : array_like, optional
        (3, 3) lattice vectors as rows.  None or all zeros for an isolated
        structure.
    """

    def __init__(self, species, positions, cell=None):
        self._species = np.array(species, dtype=np.int64).reshape(-1)
        self._positions = np.array(positions, dtype=np.float64)
        if self._positions.size == 0:
            self._positions = self._positions.reshape(0, 3)
        if self._positions.ndim != 2 or self._positions.shape[1] != 3:
            raise InvalidParameterError(
                "positions must be (N, 3), got {}".format(
                    self._positions.shape))
        if len(self._species) != len(self._positions):
            raise InvalidParameterError(
                "species length ({}) must match positions length ({})".format(
                    len(self._species), len(self._positions)))
        if cell is None:
            self._cell = np.zeros((3, 3))
        else:
            self._cell = np.array(cell, dtype=np.float64)
            if self._cell.shape != (3, 3):
                raise InvalidParameterError(
                    "cell must be (3, 3), got {}".format(self._cell.shape))

        self._cutoff = None
        self._pairs = None
        self._containing = None

    @classmethod
    def from_system(cls, system: SystemBase):
        """
        Copy the atomic data of any system into a new SimpleSystem.

        The neighbor list is not copied; it is recomputed natively.

        """
        return cls(system.species(), system.positions(), system.cell())

    def __str__(self):
        return "SimpleSystem with {} atoms{}".format(
            self.size(), " (periodic)" if self.is_periodic() else "")

    def __repr__(self):
        return self.__str__()

    def size(self):
        return len(self._species)

    def species(self):
        return self._species

    def positions(self):
        return self._positions

    def cell(self):
        return self._cell

    def compute_neighbors(self, cutoff):
        if self._cutoff == cutoff:
            return
        try:
            nbl = NeighborList(self._positions, lattice_vectors=self._cell,
                               interaction_range=cutoff)
        except ValueError as e:
            raise InvalidParameterError(str(e))

        first, second, vectors = nbl.pairs
        self._pairs = [Pair(int(i), int(j), tuple(float(x) for x in v))
                       for i, j, v in zip(first, second, vectors)]
        self._containing = [[self._pairs[k] for k in nbl.pairs_containing(i)]
                            for i in range(self.size())]
        self._cutoff = cutoff

    def pairs(self) -> List[Pair]:
        self._check_neighbors()
        return self._pairs

    def pairs_containing(self, center) -> List[Pair]:
        self._check_neighbors()
        return self._containing[center]

    def _check_neighbors(self):
        if self._pairs is None:
            raise InvalidParameterError(
                "compute_neighbors must be called before accessing pairs")
