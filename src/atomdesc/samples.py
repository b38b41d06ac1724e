"""
Sample builders: generate the samples index table of standard sample kinds
for a list of systems, together with the matching gradient samples.

Gradient samples describe the gradient of one sample with respect to the
position of one atom, one row for each Cartesian axis (`spatial` = 0, 1,
2 for x, y, z).

"""

import abc
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import InvalidParameterError
from .indexes import Indexes
from .system import SystemBase

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"

Row = Tuple[int, ...]

SPATIAL = (0, 1, 2)


class SamplesBuilder(abc.ABC):
    """
    Base class for all sample kinds.

    Subclasses define the column `names` and the rows produced by a single
    system; the rows of several systems are concatenated in system order.

    """

    names: Tuple[str, ...] = ()
    gradient_names: Tuple[str, ...] = ()

    @abc.abstractmethod
    def system_samples(self, structure: int,
                       system: SystemBase) -> List[Row]:
        """
        Sample rows for one system, `structure` being its index.
        """

    @abc.abstractmethod
    def system_gradient_samples(self, structure: int, system: SystemBase,
                                samples: Iterable[Row]) -> List[Row]:
        """
        Gradient sample rows for the given sample rows of one system.
        """

    def samples(self, systems: Sequence[SystemBase]) -> Indexes:
        rows = []
        for structure, system in enumerate(systems):
            rows += self.system_samples(structure, system)
        return Indexes(self.names, rows)

    def gradients_for(self, systems: Sequence[SystemBase],
                      samples: Indexes) -> Indexes:
        """
        Gradient samples corresponding to `samples`, which must have been
        created by this builder (possibly restricted to a subset).

        """
        if samples.names != tuple(self.names):
            raise InvalidParameterError(
                "samples [{}] do not match this sample kind [{}]".format(
                    ", ".join(samples.names), ", ".join(self.names)))
        rows = []
        structures = samples.column("structure")
        for structure, system in enumerate(systems):
            selected = [samples[i]
                        for i in np.nonzero(structures == structure)[0]]
            if len(selected) == 0:
                continue
            rows += self.system_gradient_samples(structure, system, selected)
        return Indexes(self.gradient_names, rows)

    def with_gradients(self, systems: Sequence[SystemBase]):
        samples = self.samples(systems)
        return samples, self.gradients_for(systems, samples)


class _NeighborsMixin(object):

    cutoff: Optional[float] = None

    def _neighbors(self, system):
        if self.cutoff is None:
            raise InvalidParameterError(
                "{} needs a cutoff to use neighbor lists".format(
                    type(self).__name__))
        system.compute_neighbors(self.cutoff)


class StructureSamples(SamplesBuilder):
    """
    One sample per system; gradients with respect to every atom.
    """

    names = ("structure",)
    gradient_names = ("structure", "atom", "spatial")

    def system_samples(self, structure, system):
        return [(structure,)]

    def system_gradient_samples(self, structure, system, samples):
        rows = []
        for sample in samples:
            for atom in range(system.size()):
                rows += [sample + (atom, s) for s in SPATIAL]
        return rows


class StructureSpeciesSamples(SamplesBuilder):
    """
    One sample per species present in each system, sorted by species;
    gradients with respect to every atom of that species.
    """

    names = ("structure", "species")
    gradient_names = ("structure", "species", "atom", "spatial")

    def system_samples(self, structure, system):
        return [(structure, int(s)) for s in np.unique(system.species())]

    def system_gradient_samples(self, structure, system, samples):
        species = system.species()
        rows = []
        for sample in samples:
            for atom in np.nonzero(species == sample[1])[0]:
                rows += [sample + (int(atom), s) for s in SPATIAL]
        return rows


class AtomSamples(_NeighborsMixin, SamplesBuilder):
    """
    One sample per atom; gradients with respect to the position of every
    neighbor within `cutoff`, in the order reported by the system.
    """

    names = ("structure", "atom")
    gradient_names = ("structure", "atom", "neighbor", "spatial")

    def __init__(self, cutoff: Optional[float] = None):
        self.cutoff = cutoff

    def system_samples(self, structure, system):
        return [(structure, atom) for atom in range(system.size())]

    def system_gradient_samples(self, structure, system, samples):
        self._neighbors(system)
        rows = []
        for sample in samples:
            center = sample[1]
            for pair in system.pairs_containing(center):
                neighbor = pair.other(center)
                rows += [sample + (neighbor, s) for s in SPATIAL]
        return rows


class AtomSpeciesSamples(AtomSamples):
    """
    One sample per atom, with the species of the atom as an additional
    column.

    Arguments:
      cutoff     cutoff radius for the gradient samples
      selected   (optional) (structure, species) combinations; when given,
                 only atoms matching one of them are kept
    """

    names = ("structure", "atom", "species")
    gradient_names = ("structure", "atom", "species", "neighbor", "spatial")

    def __init__(self, cutoff: Optional[float] = None,
                 selected: Optional[Iterable[Tuple[int, int]]] = None):
        super().__init__(cutoff)
        if selected is None:
            self.selected = None
        else:
            self.selected = set((int(s), int(t)) for s, t in selected)

    def system_samples(self, structure, system):
        rows = []
        for atom, species in enumerate(system.species()):
            species = int(species)
            if (self.selected is not None
                    and (structure, species) not in self.selected):
                continue
            rows.append((structure, atom, species))
        return rows


class TwoBodiesSpeciesSamples(_NeighborsMixin, SamplesBuilder):
    """
    Samples for each atom and each species of its neighbors.

    Every pair in the neighbor list contributes one row from the point of
    view of each of its two atoms.  Rows of one system are sorted.
    Gradients are taken with respect to the neighbors of the center with
    the sample's neighbor species.
    """

    names = ("structure", "center", "species_center", "species_neighbor")
    gradient_names = names + ("neighbor", "spatial")

    def __init__(self, cutoff: float):
        self.cutoff = cutoff

    def system_samples(self, structure, system):
        self._neighbors(system)
        species = system.species()
        rows = set()
        for pair in system.pairs():
            i, j = pair.first, pair.second
            rows.add((structure, i, int(species[i]), int(species[j])))
            rows.add((structure, j, int(species[j]), int(species[i])))
        return sorted(rows)

    def system_gradient_samples(self, structure, system, samples):
        self._neighbors(system)
        species = system.species()
        rows = []
        for sample in samples:
            center, species_neighbor = sample[1], sample[3]
            for pair in system.pairs_containing(center):
                neighbor = pair.other(center)
                if species[neighbor] != species_neighbor:
                    continue
                rows += [sample + (neighbor, s) for s in SPATIAL]
        return rows


class ThreeBodiesSpeciesSamples(_NeighborsMixin, SamplesBuilder):
    """
    Samples for each atom and each pair of neighbor species, built from
    two different pairs sharing the center atom.  The two neighbor species
    are ordered (`species_neighbor_1 <= species_neighbor_2`).
    """

    names = ("structure", "center", "species_center",
             "species_neighbor_1", "species_neighbor_2")
    gradient_names = names + ("neighbor", "spatial")

    def __init__(self, cutoff: float):
        self.cutoff = cutoff

    def system_samples(self, structure, system):
        self._neighbors(system)
        species = system.species()
        rows = set()
        for center in range(system.size()):
            neighbors = [p.other(center)
                         for p in system.pairs_containing(center)]
            for a in range(len(neighbors)):
                for b in range(a + 1, len(neighbors)):
                    s1 = int(species[neighbors[a]])
                    s2 = int(species[neighbors[b]])
                    rows.add((structure, center, int(species[center]),
                              min(s1, s2), max(s1, s2)))
        return sorted(rows)

    def system_gradient_samples(self, structure, system, samples):
        self._neighbors(system)
        species = system.species()
        rows = []
        for sample in samples:
            center = sample[1]
            wanted = (sample[3], sample[4])
            for pair in system.pairs_containing(center):
                neighbor = pair.other(center)
                if species[neighbor] not in wanted:
                    continue
                rows += [sample + (neighbor, s) for s in SPATIAL]
        return rows
