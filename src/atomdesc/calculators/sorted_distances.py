"""
Sorted distances to the neighbors of each atom.

"""

from dataclasses import dataclass

from ..indexes import Indexes
from ..samples import AtomSamples, TwoBodiesSpeciesSamples
from .base import CalculatorBase, check_type, register_calculator

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


@dataclass
class SortedDistancesParameters:
    cutoff: float
    max_neighbors: int
    separate_neighbor_species: bool = False

    def __post_init__(self):
        check_type("cutoff", self.cutoff, (int, float))
        check_type("max_neighbors", self.max_neighbors, int)
        check_type("separate_neighbor_species",
                   self.separate_neighbor_species, bool)
        if not self.cutoff > 0.0:
            raise ValueError(
                "cutoff must be positive, got {}".format(self.cutoff))
        if self.max_neighbors < 1:
            raise ValueError("max_neighbors must be at least 1, got {}".format(
                self.max_neighbors))


@register_calculator
class SortedDistances(CalculatorBase):
    """
    For each atom, the distances to its `max_neighbors` closest neighbors
    in increasing order, padded with the cutoff when there are fewer
    neighbors.  With `separate_neighbor_species`, one sample per
    (atom, neighbor species) only considers neighbors of that species.

    """

    name = "sorted_distances"
    Parameters = SortedDistancesParameters

    def samples_builder(self):
        if self.parameters.separate_neighbor_species:
            return TwoBodiesSpeciesSamples(self.parameters.cutoff)
        return AtomSamples(self.parameters.cutoff)

    def features(self):
        return Indexes(["neighbor"],
                       [(n,) for n in range(self.parameters.max_neighbors)])

    def compute_system(self, structure, system, samples, features, values,
                       gradient_samples=None, gradients=None):
        cutoff = self.parameters.cutoff
        separate = self.parameters.separate_neighbor_species
        system.compute_neighbors(cutoff)
        species = system.species()

        for i, sample in enumerate(samples):
            center = sample[1]
            distances = []
            for pair in system.pairs_containing(center):
                if separate and species[pair.other(center)] != sample[3]:
                    continue
                distances.append(pair.distance)
            distances.sort()
            for j, (n,) in enumerate(features):
                if n < len(distances):
                    values[i, j] = distances[n]
                else:
                    values[i, j] = cutoff
