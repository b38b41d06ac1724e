"""
A calculator with trivial values, used to check the plumbing of samples,
features and gradients.

"""

from dataclasses import dataclass

from ..indexes import Indexes
from ..log import logger
from ..samples import AtomSamples
from .base import CalculatorBase, check_type, register_calculator

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


@dataclass
class DummyParameters:
    """
    Parameters
    ----------
    cutoff : float
        Cutoff radius of the neighbor list used for gradients
    delta : int
        Offset added to the atom index in the first feature
    name : str
        Free text; if it contains `log-test-info` or `log-test-warn` it is
        logged at this level during computations
    gradients : bool
        Compute gradients
    """

    cutoff: float
    delta: int
    name: str
    gradients: bool = False

    def __post_init__(self):
        check_type("cutoff", self.cutoff, (int, float))
        check_type("delta", self.delta, int)
        check_type("name", self.name, str)
        check_type("gradients", self.gradients, bool)
        if not self.cutoff > 0.0:
            raise ValueError(
                "cutoff must be positive, got {}".format(self.cutoff))


@register_calculator
class DummyCalculator(CalculatorBase):
    """
    Features `index_delta` = delta + atom index, and `x_y_z` = sum of the
    Cartesian coordinates of the atom.  Gradients of the first feature
    are 0 and gradients of the second are 1.

    """

    name = "dummy_calculator"
    Parameters = DummyParameters

    INDEX_DELTA = (1, 0)
    X_Y_Z = (0, 1)

    def samples_builder(self):
        return AtomSamples(self.parameters.cutoff)

    def features(self):
        return Indexes(["index_delta", "x_y_z"],
                       [self.INDEX_DELTA, self.X_Y_Z])

    def compute_system(self, structure, system, samples, features, values,
                       gradient_samples=None, gradients=None):
        if "log-test-info" in self.parameters.name:
            logger.info("%s", self.parameters.name)
        elif "log-test-warn" in self.parameters.name:
            logger.warning("%s", self.parameters.name)

        positions = system.positions()
        for i, (_, atom) in enumerate(samples):
            for j, feature in enumerate(features):
                if feature == self.INDEX_DELTA:
                    values[i, j] = self.parameters.delta + atom
                elif feature == self.X_Y_Z:
                    values[i, j] = positions[atom].sum()

        if gradients is not None:
            for j, feature in enumerate(features):
                if feature == self.INDEX_DELTA:
                    gradients[:, j] = 0.0
                elif feature == self.X_Y_Z:
                    gradients[:, j] = 1.0
