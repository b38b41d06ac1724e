"""
Base class and registry for the feature algorithms behind `Calculator`.

"""

import abc
import dataclasses
from typing import Dict, Type

import numpy as np

from ..exceptions import InvalidParameterError
from ..indexes import Indexes
from ..samples import SamplesBuilder
from ..system import SystemBase

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"

REGISTERED_CALCULATORS: Dict[str, Type["CalculatorBase"]] = {}


def register_calculator(cls):
    """
    Class decorator making a calculator implementation available by name.

    """
    if not (isinstance(cls, type) and issubclass(cls, CalculatorBase)):
        raise InvalidParameterError(
            "calculators must derive from CalculatorBase")
    if not cls.name:
        raise InvalidParameterError(
            "calculator {} does not define a name".format(cls.__name__))
    REGISTERED_CALCULATORS[cls.name] = cls
    return cls


class CalculatorBase(abc.ABC):
    """
    A feature algorithm.

    Subclasses set `name` and `Parameters` (a dataclass validating its
    fields in `__post_init__`), and implement `samples_builder`,
    `features` and `compute_system`.

    """

    name: str = ""
    Parameters: type = None

    def __init__(self, parameters):
        self.parameters = parameters

    @classmethod
    def from_dict(cls, raw):
        """
        Create the calculator from decoded JSON parameters.

        """
        if not isinstance(raw, dict):
            raise InvalidParameterError(
                "parameters for '{}' must be a JSON object".format(cls.name))
        known = set(f.name for f in dataclasses.fields(cls.Parameters))
        unknown = sorted(set(raw.keys()) - known)
        if len(unknown) > 0:
            raise InvalidParameterError(
                "unknown parameter '{}' for '{}'".format(unknown[0], cls.name))
        try:
            parameters = cls.Parameters(**raw)
        except (TypeError, ValueError) as e:
            raise InvalidParameterError(
                "invalid parameters for '{}': {}".format(cls.name, e))
        return cls(parameters)

    @property
    def gradients(self) -> bool:
        """
        Whether this calculator computes gradients.
        """
        return bool(getattr(self.parameters, "gradients", False))

    @abc.abstractmethod
    def samples_builder(self) -> SamplesBuilder:
        pass

    @abc.abstractmethod
    def features(self) -> Indexes:
        """
        The full set of features computed by this calculator.
        """

    @abc.abstractmethod
    def compute_system(self, structure: int, system: SystemBase,
                       samples: Indexes, features: Indexes,
                       values: np.ndarray, gradient_samples: Indexes = None,
                       gradients: np.ndarray = None):
        """
        Fill the values (and gradients) for one system.

        Arguments:
          structure         index of the system
          system            the system
          samples           the samples of this system to compute
          features          the features to compute, a subset of
                            `features()` in any order
          values            (samples.count, features.count) array to fill
          gradient_samples  gradient samples of this system, if gradients
                            are computed
          gradients         (gradient_samples.count, features.count) array
                            to fill
        """


def check_type(name, value, types):
    """
    Raise ValueError if `value` is not an instance of `types`.

    Booleans are rejected where numbers are expected.

    """
    if isinstance(value, bool) and bool not in _as_tuple(types):
        raise ValueError("'{}' must be {}, got a boolean".format(
            name, _type_names(types)))
    if not isinstance(value, types):
        raise ValueError("'{}' must be {}, got {}".format(
            name, _type_names(types), type(value).__name__))


def _as_tuple(types):
    return types if isinstance(types, tuple) else (types,)


def _type_names(types):
    return " or ".join(t.__name__ for t in _as_tuple(types))
