"""
Feature algorithms available to `atomdesc.Calculator`, by name.

"""

from .base import CalculatorBase, REGISTERED_CALCULATORS, register_calculator
from .dummy import DummyCalculator
from .sorted_distances import SortedDistances

__all__ = [
    "CalculatorBase",
    "REGISTERED_CALCULATORS",
    "register_calculator",
    "DummyCalculator",
    "SortedDistances",
]
