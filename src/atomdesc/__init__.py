"""
atomdesc: representations of atomic structures for machine learning.

A `Calculator` computes a `Descriptor` (values, gradients, and index
tables describing the samples and features) for a list of systems.

"""

import os

from .calculator import CalculationOptions, Calculator
from .calculators import CalculatorBase, register_calculator
from .descriptor import Descriptor
from .exceptions import (AtomdescError, EncodingError, InternalFault,
                         InvalidParameterError, ParameterSyntaxError)
from .indexes import Indexes, IndexesBuilder, IndexKind
from .simple_system import SimpleSystem
from .status import Status, last_error
from .system import CallbackSystem, Pair, SystemBase

with open(os.path.join(os.path.dirname(__file__), "VERSION")) as fp:
    __version__ = fp.read().strip()

__all__ = [
    "AtomdescError",
    "CalculationOptions",
    "Calculator",
    "CalculatorBase",
    "CallbackSystem",
    "Descriptor",
    "EncodingError",
    "Indexes",
    "IndexesBuilder",
    "IndexKind",
    "InternalFault",
    "InvalidParameterError",
    "Pair",
    "ParameterSyntaxError",
    "SimpleSystem",
    "Status",
    "SystemBase",
    "last_error",
    "register_calculator",
]
