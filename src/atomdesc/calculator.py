"""
Calculator: run a named feature algorithm on a list of systems and store
the results in a Descriptor.

"""

import json
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from . import config
from .calculators import REGISTERED_CALCULATORS
from .descriptor import Descriptor
from .exceptions import (EncodingError, InvalidParameterError,
                         ParameterSyntaxError)
from .indexes import Indexes, as_indexes
from .log import logger
from .simple_system import SimpleSystem
from .status import contain
from .system import GuardedSystem, SystemBase

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


@dataclass
class CalculationOptions:
    """
    Options for `Calculator.compute`.

    Parameters
    ----------
    use_native_system : bool, optional
        Copy the data of every system into a `SimpleSystem` before the
        calculation.  Defaults to the `compute.use_native_system` setting.
    selected_samples : Indexes or array_like, optional
        Only compute these samples.  Rows use the columns of the natural
        samples of the calculator; all of them must be part of these
        samples.  Gradient samples are derived from the selected samples.
    selected_features : Indexes or array_like, optional
        Only compute these features, in this order.  All rows must be part
        of the natural features of the calculator.
    n_threads : int, optional
        Number of threads used to fill values for several systems.
        Defaults to the `compute.n_threads` setting.
    """

    use_native_system: Optional[bool] = None
    selected_samples: Optional[Union[Indexes, np.ndarray]] = None
    selected_features: Optional[Union[Indexes, np.ndarray]] = None
    n_threads: Optional[int] = None


class Calculator(object):
    """
    A feature algorithm selected by `name` and configured with JSON
    `parameters`.  Name and parameters are fixed at construction.

    Example:
        >>> calculator = Calculator("dummy_calculator",
        ...     '{"cutoff": 3.0, "delta": 5, "name": "", "gradients": true}')
        >>> descriptor = calculator.compute([system])
        >>> descriptor.values.shape
        (4, 2)
    """

    def __init__(self, name: Union[str, bytes],
                 parameters: Union[str, bytes]):
        name = _decode(name, "calculator name")
        parameters = _decode(parameters, "calculator parameters")

        if name not in REGISTERED_CALCULATORS:
            raise InvalidParameterError(
                "unknown calculator with name '{}'".format(name))

        try:
            raw = json.loads(parameters)
        except json.JSONDecodeError as e:
            raise ParameterSyntaxError(str(e)) from e

        cls = REGISTERED_CALCULATORS[name]
        self._name = name
        self._parameters = parameters
        self._implementation = contain(
            "calculator '{}' initialization".format(name), cls.from_dict, raw)

    def __str__(self):
        return "Calculator '{}'".format(self._name)

    def __repr__(self):
        return "Calculator({!r}, {!r})".format(self._name, self._parameters)

    @property
    def name(self) -> str:
        return self._name

    @property
    def parameters(self) -> str:
        """
        The parameters used to create this calculator, as given.
        """
        return self._parameters

    @property
    def implementation(self):
        return self._implementation

    def features(self) -> Indexes:
        """
        The full set of features of this calculator.
        """
        return contain("calculator '{}' features".format(self._name),
                       self._implementation.features)

    def compute(self, systems: Union[SystemBase, Sequence[SystemBase]],
                descriptor: Optional[Descriptor] = None,
                options: Optional[CalculationOptions] = None,
                **kwargs) -> Descriptor:
        """
        Compute the representation of all `systems`.

        Arguments:
          systems     one system or a list of systems
          descriptor  (optional) descriptor in which to store the data;
                      its previous contents are replaced.  A new
                      descriptor is created if none is given.
          options     (optional) CalculationOptions; keyword arguments
                      with the same names are accepted as a shortcut

        Returns:
          The descriptor.  If the calculation fails, the previous contents
          of the descriptor are left untouched.

        """
        if options is None:
            options = CalculationOptions(**kwargs)
        elif len(kwargs) > 0:
            raise TypeError("Unexpected keyword argument '{}'".format(
                next(iter(kwargs))))
        if descriptor is None:
            descriptor = Descriptor()
        if isinstance(systems, SystemBase):
            systems = [systems]

        settings = config.read("compute")
        use_native = options.use_native_system
        if use_native is None:
            use_native = bool(settings["use_native_system"])
        n_threads = options.n_threads
        if n_threads is None:
            n_threads = config.default_threads()

        systems = [GuardedSystem(s, i) for i, s in enumerate(systems)]
        if use_native:
            systems = [SimpleSystem.from_system(s) for s in systems]

        implementation = self._implementation
        builder = contain("calculator '{}' samples".format(self._name),
                          implementation.samples_builder)
        features = self._select_features(options.selected_features)

        # samples and gradient samples of each system, which fixes the
        # range of rows each system writes to
        samples = [self._system_samples(builder, i, s)
                   for i, s in enumerate(systems)]
        if options.selected_samples is not None:
            samples = _select_samples(builder, samples,
                                      options.selected_samples)
        if implementation.gradients:
            gradient_samples = [
                _unique(contain(
                    "system {}: gradient samples".format(i),
                    builder.system_gradient_samples, i, s, rows))
                for i, (s, rows) in enumerate(zip(systems, samples))]
        else:
            gradient_samples = None

        values = np.zeros((sum(len(r) for r in samples), features.count))
        if gradient_samples is not None:
            gradients = np.zeros((sum(len(r) for r in gradient_samples),
                                  features.count))
        else:
            gradients = None

        tasks = []
        start = gstart = 0
        for i, system in enumerate(systems):
            stop = start + len(samples[i])
            task = {
                "structure": i,
                "system": system,
                "samples": Indexes(builder.names, samples[i]),
                "features": features,
                "values": values[start:stop],
            }
            if gradients is not None:
                gstop = gstart + len(gradient_samples[i])
                task["gradient_samples"] = Indexes(builder.gradient_names,
                                                   gradient_samples[i])
                task["gradients"] = gradients[gstart:gstop]
                gstart = gstop
            start = stop
            if len(samples[i]) > 0:
                tasks.append(task)

        logger.debug("%s: %d systems, %d samples, %d features, "
                     "%s gradient samples, %d threads",
                     self._name, len(systems), values.shape[0],
                     features.count,
                     None if gradients is None else gradients.shape[0],
                     n_threads)

        self._fill(tasks, n_threads)

        all_samples = Indexes(builder.names,
                              [row for rows in samples for row in rows])
        if gradients is not None:
            all_gradient_samples = Indexes(
                builder.gradient_names,
                [row for rows in gradient_samples for row in rows])
            descriptor._set(all_samples, features, values,
                            all_gradient_samples, gradients)
        else:
            descriptor._set(all_samples, features, values)
        return descriptor

    def _select_features(self, selected):
        features = self.features()
        if selected is None:
            return features
        selected = as_indexes(features.names, selected, "selected features")
        for row in selected:
            if row not in features:
                raise InvalidParameterError(
                    "selected feature ({}) is not part of the features of "
                    "'{}'".format(", ".join(str(v) for v in row), self._name))
        return selected

    def _system_samples(self, builder, structure, system):
        rows = contain("system {}: samples".format(structure),
                       builder.system_samples, structure, system)
        return _unique(rows)

    def _fill(self, tasks, n_threads):
        what = "calculator '{}' on system {}"
        implementation = self._implementation

        def run(task):
            contain(what.format(self._name, task["structure"]),
                    implementation.compute_system, **task)

        if n_threads <= 1 or len(tasks) <= 1:
            for task in tasks:
                run(task)
            return

        with ThreadPoolExecutor(max_workers=min(n_threads, len(tasks))) \
                as executor:
            futures = [executor.submit(run, task) for task in tasks]
            wait(futures)

        # report the first failure once all systems are done
        for future in futures:
            error = future.exception()
            if error is not None:
                raise error


def _decode(text, what):
    if isinstance(text, (bytes, bytearray)):
        try:
            return bytes(text).decode("utf-8")
        except UnicodeDecodeError:
            raise EncodingError(
                "{} contains data that is not valid UTF-8".format(what))
    if not isinstance(text, str):
        raise InvalidParameterError("{} must be a string, got {}".format(
            what, type(text).__name__))
    return text


def _unique(rows):
    return list(dict.fromkeys(tuple(int(v) for v in row) for row in rows))


def _select_samples(builder, samples, selected):
    selected = as_indexes(builder.names, selected, "selected samples")
    natural = set(row for rows in samples for row in rows)
    for row in selected:
        if row not in natural:
            raise InvalidParameterError(
                "selected sample ({}) is not part of the samples for these "
                "systems".format(", ".join(str(v) for v in row)))
    return [[row for row in rows if row in selected] for rows in samples]
