"""
Unit tests for atomdesc.calculator and the calculators it provides.

"""

import logging

import numpy as np
import pytest

from atomdesc.calculator import CalculationOptions, Calculator
from atomdesc.calculators import REGISTERED_CALCULATORS
from atomdesc.descriptor import Descriptor
from atomdesc.exceptions import (EncodingError, InternalFault,
                                 InvalidParameterError, ParameterSyntaxError)

from .systems import BrokenSystem, ChainSystem, dummy_parameters


class TestCalculatorCreation:

    def test_registered(self):
        assert "dummy_calculator" in REGISTERED_CALCULATORS
        assert "sorted_distances" in REGISTERED_CALCULATORS

    def test_name_and_parameters(self):
        parameters = dummy_parameters()
        calculator = Calculator("dummy_calculator", parameters)
        assert calculator.name == "dummy_calculator"
        assert calculator.parameters == parameters

        calculator = Calculator(b"dummy_calculator", parameters.encode())
        assert calculator.name == "dummy_calculator"

    def test_unknown_name(self):
        with pytest.raises(InvalidParameterError, match="unknown calculator"):
            Calculator("not_a_calculator", "{}")

    def test_malformed_parameters(self):
        with pytest.raises(ParameterSyntaxError):
            Calculator("dummy_calculator", '{"cutoff": 3.0,')

    def test_invalid_encoding(self):
        with pytest.raises(EncodingError):
            Calculator(b"dummy_\xff", "{}")
        with pytest.raises(EncodingError):
            Calculator("dummy_calculator", b'{"name": "\xff"}')

    def test_invalid_parameters(self):
        with pytest.raises(InvalidParameterError):
            Calculator("dummy_calculator", '{"cutoff": 3.0, "delta": 1}')
        with pytest.raises(InvalidParameterError):
            Calculator("dummy_calculator",
                       '{"cutoff": "3", "delta": 1, "name": ""}')
        with pytest.raises(InvalidParameterError):
            Calculator("dummy_calculator",
                       '{"cutoff": 3.0, "delta": 1, "name": "", "foo": 1}')
        with pytest.raises(InvalidParameterError):
            Calculator("dummy_calculator",
                       '{"cutoff": -3.0, "delta": 1, "name": ""}')
        with pytest.raises(InvalidParameterError):
            Calculator("dummy_calculator", '[1, 2, 3]')
        with pytest.raises(InvalidParameterError):
            Calculator("sorted_distances",
                       '{"cutoff": 3.0, "max_neighbors": 0}')


class TestDummyCalculator:

    def test_values(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        descriptor = calculator.compute(ChainSystem(), n_threads=1)

        assert descriptor.samples.names == ("structure", "atom")
        assert list(descriptor.samples) == [(0, 0), (0, 1), (0, 2), (0, 3)]
        assert descriptor.features.names == ("index_delta", "x_y_z")
        assert list(descriptor.features) == [(1, 0), (0, 1)]
        assert np.array_equal(descriptor.values,
                              [[5, 0], [6, 3], [7, 6], [8, 9]])

    def test_gradients(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        descriptor = calculator.compute([ChainSystem()], n_threads=1)

        gradient_samples = descriptor.gradient_samples
        assert gradient_samples.names == ("structure", "atom", "neighbor",
                                          "spatial")
        assert gradient_samples.count == 18
        assert list(gradient_samples)[:4] == [(0, 0, 1, 0), (0, 0, 1, 1),
                                              (0, 0, 1, 2), (0, 1, 0, 0)]
        assert np.all(descriptor.gradients[:, 0] == 0.0)
        assert np.all(descriptor.gradients[:, 1] == 1.0)

    def test_no_gradients(self):
        calculator = Calculator("dummy_calculator",
                                dummy_parameters(gradients=False))
        descriptor = calculator.compute([ChainSystem()], n_threads=1)
        assert descriptor.gradients is None
        assert descriptor.gradient_samples is None

    def test_several_systems(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        descriptor = calculator.compute([ChainSystem(), ChainSystem()],
                                        n_threads=1)
        assert descriptor.samples.count == 8
        assert descriptor.samples[4] == (1, 0)
        assert descriptor.gradient_samples.count == 36
        assert np.array_equal(descriptor.values[4:], descriptor.values[:4])

    def test_threads_give_same_result(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        systems = [ChainSystem() for _ in range(5)]
        serial = calculator.compute(systems, n_threads=1)
        parallel = calculator.compute(systems, n_threads=4)
        assert serial.samples == parallel.samples
        assert serial.gradient_samples == parallel.gradient_samples
        assert np.array_equal(serial.values, parallel.values)
        assert np.array_equal(serial.gradients, parallel.gradients)

    def test_native_system(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        callback = calculator.compute([ChainSystem()], n_threads=1)
        native = calculator.compute([ChainSystem()], n_threads=1,
                                    use_native_system=True)
        assert callback.samples == native.samples
        assert callback.gradient_samples == native.gradient_samples
        assert np.array_equal(callback.values, native.values)

    def test_reuse_descriptor(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        descriptor = Descriptor()
        result = calculator.compute([ChainSystem()], descriptor, n_threads=1)
        assert result is descriptor
        assert descriptor.values.shape == (4, 2)

        calculator = Calculator("dummy_calculator",
                                dummy_parameters(delta=1, gradients=False))
        calculator.compute([ChainSystem()], descriptor, n_threads=1)
        assert descriptor.values[:, 0].tolist() == [1, 2, 3, 4]
        assert descriptor.gradients is None

    def test_options_and_keywords(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        with pytest.raises(TypeError):
            calculator.compute([ChainSystem()],
                               options=CalculationOptions(), n_threads=1)


class TestSelection:

    def test_selected_samples(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        options = CalculationOptions(selected_samples=[[0, 3], [0, 1]],
                                     n_threads=1)
        descriptor = calculator.compute([ChainSystem()], options=options)

        # natural order is kept
        assert list(descriptor.samples) == [(0, 1), (0, 3)]
        assert np.array_equal(descriptor.values, [[6, 3], [8, 9]])
        atoms = set(g[1] for g in descriptor.gradient_samples)
        assert atoms == {1, 3}
        assert descriptor.gradient_samples.count == 9

    def test_selected_features(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        descriptor = calculator.compute(
            [ChainSystem()], n_threads=1,
            selected_features=[[0, 1], [1, 0]])
        assert list(descriptor.features) == [(0, 1), (1, 0)]
        assert np.array_equal(descriptor.values,
                              [[0, 5], [3, 6], [6, 7], [9, 8]])
        assert np.all(descriptor.gradients[:, 0] == 1.0)

    def test_invalid_selection_keeps_descriptor(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())
        descriptor = calculator.compute([ChainSystem()], n_threads=1)
        values = descriptor.values.copy()
        samples = descriptor.samples

        with pytest.raises(InvalidParameterError):
            calculator.compute([ChainSystem()], descriptor, n_threads=1,
                               selected_features=[[2, 2]])
        with pytest.raises(InvalidParameterError):
            calculator.compute([ChainSystem()], descriptor, n_threads=1,
                               selected_samples=[[0, 7]])
        with pytest.raises(InvalidParameterError):
            calculator.compute([ChainSystem()], descriptor, n_threads=1,
                               selected_samples=[[0, 1, 2]])

        assert descriptor.samples is samples
        assert np.array_equal(descriptor.values, values)


class TestFaults:

    @pytest.mark.parametrize("n_threads", [1, 4])
    def test_system_fault(self, n_threads):
        calculator = Calculator("dummy_calculator",
                                dummy_parameters(gradients=False))
        descriptor = Descriptor()
        systems = [ChainSystem(), BrokenSystem(), ChainSystem()]
        with pytest.raises(InternalFault, match="system 1"):
            calculator.compute(systems, descriptor, n_threads=n_threads)
        assert descriptor.values.shape == (0, 0)

    def test_calculator_fault(self):
        calculator = Calculator("dummy_calculator", dummy_parameters())

        def fail(**kwargs):
            raise ZeroDivisionError("oops")

        calculator.implementation.compute_system = fail
        with pytest.raises(InternalFault, match="ZeroDivisionError"):
            calculator.compute([ChainSystem()], n_threads=1)


class TestLogging:

    def test_info(self, caplog):
        calculator = Calculator("dummy_calculator",
                                dummy_parameters(name="log-test-info"))
        with caplog.at_level(logging.INFO, logger="atomdesc.log"):
            calculator.compute([ChainSystem()], n_threads=1)
        assert any(r.levelno == logging.INFO
                   and r.getMessage() == "log-test-info"
                   for r in caplog.records)

    def test_warning(self, caplog):
        calculator = Calculator("dummy_calculator",
                                dummy_parameters(name="log-test-warn"))
        with caplog.at_level(logging.WARNING, logger="atomdesc.log"):
            calculator.compute([ChainSystem()], n_threads=1)
        assert any(r.levelno == logging.WARNING
                   and r.getMessage() == "log-test-warn"
                   for r in caplog.records)


class TestSortedDistances:

    def test_values(self):
        calculator = Calculator("sorted_distances",
                                '{"cutoff": 3.0, "max_neighbors": 3}')
        descriptor = calculator.compute([ChainSystem()], n_threads=1)
        assert descriptor.features.names == ("neighbor",)
        assert descriptor.features.count == 3
        d = np.sqrt(3.0)
        assert np.allclose(descriptor.values, [[d, 3.0, 3.0],
                                               [d, d, 3.0],
                                               [d, d, 3.0],
                                               [d, 3.0, 3.0]])
        assert descriptor.gradients is None

    def test_separate_species(self):
        calculator = Calculator(
            "sorted_distances",
            '{"cutoff": 3.0, "max_neighbors": 2, '
            '"separate_neighbor_species": true}')
        descriptor = calculator.compute([ChainSystem()], n_threads=1)
        assert descriptor.samples.names == ("structure", "center",
                                            "species_center",
                                            "species_neighbor")
        position = descriptor.samples.position((0, 1, 1, 6))
        d = np.sqrt(3.0)
        assert np.allclose(descriptor.values[position], [d, 3.0])
