"""
Unit tests for atomdesc.system and atomdesc.simple_system modules.

"""

import numpy as np
import pytest

from atomdesc.exceptions import InternalFault, InvalidParameterError
from atomdesc.simple_system import SimpleSystem
from atomdesc.system import CallbackSystem, GuardedSystem, Pair

from .systems import BrokenSystem, ChainSystem, chain_callback_system


class TestPair:

    def test_distance_and_other(self):
        pair = Pair(2, 5, (3.0, 0.0, 4.0))
        assert pair.distance == pytest.approx(5.0)
        assert pair.other(2) == 5
        assert pair.other(5) == 2


class TestChainSystem:

    def test_default_pairs_containing(self):
        system = ChainSystem()
        assert [(p.first, p.second) for p in system.pairs_containing(1)] \
            == [(0, 1), (1, 2)]
        assert [(p.first, p.second) for p in system.pairs_containing(3)] \
            == [(2, 3)]

    def test_is_periodic(self):
        assert ChainSystem().is_periodic()


class TestCallbackSystem:

    def test_atomic_data(self):
        system = chain_callback_system()
        assert system.size() == 4
        assert system.species().tolist() == [1, 1, 6, 8]
        assert system.positions().shape == (4, 3)
        assert np.allclose(system.cell(), 10.0*np.eye(3))

    def test_neighbors(self):
        system = chain_callback_system()
        system.compute_neighbors(3.0)
        assert system.user_data.computed == [3.0]
        pairs = system.pairs()
        assert all(isinstance(p, Pair) for p in pairs)
        assert [(p.first, p.second) for p in pairs] == [(0, 1), (1, 2),
                                                        (2, 3)]

    def test_pairs_containing_fallback(self):
        without = chain_callback_system()
        with_function = chain_callback_system(with_pairs_containing=True)
        for center in range(4):
            assert without.pairs_containing(center) \
                == with_function.pairs_containing(center)

    def test_missing_function(self):
        system = CallbackSystem(None, size=lambda data: 3)
        assert system.size() == 3
        with pytest.raises(InvalidParameterError):
            system.species()


class TestGuardedSystem:

    def test_forwards_calls(self):
        system = GuardedSystem(ChainSystem(), 2)
        assert system.size() == 4
        assert system.species().tolist() == [1, 1, 6, 8]
        assert len(system.pairs_containing(2)) == 2

    def test_contains_faults(self):
        system = GuardedSystem(BrokenSystem(), 3)
        with pytest.raises(InternalFault) as info:
            system.positions()
        assert "system 3" in str(info.value)
        assert "positions are not available" in str(info.value)

    def test_wrong_species_length(self):
        system = GuardedSystem(ChainSystem(species=[1, 1, 1]), 0)
        with pytest.raises(InvalidParameterError):
            system.species()


class TestSimpleSystem:

    def test_construction(self):
        system = SimpleSystem([1, 8], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        assert system.size() == 2
        assert not system.is_periodic()
        assert np.all(system.cell() == 0.0)

    def test_invalid_data(self):
        with pytest.raises(InvalidParameterError):
            SimpleSystem([1, 8], [[0.0, 0.0, 0.0]])
        with pytest.raises(InvalidParameterError):
            SimpleSystem([1], [[0.0, 0.0]])
        with pytest.raises(InvalidParameterError):
            SimpleSystem([1], [[0.0, 0.0, 0.0]], cell=np.eye(2))

    def test_pairs_need_neighbors(self):
        system = SimpleSystem([1, 8], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        with pytest.raises(InvalidParameterError):
            system.pairs()
        with pytest.raises(InvalidParameterError):
            system.pairs_containing(0)

    def test_invalid_cutoff(self):
        system = SimpleSystem([1, 8], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        with pytest.raises(InvalidParameterError):
            system.compute_neighbors(-1.0)

    def test_same_pairs_as_chain(self):
        chain = ChainSystem()
        system = SimpleSystem.from_system(chain)
        system.compute_neighbors(3.0)

        def summary(pairs):
            return [(p.first, p.second) for p in pairs]

        assert summary(system.pairs()) == summary(chain.pairs())
        for pair in system.pairs():
            assert np.allclose(pair.vector, (1.0, 1.0, 1.0))
        for center in range(4):
            assert summary(system.pairs_containing(center)) \
                == summary(chain.pairs_containing(center))

    def test_periodic_pairs(self):
        system = SimpleSystem([1, 1], [[0.5, 0.0, 0.0], [9.5, 0.0, 0.0]],
                              cell=10.0*np.eye(3))
        system.compute_neighbors(2.0)
        pairs = system.pairs()
        assert len(pairs) == 1
        assert pairs[0].distance == pytest.approx(1.0)

        system.compute_neighbors(0.5)
        assert system.pairs() == []
