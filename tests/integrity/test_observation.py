#!/usr/bin/env python3
"""Test suite for SBAS user observations"""

import unittest
import numpy as np
from pysbas.config import SBASConfig
from pysbas.core.constants import SIG2_UDRE
from pysbas.core.data_structures import UserGeometry, BroadcastIntegrity, FLTDegradation
from pysbas.integrity.ipp import UniformGrid
from pysbas.integrity.observation import SBASUserObservation, ObservationKind
from pysbas.integrity.protection_level import PLStatus, geometry_matrix


LLH = [37.4, -122.2, 30.0]
AZ = [10.0, 80.0, 150.0, 220.0, 290.0, 45.0]
EL = [15.0, 30.0, 45.0, 60.0, 20.0, 85.0]


def constant(value):
    def model(obs, *args):
        return np.full(obs.geometry.n_sats, value)
    return model


class TestUserObservation(unittest.TestCase):

    def setUp(self):
        self.geometry = UserGeometry.from_azel(LLH, AZ, EL, prns=[1, 2, 3, 4, 5, 6], time=60.0)
        self.integrity = BroadcastIntegrity.uniform(6, udrei=4, degradation=FLTDegradation(eps_fc=0.05))
        self.config = SBASConfig().validate()

    def test_all_terms_set(self):
        obs = SBASUserObservation(self.geometry, self.integrity, self.config)
        self.assertEqual(obs.kind, ObservationKind.USER)
        for term in (obs.sig2_tropo, obs.sig2_cnmp, obs.sig2_udre, obs.sig2_flt):
            self.assertEqual(term.shape, (6,))
            self.assertTrue(np.all(term >= 0))
        np.testing.assert_allclose(obs.sig2_udre, SIG2_UDRE[4])
        self.assertIsNone(obs.sig2_uire)
        self.assertEqual(obs.ipp.shape, (6, 3))
        self.assertEqual(obs.protection_levels.status, PLStatus.VALID)
        self.assertGreater(obs.vpl, 0.0)
        self.assertGreater(obs.hpl, 0.0)
        self.assertTrue(obs.usable.all())

    def test_fields_read_only(self):
        obs = SBASUserObservation(self.geometry, self.integrity, self.config)
        with self.assertRaises(ValueError):
            obs.sig2_tropo[0] = 0.0
        with self.assertRaises(ValueError):
            obs.ipp[0, 0] = 0.0
        with self.assertRaises(AttributeError):
            obs.vpl = 1.0

    def test_default_config(self):
        obs = SBASUserObservation(self.geometry, self.integrity)
        self.assertEqual(obs.config.k_v, 5.33)

    def test_do_not_use_excluded(self):
        integrity = BroadcastIntegrity([4, 4, 15, 4, 14, 4])
        obs = SBASUserObservation(self.geometry, integrity, self.config)
        self.assertTrue(np.isinf(obs.sig2_udre[2]))
        self.assertTrue(np.isinf(obs.sig2_flt[2]))
        self.assertTrue(np.isinf(obs.sig2_udre[4]))
        np.testing.assert_array_equal(obs.usable, [True, True, False, True, False, True])
        self.assertEqual(obs.protection_levels.n_used, 4)
        self.assertEqual(obs.protection_levels.status, PLStatus.VALID)

    def test_three_usable_is_insufficient(self):
        integrity = BroadcastIntegrity([4, 15, 15, 4, 15, 4])
        obs = SBASUserObservation(self.geometry, integrity, self.config)
        self.assertEqual(obs.protection_levels.status, PLStatus.INSUFFICIENT_GEOMETRY)
        self.assertIsNone(obs.vpl)
        self.assertIsNone(obs.hpl)

    def test_elevation_mask(self):
        config = SBASConfig(elevation_mask_deg=16.0).validate()
        obs = SBASUserObservation(self.geometry, self.integrity, config)
        self.assertFalse(obs.usable[0])
        self.assertTrue(obs.usable[1:].all())
        self.assertEqual(obs.protection_levels.n_used, 5)

    def test_integrity_required_and_aligned(self):
        with self.assertRaises(ValueError):
            SBASUserObservation(self.geometry, None, self.config)
        with self.assertRaises(ValueError):
            SBASUserObservation(self.geometry, BroadcastIntegrity.uniform(5, 4), self.config)


class TestReferenceObservation(unittest.TestCase):

    def test_no_udre_flt_or_levels(self):
        geometry = UserGeometry.from_azel(LLH, AZ, EL)
        obs = SBASUserObservation.reference(geometry, SBASConfig().validate())
        self.assertTrue(obs.is_reference)
        self.assertIsNone(obs.sig2_udre)
        self.assertIsNone(obs.sig2_flt)
        self.assertIsNone(obs.integrity)
        self.assertEqual(obs.protection_levels.status, PLStatus.NOT_COMPUTED)
        self.assertIsNone(obs.vpl)
        self.assertIsNone(obs.hpl)
        self.assertEqual(obs.sig2_tropo.shape, (6,))
        self.assertEqual(obs.ipp.shape, (6, 3))
        np.testing.assert_allclose(obs.sig2_total, obs.sig2_tropo + obs.sig2_cnmp)

    def test_reference_ignores_integrity(self):
        geometry = UserGeometry.from_azel(LLH, AZ, EL)
        obs = SBASUserObservation(geometry, BroadcastIntegrity.uniform(6, 4),
                                  kind=ObservationKind.REFERENCE)
        self.assertIsNone(obs.sig2_udre)

    def test_override_not_called_for_udre(self):
        calls = []

        def udre(obs, udrei):
            calls.append(1)
            return np.ones(obs.geometry.n_sats)

        config = SBASConfig(overrides={'udre': udre}).validate()
        SBASUserObservation.reference(UserGeometry.from_azel(LLH, AZ, EL), config)
        self.assertEqual(calls, [])


class TestOverriddenModels(unittest.TestCase):
    """Protection levels from fixed variance terms"""

    def setUp(self):
        self.geometry = UserGeometry.from_azel(LLH, AZ[:5], EL[:5])
        self.integrity = BroadcastIntegrity.uniform(5, udrei=4)

    def config(self, flt=1.5):
        return SBASConfig(overrides={'tropo': constant(1.0), 'cnmp': constant(0.5),
                                     'udre': constant(2.0), 'flt': constant(flt)}).validate()

    def test_levels_from_total_variance(self):
        obs = SBASUserObservation(self.geometry, self.integrity, self.config())
        np.testing.assert_allclose(obs.sig2_total, 5.0)
        G = geometry_matrix(self.geometry.azimuth, self.geometry.elevation)
        D = 5.0 * np.linalg.inv(G.T @ G)
        self.assertAlmostEqual(obs.vpl, 5.33 * np.sqrt(D[2, 2]))
        self.assertAlmostEqual(obs.hpl, 6.0 * np.sqrt(np.linalg.eigvalsh(D[:2, :2]).max()))

    def test_levels_grow_with_variance(self):
        low = SBASUserObservation(self.geometry, self.integrity, self.config(1.5))
        high = SBASUserObservation(self.geometry, self.integrity, self.config(3.0))
        self.assertGreater(high.vpl, low.vpl)
        self.assertGreater(high.hpl, low.hpl)

    def test_scalar_result_broadcast(self):
        config = SBASConfig(overrides={'tropo': lambda obs: 0.25}).validate()
        obs = SBASUserObservation(self.geometry, self.integrity, config)
        np.testing.assert_allclose(obs.sig2_tropo, 0.25)

    def test_bad_override_output(self):
        wrong_shape = SBASConfig(overrides={'cnmp': lambda obs: np.ones(3)}).validate()
        with self.assertRaises(ValueError):
            SBASUserObservation(self.geometry, self.integrity, wrong_shape)
        negative = SBASConfig(overrides={'cnmp': lambda obs: -np.ones(5)}).validate()
        with self.assertRaises(ValueError):
            SBASUserObservation(self.geometry, self.integrity, negative)
        nan = SBASConfig(overrides={'tropo': lambda obs: np.full(5, np.nan)}).validate()
        with self.assertRaises(ValueError):
            SBASUserObservation(self.geometry, self.integrity, nan)

    def test_zero_total_variance_rejected(self):
        zero = SBASConfig(overrides={'tropo': constant(0.0), 'cnmp': constant(0.0),
                                     'udre': constant(0.0), 'flt': constant(0.0)}).validate()
        with self.assertRaises(ValueError):
            SBASUserObservation(self.geometry, self.integrity, zero)
        # a zero term is fine while the total stays positive
        obs = SBASUserObservation(self.geometry, self.integrity, self.config(flt=0.0))
        self.assertEqual(obs.protection_levels.status, PLStatus.VALID)


class TestIonosphere(unittest.TestCase):

    def setUp(self):
        self.geometry = UserGeometry.from_azel(LLH, AZ, EL)
        self.integrity = BroadcastIntegrity.uniform(6, udrei=4)

    def test_grid_adds_uire(self):
        plain = SBASUserObservation(self.geometry, self.integrity)
        with_grid = SBASUserObservation(self.geometry, self.integrity, iono_grid=UniformGrid(0.3))
        self.assertTrue(np.all(with_grid.sig2_uire > 0.3 - 1e-12))
        np.testing.assert_allclose(with_grid.sig2_total, plain.sig2_total + with_grid.sig2_uire)
        self.assertGreater(with_grid.vpl, plain.vpl)

    def test_dual_frequency_skips_grid(self):
        config = SBASConfig(dual_frequency=True).validate()
        obs = SBASUserObservation(self.geometry, self.integrity, config, iono_grid=UniformGrid(0.3))
        self.assertIsNone(obs.sig2_uire)

    def test_uncovered_pierce_points_excluded(self):
        obs = SBASUserObservation(self.geometry, self.integrity, iono_grid=UniformGrid(0.3, 10.0))
        self.assertFalse(obs.usable.any())
        self.assertEqual(obs.protection_levels.status, PLStatus.INSUFFICIENT_GEOMETRY)


if __name__ == '__main__':
    unittest.main()
