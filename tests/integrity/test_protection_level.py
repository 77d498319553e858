#!/usr/bin/env python3
"""Test suite for protection level computation"""

import unittest
import numpy as np
from pysbas.integrity.protection_level import (
    PLStatus, ProtectionLevels, geometry_matrix, position_covariance,
    compute_protection_levels, vertical_multiplier
)


class TestGeometryMatrix(unittest.TestCase):

    def test_rows(self):
        az = np.radians([0.0, 90.0])
        el = np.radians([90.0, 0.0])
        G = geometry_matrix(az, el)
        np.testing.assert_allclose(G[0], [0.0, 0.0, -1.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(G[1], [-1.0, 0.0, 0.0, 1.0], atol=1e-12)

    def test_equal_weights_match_inverse(self):
        az = np.radians([0.0, 90.0, 180.0, 270.0, 45.0])
        el = np.radians([20.0, 35.0, 50.0, 25.0, 85.0])
        G = geometry_matrix(az, el)
        D = position_covariance(G, np.full(5, 2.0))
        np.testing.assert_allclose(D, 2.0 * np.linalg.inv(G.T @ G), rtol=1e-10)


class TestMultiplier(unittest.TestCase):

    def test_vertical_multiplier(self):
        self.assertAlmostEqual(vertical_multiplier(1e-7), 5.33, delta=0.01)
        self.assertGreater(vertical_multiplier(1e-9), vertical_multiplier(1e-7))

    def test_invalid_probability(self):
        with self.assertRaises(ValueError):
            vertical_multiplier(0.0)
        with self.assertRaises(ValueError):
            vertical_multiplier(1.5)


class TestProtectionLevels(unittest.TestCase):

    def setUp(self):
        self.az = np.radians([0.0, 90.0, 180.0, 270.0, 45.0])
        self.el = np.radians([20.0, 35.0, 50.0, 25.0, 85.0])

    def test_known_values(self):
        sig2 = np.full(5, 5.0)
        pl = compute_protection_levels(self.az, self.el, sig2)
        G = geometry_matrix(self.az, self.el)
        D = 5.0 * np.linalg.inv(G.T @ G)
        self.assertEqual(pl.status, PLStatus.VALID)
        self.assertTrue(pl.is_defined)
        self.assertAlmostEqual(pl.vpl, 5.33 * np.sqrt(D[2, 2]))
        self.assertAlmostEqual(pl.hpl, 6.0 * np.sqrt(np.linalg.eigvalsh(D[:2, :2]).max()))
        self.assertEqual(pl.n_used, 5)

    def test_multipliers_configurable(self):
        sig2 = np.full(5, 5.0)
        a = compute_protection_levels(self.az, self.el, sig2)
        b = compute_protection_levels(self.az, self.el, sig2, k_v=2 * 5.33, k_h=3 * 6.0)
        self.assertAlmostEqual(b.vpl, 2 * a.vpl)
        self.assertAlmostEqual(b.hpl, 3 * a.hpl)

    def test_four_satellites_enough(self):
        pl = compute_protection_levels(self.az[:4], self.el[:4], np.ones(4))
        self.assertEqual(pl.status, PLStatus.VALID)
        self.assertTrue(np.isfinite(pl.vpl) and np.isfinite(pl.hpl))

    def test_three_satellites_insufficient(self):
        with self.assertLogs('pysbas.integrity.protection_level', level='INFO'):
            pl = compute_protection_levels(self.az[:3], self.el[:3], np.ones(3))
        self.assertEqual(pl.status, PLStatus.INSUFFICIENT_GEOMETRY)
        self.assertIsNone(pl.vpl)
        self.assertIsNone(pl.hpl)
        self.assertFalse(pl.is_defined)

    def test_infinite_variance_excluded(self):
        sig2 = np.array([1.0, 1.0, np.inf, 1.0, 1.0])
        pl = compute_protection_levels(self.az, self.el, sig2)
        self.assertEqual(pl.n_used, 4)
        sig2[0] = np.inf
        self.assertEqual(compute_protection_levels(self.az, self.el, sig2).status,
                         PLStatus.INSUFFICIENT_GEOMETRY)

    def test_zero_variance_rejected(self):
        with self.assertRaises(ValueError):
            compute_protection_levels(self.az[:4], self.el[:4], [0.0, 1.0, 1.0, 1.0])
        # masked out satellites are not checked
        mask = np.array([False, True, True, True, True])
        pl = compute_protection_levels(self.az, self.el, [0.0, 1.0, 1.0, 1.0, 1.0], mask=mask)
        self.assertEqual(pl.status, PLStatus.VALID)
        self.assertEqual(pl.n_used, 4)

    def test_mask(self):
        mask = np.array([True, True, True, True, False])
        pl = compute_protection_levels(self.az, self.el, np.ones(5), mask=mask)
        self.assertEqual(pl.n_used, 4)

    def test_monotone_in_variance(self):
        base = compute_protection_levels(self.az, self.el, np.full(5, 5.0))
        for i in range(5):
            sig2 = np.full(5, 5.0)
            sig2[i] = 6.5
            pl = compute_protection_levels(self.az, self.el, sig2)
            self.assertGreaterEqual(pl.vpl, base.vpl - 1e-12)
            self.assertGreaterEqual(pl.hpl, base.hpl - 1e-12)

    def test_removing_satellite_does_not_shrink(self):
        base = compute_protection_levels(self.az, self.el, np.full(5, 5.0))
        fewer = compute_protection_levels(self.az[:4], self.el[:4], np.full(4, 5.0))
        self.assertGreaterEqual(fewer.vpl, base.vpl)
        self.assertGreaterEqual(fewer.hpl, base.hpl)

    def test_not_computed(self):
        pl = ProtectionLevels.not_computed()
        self.assertEqual(pl.status, PLStatus.NOT_COMPUTED)
        self.assertIsNone(pl.vpl)


if __name__ == '__main__':
    unittest.main()
