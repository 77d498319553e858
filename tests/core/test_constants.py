#!/usr/bin/env python3
"""Test suite for SBAS constants and tables"""

import unittest
import numpy as np
from pysbas.core.constants import (
    CLIGHT, FREQ_L1, FREQ_L5, RE_WGS84, FE_WGS84, RE_IONO, HION,
    SIG2_UDRE, UDREI_NOT_MONITORED, UDREI_DO_NOT_USE, SIG_DFRE,
    DFREI_TABLE_SCALE, AI_TABLE, SIGMA_NOISE_AAD,
    MSG_BITS, MSG_BYTES, MT_BITS, CRC_BITS, PREAMBLE_BITS, BAND_L1, BAND_L5,
    K_V_PA, K_H_PA, MIN_SATS, ELEVATION_MASK
)


class TestPhysicalConstants(unittest.TestCase):
    """Test physical constants values"""

    def test_speed_of_light(self):
        self.assertEqual(CLIGHT, 299792458.0)

    def test_frequencies(self):
        """L1 ~1575.42 MHz, L5 ~1176.45 MHz"""
        self.assertAlmostEqual(FREQ_L1, 1575.42e6, delta=1e3)
        self.assertAlmostEqual(FREQ_L5, 1176.45e6, delta=1e3)
        self.assertGreater(FREQ_L1, FREQ_L5)

    def test_earth_parameters(self):
        self.assertAlmostEqual(RE_WGS84, 6378137.0, delta=1.0)
        self.assertAlmostEqual(FE_WGS84, 1.0/298.257223563, delta=1e-12)
        self.assertEqual(RE_IONO, 6378136.3)
        self.assertEqual(HION, 350e3)


class TestFrameConstants(unittest.TestCase):

    def test_frame_sizes(self):
        self.assertEqual(MSG_BITS, 250)
        self.assertGreaterEqual(MSG_BYTES * 8, MSG_BITS)
        self.assertEqual(MT_BITS, 6)
        self.assertEqual(CRC_BITS, 24)

    def test_data_bits_per_band(self):
        # L1: 212 data bits, L5: 216 data bits
        self.assertEqual(MSG_BITS - CRC_BITS - PREAMBLE_BITS[BAND_L1] - MT_BITS, 212)
        self.assertEqual(MSG_BITS - CRC_BITS - PREAMBLE_BITS[BAND_L5] - MT_BITS, 216)


class TestIntegrityTables(unittest.TestCase):

    def test_udre_table(self):
        """Table covers UDREI 0-13 and increases monotonically"""
        self.assertEqual(len(SIG2_UDRE), UDREI_NOT_MONITORED)
        self.assertEqual(UDREI_DO_NOT_USE, 15)
        self.assertTrue(np.all(np.diff(SIG2_UDRE) > 0))
        self.assertAlmostEqual(SIG2_UDRE[0], 0.0520)
        self.assertAlmostEqual(SIG2_UDRE[13], 2078.695)

    def test_dfre_tables(self):
        self.assertEqual(len(SIG_DFRE), 15)
        self.assertEqual(len(DFREI_TABLE_SCALE), 15)
        self.assertTrue(np.all(np.diff(SIG_DFRE) > 0))

    def test_ai_table(self):
        self.assertEqual(len(AI_TABLE), 16)
        self.assertEqual(AI_TABLE[0], 0.0)
        self.assertAlmostEqual(AI_TABLE[15], 5.8e-3)

    def test_receiver_noise(self):
        self.assertEqual(SIGMA_NOISE_AAD["AAD-A"], 0.36)
        self.assertEqual(SIGMA_NOISE_AAD["AAD-B"], 0.15)

    def test_protection_level_defaults(self):
        self.assertEqual(K_V_PA, 5.33)
        self.assertEqual(K_H_PA, 6.0)
        self.assertEqual(MIN_SATS, 4)
        self.assertEqual(ELEVATION_MASK, 5.0)


if __name__ == '__main__':
    unittest.main()
