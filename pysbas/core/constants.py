# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""SBAS Constants and System Parameters"""

import numpy as np

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# Frequencies used by L1 SBAS and L5 DFMC SBAS
FREQ_L1 = 1.57542E9   # L1 frequency (Hz)
FREQ_L5 = 1.17645E9   # L5 frequency (Hz)

# Earth Parameters (WGS84)
RE_WGS84 = 6378137.0           # earth semimajor axis (m)
FE_WGS84 = 1.0 / 298.257223563 # earth flattening

# Unit conversions
R2D = 180.0 / np.pi            # radians to degrees
D2R = np.pi / 180.0            # degrees to radians
SC2RAD = np.pi                 # semicircles to radians

# Powers of two used as broadcast field resolutions
P2_5 = 2.0 ** -5
P2_11 = 2.0 ** -11
P2_12 = 2.0 ** -12
P2_19 = 2.0 ** -19
P2_21 = 2.0 ** -21
P2_30 = 2.0 ** -30
P2_33 = 2.0 ** -33

# Broadcast frame
MSG_BITS = 250                 # bits per SBAS message block
MSG_BYTES = 32                 # 250 bits padded to a byte boundary
MT_BITS = 6                    # message type field width
CRC_BITS = 24                  # CRC-24Q parity
BAND_L1 = "L1"
BAND_L5 = "L5"
PREAMBLE_BITS = {BAND_L1: 8, BAND_L5: 4}
MIN_MSG_TYPE = 1
MAX_MSG_TYPE = 63

# Thin-shell ionosphere (MOPS A.4.4.10)
RE_IONO = 6378136.3            # earth radius for pierce point geometry (m)
HION = 350.0E3                 # ionospheric shell height (m)

# UDRE indicator -> sigma^2_UDRE (m^2), MOPS Table A-6
SIG2_UDRE = np.array([
    0.0520, 0.0924, 0.1444, 0.2830, 0.4678, 0.8315, 1.2992, 1.8709,
    2.5465, 3.3260, 5.1968, 20.7870, 230.9661, 2078.695,
])
UDREI_NOT_MONITORED = 14
UDREI_DO_NOT_USE = 15
UDREI_MAX = 15
IODF_ALARM = 3                 # MT6 IODF that applies to any fast correction

# DFRE indicator -> sigma_DFRE (m), default table used until MT37 is received
SIG_DFRE = np.array([
    0.125, 0.25, 0.375, 0.5, 0.625, 0.75, 1.0, 1.25,
    1.5, 1.75, 2.0, 2.5, 3.0, 4.0, 5.0,
])
DFREI_DO_NOT_USE = 15

# MT37 DFREI table resolutions (m per count)
DFREI_TABLE_SCALE = np.array([
    0.0625, 0.125, 0.125, 0.125, 0.125, 0.25, 0.25, 0.25,
    0.25, 0.25, 0.5, 0.5, 1.0, 3.0, 6.0,
])

# Fast correction degradation factor indicator -> a_i (m/s^2), MOPS Table A-8
AI_TABLE = np.array([
    0.0, 0.05, 0.09, 0.12, 0.15, 0.20, 0.30, 0.45,
    0.60, 0.90, 1.50, 2.10, 2.70, 3.30, 4.60, 5.80,
]) * 1.0E-3

# Tropospheric residual (MOPS A.4.2.4)
SIGMA_TVE = 0.12               # vertical tropospheric error std (m)

# Airborne code noise and multipath (MOPS J.2.4)
SIGMA_NOISE_AAD = {"AAD-A": 0.36, "AAD-B": 0.15}
MP_A = 0.13                    # multipath floor (m)
MP_B = 0.53                    # multipath elevation amplitude (m)
MP_E0 = 10.0                   # multipath elevation decay (deg)

# Protection level multipliers and geometry
K_V_PA = 5.33                  # vertical, precision approach
K_H_PA = 6.0                   # horizontal, precision approach
K_H_NPA = 6.18                 # horizontal, en route / non-precision approach
MIN_SATS = 4                   # position + clock
ELEVATION_MASK = 5.0           # deg
