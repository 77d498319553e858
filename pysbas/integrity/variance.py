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

"""
Built-in pseudorange error variance models (RTCA DO-229 Appendix A/J)
=====================================================================

Every model takes the observation being built and returns one variance
(m^2) per satellite, aligned with ``obs.geometry.prns``. The observation
object gives the models access to:

* ``obs.geometry`` : :class:`~pysbas.core.data_structures.UserGeometry`
* ``obs.config`` : :class:`~pysbas.config.SBASConfig`
* ``obs.sig2_udre`` : UDRE variances, already set when ``flt`` runs

Satellites that must not be used get ``np.inf``.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from ..core.constants import (
    D2R,
    FREQ_L1,
    FREQ_L5,
    MP_A,
    MP_B,
    MP_E0,
    SIG2_UDRE,
    SIGMA_NOISE_AAD,
    SIGMA_TVE,
    UDREI_MAX,
)
from ..core.data_structures import FLTDegradation

logger = logging.getLogger(__name__)

# Iono-free combination noise amplification
DUAL_FREQ_FACTOR = (FREQ_L1 ** 4 + FREQ_L5 ** 4) / (FREQ_L1 ** 2 - FREQ_L5 ** 2) ** 2


def tropo_mapping(el_deg: np.ndarray) -> np.ndarray:
    """
    MOPS tropospheric mapping function

    Parameters
    ----------
    el_deg : np.ndarray
        Elevation angles (deg)

    Returns
    -------
    np.ndarray
        m(E) = 1.001/sqrt(0.002001 + sin^2 E), times 1 + 0.015(4 - E)^2 below 4 deg
    """
    el_deg = np.asarray(el_deg, dtype=float)
    sin_el = np.sin(el_deg * D2R)
    m = 1.001 / np.sqrt(0.002001 + sin_el ** 2)
    low = el_deg < 4.0
    m = np.where(low, m * (1.0 + 0.015 * (4.0 - el_deg) ** 2), m)
    return m


def tropo_variance(obs) -> np.ndarray:
    """Residual tropospheric delay variance (m^2)"""
    return (SIGMA_TVE * tropo_mapping(obs.geometry.elevation_deg)) ** 2


def cnmp_variance(obs) -> np.ndarray:
    """
    Airborne code noise and multipath variance (m^2)

    sigma_mp = 0.13 + 0.53 exp(-E/10deg); sigma_noise from the receiver
    accuracy designator. Dual-frequency users are scaled by the
    iono-free combination factor.
    """
    el_deg = np.asarray(obs.geometry.elevation_deg, dtype=float)
    sig_noise = SIGMA_NOISE_AAD[obs.config.receiver_class]
    sig_mp = MP_A + MP_B * np.exp(-el_deg / MP_E0)
    sig2 = sig_noise ** 2 + sig_mp ** 2
    if obs.config.dual_frequency:
        sig2 = sig2 * DUAL_FREQ_FACTOR
    return sig2


def udre_variance(obs, udrei: Sequence[int]) -> np.ndarray:
    """
    UDRE variance (m^2) from the broadcast UDRE indicators

    Parameters
    ----------
    obs : SBASUserObservation
        Observation being built
    udrei : sequence of int
        UDREI per satellite, 0-15

    Returns
    -------
    np.ndarray
        Table value for UDREI 0-13; inf for 14 (not monitored) and 15 (do not use)

    Raises
    ------
    ValueError
        An indicator outside 0-15
    """
    udrei = np.atleast_1d(np.asarray(udrei, dtype=int))
    if np.any((udrei < 0) | (udrei > UDREI_MAX)):
        raise ValueError(f"UDREI outside 0-{UDREI_MAX}: {udrei.tolist()}")
    sig2 = np.full(udrei.shape, np.inf)
    monitored = udrei < len(SIG2_UDRE)
    sig2[monitored] = SIG2_UDRE[udrei[monitored]]
    if not monitored.all():
        logger.debug(f"UDREI 14/15 for PRNs "
                     f"{[p for p, m in zip(obs.geometry.prns, monitored) if not m]}")
    return sig2


def flt_variance(obs, degradations: Sequence[Optional[FLTDegradation]]) -> np.ndarray:
    """
    Fast/long-term correction variance (m^2)

    sigma_flt = sigma_UDRE * delta_UDRE + eps_fc + eps_rrc + eps_ltc + eps_er,
    squared; with the MT10 RSS flag the terms are root-sum-squared instead.
    Satellites without a degradation record fall back to sigma^2_UDRE.
    """
    sig2_udre = np.asarray(obs.sig2_udre, dtype=float)
    los = obs.geometry.los_ecef
    sig2 = sig2_udre.copy()
    for i, deg in enumerate(degradations):
        if deg is None or not np.isfinite(sig2_udre[i]):
            continue
        sig_udre = np.sqrt(sig2_udre[i]) * deg.delta_udre(los[i])[0]
        eps = deg.epsilon
        if deg.rss_udre:
            sig2[i] = sig_udre ** 2 + np.sum(eps ** 2)
        else:
            sig2[i] = (sig_udre + np.sum(eps)) ** 2
    return sig2
