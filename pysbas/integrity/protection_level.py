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
SBAS Protection Levels
======================

Weighted least-squares projection of the per-satellite error budget into
the position domain (RTCA DO-229 Appendix J).

With G rows ``[-cos E sin A, -cos E cos A, -sin E, 1]`` and
``W = diag(1 / sigma_i^2)``, the position covariance is
``D = (G^T W G)^-1`` and

* VPL = K_V * sqrt(D_UU)
* HPL = K_H * sqrt(largest eigenvalue of the east/north block)

Too few usable satellites, or a singular normal matrix, is reported as
``INSUFFICIENT_GEOMETRY`` with no levels rather than as an error.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from scipy import linalg, stats

from ..core.constants import K_H_PA, K_V_PA, MIN_SATS

logger = logging.getLogger(__name__)


class PLStatus(Enum):
    """Outcome of a protection level computation"""
    VALID = "valid"
    INSUFFICIENT_GEOMETRY = "insufficient_geometry"
    NOT_COMPUTED = "not_computed"


@dataclass(frozen=True)
class ProtectionLevels:
    """Vertical/horizontal protection levels (m); None unless status is VALID"""
    status: PLStatus
    vpl: Optional[float] = None
    hpl: Optional[float] = None
    n_used: int = 0

    @property
    def is_defined(self) -> bool:
        return self.status is PLStatus.VALID

    @classmethod
    def insufficient(cls, n_used: int = 0) -> 'ProtectionLevels':
        return cls(PLStatus.INSUFFICIENT_GEOMETRY, n_used=n_used)

    @classmethod
    def not_computed(cls) -> 'ProtectionLevels':
        return cls(PLStatus.NOT_COMPUTED)


def vertical_multiplier(p: float) -> float:
    """Two-sided normal multiplier K for an integrity probability ``p``.

    ``vertical_multiplier(1e-7)`` gives about 5.33.
    """
    if not 0.0 < p < 1.0:
        raise ValueError(f"Probability must be in (0, 1), got {p}")
    return float(stats.norm.isf(p / 2.0))


def geometry_matrix(az: np.ndarray, el: np.ndarray) -> np.ndarray:
    """
    Observation matrix in the local ENU frame

    Parameters
    ----------
    az, el : np.ndarray
        Azimuth and elevation (rad)

    Returns
    -------
    G : np.ndarray
        (n, 4) rows [-cos E sin A, -cos E cos A, -sin E, 1]
    """
    az = np.atleast_1d(np.asarray(az, dtype=float))
    el = np.atleast_1d(np.asarray(el, dtype=float))
    cos_el = np.cos(el)
    return np.column_stack([-cos_el * np.sin(az), -cos_el * np.cos(az),
                            -np.sin(el), np.ones_like(el)])


def position_covariance(G: np.ndarray, sig2: np.ndarray) -> np.ndarray:
    """
    D = (G^T W G)^-1 with W = diag(1/sig2)

    Raises
    ------
    numpy.linalg.LinAlgError
        The normal matrix is not positive definite
    """
    w = 1.0 / np.asarray(sig2, dtype=float)
    N = G.T @ (G * w[:, None])
    c, low = linalg.cho_factor(N)
    return linalg.cho_solve((c, low), np.eye(N.shape[0]))


def compute_protection_levels(az: np.ndarray, el: np.ndarray, sig2: np.ndarray,
                              k_v: float = K_V_PA, k_h: float = K_H_PA,
                              min_sats: int = MIN_SATS,
                              mask: Optional[np.ndarray] = None) -> ProtectionLevels:
    """
    Compute VPL and HPL from geometry and total variances

    Parameters
    ----------
    az, el : np.ndarray
        Satellite azimuth and elevation (rad)
    sig2 : np.ndarray
        Total pseudorange error variance per satellite (m^2); non-finite
        values exclude the satellite
    k_v, k_h : float
        Vertical and horizontal multipliers
    min_sats : int
        Minimum usable satellites
    mask : np.ndarray, optional
        Additional boolean selection of satellites to use

    Returns
    -------
    ProtectionLevels

    Raises
    ------
    ValueError
        A used satellite has zero or negative variance
    """
    sig2 = np.atleast_1d(np.asarray(sig2, dtype=float))
    use = np.isfinite(sig2)
    if mask is not None:
        use &= np.asarray(mask, dtype=bool)
    if np.any(sig2[use] <= 0.0):
        raise ValueError(f"Total variance must be positive for used satellites, got {sig2[use].tolist()}")
    n_used = int(use.sum())
    if n_used < min_sats:
        logger.info(f"Insufficient geometry: {n_used} usable satellites, need {min_sats}")
        return ProtectionLevels.insufficient(n_used)

    G = geometry_matrix(np.atleast_1d(az)[use], np.atleast_1d(el)[use])
    try:
        D = position_covariance(G, sig2[use])
    except np.linalg.LinAlgError:
        logger.info(f"Insufficient geometry: singular normal matrix with {n_used} satellites")
        return ProtectionLevels.insufficient(n_used)

    vpl, hpl = _levels(D, k_v, k_h)
    if not (np.isfinite(vpl) and np.isfinite(hpl)):
        logger.info("Insufficient geometry: ill-conditioned normal matrix")
        return ProtectionLevels.insufficient(n_used)
    return ProtectionLevels(PLStatus.VALID, vpl, hpl, n_used)


def _levels(D: np.ndarray, k_v: float, k_h: float) -> Tuple[float, float]:
    d_en = D[:2, :2]
    lam_max = linalg.eigvalsh(d_en)[-1]
    vpl = k_v * np.sqrt(max(D[2, 2], 0.0))
    hpl = k_h * np.sqrt(max(lam_max, 0.0))
    return float(vpl), float(hpl)
