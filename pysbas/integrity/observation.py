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
SBAS User Observation
=====================

One user epoch: geometry in, error budget, pierce points and protection
levels out. Everything is computed in the constructor, in the order

1. tropo and CNMP variances
2. UDRE and FLT variances (user observations only)
3. ionospheric pierce points, and the UIRE variance when a grid is given
4. vertical and horizontal protection levels (user observations only)

after which the observation is read-only. Reference-station observations
share steps 1 and 3 and leave the rest unset.
"""

import logging
from enum import Enum
from typing import Callable, Optional

import numpy as np

from ..config import SBASConfig
from ..core.constants import D2R, UDREI_NOT_MONITORED
from ..core.data_structures import BroadcastIntegrity, UserGeometry
from .ipp import IonosphericGrid, pierce_point, uire_variance
from .protection_level import ProtectionLevels, compute_protection_levels

logger = logging.getLogger(__name__)


class ObservationKind(Enum):
    USER = "user"
    REFERENCE = "reference"


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


class SBASUserObservation:
    """
    Integrity quantities of one SBAS user at one epoch

    Parameters
    ----------
    geometry : UserGeometry
        User position and lines of sight
    integrity : BroadcastIntegrity, optional
        UDREI and degradation per satellite; required for user observations
    config : SBASConfig, optional
        Validated configuration; defaults to ``SBASConfig()``
    iono_grid : IonosphericGrid, optional
        Grid ionospheric variance provider for single-frequency users
    kind : ObservationKind
        ``USER`` or ``REFERENCE``

    Raises
    ------
    ValueError
        Missing or misaligned integrity data, or a variance model that
        returned something other than one non-negative value per satellite,
        or a used satellite with zero total variance
    ConfigurationError
        ``config`` does not validate
    """

    def __init__(self, geometry: UserGeometry, integrity: Optional[BroadcastIntegrity] = None,
                 config: Optional[SBASConfig] = None, iono_grid: Optional[IonosphericGrid] = None,
                 kind: ObservationKind = ObservationKind.USER):
        config = config if config is not None else SBASConfig()
        models = config.variance_models()
        kind = ObservationKind(kind)

        if kind is ObservationKind.USER:
            if integrity is None:
                raise ValueError("A user observation needs broadcast integrity data")
            if integrity.n_sats != geometry.n_sats:
                raise ValueError(
                    f"Integrity data for {integrity.n_sats} satellites, geometry has {geometry.n_sats}")

        self._geometry = geometry
        self._config = config
        self._kind = kind
        self._integrity = integrity if kind is ObservationKind.USER else None
        self._sig2_udre = None
        self._sig2_flt = None
        self._sig2_uire = None

        self._sig2_tropo = self._evaluate('tropo', models.tropo)
        self._sig2_cnmp = self._evaluate('cnmp', models.cnmp)
        if kind is ObservationKind.USER:
            self._sig2_udre = self._evaluate('udre', models.udre, integrity.udrei)
            self._sig2_flt = self._evaluate('flt', models.flt, integrity.degradations)

        lat, lon = geometry.user_llh[0] * D2R, geometry.user_llh[1] * D2R
        self._ipp = _frozen(pierce_point(lat, lon, geometry.azimuth, geometry.elevation,
                                         hion=config.iono_shell_height_m))
        if iono_grid is not None and not config.dual_frequency:
            self._sig2_uire = _frozen(uire_variance(iono_grid, self._ipp, geometry.elevation,
                                                    hion=config.iono_shell_height_m))

        self._usable = _frozen(self._usable_mask())
        if kind is ObservationKind.USER:
            zero = self._usable & (self.sig2_total == 0.0)
            if np.any(zero):
                raise ValueError(f"Zero total variance for PRNs {list(np.asarray(geometry.prns)[zero])}")
            self._protection_levels = compute_protection_levels(
                geometry.azimuth, geometry.elevation, self.sig2_total,
                k_v=config.k_v, k_h=config.k_h, min_sats=config.min_satellites,
                mask=self._usable)
        else:
            self._protection_levels = ProtectionLevels.not_computed()

    @classmethod
    def reference(cls, geometry: UserGeometry, config: Optional[SBASConfig] = None,
                  iono_grid: Optional[IonosphericGrid] = None) -> 'SBASUserObservation':
        """Reference-station observation: no UDRE/FLT terms, no protection levels"""
        return cls(geometry, None, config, iono_grid, kind=ObservationKind.REFERENCE)

    def _evaluate(self, term: str, func: Callable, *args) -> np.ndarray:
        n = self._geometry.n_sats
        result = np.array(func(self, *args), dtype=float)
        if result.ndim == 0:
            result = np.full(n, float(result))
        if result.shape != (n,):
            raise ValueError(f"{term} variance returned shape {result.shape}, expected ({n},)")
        if np.any(np.isnan(result)) or np.any(result < 0.0):
            raise ValueError(f"{term} variance must be non-negative, got {result.tolist()}")
        return _frozen(result)

    def _usable_mask(self) -> np.ndarray:
        elevation_ok = self._geometry.elevation_deg >= self._config.elevation_mask_deg
        usable = elevation_ok & np.isfinite(self.sig2_total)
        if self._integrity is not None:
            usable &= self._integrity.udrei < UDREI_NOT_MONITORED
        excluded = [p for p, u in zip(self._geometry.prns, usable) if not u]
        if excluded:
            logger.debug(f"t={self._geometry.time}: excluded PRNs {excluded}")
        return usable

    @property
    def kind(self) -> ObservationKind:
        return self._kind

    @property
    def is_reference(self) -> bool:
        return self._kind is ObservationKind.REFERENCE

    @property
    def geometry(self) -> UserGeometry:
        return self._geometry

    @property
    def config(self) -> SBASConfig:
        return self._config

    @property
    def integrity(self) -> Optional[BroadcastIntegrity]:
        return self._integrity

    @property
    def n_sats(self) -> int:
        return self._geometry.n_sats

    @property
    def ipp(self) -> np.ndarray:
        """(n, 3) pierce points: latitude (deg), longitude (deg), height (m)"""
        return self._ipp

    @property
    def sig2_tropo(self) -> np.ndarray:
        return self._sig2_tropo

    @property
    def sig2_cnmp(self) -> np.ndarray:
        return self._sig2_cnmp

    @property
    def sig2_udre(self) -> Optional[np.ndarray]:
        return self._sig2_udre

    @property
    def sig2_flt(self) -> Optional[np.ndarray]:
        return self._sig2_flt

    @property
    def sig2_uire(self) -> Optional[np.ndarray]:
        return self._sig2_uire

    @property
    def sig2_total(self) -> np.ndarray:
        """Sum of the variance terms that are set (m^2)"""
        total = self._sig2_tropo + self._sig2_cnmp
        for term in (self._sig2_udre, self._sig2_flt, self._sig2_uire):
            if term is not None:
                total = total + term
        return total

    @property
    def usable(self) -> np.ndarray:
        """Satellites above the mask with a finite error budget"""
        return self._usable

    @property
    def protection_levels(self) -> ProtectionLevels:
        return self._protection_levels

    @property
    def vpl(self) -> Optional[float]:
        return self._protection_levels.vpl

    @property
    def hpl(self) -> Optional[float]:
        return self._protection_levels.hpl

    def __repr__(self):
        pl = self._protection_levels
        return (f"SBASUserObservation({self._kind.value}, t={self._geometry.time}, "
                f"n_sats={self.n_sats}, status={pl.status.value}, vpl={pl.vpl}, hpl={pl.hpl})")
