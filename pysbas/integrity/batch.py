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

"""Parallel evaluation of many user epochs and tabular summaries"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config import SBASConfig
from ..core.data_structures import BroadcastIntegrity, UserGeometry
from .ipp import IonosphericGrid
from .observation import SBASUserObservation

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Observations in input order; failed entries are None and listed in ``errors``"""
    observations: List[Optional[SBASUserObservation]] = field(default_factory=list)
    errors: Dict[int, Exception] = field(default_factory=dict)

    @property
    def succeeded(self) -> List[SBASUserObservation]:
        return [obs for obs in self.observations if obs is not None]

    @property
    def n_failed(self) -> int:
        return len(self.errors)

    def summary(self) -> pd.DataFrame:
        return summarize(self.succeeded)


def compute_observations(geometries: Sequence[UserGeometry],
                         integrities: Sequence[Optional[BroadcastIntegrity]],
                         config: Optional[SBASConfig] = None,
                         iono_grid: Optional[IonosphericGrid] = None,
                         max_workers: Optional[int] = None) -> BatchResult:
    """
    Build one observation per (geometry, integrity) pair on a thread pool

    Parameters
    ----------
    geometries : sequence of UserGeometry
        One per user epoch
    integrities : sequence of BroadcastIntegrity
        Aligned with ``geometries``; None entries give reference observations
    config : SBASConfig, optional
        Validated once before any observation is built
    iono_grid : IonosphericGrid, optional
        Shared read-only grid provider
    max_workers : int, optional
        Thread pool size

    Returns
    -------
    BatchResult
        A failing epoch is logged and recorded without affecting the others
    """
    if len(geometries) != len(integrities):
        raise ValueError(f"{len(geometries)} geometries but {len(integrities)} integrity records")
    config = config if config is not None else SBASConfig()
    config.validate()

    def build(geometry, integrity):
        if integrity is None:
            return SBASUserObservation.reference(geometry, config, iono_grid)
        return SBASUserObservation(geometry, integrity, config, iono_grid)

    result = BatchResult(observations=[None] * len(geometries))
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(build, g, i) for g, i in zip(geometries, integrities)]
        for k, future in enumerate(futures):
            try:
                result.observations[k] = future.result()
            except Exception as e:
                logger.error(f"Observation {k} (t={geometries[k].time}) failed: {e}")
                result.errors[k] = e

    logger.info(f"Computed {len(geometries) - result.n_failed}/{len(geometries)} observations")
    return result


def summarize(observations: Iterable[SBASUserObservation]) -> pd.DataFrame:
    """
    One row per observation

    Undefined protection levels are NaN with the reason in ``status``,
    never zero.
    """
    rows = []
    for obs in observations:
        pl = obs.protection_levels
        lat, lon, h = obs.geometry.user_llh
        rows.append({
            'time': obs.geometry.time,
            'lat': lat,
            'lon': lon,
            'height': h,
            'kind': obs.kind.value,
            'n_sats': obs.n_sats,
            'n_used': int(np.count_nonzero(obs.usable)),
            'vpl': pl.vpl if pl.is_defined else np.nan,
            'hpl': pl.hpl if pl.is_defined else np.nan,
            'status': pl.status.value,
        })
    columns = ['time', 'lat', 'lon', 'height', 'kind', 'n_sats', 'n_used', 'vpl', 'hpl', 'status']
    return pd.DataFrame(rows, columns=columns)
