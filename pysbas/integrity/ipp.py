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

"""Ionospheric pierce point and slant mapping on a thin spherical shell"""

from typing import Protocol, runtime_checkable

import numpy as np

from ..coordinate.wrap import wrap_longitude
from ..core.constants import HION, R2D, RE_IONO


@runtime_checkable
class IonosphericGrid(Protocol):
    """Grid ionospheric vertical error provider.

    ``vertical_variance`` returns sigma^2_UIVE (m^2) at each pierce point,
    or NaN where the grid does not cover the point.
    """

    def vertical_variance(self, lat_deg: np.ndarray, lon_deg: np.ndarray) -> np.ndarray:
        ...


def pierce_point(lat: float, lon: float, az: np.ndarray, el: np.ndarray,
                 re: float = RE_IONO, hion: float = HION) -> np.ndarray:
    """
    Compute ionospheric pierce points

    Parameters
    ----------
    lat, lon : float
        User geodetic latitude and longitude (rad)
    az, el : np.ndarray
        Satellite azimuth and elevation (rad)
    re : float
        Earth radius (m)
    hion : float
        Shell height (m)

    Returns
    -------
    np.ndarray
        (n, 3) pierce points: latitude (deg), longitude (deg, [-180, 180]), height (m)
    """
    az = np.atleast_1d(np.asarray(az, dtype=float))
    el = np.atleast_1d(np.asarray(el, dtype=float))

    psi = np.pi / 2.0 - el - np.arcsin(re / (re + hion) * np.cos(el))
    sin_lat_pp = np.sin(lat) * np.cos(psi) + np.cos(lat) * np.sin(psi) * np.cos(az)
    lat_pp = np.arcsin(np.clip(sin_lat_pp, -1.0, 1.0))
    dlon = np.arctan2(np.sin(psi) * np.sin(az) * np.cos(lat),
                      np.cos(psi) - np.sin(lat) * sin_lat_pp)
    lon_pp = wrap_longitude((lon + dlon) * R2D)

    ipp = np.empty((len(el), 3))
    ipp[:, 0] = lat_pp * R2D
    ipp[:, 1] = lon_pp
    ipp[:, 2] = hion
    return ipp


def obliquity_factor(el: np.ndarray, re: float = RE_IONO, hion: float = HION) -> np.ndarray:
    """Slant/vertical mapping F = [1 - (Re cos E / (Re + h))^2]^-1/2"""
    el = np.asarray(el, dtype=float)
    return 1.0 / np.sqrt(1.0 - (re * np.cos(el) / (re + hion)) ** 2)


def uire_variance(grid: IonosphericGrid, ipp: np.ndarray, el: np.ndarray,
                  hion: float = HION) -> np.ndarray:
    """
    Slant user ionospheric range error variance (m^2)

    F^2 * sigma^2_UIVE; satellites whose pierce point is outside the grid
    get inf.
    """
    sig2_uive = np.asarray(grid.vertical_variance(ipp[:, 0], ipp[:, 1]), dtype=float)
    if sig2_uive.shape != (len(ipp),):
        raise ValueError(f"Grid returned {sig2_uive.shape} variances for {len(ipp)} pierce points")
    sig2 = obliquity_factor(el, hion=hion) ** 2 * sig2_uive
    return np.where(np.isnan(sig2), np.inf, sig2)


class UniformGrid:
    """Grid with the same sigma^2_UIVE everywhere inside a latitude band"""

    def __init__(self, sig2_uive: float, lat_limit_deg: float = 90.0):
        self.sig2_uive = sig2_uive
        self.lat_limit_deg = lat_limit_deg

    def vertical_variance(self, lat_deg, lon_deg):
        lat_deg = np.asarray(lat_deg, dtype=float)
        return np.where(np.abs(lat_deg) <= self.lat_limit_deg, self.sig2_uive, np.nan)
