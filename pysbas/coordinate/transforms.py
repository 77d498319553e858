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

"""Coordinate transformation utilities for line-of-sight geometry"""


import numpy as np

from ..core.constants import FE_WGS84, RE_WGS84


def ecef2llh(xyz: np.ndarray) -> np.ndarray:
    """Convert ECEF coordinates to geodetic coordinates

    Parameters
    ----------
    xyz : np.ndarray
        ECEF coordinates [x, y, z] in meters

    Returns
    -------
    np.ndarray
        Geodetic coordinates [lat, lon, height] (radians, radians, meters)

    Notes
    -----
    Iterative solution on the WGS84 ellipsoid; converges in 3-4 iterations.
    """
    x, y, z = xyz[0], xyz[1], xyz[2]

    lon = np.arctan2(y, x)

    p = np.sqrt(x**2 + y**2)
    lat = np.arctan2(z, p * (1.0 - FE_WGS84))
    h = 0.0

    for _ in range(5):
        N = RE_WGS84 / np.sqrt(1.0 - FE_WGS84 * (2.0 - FE_WGS84) * np.sin(lat)**2)
        if p > 1.0E-9:
            h = p / np.cos(lat) - N
        else:
            h = abs(z) - N * (1.0 - FE_WGS84 * (2.0 - FE_WGS84))
        lat = np.arctan2(z, p * (1.0 - FE_WGS84 * (2.0 - FE_WGS84) * N / (N + h)))

    return np.array([lat, lon, h])


def llh2ecef(llh: np.ndarray) -> np.ndarray:
    """Convert geodetic coordinates to ECEF coordinates

    Parameters
    ----------
    llh : np.ndarray
        Geodetic coordinates [lat, lon, height] (radians, radians, meters)

    Returns
    -------
    np.ndarray
        ECEF coordinates [x, y, z] in meters
    """
    lat, lon, h = llh[0], llh[1], llh[2]

    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)

    N = RE_WGS84 / np.sqrt(1.0 - FE_WGS84 * (2.0 - FE_WGS84) * sin_lat**2)

    x = (N + h) * cos_lat * np.cos(lon)
    y = (N + h) * cos_lat * np.sin(lon)
    z = (N * (1.0 - FE_WGS84 * (2.0 - FE_WGS84)) + h) * sin_lat

    return np.array([x, y, z])


def enu_rotation(lat: float, lon: float) -> np.ndarray:
    """Rotation matrix taking ECEF vectors into the local ENU frame

    Parameters
    ----------
    lat, lon : float
        Origin latitude and longitude in radians

    Returns
    -------
    np.ndarray
        3x3 matrix R with enu = R @ ecef; its transpose maps back
    """
    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    sin_lon = np.sin(lon)
    cos_lon = np.cos(lon)

    return np.array([
        [-sin_lon, cos_lon, 0.0],
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat]
    ])


def los_ecef(user_ecef: np.ndarray, sat_ecef: np.ndarray) -> np.ndarray:
    """Unit line-of-sight vectors from the user to each satellite

    Parameters
    ----------
    user_ecef : np.ndarray
        User position (3,) in meters
    sat_ecef : np.ndarray
        Satellite positions (n, 3) in meters

    Returns
    -------
    np.ndarray
        (n, 3) unit vectors in ECEF
    """
    d = np.atleast_2d(sat_ecef) - user_ecef
    return d / np.linalg.norm(d, axis=1)[:, None]


def enu2azel(los_enu: np.ndarray):
    """Azimuth and elevation of ENU unit vectors

    Returns
    -------
    az, el : np.ndarray
        Azimuth in [0, 2*pi) clockwise from north and elevation in radians
    """
    los_enu = np.atleast_2d(los_enu)
    horizontal = np.hypot(los_enu[:, 0], los_enu[:, 1])
    el = np.arctan2(los_enu[:, 2], horizontal)
    az = np.mod(np.arctan2(los_enu[:, 0], los_enu[:, 1]), 2.0 * np.pi)
    return az, el


def azel2enu(az: np.ndarray, el: np.ndarray) -> np.ndarray:
    """ENU unit vectors from azimuth and elevation in radians"""
    az = np.atleast_1d(az)
    el = np.atleast_1d(el)
    return np.column_stack([
        np.cos(el) * np.sin(az),
        np.cos(el) * np.cos(az),
        np.sin(el),
    ])
