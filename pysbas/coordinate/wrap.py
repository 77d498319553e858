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
Angle wrapping for pierce point longitudes.

Compiled with numba since the wrap runs once per satellite per epoch in
batch availability runs.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def wrapTo360(v1):
    """
    Wrap angles to [0, 360) degrees.

    Parameters
    ----------
    v1 : ndarray
        Angles in degrees (float64)

    Returns
    -------
    v2 : ndarray
        Angles in [0, 360)
    """
    v2 = np.mod(v1, 360.0)
    v2[v2 >= 360.0] = 0.0
    return v2


@njit(cache=True)
def wrapTo180(v1):
    """
    Wrap angles to [-180, 180] degrees.

    Values already inside the interval are returned unchanged, so +180
    and -180 both survive.

    Parameters
    ----------
    v1 : ndarray
        Angles in degrees (float64)

    Returns
    -------
    v2 : ndarray
        Angles in [-180, 180]
    """
    v2 = v1.copy()
    i = (v1 < -180.0) | (180.0 < v1)
    if np.any(i):
        v2[i] = wrapTo360(v1[i] + 180.0) - 180.0
    return v2


def wrap_longitude(lon_deg):
    """Wrap scalar or array longitudes (degrees) to [-180, 180]"""
    arr = np.atleast_1d(np.asarray(lon_deg, dtype=np.float64))
    wrapped = wrapTo180(arr.ravel().copy())
    if np.ndim(lon_deg) == 0:
        return float(wrapped[0])
    return wrapped.reshape(np.shape(lon_deg))
