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

"""Coordinate utilities for line-of-sight geometry

- Geodetic <-> ECEF conversion on WGS84
- ECEF -> local ENU rotation
- Line-of-sight azimuth/elevation
- Longitude wrapping (numba)
"""

from .transforms import azel2enu, ecef2llh, enu2azel, enu_rotation, llh2ecef, los_ecef
from .wrap import wrap_longitude, wrapTo180, wrapTo360
