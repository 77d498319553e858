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

"""Core SBAS Module.

- **Constants**: physical constants, frame geometry, and the MOPS/DFMC
  tables (UDREI, DFREI, a_i) used by the variance models
- **Data Structures**: received messages and the inputs supplied by the
  geometry and master-station providers
- **Errors**: the exception hierarchy shared by every subpackage

Example Usage:
    >>> from pysbas.core import *
    >>>
    >>> geometry = UserGeometry.from_azel([37.4, -122.2, 0.0], [0, 90, 180, 270], [90, 30, 30, 30])
    >>> integrity = BroadcastIntegrity.uniform(geometry.n_sats, udrei=5)
"""

from .constants import *
from .data_structures import BroadcastIntegrity, BroadcastMessage, FLTDegradation, UserGeometry
from .errors import ConfigurationError, DecodeError, SBASError
