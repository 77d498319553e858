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
pysbas - SBAS User Integrity Library

Decodes SBAS broadcast messages, builds the per-satellite pseudorange
error budget of an SBAS user, computes ionospheric pierce points, and
projects the budget into vertical and horizontal protection levels.
"""

__version__ = "1.0.0"
__author__ = "pysbas Development Team"
__title__ = "pysbas"
__description__ = "SBAS message decoding and user integrity"

from .config import SBASConfig
from .core import *
from .coordinate import *
from .integrity import *
from .message import *
