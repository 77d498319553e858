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

"""Error budget, pierce points and protection levels for SBAS users"""

from .batch import BatchResult, compute_observations, summarize
from .ipp import IonosphericGrid, UniformGrid, obliquity_factor, pierce_point, uire_variance
from .observation import ObservationKind, SBASUserObservation
from .overrides import VarianceModels, register_variance_model, resolve_model
from .protection_level import (
    PLStatus,
    ProtectionLevels,
    compute_protection_levels,
    geometry_matrix,
    vertical_multiplier,
)
from .variance import cnmp_variance, flt_variance, tropo_variance, udre_variance

__all__ = [
    'BatchResult', 'compute_observations', 'summarize',
    'IonosphericGrid', 'UniformGrid', 'obliquity_factor', 'pierce_point', 'uire_variance',
    'ObservationKind', 'SBASUserObservation',
    'VarianceModels', 'register_variance_model', 'resolve_model',
    'PLStatus', 'ProtectionLevels', 'compute_protection_levels', 'geometry_matrix',
    'vertical_multiplier',
    'cnmp_variance', 'flt_variance', 'tropo_variance', 'udre_variance',
]
