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

"""Decoded message records and helpers that interpret their fields"""

from types import MappingProxyType
from typing import List, Mapping, Tuple

import numpy as np

from ..core.constants import AI_TABLE, SIG_DFRE


class DecodedRecord:
    """Scaled contents of one decoded message.

    Field values are reachable both as items (``record['cuc']``) and as
    attributes (``record.cuc``). Records are immutable; array fields are
    write-protected.

    Attributes
    ----------
    msg_type : int
        Message type the record was decoded from
    slot : int
        Table slot derived from the message's issue-of-data/slot field
    time : float
        Receipt time of the message (s)
    fields : Mapping[str, object]
        Read-only field name -> value mapping
    """

    __slots__ = ('msg_type', 'slot', 'time', 'fields')

    def __init__(self, msg_type: int, slot: int, time: float, fields: Mapping[str, object]):
        frozen = {}
        for name, value in fields.items():
            if isinstance(value, np.ndarray):
                value = value.copy()
                value.setflags(write=False)
            frozen[name] = value
        object.__setattr__(self, 'msg_type', msg_type)
        object.__setattr__(self, 'slot', slot)
        object.__setattr__(self, 'time', time)
        object.__setattr__(self, 'fields', MappingProxyType(frozen))

    def __setattr__(self, name, value):
        raise AttributeError("DecodedRecord is read-only")

    def __getattr__(self, name):
        if name == 'fields':
            raise AttributeError(name)
        try:
            return self.fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, name):
        return self.fields[name]

    def __contains__(self, name):
        return name in self.fields

    def __eq__(self, other):
        if not isinstance(other, DecodedRecord):
            return NotImplemented
        if (self.msg_type, self.slot, self.time) != (other.msg_type, other.slot, other.time):
            return False
        if self.fields.keys() != other.fields.keys():
            return False
        return all(np.array_equal(self.fields[k], other.fields[k]) for k in self.fields)

    __hash__ = None

    def __reduce__(self):
        return (DecodedRecord, (self.msg_type, self.slot, self.time, dict(self.fields)))

    def as_dict(self) -> dict:
        return dict(self.fields)

    def __repr__(self):
        return f"DecodedRecord(MT{self.msg_type}, slot={self.slot}, time={self.time})"


def covariance_matrix(record: DecodedRecord, prefix: str = 'cov_') -> Tuple[np.ndarray, float]:
    """Clock-ephemeris covariance from MT28/MT32/MT40 fields.

    R = E * 2**(scale_exp - 5) with E upper triangular, C = R^T R.

    Parameters
    ----------
    record : DecodedRecord
        Record holding ``{prefix}scale_exp`` and ``{prefix}e11`` ... ``{prefix}e44``
    prefix : str
        ``'cov_'`` for MT32/MT40, ``'cov1_'``/``'cov2_'`` for the MT28 blocks

    Returns
    -------
    C : np.ndarray
        4x4 covariance (m^2), ECEF position then clock
    scale_factor : float
        2**(scale_exp - 5), used to scale C_covariance
    """
    e = lambda ij: float(record[f'{prefix}e{ij}'])
    E = np.array([
        [e('11'), e('12'), e('13'), e('14')],
        [0.0, e('22'), e('23'), e('24')],
        [0.0, 0.0, e('33'), e('34')],
        [0.0, 0.0, 0.0, e('44')],
    ])
    scale_factor = 2.0 ** (int(record[f'{prefix}scale_exp']) - 5)
    R = E * scale_factor
    return R.T @ R, scale_factor


def mt28_blocks(record: DecodedRecord) -> Mapping[int, Tuple[np.ndarray, float]]:
    """Covariance blocks of an MT28 record keyed by PRN mask number.

    Mask number 0 marks an unused block and is skipped.
    """
    blocks = {}
    for k in (1, 2):
        mask_no = int(record[f'prn_mask_{k}'])
        if mask_no > 0:
            blocks[mask_no] = covariance_matrix(record, f'cov{k}_')
    return blocks


def mask_prns(record: DecodedRecord) -> List[int]:
    """PRNs flagged in an MT1 mask, in mask order.

    Mask bit k (0-based) stands for PRN k+1 in the SBAS PRN numbering:
    1-37 GPS, 38-61 GLONASS slots, 120-158 SBAS.
    """
    return [int(k) + 1 for k in np.flatnonzero(record['mask'])]


def degradation_factor(indicator: int) -> float:
    """Fast correction degradation factor a_i (m/s^2) for an MT7 indicator"""
    return float(AI_TABLE[indicator])


def dfre_table(mt37: DecodedRecord = None) -> np.ndarray:
    """sigma_DFRE per DFREI (m): from MT37 when received, else the default"""
    if mt37 is None:
        return SIG_DFRE.copy()
    return np.array([mt37[f'dfre_{k}'] for k in range(len(SIG_DFRE))], dtype=float)
