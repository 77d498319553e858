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

"""Message layout dispatch table.

One :class:`~pysbas.message.bits.MessageLayout` per supported (band,
message type). L1 layouts follow RTCA DO-229 (MT1-7, 10, 28); L5 layouts
follow the DFMC SBAS definition of ED-259A (MT32, 37, 39, 40). The table
is append-only: registering a type twice is an error.
"""

from typing import Dict, Iterator, Tuple

from ..core.constants import (
    BAND_L1,
    BAND_L5,
    DFREI_TABLE_SCALE,
    P2_11,
    P2_12,
    P2_19,
    P2_21,
    P2_30,
    P2_33,
    SC2RAD,
)
from .bits import Field, MessageLayout

_LAYOUTS: Dict[Tuple[str, int], MessageLayout] = {}


def register_layout(layout: MessageLayout) -> MessageLayout:
    """Add a layout to the dispatch table"""
    key = (layout.band, layout.msg_type)
    if key in _LAYOUTS:
        raise ValueError(f"{layout.band} MT{layout.msg_type} already registered")
    _LAYOUTS[key] = layout
    return layout


def get_layout(band: str, msg_type: int) -> MessageLayout:
    """Layout for (band, type); KeyError when unsupported"""
    return _LAYOUTS[(band, msg_type)]


def iter_layouts() -> Iterator[MessageLayout]:
    return iter(list(_LAYOUTS.values()))


def _covariance_fields(prefix: str) -> Tuple[Field, ...]:
    """Scale exponent, 4 unsigned diagonal and 6 signed off-diagonal E terms (99 bits)"""
    return (
        Field(f'{prefix}scale_exp', 3),
        *(Field(f'{prefix}e{ij}', 9) for ij in ('11', '22', '33', '44')),
        *(Field(f'{prefix}e{ij}', 10, signed=True) for ij in ('12', '13', '14', '23', '24', '34')),
    )


# ---------------------------------------------------------------- L1 SBAS

MT1 = register_layout(MessageLayout(
    1, BAND_L1, "PRN mask",
    fields=(
        Field('mask', 1, count=210),
        Field('iodp', 2),
    ),
    slot_field='iodp', table_size=4,
))


def _fast_correction_layout(msg_type: int) -> MessageLayout:
    return MessageLayout(
        msg_type, BAND_L1, "fast corrections",
        fields=(
            Field('iodf', 2),
            Field('iodp', 2),
            Field('fc', 12, signed=True, scale=0.125, count=13),
            Field('udrei', 4, count=13),
        ),
        slot_field='iodf', table_size=4,
    )


MT2, MT3, MT4, MT5 = (register_layout(_fast_correction_layout(mt)) for mt in (2, 3, 4, 5))

MT6 = register_layout(MessageLayout(
    6, BAND_L1, "integrity information",
    fields=(
        Field('iodf_2', 2),
        Field('iodf_3', 2),
        Field('iodf_4', 2),
        Field('iodf_5', 2),
        Field('udrei', 4, count=51),
    ),
))

MT7 = register_layout(MessageLayout(
    7, BAND_L1, "fast correction degradation factor",
    fields=(
        Field('t_lat', 4),
        Field('iodp', 2),
        Field.spare(2),
        Field('ai', 4, count=51),
    ),
    slot_field='iodp', table_size=4,
))

MT10 = register_layout(MessageLayout(
    10, BAND_L1, "degradation parameters",
    fields=(
        Field('brrc', 10, scale=0.002),
        Field('cltc_lsb', 10, scale=0.002),
        Field('cltc_v1', 10, scale=0.00005),
        Field('iltc_v1', 9),
        Field('cltc_v0', 10, scale=0.002),
        Field('iltc_v0', 9),
        Field('cgeo_lsb', 10, scale=0.0005),
        Field('cgeo_v', 10, scale=0.00005),
        Field('igeo', 9),
        Field('cer', 6, scale=0.5),
        Field('ciono_step', 10, scale=0.001),
        Field('iiono', 9),
        Field('ciono_ramp', 10, scale=0.000005),
        Field('rss_udre', 1),
        Field('rss_iono', 1),
        Field('ccovariance', 7, scale=0.1),
        Field.spare(81),
    ),
))

MT28 = register_layout(MessageLayout(
    28, BAND_L1, "clock-ephemeris covariance",
    fields=(
        Field('iodp', 2),
        Field('prn_mask_1', 6),
        *_covariance_fields('cov1_'),
        Field('prn_mask_2', 6),
        *_covariance_fields('cov2_'),
    ),
    slot_field='iodp', table_size=4,
))

# ---------------------------------------------------------------- L5 DFMC

MT32 = register_layout(MessageLayout(
    32, BAND_L5, "clock-ephemeris correction and covariance",
    fields=(
        Field('slot', 8),
        Field('iodn', 10),
        Field('dx', 11, signed=True, scale=0.0625),
        Field('dy', 11, signed=True, scale=0.0625),
        Field('dz', 11, signed=True, scale=0.0625),
        Field('db', 12, signed=True, scale=0.03125),
        Field('dxd', 8, signed=True, scale=P2_11),
        Field('dyd', 8, signed=True, scale=P2_11),
        Field('dzd', 8, signed=True, scale=P2_11),
        Field('dbd', 9, signed=True, scale=P2_12),
        Field('t0', 13, scale=16.0),
        *_covariance_fields('cov_'),
        Field('dfrei', 4),
        Field('drcorr', 4, scale=0.125, offset=0.125),
    ),
    slot_field='slot', table_size=215, first_slot=1,
))

MT37 = register_layout(MessageLayout(
    37, BAND_L5, "OBAD parameters and DFREI scale table",
    fields=(
        Field('ivalid_32', 6, scale=6.0),
        Field('ivalid_39_40', 6, scale=6.0),
        Field('cer', 6, scale=0.5),
        Field('ccovariance', 7, scale=0.1),
        *(f for k in range(1, 7) for f in (
            Field(f'icorr_{k}', 5, scale=6.0),
            Field(f'ccorr_{k}', 8, scale=0.01),
            Field(f'rcorr_{k}', 8, scale=0.0002),
        )),
        *(Field(f'dfre_{k}', 4, scale=float(DFREI_TABLE_SCALE[k]))
          for k in range(len(DFREI_TABLE_SCALE))),
        Field('time_ref_id', 3),
        Field.spare(2),
    ),
))

MT39 = register_layout(MessageLayout(
    39, BAND_L5, "SBAS satellite ephemeris part I",
    fields=(
        Field('prn', 6, offset=119),
        Field('iodg', 2),
        Field('spid', 5),
        Field('cuc', 19, signed=True, scale=SC2RAD * P2_19 * 1e-4),
        Field('cus', 19, signed=True, scale=SC2RAD * P2_19 * 1e-4),
        Field('idot', 22, signed=True, scale=7 * SC2RAD * P2_21 * 1e-6),
        Field('omega', 34, signed=True, scale=SC2RAD * P2_33),
        Field('lan', 34, signed=True, scale=SC2RAD * P2_33),
        Field('m0', 34, signed=True, scale=SC2RAD * P2_33),
        Field('agf0', 25, signed=True, scale=0.02),
        Field('agf1', 16, signed=True, scale=4e-5),
    ),
    slot_field='iodg', table_size=4,
))

MT40 = register_layout(MessageLayout(
    40, BAND_L5, "SBAS satellite ephemeris part II",
    fields=(
        Field('iodg', 2),
        Field('i0', 33, scale=SC2RAD * P2_33),
        Field('e', 30, scale=P2_30),
        Field('a', 31, scale=0.02),
        Field('te', 13, scale=16.0),
        *_covariance_fields('cov_'),
        Field('dfrei', 4),
        Field('drcorr', 4, scale=0.125, offset=0.125),
    ),
    slot_field='iodg', table_size=4,
))
