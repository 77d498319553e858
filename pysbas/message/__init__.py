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

"""SBAS broadcast message decoding.

Fixed 250-bit blocks are decoded with one declarative layout per message
type (see :mod:`pysbas.message.layouts`). Records land in per-type
indexed tables that keep only the latest record per issue-of-data slot.

Example Usage:
    >>> from pysbas.message import MessageDecoder, encode_message
    >>> decoder = MessageDecoder()
    >>> frame = encode_message(39, {'prn': 122, 'iodg': 2}, band='L5')
    >>> record = decoder.decode_bits(frame, time=0.0, band='L5')
    >>> record.prn, record.slot
    (122, 2)
"""

from .bits import Field, MessageLayout, check_crc, crc24q, to_frame_bytes
from .decoder import MessageDecoder, encode_message
from .layouts import get_layout, register_layout
from .records import DecodedRecord, covariance_matrix, dfre_table, mask_prns, mt28_blocks
from .tables import IndexedTable

__all__ = [
    'Field', 'MessageLayout', 'check_crc', 'crc24q', 'to_frame_bytes',
    'MessageDecoder', 'encode_message', 'get_layout', 'register_layout',
    'DecodedRecord', 'covariance_matrix', 'dfre_table', 'mask_prns', 'mt28_blocks',
    'IndexedTable',
]
