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
SBAS Message Decoder
====================

Turns 250-bit broadcast blocks into scaled :class:`DecodedRecord` objects
and files them in one :class:`IndexedTable` per message type.

Decoding is bit-exact and deterministic: the same bits always produce the
same record in the same slot. A message that cannot be decoded (wrong
length, unsupported type, slot out of range, bad parity when checked)
raises :class:`DecodeError` from :meth:`MessageDecoder.decode`;
:meth:`MessageDecoder.process` logs and discards it instead, leaving every
table untouched.
"""

import logging
import threading
from typing import Dict, Iterable, Mapping, Optional

from ..core.constants import BAND_L1
from ..core.data_structures import BroadcastMessage
from ..core.errors import DecodeError
from ..logger import LogLevel
from .bits import check_crc
from .layouts import get_layout, iter_layouts
from .records import DecodedRecord
from .tables import IndexedTable

logger = logging.getLogger(__name__)


class MessageDecoder:
    """
    Decoder for L1 SBAS and L5 DFMC SBAS messages

    Parameters
    ----------
    verify_crc : bool
        Reject messages whose CRC-24Q parity does not match
    """

    def __init__(self, verify_crc: bool = False):
        self.verify_crc = verify_crc
        self.tables: Dict[int, IndexedTable] = {}
        for layout in iter_layouts():
            if layout.msg_type not in self.tables:
                self.tables[layout.msg_type] = IndexedTable(
                    layout.msg_type, layout.table_size, layout.first_slot)
        self.n_decoded = 0
        self.n_discarded = 0
        self._count_lock = threading.Lock()

    def table(self, msg_type: int) -> IndexedTable:
        """Record table for a message type"""
        try:
            return self.tables[msg_type]
        except KeyError:
            raise KeyError(f"MT{msg_type} is not supported") from None

    def decode(self, message: BroadcastMessage) -> DecodedRecord:
        """
        Decode one message and store it in its table

        Parameters
        ----------
        message : BroadcastMessage
            Received message

        Returns
        -------
        DecodedRecord
            The record written to ``table(record.msg_type)[record.slot]``

        Raises
        ------
        DecodeError
            Malformed length, unsupported type, bad parity or slot out of range
        """
        data = message.frame
        msg_type = message.msg_type

        if self.verify_crc and not check_crc(data):
            raise DecodeError(f"MT{msg_type}: CRC mismatch", msg_type=msg_type)

        try:
            layout = get_layout(message.band, msg_type)
        except KeyError:
            raise DecodeError(f"Unsupported {message.band} message type {msg_type}",
                              msg_type=msg_type) from None

        raw = layout.unpack_raw(data)
        slot = layout.slot_of(raw)
        table = self.tables[msg_type]
        if not table.first <= slot < table.size:
            raise DecodeError(f"MT{msg_type} slot {slot} outside [{table.first}, {table.size})",
                              msg_type=msg_type)

        record = DecodedRecord(msg_type, slot, message.time, layout.scale(raw))
        table.store(slot, record)

        if logger.isEnabledFor(LogLevel.TRACE.value):
            logger.trace("MT%d slot %d t=%.1f %s", msg_type, slot, message.time, record.as_dict())
        with self._count_lock:
            self.n_decoded += 1
        return record

    def process(self, message: BroadcastMessage) -> Optional[DecodedRecord]:
        """Decode a message, logging and discarding it on :class:`DecodeError`"""
        try:
            return self.decode(message)
        except DecodeError as e:
            with self._count_lock:
                self.n_discarded += 1
            logger.warning(f"Discarding message received at t={message.time}: {e}")
            return None

    def process_all(self, messages: Iterable[BroadcastMessage]) -> int:
        """Process a sequence of messages; returns how many were decoded"""
        return sum(1 for m in messages if self.process(m) is not None)

    def decode_bits(self, bits, time: float = 0.0, band: str = BAND_L1) -> DecodedRecord:
        """Shortcut for ``decode(BroadcastMessage(bits, time, band))``"""
        return self.decode(BroadcastMessage(bits, time, band))

    def reset(self):
        for table in self.tables.values():
            table.clear()
        self.n_decoded = 0
        self.n_discarded = 0


def encode_message(msg_type: int, values: Mapping[str, object], band: str = BAND_L1,
                   preamble: Optional[int] = None) -> bytes:
    """
    Build a 250-bit frame (as 32 bytes) from physical field values

    The inverse of decoding, used to simulate broadcasts. Each value is
    quantised to the field's resolution; values that do not fit the
    field raise ValueError.

    Parameters
    ----------
    msg_type : int
        Message type
    values : Mapping[str, object]
        Field name -> physical value; missing fields are sent as zero
    band : str
        ``"L1"`` or ``"L5"``
    preamble : int, optional
        Preamble bits; defaults to the first of the band's sequence

    Returns
    -------
    bytes
        32-byte frame with CRC-24Q parity filled in
    """
    try:
        layout = get_layout(band, msg_type)
    except KeyError:
        raise ValueError(f"Unsupported {band} message type {msg_type}") from None
    return layout.pack(values, preamble)
