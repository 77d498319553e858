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

"""Fixed-size, overwrite-by-slot tables of decoded records"""

import threading
from typing import Iterator, List, Optional, Tuple

from ..core.errors import DecodeError
from .records import DecodedRecord


class IndexedTable:
    """
    Per-message-type record table keyed by issue-of-data or slot number.

    The table never grows: valid slots are ``first <= slot < size`` and a
    write replaces whatever the slot held before. Writes are serialised so
    that several decoder threads may share a table; reads take no lock and
    always see either the old or the new record.

    Parameters
    ----------
    msg_type : int
        Message type stored in the table
    size : int
        Number of slots (max slot + 1)
    first : int
        Lowest valid slot
    """

    def __init__(self, msg_type: int, size: int, first: int = 0):
        if size < 1 or not 0 <= first < size:
            raise ValueError(f"Invalid table range [{first}, {size})")
        self.msg_type = msg_type
        self.size = size
        self.first = first
        self._slots: List[Optional[DecodedRecord]] = [None] * size
        self._latest: Optional[int] = None
        self._lock = threading.Lock()

    def _check(self, slot: int):
        if not self.first <= slot < self.size:
            raise DecodeError(
                f"MT{self.msg_type} slot {slot} outside [{self.first}, {self.size})",
                msg_type=self.msg_type)

    def store(self, slot: int, record: DecodedRecord):
        """Write ``record`` at ``slot``, replacing any previous record"""
        self._check(slot)
        with self._lock:
            self._slots[slot] = record
            self._latest = slot

    def get(self, slot: int) -> Optional[DecodedRecord]:
        """Record at ``slot`` or None if nothing was received for it"""
        self._check(slot)
        return self._slots[slot]

    def __getitem__(self, slot: int) -> DecodedRecord:
        record = self.get(slot)
        if record is None:
            raise KeyError(f"MT{self.msg_type} slot {slot} is empty")
        return record

    def __contains__(self, slot: int) -> bool:
        return self.first <= slot < self.size and self._slots[slot] is not None

    @property
    def latest(self) -> Optional[DecodedRecord]:
        """Most recently written record"""
        slot = self._latest
        return None if slot is None else self._slots[slot]

    def items(self) -> Iterator[Tuple[int, DecodedRecord]]:
        """Occupied (slot, record) pairs in slot order"""
        slots = list(self._slots)
        return ((k, r) for k, r in enumerate(slots) if r is not None)

    def __len__(self) -> int:
        return sum(1 for r in self._slots if r is not None)

    def clear(self):
        with self._lock:
            self._slots = [None] * self.size
            self._latest = None

    def __repr__(self):
        return f"IndexedTable(MT{self.msg_type}, {len(self)}/{self.size - self.first} filled)"
