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

"""Bit-level helpers for 250-bit SBAS message blocks.

Frames are handled internally as 32-byte buffers (250 bits, MSB first,
followed by 6 zero pad bits) so that ``bitstruct`` can slice them.
Field layouts are described declaratively with :class:`Field` and
:class:`MessageLayout`; one compiled bitstruct format per layout unpacks
every field of a message in a single call.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

import bitstruct as bs
import numpy as np
from crccheck.crc import Crc24LteA

from ..core.constants import (
    BAND_L1,
    BAND_L5,
    CRC_BITS,
    MAX_MSG_TYPE,
    MIN_MSG_TYPE,
    MSG_BITS,
    MSG_BYTES,
    MT_BITS,
    PREAMBLE_BITS,
)
from ..core.errors import DecodeError

BitsLike = Union[str, bytes, bytearray, np.ndarray, Sequence[int]]

CRC_START = MSG_BITS - CRC_BITS

# First preamble of each rotating sequence
DEFAULT_PREAMBLE = {BAND_L1: 0x53, BAND_L5: 0b0101}


def to_frame_bytes(bits: BitsLike) -> bytes:
    """Normalise a 250-bit message into a 32-byte buffer.

    Parameters
    ----------
    bits : str, bytes or array_like
        ``'0'/'1'`` string of length 250, 32-byte buffer, or a length-250
        sequence of 0/1 integers

    Returns
    -------
    bytes
        32 bytes, MSB first, last 6 bits zero

    Raises
    ------
    DecodeError
        If the length is not exactly 250 bits or the content is not binary
    """
    if isinstance(bits, (bytes, bytearray)):
        if len(bits) != MSG_BYTES:
            raise DecodeError(f"Message buffer must be {MSG_BYTES} bytes, got {len(bits)}")
        data = bytearray(bits)
        data[-1] &= 0xC0
        return bytes(data)

    if isinstance(bits, str):
        text = bits.strip()
        if len(text) != MSG_BITS:
            raise DecodeError(f"Message must be {MSG_BITS} bits, got {len(text)}")
        if set(text) - {'0', '1'}:
            raise DecodeError("Message bit string may only contain '0' and '1'")
        value = int(text, 2)
    else:
        arr = np.asarray(bits)
        if arr.ndim != 1 or arr.size != MSG_BITS:
            raise DecodeError(f"Message must be {MSG_BITS} bits, got shape {arr.shape}")
        if not np.isin(arr, (0, 1)).all():
            raise DecodeError("Message bit array may only contain 0 and 1")
        value = int(''.join('1' if b else '0' for b in arr.tolist()), 2)

    return (value << (MSG_BYTES * 8 - MSG_BITS)).to_bytes(MSG_BYTES, 'big')


def frame_to_bitstring(data: bytes) -> str:
    """Inverse of :func:`to_frame_bytes` for the string form"""
    return format(int.from_bytes(data, 'big'), f'0{MSG_BYTES * 8}b')[:MSG_BITS]


def crc24q(data: bytes, nbits: int = CRC_START) -> int:
    """CRC-24Q over the first ``nbits`` bits of ``data`` (MSB first).

    The bits are right-aligned into whole bytes; leading zero bits do not
    change a zero-initialised CRC.
    """
    nbytes = (nbits + 7) // 8
    value = int.from_bytes(data, 'big') >> (len(data) * 8 - nbits)
    return Crc24LteA.calc(value.to_bytes(nbytes, 'big'))


def check_crc(data: bytes) -> bool:
    """True when the parity field matches the first 226 bits"""
    parity = bs.unpack_from('u24', data, CRC_START)[0]
    return parity == crc24q(data)


def payload_start(band: str) -> int:
    """Bit offset of the first data bit after preamble and type"""
    try:
        return PREAMBLE_BITS[band] + MT_BITS
    except KeyError:
        raise DecodeError(f"Unknown SBAS band: {band!r}") from None


def read_msg_type(data: bytes, band: str) -> int:
    """Read the 6-bit message type field of a frame"""
    start = payload_start(band) - MT_BITS
    return bs.unpack_from(f'u{MT_BITS}', data, start)[0]


@dataclass(frozen=True)
class Field:
    """One broadcast field: ``value = raw * scale + offset``.

    A field with ``count > 1`` repeats the same width/scale and decodes to
    a numpy array. Spare bits use an empty name and decode to nothing.
    """
    name: str
    width: int
    signed: bool = False
    scale: float = 1.0
    offset: float = 0.0
    count: int = 1

    @classmethod
    def spare(cls, width: int) -> 'Field':
        return cls('', width)

    @property
    def is_spare(self) -> bool:
        return not self.name

    @property
    def is_integer(self) -> bool:
        return self.scale == 1.0 and float(self.offset).is_integer()

    @property
    def nbits(self) -> int:
        return self.width * self.count

    @property
    def fmt(self) -> str:
        if self.is_spare:
            return f'p{self.width}'
        return (('s' if self.signed else 'u') + str(self.width)) * self.count

    @property
    def raw_range(self) -> Tuple[int, int]:
        if self.signed:
            return -(1 << (self.width - 1)), (1 << (self.width - 1)) - 1
        return 0, (1 << self.width) - 1

    def to_value(self, raw):
        if self.is_integer:
            return raw + int(self.offset)
        return raw * self.scale + self.offset

    def to_raw(self, value) -> int:
        raw = int(np.round((value - self.offset) / self.scale))
        lo, hi = self.raw_range
        if not lo <= raw <= hi:
            raise ValueError(
                f"Field {self.name!r}: {value} quantises to {raw}, "
                f"outside [{lo}, {hi}]")
        return raw


@dataclass(frozen=True)
class MessageLayout:
    """Field layout of one message type, in broadcast order.

    Attributes
    ----------
    msg_type : int
        Message type number (1-63)
    band : str
        ``"L1"`` (212 data bits) or ``"L5"`` (216 data bits)
    name : str
        Human-readable name
    fields : tuple of Field
        Data fields following the type field
    slot_field : str, optional
        Field whose raw value selects the table slot; None for single-slot types
    table_size : int
        Number of table slots (max slot + 1)
    first_slot : int
        Lowest valid slot; lower values are decode errors
    """
    msg_type: int
    band: str
    name: str
    fields: Tuple[Field, ...]
    slot_field: Optional[str] = None
    table_size: int = 1
    first_slot: int = 0

    def __post_init__(self):
        if not MIN_MSG_TYPE <= self.msg_type <= MAX_MSG_TYPE:
            raise ValueError(f"Message type {self.msg_type} outside 1-63")
        available = CRC_START - payload_start(self.band)
        used = sum(f.nbits for f in self.fields)
        if used != available:
            raise ValueError(
                f"MT{self.msg_type} layout uses {used} bits, frame holds {available}")
        if self.slot_field is not None and self.slot_field not in self.field_map:
            raise ValueError(f"MT{self.msg_type} slot field {self.slot_field!r} not in layout")

    @cached_property
    def field_map(self) -> Dict[str, Field]:
        return {f.name: f for f in self.fields if not f.is_spare}

    @cached_property
    def compiled(self):
        return bs.compile(''.join(f.fmt for f in self.fields))

    @property
    def start(self) -> int:
        return payload_start(self.band)

    def unpack_raw(self, data: bytes) -> Dict[str, object]:
        """Raw integers per field (arrays for repeated fields)"""
        flat = self.compiled.unpack_from(data, self.start)
        raw = {}
        k = 0
        for f in self.fields:
            if f.is_spare:
                continue
            if f.count == 1:
                raw[f.name] = flat[k]
            else:
                raw[f.name] = np.array(flat[k:k + f.count], dtype=np.int64)
            k += f.count
        return raw

    def scale(self, raw: Mapping[str, object]) -> Dict[str, object]:
        """Apply scale and offset to raw field values"""
        values = {}
        for name, f in self.field_map.items():
            r = raw[name]
            if f.count == 1:
                values[name] = f.to_value(int(r))
            elif f.is_integer:
                values[name] = r + int(f.offset)
            else:
                values[name] = r * f.scale + f.offset
        return values

    def slot_of(self, raw: Mapping[str, object]) -> int:
        if self.slot_field is None:
            return 0
        return int(raw[self.slot_field])

    def pack(self, values: Mapping[str, object], preamble: Optional[int] = None) -> bytes:
        """Build a complete frame (preamble, type, fields, CRC) from physical values.

        Fields missing from ``values`` are broadcast as zero raw counts.
        """
        unknown = set(values) - set(self.field_map)
        if unknown:
            raise ValueError(f"MT{self.msg_type} has no fields {sorted(unknown)}")

        args = []
        for f in self.fields:
            if f.is_spare:
                continue
            if f.name not in values:
                args.extend([0] * f.count)
            elif f.count == 1:
                args.append(f.to_raw(values[f.name]))
            else:
                seq = np.asarray(values[f.name], dtype=float).ravel()
                if seq.size != f.count:
                    raise ValueError(f"Field {f.name!r} needs {f.count} values, got {seq.size}")
                args.extend(f.to_raw(v) for v in seq)

        buf = bytearray(MSG_BYTES)
        pre_bits = PREAMBLE_BITS[self.band]
        if preamble is None:
            preamble = DEFAULT_PREAMBLE[self.band]
        bs.pack_into(f'u{pre_bits}u{MT_BITS}', buf, 0, preamble, self.msg_type)
        self.compiled.pack_into(buf, self.start, *args, fill_padding=False)
        bs.pack_into('u24', buf, CRC_START, crc24q(buf))
        return bytes(buf)
