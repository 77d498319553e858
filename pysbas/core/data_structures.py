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

"""Core data structures exchanged with the geometry and master-station providers"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Optional, Sequence, Tuple

import numpy as np

from .constants import BAND_L1, D2R, IODF_ALARM, PREAMBLE_BITS, R2D, UDREI_DO_NOT_USE, UDREI_MAX


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class BroadcastMessage:
    """One received 250-bit SBAS message block.

    Attributes
    ----------
    bits : str, bytes or tuple of int
        Raw message as received: ``'0'/'1'`` string of 250 characters,
        32-byte buffer, or 250 integers 0/1
    time : float
        Receipt time (s)
    band : str
        ``"L1"`` for legacy SBAS, ``"L5"`` for DFMC SBAS

    Notes
    -----
    The raw bits are validated lazily: :attr:`frame` and :attr:`msg_type`
    raise :class:`~pysbas.core.errors.DecodeError` for malformed input, so
    that the decoder can log and discard such messages.
    """
    bits: object
    time: float = 0.0
    band: str = BAND_L1

    def __post_init__(self):
        if isinstance(self.bits, bytearray):
            object.__setattr__(self, 'bits', bytes(self.bits))
        elif not isinstance(self.bits, (str, bytes)):
            object.__setattr__(self, 'bits', tuple(int(b) for b in np.ravel(self.bits)))
        if self.band not in PREAMBLE_BITS:
            raise ValueError(f"Unknown SBAS band: {self.band!r}")

    @cached_property
    def frame(self) -> bytes:
        """The message as a 32-byte buffer"""
        from ..message.bits import to_frame_bytes
        return to_frame_bytes(self.bits)

    @property
    def msg_type(self) -> int:
        """Message type identifier read from the frame"""
        from ..message.bits import read_msg_type
        return read_msg_type(self.frame, self.band)

    @property
    def bitstring(self) -> str:
        from ..message.bits import frame_to_bitstring
        return frame_to_bitstring(self.frame)


@dataclass(frozen=True, eq=False)
class UserGeometry:
    """User position and satellite lines of sight for one epoch.

    Supplied by the geometry provider; read-only to the integrity pipeline.

    Attributes
    ----------
    user_llh : np.ndarray
        User latitude (deg), longitude (deg) and height (m)
    los_ecef : np.ndarray
        (n, 3) unit vectors from the user to each satellite in ECEF
    prns : tuple of int
        Satellite PRNs aligned with ``los_ecef`` (defaults to 1..n)
    time : float
        Epoch (s)
    """
    user_llh: np.ndarray
    los_ecef: np.ndarray
    prns: Tuple[int, ...] = ()
    time: float = 0.0

    def __post_init__(self):
        llh = _readonly(np.ravel(self.user_llh))
        if llh.shape != (3,):
            raise ValueError("user_llh must hold latitude, longitude and height")
        los = np.atleast_2d(np.array(self.los_ecef, dtype=float))
        if los.size == 0:
            los = np.zeros((0, 3))
        if los.ndim != 2 or los.shape[1] != 3:
            raise ValueError(f"los_ecef must have shape (n, 3), got {los.shape}")
        norms = np.linalg.norm(los, axis=1)
        if np.any(np.abs(norms - 1.0) > 1.0E-6):
            raise ValueError("los_ecef rows must be unit vectors")
        prns = tuple(int(p) for p in self.prns) if len(self.prns) else tuple(range(1, len(los) + 1))
        if len(prns) != len(los):
            raise ValueError(f"{len(prns)} PRNs for {len(los)} lines of sight")
        object.__setattr__(self, 'user_llh', llh)
        object.__setattr__(self, 'los_ecef', _readonly(los))
        object.__setattr__(self, 'prns', prns)

    @classmethod
    def from_ecef(cls, user_llh, sat_ecef, prns: Sequence[int] = (), time: float = 0.0) -> 'UserGeometry':
        """Build the geometry from satellite ECEF positions (m)"""
        from ..coordinate.transforms import llh2ecef, los_ecef
        llh = np.asarray(user_llh, dtype=float)
        user_ecef = llh2ecef(np.array([llh[0] * D2R, llh[1] * D2R, llh[2]]))
        return cls(llh, los_ecef(user_ecef, np.asarray(sat_ecef, dtype=float)), tuple(prns), time)

    @classmethod
    def from_positions(cls, user_ecef, sat_ecef, prns: Sequence[int] = (), time: float = 0.0) -> 'UserGeometry':
        """Build the geometry from a receiver ECEF fix and satellite ECEF positions (m)"""
        from ..coordinate.transforms import ecef2llh, los_ecef
        user_ecef = np.asarray(user_ecef, dtype=float)
        lat, lon, h = ecef2llh(user_ecef)
        llh = np.array([lat * R2D, lon * R2D, h])
        return cls(llh, los_ecef(user_ecef, np.asarray(sat_ecef, dtype=float)), tuple(prns), time)

    @classmethod
    def from_azel(cls, user_llh, az_deg, el_deg, prns: Sequence[int] = (), time: float = 0.0) -> 'UserGeometry':
        """Build the geometry from azimuth/elevation angles (deg)"""
        from ..coordinate.transforms import azel2enu, enu_rotation
        llh = np.asarray(user_llh, dtype=float)
        enu = azel2enu(np.asarray(az_deg, dtype=float) * D2R, np.asarray(el_deg, dtype=float) * D2R)
        R = enu_rotation(llh[0] * D2R, llh[1] * D2R)
        return cls(llh, enu @ R, tuple(prns), time)

    @property
    def n_sats(self) -> int:
        return len(self.prns)

    @cached_property
    def los_enu(self) -> np.ndarray:
        """(n, 3) unit lines of sight in the user's ENU frame"""
        from ..coordinate.transforms import enu_rotation
        R = enu_rotation(self.user_llh[0] * D2R, self.user_llh[1] * D2R)
        return _readonly(self.los_ecef @ R.T)

    @cached_property
    def _azel(self):
        from ..coordinate.transforms import enu2azel
        if self.n_sats == 0:
            return np.zeros(0), np.zeros(0)
        return enu2azel(self.los_enu)

    @property
    def azimuth(self) -> np.ndarray:
        """Azimuth (rad, clockwise from north)"""
        return self._azel[0]

    @property
    def elevation(self) -> np.ndarray:
        """Elevation (rad)"""
        return self._azel[1]

    @property
    def azimuth_deg(self) -> np.ndarray:
        return self.azimuth * R2D

    @property
    def elevation_deg(self) -> np.ndarray:
        return self.elevation * R2D


@dataclass(frozen=True, eq=False)
class FLTDegradation:
    """Fast/long-term correction degradation for one satellite.

    Built from the clock-ephemeris covariance (MT28, or MT32/MT40 for DFMC)
    and the degradation terms of MT7/MT10.

    Attributes
    ----------
    covariance : np.ndarray, optional
        4x4 clock-ephemeris covariance (m^2); None when not broadcast
    scale_factor : float
        2**(scale_exp - 5) of the covariance message
    c_covariance : float
        MT10 C_covariance term, scaled by ``scale_factor``
    eps_fc, eps_rrc, eps_ltc, eps_er : float
        Fast correction, range-rate, long-term and en-route degradations (m)
    rss_udre : bool
        Root-sum-square the terms instead of adding them linearly
    """
    covariance: Optional[np.ndarray] = None
    scale_factor: float = 1.0
    c_covariance: float = 0.0
    eps_fc: float = 0.0
    eps_rrc: float = 0.0
    eps_ltc: float = 0.0
    eps_er: float = 0.0
    rss_udre: bool = False

    def __post_init__(self):
        if self.covariance is not None:
            C = np.array(self.covariance, dtype=float)
            if C.shape != (4, 4):
                raise ValueError(f"covariance must be 4x4, got {C.shape}")
            C.setflags(write=False)
            object.__setattr__(self, 'covariance', C)
        for name in ('c_covariance', 'eps_fc', 'eps_rrc', 'eps_ltc', 'eps_er'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    @classmethod
    def from_messages(cls, covariance=None, mt10=None, ai: float = 0.0, t_lat: float = 0.0,
                      fc_age: float = 0.0, ltc_age: float = 0.0, **terms) -> 'FLTDegradation':
        """
        Assemble the degradation from decoded message contents

        Parameters
        ----------
        covariance : tuple, optional
            (C, scale_factor) as returned by
            :func:`~pysbas.message.records.covariance_matrix`
        mt10 : DecodedRecord, optional
            Degradation parameters (MT10)
        ai : float
            Fast correction degradation factor a_i (m/s^2) from MT7
        t_lat : float
            System latency from MT7 (s)
        fc_age : float
            Time since the fast correction was applied (s)
        ltc_age : float
            Time since the long-term correction's time of applicability (s)
        **terms
            Explicit eps_rrc / eps_er values

        Returns
        -------
        FLTDegradation
        """
        C, sf = covariance if covariance is not None else (None, 1.0)
        eps_fc = 0.5 * ai * (fc_age + t_lat) ** 2
        c_cov = 0.0
        eps_ltc = 0.0
        rss = False
        if mt10 is not None:
            c_cov = float(mt10['ccovariance'])
            rss = bool(mt10['rss_udre'])
            if mt10['iltc_v0'] > 0:
                eps_ltc = float(mt10['cltc_v0']) * np.floor(ltc_age / mt10['iltc_v0'])
        return cls(covariance=C, scale_factor=sf, c_covariance=c_cov, eps_fc=eps_fc,
                   eps_ltc=eps_ltc, rss_udre=rss, **terms)

    def delta_udre(self, los_ecef: np.ndarray) -> np.ndarray:
        """Location-specific UDRE multiplier for each line of sight.

        delta_UDRE = sqrt(I^T C I) + C_covariance * scale_factor with
        I = [-los, 1]; 1 when no covariance is broadcast.
        """
        los = np.atleast_2d(los_ecef)
        if self.covariance is None:
            return np.ones(len(los))
        I = np.hstack([-los, np.ones((len(los), 1))])
        quad = np.einsum('ij,jk,ik->i', I, self.covariance, I)
        return np.sqrt(np.maximum(quad, 0.0)) + self.c_covariance * self.scale_factor

    @property
    def epsilon(self) -> np.ndarray:
        return np.array([self.eps_fc, self.eps_rrc, self.eps_ltc, self.eps_er])


@dataclass(frozen=True, eq=False)
class BroadcastIntegrity:
    """Per-epoch integrity inputs from the master-station provider.

    Attributes
    ----------
    udrei : np.ndarray
        UDRE indicator (0-15) per satellite, aligned with ``UserGeometry.prns``
    degradations : tuple
        FLTDegradation or None per satellite
    """
    udrei: np.ndarray
    degradations: Tuple[Optional[FLTDegradation], ...] = field(default=())

    def __post_init__(self):
        udrei = np.atleast_1d(np.array(self.udrei, dtype=int))
        if udrei.ndim != 1:
            raise ValueError("udrei must be one value per satellite")
        if np.any((udrei < 0) | (udrei > UDREI_MAX)):
            raise ValueError(f"UDREI outside 0-{UDREI_MAX}: {udrei.tolist()}")
        udrei.setflags(write=False)
        degradations = tuple(self.degradations) if len(self.degradations) else (None,) * len(udrei)
        if len(degradations) != len(udrei):
            raise ValueError(f"{len(degradations)} degradation records for {len(udrei)} satellites")
        object.__setattr__(self, 'udrei', udrei)
        object.__setattr__(self, 'degradations', degradations)

    @property
    def n_sats(self) -> int:
        return len(self.udrei)

    @classmethod
    def uniform(cls, n_sats: int, udrei: int, degradation: Optional[FLTDegradation] = None) -> 'BroadcastIntegrity':
        """Same UDREI and degradation for every satellite"""
        return cls(np.full(n_sats, udrei), (degradation,) * n_sats)

    @classmethod
    def from_message_tables(cls, decoder, prns: Sequence[int], fc_age: float = 0.0,
                            ltc_age: float = 0.0) -> 'BroadcastIntegrity':
        """
        Assemble integrity inputs from the decoder's L1 tables

        Uses the latest MT1 mask; UDREI comes from the newest of MT2-5 with a
        matching IODP and MT6 with a matching IODF; degradation from MT7, MT10
        and MT28.
        Satellites absent from the mask are flagged "do not use".

        Parameters
        ----------
        decoder : MessageDecoder
            Decoder whose tables hold the received messages
        prns : sequence of int
            Satellites of the epoch, in geometry order
        fc_age, ltc_age : float
            Fast and long-term correction ages (s)

        Returns
        -------
        BroadcastIntegrity
        """
        from ..message.records import degradation_factor, mask_prns, mt28_blocks

        mt1 = decoder.table(1).latest
        if mt1 is None:
            return cls(np.full(len(prns), UDREI_DO_NOT_USE))
        iodp = mt1['iodp']
        mask = mask_prns(mt1)
        mt6 = decoder.table(6).latest
        mt7 = decoder.table(7).get(iodp)
        mt10 = decoder.table(10).latest
        mt28 = decoder.table(28).get(iodp)
        blocks = mt28_blocks(mt28) if mt28 is not None else {}

        udrei = np.full(len(prns), UDREI_DO_NOT_USE)
        degradations = []
        for i, prn in enumerate(prns):
            if prn not in mask:
                degradations.append(None)
                continue
            k = mask.index(prn)
            candidates = []
            fc = decoder.table(2 + k // 13).latest if k < 52 else None
            if fc is not None and fc['iodp'] != iodp:
                fc = None
            if fc is not None:
                candidates.append((fc.time, int(fc['udrei'][k % 13])))
            # MT6 applies to the fast corrections it names by IODF; IODF 3 applies to any
            if mt6 is not None and fc is not None and k < 51:
                iodf6 = mt6[f'iodf_{2 + k // 13}']
                if iodf6 == fc['iodf'] or iodf6 == IODF_ALARM:
                    candidates.append((mt6.time, int(mt6['udrei'][k])))
            if candidates:
                udrei[i] = max(candidates, key=lambda c: c[0])[1]
            ai = degradation_factor(int(mt7['ai'][k])) if mt7 is not None and k < 51 else 0.0
            t_lat = float(mt7['t_lat']) if mt7 is not None else 0.0
            degradations.append(FLTDegradation.from_messages(
                covariance=blocks.get(k + 1), mt10=mt10, ai=ai, t_lat=t_lat,
                fc_age=fc_age, ltc_age=ltc_age))
        return cls(udrei, tuple(degradations))
