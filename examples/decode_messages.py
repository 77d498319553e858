#!/usr/bin/env python3
"""
SBAS Message Decoding Example
=============================

Builds a short broadcast sequence with encode_message, feeds it through
the decoder (one corrupted message included) and assembles the per-satellite
integrity inputs from the decoded L1 tables.
"""

import numpy as np

from pysbas import BroadcastIntegrity, BroadcastMessage, MessageDecoder, encode_message
from pysbas.logger import setup_logger


def build_broadcast():
    """One L1 integrity cycle plus a DFMC GEO ephemeris message"""
    mask = np.zeros(210, dtype=int)
    mask[[1, 4, 9, 11, 16, 22]] = 1   # PRN 2, 5, 10, 12, 17, 23

    messages = [
        BroadcastMessage(encode_message(1, {'mask': mask, 'iodp': 2}), time=0.0),
        BroadcastMessage(encode_message(2, {'iodf': 1, 'iodp': 2,
                                            'fc': [0.5, -1.25, 2.0, 0.0, 0.75, -0.5] + [0.0] * 7,
                                            'udrei': [4, 5, 4, 6, 15, 7] + [0] * 7}), time=6.0),
        BroadcastMessage(encode_message(7, {'t_lat': 2, 'iodp': 2, 'ai': [3] * 51}), time=6.0),
        BroadcastMessage(encode_message(10, {'ccovariance': 0.5, 'iltc_v0': 120, 'cltc_v0': 0.04}),
                         time=12.0),
        BroadcastMessage(encode_message(39, {'prn': 122, 'iodg': 2, 'spid': 3,
                                             'omega': 0.5, 'agf0': 12.3}, band='L5'),
                         time=12.0, band='L5'),
        BroadcastMessage('0' * 120, time=18.0),   # truncated
    ]
    return messages


def main():
    setup_logger(level='INFO')
    decoder = MessageDecoder(verify_crc=True)

    n = decoder.process_all(build_broadcast())
    print(f"Decoded {n} messages, discarded {decoder.n_discarded}")

    mt39 = decoder.table(39)[2]
    print(f"MT39: PRN {mt39.prn}, IODG {mt39.iodg}, omega {mt39.omega:.6f} rad, agf0 {mt39.agf0:.2f} m")

    prns = [2, 5, 10, 12, 17, 23, 30]
    integrity = BroadcastIntegrity.from_message_tables(decoder, prns, fc_age=6.0, ltc_age=240.0)
    print("PRN  UDREI  eps_fc [m]  eps_ltc [m]")
    for prn, udrei, deg in zip(prns, integrity.udrei, integrity.degradations):
        eps_fc = f"{deg.eps_fc:10.4f}" if deg is not None else "         -"
        eps_ltc = f"{deg.eps_ltc:11.4f}" if deg is not None else "          -"
        print(f"{prn:3d}  {udrei:5d}  {eps_fc}  {eps_ltc}")


if __name__ == '__main__':
    main()
