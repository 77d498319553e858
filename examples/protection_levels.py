#!/usr/bin/env python3
"""
SBAS Protection Level Example
=============================

Evaluates a day-like sweep of user epochs on a thread pool and prints the
summary table. Epochs with too few usable satellites show NaN levels and
their status instead of a misleading zero.
"""

import numpy as np

from pysbas import (BroadcastIntegrity, SBASConfig, UniformGrid, UserGeometry,
                    compute_observations)
from pysbas.logger import setup_logger


def sweep(n_epochs=12, seed=1):
    """Random constellations above a fixed user"""
    rng = np.random.default_rng(seed)
    geometries, integrities = [], []
    for k in range(n_epochs):
        n_sats = rng.integers(4, 11)
        az = rng.uniform(0.0, 360.0, n_sats)
        el = rng.uniform(2.0, 88.0, n_sats)
        geometries.append(UserGeometry.from_azel([37.4, -122.2, 10.0], az, el, time=60.0 * k))
        integrities.append(BroadcastIntegrity(rng.choice([3, 4, 5, 6, 14, 15], n_sats,
                                                         p=[0.3, 0.3, 0.2, 0.1, 0.05, 0.05])))
    return geometries, integrities


def main():
    setup_logger(level='WARNING')
    config = SBASConfig(receiver_class='AAD-A', elevation_mask_deg=5.0).validate()
    geometries, integrities = sweep()

    result = compute_observations(geometries, integrities, config,
                                  iono_grid=UniformGrid(0.25), max_workers=4)
    df = result.summary()
    print(df[['time', 'n_sats', 'n_used', 'vpl', 'hpl', 'status']].to_string(index=False))
    print(f"\nVPL < 50 m in {(df['vpl'] < 50.0).sum()}/{len(df)} epochs")


if __name__ == '__main__':
    main()
