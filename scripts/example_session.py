#!/usr/bin/env python3
"""
Example: Exploring the sales cube with a scripted session.

This script demonstrates how to:
1. Load a small sales table into a cube session
2. Slice, dice, roll up and drill down
3. Pivot the axes and inspect the grid handed to a renderer
"""

import logging
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import numpy as np
import pandas as pd

from olapcube.cube.table import records_from_frame
from olapcube.nav.session import CubeSession


def create_sample_data():
    """Create a sample sales table, one row per (continent, region, product)."""
    np.random.seed(42)

    regions = {
        'Asia': ['East', 'South'],
        'Europe': ['North', 'West'],
        'America': ['North', 'South'],
    }
    products = ['Electronics', 'Furniture']

    records = []
    for continent, continent_regions in regions.items():
        for region in continent_regions:
            for product in products:
                base = 100 + np.random.normal(0, 20)
                # Q4 holiday effect
                records.append({
                    'continent': continent,
                    'region': region,
                    'product': product,
                    'Q1': round(base, 1),
                    'Q2': round(base * 1.05, 1),
                    'Q3': round(base * 0.95, 1),
                    'Q4': round(base * 1.3, 1),
                })

    return pd.DataFrame(records)


def show(session, title):
    snap = session.snapshot()
    print(f"\n{title}")
    print(f"  status={snap.status.value}, facts={snap.row_count}, filters={snap.filters}")
    if snap.is_empty:
        print("  (empty cube)")
    else:
        print(snap.to_frame().head(8).to_string(index=False))


def run_demo():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("OLAP Cube Demo")
    print("=" * 60)

    session = CubeSession()
    session.load_rows(records_from_frame(create_sample_data()))
    show(session, "1. Base cube")

    session.slice("continent", "asia")
    show(session, "2. Slice continent ~ 'asia'")

    session.dice({"continent": "a", "product": "furn"})
    show(session, "3. Dice continent ~ 'a' AND product ~ 'furn'")

    session.roll_up()
    show(session, "4. Roll up to totals")

    session.drill_down()
    show(session, "5. Drill down (restore quarters)")

    session.drill_down()
    show(session, "6. Drill down (clear filters)")

    outcome = session.pivot({"x": "product", "y": "product", "z": "quarter"})
    print(f"\n7. Invalid pivot applied={outcome.applied}: {outcome.reason}")

    session.pivot({"x": "product", "y": "continent", "z": "quarter"})
    grid = session.snapshot().grid()
    print(f"\n8. Pivoted grid shape {grid.shape}")
    print(grid.to_frame().head(5).to_string(index=False))

    print("\n" + "=" * 60)
    print("Session history")
    print("=" * 60)
    for t in session.history:
        print(f"  {t.event.describe():45s} applied={t.applied} -> {t.to_status.value}")


if __name__ == "__main__":
    run_demo()
