"""
Shared fixtures: synthetic Movebank-style records.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def movebank_frame(n_per_individual=10, step_seconds=1, start="2024-03-01 08:00:00",
                   individuals=("Bob", "Da Vinci"), seed=0):
    """Raw Movebank-style frame, rows interleaved by individual."""
    rng = np.random.default_rng(seed)
    t0 = pd.Timestamp(start)
    rows = []
    for k in range(n_per_individual):
        for i, ind in enumerate(individuals):
            rows.append({
                "timestamp": (t0 + pd.Timedelta(seconds=k * step_seconds)).strftime("%Y-%m-%d %H:%M:%S.000"),
                "location-long": -79.84 + 0.001 * i + rng.normal(0, 0.0005),
                "location-lat": 9.16 + 0.001 * i + rng.normal(0, 0.0005),
                "individual-local-identifier": ind,
                "tag-local-identifier": f"tag_{i}",
            })
    return pd.DataFrame(rows)


@pytest.fixture
def raw_frame():
    """10 fixes each for Bob and Da Vinci over the same 10-second window."""
    return movebank_frame()


@pytest.fixture
def csv_path(tmp_path, raw_frame):
    path = tmp_path / "tracks.csv"
    raw_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def multi_day_csv(tmp_path):
    """Two individuals, fixes every 2 hours over three days."""
    path = tmp_path / "multi_day.csv"
    movebank_frame(n_per_individual=36, step_seconds=7200, seed=1).to_csv(path, index=False)
    return path
