#!/usr/bin/env python3
"""
Generate realistic spider monkey GPS data for the home range pipeline.

Creates a CSV matching the Movebank export format:
- timestamp, location-long, location-lat, individual-local-identifier, tag-local-identifier, study-name

Movement pattern:
- Two individuals ("Bob", "Da Vinci") ranging over overlapping forest patches
- Daytime foraging loops between a few feeding trees, night roost near a sleeping tree
- Fix interval of roughly 15 minutes with occasional missed fixes
"""

import argparse
import numpy as np
import pandas as pd
from datetime import datetime, timedelta
from pathlib import Path

# Barro Colorado Island, Panama
CENTER_LON = -79.8400
CENTER_LAT = 9.1600


def add_noise(coords, rng, noise_scale=0.00005):
    """Add GPS noise (~5 m)."""
    return coords + rng.normal(0, noise_scale, coords.shape)


def generate_segment(start, end, n_points, rng, meander=0.0003):
    """Generate a meandering path between two feeding trees."""
    t = np.linspace(0, 1, n_points)

    lon = start[0] + (end[0] - start[0]) * t
    lat = start[1] + (end[1] - start[1]) * t

    # Perpendicular sinusoidal deviation
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    dist = np.sqrt(dx**2 + dy**2)
    perp_x = -dy / dist if dist > 0 else 0
    perp_y = dx / dist if dist > 0 else 1

    freq = rng.uniform(1, 3)
    phase = rng.uniform(0, 2 * np.pi)
    amount = meander * np.sin(freq * np.pi * t + phase)

    return add_noise(lon + perp_x * amount, rng), add_noise(lat + perp_y * amount, rng)


def generate_individual(name, trees, roost, start_date, n_days, rng):
    """
    One individual: each day visits a random sequence of feeding trees,
    starting and ending at the roost.
    """
    all_lon, all_lat, all_times = [], [], []

    for day in range(n_days):
        current_time = start_date + timedelta(days=day, hours=6)
        n_visits = rng.integers(3, 6)
        visit_order = [roost] + [trees[i] for i in rng.choice(len(trees), n_visits)] + [roost]

        for i in range(len(visit_order) - 1):
            n_points = int(rng.integers(4, 9))
            lon, lat = generate_segment(visit_order[i], visit_order[i + 1], n_points, rng)

            for j in range(n_points):
                current_time += timedelta(minutes=float(rng.uniform(12, 18)))
                # Missed fix
                if rng.random() < 0.1:
                    continue
                all_lon.append(lon[j])
                all_lat.append(lat[j])
                all_times.append(current_time)

    return create_dataframe(all_lon, all_lat, all_times, name)


def create_dataframe(lon, lat, times, name):
    """Create DataFrame in Movebank export format."""
    return pd.DataFrame({
        'timestamp': [t.strftime('%Y-%m-%d %H:%M:%S.000') for t in times],
        'location-long': np.round(lon, 7),
        'location-lat': np.round(lat, 7),
        'individual-local-identifier': name,
        'tag-local-identifier': f"tag_{name.lower().replace(' ', '_')}",
        'study-name': "Spider monkeys Barro Colorado Island (demo)"
    })


def generate_dataset(n_days: int = 5, seed: int = 42) -> pd.DataFrame:
    """Both individuals, interleaved and shuffled like a raw export."""
    rng = np.random.default_rng(seed)

    def offset(dlon, dlat):
        return (CENTER_LON + dlon, CENTER_LAT + dlat)

    start_date = datetime(2024, 3, 1)

    bob = generate_individual(
        "Bob",
        trees=[offset(-0.004, 0.002), offset(-0.001, 0.004), offset(0.002, 0.001), offset(-0.003, -0.002)],
        roost=offset(-0.001, 0.0),
        start_date=start_date, n_days=n_days, rng=rng
    )
    davinci = generate_individual(
        "Da Vinci",
        trees=[offset(0.001, -0.001), offset(0.004, 0.002), offset(0.003, -0.003), offset(0.0, 0.003)],
        roost=offset(0.002, 0.0),
        start_date=start_date, n_days=n_days, rng=rng
    )

    df = pd.concat([bob, davinci], ignore_index=True)
    return df.sample(frac=1.0, random_state=seed).reset_index(drop=True)


def main():
    parser = argparse.ArgumentParser(description="Generate demo spider monkey GPS data")
    parser.add_argument("--output", "-o", type=Path,
                        default=Path(__file__).parent.parent / "data" / "raw" / "spider_monkeys.csv",
                        help="Output CSV path")
    parser.add_argument("--days", type=int, default=5, help="Number of tracking days")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    df = generate_dataset(args.days, args.seed)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(args.output, index=False)

    print("=" * 60)
    for name, group in df.groupby('individual-local-identifier'):
        print(f"  {name}: {len(group)} fixes")
    print(f"Saved: {args.output}")
    print("=" * 60)


if __name__ == "__main__":
    main()
