"""
Primate Home Range - GPS tracking analysis for tracked primates.

Pipeline stages:
- primate_tracks: loading, validation, partitioning, time-grid resampling
- home_range: Minimum Convex Polygon per individual
- range_map: interactive folium map with toggleable layers
- trajectory_animation: continuous and daily trajectory GIFs

Usage:
    python src/run_all.py --data data/raw/spider_monkeys.csv
"""

__version__ = "1.0.0"
