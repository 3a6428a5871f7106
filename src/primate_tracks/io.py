"""
Data I/O utilities.

Loads Movebank-style GPS exports into the canonical record frame:
timestamp (UTC), longitude, latitude, individual_id
"""

import logging
import zipfile
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import pandas as pd

from .config import COLUMN_MAP, CANONICAL_COLUMNS, VALIDATION_POLICIES
from .errors import LoadError

logger = logging.getLogger(__name__)

TAB_SUFFIXES = {".tsv", ".tab", ".txt"}


def _separator_for(path: Path) -> str:
    """Tab for .tsv/.tab/.txt (also when compressed), comma otherwise."""
    suffixes = [s.lower() for s in path.suffixes]
    if any(s in TAB_SUFFIXES for s in suffixes):
        return "\t"
    return ","


def load_records(
    path: Union[str, Path],
    validation: str = "drop"
) -> pd.DataFrame:
    """
    Load GPS records from a delimited file.

    Expected columns (others are ignored):
    - timestamp
    - location-long
    - location-lat
    - individual-local-identifier

    Args:
        path: Path to CSV/TSV file (optionally .gz/.zip compressed)
        validation: Row validation policy, "drop" or "strict"

    Returns:
        DataFrame with columns timestamp, longitude, latitude, individual_id

    Raises:
        LoadError: file missing, unreadable, or missing required columns
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(f"Input file not found: {path}")

    try:
        df = pd.read_csv(
            path,
            sep=_separator_for(path),
            usecols=lambda c: c in COLUMN_MAP,
            dtype={"individual-local-identifier": str},
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError,
            zipfile.BadZipFile, ValueError, OSError) as e:
        raise LoadError(f"Could not parse {path}: {e}") from e

    missing = [c for c in COLUMN_MAP if c not in df.columns]
    if missing:
        raise LoadError(f"{path} is missing required columns: {missing}")

    logger.info(f"Loaded {len(df)} rows from {path}")

    df = df.rename(columns=COLUMN_MAP)[CANONICAL_COLUMNS]
    df = coerce_record_types(df)
    return validate_records(df, policy=validation)


def coerce_record_types(df: pd.DataFrame) -> pd.DataFrame:
    """
    Parse canonical columns to their types.

    Unparseable values become NaT/NaN so validation can report them.
    """
    out = df.copy()
    out["timestamp"] = pd.to_datetime(out["timestamp"], utc=True, errors="coerce")
    out["longitude"] = pd.to_numeric(out["longitude"], errors="coerce").astype(float)
    out["latitude"] = pd.to_numeric(out["latitude"], errors="coerce").astype(float)
    ids = out["individual_id"]
    out["individual_id"] = ids.where(ids.isna(), ids.astype(str).str.strip())
    return out


def invalid_row_mask(df: pd.DataFrame) -> pd.Series:
    """True for rows with a missing timestamp, bad coordinates, or no identifier."""
    lon = df["longitude"]
    lat = df["latitude"]
    ids = df["individual_id"]
    return (
        df["timestamp"].isna()
        | lon.isna() | ~np.isfinite(lon) | (lon < -180.0) | (lon > 180.0)
        | lat.isna() | ~np.isfinite(lat) | (lat < -90.0) | (lat > 90.0)
        | ids.isna() | (ids.astype(str).str.len() == 0)
    )


def validate_records(df: pd.DataFrame, policy: str = "drop") -> pd.DataFrame:
    """
    Reject records that cannot be placed on the map.

    Args:
        df: Canonical record frame (types already coerced)
        policy: "drop" removes invalid rows with a warning,
            "strict" raises LoadError on the first invalid row

    Returns:
        Valid rows, original order, fresh index
    """
    if policy not in VALIDATION_POLICIES:
        raise ValueError(f"Unknown validation policy: {policy!r}")

    bad = invalid_row_mask(df)
    n_bad = int(bad.sum())

    if n_bad:
        if policy == "strict":
            first = df[bad].iloc[0]
            raise LoadError(
                f"{n_bad} invalid records; first: "
                f"timestamp={first['timestamp']}, lon={first['longitude']}, "
                f"lat={first['latitude']}, id={first['individual_id']}"
            )
        logger.warning(f"Dropped {n_bad}/{len(df)} invalid records")

    valid = df[~bad].reset_index(drop=True)
    if valid.empty:
        raise LoadError("No valid records after validation")
    return valid


def select_individuals(
    df: pd.DataFrame,
    individuals: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Filter records to the given individual identifiers.

    None keeps everything. Unknown identifiers raise LoadError.
    """
    if not individuals:
        return df

    present = set(df["individual_id"].unique())
    unknown = [i for i in individuals if i not in present]
    if unknown:
        raise LoadError(
            f"Individuals not found in data: {unknown} (available: {sorted(present)})"
        )

    selected = df[df["individual_id"].isin(individuals)].reset_index(drop=True)
    logger.info(f"Selected {len(selected)} records for {list(individuals)}")
    return selected
