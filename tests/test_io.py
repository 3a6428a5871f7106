"""
Tests for record loading and validation

Tests cover:
- Column selection and renaming
- LoadError on missing file, empty file, corrupt archive, missing columns
- Row validation policies (drop / strict)
- Individual selection
"""

import zipfile
import pytest
import numpy as np
import pandas as pd
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from primate_tracks.io import load_records, validate_records, select_individuals, coerce_record_types
from primate_tracks.errors import LoadError
from primate_tracks.config import CANONICAL_COLUMNS


# ============== Loading ==============

class TestLoadRecords:
    """Test file loading."""

    def test_selects_four_canonical_columns(self, csv_path):
        df = load_records(csv_path)

        assert list(df.columns) == CANONICAL_COLUMNS
        assert len(df) == 20
        assert "tag-local-identifier" not in df.columns

    def test_types(self, csv_path):
        df = load_records(csv_path)

        assert pd.api.types.is_datetime64_any_dtype(df["timestamp"])
        assert str(df["timestamp"].dt.tz) == "UTC"
        assert df["longitude"].dtype == np.float64
        assert set(df["individual_id"]) == {"Bob", "Da Vinci"}

    def test_tab_separated(self, tmp_path, raw_frame):
        path = tmp_path / "tracks.tsv"
        raw_frame.to_csv(path, sep="\t", index=False)

        df = load_records(path)
        assert len(df) == 20

    def test_gzip_compressed(self, tmp_path, raw_frame):
        path = tmp_path / "tracks.csv.gz"
        raw_frame.to_csv(path, index=False)

        df = load_records(path)
        assert len(df) == 20

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError, match="not found"):
            load_records(tmp_path / "nope.csv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")

        with pytest.raises(LoadError):
            load_records(path)

    def test_corrupt_zip(self, tmp_path):
        path = tmp_path / "tracks.zip"
        path.write_bytes(b"this is not a zip archive at all")

        with pytest.raises(LoadError, match="Could not parse"):
            load_records(path)

    def test_zip_with_several_members(self, tmp_path, raw_frame):
        path = tmp_path / "tracks.zip"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("a.csv", raw_frame.to_csv(index=False))
            archive.writestr("b.csv", raw_frame.to_csv(index=False))

        with pytest.raises(LoadError):
            load_records(path)

    def test_missing_column(self, tmp_path, raw_frame):
        path = tmp_path / "no_lat.csv"
        raw_frame.drop(columns=["location-lat"]).to_csv(path, index=False)

        with pytest.raises(LoadError, match="location-lat"):
            load_records(path)

    def test_identifiers_kept_as_strings(self, tmp_path, raw_frame):
        raw_frame["individual-local-identifier"] = ["007", "008"] * 10
        path = tmp_path / "numeric_ids.csv"
        raw_frame.to_csv(path, index=False)

        df = load_records(path)
        assert set(df["individual_id"]) == {"007", "008"}

    def test_loading_twice_is_identical(self, csv_path):
        pd.testing.assert_frame_equal(load_records(csv_path), load_records(csv_path))


# ============== Validation ==============

@pytest.fixture
def dirty_frame(raw_frame):
    df = raw_frame.copy()
    df.loc[0, "location-long"] = 200.0           # out of range
    df.loc[1, "location-lat"] = "n/a"            # not numeric
    df.loc[2, "timestamp"] = "not a timestamp"   # unparseable
    df.loc[3, "individual-local-identifier"] = None
    return df


class TestValidateRecords:
    """Test the explicit validation stage."""

    def test_drop_policy_removes_invalid_rows(self, tmp_path, dirty_frame):
        path = tmp_path / "dirty.csv"
        dirty_frame.to_csv(path, index=False)

        df = load_records(path, validation="drop")

        assert len(df) == 16
        assert df["longitude"].between(-180, 180).all()
        assert df["latitude"].notna().all()
        assert df["timestamp"].notna().all()

    def test_strict_policy_raises(self, tmp_path, dirty_frame):
        path = tmp_path / "dirty.csv"
        dirty_frame.to_csv(path, index=False)

        with pytest.raises(LoadError, match="4 invalid records"):
            load_records(path, validation="strict")

    def test_clean_data_passes_strict(self, csv_path):
        assert len(load_records(csv_path, validation="strict")) == 20

    def test_latitude_bounds(self):
        df = coerce_record_types(pd.DataFrame({
            "timestamp": ["2024-01-01 00:00:00"] * 3,
            "longitude": [0.0, 0.0, 0.0],
            "latitude": [-90.0, 90.0, 90.5],
            "individual_id": ["a", "a", "a"],
        }))

        out = validate_records(df, policy="drop")
        assert list(out["latitude"]) == [-90.0, 90.0]

    def test_nothing_left_raises(self):
        df = coerce_record_types(pd.DataFrame({
            "timestamp": ["2024-01-01 00:00:00"],
            "longitude": [500.0],
            "latitude": [0.0],
            "individual_id": ["a"],
        }))

        with pytest.raises(LoadError, match="No valid records"):
            validate_records(df)

    def test_unknown_policy(self, csv_path):
        df = load_records(csv_path)
        with pytest.raises(ValueError):
            validate_records(df, policy="clamp")


# ============== Selection ==============

class TestSelectIndividuals:
    """Test filtering by identifier."""

    def test_select_one(self, csv_path):
        df = select_individuals(load_records(csv_path), ["Bob"])

        assert len(df) == 10
        assert set(df["individual_id"]) == {"Bob"}

    def test_none_keeps_all(self, csv_path):
        df = load_records(csv_path)
        assert len(select_individuals(df, None)) == len(df)

    def test_unknown_individual(self, csv_path):
        with pytest.raises(LoadError, match="Leonardo"):
            select_individuals(load_records(csv_path), ["Bob", "Leonardo"])
