"""
Tests for the pipeline orchestrator and configuration

Tests cover:
- Config defaults, validation and JSON round trip
- Full pipeline outputs and summary
- Error isolation per stage
- CLI exit codes
"""

import json
import pytest
import pandas as pd
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import run_all
from primate_tracks.config import Config


# ============== Config Tests ==============

class TestConfig:
    """Test configuration dataclass."""

    def test_default_values(self):
        config = Config()

        assert config.home_range_percent == 95.0
        assert config.validation == "drop"
        assert config.animation_filename == "bob_davinci_trajectory.gif"
        assert config.daily_animation_filename == "bob_davinci_trajectory_daily.gif"

    def test_paths(self, tmp_path):
        config = Config(output_dir=tmp_path)
        assert config.animation_path == tmp_path / "bob_davinci_trajectory.gif"
        assert config.map_path == tmp_path / "home_range_map.html"

    def test_json_round_trip(self, tmp_path):
        config = Config(individuals=["Bob"], resample_interval="1h", output_dir=tmp_path / "out")
        path = tmp_path / "config.json"
        config.save(path)

        loaded = Config.from_json(path)
        assert loaded.to_dict() == config.to_dict()

    @pytest.mark.parametrize("kwargs", [
        {"validation": "clamp"},
        {"home_range_percent": 0},
        {"home_range_percent": 120},
        {"resample_interval": "-1s"},
        {"max_animation_frames": 0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            Config(**kwargs)

    def test_palette_fallback(self):
        config = Config(colors={})
        assert config.color_for("Bob", 0) != config.color_for("Da Vinci", 1)


# ============== Pipeline Tests ==============

@pytest.fixture
def fast_config(tmp_path):
    return Config(
        output_dir=tmp_path / "outputs",
        resample_interval="1h",
        max_animation_frames=8,
        animation_fps=5,
        animation_dpi=30,
    )


class TestRunPipeline:
    """Test end-to-end orchestration."""

    def test_all_outputs(self, multi_day_csv, fast_config):
        summary = run_all.run_pipeline(multi_day_csv, fast_config)

        assert summary["errors"] == []
        assert set(summary["outputs"]) == {"map", "animation", "daily_animation"}
        for path in summary["outputs"].values():
            assert Path(path).exists()

        bob = summary["individuals"]["Bob"]
        assert bob["n_points"] == 36
        assert bob["home_range"]["area_km2"] > 0
        assert bob["resampled"]["n_leading_dropped"] == 0

    def test_summary_is_json_serializable(self, multi_day_csv, fast_config):
        summary = run_all.run_pipeline(multi_day_csv, fast_config)
        json.dumps(summary)

    def test_missing_file_aborts(self, tmp_path, fast_config):
        summary = run_all.run_pipeline(tmp_path / "missing.csv", fast_config)

        assert [e["stage"] for e in summary["errors"]] == ["load"]
        assert summary["outputs"] == {}

    def test_corrupt_archive_aborts(self, tmp_path, fast_config):
        path = tmp_path / "tracks.zip"
        path.write_bytes(b"this is not a zip archive at all")

        summary = run_all.run_pipeline(path, fast_config)

        assert [e["stage"] for e in summary["errors"]] == ["load"]
        assert summary["outputs"] == {}

    def test_home_range_failure_is_isolated(self, tmp_path, multi_day_csv, fast_config):
        df = pd.read_csv(multi_day_csv)
        extra = df[df["individual-local-identifier"] == "Bob"].head(2).copy()
        extra["individual-local-identifier"] = "Leonardo"
        path = tmp_path / "with_sparse.csv"
        pd.concat([df, extra]).to_csv(path, index=False)

        summary = run_all.run_pipeline(path, fast_config)

        assert [(e["stage"], e["individual"]) for e in summary["errors"]] == [("home_range", "Leonardo")]
        assert set(summary["outputs"]) == {"map", "animation", "daily_animation"}
        assert "home_range" not in summary["individuals"]["Leonardo"]

    def test_selected_individuals(self, multi_day_csv, fast_config):
        fast_config.individuals = ["Da Vinci"]
        summary = run_all.run_pipeline(multi_day_csv, fast_config)

        assert list(summary["individuals"]) == ["Da Vinci"]


# ============== CLI Tests ==============

class TestMain:
    """Test command line entry point."""

    def test_success(self, tmp_path, multi_day_csv):
        out = tmp_path / "cli"
        run_all.main([
            "--data", str(multi_day_csv),
            "--output", str(out),
            "--interval", "2h",
        ])

        summary = json.loads((out / "run_summary.json").read_text())
        assert summary["errors"] == []
        assert summary["config"]["resample_interval"] == "2h"

    def test_missing_data_exits_nonzero(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            run_all.main(["--data", str(tmp_path / "missing.csv"), "--output", str(tmp_path)])
        assert exc_info.value.code == 1

    def test_bad_config_exits(self, tmp_path, multi_day_csv):
        with pytest.raises(SystemExit) as exc_info:
            run_all.main(["--data", str(multi_day_csv), "--output", str(tmp_path), "--percent", "150"])
        assert exc_info.value.code == 2

    def test_unknown_config_key_exits(self, tmp_path, multi_day_csv):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"zoom_level": 3}))

        with pytest.raises(SystemExit) as exc_info:
            run_all.main([
                "--data", str(multi_day_csv),
                "--config", str(config_path),
                "--output", str(tmp_path),
            ])
        assert exc_info.value.code == 2
