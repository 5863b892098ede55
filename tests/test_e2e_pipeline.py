"""Integration tests for the end-to-end experiment pipeline.

Runs the full pipeline from config loading through the threshold figure
using a tiny sweep for fast execution.
"""

import csv
import json
import subprocess
import sys
from pathlib import Path

import pytest

from gnpsweep.config import (
    ExecutionConfig,
    ExperimentConfig,
    GraphConfig,
    SweepConfig,
)
from gnpsweep.config.serialization import config_to_json
from gnpsweep.results import validate_result

REPO_ROOT = Path(__file__).resolve().parent.parent

# Tiny config for fast E2E testing.
# n=30 puts the isolation threshold near p=0.113; threads avoid pool startup cost.
TINY_CONFIG = ExperimentConfig(
    graph=GraphConfig(n=30),
    sweep=SweepConfig(
        analysis="isolated",
        down_jump_pct=0.15,
        up_jump_pct=0.3,
        trials_per_point=8,
    ),
    execution=ExecutionConfig(executor="thread", max_workers=2),
    seed=42,
    description="E2E pipeline test",
    tags=("test", "e2e"),
)


def _write_config(tmp_path: Path) -> Path:
    """Write tiny config to a temporary file."""
    config_path = tmp_path / "config.json"
    config_path.write_text(config_to_json(TINY_CONFIG))
    return config_path


def _run_cli(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(REPO_ROOT / "run_experiment.py"), *args],
        capture_output=True,
        text=True,
        timeout=60,
        cwd=REPO_ROOT,
    )


class TestDryRun:
    """Tests for --dry-run mode."""

    def test_dry_run_exits_cleanly(self, tmp_path: Path) -> None:
        """Dry run should load config and print the plan without running trials."""
        result = _run_cli("--config", str(_write_config(tmp_path)), "--dry-run")
        assert result.returncode == 0
        assert "Sweep plan" in result.stdout
        assert "dry-run" in result.stdout.lower()

    def test_dry_run_lists_ten_points(self, tmp_path: Path) -> None:
        result = _run_cli("--config", str(_write_config(tmp_path)), "--dry-run")
        plan = [line for line in result.stdout.splitlines() if "expected=" in line]
        assert len(plan) == 10
        assert all("trials=8" in line for line in plan)

    def test_dry_run_shows_output_paths(self, tmp_path: Path) -> None:
        result = _run_cli("--config", str(_write_config(tmp_path)), "--dry-run")
        # Experiment ID contains a timestamp so we check the slug prefix
        assert "isolated_n30_t8_s42_" in result.stdout
        assert "result.json" in result.stdout
        assert "results.csv" in result.stdout

    def test_cli_overrides(self, tmp_path: Path) -> None:
        result = _run_cli(
            "--config", str(_write_config(tmp_path)),
            "--analysis", "connected", "--n", "40", "--seed", "7", "--dry-run",
        )
        assert result.returncode == 0
        assert "connected_n40_t8_s7_" in result.stdout

    def test_invalid_override_fails(self, tmp_path: Path) -> None:
        result = _run_cli(
            "--config", str(_write_config(tmp_path)), "--trials", "0", "--dry-run"
        )
        assert result.returncode == 1
        assert "invalid configuration" in result.stderr

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = _run_cli("--config", str(tmp_path / "nope.json"), "--dry-run")
        assert result.returncode == 1


@pytest.fixture(scope="module")
def pipeline_output(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Run the full pipeline once for all tests in this module."""
    tmp_path = tmp_path_factory.mktemp("e2e")
    results_dir = str(tmp_path / "results")

    from run_experiment import run_pipeline

    return run_pipeline(TINY_CONFIG, results_dir=results_dir)


class TestFullPipeline:
    """Tests for the full pipeline execution on a tiny sweep."""

    def test_pipeline_completes(self, pipeline_output: Path) -> None:
        assert pipeline_output.exists()

    def test_result_json_validates(self, pipeline_output: Path) -> None:
        with open(pipeline_output / "result.json") as f:
            result = json.load(f)
        errors = validate_result(result)
        assert errors == [], f"Validation errors: {errors}"

    def test_table_is_complete(self, pipeline_output: Path) -> None:
        with open(pipeline_output / "result.json") as f:
            result = json.load(f)
        table = result["table"]
        assert table["complete"] is True
        assert table["aborted"] is False
        assert len(table["rows"]) == 10
        assert all(row["completed_trials"] == 8 for row in table["rows"])

    def test_summary_in_result(self, pipeline_output: Path) -> None:
        with open(pipeline_output / "result.json") as f:
            result = json.load(f)
        summary = result["summary"]
        assert summary["analysis"] == "isolated"
        assert summary["theoretical_threshold"] == pytest.approx(0.11337, rel=1e-3)
        assert len(summary["points"]) == 10

    def test_tags_and_hashes_in_result(self, pipeline_output: Path) -> None:
        with open(pipeline_output / "result.json") as f:
            result = json.load(f)
        assert result["tags"] == ["test", "e2e"]
        assert "config_hash" in result["metadata"]
        assert "sweep_config_hash" in result["metadata"]

    def test_results_csv(self, pipeline_output: Path) -> None:
        with open(pipeline_output / "results.csv", newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 10

    def test_figures_exist(self, pipeline_output: Path) -> None:
        figures_dir = pipeline_output / "figures"
        assert (figures_dir / "threshold_curve.png").exists()
        assert (figures_dir / "threshold_curve.svg").exists()


class TestVisualizationInit:
    """Tests for the visualization __init__.py exports."""

    def test_all_exports(self) -> None:
        import gnpsweep.visualization
        assert "render_threshold_curve" in gnpsweep.visualization.__all__
        assert "apply_style" in gnpsweep.visualization.__all__
        assert "save_figure" in gnpsweep.visualization.__all__
