"""Result schema validation and writing.

Uses a Python validation function (not jsonschema) to check required fields,
types, and per-point consistency before writing result.json files. The CSV
export is the plain tabular view of the same rows.
"""

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from gnpsweep.config.experiment import ExperimentConfig
from gnpsweep.config.hashing import full_config_hash, sweep_config_hash
from gnpsweep.config.serialization import config_to_dict
from gnpsweep.experiment.types import ResultsTable
from gnpsweep.reproducibility.git_hash import get_git_hash
from gnpsweep.results.experiment_id import generate_experiment_id

log = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"

REQUIRED_TOP_FIELDS = {
    "schema_version",
    "experiment_id",
    "timestamp",
    "description",
    "tags",
    "config",
    "table",
}

REQUIRED_ROW_FIELDS = {
    "probability",
    "expected_outcome",
    "trial_count",
    "success_count",
    "completed_trials",
    "success_rate",
    "status",
}

CSV_FIELDS = [
    "probability",
    "expected_outcome",
    "success_rate",
    "success_count",
    "completed_trials",
    "trial_count",
    "status",
]


def table_to_records(table: ResultsTable) -> list[dict[str, Any]]:
    """One plain dict per row, in sweep order."""
    return [
        {
            "probability": row.point.probability,
            "expected_outcome": row.point.expected_outcome,
            "trial_count": row.point.trial_count,
            "success_count": row.success_count,
            "completed_trials": row.completed_trials,
            "success_rate": row.success_rate,
            "status": row.status.value,
            "elapsed_seconds": row.elapsed,
        }
        for row in table
    ]


def validate_result(result: dict[str, Any]) -> list[str]:
    """Validate a result dict against the project schema.

    Returns a list of error strings. An empty list means the result is valid.

    Checks:
    - All required top-level fields are present
    - schema_version is a string, tags a list, config a dict
    - timestamp contains 'T' (basic ISO 8601 check)
    - table.rows entries carry the required fields
    - success_count <= completed_trials <= trial_count per row
    """
    errors: list[str] = []

    missing = REQUIRED_TOP_FIELDS - set(result.keys())
    if missing:
        errors.append(f"Missing required top-level fields: {sorted(missing)}")

    if "schema_version" in result and not isinstance(result["schema_version"], str):
        errors.append("schema_version must be a string")

    if "tags" in result and not isinstance(result["tags"], list):
        errors.append("tags must be a list")

    if "config" in result and not isinstance(result["config"], dict):
        errors.append("config must be a dict")

    if "timestamp" in result:
        ts = result["timestamp"]
        if not isinstance(ts, str) or "T" not in ts:
            errors.append("timestamp must be an ISO 8601 string")

    table = result.get("table")
    if table is not None:
        rows = table.get("rows") if isinstance(table, dict) else None
        if not isinstance(rows, list):
            errors.append("table.rows must be a list")
        else:
            for i, row in enumerate(rows):
                row_missing = REQUIRED_ROW_FIELDS - set(row.keys())
                if row_missing:
                    errors.append(f"table.rows[{i}] missing fields: {sorted(row_missing)}")
                    continue
                if not (
                    0 <= row["success_count"]
                    <= row["completed_trials"]
                    <= row["trial_count"]
                ):
                    errors.append(
                        f"table.rows[{i}] counts inconsistent: "
                        f"success={row['success_count']} "
                        f"completed={row['completed_trials']} "
                        f"trials={row['trial_count']}"
                    )

    return errors


def write_result(
    config: ExperimentConfig,
    table: ResultsTable,
    summary: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
    results_dir: str | Path = "results",
) -> Path:
    """Write results/{experiment_id}/result.json for a finished sweep.

    Args:
        config: The experiment configuration.
        table: Finished (or partial, for aborted sweeps) results table.
        summary: Optional output of summarize_sweep().
        metadata: Optional extra metadata merged into the metadata block.
        results_dir: Base directory for result output.

    Returns:
        Path to the experiment's output directory.

    Raises:
        ValueError: If the assembled result fails validation.
    """
    experiment_id = generate_experiment_id(config)
    out_dir = Path(results_dir) / experiment_id
    out_dir.mkdir(parents=True, exist_ok=True)

    result = {
        "schema_version": SCHEMA_VERSION,
        "experiment_id": experiment_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "description": config.description,
        "tags": list(config.tags),
        "config": config_to_dict(config),
        "table": {
            "analysis": table.analysis,
            "vertex_count": table.vertex_count,
            "complete": table.complete,
            "aborted": table.aborted,
            "cancelled": table.cancelled,
            "incomplete_points": table.incomplete_indices(),
            "rows": table_to_records(table),
        },
        "summary": summary or {},
        "metadata": {
            "code_hash": get_git_hash(),
            "config_hash": full_config_hash(config),
            "sweep_config_hash": sweep_config_hash(config),
            **(metadata or {}),
        },
    }

    errors = validate_result(result)
    if errors:
        raise ValueError(
            "Result validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )

    result_path = out_dir / "result.json"
    with open(result_path, "w") as f:
        json.dump(result, f, indent=2)

    log.info("Result written to %s", result_path)
    return out_dir


def write_results_csv(table: ResultsTable, path: str | Path) -> Path:
    """Write the table as CSV, one row per probability point."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(table_to_records(table))
    log.info("Results table written to %s", path)
    return path


def load_result(result_path: str | Path) -> dict[str, Any]:
    """Load and validate a result.json file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the loaded result fails validation.
    """
    path = Path(result_path)
    with open(path) as f:
        result = json.load(f)

    errors = validate_result(result)
    if errors:
        raise ValueError(
            f"Result validation failed for {path}:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    return result
