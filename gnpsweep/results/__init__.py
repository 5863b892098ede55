"""Result schema validation, writing, and experiment ID generation."""

from gnpsweep.results.experiment_id import generate_experiment_id
from gnpsweep.results.schema import (
    load_result,
    table_to_records,
    validate_result,
    write_result,
    write_results_csv,
)

__all__ = [
    "generate_experiment_id",
    "load_result",
    "table_to_records",
    "validate_result",
    "write_result",
    "write_results_csv",
]
