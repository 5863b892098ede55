"""JSON serialization and deserialization for experiment configs."""

import json
from dataclasses import asdict
from typing import Any

from dacite import Config as DaciteConfig
from dacite import from_dict

from gnpsweep.config.experiment import ExperimentConfig

# strict=True rejects unknown keys; cast=[tuple] turns JSON arrays back into tags.
_DACITE = DaciteConfig(cast=[tuple], check_types=True, strict=True)


def config_to_dict(config: ExperimentConfig) -> dict[str, Any]:
    return asdict(config)


def config_from_dict(d: dict[str, Any]) -> ExperimentConfig:
    """Rebuild an ExperimentConfig; missing sections fall back to defaults."""
    return from_dict(data_class=ExperimentConfig, data=d, config=_DACITE)


def config_to_json(config: ExperimentConfig) -> str:
    """Sorted keys, 2-space indent, so config files diff cleanly."""
    return json.dumps(config_to_dict(config), indent=2, sort_keys=True)


def config_from_json(json_str: str) -> ExperimentConfig:
    return config_from_dict(json.loads(json_str))
