from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from .config import AppConfig
from .model import DeviceOutcome

SCHEMA_VERSION = "0.1.0"


def _default_schema_path() -> Path:
    return Path(__file__).with_name("summary.schema.json")


def build_summary(
    *, config: AppConfig, outcomes: Sequence[DeviceOutcome], started_at: str, finished_at: str
) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "started_at": started_at,
        "finished_at": finished_at,
        "config": config.to_dict(),
        "devices": [o.to_dict() for o in outcomes],
    }


def validate_summary(payload: dict[str, Any], *, schema_path: Path | None = None) -> None:
    schema_path = _default_schema_path() if schema_path is None else schema_path
    schema = json.loads(schema_path.read_text())
    Draft202012Validator(schema).validate(payload)


def write_summary(path: Path, payload: dict[str, Any]) -> None:
    """Validate then write the run summary as sorted, indented JSON."""
    validate_summary(payload)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n")
