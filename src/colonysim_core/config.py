# src/colonysim_core/config.py
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import cerberus
import yaml

logger = logging.getLogger(__name__)


class ConfigParsingError(ValueError):
    """Custom exception for errors during engine configuration parsing."""
    pass


@dataclass(frozen=True)
class EngineConfig:
    reference_db: Path
    log_level: str = "INFO"
    expiring_soon_hours: float = 1.0
    max_workers: int = 4


_CONFIG_SCHEMA = {
    "reference_db": {"type": "string", "required": True, "empty": False},
    "log_level": {
        "type": "string",
        "default": "INFO",
        "coerce": str.upper,
        "allowed": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    },
    "expiring_soon_hours": {"type": "number", "default": 1, "min": 0},
    "max_workers": {"type": "integer", "default": 4, "min": 1},
}


def load_engine_config(source: Union[str, Path, Mapping[str, Any]]) -> EngineConfig:
    """
    Loads and validates the engine configuration from a YAML file or a mapping.

    A relative `reference_db` path in a file is resolved against the file's directory.
    """
    base_dir = Path.cwd()
    if isinstance(source, Mapping):
        raw: Dict[str, Any] = dict(source)
    else:
        path = Path(source)
        base_dir = path.resolve().parent
        raw = _load_yaml(path)

    validator = cerberus.Validator(_CONFIG_SCHEMA)
    validator.allow_unknown = False
    if not validator.validate(raw):
        problems = "; ".join(f"{field}: {messages}" for field, messages in sorted(validator.errors.items()))
        raise ConfigParsingError(f"Invalid engine configuration: {problems}")

    document = validator.document
    reference_db = Path(document["reference_db"])
    if not reference_db.is_absolute():
        reference_db = base_dir / reference_db

    config = EngineConfig(
        reference_db=reference_db,
        log_level=document["log_level"],
        expiring_soon_hours=float(document["expiring_soon_hours"]),
        max_workers=document["max_workers"],
    )
    logger.debug(f"Loaded engine configuration: {config}")
    return config


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigParsingError(f"Configuration file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParsingError(f"Invalid YAML in configuration file {path}: {e}") from e
    if not isinstance(content, dict):
        raise ConfigParsingError(f"The root of configuration file {path} must be a mapping.")
    return content
