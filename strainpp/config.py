"""
config.py

Typed configuration loading and validation for strainpp.

Design goals
- Load at most one UTF-8 JSON config file; a missing file means defaults
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If STRAINPP_CONFIG_PATH is set, that file is used and must exist.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./strainpp_config.json (current working directory)
  2) <user config dir>/strainpp/strainpp_config.json

Example config file (strainpp_config.json)
{
  "calculation": {
    "hitresult_priority": "best_case"
  },
  "logging": {
    "level": "INFO",
    "format": "%(asctime)s %(levelname)s %(name)s: %(message)s"
  }
}
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

from strainpp.hitresults import HitResultPriority

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class CalculationConfig(BaseModel):
    hitresult_priority: str = Field(
        default=HitResultPriority.BEST_CASE.value,
        description="Tie-break used when hit results are generated: best_case or worst_case.",
    )

    @field_validator("hitresult_priority")
    @classmethod
    def validate_hitresult_priority(cls, value: str) -> str:
        return HitResultPriority.parse(value).value

    def priority(self) -> HitResultPriority:
        return HitResultPriority.parse(self.hitresult_priority)


class LoggingConfig(BaseModel):
    level: str = Field(default="WARNING", description="Root log level used by configure_logging().")
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging.Formatter format string.",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError("level must be one of: " + ", ".join(sorted(_LOG_LEVELS)))
        return normalized


class StrainppConfig(BaseModel):
    calculation: CalculationConfig = Field(default_factory=CalculationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("strainpp", appauthor=False))
    return [
        Path.cwd() / "strainpp_config.json",
        config_directory / "strainpp_config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("STRAINPP_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exception:
        raise ValueError(f"Config file not found: {config_path}") from exception
    except OSError as exception:
        raise ValueError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - STRAINPP_HITRESULT_PRIORITY
    - STRAINPP_LOG_LEVEL
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    calculation_section = ensure_nested(updated_config, "calculation")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    override_string("STRAINPP_HITRESULT_PRIORITY", calculation_section, "hitresult_priority")
    override_string("STRAINPP_LOG_LEVEL", logging_section, "level")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[StrainppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict: Dict[str, Any] = {}
    if resolved_path is not None:
        json_dict = _read_json_file_utf8(Path(resolved_path))
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = StrainppConfig.model_validate(json_dict)
    except ValidationError as exception:
        raise ValueError(f"Config validation failed for {resolved_path or '(defaults)'}:\n{exception}") from exception

    logger.debug("Loaded config from %s", resolved_path or "(defaults)")
    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[StrainppConfig, Optional[Path]]:
    return load_config()


def default_hitresult_priority() -> HitResultPriority:
    """Configured priority for entry points to pass on; calculators never read it themselves."""
    config, _resolved_path = get_config()
    return config.calculation.priority()


def configure_logging(config: Optional[StrainppConfig] = None) -> None:
    """Apply the logging section to the root logger. Meant for entry points, not library code."""
    if config is None:
        config, _resolved_path = get_config()
    logging.basicConfig(level=getattr(logging, config.logging.level), format=config.logging.format)


def main() -> int:
    try:
        config, resolved_path = load_config()
    except ValueError as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
