"""Configuration for tracewire: TOML file, environment and explicit overrides.

Priority, highest first: explicit overrides > environment variables > config file > defaults.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from tracewire.errors import ConfigError

CONFIG_FILE_NAME = "tracewire.toml"
HOME_CONFIG_FILE_NAME = ".tracewire.toml"

KNOWN_PROPAGATORS = (
    "tracecontext",
    "baggage",
    "b3",
    "b3multi",
    "jaeger",
    "xray",
    "xray-lambda",
    "none",
)

_TRUE_VALUES = ("true", "1", "yes", "on")

# (section, field) for each supported environment variable. Later entries win.
ENV_VAR_MAPPING: Dict[str, Tuple[str, str]] = {
    "OTEL_PROPAGATORS": ("propagation", "propagators"),
    "TRACEWIRE_PROPAGATORS": ("propagation", "propagators"),
    "TRACEWIRE_B3_INJECT_ENCODING": ("propagation", "b3_inject_encoding"),
    "TRACEWIRE_JAEGER_TRACE_HEADER": ("propagation", "jaeger_trace_header"),
    "TRACEWIRE_JAEGER_BAGGAGE_PREFIX": ("propagation", "jaeger_baggage_prefix"),
    "TRACEWIRE_DEBUG": ("logging", "debug"),
    "TRACEWIRE_LOG_LEVEL": ("logging", "level"),
}

_BOOL_FIELDS = {"debug"}


class PropagationConfig(BaseModel):
    """Which wire formats to use and how to write them."""

    propagators: List[str] = Field(default_factory=lambda: ["tracecontext", "baggage"])
    b3_inject_encoding: Literal["single", "multi"] = "single"
    jaeger_trace_header: str = "uber-trace-id"
    jaeger_baggage_prefix: str = "uberctx"

    @field_validator("propagators", mode="before")
    @classmethod
    def _split_propagators(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        return value

    @field_validator("propagators")
    @classmethod
    def _check_propagators(cls, value: List[str]) -> List[str]:
        names = [name.strip().lower() for name in value if name and name.strip()]
        unknown = [name for name in names if name not in KNOWN_PROPAGATORS]
        if unknown:
            raise ValueError(
                f"Unknown propagator(s) {unknown}; expected one of {list(KNOWN_PROPAGATORS)}"
            )
        return names

    @field_validator("b3_inject_encoding", mode="before")
    @classmethod
    def _lower_encoding(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("jaeger_trace_header", "jaeger_baggage_prefix")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class LoggingConfig(BaseModel):
    debug: bool = False
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level {value!r}")
        return level


class TracewireConfig(BaseModel):
    propagation: PropagationConfig = Field(default_factory=PropagationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def find_config_file() -> Optional[str]:
    """
    Look for a config file in the working directory, then the home directory.

    Returns:
        Path of the first file found, or None
    """
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / HOME_CONFIG_FILE_NAME,
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: str) -> Dict[str, Any]:
    """
    Read a TOML config file.

    Args:
        path: File to read

    Returns:
        The parsed, nested mapping; ``{}`` when the file does not exist

    Raises:
        ConfigError: if the file cannot be read or is not valid TOML
    """
    config_path = Path(path)
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError("Invalid TOML in config file", {"path": str(path), "error": str(exc)}) from exc
    except OSError as exc:
        raise ConfigError("Cannot read config file", {"path": str(path), "error": str(exc)}) from exc


def _env_value(field: str, raw: str) -> Any:
    if field in _BOOL_FIELDS:
        return raw.strip().lower() in _TRUE_VALUES
    return raw


def load_config_from_env(flat: bool = False) -> Dict[str, Any]:
    """
    Collect settings from environment variables.

    Args:
        flat: Return ``{field: value}`` instead of ``{section: {field: value}}``

    Returns:
        Only the variables that are set
    """
    nested: Dict[str, Dict[str, Any]] = {}
    for env_var, (section, field) in ENV_VAR_MAPPING.items():
        raw = os.environ.get(env_var)
        if raw is None or raw == "":
            continue
        nested.setdefault(section, {})[field] = _env_value(field, raw)

    if not flat:
        return nested
    return {field: value for section in nested.values() for field, value in section.items()}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _merged_sources(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    path = config_file or find_config_file()
    merged = load_toml_config(path) if path else {}
    merged = _merge(merged, load_config_from_env())
    if overrides:
        merged = _merge(merged, overrides)
    return merged


def load_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> TracewireConfig:
    """
    Load configuration from every source and validate it.

    Args:
        config_file: Explicit TOML file; searched for when omitted
        overrides: Nested mapping that wins over every other source

    Raises:
        ConfigError: if a source cannot be read or the result is invalid
    """
    merged = _merged_sources(config_file, overrides)
    try:
        return TracewireConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError("Invalid configuration", {"errors": str(exc)}) from exc


def validate_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[bool, str, Optional[TracewireConfig]]:
    """
    Check configuration without raising.

    Returns:
        (is_valid, message, config) where config is None when invalid
    """
    try:
        config = load_config(config_file=config_file, overrides=overrides)
    except ConfigError as exc:
        return False, str(exc), None
    return True, "Configuration is valid", config


def configure_logging(config: Optional[TracewireConfig] = None) -> logging.Logger:
    """Apply the logging section to the ``tracewire`` logger and return it."""
    config = config or TracewireConfig()
    package_logger = logging.getLogger("tracewire")
    if config.logging.debug:
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(config.logging.level)
    return package_logger
