"""Configuration loading: TOML file, environment variables and explicit overrides.

Priority is explicit overrides > environment > config file > defaults.
"""

from __future__ import annotations

import copy
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from jaegerlite.errors import ConfigurationError
from jaegerlite.exporter.encoder import UDP_PACKET_MAX_LENGTH
from jaegerlite.exporter.udp_exporter import DEFAULT_FLUSH_INTERVAL, DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "jaegerlite.toml"
ENV_PREFIX = "JAEGERLITE_"

# env var suffix -> (section, key)
_ENV_VARS = {
    "SERVICE_NAME": ("tracer", "service_name"),
    "AGENT_HOST": ("agent", "host"),
    "AGENT_PORT": ("agent", "port"),
    "FLUSH_INTERVAL": ("agent", "flush_interval"),
    "MAX_PACKET_SIZE": ("agent", "max_packet_size"),
    "SAMPLER_TYPE": ("sampler", "type"),
    "SAMPLER_PARAM": ("sampler", "param"),
    "DEBUG": ("logging", "debug"),
}

# flat override key -> section
_FLAT_KEYS = {
    "service_name": "tracer",
    "host": "agent",
    "port": "agent",
    "flush_interval": "agent",
    "max_packet_size": "agent",
    "debug": "logging",
}


class AgentConfig(BaseModel):
    """Where and how often spans are sent."""
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    flush_interval: float = Field(default=DEFAULT_FLUSH_INTERVAL, gt=0)
    max_packet_size: int = Field(default=UDP_PACKET_MAX_LENGTH, gt=0, le=UDP_PACKET_MAX_LENGTH)


class SamplerConfig(BaseModel):
    # Left as a plain string so Sampler.build reports unknown types.
    type: str = "const"
    param: Optional[Union[bool, float]] = None

    @field_validator("param", mode="before")
    @classmethod
    def parse_param(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "yes", "on"):
                return True
            if lowered in ("false", "no", "off"):
                return False
            try:
                return float(lowered)
            except ValueError:
                return value
        return value


class LoggingConfig(BaseModel):
    debug: bool = False


class TracerConfig(BaseModel):
    service_name: str

    @field_validator("service_name")
    @classmethod
    def require_service_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("service_name must not be empty")
        return value


class JaegerliteConfig(BaseModel):
    tracer: TracerConfig
    agent: AgentConfig = Field(default_factory=AgentConfig)
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def find_config_file() -> Optional[str]:
    """Return ``./jaegerlite.toml`` or ``~/.jaegerlite.toml`` if either exists."""
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / f".{CONFIG_FILE_NAME}",
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a TOML config file.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigurationError: If the file is not valid TOML
    """
    path = Path(path)
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in config file {path}", {"error": str(e)}) from e


def load_config_from_env() -> Dict[str, Any]:
    """Read ``JAEGERLITE_*`` variables into a nested config dict."""
    loaded: Dict[str, Dict[str, Any]] = {}
    for suffix, (section, key) in _ENV_VARS.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if value is None or value == "":
            continue
        loaded.setdefault(section, {})[key] = value
    return loaded


def nest_overrides(overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Accept both nested sections and flat keyword overrides.

    ``{"host": "agent", "sampler": {"type": "const"}}`` becomes
    ``{"agent": {"host": "agent"}, "sampler": {"type": "const"}}``.
    """
    nested: Dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        section = _FLAT_KEYS.get(key)
        if section is not None:
            nested.setdefault(section, {})[key] = value
        else:
            _merge(nested, {key: value})
    return nested


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> JaegerliteConfig:
    """
    Build the validated configuration.

    Args:
        config_file: Explicit TOML file, otherwise one is searched for
        overrides: Explicit values, nested by section or flat

    Raises:
        ConfigurationError: If the merged configuration is invalid
    """
    path = config_file or find_config_file()
    merged: Dict[str, Any] = copy.deepcopy(load_toml_config(path)) if path else {}
    if path:
        logger.debug(f"Loaded config file {path}")
    _merge(merged, load_config_from_env())
    _merge(merged, nest_overrides(overrides or {}))

    try:
        return JaegerliteConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError("Invalid jaegerlite configuration", {"errors": _describe(e)}) from e


def validate_config(
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[bool, str, Optional[JaegerliteConfig]]:
    """Return ``(is_valid, message, config_or_None)`` instead of raising."""
    try:
        config = load_config(config_file=config_file, overrides=overrides)
    except ConfigurationError as e:
        return False, str(e), None
    return True, "ok", config


def _merge(base: Dict[str, Any], update: Dict[str, Any]) -> None:
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )
