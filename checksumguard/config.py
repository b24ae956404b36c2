# -*- coding: utf-8 -*-
"""
RU: Конфигурация ядра дайджестов: лимиты входа, алгоритм по умолчанию, логирование.
EN: Digest core configuration: input limits, default algorithm, log level.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Final, Mapping, Optional

from checksumguard.core.exceptions import ConfigurationError

_LOGGER: Final = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = "checksumguard.json"
ENV_PREFIX: Final[str] = "CHECKSUMGUARD_"

_LOG_LEVELS: Final[frozenset[str]] = frozenset(
    {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
)


@dataclass(frozen=True)
class DigestConfig:
    """
    Digest core configuration parameters.

    Attributes:
        min_input_length: Minimum input length in characters.
        max_input_length: Maximum input length in characters.
        default_algorithm: Algorithm used when the caller names none.
        log_level: Level for the ``checksumguard`` logger.

    Examples:
        >>> config = DigestConfig()
        >>> config.max_input_length
        10000

        >>> DigestConfig(min_input_length=0)
        Traceback (most recent call last):
        ConfigurationError: ...
    """

    min_input_length: int = 1
    max_input_length: int = 10_000
    default_algorithm: str = "SHA-256"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not isinstance(self.min_input_length, int) or self.min_input_length < 1:
            raise ConfigurationError(
                "min_input_length must be >= 1", setting="min_input_length"
            )
        if (
            not isinstance(self.max_input_length, int)
            or self.max_input_length < self.min_input_length
        ):
            raise ConfigurationError(
                "max_input_length must be >= min_input_length",
                setting="max_input_length",
            )
        if not isinstance(self.default_algorithm, str) or not self.default_algorithm.strip():
            raise ConfigurationError(
                "default_algorithm cannot be empty", setting="default_algorithm"
            )
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {sorted(_LOG_LEVELS)}",
                setting="log_level",
            )
        object.__setattr__(self, "log_level", str(self.log_level).upper())

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DigestConfig":
        """
        Create configuration from a mapping, ignoring unknown keys.

        Raises:
            ConfigurationError: if any value is invalid.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            _LOGGER.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in values.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read a JSON object; any problem is logged and yields an empty dict."""
    if not path.exists():
        _LOGGER.info("Config file %s not found, using defaults", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        _LOGGER.warning(
            "Failed to parse %s: invalid JSON at line %d, column %d. Using defaults.",
            path,
            e.lineno,
            e.colno,
        )
        return {}
    except OSError as e:
        _LOGGER.warning("Failed to read %s: %s. Using defaults.", path, e)
        return {}

    if not isinstance(data, dict):
        _LOGGER.warning(
            "Config file %s must contain a JSON object, got %s. Using defaults.",
            path,
            type(data).__name__,
        )
        return {}

    _LOGGER.info("Configuration loaded from %s", path)
    return data


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}

    for name in ("min_input_length", "max_input_length"):
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        try:
            overrides[name] = int(raw)
        except ValueError:
            raise ConfigurationError(
                f"{ENV_PREFIX}{name.upper()} must be an integer", setting=name
            ) from None

    for name in ("default_algorithm", "log_level"):
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            overrides[name] = raw

    return overrides


def load_config(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> DigestConfig:
    """
    Load configuration: defaults, then JSON file, then environment.

    Args:
        config_path: JSON file path. Defaults to ``checksumguard.json``
            in the current directory; a missing file is not an error.
        env: Environment mapping (defaults to ``os.environ``).

    Returns:
        Validated DigestConfig.

    Raises:
        ConfigurationError: if the merged values are invalid. This is
            fatal at startup.

    Examples:
        >>> cfg = load_config(env={"CHECKSUMGUARD_MAX_INPUT_LENGTH": "512"})
        >>> cfg.max_input_length
        512
    """
    path = config_path if config_path is not None else Path(DEFAULT_CONFIG_FILE)
    environ = os.environ if env is None else env

    config = DigestConfig.from_mapping(_read_config_file(path))

    overrides = _env_overrides(environ)
    if overrides:
        _LOGGER.debug("Applying environment overrides: %s", ", ".join(sorted(overrides)))
        config = replace(config, **overrides)

    return config


__all__ = [
    "DigestConfig",
    "load_config",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
]
