"""Configuration loading for cph.

Settings come from an optional YAML file. The first file found wins:

1. Explicit path (``--config``)
2. ``CPH_CONFIG`` environment variable
3. ``./.cph.yaml``
4. ``~/.cph.yaml``

Example file::

    aws:
      profile: ci-admin
      region: eu-west-1
      timeout: 30
      page_size: 100
    logging:
      level: INFO
    display:
      date_format: "%b %d %Y %H:%M:%S"

The AWS profile is finally resolved as ``--profile`` > ``AWS_PROFILE`` >
file value, see :meth:`CphConfig.resolve_profile`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from cph.exceptions import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["CONFIG_ENV_VAR", "CONFIG_FILENAME", "CphConfig", "find_config_file", "load_config"]

log = logging.getLogger(__name__)

CONFIG_FILENAME = ".cph.yaml"
CONFIG_ENV_VAR = "CPH_CONFIG"

DEFAULT_TIMEOUT = 30.0
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_DATE_FORMAT = "%b %d %Y %H:%M:%S"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class CphConfig:
    """Resolved cph settings.

    Attributes:
        profile: Named AWS profile from the config file.
        region: AWS region override.
        timeout: Botocore connect/read timeout in seconds.
        page_size: Page size used when listing pipelines.
        log_level: Level name for the ``cph`` logger.
        date_format: ``strftime`` format for timestamps in tables.
        source: File the settings were read from, if any.
    """

    profile: str | None = None
    region: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = DEFAULT_LOG_LEVEL
    date_format: str = DEFAULT_DATE_FORMAT
    source: Path | None = None

    def __post_init__(self) -> None:
        """Validate value bounds."""
        if self.timeout <= 0:
            raise ConfigError("aws.timeout must be greater than 0")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ConfigError(f"aws.page_size must be between 1 and {MAX_PAGE_SIZE}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")
        if not self.date_format:
            raise ConfigError("display.date_format cannot be empty")

    def resolve_profile(self, override: str | None = None) -> str | None:
        """Return the profile to use: override, then ``AWS_PROFILE``, then file."""
        return override or os.getenv("AWS_PROFILE") or self.profile

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: Path | None = None) -> CphConfig:
        """Build a config from parsed YAML data.

        Args:
            data: Top-level mapping from the YAML file.
            source: File the data came from.

        Returns:
            Validated configuration.

        Raises:
            ConfigError: If a section or value has the wrong type.
        """
        aws = _section(data, "aws")
        logging_section = _section(data, "logging")
        display = _section(data, "display")

        return cls(
            profile=_typed(aws, "aws.profile", "profile", str),
            region=_typed(aws, "aws.region", "region", str),
            timeout=float(_typed(aws, "aws.timeout", "timeout", (int, float), DEFAULT_TIMEOUT)),
            page_size=_typed(aws, "aws.page_size", "page_size", int, DEFAULT_PAGE_SIZE),
            log_level=_typed(logging_section, "logging.level", "level", str, DEFAULT_LOG_LEVEL).upper(),
            date_format=_typed(display, "display.date_format", "date_format", str, DEFAULT_DATE_FORMAT),
            source=source,
        )


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' section must be a mapping, got {type(value).__name__}")
    return value


def _typed(
    section: Mapping[str, Any],
    label: str,
    key: str,
    expected: type | tuple[type, ...],
    default: Any = None,
) -> Any:
    value = section.get(key)
    if value is None:
        return default
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, expected):
        raise ConfigError(f"{label} has invalid type {type(value).__name__}")
    return value


def find_config_file(explicit: str | Path | None = None) -> Path | None:
    """Locate the configuration file.

    Args:
        explicit: Path given on the command line.

    Returns:
        Path of the file to load, or None when no file exists.

    Raises:
        ConfigError: If an explicitly requested file does not exist.
    """
    requested = explicit or os.getenv(CONFIG_ENV_VAR)
    if requested:
        path = Path(requested).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path

    for candidate in (Path.cwd() / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME):
        if candidate.is_file():
            return candidate
    return None


def load_config(explicit: str | Path | None = None) -> CphConfig:
    """Load cph settings, falling back to defaults when no file exists.

    Args:
        explicit: Optional path given on the command line.

    Returns:
        The resolved configuration.

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds invalid values.
    """
    path = find_config_file(explicit)
    if path is None:
        log.debug("No config file found, using defaults")
        return CphConfig()

    log.debug("Loading config from %s", path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return CphConfig(source=path)
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at top level")
    return CphConfig.from_mapping(data, source=path)
