"""Configuration for the spannerspy command-line shells.

Settings are layered: an optional YAML file (``spannerspy.yaml``), then
environment variables, then command-line flags applied by each CLI.

Environment variables:
    SPANNERSPY_CONFIG: Path to the YAML config file (default: ./spannerspy.yaml)
    SPANNERSPY_LOG_LEVEL: Logging level name (default: WARNING)
    SPANNERSPY_PRETTY: Indent JSON output (default: false)
    SPANNERSPY_INDENT: Indent width for pretty JSON (default: 2)
    SPANNERSPY_FORMAT: Diagram output format - mermaid, mmd or json (default: mermaid)

The builder and loaders never read configuration.
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("spannerspy.yaml")

LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
DIAGRAM_FORMATS: frozenset[str] = frozenset({"mermaid", "mmd", "json"})

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class OutputConfig:
    """JSON output layout."""

    pretty: bool = False
    indent: int = 2


@dataclass
class DiagramConfig:
    format: str = "mermaid"


@dataclass
class Config:
    """Top-level configuration."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    diagram: DiagramConfig = field(default_factory=DiagramConfig)

    @classmethod
    def from_env(cls) -> Config:
        """Load the YAML file named by SPANNERSPY_CONFIG, then apply env overrides."""
        config_path = os.environ.get("SPANNERSPY_CONFIG")
        config = load_config(Path(config_path) if config_path else None)

        level = os.environ.get("SPANNERSPY_LOG_LEVEL")
        if level is not None:
            config.logging.level = _parse_level(level, config.logging.level, "SPANNERSPY_LOG_LEVEL")

        pretty = os.environ.get("SPANNERSPY_PRETTY")
        if pretty is not None:
            config.output.pretty = _parse_bool(pretty, config.output.pretty, "SPANNERSPY_PRETTY")

        indent = os.environ.get("SPANNERSPY_INDENT")
        if indent is not None:
            config.output.indent = _parse_indent(indent, config.output.indent, "SPANNERSPY_INDENT")

        fmt = os.environ.get("SPANNERSPY_FORMAT")
        if fmt is not None:
            config.diagram.format = _parse_format(fmt, config.diagram.format, "SPANNERSPY_FORMAT")

        return config


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def _parse_level(value: Any, default: str, key: str) -> str:
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        warnings.warn(f"{key}: unknown log level '{value}', using {default}", stacklevel=3)
        return default
    return level


def _parse_bool(value: Any, default: bool, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    warnings.warn(f"{key}: expected a boolean, got '{value}', using {default}", stacklevel=3)
    return default


def _parse_indent(value: Any, default: int, key: str) -> int:
    try:
        indent = int(value)
    except (TypeError, ValueError):
        indent = -1
    if isinstance(value, bool) or indent < 0:
        warnings.warn(f"{key}: expected a non-negative integer, got '{value}', using {default}", stacklevel=3)
        return default
    return indent


def _parse_format(value: Any, default: str, key: str) -> str:
    fmt = str(value).strip().lower()
    if fmt not in DIAGRAM_FORMATS:
        warnings.warn(f"{key}: unknown diagram format '{value}', using {default}", stacklevel=3)
        return default
    return fmt


def _section(raw: dict[str, Any], name: str, known: set[str]) -> dict[str, Any]:
    section = raw.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        warnings.warn(f"{name} should be a mapping, using defaults", stacklevel=3)
        return {}
    for key in section:
        if key not in known:
            warnings.warn(f"Unknown config key '{name}.{key}', will be ignored", stacklevel=3)
    return section


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> Config:
    """Load a YAML config file and return a ``Config``.

    If *path* is ``None`` the default ``spannerspy.yaml`` in the current
    directory is tried.  A missing or unreadable file yields the defaults.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if not path.exists():
        return Config()

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"Failed to parse config file {path}: {exc}", stacklevel=2)
        return Config()

    if not isinstance(raw, dict):
        return Config()

    known_keys = {"logging", "output", "diagram"}
    for key in raw:
        if key not in known_keys:
            warnings.warn(f"Unknown config key '{key}', will be ignored", stacklevel=2)

    config = Config()
    log_raw = _section(raw, "logging", {"level"})
    if "level" in log_raw:
        config.logging.level = _parse_level(log_raw["level"], config.logging.level, "logging.level")

    out_raw = _section(raw, "output", {"pretty", "indent"})
    if "pretty" in out_raw:
        config.output.pretty = _parse_bool(out_raw["pretty"], config.output.pretty, "output.pretty")
    if "indent" in out_raw:
        config.output.indent = _parse_indent(out_raw["indent"], config.output.indent, "output.indent")

    diagram_raw = _section(raw, "diagram", {"format"})
    if "format" in diagram_raw:
        config.diagram.format = _parse_format(diagram_raw["format"], config.diagram.format, "diagram.format")

    logger.debug("Loaded config from %s", path)
    return config


_config: Config | None = None


def get_config() -> Config:
    """Get the process-wide configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the process-wide configuration (for testing)."""
    global _config
    _config = None
