"""
Configuration management for crossvenue-arb.

Loads config/default.yaml as base, merges config/local.yaml if it exists and
an optional explicit override file, expands ${VAR} / ${VAR:default}
environment references, and provides typed access via dataclasses.

Usage:
    from crossvenue.config import get_config
    config = get_config()
    print(config.matching.match_threshold)
    print(config.guardrails.min_edge_percent)
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


# Config file paths relative to project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "config" / "default.yaml"
LOCAL_CONFIG_PATH = _PROJECT_ROOT / "config" / "local.yaml"

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

# Singleton instance
_config_instance: Optional[Settings] = None


# =============================================================================
# TYPED SETTINGS DATACLASSES
# =============================================================================

@dataclass
class MatchingSettings:
    """Thresholds and weights for candidate generation, gating and scoring."""

    min_shared_terms: int = 2
    time_window_days: float = 3.0

    # Pre-filter: reject unless one of these holds
    min_effective_title: float = 0.45
    min_ticker_bypass: float = 0.7
    min_sports_bypass: float = 0.5

    match_threshold: float = 0.55
    weights: Dict[str, float] = field(default_factory=lambda: {
        "title": 0.35,
        "entity": 0.25,
        "ticker": 0.15,
        "time": 0.10,
        "category": 0.10,
        "bracket": 0.05,
    })

    sports_bonus: float = 0.15
    sports_bonus_threshold: float = 0.6
    base_event_bonus: float = 0.0625
    base_event_bonus_threshold: float = 0.75
    bracket_bonus: float = 0.0375
    bracket_bonus_threshold: float = 0.7

    # Numeric target tolerances
    price_tolerance: float = 0.20  # relative
    percent_tolerance: float = 0.5  # percentage points
    adjacent_gap: float = 0.1


@dataclass
class GuardrailSettings:
    """Filters applied before an arbitrage becomes a trade plan."""

    freshness_window_seconds: float = 30.0
    min_edge_percent: float = 0.5
    min_liquidity_dollars: float = 100.0
    slippage_buffer_percent: float = 0.5
    fees_percent: float = 2.0
    max_trade_size_dollars: float = 2500.0


@dataclass
class LoggingSettings:
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Dict[str, Any] = field(default_factory=lambda: {
        "enabled": False,
        "path": "logs/crossvenue.log",
        "max_bytes": 10485760,
        "backup_count": 5,
    })


@dataclass
class Settings:
    """
    Main settings class with typed access to all configuration sections.

    Example:
        config = get_config()
        print(config.matching.min_shared_terms)
        print(config.guardrails.fees_percent)
    """
    matching: MatchingSettings = field(default_factory=MatchingSettings)
    guardrails: GuardrailSettings = field(default_factory=GuardrailSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    # Raw config dict for advanced access
    _raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value."""
        return getattr(self, key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Return the raw configuration dict."""
        return self._raw


# =============================================================================
# LOADING
# =============================================================================

def _read_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base dict."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env_string(value: str) -> str:
    def _replace(match: re.Match) -> str:
        token = match.group(1)
        if ":" in token:
            var, default = token.split(":", 1)
        else:
            var, default = token, ""
        return os.getenv(var, default)

    return _ENV_PATTERN.sub(_replace, value)


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return _expand_env_string(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def load_config(
    config_path: Optional[str] = None,
    base_path: Optional[Path] = DEFAULT_CONFIG_PATH,
    local_path: Optional[Path] = LOCAL_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Load config with overrides.

    Order:
      1) base_path (default config)
      2) local_path (developer overrides)
      3) config_path (explicit override)
    """
    config: Dict[str, Any] = {}
    if base_path is not None:
        config = _deep_merge(config, _read_yaml(Path(base_path)))
    if local_path is not None:
        config = _deep_merge(config, _read_yaml(Path(local_path)))
    if config_path:
        config = _deep_merge(config, _read_yaml(Path(config_path)))
    return _expand_env(config)


def _coerce(value: Any, default: Any) -> Any:
    """Cast env-expanded strings back to the type of the field default."""
    if not isinstance(value, str) or isinstance(default, str) or default is None:
        return value
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def _populate_dataclass(dc_class: type, data: Dict[str, Any]) -> Any:
    """Create a dataclass instance from a dict, ignoring unknown keys."""
    if not data:
        return dc_class()

    defaults = dc_class()
    kwargs = {}
    for key, value in data.items():
        if key not in dc_class.__dataclass_fields__:
            continue
        current = getattr(defaults, key)
        if isinstance(value, dict) and isinstance(current, dict):
            # Partial overrides of dict fields keep the remaining defaults
            kwargs[key] = _deep_merge(current, value)
        else:
            kwargs[key] = _coerce(value, current)
    return dc_class(**kwargs)


def _build_settings(config: Dict[str, Any]) -> Settings:
    """Build a Settings instance from a config dict."""
    return Settings(
        matching=_populate_dataclass(MatchingSettings, config.get("matching", {}) or {}),
        guardrails=_populate_dataclass(GuardrailSettings, config.get("guardrails", {}) or {}),
        logging=_populate_dataclass(LoggingSettings, config.get("logging", {}) or {}),
        _raw=config,
    )


def get_config(reload: bool = False, config_path: Optional[str] = None) -> Settings:
    """
    Get the configuration singleton.

    Args:
        reload: If True, reload config from files instead of using cached instance
        config_path: Optional explicit override file merged last

    Returns:
        Settings instance with typed access to configuration
    """
    global _config_instance

    if _config_instance is None or reload or config_path:
        raw_config = load_config(config_path)
        _config_instance = _build_settings(raw_config)

    return _config_instance


def reset_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _config_instance
    _config_instance = None


# =============================================================================
# LOGGING
# =============================================================================

def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure the root logger from LoggingSettings.

    Adds a rotating file handler when ``file.enabled`` is set. Safe to call
    more than once; handlers installed by a previous call are replaced.
    """
    settings = settings or LoggingSettings()
    level = getattr(logging, str(settings.level).upper(), logging.INFO)
    formatter = logging.Formatter(settings.format)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_crossvenue", False):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._crossvenue = True
    root.addHandler(console)

    file_cfg = settings.file or {}
    if file_cfg.get("enabled"):
        path = Path(file_cfg.get("path", "logs/crossvenue.log"))
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 10485760)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler._crossvenue = True
        root.addHandler(file_handler)

    root.setLevel(level)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "LOCAL_CONFIG_PATH",
    "get_config",
    "load_config",
    "reset_config",
    "setup_logging",
    "Settings",
    "MatchingSettings",
    "GuardrailSettings",
    "LoggingSettings",
]
