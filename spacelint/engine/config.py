"""
Configuration management for the spacelint engine.

Settings come from a YAML file found next to or above the analyzed paths.
Unset keys keep their defaults; rule options are validated on load.

Example ``.spacelint.yml``::

    enabled_rules: ["style.*"]
    rule_severities:
      style.eol_last: error
    rule_configs:
      style.no_multiple_empty_lines:
        max: 1
        maxEOF: 0
"""

import copy
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .options import ConfigError, validate_rule_configs

logger = logging.getLogger(__name__)

SEVERITY_LEVELS = {"info": 0, "warn": 1, "error": 2}

CONFIG_NAMES = [".spacelint.yml", ".spacelint.yaml", "spacelint.yml", "spacelint.yaml"]


@dataclass
class EngineConfig:
    """Configuration for the spacelint engine."""

    # Rule selection (fnmatch patterns)
    enabled_rules: List[str]
    max_findings_per_file: int = 50
    max_total_findings: int = 1000

    # Findings below this severity are dropped
    severity_threshold: str = "info"  # "info", "warn", "error"

    # rule_id -> "info" | "warn" | "error"
    rule_severities: Dict[str, str] = None

    # rule_id -> options, validated by the rule.s options model
    rule_configs: Dict[str, Dict[str, Any]] = None

    def __post_init__(self):
        if self.rule_severities is None:
            object.__setattr__(self, 'rule_severities', {})
        if self.rule_configs is None:
            object.__setattr__(self, 'rule_configs', {})


_DEFAULTS: Dict[str, Any] = {
    "enabled_rules": ["*"],
    "max_findings_per_file": 50,
    "max_total_findings": 1000,
    "severity_threshold": "info",
    "rule_severities": {},
    "rule_configs": {
        "style.no_multiple_empty_lines": {"max": 2},
        "style.eol_last": {"mode": "always"},
    },
}


def _validate(merged: Dict[str, Any]) -> EngineConfig:
    unknown = set(merged) - set(_DEFAULTS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    for key in ("max_findings_per_file", "max_total_findings"):
        value = merged[key]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ConfigError(f"'{key}' must be a positive integer, got {value!r}")

    if merged["severity_threshold"] not in SEVERITY_LEVELS:
        raise ConfigError(f"'severity_threshold' must be one of {sorted(SEVERITY_LEVELS)}")

    for rule_id, severity in merged["rule_severities"].items():
        if severity not in SEVERITY_LEVELS:
            raise ConfigError(f"Invalid severity '{severity}' for rule '{rule_id}'")

    if not isinstance(merged["enabled_rules"], list):
        raise ConfigError("'enabled_rules' must be a list of rule id patterns")

    merged["rule_configs"] = validate_rule_configs(merged["rule_configs"])
    return EngineConfig(**merged)


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Build an EngineConfig from the YAML file at ``config_path``.

    A missing path or file yields the defaults. A file that cannot be read
    or parsed is logged and also yields the defaults.

    Raises:
        ConfigError: the file parsed but holds invalid values
    """
    merged_config = copy.deepcopy(_DEFAULTS)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load config from %s: %s; using default configuration", config_path, e)
            file_config = {}

        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path}: top level must be a mapping")

        # Deep merge the two mapping sections, replace everything else
        for key, value in file_config.items():
            if key in ("rule_severities", "rule_configs"):
                if not isinstance(value, dict):
                    raise ConfigError(f"'{key}' must be a mapping")
                merged_config[key].update(value)
            else:
                merged_config[key] = value

        logger.info("Loaded configuration from %s", config_path)

    return _validate(merged_config)


def get_default_config() -> EngineConfig:
    """The configuration used when no file is found."""
    return load_config(None)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Return the nearest config file at or above ``start_path``.

    Within one directory the names in ``CONFIG_NAMES`` are tried in order.
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            break
        current_path = parent_path

    return None


def get_rule_severity(rule_id: str, config: EngineConfig, default_severity: str = "warn") -> str:
    """Severity for ``rule_id``: the configured override, else ``default_severity``."""
    return config.rule_severities.get(rule_id, default_severity)


def meets_threshold(severity: str, config: EngineConfig) -> bool:
    """True if ``severity`` is at or above the configured threshold."""
    return SEVERITY_LEVELS.get(severity, 0) >= SEVERITY_LEVELS[config.severity_threshold]
