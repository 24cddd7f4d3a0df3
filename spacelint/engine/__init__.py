"""
spacelint engine package.

Line indexing, blank line analysis, configuration, rule registry, autofix,
and the CLI runner. Syntax trees come from Tree-sitter.
"""

from .types import (
    Finding, RuleMeta, Rule, RuleContext, Edit, Requires,
    LanguageAdapter, Severity, FileRange, NodeRange
)

from .registry import Registry, get_registry, discover_rules

from .config import (
    ConfigError, EngineConfig, load_config, get_default_config, find_config_file, get_rule_severity
)

from .autofix import apply_edits

__all__ = [
    "Finding", "RuleMeta", "Rule", "RuleContext", "Edit", "Requires",
    "LanguageAdapter", "Severity", "FileRange", "NodeRange",
    "Registry", "get_registry", "discover_rules",
    "ConfigError", "EngineConfig", "load_config", "get_default_config", "find_config_file", "get_rule_severity",
    "apply_edits",
]
