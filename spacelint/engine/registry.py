"""
Registry of rules and language adapters.

Rules are found by importing every module of a rules package and reading its
``RULES`` list. Adapters are registered by language id. The runner works
against a process-wide instance through the module-level helpers.
"""

import fnmatch
import importlib
import logging
import os
import pkgutil
from typing import Dict, Iterable, List, Optional

from .types import LanguageAdapter, Rule

logger = logging.getLogger(__name__)


class Registry:
    """Rules keyed by id and adapters keyed by language, in registration order."""

    def __init__(self):
        self._rules: Dict[str, Rule] = {}
        self._adapters: Dict[str, LanguageAdapter] = {}

    def register_rule(self, rule: Rule) -> None:
        # First registration wins; rediscovery of an imported module is a no-op
        self._rules.setdefault(rule.meta.id, rule)

    def register_adapter(self, language: str, adapter: LanguageAdapter) -> None:
        self._adapters.setdefault(language, adapter)

    def get_adapter(self, language: str) -> Optional[LanguageAdapter]:
        return self._adapters.get(language)

    def get_adapter_for_file(self, file_path: str) -> Optional[LanguageAdapter]:
        """Adapter whose extensions include the file's (case-insensitive)."""
        ext = os.path.splitext(file_path)[1].lower()
        return next((a for a in self._adapters.values() if ext in a.file_extensions), None)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def get_all_rules(self) -> List[Rule]:
        return list(self._rules.values())

    def get_rule_ids(self) -> List[str]:
        return list(self._rules)

    def get_all_adapters(self) -> Dict[str, LanguageAdapter]:
        return dict(self._adapters)

    def get_rules_for_language(self, language: str) -> List[Rule]:
        return [rule for rule in self._rules.values() if language in rule.meta.langs]

    def get_enabled_rules(self, enabled_patterns: Iterable[str], language: str) -> List[Rule]:
        """
        Rules for ``language`` whose id matches at least one fnmatch pattern.

        Registration order is kept; a rule matched by several patterns is
        returned once.
        """
        patterns = list(enabled_patterns)
        return [
            rule for rule in self.get_rules_for_language(language)
            if any(fnmatch.fnmatch(rule.meta.id, pattern) for pattern in patterns)
        ]

    def discover_rules(self, entry_packages: Iterable[str]) -> int:
        """
        Import every module below each package and register its ``RULES``.

        Modules that fail to import are logged and skipped.

        Returns:
            Number of rules newly registered
        """
        entry_packages = list(entry_packages)
        before = len(self._rules)

        for package_name in entry_packages:
            try:
                package = importlib.import_module(package_name)
            except ImportError as e:
                logger.warning("Could not import package %s: %s", package_name, e)
                continue

            modules = [package]
            for _, modname, _ in pkgutil.walk_packages(getattr(package, '__path__', []), package_name + "."):
                try:
                    modules.append(importlib.import_module(modname))
                except Exception as e:
                    logger.warning("Failed to import %s: %s", modname, e)

            for module in modules:
                self._register_module_rules(module)

        discovered = len(self._rules) - before
        logger.debug("Discovered %d rules from %s", discovered, entry_packages)
        return discovered

    def _register_module_rules(self, module) -> None:
        rules = getattr(module, 'RULES', None)
        if not isinstance(rules, list):
            return

        for entry in rules:
            rule = entry() if isinstance(entry, type) else entry
            if not (hasattr(rule, 'meta') and hasattr(rule, 'visit')):
                logger.warning("Ignoring non-rule entry %r in %s.RULES", entry, module.__name__)
                continue
            self.register_rule(rule)

    def clear(self) -> None:
        """Forget all rules and adapters."""
        self._rules.clear()
        self._adapters.clear()


_global_registry = Registry()


def get_registry() -> Registry:
    """The process-wide registry used by the runner."""
    return _global_registry


def register_adapter(language: str, adapter: LanguageAdapter) -> None:
    _global_registry.register_adapter(language, adapter)


def get_adapter(language: str) -> Optional[LanguageAdapter]:
    return _global_registry.get_adapter(language)


def get_all_adapters() -> Dict[str, LanguageAdapter]:
    return _global_registry.get_all_adapters()


def get_rule_ids() -> List[str]:
    return _global_registry.get_rule_ids()


def get_enabled_rules(enabled_patterns: Iterable[str], language: str) -> List[Rule]:
    return _global_registry.get_enabled_rules(enabled_patterns, language)


def discover_rules(entry_packages: Iterable[str]) -> int:
    return _global_registry.discover_rules(entry_packages)
