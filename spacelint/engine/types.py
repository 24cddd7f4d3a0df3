"""
Core types for the spacelint engine.

Dataclasses and protocols shared by the engine, the language adapter,
and the rules.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Literal, Optional, Protocol, Tuple
from abc import ABC, abstractmethod


Severity = Literal["info", "warn", "error"]
Priority = Literal["P0", "P1", "P2", "P3"]
FileRange = Tuple[int, int, int, int]  # (start_line, start_col, end_line, end_col) 1-based lines, 0-based cols
NodeRange = Tuple[int, int]  # (start_byte, end_byte) 0-based


@dataclass(frozen=True)
class Edit:
    """Replace bytes [start_byte, end_byte) of the UTF-8 text with ``replacement``."""
    start_byte: int
    end_byte: int
    replacement: str


@dataclass(frozen=True)
class Finding:
    """One reported problem, with optional fix edits and message data."""
    rule: str
    message: str
    file: str
    start_byte: int
    end_byte: int
    severity: Severity
    autofix: Optional[List[Edit]] = None
    meta: Optional[Dict[str, Any]] = None
    message_id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    loc: Optional[FileRange] = None

    def _replace(self, **kwargs):
        """Copy with some fields changed."""
        return replace(self, **kwargs)


@dataclass(frozen=True)
class RuleMeta:
    """Static description of a rule.

    ``id`` is dotted, category first (``style.eol_last``); enabled-rule and
    suppression patterns match against it. ``langs`` lists the adapter
    language ids the rule runs on. ``default_severity`` applies unless
    ``rule_severities`` in the config overrides it.
    """
    id: str
    category: str
    priority: Priority
    autofix_safety: Literal["safe", "caution", "suggest-only"]
    description: str = ""
    langs: List[str] = None
    default_severity: Severity = "warn"

    def __post_init__(self):
        if self.langs is None:
            object.__setattr__(self, 'langs', [])


@dataclass(frozen=True)
class Requires:
    """Inputs a rule reads; the runner skips parsing when no rule needs a tree."""
    raw_text: bool = False
    syntax: bool = True


@dataclass
class RuleContext:
    """Context passed to rules during execution.

    ``config`` maps rule ids to that rule's (already validated) options.
    """
    file_path: str
    text: str
    tree: Any
    adapter: Optional['LanguageAdapter']
    config: Dict[str, Any]

    def rule_options(self, rule_id: str) -> Optional[Dict[str, Any]]:
        """Options configured for ``rule_id``, or None when it has none."""
        return self.config.get(rule_id)


class Rule(Protocol):
    """Interface every rule implements.

    One instance serves all files, possibly from several threads at once, so
    rules keep no per-file state.
    """
    meta: RuleMeta
    requires: Requires

    def visit(self, ctx: RuleContext) -> Iterable[Finding]:
        """Yield the findings for the file described by ``ctx``."""
        ...


class LanguageAdapter(ABC):
    """Parsing and file discovery for one language."""

    @property
    @abstractmethod
    def language_id(self) -> str:
        """Return the language identifier (e.g., 'javascript')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions (e.g., ('.js', '.mjs'))."""
        pass

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse text and return a Tree-sitter tree, or None if no parser is available."""
        pass

    @abstractmethod
    def list_files(self, paths: List[str]) -> List[str]:
        """Source files for this language under ``paths`` (files or directories)."""
        pass

    def iter_template_spans(self, tree: Any) -> Iterable[NodeRange]:
        """
        Enumerate interpolated string literal chunks.

        Returns:
            Byte spans (start_byte, end_byte), one per literal chunk
        """
        return []
