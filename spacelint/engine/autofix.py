"""
Autofix application.

Applies the ``Edit`` lists attached to findings. Edits are byte ranges into
the UTF-8 encoding of the original text; overlapping edits are resolved by
keeping the one that starts first.
"""

import difflib
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List

from .types import Edit, Finding

logger = logging.getLogger(__name__)


@dataclass
class FixedFile:
    """Original and fixed content of one file."""
    path: str
    original: str
    content: str
    edits_applied: int

    @property
    def changed(self) -> bool:
        return self.content != self.original


def apply_edits(content: str, edits: Iterable[Edit]) -> str:
    """
    Apply non-overlapping edits to ``content`` in a single pass.

    Edits are sorted by position; an edit starting inside a range already
    replaced is skipped. Edits outside the document are skipped too.
    """
    edits = list(edits)
    if not edits:
        return content

    data = content.encode('utf-8')
    result = []
    last_offset = 0
    for edit in sorted(edits, key=lambda e: (e.start_byte, e.end_byte)):
        if edit.start_byte < last_offset:
            logger.debug("Skipping overlapping edit %s", edit)
            continue
        if edit.start_byte > edit.end_byte or edit.end_byte > len(data):
            logger.debug("Skipping out-of-range edit %s", edit)
            continue
        result.append(data[last_offset:edit.start_byte])
        result.append(edit.replacement.encode('utf-8'))
        last_offset = edit.end_byte
    result.append(data[last_offset:])
    return b"".join(result).decode('utf-8')


def count_applicable_edits(edits: Iterable[Edit]) -> int:
    """Number of edits ``apply_edits`` keeps after dropping overlaps."""
    count = 0
    last_offset = 0
    for edit in sorted(edits, key=lambda e: (e.start_byte, e.end_byte)):
        if edit.start_byte >= last_offset and edit.start_byte <= edit.end_byte:
            count += 1
            last_offset = edit.end_byte
    return count


def apply_findings(content: str, findings: Iterable[Finding]) -> str:
    """Apply the autofix edits of every finding to ``content``."""
    all_edits: List[Edit] = []
    for finding in findings:
        if finding.autofix:
            all_edits.extend(finding.autofix)
    return apply_edits(content, all_edits)


def fix_files(findings: Iterable[Finding], text_cache: Dict[str, str]) -> List[FixedFile]:
    """
    Compute fixed content for each file that has fixable findings.

    Args:
        findings: findings from one analysis run
        text_cache: file path -> the text the findings were computed from

    Returns:
        One FixedFile per file with at least one edit, in first-seen order
    """
    by_file: Dict[str, List[Edit]] = OrderedDict()
    for finding in findings:
        if finding.autofix:
            by_file.setdefault(finding.file, []).extend(finding.autofix)

    fixed = []
    for file_path, edits in by_file.items():
        original = text_cache.get(file_path)
        if original is None:
            logger.warning("No source text cached for %s; skipping fixes", file_path)
            continue
        fixed.append(FixedFile(
            path=file_path,
            original=original,
            content=apply_edits(original, edits),
            edits_applied=count_applicable_edits(edits),
        ))
    return fixed


def unified_diff(fixed_files: Iterable[FixedFile]) -> str:
    """Generate a unified diff for all changed files."""
    diff_lines = []
    for fixed in fixed_files:
        if not fixed.changed:
            continue
        diff_lines.extend(difflib.unified_diff(
            fixed.original.splitlines(keepends=True),
            fixed.content.splitlines(keepends=True),
            fromfile=f"a/{fixed.path}",
            tofile=f"b/{fixed.path}",
        ))
    return ''.join(diff_lines)
