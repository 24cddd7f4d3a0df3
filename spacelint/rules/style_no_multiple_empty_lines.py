"""
Rule to detect and fix runs of blank lines longer than allowed.

Limits are configured separately for the start of the file (``maxBOF``), the
end of the file (``maxEOF``) and everywhere else (``max``). Blank lines inside
template literals are part of the string value and are never counted.
"""

import logging
from typing import Iterator, List, Tuple

from ..engine.blank_runs import analyze, build_diagnostics
from ..engine.lines import LineIndex
from ..engine.messages import render_message
from ..engine.options import parse_rule_options
from ..engine.protected import collect
from ..engine.types import Edit, Finding, Requires, RuleContext, RuleMeta

logger = logging.getLogger(__name__)


class StyleNoMultipleEmptyLinesRule:
    """Rule to trim runs of blank lines down to the configured maximum."""

    meta = RuleMeta(
        id="style.no_multiple_empty_lines",
        category="style",
        priority="P2",
        autofix_safety="safe",
        description="Disallow multiple empty lines at the start, end, and middle of a file.",
        langs=["javascript"],
        default_severity="warn",
    )

    requires = Requires(raw_text=True, syntax=True)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        """Visit the file and report blank line runs above the limits."""
        language = getattr(ctx.adapter, 'language_id', 'unknown')
        if language not in self.meta.langs:
            return

        options = parse_rule_options(self.meta.id, ctx.rule_options(self.meta.id))
        policy = options.to_policy()

        index = LineIndex(ctx.text)
        protected = collect(self._template_line_spans(ctx, index))
        violations = analyze(index, protected, policy)

        for diagnostic in build_diagnostics(index, violations):
            start_line, start_col = diagnostic.start
            end_line, end_col = diagnostic.end
            patch = diagnostic.patch

            yield Finding(
                rule=self.meta.id,
                message=render_message(self.meta.id, diagnostic.message_id, diagnostic.data),
                file=ctx.file_path,
                start_byte=index.line_start(start_line),
                end_byte=index.line_start(end_line),
                severity=self.meta.default_severity,
                autofix=[Edit(
                    start_byte=patch.start_offset,
                    end_byte=patch.end_offset,
                    replacement=patch.replacement,
                )],
                message_id=diagnostic.message_id,
                data=dict(diagnostic.data),
                loc=(start_line, start_col, end_line, end_col),
            )

    def _template_line_spans(self, ctx: RuleContext, index: LineIndex) -> List[Tuple[int, int]]:
        """Map template literal chunks to (start_line, end_line) spans."""
        tree = ctx.tree
        if tree is None:
            tree = ctx.adapter.parse(ctx.text)
        if tree is None:
            logger.warning("No syntax tree for %s; template literal lines are not protected", ctx.file_path)
            return []

        return [
            (index.line_at(start_byte), index.line_at(end_byte))
            for start_byte, end_byte in ctx.adapter.iter_template_spans(tree)
        ]


rule = StyleNoMultipleEmptyLinesRule()
RULES = [rule]
