"""
Style Rule: newline at end of file.

Requires (``always``, ``unix``, ``windows``) or forbids (``never``) a line
terminator at the end of non-empty files.
"""

from typing import Iterator

from ..engine.lines import LineIndex, count_trailing_newlines
from ..engine.messages import render_message
from ..engine.options import parse_rule_options
from ..engine.types import Edit, Finding, Requires, RuleContext, RuleMeta


class StyleEolLastRule:
    """Rule to enforce or forbid a newline at end of file."""

    meta = RuleMeta(
        id="style.eol_last",
        category="style",
        priority="P3",
        autofix_safety="safe",
        description="Require or disallow newline at the end of files",
        langs=["javascript"],
        default_severity="info",
    )

    requires = Requires(raw_text=True, syntax=False)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        """Visit file and check the newline at EOF."""
        language = getattr(ctx.adapter, 'language_id', 'unknown')
        if language not in self.meta.langs:
            return

        text = ctx.text
        # Nothing to terminate in an empty file
        if not text:
            return

        mode = parse_rule_options(self.meta.id, ctx.rule_options(self.meta.id)).mode
        newline = "\r\n" if mode == "windows" else "\n"
        if mode in ("unix", "windows"):
            mode = "always"

        index = LineIndex(text)
        ends_with_newline = text.endswith("\n")

        if mode == "always" and not ends_with_newline:
            if index.raw_line_count > len(index):
                # Text ends with a lone "\r" or other non-LF terminator
                line_no, column = index.raw_line_count, 0
            else:
                last_line = index.line(len(index))
                line_no, column = last_line.index, len(last_line.text)
            end = index.byte_length

            yield Finding(
                rule=self.meta.id,
                message=render_message(self.meta.id, "missing"),
                file=ctx.file_path,
                start_byte=end,
                end_byte=end,
                severity=self.meta.default_severity,
                autofix=[Edit(start_byte=end, end_byte=end, replacement=newline)],
                message_id="missing",
                loc=(line_no, column, line_no, column),
            )

        elif mode == "never" and ends_with_newline:
            # The line before the (dropped) empty last line
            second_last = index.line(index.raw_line_count - 1)
            start_byte = second_last.start_offset + len(second_last.text.encode('utf-8'))

            _, trailing_start = count_trailing_newlines(text)
            fix_start = len(text[:trailing_start].encode('utf-8'))

            yield Finding(
                rule=self.meta.id,
                message=render_message(self.meta.id, "unexpected"),
                file=ctx.file_path,
                start_byte=start_byte,
                end_byte=index.byte_length,
                severity=self.meta.default_severity,
                autofix=[Edit(start_byte=fix_start, end_byte=index.byte_length, replacement="")],
                message_id="unexpected",
                loc=(second_last.index, len(second_last.text), index.raw_line_count, 0),
            )


rule = StyleEolLastRule()
RULES = [rule]
