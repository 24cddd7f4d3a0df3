"""
Message templates for rule findings.

Templates use ``{{name}}`` placeholders filled from a finding's data.
"""

import re
from typing import Any, Dict, Optional

_PLACEHOLDER = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")

MESSAGES: Dict[str, Dict[str, str]] = {
    "style.no_multiple_empty_lines": {
        "blankBeginningOfFile": "Too many blank lines at the beginning of file. Max of {{max}} allowed.",
        "blankEndOfFile": "Too many blank lines at the end of file. Max of {{max}} allowed.",
        "consecutiveBlank": "More than {{max}} blank {{pluralizedLines}} not allowed.",
    },
    "style.eol_last": {
        "missing": "Newline required at end of file but not found.",
        "unexpected": "Newline not allowed at end of file.",
    },
}


def interpolate(template: str, data: Optional[Dict[str, Any]] = None) -> str:
    """
    Fill ``{{name}}`` placeholders from ``data``.

    Placeholders without a matching key are left as-is.
    """
    if not data:
        return template

    def substitute(match):
        key = match.group(1)
        if key in data:
            return str(data[key])
        return match.group(0)

    return _PLACEHOLDER.sub(substitute, template)


def render_message(rule_id: str, message_id: str, data: Optional[Dict[str, Any]] = None) -> str:
    """Render the message ``message_id`` of ``rule_id``."""
    try:
        template = MESSAGES[rule_id][message_id]
    except KeyError:
        raise KeyError(f"Unknown message '{message_id}' for rule '{rule_id}'") from None
    return interpolate(template, data)
