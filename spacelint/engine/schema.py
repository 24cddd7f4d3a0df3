"""
Protocol-v1 output: conversion of findings to JSON and schema checks.

Ranges use 1-based lines and 0-based columns counted in characters.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema

from .. import __version__
from .lines import LineIndex

PROTOCOL_VERSION = "1"
ENGINE_VERSION = __version__

_RANGE_SCHEMA = {
    "type": "object",
    "properties": {
        "startLine": {"type": "integer", "minimum": 1},
        "startCol": {"type": "integer", "minimum": 0},
        "endLine": {"type": "integer", "minimum": 1},
        "endCol": {"type": "integer", "minimum": 0}
    },
    "required": ["startLine", "startCol", "endLine", "endCol"],
    "additionalProperties": False
}

# One serialized finding
FINDING_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "rule_id": {
            "type": "string",
            "description": "Dotted id of the reporting rule"
        },
        "message": {
            "type": "string",
            "description": "Rendered message"
        },
        "message_id": {
            "type": "string",
            "description": "Stable identifier of the message template"
        },
        "data": {
            "type": "object",
            "description": "Values interpolated into the message template"
        },
        "file_path": {
            "type": "string",
            "description": "Resolved path in the platform's native form"
        },
        "uri": {
            "type": "string",
            "description": "File URI of the analyzed document"
        },
        "start_byte": {
            "type": "integer",
            "minimum": 0,
            "description": "UTF-8 offset where the reported span starts"
        },
        "end_byte": {
            "type": "integer",
            "minimum": 0,
            "description": "UTF-8 offset just past the reported span"
        },
        "range": dict(_RANGE_SCHEMA, description="Line/column range (1-based lines, 0-based columns)"),
        "severity": {
            "type": "string",
            "enum": ["info", "warn", "error"],
            "description": "Severity after configured overrides"
        },
        "autofix": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "file_path": {"type": "string"},
                    "start_byte": {"type": "integer", "minimum": 0},
                    "end_byte": {"type": "integer", "minimum": 0},
                    "replacement": {"type": "string"},
                    "range": _RANGE_SCHEMA
                },
                "required": ["file_path", "start_byte", "end_byte", "replacement", "range"],
                "additionalProperties": False
            },
            "description": "Edits that fix the problem, applied together"
        },
        "meta": {
            "type": "object",
            "description": "Rule-specific extra fields"
        }
    },
    "required": ["rule_id", "message", "file_path", "uri", "start_byte", "end_byte", "range", "severity"],
    "additionalProperties": False
}

# The whole document printed by --format json
RUNNER_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "spacelint.protocol": {
            "type": "string",
            "description": "Output format version"
        },
        "engine_version": {
            "type": "string",
            "description": "spacelint package version"
        },
        "files_scanned": {
            "type": "integer",
            "minimum": 0,
            "description": "Files analyzed"
        },
        "rules_run": {
            "type": "integer",
            "minimum": 0,
            "description": "Distinct rules run"
        },
        "findings": {
            "type": "array",
            "items": FINDING_JSON_SCHEMA,
            "description": "Findings in file order"
        },
        "metrics": {
            "type": "object",
            "properties": {
                "parse_ms": {"type": "number", "minimum": 0},
                "rules_ms": {"type": "number", "minimum": 0},
                "total_ms": {"type": "number", "minimum": 0}
            },
            "required": ["parse_ms", "rules_ms", "total_ms"],
            "additionalProperties": False,
            "description": "Timings in milliseconds"
        }
    },
    "required": ["spacelint.protocol", "engine_version", "files_scanned", "rules_run", "findings", "metrics"],
    "additionalProperties": False
}


def normalize_path_for_protocol(file_path: str) -> Tuple[str, str]:
    """Resolve ``file_path`` and return (native absolute path, file URI)."""
    path = Path(file_path).resolve()
    return str(path), path.as_uri()


def create_range_from_bytes(text: str, start_byte: int, end_byte: int) -> Dict[str, int]:
    """Range object for the UTF-8 byte span [start_byte, end_byte) of ``text``."""
    index = LineIndex(text)
    start_line, start_col = index.byte_to_linecol(start_byte)
    end_line, end_col = index.byte_to_linecol(end_byte)

    return {
        "startLine": start_line,
        "startCol": start_col,
        "endLine": end_line,
        "endCol": end_col
    }


def _range_from_loc(loc) -> Dict[str, int]:
    start_line, start_col, end_line, end_col = loc
    return {"startLine": start_line, "startCol": start_col, "endLine": end_line, "endCol": end_col}


def validate_findings(findings: List[Dict[str, Any]]) -> List[str]:
    """Schema errors for each serialized finding, prefixed with its index."""
    errors = []
    for i, finding in enumerate(findings):
        try:
            jsonschema.validate(finding, FINDING_JSON_SCHEMA)
        except jsonschema.ValidationError as e:
            errors.append(f"Finding {i}: {e.message}")
    return errors


def validate_runner_output(output: Dict[str, Any]) -> List[str]:
    """Every schema violation in a full runner output; empty when it conforms."""
    validator = jsonschema.Draft7Validator(RUNNER_OUTPUT_SCHEMA)
    return [
        f"Output validation: {'/'.join(str(p) for p in error.absolute_path) or '<root>'}: {error.message}"
        for error in validator.iter_errors(output)
    ]


def findings_to_json(findings: List[Any], text_cache: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
    """
    Serialize findings for the JSON output.

    The finding's own ``loc`` is used for ``range`` when the rule supplied
    one; otherwise the range is derived from the byte offsets.

    ``text_cache`` maps resolved paths to the analyzed text.
    """
    if text_cache is None:
        text_cache = {}

    result = []
    for finding in findings:
        abs_path, uri = normalize_path_for_protocol(finding.file)
        text = text_cache.get(abs_path, "")

        if finding.loc:
            range_obj = _range_from_loc(finding.loc)
        else:
            range_obj = create_range_from_bytes(text, finding.start_byte, finding.end_byte)

        finding_dict = {
            "rule_id": finding.rule,
            "message": finding.message,
            "file_path": abs_path,
            "uri": uri,
            "start_byte": finding.start_byte,
            "end_byte": finding.end_byte,
            "range": range_obj,
            "severity": finding.severity
        }

        if finding.message_id:
            finding_dict["message_id"] = finding.message_id
        if finding.data:
            finding_dict["data"] = dict(finding.data)

        if finding.autofix:
            finding_dict["autofix"] = [
                {
                    "file_path": abs_path,
                    "start_byte": edit.start_byte,
                    "end_byte": edit.end_byte,
                    "replacement": edit.replacement,
                    "range": create_range_from_bytes(text, edit.start_byte, edit.end_byte)
                }
                for edit in finding.autofix
            ]

        if finding.meta:
            finding_dict["meta"] = finding.meta

        result.append(finding_dict)

    return result
