"""
CLI runner for the spacelint engine.

Files are read with their line endings untouched, every enabled rule runs on
each one, and the findings are printed as protocol-v1 JSON or as text.
"""

import argparse
import concurrent.futures
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .autofix import fix_files, unified_diff
from .config import ConfigError, EngineConfig, find_config_file, load_config, meets_threshold
from .javascript_adapter import JavaScriptAdapter
from .lines import LineIndex
from .registry import discover_rules, get_adapter, get_all_adapters, get_enabled_rules, get_rule_ids, register_adapter
from .schema import ENGINE_VERSION, PROTOCOL_VERSION, findings_to_json, validate_runner_output
from .suppressions import filter_suppressed_findings
from .types import Finding, LanguageAdapter, RuleContext

logger = logging.getLogger(__name__)

DEFAULT_RULE_PACKAGES = ["spacelint.rules"]

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2


def setup_adapters() -> None:
    adapter = JavaScriptAdapter()
    register_adapter(adapter.language_id, adapter)


def collect_files(paths: List[str], language: str) -> List[str]:
    """Collect files to analyze for ``language``, as resolved absolute paths."""
    adapter = get_adapter(language)
    if not adapter:
        logger.error("No adapter found for language '%s'", language)
        return []

    return sorted({str(Path(f).resolve()) for f in adapter.list_files(paths)})


def analyze_source(text: str, file_path: str, adapter: LanguageAdapter, rules: List,
                   config: EngineConfig) -> Tuple[List[Finding], float]:
    """
    Run ``rules`` over one document held in memory.

    Returns:
        (findings, parse time in milliseconds)
    """
    parse_time = 0.0
    tree = None
    if any(getattr(rule.requires, 'syntax', False) for rule in rules):
        parse_start = time.time()
        tree = adapter.parse(text)
        parse_time = (time.time() - parse_start) * 1000

    context = RuleContext(
        file_path=file_path,
        text=text,
        tree=tree,
        adapter=adapter,
        config=config.rule_configs,
    )

    findings: List[Finding] = []
    for rule in rules:
        try:
            rule_findings = list(rule.visit(context))
        except Exception as e:
            logger.warning("Rule '%s' failed on %s: %s", rule.meta.id, file_path, e)
            continue

        for finding in rule_findings:
            if finding.rule in config.rule_severities:
                finding = finding._replace(severity=config.rule_severities[finding.rule])
            if meets_threshold(finding.severity, config):
                findings.append(finding)

        # Per-file cap
        if len(findings) >= config.max_findings_per_file:
            findings = findings[:config.max_findings_per_file]
            break

    return filter_suppressed_findings(findings, text), parse_time


def analyze_file(file_path: str, language: str, rules: List, config: EngineConfig,
                 content: Optional[str] = None) -> Tuple[List[Finding], float, Optional[str]]:
    """
    Read ``file_path`` (unless ``content`` is given) and analyze it.

    Returns:
        (findings, parse time in milliseconds, the analyzed text or None if unreadable)
    """
    adapter = get_adapter(language)
    if not adapter:
        return [], 0.0, None

    if content is None:
        try:
            # newline='' keeps "\r\n" and lone "\r" intact for byte offsets
            with open(file_path, 'r', encoding='utf-8', newline='') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", file_path, e)
            return [], 0.0, None

    findings, parse_time = analyze_source(content, file_path, adapter, rules, config)
    return findings, parse_time, content


def run_analysis_parallel(files: List[str], language: str, rules: List, config: EngineConfig,
                          jobs: int) -> Tuple[List[Finding], float, Dict[str, str]]:
    """
    Analyze ``files`` one by one, or on a thread pool when ``jobs`` > 1.

    Findings come back in the order of ``files``.

    Returns:
        (findings, total parse time in milliseconds, file path -> analyzed text)
    """
    if jobs <= 1:
        results = [analyze_file(file_path, language, rules, config) for file_path in files]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = [executor.submit(analyze_file, file_path, language, rules, config) for file_path in files]
            results = []
            for file_path, future in zip(files, futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.warning("Failed to process %s: %s", file_path, e)
                    results.append(([], 0.0, None))

    all_findings: List[Finding] = []
    total_parse_time = 0.0
    text_cache: Dict[str, str] = {}
    for file_path, (findings, parse_time, content) in zip(files, results):
        total_parse_time += parse_time
        if content is not None:
            text_cache[file_path] = content
        all_findings.extend(findings)

    # Cap across all files
    if len(all_findings) > config.max_total_findings:
        all_findings = all_findings[:config.max_total_findings]

    return all_findings, total_parse_time, text_cache


def _location(finding: Finding, text_cache: Dict[str, str]) -> str:
    if finding.loc:
        return f"{finding.loc[0]}:{finding.loc[1]}"
    text = text_cache.get(finding.file)
    if text is None:
        return f"byte {finding.start_byte}"
    line, col = LineIndex(text).byte_to_linecol(finding.start_byte)
    return f"{line}:{col}"


def format_output(findings: List[Finding], files_count: int, rules_count: int, metrics: Dict[str, float],
                  format_type: str, text_cache: Optional[Dict[str, str]] = None) -> str:
    """Render findings as protocol JSON (``json``) or grouped text (``pretty``)."""
    text_cache = text_cache or {}

    if format_type == "json":
        output = {
            "spacelint.protocol": PROTOCOL_VERSION,
            "engine_version": ENGINE_VERSION,
            "files_scanned": files_count,
            "rules_run": rules_count,
            "findings": findings_to_json(findings, text_cache),
            "metrics": metrics
        }
        return json.dumps(output, indent=2)

    elif format_type == "pretty":
        lines = []
        lines.append(f"Scanned {files_count} files with {rules_count} rules")
        lines.append(f"Found {len(findings)} issues")
        lines.append("")

        by_file: Dict[str, List[Finding]] = {}
        for finding in findings:
            by_file.setdefault(finding.file, []).append(finding)

        for file_path, file_findings in sorted(by_file.items()):
            lines.append(file_path)
            for finding in file_findings:
                fixable = " [fixable]" if finding.autofix else ""
                lines.append(
                    f"  {finding.severity:<5} {_location(finding, text_cache)}: "
                    f"{finding.message} ({finding.rule}){fixable}"
                )
            lines.append("")

        lines.append("Metrics:")
        lines.append(f"  Parse time: {metrics['parse_ms']:.1f}ms")
        lines.append(f"  Rules time: {metrics['rules_ms']:.1f}ms")
        lines.append(f"  Total time: {metrics['total_ms']:.1f}ms")

        return "\n".join(lines)

    else:
        raise ValueError(f"Unknown format: {format_type}")


def write_fixes(findings: List[Finding], text_cache: Dict[str, str]) -> List[str]:
    """Write autofixed content back to disk. Returns the paths that changed."""
    fixed_files = fix_files(findings, text_cache)
    logger.debug("Applying fixes:\n%s", unified_diff(fixed_files))

    written = []
    for fixed in fixed_files:
        if not fixed.changed:
            continue
        with open(fixed.path, 'w', encoding='utf-8', newline='') as f:
            f.write(fixed.content)
        logger.info("Fixed %d issue(s) in %s", fixed.edits_applied, fixed.path)
        written.append(fixed.path)
    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spacelint",
        description="Blank line and end-of-file layout checks for JavaScript",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spacelint --paths src/ --format pretty
  spacelint --paths app.js --rules "style.no_multiple_empty_lines" --fix
  spacelint --paths frontend/ --jobs 4 --validate
        """
    )

    parser.add_argument(
        "--paths",
        nargs="+",
        required=True,
        help="Files or directories to lint"
    )

    parser.add_argument(
        "--rules",
        help="Rule patterns to run: '*' for all, or comma-separated IDs/patterns "
             "(default: enabled_rules from the configuration)"
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file (default: nearest .spacelint.yml)"
    )

    parser.add_argument(
        "--format",
        choices=["json", "pretty"],
        default="json",
        help="Output format: json (protocol v1) or pretty (human-readable)"
    )

    parser.add_argument(
        "--jobs",
        type=int,
        default=0,
        help="Worker threads: 1 runs files one by one, 0 picks a count from the CPU count"
    )

    parser.add_argument(
        "--fix",
        action="store_true",
        help="Apply autofixes in place and report what remains"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check the JSON output against the protocol schema; exit 2 if it does not conform"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug messages to stderr"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the ``spacelint`` command and return its exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    total_start = time.time()

    setup_adapters()

    config_path = args.config or find_config_file(args.paths[0])
    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_USAGE
    logger.info("Using config: %s", config_path or "defaults")

    rules_discovered = discover_rules(DEFAULT_RULE_PACKAGES)
    logger.info("Discovered %d rules: %s", rules_discovered, get_rule_ids())

    if args.rules:
        rule_patterns = [pattern.strip() for pattern in args.rules.split(",") if pattern.strip()]
    else:
        rule_patterns = config.enabled_rules

    jobs_requested = args.jobs
    all_findings: List[Finding] = []
    text_cache: Dict[str, str] = {}
    files_count = 0
    rule_ids = set()
    parse_time_ms = 0.0

    rules_start = time.time()
    for language in get_all_adapters():
        rules = get_enabled_rules(rule_patterns, language)
        files = collect_files(args.paths, language)
        if not files:
            continue
        logger.info("Running %d rules on %d %s files", len(rules), len(files), language)

        jobs = jobs_requested or min(4, len(files), os.cpu_count() or 1)
        findings, parse_ms, texts = run_analysis_parallel(files, language, rules, config, jobs)

        if args.fix and findings:
            changed = write_fixes(findings, texts)
            if changed:
                # Report what is left after fixing
                refreshed, _, new_texts = run_analysis_parallel(changed, language, rules, config, jobs)
                order = {path: i for i, path in enumerate(files)}
                findings = sorted(
                    [f for f in findings if f.file not in changed] + refreshed,
                    key=lambda f: order.get(f.file, len(order)),
                )
                texts.update(new_texts)

        files_count += len(files)
        rule_ids.update(rule.meta.id for rule in rules)
        parse_time_ms += parse_ms
        all_findings.extend(findings)
        text_cache.update(texts)

    if files_count == 0:
        logger.error("No files found to analyze")
        return EXIT_USAGE

    all_findings = all_findings[:config.max_total_findings]
    rules_time_ms = (time.time() - rules_start) * 1000
    metrics = {
        "parse_ms": parse_time_ms,
        "rules_ms": rules_time_ms,
        "total_ms": (time.time() - total_start) * 1000
    }

    output = format_output(all_findings, files_count, len(rule_ids), metrics, args.format, text_cache)

    if args.validate and args.format == "json":
        errors = validate_runner_output(json.loads(output))
        if errors:
            logger.error("JSON validation errors:\n  %s", "\n  ".join(errors))
            return EXIT_USAGE

    print(output)
    return EXIT_FINDINGS if all_findings else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
