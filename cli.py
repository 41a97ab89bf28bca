"""
CLI entry point for pointwise. Wires the pipeline: load exports -> normalize -> analyze -> report
"""

import argparse
import json
import logging
import os
import sys
import webbrowser
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, List, Optional

from estimate.config import load_preset, load_settings
from logger_config import setup_logger
from normalize.models import Issue, User
from normalize.util import ISSUE_SOURCES, SCM_SOURCES, normalize_commits, normalize_issues, normalize_pulls
from pipeline import run_analysis
from report.renderer import FORMATS, render, render_correlations_csv

logger = logging.getLogger(__name__)

FILE_FORMATS = ("html", "htm", "md", "markdown", "csv")
EXPORT_ALL_FORMATS = ("html", "md", "csv", "json")
RECORD_KEYS = ("issues", "values", "nodes", "items", "data")


def _load_json_file(path: str, description: str):
    """Load a JSON file and return the parsed object, or None after printing the failure."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print(f"Failed to read {description} {path}: {e}")
        return None


def _records(payload: Any) -> List[Any]:
    """Accept a JSON array or an object wrapping one under a common key (issues, values, nodes, ...)."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in RECORD_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


def _resolve_user(issues: List[Issue], ref: Optional[str]) -> Optional[User]:
    """Find the assignee matching `ref` by id, email or handle; an unknown ref becomes a bare User."""
    if not ref:
        return None
    for issue in issues:
        a = issue.assignee
        if a is not None and ref in (a.user_id, a.email, a.name):
            return a
    logger.warning("User %s is not assigned to any issue; using a cold-start profile", ref)
    return User(user_id=ref, display_name=ref)


def _load_settings(args, parser):
    try:
        settings = load_preset(args.preset, args.config or None) if args.preset else load_settings(args.config or None)
    except ValueError as e:
        parser.error(str(e))
    if args.lookback_days is not None:
        settings = replace(settings, lookback_days=args.lookback_days)
    return settings


def _open_file_in_browser(path: str):
    """Open a file URL in the system default web browser."""
    webbrowser.open("file://" + os.path.abspath(path))


def _default_base(args) -> str:
    return f"pointwise_report_{args.user}_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}"


def _write_report_file(path_base: str, ext: str, content: str, open_html: bool = False) -> str:
    """Write the rendered content to a file and optionally open HTML in the browser."""
    out_path = path_base if path_base.lower().endswith(f".{ext}") else f"{path_base}.{ext}"
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    # newline='' keeps csv line endings intact
    with open(out_path, 'w', encoding='utf-8', newline='') as fh:
        fh.write(content)
    print(f"Wrote report to {out_path}")
    if open_html:
        try:
            _open_file_in_browser(out_path)
        except webbrowser.Error:
            print('Failed to open browser automatically; file saved at', out_path)
    return out_path


def write_output(fmt: str, rendered: str, args):
    """Write file formats (html/md/csv) or any format given --out-file to disk; print the rest."""
    out_file = (args.out_file or "").strip()
    if fmt in FILE_FORMATS or out_file:
        ext = {"htm": "html", "markdown": "md"}.get(fmt, fmt)
        _write_report_file(out_file or _default_base(args), ext, rendered, open_html=(args.open and ext == "html"))
    else:
        print(rendered)


def export_all(result, args):
    """Write html, md, csv and json copies plus a correlations csv next to them."""
    base = (args.out_file or "").strip() or _default_base(args)
    base = os.path.splitext(base)[0] if os.path.splitext(base)[1].lstrip('.') in EXPORT_ALL_FORMATS else base
    for fmt in EXPORT_ALL_FORMATS:
        _write_report_file(base, fmt, render(result, fmt), open_html=(fmt == "html" and args.open))
    _write_report_file(f"{base}_correlations", "csv", render_correlations_csv(result))


def _load_activity(path: str, description: str, source: str, normalizer):
    if not path:
        return []
    payload = _load_json_file(path, description)
    if payload is None:
        return None
    return normalizer(_records(payload), source)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Story point estimation and activity correlation")
    parser.add_argument("--issues", type=str, required=True, help="Path to a JSON export of tracker issues")
    parser.add_argument("--user", type=str, default="", help="User id, email or handle whose history personalizes estimates")
    parser.add_argument("--commits", type=str, default="", help="Path to a JSON export of commits (optional)")
    parser.add_argument("--pulls", type=str, default="", help="Path to a JSON export of pull requests (optional)")
    parser.add_argument("--issue-source", choices=ISSUE_SOURCES, default="linear", help="Issue export format")
    parser.add_argument("--scm-source", choices=SCM_SOURCES, default="github", help="Commit/pull request export format")
    parser.add_argument("--team", type=str, default="", help="Restrict issues to a team/project id or key")
    parser.add_argument("--lookback-days", type=int, default=None, help="Activity window in days (overrides config and POINTWISE_LOOKBACK_DAYS)")
    parser.add_argument("--config", type=str, default="", help="Path to a pointwise.yaml config (defaults to POINTWISE_CONFIG or the packaged estimate/pointwise.yaml)")
    parser.add_argument("--preset", type=str, default="", help="Named preset from the config file")
    parser.add_argument("--output", type=str, choices=FORMATS, default="text", help="Output format")
    parser.add_argument("--out-file", type=str, default="", help="Output file path. If omitted for html/md/csv a default name will be used")
    parser.add_argument("--export-all", action="store_true", help="Export HTML, MD, CSV and JSON copies automatically")
    parser.add_argument("--open", action="store_true", help="Open the generated HTML report in the default browser")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.lookback_days is not None and args.lookback_days <= 0:
        parser.error("--lookback-days must be a positive number of days")
    setup_logger()

    settings = _load_settings(args, parser)

    raw_issues = _load_json_file(args.issues, 'issues file')
    if raw_issues is None:
        return 1
    issues = normalize_issues(_records(raw_issues), args.issue_source)

    commits = _load_activity(args.commits, 'commits file', args.scm_source, normalize_commits)
    pulls = _load_activity(args.pulls, 'pulls file', args.scm_source, normalize_pulls)
    if commits is None or pulls is None:
        return 1

    user = _resolve_user(issues, args.user)
    result = run_analysis(issues, commits, pulls, user=user, settings=settings, team=args.team or None)

    if args.export_all:
        export_all(result, args)
    else:
        fmt = args.output.lower()
        write_output(fmt, render(result, fmt), args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
