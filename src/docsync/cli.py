"""Command-line entrypoint for documentation refresh."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from pathlib import Path
from typing import TextIO

from docsync.config import CliOverrides, DocSyncConfig, load_effective_config
from docsync.index import ConsentPrompt, decline
from docsync.logging import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp
from docsync.runner import DocRefresh
from docsync.security import PathBlockedError
from docsync.summary import RunSummary, render_summary

EXIT_OK = 0
EXIT_USAGE = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one documentation refresh run."""
    parser = argparse.ArgumentParser(
        prog="docsync",
        description="Create or incrementally refresh project documentation.",
    )
    parser.add_argument("--repo-root", required=False, default=".")
    parser.add_argument("--docs-dir", required=False, default=None)
    parser.add_argument("--quick-reference", required=False, default=None)
    parser.add_argument("--index-path", required=False, default=None)
    consent = parser.add_mutually_exclusive_group()
    consent.add_argument(
        "--yes",
        action="store_true",
        help="Create the project index without asking when it is missing.",
    )
    consent.add_argument(
        "--no-index",
        action="store_true",
        help="Never create a missing project index.",
    )
    parser.add_argument(
        "--include-untracked",
        action="store_true",
        default=None,
        help="Treat untracked files as changed paths.",
    )
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON.")
    parser.add_argument("--audit-log", required=False, default=None)
    return parser


def interactive_consent(in_stream: TextIO, out_stream: TextIO) -> ConsentPrompt:
    """Return a yes/no prompt bound to the given streams; non-TTY input declines."""

    def ask(question: str) -> bool:
        if not in_stream.isatty():
            return False
        out_stream.write(f"{question} [y/N] ")
        out_stream.flush()
        answer = in_stream.readline().strip().lower()
        return answer in {"y", "yes"}

    return ask


def always_consent(_: str) -> bool:
    return True


def overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    return CliOverrides(
        docs_dir=args.docs_dir,
        quick_reference=args.quick_reference,
        index_path=args.index_path,
        include_untracked=args.include_untracked,
        audit_path=Path(args.audit_log) if args.audit_log is not None else None,
    )


def consent_from_args(args: argparse.Namespace) -> ConsentPrompt:
    if args.yes:
        return always_consent
    if args.no_index:
        return decline
    return interactive_consent(sys.stdin, sys.stderr)


def log_run(
    config: DocSyncConfig,
    summary: RunSummary | None,
    error_code: str | None = None,
) -> None:
    """Append one sanitized run event when an audit log is configured."""
    if config.audit_path is None:
        return
    metadata: dict[str, object] = {
        "docs_dir": config.docs.dir,
        "quick_reference": config.docs.quick_reference,
        "index_path": config.index.path,
        "include_untracked": config.changes.include_untracked,
    }
    if summary is not None:
        metadata.update(summary.audit_metadata())
    event = AuditEvent(
        timestamp=utc_timestamp(),
        run_id=f"run-{uuid.uuid4().hex[:12]}",
        command="docsync.run",
        ok=error_code is None,
        degraded=summary is not None and summary.degraded,
        error_code=error_code,
        metadata=sanitize_arguments(metadata),
    )
    JsonlAuditLogger(path=config.audit_path).append(event)


def main(argv: list[str] | None = None, out_stream: TextIO | None = None) -> int:
    """Entrypoint for the docsync command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    out = out_stream or sys.stdout
    try:
        config = load_effective_config(Path(args.repo_root), overrides_from_args(args))
    except ValueError as error:
        print(f"docsync: invalid configuration: {error}", file=sys.stderr)
        return EXIT_USAGE

    try:
        refresh = DocRefresh(config=config, consent=consent_from_args(args))
    except PathBlockedError as error:
        print(f"docsync: {error.reason} {error.hint}", file=sys.stderr)
        log_run(config, None, error_code="PATH_BLOCKED")
        return EXIT_USAGE

    summary = refresh.run()
    log_run(config, summary)
    if args.json:
        out.write(json.dumps(summary.to_dict(), sort_keys=True, indent=2))
        out.write("\n")
    else:
        out.write(render_summary(summary))
    out.flush()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
