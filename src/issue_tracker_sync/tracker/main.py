"""CLI entrypoint for a tracker sync run.

One invocation: load settings, select matching issues from the source
repository, then create or update the tracker issue on the target repository.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from issue_tracker_sync import __version__
from issue_tracker_sync.tracker.config import SORT_KEYS, TrackerSettings, load_settings
from issue_tracker_sync.tracker.github.client import GitHubClient
from issue_tracker_sync.tracker.logging import configure_logging
from issue_tracker_sync.tracker.reconcile import reconcile_tracker, render_tracker_body
from issue_tracker_sync.tracker.selection import select_issues

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issue-tracker-sync",
        description=(
            "Collect labelled issues from a repository into a single checklist "
            "issue. Every option falls back to its environment variable."
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"issue-tracker-sync {__version__}"
    )
    parser.add_argument(
        "--source-repo",
        dest="source_repository",
        default=None,
        help="Repository to collect issues from, 'owner/repo' (GITHUB_REPOSITORY)",
    )
    parser.add_argument(
        "--target-owner", default=None, help="Owner of the tracker repository (INPUT_TARGETOWNER)"
    )
    parser.add_argument(
        "--target-name", default=None, help="Name of the tracker repository (INPUT_TARGETNAME)"
    )
    parser.add_argument("--title", default=None, help="Tracker issue title (INPUT_TITLE)")
    parser.add_argument("--header", default=None, help="Text above the checklist (INPUT_HEADER)")
    parser.add_argument("--footer", default=None, help="Text below the checklist (INPUT_FOOTER)")
    parser.add_argument(
        "--labels-require",
        default=None,
        help="Comma-separated labels an issue must all carry (INPUT_LABELSREQUIRE)",
    )
    parser.add_argument(
        "--labels-exclude",
        default=None,
        help="Comma-separated labels that exclude an issue (INPUT_LABELSEXCLUDE)",
    )
    parser.add_argument(
        "--sort",
        default=None,
        help=f"Listing order of the source issues: {' | '.join(SORT_KEYS)} (INPUT_SORT)",
    )
    parser.add_argument(
        "--max",
        dest="max_results",
        default=None,
        help="Maximum number of tracked issues; 0 means unlimited (INPUT_MAX)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the tracker body instead of writing it to the target repository",
    )
    return parser


def _settings_from_args(args: argparse.Namespace) -> TrackerSettings:
    return load_settings(
        source_repository=args.source_repository,
        target_owner=args.target_owner,
        target_name=args.target_name,
        title=args.title,
        header=args.header,
        footer=args.footer,
        labels_require=args.labels_require,
        labels_exclude=args.labels_exclude,
        sort=args.sort,
        max_results=args.max_results,
    )


def run(settings: TrackerSettings, github: GitHubClient, *, dry_run: bool = False) -> str:
    """Run selection and reconciliation; return the rendered tracker body."""

    source = settings.source_repo
    target = settings.target_repo

    logger.info("Finding matching issues", extra={"repo": source.full_name})
    issues = select_issues(github, source, settings.selection_policy())
    logger.info("Found matching issues", extra={"count": len(issues)})

    if dry_run:
        return render_tracker_body(settings.header, settings.footer, issues)

    outcome = reconcile_tracker(
        github,
        target,
        title=settings.title,
        header=settings.header,
        footer=settings.footer,
        issues=issues,
    )
    logger.info(
        "Tracker issue reconciled",
        extra={
            "repo": target.full_name,
            "action": outcome.action,
            "issue_number": outcome.issue_number,
        },
    )
    return outcome.body


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your inputs or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(settings.log_level, settings.log_format)

    try:
        github = GitHubClient(token=settings.token, base_url=settings.github_base_url)
        try:
            body = run(settings, github, dry_run=args.dry_run)
        finally:
            github.close()
    except Exception:
        logger.exception("Tracker sync failed")
        return EXIT_FAILURE

    if args.dry_run:
        print(body)
    else:
        print(
            f"Tracker issue '{settings.title}' in {settings.target_repo} created/updated"
        )
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
