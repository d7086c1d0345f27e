#!/usr/bin/env python3
"""Programmatic tracker preview example.

This demonstrates using the tracker components directly, without the
environment-driven settings:

* select issues from a repository by label
* render the tracker checklist
* optionally write it to a tracker issue

The token is read from `GITHUB_TOKEN`; everything else is passed as arguments.
"""

from __future__ import annotations

import argparse
import os
from typing import Sequence

from issue_tracker_sync.tracker.github.client import GitHubClient, RepositoryRef
from issue_tracker_sync.tracker.logging import configure_logging
from issue_tracker_sync.tracker.reconcile import reconcile_tracker, render_tracker_body
from issue_tracker_sync.tracker.selection import SelectionPolicy, select_issues


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview (or write) a tracker issue.")
    parser.add_argument("--repo", required=True, help='Source repository in the form "owner/repo"')
    parser.add_argument(
        "--labels",
        default="",
        help='Comma-separated required labels, e.g. "bug,good first issue" (optional)',
    )
    parser.add_argument("--max", type=int, default=10, help="Maximum number of issues")
    parser.add_argument(
        "--write-to",
        default=None,
        help='Write the tracker to this repository ("owner/repo") instead of printing it',
    )
    parser.add_argument("--title", default="Issue tracker", help="Tracker issue title")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    labels = tuple(label.strip() for label in args.labels.split(",") if label.strip())
    policy = SelectionPolicy(required_labels=labels, max_results=args.max)

    configure_logging("INFO", "text")

    github = GitHubClient(token=os.environ["GITHUB_TOKEN"])
    try:
        issues = select_issues(github, RepositoryRef.parse(args.repo), policy)

        if args.write_to is None:
            print(render_tracker_body(f"Issues labelled {labels}:", "", issues))
            return 0

        outcome = reconcile_tracker(
            github,
            RepositoryRef.parse(args.write_to),
            title=args.title,
            header="Tracked issues:",
            footer="",
            issues=issues,
        )
        print(f"Tracker #{outcome.issue_number} {outcome.action}")
        return 0
    finally:
        github.close()


if __name__ == "__main__":
    raise SystemExit(main())
