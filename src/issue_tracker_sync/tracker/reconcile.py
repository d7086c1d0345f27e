"""Create or update the tracker issue on the target repository.

The tracker is identified by its title only. Every run looks it up again:
the first issue (any state, any author) whose title matches is overwritten,
otherwise a new one is created.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from issue_tracker_sync.tracker.github.client import GitHubClient, IssueSummary, RepositoryRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """What happened to the tracker issue during a run."""

    action: Literal["created", "updated"]
    issue_number: int
    body: str


def issue_reference(issue: IssueSummary) -> str:
    if issue.repository is not None:
        return f"{issue.repository.full_name}#{issue.number}"
    return issue.html_url


def render_tracker_body(header: str, footer: str, issues: Iterable[IssueSummary]) -> str:
    """Render the checklist body, one ``- [ ]`` line per issue in the given order."""

    lines = []
    for issue in issues:
        checkbox = "- [X]" if issue.is_closed else "- [ ]"
        lines.append(f"{checkbox} ({issue_reference(issue)}) {issue.title}\n")
    return f"{header}\n{''.join(lines)}\n{footer}"


def find_tracker_issue(issues: Iterable[IssueSummary], title: str) -> IssueSummary | None:
    """Return the first issue whose title equals ``title`` exactly."""

    for issue in issues:
        if issue.title == title:
            return issue
    return None


def reconcile_tracker(
    github: GitHubClient,
    repository: RepositoryRef,
    *,
    title: str,
    header: str,
    footer: str,
    issues: Sequence[IssueSummary],
) -> ReconcileOutcome:
    """Ensure the tracker issue exists on ``repository`` with a freshly rendered body.

    Client errors during listing or writing are not caught; nothing is rolled back.
    """

    body = render_tracker_body(header, footer, issues)

    existing = find_tracker_issue(github.list_issues(repository, state="all"), title)
    if existing is not None:
        github.update_issue(repository, issue_number=existing.number, title=title, body=body)
        logger.info(
            "Tracker issue updated",
            extra={
                "repo": repository.full_name,
                "issue_number": existing.number,
                "tracked": len(issues),
            },
        )
        return ReconcileOutcome(action="updated", issue_number=existing.number, body=body)

    created = github.create_issue(repository, title=title, body=body)
    logger.info(
        "Tracker issue created",
        extra={
            "repo": repository.full_name,
            "issue_number": created.number,
            "tracked": len(issues),
        },
    )
    return ReconcileOutcome(action="created", issue_number=created.number, body=body)
