"""Select the source-repository issues that belong on the tracker.

An issue matches when it carries every required label (counted with
multiplicity) and none of the excluded ones. Pages are pulled lazily so the
listing stops as soon as enough matches were found.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from contextlib import closing
from dataclasses import dataclass

from issue_tracker_sync.tracker.github.client import (
    MAX_PER_PAGE,
    GitHubClient,
    IssueSummary,
    Label,
    RepositoryRef,
    SortKey,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SelectionPolicy:
    """Label/sort/limit policy applied to the source repository.

    ``max_results <= 0`` means unlimited.
    """

    required_labels: tuple[str, ...] = ()
    excluded_labels: frozenset[str] = frozenset()
    sort: SortKey | None = None
    max_results: int = 0

    @property
    def is_limited(self) -> bool:
        return self.max_results > 0


def label_name(label: Label) -> str | None:
    """Return the label text, or None when a structured label has no name."""

    if isinstance(label, str):
        return label
    if isinstance(label, Mapping):
        name = label.get("name")
        if isinstance(name, str):
            return name
    return None


def issue_matches(
    labels: Iterable[Label],
    required_labels: Sequence[str],
    excluded_labels: frozenset[str] | set[str],
) -> bool:
    # Each required entry is consumed once, so duplicates need duplicate labels.
    remaining = list(required_labels)
    for label in labels:
        name = label_name(label)
        if name is None:
            continue
        if name in excluded_labels:
            return False
        if name in remaining:
            remaining.remove(name)
    return not remaining


def select_issues(
    github: GitHubClient,
    repository: RepositoryRef,
    policy: SelectionPolicy,
) -> list[IssueSummary]:
    """Return matching issues in listing order, capped at ``policy.max_results``.

    The page in flight is always evaluated to the end; the cap only prevents the
    next page from being requested. Errors raised by the client propagate.
    """

    selected: list[IssueSummary] = []
    matched = 0
    pages_read = 0

    pages = github.iter_issue_pages(repository, sort=policy.sort, per_page=MAX_PER_PAGE)
    with closing(pages):
        for page in pages:
            pages_read += 1
            for issue in page:
                if not issue_matches(issue.labels, policy.required_labels, policy.excluded_labels):
                    continue
                selected.append(issue)
                matched += 1

            if policy.is_limited and matched >= policy.max_results:
                logger.debug(
                    "Match limit reached; no more pages will be fetched",
                    extra={"repo": repository.full_name, "pages": pages_read, "matched": matched},
                )
                break

    if policy.is_limited and len(selected) > policy.max_results:
        del selected[policy.max_results :]

    logger.info(
        "Selected issues",
        extra={
            "repo": repository.full_name,
            "pages": pages_read,
            "selected": len(selected),
        },
    )
    return selected
