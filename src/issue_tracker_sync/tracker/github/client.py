"""GitHub API client wrapper.

This wraps PyGithub and a small REST session to keep GitHub calls out of the
selection/reconciliation code and make tests easy.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Mapping
from dataclasses import dataclass
from typing import Any, Literal

import requests
from github import Auth, Github

logger = logging.getLogger(__name__)

SortKey = Literal["created", "updated", "comments"]
IssueState = Literal["open", "closed", "all"]

# GitHub returns labels as objects, older payloads and some APIs as bare names.
Label = str | Mapping[str, Any]

MAX_PER_PAGE = 100


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """A repository identified by owner and name."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> RepositoryRef:
        """Parse an ``owner/repo`` string."""

        parts = value.strip().strip("/").split("/")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValueError(f"Repository must be in the form 'owner/repo', got {value!r}")
        return cls(owner=parts[0].strip(), name=parts[1].strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True, slots=True)
class IssueSummary:
    """Minimal issue metadata fetched from GitHub.

    ``labels`` are kept as GitHub returned them; ``repository`` is only set when
    the payload carries an explicit repository object (e.g. cross-repo results).
    """

    number: int
    title: str
    state: str
    html_url: str
    labels: tuple[Label, ...] = ()
    repository: RepositoryRef | None = None

    @property
    def is_closed(self) -> bool:
        return self.state == "closed"


def _parse_repository_json(data: object) -> RepositoryRef | None:
    if not isinstance(data, dict):
        return None

    name = data.get("name")
    owner = data.get("owner")
    if isinstance(owner, dict):
        owner = owner.get("login")
    if isinstance(owner, str) and owner.strip() and isinstance(name, str) and name.strip():
        return RepositoryRef(owner=owner, name=name)

    full_name = data.get("full_name")
    if isinstance(full_name, str) and full_name.strip():
        try:
            return RepositoryRef.parse(full_name)
        except ValueError:
            return None
    return None


def parse_issue_json(data: Mapping[str, Any]) -> IssueSummary:
    """Build an :class:`IssueSummary` from a REST issue payload."""

    number = data.get("number")
    if not isinstance(number, int) or number <= 0:
        raise ValueError("Invalid issue response: missing number")

    title = data.get("title")
    if not isinstance(title, str):
        title = ""

    state = data.get("state")
    if not isinstance(state, str):
        state = ""

    html_url = data.get("html_url")
    if not isinstance(html_url, str):
        html_url = ""

    raw_labels = data.get("labels")
    labels: tuple[Label, ...] = ()
    if isinstance(raw_labels, list):
        labels = tuple(item for item in raw_labels if isinstance(item, str | dict))

    return IssueSummary(
        number=number,
        title=title,
        state=state,
        html_url=html_url,
        labels=labels,
        repository=_parse_repository_json(data.get("repository")),
    )


class GitHubClient:
    """Small wrapper around PyGithub and the REST API for the tracker operations.

    Unlike a per-repository client, every call takes the repository explicitly:
    a single run reads from the source repository and writes to the target one.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "issue-tracker-sync",
            }
        )

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)
        logger.debug("GitHub client initialised", extra={"base_url": self._rest_base_url})

    def _repo_url(self, *, repository: RepositoryRef, path: str) -> str:
        base = f"{self._rest_base_url}/repos/{repository.full_name}"
        path = path.strip("/")
        return f"{base}/{path}" if path else base

    def _issues_url(self, *, repository: RepositoryRef, issue_number: int) -> str:
        if issue_number <= 0:
            raise ValueError("issue_number must be a positive integer")
        return self._repo_url(repository=repository, path=f"issues/{issue_number}")

    def iter_issue_pages(
        self,
        repository: RepositoryRef,
        *,
        sort: SortKey | None = None,
        state: IssueState | None = None,
        per_page: int = MAX_PER_PAGE,
    ) -> Generator[list[IssueSummary], None, None]:
        """Yield issues page by page, following the ``Link: rel="next"`` header.

        Pages are only requested when the consumer asks for them, so closing the
        generator (or breaking out of the loop) stops any further fetching.

        Notes:
            The issues endpoint also returns pull requests; they are yielded as-is.
        """

        if not 1 <= per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}")

        params: dict[str, str | int] = {"per_page": per_page}
        if sort is not None:
            params["sort"] = sort
        if state is not None:
            params["state"] = state

        url: str | None = self._repo_url(repository=repository, path="issues")
        page = 0
        while url is not None:
            resp = self._session.get(url, params=params, timeout=30)
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, list):
                # A partial listing would let the tracker lookup miss an existing issue.
                raise ValueError(
                    f"Unexpected issue list response for {repository.full_name} "
                    f"(page {page + 1}): expected a JSON array"
                )

            page += 1
            issues = [parse_issue_json(item) for item in payload if isinstance(item, dict)]
            logger.debug(
                "Fetched issue page",
                extra={"repo": repository.full_name, "page": page, "count": len(issues)},
            )
            yield issues

            next_link = resp.links.get("next") if resp.links else None
            url = next_link.get("url") if next_link else None
            # The next link already carries the full query string.
            params = {}

    def list_issues(
        self,
        repository: RepositoryRef,
        *,
        state: IssueState = "all",
    ) -> list[IssueSummary]:
        """Fetch every issue of a repository (all pages)."""

        issues: list[IssueSummary] = []
        for page in self.iter_issue_pages(repository, state=state):
            issues.extend(page)
        logger.debug(
            "Listed issues",
            extra={"repo": repository.full_name, "state": state, "count": len(issues)},
        )
        return issues

    def create_issue(self, repository: RepositoryRef, *, title: str, body: str) -> IssueSummary:
        if not title.strip():
            raise ValueError("Issue title is required")

        repo = self._github.get_repo(repository.full_name, lazy=True)
        issue = repo.create_issue(title=title, body=body)

        logger.info(
            "Issue created",
            extra={"repo": repository.full_name, "issue_number": issue.number},
        )
        return IssueSummary(
            number=issue.number,
            title=issue.title,
            state=getattr(issue, "state", "open"),
            html_url=getattr(issue, "html_url", ""),
        )

    def update_issue(
        self,
        repository: RepositoryRef,
        *,
        issue_number: int,
        title: str,
        body: str,
    ) -> IssueSummary:
        """Overwrite the title and body of an existing issue; other fields are untouched."""

        if not title.strip():
            raise ValueError("Issue title is required")

        url = self._issues_url(repository=repository, issue_number=issue_number)
        resp = self._session.patch(url, json={"title": title, "body": body}, timeout=30)
        resp.raise_for_status()

        logger.info(
            "Issue updated",
            extra={"repo": repository.full_name, "issue_number": issue_number},
        )
        return parse_issue_json(resp.json())

    def close(self) -> None:
        self._session.close()
        self._github.close()
