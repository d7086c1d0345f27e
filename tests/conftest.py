"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Iterable, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from issue_tracker_sync.tracker.config import TrackerSettings, load_settings
from issue_tracker_sync.tracker.github.client import GitHubClient, IssueSummary, RepositoryRef

SETTINGS_ENV_VARS = (
    "INPUT_TOKEN",
    "GITHUB_REPOSITORY",
    "INPUT_TARGETOWNER",
    "INPUT_TARGETNAME",
    "INPUT_TITLE",
    "INPUT_HEADER",
    "INPUT_FOOTER",
    "INPUT_LABELSREQUIRE",
    "INPUT_LABELSEXCLUDE",
    "INPUT_SORT",
    "INPUT_MAX",
    "GITHUB_API_URL",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep CI variables (GITHUB_REPOSITORY, ...) and any local .env out of tests."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def settings() -> TrackerSettings:
    """Provide valid settings without touching the environment."""
    return load_settings(
        token="test-token",
        source_repository="octo-org/source-repo",
        target_owner="octo-org",
        target_name="tracker-repo",
        title="Release tracker",
        header="Open work:",
        footer="Generated automatically.",
        labels_require="release",
        labels_exclude="wontfix",
    )


@pytest.fixture
def make_issue() -> Callable[..., IssueSummary]:
    def _make(
        number: int,
        *labels: Any,
        title: str | None = None,
        state: str = "open",
        repository: RepositoryRef | None = None,
    ) -> IssueSummary:
        return IssueSummary(
            number=number,
            title=title if title is not None else f"Issue {number}",
            state=state,
            html_url=f"https://github.com/octo-org/source-repo/issues/{number}",
            labels=tuple(labels),
            repository=repository,
        )

    return _make


class PageRecorder:
    """Stands in for `GitHubClient.iter_issue_pages`, counting the pages handed out."""

    def __init__(self, pages: Iterable[Sequence[IssueSummary]]) -> None:
        self.pages = [list(p) for p in pages]
        self.fetched = 0
        self.calls: list[dict[str, Any]] = []

    def __call__(
        self, repository: RepositoryRef, **kwargs: Any
    ) -> Generator[list[IssueSummary], None, None]:
        self.calls.append({"repository": repository, **kwargs})
        return self._generate()

    def _generate(self) -> Generator[list[IssueSummary], None, None]:
        for page in self.pages:
            self.fetched += 1
            yield list(page)


@pytest.fixture
def paged_github() -> Callable[..., tuple[Mock, PageRecorder]]:
    """Build a mocked client whose issue listing is served from the given pages."""

    def _build(*pages: Sequence[IssueSummary]) -> tuple[Mock, PageRecorder]:
        github = Mock(spec=GitHubClient)
        recorder = PageRecorder(pages)
        github.iter_issue_pages.side_effect = recorder
        return github, recorder

    return _build
