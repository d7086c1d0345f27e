"""Unit tests for settings loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from issue_tracker_sync.tracker.config import TrackerSettings, load_settings
from issue_tracker_sync.tracker.github.client import RepositoryRef
from issue_tracker_sync.tracker.selection import SelectionPolicy

REQUIRED_ENV = {
    "INPUT_TOKEN": "test-token",
    "GITHUB_REPOSITORY": "octo-org/source-repo",
    "INPUT_TARGETOWNER": "octo-org",
    "INPUT_TARGETNAME": "tracker-repo",
    "INPUT_TITLE": "Release tracker",
    "INPUT_HEADER": "Open work:",
}


@pytest.fixture
def required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)


def test_settings_load_from_action_inputs(
    required_env: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("INPUT_FOOTER", "Bye")
    monkeypatch.setenv("INPUT_LABELSREQUIRE", "release,needs-triage")
    monkeypatch.setenv("INPUT_LABELSEXCLUDE", "wontfix")
    monkeypatch.setenv("INPUT_SORT", "comments")
    monkeypatch.setenv("INPUT_MAX", "25")

    settings = TrackerSettings()

    assert settings.token == "test-token"
    assert settings.source_repo == RepositoryRef(owner="octo-org", name="source-repo")
    assert settings.target_repo == RepositoryRef(owner="octo-org", name="tracker-repo")
    assert settings.title == "Release tracker"
    assert settings.footer == "Bye"
    assert settings.labels_require == ("release", "needs-triage")
    assert settings.labels_exclude == ("wontfix",)
    assert settings.sort == "comments"
    assert settings.max_results == 25


def test_settings_defaults(required_env: None) -> None:
    settings = TrackerSettings()

    assert settings.footer == ""
    assert settings.labels_require == ()
    assert settings.labels_exclude == ()
    assert settings.sort is None
    assert settings.max_results == 0
    assert settings.github_base_url == "https://api.github.com"
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"


def test_settings_load_from_dotenv(isolated_env: Path) -> None:
    lines = [f"{name}={value}" for name, value in REQUIRED_ENV.items()]
    lines += ["INPUT_MAX=3", "LOG_LEVEL=DEBUG", ""]
    (isolated_env / ".env").write_text("\n".join(lines), encoding="utf-8")

    settings = TrackerSettings()

    assert settings.title == "Release tracker"
    assert settings.max_results == 3
    assert settings.log_level == "DEBUG"


def test_keyword_overrides_win_over_environment(required_env: None) -> None:
    settings = load_settings(title="Other tracker", max_results="7", sort=None)

    assert settings.title == "Other tracker"
    assert settings.max_results == 7
    assert settings.sort is None


def test_label_lists_are_trimmed_and_keep_duplicates(required_env: None) -> None:
    settings = load_settings(labels_require=" bug , bug,,p1 ", labels_exclude="")

    assert settings.labels_require == ("bug", "bug", "p1")
    assert settings.labels_exclude == ()


def test_invalid_sort_is_rejected(required_env: None, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_SORT", "popularity")

    with pytest.raises(ValidationError, match="`sort` must be either"):
        TrackerSettings()


def test_empty_sort_means_default_order(required_env: None, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_SORT", "")

    assert TrackerSettings().sort is None


@pytest.mark.parametrize("raw", ["ten", "1.5", "3e"])
def test_non_integer_max_is_rejected(
    required_env: None, monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("INPUT_MAX", raw)

    with pytest.raises(ValidationError, match="`max` must be an integer"):
        TrackerSettings()


@pytest.mark.parametrize(("raw", "expected"), [("", 0), ("0", 0), ("-4", -4), (" 12 ", 12)])
def test_max_parsing(
    required_env: None, monkeypatch: pytest.MonkeyPatch, raw: str, expected: int
) -> None:
    monkeypatch.setenv("INPUT_MAX", raw)

    assert TrackerSettings().max_results == expected


@pytest.mark.parametrize("missing", sorted(REQUIRED_ENV))
def test_missing_required_input_is_rejected(
    required_env: None, monkeypatch: pytest.MonkeyPatch, missing: str
) -> None:
    monkeypatch.delenv(missing)

    with pytest.raises(ValidationError, match=missing):
        TrackerSettings()


def test_malformed_source_repository_is_rejected(
    required_env: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GITHUB_REPOSITORY", "just-a-name")

    with pytest.raises(ValidationError, match="owner/repo"):
        TrackerSettings()


def test_settings_are_frozen(settings: TrackerSettings) -> None:
    with pytest.raises(ValidationError):
        settings.title = "Changed"  # type: ignore[misc]


def test_token_is_not_in_repr(settings: TrackerSettings) -> None:
    assert "test-token" not in repr(settings)


def test_selection_policy_from_settings(settings: TrackerSettings) -> None:
    policy = settings.selection_policy()

    assert policy == SelectionPolicy(
        required_labels=("release",),
        excluded_labels=frozenset({"wontfix"}),
        sort=None,
        max_results=0,
    )
    assert not policy.is_limited


@pytest.mark.parametrize(
    ("variable", "field_env"),
    [
        ("INPUT_TITLE", "TITLE"),
        ("INPUT_TOKEN", "TOKEN"),
        ("GITHUB_REPOSITORY", "SOURCE_REPOSITORY"),
    ],
)
def test_field_named_variables_do_not_satisfy_inputs(
    required_env: None, monkeypatch: pytest.MonkeyPatch, variable: str, field_env: str
) -> None:
    monkeypatch.delenv(variable)
    monkeypatch.setenv(field_env, "octo-org/from-bare-env")

    with pytest.raises(ValidationError, match=f"Missing required configuration: {variable}"):
        TrackerSettings()


def test_field_named_variables_do_not_override_inputs(
    required_env: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TITLE", "from-bare-env")
    monkeypatch.setenv("MAX_RESULTS", "9")

    settings = TrackerSettings()

    assert settings.title == "Release tracker"
    assert settings.max_results == 0


def test_load_settings_maps_field_names_to_inputs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_TOKEN", "test-token")

    settings = load_settings(
        source_repository="octo-org/source-repo",
        target_owner="octo-org",
        target_name="tracker-repo",
        title="Release tracker",
        header="H",
        max_results=None,
    )

    assert settings.title == "Release tracker"
    assert settings.source_repo == RepositoryRef(owner="octo-org", name="source-repo")
    assert settings.max_results == 0


@pytest.mark.parametrize(("raw", "expected"), [("debug", "DEBUG"), (" Warning ", "WARNING")])
def test_log_level_is_normalised(
    required_env: None, monkeypatch: pytest.MonkeyPatch, raw: str, expected: str
) -> None:
    monkeypatch.setenv("LOG_LEVEL", raw)

    assert TrackerSettings().log_level == expected


def test_unknown_log_level_is_rejected(
    required_env: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    with pytest.raises(ValidationError, match="`LOG_LEVEL` must be one of"):
        TrackerSettings()
