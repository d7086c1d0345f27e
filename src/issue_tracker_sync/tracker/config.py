"""Configuration for a tracker sync run.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Variable names follow the GitHub Actions input convention (`INPUT_<NAME>`), so
the tool can run as an action step without any glue. `GITHUB_REPOSITORY` and
`GITHUB_API_URL` are the variables Actions already sets for every job.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, get_args

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from issue_tracker_sync.tracker.github.client import RepositoryRef, SortKey
from issue_tracker_sync.tracker.selection import SelectionPolicy

SORT_KEYS: tuple[str, ...] = get_args(SortKey)


def _split_labels(value: str) -> tuple[str, ...]:
    parts = [p.strip() for p in value.split(",")]
    return tuple(p for p in parts if p)


class TrackerSettings(BaseSettings):
    """Settings for one tracker sync run.

    Environment variables:
    - INPUT_TOKEN          (required)
    - GITHUB_REPOSITORY    (required, source repository 'owner/repo')
    - INPUT_TARGETOWNER    (required)
    - INPUT_TARGETNAME     (required)
    - INPUT_TITLE          (required)
    - INPUT_HEADER         (required)
    - INPUT_FOOTER         (optional)
    - INPUT_LABELSREQUIRE  (optional, comma-separated)
    - INPUT_LABELSEXCLUDE  (optional, comma-separated)
    - INPUT_SORT           (optional: created | updated | comments)
    - INPUT_MAX            (optional integer, 0 or empty means unlimited)
    - GITHUB_API_URL       (optional)
    - LOG_LEVEL            (optional)
    - LOG_FORMAT           (optional: json | text)

    Notes:
        Keyword arguments use the variable names (`TrackerSettings(INPUT_TITLE="...")`);
        `load_settings` accepts field names instead. Both take precedence over the
        environment.
        Instances are frozen.
    """

    token: str = Field(
        default="",
        validation_alias="INPUT_TOKEN",
        repr=False,
        description="GitHub token used for API authentication",
    )
    source_repository: str = Field(
        default="",
        validation_alias="GITHUB_REPOSITORY",
        description="Repository whose issues are collected, in the form 'owner/repo'",
    )
    target_owner: str = Field(default="", validation_alias="INPUT_TARGETOWNER")
    target_name: str = Field(default="", validation_alias="INPUT_TARGETNAME")

    title: str = Field(
        default="",
        validation_alias="INPUT_TITLE",
        description="Title of the tracker issue; also the key used to find it again",
    )
    header: str = Field(default="", validation_alias="INPUT_HEADER")
    footer: str = Field(default="", validation_alias="INPUT_FOOTER")

    labels_require: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        validation_alias="INPUT_LABELSREQUIRE",
        description="Labels an issue must carry (all of them)",
    )
    labels_exclude: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        validation_alias="INPUT_LABELSEXCLUDE",
        description="Labels that keep an issue off the tracker (any of them)",
    )
    sort: SortKey | None = Field(default=None, validation_alias="INPUT_SORT")
    max_results: int = Field(
        default=0,
        validation_alias="INPUT_MAX",
        description="Maximum number of issues on the tracker; 0 or less means unlimited",
    )

    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_API_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "text"] = Field(default="json", validation_alias="LOG_FORMAT")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @field_validator("labels_require", "labels_exclude", mode="before")
    @classmethod
    def _parse_labels(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return _split_labels(value)
        return value

    @field_validator("sort", mode="before")
    @classmethod
    def _parse_sort(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            if value not in SORT_KEYS:
                raise ValueError("`sort` must be either `created`, `updated`, or `comments`")
        return value

    @field_validator("max_results", mode="before")
    @classmethod
    def _parse_max(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return 0
            try:
                return int(value)
            except ValueError:
                raise ValueError("`max` must be an integer") from None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            if value not in logging.getLevelNamesMapping():
                raise ValueError(
                    "`LOG_LEVEL` must be one of DEBUG, INFO, WARNING, ERROR or CRITICAL"
                )
        return value

    @model_validator(mode="after")
    def _require_inputs(self) -> TrackerSettings:
        required = {
            "INPUT_TOKEN": self.token,
            "GITHUB_REPOSITORY": self.source_repository,
            "INPUT_TARGETOWNER": self.target_owner,
            "INPUT_TARGETNAME": self.target_name,
            "INPUT_TITLE": self.title,
            "INPUT_HEADER": self.header,
        }
        missing = [name for name, value in required.items() if not value.strip()]
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        RepositoryRef.parse(self.source_repository)
        return self

    @property
    def source_repo(self) -> RepositoryRef:
        """Repository the issues are collected from."""

        return RepositoryRef.parse(self.source_repository)

    @property
    def target_repo(self) -> RepositoryRef:
        """Repository that holds the tracker issue."""

        return RepositoryRef(owner=self.target_owner.strip(), name=self.target_name.strip())

    def selection_policy(self) -> SelectionPolicy:
        return SelectionPolicy(
            required_labels=self.labels_require,
            excluded_labels=frozenset(self.labels_exclude),
            sort=self.sort,
            max_results=self.max_results,
        )


def load_settings(**overrides: Any) -> TrackerSettings:
    """Load settings from the environment, applying non-None keyword overrides."""

    fields = TrackerSettings.model_fields
    values: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        field = fields.get(key)
        alias = field.validation_alias if field is not None else None
        # Only aliases are accepted at construction, as in the environment.
        values[alias if isinstance(alias, str) else key] = value
    return TrackerSettings(**values)
