"""Configuration for rootcause: environment-driven settings and shared patterns."""

import re
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CLI_BINARY = "sentry-cli"

# Arguments passed to the collaborator CLI; {issue_id} and {org} are filled in.
DEFAULT_CLI_ARGS = ["issues", "view", "{issue_id}", "--org", "{org}"]

DEFAULT_FETCH_TIMEOUT_SECONDS = 60

# Ordinal gap below which two identical events count as a duplicate submission.
DEFAULT_ANOMALY_THRESHOLD = 1000

DEFAULT_BOUNDARY_CATEGORIES = ["http", "lifecycle"]

# Output of the collaborator CLI that means the issue does not exist
NOT_FOUND_PATTERN = re.compile(
    r"\b(?:not found|does not exist|no such issue)\b|\b(?:status|code|http/\S+)[\s:=]*404\b",
    re.IGNORECASE,
)

# Breadcrumb categories that can record a configuration or environment read
CONFIG_READ_CATEGORIES = ["console", "lifecycle"]

# Configuration / environment reads
CONFIG_ACCESS_PATTERN = re.compile(
    r"\b(config(?:uration)?|settings?|env(?:ironment)?(?:\s+var(?:iable)?)?|"
    r"process\.env|os\.environ|getenv|feature[ _.-]?flag|secret|required key|missing key)\b",
    re.IGNORECASE,
)

# Reads that came back empty
ABSENT_VALUE_PATTERN = re.compile(
    r"\b(undefined|null|none|nil|missing|absent|not set|empty|returned nothing)\b",
    re.IGNORECASE,
)

# State updates in front-end stores and back-end models
STATE_UPDATE_PATTERN = re.compile(
    r"\b(set[_ ]?state|setState|dispatch|reducer|store\.|state (?:update|change)|"
    r"mutation|commit|assign(?:ed)?)\b",
    re.IGNORECASE,
)

# Type or shape mismatches between producer and consumer
SHAPE_MISMATCH_PATTERN = re.compile(
    r"(schema|shape|unexpected (?:type|value|field)|expected \S+.*\bgot\b|"
    r"is not a valid|not one of|unknown (?:enum|variant|value)|invalid enum|"
    r"validation (?:error|failed)|deserializ)",
    re.IGNORECASE,
)

# Error messages that name a schema, shape or enum
SCHEMA_MESSAGE_PATTERN = re.compile(
    r"(schema|shape|\benum\b|is not a valid|not one of|unknown (?:enum|variant)|invalid enum)",
    re.IGNORECASE,
)

# Tag keys that describe a configuration read
CONFIG_TAG_PATTERN = re.compile(r"^(config|settings|env|feature[_.-]?flag)([._-]|$)", re.IGNORECASE)

# Tag keys that describe a payload schema version or shape
SCHEMA_TAG_PATTERN = re.compile(r"(schema|shape)", re.IGNORECASE)


class Settings(BaseSettings):
    """Runtime settings, read from the environment and an optional .env file."""

    auth_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("auth_token", "SENTRY_AUTH_TOKEN"),
    )
    org: str | None = Field(
        default=None,
        validation_alias=AliasChoices("org", "SENTRY_ORG"),
    )

    cli_binary: str = DEFAULT_CLI_BINARY
    cli_args: list[str] = Field(default_factory=lambda: list(DEFAULT_CLI_ARGS))
    fetch_timeout_seconds: int | None = DEFAULT_FETCH_TIMEOUT_SECONDS

    anomaly_threshold: int = DEFAULT_ANOMALY_THRESHOLD
    boundary_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BOUNDARY_CATEGORIES)
    )

    model_config = SettingsConfigDict(
        env_prefix="ROOTCAUSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
