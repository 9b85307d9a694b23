"""Configuration management for posthog_lookup.

Resolves PostHog credentials from the process environment, optionally seeded
from a ``.env`` file. Credentials are resolved once at process start and the
resulting immutable Credentials object is passed to the client explicitly.

Environment variables:
    POSTHOG_PERSONAL_API_KEY: Personal API key (required).
    POSTHOG_PROJECT_ID: Numeric project identifier (required).
    POSTHOG_REGION: ``us`` or ``eu`` (optional, default ``us``).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal, cast

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from posthog_lookup.exceptions import ConfigError

# Valid regions for PostHog Cloud
VALID_REGIONS = ("us", "eu")
RegionType = Literal["us", "eu"]

API_BASE_URLS: dict[str, str] = {
    "us": "https://us.posthog.com",
    "eu": "https://eu.posthog.com",
}

ENV_API_KEY = "POSTHOG_PERSONAL_API_KEY"
ENV_PROJECT_ID = "POSTHOG_PROJECT_ID"
ENV_REGION = "POSTHOG_REGION"
DEFAULT_REGION: RegionType = "us"


class Credentials(BaseModel):
    """Immutable credentials for PostHog API authentication.

    This is a frozen Pydantic model that ensures:
    - All fields are validated on construction
    - The API key is never exposed in repr/str output
    - The object cannot be modified after creation
    """

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    """Personal API key (redacted in output)."""

    project_id: str
    """PostHog project identifier."""

    region: RegionType = DEFAULT_REGION
    """Cloud region (us or eu)."""

    @field_validator("region", mode="before")
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Validate and normalize region to lowercase."""
        if not isinstance(v, str):
            raise ValueError(f"Region must be a string. Got: {type(v).__name__}")
        v_lower = v.strip().lower()
        if v_lower not in VALID_REGIONS:
            valid = ", ".join(VALID_REGIONS)
            raise ValueError(f"Region must be one of: {valid}. Got: {v}")
        return v_lower

    @field_validator("project_id")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Validate string fields are non-empty."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @property
    def api_base_url(self) -> str:
        """Base URL of the PostHog API for this region."""
        return API_BASE_URLS[self.region]

    def __repr__(self) -> str:
        """Return string representation with redacted key."""
        return (
            f"Credentials(api_key=***, project_id={self.project_id!r}, "
            f"region={self.region!r})"
        )

    def __str__(self) -> str:
        """Return string representation with redacted key."""
        return self.__repr__()


class ConfigManager:
    """Resolves PostHog credentials from the environment.

    Resolution order for each variable:
    1. The process environment (or the ``environ`` mapping, when given)
    2. A ``.env`` file: the explicit ``env_file``, otherwise the nearest
       ``.env`` found from the current working directory upwards

    Values already present in the environment are never overridden by the
    ``.env`` file.
    """

    def __init__(
        self,
        env_file: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize ConfigManager.

        Args:
            env_file: Explicit ``.env`` file to load.
            environ: Mapping to read instead of ``os.environ``. When given,
                no ``.env`` file is loaded.
        """
        self._env_file = env_file
        self._environ = environ

    def _load_environment(self) -> Mapping[str, str]:
        """Return the environment mapping to resolve credentials from."""
        if self._environ is not None:
            return self._environ

        if self._env_file is not None:
            dotenv_path = str(self._env_file)
        else:
            dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path, override=False)
        return os.environ

    def resolve_credentials(self) -> Credentials:
        """Resolve credentials from the environment.

        Returns:
            Immutable Credentials object.

        Raises:
            ConfigError: If a required variable is missing or the region is
                not supported.
        """
        env = self._load_environment()

        api_key = env.get(ENV_API_KEY, "").strip()
        project_id = env.get(ENV_PROJECT_ID, "").strip()
        region = env.get(ENV_REGION, "").strip().lower() or DEFAULT_REGION

        if not api_key:
            raise ConfigError(
                f"{ENV_API_KEY} environment variable is required.",
                details={"variable": ENV_API_KEY},
            )
        if not project_id:
            raise ConfigError(
                f"{ENV_PROJECT_ID} environment variable is required.",
                details={"variable": ENV_PROJECT_ID},
            )
        if region not in VALID_REGIONS:
            raise ConfigError(
                f"Invalid {ENV_REGION}: '{region}'. Must be 'us' or 'eu'.",
                details={"variable": ENV_REGION, "value": region},
            )

        return Credentials(
            api_key=SecretStr(api_key),
            project_id=project_id,
            region=cast(RegionType, region),
        )
