"""Internal implementation modules. Not part of the public API."""

from posthog_lookup._internal.api_client import PostHogClient
from posthog_lookup._internal.config import ConfigManager, Credentials

__all__ = ["ConfigManager", "Credentials", "PostHogClient"]
