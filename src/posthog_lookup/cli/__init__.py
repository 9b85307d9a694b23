"""CLI package for posthog_lookup.

This module provides the `posthog-lookup` command-line interface. The
command delegates to PostHogClient, adding only validation and output
formatting.
"""

from posthog_lookup.cli.main import app

__all__ = ["app"]
