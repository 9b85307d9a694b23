"""Middleware for the PostHog lookup MCP server."""

from posthog_mcp.middleware.audit import (
    AuditConfig,
    AuditMiddleware,
    create_audit_middleware,
)

__all__ = ["AuditConfig", "AuditMiddleware", "create_audit_middleware"]
