"""Audit logging middleware for MCP server.

Records each tool invocation with its arguments, elapsed time and outcome on
the ``posthog_mcp.audit`` logger.

Example:
    ```python
    from posthog_mcp.middleware.audit import create_audit_middleware

    mcp.add_middleware(create_audit_middleware())
    ```
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import mcp.types as mt
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult

logger = logging.getLogger("posthog_mcp.audit")

# Argument names whose values identify a person; logged masked.
SENSITIVE_ARGUMENTS = frozenset({"email"})


@dataclass
class AuditConfig:
    """Configuration for audit logging."""

    log_level: int = logging.INFO
    """Logging level for audit entries."""

    include_params: bool = True
    """Whether to include tool parameters in logs."""

    max_param_length: int = 200
    """Maximum length of parameter values to log."""


def mask_email(value: str) -> str:
    """Keep the first character and the domain: ``a***@example.com``."""
    local, sep, domain = value.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


class AuditMiddleware(Middleware):
    """Audit logging middleware for MCP tool invocations."""

    def __init__(self, config: AuditConfig | None = None) -> None:
        self.config = config or AuditConfig()

    def _truncate(self, value: str) -> str:
        max_length = self.config.max_param_length
        if len(value) <= max_length:
            return value
        return value[: max_length - 3] + "..."

    def format_params(self, params: dict[str, Any]) -> str:
        """Format tool arguments for a log line.

        Args:
            params: Tool arguments as received.

        Returns:
            ``{key=value, ...}`` with long values truncated and emails masked.
        """
        formatted_parts: list[str] = []
        for key, value in params.items():
            str_value = str(value)
            if key in SENSITIVE_ARGUMENTS and isinstance(value, str):
                str_value = mask_email(value)
            formatted_parts.append(f"{key}={self._truncate(str_value)}")
        return "{" + ", ".join(formatted_parts) + "}"

    async def on_call_tool(
        self,
        context: MiddlewareContext[mt.CallToolRequestParams],
        call_next: CallNext[mt.CallToolRequestParams, ToolResult],
    ) -> ToolResult:
        """Log tool invocations with timing and outcomes."""
        tool_name = context.message.name
        tool_args = context.message.arguments or {}

        param_str = (
            self.format_params(tool_args)
            if self.config.include_params
            else "(params hidden)"
        )
        logger.log(self.config.log_level, "Tool invoked: %s %s", tool_name, param_str)

        start_time = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Tool failed: %s (%0.1fms) - %s: %s",
                tool_name,
                elapsed_ms,
                type(e).__name__,
                str(e).splitlines()[0] if str(e) else "",
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.log(
            self.config.log_level,
            "Tool completed: %s (%0.1fms)",
            tool_name,
            elapsed_ms,
        )
        return result


def create_audit_middleware(
    log_level: int = logging.INFO,
    include_params: bool = True,
) -> AuditMiddleware:
    """Create a configured audit logging middleware.

    Args:
        log_level: Logging level for audit entries. Default INFO.
        include_params: Whether to include tool parameters. Default True.

    Returns:
        A configured AuditMiddleware instance.
    """
    return AuditMiddleware(
        config=AuditConfig(log_level=log_level, include_params=include_params)
    )
