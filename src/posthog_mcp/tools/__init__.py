"""MCP tools for PostHog lookups.

- lookup: person-by-email, persons-by-event and person-events tools
"""
