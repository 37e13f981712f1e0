"""Multi-method investment consensus MCP server."""

import os


def get_server_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("SERVER_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("consensus-mcp")
    except Exception:
        return "dev"


SERVER_VERSION = get_server_version()
# Bump when output schema changes materially (new fields, renamed fields, structure changes)
# v1: Initial schema (method_scores, weights, selected_methods, recommendation)
# v2: Added data_quality.method_failures and analysis_date
SCHEMA_VERSION = "2"
