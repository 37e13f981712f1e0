"""Envelope pieces shared by every tool response: meta, provenance, errors."""

from datetime import datetime
from enum import Enum
from typing import Any

from consensus_mcp import SCHEMA_VERSION, SERVER_VERSION


class ErrorType(str, Enum):
    """Error kinds a tool can return instead of a result."""

    INVALID_SYMBOL = "invalid_symbol"
    INVALID_CONFIG = "invalid_config"


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """Versions and the producing tool, plus wall time when measured."""
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_provenance(source: str, as_of: datetime | str | None = None, **kwargs: Any) -> dict[str, Any]:
    """Provenance block for one upstream data source."""
    prov: dict[str, Any] = {"source": source}
    if as_of is not None:
        prov["as_of"] = as_of.isoformat() if isinstance(as_of, datetime) else as_of
    prov.update(kwargs)
    return prov


def build_error_response(
    error_type: ErrorType | str,
    message: str,
    symbol: str | None = None,
) -> dict[str, Any]:
    """
    Error envelope returned in place of a tool result.

    Args:
        error_type: One of ErrorType (plain strings are accepted)
        message: Human-readable explanation
        symbol: Offending symbol, when there is one
    """
    kind = ErrorType(error_type)
    response: dict[str, Any] = {
        "error": True,
        "error_type": kind.value,
        "message": message,
        "meta": build_meta("error"),
    }
    if symbol is not None:
        response["symbol"] = symbol
    return response
