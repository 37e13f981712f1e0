"""Tests for response envelope helpers."""

from datetime import datetime

import pytest

from consensus_mcp import SCHEMA_VERSION
from consensus_mcp.utils.provenance import ErrorType, build_error_response, build_meta, build_provenance


class TestEnvelope:
    """Tests for meta, provenance and error blocks."""

    def test_meta(self):
        meta = build_meta("summary_analysis", 12.345)

        assert meta["tool"] == "summary_analysis"
        assert meta["schema_version"] == SCHEMA_VERSION
        assert meta["duration_ms"] == 12.3

    def test_meta_without_timing(self):
        assert "duration_ms" not in build_meta("weight_presets")

    def test_provenance(self):
        prov = build_provenance("yfinance", datetime(2025, 1, 2, 3, 4, 5), period="1y")
        assert prov == {"source": "yfinance", "as_of": "2025-01-02T03:04:05", "period": "1y"}

    def test_error(self):
        error = build_error_response(ErrorType.INVALID_CONFIG, "bad preset", symbol="AAPL")

        assert error["error"] is True
        assert error["error_type"] == "invalid_config"
        assert error["symbol"] == "AAPL"

    def test_error_accepts_plain_string(self):
        assert build_error_response("invalid_symbol", "?")["error_type"] == "invalid_symbol"

    def test_unknown_error_type(self):
        with pytest.raises(ValueError):
            build_error_response("server_on_fire", "?")
