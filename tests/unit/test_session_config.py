"""Unit tests for SessionConfig and the shared rate gate."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

import src.session.rate_gate as rate_gate_module
from src.session.config import DEFAULT_GREETING, SessionConfig, get_session_config


class TestSessionConfig:
    """Tests for SessionConfig defaults and validation."""

    def test_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            config = SessionConfig()

        assert config.max_requests == 10
        assert config.window_seconds == 60.0
        assert config.quota_cooldown_seconds == 300.0
        assert config.greeting == DEFAULT_GREETING

    def test_values_from_environment(self) -> None:
        env = {
            "CHAT_RATE_LIMIT_MAX_REQUESTS": "3",
            "CHAT_RATE_LIMIT_WINDOW_SECONDS": "30",
            "CHAT_QUOTA_COOLDOWN_SECONDS": "120",
            "CHAT_GREETING": "",
        }
        with patch.dict("os.environ", env):
            config = get_session_config()

        assert config.max_requests == 3
        assert config.window_seconds == 30.0
        assert config.quota_cooldown_seconds == 120.0
        assert config.greeting == ""

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("max_requests", 0),
            ("window_seconds", 0.0),
            ("quota_cooldown_seconds", -1.0),
        ],
    )
    def test_rejects_out_of_range(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SessionConfig(**{field: value})

        assert field in str(exc_info.value)


class TestGetRateGate:
    """Tests for the process-wide rate gate."""

    def test_singleton_built_from_config(self) -> None:
        rate_gate_module._rate_gate = None
        env = {"CHAT_RATE_LIMIT_MAX_REQUESTS": "4", "CHAT_RATE_LIMIT_WINDOW_SECONDS": "15"}

        with patch.dict("os.environ", env):
            first = rate_gate_module.get_rate_gate()
            second = rate_gate_module.get_rate_gate()

        assert first is second
        assert first.max_requests == 4
        assert first.window_seconds == 15.0

        rate_gate_module._rate_gate = None
