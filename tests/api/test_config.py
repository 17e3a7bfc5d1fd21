"""Settings tests."""

from __future__ import annotations

import pytest

from chatflow.config import (
    APISettings,
    AuthSettings,
    CacheSettings,
    ChatSettings,
    DatabaseSettings,
    get_chat_settings,
)


class TestSettings:
    """Tests for environment driven settings."""

    def test_chat_defaults(self) -> None:
        """Chat runtime defaults."""
        settings = ChatSettings()

        assert settings.session_ttl_minutes == 15
        assert settings.heartbeat_interval == 5.0
        assert settings.client_timeout == 30.0
        assert settings.default_response_wait == 10

    def test_env_prefixes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Each group reads its own prefix."""
        monkeypatch.setenv("CHAT_SESSION_TTL_MINUTES", "60")
        monkeypatch.setenv("CACHE_WS_CONNECTION_TTL", "120")
        monkeypatch.setenv("AUTH_KEYCLOAK_REALM", "other")
        monkeypatch.setenv("DATABASE_POOL_SIZE", "3")
        monkeypatch.setenv("API_API_PREFIX", "/v2")

        assert ChatSettings().session_ttl_minutes == 60
        assert CacheSettings().ws_connection_ttl == 120
        assert AuthSettings().keycloak_realm == "other"
        assert DatabaseSettings().pool_size == 3
        assert APISettings().api_prefix == "/v2"

    def test_getters_are_cached(self) -> None:
        """Settings getters return one shared instance."""
        assert get_chat_settings() is get_chat_settings()
