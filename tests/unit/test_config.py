"""
Unit tests for configuration module

These tests validate environment parsing of the application settings.
"""

import pytest

from vending_info.core.config import Settings

# Mark all tests in this module as unit tests
pytestmark = pytest.mark.unit


def make_settings(**kwargs):
    """Settings that ignore any local .env file"""
    return Settings(_env_file=None, **kwargs)


class TestSettings:
    """Test application settings configuration"""

    def test_default_settings(self, monkeypatch):
        """Test default configuration values"""
        for name in ("ENVIRONMENT", "NODE_ENV", "DATABASE_URL", "BCRYPT_ROUNDS", "UPLOAD_DIR"):
            monkeypatch.delenv(name, raising=False)

        settings = make_settings()

        assert settings.APP_NAME == "Vending Machine Info"
        assert settings.ENVIRONMENT == "development"
        assert settings.PORT == 4000
        assert settings.DATABASE_URL == "sqlite:///./data/vending_info.db"
        assert settings.SESSION_LIFETIME_HOURS == 24
        assert settings.SESSION_COOKIE_NAME == "session"
        assert settings.SESSION_COOKIE_SECURE is True
        assert settings.BCRYPT_ROUNDS == 12
        assert settings.MAX_UPLOAD_SIZE == 50 * 1024 * 1024
        assert settings.MAX_GALLERY_FILES == 10
        assert settings.AUTO_APPROVE_REVIEWS is True

    def test_session_max_age_matches_lifetime(self):
        """Cookie Max-Age is derived from the session lifetime"""
        assert make_settings().session_max_age == 86400
        assert make_settings(SESSION_LIFETIME_HOURS=2).session_max_age == 7200

    def test_node_env_alias(self, monkeypatch):
        """NODE_ENV is accepted as the environment name"""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("NODE_ENV", "production")

        settings = make_settings()

        assert settings.ENVIRONMENT == "production"
        assert settings.is_production

    def test_environment_variables_override_defaults(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("SESSION_COOKIE_SECURE", "false")
        monkeypatch.setenv("AUTO_APPROVE_REVIEWS", "false")

        settings = make_settings()

        assert settings.PORT == 8080
        assert settings.SESSION_COOKIE_SECURE is False
        assert settings.AUTO_APPROVE_REVIEWS is False


class TestCorsOrigins:
    """CORS origins accept JSON lists and comma-separated strings"""

    def test_cors_origins_json_parsing(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["https://example.com", "https://app.example.com"]')

        settings = make_settings()

        assert settings.CORS_ORIGINS == ["https://example.com", "https://app.example.com"]

    def test_cors_origins_comma_separated_parsing(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://example.com, https://app.example.com,")

        settings = make_settings()

        assert settings.CORS_ORIGINS == ["https://example.com", "https://app.example.com"]

    def test_parse_cors_origins_passes_lists_through(self):
        origins = ["http://localhost:5173"]
        assert Settings.parse_cors_origins(origins) == origins


class TestRateLimitSettings:

    def test_rate_limit_defaults(self):
        settings = make_settings()

        assert settings.RATE_LIMIT_ENABLED is True
        assert settings.rate_limit_login_endpoints == "5 per 15 minutes"
        assert settings.redis_url is None
