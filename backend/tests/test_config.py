import pytest

from attendance_hub import main
from attendance_hub.config import Settings


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_loaded_from_environment(self, settings):
        assert settings.supabase_url == "https://project.supabase.test"
        assert settings.allowed_email_domain == "example.edu"
        assert settings.missing_auth_settings() == []
        settings.validate_auth()

    def test_trailing_slashes_stripped(self):
        settings = Settings(
            _env_file=None,
            supabase_url="https://project.supabase.test/",
            app_base_url="https://attendance.example.edu//",
        )
        assert settings.supabase_url == "https://project.supabase.test"
        assert settings.app_base_url == "https://attendance.example.edu"

    def test_missing_settings_reported_together(self):
        settings = Settings(_env_file=None, supabase_anon_key="", auth_cookie_secret="")
        with pytest.raises(RuntimeError) as exc_info:
            settings.validate_auth()
        message = str(exc_info.value)
        assert "SUPABASE_ANON_KEY" in message
        assert "AUTH_COOKIE_SECRET" in message
        assert "SUPABASE_URL" not in message

    @pytest.mark.parametrize(
        "environment,expected",
        [("production", True), ("PRODUCTION", True), ("development", False), ("test", False)],
    )
    def test_is_production(self, environment, expected):
        assert Settings(_env_file=None, environment=environment).is_production is expected

    def test_settings_are_immutable(self, settings):
        with pytest.raises(Exception):
            settings.allowed_email_domain = "other.edu"


class TestStartup:
    """Tests for configuration checks when the app starts."""

    @pytest.mark.asyncio
    async def test_missing_setting_is_fatal(self, monkeypatch, settings):
        broken = settings.model_copy(update={"supabase_anon_key": None})
        monkeypatch.setattr(main, "settings", broken)
        with pytest.raises(RuntimeError, match="SUPABASE_ANON_KEY"):
            async with main.app.router.lifespan_context(main.app):
                pass

    @pytest.mark.asyncio
    async def test_complete_configuration_starts(self, monkeypatch, settings):
        monkeypatch.setattr(main, "settings", settings)
        started = False
        async with main.app.router.lifespan_context(main.app):
            started = True
        assert started
