import pytest

from secondleash.config.settings import Settings, get_settings


@pytest.mark.unit
class TestSettings:
    def test_default_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("USE_DATABASE", raising=False)
        settings = Settings()
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.use_database is False
        assert settings.default_page_size == 20
        assert settings.max_page_size == 100
        assert "postgresql" in settings.database_url

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://user:pass@db:5432/dogs")
        monkeypatch.setenv("USE_DATABASE", "true")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "30")
        settings = Settings()
        assert settings.use_database is True
        assert settings.debug is True
        assert settings.rate_limit_per_minute == 30
        assert settings.database_url.endswith("/dogs")

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_insecure_secret_warns(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("JWT_SECRET", raising=False)
        get_settings.cache_clear()
        with pytest.warns(UserWarning, match="JWT_SECRET"):
            get_settings()

    def test_default_page_size_cannot_exceed_max(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "50")
        monkeypatch.setenv("MAX_PAGE_SIZE", "10")
        get_settings.cache_clear()
        with pytest.raises(ValueError, match="DEFAULT_PAGE_SIZE"):
            get_settings()
