"""Unit tests for application settings."""

from app.core.config import Settings


class TestSettings:
    """Test derived settings properties."""

    def test_is_production(self):
        assert Settings(environment="Production").is_production is True
        assert Settings(environment="development").is_production is False

    def test_cors_origins_parsed(self):
        settings = Settings(allowed_origins=" https://a.example.com, ,https://b.example.com ", debug=False)

        assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]

    def test_cors_wildcard_only_in_debug(self):
        assert Settings(allowed_origins="", debug=True).cors_origins == ["*"]
        assert Settings(allowed_origins="", debug=False).cors_origins == []
