"""
Tests for startup configuration checks.
"""
from unittest.mock import patch

from core.config_validator import ConfigValidator


class TestConfigValidator:
    """Test validation results for typical configurations."""

    def test_default_development_config_is_valid(self):
        result = ConfigValidator().validate_all()

        assert result["valid"] is True
        assert any("development session secret" in w for w in result["warnings"])

    def test_dev_secret_rejected_in_production(self):
        with patch("core.config.ENVIRONMENT", "production"):
            result = ConfigValidator().validate_all()

        assert result["valid"] is False
        assert any("SESSION_SECRET_KEY" in e for e in result["errors"])

    def test_bad_limits(self):
        with patch("core.config.BCRYPT_ROUNDS", 2), patch("core.config.MAX_PAGE_SIZE", 1):
            result = ConfigValidator().validate_all()

        assert any("BCRYPT_ROUNDS" in e for e in result["errors"])
        assert any("MAX_PAGE_SIZE" in e for e in result["errors"])
