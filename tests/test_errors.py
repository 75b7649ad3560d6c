"""Tests for error classes."""

from delivery_pricing.errors import (
    ClientNotFoundError,
    ConfigFileNotFoundError,
    ConfigurationError,
    InvalidConfigFormatError,
    InvalidRuleError,
    InvalidTierTableError,
    PricingEngineError,
)


class TestErrorClasses:
    """Tests for all error classes."""

    def test_pricing_engine_error(self) -> None:
        """Test PricingEngineError base class."""
        error = PricingEngineError("Base error message")
        assert str(error) == "Base error message"

    def test_configuration_error(self) -> None:
        """Test ConfigurationError."""
        error = ConfigurationError("Bad config", path="/etc/clients.yaml")
        assert error.message == "Bad config"
        assert error.path == "/etc/clients.yaml"
        assert isinstance(error, PricingEngineError)

    def test_config_file_not_found_error(self) -> None:
        """Test ConfigFileNotFoundError."""
        error = ConfigFileNotFoundError("Missing", path="/missing.yaml")
        assert error.path == "/missing.yaml"
        assert isinstance(error, ConfigurationError)

    def test_invalid_config_format_error(self) -> None:
        """Test InvalidConfigFormatError."""
        error = InvalidConfigFormatError("Not a mapping", path="/x.yaml", expected_type="mapping")
        assert error.expected_type == "mapping"
        assert isinstance(error, ConfigurationError)

    def test_invalid_tier_table_error(self) -> None:
        """Test InvalidTierTableError."""
        error = InvalidTierTableError("Tier 3 leaves a gap", tier_index=3, dimension="headcount")
        assert error.tier_index == 3
        assert error.dimension == "headcount"
        assert error.path is None
        assert isinstance(error, ConfigurationError)

    def test_invalid_rule_error(self) -> None:
        """Test InvalidRuleError."""
        error = InvalidRuleError("Bad rule", rule_id="cv-base-fee", path="/x.yaml")
        assert error.rule_id == "cv-base-fee"
        assert error.path == "/x.yaml"
        assert isinstance(error, ConfigurationError)

    def test_client_not_found_error(self) -> None:
        """Test ClientNotFoundError lists available clients."""
        error = ClientNotFoundError(
            "Client 'acme' is not configured",
            client_id="acme",
            available_clients=["cater-valley", "kasa"],
        )
        assert error.client_id == "acme"
        assert str(error) == "Client 'acme' is not configured (available: cater-valley, kasa)"
        assert isinstance(error, PricingEngineError)
        assert not isinstance(error, ConfigurationError)

    def test_client_not_found_without_alternatives(self) -> None:
        """Test ClientNotFoundError with no available clients."""
        error = ClientNotFoundError("Client 'acme' is not configured", client_id="acme")
        assert error.available_clients == []
        assert str(error) == "Client 'acme' is not configured"
