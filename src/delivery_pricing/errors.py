"""Error types for the delivery pricing engine.

Configuration problems are fatal and raised at load time. Calculations
themselves never raise for malformed order input; they clamp and log instead.
"""

from typing import List, Optional


class PricingEngineError(Exception):
    """Base class for all pricing-engine errors.

    This is the parent class for all engine-specific exceptions.
    """

    pass


class ConfigurationError(PricingEngineError):
    """Base class for configuration-related errors.

    This is raised for errors related to configuration loading, parsing,
    or validation.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            path: Optional path to the configuration file that caused the error
        """
        super().__init__(message)
        self.message = message
        self.path = path


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when a required configuration file is not found.

    Examples:
        >>> try:
        ...     PricingRegistry(RegistryConfig(clients_path="/missing.yaml"))
        ... except ConfigFileNotFoundError as e:
        ...     print(f"Config file not found: {e.path}")
    """

    pass


class InvalidConfigFormatError(ConfigurationError):
    """Raised when a configuration file has an invalid format."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        expected_type: str = "dict",
    ) -> None:
        """Initialize invalid format error.

        Args:
            message: Error message
            path: Optional path to the configuration file
            expected_type: Expected type of the configuration
        """
        super().__init__(message, path)
        self.expected_type = expected_type


class InvalidTierTableError(ConfigurationError):
    """Raised when a tier table has gaps, overlaps or a malformed top tier.

    Examples:
        >>> try:
        ...     TierTable(tiers)
        ... except InvalidTierTableError as e:
        ...     print(f"Tier {e.tier_index} is invalid on {e.dimension}")
    """

    def __init__(
        self,
        message: str,
        tier_index: Optional[int] = None,
        dimension: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        """Initialize invalid tier table error.

        Args:
            message: Error message
            tier_index: 1-based index of the offending tier, if known
            dimension: "headcount" or "food_cost", if the problem is dimension specific
            path: Optional path to the configuration file
        """
        super().__init__(message, path)
        self.tier_index = tier_index
        self.dimension = dimension


class InvalidRuleError(ConfigurationError):
    """Raised when a pricing rule definition cannot be used."""

    def __init__(self, message: str, rule_id: Optional[str] = None, path: Optional[str] = None) -> None:
        """Initialize invalid rule error.

        Args:
            message: Error message
            rule_id: Identifier of the offending rule, if known
            path: Optional path to the configuration file
        """
        super().__init__(message, path)
        self.rule_id = rule_id


class ClientNotFoundError(PricingEngineError):
    """Raised when a client identifier is not present in the registry.

    Examples:
        >>> try:
        ...     registry.get_configuration("unknown-client")
        ... except ClientNotFoundError as e:
        ...     print(f"Available clients: {', '.join(e.available_clients)}")
    """

    def __init__(
        self,
        message: str,
        client_id: str,
        available_clients: Optional[List[str]] = None,
    ) -> None:
        """Initialize client not found error.

        Args:
            message: Error message
            client_id: The client identifier that was requested
            available_clients: Identifiers that are configured
        """
        super().__init__(message)
        self.message = message
        self.client_id = client_id
        self.available_clients = available_clients or []

    def __str__(self) -> str:
        """Return a string representation of the error."""
        if self.available_clients:
            return f"{self.message} (available: {', '.join(self.available_clients)})"
        return self.message
