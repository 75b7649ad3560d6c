"""Delivery pricing and driver compensation engine.

This package computes what a customer is charged for a catering delivery and
what the driver is paid for it. Pricing is driven by per-client tier tables,
rules and policies loaded from YAML configuration.
"""

# Version of the package
try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _version

    __version__ = _version("delivery-pricing-engine")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Import main components for easier access
from .calculator import (
    DeliveryCostBreakdown,
    DriverPayBreakdown,
    calculate,
    calculate_delivery_cost,
    calculate_driver_pay,
    calculate_mileage_pay,
    calculate_vendor_pay,
)
from .config_loader import ClientConfiguration
from .engine import CalculationEngine
from .errors import (
    ClientNotFoundError,
    ConfigFileNotFoundError,
    ConfigurationError,
    InvalidConfigFormatError,
    InvalidRuleError,
    InvalidTierTableError,
    PricingEngineError,
)
from .models import (
    CalculationInput,
    CalculationResult,
    CustomerCharges,
    DriverPayments,
    ValidationResult,
    validate_delivery_input,
)
from .policy import ClientPricingPolicy, TierThreshold
from .registry import PricingRegistry, RegistryConfig, get_registry
from .rules import (
    FlatAmount,
    Measure,
    Percentage,
    PricingRule,
    RuleEvaluator,
    RuleName,
    RuleSet,
    RuleType,
    ThresholdAbove,
    ThresholdBelow,
    ThresholdType,
    TierBase,
)
from .tiers import Tier, TierClassifier, TierSelection, TierTable

# Define public API
__all__ = [
    # Calculation
    "CalculationEngine",
    "CalculationInput",
    "CalculationResult",
    "CustomerCharges",
    "DriverPayments",
    "calculate",
    "calculate_delivery_cost",
    "calculate_driver_pay",
    "calculate_mileage_pay",
    "calculate_vendor_pay",
    "DeliveryCostBreakdown",
    "DriverPayBreakdown",
    "ValidationResult",
    "validate_delivery_input",
    # Configuration
    "ClientConfiguration",
    "ClientPricingPolicy",
    "TierThreshold",
    "PricingRegistry",
    "RegistryConfig",
    "get_registry",
    # Tiers
    "Tier",
    "TierTable",
    "TierClassifier",
    "TierSelection",
    # Rules
    "PricingRule",
    "RuleSet",
    "RuleEvaluator",
    "RuleType",
    "RuleName",
    "ThresholdType",
    "Measure",
    "FlatAmount",
    "ThresholdAbove",
    "ThresholdBelow",
    "Percentage",
    "TierBase",
    # Errors
    "PricingEngineError",
    "ConfigurationError",
    "ConfigFileNotFoundError",
    "InvalidConfigFormatError",
    "InvalidTierTableError",
    "InvalidRuleError",
    "ClientNotFoundError",
]
