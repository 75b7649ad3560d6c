"""Client configuration loading.

Client configurations live in a YAML document::

    version: "1.0"
    default_client: ready-set-food-standard
    clients:
      cater-valley:
        client_name: CaterValley
        tiers:
          - {headcount: [0, 25], food_cost: [0, 300.00], base_fee: 85.00, base_fee_within_radius: 42.50}
          ...
        policy:
          minimum_customer_fee: 42.50
          ...
        rules: [...]   # optional, derived from the policy when omitted

Dollar amounts in the document are converted to integer cents here. Any
problem is a :class:`~delivery_pricing.errors.ConfigurationError`.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .engine import CalculationEngine
from .errors import (
    ConfigFileNotFoundError,
    ConfigurationError,
    InvalidConfigFormatError,
    InvalidRuleError,
    InvalidTierTableError,
)
from .logging import LogEvent, log_debug, log_error
from .money import to_cents, to_decimal
from .policy import ClientPricingPolicy, TierThreshold
from .rules import (
    FlatAmount,
    Formula,
    Percentage,
    PricingRule,
    RuleSet,
    ThresholdAbove,
    ThresholdBelow,
    TierBase,
)
from .tiers import Tier, TierTable


def _area_names(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError("bridge_toll_areas must be a list of area names")
    return tuple(str(area) for area in value)


# policy key -> (ClientPricingPolicy field, converter)
_POLICY_FIELDS: Dict[str, Any] = {
    "minimum_customer_fee": ("minimum_customer_fee_cents", to_cents),
    "mileage_threshold_miles": ("mileage_threshold_miles", to_decimal),
    "customer_mileage_rate": ("customer_mileage_rate_cents_per_mile", to_cents),
    "driver_mileage_rate": ("driver_mileage_rate_cents_per_mile", to_cents),
    "driver_minimum_mileage_pay": ("driver_minimum_mileage_pay_cents", to_cents),
    "include_bridge_toll_in_customer_fee": ("include_bridge_toll_in_customer_fee", bool),
    "default_bridge_toll": ("default_bridge_toll_cents", to_cents),
    "daily_drive_discount_per_extra_drive": ("daily_drive_discount_cents_per_extra_drive", to_cents),
    "bonus": ("bonus_flat_cents", to_cents),
    "bonus_suppressed_by_direct_tip": ("bonus_suppressed_by_direct_tip", bool),
    "customer_extra_stop_charge": ("customer_extra_stop_cents", to_cents),
    "driver_extra_stop_bonus": ("driver_extra_stop_bonus_cents", to_cents),
    "ready_set_fee": ("ready_set_fee_cents", to_cents),
    "ready_set_fee_matches_delivery_fee": ("ready_set_fee_matches_delivery_fee", bool),
    "bridge_toll_areas": ("bridge_toll_areas", _area_names),
    "manual_review_headcount": ("manual_review_headcount", int),
}


@dataclass(frozen=True)
class ClientConfiguration:
    """Everything needed to price orders for one client."""

    policy: ClientPricingPolicy
    tier_table: TierTable
    rule_set: RuleSet
    engine: CalculationEngine = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "engine", CalculationEngine(self.tier_table, self.rule_set))

    @property
    def client_id(self) -> str:
        return self.policy.client_id


@dataclass
class ConfigResult:
    """Outcome of reading a configuration file.

    Attributes:
        success: Whether the file was read and parsed
        data: Parsed YAML document (if successful)
        error: Error message (if unsuccessful)
        exception: Original exception (if an error occurred)
        path: Path to the configuration file
        not_found: Whether the failure was a missing file
    """

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    exception: Optional[Exception] = None
    path: Optional[str] = None
    not_found: bool = False

    def unwrap(self) -> Dict[str, Any]:
        """Return the parsed document or raise the matching configuration error.

        Raises:
            ConfigFileNotFoundError: If the file does not exist
            InvalidConfigFormatError: If the file could not be read or parsed
        """
        if self.success and self.data is not None:
            return self.data
        message = self.error or "Invalid configuration"
        if self.not_found:
            raise ConfigFileNotFoundError(message, self.path)
        raise InvalidConfigFormatError(message, self.path)


@dataclass(frozen=True)
class ClientsDocument:
    """A parsed and validated client configuration file."""

    version: str
    default_client: str
    clients: Mapping[str, ClientConfiguration]
    path: Optional[str] = None


def _bounds(value: Any, name: str) -> List[Any]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{name} must be a [min, max] pair")
    return list(value)


def parse_tier(data: Mapping[str, Any]) -> Tier:
    """Build a :class:`Tier` from its YAML mapping (dollar amounts)."""
    min_headcount, max_headcount = _bounds(data["headcount"], "headcount")
    min_food_cost, max_food_cost = _bounds(data["food_cost"], "food_cost")
    base_fee = data.get("base_fee", 0)
    return Tier(
        min_headcount=int(min_headcount),
        max_headcount=None if max_headcount is None else int(max_headcount),
        min_food_cost_cents=to_cents(min_food_cost),
        max_food_cost_cents=None if max_food_cost is None else to_cents(max_food_cost),
        customer_base_fee_cents=to_cents(base_fee),
        customer_base_fee_within_radius_cents=to_cents(data.get("base_fee_within_radius", base_fee)),
        driver_base_pay_cents=to_cents(data.get("driver_base_pay", 0)),
    )


def parse_tier_table(entries: Any, client_id: str, path: Optional[str] = None) -> TierTable:
    """Build and validate a client's tier table.

    Raises:
        InvalidTierTableError: If any tier is malformed or the bands do not line up
    """
    if not isinstance(entries, list) or not entries:
        raise InvalidTierTableError(f"Client '{client_id}' must define a non-empty list of tiers", path=path)
    tiers = []
    for index, entry in enumerate(entries, start=1):
        try:
            if not isinstance(entry, Mapping):
                raise ValueError("tier must be a mapping")
            tiers.append(parse_tier(entry))
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise InvalidTierTableError(
                f"Client '{client_id}' tier {index} is invalid: {e}",
                tier_index=index,
                path=path,
            ) from e
    try:
        return TierTable(tuple(tiers))
    except InvalidTierTableError as e:
        raise InvalidTierTableError(
            f"Client '{client_id}': {e.message}",
            tier_index=e.tier_index,
            dimension=e.dimension,
            path=path,
        ) from e


def parse_policy(client_id: str, data: Mapping[str, Any], path: Optional[str] = None) -> ClientPricingPolicy:
    """Build a :class:`ClientPricingPolicy` from a client's YAML mapping.

    Raises:
        ConfigurationError: On unknown policy keys or invalid values
    """
    raw_policy = data.get("policy") or {}
    if not isinstance(raw_policy, Mapping):
        raise InvalidConfigFormatError(f"Client '{client_id}' policy must be a mapping", path=path)

    kwargs: Dict[str, Any] = {
        "client_id": client_id,
        "client_name": str(data.get("client_name", "")),
        "vendor_name": str(data.get("vendor_name", "")),
        "description": str(data.get("description", "")),
        "is_active": bool(data.get("active", True)),
    }
    try:
        for key, value in raw_policy.items():
            if key == "percentage_tier":
                if value is None:
                    continue
                kwargs["percentage_tier_threshold"] = TierThreshold(
                    headcount=int(value["headcount"]),
                    food_cost_cents=to_cents(value["food_cost"]),
                )
                kwargs["percentage_rate"] = to_decimal(value["rate"])
                continue
            if key not in _POLICY_FIELDS:
                raise ConfigurationError(f"Client '{client_id}' has unknown policy key '{key}'", path)
            name, convert = _POLICY_FIELDS[key]
            kwargs[name] = None if value is None else convert(value)
        return ClientPricingPolicy(**kwargs)
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise ConfigurationError(f"Client '{client_id}' policy is invalid: {e}", path) from e


def parse_formula(data: Mapping[str, Any]) -> Formula:
    """Build a formula variant from its ``kind`` tagged mapping.

    Amounts are dollars. Thresholds are in the measure's own unit: miles,
    a count, or dollars for ``food_cost``.
    """
    kind = data.get("kind")
    if kind == "flat":
        return FlatAmount(base_amount_cents=to_cents(data["amount"]))
    if kind == "threshold_above":
        return ThresholdAbove(
            per_unit_amount_cents=to_cents(data["per_unit"]),
            threshold_value=to_decimal(data.get("threshold", 0)),
            measure=data.get("measure", "mileage"),
        )
    if kind == "threshold_below":
        return ThresholdBelow(
            base_amount_cents=to_cents(data["amount"]),
            threshold_value=to_decimal(data["threshold"]),
            measure=data.get("measure", "mileage"),
        )
    if kind == "percentage":
        return Percentage(rate=to_decimal(data["rate"]))
    if kind == "tier":
        radius = data.get("radius_miles")
        return TierBase(radius_miles=None if radius is None else to_decimal(radius))
    raise ValueError(f"unknown formula kind '{kind}'")


def parse_rule_set(entries: Any, client_id: str, path: Optional[str] = None) -> RuleSet:
    """Build a client's explicit rule set.

    Raises:
        InvalidRuleError: If a rule is malformed or uses a name invalid for its type
    """
    if not isinstance(entries, list):
        raise InvalidRuleError(f"Client '{client_id}' rules must be a list", path=path)
    rules = []
    for index, entry in enumerate(entries, start=1):
        rule_id = entry.get("id") if isinstance(entry, Mapping) else None
        rule_id = str(rule_id or f"{client_id}-rule-{index}")
        try:
            if not isinstance(entry, Mapping):
                raise ValueError("rule must be a mapping")
            rules.append(
                PricingRule(
                    id=rule_id,
                    rule_type=entry["type"],
                    rule_name=entry["name"],
                    formula=parse_formula(entry["formula"]),
                    priority=int(entry.get("priority", 0)),
                    description=str(entry.get("description", "")),
                )
            )
        except InvalidRuleError as e:
            raise InvalidRuleError(f"Client '{client_id}': {e.message}", rule_id=rule_id, path=path) from e
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise InvalidRuleError(
                f"Client '{client_id}' rule '{rule_id}' is invalid: {e}", rule_id=rule_id, path=path
            ) from e
    try:
        return RuleSet(tuple(rules))
    except InvalidRuleError as e:
        raise InvalidRuleError(f"Client '{client_id}': {e.message}", rule_id=e.rule_id, path=path) from e


def _check_percentage_tier(policy: ClientPricingPolicy, tier_table: TierTable, path: Optional[str]) -> None:
    threshold = policy.percentage_tier_threshold
    if threshold is None:
        return
    top = tier_table.top
    if top.min_headcount != threshold.headcount:
        raise InvalidTierTableError(
            f"Client '{policy.client_id}': percentage tier starts at headcount {threshold.headcount} "
            f"but the top tier starts at {top.min_headcount}",
            tier_index=len(tier_table),
            dimension="headcount",
            path=path,
        )
    if top.min_food_cost_cents != threshold.food_cost_cents:
        raise InvalidTierTableError(
            f"Client '{policy.client_id}': percentage tier food cost threshold does not match the top tier",
            tier_index=len(tier_table),
            dimension="food_cost",
            path=path,
        )


def parse_client_configuration(
    client_id: str, data: Mapping[str, Any], path: Optional[str] = None
) -> ClientConfiguration:
    """Build one client's configuration from its YAML mapping.

    Args:
        client_id: Client identifier (the mapping key)
        data: The client's mapping
        path: Source file, for error reporting

    Returns:
        ClientConfiguration with an engine ready to use

    Raises:
        ConfigurationError: If anything about the client is invalid
    """
    if not isinstance(data, Mapping):
        raise InvalidConfigFormatError(f"Client '{client_id}' must be a mapping", path=path)
    tier_table = parse_tier_table(data.get("tiers"), client_id, path)
    policy = parse_policy(client_id, data, path)
    _check_percentage_tier(policy, tier_table, path)
    if data.get("rules"):
        rule_set = parse_rule_set(data["rules"], client_id, path)
    else:
        rule_set = policy.default_rule_set()
    log_debug(
        LogEvent.CONFIG_LOAD,
        f"Loaded client '{client_id}'",
        tiers=len(tier_table),
        rules=len(rule_set),
    )
    return ClientConfiguration(policy=policy, tier_table=tier_table, rule_set=rule_set)


def parse_clients_document(data: Any, path: Optional[str] = None) -> ClientsDocument:
    """Validate a whole configuration document.

    Raises:
        ConfigurationError: If the document or any client in it is invalid
    """
    if not isinstance(data, Mapping):
        raise InvalidConfigFormatError(
            f"Invalid configuration format: expected dictionary, got {type(data).__name__}",
            path=path,
        )
    raw_clients = data.get("clients")
    if not isinstance(raw_clients, Mapping) or not raw_clients:
        raise InvalidConfigFormatError("Configuration must define a non-empty 'clients' mapping", path=path)

    clients = {
        str(client_id): parse_client_configuration(str(client_id), client_data, path)
        for client_id, client_data in raw_clients.items()
    }
    default_client = str(data.get("default_client") or next(iter(clients)))
    if default_client not in clients:
        raise ConfigurationError(f"Default client '{default_client}' is not defined", path)

    return ClientsDocument(
        version=str(data.get("version", "1.0")),
        default_client=default_client,
        clients=MappingProxyType(clients),
        path=path,
    )


def read_config_file(path: str) -> ConfigResult:
    """Read and parse a YAML configuration file without validating it.

    Returns:
        ConfigResult: Result of the configuration loading operation
    """
    config_path = Path(path)
    if not config_path.is_file():
        error_msg = f"Configuration file not found: {path}"
        log_error(LogEvent.CONFIG_LOAD, error_msg, path=path)
        return ConfigResult(success=False, error=error_msg, path=path, not_found=True)

    try:
        content = config_path.read_text(encoding="utf-8")
        if not content.strip():
            error_msg = f"Configuration file is empty: {path}"
            log_error(LogEvent.CONFIG_LOAD, error_msg, path=path)
            return ConfigResult(success=False, error=error_msg, path=path)

        data = yaml.safe_load(content)
        if not isinstance(data, dict):
            error_msg = f"Invalid configuration format in {path}: expected dictionary, got {type(data).__name__}"
            log_error(LogEvent.CONFIG_LOAD, error_msg, path=path)
            return ConfigResult(success=False, error=error_msg, path=path)

        return ConfigResult(success=True, data=data, path=path)
    except yaml.YAMLError as e:
        error_msg = f"YAML parsing error in {path}: {e}"
        log_error(LogEvent.CONFIG_LOAD, error_msg, path=path)
        return ConfigResult(success=False, error=error_msg, exception=e, path=path)
    except OSError as e:
        error_msg = f"Error reading configuration file {path}: {e}"
        log_error(LogEvent.CONFIG_LOAD, error_msg, path=path)
        return ConfigResult(success=False, error=error_msg, exception=e, path=path)


def load_clients_file(path: str) -> ClientsDocument:
    """Read, parse and validate a client configuration file.

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        ConfigurationError: If the file cannot be parsed or fails validation
    """
    return parse_clients_document(read_config_file(path).unwrap(), path)
