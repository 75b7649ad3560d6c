"""JSON output formatter for CLI."""

import json
import sys
from decimal import Decimal
from enum import Enum as _Enum
from typing import Any, Dict, List, Optional, TextIO

from ...config_loader import ClientConfiguration
from ...money import to_dollars


def _default_serializer(obj: Any) -> Any:
    """Serialize otherwise non-JSON-serializable objects.

    - Decimal -> string, so money keeps its exact cents
    - Enum -> value (fallback to name)
    - Fallback -> str(obj)
    """
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, _Enum):
        return getattr(obj, "value", obj.name)
    return str(obj)


def format_json(data: Any, output: Optional[TextIO] = None, indent: int = 2) -> None:
    """Format data as JSON and write to output.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
        indent: JSON indentation level
    """
    if output is None:
        output = sys.stdout

    json.dump(
        data,
        output,
        indent=indent,
        ensure_ascii=False,
        sort_keys=True,
        default=_default_serializer,
    )
    output.write("\n")


def format_clients_list_json(rows: List[Dict[str, Any]], default_client: str) -> Dict[str, Any]:
    """Format the clients list for JSON output."""
    return {"clients": rows, "default_client": default_client, "count": len(rows)}


def _cents(value: Optional[int]) -> Optional[Decimal]:
    return None if value is None else to_dollars(value)


def format_client_json(configuration: ClientConfiguration) -> Dict[str, Any]:
    """Describe a client's tiers, policy and rules in dollars.

    Args:
        configuration: The client's configuration

    Returns:
        Formatted data structure
    """
    policy = configuration.policy
    threshold = policy.percentage_tier_threshold
    return {
        "client_id": policy.client_id,
        "client_name": policy.client_name,
        "vendor_name": policy.vendor_name,
        "description": policy.description,
        "active": policy.is_active,
        "tiers": [
            {
                "tier": index,
                "headcount": [tier.min_headcount, tier.max_headcount],
                "food_cost": [_cents(tier.min_food_cost_cents), _cents(tier.max_food_cost_cents)],
                "base_fee": _cents(tier.customer_base_fee_cents),
                "base_fee_within_radius": _cents(tier.customer_base_fee_within_radius_cents),
                "driver_base_pay": _cents(tier.driver_base_pay_cents),
            }
            for index, tier in enumerate(configuration.tier_table, start=1)
        ],
        "policy": {
            "minimum_customer_fee": _cents(policy.minimum_customer_fee_cents),
            "mileage_threshold_miles": policy.mileage_threshold_miles,
            "customer_mileage_rate": _cents(policy.customer_mileage_rate_cents_per_mile),
            "driver_mileage_rate": _cents(policy.driver_mileage_rate_cents_per_mile),
            "driver_minimum_mileage_pay": _cents(policy.driver_minimum_mileage_pay_cents),
            "include_bridge_toll_in_customer_fee": policy.include_bridge_toll_in_customer_fee,
            "default_bridge_toll": _cents(policy.default_bridge_toll_cents),
            "percentage_tier": None
            if threshold is None
            else {
                "headcount": threshold.headcount,
                "food_cost": _cents(threshold.food_cost_cents),
                "rate": policy.percentage_rate,
            },
            "daily_drive_discount_per_extra_drive": _cents(policy.daily_drive_discount_cents_per_extra_drive),
            "bonus": _cents(policy.bonus_flat_cents),
            "bonus_suppressed_by_direct_tip": policy.bonus_suppressed_by_direct_tip,
            "ready_set_fee": _cents(policy.ready_set_fee_cents),
            "ready_set_fee_matches_delivery_fee": policy.ready_set_fee_matches_delivery_fee,
            "bridge_toll_areas": list(policy.bridge_toll_areas),
            "manual_review_headcount": policy.manual_review_headcount,
        },
        "rules": [
            {
                "id": rule.id,
                "type": rule.rule_type,
                "name": rule.rule_name,
                "priority": rule.priority,
                "formula": type(rule.formula).__name__,
                "description": rule.description,
            }
            for rule in configuration.rule_set
        ],
    }


def format_paths_json(paths: Dict[str, Any]) -> Dict[str, Any]:
    """Format configuration paths for JSON output."""
    return {
        "config_sources": paths,
        "resolution_order": [
            "DPE_CLIENTS_PATH environment variable",
            "User config directory",
            "Bundled package config",
        ],
    }
