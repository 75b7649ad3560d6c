"""Shared fixtures for the pricing engine tests."""

from pathlib import Path
from typing import Any, Callable, Dict, Generator

import pytest
import yaml

from delivery_pricing.config_paths import CLIENTS_FILENAME, get_package_config_dir
from delivery_pricing.registry import PricingRegistry, RegistryConfig

BUNDLED_CLIENTS = str(get_package_config_dir() / CLIENTS_FILENAME)


@pytest.fixture(autouse=True)
def reset_default_registry(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Point the default registry at the bundled file and reset it around each test."""
    monkeypatch.setenv("DPE_CLIENTS_PATH", BUNDLED_CLIENTS)
    PricingRegistry.cleanup()
    yield
    PricingRegistry.cleanup()


@pytest.fixture
def registry() -> PricingRegistry:
    """Registry loaded from the bundled client configurations."""
    return PricingRegistry(RegistryConfig(clients_path=BUNDLED_CLIENTS))


@pytest.fixture
def minimal_client() -> Dict[str, Any]:
    """A small, valid client definition."""
    return {
        "client_name": "Test Client",
        "tiers": [
            {"headcount": [0, 24], "food_cost": [0, 299.99], "base_fee": 60, "base_fee_within_radius": 30},
            {"headcount": [25, None], "food_cost": [300, None], "base_fee": 70, "base_fee_within_radius": 40},
        ],
        "policy": {"customer_mileage_rate": 3.00, "driver_mileage_rate": 0.70},
    }


@pytest.fixture
def write_clients(tmp_path: Path) -> Callable[..., str]:
    """Write a clients document to a temporary YAML file and return its path."""

    def _write(clients: Dict[str, Any], name: str = CLIENTS_FILENAME, **extra: Any) -> str:
        path = tmp_path / name
        path.write_text(yaml.safe_dump({"version": "1.0", "clients": clients, **extra}), encoding="utf-8")
        return str(path)

    return _write
