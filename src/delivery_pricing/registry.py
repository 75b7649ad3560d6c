"""Client configuration registry.

This module provides the PricingRegistry class, which loads client
configurations and hands out the policy, tier table and engine for a client
identifier.

The registry publishes an immutable :class:`RegistrySnapshot`. A reload builds
and validates a complete new snapshot, then swaps the reference under a lock.
A calculation running during a reload sees either the old configuration or
the new one, never a mix.

Typical usage:

    from delivery_pricing import get_registry  # singleton helper

    # or, for a custom configuration
    from delivery_pricing import PricingRegistry, RegistryConfig
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .config_loader import ClientConfiguration, ClientsDocument, load_clients_file
from .config_paths import get_clients_config_path
from .errors import ClientNotFoundError
from .logging import LogEvent, log_info, log_warning
from .policy import ClientPricingPolicy


class RegistryConfig:
    """Configuration for the pricing registry."""

    def __init__(self, clients_path: Optional[str] = None):
        """Initialize registry configuration.

        Args:
            clients_path: Custom path to the clients YAML file. If None, the
                          path is resolved from DPE_CLIENTS_PATH, the user
                          config directory, then the bundled file.
        """
        self.clients_path = clients_path or get_clients_config_path()


@dataclass(frozen=True)
class RegistrySnapshot:
    """An immutable view of every loaded client."""

    version: str
    default_client: str
    clients: Mapping[str, ClientConfiguration]
    path: Optional[str] = None

    @classmethod
    def from_document(cls, document: ClientsDocument) -> "RegistrySnapshot":
        return cls(
            version=document.version,
            default_client=document.default_client,
            clients=document.clients,
            path=document.path,
        )


class PricingRegistry:
    """Registry of client pricing configurations.

    This class provides a centralized way to look up the pricing
    configuration of a client and price orders with it.
    """

    _default_instance: Optional["PricingRegistry"] = None
    _instance_lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> "PricingRegistry":
        """Get the default registry instance.

        Returns:
            The singleton :class:`PricingRegistry` instance.
        """
        return cls.get_default()

    @classmethod
    def get_default(cls) -> "PricingRegistry":
        """Get the default registry instance with standard configuration.

        Returns:
            The default PricingRegistry instance
        """
        with cls._instance_lock:
            if cls._default_instance is None:
                cls._default_instance = cls()
            return cls._default_instance

    def __init__(self, config: Optional[RegistryConfig] = None):
        """Initialize a new registry instance.

        Args:
            config: Configuration for this registry instance. If None, default
                   configuration is used.

        Raises:
            ConfigurationError: If the configuration file is missing or invalid
        """
        self.config = config or RegistryConfig()
        self._snapshot_lock = threading.RLock()
        self._snapshot = self._build_snapshot(self.config.clients_path)

    def _build_snapshot(self, path: str) -> RegistrySnapshot:
        snapshot = RegistrySnapshot.from_document(load_clients_file(path))
        log_info(
            LogEvent.PRICING_REGISTRY,
            f"Loaded {len(snapshot.clients)} client configurations",
            path=path,
            version=snapshot.version,
        )
        return snapshot

    @property
    def snapshot(self) -> RegistrySnapshot:
        """The currently published snapshot."""
        return self._snapshot

    def reload(self, clients_path: Optional[str] = None) -> RegistrySnapshot:
        """Reload configuration and atomically publish it.

        The new file is fully parsed and validated before anything is
        replaced; on failure the current snapshot stays in place and the
        error propagates.

        Args:
            clients_path: Load from this path instead of the one the current
                snapshot came from. Later reloads keep using it; the shared
                RegistryConfig is left unchanged.

        Returns:
            The newly published snapshot
        """
        path = clients_path or self._snapshot.path or self.config.clients_path
        snapshot = self._build_snapshot(path)
        with self._snapshot_lock:
            self._snapshot = snapshot
        return snapshot

    @property
    def default_client(self) -> str:
        return self._snapshot.default_client

    def get_configuration(self, client_id: str) -> ClientConfiguration:
        """Get a client's configuration.

        Args:
            client_id: Client identifier

        Returns:
            The client's ClientConfiguration

        Raises:
            ClientNotFoundError: If the client is not configured
        """
        snapshot = self._snapshot
        try:
            return snapshot.clients[client_id]
        except KeyError:
            raise ClientNotFoundError(
                f"Client '{client_id}' is not configured",
                client_id=client_id,
                available_clients=sorted(snapshot.clients),
            ) from None

    def get_policy(self, client_id: str) -> ClientPricingPolicy:
        """Get a client's pricing policy."""
        return self.get_configuration(client_id).policy

    def resolve(self, client_id: Optional[str] = None) -> ClientConfiguration:
        """Get a client's configuration, falling back to the default client.

        An unknown identifier is logged and priced with the default client
        rather than failing the calculation.
        """
        snapshot = self._snapshot
        if client_id is None:
            return snapshot.clients[snapshot.default_client]
        configuration = snapshot.clients.get(client_id)
        if configuration is None:
            log_warning(
                LogEvent.PRICING_REGISTRY,
                f"Unknown client '{client_id}', using default client '{snapshot.default_client}'",
                client_id=client_id,
            )
            return snapshot.clients[snapshot.default_client]
        return configuration

    def list_clients(self, active_only: bool = False) -> List[str]:
        """List configured client identifiers.

        Args:
            active_only: Only include clients marked active

        Returns:
            Sorted client identifiers
        """
        clients = self._snapshot.clients
        return sorted(
            client_id for client_id, configuration in clients.items()
            if configuration.policy.is_active or not active_only
        )

    def get_data_info(self) -> Dict[str, Any]:
        """Describe where the current configuration came from."""
        snapshot = self._snapshot
        return {
            "path": snapshot.path,
            "version": snapshot.version,
            "default_client": snapshot.default_client,
            "client_count": len(snapshot.clients),
        }

    @staticmethod
    def cleanup() -> None:
        """Clean up the registry instance."""
        with PricingRegistry._instance_lock:
            PricingRegistry._default_instance = None


def get_registry() -> PricingRegistry:
    """Get the pricing registry singleton instance.

    Returns:
        PricingRegistry: The singleton registry instance
    """
    return PricingRegistry.get_instance()
