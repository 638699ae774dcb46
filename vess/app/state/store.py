"""Global State Store - Service Locator Pattern.

Gives UI components one place to reach the controller and the config
service. The store is initialized exactly once by the bootstrap code.
"""

from __future__ import annotations

from typing import Optional

from vess.app.state.app_state import AppStateController
from vess.shared.core.event_bus import EventBus
from vess.shared.domain.config_service import ConfigService


class Store:
    """Global state store for the VESS application.

    Usage:
        # During app initialization
        Store.initialize(event_bus, config_service)

        # In any UI component
        store = Store.get()
        store.app.navigate_to(Screen.HISTORY)
    """

    _instance: Optional['Store'] = None

    def __init__(
        self,
        event_bus: EventBus,
        config_service: ConfigService,
        require_description: bool = True,
    ) -> None:
        """Build the store. Use Store.initialize() instead of calling directly."""
        self.bus = event_bus
        self.config = config_service
        self.app = AppStateController(
            config_service,
            event_bus,
            require_description=require_description,
        )

    @classmethod
    def initialize(
        cls,
        event_bus: EventBus,
        config_service: ConfigService,
        require_description: bool = True,
    ) -> 'Store':
        """Initialize the global store instance.

        Raises:
            RuntimeError: If store is already initialized
        """
        if cls._instance is not None:
            raise RuntimeError("Store already initialized!")

        cls._instance = cls(event_bus, config_service, require_description)
        return cls._instance

    @classmethod
    def get(cls) -> 'Store':
        """Get the global store instance.

        Raises:
            RuntimeError: If store has not been initialized
        """
        if cls._instance is None:
            raise RuntimeError("Store not initialized! Call Store.initialize() first.")
        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None

    @classmethod
    def reset(cls) -> None:
        """Dispose and forget the store instance. Primarily used for testing."""
        if cls._instance is not None:
            cls._instance.app.dispose()
            cls._instance.bus.clear()
        cls._instance = None
