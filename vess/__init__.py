"""VESS field evaluation core."""

from .shared.core.event_bus import EventBus
from .app.state import AppStateController, Store

__all__ = ["AppStateController", "EventBus", "Store"]
