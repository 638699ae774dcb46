"""Reactive state management for the VESS application.

Architecture:
- AppStateController: navigation, evaluation sessions, samples, history
- Store: Service locator for reaching the controller from any component
"""

from .app_state import AppStateController
from .store import Store

__all__ = ["AppStateController", "Store"]
