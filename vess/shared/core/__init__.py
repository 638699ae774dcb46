"""
Shared Core Module
==================

Event system, reactive values and the error taxonomy.

Application settings live in ``vess.shared.core.configuration`` and are
imported from there directly.
"""

# Event System
from .event_bus import EventBus, EventPayload
from . import events

# Reactive state
from .reactive import StateFlow, Subscription, ValueStream

# Errors
from .errors import (
    InvalidInputError,
    PersistenceDeserializationError,
    PersistenceError,
    PreconditionViolation,
    VessError,
)

__all__ = [
    # Event System
    "EventBus",
    "EventPayload",
    "events",
    # Reactive
    "StateFlow",
    "Subscription",
    "ValueStream",
    # Errors
    "VessError",
    "InvalidInputError",
    "PreconditionViolation",
    "PersistenceError",
    "PersistenceDeserializationError",
]
