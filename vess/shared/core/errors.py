"""Error taxonomy for the VESS core."""

from __future__ import annotations


class VessError(Exception):
    """Base class for all VESS core errors."""


class InvalidInputError(VessError, ValueError):
    """A command was rejected because its input is invalid. State is unchanged."""


class PreconditionViolation(VessError):
    """An operation requiring an active session was invoked without one.

    The controller absorbs this as a no-op; it never reaches the UI.
    """


class PersistenceError(VessError):
    """Durable storage could not be read or written."""


class PersistenceDeserializationError(PersistenceError):
    """The persisted config record is corrupted or unreadable."""
