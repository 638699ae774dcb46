"""Canonical event definitions for the VESS core."""

from __future__ import annotations

from typing import Any, Optional

from .event_bus import EventPayload

# Commands (UI -> controller)
TOPIC_NAV_SELECT = "nav.select"
TOPIC_SESSION_START = "session.start"
TOPIC_SAMPLE_COMMIT = "sample.commit"
TOPIC_SESSION_COMPLETE = "session.complete"
TOPIC_SAMPLE_DISCARD = "sample.discard"
TOPIC_CONFIG_UPDATE = "config.update"

# Notifications (controller -> listeners)
TOPIC_SESSION_STARTED = "session.started"
TOPIC_SAMPLE_COMMITTED = "sample.committed"
TOPIC_SESSION_COMPLETED = "session.completed"
TOPIC_COMMAND_REJECTED = "command.rejected"


def create_nav_select_event(screen: str) -> EventPayload:
    """Create a navigation command."""
    return {"screen": screen}


def create_session_start_event(description: str) -> EventPayload:
    """Create a start-session command."""
    return {"description": description}


def create_sample_commit_event(sample: Any) -> EventPayload:
    """Create a commit-sample command.

    Args:
        sample: A ``Sample`` or a mapping of its fields
    """
    return {"sample": sample}


def create_config_update_event(config: Any) -> EventPayload:
    """Create a config update command (``Config`` or mapping)."""
    return {"config": config}


def create_session_started_event(session_id: str, description: str) -> EventPayload:
    return {
        "session_id": session_id,
        "description": description,
    }


def create_sample_committed_event(session_id: str, sample_id: str, sample_number: int) -> EventPayload:
    """Create a sample committed notification.

    ``sample_number`` is the position of the sample in its session (1-based).
    """
    return {
        "session_id": session_id,
        "sample_id": sample_id,
        "sample_number": sample_number,
    }


def create_session_completed_event(
    session_id: str,
    score: Optional[float],
    decision: str,
) -> EventPayload:
    return {
        "session_id": session_id,
        "score": score,
        "decision": decision,
    }


def create_command_rejected_event(command: str, reason: str) -> EventPayload:
    """Create a rejected command notification."""
    return {
        "command": command,
        "reason": reason,
    }
