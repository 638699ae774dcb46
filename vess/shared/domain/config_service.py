"""Config service: the controller's only door to config persistence."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from vess.shared.core.reactive import StateFlow
from vess.shared.domain.models import Config

if TYPE_CHECKING:
    from vess.shared.infrastructure.persistence.config_store import ConfigStore

logger = logging.getLogger(__name__)


class ConfigService:
    """Forwards reads and writes to a ConfigStore.

    Keeps the controller independent of the storage technology, so each
    deployment target can plug in its own store.
    """

    def __init__(self, store: "ConfigStore") -> None:
        self.store = store

    def current_config(self) -> StateFlow[Config]:
        """Replay-latest stream of the evaluator config."""
        return self.store.observe()

    def update_config(self, config: Config) -> "asyncio.Task[None]":
        """Schedule ``config`` to be persisted and published.

        Must be called from a running event loop. The returned task may be
        ignored or awaited; tasks run in the order they were scheduled.
        """
        logger.debug("Scheduling config update")
        task = asyncio.get_running_loop().create_task(self.store.save(config))
        task.add_done_callback(self._report_failure)
        return task

    @staticmethod
    def _report_failure(task: "asyncio.Task[None]") -> None:
        # Fire-and-forget callers never await the task, so failures surface here
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Config update failed: {task.exception()}")

    def close(self) -> None:
        self.store.close()
