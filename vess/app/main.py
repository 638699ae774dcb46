"""VESS - application bootstrap.

Builds the platform context, the config store for the target, the config
service and the global Store, then hands control to the UI layer (not part
of this package). Run directly for a headless smoke start.
"""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Any, MutableMapping, Optional

from dotenv import load_dotenv

from vess.app.state import Store
from vess.shared.core.configuration import SystemSettings, get_settings_manager
from vess.shared.core.event_bus import EventBus
from vess.shared.domain.config_service import ConfigService
from vess.shared.domain.scoring import format_score
from vess.shared.infrastructure.persistence.factory import build_config_store
from vess.shared.infrastructure.platform import PlatformContext

logger = logging.getLogger(__name__)

LOG_FILENAME = "vess.log"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(settings: SystemSettings) -> Optional[Path]:
    """Configure root logging: rotating file for everything, console for warnings.

    Returns:
        Path of the log file, or None when file logging is disabled
    """
    log_settings = settings.logging
    file_level = _LOG_LEVELS.get(log_settings.level.upper(), logging.DEBUG)
    console_level = _LOG_LEVELS.get(log_settings.console_level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_level, console_level))
    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    log_file_path: Optional[Path] = None
    if log_settings.file_enabled:
        log_dir = Path(log_settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file_path = log_dir / LOG_FILENAME
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    ))
    root_logger.addHandler(console_handler)

    # Suppress verbose third-party library logs
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logger.info(f"Logging configured: file={log_file_path}, console={logging.getLevelName(console_level)}+")
    return log_file_path


def build_platform_context(
    settings: SystemSettings,
    preferences: Optional[MutableMapping[str, Any]] = None,
) -> PlatformContext:
    """Create the single platform context for this process."""
    return PlatformContext(
        target=settings.storage.target,
        data_dir=Path(settings.storage.data_dir),
        preferences=preferences,
    )


async def bootstrap(
    settings: Optional[SystemSettings] = None,
    context: Optional[PlatformContext] = None,
) -> Store:
    """Wire storage, services and state, and start listening for commands.

    Args:
        settings: Application settings (loaded from env/files when omitted)
        context: Platform context (derived from settings when omitted)

    Returns:
        The initialized global Store
    """
    settings = settings or get_settings_manager().get_settings()
    context = context or build_platform_context(settings)

    store = build_config_store(context, settings.storage, settings.evaluation.default_language)
    config_service = ConfigService(store)
    event_bus = EventBus()

    app_store = Store.initialize(
        event_bus,
        config_service,
        require_description=settings.evaluation.require_description,
    )
    await app_store.app.initialize()
    logger.info(f"VESS core ready (target={context.target}, data_dir={context.data_dir})")
    return app_store


async def shutdown(app_store: Store) -> None:
    """Flush pending events and release storage."""
    await app_store.bus.wait_until_idle()
    app_store.config.close()
    Store.reset()
    logger.info("VESS core stopped")


async def _smoke_run() -> None:
    app_store = await bootstrap()
    try:
        controller = app_store.app
        config = controller.current_config.value
        logger.warning(
            f"Screen={controller.current_screen.value.value} "
            f"evaluator={config.name or '<unset>'} language={config.language} "
            f"score={format_score(controller.session_result.score)}"
        )
    finally:
        await shutdown(app_store)


def main() -> None:
    # Load environment variables from .env in the working directory
    load_dotenv(dotenv_path=Path.cwd() / ".env")
    settings = get_settings_manager(Path(os.getenv("VESS_SETTINGS_DIR", "settings"))).get_settings()
    configure_logging(settings)
    asyncio.run(_smoke_run())


if __name__ == "__main__":
    main()
