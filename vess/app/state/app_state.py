"""Application State Controller.

Owns screen navigation, the active evaluation session, the sample being
edited and the history of completed sessions. Every piece of state is a
``StateFlow`` the UI listens to; commands mutate it synchronously, one at a
time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from vess.shared.core import events
from vess.shared.core.errors import InvalidInputError, PreconditionViolation
from vess.shared.core.event_bus import EventBus, EventPayload
from vess.shared.core.reactive import StateFlow, Subscription
from vess.shared.domain.config_service import ConfigService
from vess.shared.domain.models import (
    Config,
    EvaluationSession,
    Sample,
    Screen,
    new_id,
    now_millis,
)
from vess.shared.domain.scoring import ScoreSummary, sample_score, session_score, summarize

logger = logging.getLogger(__name__)


class AppStateController:
    """Navigation state machine and session/sample lifecycle manager.

    Commands can be called directly or dispatched through the EventBus
    command topics once ``initialize()`` has run.

    Usage:
        controller = AppStateController(config_service, event_bus)
        await controller.initialize()
        controller.start_session("Visit A")
        controller.commit_sample(controller.new_sample(num_layers=2))
        controller.complete_session()
    """

    def __init__(
        self,
        config_service: ConfigService,
        event_bus: Optional[EventBus] = None,
        *,
        require_description: bool = True,
        clock: Callable[[], int] = now_millis,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        """Initialize controller state.

        Args:
            config_service: Source of the evaluator config
            event_bus: Bus for command handlers and notifications
            require_description: Reject sessions started with a blank description
            clock: Epoch-millisecond time source
            id_factory: Generator for session and sample ids
        """
        self.config_service = config_service
        self.bus = event_bus
        self.require_description = require_description
        self._clock = clock
        self._new_id = id_factory

        # Navigation
        self.current_screen: StateFlow[Screen] = StateFlow(Screen.MENU, name="current_screen")

        # Evaluation lifecycle
        self.active_session: StateFlow[Optional[EvaluationSession]] = StateFlow(None, name="active_session")
        self.sample_in_progress: StateFlow[Optional[Sample]] = StateFlow(None, name="sample_in_progress")
        self.session_history: StateFlow[Tuple[EvaluationSession, ...]] = StateFlow((), name="session_history")

        # Evaluator config, forwarded from the config service
        config_flow = config_service.current_config()
        self.current_config: StateFlow[Config] = StateFlow(config_flow.value, name="current_config")
        self._config_subscription: Optional[Subscription] = config_flow.listen(self._on_config)

        self._started = False

    async def initialize(self) -> None:
        """Subscribe the command handlers to the EventBus.

        Safe to call more than once.
        """
        if self._started or self.bus is None:
            return

        await self.bus.subscribe_many({
            events.TOPIC_NAV_SELECT: self._handle_nav_select,
            events.TOPIC_SESSION_START: self._handle_session_start,
            events.TOPIC_SAMPLE_COMMIT: self._handle_sample_commit,
            events.TOPIC_SESSION_COMPLETE: self._handle_session_complete,
            events.TOPIC_SAMPLE_DISCARD: self._handle_sample_discard,
            events.TOPIC_CONFIG_UPDATE: self._handle_config_update,
        })
        self._started = True
        logger.info("App state controller listening for commands")

    def dispose(self) -> None:
        """Stop forwarding config updates."""
        if self._config_subscription is not None:
            self._config_subscription.dispose()
            self._config_subscription = None

    # --- Public Actions ---

    def navigate_to(self, screen: Union[Screen, str]) -> None:
        """Switch to ``screen``; every screen is reachable from every other.

        Raises:
            InvalidInputError: If ``screen`` does not name a known screen
        """
        if not isinstance(screen, str):
            raise InvalidInputError(f"Unknown screen: {screen!r}")
        if not isinstance(screen, Screen):
            try:
                screen = Screen(screen.strip().upper())
            except ValueError:
                raise InvalidInputError(f"Unknown screen: {screen}") from None
        logger.debug(f"Navigate {self.current_screen.value.value} -> {screen.value}")
        self.current_screen.value = screen

    def start_session(self, description: str) -> EvaluationSession:
        """Start a new evaluation and open the sample screen.

        Raises:
            InvalidInputError: If the description is blank and descriptions are required
        """
        description = (description or "").strip()
        if self.require_description and not description:
            raise InvalidInputError("Session description must not be empty")

        previous = self.active_session.value
        if previous is not None:
            logger.warning(
                f"Discarding active session {previous.id} with {len(previous.samples)} sample(s)"
            )

        session = EvaluationSession(
            id=self._new_id(),
            description=description,
            start_time=self._clock(),
        )
        self.active_session.value = session
        self.sample_in_progress.value = None
        self.navigate_to(Screen.EVALUATION_SAMPLE)
        logger.info(f"Started session {session.id}: {description!r}")
        return session

    def commit_sample(self, sample: Sample) -> Optional[EvaluationSession]:
        """Append ``sample`` to the active session and make it the sample in progress.

        No-op without an active session.
        """
        try:
            session = self._require_active_session("commit_sample")
        except PreconditionViolation as exc:
            logger.debug(str(exc))
            return None

        updated = session.with_sample(sample)
        self.active_session.value = updated
        self.sample_in_progress.value = sample
        logger.info(f"Committed sample {sample.id} as #{len(updated.samples)} of session {updated.id}")
        return updated

    def complete_session(self) -> Optional[EvaluationSession]:
        """Close the active session and move it to history.

        Returns:
            The completed session, or None when no session was active
        """
        try:
            session = self._require_active_session("complete_session")
        except PreconditionViolation as exc:
            logger.debug(str(exc))
            return None

        completed = session.completed(self._clock())
        self.session_history.value = self.session_history.value + (completed,)
        self.active_session.value = None
        self.sample_in_progress.value = None
        logger.info(
            f"Completed session {completed.id} with {len(completed.samples)} sample(s); "
            f"history size {len(self.session_history.value)}"
        )
        return completed

    def discard_sample_in_progress(self) -> None:
        """Drop the sample in progress; committed samples stay in the session."""
        self.sample_in_progress.value = None

    def set_sample_in_progress(self, sample: Optional[Sample]) -> None:
        self.sample_in_progress.value = sample

    def resize_sample_in_progress(self, num_layers: int) -> Optional[Sample]:
        """Change the layer count of the sample in progress.

        Growing appends empty layers, shrinking truncates from the end; the
        layers that remain keep their data.

        Raises:
            InvalidInputError: If ``num_layers`` is below 1
        """
        sample = self.sample_in_progress.value
        if sample is None:
            logger.debug("resize_sample_in_progress ignored: no sample in progress")
            return None

        resized = sample.with_layer_count(num_layers)
        self.sample_in_progress.value = resized
        return resized

    def new_sample(self, **fields: Any) -> Sample:
        """Build a draft sample numbered after the active session's samples.

        The evaluator defaults to the configured name. The draft is not
        committed or set in progress.
        """
        fields.setdefault("id", self._new_id())
        fields.setdefault("name", f"Sample {self.sample_number}")
        fields.setdefault("evaluator", self.current_config.value.name)
        fields.setdefault("timestamp", self._clock())
        return Sample(**fields)

    def update_config(self, config: Config) -> "asyncio.Task[None]":
        """Persist a new evaluator config through the config service."""
        return self.config_service.update_config(config)

    # --- Derived State ---

    @property
    def sample_number(self) -> int:
        """1-based number of the next sample, recomputed from the session."""
        session = self.active_session.value
        return len(session.samples) + 1 if session is not None else 1

    @property
    def last_completed_session(self) -> Optional[EvaluationSession]:
        history = self.session_history.value
        return history[-1] if history else None

    @property
    def sample_result(self) -> ScoreSummary:
        sample = self.sample_in_progress.value
        return summarize(sample_score(sample) if sample is not None else None)

    @property
    def session_result(self) -> ScoreSummary:
        """Score of the active session, or of the last completed one."""
        session = self.active_session.value or self.last_completed_session
        return summarize(session_score(session) if session is not None else None)

    # --- Internals ---

    def _require_active_session(self, operation: str) -> EvaluationSession:
        session = self.active_session.value
        if session is None:
            raise PreconditionViolation(f"{operation} ignored: no active session")
        return session

    def _on_config(self, config: Config) -> None:
        self.current_config.value = config

    async def _publish(self, topic: str, payload: EventPayload) -> None:
        if self.bus is not None:
            await self.bus.publish(topic, payload)

    async def _reject(self, command: str, exc: Exception) -> None:
        logger.warning(f"Rejected {command}: {exc}")
        await self._publish(events.TOPIC_COMMAND_REJECTED, events.create_command_rejected_event(command, str(exc)))

    # --- Event Handlers ---

    async def _handle_nav_select(self, payload: EventPayload) -> None:
        try:
            self.navigate_to(payload.get("screen", ""))
        except InvalidInputError as exc:
            await self._reject(events.TOPIC_NAV_SELECT, exc)

    async def _handle_session_start(self, payload: EventPayload) -> None:
        try:
            session = self.start_session(payload.get("description", ""))
        except InvalidInputError as exc:
            await self._reject(events.TOPIC_SESSION_START, exc)
            return
        await self._publish(
            events.TOPIC_SESSION_STARTED,
            events.create_session_started_event(session.id, session.description),
        )

    async def _handle_sample_commit(self, payload: EventPayload) -> None:
        sample = payload.get("sample")
        try:
            if isinstance(sample, Mapping):
                sample = self.new_sample(**sample)
            if not isinstance(sample, Sample):
                raise InvalidInputError("sample.commit needs a sample")
        except (InvalidInputError, ValueError, TypeError) as exc:
            # pydantic.ValidationError is a ValueError
            await self._reject(events.TOPIC_SAMPLE_COMMIT, exc)
            return

        updated = self.commit_sample(sample)
        if updated is not None:
            await self._publish(
                events.TOPIC_SAMPLE_COMMITTED,
                events.create_sample_committed_event(updated.id, sample.id, len(updated.samples)),
            )

    async def _handle_session_complete(self, payload: EventPayload) -> None:
        completed = self.complete_session()
        if completed is not None:
            result = summarize(session_score(completed))
            await self._publish(
                events.TOPIC_SESSION_COMPLETED,
                events.create_session_completed_event(completed.id, result.score, result.decision.value),
            )

    async def _handle_sample_discard(self, payload: EventPayload) -> None:
        self.discard_sample_in_progress()

    async def _handle_config_update(self, payload: EventPayload) -> None:
        config = payload.get("config")
        try:
            if isinstance(config, Mapping):
                config = Config.from_record(dict(config))
            if not isinstance(config, Config):
                raise InvalidInputError("config.update needs a config")
        except (InvalidInputError, ValueError) as exc:
            await self._reject(events.TOPIC_CONFIG_UPDATE, exc)
            return
        await self.update_config(config)
