"""Session manager that owns the single active precedent run."""

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional, Set

from .. import config
from .cancellation import CancellationToken
from .events import HaltEvent
from .precedent_pipeline import PrecedentPipeline
from .state import PipelineState, PipelineStatus, reduce_state

logger = logging.getLogger(__name__)

INTERRUPTED_LOG = "[System] Process interrupted by user."


@dataclass
class PipelineSession:
    """One run: its inputs, its token and the task driving it."""

    query: str
    language: str
    token: CancellationToken
    task: Optional[asyncio.Task] = None

    @property
    def run_id(self) -> str:
        return self.token.run_id

    @property
    def done(self) -> bool:
        return self.task is not None and self.task.done()


class PipelineController:
    """
    Starts, cancels and observes precedent runs.

    At most one run is active. Every event is folded only if it comes from
    the current session and that session's token is unsignaled, so a
    superseded or cancelled run can never touch a newer run's state.

    The state is readable at any time through ``state`` (pull) or streamed
    through ``watch()`` (push).
    """

    def __init__(
        self,
        pipeline: PrecedentPipeline,
        languages: Dict[str, str] | None = None,
    ):
        self.pipeline = pipeline
        self.languages = languages or config.SUPPORTED_LANGUAGES
        self._state = PipelineState()
        self._session: Optional[PipelineSession] = None
        self._watchers: Set[asyncio.Queue] = set()
        self._retired: Set[asyncio.Task] = set()

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def session(self) -> Optional[PipelineSession]:
        return self._session

    @property
    def is_active(self) -> bool:
        session = self._session
        return (
            session is not None
            and not session.done
            and not session.token.is_signaled()
            and self._state.status is not PipelineStatus.COMPLETE
        )

    def start(self, query: str, language: str = config.DEFAULT_LANGUAGE) -> Optional[str]:
        """
        Begin a new run and return its run id.

        A run already in flight is cancelled first and the state is reset,
        so the caller never sees fields from two runs. Blank queries are
        ignored (returns None). Must be called from a running event loop.

        Raises:
            ValueError: If ``language`` is not supported
        """
        query = (query or "").strip()
        if not query:
            logger.info("Ignoring start request with an empty query")
            return None
        if language not in self.languages:
            raise ValueError(
                f"Unsupported language: {language} (expected one of {sorted(self.languages)})"
            )

        loop = asyncio.get_running_loop()

        previous = self._session
        if previous is not None and not previous.done:
            previous.token.signal("superseded")
            logger.info(f"Run {previous.run_id} superseded by a new run")
            if previous.task is not None:
                self._retired.add(previous.task)
                previous.task.add_done_callback(self._retired.discard)

        session = PipelineSession(query=query, language=language, token=CancellationToken())
        self._session = session
        self._publish(
            PipelineState.fresh(
                run_id=session.run_id,
                topic=query,
                log=f"[System] Initializing Precedent Explorer for: {query}",
            )
        )
        session.task = loop.create_task(
            self._drive(session), name=f"precedent-run-{session.run_id}"
        )
        return session.run_id

    def cancel(self) -> None:
        """Interrupt the active run. No-op when nothing is running."""
        if not self.is_active:
            logger.debug("cancel() with no active run")
            return

        session = self._session
        session.token.signal("cancelled by user")
        self._publish(reduce_state(self._state, HaltEvent(INTERRUPTED_LOG)))
        self._finish()
        logger.info(f"Run {session.run_id} cancelled by user")

    async def wait(self) -> PipelineState:
        """Wait for the current run's task to finish and return the state."""
        session = self._session
        if session is not None and session.task is not None:
            await asyncio.wait({session.task})
        return self._state

    async def shutdown(self) -> None:
        """Cancel any active run and wait for its task and any superseded ones to exit."""
        self.cancel()
        await self.wait()
        if self._retired:
            await asyncio.wait(set(self._retired))

    async def watch(self) -> AsyncIterator[PipelineState]:
        """
        Yield the current state, then every new state until the run ends.

        Returns right after the first state when no run is active.
        """
        queue: asyncio.Queue = asyncio.Queue()
        self._watchers.add(queue)
        try:
            yield self._state
            if not self.is_active:
                return
            while True:
                state = await queue.get()
                if state is None:
                    return
                yield state
        finally:
            self._watchers.discard(queue)

    def _owns(self, session: PipelineSession) -> bool:
        return session is self._session and not session.token.is_signaled()

    async def _drive(self, session: PipelineSession) -> None:
        logger.info(f"Run {session.run_id} started ({session.language}): {session.query}")
        try:
            events = self.pipeline.run(session.query, session.language, session.token)
            async with aclosing(events):
                async for event in events:
                    if not self._owns(session):
                        logger.debug(
                            f"Discarding {event.kind} event from stale run {session.run_id}"
                        )
                        break
                    self._publish(reduce_state(self._state, event))

        except Exception as e:
            logger.error(f"Run {session.run_id} crashed: {e}", exc_info=True)
            if self._owns(session):
                self._publish(
                    reduce_state(self._state, HaltEvent(f"[Error] Pipeline aborted: {e}"))
                )

        if not self._owns(session):
            return

        if self._state.status is PipelineStatus.COMPLETE:
            logger.info(f"Run {session.run_id} complete")
        else:
            logger.warning(f"Run {session.run_id} ended at step {self._state.step} without completing")
            self._publish(reduce_state(self._state, HaltEvent()))
        self._finish()

    def _publish(self, state: PipelineState) -> None:
        self._state = state
        for queue in self._watchers:
            queue.put_nowait(state)

    def _finish(self) -> None:
        for queue in self._watchers:
            queue.put_nowait(None)
