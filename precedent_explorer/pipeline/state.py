"""Pipeline state and the pure reducer that folds events into it."""

import logging
from enum import Enum
from functools import reduce
from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .events import (
    ConflictsEvent,
    HaltEvent,
    LogEvent,
    MatchesEvent,
    PipelineEvent,
    ProfileEvent,
    StepEvent,
    TrendsEvent,
)
from .models import (
    ConflictReport,
    PrecedentMatch,
    ScenarioProfile,
    TrendSummary,
    coerce_matches,
)

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    IDLE = "idle"
    PROFILING = "profiling"
    RETRIEVING = "retrieving"
    ANALYZING_CONFLICTS = "analyzing_conflicts"
    MAPPING_TRENDS = "mapping_trends"
    COMPLETE = "complete"


# step index -> status while that stage runs
STAGE_STATUSES = (
    PipelineStatus.PROFILING,
    PipelineStatus.RETRIEVING,
    PipelineStatus.ANALYZING_CONFLICTS,
    PipelineStatus.MAPPING_TRENDS,
)
LAST_STEP = len(STAGE_STATUSES) - 1


class PipelineState(BaseModel):
    """
    Externally observed state of one run.

    Immutable: every change produces a new value through ``reduce_state``.
    ``run_id`` names the run that owns the state.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    run_id: str = ""
    status: PipelineStatus = PipelineStatus.IDLE
    step: int = -1
    scenario: ScenarioProfile = Field(default_factory=ScenarioProfile)
    matches: Tuple[PrecedentMatch, ...] = ()
    conflicts: ConflictReport = Field(default_factory=ConflictReport)
    trends: TrendSummary = Field(default_factory=TrendSummary)
    logs: Tuple[str, ...] = ()

    @classmethod
    def fresh(cls, run_id: str = "", topic: str = "", log: str | None = None) -> "PipelineState":
        """Initial state for a new run."""
        return cls(
            run_id=run_id,
            scenario=ScenarioProfile(topic=topic),
            logs=(log,) if log else (),
        )

    @property
    def is_working(self) -> bool:
        return self.status not in (PipelineStatus.IDLE, PipelineStatus.COMPLETE)

    @property
    def was_halted(self) -> bool:
        return self.status is PipelineStatus.IDLE and self.step >= 0

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _append_log(state: PipelineState, message: str) -> PipelineState:
    return state.model_copy(update={"logs": state.logs + (message,)})


def _advance_step(state: PipelineState, index: int) -> PipelineState:
    if state.status is PipelineStatus.COMPLETE or state.was_halted:
        logger.warning(f"Ignoring step {index} for finished run {state.run_id}")
        return state
    if not 0 <= index <= LAST_STEP:
        logger.warning(f"Ignoring out-of-range step {index}")
        return state
    if index == state.step:
        return state
    if index != state.step + 1:
        logger.warning(f"Ignoring step {index}: current step is {state.step}")
        return state

    return state.model_copy(update={"step": index, "status": STAGE_STATUSES[index]})


def _complete(state: PipelineState, trends: TrendSummary) -> PipelineState:
    update = {"trends": TrendSummary.from_payload(trends)}
    if state.status is PipelineStatus.MAPPING_TRENDS:
        update["status"] = PipelineStatus.COMPLETE
    else:
        logger.warning(f"Trends received while {state.status.value}; status unchanged")
    return state.model_copy(update=update)


def _halt(state: PipelineState, message: Optional[str]) -> PipelineState:
    if message:
        state = _append_log(state, message)
    if state.status is PipelineStatus.COMPLETE:
        return state
    return state.model_copy(update={"status": PipelineStatus.IDLE})


def reduce_state(state: PipelineState, event: PipelineEvent) -> PipelineState:
    """
    Apply one event to ``state`` and return the next state.

    Pure: ``state`` is never modified. Payloads are re-validated so a
    hand-built event cannot smuggle an inconsistent value into the state.
    """
    if isinstance(event, LogEvent):
        return _append_log(state, event.message)
    if isinstance(event, StepEvent):
        return _advance_step(state, event.index)
    if isinstance(event, ProfileEvent):
        return state.model_copy(update={"scenario": ScenarioProfile.from_payload(event.data)})
    if isinstance(event, MatchesEvent):
        return state.model_copy(update={"matches": coerce_matches(list(event.data))})
    if isinstance(event, ConflictsEvent):
        return state.model_copy(update={"conflicts": ConflictReport.from_payload(event.data)})
    if isinstance(event, TrendsEvent):
        return _complete(state, event.data)
    if isinstance(event, HaltEvent):
        return _halt(state, event.message)

    raise TypeError(f"Unsupported pipeline event: {event!r}")


def fold_events(
    events: Iterable[PipelineEvent], initial: PipelineState | None = None
) -> PipelineState:
    """Fold ``events`` left to right, starting from ``initial`` or a fresh state."""
    return reduce(reduce_state, events, initial if initial is not None else PipelineState())
