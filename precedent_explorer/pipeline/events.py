"""Events streamed by the precedent pipeline.

The executor emits only the six protocol kinds (``log``, ``step``,
``profile``, ``matches``, ``conflicts``, ``trends``). ``halt`` is folded
by the controller when a run is interrupted or fails.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Tuple, Union

from .models import (
    ConflictReport,
    PrecedentMatch,
    ScenarioProfile,
    TrendSummary,
    coerce_matches,
)


@dataclass(frozen=True)
class LogEvent:
    kind: ClassVar[str] = "log"
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "message": self.message}


@dataclass(frozen=True)
class StepEvent:
    kind: ClassVar[str] = "step"
    index: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "index": self.index}


@dataclass(frozen=True)
class ProfileEvent:
    kind: ClassVar[str] = "profile"
    data: ScenarioProfile

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "data": self.data.to_dict()}


@dataclass(frozen=True)
class MatchesEvent:
    kind: ClassVar[str] = "matches"
    data: Tuple[PrecedentMatch, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "data": [match.to_dict() for match in self.data]}


@dataclass(frozen=True)
class ConflictsEvent:
    kind: ClassVar[str] = "conflicts"
    data: ConflictReport

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "data": self.data.to_dict()}


@dataclass(frozen=True)
class TrendsEvent:
    kind: ClassVar[str] = "trends"
    data: TrendSummary

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "data": self.data.to_dict()}


@dataclass(frozen=True)
class HaltEvent:
    kind: ClassVar[str] = "halt"
    message: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "message": self.message}


PipelineEvent = Union[
    LogEvent, StepEvent, ProfileEvent, MatchesEvent, ConflictsEvent, TrendsEvent, HaltEvent
]


def event_from_dict(data: Dict[str, Any]) -> PipelineEvent:
    """
    Parse a serialized event (``{"type": kind, ...}``).

    Payloads go through the same defaulting as live stage output.

    Raises:
        ValueError: If the event type is unknown or ``step`` has no integer index
    """
    kind = data.get("type")

    if kind == "log":
        return LogEvent(str(data.get("message", "")))
    if kind == "step":
        try:
            return StepEvent(int(data["index"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"step event needs an integer index: {data}") from e
    if kind == "profile":
        return ProfileEvent(ScenarioProfile.from_payload(data.get("data")))
    if kind == "matches":
        return MatchesEvent(coerce_matches(data.get("data")))
    if kind == "conflicts":
        return ConflictsEvent(ConflictReport.from_payload(data.get("data")))
    if kind == "trends":
        return TrendsEvent(TrendSummary.from_payload(data.get("data")))
    if kind == "halt":
        return HaltEvent(data.get("message"))

    raise ValueError(f"Unknown event type: {kind!r}")
