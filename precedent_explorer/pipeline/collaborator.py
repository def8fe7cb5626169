"""Contract between the pipeline stages and the inference service."""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from .cancellation import CancellationToken
from .models import ConflictReport, PrecedentMatch, ScenarioProfile


class CollaboratorError(Exception):
    """The inference service could not produce a stage payload."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage
        self.message = message

    def __str__(self) -> str:
        return f"{self.stage}: {self.message}"


class InferenceCollaborator(ABC):
    """
    The four per-stage capabilities the pipeline needs.

    Implementations may return either the pipeline's models or raw dicts /
    lists; the stages default any missing fields. They signal failure by
    raising ``CollaboratorError`` and cancellation by raising
    ``PipelineCancelled`` (usually via ``token.guard``).
    """

    @abstractmethod
    async def profile_scenario(
        self, query: str, language: str, token: CancellationToken
    ) -> Any:
        """Classify the scenario into a ScenarioProfile payload."""

    @abstractmethod
    async def retrieve_precedents(
        self, profile: ScenarioProfile, language: str, token: CancellationToken
    ) -> Any:
        """Return a list of PrecedentMatch payloads for the profile."""

    @abstractmethod
    async def analyze_conflicts(
        self,
        profile: ScenarioProfile,
        matches: Sequence[PrecedentMatch],
        language: str,
        token: CancellationToken,
    ) -> Any:
        """Return a ConflictReport payload for the retrieved precedents."""

    @abstractmethod
    async def map_trends(
        self,
        profile: ScenarioProfile,
        matches: Sequence[PrecedentMatch],
        conflicts: ConflictReport,
        language: str,
        token: CancellationToken,
    ) -> Any:
        """Return a TrendSummary payload built from all prior outputs."""
