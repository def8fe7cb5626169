from abc import ABC, abstractmethod
from typing import List

from .context import PipelineContext
from .events import PipelineEvent
from .collaborator import InferenceCollaborator


class Stage(ABC):
    """Base class for all pipeline stages. Must be async and return a new PipelineContext (never mutate input)."""

    #: Human-readable stage label used in run logs
    title: str = ""

    def __init__(self, collaborator: InferenceCollaborator):
        self.collaborator = collaborator

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def execute(self, context: PipelineContext) -> PipelineContext:
        """
        Request this stage's payload and return a new context holding it.

        NEVER mutate the input context. Always return a new context.
        """
        pass

    @abstractmethod
    def result_event(self, context: PipelineContext) -> PipelineEvent:
        """Event carrying this stage's output, read from the context ``execute`` returned."""
        pass

    def summary(self, context: PipelineContext) -> str:
        """Log line describing this stage's output."""
        return f"[Explorer] {self.title} complete."


class Pipeline:
    """Ordered chain of stages. Immutable - with_stage() returns new pipeline."""

    def __init__(self, stages: List[Stage] | None = None):
        self.stages = stages or []

    def with_stage(self, stage: Stage) -> "Pipeline":
        """
        Return new pipeline with stage appended.

        Creates a new pipeline, leaves the original unchanged.
        """
        return Pipeline(self.stages + [stage])

    def __iter__(self):
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        stage_names = [s.name for s in self.stages]
        return f"Pipeline(stages={stage_names})"
