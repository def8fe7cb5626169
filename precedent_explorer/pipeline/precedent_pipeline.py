"""Precedent pipeline orchestration: runs the stages and streams events."""

import logging
from typing import AsyncIterator, List

from .base import Pipeline, Stage
from .cancellation import CancellationToken, PipelineCancelled
from .collaborator import InferenceCollaborator
from .context import PipelineContext
from .events import LogEvent, PipelineEvent, StepEvent
from .stages import (
    ScenarioProfilingStage,
    PrecedentRetrievalStage,
    ConflictAnalysisStage,
    TrendMappingStage,
)

logger = logging.getLogger(__name__)


class PrecedentPipeline:
    """
    Compares a scenario against the precedent corpus in four dependent stages.

    Pipeline flow:
    1. Scenario Profiling (domain, attributes, risks, operative elements)
    2. Precedent Retrieval & Matching (ranked by similarity)
    3. Conflict & Divergence Analysis (profile + matches)
    4. Trend & Consensus Mapping (all prior outputs)

    Stages run strictly one after another. For each stage ``run`` emits a
    ``step`` event, a progress log, a summary log and the stage's result
    event. The token is checked before every stage request and right after
    every result; once it is signaled no further events are emitted. A
    stage failure emits one ``[Error]`` log and ends the stream.
    """

    def __init__(
        self, collaborator: InferenceCollaborator, stages: List[Stage] | None = None
    ):
        self.collaborator = collaborator
        self.pipeline = Pipeline(
            stages
            or [
                ScenarioProfilingStage(collaborator),
                PrecedentRetrievalStage(collaborator),
                ConflictAnalysisStage(collaborator),
                TrendMappingStage(collaborator),
            ]
        )

    @property
    def stage_titles(self) -> List[str]:
        return [stage.title for stage in self.pipeline]

    async def run(
        self, query: str, language: str, token: CancellationToken
    ) -> AsyncIterator[PipelineEvent]:
        """
        Run all stages for ``query`` and yield events in order.

        Args:
            query: Scenario text
            language: Answer language tag
            token: Cancellation token of this run

        Yields:
            Protocol events (log, step, profile, matches, conflicts, trends)
        """
        context = (
            PipelineContext()
            .with_user_query(query)
            .with_language(language)
            .with_token(token)
        )
        stage: Stage | None = None

        try:
            for index, stage in enumerate(self.pipeline):
                if self._cancelled(token, f"before {stage.name}"):
                    return

                yield StepEvent(index)
                yield LogEvent(f"[Explorer] Initiating {stage.title}...")

                if self._cancelled(token, f"before {stage.name} request"):
                    return

                context = await stage.execute(context)

                if self._cancelled(token, f"after {stage.name}"):
                    return

                yield LogEvent(stage.summary(context))
                yield stage.result_event(context)

        except PipelineCancelled as e:
            if token.is_signaled():
                logger.info(f"Run {token.run_id} cancelled during {stage.name if stage else 'setup'}")
                return
            # Aborted by the collaborator, not by the caller
            title = stage.title if stage else "Pipeline"
            logger.warning(f"Run {token.run_id}: {title} aborted: {e}")
            yield LogEvent(f"[Error] {title} aborted: {e}")

        except Exception as e:
            title = stage.title if stage else "Pipeline"
            logger.error(f"Run {token.run_id}: {title} failed: {e}", exc_info=True)
            yield LogEvent(f"[Error] {title} failed: {e}")

    @staticmethod
    def _cancelled(token: CancellationToken, where: str) -> bool:
        if token.is_signaled():
            logger.info(f"Run {token.run_id} stopped {where} ({token.reason})")
            return True
        return False

    def __repr__(self) -> str:
        return f"PrecedentPipeline({self.pipeline!r})"
