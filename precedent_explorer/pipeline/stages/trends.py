"""Trend mapping stage: summarize majority/minority views and consensus."""

import logging

from ..base import Stage
from ..context import PipelineContext, ContextKey, LANGUAGE
from ..events import TrendsEvent
from ..models import TrendSummary
from .conflicts import CONFLICT_REPORT
from .profiling import SCENARIO_PROFILE
from .retrieval import PRECEDENT_MATCHES

logger = logging.getLogger(__name__)

TREND_SUMMARY = ContextKey("trend_summary")


class TrendMappingStage(Stage):
    """Final stage. Its result event completes the run."""

    title = "Trend & Consensus Mapping"

    @property
    def name(self) -> str:
        return "TrendMappingStage"

    async def execute(self, context: PipelineContext) -> PipelineContext:
        profile = context.get(SCENARIO_PROFILE)
        matches = context.get(PRECEDENT_MATCHES)
        conflicts = context.get(CONFLICT_REPORT)
        if profile is None or matches is None or conflicts is None:
            raise ValueError(
                "SCENARIO_PROFILE, PRECEDENT_MATCHES, and CONFLICT_REPORT must be set in context"
            )

        raw = await self.collaborator.map_trends(
            profile, matches, conflicts, context.get(LANGUAGE), context.token
        )
        trends = TrendSummary.from_payload(raw)

        logger.info(f"Consensus level: {trends.consensus_level.value}")
        return context.set(TREND_SUMMARY, trends)

    def result_event(self, context: PipelineContext) -> TrendsEvent:
        return TrendsEvent(context.get(TREND_SUMMARY))

    def summary(self, context: PipelineContext) -> str:
        trends = context.get(TREND_SUMMARY)
        return f"[Explorer] Consensus level assessed as {trends.consensus_level.value}."
