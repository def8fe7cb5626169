"""Conflict analysis stage: detect divergences among the matched precedents."""

import logging

from ..base import Stage
from ..context import PipelineContext, ContextKey, LANGUAGE
from ..events import ConflictsEvent
from ..models import ConflictReport
from .profiling import SCENARIO_PROFILE
from .retrieval import PRECEDENT_MATCHES

logger = logging.getLogger(__name__)

CONFLICT_REPORT = ContextKey("conflict_report")


class ConflictAnalysisStage(Stage):
    title = "Conflict & Divergence Analysis"

    @property
    def name(self) -> str:
        return "ConflictAnalysisStage"

    async def execute(self, context: PipelineContext) -> PipelineContext:
        profile = context.get(SCENARIO_PROFILE)
        matches = context.get(PRECEDENT_MATCHES)
        if profile is None or matches is None:
            raise ValueError("SCENARIO_PROFILE and PRECEDENT_MATCHES must be set in context")

        raw = await self.collaborator.analyze_conflicts(
            profile, matches, context.get(LANGUAGE), context.token
        )
        report = ConflictReport.from_payload(raw)

        logger.info(
            f"Conflict analysis: has_conflict={report.has_conflict}, "
            f"points={len(report.divergence_points)}"
        )
        return context.set(CONFLICT_REPORT, report)

    def result_event(self, context: PipelineContext) -> ConflictsEvent:
        return ConflictsEvent(context.get(CONFLICT_REPORT))

    def summary(self, context: PipelineContext) -> str:
        report = context.get(CONFLICT_REPORT)
        if not report.has_conflict:
            return "[Explorer] No material divergence among the precedents."
        return f"[Explorer] Found {len(report.divergence_points)} points of divergence."
