"""Precedent retrieval stage: find and rank precedents for the profile."""

import logging

from ..base import Stage
from ..context import PipelineContext, ContextKey, LANGUAGE
from ..events import MatchesEvent
from ..models import coerce_matches
from .profiling import SCENARIO_PROFILE

logger = logging.getLogger(__name__)

PRECEDENT_MATCHES = ContextKey("precedent_matches")


class PrecedentRetrievalStage(Stage):
    """Second stage. Retrieves precedents and ranks them by similarity."""

    title = "Precedent Retrieval & Matching"

    @property
    def name(self) -> str:
        return "PrecedentRetrievalStage"

    async def execute(self, context: PipelineContext) -> PipelineContext:
        profile = context.get(SCENARIO_PROFILE)
        if profile is None:
            raise ValueError("SCENARIO_PROFILE must be set in context")

        raw = await self.collaborator.retrieve_precedents(
            profile, context.get(LANGUAGE), context.token
        )
        matches = coerce_matches(raw)

        logger.info(f"Retrieved {len(matches)} precedents")
        return context.set(PRECEDENT_MATCHES, matches)

    def result_event(self, context: PipelineContext) -> MatchesEvent:
        return MatchesEvent(context.get(PRECEDENT_MATCHES, ()))

    def summary(self, context: PipelineContext) -> str:
        matches = context.get(PRECEDENT_MATCHES, ())
        if not matches:
            return "[Explorer] No comparable precedents were found."
        top = matches[0]
        return (
            f"[Explorer] Matched {len(matches)} precedents; closest is "
            f"'{top.title or top.id}' ({top.similarity.total}%)."
        )
