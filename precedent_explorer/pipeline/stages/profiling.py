"""Scenario profiling stage: classify the query into a structured profile."""

import logging

from ..base import Stage
from ..context import PipelineContext, ContextKey, USER_QUERY, LANGUAGE
from ..events import ProfileEvent
from ..models import ScenarioProfile

logger = logging.getLogger(__name__)

SCENARIO_PROFILE = ContextKey("scenario_profile")


class ScenarioProfilingStage(Stage):
    """
    First stage. Asks the collaborator for the scenario's domain, legal
    attributes, risk categories and operative elements.
    """

    title = "Scenario Profiling"

    @property
    def name(self) -> str:
        return "ScenarioProfilingStage"

    async def execute(self, context: PipelineContext) -> PipelineContext:
        query = context.get(USER_QUERY)
        if not query:
            raise ValueError("USER_QUERY must be set in context")

        raw = await self.collaborator.profile_scenario(
            query, context.get(LANGUAGE), context.token
        )
        profile = ScenarioProfile.from_payload(raw)
        if not profile.topic:
            profile = profile.model_copy(update={"topic": query})

        logger.info(f"Profiled scenario as domain={profile.domain or 'unknown'}")
        return context.set(SCENARIO_PROFILE, profile)

    def result_event(self, context: PipelineContext) -> ProfileEvent:
        return ProfileEvent(context.get(SCENARIO_PROFILE))

    def summary(self, context: PipelineContext) -> str:
        profile = context.get(SCENARIO_PROFILE)
        return (
            f"[Explorer] Scenario classified under '{profile.domain or 'Unclassified'}' "
            f"with {len(profile.legal_attributes)} legal attributes."
        )
