"""Inference collaborator backed by a hosted LLM provider."""

import logging
from typing import Any, Dict, List, Sequence

from ..pipeline.cancellation import CancellationToken
from ..pipeline.collaborator import CollaboratorError, InferenceCollaborator
from ..pipeline.models import ConflictReport, PrecedentMatch, ScenarioProfile
from ..providers.base import BaseLLMProvider, ProviderError
from ..settings import (
    CONFLICT_ANALYSIS,
    PRECEDENT_RETRIEVAL,
    SCENARIO_PROFILING,
    TREND_MAPPING,
    InferenceSettings,
)
from .parsing import extract_json
from .prompts import (
    build_conflict_messages,
    build_profile_messages,
    build_retrieval_messages,
    build_trend_messages,
)

logger = logging.getLogger(__name__)


class LLMCollaborator(InferenceCollaborator):
    """
    Answers each stage with one chat completion.

    Every provider call is raced against the run's token, so a cancel
    abandons the in-flight request. Replies are parsed as JSON with light
    repair; shape defects are left to the pipeline's payload models.
    """

    def __init__(self, provider: BaseLLMProvider, settings: InferenceSettings):
        self.provider = provider
        self.settings = settings

    async def profile_scenario(
        self, query: str, language: str, token: CancellationToken
    ) -> Any:
        return await self._complete(
            SCENARIO_PROFILING, build_profile_messages(query, language), token
        )

    async def retrieve_precedents(
        self, profile: ScenarioProfile, language: str, token: CancellationToken
    ) -> Any:
        return await self._complete(
            PRECEDENT_RETRIEVAL, build_retrieval_messages(profile, language), token
        )

    async def analyze_conflicts(
        self,
        profile: ScenarioProfile,
        matches: Sequence[PrecedentMatch],
        language: str,
        token: CancellationToken,
    ) -> Any:
        return await self._complete(
            CONFLICT_ANALYSIS, build_conflict_messages(profile, matches, language), token
        )

    async def map_trends(
        self,
        profile: ScenarioProfile,
        matches: Sequence[PrecedentMatch],
        conflicts: ConflictReport,
        language: str,
        token: CancellationToken,
    ) -> Any:
        return await self._complete(
            TREND_MAPPING,
            build_trend_messages(profile, matches, conflicts, language),
            token,
        )

    async def _complete(
        self, stage_key: str, messages: List[Dict[str, str]], token: CancellationToken
    ) -> Any:
        """
        Run one completion for ``stage_key`` and return the parsed JSON.

        Raises:
            PipelineCancelled: If the token fires before the reply arrives
            CollaboratorError: If the provider fails or the reply has no JSON
        """
        stage_settings = self.settings.for_stage(stage_key)
        logger.info(f"Querying {stage_settings.model} for {stage_key}")

        try:
            response = await token.guard(
                self.provider.query(
                    messages=messages,
                    model=stage_settings.model,
                    temperature=stage_settings.temperature,
                    max_tokens=stage_settings.max_tokens,
                )
            )
        except ProviderError as e:
            logger.error(f"Provider failed for {stage_key}: {e}")
            raise CollaboratorError(stage_key, str(e)) from e

        if response.total_tokens is not None:
            logger.debug(f"{stage_key} used {response.total_tokens} tokens")

        payload = extract_json(response.content)
        if payload is None:
            raise CollaboratorError(stage_key, "Model reply contained no JSON")
        return payload
