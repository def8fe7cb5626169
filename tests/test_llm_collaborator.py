"""Tests for the LLM-backed inference collaborator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from precedent_explorer.inference import LLMCollaborator, MockCollaborator
from precedent_explorer.pipeline import (
    CancellationToken,
    CollaboratorError,
    PipelineCancelled,
    PipelineController,
    PipelineStatus,
    PrecedentPipeline,
    ScenarioProfile,
)
from precedent_explorer.providers import BaseLLMProvider, ModelResponse, ProviderError
from precedent_explorer.settings import PRECEDENT_RETRIEVAL, SCENARIO_PROFILING


def make_provider(content: str = "{}") -> MagicMock:
    provider = MagicMock(spec=BaseLLMProvider)
    provider.query = AsyncMock(return_value=ModelResponse(content=content, total_tokens=42))
    return provider


class TestLLMCollaborator:
    """Test suite for prompt dispatch and reply handling."""

    @pytest.mark.asyncio
    async def test_profile_uses_stage_settings(self, inference_settings):
        provider = make_provider('```json\n{"domain": "Finance"}\n```')
        collaborator = LLMCollaborator(provider, inference_settings)

        payload = await collaborator.profile_scenario("Staking", "en", CancellationToken())

        assert payload == {"domain": "Finance"}
        kwargs = provider.query.await_args.kwargs
        stage = inference_settings.for_stage(SCENARIO_PROFILING)
        assert kwargs["model"] == stage.model
        assert kwargs["temperature"] == stage.temperature
        assert kwargs["max_tokens"] == stage.max_tokens

    @pytest.mark.asyncio
    async def test_prompt_mentions_query_and_language(self, inference_settings):
        provider = make_provider('{"domain": "Finance"}')
        collaborator = LLMCollaborator(provider, inference_settings)

        await collaborator.profile_scenario("Digital asset staking", "ur", CancellationToken())

        messages = provider.query.await_args.kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert "Digital asset staking" in messages[-1]["content"]
        assert "Urdu" in messages[-1]["content"]

    @pytest.mark.asyncio
    async def test_retrieval_returns_list_payload(self, inference_settings):
        provider = make_provider('[{"id": "PREC-001", "title": "Case"}]')
        collaborator = LLMCollaborator(provider, inference_settings)

        payload = await collaborator.retrieve_precedents(
            ScenarioProfile(topic="Staking", domain="Finance"), "en", CancellationToken()
        )

        assert payload == [{"id": "PREC-001", "title": "Case"}]
        assert provider.query.await_args.kwargs["model"] == inference_settings.for_stage(PRECEDENT_RETRIEVAL).model

    @pytest.mark.asyncio
    async def test_provider_error_becomes_collaborator_error(self, inference_settings):
        provider = make_provider()
        provider.query.side_effect = ProviderError("OpenRouter HTTP error: 503")
        collaborator = LLMCollaborator(provider, inference_settings)

        with pytest.raises(CollaboratorError) as exc_info:
            await collaborator.profile_scenario("Staking", "en", CancellationToken())

        assert exc_info.value.stage == SCENARIO_PROFILING
        assert "503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_reply_without_json_is_an_error(self, inference_settings):
        collaborator = LLMCollaborator(make_provider("I cannot help with that."), inference_settings)

        with pytest.raises(CollaboratorError, match="no JSON"):
            await collaborator.profile_scenario("Staking", "en", CancellationToken())

    @pytest.mark.asyncio
    async def test_cancel_abandons_in_flight_request(self, inference_settings):
        started = asyncio.Event()

        async def slow_query(**kwargs):
            started.set()
            await asyncio.sleep(10)
            return ModelResponse(content="{}")

        provider = make_provider()
        provider.query.side_effect = slow_query
        collaborator = LLMCollaborator(provider, inference_settings)
        token = CancellationToken()

        request = asyncio.create_task(collaborator.profile_scenario("Staking", "en", token))
        await asyncio.wait_for(started.wait(), timeout=1)
        token.signal()

        with pytest.raises(PipelineCancelled):
            await asyncio.wait_for(request, timeout=1)

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_full_run_through_controller(self, inference_settings):
        replies = [
            '{"topic": "Staking", "domain": "Finance", "legalAttributes": ["Exchange"]}',
            '```json\n[{"id": "PREC-001", "similarity": {"total": 40}}, {"id": "PREC-002", "similarity": {"total": 90}}]\n```',
            '{"hasConflict": false, "divergencePoints": []}',
            '{"majorityView": "Permissible", "consensusLevel": "Ijma",}',
        ]
        provider = make_provider()
        provider.query.side_effect = [ModelResponse(content=reply) for reply in replies]
        controller = PipelineController(PrecedentPipeline(LLMCollaborator(provider, inference_settings)))

        controller.start("Staking", "en")
        state = await asyncio.wait_for(controller.wait(), timeout=2)

        assert state.status is PipelineStatus.COMPLETE
        assert [m.id for m in state.matches] == ["PREC-002", "PREC-001"]
        assert state.trends.majority_view == "Permissible"
        assert provider.query.await_count == 4


class TestMockCollaborator:
    """Test suite for the canned collaborator."""

    @pytest.mark.asyncio
    async def test_mock_run_completes(self, mock_controller):
        mock_controller.start("Copyright protection for AI-generated calligraphy", "en")
        state = await asyncio.wait_for(mock_controller.wait(), timeout=2)

        assert state.status is PipelineStatus.COMPLETE
        assert state.scenario.topic == "Copyright protection for AI-generated calligraphy"
        assert [m.id for m in state.matches] == ["PREC-002", "PREC-001", "PREC-003"]
        assert state.matches[1].similarity.total == 73
        assert state.conflicts.has_conflict is True

    @pytest.mark.asyncio
    async def test_mock_delay_is_cancellable(self):
        collaborator = MockCollaborator(delay=10)
        token = CancellationToken()

        request = asyncio.create_task(collaborator.profile_scenario("q", "en", token))
        await asyncio.sleep(0)
        token.signal()

        with pytest.raises(PipelineCancelled):
            await asyncio.wait_for(request, timeout=1)
