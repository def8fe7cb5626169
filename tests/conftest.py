"""Pytest configuration and shared fixtures for Precedent Explorer tests.

This module provides:
- Basic pytest configuration
- Scripted and mock collaborators
- Controller fixtures wired to them
"""

import os
import sys
from pathlib import Path
from typing import Dict

import pytest

# Add project root to Python path so tests can import the package and tests.fixtures
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from precedent_explorer.inference import MockCollaborator
from precedent_explorer.pipeline import PipelineController, PrecedentPipeline
from precedent_explorer.settings import (
    CONFLICT_ANALYSIS,
    PRECEDENT_RETRIEVAL,
    SCENARIO_PROFILING,
    TREND_MAPPING,
    InferenceSettings,
    ProviderSettings,
    StageModelSettings,
)

from tests.fixtures.scripted_collaborator import ScriptedCollaborator


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: mark test as a unit test (fast, isolated)"
    )
    config.addinivalue_line(
        "markers",
        "integration: mark test as an integration test (slower, multiple components)"
    )


# ==================== Environment Fixtures ====================

@pytest.fixture(scope="function", autouse=True)
def isolate_environment():
    """Restore environment variables changed by a test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_env_vars(monkeypatch) -> Dict[str, str]:
    """Provide fake provider credentials."""
    env_vars = {
        "OPENROUTER_API_KEY": "test-openrouter-key",
        "REQUESTY_API_KEY": "test-requesty-key",
        "LOG_LEVEL": "DEBUG",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# ==================== Pipeline Fixtures ====================

@pytest.fixture
def scripted() -> ScriptedCollaborator:
    """Collaborator answering with the sample payloads."""
    return ScriptedCollaborator()


@pytest.fixture
def controller(scripted) -> PipelineController:
    """Controller driving a pipeline backed by the scripted collaborator."""
    return PipelineController(PrecedentPipeline(scripted))


@pytest.fixture
def mock_controller() -> PipelineController:
    """Controller driving a pipeline backed by the canned mock collaborator."""
    return PipelineController(PrecedentPipeline(MockCollaborator()))


@pytest.fixture
def inference_settings() -> InferenceSettings:
    """Settings with a distinct model per stage."""
    return InferenceSettings(
        provider="openrouter",
        providers={
            "openrouter": ProviderSettings(
                provider_id="openrouter",
                api_key_env="OPENROUTER_API_KEY",
                base_url="https://openrouter.test/api/v1/chat/completions",
                timeout=5.0,
            ),
        },
        stages={
            SCENARIO_PROFILING: StageModelSettings(model="test/profiler", temperature=0.1, max_tokens=800),
            PRECEDENT_RETRIEVAL: StageModelSettings(model="test/retriever", temperature=0.2, max_tokens=3000),
            CONFLICT_ANALYSIS: StageModelSettings(model="test/analyst", temperature=0.2, max_tokens=2000),
            TREND_MAPPING: StageModelSettings(model="test/mapper", temperature=0.3, max_tokens=1500),
        },
    )
