"""Loader for models.yaml (providers and per-stage model settings)."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict

import yaml

from . import config

logger = logging.getLogger(__name__)

SCENARIO_PROFILING = "scenario_profiling"
PRECEDENT_RETRIEVAL = "precedent_retrieval"
CONFLICT_ANALYSIS = "conflict_analysis"
TREND_MAPPING = "trend_mapping"

STAGE_KEYS = (SCENARIO_PROFILING, PRECEDENT_RETRIEVAL, CONFLICT_ANALYSIS, TREND_MAPPING)

DEFAULT_MODEL = "google/gemini-2.5-flash"

DEFAULTS: Dict[str, Any] = {
    "provider": "openrouter",
    "providers": {
        "openrouter": {
            "api_key_env": "OPENROUTER_API_KEY",
            "base_url": "https://openrouter.ai/api/v1/chat/completions",
            "timeout": 120.0,
        },
        "requesty": {
            "api_key_env": "REQUESTY_API_KEY",
            "base_url": "https://router.requesty.ai/v1",
            "timeout": 120.0,
        },
    },
    "stages": {key: {"model": DEFAULT_MODEL} for key in STAGE_KEYS},
}


@dataclass(frozen=True)
class ProviderSettings:
    provider_id: str
    api_key_env: str
    base_url: str | None = None
    timeout: float = 120.0

    @property
    def api_key(self) -> str | None:
        return os.getenv(self.api_key_env) if self.api_key_env else None


@dataclass(frozen=True)
class StageModelSettings:
    model: str = DEFAULT_MODEL
    temperature: float = 0.3
    max_tokens: int = 2000


@dataclass(frozen=True)
class InferenceSettings:
    provider: str
    providers: Dict[str, ProviderSettings]
    stages: Dict[str, StageModelSettings]

    def for_stage(self, stage_key: str) -> StageModelSettings:
        """Get model settings for a stage, falling back to defaults."""
        return self.stages.get(stage_key, StageModelSettings())

    def active_provider(self) -> ProviderSettings:
        if self.provider not in self.providers:
            raise ValueError(f"Unknown provider: {self.provider}")
        return self.providers[self.provider]


def _default_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "models.yaml")


def _load_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        logger.warning(f"Config file not found at {path}, using built-in defaults")
        return {}

    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_providers(data: Dict[str, Dict[str, Any]]) -> Dict[str, ProviderSettings]:
    return {
        provider_id: ProviderSettings(
            provider_id=provider_id,
            api_key_env=item.get("api_key_env", ""),
            base_url=item.get("base_url"),
            timeout=float(item.get("timeout", 120.0)),
        )
        for provider_id, item in data.items()
    }


def _parse_stages(data: Dict[str, Dict[str, Any]]) -> Dict[str, StageModelSettings]:
    return {
        key: StageModelSettings(
            model=item.get("model", DEFAULT_MODEL),
            temperature=float(item.get("temperature", 0.3)),
            max_tokens=int(item.get("max_tokens", 2000)),
        )
        for key, item in data.items()
    }


def load_inference_settings(path: str | None = None) -> InferenceSettings:
    """
    Load inference settings from YAML.

    Resolution order for the file: explicit ``path``, then
    ``PRECEDENT_CONFIG_PATH``, then the ``models.yaml`` shipped with the
    package. Missing sections fall back to ``DEFAULTS``; the
    ``INFERENCE_PROVIDER`` environment variable overrides ``provider``.
    """
    data = _load_yaml(path or config.PRECEDENT_CONFIG_PATH or _default_config_path())

    providers = _parse_providers(data.get("providers") or DEFAULTS["providers"])
    stages = _parse_stages(data.get("stages") or DEFAULTS["stages"])
    provider = os.getenv("INFERENCE_PROVIDER") or data.get("provider") or DEFAULTS["provider"]

    return InferenceSettings(provider=provider, providers=providers, stages=stages)
