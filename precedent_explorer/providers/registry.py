"""Provider selection from inference settings."""

import logging
from typing import Dict, Type

from .base import BaseLLMProvider, ProviderConfig
from .openrouter import OpenRouterProvider
from .requesty import RequestyProvider
from ..settings import InferenceSettings

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: Dict[str, Type[BaseLLMProvider]] = {
    "openrouter": OpenRouterProvider,
    "requesty": RequestyProvider,
}


def create_provider(settings: InferenceSettings) -> BaseLLMProvider:
    """
    Create the active provider described by ``settings``.

    Raises:
        ValueError: If the provider id is unknown
    """
    provider_settings = settings.active_provider()
    provider_class = PROVIDER_CLASSES.get(provider_settings.provider_id)
    if not provider_class:
        raise ValueError(f"Unknown provider: {provider_settings.provider_id}")

    provider = provider_class(
        ProviderConfig(
            provider_id=provider_settings.provider_id,
            api_key=provider_settings.api_key,
            base_url=provider_settings.base_url,
            timeout=provider_settings.timeout,
        )
    )
    if not provider.has_api_key():
        logger.warning(
            f"Provider {provider.provider_id} has no API key "
            f"({provider_settings.api_key_env} is unset); stage requests will fail"
        )
    return provider
