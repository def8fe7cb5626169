"""
Chat-completion contract used by the LLM collaborator.

Each precedent stage sends a ``[system, user]`` message pair and expects a
JSON document back in ``ModelResponse.content``; extracting and
validating that JSON happens in ``precedent_explorer.inference``.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from dataclasses import dataclass


class ProviderError(Exception):
    """Transport, HTTP or payload failure of a chat-completion call."""


@dataclass
class ProviderConfig:
    """Connection settings resolved from models.yaml and the environment."""

    provider_id: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = 120.0


@dataclass
class ModelResponse:
    content: str
    model: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class BaseLLMProvider(ABC):
    """A chat-completion backend that a stage prompt can be sent to."""

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def provider_id(self) -> str:
        return self.config.provider_id

    @abstractmethod
    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Send one stage prompt and return the raw reply.

        The call is awaited inside ``CancellationToken.guard``, so
        implementations must tolerate being cancelled mid-request.

        Raises:
            ProviderError: No usable reply (missing key, HTTP error, bad body)
        """

    def has_api_key(self) -> bool:
        return bool(self.config.api_key)
