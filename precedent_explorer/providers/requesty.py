"""Requesty provider using the OpenAI SDK."""

import logging
from typing import List, Dict, Optional, cast

from openai import AsyncOpenAI, OpenAIError
from openai.types.chat import ChatCompletionMessageParam

from .base import BaseLLMProvider, ProviderConfig, ProviderError, ModelResponse

logger = logging.getLogger(__name__)

REQUESTY_API_URL = "https://router.requesty.ai/v1"


class RequestyProvider(BaseLLMProvider):
    """Requesty router accessed through its OpenAI-compatible API."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if not self.has_api_key():
            raise ProviderError("Requesty API key is not configured")

        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url or REQUESTY_API_URL,
                timeout=self.config.timeout,
            )
        return self._client

    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        client = self._get_client()

        params = dict(kwargs)
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=cast(List[ChatCompletionMessageParam], messages),
                **params,
            )
        except OpenAIError as e:
            raise ProviderError(f"Requesty query failed: {e}") from e

        content = (
            response.choices[0].message.content
            if response.choices and response.choices[0].message
            else ""
        )
        usage = response.usage
        return ModelResponse(
            content=content or "",
            model=response.model,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
            total_tokens=getattr(usage, "total_tokens", None),
        )
