"""OpenRouter provider implementation."""

import logging
import httpx
from typing import List, Dict, Optional
from .base import BaseLLMProvider, ProviderConfig, ProviderError, ModelResponse
from ..http_pool import get_inference_client

logger = logging.getLogger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"


class OpenRouterProvider(BaseLLMProvider):
    """OpenRouter API provider for multi-model access."""

    def __init__(self, config: ProviderConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        self.api_url = config.base_url or OPENROUTER_API_URL
        self._client = client

    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Query a model via OpenRouter API.

        Uses the injected client, then the shared pooled client, and only
        opens a one-off client when neither is available.
        """
        if not self.has_api_key():
            raise ProviderError("OpenRouter API key is not configured")

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        payload = {
            "model": model,
            "messages": messages,
        }

        if temperature is not None:
            payload["temperature"] = temperature

        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        payload.update(kwargs)

        client = self._client or get_inference_client()

        try:
            if client is not None:
                response = await client.post(
                    self.api_url, headers=headers, json=payload, timeout=self.config.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout) as one_off:
                    response = await one_off.post(self.api_url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"OpenRouter HTTP error: {e.response.status_code} - {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"OpenRouter query failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"OpenRouter returned invalid JSON: {e}") from e

        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"OpenRouter response missing choices: {data}") from e

        usage = data.get("usage") or {}
        return ModelResponse(
            content=message.get("content") or "",
            model=data.get("model"),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )
