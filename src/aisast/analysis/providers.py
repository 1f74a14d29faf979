"""Completion providers — the external text-completion capability over httpx."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from aisast.config import LLMConfig
from aisast.errors import CompletionError

logger = logging.getLogger(__name__)


class CompletionProvider(Protocol):
    """Protocol for anything that turns a prompt into completion text."""

    name: str

    async def complete(self, system: str, prompt: str) -> str:
        """Return the completion text. Raises CompletionError on failure."""
        ...


class _HttpProvider:
    """Shared httpx plumbing for the concrete providers."""

    name = "http"

    def __init__(
        self,
        config: LLMConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client

    async def _post(self, path: str, payload: dict, headers: dict[str, str]) -> dict:
        url = f"{self._config.resolved_base_url}{path}"
        try:
            if self._client is not None:
                resp = await self._client.post(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                    resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise CompletionError(
                f"{self.name} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise CompletionError(f"{self.name} request failed: {e}") from e
        except ValueError as e:
            raise CompletionError(f"{self.name} returned a non-JSON body") from e


class OpenAICompatibleProvider(_HttpProvider):
    """Chat completions API: OpenAI, Groq, or any compatible server."""

    def __init__(
        self,
        config: LLMConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config, client)
        self.name = config.provider

    async def complete(self, system: str, prompt: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        data = await self._post(
            "/chat/completions",
            {
                "model": self._config.resolved_model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                "temperature": self._config.temperature,
                "max_tokens": self._config.max_tokens,
            },
            headers,
        )
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise CompletionError(f"{self.name} reply has no message content") from e


class AnthropicProvider(_HttpProvider):
    """Anthropic messages API."""

    name = "anthropic"

    async def complete(self, system: str, prompt: str) -> str:
        data = await self._post(
            "/v1/messages",
            {
                "model": self._config.resolved_model,
                "system": system,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": self._config.temperature,
                "max_tokens": self._config.max_tokens,
            },
            {
                "x-api-key": self._config.api_key,
                "anthropic-version": "2023-06-01",
                "content-type": "application/json",
            },
        )
        try:
            blocks = data["content"]
            return "".join(b.get("text", "") for b in blocks if b.get("type") == "text")
        except (KeyError, TypeError, AttributeError) as e:
            raise CompletionError("anthropic reply has no content blocks") from e


class OllamaProvider(_HttpProvider):
    """Local model served by Ollama."""

    name = "ollama"

    async def complete(self, system: str, prompt: str) -> str:
        data = await self._post(
            "/api/chat",
            {
                "model": self._config.resolved_model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                "stream": False,
                "options": {
                    "temperature": self._config.temperature,
                    "num_predict": self._config.max_tokens,
                },
            },
            {"Content-Type": "application/json"},
        )
        try:
            return data["message"]["content"] or ""
        except (KeyError, TypeError) as e:
            raise CompletionError("ollama reply has no message content") from e


_PROVIDERS = {
    "openai": OpenAICompatibleProvider,
    "groq": OpenAICompatibleProvider,
    "anthropic": AnthropicProvider,
    "ollama": OllamaProvider,
}


def build_provider(
    config: LLMConfig,
    client: httpx.AsyncClient | None = None,
) -> CompletionProvider | None:
    """Instantiate the configured provider, or None when enrichment is off."""
    if not config.enabled:
        return None

    provider_cls = _PROVIDERS.get(config.provider)
    if provider_cls is None:
        logger.warning("Unknown LLM provider '%s'; enrichment disabled", config.provider)
        return None

    if config.needs_api_key and not config.api_key:
        logger.info(
            "No API key configured for %s; enrichment disabled", config.provider
        )
        return None

    return provider_cls(config, client)
