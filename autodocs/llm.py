"""Multi-provider completion adapter supporting OpenAI, Anthropic and Ollama.

Only the documentation generator talks to these providers; the search index
uses :mod:`autodocs.embeddings` instead.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from .config import LLM_API_KEY, LLM_ENDPOINT, LLM_MODEL, LLM_PROVIDER

logger = logging.getLogger(__name__)


class Completer(Protocol):
    """Capability interface: prompt in, text out."""

    def complete(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> str:
        ...


class LLMProvider:
    """Base class for completion providers."""

    def generate(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> Optional[str]:
        """Return completion text, or ``None`` when the provider is unavailable."""
        raise NotImplementedError


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions (also works with OpenAI-compatible gateways)."""

    def __init__(self, model: str, api_key: str, endpoint: str = "https://api.openai.com/v1/chat/completions"):
        self.model = model
        self.api_key = api_key
        self.endpoint = endpoint

    def generate(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> Optional[str]:
        if not self.api_key:
            return None

        try:
            response = requests.post(
                self.endpoint,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={
                    "model": self.model,
                    "messages": [{"role": "user", "content": prompt}],
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                },
                timeout=120,
            )
            response.raise_for_status()
            return response.json()["choices"][0]["message"]["content"]
        except (requests.RequestException, ValueError, KeyError, IndexError) as exc:
            logger.warning("OpenAI completion failed: %s", exc)
            return None


class AnthropicProvider(LLMProvider):
    """Anthropic messages API provider."""

    def __init__(self, model: str, api_key: str):
        self.model = model
        self.api_key = api_key
        self.endpoint = "https://api.anthropic.com/v1/messages"

    def generate(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> Optional[str]:
        if not self.api_key:
            return None

        try:
            response = requests.post(
                self.endpoint,
                headers={
                    "Content-Type": "application/json",
                    "x-api-key": self.api_key,
                    "anthropic-version": "2023-06-01",
                },
                json={
                    "model": self.model,
                    "messages": [{"role": "user", "content": prompt}],
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                },
                timeout=120,
            )
            response.raise_for_status()
            return response.json()["content"][0]["text"]
        except (requests.RequestException, ValueError, KeyError, IndexError) as exc:
            logger.warning("Anthropic completion failed: %s", exc)
            return None


class OllamaProvider(LLMProvider):
    """Ollama local model provider."""

    def __init__(self, model: str, endpoint: str):
        self.model = model
        self.endpoint = endpoint

    def generate(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> Optional[str]:
        try:
            response = requests.post(
                self.endpoint,
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    "options": {"temperature": temperature, "num_predict": max_tokens},
                },
                timeout=120,
            )
            response.raise_for_status()
            return response.json().get("response")
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Ollama completion failed: %s", exc)
            return None


class LocalLLM:
    """Completion manager choosing a provider from config, with a fallback."""

    def __init__(
        self,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        self.provider_name = provider or LLM_PROVIDER
        self.model = model or LLM_MODEL
        self.api_key = api_key or LLM_API_KEY
        self.endpoint = endpoint or LLM_ENDPOINT

        self.provider = self._create_provider()

    def _create_provider(self) -> LLMProvider:
        provider_name = self.provider_name.lower()

        if provider_name == "anthropic":
            model = self.model if self.model != "gpt-4" else "claude-3-5-sonnet-20241022"
            return AnthropicProvider(model, self.api_key)

        if provider_name == "ollama":
            model = self.model if self.model != "gpt-4" else "qwen2.5-coder:7b"
            endpoint = self.endpoint or "http://127.0.0.1:11434/api/generate"
            return OllamaProvider(model, endpoint)

        endpoint = self.endpoint or "https://api.openai.com/v1/chat/completions"
        return OpenAIProvider(self.model, self.api_key, endpoint)

    def complete(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> str:
        """Generate text with the configured provider, falling back to a stub."""
        response = self.provider.generate(prompt, max_tokens=max_tokens, temperature=temperature)
        if response:
            return response
        return self._fallback(prompt)

    def _fallback(self, prompt: str) -> str:
        """Deterministic placeholder when the provider is unavailable."""
        head = prompt[:600].strip().replace("\n", " ")
        return (
            f"<!-- LLM provider '{self.provider_name}' was unavailable; "
            "this section was not generated. -->\n\n"
            "Prompt excerpt:\n\n"
            f"> {head}\n"
        )
