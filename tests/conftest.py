"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import json

import pytest

from aisast.config import AisastConfig, LLMConfig
from aisast.errors import CompletionError


class StaticProvider:
    """Completion provider returning canned replies, recording every prompt."""

    name = "static"

    def __init__(self, reply: str | list[str] = "") -> None:
        self.replies = reply if isinstance(reply, list) else [reply]
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system: str, prompt: str) -> str:
        self.calls.append((system, prompt))
        index = min(len(self.calls) - 1, len(self.replies) - 1)
        return self.replies[index]


class SlowProvider:
    """Never answers within any reasonable deadline."""

    name = "slow"

    def __init__(self, delay: float = 30.0) -> None:
        self.delay = delay
        self.started = 0

    async def complete(self, system: str, prompt: str) -> str:
        self.started += 1
        await asyncio.sleep(self.delay)
        return "{}"


class FailingProvider:
    name = "failing"

    async def complete(self, system: str, prompt: str) -> str:
        raise CompletionError("upstream returned HTTP 503")


class BrokenProvider:
    """A third-party provider that fails with an arbitrary exception."""

    name = "broken"

    async def complete(self, system: str, prompt: str) -> str:
        raise KeyError("choices")


def enrichment_reply(confidence: int = 92, fix: str | None = None, explanation: str = "Risky") -> str:
    return json.dumps(
        {"confidence": confidence, "suggestedFix": fix, "explanation": explanation}
    )


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(provider="groq", api_key="test-key", timeout=1.0, deadline=2.0)


@pytest.fixture
def config(llm_config: LLMConfig, tmp_path) -> AisastConfig:
    return AisastConfig(llm=llm_config, config_dir=tmp_path)


@pytest.fixture
def fast_config(tmp_path) -> AisastConfig:
    """Config with tiny timeouts for deadline tests."""
    return AisastConfig(
        llm=LLMConfig(provider="groq", api_key="test-key", timeout=0.05, deadline=0.2),
        config_dir=tmp_path,
    )


@pytest.fixture
def js_source() -> str:
    return (
        "function load(userInput, userId) {\n"
        "  const data = eval(userInput);\n"
        '  const q = "SELECT * FROM users WHERE id = " + userId;\n'
        "  return data;\n"
        "}\n"
    )


@pytest.fixture
def static_provider():
    """Factory: ``static_provider(reply_or_replies)``."""
    return StaticProvider


@pytest.fixture
def slow_provider() -> SlowProvider:
    return SlowProvider()


@pytest.fixture
def failing_provider() -> FailingProvider:
    return FailingProvider()


@pytest.fixture
def broken_provider() -> BrokenProvider:
    return BrokenProvider()


@pytest.fixture
def reply():
    """Factory building an analysis reply: ``reply(confidence, fix, explanation)``."""
    return enrichment_reply
