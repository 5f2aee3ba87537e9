"""Judge clients: the protocol the adapter talks to and an OpenAI implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from openai import OpenAI, OpenAIError

from ..config import JudgeConfig
from ..exceptions import JudgeError


@dataclass(frozen=True)
class TokenUsage:
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    available: bool = False

    @classmethod
    def unavailable(cls, model: str) -> "TokenUsage":
        return cls(model=model)


@dataclass(frozen=True)
class JudgeResponse:
    text: Optional[str]
    usage: TokenUsage


class JudgeClient(Protocol):
    """Anything that turns a prompt into raw judge text."""

    model: str

    def complete(self, prompt: str) -> JudgeResponse: ...


class OpenAIJudgeClient:
    """Chat-completions client for any OpenAI-compatible endpoint."""

    def __init__(self, config: JudgeConfig):
        self.model = config.model
        self.temperature = config.temperature
        self._client = OpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )

    def complete(self, prompt: str) -> JudgeResponse:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise JudgeError(str(e), model=self.model)

        text = response.choices[0].message.content if response.choices else None
        usage = TokenUsage.unavailable(response.model or self.model)
        if response.usage is not None:
            usage = TokenUsage(
                model=response.model or self.model,
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
                available=True,
            )
        return JudgeResponse(text=text, usage=usage)
