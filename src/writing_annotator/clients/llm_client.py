"""Async Claude client shared by the model-backed analyzers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import anthropic
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from writing_annotator.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

# Errors worth another attempt; anything else (bad request, auth) fails fast.
TRANSIENT_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.APITimeoutError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


@dataclass
class LLMResponse:
    """Response text plus usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int


@dataclass(frozen=True)
class TokenUsage:
    model: str
    label: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Claude client with bounded concurrency and retries on transient errors.

    Analyzers of one batch call ``generate_json`` concurrently; at most
    ``max_concurrency`` requests are in flight at a time. Own one client per
    session and ``close()`` it (or use ``async with``) when done.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        *,
        max_retries: int = 3,
        max_concurrency: int = 4,
    ):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self.max_retries = max_retries
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._usage: list[TokenUsage] = []

    async def __aenter__(self) -> LLMClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    async def _create(self, **kwargs) -> anthropic.types.Message:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(min=1, max=10),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        ):
            with attempt:
                async with self._semaphore:
                    return await self.client.messages.create(**kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        label: str = "",
    ) -> LLMResponse:
        """Send one user prompt and return the first text block."""
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        logger.debug("LLM call [%s]: model=%s", label or "-", model)
        try:
            message = await self._create(**kwargs)
        except Exception:
            logger.error("LLM call [%s] failed", label or "-", exc_info=True)
            raise

        usage = TokenUsage(
            model=model,
            label=label,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )
        self._usage.append(usage)
        logger.debug(
            "LLM response [%s]: %d input, %d output tokens",
            label or "-", usage.input_tokens, usage.output_tokens,
        )
        return LLMResponse(
            text=message.content[0].text,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )

    async def generate_json(self, prompt: str, **kwargs) -> dict | list:
        """Like ``generate`` but parse the reply as JSON (raises ValueError)."""
        response = await self.generate(prompt, **kwargs)
        return extract_json(response.text)

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(u.input_tokens for u in self._usage),
            "output": sum(u.output_tokens for u in self._usage),
            "calls": [(u.model, u.input_tokens, u.output_tokens) for u in self._usage],
            "by_label": {},
        }
        for u in self._usage:
            summary["by_label"][u.label] = summary["by_label"].get(u.label, 0) + u.input_tokens + u.output_tokens
        self._usage.clear()
        return summary
