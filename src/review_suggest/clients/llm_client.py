"""Claude API wrapper for single-shot review generation calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic

from review_suggest.exceptions import MalformedResponse, UpstreamTimeout, UpstreamUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    model: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Claude API client.

    Makes exactly one request per ``generate`` call; the caller owns the
    retry budget. SDK errors are translated into ``GenerationError`` types.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        if max_retries is not None:
            kwargs["max_retries"] = max_retries
        self.client = anthropic.AsyncAnthropic(**kwargs)

    async def _call_api(
        self,
        prompt: str,
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> anthropic.types.Message:
        messages = [{"role": "user", "content": prompt}]
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        try:
            return await self.client.messages.create(**kwargs)
        except anthropic.APITimeoutError as exc:
            raise UpstreamTimeout("request timed out") from exc
        except anthropic.APIConnectionError as exc:
            raise UpstreamUnavailable(f"connection failed: {exc}") from exc
        except anthropic.APIStatusError as exc:
            raise UpstreamUnavailable(
                f"upstream returned {exc.status_code}", status_code=exc.status_code
            ) from exc

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.8,
        max_tokens: int = 1500,
    ) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage."""
        logger.debug("LLM call: model=%s, prompt=%d chars", model, len(prompt))
        message = await self._call_api(
            prompt=prompt,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise MalformedResponse("no text content in upstream response")
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        return LLMResponse(
            text=text,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
