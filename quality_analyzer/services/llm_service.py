# Data Quality Analyzer - OpenAI LLM Service
# Chat completion client with explicit timeout and error translation

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from openai import APITimeoutError, AsyncOpenAI, OpenAIError

from quality_analyzer.core.config import OpenAIConfig
from quality_analyzer.core.exceptions import ErrorCode, RecommendationServiceException
from quality_analyzer.core.logging import LogContext, get_logger

logger = get_logger(__name__)


# ============================================================================
# Types
# ============================================================================

@dataclass
class LLMUsage:
    """Token usage tracking."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    model: str = ""


@dataclass
class LLMResponse:
    """Response from LLM completion."""

    content: str
    usage: LLMUsage
    model: str
    finish_reason: str
    latency_ms: float = 0.0


@dataclass
class Message:
    """Chat message for LLM."""

    role: str  # system, user, assistant
    content: str
    name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to OpenAI message format."""
        msg = {"role": self.role, "content": self.content}
        if self.name:
            msg["name"] = self.name
        return msg


# ============================================================================
# LLM Service Implementation
# ============================================================================

class LLMService:
    """
    OpenAI chat completion service.

    Takes its OpenAIConfig (and optionally a client) from the caller. One
    request per call, bounded by the configured timeout; every failure is
    raised as RecommendationServiceException.
    """

    def __init__(self, config: OpenAIConfig, client: Optional[AsyncOpenAI] = None) -> None:
        if client is None and not config.is_configured:
            raise RecommendationServiceException(
                "OpenAI API key is not configured",
                error_code=ErrorCode.CONFIGURATION_ERROR
            )

        self.config = config
        self._client = client or AsyncOpenAI(
            api_key=config.api_key.get_secret_value(),
            organization=config.organization,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries
        )
        self._total_usage = LLMUsage(model=config.default_model)

        logger.info("LLM Service initialized", model=config.default_model, timeout=config.timeout)

    @property
    def total_usage(self) -> LLMUsage:
        """Get cumulative token usage."""
        return self._total_usage

    async def complete(
        self,
        messages: list[Message],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any
    ) -> LLMResponse:
        """
        Generate a chat completion.

        Args:
            messages: List of chat messages
            model: Model to use (defaults to config)
            temperature: Sampling temperature (defaults to config)
            max_tokens: Maximum tokens to generate (defaults to config)
            **kwargs: Additional request parameters

        Returns:
            LLMResponse with content and usage

        Raises:
            RecommendationServiceException: on timeout or any API failure
        """
        model = model or self.config.default_model
        context = LogContext(component="LLMService", operation="complete")

        request_params = {
            "model": model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        request_params.update(kwargs)

        start_time = datetime.utcnow()

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(**request_params),
                timeout=self.config.timeout
            )
        except (asyncio.TimeoutError, APITimeoutError) as e:
            logger.warning("LLM request timed out", context=context, timeout=self.config.timeout)
            raise RecommendationServiceException(
                f"Request timed out after {self.config.timeout}s",
                error_code=ErrorCode.RECOMMENDATION_SERVICE_TIMEOUT,
                cause=e
            )
        except OpenAIError as e:
            logger.warning(f"OpenAI API error: {e}", context=context)
            raise RecommendationServiceException(str(e), cause=e)

        if not response.choices:
            raise RecommendationServiceException("Response contained no choices")

        choice = response.choices[0]
        usage = LLMUsage(model=model)
        if response.usage is not None:
            usage.input_tokens = response.usage.prompt_tokens
            usage.output_tokens = response.usage.completion_tokens
            usage.total_tokens = response.usage.total_tokens

        self._total_usage.input_tokens += usage.input_tokens
        self._total_usage.output_tokens += usage.output_tokens
        self._total_usage.total_tokens += usage.total_tokens

        latency_ms = (datetime.utcnow() - start_time).total_seconds() * 1000

        logger.debug(
            "LLM completion successful",
            context=context,
            model=model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            latency_ms=round(latency_ms, 2)
        )

        return LLMResponse(
            content=choice.message.content or "",
            usage=usage,
            model=model,
            finish_reason=choice.finish_reason or "",
            latency_ms=latency_ms
        )


def get_llm_service(config: OpenAIConfig) -> Optional[LLMService]:
    """LLM service for the given config, or None when no API key is set."""
    if not config.is_configured:
        logger.info("OpenAI API key not set, LLM service disabled")
        return None
    return LLMService(config)
