"""LLM client abstraction using LiteLLM.

This module provides a unified interface for LLM calls across different providers
(Anthropic, OpenAI, etc.) using LiteLLM as the backend. Evaluation prompts
ask for JSON, so the client can also return the parsed JSON object of a
completion.
"""

import json
from dataclasses import dataclass, field
from typing import Any

import litellm
from litellm import acompletion

from inforanker.core.config import get_config
from inforanker.core.exceptions import LLMError
from inforanker.core.logging import get_logger

logger = get_logger(__name__)

# Configure LiteLLM
litellm.drop_params = True  # Drop unsupported params for each provider


@dataclass
class LLMConfig:
    """LLM configuration for a specific use case.

    Attributes:
        model: Model identifier (e.g., "openai/gpt-4o-mini")
        max_tokens: Maximum tokens in response
        temperature: Sampling temperature (0-1)
        timeout: Request timeout in seconds
    """

    model: str
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 60

    @classmethod
    def from_prompt_settings(cls, settings: Any, timeout: int = 60) -> "LLMConfig":
        """Build from a prompt template's LLM settings."""
        return cls(
            model=settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            timeout=timeout,
        )


@dataclass
class LLMResponse:
    """Standardized LLM response.

    Attributes:
        content: Generated text content
        model: Model used for generation
        usage: Token usage statistics
        raw_response: Raw response from provider
    """

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    raw_response: Any = None

    @property
    def input_tokens(self) -> int:
        return self.usage.get("prompt_tokens", 0)

    @property
    def output_tokens(self) -> int:
        return self.usage.get("completion_tokens", 0)


@dataclass
class LLMJSONResponse:
    """Parsed JSON completion with its token usage."""

    data: dict[str, Any]
    response: LLMResponse

    @property
    def input_tokens(self) -> int:
        return self.response.input_tokens

    @property
    def output_tokens(self) -> int:
        return self.response.output_tokens


def extract_json_object(content: str) -> dict[str, Any]:
    """Parse the JSON object embedded in a completion.

    Strips markdown code fences and keeps the text between the first '{'
    and the last '}'.

    Args:
        content: Raw completion text

    Returns:
        Parsed JSON object

    Raises:
        LLMError: If no JSON object can be parsed
    """
    text = content.strip()
    if text.startswith("```"):
        text = text.removeprefix("```json").removeprefix("```")
        text = text.removesuffix("```").strip()

    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise LLMError("Completion contains no JSON object", context={"content": content[:200]})

    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise LLMError(
            f"Completion JSON is invalid: {e}", context={"content": content[:200]}
        ) from e

    if not isinstance(data, dict):
        raise LLMError("Completion JSON is not an object")
    return data


class LLMClient:
    """Unified LLM client using LiteLLM.

    Model naming convention:
        - Anthropic: "anthropic/claude-3-5-haiku-20241022"
        - OpenAI: "openai/gpt-4o-mini"

    Example:
        >>> client = LLMClient()
        >>> response = await client.complete(
        ...     config=LLMConfig(model="openai/gpt-4o-mini"),
        ...     messages=[{"role": "user", "content": "Hello!"}]
        ... )
        >>> print(response.content)
    """

    def __init__(self) -> None:
        """Initialize LLM client with API keys from settings."""
        config = get_config()
        if config.anthropic_api_key:
            litellm.anthropic_key = config.anthropic_api_key
        if config.openai_api_key:
            litellm.openai_key = config.openai_api_key

        logger.info("LLMClient initialized")

    async def complete(
        self,
        config: LLMConfig,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion from LLM.

        Args:
            config: LLM configuration
            messages: List of message dicts with 'role' and 'content'
            **kwargs: Additional parameters passed to the model

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If generation fails
        """
        try:
            logger.debug(
                "LLM request",
                model=config.model,
                max_tokens=config.max_tokens,
                message_count=len(messages),
            )

            response = await acompletion(
                model=config.model,
                messages=messages,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                timeout=config.timeout,
                **kwargs,
            )

            content = response.choices[0].message.content or ""

            usage = {}
            if response.usage:
                usage = {
                    "prompt_tokens": response.usage.prompt_tokens or 0,
                    "completion_tokens": response.usage.completion_tokens or 0,
                    "total_tokens": response.usage.total_tokens or 0,
                }

            logger.debug(
                "LLM response",
                model=response.model,
                content_length=len(content),
                usage=usage,
            )

            return LLMResponse(
                content=content,
                model=response.model or config.model,
                usage=usage,
                raw_response=response,
            )

        except Exception as e:
            logger.error(
                "LLM request failed",
                model=config.model,
                error=str(e),
                exc_info=True,
            )
            raise LLMError(f"LLM request failed: {e}", model=config.model) from e

    async def complete_json(
        self,
        config: LLMConfig,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> LLMJSONResponse:
        """Generate a completion and parse its JSON object.

        Args:
            config: LLM configuration
            messages: Chat messages
            **kwargs: Additional parameters passed to the model

        Returns:
            Parsed object and the underlying response

        Raises:
            LLMError: If generation fails or the output is not a JSON object
        """
        response = await self.complete(config, messages, **kwargs)
        try:
            data = extract_json_object(response.content)
        except LLMError as e:
            logger.warning("Unparseable LLM output", model=config.model, error=str(e))
            raise e.with_context(model=config.model)
        return LLMJSONResponse(data=data, response=response)

    async def health_check(self, model: str) -> bool:
        """Check that a model answers a trivial prompt.

        Args:
            model: Model identifier

        Returns:
            True if the model responded
        """
        try:
            response = await self.complete(
                LLMConfig(model=model, max_tokens=5, temperature=0, timeout=30),
                messages=[{"role": "user", "content": "ping"}],
            )
        except LLMError:
            return False
        return bool(response.content or response.usage)


# Singleton instance
_llm_client: LLMClient | None = None


def get_llm_client() -> LLMClient:
    """Get singleton LLMClient instance.

    Returns:
        LLMClient instance
    """
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "LLMJSONResponse",
    "LLMError",
    "extract_json_object",
    "get_llm_client",
]
