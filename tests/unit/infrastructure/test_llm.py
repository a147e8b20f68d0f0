"""Unit tests for LLMClient."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from inforanker.infrastructure.llm import (
    LLMClient,
    LLMConfig,
    LLMError,
    LLMResponse,
    extract_json_object,
)


class TestLLMConfig:
    """Test LLMConfig dataclass."""

    def test_default_values(self) -> None:
        """Should have correct default values."""
        config = LLMConfig(model="openai/gpt-4o-mini")

        assert config.max_tokens == 1000
        assert config.temperature == 0.7
        assert config.timeout == 60

    def test_from_prompt_settings(self) -> None:
        """Should create config from prompt LLM settings."""
        mock_settings = MagicMock()
        mock_settings.model = "openai/gpt-4o"
        mock_settings.max_tokens = 1500
        mock_settings.temperature = 0.2

        config = LLMConfig.from_prompt_settings(mock_settings, timeout=90)

        assert config.model == "openai/gpt-4o"
        assert config.max_tokens == 1500
        assert config.temperature == 0.2
        assert config.timeout == 90


class TestLLMResponse:
    """Test LLMResponse dataclass."""

    def test_token_properties(self) -> None:
        """Should expose prompt and completion tokens."""
        response = LLMResponse(
            content="{}",
            model="openai/gpt-4o-mini",
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        )

        assert response.input_tokens == 10
        assert response.output_tokens == 5

    def test_missing_usage(self) -> None:
        """Should default token counts to zero."""
        response = LLMResponse(content="", model="m")
        assert response.input_tokens == 0
        assert response.output_tokens == 0


class TestExtractJsonObject:
    """Test JSON extraction from completions."""

    def test_plain_object(self) -> None:
        """Should parse a bare object."""
        assert extract_json_object('{"evaluations": []}') == {"evaluations": []}

    def test_fenced_object(self) -> None:
        """Should strip markdown code fences."""
        content = '```json\n{"relevance": 8, "reason": "on topic"}\n```'
        assert extract_json_object(content) == {"relevance": 8, "reason": "on topic"}

    def test_object_inside_prose(self) -> None:
        """Should keep the text between the outermost braces."""
        content = 'Here is my answer: {"a": {"b": 1}} Hope it helps.'
        assert extract_json_object(content) == {"a": {"b": 1}}

    @pytest.mark.parametrize("content", ["", "no json here", "[1, 2, 3]", "{not: valid}"])
    def test_invalid_content(self, content: str) -> None:
        """Should raise LLMError when no object can be parsed."""
        with pytest.raises(LLMError):
            extract_json_object(content)


class TestLLMClient:
    """Test LLMClient functionality."""

    @pytest.fixture
    def mock_acompletion(self) -> MagicMock:
        """Create mock for litellm.acompletion."""
        mock_response = MagicMock()
        mock_response.choices = [MagicMock()]
        mock_response.choices[0].message.content = '{"evaluations": [{"id": 1, "relevance": 7}]}'
        mock_response.model = "openai/gpt-4o-mini"
        mock_response.usage = MagicMock()
        mock_response.usage.prompt_tokens = 10
        mock_response.usage.completion_tokens = 20
        mock_response.usage.total_tokens = 30

        return mock_response

    @pytest.fixture
    def llm_client(self) -> LLMClient:
        """Create LLMClient instance."""
        return LLMClient()

    @pytest.mark.asyncio
    async def test_complete_passes_config(
        self, llm_client: LLMClient, mock_acompletion: MagicMock
    ) -> None:
        """Should pass config parameters to acompletion."""
        mock_fn = AsyncMock(return_value=mock_acompletion)

        with patch("inforanker.infrastructure.llm.acompletion", mock_fn):
            config = LLMConfig(model="openai/gpt-4o", max_tokens=2000, temperature=0.5, timeout=120)
            messages = [{"role": "user", "content": "Test"}]

            response = await llm_client.complete(config, messages)

            mock_fn.assert_called_once_with(
                model="openai/gpt-4o",
                messages=messages,
                max_tokens=2000,
                temperature=0.5,
                timeout=120,
            )
            assert response.usage["total_tokens"] == 30

    @pytest.mark.asyncio
    async def test_complete_handles_no_usage(
        self, llm_client: LLMClient, mock_acompletion: MagicMock
    ) -> None:
        """Should handle missing usage data."""
        mock_acompletion.usage = None

        with patch(
            "inforanker.infrastructure.llm.acompletion",
            new_callable=AsyncMock,
            return_value=mock_acompletion,
        ):
            response = await llm_client.complete(
                LLMConfig(model="openai/gpt-4o-mini"), [{"role": "user", "content": "Hi"}]
            )

            assert response.usage == {}

    @pytest.mark.asyncio
    async def test_complete_raises_llm_error(self, llm_client: LLMClient) -> None:
        """Should wrap exceptions in LLMError."""
        with patch(
            "inforanker.infrastructure.llm.acompletion",
            new_callable=AsyncMock,
            side_effect=Exception("API error"),
        ):
            with pytest.raises(LLMError) as exc_info:
                await llm_client.complete(
                    LLMConfig(model="openai/gpt-4o-mini"), [{"role": "user", "content": "Hi"}]
                )

            assert "API error" in str(exc_info.value)
            assert exc_info.value.model == "openai/gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_complete_json(self, llm_client: LLMClient, mock_acompletion: MagicMock) -> None:
        """Should parse the JSON object and keep usage."""
        with patch(
            "inforanker.infrastructure.llm.acompletion",
            new_callable=AsyncMock,
            return_value=mock_acompletion,
        ):
            result = await llm_client.complete_json(
                LLMConfig(model="openai/gpt-4o-mini"), [{"role": "user", "content": "Rate"}]
            )

            assert result.data == {"evaluations": [{"id": 1, "relevance": 7}]}
            assert result.input_tokens == 10
            assert result.output_tokens == 20

    @pytest.mark.asyncio
    async def test_complete_json_unparseable(
        self, llm_client: LLMClient, mock_acompletion: MagicMock
    ) -> None:
        """Should raise LLMError tagged with the model on invalid output."""
        mock_acompletion.choices[0].message.content = "I cannot rate these articles."

        with patch(
            "inforanker.infrastructure.llm.acompletion",
            new_callable=AsyncMock,
            return_value=mock_acompletion,
        ):
            with pytest.raises(LLMError) as exc_info:
                await llm_client.complete_json(
                    LLMConfig(model="openai/gpt-4o-mini"), [{"role": "user", "content": "Rate"}]
                )

            assert exc_info.value.context["model"] == "openai/gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_health_check(self, llm_client: LLMClient, mock_acompletion: MagicMock) -> None:
        """Should report whether the model answers."""
        with patch(
            "inforanker.infrastructure.llm.acompletion",
            new_callable=AsyncMock,
            return_value=mock_acompletion,
        ):
            assert await llm_client.health_check("openai/gpt-4o-mini") is True

        with patch(
            "inforanker.infrastructure.llm.acompletion",
            new_callable=AsyncMock,
            side_effect=Exception("unauthorized"),
        ):
            assert await llm_client.health_check("openai/gpt-4o-mini") is False
