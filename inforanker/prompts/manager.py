"""Prompt template manager.

Loads and renders prompts from YAML files with Mako templating.
Each template can specify its own LLM settings (model, max_tokens, temperature).
A template without a model uses the model chosen by the caller.
"""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from mako.template import Template
from pydantic import BaseModel, ConfigDict

from inforanker.core.logging import get_logger

logger = get_logger(__name__)


class PromptType(str, Enum):
    """Available prompt types."""

    RELEVANCE_FILTER = "relevance_filter"
    QUALITY_EVALUATION = "quality_evaluation"
    JUDGE_EVALUATION = "judge_evaluation"
    META_JUDGE = "meta_judge"


class LLMSettings(BaseModel):
    """LLM settings for a prompt template."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str | None = None
    max_tokens: int = 1000
    temperature: float = 0.3


class PromptTemplate(BaseModel):
    """Prompt template metadata with LLM settings."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    description: str
    system: str = ""
    template: str
    llm_settings: LLMSettings = LLMSettings()


class PromptManager:
    """Manages prompt templates with Mako rendering.

    Usage:
        >>> manager = PromptManager()
        >>> messages = manager.render_messages(
        ...     PromptType.RELEVANCE_FILTER,
        ...     keywords="quantum computing",
        ...     articles_json="[]",
        ... )
    """

    def __init__(self, prompts_dir: Path | None = None):
        """Initialize prompt manager.

        Args:
            prompts_dir: Directory containing prompt YAML files
                        (defaults to inforanker/prompts/templates/)
        """
        if prompts_dir is None:
            prompts_dir = Path(__file__).parent / "templates"

        self.prompts_dir = prompts_dir
        self._cache: dict[PromptType, PromptTemplate] = {}

        logger.info("PromptManager initialized", prompts_dir=str(self.prompts_dir))

    def load(self, prompt_type: PromptType) -> PromptTemplate:
        """Load prompt template from YAML file.

        Args:
            prompt_type: Type of prompt to load

        Returns:
            PromptTemplate instance

        Raises:
            FileNotFoundError: If prompt file doesn't exist
            ValueError: If YAML is invalid
        """
        if prompt_type in self._cache:
            return self._cache[prompt_type]

        yaml_file = self.prompts_dir / f"{prompt_type.value}.yaml"

        if not yaml_file.exists():
            raise FileNotFoundError(f"Prompt file not found: {yaml_file}")

        try:
            with open(yaml_file, encoding="utf-8") as f:
                data = yaml.safe_load(f)

            llm_settings = LLMSettings(
                model=data.get("model"),
                max_tokens=data.get("max_tokens", 1000),
                temperature=data.get("temperature", 0.3),
            )

            template = PromptTemplate(
                name=data["name"],
                version=data["version"],
                description=data["description"],
                system=data.get("system", ""),
                template=data["template"],
                llm_settings=llm_settings,
            )

            self._cache[prompt_type] = template

            logger.debug(
                "Loaded prompt template",
                type=prompt_type.value,
                version=template.version,
            )

            return template

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_file}: {e}") from e
        except KeyError as e:
            raise ValueError(f"Missing required field in {yaml_file}: {e}") from e

    def render(self, prompt_type: PromptType, **variables: Any) -> str:
        """Render prompt template with variables.

        Args:
            prompt_type: Type of prompt to render
            **variables: Variables to inject into template

        Returns:
            Rendered prompt string

        Raises:
            FileNotFoundError: If prompt template doesn't exist
            ValueError: If template rendering fails
        """
        template_obj = self.load(prompt_type)

        try:
            rendered = Template(template_obj.template).render(**variables)
        except Exception as e:
            raise ValueError(f"Failed to render {prompt_type.value} template: {e}") from e

        logger.debug(
            "Rendered prompt",
            type=prompt_type.value,
            variables=list(variables.keys()),
        )
        return str(rendered).strip()

    def render_messages(self, prompt_type: PromptType, **variables: Any) -> list[dict[str, str]]:
        """Render a template into chat messages (system + user).

        Args:
            prompt_type: Type of prompt to render
            **variables: Variables to inject into template

        Returns:
            Chat message list
        """
        template_obj = self.load(prompt_type)
        messages = []
        if template_obj.system:
            messages.append({"role": "system", "content": template_obj.system.strip()})
        messages.append({"role": "user", "content": self.render(prompt_type, **variables)})
        return messages

    def get_llm_settings(self, prompt_type: PromptType) -> LLMSettings:
        """Get LLM settings for a prompt type.

        Args:
            prompt_type: Type of prompt

        Returns:
            LLMSettings with model, max_tokens, temperature
        """
        return self.load(prompt_type).llm_settings

    def clear_cache(self) -> None:
        """Clear template cache."""
        self._cache.clear()
        logger.debug("Cleared prompt cache")


# Singleton instance
_prompt_manager: PromptManager | None = None


def get_prompt_manager() -> PromptManager:
    """Get singleton PromptManager instance."""
    global _prompt_manager
    if _prompt_manager is None:
        _prompt_manager = PromptManager()
    return _prompt_manager


__all__ = [
    "LLMSettings",
    "PromptManager",
    "PromptTemplate",
    "PromptType",
    "get_prompt_manager",
]
