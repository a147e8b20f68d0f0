"""Prompt management system.

Evaluation prompts are YAML templates rendered with Mako, each carrying
its own LLM settings.
"""

from inforanker.prompts.manager import PromptManager, PromptTemplate, PromptType

__all__ = ["PromptManager", "PromptTemplate", "PromptType"]
