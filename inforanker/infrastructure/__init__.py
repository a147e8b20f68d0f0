"""Infrastructure layer components.

Clients for external services: the LLM gateway and the shared HTTP client
used by source adapters.
"""

from inforanker.infrastructure.http_client import HTTPClient
from inforanker.infrastructure.llm import LLMClient, LLMConfig, LLMResponse

__all__ = ["HTTPClient", "LLMClient", "LLMConfig", "LLMResponse"]
