"""Factory for creating LLM clients from model settings."""

import structlog

from job_taxonomy.features.llm.errors import LlmAuthError
from job_taxonomy.features.llm.gemini_client import GeminiApiKeyClient
from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.llm.protocols import LlmClient


logger = structlog.get_logger()


def create_llm_client(
    settings: ModelSettings,
    *,
    api_key: str | None = None,
    min_request_interval: float = 0.0,
) -> LlmClient:
    """Create an LLM client configured from ``settings``.

    Args:
        settings: Model name and request timeout.
        api_key: Gemini API key.
        min_request_interval: Minimum seconds between requests.

    Returns:
        An LlmClient implementation ready for use.

    Raises:
        LlmAuthError: If no API key is provided.
    """
    log = logger.bind(component="llm", subcomponent="factory")

    if not api_key:
        msg = "No Gemini credentials configured (need GEMINI_API_KEY)"
        raise LlmAuthError(msg)

    log.info(
        "llm_client_created",
        auth_method="api_key",
        model=settings.model_name,
        timeout=settings.request_timeout,
    )
    return GeminiApiKeyClient(
        api_key=api_key,
        model=settings.model_name,
        timeout=settings.request_timeout,
        min_request_interval=min_request_interval,
    )
