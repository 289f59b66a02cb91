"""LLM access: client, prompts, response parsing and the repair loop."""

from job_taxonomy.features.llm.errors import (
    InvalidArgumentError,
    LlmApiError,
    LlmAuthError,
    LlmProcessingError,
    ModelCallError,
    ParseError,
    ParseErrorKind,
)
from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.llm.protocols import LlmClient
from job_taxonomy.features.llm.retry import (
    RetryOutcome,
    RetryState,
    invoke_and_parse,
)


__all__ = [
    "InvalidArgumentError",
    "LlmApiError",
    "LlmAuthError",
    "LlmClient",
    "LlmProcessingError",
    "ModelCallError",
    "ModelSettings",
    "ParseError",
    "ParseErrorKind",
    "RetryOutcome",
    "RetryState",
    "invoke_and_parse",
]
