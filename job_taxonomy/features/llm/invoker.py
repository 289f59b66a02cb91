"""Single model invocation over a sanitized prompt."""

from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.llm.prompts import SYSTEM_INSTRUCTION
from job_taxonomy.features.llm.protocols import LlmClient
from job_taxonomy.features.sanitize import SanitizedString


def invoke(
    client: LlmClient,
    settings: ModelSettings,
    prompt: SanitizedString,
) -> str:
    """Send ``prompt`` to the configured model and return the raw text.

    The prompt is already length-bounded by the prompt builders. Failures
    are not retried here.

    Raises:
        LlmApiError: On transport, auth, quota or timeout failure.
    """
    return client.generate_content(
        prompt=prompt.value,
        system_instruction=SYSTEM_INSTRUCTION,
        model=settings.model_name,
    )
