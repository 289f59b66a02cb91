"""Shared builders for LLM-facing tests."""

import json
from unittest.mock import MagicMock

from job_taxonomy.features.llm.gemini_client import GeminiApiKeyClient
from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.sanitize import SanitizedString


def make_settings(
    model_name: str = "gemini-2.5-flash",
    truncate_length: int = 2000,
) -> ModelSettings:
    """Create test model settings."""
    return ModelSettings(model_name=model_name, truncate_length=truncate_length)


def make_client(*responses: object) -> MagicMock:
    """Create a mock client returning (or raising) ``responses`` in order."""
    client = MagicMock(spec=GeminiApiKeyClient)
    client.generate_content.side_effect = list(responses)
    return client


def make_prompt(text: str = "Classify this.") -> SanitizedString:
    """Create a sanitized prompt, failing loudly on bad fixtures."""
    return SanitizedString.create(text)


def scores_json(**scores: int) -> str:
    """Render a relevance response."""
    return json.dumps(scores)


def subcategories_json(*names: str) -> str:
    """Render a category discovery response."""
    return json.dumps({"subcategories": list(names)})


def sent_prompts(client: MagicMock) -> list[str]:
    """Prompts passed to the mock client, in call order."""
    return [c.kwargs["prompt"] for c in client.generate_content.call_args_list]
