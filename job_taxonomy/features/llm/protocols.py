"""Model client interface used by the classification core."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LlmClient(Protocol):
    """Anything that turns a prompt into response text.

    Category discovery and relevance scoring only ever call
    ``generate_content``; the Gemini client and test doubles both satisfy it.
    """

    def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
        model: str | None = None,
    ) -> str:
        """Return the model's raw text for ``prompt``.

        Raises:
            LlmApiError: If the call fails or yields no text.
        """
        ...
