"""Data models for LLM requests."""

from dataclasses import dataclass

from job_taxonomy.features.llm.errors import InvalidArgumentError


@dataclass(frozen=True)
class ModelSettings:
    """Immutable model configuration shared by every invocation.

    Attributes:
        model_name: Model identifier sent to the endpoint.
        truncate_length: Character budget for free text embedded in prompts.
        request_timeout: Seconds to wait for a model response.
    """

    model_name: str
    truncate_length: int
    request_timeout: float = 60.0

    def __post_init__(self) -> None:
        """Validate field values.

        Raises:
            InvalidArgumentError: If any field is out of range.
        """
        if not self.model_name.strip():
            msg = "model_name must be a non-empty string"
            raise InvalidArgumentError(msg)
        if isinstance(self.truncate_length, bool) or self.truncate_length <= 0:
            msg = (
                "truncate_length must be a positive integer, "
                f"got {self.truncate_length}"
            )
            raise InvalidArgumentError(msg)
        if self.request_timeout <= 0:
            msg = f"request_timeout must be positive, got {self.request_timeout}"
            raise InvalidArgumentError(msg)
