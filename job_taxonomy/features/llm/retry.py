"""Retrying, self-repairing model request/parse loop.

Each failed attempt folds the rejected output and the rejection reason
back into the prompt, giving the model corrective context for the next
attempt instead of resending the same prompt.

State transitions:
    PENDING -> PENDING: Attempt failed, repair prompt built, budget left
    PENDING -> SUCCESS: Response parsed
    PENDING -> EXHAUSTED: Budget spent, or repair prompt rejected by sanitization
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Generic, TypeVar

import structlog

from job_taxonomy.features.llm.errors import (
    InvalidArgumentError,
    LlmApiError,
    ParseError,
)
from job_taxonomy.features.llm.invoker import invoke
from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.llm.prompts import build_repair_feedback
from job_taxonomy.features.llm.protocols import LlmClient
from job_taxonomy.features.sanitize import SanitizedString


logger = structlog.get_logger()

T = TypeVar("T")


class RetryState(Enum):
    """Retry loop states."""

    PENDING = auto()
    SUCCESS = auto()
    EXHAUSTED = auto()


class RetryStateError(Exception):
    """Raised when an invalid retry state transition is attempted."""

    def __init__(self, from_state: RetryState, to_state: RetryState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid retry state transition: {from_state.name} -> {to_state.name}"
        )


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Terminal result of one ``invoke_and_parse`` run.

    Attributes:
        state: SUCCESS or EXHAUSTED.
        value: Parsed value on success.
        last_error: Error that ended the run on exhaustion.
        attempts: Number of model calls made.
    """

    state: RetryState
    value: T | None = None
    last_error: Exception | None = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        """Check if the loop ended in SUCCESS."""
        return self.state == RetryState.SUCCESS


class RetryLoop(Generic[T]):
    """One request/parse run with a fixed attempt budget.

    Instances hold per-run state and must not be shared between runs.
    """

    VALID_TRANSITIONS: ClassVar[dict[RetryState, set[RetryState]]] = {
        RetryState.PENDING: {
            RetryState.PENDING,
            RetryState.SUCCESS,
            RetryState.EXHAUSTED,
        },
        RetryState.SUCCESS: set(),  # Terminal state
        RetryState.EXHAUSTED: set(),  # Terminal state
    }

    def __init__(
        self,
        client: LlmClient,
        settings: ModelSettings,
        prompt: SanitizedString,
        parse: Callable[[str], T],
        max_retries: int,
    ) -> None:
        """Initialize the loop in PENDING state.

        Args:
            client: Model client.
            settings: Model settings.
            prompt: Initial sanitized prompt.
            parse: Converts raw response text to a value, raising ParseError.
            max_retries: Repair rounds allowed after the first attempt.

        Raises:
            InvalidArgumentError: If ``max_retries`` is negative.
        """
        if isinstance(max_retries, bool) or max_retries < 0:
            msg = f"max_retries must be a non-negative integer, got {max_retries}"
            raise InvalidArgumentError(msg)

        self._client = client
        self._settings = settings
        self._parse = parse
        self._state = RetryState.PENDING
        self._attempts_left = max_retries
        self._prompt = prompt
        self._attempts = 0
        self._log = logger.bind(component="llm", subcomponent="retry")

    @property
    def state(self) -> RetryState:
        """Get the current state."""
        return self._state

    @property
    def attempts_left(self) -> int:
        """Repair rounds still available."""
        return self._attempts_left

    @property
    def prompt(self) -> SanitizedString:
        """Prompt for the next attempt."""
        return self._prompt

    def is_terminal(self) -> bool:
        """Check if the current state is terminal."""
        return self._state in (RetryState.SUCCESS, RetryState.EXHAUSTED)

    def _transition(self, to_state: RetryState) -> None:
        if to_state not in self.VALID_TRANSITIONS[self._state]:
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise RetryStateError(self._state, to_state)
        self._state = to_state

    def run(self) -> RetryOutcome[T]:
        """Attempt until SUCCESS or EXHAUSTED.

        Returns:
            The terminal outcome.

        Raises:
            RetryStateError: If the loop has already finished.
        """
        if self.is_terminal():
            raise RetryStateError(self._state, RetryState.PENDING)

        while True:
            outcome = self._step()
            if outcome is not None:
                return outcome

    def _step(self) -> RetryOutcome[T] | None:
        """Make one attempt. Returns the outcome once terminal."""
        self._attempts += 1
        response_text: str | None = None

        try:
            response_text = invoke(self._client, self._settings, self._prompt)
            value = self._parse(response_text)
        except (LlmApiError, ParseError) as exc:
            return self._on_failure(response_text, exc)

        self._transition(RetryState.SUCCESS)
        if self._attempts > 1:
            self._log.info("retry_recovered", attempts=self._attempts)
        return RetryOutcome(
            state=RetryState.SUCCESS, value=value, attempts=self._attempts
        )

    def _on_failure(
        self, response_text: str | None, error: Exception
    ) -> RetryOutcome[T] | None:
        self._log.warning(
            "retry_attempt_failed",
            attempt=self._attempts,
            attempts_left=self._attempts_left,
            error_type=type(error).__name__,
            error=str(error),
        )

        if self._attempts_left == 0:
            return self._exhaust(error, reason="budget_spent")

        feedback = SanitizedString.try_create(
            build_repair_feedback(response_text, error)
        )
        next_prompt = self._prompt.concat(feedback) if feedback else None
        if next_prompt is None:
            return self._exhaust(error, reason="repair_prompt_rejected")

        self._transition(RetryState.PENDING)
        self._attempts_left -= 1
        self._prompt = next_prompt
        return None

    def _exhaust(self, error: Exception, reason: str) -> RetryOutcome[T]:
        self._transition(RetryState.EXHAUSTED)
        self._log.warning(
            "retry_exhausted",
            attempts=self._attempts,
            reason=reason,
            error=str(error),
        )
        return RetryOutcome(
            state=RetryState.EXHAUSTED,
            last_error=error,
            attempts=self._attempts,
        )


def invoke_and_parse(
    client: LlmClient,
    settings: ModelSettings,
    prompt: SanitizedString,
    parse: Callable[[str], T],
    max_retries: int,
) -> RetryOutcome[T]:
    """Invoke the model and parse its output, repairing on failure.

    ``max_retries=0`` makes exactly one attempt. A model that always fails
    is called ``max_retries + 1`` times, fewer if a repair prompt cannot
    be sanitized.

    Args:
        client: Model client.
        settings: Model settings.
        prompt: Initial sanitized prompt.
        parse: Converts raw response text to a value, raising ParseError.
        max_retries: Repair rounds allowed after the first attempt.

    Returns:
        SUCCESS with the parsed value, or EXHAUSTED with the last error.

    Raises:
        InvalidArgumentError: If ``max_retries`` is negative.
    """
    return RetryLoop(client, settings, prompt, parse, max_retries).run()
