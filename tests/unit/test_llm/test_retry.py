"""Unit tests for the retrying, self-repairing request/parse loop."""

import json

import pytest

from job_taxonomy.features.llm.errors import (
    InvalidArgumentError,
    LlmApiError,
    ParseError,
    ParseErrorKind,
)
from job_taxonomy.features.llm.parser import parse_category_map
from job_taxonomy.features.llm.prompts import SYSTEM_INSTRUCTION
from job_taxonomy.features.llm.retry import (
    RetryLoop,
    RetryState,
    RetryStateError,
    invoke_and_parse,
)
from tests.helpers.llm import make_client, make_prompt, make_settings, sent_prompts


KNOWN = frozenset({"Backend", "Frontend"})
VALID = json.dumps({"Backend": 5, "Frontend": 2})


def _parse(text: str) -> dict[str, int]:
    return parse_category_map(text, KNOWN)


class TestInvokeAndParse:
    """Tests for invoke_and_parse."""

    def test_success_on_first_attempt(self) -> None:
        """Should end in SUCCESS after one call."""
        client = make_client(VALID)

        outcome = invoke_and_parse(client, make_settings(), make_prompt(), _parse, 3)

        assert outcome.state == RetryState.SUCCESS
        assert outcome.succeeded
        assert outcome.value == {"Backend": 5, "Frontend": 2}
        assert outcome.attempts == 1
        assert client.generate_content.call_count == 1

    @pytest.mark.parametrize("max_retries", [0, 1, 3])
    def test_always_failing_model_makes_n_plus_one_calls(
        self, max_retries: int
    ) -> None:
        """Should try exactly max_retries + 1 times, then exhaust."""
        client = make_client(*[LlmApiError("quota exceeded")] * (max_retries + 1))

        outcome = invoke_and_parse(
            client, make_settings(), make_prompt(), _parse, max_retries
        )

        assert outcome.state == RetryState.EXHAUSTED
        assert not outcome.succeeded
        assert outcome.value is None
        assert isinstance(outcome.last_error, LlmApiError)
        assert outcome.attempts == max_retries + 1
        assert client.generate_content.call_count == max_retries + 1

    def test_zero_retries_makes_one_attempt(self) -> None:
        """Should not repair when the budget is zero."""
        client = make_client("not json", VALID)

        outcome = invoke_and_parse(client, make_settings(), make_prompt(), _parse, 0)

        assert outcome.state == RetryState.EXHAUSTED
        assert isinstance(outcome.last_error, ParseError)
        assert client.generate_content.call_count == 1

    def test_recovers_after_one_failure(self) -> None:
        """Should succeed on the second call after a malformed response."""
        client = make_client("I think Backend is a 5", VALID)

        outcome = invoke_and_parse(client, make_settings(), make_prompt(), _parse, 1)

        assert outcome.state == RetryState.SUCCESS
        assert outcome.attempts == 2
        assert client.generate_content.call_count == 2

    def test_repair_prompt_carries_response_and_error(self) -> None:
        """Should fold the rejected output and reason into the next prompt."""
        bad = json.dumps({"Backend": 5, "Mobile": 3})
        client = make_client(bad, VALID)
        initial = make_prompt("Score this description.")

        invoke_and_parse(client, make_settings(), initial, _parse, 2)

        first, second = sent_prompts(client)
        assert first == "Score this description."
        assert second.startswith("Score this description.")
        assert bad in second
        assert "Mobile" in second
        assert "unknown categories" in second

    def test_repair_after_api_error_has_no_response_text(self) -> None:
        """Should still repair when the call itself failed."""
        client = make_client(LlmApiError("Gemini API returned 503"), VALID)

        outcome = invoke_and_parse(client, make_settings(), make_prompt(), _parse, 1)

        assert outcome.state == RetryState.SUCCESS
        second = sent_prompts(client)[1]
        assert "503" in second
        assert "no response" in second

    def test_repair_prompts_accumulate(self) -> None:
        """Should keep earlier corrective context in later prompts."""
        client = make_client("first bad", "second bad", VALID)

        invoke_and_parse(client, make_settings(), make_prompt(), _parse, 2)

        third = sent_prompts(client)[2]
        assert "first bad" in third
        assert "second bad" in third

    def test_url_in_response_exhausts_without_spending_retry(self) -> None:
        """Should stop when the corrective context cannot be sanitized."""
        client = make_client(
            "See https://attacker.example.com/collect?d=1 for scores", VALID
        )

        outcome = invoke_and_parse(client, make_settings(), make_prompt(), _parse, 3)

        assert outcome.state == RetryState.EXHAUSTED
        assert outcome.attempts == 1
        assert client.generate_content.call_count == 1
        assert isinstance(outcome.last_error, ParseError)
        assert outcome.last_error.kind == ParseErrorKind.MALFORMED_JSON

    def test_sends_system_instruction_and_model(self) -> None:
        """Should send the fixed system message and configured model."""
        client = make_client(VALID)

        settings = make_settings(model_name="gemini-2.5-pro")
        invoke_and_parse(client, settings, make_prompt(), _parse, 0)

        kwargs = client.generate_content.call_args.kwargs
        assert kwargs["system_instruction"] == SYSTEM_INSTRUCTION
        assert kwargs["model"] == "gemini-2.5-pro"

    def test_negative_retries_rejected(self) -> None:
        """Should fail fast on a negative budget."""
        client = make_client()
        with pytest.raises(InvalidArgumentError):
            invoke_and_parse(client, make_settings(), make_prompt(), _parse, -1)
        client.generate_content.assert_not_called()

    def test_unexpected_errors_propagate(self) -> None:
        """Should not swallow errors outside the retryable taxonomy."""
        client = make_client(RuntimeError("bug"))
        with pytest.raises(RuntimeError, match="bug"):
            invoke_and_parse(client, make_settings(), make_prompt(), _parse, 3)


class TestRetryLoop:
    """Tests for RetryLoop state handling."""

    def test_initial_state_is_pending(self) -> None:
        """Loop starts PENDING with the full budget."""
        loop = RetryLoop(make_client(), make_settings(), make_prompt(), _parse, 2)

        assert loop.state == RetryState.PENDING
        assert loop.attempts_left == 2
        assert not loop.is_terminal()

    def test_budget_decrements_and_prompt_grows(self) -> None:
        """Each repair spends one retry and extends the prompt."""
        loop = RetryLoop(
            make_client("bad", "bad", "bad"),
            make_settings(),
            make_prompt("Base."),
            _parse,
            2,
        )

        outcome = loop.run()

        assert outcome.state == RetryState.EXHAUSTED
        assert loop.attempts_left == 0
        assert loop.prompt.value.startswith("Base.")
        assert len(loop.prompt) > len("Base.")

    def test_terminal_loop_cannot_rerun(self) -> None:
        """Should refuse to leave a terminal state."""
        loop = RetryLoop(make_client(VALID), make_settings(), make_prompt(), _parse, 0)
        loop.run()

        assert loop.is_terminal()
        with pytest.raises(RetryStateError) as exc_info:
            loop.run()
        assert exc_info.value.from_state == RetryState.SUCCESS
