"""Standard Gemini API client using API key authentication."""

import time
from http import HTTPStatus

import httpx
import structlog

from job_taxonomy.features.llm.errors import LlmApiError


logger = structlog.get_logger()

_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiApiKeyClient:
    """Client for the standard Gemini API using API key authentication.

    Uses the ``generativelanguage.googleapis.com`` endpoint with an
    ``x-goog-api-key`` header. Every failure surfaces as ``LlmApiError``
    on the first occurrence; retrying is the caller's decision.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        timeout: float = 60.0,
        min_request_interval: float = 0.0,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Gemini API key.
            model: Default Gemini model identifier.
            timeout: Seconds to wait for a response before failing.
            min_request_interval: Minimum seconds between requests.
        """
        self._api_key = api_key
        self.model = model
        self._timeout = timeout
        self._min_request_interval = min_request_interval
        self._last_request_time: float = 0.0
        self._log = logger.bind(component="llm", subcomponent="gemini_api_key")

    def _rate_limit(self) -> None:
        """Enforce minimum interval between requests."""
        if self._min_request_interval <= 0:
            return
        now = time.monotonic()
        elapsed = now - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)
        self._last_request_time = time.monotonic()

    @staticmethod
    def _build_request_body(
        prompt: str,
        system_instruction: str | None,
    ) -> dict[str, object]:
        """Build the generateContent request body."""
        request_body: dict[str, object] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        if system_instruction:
            request_body["systemInstruction"] = {
                "parts": [{"text": system_instruction}]
            }
        return request_body

    def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
        model: str | None = None,
    ) -> str:
        """Send a generate content request to the Gemini API.

        Args:
            prompt: User prompt text.
            system_instruction: Optional system instruction.
            model: Model override; defaults to the client's model.

        Returns:
            Generated text from the first candidate.

        Raises:
            LlmApiError: On timeout, transport error, non-200 status, or a
                response without text.
        """
        model_name = model or self.model
        url = f"{_BASE_URL}/{model_name}:generateContent"
        request_body = self._build_request_body(prompt, system_instruction)

        self._rate_limit()

        try:
            response = httpx.post(
                url,
                headers={
                    "x-goog-api-key": self._api_key,
                    "Content-Type": "application/json",
                },
                json=request_body,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            msg = f"Gemini API request timed out after {self._timeout}s"
            raise LlmApiError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Gemini API request failed: {exc}"
            raise LlmApiError(msg) from exc

        if response.status_code != HTTPStatus.OK:
            self._log.warning(
                "gemini_request_failed",
                status=response.status_code,
                model=model_name,
            )
            msg = f"Gemini API returned {response.status_code}"
            raise LlmApiError(msg, status_code=response.status_code)

        return self._extract_text(response)

    @staticmethod
    def _extract_text(response: httpx.Response) -> str:
        """Extract generated text from the API response.

        Raises:
            LlmApiError: If the response is missing expected fields.
        """
        try:
            data = response.json()
        except ValueError as exc:
            msg = "Gemini API response body is not JSON"
            raise LlmApiError(msg) from exc

        if not isinstance(data, dict):
            msg = f"Gemini API response is not an object: {type(data).__name__}"
            raise LlmApiError(msg)

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            msg = "No candidates in Gemini API response"
            raise LlmApiError(msg)

        candidate = candidates[0]
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts:
            msg = "No parts in first candidate"
            raise LlmApiError(msg)

        text = parts[0].get("text") if isinstance(parts[0], dict) else None
        if not isinstance(text, str) or not text:
            msg = "Empty text in response"
            raise LlmApiError(msg)

        return text
