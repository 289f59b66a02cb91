"""Integration tests for classifying a designation over the HTTP client."""

import json
import threading
from unittest.mock import MagicMock, patch

import httpx

from job_taxonomy.classification import ClassificationMetrics, classify_designation
from job_taxonomy.features.llm.gemini_client import GeminiApiKeyClient
from job_taxonomy.features.llm.models import ModelSettings


DESCRIPTIONS = [
    "Owns Go microservices and Postgres schemas.",
    "Builds React component libraries.",
    "Ships features across a Django API and a Vue frontend.",
    "Apply now at https://careers.example.com/42 for a backend role.",
]

SCORES = {
    "Go microservices": {"Backend": 5, "Frontend": 1},
    "React component": {"Backend": 1, "Frontend": 5},
    "Django API": {"Backend": 4, "Frontend": 4},
}


def _response(text: str, status_code: int = 200) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = {
        "candidates": [{"content": {"parts": [{"text": text}]}}]
    }
    return response


class FakeGemini:
    """Routes generateContent requests by prompt content."""

    def __init__(self, fail_first_discovery: bool = False) -> None:
        self.prompts: list[str] = []
        self._fail_first_discovery = fail_first_discovery
        self._lock = threading.Lock()

    def post(self, url: str, **kwargs: object) -> MagicMock:
        body = kwargs["json"]
        assert isinstance(body, dict)
        prompt = body["contents"][0]["parts"][0]["text"]
        with self._lock:
            self.prompts.append(prompt)

        if "sub-categor" in prompt.lower():
            if self._fail_first_discovery:
                self._fail_first_discovery = False
                return _response('["Backend", "Frontend"]')
            return _response(json.dumps({"subcategories": ["Backend", "Frontend"]}))

        for marker, scores in SCORES.items():
            if marker in prompt:
                return _response(json.dumps(scores))
        return _response("unrecognized prompt", status_code=500)


def _settings() -> ModelSettings:
    return ModelSettings(model_name="gemini-2.5-flash", truncate_length=4000)


class TestClassificationFlow:
    """End-to-end classification against a fake Gemini endpoint."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        ClassificationMetrics.reset()

    def test_classifies_and_ranks(self) -> None:
        """Should discover categories, score, and rank descriptions."""
        fake = FakeGemini()
        client = GeminiApiKeyClient(api_key="test-key")  # noqa: S106

        with patch(
            "job_taxonomy.features.llm.gemini_client.httpx.post", side_effect=fake.post
        ):
            report = classify_designation(
                client,
                _settings(),
                "Software Engineer",
                DESCRIPTIONS,
                max_retries=1,
                k=2,
            )

        assert report.categories == ["Backend", "Frontend"]
        assert [entry.score for entry in report.top_k["Backend"]] == [5, 4]
        assert report.top_k["Frontend"][0].description == DESCRIPTIONS[1]
        assert report.stats.rejected == 1
        assert report.stats.scored == 3
        assert all("https://" not in prompt for prompt in fake.prompts)

    def test_repairs_discovery_response(self) -> None:
        """Should recover from a wrongly shaped discovery response."""
        fake = FakeGemini(fail_first_discovery=True)
        client = GeminiApiKeyClient(api_key="test-key")  # noqa: S106

        with patch(
            "job_taxonomy.features.llm.gemini_client.httpx.post", side_effect=fake.post
        ):
            report = classify_designation(
                client,
                _settings(),
                "Software Engineer",
                DESCRIPTIONS[:2],
                max_retries=1,
                k=1,
                max_workers=2,
            )

        assert report.discovery_calls == 2
        assert "Previous Attempt Rejected" in fake.prompts[1]
        assert report.top_k["Backend"][0].description == DESCRIPTIONS[0]
        assert report.top_k["Frontend"][0].description == DESCRIPTIONS[1]
        assert ClassificationMetrics.get_instance().repair_attempts_total == 1
