"""Client for the hosted chat-completion endpoint that writes custom case prompts."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .config import Settings
from .errors import RemoteRequestFailed
from .models import CaseType, Industry

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a McKinsey case interview coach creating realistic case prompts."
TEST_PROMPT = 'Say "test successful" if you can read this.'

TROUBLESHOOTING_TIPS = (
    "Check that the saved API key is correct in Settings.",
    "Use 'Test API key' in Settings to verify it.",
    "Make sure your account is signed in and allowed to use the endpoint.",
    "Check whether the daily token limit has been exceeded.",
)


def build_case_prompt(industry: Industry, case_type: CaseType) -> str:
    """User prompt asking for one MBB-style case in the given setting."""
    return f"""You are a McKinsey case interview coach. Generate a realistic consulting case interview prompt.

Requirements:
- Case Type: {case_type.name}
- Industry: {industry.name}
- Include: Client background (1-2 sentences), problem statement, key data points (2-3 metrics), \
and the question posed to the candidate
- Make it realistic and representative of actual MBB interviews
- Keep it concise (4-5 sentences total)

Generate the case prompt now:"""


class CaseGenerator:
    """Sends prompts to an OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.api_url = settings.api_url
        self.model = settings.model
        self.temperature = settings.temperature
        self.timeout = settings.timeout_seconds
        self._http = session if session is not None else requests

    def generate_case(self, api_key: str, industry: Industry, case_type: CaseType) -> str:
        """Return the generated case text exactly as the model wrote it."""
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_case_prompt(industry, case_type)},
        ]
        logger.info("Requesting %s case for %s from %s", case_type.name, industry.name, self.api_url)
        data = self._post(api_key, {"messages": messages, "temperature": self.temperature})
        return _completion_text(data)

    def test_credential(self, api_key: str) -> None:
        """Raise RemoteRequestFailed unless the endpoint accepts the key."""
        self._post(api_key, {"messages": [{"role": "user", "content": TEST_PROMPT}]})

    def _post(self, api_key: str, body: dict[str, Any]) -> dict[str, Any]:
        payload = {"model": self.model, **body, "stream": False}
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        logger.debug("POST %s (model=%s, key length=%d)", self.api_url, self.model, len(api_key))
        try:
            response = self._http.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            logger.warning("Chat request timed out after %ss", self.timeout)
            raise RemoteRequestFailed(f"Request timed out after {self.timeout:g}s.") from exc
        except requests.exceptions.RequestException as exc:
            logger.warning("Chat request failed: %s", exc)
            raise RemoteRequestFailed(f"Connection error: {exc}") from exc

        if not response.ok:
            message = _error_message(response)
            logger.warning("Chat endpoint returned %s: %s", response.status_code, message)
            raise RemoteRequestFailed(f"API error: {response.status_code} - {message}", status=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteRequestFailed("API returned a response that is not JSON.", status=response.status_code) from exc
        if not isinstance(data, dict):
            raise RemoteRequestFailed("API returned an unexpected response shape.", status=response.status_code)
        return data


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return "Unknown error"


def _completion_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RemoteRequestFailed("API response did not contain generated text.") from exc
    if not isinstance(content, str):
        raise RemoteRequestFailed("API response did not contain generated text.")
    return content
