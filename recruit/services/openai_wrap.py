"""Thin wrapper around the OpenAI Chat Completions HTTP API.

We call the HTTP API directly with `requests` instead of the `openai` SDK so
the wire shape stays under our control. `CompletionClient` only moves text;
`invoke_json` layers the model fallback and JSON recovery on top of it.
"""

import json
import logging
import random
import re
import time
from typing import Any, Dict, List, Optional

import requests

from ..errors import EvaluationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


class CompletionError(Exception):
    """Transport or API failure talking to the completion service."""

    def __init__(self, message, status=None, retryable=False):
        super().__init__(message)
        self.status = status
        self.retryable = retryable


class CompletionClient:
    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: float = 60,
                 max_attempts: int = 3, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self.http = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> Optional["CompletionClient"]:
        api_key = config.get("OPENAI_API_KEY")
        if not api_key:
            return None
        return cls(
            api_key,
            base_url=config.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL,
            timeout=config.get("OPENAI_TIMEOUT", 60),
            max_attempts=config.get("OPENAI_MAX_ATTEMPTS", 3),
        )

    def complete(self, messages: List[Dict[str, str]], model: str, temperature: float = 0.3,
                 json_mode: bool = False) -> str:
        """Return the text of the first choice.

        429, 5xx and network errors are retried with exponential backoff,
        honouring Retry-After. Quota exhaustion and other 4xx fail at once.
        """
        url = f"{self.base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        body = {"model": model, "messages": messages, "temperature": temperature}
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        backoff = 1.0
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                r = self.http.post(url, headers=headers, json=body, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                last_error = CompletionError(f"network error: {e}", retryable=True)
                logger.warning("OpenAI network error (%s), attempt %s/%s", model, attempt, self.max_attempts)
                self._sleep(backoff, attempt)
                backoff *= 2
                continue

            if r.status_code == 429 or 500 <= r.status_code < 600:
                body_text = r.text or ""
                if "insufficient_quota" in body_text:
                    raise CompletionError("OpenAI quota exhausted", status=r.status_code)
                last_error = CompletionError(f"HTTP {r.status_code}: {body_text[:500]}",
                                             status=r.status_code, retryable=True)
                wait = _retry_after(r.headers.get("Retry-After"), backoff)
                logger.warning("OpenAI returned %s (%s), attempt %s/%s, retrying in %ss",
                               r.status_code, model, attempt, self.max_attempts, wait)
                self._sleep(wait, attempt)
                backoff *= 2
                continue

            if r.status_code >= 400:
                raise CompletionError(f"HTTP {r.status_code}: {(r.text or '')[:500]}", status=r.status_code)

            try:
                jr = r.json()
                return jr["choices"][0]["message"]["content"] or ""
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise CompletionError(f"unexpected response shape: {e}", status=r.status_code)

        raise last_error or CompletionError("no attempts made")

    def _sleep(self, wait, attempt):
        if attempt < self.max_attempts:
            time.sleep(wait + random.uniform(0, 0.5))


def _retry_after(value, default):
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        # HTTP-date form; use our own backoff
        return default


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def extract_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span in text that parses as JSON, or None.

    Braces inside JSON string literals are ignored, and prose in braces
    (``use {braces} then {...}``) is skipped.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    span = text[start:i + 1]
                    try:
                        json.loads(span)
                    except ValueError:
                        break
                    return span
        # unbalanced or not JSON from this brace, try the next one
        start = text.find("{", start + 1)
    return None


def parse_json_object(text: str) -> Dict[str, Any]:
    """Parse a model reply that should be a JSON object, tolerating fences and prose."""
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except ValueError:
        span = extract_json_object(cleaned)
        if span is None:
            raise ValueError("no JSON object found in completion")
        data = json.loads(span)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def invoke_json(client, prompt: str, system: str, fallback_system: str, models: List[str],
                fallback_model: str, temperature: float = 0.3) -> Dict[str, Any]:
    """Ask for a JSON object, trying each model in JSON mode, then one free-text call.

    Raises EvaluationError if no attempt yields a parseable object.
    """
    last_error = None
    for model in models:
        messages = [{"role": "system", "content": system}, {"role": "user", "content": prompt}]
        try:
            content = client.complete(messages, model=model, temperature=temperature, json_mode=True)
            data = json.loads(content)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return data
        except (CompletionError, ValueError) as e:
            last_error = e
            logger.warning("Model %s failed, trying next: %s", model, e)

    logger.warning("All JSON mode attempts failed, retrying %s without response_format", fallback_model)
    messages = [{"role": "system", "content": fallback_system}, {"role": "user", "content": prompt}]
    try:
        content = client.complete(messages, model=fallback_model, temperature=temperature, json_mode=False)
        return parse_json_object(content)
    except (CompletionError, ValueError) as e:
        last_error = e

    raise EvaluationError(f"Failed to get AI analysis: {last_error}")
