"""Thin client for the Gemini ``generateContent`` REST endpoint.

Model output is free text that is asked to contain JSON. It comes back
wrapped in markdown fences, with trailing commas, or with prose around the
array often enough that every caller goes through :func:`parse_json_array`.
"""

import json
import logging
import re
from typing import Any, List, Optional

import httpx

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


class ModelResponseError(ValueError):
    """The model answered, but not with a JSON array."""


def strip_code_fences(text: str) -> str:
    return FENCE_RE.sub("", text).strip()


def parse_json_array(text: Optional[str]) -> List[Any]:
    cleaned = strip_code_fences(text or "")
    if not cleaned.startswith("["):
        match = ARRAY_RE.search(cleaned)
        if not match:
            raise ModelResponseError("no JSON array in model response")
        cleaned = match.group(0)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        # The comma cleanup also rewrites string values, so it only runs
        # on text that is not valid JSON already.
        try:
            parsed = json.loads(TRAILING_COMMA_RE.sub(r"\1", cleaned))
        except json.JSONDecodeError as e:
            raise ModelResponseError(f"invalid JSON in model response: {e}") from e

    if not isinstance(parsed, list):
        raise ModelResponseError("model response is not a JSON array")
    return parsed


def extract_text(payload: Any) -> str:
    """Pull the first candidate's text out of a generateContent response."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(
        part.get("text", "") for part in parts if isinstance(part, dict)
    )


class GeminiClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
    ):
        self.client = client
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the completion text.

        Transport errors and non-2xx statuses propagate as ``httpx``
        exceptions.
        """
        resp = await self.client.post(
            self.endpoint,
            headers={"x-goog-api-key": self.api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        resp.raise_for_status()
        text = extract_text(resp.json())
        logger.debug("Model %s returned %d characters", self.model, len(text))
        return text

    async def generate_json_array(self, prompt: str) -> List[Any]:
        return parse_json_array(await self.generate(prompt))
