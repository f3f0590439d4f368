"""Thin async client for the Gemini generateContent REST endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from talent_engine.config import settings
from talent_engine.errors import TextServiceError

logger = logging.getLogger(__name__)

AI_STUDIO_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class GeminiClient:
    """
    Posts a single prompt and returns the first candidate's text.

    Every transport, HTTP or shape failure surfaces as TextServiceError so
    callers have one exception to recover from.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or settings.gemini_api_key
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        self.model = model or settings.gemini_model
        self.base_url = base_url or settings.gemini_base_url or AI_STUDIO_URL.format(model=self.model)
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.gemini_timeout_seconds,
            transport=transport,
        )

    async def generate(
        self,
        prompt: str,
        *,
        api_key: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if json_mode:
            payload["generationConfig"] = {"responseMimeType": "application/json"}
        params = {"key": api_key or self.api_key}
        logger.debug("Gemini %s request: %d prompt chars", self.model, len(prompt))

        try:
            r = await self._client.post(self.base_url, params=params, json=payload)
            r.raise_for_status()
        except httpx.HTTPStatusError as http_err:
            raise TextServiceError(
                f"Gemini returned HTTP {http_err.response.status_code}"
            ) from http_err
        except httpx.RequestError as net_err:
            raise TextServiceError(f"Gemini request failed: {net_err}") from net_err

        try:
            data = r.json()
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as err:
            raise TextServiceError(f"Unexpected Gemini response: {r.text[:200]}") from err

    async def aclose(self) -> None:
        await self._client.aclose()
