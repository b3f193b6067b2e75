"""Gemini generateContent REST adapter with exception-based error handling."""

import base64
import json
import logging
from typing import Optional

import requests

from redtools.adapters.llm_adapter import LLMAdapter
from redtools.core.exceptions import ApiError, ConfigError, NetworkError, ParseError
from redtools.core.types import GeminiModel

logger = logging.getLogger("redtools")


class GeminiAdapter(LLMAdapter):
    """LLM adapter using Gemini's REST API.

    Endpoint: POST {base}/models/{model}:generateContent?key={api_key}
    Success path: candidates[0].content.parts[0].text
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    IMAGE_MIME_TYPE = "image/jpeg"

    def __init__(self, api_key: str = "", model: str = GeminiModel.FLASH.value,
                 timeout: int = 60):
        self._api_key = (api_key or "").strip()
        self._model = model.value if isinstance(model, GeminiModel) else model
        self._timeout = timeout

    @property
    def model(self) -> str:
        return self._model

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    def _endpoint(self) -> str:
        return f"{self.BASE_URL}/models/{self._model}:generateContent"

    @classmethod
    def build_payload(cls, prompt: str, image: Optional[bytes] = None) -> dict:
        """Request envelope: one content with a text part and optional image."""
        parts = [{"text": prompt}]
        if image is not None:
            parts.append({
                "inline_data": {
                    "mime_type": cls.IMAGE_MIME_TYPE,
                    "data": base64.b64encode(image).decode("ascii"),
                }
            })
        return {"contents": [{"parts": parts}]}

    def complete(self, prompt: str, image: Optional[bytes] = None) -> str:
        """Send one generateContent request and return the first text part."""
        if not self._api_key:
            raise ConfigError("Gemini API key is missing. Set it with 'redtools config'.")

        payload = self.build_payload(prompt, image)
        logger.debug(f"Gemini request: model={self._model}, prompt={len(prompt)} chars, "
                     f"image={'yes' if image is not None else 'no'}")

        try:
            response = requests.post(
                self._endpoint(),
                params={"key": self._api_key},
                json=payload,
                timeout=self._timeout,
            )
        except requests.Timeout:
            raise NetworkError(f"Gemini request timed out after {self._timeout}s")
        except requests.ConnectionError as e:
            raise NetworkError(f"Cannot connect to Gemini: {e}")
        except requests.RequestException as e:
            raise NetworkError(f"Gemini request failed: {e}")

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.warning(f"Gemini API error ({response.status_code}): {message}")
            raise ApiError(response.status_code, message)

        return self._extract_text(response)

    @staticmethod
    def _error_message(response: requests.Response) -> Optional[str]:
        """Pull error.message out of an error body, if there is one."""
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        return None

    @staticmethod
    def _extract_text(response: requests.Response) -> str:
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to parse Gemini response: {e}")
            raise ParseError("Failed to parse JSON from Gemini")

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise ParseError("No valid content in Gemini response")

        if not isinstance(text, str):
            raise ParseError("No valid content in Gemini response")
        return text
