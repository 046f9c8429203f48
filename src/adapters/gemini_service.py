"""Gemini adapter for plant identification.

Responsibility:
- Re-encode the image as JPEG and embed it (base64) in a `generateContent`
  payload with a fixed instruction and fixed generation/safety parameters.
- Issue exactly one POST (no retries, no caching).
- Classify the reply (text / structured API error / unrecognized) and turn
  the generated text into a `PlantIdentification`.
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from typing import Any, Union

import httpx
from pydantic import BaseModel, ValidationError
from pydantic.config import ConfigDict

from adapters.http_client import build_async_client
from adapters.image_encoder import DEFAULT_JPEG_QUALITY, encode_jpeg
from core.config import AppSettings
from core.domain.errors import ApiError, DecodingError, NetworkError
from core.domain.models import UNKNOWN_PLANT_NAME, PlantIdentification
from core.interfaces.identifier import PlantIdentifier

logger = logging.getLogger(__name__)

_KEY_PARAM_RE = re.compile(r"([?&]key=)[^&\s\"']+")


class _RedactApiKeyFilter(logging.Filter):
    """Masks the `key` query parameter in httpx request log lines."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _KEY_PARAM_RE.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def _install_key_redaction() -> None:
    httpx_logger = logging.getLogger("httpx")
    if not any(isinstance(f, _RedactApiKeyFilter) for f in httpx_logger.filters):
        httpx_logger.addFilter(_RedactApiKeyFilter())


_install_key_redaction()

IDENTIFY_INSTRUCTION = (
    "Identify this plant. Provide its name and a brief description in two separate lines."
)

GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.4,
    "topK": 32,
    "topP": 1,
    "maxOutputTokens": 256,
    "stopSequences": [],
}

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"


def build_request_body(image_b64: str) -> dict[str, Any]:
    """Build the `generateContent` JSON body for one base64 JPEG."""

    return {
        "contents": [
            {
                "parts": [
                    {"text": IDENTIFY_INSTRUCTION},
                    {"inlineData": {"mimeType": "image/jpeg", "data": image_b64}},
                ]
            }
        ],
        "generationConfig": {**GENERATION_CONFIG, "stopSequences": []},
        "safetySettings": [
            {"category": category, "threshold": SAFETY_THRESHOLD} for category in SAFETY_CATEGORIES
        ],
    }


# --- Reply shapes -----------------------------------------------------------


def _validate(model: type[BaseModel], payload: object) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError:
        return None


class _Part(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str | None = None


class _Content(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[Any] | None = None


class _Candidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: _Content | None = None


class _SuccessShape(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Only candidates[0].content.parts[0] is typed; later entries may be anything.
    candidates: list[Any]

    def first_text(self) -> str | None:
        if not self.candidates:
            return None
        candidate: _Candidate | None = _validate(_Candidate, self.candidates[0])
        if candidate is None or candidate.content is None or not candidate.content.parts:
            return None
        part: _Part | None = _validate(_Part, candidate.content.parts[0])
        return part.text if part is not None else None


class _ErrorBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str | None = None


class _ErrorShape(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error: _ErrorBody


@dataclass(frozen=True)
class TextReply:
    text: str


@dataclass(frozen=True)
class ApiFailureReply:
    message: str


@dataclass(frozen=True)
class UnrecognizedReply:
    pass


GeminiReply = Union[TextReply, ApiFailureReply, UnrecognizedReply]


def classify_reply(payload: object) -> GeminiReply:
    """Tag a decoded JSON reply with the shape it matches.

    The success shape wins over the error shape; a shape whose values have
    the wrong types counts as absent.
    """

    success: _SuccessShape | None = _validate(_SuccessShape, payload)
    if success is not None:
        text = success.first_text()
        if text is not None:
            return TextReply(text=text)

    failure: _ErrorShape | None = _validate(_ErrorShape, payload)
    if failure is not None and failure.error.message is not None:
        return ApiFailureReply(message=failure.error.message)

    return UnrecognizedReply()


def parse_plant_text(text: str) -> PlantIdentification:
    """Split generated text into name (first non-empty line) and description."""

    lines = text.splitlines()
    for index, line in enumerate(lines):
        name = line.strip()
        if name:
            description = " ".join(lines[index + 1 :]).strip()
            return PlantIdentification(name=name, description=description)
    return PlantIdentification(name=UNKNOWN_PLANT_NAME, description="")


def interpret_reply(payload: object) -> PlantIdentification:
    """Turn a decoded JSON reply into a result or raise the matching error."""

    reply = classify_reply(payload)
    logger.debug("gemini: reply classified as %s", type(reply).__name__)
    if isinstance(reply, TextReply):
        return parse_plant_text(reply.text)
    if isinstance(reply, ApiFailureReply):
        raise ApiError(reply.message)
    raise DecodingError()


class GeminiService(PlantIdentifier):
    """Single fixed-endpoint Gemini integration.

    If `client` is given the caller owns it; otherwise a client is built per
    call from `settings` and closed afterwards.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client
        self._jpeg_quality = jpeg_quality

    def _endpoint(self) -> httpx.URL:
        try:
            url = httpx.URL(self._settings.gemini_base_url)
        except httpx.InvalidURL as exc:
            raise NetworkError(f"Invalid endpoint URL: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise NetworkError(f"Invalid endpoint URL: {self._settings.gemini_base_url}")
        return url

    async def identify(self, image_bytes: bytes) -> PlantIdentification:
        jpeg = encode_jpeg(image_bytes, quality=self._jpeg_quality)
        body = build_request_body(base64.b64encode(jpeg).decode("ascii"))
        endpoint = self._endpoint()

        api_key = self._settings.gemini_api_key or ""
        if not api_key:
            logger.warning("gemini: no API key configured (set PLANT_ID_GEMINI_API_KEY)")

        logger.debug("gemini: POST %s (jpeg=%d bytes)", endpoint, len(jpeg))
        payload = await self._post(endpoint, api_key=api_key, body=body)
        return interpret_reply(payload)

    async def _post(self, endpoint: httpx.URL, *, api_key: str, body: dict[str, Any]) -> object:
        if self._client is not None:
            response = await self._send(self._client, endpoint, api_key=api_key, body=body)
        else:
            async with build_async_client(self._settings, follow_redirects=False) as client:
                response = await self._send(client, endpoint, api_key=api_key, body=body)

        logger.debug("gemini: HTTP %s (%d bytes)", response.status_code, len(response.content))
        if not response.content:
            raise NetworkError("The identification service returned an empty response.")
        # Non-JSON bodies propagate as json.JSONDecodeError.
        return response.json()

    @staticmethod
    async def _send(
        client: httpx.AsyncClient,
        endpoint: httpx.URL,
        *,
        api_key: str,
        body: dict[str, Any],
    ) -> httpx.Response:
        try:
            return await client.post(
                endpoint,
                params={"key": api_key},
                json=body,
                headers={"Content-Type": "application/json"},
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise NetworkError(f"Invalid endpoint URL: {exc}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Network failure: {exc}") from exc
