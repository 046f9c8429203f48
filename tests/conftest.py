from __future__ import annotations

import asyncio
import io
from typing import Any, Callable

import httpx
import pytest
from PIL import Image

from adapters.gemini_service import GeminiService
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import PlantIdentification

TEST_BASE_URL = "https://gemini.test/v1beta/models/gemini-1.5-flash:generateContent"


def make_image_bytes(fmt: str = "PNG", mode: str = "RGB", size: tuple[int, int] = (8, 8)) -> bytes:
    colors: dict[str, Any] = {"RGBA": (34, 139, 34, 255), "P": 1, "L": 128, "LAB": (60, 100, 160), "I;16B": 1000}
    color = colors.get(mode, (34, 139, 34))
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def text_reply(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class FakeGemini:
    """Records requests and answers them with `handler`."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handler = handler
        self.requests: list[httpx.Request] = []

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def identify(self, settings: AppSettings, image_bytes: bytes) -> PlantIdentification:
        async def go() -> PlantIdentification:
            transport = httpx.MockTransport(self._handle)
            async with build_async_client(settings, transport=transport, follow_redirects=False) as client:
                return await GeminiService(settings, client=client).identify(image_bytes)

        return asyncio.run(go())


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        gemini_api_key="test-key",
        gemini_base_url=TEST_BASE_URL,
        http_timeout_seconds=5.0,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def reply_with() -> Callable[..., FakeGemini]:
    def factory(payload: Any = None, *, status_code: int = 200, content: bytes | None = None) -> FakeGemini:
        def handler(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=payload)

        return FakeGemini(handler)

    return factory
