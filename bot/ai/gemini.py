"""Gemini (Generative Language API) client used for AI features."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import aiohttp


class GenerationError(RuntimeError):
    """The AI backend failed or returned nothing usable."""


class GenerationBackend(Protocol):
    async def generate_image(self, prompt: str) -> bytes: ...

    async def edit_image(self, image_url: str, instruction: str) -> bytes: ...

    async def analyze_image(self, image_url: str, prompt: str) -> str: ...

    async def analyze_audio(self, audio_url: str) -> str: ...

    async def analyze_video(self, video_url: str, prompt: str) -> str: ...


@dataclass(frozen=True)
class _Media:
    data: bytes
    mime_type: str


class GeminiClient:
    """Lightweight REST client for Gemini text and image models."""

    _API_BASE = "https://generativelanguage.googleapis.com/v1beta/"
    _AUDIO_PROMPT = "Расшифруй это аудио и кратко опиши его содержание"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        text_model: str = "gemini-1.5-flash",
        image_model: str = "gemini-2.5-flash-image",
        timeout: float = 60.0,
        api_base: str = _API_BASE,
    ) -> None:
        self._api_key = api_key
        self._api_base = api_base.rstrip("/") + "/"
        self._text_model = text_model
        self._image_model = image_model
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def generate_image(self, prompt: str) -> bytes:
        response = await self._generate(self._image_model, [{"text": prompt}])
        return self._extract_image(response)

    async def edit_image(self, image_url: str, instruction: str) -> bytes:
        media = await self._download(image_url, default_mime="image/jpeg")
        response = await self._generate(
            self._image_model,
            [{"text": instruction}, self._inline(media)],
        )
        return self._extract_image(response)

    async def analyze_image(self, image_url: str, prompt: str) -> str:
        media = await self._download(image_url, default_mime="image/jpeg")
        response = await self._generate(self._text_model, [{"text": prompt}, self._inline(media)])
        return self._extract_text(response)

    async def analyze_audio(self, audio_url: str) -> str:
        media = await self._download(audio_url, default_mime="audio/ogg")
        response = await self._generate(
            self._text_model,
            [{"text": self._AUDIO_PROMPT}, self._inline(media)],
        )
        return self._extract_text(response)

    async def analyze_video(self, video_url: str, prompt: str) -> str:
        media = await self._download(video_url, default_mime="video/mp4")
        response = await self._generate(self._text_model, [{"text": prompt}, self._inline(media)])
        return self._extract_text(response)

    async def _generate(self, model: str, parts: list[dict[str, Any]]) -> dict[str, Any]:
        if not self._api_key:
            raise GenerationError("Gemini API key is not configured")

        request_payload = {"contents": [{"role": "user", "parts": parts}]}
        status = None
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    f"{self._api_base}models/{model}:generateContent",
                    json=request_payload,
                    headers=self._headers,
                    timeout=aiohttp.ClientTimeout(total=self._timeout),
                ) as response:
                    status = response.status
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise GenerationError(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise GenerationError(f"Gemini returned a non-JSON body ({status})") from exc

        if not isinstance(data, dict):
            raise GenerationError(f"Gemini returned an unexpected body ({status}): {data!r}")
        if status != 200 or "error" in data:
            raise GenerationError(f"Gemini error ({status}): {data.get('error', data)}")
        return data

    async def _download(self, url: str, *, default_mime: str) -> _Media:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, timeout=aiohttp.ClientTimeout(total=self._timeout)) as response:
                    response.raise_for_status()
                    payload = await response.read()
                    mime_type = response.content_type
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise GenerationError(f"Failed to download media: {exc}") from exc
        if not mime_type or mime_type == "application/octet-stream":
            mime_type = default_mime
        return _Media(data=payload, mime_type=mime_type)

    @staticmethod
    def _inline(media: _Media) -> dict[str, Any]:
        return {
            "inline_data": {
                "mime_type": media.mime_type,
                "data": base64.b64encode(media.data).decode("ascii"),
            }
        }

    @staticmethod
    def _parts(response: dict[str, Any]) -> list[dict[str, Any]]:
        candidates = response.get("candidates") or []
        if not candidates:
            raise GenerationError(f"Gemini returned no candidates: {response.get('promptFeedback')}")
        content = candidates[0].get("content") or {}
        return content.get("parts") or []

    def _extract_text(self, response: dict[str, Any]) -> str:
        texts = [part["text"] for part in self._parts(response) if part.get("text")]
        if not texts:
            raise GenerationError("Gemini returned no text")
        return "\n".join(texts).strip()

    def _extract_image(self, response: dict[str, Any]) -> bytes:
        for part in self._parts(response):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                return base64.b64decode(inline["data"])
        raise GenerationError("Gemini returned no image")

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key or "",
        }
