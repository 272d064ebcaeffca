"""Image and speech backends on the Minimax API."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import httpx

from verdant.config import Settings
from verdant.errors import ConfigurationError, InvalidParameter, ProviderError
from verdant.providers.base import (
    ArtifactKind,
    AudioSpec,
    GeneratedArtifact,
    GenerativeProvider,
    ImageSpec,
)
from verdant.providers.http import post_json

MINIMAX_API_BASE = "https://api.minimax.io/v1"

IMAGE_SIZES = ("512x512", "1024x1024", "1024x768", "768x1024")
IMAGE_QUALITIES = ("standard", "hd")

STYLE_ENHANCEMENTS = {
    "photorealistic": "photorealistic, highly detailed, professional photography, 8k resolution",
    "digital-art": "digital art, concept art, detailed illustration, trending on artstation",
    "watercolor": "watercolor painting, soft brushstrokes, artistic, traditional medium",
    "oil-painting": "oil painting, classical art style, rich colors, textured canvas",
    "sketch": "pencil sketch, hand-drawn, artistic line work, monochrome",
    "cartoon": "cartoon style, animated, colorful, stylized illustration",
    "abstract": "abstract art, geometric shapes, modern art, creative composition",
    "minimalist": "minimalist design, clean lines, simple composition, modern aesthetic",
}

AUDIO_FORMATS = ("mp3", "wav", "ogg")
MAX_AUDIO_CHARS = 5000
MIN_SPEED, MAX_SPEED = 0.5, 2.0

VOICE_IDS = {
    "professional": "female-shaonv",
    "friendly": "female-tianmei",
    "authoritative": "male-qn-qingse",
    "casual": "female-yujie",
    "educational": "male-qn-jingying",
    "narrative": "female-qn-daxuesheng",
    "broadcast": "voice-premium-002",
    "documentary": "voice-premium-003",
    "podcast": "voice-premium-004",
}


class _MinimaxProvider(GenerativeProvider):
    name = "minimax"

    def __init__(self, settings: Settings, *, client: httpx.Client | None = None) -> None:
        if not settings.minimax_api_key or not settings.minimax_group_id:
            raise ConfigurationError("Minimax API credentials not configured")
        self._timeout = settings.provider_timeout
        self._client = client or httpx.Client(
            base_url=MINIMAX_API_BASE,
            headers={
                "Authorization": f"Bearer {settings.minimax_api_key}",
                "Content-Type": "application/json",
            },
            params={"GroupId": settings.minimax_group_id},
            timeout=settings.provider_timeout,
        )

    def _post(self, path: str, payload: dict) -> dict:
        data = post_json(self._client, self.name, path, payload, timeout=self._timeout)
        # Minimax reports some failures as 200 with a non-zero status code
        base_resp = data.get("base_resp") or {}
        if base_resp.get("status_code", 0) != 0:
            raise ProviderError(self.name, base_resp["status_code"], base_resp.get("status_msg", ""))
        return data


class MinimaxImageProvider(_MinimaxProvider):
    kinds = frozenset({ArtifactKind.IMAGE})

    def generate(self, spec: ImageSpec) -> GeneratedArtifact:
        self._check_kind(spec)
        if not isinstance(spec.prompt, str) or not spec.prompt.strip():
            raise InvalidParameter("Valid image prompt is required")
        if spec.size not in IMAGE_SIZES:
            raise InvalidParameter(f"Invalid size. Must be one of: {', '.join(IMAGE_SIZES)}")
        if spec.quality not in IMAGE_QUALITIES:
            raise InvalidParameter(
                f"Invalid quality. Must be one of: {', '.join(IMAGE_QUALITIES)}"
            )

        enhanced_prompt = spec.prompt.strip()
        if spec.style in STYLE_ENHANCEMENTS:
            enhanced_prompt = f"{enhanced_prompt}, {STYLE_ENHANCEMENTS[spec.style]}"
        width, height = (int(part) for part in spec.size.split("x"))

        data = self._post(
            "/image_generation",
            {
                "model": "image-01",
                "prompt": enhanced_prompt,
                "aspect_ratio": _aspect_ratio(width, height),
                "n": 1,
                "prompt_optimizer": spec.quality == "hd",
            },
        )
        urls = (data.get("data") or {}).get("image_urls") or []
        if not urls:
            raise ProviderError(self.name, 200, "Invalid response from Minimax Image API")

        return GeneratedArtifact(
            kind=ArtifactKind.IMAGE,
            provider=self.name,
            url=urls[0],
            metadata={
                "enhanced_prompt": enhanced_prompt,
                "width": width,
                "height": height,
                "generated_at": datetime.now(timezone.utc).isoformat(),
            },
        )


class MinimaxAudioProvider(_MinimaxProvider):
    kinds = frozenset({ArtifactKind.AUDIO})

    def generate(self, spec: AudioSpec) -> GeneratedArtifact:
        self._check_kind(spec)
        text = spec.text.strip() if isinstance(spec.text, str) else ""
        if not text:
            raise InvalidParameter("Valid text content is required for audio generation")
        if len(text) > MAX_AUDIO_CHARS:
            raise InvalidParameter(
                f"Text content is too long. Maximum {MAX_AUDIO_CHARS} characters allowed."
            )
        if isinstance(spec.speed, bool) or not isinstance(spec.speed, (int, float)) or not (
            MIN_SPEED <= spec.speed <= MAX_SPEED
        ):
            raise InvalidParameter(f"Speed must be a number between {MIN_SPEED} and {MAX_SPEED}")
        if spec.format not in AUDIO_FORMATS:
            raise InvalidParameter(f"Invalid format. Must be one of: {', '.join(AUDIO_FORMATS)}")

        voice_id = VOICE_IDS.get(spec.voice_style, VOICE_IDS["professional"])
        data = self._post(
            "/t2a_v2",
            {
                "model": "speech-02-hd",
                "text": text,
                "voice_setting": {"voice_id": voice_id, "speed": spec.speed, "vol": 1.0, "pitch": 0},
                "audio_setting": {
                    "sample_rate": 32000,
                    "bitrate": 128000,
                    "format": spec.format,
                    "channel": 1,
                },
                "output_format": "url",
            },
        )
        payload = data.get("data") or {}
        audio_url = payload.get("audio_url") or payload.get("audio")
        if not audio_url:
            raise ProviderError(self.name, 200, "Invalid response from Minimax TTS API")

        extra = data.get("extra_info") or {}
        duration_ms = extra.get("audio_length")
        return GeneratedArtifact(
            kind=ArtifactKind.AUDIO,
            provider=self.name,
            url=audio_url,
            metadata={
                "voice_id": voice_id,
                "text_length": len(text),
                # Rough estimate of ~150 characters per second when the API omits it
                "duration": round(duration_ms / 1000, 1) if duration_ms else math.ceil(len(text) / 150),
                "generated_at": datetime.now(timezone.utc).isoformat(),
            },
        )


def _aspect_ratio(width: int, height: int) -> str:
    if width == height:
        return "1:1"
    return "4:3" if width > height else "3:4"
