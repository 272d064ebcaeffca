"""On-demand text, image and audio generation for the AI studio pages."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from verdant.errors import StoreError
from verdant.providers.base import AudioSpec, ImageSpec, TextSpec
from verdant.providers.registry import ProviderRegistry, parse_backend
from verdant.storage.base import Store, now_iso

logger = logging.getLogger(__name__)


class TextRequest(BaseModel):
    topic: str
    content_type: str = "article"
    ai_provider: str = "gemini"
    target_audience: str = "general"
    tone: str = "professional"
    word_count: int = 1000
    seo_keywords: list[str] = Field(default_factory=list)
    sustainability_focus: bool = True
    include_images: bool = False


class ImageRequest(BaseModel):
    prompt: str
    style: str | None = None
    size: str = "1024x1024"
    quality: str = "standard"


class AudioRequest(BaseModel):
    text: str
    voice_style: str = "professional"
    speed: float = 1.0
    format: str = "mp3"


class GenerationStudio:
    """Single-call generators. Every call is recorded in ``ai_generation_logs``
    when possible; a failed log write never fails the generation."""

    def __init__(self, store: Store, providers: ProviderRegistry) -> None:
        self._store = store
        self._providers = providers

    def generate_text(self, request: TextRequest, user_id: str | None = None) -> dict:
        backend = parse_backend(request.ai_provider)
        spec = TextSpec(
            topic=request.topic,
            content_type=request.content_type,
            target_audience=request.target_audience,
            tone=request.tone,
            target_word_count=request.word_count,
            seo_keywords=request.seo_keywords,
            sustainability_focus=request.sustainability_focus,
            include_images=request.include_images,
        )
        # Validate before touching credentials so bad input is reported as such
        spec.validate()
        artifact = self._providers.text(backend).generate(spec)

        self._log(
            user_id,
            "text",
            request.topic,
            f"{request.content_type}_{request.tone}",
            {
                "ai_provider": backend.value,
                "word_count": request.word_count,
                "target_audience": request.target_audience,
                "seo_keywords": request.seo_keywords,
            },
        )
        return {
            "content": {
                "text": artifact.text,
                "topic": request.topic,
                "content_type": request.content_type,
                "ai_provider": backend.value,
                "target_audience": request.target_audience,
                "tone": request.tone,
                "word_count": artifact.metadata.get("word_count", 0),
                "seo_keywords": request.seo_keywords,
                "sustainability_focus": request.sustainability_focus,
                "include_images": request.include_images,
                "generated_at": now_iso(),
            },
            "success": True,
        }

    def generate_image(self, request: ImageRequest, user_id: str | None = None) -> dict:
        artifact = self._providers.image().generate(
            ImageSpec(
                prompt=request.prompt,
                style=request.style,
                size=request.size,
                quality=request.quality,
            )
        )
        self._log(
            user_id,
            "image",
            request.prompt,
            request.style or "default",
            {"size": request.size, "quality": request.quality},
        )
        return {
            "image": {
                "url": artifact.url,
                "prompt": request.prompt,
                "enhanced_prompt": artifact.metadata.get("enhanced_prompt"),
                "style": request.style or "default",
                "size": request.size,
                "quality": request.quality,
                "ai_provider": artifact.provider,
                "metadata": artifact.metadata,
            },
            "success": True,
        }

    def generate_audio(self, request: AudioRequest, user_id: str | None = None) -> dict:
        artifact = self._providers.audio().generate(
            AudioSpec(
                text=request.text,
                voice_style=request.voice_style,
                speed=request.speed,
                format=request.format,
            )
        )
        self._log(
            user_id,
            "audio",
            request.text[:500],
            request.voice_style,
            {"speed": request.speed, "format": request.format},
        )
        return {
            "audio": {
                "url": artifact.url,
                "voice_style": request.voice_style,
                "speed": request.speed,
                "format": request.format,
                "duration": artifact.metadata.get("duration"),
                "ai_provider": artifact.provider,
                "metadata": artifact.metadata,
            },
            "success": True,
        }

    def _log(
        self, user_id: str | None, content_type: str, prompt: str, style: str, parameters: dict
    ) -> None:
        try:
            self._store.insert(
                "ai_generation_logs",
                {
                    "user_id": user_id,
                    "content_type": content_type,
                    "prompt": prompt,
                    "style": style,
                    "parameters": parameters,
                    "created_at": now_iso(),
                },
            )
        except StoreError as exc:
            logger.warning("Failed to log %s generation: %s", content_type, exc)
