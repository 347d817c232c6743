"""
AI grade suggestions for Lumigrade.

Asks a vision LLM to propose slider values for an image and turns its
answer into ``GradeSettings``. Model output is untrusted: it may arrive
wrapped in markdown fences, miss fields or carry out-of-range numbers,
so everything passes through ``parse_suggestion`` before it can reach
the renderer.
"""

import asyncio
import json
import logging
import re
import time
from typing import Any, Dict, Optional, Protocol

import numpy as np

from lumigrade.config import get_config_value
from lumigrade.exceptions import InvalidInputError, MalformedSuggestionError, SuggestionError
from lumigrade.io.image_io import encode_jpeg
from lumigrade.processing.settings import GradeSettings, sanitize_settings

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)

GRADING_PROMPT = (
    "Analyze the color and tonality of this photo and return a professional "
    "grading as a JSON object with integer fields: "
    + ", ".join(GradeSettings.field_names())
    + ". Every field ranges from -100 to 100, except sharpness which ranges "
    "from 0 to 100. Return only the JSON object."
)


class VisionProvider(Protocol):
    """Anything that can answer a prompt about a JPEG image."""

    def generate(self, prompt: str, image_jpeg: bytes,
                 timeout: Optional[float] = None) -> str:
        ...


def parse_suggestion(text: Optional[str]) -> GradeSettings:
    """
    Parse a model answer into grade settings.

    Markdown code fences are stripped. Missing fields default to 0 and
    out-of-range values are clamped.

    Raises:
        MalformedSuggestionError: if the text is not a JSON object of numbers
    """
    if not text or not text.strip():
        raise MalformedSuggestionError("Empty suggestion response")

    cleaned = FENCE_PATTERN.sub('', text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedSuggestionError(f"Suggestion is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise MalformedSuggestionError(f"Suggestion must be a JSON object, got {type(data).__name__}")

    try:
        settings, clamped = sanitize_settings(data)
    except InvalidInputError as e:
        raise MalformedSuggestionError(str(e))

    if clamped:
        logger.info(f"Clamped suggested fields: {', '.join(clamped)}")
    missing = [name for name in GradeSettings.field_names() if name not in data]
    if missing:
        logger.debug(f"Suggestion omitted fields (defaulted to 0): {', '.join(missing)}")

    return settings


class SuggestionService:
    """
    Requests grade suggestions from a vision provider.

    Provider failures (network, quota, timeouts) are retried; malformed
    answers are not, since the same prompt tends to produce the same shape.
    """

    def __init__(self, provider: VisionProvider, timeout: float = 30.0,
                 retries: int = 2, retry_delay: float = 1.0,
                 preview_max_size: int = 1024, preview_quality: int = 40):
        self.provider = provider
        self.timeout = timeout
        self.retries = max(0, int(retries))
        self.retry_delay = retry_delay
        self.preview_max_size = preview_max_size
        self.preview_quality = preview_quality

    @classmethod
    def from_config(cls, config: Dict[str, Any],
                    provider: Optional[VisionProvider] = None) -> 'SuggestionService':
        """Build a service from the ``suggestion`` config section."""
        section = get_config_value(config, 'suggestion', {}) or {}

        if provider is None:
            provider_name = section.get('provider', 'gemini')
            # Import providers lazily so the AI extra stays optional
            if provider_name == 'gemini':
                from .vision_providers.gemini_vision import GeminiVisionProvider
                provider = GeminiVisionProvider(section)
            else:
                raise ValueError(f"Unknown vision provider: {provider_name}")

        return cls(
            provider,
            timeout=float(section.get('timeout', 30.0)),
            retries=int(section.get('retries', 2)),
            preview_max_size=int(section.get('preview_max_size', 1024)),
            preview_quality=int(section.get('preview_quality', 40)),
        )

    def suggest(self, image: np.ndarray) -> GradeSettings:
        """
        Suggest grade settings for an image.

        Args:
            image: RGBA8 or RGB8 array

        Returns:
            Sanitized GradeSettings

        Raises:
            MalformedSuggestionError: if the provider's answer can't be parsed
            SuggestionError: if every attempt failed
        """
        preview = encode_jpeg(image, quality=self.preview_quality,
                              max_size=self.preview_max_size)

        last_error: Optional[Exception] = None
        for attempt in range(1, self.retries + 2):
            try:
                text = self.provider.generate(GRADING_PROMPT, preview, timeout=self.timeout)
            except Exception as e:
                last_error = e
                logger.warning(f"Suggestion attempt {attempt} failed: {e}")
                if attempt <= self.retries and self.retry_delay > 0:
                    time.sleep(self.retry_delay * attempt)
                continue

            return parse_suggestion(text)

        raise SuggestionError(f"Suggestion failed after {self.retries + 1} attempts: {last_error}")

    async def suggest_async(self, image: np.ndarray) -> GradeSettings:
        """Run ``suggest`` off the event loop."""
        return await asyncio.to_thread(self.suggest, image)
