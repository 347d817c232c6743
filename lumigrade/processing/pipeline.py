"""
Grading pipeline for Lumigrade

Drives a single render: draw the source onto a fresh surface, grade its
pixels, then run clarity, sharpness and vignette in that fixed order.
Renders are synchronous and share no state between calls.
"""

import logging
import threading
import time
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

from lumigrade.config import get_config_value
from lumigrade.exceptions import InvalidInputError, RenderCancelledError
from lumigrade.utils.logging import StructuredLogger
from .effects import apply_post_effects
from .settings import GradeSettings
from .surface import RasterSurface
from .tone import ToneColorStage

logger = logging.getLogger(__name__)

SettingsLike = Union[GradeSettings, Mapping[str, Any], None]


def prepare_source(image: Any) -> np.ndarray:
    """
    Validate a source image and convert it to an RGBA8 array.

    Accepts (H, W), (H, W, 1), (H, W, 3) and (H, W, 4) arrays. Float
    images are taken to be in the 0-1 range.

    Raises:
        InvalidInputError: if the image is empty or has an unusable shape
    """
    if not isinstance(image, np.ndarray):
        raise InvalidInputError(f"Source image must be a numpy array, got {type(image).__name__}")

    if image.ndim == 2:
        image = image[:, :, np.newaxis]
    if image.ndim != 3:
        raise InvalidInputError(f"Source image must be 2D or 3D, got shape {image.shape}")

    height, width, channels = image.shape
    if height <= 0 or width <= 0:
        raise InvalidInputError(f"Source image has zero area: {width}x{height}")
    if channels not in (1, 3, 4):
        raise InvalidInputError(f"Unsupported channel count: {channels}")

    # Convert to uint8
    if image.dtype == np.uint8:
        data = image
    elif np.issubdtype(image.dtype, np.floating):
        if not np.all(np.isfinite(image)):
            raise InvalidInputError("Source image contains non-finite samples")
        data = np.clip(np.rint(image * 255.0), 0, 255).astype(np.uint8)
    elif np.issubdtype(image.dtype, np.integer):
        data = np.clip(image, 0, 255).astype(np.uint8)
    else:
        raise InvalidInputError(f"Unsupported image dtype: {image.dtype}")
    if data is not image:
        logger.debug(f"Converted {image.dtype} source to uint8")

    if channels == 1:
        data = np.repeat(data, 3, axis=2)
    if data.shape[2] == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        data = np.concatenate([data, alpha], axis=2)

    return np.ascontiguousarray(data)


def resolve_settings(settings: SettingsLike) -> GradeSettings:
    """Sanitize settings at the render boundary."""
    if settings is None:
        return GradeSettings()
    if isinstance(settings, GradeSettings):
        return settings.sanitized()
    return GradeSettings.from_dict(settings)


class GradingPipeline:
    """
    Render driver

    Owns render-wide options (worker count, blur kernel extent) and keeps
    nothing from one render to the next.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the pipeline

        Args:
            config: Configuration dictionary (see ``rendering`` section)
        """
        self.config = config or {}
        self.workers = int(get_config_value(self.config, 'rendering.workers', 1) or 1)
        self.blur_truncate = float(get_config_value(self.config, 'rendering.blur_truncate', 3.0))
        self.tone_stage = ToneColorStage(workers=self.workers)
        self.log = StructuredLogger(__name__)

    def render(self, source: np.ndarray, settings: SettingsLike = None,
               cancel_event: Optional[threading.Event] = None) -> np.ndarray:
        """
        Render a graded copy of ``source``.

        Args:
            source: Source image array (see ``prepare_source``)
            settings: GradeSettings or a settings mapping; None for defaults
            cancel_event: Set to abort between stages

        Returns:
            (height, width, 4) uint8 array, same size as the source

        Raises:
            InvalidInputError: for an unusable image or non-finite setting
            RenderCancelledError: if ``cancel_event`` was set mid-render
        """
        image = prepare_source(source)
        grade = resolve_settings(settings)
        height, width = image.shape[:2]

        def checkpoint(stage: str) -> None:
            if cancel_event is not None and cancel_event.is_set():
                self.log.info("Render cancelled", stage=stage, width=width, height=height)
                raise RenderCancelledError(f"Render cancelled before {stage}")

        checkpoint('draw')
        start = time.perf_counter()
        surface = RasterSurface.from_image(image, blur_truncate=self.blur_truncate)
        surface.snapshot_original()

        checkpoint('tone')
        self.tone_stage.apply(surface.pixels, grade)
        apply_post_effects(surface, grade, checkpoint=checkpoint)

        checkpoint('output')
        result = surface.to_image()
        self.log.debug("Render complete", width=width, height=height,
                       elapsed=round(time.perf_counter() - start, 4))
        return result


def render(source: np.ndarray, settings: SettingsLike = None,
           cancel_event: Optional[threading.Event] = None,
           workers: int = 1) -> np.ndarray:
    """
    Render a graded copy of ``source`` with ``settings``.

    Convenience wrapper around ``GradingPipeline``.
    """
    pipeline = GradingPipeline({'rendering': {'workers': workers}})
    return pipeline.render(source, settings, cancel_event=cancel_event)
