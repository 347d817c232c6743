"""
Tone and color stage for Lumigrade

Per-pixel transform covering exposure, white balance, shadow/highlight/
white tone shaping, contrast, vibrance and saturation. Each adjustment is
skipped entirely when its setting is zero, so default settings leave the
buffer untouched.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from lumigrade.processing.settings import GradeSettings

logger = logging.getLogger(__name__)

# Rec. 601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)
GRAY_WEIGHTS = (0.2989, 0.5870, 0.1140)

# Maximum tone shift at a setting of 100, in 8-bit levels
SHADOW_RANGE = 80.0
HIGHLIGHT_RANGE = 80.0
WHITES_RANGE = 50.0
WHITES_THRESHOLD = 200.0

TEMP_SCALE = 0.5
TINT_SCALE = 0.3


def contrast_factor(contrast: float) -> float:
    """Classic 8-bit contrast correction factor, pivoting at 128."""
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def apply_tone_and_color(pixels: np.ndarray, settings: GradeSettings) -> None:
    """
    Grade an RGBA8 buffer in place.

    Args:
        pixels: (height, width, 4) uint8 array; alpha is passed through
        settings: Sanitized grade settings
    """
    rgb = pixels[..., :3].astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    # 1. Exposure (100 = +1 stop)
    if settings.exposure != 0:
        rgb *= 2.0 ** (settings.exposure / 100.0)

    # 2. White balance
    if settings.temp != 0:
        if settings.temp > 0:
            r += settings.temp * TEMP_SCALE
        else:
            b += -settings.temp * TEMP_SCALE

    if settings.tint != 0:
        if settings.tint > 0:
            g += settings.tint * TINT_SCALE
        else:
            magenta = -settings.tint * TINT_SCALE
            r += magenta
            b += magenta

    # 3. Tone shaping keyed on post-white-balance luminance
    lum = LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b

    if settings.shadows != 0:
        lift = (1.0 - lum / 255.0) * (settings.shadows / 100.0) * SHADOW_RANGE
        rgb += lift[..., np.newaxis]

    if settings.highlights != 0:
        # Additive: negative highlights pull bright regions down
        drop = (lum / 255.0) * (settings.highlights / 100.0) * HIGHLIGHT_RANGE
        rgb += drop[..., np.newaxis]

    if settings.whites != 0:
        lift = (settings.whites / 100.0) * WHITES_RANGE
        rgb[lum > WHITES_THRESHOLD] += lift

    if settings.contrast != 0:
        factor = contrast_factor(settings.contrast)
        rgb -= 128.0
        rgb *= factor
        rgb += 128.0

    np.clip(rgb, 0.0, 255.0, out=rgb)

    # 4. Vibrance then saturation, both measured against the clamped gray
    if settings.saturation != 0 or settings.vibrance != 0:
        gray = GRAY_WEIGHTS[0] * r + GRAY_WEIGHTS[1] * g + GRAY_WEIGHTS[2] * b
        gray = gray[..., np.newaxis]

        if settings.vibrance != 0:
            strength = settings.vibrance / 100.0
            if settings.vibrance > 0:
                max_c = rgb.max(axis=-1)
                avg_c = rgb.mean(axis=-1)
                # Already-saturated pixels get less boost
                amount = np.minimum(1.0, (np.abs(max_c - avg_c) * 2.0 / 255.0) * 0.5)
                scale = (strength * (1.0 - amount))[..., np.newaxis]
            else:
                scale = strength
            rgb += (rgb - gray) * scale

        if settings.saturation != 0:
            sat_mult = 1.0 + settings.saturation / 100.0
            rgb[...] = gray + (rgb - gray) * sat_mult

    pixels[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)


class ToneColorStage:
    """
    Runs ``apply_tone_and_color`` over a buffer, optionally in row bands.

    Every pixel depends only on its own sample, so bands can be graded
    concurrently; numpy releases the GIL for the heavy array work.
    """

    def __init__(self, workers: int = 1, min_rows_per_band: int = 64):
        self.workers = max(1, int(workers))
        self.min_rows_per_band = min_rows_per_band

    def apply(self, pixels: np.ndarray, settings: GradeSettings,
              executor: Optional[ThreadPoolExecutor] = None) -> None:
        height = pixels.shape[0]
        bands = min(self.workers, max(1, height // self.min_rows_per_band))

        if bands <= 1:
            apply_tone_and_color(pixels, settings)
            return

        # array_split on axis 0 yields writable views into ``pixels``
        chunks = np.array_split(pixels, bands, axis=0)
        logger.debug(f"Grading {height} rows in {len(chunks)} bands")

        if executor is not None:
            list(executor.map(lambda chunk: apply_tone_and_color(chunk, settings), chunks))
            return

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            list(pool.map(lambda chunk: apply_tone_and_color(chunk, settings), chunks))
