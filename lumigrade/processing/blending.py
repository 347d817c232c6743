"""
Blend modes for Lumigrade compositing

Per-channel blend functions on 0-255 samples plus the alpha compositing
formula shared by every post effect:

    out = dst * (1 - opacity * src_alpha) + blend(dst, src) * (opacity * src_alpha)
"""

from enum import Enum
from typing import Union

import numpy as np

Sample = Union[float, np.ndarray]


class BlendMode(Enum):
    """Available blend modes"""
    NORMAL = "normal"  # source-over
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"

    @classmethod
    def from_name(cls, name: Union[str, 'BlendMode']) -> 'BlendMode':
        """Look up a blend mode by name (case-insensitive)."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        if key == "source-over":
            return cls.NORMAL
        for mode in cls:
            if mode.value == key:
                return mode
        valid = [mode.value for mode in cls]
        raise ValueError(f"Invalid blend mode: {name}. Valid modes: {valid}")


def normal(d: Sample, s: Sample) -> Sample:
    return s


def multiply(d: Sample, s: Sample) -> Sample:
    return d * s / 255.0


def screen(d: Sample, s: Sample) -> Sample:
    return 255.0 - (255.0 - d) * (255.0 - s) / 255.0


def overlay(d: Sample, s: Sample) -> Sample:
    """Multiply in the darks, screen in the lights, keyed on the destination."""
    return np.where(
        d < 128,
        2.0 * d * s / 255.0,
        255.0 - 2.0 * (255.0 - d) * (255.0 - s) / 255.0,
    )


BLEND_FUNCTIONS = {
    BlendMode.NORMAL: normal,
    BlendMode.MULTIPLY: multiply,
    BlendMode.SCREEN: screen,
    BlendMode.OVERLAY: overlay,
}


def composite_channels(dst: np.ndarray, src: np.ndarray, src_alpha: Sample,
                       mode: Union[str, BlendMode] = BlendMode.NORMAL,
                       opacity: float = 1.0) -> np.ndarray:
    """
    Composite source color channels over destination color channels.

    Args:
        dst: Destination samples (..., C), 0-255
        src: Source samples broadcastable to ``dst``, 0-255
        src_alpha: Source alpha (0-1), scalar or (..., 1)
        mode: Blend mode applied to the color channels
        opacity: Layer opacity (0-1)

    Returns:
        Composited samples as float64, clipped to [0, 255]
    """
    blend_fn = BLEND_FUNCTIONS[BlendMode.from_name(mode)]
    opacity = min(max(float(opacity), 0.0), 1.0)

    dst = np.asarray(dst, dtype=np.float64)
    src = np.asarray(src, dtype=np.float64)
    weight = opacity * np.asarray(src_alpha, dtype=np.float64)

    blended = blend_fn(dst, src)
    result = dst * (1.0 - weight) + blended * weight
    return np.clip(result, 0.0, 255.0)
