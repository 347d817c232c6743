"""
Tone processing modules for Lumigrade

Includes the per-pixel exposure, white balance, tone and color stage.
"""

from .tone_color import ToneColorStage, apply_tone_and_color, contrast_factor

__all__ = [
    "ToneColorStage",
    "apply_tone_and_color",
    "contrast_factor",
]
