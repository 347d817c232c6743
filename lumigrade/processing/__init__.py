"""
Grading modules for Lumigrade

Includes the settings model, raster surface, blend modes, tone and color
stage, post effects, preset looks and the render pipeline.
"""

from .settings import GradeSettings, SETTING_RANGES, sanitize_settings
from .surface import RasterSurface, RadialGradient
from .blending import BlendMode
from .pipeline import GradingPipeline, render
from .presets import Preset, PresetCatalog, apply_preset, get_preset, list_presets

__all__ = [
    "GradeSettings",
    "SETTING_RANGES",
    "sanitize_settings",
    "RasterSurface",
    "RadialGradient",
    "BlendMode",
    "GradingPipeline",
    "render",
    "Preset",
    "PresetCatalog",
    "apply_preset",
    "get_preset",
    "list_presets",
]
