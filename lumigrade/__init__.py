"""
Lumigrade: parametric color grading and compositing engine

Turns a source raster image plus a set of named adjustment sliders
(exposure, white balance, tone, color, detail and vignette) into a
graded image, with preset looks and optional AI-suggested settings.
"""

__version__ = "0.1.0"
__author__ = "Sam Scarrow"
__email__ = "sam@example.com"

# Core imports for easy access
from .config import load_config
from .exceptions import LumigradeError, InvalidInputError
from .processing.settings import GradeSettings
from .processing.pipeline import GradingPipeline, render

__all__ = [
    "load_config",
    "LumigradeError",
    "InvalidInputError",
    "GradeSettings",
    "GradingPipeline",
    "render",
]
