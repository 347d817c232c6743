"""
Post-composite effects for Lumigrade

Whole-image effects that run after the tone and color stage. Each one
reads the working surface's current state and writes back into it, so
they compound in the order they are applied:

1. Clarity - overlay lift (positive) or soft-glow blur (negative)
2. Sharpness - overlay self-blend
3. Vignette - radial multiply/screen gradient
"""

import logging
from typing import Callable, Optional, Sequence, Tuple

from .blending import BlendMode
from .settings import GradeSettings
from .surface import RadialGradient, RasterSurface

logger = logging.getLogger(__name__)

MID_GRAY = (128.0, 128.0, 128.0, 1.0)

CLARITY_OVERLAY_STRENGTH = 0.4
CLARITY_BLUR_RADIUS = 2.0
CLARITY_ORIGINAL_OPACITY = 0.5
CLARITY_ORIGINAL_FALLOFF = 0.4
SHARPNESS_DIVISOR = 400.0
VIGNETTE_STRENGTH = 0.8


def apply_clarity(surface: RasterSurface, clarity: float) -> None:
    """
    Apply clarity to the surface.

    Positive values overlay mid-gray for a punchier midtone contrast.
    Negative values blur the graded image and fade the untouched original
    back in on top, giving a soft-focus glow.
    """
    if clarity == 0:
        return

    amount = clarity / 100.0
    if amount > 0:
        surface.fill(MID_GRAY, BlendMode.OVERLAY, amount * CLARITY_OVERLAY_STRENGTH)
        return

    surface.blur(abs(amount) * CLARITY_BLUR_RADIUS)
    # Reveals the pre-grade source, not the graded image
    surface.composite(surface.original, BlendMode.NORMAL,
                      CLARITY_ORIGINAL_OPACITY + amount * CLARITY_ORIGINAL_FALLOFF)


def apply_sharpness(surface: RasterSurface, sharpness: float) -> None:
    """Overlay the surface onto itself; an approximation, not an unsharp mask."""
    if sharpness <= 0:
        return
    surface.composite(surface.to_image(), BlendMode.OVERLAY, sharpness / SHARPNESS_DIVISOR)


def vignette_gradient(width: int, height: int, vignette: float) -> RadialGradient:
    """
    Build the vignette gradient for a surface size.

    Darkening (positive) fades to black, lightening (negative) to white.
    """
    alpha = abs(vignette) / 100.0 * VIGNETTE_STRENGTH
    level = 0.0 if vignette > 0 else 255.0
    return RadialGradient(
        center=(width / 2.0, height / 2.0),
        inner_radius=width / 3.0,
        outer_radius=max(width, height) / 1.2,
        inner_color=(level, level, level, 0.0),
        outer_color=(level, level, level, alpha),
    )


def apply_vignette(surface: RasterSurface, vignette: float) -> None:
    if vignette == 0:
        return
    gradient = vignette_gradient(surface.width, surface.height, vignette)
    mode = BlendMode.MULTIPLY if vignette > 0 else BlendMode.SCREEN
    surface.fill_gradient(gradient, mode, 1.0)


EffectFn = Callable[[RasterSurface, GradeSettings], None]

# Fixed application order
POST_EFFECTS: Tuple[Tuple[str, EffectFn], ...] = (
    ('clarity', lambda surface, settings: apply_clarity(surface, settings.clarity)),
    ('sharpness', lambda surface, settings: apply_sharpness(surface, settings.sharpness)),
    ('vignette', lambda surface, settings: apply_vignette(surface, settings.vignette)),
)


def apply_post_effects(surface: RasterSurface, settings: GradeSettings,
                       order: Optional[Sequence[str]] = None,
                       checkpoint: Optional[Callable[[str], None]] = None) -> None:
    """
    Run the post effects over the surface.

    Args:
        surface: Working surface with an original snapshot taken
        settings: Sanitized grade settings
        order: Effect names to run instead of the standard order
        checkpoint: Called with each effect name before it runs
    """
    effects = dict(POST_EFFECTS)
    names = list(order) if order is not None else [name for name, _ in POST_EFFECTS]

    for name in names:
        if name not in effects:
            raise ValueError(f"Unknown post effect: {name}. Valid effects: {list(effects)}")
        if checkpoint is not None:
            checkpoint(name)
        effects[name](surface, settings)
