"""
Raster surface for Lumigrade

A mutable RGBA pixel buffer with the drawing primitives the grading
pipeline needs: scaled draws, blend-mode compositing, radial gradient
fills and blur. Every mutating operation leaves samples in [0, 255].
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from scipy.ndimage import gaussian_filter

from .blending import BlendMode, composite_channels

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float, float]  # r, g, b (0-255), a (0-1)


@dataclass(frozen=True)
class RadialGradient:
    """Two-stop radial gradient sharing one center (canvas semantics)."""
    center: Tuple[float, float]  # (x, y) in pixels
    inner_radius: float
    outer_radius: float
    inner_color: Color
    outer_color: Color

    def render(self, width: int, height: int) -> np.ndarray:
        """
        Rasterize the gradient.

        Returns:
            float64 array (height, width, 4): RGB in 0-255, alpha in 0-1
        """
        cx, cy = self.center
        # Sample at pixel centers
        y, x = np.ogrid[:height, :width]
        dist = np.sqrt((x + 0.5 - cx) ** 2 + (y + 0.5 - cy) ** 2)

        span = self.outer_radius - self.inner_radius
        if span > 0:
            t = np.clip((dist - self.inner_radius) / span, 0.0, 1.0)
        else:
            t = (dist >= self.outer_radius).astype(np.float64)
        t = t[:, :, np.newaxis]

        inner = np.asarray(self.inner_color, dtype=np.float64)
        outer = np.asarray(self.outer_color, dtype=np.float64)
        return inner + (outer - inner) * t


class RasterSurface:
    """
    Mutable RGBA8 pixel buffer.

    The buffer is a (height, width, 4) uint8 array, row-major with a
    top-left origin. An immutable snapshot of the buffer can be taken
    with ``snapshot_original`` for stages that need the ungraded source.
    """

    def __init__(self, width: int, height: int, blur_truncate: float = 3.0):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface dimensions must be positive, got {width}x{height}")
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self._original: Optional[np.ndarray] = None
        self.blur_truncate = blur_truncate

    @classmethod
    def from_image(cls, image: np.ndarray, blur_truncate: float = 3.0) -> 'RasterSurface':
        """Create a surface sized to ``image`` and draw it."""
        height, width = image.shape[:2]
        surface = cls(width, height, blur_truncate=blur_truncate)
        surface.draw_scaled(image)
        return surface

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def pixels(self) -> np.ndarray:
        """The live working buffer."""
        return self._pixels

    @property
    def original(self) -> np.ndarray:
        """Read-only snapshot taken by ``snapshot_original``."""
        if self._original is None:
            raise RuntimeError("No original snapshot has been taken")
        return self._original

    def to_image(self) -> np.ndarray:
        """Copy of the current buffer."""
        return self._pixels.copy()

    def snapshot_original(self) -> np.ndarray:
        """Freeze a copy of the current buffer for later reads."""
        snapshot = self._pixels.copy()
        snapshot.setflags(write=False)
        self._original = snapshot
        return snapshot

    def draw_scaled(self, image: np.ndarray, dst_w: Optional[int] = None,
                    dst_h: Optional[int] = None) -> None:
        """
        Resample ``image`` to fill the surface.

        Passing a size different from the surface's re-allocates the buffer.
        """
        dst_w = dst_w or self.width
        dst_h = dst_h or self.height
        if (dst_h, dst_w) != self._pixels.shape[:2]:
            self._pixels = np.zeros((dst_h, dst_w, 4), dtype=np.uint8)
            self._original = None

        src_h, src_w = image.shape[:2]
        if (src_h, src_w) == (dst_h, dst_w):
            self._pixels[...] = image
            return

        shrinking = dst_w < src_w or dst_h < src_h
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
        self._pixels[...] = cv2.resize(image, (dst_w, dst_h), interpolation=interpolation)

    def composite(self, layer: Union[np.ndarray, 'RasterSurface'],
                  mode: Union[str, BlendMode] = BlendMode.NORMAL,
                  opacity: float = 1.0) -> None:
        """
        Composite an RGBA8 layer over the surface.

        Args:
            layer: (height, width, 4) uint8 array or another surface
            mode: Blend mode for the color channels
            opacity: Layer opacity (0-1)
        """
        if isinstance(layer, RasterSurface):
            layer = layer.pixels
        if layer.shape != self._pixels.shape:
            raise ValueError(f"Layer shape {layer.shape} does not match surface {self._pixels.shape}")

        src = layer.astype(np.float64)
        self._composite_float(src[:, :, :3], src[:, :, 3:4] / 255.0, mode, opacity)

    def fill(self, color: Color, mode: Union[str, BlendMode] = BlendMode.NORMAL,
             opacity: float = 1.0) -> None:
        """Composite a solid color over the whole surface."""
        rgb = np.asarray(color[:3], dtype=np.float64)
        alpha = float(color[3]) if len(color) > 3 else 1.0
        self._composite_float(rgb, alpha, mode, opacity)

    def fill_gradient(self, gradient: RadialGradient,
                      mode: Union[str, BlendMode] = BlendMode.NORMAL,
                      opacity: float = 1.0) -> None:
        """Rasterize ``gradient`` and composite it over the surface."""
        layer = gradient.render(self.width, self.height)
        self._composite_float(layer[:, :, :3], layer[:, :, 3:4], mode, opacity)

    def blur(self, radius_px: float) -> None:
        """Gaussian low-pass the buffer in place; sigma equals the radius."""
        if radius_px <= 0:
            return
        blurred = gaussian_filter(
            self._pixels.astype(np.float64),
            sigma=(radius_px, radius_px, 0),
            mode='nearest',
            truncate=self.blur_truncate,
        )
        self._store(blurred)

    def _composite_float(self, src_rgb, src_alpha, mode, opacity: float) -> None:
        dst = self._pixels.astype(np.float64)
        rgb = composite_channels(dst[:, :, :3], src_rgb, src_alpha, mode, opacity)

        # Destination alpha follows source-over for every blend mode
        weight = min(max(float(opacity), 0.0), 1.0) * np.asarray(src_alpha, dtype=np.float64)
        dst_alpha = dst[:, :, 3:4] / 255.0
        alpha = (dst_alpha + weight * (1.0 - dst_alpha)) * 255.0

        self._store(np.concatenate([rgb, np.broadcast_to(alpha, dst[:, :, 3:4].shape)], axis=2))

    def _store(self, values: np.ndarray) -> None:
        """Round, clamp and write float samples back to the buffer."""
        np.copyto(self._pixels, np.clip(np.rint(values), 0, 255).astype(np.uint8))
