"""
Image loading and export for Lumigrade
"""

import io
import logging
import time
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tif', '.tiff', '.webp', '.bmp'}
ALPHA_FORMATS = {'PNG', 'TIFF', 'WEBP'}


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGBA8 array.

    EXIF orientation is applied so the array matches what viewers show.

    Args:
        path: Image file path

    Returns:
        (height, width, 4) uint8 array
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    with Image.open(path) as img:
        img = ImageOps.exif_transpose(img)
        rgba = img.convert('RGBA')
        logger.debug(f"Loaded {path.name}: {rgba.width}x{rgba.height} ({img.mode})")
        return np.asarray(rgba, dtype=np.uint8).copy()


def to_pil(array: np.ndarray) -> Image.Image:
    """Wrap an RGBA8 or RGB8 array as a Pillow image."""
    # Pillow infers RGB or RGBA from the channel count
    return Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))


def save_image(array: np.ndarray, path: Union[str, Path], quality: int = 95) -> Path:
    """
    Save a rendered array.

    The format follows the file extension; formats without alpha drop it.

    Args:
        array: (height, width, 4) uint8 array
        path: Output path
        quality: JPEG/WebP quality (1-100)

    Returns:
        Path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    img = to_pil(array)
    fmt = Image.registered_extensions().get(path.suffix.lower())
    if fmt is None:
        raise ValueError(f"Unsupported output format: {path.suffix}")

    if fmt not in ALPHA_FORMATS and img.mode == 'RGBA':
        img = img.convert('RGB')

    save_kwargs = {}
    if fmt in ('JPEG', 'WEBP'):
        save_kwargs['quality'] = quality

    img.save(path, format=fmt, **save_kwargs)
    logger.info(f"Saved {path} ({img.width}x{img.height}, {fmt})")
    return path


def encode_jpeg(array: np.ndarray, quality: int = 40,
                max_size: Optional[int] = None) -> bytes:
    """
    Encode an array as JPEG bytes, optionally downscaled.

    Args:
        array: RGBA8 or RGB8 array
        quality: JPEG quality (1-100)
        max_size: Longest edge in pixels; None keeps the original size
    """
    img = to_pil(array).convert('RGB')
    if max_size and max(img.size) > max_size:
        img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img.save(buffer, format='JPEG', quality=quality)
    return buffer.getvalue()


def export_filename(prefix: str = "lumigrade", extension: str = ".jpg") -> str:
    """Timestamped export name, e.g. ``lumigrade_1718900000000.jpg``."""
    return f"{prefix}_{int(time.time() * 1000)}{extension}"
