"""
Image input/output for Lumigrade
"""

from .image_io import load_image, save_image, encode_jpeg, export_filename, SUPPORTED_EXTENSIONS

__all__ = [
    'load_image',
    'save_image',
    'encode_jpeg',
    'export_filename',
    'SUPPORTED_EXTENSIONS',
]
