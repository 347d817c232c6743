"""
Lumigrade utilities module.

Provides logging helpers and render statistics.
"""

from .logging import StructuredLogger, RenderStats, setup_console_logging

__all__ = [
    'StructuredLogger',
    'RenderStats',
    'setup_console_logging'
]
