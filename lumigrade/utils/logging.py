"""
Logging utilities for Lumigrade
Provides structured logging and batch render statistics
"""

import logging
import sys
from typing import Optional, Dict, Any, List
from datetime import datetime
import json

import colorlog

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_HANDLER_NAME = "lumigrade-console"


class StructuredLogger:
    """Provides structured logging with metadata"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with metadata"""
        data = {**self.metadata, **kwargs}
        if data:
            return f"{message} | {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        """Log debug message with metadata"""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message with metadata"""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message with metadata"""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        """Log error message with metadata"""
        self.logger.error(self._format_message(message, **kwargs))


class RenderStats:
    """Tracks batch render statistics"""

    def __init__(self):
        self.start_time = datetime.now()
        self.total_files = 0
        self.rendered_files = 0
        self.errors: List[Dict[str, Any]] = []
        self.render_times: List[float] = []

    def set_total(self, total: int):
        """Set total number of files to render"""
        self.total_files = total

    def add_result(self, render_time: Optional[float] = None):
        """Record a successful render"""
        self.rendered_files += 1
        if render_time:
            self.render_times.append(render_time)

    def add_error(self, file_path: str, error: str):
        """Record a failed render"""
        self.errors.append({
            'file': file_path,
            'error': error,
            'time': datetime.now()
        })

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds"""
        return (datetime.now() - self.start_time).total_seconds()

    def get_average_render_time(self) -> float:
        if not self.render_times:
            return 0.0
        return sum(self.render_times) / len(self.render_times)

    def get_summary(self) -> Dict[str, Any]:
        """Get render summary"""
        elapsed = self.get_elapsed_time()

        return {
            'total_files': self.total_files,
            'rendered_files': self.rendered_files,
            'errors': len(self.errors),
            'elapsed_time': elapsed,
            'average_time_per_file': self.get_average_render_time(),
            'files_per_second': self.rendered_files / elapsed if elapsed > 0 else 0
        }


def setup_console_logging(level: str = "INFO", color: bool = True,
                          fmt: str = DEFAULT_FORMAT):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level
        color: Whether to use colored output
        fmt: Log record format
    """
    console_handler = logging.StreamHandler(sys.stderr)

    if color and sys.stderr.isatty():
        formatter = colorlog.ColoredFormatter(
            '%(log_color)s' + fmt.replace('%(message)s', '%(reset)s%(message)s'),
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )
    else:
        formatter = logging.Formatter(fmt)

    console_handler.setFormatter(formatter)
    console_handler.set_name(CONSOLE_HANDLER_NAME)

    # Configure root logger, replacing any handler from an earlier call
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            root_logger.removeHandler(handler)
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.addHandler(console_handler)
    return console_handler
