"""
Exception types raised by Lumigrade.
"""


class LumigradeError(Exception):
    """Base exception for grading operations."""
    pass


class InvalidInputError(LumigradeError, ValueError):
    """Raised when a render call receives an unusable image or setting."""
    pass


class RenderCancelledError(LumigradeError):
    """Raised when a render is aborted between stages."""
    pass


class MalformedSuggestionError(LumigradeError, ValueError):
    """Raised when an AI suggestion cannot be read as grade settings."""
    pass


class SuggestionError(LumigradeError):
    """Raised when the suggestion provider fails after all retries."""
    pass
