"""
Image analysis modules for Lumigrade
"""

from .suggestion import SuggestionService, parse_suggestion, GRADING_PROMPT

__all__ = ['SuggestionService', 'parse_suggestion', 'GRADING_PROMPT']
