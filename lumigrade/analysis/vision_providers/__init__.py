"""
Vision LLM providers for grade suggestions.
"""
