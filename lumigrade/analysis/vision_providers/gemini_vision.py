"""
Google Gemini Vision provider for Lumigrade.

Sends a preview JPEG and the grading prompt to a Gemini model and
returns the raw text of its JSON answer.
"""

import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)

try:
    import google.generativeai as genai
    GEMINI_AVAILABLE = True
except ImportError:
    GEMINI_AVAILABLE = False
    logger.warning("Google Generative AI package not installed")


class GeminiVisionProvider:
    """Google Gemini Vision implementation."""

    def __init__(self, config: Dict):
        """
        Initialize Gemini Vision provider.

        Args:
            config: Provider-specific configuration (``suggestion`` section)
        """
        if not GEMINI_AVAILABLE:
            raise ImportError("Please install google-generativeai: pip install lumigrade[ai]")

        self.config = config
        self.name = "gemini"

        # Configure API; an unexpanded ${VAR} placeholder counts as unset
        api_key = config.get('api_key')
        if not api_key or str(api_key).startswith('${'):
            api_key = os.environ.get('GEMINI_API_KEY')
        if not api_key:
            raise ValueError("Gemini API key not provided")

        genai.configure(api_key=api_key)

        # Initialize model
        model_name = config.get('model', 'gemini-1.5-flash')
        self.model = genai.GenerativeModel(model_name)

        self.generation_config = {
            'temperature': config.get('temperature', 0.4),
            'response_mime_type': 'application/json',
        }

    def generate(self, prompt: str, image_jpeg: bytes,
                 timeout: Optional[float] = None) -> str:
        """
        Ask Gemini about an image.

        Args:
            prompt: Instruction text
            image_jpeg: JPEG-encoded image bytes
            timeout: Request timeout in seconds

        Returns:
            Response text
        """
        request_options = {'timeout': timeout} if timeout else None
        response = self.model.generate_content(
            [prompt, {'mime_type': 'image/jpeg', 'data': image_jpeg}],
            generation_config=self.generation_config,
            request_options=request_options,
        )

        if hasattr(response, 'usage_metadata') and response.usage_metadata:
            logger.debug(f"Gemini usage: {response.usage_metadata.total_token_count} tokens")

        return response.text
