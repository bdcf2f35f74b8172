"""
DriveDesk Relay — Abstract LLM Service Interface
=================================================

What:  The contract the /extract-info route depends on.
Why:   The route only needs "image in, text out"; GeminiService is the one
       implementation, and tests substitute a fake through dependency overrides.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Abstract interface for licence field extraction from an image.

    Contract:
        - extract_license_fields() returns the model's text exactly as produced
        - Provider errors are wrapped in LLMServiceError
        - No retries: one call per request
    """

    @abstractmethod
    async def extract_license_fields(self, image_base64: str, mime_type: str) -> str:
        """
        Ask the model for the licence fields of an image.

        Args:
            image_base64: The image content, base64 encoded.
            mime_type:    The declared MIME type of the image (e.g. "image/jpeg").

        Returns:
            The raw model output. Nominally a flat JSON object, but it is not
            parsed here and may be anything the model chose to return.

        Raises:
            LLMServiceError: When the model call fails.
        """
        ...
