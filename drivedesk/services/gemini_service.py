"""
DriveDesk Relay — Google Gemini Service Implementation
=======================================================

What:  Sends a driving licence image to Gemini and returns the raw text answer.
Why:   Gemini reads the licence fields without any OCR pipeline on our side.
How:   One generate_content call with two parts: the fixed extraction prompt
       and the image as inline base64 data with its declared MIME type.
Who:   Created once by create_app(); called by the /extract-info route.

Failure policy:
    A single attempt per request. Whatever the SDK raises (network error,
    invalid key, blocked response) is logged with its stack trace and wrapped
    in LLMServiceError, which the global handler turns into a 500.
"""

import logging
import time
import uuid

import google.generativeai as genai

from drivedesk.config import Settings
from drivedesk.exceptions import LLMServiceError
from drivedesk.services.llm_base import LLMService

logger = logging.getLogger(__name__)

# Placeholder the model must use for fields it cannot read
FIELD_SENTINEL = "failed to get"

LICENSE_FIELDS = (
    "full_name",
    "license_number",
    "date_of_birth",
    "nationality",
    "license_expiry_date",
    "license_issue_date",
    "place_of_issue",
)


def build_extraction_prompt() -> str:
    """Build the instruction sent alongside every licence image."""
    keys = ",\n".join(f'  "{field}": "..."' for field in LICENSE_FIELDS)
    return (
        "You are a document parser. Analyze this driving license image and extract "
        "the following fields only.\n\n"
        "Return the result as a raw JSON object with these exact keys and values:\n\n"
        "{\n" + keys + "\n}\n\n"
        "If any value is missing or unreadable due to blur, occlusion, or noise, "
        f'return "{FIELD_SENTINEL}" for that field.\n\n'
        "Do not include any explanation, formatting, or Markdown. Just return plain JSON."
    )


class GeminiService(LLMService):
    """
    Google Gemini implementation of licence field extraction.

    The model object is created once and reused across requests.
    """

    EXTRACTION_PROMPT = build_extraction_prompt()

    def __init__(self, settings: Settings):
        # The SDK keeps the key in module-level state
        if settings.gemini_key:
            genai.configure(api_key=settings.gemini_key)

        self.model_name = settings.gemini_model
        self.model = genai.GenerativeModel(self.model_name)

        logger.info("GeminiService initialized with model=%s", self.model_name)

    async def extract_license_fields(self, image_base64: str, mime_type: str) -> str:
        """
        Send prompt + inline image to Gemini and return response.text untouched.

        Raises:
            LLMServiceError: The call failed or the response had no text.
        """
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info(
            "[%s] Starting Gemini extraction (%s, %d base64 chars)",
            request_id,
            mime_type,
            len(image_base64),
        )

        try:
            response = await self.model.generate_content_async(
                [
                    self.EXTRACTION_PROMPT,
                    {"inline_data": {"mime_type": mime_type, "data": image_base64}},
                ]
            )
            # .text raises ValueError when the candidate was blocked or empty
            text = response.text
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "[%s] Gemini extraction failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e),
                exc_info=True,
            )
            raise LLMServiceError(
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "[%s] Gemini extraction completed in %.0fms, returned %d chars",
            request_id,
            duration_ms,
            len(text),
        )
        return text
