"""
DriveDesk Relay — Licence Extraction Route
===========================================

What:  Handles POST /extract-info: licence image in, raw Gemini text out.
How:   The upload is held in FileService.temporary_upload() for the whole
       request, so it is removed whatever happens after it was stored.

Request Flow:
    1. Client sends multipart/form-data with an 'image' file field
    2. FileService checks presence, then the "image/" MIME prefix (400 otherwise)
    3. The file is stored, read back and base64 encoded
    4. LLMService sends prompt + image to Gemini
    5. 200 {"result": <model text>}; the stored file is deleted on exit

Error responses (handled by global exception handlers):
    HTTP 400: Missing file or non-image type (ValidationError)
    HTTP 500: Store/read failure or Gemini failure (FileStorageError, LLMServiceError)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from drivedesk.dependencies import get_file_service, get_llm_service
from drivedesk.schemas.relay import ErrorResponse, ExtractResponse
from drivedesk.services.file_service import FileService
from drivedesk.services.llm_base import LLMService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Extraction"])


@router.post(
    "/extract-info",
    response_model=ExtractResponse,
    responses={
        400: {"description": "Invalid or missing image file", "model": ErrorResponse},
        500: {"description": "Failed to process image", "model": ErrorResponse},
    },
    summary="Extract driving licence fields from an image",
)
async def extract_info(
    image: Optional[UploadFile] = File(
        default=None,
        description="Photo or scan of a driving licence (any image/* type)",
    ),
    file_service: FileService = Depends(get_file_service),
    llm_service: LLMService = Depends(get_llm_service),
) -> ExtractResponse:
    """
    Return the model's answer for the uploaded licence, verbatim.

    The answer is not parsed: if Gemini wraps the JSON in Markdown or returns
    prose, the client receives exactly that.
    """
    try:
        async with file_service.temporary_upload(image) as stored:
            logger.info(
                "Received extraction request: filename=%s, size=%d bytes",
                image.filename,
                stored.size,
            )
            image_base64 = await file_service.read_base64(stored.path)
            text = await llm_service.extract_license_fields(image_base64, stored.mime_type)
    finally:
        if image is not None:
            await image.close()

    return ExtractResponse(result=text)
