"""
DriveDesk Relay — Booking Notification Route
=============================================

What:  Handles POST /send-booking-message: sends the "book_drive" WhatsApp
       template to a customer.

Error responses:
    HTTP 400: A field is missing or empty (ValidationError); nothing is sent
    HTTP 500: The WhatsApp API rejected the call or was unreachable
              (MessagingProviderError); body carries the provider's error
"""

import logging

from fastapi import APIRouter, Depends

from drivedesk.dependencies import get_whatsapp_service
from drivedesk.exceptions import ValidationError
from drivedesk.schemas.relay import (
    BookingErrorResponse,
    BookingRequest,
    BookingResponse,
    ErrorResponse,
)
from drivedesk.services.whatsapp_service import WhatsAppService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Booking"])


@router.post(
    "/send-booking-message",
    response_model=BookingResponse,
    responses={
        400: {"description": "Missing required fields", "model": ErrorResponse},
        500: {"description": "Provider rejected the message", "model": BookingErrorResponse},
    },
    summary="Send a test-drive booking confirmation over WhatsApp",
)
async def send_booking_message(
    booking: BookingRequest,
    whatsapp_service: WhatsAppService = Depends(get_whatsapp_service),
) -> BookingResponse:
    missing = booking.missing_fields()
    if missing:
        raise ValidationError(
            message="Missing required fields.",
            context={"missing": missing},
        )

    wa_response = await whatsapp_service.send_booking_message(
        phone_number=booking.phone_number,
        customer_name=booking.customer_name,
        car_name=booking.car_name,
    )
    return BookingResponse(wa_response=wa_response)
