"""
DriveDesk Relay — Pydantic Request/Response Schemas
====================================================

What:  The JSON contracts of /extract-info, /send-booking-message and /health.
Why:   FastAPI validates request bodies against them and documents the
       responses in the OpenAPI schema.

Field names on the wire are camelCase for the booking request (what the
frontend already sends) and snake_case for "wa_response" (what it already reads).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExtractResponse(BaseModel):
    """Returned by POST /extract-info on success."""

    result: str = Field(
        description="Raw model output. Nominally a JSON object of licence fields; not validated."
    )


class BookingRequest(BaseModel):
    """
    Body of POST /send-booking-message.

    All three fields are declared optional so that a missing field reaches
    the route and is reported as a 400 "Missing required fields." rather than
    a schema error. Empty strings count as missing.
    """

    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    customer_name: Optional[str] = Field(default=None, alias="customerName")
    car_name: Optional[str] = Field(default=None, alias="carName")

    model_config = ConfigDict(populate_by_name=True)

    def missing_fields(self) -> list:
        """Wire names of the fields that are absent or empty."""
        return [
            alias
            for alias, value in (
                ("phoneNumber", self.phone_number),
                ("customerName", self.customer_name),
                ("carName", self.car_name),
            )
            if not value
        ]


class BookingResponse(BaseModel):
    """Returned by POST /send-booking-message on success."""

    message: str = Field(default="Message sent successfully!")
    wa_response: Any = Field(description="WhatsApp Cloud API response body, passed through")


class BookingErrorResponse(BaseModel):
    """Returned by POST /send-booking-message when the provider call fails."""

    message: str = Field(default="Failed to send message.")
    error: Any = Field(description="Provider error body, or the transport error message")


class ErrorResponse(BaseModel):
    """Error body for client errors and extraction failures."""

    error: str
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    gemini_configured: bool
    whatsapp_configured: bool
    uptime_seconds: float
