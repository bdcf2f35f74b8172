"""
DriveDesk Relay — WhatsApp Cloud API Service
=============================================

What:  Sends the "book_drive" template message for a test-drive booking.
Why:   Customers get their booking confirmation on WhatsApp.
How:   POST {whatsapp_api_url}/{phone_number_id}/messages with a bearer token
       and a template payload carrying the customer name and car name.
Who:   Created once by create_app(); called by the /send-booking-message route.

Failure policy:
    No retry and no idempotency key. Calling twice sends two messages.
    A non-2xx answer or a transport error becomes MessagingProviderError,
    carrying the provider's error body when there is one.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from drivedesk.config import Settings
from drivedesk.exceptions import MessagingProviderError

logger = logging.getLogger(__name__)


class WhatsAppService:
    """
    Thin client for the WhatsApp Cloud API messages endpoint.

    A fresh httpx.AsyncClient is opened per call, so the service holds no
    connections between requests. `transport` is passed through to httpx and
    is how tests swap in an httpx.MockTransport.
    """

    TEMPLATE_NAME = "book_drive"
    TEMPLATE_LANGUAGE = "en"

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = settings.whatsapp_api_url.rstrip("/")
        self.phone_number_id = settings.phone_number_id
        self.access_token = settings.access_token_whatsapp
        self._transport = transport

        if not settings.whatsapp_configured:
            logger.warning(
                "WhatsApp credentials are incomplete (PHONE_NUMBER_ID / ACCESS_TOKEN_WHATSAPP); "
                "booking messages will be rejected by the provider"
            )

    @property
    def messages_url(self) -> str:
        return f"{self.api_url}/{self.phone_number_id}/messages"

    def build_booking_payload(
        self, phone_number: str, customer_name: str, car_name: str
    ) -> Dict[str, Any]:
        """Template payload; parameter order is customer name, then car name."""
        return {
            "messaging_product": "whatsapp",
            "to": phone_number,
            "type": "template",
            "template": {
                "name": self.TEMPLATE_NAME,
                "language": {"code": self.TEMPLATE_LANGUAGE},
                "components": [
                    {
                        "type": "body",
                        "parameters": [
                            {"type": "text", "text": customer_name},
                            {"type": "text", "text": car_name},
                        ],
                    }
                ],
            },
        }

    async def send_booking_message(
        self, phone_number: str, customer_name: str, car_name: str
    ) -> Any:
        """
        Send the booking template and return the provider's response body.

        Raises:
            MessagingProviderError: Upstream returned a non-2xx status or the
                request never completed.
        """
        payload = self.build_booking_payload(phone_number, customer_name, car_name)
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.messages_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # A bodiless rejection still needs something to show the caller
            provider_error = _response_body(e.response) or str(e)
            logger.error(
                "WhatsApp API rejected booking message (HTTP %d): %s",
                e.response.status_code,
                provider_error,
            )
            raise MessagingProviderError(
                provider_error=provider_error,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("WhatsApp API request failed: %s", str(e), exc_info=True)
            raise MessagingProviderError(
                provider_error=str(e) or type(e).__name__,
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Booking template '%s' sent (HTTP %d)", self.TEMPLATE_NAME, response.status_code)
        return _response_body(response)


def _response_body(response: httpx.Response) -> Any:
    """Decoded JSON body, or the raw text when the provider did not send JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text
