"""
DriveDesk Relay — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own app from create_app() with a temporary upload
       directory. Gemini is replaced by FakeLLMService through
       dependency_overrides; the WhatsApp API is an httpx.MockTransport that
       records each outbound request.

Fixture Hierarchy:
    ├── settings:          Settings with test credentials and a tmp upload dir
    ├── fake_llm:          LLMService double returning a fixed string
    ├── whatsapp_provider: Recording MockTransport (default reply {"status": "sent"})
    ├── app:               FastAPI app wired to the doubles above
    ├── test_client:       HTTPX AsyncClient over ASGITransport
    └── sample_image_bytes: Minimal JPEG bytes
"""

import os
import tempfile
from pathlib import Path
from typing import Callable, List, Optional
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set before any drivedesk import: drivedesk.main builds a module-level app
os.environ["GEMINI_KEY"] = "test-key-not-real"
os.environ["PHONE_NUMBER_ID"] = "123456789"
os.environ["ACCESS_TOKEN_WHATSAPP"] = "test-token"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="drivedesk_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from drivedesk.config import Settings  # noqa: E402
from drivedesk.dependencies import get_llm_service  # noqa: E402
from drivedesk.exceptions import LLMServiceError  # noqa: E402
from drivedesk.services.llm_base import LLMService  # noqa: E402
from drivedesk.services.whatsapp_service import WhatsAppService  # noqa: E402


MODEL_TEXT = '{"full_name": "ALEX DOE", "license_number": "D1234567"}'


class FakeLLMService(LLMService):
    """Records calls; returns `text` or raises `error` when one is set."""

    def __init__(self, text: str = MODEL_TEXT):
        self.text = text
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def extract_license_fields(self, image_base64: str, mime_type: str) -> str:
        self.calls.append((image_base64, mime_type))
        if self.error is not None:
            raise self.error
        return self.text


class RecordingProvider:
    """
    Stands in for the WhatsApp Cloud API.

    `respond` builds the reply for each request; by default the provider
    accepts the message and answers {"status": "sent"}.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.respond: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"status": "sent"})
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        gemini_key="test-key-not-real",
        phone_number_id="123456789",
        access_token_whatsapp="test-token",
        upload_dir=str(tmp_path / "uploads"),
        log_level="WARNING",
    )


@pytest.fixture
def upload_dir(settings):
    return Path(settings.upload_dir)


@pytest.fixture
def fake_llm():
    return FakeLLMService()


@pytest.fixture
def whatsapp_provider():
    return RecordingProvider()


@pytest.fixture
def app(settings, fake_llm, whatsapp_provider):
    """
    A fresh app per test. The Gemini SDK is patched while the app is built so
    no real client is configured.
    """
    from drivedesk.main import create_app

    with patch("drivedesk.services.gemini_service.genai"):
        application = create_app(settings)

    application.dependency_overrides[get_llm_service] = lambda: fake_llm
    application.state.whatsapp_service = WhatsAppService(
        settings, transport=whatsapp_provider.transport
    )
    return application


@pytest_asyncio.fixture
async def test_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def model_failure():
    return LLMServiceError(context={"request_id": "test"})
