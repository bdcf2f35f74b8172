"""
DriveDesk Relay — Configuration and Application Lifecycle Tests
================================================================

What we test:
    ✅ Settings read GEMINI_KEY, PHONE_NUMBER_ID, ACCESS_TOKEN_WHATSAPP
    ✅ A missing GEMINI_KEY fails validation and aborts startup
    ✅ /health reports configuration state
    ✅ Every response carries X-Request-ID, unexpected 500s included
    ✅ The drivedesk entry point exits with status 1 before uvicorn starts
"""

import logging
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from drivedesk import __main__ as entrypoint
from drivedesk.config import Settings
from drivedesk.main import create_app
from drivedesk.middleware.logging import level_for_status


class TestSettings:

    def test_reads_environment_names(self, monkeypatch):
        monkeypatch.setenv("GEMINI_KEY", "g-key")
        monkeypatch.setenv("PHONE_NUMBER_ID", "42")
        monkeypatch.setenv("ACCESS_TOKEN_WHATSAPP", "wa-token")

        settings = Settings(_env_file=None)

        assert settings.gemini_key == "g-key"
        assert settings.phone_number_id == "42"
        assert settings.access_token_whatsapp == "wa-token"
        assert settings.whatsapp_configured

    def test_defaults(self):
        settings = Settings(_env_file=None, gemini_key="k")

        assert settings.backend_port == 5000
        assert settings.gemini_model == "gemini-2.0-flash-lite"
        assert settings.cors_origins_list == ["*"]

    def test_missing_gemini_key_fails_validation(self):
        settings = Settings(_env_file=None, gemini_key="")

        with pytest.raises(ValueError, match="GEMINI_KEY"):
            settings.validate_required()

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, gemini_key="k", log_level="LOUD")

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, gemini_key="k", log_level="debug").log_level == "DEBUG"


class TestLifespan:

    @pytest.mark.asyncio
    async def test_startup_without_gemini_key_exits(self, tmp_path):
        settings = Settings(_env_file=None, gemini_key="", upload_dir=str(tmp_path / "u"))
        with patch("drivedesk.services.gemini_service.genai"):
            app = create_app(settings)

        with pytest.raises(SystemExit) as exc_info:
            async with app.router.lifespan_context(app):
                pass

        assert exc_info.value.code == 1

    @pytest.mark.asyncio
    async def test_startup_with_gemini_key(self, app):
        async with app.router.lifespan_context(app):
            assert app.state.settings.gemini_configured

    @pytest.mark.asyncio
    async def test_upload_dir_created_at_startup_not_at_build(self, app, upload_dir):
        assert not upload_dir.exists()

        async with app.router.lifespan_context(app):
            assert upload_dir.is_dir()


class TestEntryPoint:

    def test_missing_gemini_key_exits_before_uvicorn(self, tmp_path):
        settings = Settings(_env_file=None, gemini_key="", upload_dir=str(tmp_path))

        with patch.object(entrypoint, "get_settings", return_value=settings), \
                patch.object(entrypoint, "setup_logging"), \
                patch.object(entrypoint.uvicorn, "run") as uvicorn_run:
            with pytest.raises(SystemExit) as exc_info:
                entrypoint.run()

        assert exc_info.value.code == 1
        uvicorn_run.assert_not_called()

    def test_valid_config_starts_uvicorn_on_configured_port(self, settings):
        with patch.object(entrypoint, "get_settings", return_value=settings), \
                patch.object(entrypoint, "setup_logging"), \
                patch.object(entrypoint.uvicorn, "run") as uvicorn_run:
            entrypoint.run()

        uvicorn_run.assert_called_once()
        assert uvicorn_run.call_args.args == ("drivedesk.main:app",)
        assert uvicorn_run.call_args.kwargs["port"] == 5000


class TestHealthAndRequestId:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["gemini_configured"] is True
        assert body["whatsapp_configured"] is True

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/health")
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_request_id_propagated(self, test_client):
        response = await test_client.post(
            "/send-booking-message", json={}, headers={"X-Request-ID": "abc123"}
        )

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_header_on_unexpected_error(
        self, app, fake_llm, sample_image_bytes
    ):
        fake_llm.error = RuntimeError("boom")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                "/extract-info",
                files={"image": ("license.jpg", sample_image_bytes, "image/jpeg")},
                headers={"X-Request-ID": "fault-1"},
            )

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "fault-1"
        assert response.json()["request_id"] == "fault-1"


class TestAccessLogLevels:

    @pytest.mark.parametrize(
        "status,level",
        [(200, logging.INFO), (302, logging.INFO), (400, logging.WARNING), (500, logging.ERROR)],
    )
    def test_level_for_status(self, status, level):
        assert level_for_status(status) == level
