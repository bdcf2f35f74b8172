"""
FastAPI dependency providers.

create_app() builds the configuration and the services once and stores them
on app.state; routes reach them through these functions, so tests can swap any
of them with app.dependency_overrides.
"""

from fastapi import Request

from drivedesk.config import Settings
from drivedesk.services.file_service import FileService
from drivedesk.services.llm_base import LLMService
from drivedesk.services.whatsapp_service import WhatsAppService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


def get_llm_service(request: Request) -> LLMService:
    return request.app.state.llm_service


def get_whatsapp_service(request: Request) -> WhatsAppService:
    return request.app.state.whatsapp_service
