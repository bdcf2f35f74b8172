"""
DriveDesk Relay — Services Layer
=================================

Service Inventory:
    - LLMService (abstract): Interface for licence field extraction
    - GeminiService: Implementation backed by Google Gemini
    - FileService: Temporary upload validation, storage and guaranteed cleanup
    - WhatsAppService: Booking template messages via the WhatsApp Cloud API

Services are built once by create_app() and reach routes through
drivedesk.dependencies.
"""
