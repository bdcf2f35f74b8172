"""
DriveDesk Relay — Application Package
======================================

A two-endpoint backend for the DriveDesk test-drive frontend:

    POST /extract-info          licence image → Gemini → raw text
    POST /send-booking-message  booking fields → WhatsApp template message

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Upstreams)        │  ← Gemini, WhatsApp, temp files
    ├─────────────────────────────────────┤
    │              Schemas                │  ← Pydantic request/response bodies
    └─────────────────────────────────────┘

Nothing is persisted; every request is independent.
"""

__version__ = "1.0.0"
