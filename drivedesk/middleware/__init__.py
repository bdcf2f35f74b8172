"""
DriveDesk Relay — Middleware Package
=====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging records status and duration once the response exists
    3. CORS is FastAPI's CORSMiddleware (allow-all by default)
"""
