"""
DriveDesk Relay — API Routes Package
=====================================

Route Inventory:
    - extract.py:  POST /extract-info          (licence image → raw model text)
    - booking.py:  POST /send-booking-message  (WhatsApp booking template)
    - health.py:   GET  /health                (service health check)

Routes stay thin: they pull data from the request, call a service and shape
the response. Errors propagate to the global handlers in main.py.
"""
