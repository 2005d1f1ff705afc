# Middleware package init
"""
DevCamper Backend — Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and any error envelope carry
    the same correlation id.
"""
