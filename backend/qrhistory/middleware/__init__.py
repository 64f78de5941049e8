"""
QR History Backend - Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request of the process server.

Middleware Chain:
    Request → [Access log] → [CORS] → Route Handler

The serverless function does not use this package: it sets its CORS headers
itself (see qrhistory.dispatch).
"""
