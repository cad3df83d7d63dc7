# Middleware package init
"""
Salon Booking Backend — Middleware Package
=============================================

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Rate Limit] → [Logging] → [GZip] → Route Handler

    1. CORS answers preflights itself and decorates every response, 429s included
    2. Request ID so every later log line and error body carries it
    3. Rate limit on POST /register and POST /login only
    4. Logging records method, path, status and duration (never headers or bodies)
"""
