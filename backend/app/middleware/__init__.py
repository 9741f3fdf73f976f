# Middleware package init
"""
SocialConnect Backend — Middleware Package
============================================

What:  Cross-cutting concerns applied to every HTTP request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation ID for logs, error bodies and X-Request-ID
    3. Logging: one access-log line per request with status and duration

    WebSocket connections bypass these (they are HTTP-only middleware).
"""
