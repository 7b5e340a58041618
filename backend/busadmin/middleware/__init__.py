"""
Bus Admin Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Access Log] → [CORS] → Route Handler

    - Request ID runs first so the access log line and every log line
      written during the request can carry the correlation id.
    - The access log measures the full handler duration and logs the
      final status code.
"""
