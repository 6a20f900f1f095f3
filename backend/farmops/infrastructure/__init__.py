"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external calls wrapped with timeout/error mapping to core/errors.py

Design Decisions:
    - Thin wrappers over raw clients (Anthropic SDK, httpx, PyJWT)
"""
