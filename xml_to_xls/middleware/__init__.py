"""Middleware Package.

This package contains FastAPI middleware components for:
- Rate limiting
- Request size and content type validation
- Security response headers
"""
