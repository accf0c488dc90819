"""Routes Package.

This package contains FastAPI route handlers for the XML to Excel converter service.
It includes endpoints for:
- XML upload and conversion
- Health checks
"""
