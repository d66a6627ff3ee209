"""Maestro web API.

The HTTP API of the Maestro dependency flow service, built with FastAPI.
Every API version is selected with the ``api-version`` query parameter and
published as its own OpenAPI document.

Layers:
- **API Layer**: FastAPI application, versioning, documentation generation
- **Core Layer**: Configuration, logging, exceptions and request context
"""
