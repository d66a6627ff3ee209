"""FastAPI middleware package for cross-cutting request/response concerns.

- **RequestContextMiddleware**: Manages correlation IDs and request context
- **error_handler**: Centralized exception handling with consistent error responses
"""
