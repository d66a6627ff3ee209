"""HTTP API layer of the Maestro web API.

Key components:
- **main**: Application factory and lifecycle management
- **openapi**: Per-version OpenAPI documents shaped by a filter pipeline
- **versioning**: ``api-version`` query parameter versioning
- **pagination**: Pagination marker and ``Link`` header construction
- **middleware**: Request context and centralized error handling
- **schemas**: Camel case API models and the standard error payload
- **utils**: orjson-backed responses
"""
