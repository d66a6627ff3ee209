"""OpenAPI document generation for the versioned Maestro API.

This package replaces FastAPI's single ``/openapi.json`` document with one
document per API version, shaped by a pipeline of filters:

- **configure**: Registers filters, type mappings and security metadata
- **generator**: Options container and per-version document generator
- **filters**: Operation, request body and schema transformations
- **extensions**: Adapters emitting the custom ``x-`` extension blocks
- **schema_repository**: Component schema registry with collision detection
- **xml_comments**: Descriptions loaded from the XML documentation file
- **naming**: Name conversions shared with the API models
"""
