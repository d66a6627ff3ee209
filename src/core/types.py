"""Type aliases for dynamic data structures throughout the application.

All types defined here are JSON-serializable to support logging, API
responses and the generated API documentation.
"""

from typing import Any

import pydantic

# Any valid JSON value. Documented as an unconstrained schema, so API models
# can accept arbitrary JSON payloads.
JsonValue = pydantic.JsonValue

# Context dictionary for error details and debugging information
type ErrorContext = dict[str, Any]

# A JSON schema / OpenAPI node as produced by the document generator
type OpenApiNode = dict[str, Any]
