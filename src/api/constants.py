"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Content types
JSON_CONTENT_TYPE = "application/json"
