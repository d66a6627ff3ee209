"""JSON response class using orjson serialization.

``ORJSONResponse`` is the default response class of the application and
serves the generated OpenAPI documents. Pydantic models are rendered with
their camel case aliases, the names published in the documents.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.constants import JSON_CONTENT_TYPE


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = JSON_CONTENT_TYPE

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", by_alias=True)

        # Key order of documents is meaningful to readers, so keys stay unsorted
        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)
