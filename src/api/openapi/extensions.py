"""Custom OpenAPI extension blocks understood by the client generators."""

from dataclasses import dataclass
from typing import Protocol

from src.core.types import JsonValue

PAGINATED_EXTENSION = "x-ms-paginated"
REQUEST_BODY_NAME_EXTENSION = "x-name"


class OpenApiExtension(Protocol):
    """A value written under an ``x-`` key of a document node."""

    def write(self) -> JsonValue:
        """Return the JSON value of the extension."""
        ...


@dataclass(frozen=True, slots=True)
class PaginatedExtension:
    """Tells client generators that an operation is paged.

    Paged operations return first, prev, next and last URLs in the ``Link``
    response header.
    """

    page_parameter_name: str
    page_size_parameter_name: str

    def write(self) -> JsonValue:
        return {
            "page": self.page_parameter_name,
            "pageSize": self.page_size_parameter_name,
        }


@dataclass(frozen=True, slots=True)
class RequestBodyNameExtension:
    """Names the body parameter of a generated client method."""

    name: str

    def write(self) -> JsonValue:
        return self.name
