"""Transformations applied to the nodes of a generated OpenAPI document.

Filters are plain callables receiving the node to transform in place and a
context describing where the node comes from:

- operation filters: ``(operation, OperationFilterContext) -> None``
- request body filters: ``(request_body, RequestBodyFilterContext) -> None``
- schema filters: ``(schema, SchemaFilterContext) -> None``

They do not depend on the document generator and can be applied to any
document node.
"""

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from types import NoneType, UnionType
from typing import Annotated, Any, Union, get_args, get_origin
from uuid import UUID

from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from src.api.constants import JSON_CONTENT_TYPE
from src.api.openapi.extensions import (
    PAGINATED_EXTENSION,
    REQUEST_BODY_NAME_EXTENSION,
    OpenApiExtension,
    PaginatedExtension,
    RequestBodyNameExtension,
)
from src.api.openapi.naming import to_camel_case, to_operation_name
from src.api.openapi.schema_repository import SchemaRepository
from src.api.pagination import get_pagination
from src.api.schemas.errors import ErrorResponse
from src.core.exceptions import MissingOperationTagError
from src.core.types import OpenApiNode

VALIDATION_ERROR_STATUS = "422"

# Request validation schemas FastAPI adds to every document with parameters
FASTAPI_VALIDATION_SCHEMAS = ("HTTPValidationError", "ValidationError")

# Types that cannot represent absence unless explicitly declared optional
VALUE_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    Decimal,
    datetime,
    date,
    time,
    timedelta,
    UUID,
    Enum,
)


@dataclass(frozen=True, slots=True)
class OperationFilterContext:
    """Where an operation of the document comes from."""

    route: APIRoute
    path: str
    method: str
    api_version: str
    schema_repository: SchemaRepository

    @property
    def endpoint(self) -> Callable[..., Any]:
        return self.route.endpoint


@dataclass(frozen=True, slots=True)
class RequestBodyFilterContext:
    """Where a request body of the document comes from."""

    route: APIRoute
    body_parameter_name: str
    schema_repository: SchemaRepository


@dataclass(frozen=True, slots=True)
class SchemaFilterContext:
    """The component schema being filtered and its source model, if any."""

    schema_id: str
    model: type[BaseModel] | None
    schema_repository: SchemaRepository


type OperationFilter = Callable[[OpenApiNode, OperationFilterContext], None]
type RequestBodyFilter = Callable[[OpenApiNode, RequestBodyFilterContext], None]
type SchemaFilter = Callable[[OpenApiNode, SchemaFilterContext], None]
type SchemaFactory = Callable[[], OpenApiNode]


def _is_union(annotation: Any) -> bool:  # noqa: ANN401
    return get_origin(annotation) in (Union, UnionType)


def _unwrap_annotated(annotation: Any) -> Any:  # noqa: ANN401
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def is_non_nullable_value_type(annotation: Any) -> bool:  # noqa: ANN401
    """Whether a field annotation is a scalar value type that cannot be absent.

    ``int`` and ``timedelta`` are, ``int | None``, ``str`` and ``list[int]``
    are not. A union qualifies when none of its members is ``None`` and all of
    them are value types.
    """
    annotation = _unwrap_annotated(annotation)
    if _is_union(annotation):
        members = get_args(annotation)
        return NoneType not in members and all(
            is_non_nullable_value_type(member) for member in members
        )
    return (
        get_origin(annotation) is None
        and isinstance(annotation, type)
        and issubclass(annotation, VALUE_TYPES)
    )


def find_model_field(
    model: type[BaseModel], property_name: str
) -> tuple[str, FieldInfo] | None:
    """Find the model field a schema property was generated from.

    Field names, aliases and their camel case forms are compared without
    regard to case.

    Returns:
        tuple[str, FieldInfo] | None: Field name and info, None if not found.
    """
    wanted = property_name.lower()
    for name, info in model.model_fields.items():
        candidates = {name, to_camel_case(name)}
        if info.alias:
            candidates.add(info.alias)
        if any(candidate.lower() == wanted for candidate in candidates):
            return name, info
    return None


def _dependants(route: APIRoute) -> Iterator[Dependant]:
    pending = [route.dependant]
    while pending:
        dependant = pending.pop(0)
        yield dependant
        pending.extend(dependant.dependencies)


def body_params(route: APIRoute) -> list[Any]:
    """Body parameters of a route, including those of its dependencies."""
    params: dict[str, Any] = {}
    for dependant in _dependants(route):
        for param in dependant.body_params:
            params.setdefault(param.name, param)
    return list(params.values())


def request_params(route: APIRoute) -> list[Any]:
    """Path, query, header and cookie parameters of a route and its dependencies."""
    params: dict[tuple[str, str], Any] = {}
    for dependant in _dependants(route):
        for location, declared in (
            ("path", dependant.path_params),
            ("query", dependant.query_params),
            ("header", dependant.header_params),
            ("cookie", dependant.cookie_params),
        ):
            for param in declared:
                params.setdefault((location, param.alias), param)
    return list(params.values())


def body_parameter_name(route: APIRoute) -> str:
    """Name of the body parameter of a route.

    FastAPI combines several body parameters into one body, named ``body``.
    """
    params = body_params(route)
    if len(params) == 1:
        return params[0].name
    return "body"


def _same_type(left: Any, right: Any) -> bool:  # noqa: ANN401
    if left == right:
        return True
    return (
        _is_union(left)
        and _is_union(right)
        and set(get_args(left)) == set(get_args(right))
    )


def write_extension(node: OpenApiNode, key: str, extension: OpenApiExtension) -> None:
    """Store the JSON value of an extension under its ``x-`` key."""
    node[key] = extension.write()


def add_default_error_response(
    operation: OpenApiNode, context: OperationFilterContext
) -> None:
    """Document the shared error payload as the ``default`` response.

    Request validation failures are rendered with the same payload, so the
    ``422`` response FastAPI documents is pointed at it as well.
    """
    error_schema = context.schema_repository.generate_schema(ErrorResponse)
    responses = operation.setdefault("responses", {})
    if VALIDATION_ERROR_STATUS in responses:
        responses[VALIDATION_ERROR_STATUS]["content"] = {
            JSON_CONTENT_TYPE: {"schema": dict(error_schema)}
        }
    responses["default"] = {
        "description": "Error",
        "content": {JSON_CONTENT_TYPE: {"schema": error_schema}},
    }


def prefix_operation_id(operation: OpenApiNode, context: OperationFilterContext) -> None:
    """Rewrite the operation id to ``<primaryTag>_<originalOperationId>``.

    The original id is the explicit ``operation_id`` of the route, or the
    PascalCase endpoint name.

    Raises:
        MissingOperationTagError: If the operation has no tag.
    """
    tags = operation.get("tags") or []
    if not tags:
        raise MissingOperationTagError(context.path, context.method)
    original = context.route.operation_id or to_operation_name(context.route.name)
    operation["operationId"] = f"{tags[0]}_{original}"


def add_pagination_extension(
    operation: OpenApiNode, context: OperationFilterContext
) -> None:
    """Attach ``x-ms-paginated`` to operations marked with ``@paginated``."""
    marker = get_pagination(context.endpoint)
    if marker is None:
        return
    extension = PaginatedExtension(
        page_parameter_name=marker.page_parameter_name,
        page_size_parameter_name=marker.page_size_parameter_name,
    )
    write_extension(operation, PAGINATED_EXTENSION, extension)


def api_version_parameter(parameter_name: str) -> OperationFilter:
    """Build a filter documenting the version query parameter of operations.

    Args:
        parameter_name: Name of the version query parameter.

    Returns:
        OperationFilter: Filter adding the required parameter, restricted to
            the version of the document.
    """

    def add_api_version_parameter(
        operation: OpenApiNode, context: OperationFilterContext
    ) -> None:
        parameters = operation.setdefault("parameters", [])
        if any(p.get("name") == parameter_name for p in parameters):
            return
        parameters.append(
            {
                "name": parameter_name,
                "in": "query",
                "required": True,
                "description": "The version of the API",
                "schema": {
                    "type": "string",
                    "enum": [context.api_version],
                    "default": context.api_version,
                },
            }
        )

    return add_api_version_parameter


def name_request_body(
    request_body: OpenApiNode, context: RequestBodyFilterContext
) -> None:
    """Attach ``x-name`` with the body parameter name to a request body."""
    extension = RequestBodyNameExtension(name=context.body_parameter_name)
    write_extension(request_body, REQUEST_BODY_NAME_EXTENSION, extension)


def shape_object_schema(schema: OpenApiNode, context: SchemaFilterContext) -> None:
    """Camel-case property names and require non-nullable value types.

    Every property whose source field is a non-nullable value type is added
    to ``required``, whether or not the model declares a default for it.
    """
    if schema.get("type") != "object":
        return

    required: list[str] = []
    for name in schema.get("required", []):
        camel = to_camel_case(name)
        if camel not in required:
            required.append(camel)

    properties = {
        to_camel_case(key): value for key, value in schema.get("properties", {}).items()
    }
    if "properties" in schema:
        schema["properties"] = properties

    if context.model is not None:
        for key in properties:
            found = find_model_field(context.model, key)
            if found is None:
                continue
            _, info = found
            if is_non_nullable_value_type(info.annotation) and key not in required:
                required.append(key)

    if required:
        schema["required"] = required
    else:
        schema.pop("required", None)


def _mapped_schema(
    annotation: Any,  # noqa: ANN401
    current: OpenApiNode,
    mappings: Sequence[tuple[Any, SchemaFactory]],
) -> OpenApiNode | None:
    annotation = _unwrap_annotated(annotation)
    factory = next((f for mapped, f in mappings if _same_type(mapped, annotation)), None)
    if factory is None:
        return None
    kept = {k: current[k] for k in ("title", "description") if k in current}
    return {**factory(), **kept}


def type_mappings(mappings: Sequence[tuple[Any, SchemaFactory]]) -> SchemaFilter:
    """Build a filter replacing the schemas of properties of mapped types.

    Args:
        mappings: Pairs of a type annotation and a factory of its schema.

    Returns:
        SchemaFilter: Filter replacing matching property schemas. The
            ``title`` and ``description`` of a replaced property are kept.
    """

    def apply_type_mappings(schema: OpenApiNode, context: SchemaFilterContext) -> None:
        if context.model is None:
            return
        properties = schema.get("properties", {})
        for key, property_schema in list(properties.items()):
            found = find_model_field(context.model, key)
            if found is None:
                continue
            mapped = _mapped_schema(found[1].annotation, property_schema, mappings)
            if mapped is not None:
                properties[key] = mapped

    return apply_type_mappings


def parameter_type_mappings(
    mappings: Sequence[tuple[Any, SchemaFactory]],
) -> OperationFilter:
    """Build a filter replacing the schemas of parameters of mapped types.

    Args:
        mappings: Pairs of a type annotation and a factory of its schema.

    Returns:
        OperationFilter: Filter replacing matching parameter schemas.
    """

    def apply_parameter_type_mappings(
        operation: OpenApiNode, context: OperationFilterContext
    ) -> None:
        declared = request_params(context.route)
        for parameter in operation.get("parameters", []):
            name = parameter.get("name")
            param = next((p for p in declared if name in (p.alias, p.name)), None)
            if param is None or "schema" not in parameter:
                continue
            mapped = _mapped_schema(
                param.field_info.annotation, parameter["schema"], mappings
            )
            if mapped is not None:
                parameter["schema"] = mapped

    return apply_parameter_type_mappings
