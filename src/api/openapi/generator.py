"""Per-version OpenAPI document generation.

``SwaggerGenOptions`` collects everything registered at startup: one
document description per API version, operation, request body and schema
filters, type mappings and security metadata. ``ApiDocumentGenerator``
produces one document per version from the routes of a FastAPI application
and runs the registered filters over it.

Generation is deterministic: the same application and options always
produce the same document, so documents are cached per version.
"""

from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Self

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute
from loguru import logger

from src.api.openapi.filters import (
    FASTAPI_VALIDATION_SCHEMAS,
    OperationFilter,
    OperationFilterContext,
    RequestBodyFilter,
    RequestBodyFilterContext,
    SchemaFactory,
    SchemaFilter,
    SchemaFilterContext,
    body_parameter_name,
    body_params,
    parameter_type_mappings,
    type_mappings,
)
from src.api.openapi.schema_repository import SchemaRepository, collect_models
from src.api.openapi.xml_comments import XmlComments
from src.api.versioning import get_api_versions
from src.core.exceptions import DuplicateOperationIdError, NotFoundError
from src.core.types import OpenApiNode


@dataclass(frozen=True, slots=True)
class DocumentInfo:
    """The ``info`` block of one versioned document."""

    title: str
    version: str
    description: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None

    @property
    def contact(self) -> dict[str, str] | None:
        contact = {
            key: value
            for key, value in (("name", self.contact_name), ("email", self.contact_email))
            if value
        }
        return contact or None


@dataclass
class SwaggerGenOptions:
    """Registrations applied by the document generator.

    Registration methods return the options so calls can be chained.
    """

    documents: dict[str, DocumentInfo] = field(default_factory=dict)
    operation_filters: list[OperationFilter] = field(default_factory=list)
    request_body_filters: list[RequestBodyFilter] = field(default_factory=list)
    schema_filters: list[SchemaFilter] = field(default_factory=list)
    type_mappings: list[tuple[Any, SchemaFactory]] = field(default_factory=list)
    security_definitions: dict[str, OpenApiNode] = field(default_factory=dict)
    security_requirements: list[dict[str, list[str]]] = field(default_factory=list)

    def swagger_doc(self, version: str, info: DocumentInfo) -> Self:
        self.documents[version] = info
        return self

    def filter_operations(self, operation_filter: OperationFilter) -> Self:
        self.operation_filters.append(operation_filter)
        return self

    def request_body_filter(self, request_body_filter: RequestBodyFilter) -> Self:
        self.request_body_filters.append(request_body_filter)
        return self

    def filter_schemas(self, schema_filter: SchemaFilter) -> Self:
        self.schema_filters.append(schema_filter)
        return self

    def map_type(self, python_type: Any, factory: SchemaFactory) -> Self:  # noqa: ANN401
        """Replace the schema of properties annotated with ``python_type``.

        Applies to model properties and to path, query, header and cookie
        parameters. Mappings are exact: register ``T`` and ``T | None``
        separately.
        """
        self.type_mappings.append((python_type, factory))
        return self

    def add_security_definition(self, name: str, scheme: OpenApiNode) -> Self:
        self.security_definitions[name] = scheme
        return self

    def add_security_requirement(self, requirement: dict[str, list[str]]) -> Self:
        self.security_requirements.append(requirement)
        return self

    def include_xml_comments(self, comments: XmlComments) -> Self:
        """Describe operations and schemas from an XML documentation file."""
        self.operation_filters.append(comments.apply_to_operation)
        self.schema_filters.append(comments.apply_to_schema)
        return self


def _route_annotations(routes: list[APIRoute]) -> Iterator[Any]:
    for route in routes:
        if route.response_model is not None:
            yield route.response_model
        for param in body_params(route):
            yield param.field_info.annotation
        for response in route.responses.values():
            if isinstance(response, dict) and "model" in response:
                yield response["model"]


def _schema_refs(node: Any) -> Iterator[str]:  # noqa: ANN401
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                yield value.rsplit("/", 1)[-1]
            else:
                yield from _schema_refs(value)
    elif isinstance(node, list):
        for item in node:
            yield from _schema_refs(item)


def _drop_unreferenced_validation_schemas(
    document: OpenApiNode, repository: SchemaRepository
) -> None:
    schemas = repository.schemas
    referenced = set(_schema_refs(document["paths"]))
    for schema_id, schema in schemas.items():
        if schema_id not in FASTAPI_VALIDATION_SCHEMAS:
            referenced.update(_schema_refs(schema))
    for schema_id in FASTAPI_VALIDATION_SCHEMAS:
        if schema_id not in referenced and repository.type_for(schema_id) is None:
            schemas.pop(schema_id, None)


def _check_unique_operation_ids(document: OpenApiNode) -> None:
    locations: dict[str, list[str]] = defaultdict(list)
    for path, path_item in document.get("paths", {}).items():
        for method, operation in path_item.items():
            if isinstance(operation, dict) and "operationId" in operation:
                locations[operation["operationId"]].append(f"{method.upper()} {path}")
    for operation_id, used_by in locations.items():
        if len(used_by) > 1:
            raise DuplicateOperationIdError(operation_id, used_by)


class ApiDocumentGenerator:
    """Generates and caches the OpenAPI document of each API version.

    Args:
        app: The application whose routes are documented.
        options: Registrations applied to every document.
    """

    def __init__(self, app: FastAPI, options: SwaggerGenOptions) -> None:
        self.app = app
        self.options = options
        self._documents: dict[str, OpenApiNode] = {}

    @property
    def versions(self) -> list[str]:
        return list(self.options.documents)

    def get_document(self, version: str) -> OpenApiNode:
        """Return the cached document of a version, generating it on first use.

        Raises:
            NotFoundError: If no document is registered for the version.
        """
        if version not in self._documents:
            self._documents[version] = self.generate(version)
        return self._documents[version]

    def routes_for(self, version: str) -> list[APIRoute]:
        """Documented routes whose endpoint takes part in the version."""
        return [
            route
            for route in self.app.routes
            if isinstance(route, APIRoute)
            and route.include_in_schema
            and version in get_api_versions(route.endpoint)
        ]

    def generate(self, version: str) -> OpenApiNode:
        """Build the document of one API version.

        Raises:
            NotFoundError: If no document is registered for the version.
            ApiDocumentationError: If a route or model violates the
                documentation contract.
        """
        info = self.options.documents.get(version)
        if info is None:
            raise NotFoundError(
                f"No API documentation exists for version '{version}'",
                context={"version": version, "available": self.versions},
            )

        routes = self.routes_for(version)
        schemas: dict[str, OpenApiNode] = {}
        repository = SchemaRepository(schemas)
        repository.register_all(collect_models(_route_annotations(routes)))

        document = get_openapi(
            title=info.title,
            version=info.version,
            description=info.description,
            contact=info.contact,
            routes=routes,
            separate_input_output_schemas=False,
        )
        document.setdefault("paths", {})
        components = document.setdefault("components", {})
        schemas.update(components.get("schemas", {}))
        components["schemas"] = schemas

        self._filter_operations(document, routes, version, repository)
        self._filter_schemas(repository)
        _drop_unreferenced_validation_schemas(document, repository)

        if self.options.security_definitions:
            components["securitySchemes"] = dict(self.options.security_definitions)
        if self.options.security_requirements:
            document["security"] = list(self.options.security_requirements)

        _check_unique_operation_ids(document)

        logger.info(
            "Generated API documentation for version {}",
            version,
            operations=sum(len(item) for item in document["paths"].values()),
            schemas=len(schemas),
        )
        return document

    def _filter_operations(
        self,
        document: OpenApiNode,
        routes: list[APIRoute],
        version: str,
        repository: SchemaRepository,
    ) -> None:
        apply_parameter_type_mappings = parameter_type_mappings(
            self.options.type_mappings
        )
        for route in routes:
            path_item = document["paths"].get(route.path_format, {})
            for method in sorted(route.methods):
                operation = path_item.get(method.lower())
                if operation is None:
                    continue
                context = OperationFilterContext(
                    route=route,
                    path=route.path_format,
                    method=method.lower(),
                    api_version=version,
                    schema_repository=repository,
                )
                apply_parameter_type_mappings(operation, context)
                for operation_filter in self.options.operation_filters:
                    operation_filter(operation, context)

                request_body = operation.get("requestBody")
                if request_body is None:
                    continue
                body_context = RequestBodyFilterContext(
                    route=route,
                    body_parameter_name=body_parameter_name(route),
                    schema_repository=repository,
                )
                for body_filter in self.options.request_body_filters:
                    body_filter(request_body, body_context)

    def _filter_schemas(self, repository: SchemaRepository) -> None:
        apply_type_mappings = type_mappings(self.options.type_mappings)
        for model_id, schema in list(repository.schemas.items()):
            context = SchemaFilterContext(
                schema_id=model_id,
                model=repository.type_for(model_id),
                schema_repository=repository,
            )
            apply_type_mappings(schema, context)
            for schema_filter in self.options.schema_filters:
                schema_filter(schema, context)
