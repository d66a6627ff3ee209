"""API documentation configuration of the Maestro web API.

``configure_api_docs`` runs once while the application is created. It
registers the filters shaping every per-version document and exposes the
documents and the Swagger UI over HTTP.

If generation fails with ``SchemaIdCollisionError`` (identical schema ids for
models of different API versions), do not make the schema ids unique with
fully qualified type names. The error means something was added to one
version of the API that conflicts with another model for the same object:
every operation of that version that can return the changed model, even
nested, must be updated to return the new model.
"""

from datetime import timedelta
from typing import Annotated

from fastapi import FastAPI, Query
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse
from loguru import logger

from src.api.openapi.filters import (
    add_default_error_response,
    add_pagination_extension,
    api_version_parameter,
    name_request_body,
    prefix_operation_id,
    shape_object_schema,
)
from src.api.openapi.generator import (
    ApiDocumentGenerator,
    DocumentInfo,
    SwaggerGenOptions,
)
from src.api.openapi.xml_comments import XmlComments, resolve_xml_comments_path
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings
from src.core.exceptions import NotFoundError
from src.core.types import JsonValue, OpenApiNode

SECURITY_SCHEME_NAME = "Bearer"
AUTHORIZATION_HEADER = "Authorization"


def duration_schema() -> OpenApiNode:
    return {"type": "string", "format": "duration"}


def any_json_schema() -> OpenApiNode:
    return {}


def build_swagger_gen_options(settings: Settings) -> SwaggerGenOptions:
    """Create the document registrations for the configured API versions.

    Args:
        settings: Application settings.

    Returns:
        SwaggerGenOptions: Options with all filters, mappings and security
            metadata registered.
    """
    docs_config = settings.api_docs_config
    options = SwaggerGenOptions()

    for version in docs_config.api_versions:
        options.swagger_doc(
            version,
            DocumentInfo(
                title=settings.app_name,
                version=version,
                description=docs_config.description,
                contact_name=docs_config.contact_name,
                contact_email=docs_config.contact_email,
            ),
        )

    (
        options.filter_operations(add_default_error_response)
        .filter_operations(prefix_operation_id)
        .filter_operations(add_pagination_extension)
        .filter_operations(api_version_parameter(docs_config.version_query_parameter))
        .request_body_filter(name_request_body)
        .filter_schemas(shape_object_schema)
    )

    (
        options.map_type(timedelta, duration_schema)
        .map_type(timedelta | None, duration_schema)
        .map_type(JsonValue, any_json_schema)
    )

    xml_path = resolve_xml_comments_path(settings)
    if xml_path.is_file():
        options.include_xml_comments(XmlComments.from_file(xml_path))
        logger.info("Including XML documentation from {}", xml_path)
    else:
        logger.debug("No XML documentation found at {}", xml_path)

    options.add_security_definition(
        SECURITY_SCHEME_NAME,
        {
            "type": "apiKey",
            "in": "header",
            "name": AUTHORIZATION_HEADER,
            "scheme": "bearer",
        },
    )
    options.add_security_requirement({SECURITY_SCHEME_NAME: []})

    return options


def configure_api_docs(app: FastAPI, settings: Settings) -> ApiDocumentGenerator:
    """Register API documentation generation with the application.

    Args:
        app: The FastAPI application instance.
        settings: Application settings.

    Returns:
        ApiDocumentGenerator: The generator, also stored on ``app.state``.
    """
    docs_config = settings.api_docs_config
    generator = ApiDocumentGenerator(app, build_swagger_gen_options(settings))
    app.state.api_document_generator = generator
    latest_version = max(docs_config.api_versions)

    async def swagger_document(version: str) -> ORJSONResponse:
        """Serve the OpenAPI document of one API version."""
        return ORJSONResponse(generator.get_document(version))

    app.add_api_route(
        docs_config.document_url_template,
        swagger_document,
        methods=["GET"],
        include_in_schema=False,
    )

    if docs_config.ui_url:

        async def swagger_ui(
            version: Annotated[str, Query()] = latest_version,
        ) -> HTMLResponse:
            """Serve the Swagger UI for one API version."""
            if version not in generator.versions:
                raise NotFoundError(
                    f"No API documentation exists for version '{version}'",
                    context={"version": version},
                )
            return get_swagger_ui_html(
                openapi_url=docs_config.document_url_template.format(version=version),
                title=f"{settings.app_name} API {version}",
                swagger_ui_parameters={
                    "urls": [
                        {
                            "url": docs_config.document_url_template.format(
                                version=documented
                            ),
                            "name": documented,
                        }
                        for documented in generator.versions
                    ],
                    "urls.primaryName": version,
                },
            )

        app.add_api_route(
            docs_config.ui_url,
            swagger_ui,
            methods=["GET"],
            include_in_schema=False,
        )

    logger.info(
        "API documentation configured for versions {}",
        ", ".join(generator.versions),
        version_parameter=docs_config.version_query_parameter,
    )
    return generator
