"""Descriptions loaded from the companion XML documentation file.

The file follows the XML documentation comment format::

    <doc>
      <members>
        <member name="M:src.api.builds.get_build">
          <summary>Gets a single build.</summary>
          <param name="id">The id of the build.</param>
          <returns>The build.</returns>
        </member>
        <member name="T:src.api.models.Build">
          <summary>A build of a repository.</summary>
        </member>
        <member name="P:src.api.models.Build.commit">
          <summary>The commit that was built.</summary>
        </member>
      </members>
    </doc>

Member names are ``M:`` for endpoints, ``T:`` for models and ``P:`` for model
fields, followed by the module and qualified name. A trailing signature in
parentheses is ignored. Descriptions declared in code take precedence.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

import src
from src.api.openapi.filters import (
    OperationFilterContext,
    SchemaFilterContext,
    body_parameter_name,
    find_model_field,
)
from src.core.config import Settings
from src.core.types import OpenApiNode


@dataclass(slots=True)
class MemberDocumentation:
    """Documentation of one member."""

    summary: str | None = None
    remarks: str | None = None
    returns: str | None = None
    params: dict[str, str] = field(default_factory=dict)


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    text = " ".join("".join(element.itertext()).split())
    return text or None


def _member_key(name: str) -> str:
    return name.split("(", 1)[0]


def endpoint_member_name(endpoint: Any) -> str:  # noqa: ANN401
    return f"M:{endpoint.__module__}.{endpoint.__qualname__}"


def type_member_name(model: type) -> str:
    return f"T:{model.__module__}.{model.__qualname__}"


def property_member_name(model: type, field_name: str) -> str:
    return f"P:{model.__module__}.{model.__qualname__}.{field_name}"


class XmlComments:
    """Member documentation indexed by member name."""

    def __init__(self, members: dict[str, MemberDocumentation]) -> None:
        self.members = members

    @classmethod
    def from_element(cls, root: ET.Element) -> "XmlComments":
        members: dict[str, MemberDocumentation] = {}
        for member in root.iter("member"):
            name = member.get("name")
            if not name:
                continue
            members[_member_key(name)] = MemberDocumentation(
                summary=_text(member.find("summary")),
                remarks=_text(member.find("remarks")),
                returns=_text(member.find("returns")),
                params={
                    param.get("name", ""): text
                    for param in member.findall("param")
                    if (text := _text(param)) and param.get("name")
                },
            )
        return cls(members)

    @classmethod
    def from_string(cls, content: str) -> "XmlComments":
        return cls.from_element(ET.fromstring(content))

    @classmethod
    def from_file(cls, path: Path) -> "XmlComments":
        """Parse an XML documentation file.

        Raises:
            xml.etree.ElementTree.ParseError: If the file is not well-formed.
        """
        comments = cls.from_element(ET.parse(path).getroot())
        logger.debug(
            "Loaded {} documented members from {}", len(comments.members), path
        )
        return comments

    def get(self, member_name: str) -> MemberDocumentation | None:
        return self.members.get(_member_key(member_name))

    def apply_to_operation(
        self, operation: OpenApiNode, context: OperationFilterContext
    ) -> None:
        """Fill operation summary, description, parameters and success response."""
        doc = self.get(endpoint_member_name(context.endpoint))
        if doc is None:
            return
        route = context.route
        # FastAPI derives a summary from the endpoint name when none is given
        if doc.summary and not route.summary:
            operation["summary"] = doc.summary
        if doc.remarks and not route.description:
            operation["description"] = doc.remarks

        params = {name.lower(): text for name, text in doc.params.items()}
        for parameter in operation.get("parameters", []):
            text = params.get(str(parameter.get("name", "")).lower())
            if text:
                parameter.setdefault("description", text)

        if (body := operation.get("requestBody")) is not None:
            text = params.get(body_parameter_name(route).lower())
            if text:
                body.setdefault("description", text)

        if doc.returns:
            for status_code, response in operation.get("responses", {}).items():
                if status_code.startswith("2"):
                    response["description"] = doc.returns
                    break

    def apply_to_schema(self, schema: OpenApiNode, context: SchemaFilterContext) -> None:
        """Fill model and field descriptions of a component schema."""
        model = context.model
        if model is None:
            return
        doc = self.get(type_member_name(model))
        if doc is not None and doc.summary:
            schema.setdefault("description", doc.summary)

        for key, property_schema in schema.get("properties", {}).items():
            found = find_model_field(model, key)
            if found is None:
                continue
            field_doc = self.get(property_member_name(model, found[0]))
            if field_doc is not None and field_doc.summary:
                property_schema.setdefault("description", field_doc.summary)


def resolve_xml_comments_path(settings: Settings) -> Path:
    """Locate the XML documentation file.

    In development the file is looked up next to the application package,
    otherwise in the content root (the working directory unless configured).
    """
    docs_config = settings.api_docs_config
    if settings.is_development:
        directory = Path(src.__file__).resolve().parent
    else:
        directory = docs_config.content_root_path or Path.cwd()
    return directory / docs_config.xml_comments_file
