"""Registry of the component schemas of one generated document.

The repository maps schema ids to the pydantic models they were generated
from, so that schema filters can inspect the source model of a schema, and
generates schemas on demand (at most once per model).

Schema ids are the model names. Two distinct models producing the same id
raise ``SchemaIdCollisionError``; they are deliberately never disambiguated
with fully qualified names, because one API version cannot expose two models
for the same object.
"""

import re
from collections.abc import Iterable
from typing import Any, get_args, get_origin

from pydantic import BaseModel

from src.core.exceptions import SchemaIdCollisionError
from src.core.types import OpenApiNode

REF_TEMPLATE = "#/components/schemas/{model}"

_INVALID_SCHEMA_ID_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")


def schema_id(model: type[BaseModel]) -> str:
    """Return the component schema id of a model (``Page[Build]`` -> ``Page_Build_``)."""
    return _INVALID_SCHEMA_ID_CHARS.sub("_", model.__name__)


def _is_model(annotation: Any) -> bool:  # noqa: ANN401
    return (
        get_origin(annotation) is None
        and isinstance(annotation, type)
        and issubclass(annotation, BaseModel)
    )


def collect_models(annotations: Iterable[Any]) -> list[type[BaseModel]]:
    """Find every pydantic model reachable from the given type annotations.

    Container, union and ``Annotated`` types are unwrapped and model fields
    are followed recursively.

    Args:
        annotations: Type annotations to start from.

    Returns:
        list[type[BaseModel]]: Models in discovery order, without duplicates.
    """
    found: dict[type[BaseModel], None] = {}
    pending = list(annotations)
    while pending:
        annotation = pending.pop(0)
        if annotation is None:
            continue
        if _is_model(annotation):
            if annotation in found:
                continue
            found[annotation] = None
            pending.extend(f.annotation for f in annotation.model_fields.values())
            continue
        pending.extend(get_args(annotation))
    return list(found)


class SchemaRepository:
    """Component schemas of a document together with their source models."""

    def __init__(self, schemas: dict[str, OpenApiNode] | None = None) -> None:
        self.schemas: dict[str, OpenApiNode] = schemas if schemas is not None else {}
        self._types: dict[str, type[BaseModel]] = {}

    def register_type(self, model: type[BaseModel]) -> str:
        """Associate a model with its schema id.

        Raises:
            SchemaIdCollisionError: If another model already owns the id.
        """
        model_id = schema_id(model)
        existing = self._types.get(model_id)
        if existing is not None and existing is not model:
            raise SchemaIdCollisionError(model_id, existing, model)
        self._types[model_id] = model
        return model_id

    def register_all(self, models: Iterable[type[BaseModel]]) -> None:
        for model in models:
            self.register_type(model)

    def type_for(self, model_id: str) -> type[BaseModel] | None:
        """Return the model a schema was generated from, if known."""
        return self._types.get(model_id)

    def generate_schema(self, model: type[BaseModel]) -> OpenApiNode:
        """Generate the schema of a model and return a reference to it.

        The schema and those of its nested models are added to the
        repository once; later calls only return the reference.

        Args:
            model: The model to generate the schema for.

        Returns:
            OpenApiNode: A ``$ref`` node pointing at the component schema.
        """
        self.register_all(collect_models([model]))
        model_id = schema_id(model)
        if model_id not in self.schemas:
            schema = model.model_json_schema(by_alias=True, ref_template=REF_TEMPLATE)
            for name, definition in schema.pop("$defs", {}).items():
                self.schemas.setdefault(name, definition)
            self.schemas[model_id] = schema
        return {"$ref": REF_TEMPLATE.format(model=model_id)}
