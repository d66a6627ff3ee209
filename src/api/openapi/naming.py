"""Name conversions shared by the API models and the document filters."""

from pydantic.alias_generators import to_pascal


def to_camel_case(value: str) -> str:
    """Convert a field or property name to lower camel case.

    ``MaxAge`` and ``max_age`` both become ``maxAge``; names that are already
    lower camel case are returned unchanged.

    Args:
        value: The name to convert.

    Returns:
        str: The lower camel case name.
    """
    if not value:
        return value
    head, *rest = value.split("_")
    camel = head + "".join(part[:1].upper() + part[1:] for part in rest)
    return camel[:1].lower() + camel[1:]


def to_operation_name(endpoint_name: str) -> str:
    """Derive the original operation id from an endpoint function name.

    ``get_build`` becomes ``GetBuild``.
    """
    return to_pascal(endpoint_name)
