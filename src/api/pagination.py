"""Pagination marker and ``Link`` header construction.

Paginated endpoints are marked explicitly with ``@paginated`` so that the
generated documents carry the ``x-ms-paginated`` extension, and respond
with first, prev, next and last URLs in the ``Link`` header.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from starlette.datastructures import URL

PAGINATION_ATTRIBUTE = "__paginated__"


@dataclass(frozen=True, slots=True)
class Paginated:
    """Names of the query parameters driving a paginated endpoint."""

    page_parameter_name: str = "page"
    page_size_parameter_name: str = "perPage"


def paginated[F: Callable[..., Any]](
    page_parameter_name: str = "page",
    page_size_parameter_name: str = "perPage",
) -> Callable[[F], F]:
    """Mark an endpoint as paginated.

    Args:
        page_parameter_name: Query parameter carrying the 1-based page number.
        page_size_parameter_name: Query parameter carrying the page size.

    Returns:
        Callable: Decorator returning the endpoint unchanged.
    """
    marker = Paginated(page_parameter_name, page_size_parameter_name)

    def decorator(endpoint: F) -> F:
        setattr(endpoint, PAGINATION_ATTRIBUTE, marker)
        return endpoint

    return decorator


def get_pagination(endpoint: object) -> Paginated | None:
    """Return the pagination marker of an endpoint, None when not paginated."""
    return getattr(endpoint, PAGINATION_ATTRIBUTE, None)


def build_link_header(
    url: URL | str,
    *,
    page: int,
    page_size: int,
    total: int,
    pagination: Paginated | None = None,
) -> str:
    """Build an RFC 8288 ``Link`` header for one page of results.

    Args:
        url: URL of the current request.
        page: Current 1-based page number.
        page_size: Number of items per page.
        total: Total number of items.
        pagination: Parameter names, the defaults of ``Paginated`` if omitted.

    Returns:
        str: Comma separated links with first, prev, next and last relations.

    Raises:
        ValueError: If page or page_size are not positive or total is negative.
    """
    if page < 1 or page_size < 1:
        msg = "page and page_size must be positive"
        raise ValueError(msg)
    if total < 0:
        msg = "total must not be negative"
        raise ValueError(msg)

    names = pagination or Paginated()
    base = URL(str(url))
    last = max(1, math.ceil(total / page_size))

    def link(target: int, rel: str) -> str:
        target_url = base.include_query_params(
            **{
                names.page_parameter_name: target,
                names.page_size_parameter_name: page_size,
            }
        )
        return f'<{target_url}>; rel="{rel}"'

    links = [link(1, "first")]
    if page > 1:
        links.append(link(min(page - 1, last), "prev"))
    if page < last:
        links.append(link(page + 1, "next"))
    links.append(link(last, "last"))
    return ", ".join(links)
