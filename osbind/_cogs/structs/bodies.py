"""
Raw JSON bodies as sent to and received from the services.

Most services wrap their objects into a single-key envelope named after
the resource type: ``{"loadbalancer": {...}}``, ``{"networks": [...]}``.
Some do not (e.g. the container infrastructure service): the objects are
sent and received flat, as they are.
"""
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from typing_extensions import Literal, TypedDict

RawBody = MutableMapping[str, Any]
RawItems = List[RawBody]


class RawLink(TypedDict, total=False):
    rel: Literal["self", "bookmark", "next", "previous"]
    href: str


SortDirection = Literal["asc", "desc"]


class BodyError(Exception):
    """ Raised when the response body does not match the expected shape. """


def wrap(key: Optional[str], body: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: dict(body)} if key is not None else dict(body)


def unwrap(key: Optional[str], raw: Any) -> Any:
    if not isinstance(raw, Mapping):
        raise BodyError(f"The response body is not a JSON object: {raw!r}")
    if key is None:
        return raw
    try:
        return raw[key]
    except KeyError:
        raise BodyError(f"The response body has no {key!r} field: {raw!r}") from None


def unwrap_items(key: str, raw: Any) -> RawItems:
    items = unwrap(key, raw)
    if items is None:  # e.g. {"networks": null} by some older services.
        return []
    if not isinstance(items, list):
        raise BodyError(f"The response body's field {key!r} is not a JSON array: {items!r}")
    return items
