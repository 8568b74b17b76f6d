"""
Helpers for the request options: the structures that go to the requests.

Every resource defines its own options (``CreateOpts``, ``ListOpts``, etc.)
as dataclasses. The options are converted to the JSON bodies, the query
parameters, or the headers -- depending on what the service expects.

The fields which are not set (``None``) are not sent at all, so that
the services would apply their own defaults. The required fields are
checked locally before any request is made: a request which is known
to fail must not go to the service.
"""
import datetime
from typing import Any, Dict, Mapping, Optional

from osbind._cogs.helpers import timestamps


class MissingFieldError(ValueError):
    """ Raised when the options lack a required field, before any request is made. """

    def __init__(self, *fields: str, what: Optional[str] = None) -> None:
        names = ', '.join(repr(field) for field in fields)
        where = f" in {what}" if what else ""
        prefix = "One of the fields" if len(fields) > 1 else "The field"
        super().__init__(f"{prefix} {names} is required{where}.")
        self.fields = fields


def require(opts: object, *fields: str) -> None:
    """ Ensure that all of the fields are set to something meaningful. """
    for field in fields:
        value = getattr(opts, field)
        if value is None or value == '':
            raise MissingFieldError(field, what=type(opts).__name__)


def require_any(opts: object, *fields: str) -> None:
    """ Ensure that at least one of the fields is set to something meaningful. """
    values = [getattr(opts, field) for field in fields]
    if all(value is None or value == '' for value in values):
        raise MissingFieldError(*fields, what=type(opts).__name__)


def compact(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """ Exclude the unset fields, but keep the falsy ones (``False``, ``0``, ``[]``). """
    return {key: value for key, value in fields.items() if value is not None}


def render_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    elif isinstance(value, datetime.datetime):
        return timestamps.format_naive(value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        return ','.join(render_query_value(item) for item in value)
    else:
        return str(value)


def build_query(fields: Mapping[str, Any]) -> Dict[str, str]:
    """ Convert the options to the query params, all rendered as strings. """
    return {key: render_query_value(value) for key, value in compact(fields).items()}


def build_headers(fields: Mapping[str, Any], *, prefix: str = '') -> Dict[str, str]:
    return {f'{prefix}{key}': render_query_value(value) for key, value in compact(fields).items()}
