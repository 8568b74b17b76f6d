"""
API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on exposing its exceptions all over the code and to the users.
Hence, we have our own hierarchy of exceptions for the services' API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
timeouts, malformed JSON, etc., are escalated from the client library as is,
since they are related not to the domain of the services' APIs, but rather
to the networking and encryption.

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

Some selected statuses of the API errors are made into their own classes,
so that they could be intercepted and handled by the callers (e.g. 404 when
waiting for a resource deletion). All other statuses are raised as the base
error class and are indistinguishable from each other (except via the fields).

Unlike the underlying client library's errors, the API errors contain more
information about the reasons -- as provided by the services in the response
bodies, not guessed only by HTTP statuses alone. Every service has its own
shape of the error bodies, so they are normalised to the same fields here.
"""
import collections.abc
import json
from typing import Any, Mapping, Optional, Tuple

import aiohttp

# The request id headers, in the order of preference. The headers are case-insensitive,
# so "X-Openstack-Request-Id" (as some services spell it) is the same header as the first one.
REQUEST_ID_HEADERS = ('X-OpenStack-Request-Id', 'X-Compute-Request-Id', 'X-Trans-Id')


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[Mapping[str, Any]],
            *,
            status: int,
            request_id: Optional[str] = None,
            method: Optional[str] = None,
            url: Optional[str] = None,
    ) -> None:
        code, message, details = parse_payload(payload)
        super().__init__(message, payload)
        self._status = status
        self._payload = payload
        self._code = code
        self._message = message
        self._details = details
        self._request_id = request_id
        self._method = method
        self._url = url

    def __str__(self) -> str:
        what = f"{self._method.upper()} {self._url}" if self._method and self._url else None
        text = f"HTTP {self._status}"
        text += f" {self._code}" if self._code is not None else ""
        text += f": {self._message}" if self._message else ""
        text += f" (request-id: {self._request_id})" if self._request_id else ""
        text += f" <- {what}" if what else ""
        return text

    @property
    def status(self) -> int:
        return self._status

    @property
    def payload(self) -> Optional[Mapping[str, Any]]:
        return self._payload

    @property
    def code(self) -> Optional[Any]:
        return self._code

    @property
    def message(self) -> Optional[str]:
        return self._message

    @property
    def details(self) -> Optional[Any]:
        return self._details

    @property
    def request_id(self) -> Optional[str]:
        return self._request_id

    @property
    def method(self) -> Optional[str]:
        return self._method

    @property
    def url(self) -> Optional[str]:
        return self._url


class APIBadRequestError(APIError):
    pass


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIMethodNotAllowedError(APIError):
    pass


class APIRequestTimeoutError(APIError):
    pass


class APIConflictError(APIError):
    pass


class APITooManyRequestsError(APIError):
    pass


class APIServerError(APIError):
    pass


class APIServiceUnavailableError(APIServerError):
    pass


def get_request_id(headers: Mapping[str, str]) -> Optional[str]:
    for name in REQUEST_ID_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None


def parse_payload(payload: Optional[Mapping[str, Any]]) -> Tuple[Optional[Any], Optional[str], Optional[Any]]:
    """
    Extract the error's code, message, and details from the services' bodies.

    The known shapes are::

        {"itemNotFound": {"message": "...", "code": 404}}   # compute & co.
        {"NeutronError": {"type": "...", "message": "...", "detail": "..."}}
        {"faultcode": "Client", "faultstring": "...", "debuginfo": null}
        {"errors": [{"code": "client", "title": "...", "detail": "..."}]}
        {"error": {"code": 401, "title": "...", "message": "..."}}
        {"message": "...", "code": 409}

    Anything else (including the non-JSON bodies) gives no code and no message.
    """
    if not isinstance(payload, collections.abc.Mapping):
        return None, None, None

    if 'faultstring' in payload:
        return payload.get('faultcode'), payload.get('faultstring'), payload.get('debuginfo')

    if isinstance(payload.get('errors'), list) and payload['errors']:
        first = payload['errors'][0]
        if isinstance(first, collections.abc.Mapping):
            message = first.get('detail') or first.get('title')
            return first.get('code'), message, payload['errors']

    if isinstance(payload.get('NeutronError'), collections.abc.Mapping):
        fault = payload['NeutronError']
        return fault.get('type'), fault.get('message'), fault.get('detail') or None

    if 'message' in payload:
        return payload.get('code'), payload.get('message'), payload.get('details')

    # A single-key envelope with the fault's name: {"badRequest": {...}}, {"error": {...}}.
    if len(payload) == 1:
        (name, fault), = payload.items()
        if isinstance(fault, collections.abc.Mapping) and 'message' in fault:
            details = fault.get('details') or fault.get('title')
            return fault.get('code', name), fault.get('message'), details

    return None, None, None


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for the API errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        payload: Optional[Mapping[str, Any]]
        try:
            payload = await response.json(content_type=None)
        except (json.JSONDecodeError, UnicodeDecodeError, aiohttp.ClientConnectionError):
            payload = None

        # Non-object payloads (e.g. lists or strings) carry no structured information.
        if not isinstance(payload, collections.abc.Mapping):
            payload = None

        cls = (
            APIBadRequestError if response.status == 400 else
            APIUnauthorizedError if response.status == 401 else
            APIForbiddenError if response.status == 403 else
            APINotFoundError if response.status == 404 else
            APIMethodNotAllowedError if response.status == 405 else
            APIRequestTimeoutError if response.status == 408 else
            APIConflictError if response.status == 409 else
            APITooManyRequestsError if response.status == 429 else
            APIServiceUnavailableError if response.status == 503 else
            APIServerError if 500 <= response.status < 600 else
            APIError
        )

        # Raise the library-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            raise cls(payload,
                      status=response.status,
                      request_id=get_request_id(response.headers),
                      method=response.method,
                      url=str(response.url)) from e
