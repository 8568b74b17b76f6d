import dataclasses
import json
import logging
from typing import Any, Mapping, Optional

import aiohttp

from osbind._cogs.clients import auth, errors
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import records

JSON_CONTENT_TYPE = 'application/json'
TEXT_CONTENT_TYPE = 'text/plain'

api_logger = logging.getLogger('osbind.api')


@dataclasses.dataclass(frozen=True)
class Reply:
    """
    A fully read response: the status, the headers, and the decoded body.

    The body is a parsed JSON for JSON responses, a text for textual responses,
    and ``None`` if there was no body at all (e.g. for HTTP 204 No Content).
    """
    status: int
    url: str
    headers: Mapping[str, str]
    body: Any = None

    @property
    def request_id(self) -> Optional[str]:
        return errors.get_request_id(self.headers)

    def to_outcome(self) -> records.Outcome:
        return records.Outcome(status=self.status, request_id=self.request_id, headers=self.headers)


async def request(
        method: str,
        url: str,  # relative to the service endpoint, or absolute.
        *,
        context: auth.APIContext,
        service: Optional[str] = None,
        payload: Optional[object] = None,
        data: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        accept: str = JSON_CONTENT_TYPE,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: Optional[typedefs.Logger] = None,
) -> aiohttp.ClientResponse:
    """
    Perform one HTTP request with the standard headers and check its status.

    There are no retries: any failure is escalated to the caller immediately,
    be that a connection error, a timeout, or an API error of the service.
    """
    logger = logger if logger is not None else api_logger
    url = context.get_url(url, service=service)

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=context.settings.networking.request_timeout,
            sock_connect=context.settings.networking.connect_timeout,
        )

    request_headers = {'X-Auth-Token': context.info.token or '', 'Accept': accept}
    if data is not None:
        request_headers['Content-Type'] = TEXT_CONTENT_TYPE
    request_headers.update(headers or {})

    what = f"{method.upper()} {url}"
    logger.debug(f"Requesting: {what}")
    response = await context.session.request(
        method=method,
        url=url,
        json=payload,
        data=data,
        headers=request_headers,
        timeout=timeout,
    )
    try:
        await errors.check_response(response)  # but do not parse it!
    except errors.APIError as e:
        logger.debug(f"Request failed: {what} -> {e}")
        raise

    request_id = errors.get_request_id(response.headers)
    logger.debug(f"Request succeeded: {what} -> {response.status} (request-id: {request_id})")
    return response


async def read_reply(response: aiohttp.ClientResponse) -> Reply:
    async with response:
        body: Any
        text = await response.text() if response.status != 204 else ''
        if not text.strip():
            body = None
        elif response.content_type == JSON_CONTENT_TYPE or response.content_type.endswith('+json'):
            body = json.loads(text)
        else:
            body = text
        return Reply(status=response.status, url=str(response.url), headers=response.headers, body=body)


async def get(
        url: str,
        *,
        context: auth.APIContext,
        service: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        accept: str = JSON_CONTENT_TYPE,
        logger: Optional[typedefs.Logger] = None,
) -> Reply:
    response = await request(
        method='get',
        url=url,
        service=service,
        headers=headers,
        accept=accept,
        context=context,
        logger=logger,
    )
    return await read_reply(response)


async def head(
        url: str,
        *,
        context: auth.APIContext,
        service: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[typedefs.Logger] = None,
) -> Reply:
    response = await request(
        method='head',
        url=url,
        service=service,
        headers=headers,
        context=context,
        logger=logger,
    )
    async with response:
        return Reply(status=response.status, url=str(response.url), headers=response.headers)


async def post(
        url: str,
        *,
        context: auth.APIContext,
        service: Optional[str] = None,
        payload: Optional[object] = None,
        data: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[typedefs.Logger] = None,
) -> Reply:
    response = await request(
        method='post',
        url=url,
        service=service,
        payload=payload,
        data=data,
        headers=headers,
        context=context,
        logger=logger,
    )
    return await read_reply(response)


async def put(
        url: str,
        *,
        context: auth.APIContext,
        service: Optional[str] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[typedefs.Logger] = None,
) -> Reply:
    response = await request(
        method='put',
        url=url,
        service=service,
        payload=payload,
        headers=headers,
        context=context,
        logger=logger,
    )
    return await read_reply(response)


async def patch(
        url: str,
        *,
        context: auth.APIContext,
        service: Optional[str] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[typedefs.Logger] = None,
) -> Reply:
    response = await request(
        method='patch',
        url=url,
        service=service,
        payload=payload,
        headers=headers,
        context=context,
        logger=logger,
    )
    return await read_reply(response)


async def delete(
        url: str,
        *,
        context: auth.APIContext,
        service: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[typedefs.Logger] = None,
) -> Reply:
    response = await request(
        method='delete',
        url=url,
        service=service,
        headers=headers,
        context=context,
        logger=logger,
    )
    return await read_reply(response)
