import base64
import contextlib
import os
import ssl
import tempfile
from typing import Any, Optional, Union

import aiohttp

from osbind._cogs.configs import configuration
from osbind._cogs.structs import credentials


class APIContext:
    """
    A container for an aiohttp session and the connection info it serves.

    The context is the transport of all the API calls: every operation gets it
    explicitly as an argument. It owns the HTTP connection pool, which lives
    from the context's creation and until it is closed -- either explicitly
    with :meth:`close`, or implicitly when used as an async context manager::

        async with osbind.APIContext(info) as context:
            lb = await loadbalancers.get(context=context, id=...)

    The contexts are independent of each other: several contexts with different
    credentials, endpoints, or settings can be used in the same process.
    There is no global or default context.

    A context is bound to the event loop it was created in (as is its session).
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building and requests' fine-tuning.
    info: credentials.ConnectionInfo
    settings: configuration.ClientSettings

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            *,
            settings: Optional[configuration.ClientSettings] = None,
            session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__()
        if not info.token:
            raise credentials.LoginError("No token is provided for the API calls.")

        self.info = info
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.session = session if session is not None else self.make_aiohttp_session(info)

        # It is a good practice to self-identify a bit, even with a user-provided session.
        if self.session.headers.get('User-Agent') is None:
            self.session.headers['User-Agent'] = self.settings.networking.user_agent

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {sorted(self.info.endpoints)!r}>'

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self.session.closed

    def get_url(self, url: str, *, service: Optional[str] = None) -> str:
        """ Resolve the URL relative to the service endpoint, unless it is absolute already. """
        if '://' in url:
            return url
        if service is None:
            raise credentials.EndpointError(f"Relative URLs require a service: {url!r}")
        server = self.info.get_endpoint(service)
        return server.rstrip('/') + '/' + url.lstrip('/')

    def make_aiohttp_session(self, info: credentials.ConnectionInfo) -> aiohttp.ClientSession:

        # Some SSL data are not accepted directly, so we have to use temp files.
        # Do not even create temporary files if there is no need. It can be a readonly filesystem.
        with contextlib.ExitStack() as stack:

            cert_path: Optional[Union[str, "os.PathLike[str]"]]
            if info.certificate_path:
                cert_path = info.certificate_path
            elif info.certificate_data:
                cert_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                cert_file.write(decode_to_pem(info.certificate_data).encode('ascii'))
                cert_path = cert_file.name
            else:
                cert_path = None

            pkey_path: Optional[Union[str, "os.PathLike[str]"]]
            if info.private_key_path:
                pkey_path = info.private_key_path
            elif info.private_key_data:
                pkey_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                pkey_file.write(decode_to_pem(info.private_key_data).encode('ascii'))
                pkey_path = pkey_file.name
            else:
                pkey_path = None

            # The SSL part (both client certificate auth and CA verification).
            context = ssl.create_default_context(
                purpose=ssl.Purpose.SERVER_AUTH,
                cafile=info.ca_path,
                cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
            )
            if cert_path and pkey_path:
                context.load_cert_chain(certfile=cert_path, keyfile=pkey_path)

        if info.insecure:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        return aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=context,
            ),
        )

    async def close(self) -> None:
        await self.session.close()


def decode_to_pem(data: Union[str, bytes]) -> str:
    if isinstance(data, str) and data.startswith('-----BEGIN '):
        return data
    elif isinstance(data, bytes) and data.startswith(b'-----BEGIN '):
        return data.decode('ascii')
    else:
        return base64.b64decode(data).decode('ascii')
