"""
All configuration flags, options, settings to fine-tune the client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).

The settings are not global: they are given to an :class:`APIContext`
when it is constructed, and are used by all the requests made via it.
Different contexts can have different settings in the same process.
"""
import dataclasses
from typing import Iterable, Optional, Union

from osbind._cogs.helpers import versions


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole request, from connecting to reading the response.

    Measured in seconds. Set to `None` to disable (on your own risk).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for the connection establishing (incl. the pool acquisition).

    If not set, only ``request_timeout`` limits the whole request duration.
    """

    user_agent: str = f'osbind/{versions.version or "unknown"}'
    """
    The self-identification of the client in the ``User-Agent`` header.
    """


@dataclasses.dataclass
class PollingSettings:

    interval: Union[float, Iterable[float]] = 1.0
    """
    How long to sleep between the status checks of a resource (seconds).

    It can be a single number for a fixed interval, or an iterable of numbers
    for a schedule of the intervals (e.g. an exponential backoff). When the
    schedule is exhausted, its last interval is used for all further checks.

    Mind that a single iterator (not a re-iterable collection) is exhausted
    by the first waiting. Use lists or tuples for the settings' values.
    """

    timeout: float = 300.0
    """
    How long to wait for a resource to reach a status (seconds),
    unless the timeout is explicitly passed to the waiting call.
    """


@dataclasses.dataclass
class PagingSettings:

    max_pages: Optional[int] = None
    """
    How many pages can be fetched at most in one listing.

    The pages are normally followed until the server says there are no more.
    This limit protects against the misbehaving servers, which never end
    the listings. Set to `None` to disable the limit (the default).
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    polling: PollingSettings = dataclasses.field(default_factory=PollingSettings)
    paging: PagingSettings = dataclasses.field(default_factory=PagingSettings)
