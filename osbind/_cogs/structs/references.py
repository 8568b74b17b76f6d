import dataclasses
import urllib.parse
from typing import List, Mapping, Optional, Sequence, Union

# Path parameters: a single segment (e.g. an id), or several segments (e.g. a project & a resource).
PathPart = Union[str, Sequence[str]]


@dataclasses.dataclass(frozen=True)
class Resource:
    """
    A reference to a very specific resource type of a specific service.

    It is used to form the API URLs. Generally, the API only needs
    a service type (to select the endpoint) and a path template
    relative to that endpoint, to which the identifiers are appended.
    """

    service: str
    """
    The service's catalog type; e.g. ``"compute"``, ``"load-balancer"``.
    It is used to select the endpoint from the connection info.
    """

    path: str
    """
    The resource's collection path relative to the service endpoint;
    e.g. ``"v2.0/lbaas/loadbalancers"``, ``"os-networks"``, or an empty string
    for the resources living in the root of the endpoint (e.g. object storage).
    """

    kind: Optional[str] = None
    """
    A human-readable name of the resource type for logs and errors;
    e.g. ``"Cluster"``, ``"LoadBalancer"``.
    """

    def __repr__(self) -> str:
        return f'{self.service}:{self.path}' if self.path else self.service

    def get_url(
            self,
            *,
            server: Optional[str] = None,
            name: Optional[PathPart] = None,
            subresource: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Build a URL to be used with the service API.

        If the name is not set, the URL for the resource list is returned.
        Otherwise (if set), the URL for the individual resource is returned.
        The names are quoted, so they can contain any characters at all
        (e.g. ``"test&happy?-"`` for the object storage containers).

        If subresource is set, that subresource's URL is returned,
        e.g. ``"status"``, ``"failover"``, ``"actions/resize"``.

        Params go to the query parameters (``?param1=value1&param2=value2...``).

        The URL is relative to the service endpoint unless the server is given.
        """
        if subresource is not None and name is None:
            raise ValueError("Subresources can be used only with specific resources by their name.")

        names = [name] if isinstance(name, str) else list(name or [])
        if any(not part for part in names):
            raise ValueError(f"Empty identifiers are not allowed in the URLs: {names!r}")

        parts: List[Optional[str]] = [
            self.path.strip('/'),
            *[urllib.parse.quote(part, safe='') for part in names],
            subresource,
        ]

        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([part for part in parts if part])
        url = path + ('?' if query else '') + query
        return url if server is None else server.rstrip('/') + '/' + url.lstrip('/')
