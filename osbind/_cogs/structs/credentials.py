"""
Authentication-related structures.

The client does not implement the identity service's login flows:
it takes an already issued token and the service endpoints (usually taken
from the token's service catalog) and uses them for all the requests.

For that, a minimally sufficient data structure is introduced -- to bring
all the credentials together in a structured and type-annotated way:

* The ``X-Auth-Token`` header's value.
* The base URLs of the services by their catalog type
  (e.g. ``"compute"``, ``"load-balancer"``, ``"object-store"``).
* SSL verification/ignorance flag.
* SSL certificate authority.
* SSL client certificate and its private key.
"""
import dataclasses
from typing import Mapping, Optional


class LoginError(Exception):
    """ Raised when the client cannot authenticate to the API. """


class EndpointError(Exception):
    """ Raised when there is no endpoint for a service to send a request to. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A set of endpoints with specific credentials and connection flags to use.
    """
    token: Optional[str] = None
    endpoints: Mapping[str, str] = dataclasses.field(default_factory=dict)  # by service type
    ca_path: Optional[str] = None
    ca_data: Optional[bytes] = None
    insecure: Optional[bool] = None
    certificate_path: Optional[str] = None
    certificate_data: Optional[bytes] = None
    private_key_path: Optional[str] = None
    private_key_data: Optional[bytes] = None

    def get_endpoint(self, service: str) -> str:
        try:
            return self.endpoints[service]
        except KeyError:
            raise EndpointError(f"No endpoint is configured for the service {service!r}.") from None
