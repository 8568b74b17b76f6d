"""
The main osbind module for all the exported functions & classes.

The resource-specific operations live in their own modules per service,
e.g. ``osbind.loadbalancer.loadbalancers`` or ``osbind.containerinfra.clusters``.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from osbind._cogs.clients.auth import (
    APIContext,
)
from osbind._cogs.clients.errors import (
    APIError,
    APIBadRequestError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIMethodNotAllowedError,
    APIRequestTimeoutError,
    APIConflictError,
    APITooManyRequestsError,
    APIServerError,
    APIServiceUnavailableError,
)
from osbind._cogs.configs.configuration import (
    ClientSettings,
    NetworkingSettings,
    PollingSettings,
    PagingSettings,
)
from osbind._cogs.helpers.typedefs import (
    Logger,
)
from osbind._cogs.helpers.versions import (
    version as __version__,
)
from osbind._cogs.structs.bodies import (
    RawBody,
    BodyError,
)
from osbind._cogs.structs.credentials import (
    ConnectionInfo,
    LoginError,
    EndpointError,
)
from osbind._cogs.structs.options import (
    MissingFieldError,
)
from osbind._cogs.structs.records import (
    Record,
    Outcome,
)
from osbind._cogs.structs.references import (
    Resource,
)
from osbind._core.actions.loggers import (
    configure,
    LogFormat,
    ResourceLogger,
)
from osbind._core.engines.paging import (
    AbsoluteLink,
    MarkerToken,
    NextLink,
    Page,
    SinglePage,
    LinkedPage,
    MarkerPage,
    Pager,
    PaginationError,
    PaginationLoopError,
    PaginationLimitError,
)
from osbind._core.engines.polling import (
    wait_for,
    wait_for_status,
    make_status_check,
    exponential,
    PollingError,
    PollingTimeoutError,
    PollingStoppedError,
    ResourceFailedError,
    DELETED_STATUSES,
)

__all__ = [
    'APIContext', 'ConnectionInfo',
    'LoginError', 'EndpointError',
    'ClientSettings', 'NetworkingSettings', 'PollingSettings', 'PagingSettings',
    'configure', 'LogFormat', 'ResourceLogger', 'Logger',
    'APIError',
    'APIBadRequestError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIMethodNotAllowedError',
    'APIRequestTimeoutError',
    'APIConflictError',
    'APITooManyRequestsError',
    'APIServerError',
    'APIServiceUnavailableError',
    'RawBody', 'BodyError', 'MissingFieldError',
    'Record', 'Outcome', 'Resource',
    'AbsoluteLink', 'MarkerToken', 'NextLink',
    'Page', 'SinglePage', 'LinkedPage', 'MarkerPage', 'Pager',
    'PaginationError', 'PaginationLoopError', 'PaginationLimitError',
    'wait_for', 'wait_for_status', 'make_status_check', 'exponential', 'DELETED_STATUSES',
    'PollingError', 'PollingTimeoutError', 'PollingStoppedError', 'ResourceFailedError',
    '__version__',
]
