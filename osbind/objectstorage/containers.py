"""
Containers of the object storage (Swift's API v1).

The containers live in the root of the account's endpoint, and most of their
properties are in the headers, not in the bodies: the custom metadata goes
as ``X-Container-Meta-<Name>`` headers, and the container's info is fetched
with ``HEAD`` requests.

The listings come either as JSON (with the names, the object counts, and
the sizes), or as the plain text (the names only, one per line).
Both are paginated by the last container's name as the marker.
"""
import dataclasses
import urllib.parse
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import bodies, options, records, references
from osbind._core.engines import paging

RESOURCE = references.Resource('object-store', '', kind='Container')

METADATA_PREFIX = 'X-Container-Meta-'
REMOVE_METADATA_PREFIX = 'X-Remove-Container-Meta-'


def canonical_header_name(name: str) -> str:
    """ Normalise the header's name the same way for all servers: ``gophercloud-test`` -> ``Gophercloud-Test``. """
    return '-'.join(part.capitalize() for part in name.split('-'))


@dataclasses.dataclass(frozen=True)
class ContainerInfo(records.Record):
    name: str
    count: int = 0
    bytes: int = 0

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "ContainerInfo":
        return cls(
            name=raw['name'],
            count=raw.get('count', 0),
            bytes=raw.get('bytes', 0),
            request_id=request_id,
        )


@dataclasses.dataclass(frozen=True)
class ContainerHeaders(records.Record):
    """ The container's properties, as reported in the ``HEAD`` response's headers. """
    bytes_used: Optional[int] = None
    object_count: Optional[int] = None
    content_type: Optional[str] = None
    read: List[str] = dataclasses.field(default_factory=list)
    write: List[str] = dataclasses.field(default_factory=list)
    storage_policy: Optional[str] = None
    versions_location: Optional[str] = None
    history_location: Optional[str] = None
    timestamp: Optional[str] = None
    trans_id: Optional[str] = None
    metadata: Mapping[str, str] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], *, request_id: Optional[str] = None) -> "ContainerHeaders":
        bytes_used = headers.get('X-Container-Bytes-Used')
        object_count = headers.get('X-Container-Object-Count')
        return cls(
            bytes_used=int(bytes_used) if bytes_used is not None else None,
            object_count=int(object_count) if object_count is not None else None,
            content_type=headers.get('Content-Type'),
            read=[acl.strip() for acl in (headers.get('X-Container-Read') or '').split(',') if acl.strip()],
            write=[acl.strip() for acl in (headers.get('X-Container-Write') or '').split(',') if acl.strip()],
            storage_policy=headers.get('X-Storage-Policy'),
            versions_location=headers.get('X-Versions-Location'),
            history_location=headers.get('X-History-Location'),
            timestamp=headers.get('X-Timestamp'),
            trans_id=headers.get('X-Trans-Id'),
            metadata={
                canonical_header_name(name[len(METADATA_PREFIX):]): value
                for name, value in headers.items()
                if name.lower().startswith(METADATA_PREFIX.lower())
            },
            request_id=request_id,
        )


@dataclasses.dataclass(frozen=True)
class BulkDeleteResponse(records.Record):
    number_not_found: int = 0
    number_deleted: int = 0
    response_status: Optional[str] = None
    response_body: Optional[str] = None
    errors: List[List[str]] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "BulkDeleteResponse":
        return cls(
            number_not_found=raw.get('Number Not Found', 0),
            number_deleted=raw.get('Number Deleted', 0),
            response_status=raw.get('Response Status'),
            response_body=raw.get('Response Body'),
            errors=[[str(item) for item in error] for error in raw.get('Errors') or []],
            request_id=request_id,
        )


class ContainerInfoPage(paging.MarkerPage[ContainerInfo]):
    """ A page of the JSON listing: ``[{"name": ..., "count": ..., "bytes": ...}, ...]``. """

    def extract(self) -> List[ContainerInfo]:
        if self.body is None:
            return []
        if not isinstance(self.body, Sequence) or isinstance(self.body, str):
            raise bodies.BodyError(f"The response body is not a JSON array: {self.body!r}")
        return [ContainerInfo.from_raw(item, request_id=self.request_id) for item in self.body]

    def last_marker(self) -> Optional[str]:
        infos = self.extract()
        return infos[-1].name if infos else None


class ContainerNamePage(paging.MarkerPage[str]):
    """ A page of the plain-text listing: one name per line. """

    def extract(self) -> List[str]:
        if self.body is None:
            return []
        if not isinstance(self.body, str):
            raise bodies.BodyError(f"The response body is not a plain text: {self.body!r}")
        return [line for line in self.body.splitlines() if line]

    def last_marker(self) -> Optional[str]:
        names = self.extract()
        return names[-1] if names else None


ContainerPage = Union[ContainerInfoPage, ContainerNamePage]


@dataclasses.dataclass
class ListOpts:
    full: bool = True
    """ List the containers' info as JSON (if true), or only their names as plain text (if false). """

    limit: Optional[int] = None
    marker: Optional[str] = None
    end_marker: Optional[str] = None
    prefix: Optional[str] = None
    delimiter: Optional[str] = None

    def to_query(self) -> Mapping[str, str]:
        query = dataclasses.asdict(self)
        query['format'] = 'json' if query.pop('full') else None
        return options.build_query(query)


@dataclasses.dataclass
class CreateOpts:
    metadata: Optional[Dict[str, str]] = None
    container_read: Optional[str] = None
    container_write: Optional[str] = None
    container_sync_to: Optional[str] = None
    container_sync_key: Optional[str] = None
    versions_location: Optional[str] = None
    history_location: Optional[str] = None
    storage_policy: Optional[str] = None
    content_type: Optional[str] = None
    detect_content_type: Optional[bool] = None

    def to_headers(self) -> Mapping[str, str]:
        headers = options.build_headers({
            'X-Container-Read': self.container_read,
            'X-Container-Write': self.container_write,
            'X-Container-Sync-To': self.container_sync_to,
            'X-Container-Sync-Key': self.container_sync_key,
            'X-Versions-Location': self.versions_location,
            'X-History-Location': self.history_location,
            'X-Storage-Policy': self.storage_policy,
            'Content-Type': self.content_type,
            'X-Detect-Content-Type': self.detect_content_type,
        })
        headers.update(options.build_headers(self.metadata or {}, prefix=METADATA_PREFIX))
        return headers


@dataclasses.dataclass
class UpdateOpts:
    metadata: Optional[Dict[str, str]] = None
    remove_metadata: Optional[List[str]] = None
    container_read: Optional[str] = None
    container_write: Optional[str] = None
    container_sync_to: Optional[str] = None
    container_sync_key: Optional[str] = None
    versions_location: Optional[str] = None
    history_location: Optional[str] = None
    remove_versions_location: Optional[bool] = None
    remove_history_location: Optional[bool] = None
    content_type: Optional[str] = None
    detect_content_type: Optional[bool] = None

    def to_headers(self) -> Mapping[str, str]:
        headers = options.build_headers({
            'X-Container-Read': self.container_read,
            'X-Container-Write': self.container_write,
            'X-Container-Sync-To': self.container_sync_to,
            'X-Container-Sync-Key': self.container_sync_key,
            'X-Versions-Location': self.versions_location,
            'X-History-Location': self.history_location,
            'X-Remove-Versions-Location': 'true' if self.remove_versions_location else None,
            'X-Remove-History-Location': 'true' if self.remove_history_location else None,
            'Content-Type': self.content_type,
            'X-Detect-Content-Type': self.detect_content_type,
        })
        headers.update(options.build_headers(self.metadata or {}, prefix=METADATA_PREFIX))
        headers.update(options.build_headers(
            {name: 'remove' for name in self.remove_metadata or []}, prefix=REMOVE_METADATA_PREFIX))
        return headers


@dataclasses.dataclass
class GetOpts:
    newest: bool = False
    """ Ask the proxy to check all the replicas for the newest data (slower). """

    def to_headers(self) -> Mapping[str, str]:
        return {'X-Newest': 'true'} if self.newest else {}


def list(
        *,
        context: auth.APIContext,
        opts: Optional[ListOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[Any]:
    opts = opts if opts is not None else ListOpts()
    page_cls: type = ContainerInfoPage if opts.full else ContainerNamePage
    return paging.Pager(
        RESOURCE.get_url(params=opts.to_query()),
        service=RESOURCE.service,
        page_cls=page_cls,
        accept=api.JSON_CONTENT_TYPE if opts.full else api.TEXT_CONTENT_TYPE,
        context=context,
        logger=logger,
    )


async def create(
        *,
        name: str,
        opts: Optional[CreateOpts] = None,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    reply = await api.put(
        RESOURCE.get_url(name=name),
        service=RESOURCE.service,
        headers=opts.to_headers() if opts is not None else None,
        context=context,
        logger=logger,
    )
    return reply.to_outcome()


async def update(
        *,
        name: str,
        opts: UpdateOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    reply = await api.post(
        RESOURCE.get_url(name=name),
        service=RESOURCE.service,
        headers=opts.to_headers(),
        context=context,
        logger=logger,
    )
    return reply.to_outcome()


async def get(
        *,
        name: str,
        opts: Optional[GetOpts] = None,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> ContainerHeaders:
    reply = await api.head(
        RESOURCE.get_url(name=name),
        service=RESOURCE.service,
        headers=opts.to_headers() if opts is not None else None,
        context=context,
        logger=logger,
    )
    return ContainerHeaders.from_headers(reply.headers, request_id=reply.request_id)


async def delete(
        *,
        name: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    reply = await api.delete(
        RESOURCE.get_url(name=name),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return reply.to_outcome()


async def bulk_delete(
        *,
        names: Iterable[str],
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> BulkDeleteResponse:
    """
    Delete many empty containers in one request.

    The names go in the body, one per line, url-encoded (so that they could
    contain any characters, including the newlines themselves).
    """
    quoted = [urllib.parse.quote(name, safe='') for name in names]
    reply = await api.post(
        RESOURCE.get_url(params={'bulk-delete': 'true'}),
        service=RESOURCE.service,
        data='\n'.join(quoted),
        context=context,
        logger=logger,
    )
    return BulkDeleteResponse.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)


def extract_info(pages: Iterable[ContainerInfoPage]) -> List[ContainerInfo]:
    return [info for page in pages for info in page.extract()]


def extract_names(pages: Iterable[ContainerNamePage]) -> List[str]:
    return [name for page in pages for name in page.extract()]
