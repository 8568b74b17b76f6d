"""
Container clusters of the container-infrastructure service (Magnum's API v1).

The cluster bodies are flat: no envelopes in the requests or the responses.
The creation, update, resizing, and deletion are asynchronous: they return
only the cluster's uuid, and the cluster goes through the ``*_IN_PROGRESS``
statuses to ``*_COMPLETE`` or ``*_FAILED`` ones. Use :func:`wait_for_status`.
"""
import asyncio
import dataclasses
import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from typing_extensions import Literal

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import timestamps, typedefs
from osbind._cogs.structs import bodies, options, records, references
from osbind._core.engines import paging, polling

RESOURCE = references.Resource('container-infra', 'v1/clusters', kind='Cluster')


@dataclasses.dataclass(frozen=True)
class Cluster(records.Record):
    uuid: str
    name: Optional[str] = None
    status: Optional[str] = None
    status_reason: Optional[str] = None
    health_status: Optional[str] = None
    health_status_reason: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    cluster_template_id: Optional[str] = None
    coe_version: Optional[str] = None
    container_version: Optional[str] = None
    create_timeout: Optional[int] = None
    discovery_url: Optional[str] = None
    docker_volume_size: Optional[int] = None
    flavor_id: Optional[str] = None
    master_flavor_id: Optional[str] = None
    keypair: Optional[str] = None
    labels: Mapping[str, str] = dataclasses.field(default_factory=dict)
    master_count: Optional[int] = None
    node_count: Optional[int] = None
    api_address: Optional[str] = None
    master_addresses: List[str] = dataclasses.field(default_factory=list)
    node_addresses: List[str] = dataclasses.field(default_factory=list)
    fixed_network: Optional[str] = None
    fixed_subnet: Optional[str] = None
    floating_ip_enabled: Optional[bool] = None
    master_lb_enabled: Optional[bool] = None
    faults: Mapping[str, str] = dataclasses.field(default_factory=dict)
    stack_id: Optional[str] = None
    project_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    links: List[Mapping[str, Any]] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "Cluster":
        return cls(
            uuid=raw['uuid'],
            name=raw.get('name'),
            status=raw.get('status'),
            status_reason=raw.get('status_reason'),
            health_status=raw.get('health_status'),
            health_status_reason=dict(raw.get('health_status_reason') or {}),
            cluster_template_id=raw.get('cluster_template_id'),
            coe_version=raw.get('coe_version'),
            container_version=raw.get('container_version'),
            create_timeout=raw.get('create_timeout'),
            discovery_url=raw.get('discovery_url'),
            docker_volume_size=raw.get('docker_volume_size'),
            flavor_id=raw.get('flavor_id'),
            master_flavor_id=raw.get('master_flavor_id'),
            keypair=raw.get('keypair'),
            labels=dict(raw.get('labels') or {}),
            master_count=raw.get('master_count'),
            node_count=raw.get('node_count'),
            api_address=raw.get('api_address'),
            master_addresses=[address for address in raw.get('master_addresses') or []],
            node_addresses=[address for address in raw.get('node_addresses') or []],
            fixed_network=raw.get('fixed_network'),
            fixed_subnet=raw.get('fixed_subnet'),
            floating_ip_enabled=raw.get('floating_ip_enabled'),
            master_lb_enabled=raw.get('master_lb_enabled'),
            faults=dict(raw.get('faults') or {}),
            stack_id=raw.get('stack_id'),
            project_id=raw.get('project_id'),
            user_id=raw.get('user_id'),
            created_at=timestamps.parse(raw.get('created_at')),
            updated_at=timestamps.parse(raw.get('updated_at')),
            links=[link for link in raw.get('links') or []],
            request_id=request_id,
        )


class ClusterPage(paging.LinkedPage[Cluster]):

    def extract(self) -> List[Cluster]:
        items = bodies.unwrap_items('clusters', self.body)
        return [Cluster.from_raw(item, request_id=self.request_id) for item in items]


@dataclasses.dataclass
class ListOpts:
    limit: Optional[int] = None
    marker: Optional[str] = None
    sort_key: Optional[str] = None
    sort_dir: Optional[bodies.SortDirection] = None

    def to_query(self) -> Mapping[str, str]:
        return options.build_query(dataclasses.asdict(self))


@dataclasses.dataclass
class CreateOpts:
    name: Optional[str] = None
    cluster_template_id: Optional[str] = None
    create_timeout: Optional[int] = None
    discovery_url: Optional[str] = None
    docker_volume_size: Optional[int] = None
    flavor_id: Optional[str] = None
    master_flavor_id: Optional[str] = None
    keypair: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    master_count: Optional[int] = None
    node_count: Optional[int] = None
    fixed_network: Optional[str] = None
    fixed_subnet: Optional[str] = None
    floating_ip_enabled: Optional[bool] = None
    master_lb_enabled: Optional[bool] = None

    def to_body(self) -> Mapping[str, Any]:
        options.require(self, 'cluster_template_id', 'name')
        return bodies.wrap(None, options.compact(dataclasses.asdict(self)))


@dataclasses.dataclass
class UpdateOp:
    """ One JSON-patch operation: ``{"op": "replace", "path": "/node_count", "value": 2}``. """
    op: Literal["add", "replace", "remove"]
    path: str
    value: Any = None

    def to_body(self) -> Mapping[str, Any]:
        options.require(self, 'op', 'path')
        body: Dict[str, Any] = {'op': self.op, 'path': self.path}
        if self.op != 'remove':
            body['value'] = self.value
        return body


@dataclasses.dataclass
class ResizeOpts:
    node_count: Optional[int] = None
    nodes_to_remove: Optional[List[str]] = None
    nodegroup: Optional[str] = None

    def to_body(self) -> Mapping[str, Any]:
        options.require(self, 'node_count')
        return bodies.wrap(None, options.compact(dataclasses.asdict(self)))


def list(
        *,
        context: auth.APIContext,
        opts: Optional[ListOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[ClusterPage]:
    """ List the clusters in short: only the summary fields of each. """
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(params=query),
        service=RESOURCE.service,
        page_cls=ClusterPage,
        context=context,
        logger=logger,
    )


def list_detail(
        *,
        context: auth.APIContext,
        opts: Optional[ListOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[ClusterPage]:
    """ List the clusters in detail: all the fields of each. """
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(name='detail', params=query),
        service=RESOURCE.service,
        page_cls=ClusterPage,
        context=context,
        logger=logger,
    )


async def create(
        *,
        opts: CreateOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> str:
    """ Request a new cluster, and return its uuid (without waiting for the cluster). """
    reply = await api.post(
        RESOURCE.get_url(),
        service=RESOURCE.service,
        payload=opts.to_body(),
        context=context,
        logger=logger,
    )
    return bodies.unwrap('uuid', reply.body)


async def get(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> Cluster:
    reply = await api.get(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return Cluster.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)


async def update(
        *,
        id: str,
        ops: Iterable[UpdateOp],
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> str:
    reply = await api.patch(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        payload=[op.to_body() for op in ops],
        context=context,
        logger=logger,
    )
    return bodies.unwrap('uuid', reply.body)


async def resize(
        *,
        id: str,
        opts: ResizeOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> str:
    reply = await api.post(
        RESOURCE.get_url(name=id, subresource='actions/resize'),
        service=RESOURCE.service,
        payload=opts.to_body(),
        context=context,
        logger=logger,
    )
    return bodies.unwrap('uuid', reply.body)


async def delete(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    reply = await api.delete(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return reply.to_outcome()


async def wait_for_status(
        *,
        id: str,
        status: str,
        context: auth.APIContext,
        timeout: Optional[float] = None,
        interval: Union[None, float, Iterable[float]] = None,
        stopper: Optional[asyncio.Event] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Wait until the cluster reaches the status (e.g. ``CREATE_COMPLETE``).

    For ``DELETE_COMPLETE``, the disappearance of the cluster is a success.
    Any ``*_FAILED`` status is a failure, reported with the status's reason.
    """

    async def fetch() -> Cluster:
        return await get(id=id, context=context, logger=logger)

    await polling.wait_for_status(
        fetch,
        kind=RESOURCE.kind,
        id=id,
        target=status,
        timeout=timeout if timeout is not None else context.settings.polling.timeout,
        interval=interval if interval is not None else context.settings.polling.interval,
        status_of=lambda cluster: cluster.status,
        reason_of=lambda cluster: cluster.status_reason,
        stopper=stopper,
        logger=logger,
    )
