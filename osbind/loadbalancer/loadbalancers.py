"""
Load balancers of the load-balancing service (Octavia's API v2).

A load balancer is created asynchronously: the creation request returns
immediately with the ``PENDING_CREATE`` provisioning status, and the service
provisions it in the background. The same goes for the updates, deletions,
and failovers. Use :func:`wait_for_status` to wait until the load balancer
is ``ACTIVE`` (or ``DELETED``) again.
"""
import asyncio
import dataclasses
import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import timestamps, typedefs
from osbind._cogs.structs import bodies, options, records, references
from osbind._core.engines import paging, polling

RESOURCE = references.Resource('load-balancer', 'v2.0/lbaas/loadbalancers', kind='LoadBalancer')

# Octavia reports a provisioning failure as "ERROR"; the generic "*_FAILED" statuses are fatal too.
FAILURE_MARKERS = ('FAILED', 'ERROR')


@dataclasses.dataclass(frozen=True)
class Member:
    id: str
    name: Optional[str] = None
    address: Optional[str] = None
    protocol_port: Optional[int] = None
    provisioning_status: Optional[str] = None
    operating_status: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Member":
        return cls(
            id=raw['id'],
            name=raw.get('name'),
            address=raw.get('address'),
            protocol_port=raw.get('protocol_port'),
            provisioning_status=raw.get('provisioning_status'),
            operating_status=raw.get('operating_status'),
        )


@dataclasses.dataclass(frozen=True)
class Monitor:
    id: str
    type: Optional[str] = None
    name: Optional[str] = None
    provisioning_status: Optional[str] = None
    operating_status: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Monitor":
        return cls(
            id=raw['id'],
            type=raw.get('type'),
            name=raw.get('name'),
            provisioning_status=raw.get('provisioning_status'),
            operating_status=raw.get('operating_status'),
        )


@dataclasses.dataclass(frozen=True)
class Pool:
    id: str
    name: Optional[str] = None
    provisioning_status: Optional[str] = None
    operating_status: Optional[str] = None
    healthmonitor: Optional[Monitor] = None
    members: List[Member] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Pool":
        monitor = raw.get('healthmonitor')
        return cls(
            id=raw['id'],
            name=raw.get('name'),
            provisioning_status=raw.get('provisioning_status'),
            operating_status=raw.get('operating_status'),
            healthmonitor=Monitor.from_raw(monitor) if monitor else None,
            members=[Member.from_raw(member) for member in raw.get('members') or []],
        )


@dataclasses.dataclass(frozen=True)
class Listener:
    id: str
    name: Optional[str] = None
    provisioning_status: Optional[str] = None
    operating_status: Optional[str] = None
    pools: List[Pool] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Listener":
        return cls(
            id=raw['id'],
            name=raw.get('name'),
            provisioning_status=raw.get('provisioning_status'),
            operating_status=raw.get('operating_status'),
            pools=[Pool.from_raw(pool) for pool in raw.get('pools') or []],
        )


@dataclasses.dataclass(frozen=True)
class LoadBalancer(records.Record):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    vip_subnet_id: Optional[str] = None
    vip_network_id: Optional[str] = None
    vip_port_id: Optional[str] = None
    vip_address: Optional[str] = None
    vip_qos_policy_id: Optional[str] = None
    flavor_id: Optional[str] = None
    availability_zone: Optional[str] = None
    provider: Optional[str] = None
    admin_state_up: Optional[bool] = None
    provisioning_status: Optional[str] = None
    operating_status: Optional[str] = None
    tags: List[str] = dataclasses.field(default_factory=list)
    listeners: List[Listener] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "LoadBalancer":
        return cls(
            id=raw['id'],
            name=raw.get('name'),
            description=raw.get('description'),
            project_id=raw.get('project_id'),
            created_at=timestamps.parse(raw.get('created_at')),
            updated_at=timestamps.parse(raw.get('updated_at')),
            vip_subnet_id=raw.get('vip_subnet_id'),
            vip_network_id=raw.get('vip_network_id'),
            vip_port_id=raw.get('vip_port_id'),
            vip_address=raw.get('vip_address'),
            vip_qos_policy_id=raw.get('vip_qos_policy_id'),
            flavor_id=raw.get('flavor_id'),
            availability_zone=raw.get('availability_zone'),
            provider=raw.get('provider'),
            admin_state_up=raw.get('admin_state_up'),
            provisioning_status=raw.get('provisioning_status'),
            operating_status=raw.get('operating_status'),
            tags=[tag for tag in raw.get('tags') or []],
            listeners=[Listener.from_raw(listener) for listener in raw.get('listeners') or []],
            request_id=request_id,
        )


@dataclasses.dataclass(frozen=True)
class StatusTree(records.Record):
    loadbalancer: Optional[LoadBalancer] = None


@dataclasses.dataclass(frozen=True)
class Stats(records.Record):
    active_connections: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    request_errors: int = 0
    total_connections: int = 0

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "Stats":
        return cls(
            active_connections=raw.get('active_connections', 0),
            bytes_in=raw.get('bytes_in', 0),
            bytes_out=raw.get('bytes_out', 0),
            request_errors=raw.get('request_errors', 0),
            total_connections=raw.get('total_connections', 0),
            request_id=request_id,
        )


class LoadBalancerPage(paging.LinkedPage[LoadBalancer]):
    links_key = 'loadbalancers_links'

    def extract(self) -> List[LoadBalancer]:
        items = bodies.unwrap_items('loadbalancers', self.body)
        return [LoadBalancer.from_raw(item, request_id=self.request_id) for item in items]


@dataclasses.dataclass
class ListOpts:
    """ Filtering, sorting & paging of the load balancers' listing. """
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[str] = None
    provider: Optional[str] = None
    flavor_id: Optional[str] = None
    availability_zone: Optional[str] = None
    vip_address: Optional[str] = None
    vip_port_id: Optional[str] = None
    vip_subnet_id: Optional[str] = None
    vip_network_id: Optional[str] = None
    provisioning_status: Optional[str] = None
    operating_status: Optional[str] = None
    admin_state_up: Optional[bool] = None
    tags: Optional[List[str]] = None
    tags_any: Optional[List[str]] = None
    not_tags: Optional[List[str]] = None
    not_tags_any: Optional[List[str]] = None
    limit: Optional[int] = None
    marker: Optional[str] = None
    sort_key: Optional[str] = None
    sort_dir: Optional[bodies.SortDirection] = None

    def to_query(self) -> Mapping[str, str]:
        query = dataclasses.asdict(self)
        query['tags-any'] = query.pop('tags_any')
        query['not-tags'] = query.pop('not_tags')
        query['not-tags-any'] = query.pop('not_tags_any')
        return options.build_query(query)


@dataclasses.dataclass
class CreateOpts:
    """
    The new load balancer's specification.

    One of ``vip_port_id``, ``vip_subnet_id``, or ``vip_network_id`` is
    required: the load balancer must be attached to something.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    vip_port_id: Optional[str] = None
    vip_subnet_id: Optional[str] = None
    vip_network_id: Optional[str] = None
    vip_address: Optional[str] = None
    vip_qos_policy_id: Optional[str] = None
    project_id: Optional[str] = None
    flavor_id: Optional[str] = None
    availability_zone: Optional[str] = None
    provider: Optional[str] = None
    admin_state_up: Optional[bool] = None
    tags: Optional[List[str]] = None

    def to_body(self) -> Mapping[str, Any]:
        options.require_any(self, 'vip_port_id', 'vip_subnet_id', 'vip_network_id')
        return bodies.wrap('loadbalancer', options.compact(dataclasses.asdict(self)))


@dataclasses.dataclass
class UpdateOpts:
    name: Optional[str] = None
    description: Optional[str] = None
    admin_state_up: Optional[bool] = None
    vip_qos_policy_id: Optional[str] = None
    tags: Optional[List[str]] = None

    def to_body(self) -> Mapping[str, Any]:
        return bodies.wrap('loadbalancer', options.compact(dataclasses.asdict(self)))


@dataclasses.dataclass
class DeleteOpts:
    cascade: bool = False
    """ Delete all the child objects (listeners, pools, etc.) together with the load balancer. """

    def to_query(self) -> Mapping[str, str]:
        return options.build_query({'cascade': True} if self.cascade else {})


def list(
        *,
        context: auth.APIContext,
        opts: Optional[ListOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[LoadBalancerPage]:
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(params=query),
        service=RESOURCE.service,
        page_cls=LoadBalancerPage,
        context=context,
        logger=logger,
    )


async def create(
        *,
        opts: CreateOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> LoadBalancer:
    reply = await api.post(
        RESOURCE.get_url(),
        service=RESOURCE.service,
        payload=opts.to_body(),
        context=context,
        logger=logger,
    )
    return LoadBalancer.from_raw(bodies.unwrap('loadbalancer', reply.body), request_id=reply.request_id)


async def get(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> LoadBalancer:
    reply = await api.get(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return LoadBalancer.from_raw(bodies.unwrap('loadbalancer', reply.body), request_id=reply.request_id)


async def update(
        *,
        id: str,
        opts: UpdateOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> LoadBalancer:
    reply = await api.put(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        payload=opts.to_body(),
        context=context,
        logger=logger,
    )
    return LoadBalancer.from_raw(bodies.unwrap('loadbalancer', reply.body), request_id=reply.request_id)


async def delete(
        *,
        id: str,
        opts: Optional[DeleteOpts] = None,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    query = opts.to_query() if opts is not None else {}
    reply = await api.delete(
        RESOURCE.get_url(name=id, params=query),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return reply.to_outcome()


async def get_statuses(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> StatusTree:
    """ Get the provisioning & operating statuses of the whole tree of the load balancer. """
    reply = await api.get(
        RESOURCE.get_url(name=id, subresource='status'),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    raw = bodies.unwrap('loadbalancer', bodies.unwrap('statuses', reply.body))
    loadbalancer = LoadBalancer.from_raw(raw, request_id=reply.request_id) if raw else None
    return StatusTree(loadbalancer=loadbalancer, request_id=reply.request_id)


async def get_stats(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> Stats:
    reply = await api.get(
        RESOURCE.get_url(name=id, subresource='stats'),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return Stats.from_raw(bodies.unwrap('stats', reply.body), request_id=reply.request_id)


async def failover(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    """ Fail over the load balancer's amphorae: re-create them, and wait for nothing. """
    reply = await api.put(
        RESOURCE.get_url(name=id, subresource='failover'),
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
    Wait until the load balancer's provisioning status becomes as requested.

    For the ``DELETED`` status, the disappearance of the load balancer
    is also a success. The ``ERROR`` and ``*_FAILED`` statuses are failures.
    """

    async def fetch() -> LoadBalancer:
        return await get(id=id, context=context, logger=logger)

    await polling.wait_for_status(
        fetch,
        kind=RESOURCE.kind,
        id=id,
        target=status,
        timeout=timeout if timeout is not None else context.settings.polling.timeout,
        interval=interval if interval is not None else context.settings.polling.interval,
        status_of=lambda lb: lb.provisioning_status,
        reason_of=lambda lb: lb.operating_status,
        failure_markers=FAILURE_MARKERS,
        stopper=stopper,
        logger=logger,
    )


def extract_loadbalancers(
        pages: Union[LoadBalancerPage, Iterable[LoadBalancerPage]],
) -> List[LoadBalancer]:
    """ Extract the load balancers from one or many pages, as one flat list. """
    if isinstance(pages, LoadBalancerPage):
        return pages.extract()
    return [lb for page in pages for lb in page.extract()]
