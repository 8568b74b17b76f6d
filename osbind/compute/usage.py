"""
Simple tenant usage of the compute service: the hours & sizes of the servers.

The usage can be listed for all tenants at once (admin-only), or for a single
tenant. Both listings are paginated by the links in the bodies
(``tenant_usages_links`` and ``tenant_usage_links`` respectively).
"""
import dataclasses
import datetime
from typing import Any, List, Mapping, Optional

from osbind._cogs.clients import auth
from osbind._cogs.helpers import timestamps, typedefs
from osbind._cogs.structs import bodies, options, records, references
from osbind._core.engines import paging

RESOURCE = references.Resource('compute', 'os-simple-tenant-usage', kind='TenantUsage')


@dataclasses.dataclass(frozen=True)
class ServerUsage:
    instance_id: str
    name: Optional[str] = None
    flavor: Optional[str] = None
    state: Optional[str] = None
    tenant_id: Optional[str] = None
    hours: Optional[float] = None
    local_gb: Optional[int] = None
    memory_mb: Optional[int] = None
    vcpus: Optional[int] = None
    uptime: Optional[int] = None
    started_at: Optional[datetime.datetime] = None
    ended_at: Optional[datetime.datetime] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "ServerUsage":
        return cls(
            instance_id=raw['instance_id'],
            name=raw.get('name'),
            flavor=raw.get('flavor'),
            state=raw.get('state'),
            tenant_id=raw.get('tenant_id'),
            hours=raw.get('hours'),
            local_gb=raw.get('local_gb'),
            memory_mb=raw.get('memory_mb'),
            vcpus=raw.get('vcpus'),
            uptime=raw.get('uptime'),
            started_at=timestamps.parse(raw.get('started_at')),
            ended_at=timestamps.parse(raw.get('ended_at')),
        )


@dataclasses.dataclass(frozen=True)
class TenantUsage(records.Record):
    tenant_id: Optional[str] = None
    start: Optional[datetime.datetime] = None
    stop: Optional[datetime.datetime] = None
    total_hours: Optional[float] = None
    total_local_gb_usage: Optional[float] = None
    total_memory_mb_usage: Optional[float] = None
    total_vcpus_usage: Optional[float] = None
    server_usages: List[ServerUsage] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "TenantUsage":
        return cls(
            tenant_id=raw.get('tenant_id'),
            start=timestamps.parse(raw.get('start')),
            stop=timestamps.parse(raw.get('stop')),
            total_hours=raw.get('total_hours'),
            total_local_gb_usage=raw.get('total_local_gb_usage'),
            total_memory_mb_usage=raw.get('total_memory_mb_usage'),
            total_vcpus_usage=raw.get('total_vcpus_usage'),
            server_usages=[ServerUsage.from_raw(usage) for usage in raw.get('server_usages') or []],
            request_id=request_id,
        )


class AllTenantsPage(paging.LinkedPage[TenantUsage]):
    links_key = 'tenant_usages_links'

    def extract(self) -> List[TenantUsage]:
        items = bodies.unwrap_items('tenant_usages', self.body)
        return [TenantUsage.from_raw(item, request_id=self.request_id) for item in items]


class SingleTenantPage(paging.LinkedPage[TenantUsage]):
    """ A page of one tenant's usage: the same tenant, but the next portion of its servers. """
    links_key = 'tenant_usage_links'

    def extract(self) -> List[TenantUsage]:
        raw = bodies.unwrap('tenant_usage', self.body)
        return [TenantUsage.from_raw(raw, request_id=self.request_id)] if raw else []

    def is_empty(self) -> bool:
        return not any(usage.server_usages for usage in self.extract())


@dataclasses.dataclass
class SingleTenantOpts:
    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None
    limit: Optional[int] = None
    marker: Optional[str] = None

    def to_query(self) -> Mapping[str, str]:
        return options.build_query(dataclasses.asdict(self))


@dataclasses.dataclass
class AllTenantsOpts:
    detailed: bool = False
    """ Include the per-server usage into every tenant's usage. """

    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None
    limit: Optional[int] = None
    marker: Optional[str] = None

    def to_query(self) -> Mapping[str, str]:
        query = dataclasses.asdict(self)
        query['detailed'] = 1 if self.detailed else None
        return options.build_query(query)


def all_tenants(
        *,
        context: auth.APIContext,
        opts: Optional[AllTenantsOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[AllTenantsPage]:
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(params=query),
        service=RESOURCE.service,
        page_cls=AllTenantsPage,
        context=context,
        logger=logger,
    )


def single_tenant(
        *,
        tenant_id: str,
        context: auth.APIContext,
        opts: Optional[SingleTenantOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[SingleTenantPage]:
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(name=tenant_id, params=query),
        service=RESOURCE.service,
        page_cls=SingleTenantPage,
        context=context,
        logger=logger,
    )
