"""
Cluster templates: the reusable specifications of the clusters to create.
"""
import dataclasses
import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import timestamps, typedefs
from osbind._cogs.structs import bodies, options, records, references
from osbind._core.engines import paging
from osbind.containerinfra.clusters import ListOpts, UpdateOp

RESOURCE = references.Resource('container-infra', 'v1/clustertemplates', kind='ClusterTemplate')


@dataclasses.dataclass(frozen=True)
class ClusterTemplate(records.Record):
    uuid: str
    name: Optional[str] = None
    coe: Optional[str] = None
    image_id: Optional[str] = None
    apiserver_port: Optional[int] = None
    cluster_distro: Optional[str] = None
    dns_nameserver: Optional[str] = None
    docker_storage_driver: Optional[str] = None
    docker_volume_size: Optional[int] = None
    external_network_id: Optional[str] = None
    fixed_network: Optional[str] = None
    fixed_subnet: Optional[str] = None
    flavor_id: Optional[str] = None
    master_flavor_id: Optional[str] = None
    floating_ip_enabled: Optional[bool] = None
    master_lb_enabled: Optional[bool] = None
    hidden: Optional[bool] = None
    public: Optional[bool] = None
    registry_enabled: Optional[bool] = None
    tls_disabled: Optional[bool] = None
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    no_proxy: Optional[str] = None
    insecure_registry: Optional[str] = None
    keypair_id: Optional[str] = None
    labels: Mapping[str, str] = dataclasses.field(default_factory=dict)
    network_driver: Optional[str] = None
    volume_driver: Optional[str] = None
    server_type: Optional[str] = None
    project_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    links: List[Mapping[str, Any]] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "ClusterTemplate":
        simple = {field.name: raw.get(field.name) for field in dataclasses.fields(cls)
                  if field.name not in {'uuid', 'labels', 'links', 'created_at', 'updated_at', 'request_id'}}
        return cls(
            uuid=raw['uuid'],
            labels=dict(raw.get('labels') or {}),
            links=[link for link in raw.get('links') or []],
            created_at=timestamps.parse(raw.get('created_at')),
            updated_at=timestamps.parse(raw.get('updated_at')),
            request_id=request_id,
            **simple,
        )


class ClusterTemplatePage(paging.LinkedPage[ClusterTemplate]):

    def extract(self) -> List[ClusterTemplate]:
        items = bodies.unwrap_items('clustertemplates', self.body)
        return [ClusterTemplate.from_raw(item, request_id=self.request_id) for item in items]


@dataclasses.dataclass
class CreateOpts:
    coe: Optional[str] = None
    image_id: Optional[str] = None
    name: Optional[str] = None
    apiserver_port: Optional[int] = None
    cluster_distro: Optional[str] = None
    dns_nameserver: Optional[str] = None
    docker_storage_driver: Optional[str] = None
    docker_volume_size: Optional[int] = None
    external_network_id: Optional[str] = None
    fixed_network: Optional[str] = None
    fixed_subnet: Optional[str] = None
    flavor_id: Optional[str] = None
    master_flavor_id: Optional[str] = None
    floating_ip_enabled: Optional[bool] = None
    master_lb_enabled: Optional[bool] = None
    hidden: Optional[bool] = None
    public: Optional[bool] = None
    registry_enabled: Optional[bool] = None
    tls_disabled: Optional[bool] = None
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    no_proxy: Optional[str] = None
    insecure_registry: Optional[str] = None
    keypair_id: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    network_driver: Optional[str] = None
    volume_driver: Optional[str] = None
    server_type: Optional[str] = None

    def to_body(self) -> Mapping[str, Any]:
        options.require(self, 'coe', 'image_id')
        return bodies.wrap(None, options.compact(dataclasses.asdict(self)))


def list(
        *,
        context: auth.APIContext,
        opts: Optional[ListOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[ClusterTemplatePage]:
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(params=query),
        service=RESOURCE.service,
        page_cls=ClusterTemplatePage,
        context=context,
        logger=logger,
    )


async def create(
        *,
        opts: CreateOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> ClusterTemplate:
    reply = await api.post(
        RESOURCE.get_url(),
        service=RESOURCE.service,
        payload=opts.to_body(),
        context=context,
        logger=logger,
    )
    return ClusterTemplate.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)


async def get(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> ClusterTemplate:
    reply = await api.get(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return ClusterTemplate.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)


async def update(
        *,
        id: str,
        ops: Iterable[UpdateOp],
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> ClusterTemplate:
    reply = await api.patch(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        payload=[op.to_body() for op in ops],
        context=context,
        logger=logger,
    )
    return ClusterTemplate.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)


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
