"""
Nova-network networks, as seen via the compute service (``os-networks``).
"""
import dataclasses
import datetime
from typing import Any, List, Mapping, Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import timestamps, typedefs
from osbind._cogs.structs import bodies, records, references
from osbind._core.engines import paging

RESOURCE = references.Resource('compute', 'os-networks', kind='Network')

TIMESTAMP_FIELDS = frozenset({'created_at', 'updated_at', 'deleted_at'})


@dataclasses.dataclass(frozen=True)
class Network(records.Record):
    id: str
    label: Optional[str] = None
    bridge: Optional[str] = None
    bridge_interface: Optional[str] = None
    broadcast: Optional[str] = None
    cidr: Optional[str] = None
    cidr_v6: Optional[str] = None
    deleted: Optional[bool] = None
    dhcp_start: Optional[str] = None
    dns1: Optional[str] = None
    dns2: Optional[str] = None
    gateway: Optional[str] = None
    gateway_v6: Optional[str] = None
    host: Optional[str] = None
    injected: Optional[bool] = None
    multi_host: Optional[bool] = None
    netmask: Optional[str] = None
    netmask_v6: Optional[str] = None
    priority: Optional[int] = None
    project_id: Optional[str] = None
    rxtx_base: Optional[int] = None
    vlan: Optional[int] = None
    vpn_private_address: Optional[str] = None
    vpn_public_address: Optional[str] = None
    vpn_public_port: Optional[int] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    deleted_at: Optional[datetime.datetime] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "Network":
        values = {field.name: raw.get(field.name) for field in dataclasses.fields(cls)
                  if field.name not in {'id', 'request_id'}}
        values.update({name: timestamps.parse(raw.get(name)) for name in TIMESTAMP_FIELDS})
        return cls(id=raw['id'], request_id=request_id, **values)


class NetworkPage(paging.SinglePage[Network]):

    def extract(self) -> List[Network]:
        items = bodies.unwrap_items('networks', self.body)
        return [Network.from_raw(item, request_id=self.request_id) for item in items]


def list(
        *,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[NetworkPage]:
    return paging.Pager(
        RESOURCE.get_url(),
        service=RESOURCE.service,
        page_cls=NetworkPage,
        context=context,
        logger=logger,
    )


async def get(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> Network:
    reply = await api.get(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return Network.from_raw(bodies.unwrap('network', reply.body), request_id=reply.request_id)
