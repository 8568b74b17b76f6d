"""
IP availability of the networks: how many addresses are used, per network & per subnet.

The counters can be huge for IPv6 subnets (up to 2**128), which Python's
integers hold natively, as parsed from JSON.
"""
import dataclasses
from typing import Any, List, Mapping, Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import bodies, options, records, references
from osbind._core.engines import paging

RESOURCE = references.Resource('network', 'v2.0/network-ip-availabilities', kind='NetworkIPAvailability')


@dataclasses.dataclass(frozen=True)
class SubnetIPAvailability:
    subnet_id: str
    subnet_name: Optional[str] = None
    cidr: Optional[str] = None
    ip_version: Optional[int] = None
    total_ips: int = 0
    used_ips: int = 0

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "SubnetIPAvailability":
        return cls(
            subnet_id=raw['subnet_id'],
            subnet_name=raw.get('subnet_name'),
            cidr=raw.get('cidr'),
            ip_version=raw.get('ip_version'),
            total_ips=int(raw.get('total_ips') or 0),
            used_ips=int(raw.get('used_ips') or 0),
        )


@dataclasses.dataclass(frozen=True)
class NetworkIPAvailability(records.Record):
    network_id: str
    network_name: Optional[str] = None
    project_id: Optional[str] = None
    tenant_id: Optional[str] = None
    total_ips: int = 0
    used_ips: int = 0
    subnet_ip_availabilities: List[SubnetIPAvailability] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "NetworkIPAvailability":
        return cls(
            network_id=raw['network_id'],
            network_name=raw.get('network_name'),
            project_id=raw.get('project_id'),
            tenant_id=raw.get('tenant_id'),
            total_ips=int(raw.get('total_ips') or 0),
            used_ips=int(raw.get('used_ips') or 0),
            subnet_ip_availabilities=[SubnetIPAvailability.from_raw(subnet)
                                      for subnet in raw.get('subnet_ip_availability') or []],
            request_id=request_id,
        )


class NetworkIPAvailabilityPage(paging.SinglePage[NetworkIPAvailability]):

    def extract(self) -> List[NetworkIPAvailability]:
        items = bodies.unwrap_items('network_ip_availabilities', self.body)
        return [NetworkIPAvailability.from_raw(item, request_id=self.request_id) for item in items]


@dataclasses.dataclass
class ListOpts:
    network_id: Optional[str] = None
    network_name: Optional[str] = None
    ip_version: Optional[int] = None
    project_id: Optional[str] = None
    tenant_id: Optional[str] = None

    def to_query(self) -> Mapping[str, str]:
        return options.build_query(dataclasses.asdict(self))


def list(
        *,
        context: auth.APIContext,
        opts: Optional[ListOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[NetworkIPAvailabilityPage]:
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(params=query),
        service=RESOURCE.service,
        page_cls=NetworkIPAvailabilityPage,
        context=context,
        logger=logger,
    )


async def get(
        *,
        network_id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> NetworkIPAvailability:
    reply = await api.get(
        RESOURCE.get_url(name=network_id),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    raw = bodies.unwrap('network_ip_availability', reply.body)
    return NetworkIPAvailability.from_raw(raw, request_id=reply.request_id)
