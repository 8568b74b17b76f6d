"""
Quotas of the container-infrastructure resources per project.
"""
import dataclasses
import datetime
from typing import Any, Mapping, Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import timestamps, typedefs
from osbind._cogs.structs import bodies, options, records, references

RESOURCE = references.Resource('container-infra', 'v1/quotas', kind='Quota')


@dataclasses.dataclass(frozen=True)
class Quota(records.Record):
    project_id: str
    resource: str
    hard_limit: int
    id: Optional[int] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "Quota":
        return cls(
            project_id=raw['project_id'],
            resource=raw['resource'],
            hard_limit=raw['hard_limit'],
            id=raw.get('id'),
            created_at=timestamps.parse(raw.get('created_at')),
            updated_at=timestamps.parse(raw.get('updated_at')),
            request_id=request_id,
        )


@dataclasses.dataclass
class CreateOpts:
    project_id: Optional[str] = None
    resource: Optional[str] = None
    hard_limit: Optional[int] = None

    def to_body(self) -> Mapping[str, Any]:
        options.require(self, 'project_id', 'resource', 'hard_limit')
        return bodies.wrap(None, options.compact(dataclasses.asdict(self)))


async def create(
        *,
        opts: CreateOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> Quota:
    reply = await api.post(
        RESOURCE.get_url(),
        service=RESOURCE.service,
        payload=opts.to_body(),
        context=context,
        logger=logger,
    )
    return Quota.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)


async def get(
        *,
        project_id: str,
        resource: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> Quota:
    reply = await api.get(
        RESOURCE.get_url(name=(project_id, resource)),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return Quota.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)


async def delete(
        *,
        project_id: str,
        resource: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    reply = await api.delete(
        RESOURCE.get_url(name=(project_id, resource)),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return reply.to_outcome()
