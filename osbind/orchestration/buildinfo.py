"""
The build information of the orchestration service (Heat): its API & engine revisions.
"""
import dataclasses
from typing import Any, Mapping, Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import bodies, records, references

RESOURCE = references.Resource('orchestration', 'build_info', kind='BuildInfo')


@dataclasses.dataclass(frozen=True)
class Revision:
    revision: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class BuildInfo(records.Record):
    api: Revision = Revision()
    engine: Revision = Revision()

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "BuildInfo":
        return cls(
            api=Revision(revision=(raw.get('api') or {}).get('revision')),
            engine=Revision(revision=(raw.get('engine') or {}).get('revision')),
            request_id=request_id,
        )


async def get(
        *,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> BuildInfo:
    reply = await api.get(
        RESOURCE.get_url(),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return BuildInfo.from_raw(bodies.unwrap(None, reply.body), request_id=reply.request_id)
