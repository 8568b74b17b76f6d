"""
Cached assets of the CDN services: purging them from the edge caches.
"""
import dataclasses
from typing import Mapping, Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import options, records, references

SERVICES = references.Resource('cdn', 'services', kind='Service')


@dataclasses.dataclass
class DeleteOpts:
    """ Either one asset by its URL, or all the assets of the service. """
    url: Optional[str] = None
    all: bool = False

    def to_query(self) -> Mapping[str, str]:
        if self.all and self.url:
            raise ValueError("Either the asset's URL or all assets can be purged, not both.")
        return options.build_query({'url': self.url, 'all': True if self.all else None})


async def delete(
        *,
        service_id: str,
        opts: Optional[DeleteOpts] = None,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    query = opts.to_query() if opts is not None else {}
    reply = await api.delete(
        SERVICES.get_url(name=service_id, subresource='assets', params=query),
        service=SERVICES.service,
        context=context,
        logger=logger,
    )
    return reply.to_outcome()
