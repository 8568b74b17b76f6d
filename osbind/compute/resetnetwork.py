"""
The ``resetNetwork`` action of the servers: re-inject the network info into them.
"""
from typing import Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import records, references

SERVERS = references.Resource('compute', 'servers', kind='Server')


async def reset_network(
        *,
        server_id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> records.Outcome:
    reply = await api.post(
        SERVERS.get_url(name=server_id, subresource='action'),
        service=SERVERS.service,
        payload={'resetNetwork': None},
        context=context,
        logger=logger,
    )
    return reply.to_outcome()
