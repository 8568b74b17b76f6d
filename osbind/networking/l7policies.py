"""
Layer-7 policies of the networking service's load-balancing extension (LBaaS v2).

A policy is attached to a listener and decides what to do with the requests
matching its rules: reject them, or redirect them to a pool or a URL.
"""
import dataclasses
from typing import Any, Iterable, List, Mapping, Optional

from osbind._cogs.clients import api, auth
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import bodies, options, records, references
from osbind._core.engines import paging

RESOURCE = references.Resource('network', 'v2.0/lbaas/l7policies', kind='L7Policy')

ACTION_REDIRECT_TO_POOL = 'REDIRECT_TO_POOL'
ACTION_REDIRECT_TO_URL = 'REDIRECT_TO_URL'
ACTION_REJECT = 'REJECT'


@dataclasses.dataclass(frozen=True)
class Rule:
    id: str
    rule_type: Optional[str] = None
    compare_type: Optional[str] = None
    value: Optional[str] = None
    key: Optional[str] = None
    invert: Optional[bool] = None
    admin_state_up: Optional[bool] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Rule":
        return cls(
            id=raw['id'],
            rule_type=raw.get('type'),
            compare_type=raw.get('compare_type'),
            value=raw.get('value'),
            key=raw.get('key'),
            invert=raw.get('invert'),
            admin_state_up=raw.get('admin_state_up'),
        )


@dataclasses.dataclass(frozen=True)
class L7Policy(records.Record):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    listener_id: Optional[str] = None
    action: Optional[str] = None
    position: Optional[int] = None
    redirect_pool_id: Optional[str] = None
    redirect_url: Optional[str] = None
    tenant_id: Optional[str] = None
    project_id: Optional[str] = None
    admin_state_up: Optional[bool] = None
    rules: List[Rule] = dataclasses.field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, request_id: Optional[str] = None) -> "L7Policy":
        return cls(
            id=raw['id'],
            name=raw.get('name'),
            description=raw.get('description'),
            listener_id=raw.get('listener_id'),
            action=raw.get('action'),
            position=raw.get('position'),
            redirect_pool_id=raw.get('redirect_pool_id'),
            redirect_url=raw.get('redirect_url'),
            tenant_id=raw.get('tenant_id'),
            project_id=raw.get('project_id'),
            admin_state_up=raw.get('admin_state_up'),
            rules=[Rule.from_raw(rule) for rule in raw.get('rules') or []],
            request_id=request_id,
        )


class L7PolicyPage(paging.LinkedPage[L7Policy]):
    links_key = 'l7policies_links'

    def extract(self) -> List[L7Policy]:
        items = bodies.unwrap_items('l7policies', self.body)
        return [L7Policy.from_raw(item, request_id=self.request_id) for item in items]


@dataclasses.dataclass
class ListOpts:
    id: Optional[str] = None
    name: Optional[str] = None
    listener_id: Optional[str] = None
    action: Optional[str] = None
    position: Optional[int] = None
    redirect_pool_id: Optional[str] = None
    redirect_url: Optional[str] = None
    tenant_id: Optional[str] = None
    project_id: Optional[str] = None
    admin_state_up: Optional[bool] = None
    limit: Optional[int] = None
    marker: Optional[str] = None
    sort_key: Optional[str] = None
    sort_dir: Optional[bodies.SortDirection] = None

    def to_query(self) -> Mapping[str, str]:
        return options.build_query(dataclasses.asdict(self))


@dataclasses.dataclass
class CreateOpts:
    listener_id: Optional[str] = None
    action: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    position: Optional[int] = None
    redirect_pool_id: Optional[str] = None
    redirect_url: Optional[str] = None
    tenant_id: Optional[str] = None
    project_id: Optional[str] = None
    admin_state_up: Optional[bool] = None

    def to_body(self) -> Mapping[str, Any]:
        options.require(self, 'listener_id', 'action')
        return bodies.wrap('l7policy', options.compact(dataclasses.asdict(self)))


def list(
        *,
        context: auth.APIContext,
        opts: Optional[ListOpts] = None,
        logger: Optional[typedefs.Logger] = None,
) -> paging.Pager[L7PolicyPage]:
    query = opts.to_query() if opts is not None else {}
    return paging.Pager(
        RESOURCE.get_url(params=query),
        service=RESOURCE.service,
        page_cls=L7PolicyPage,
        context=context,
        logger=logger,
    )


async def create(
        *,
        opts: CreateOpts,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> L7Policy:
    reply = await api.post(
        RESOURCE.get_url(),
        service=RESOURCE.service,
        payload=opts.to_body(),
        context=context,
        logger=logger,
    )
    return L7Policy.from_raw(bodies.unwrap('l7policy', reply.body), request_id=reply.request_id)


async def get(
        *,
        id: str,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> L7Policy:
    reply = await api.get(
        RESOURCE.get_url(name=id),
        service=RESOURCE.service,
        context=context,
        logger=logger,
    )
    return L7Policy.from_raw(bodies.unwrap('l7policy', reply.body), request_id=reply.request_id)


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


def extract_l7policies(pages: Iterable[L7PolicyPage]) -> List[L7Policy]:
    return [policy for page in pages for policy in page.extract()]
