"""
Paginated listings: one logical sequence of records over many HTTP requests.

The services split the long listings into pages. How the next page is
requested differs across the services: some put a full URL of the next page
into the body (``"loadbalancers_links": [{"rel": "next", "href": ...}]``
or ``"next": ...``), some expect the client to ask for the records after
the last one seen (``?marker=<last id>``). The page classes know how to read
their bodies; the generic :class:`Pager` only asks the current page for
the URL of the next one, without knowing which way it was made.

The pages are fetched lazily, one at a time, in the server's order, and only
once. An empty page ends the listing (it is not shown to the consumers).
The misbehaving servers, which send the clients in circles or never end
the listings, are detected and reported as errors instead of looping forever.
"""
import contextlib
import dataclasses
import inspect
import logging
import urllib.parse
from typing import Any, AsyncGenerator, AsyncIterator, Callable, ClassVar, Generic, List, Mapping, Optional, \
                   Set, Type, TypeVar, Union

from osbind._cogs.clients import api, auth, errors
from osbind._cogs.helpers import typedefs
from osbind._cogs.structs import bodies

paging_logger = logging.getLogger(__name__)

RecordT = TypeVar('RecordT')
PageT = TypeVar('PageT', bound='Page[Any]')


class PaginationError(Exception):
    """ A base class for the misbehaving listings (as detected by the client). """


class PaginationLoopError(PaginationError):
    """ The next page's URL points to a page which was already fetched. """


class PaginationLimitError(PaginationError):
    """ The listing has more pages than allowed by the settings. """


@dataclasses.dataclass(frozen=True)
class AbsoluteLink:
    """ A next page as a URL provided by the server (usually, an absolute one). """
    url: str

    def resolve(self, current_url: str) -> str:
        return urllib.parse.urljoin(current_url, self.url)


@dataclasses.dataclass(frozen=True)
class MarkerToken:
    """ A next page as the records after the marker (usually, the last record's id or name). """
    marker: str
    param: str = 'marker'

    def resolve(self, current_url: str) -> str:
        parts = urllib.parse.urlsplit(current_url)
        query = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        query = [(key, val) for key, val in query if key != self.param]
        query.append((self.param, self.marker))
        return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))


NextLink = Union[AbsoluteLink, MarkerToken]


class Page(Generic[RecordT]):
    """
    One fetched page of a listing: the response's body and where it came from.

    The resource-specific descendants define how the records are extracted
    from the body (:meth:`extract`) and how the next page is found
    (:meth:`next_link`). By default, a page is empty when it has no records.
    """

    def __init__(
            self,
            *,
            url: str,
            body: Any,
            headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__()
        self.url = url
        self.body = body
        self.headers: Mapping[str, str] = headers if headers is not None else {}

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.url}>'

    @property
    def request_id(self) -> Optional[str]:
        return errors.get_request_id(self.headers)

    def extract(self) -> List[RecordT]:
        raise NotImplementedError

    def is_empty(self) -> bool:
        return not self.extract()

    def next_link(self) -> Optional[NextLink]:
        raise NotImplementedError

    def next_url(self) -> Optional[str]:
        link = self.next_link()
        return link.resolve(self.url) if link is not None else None


class SinglePage(Page[RecordT]):
    """ A listing that is never paginated: everything comes in one response. """

    def next_link(self) -> Optional[NextLink]:
        return None


class LinkedPage(Page[RecordT]):
    """
    A page that refers to the next page by a URL in the body.

    The URL is searched in the ``<key>_links`` array (as a link with
    ``"rel": "next"``), or in the top-level ``"next"`` field of the body.
    """
    links_key: ClassVar[Optional[str]] = None

    def next_link(self) -> Optional[NextLink]:
        if not isinstance(self.body, Mapping):
            return None

        links: List[bodies.RawLink] = (self.body.get(self.links_key) or []) if self.links_key else []
        for link in links if isinstance(links, list) else []:
            if isinstance(link, Mapping) and link.get('rel') == 'next' and link.get('href'):
                return AbsoluteLink(link['href'])

        next_url = self.body.get('next')
        if isinstance(next_url, str) and next_url:
            return AbsoluteLink(next_url)

        return None


class MarkerPage(Page[RecordT]):
    """
    A page that continues after its last record: ``?marker=<last one>``.

    The listing ends when a page comes back empty. The descendants define
    which value of the last record is the marker (:meth:`last_marker`).
    """
    marker_param: ClassVar[str] = 'marker'

    def last_marker(self) -> Optional[str]:
        raise NotImplementedError

    def next_link(self) -> Optional[NextLink]:
        if self.is_empty():
            return None
        marker = self.last_marker()
        return MarkerToken(marker, param=self.marker_param) if marker else None


class Pager(Generic[PageT]):
    """
    A lazy, forward-only, non-restartable sequence of pages of a listing.

    Nothing is requested until the pager is iterated or consumed::

        async for page in loadbalancers.list(context=context):
            for lb in page.extract():
                ...

        pages = await loadbalancers.list(context=context).all_pages()
        lbs = await loadbalancers.list(context=context).extract_all()
        await loadbalancers.list(context=context).each_page(visit)

    A pager can be iterated only once. To repeat the listing, make a new one.
    """

    def __init__(
            self,
            url: str,
            *,
            context: auth.APIContext,
            service: Optional[str],
            page_cls: Type[PageT],
            accept: str = api.JSON_CONTENT_TYPE,
            headers: Optional[Mapping[str, str]] = None,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        super().__init__()
        self.url = url
        self.context = context
        self.service = service
        self.page_cls = page_cls
        self.accept = accept
        self.headers = headers
        self.logger = logger if logger is not None else paging_logger
        self._started = False

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.page_cls.__name__} @ {self.url}>'

    def __aiter__(self) -> AsyncIterator[PageT]:
        return self.iter_pages()

    async def iter_pages(self) -> AsyncGenerator[PageT, None]:
        if self._started:
            raise RuntimeError("The pages can be iterated only once; make a new listing to repeat.")
        self._started = True

        max_pages = self.context.settings.paging.max_pages
        seen: Set[str] = set()
        url: Optional[str] = self.context.get_url(self.url, service=self.service)
        while url is not None:
            if url in seen:
                raise PaginationLoopError(f"The listing refers to an already fetched page: {url}")
            if max_pages is not None and len(seen) >= max_pages:
                raise PaginationLimitError(f"The listing exceeds the limit of {max_pages} pages.")
            seen.add(url)

            reply = await api.get(
                url,
                headers=self.headers,
                accept=self.accept,
                context=self.context,
                logger=self.logger,
            )
            page = self.page_cls(url=url, body=reply.body, headers=reply.headers)
            if page.is_empty():
                self.logger.debug(f"Page #{len(seen)} is empty; the listing is over.")
                return

            self.logger.debug(f"Page #{len(seen)} is fetched: {url}")
            yield page
            url = page.next_url()

    async def each_page(self, visit: Callable[[PageT], typedefs.MaybeAwaitable]) -> None:
        """
        Visit every page, one by one, until the visitor returns false.

        The visitor can be a regular or an async function. Its exceptions
        are escalated as is; no further pages are fetched after them.
        """
        async with contextlib.aclosing(self.iter_pages()) as pages:
            async for page in pages:
                result = visit(page)
                if inspect.isawaitable(result):
                    result = await result
                if not result:
                    break

    async def all_pages(self) -> List[PageT]:
        async with contextlib.aclosing(self.iter_pages()) as pages:
            return [page async for page in pages]

    async def extract_all(self) -> List[Any]:
        """ Fetch all the pages and extract their records as one flat list. """
        return [record for page in await self.all_pages() for record in page.extract()]
