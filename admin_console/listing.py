"""
List state controller: keeps one page of a resource in step with the server
as the admin pages through it or searches it.
"""
import asyncio
import itertools
import logging
from typing import Optional, Set

from .client import ResourceClient, ResourceError
from .notices import NoticeBoard
from .state import (
    Closed,
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    ListState,
    SetPage,
    SetSearch,
    reduce,
)

logger = logging.getLogger(__name__)


class ListController:
    """Owns the ListState of one screen.

    `set_search_term`, `set_page` and `refetch` return immediately with the
    asyncio task doing the work; callers may await it but do not have to.
    Overlapping requests are allowed to race: each carries a sequence number
    and only the newest one may update the state.
    """

    def __init__(self, client: ResourceClient, notices: Optional[NoticeBoard] = None, debounce: float = 0.0):
        self.client = client
        self.notices = notices if notices is not None else NoticeBoard()
        self.debounce = debounce
        self.state = ListState(id_field=client.resource.id_field)
        self._seq = itertools.count(1)
        self._tasks: Set[asyncio.Task] = set()
        self._pending_search: Optional[asyncio.Task] = None

    def dispatch(self, action) -> ListState:
        self.state = reduce(action, self.state)
        return self.state

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def set_search_term(self, term: str) -> asyncio.Task:
        self.dispatch(SetSearch(term))
        if self.debounce <= 0:
            return self.refetch()
        if self._pending_search is not None:
            self._pending_search.cancel()
        self._pending_search = self._spawn(self._debounced_refetch())
        return self._pending_search

    async def _debounced_refetch(self) -> None:
        await asyncio.sleep(self.debounce)
        await self.refetch()

    def set_page(self, page: int) -> asyncio.Task:
        self.dispatch(SetPage(page))
        return self.refetch()

    def refetch(self) -> asyncio.Task:
        seq = next(self._seq)
        self.dispatch(FetchStarted(seq))
        return self._spawn(self._fetch(seq, self.state.current_page, self.state.search_term))

    async def _fetch(self, seq: int, page: int, search: str) -> None:
        try:
            result = await self.client.list(page=page, search=search)
        except ResourceError as exc:
            if seq == self.state.latest_seq and not self.state.closed:
                self.notices.error(exc.message)
            self.dispatch(FetchFailed(seq, exc.message))
            return

        self.dispatch(FetchSucceeded(seq, result))
        if seq == self.state.latest_seq and self.state.current_page != page:
            # the page we asked for no longer exists
            logger.info(f"Page {page} of {self.client.resource.name} is gone, showing {self.state.current_page}")
            self.refetch()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def close(self) -> None:
        """Tear down: cancel outstanding requests and ignore any late reply."""
        self.dispatch(Closed())
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
