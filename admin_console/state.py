"""
List state for one admin screen and the transitions that change it.

All state lives in one immutable ListState. Controllers never assign fields
directly; they dispatch an action through `reduce`, which returns the next
state. Fetch results carry the sequence number of the request that produced
them and anything but the latest issued request is dropped.
"""
from dataclasses import dataclass, replace
from functools import singledispatch
from typing import Any, Dict, List, Optional, Tuple

from .client import PagedResult
from .pagination import DEFAULT_PAGE_LIMIT, PageMarker, clamp_page, page_window
from .resources import Entity


@dataclass(frozen=True)
class ListState:
    search_term: str = ""
    current_page: int = 1
    total_pages: int = 1
    page_limit: int = DEFAULT_PAGE_LIMIT
    items: Tuple[Entity, ...] = ()
    is_fetching: bool = False
    latest_seq: int = 0
    error: Optional[str] = None
    closed: bool = False
    id_field: str = "_id"

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def page_window(self) -> List[PageMarker]:
        return page_window(self.current_page, self.total_pages)

    def find(self, entity_id: str) -> Optional[Entity]:
        return next((item for item in self.items if self._matches(item, entity_id)), None)

    def _matches(self, item: Entity, entity_id: str) -> bool:
        value = item.get(self.id_field)
        return value is not None and str(value) == entity_id


# Actions

@dataclass(frozen=True)
class SetSearch:
    term: str


@dataclass(frozen=True)
class SetPage:
    page: int


@dataclass(frozen=True)
class FetchStarted:
    seq: int


@dataclass(frozen=True)
class FetchSucceeded:
    seq: int
    result: PagedResult


@dataclass(frozen=True)
class FetchFailed:
    seq: int
    message: str


@dataclass(frozen=True)
class ItemCreated:
    entity: Entity


@dataclass(frozen=True)
class ItemReplaced:
    entity_id: str
    entity: Entity


@dataclass(frozen=True)
class ItemMerged:
    entity_id: str
    changes: Dict[str, Any]


@dataclass(frozen=True)
class ItemRemoved:
    entity_id: str


@dataclass(frozen=True)
class Closed:
    pass


@singledispatch
def reduce(action, state: ListState) -> ListState:
    raise TypeError(f"Unknown list action: {action!r}")


@reduce.register
def _(action: SetSearch, state: ListState) -> ListState:
    return replace(state, search_term=action.term, current_page=1)


@reduce.register
def _(action: SetPage, state: ListState) -> ListState:
    return replace(state, current_page=clamp_page(action.page, state.total_pages))


@reduce.register
def _(action: FetchStarted, state: ListState) -> ListState:
    if state.closed:
        return state
    return replace(state, latest_seq=action.seq, is_fetching=True, error=None)


def _is_stale(seq: int, state: ListState) -> bool:
    return state.closed or seq != state.latest_seq


@reduce.register
def _(action: FetchSucceeded, state: ListState) -> ListState:
    if _is_stale(action.seq, state):
        return state
    result = action.result
    return replace(
        state,
        items=tuple(result.items),
        total_pages=result.total_pages,
        page_limit=result.page_limit,
        current_page=clamp_page(state.current_page, result.total_pages),
        is_fetching=False,
        error=None,
    )


@reduce.register
def _(action: FetchFailed, state: ListState) -> ListState:
    if _is_stale(action.seq, state):
        return state
    return replace(state, is_fetching=False, error=action.message)


@reduce.register
def _(action: ItemCreated, state: ListState) -> ListState:
    # newest first, and the page never grows past its size
    return replace(state, items=((action.entity,) + state.items)[:state.page_limit])


@reduce.register
def _(action: ItemReplaced, state: ListState) -> ListState:
    return replace(state, items=tuple(
        action.entity if state._matches(item, action.entity_id) else item for item in state.items
    ))


@reduce.register
def _(action: ItemMerged, state: ListState) -> ListState:
    return replace(state, items=tuple(
        {**item, **action.changes} if state._matches(item, action.entity_id) else item for item in state.items
    ))


@reduce.register
def _(action: ItemRemoved, state: ListState) -> ListState:
    return replace(state, items=tuple(item for item in state.items if not state._matches(item, action.entity_id)))


@reduce.register
def _(action: Closed, state: ListState) -> ListState:
    return replace(state, closed=True, is_fetching=False)
