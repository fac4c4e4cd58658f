import pytest

from admin_console.state import (
    Closed,
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    ItemCreated,
    ItemMerged,
    ItemRemoved,
    ItemReplaced,
    ListState,
    SetPage,
    SetSearch,
    reduce,
)
from support import page_of


def loaded(items, total_pages=3, page_limit=10):
    state = reduce(FetchStarted(1), ListState())
    return reduce(FetchSucceeded(1, page_of(items, total_pages, page_limit=page_limit)), state)


def test_search_resets_page():
    state = reduce(SetPage(3), loaded([]))
    assert state.current_page == 3
    state = reduce(SetSearch("shoe"), state)
    assert state.search_term == "shoe"
    assert state.current_page == 1


def test_set_page_is_clamped():
    state = loaded([], total_pages=3)
    assert reduce(SetPage(7), state).current_page == 3
    assert reduce(SetPage(-2), state).current_page == 1


def test_stale_result_is_dropped():
    state = reduce(FetchStarted(1), ListState())
    state = reduce(FetchStarted(2), state)
    newer = reduce(FetchSucceeded(2, page_of([{"_id": "new"}])), state)
    assert reduce(FetchSucceeded(1, page_of([{"_id": "old"}])), newer) is newer
    assert reduce(FetchFailed(1, "boom"), newer) is newer
    assert reduce(FetchSucceeded(1, page_of([{"_id": "old"}])), state) is state


def test_failure_keeps_items():
    state = loaded([{"_id": "a"}])
    state = reduce(FetchStarted(2), state)
    state = reduce(FetchFailed(2, "Failed to fetch coupons"), state)
    assert state.items == ({"_id": "a"},)
    assert state.error == "Failed to fetch coupons"
    assert state.is_fetching is False


def test_created_item_is_prepended_within_page_limit():
    state = loaded([{"_id": "a"}, {"_id": "b"}], page_limit=2)
    state = reduce(ItemCreated({"_id": "c"}), state)
    assert [item["_id"] for item in state.items] == ["c", "a"]


def test_replace_merge_and_remove_by_identity():
    state = loaded([{"_id": "a", "name": "A"}, {"_id": "b", "name": "B"}])
    state = reduce(ItemReplaced("a", {"_id": "a", "name": "A2"}), state)
    state = reduce(ItemMerged("b", {"status": "shipped"}), state)
    assert state.find("a") == {"_id": "a", "name": "A2"}
    assert state.find("b") == {"_id": "b", "name": "B", "status": "shipped"}
    state = reduce(ItemRemoved("a"), state)
    assert state.find("a") is None
    assert len(state.items) == 1


def test_closed_state_ignores_results():
    state = reduce(FetchStarted(1), ListState())
    state = reduce(Closed(), state)
    assert state.is_fetching is False
    assert reduce(FetchSucceeded(1, page_of([{"_id": "a"}])), state).items == ()
    assert reduce(FetchStarted(2), state) is state


def test_navigation_flags():
    state = reduce(SetPage(2), loaded([], total_pages=3))
    assert state.has_previous and state.has_next
    assert state.page_window == [1, 2, 3]


def test_unknown_action():
    with pytest.raises(TypeError):
        reduce(object(), ListState())
