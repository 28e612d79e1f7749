from __future__ import annotations

from onair.core.models import ConnectionStatus, Event, NowPlaying, SortDirection, SortKey
from onair.core.store import PolledField, ViewStateStore


def _events(count: int) -> list[Event]:
    return [Event(play_time=f"2024-01-01T{hour:02d}:00:00Z", title=f"T{hour:02d}") for hour in range(count)]


def test_store_defaults() -> None:
    store = ViewStateStore()
    assert store.filter.type == "SONG"
    assert store.filter.limit == 50
    assert store.filter.order == SortDirection.DESC
    assert store.pages.page == 1
    assert store.pages.page_size == 25
    assert store.sort.key == SortKey.PLAY_TIME
    assert store.sort.direction == SortDirection.DESC
    assert store.connection == ConnectionStatus.OFFLINE
    assert store.now_playing is None


def test_sort_by_same_key_flips_and_new_key_starts_ascending() -> None:
    store = ViewStateStore()
    store.apply_events(_events(60))
    store.set_page(3)

    store.sort_by(SortKey.PLAY_TIME)
    assert store.sort.direction == SortDirection.ASC
    assert store.pages.page == 1

    store.set_page(2)
    store.sort_by("title")
    assert store.sort.key == SortKey.TITLE
    assert store.sort.direction == SortDirection.ASC
    assert store.pages.page == 1


def test_page_size_change_resets_page() -> None:
    store = ViewStateStore()
    store.apply_events(_events(60))
    store.set_page(3)
    store.set_page_size(10)
    assert store.pages.page == 1
    assert store.page_count == 6


def test_apply_filter_clamps_limit_and_resets_page() -> None:
    store = ViewStateStore()
    store.apply_events(_events(60))
    store.set_page(2)

    filters = store.apply_filter("AD", "9999", "asc")
    assert (filters.type, filters.limit, filters.order) == ("AD", 500, SortDirection.ASC)
    assert store.pages.page == 1

    assert store.apply_filter("ID", "-5", "sideways").limit == 50
    assert store.filter.order == SortDirection.DESC
    assert store.apply_filter("", "abc", "desc").type == "ID"


def test_navigation_clamps_to_page_range() -> None:
    store = ViewStateStore(page_size=25)
    store.apply_events(_events(60))
    assert store.prev_page() == 1
    assert store.next_page() == 2
    assert store.next_page() == 3
    assert store.next_page() == 3


def test_shrinking_events_pulls_stale_page_back_in_range() -> None:
    store = ViewStateStore(page_size=10)
    store.apply_events(_events(50))
    store.set_page(5)
    store.apply_events(_events(12))
    assert store.pages.page == 2
    assert store.prev_page() == 1


def test_listeners_run_after_each_mutation_with_consistent_state() -> None:
    store = ViewStateStore()
    store.apply_events(_events(60))
    store.set_page(3)
    seen: list[tuple[str, int]] = []
    unsubscribe = store.subscribe(lambda s: seen.append((s.filter.type, s.pages.page)))

    store.apply_filter("AD", "10", "desc")
    unsubscribe()
    store.next_page()

    assert seen == [("AD", 1)]


def test_failure_flips_status_but_keeps_last_known_data() -> None:
    store = ViewStateStore()
    item = NowPlaying(title="Kept", artist="Band")
    store.apply_now_playing(item)
    assert store.connection == ConnectionStatus.CONNECTED
    fetched_at = store.last_fetched_at

    store.mark_failed()

    assert store.connection == ConnectionStatus.RECONNECTING
    assert store.now_playing == item
    assert store.last_fetched_at == fetched_at


def test_stale_responses_are_dropped_per_field() -> None:
    store = ViewStateStore()
    first = store.next_sequence(PolledField.EVENTS)
    second = store.next_sequence(PolledField.EVENTS)

    assert store.apply_events(_events(3), second) is True
    assert store.apply_events(_events(7), first) is False
    assert len(store.events) == 3
    assert store.connection == ConnectionStatus.CONNECTED

    now_seq = store.next_sequence(PolledField.NOW_PLAYING)
    assert store.apply_now_playing(NowPlaying(title="x"), now_seq) is True
