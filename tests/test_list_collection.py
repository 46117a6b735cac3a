from collections import deque
import logging

import pytest

from uikit.data import (
    FlatObservableCollection, CollectionConfig, InvalidDataTypeError, NOT_FOUND,
    CHANGE, ADD_ITEM, REMOVE_ITEM, REPLACE_ITEM, RESET, REMOVE_ALL,
    UPDATE_ITEM, UPDATE_ALL, FILTER_CHANGE, SORT_CHANGE,
)


def is_even(x):
    return x % 2 == 0


def ascending(a, b):
    return (a > b) - (a < b)


class Item:
    """Distinct objects whose identity matters."""

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Item({self.name!r})"


# =============================================================================
# Pass-through
# =============================================================================

def test_defaults_to_empty_list():
    collection = FlatObservableCollection()
    assert collection.length == 0
    assert collection.data == []


def test_rejects_non_sequence_source():
    with pytest.raises(InvalidDataTypeError):
        FlatObservableCollection({"a": 1})
    with pytest.raises(TypeError):
        FlatObservableCollection((1, 2, 3))


def test_pass_through_matches_raw_source(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw)
    recorder.attach(collection)

    collection.add_item_at(9, 1)
    collection.remove_item_at(0)
    collection.push(7)
    collection.unshift(5)

    assert raw == [5, 9, 2, 3, 7]
    assert collection.length == len(raw)
    assert [collection.get_item_at(i) for i in range(collection.length)] == raw
    assert list(collection) == raw
    assert recorder.events == [
        (CHANGE,), (ADD_ITEM, 1),
        (CHANGE,), (REMOVE_ITEM, 0),
        (CHANGE,), (ADD_ITEM, 3),
        (CHANGE,), (ADD_ITEM, 0),
    ]


def test_add_past_end_appends():
    raw = [1, 2]
    collection = FlatObservableCollection(raw)
    events = []
    collection.connect(ADD_ITEM, events.append)

    collection.add_item_at(3, 10)

    assert raw == [1, 2, 3]
    assert events == [2]


def test_out_of_range_reads_return_sentinels():
    collection = FlatObservableCollection([1, 2])
    assert collection.get_item_at(2) is None
    assert collection.get_item_at(-1) is None
    assert collection.get_item_index(42) == NOT_FOUND


def test_out_of_range_writes_raise_index_error():
    collection = FlatObservableCollection([1, 2])
    with pytest.raises(IndexError):
        collection.remove_item_at(2)
    with pytest.raises(IndexError):
        collection.set_item_at(0, -1)


def test_set_item_emits_replace_before_change(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw)
    recorder.attach(collection)

    collection.set_item_at(20, 1)

    assert raw == [1, 20, 3]
    assert recorder.events == [(REPLACE_ITEM, 1), (CHANGE,)]


def test_pop_and_shift():
    collection = FlatObservableCollection([1, 2, 3])
    assert collection.pop() == 3
    assert collection.shift() == 1
    assert collection.data == [2]
    collection.pop()
    assert collection.pop() is None
    assert collection.shift() is None


def test_wraps_other_mutable_sequences():
    raw = deque([1, 2, 3])
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.add_item_at(4, 0)
    collection.remove_all()
    assert list(raw) == [1, 3]


# =============================================================================
# Filtering
# =============================================================================

def test_filter_setter_defers_recompute(recorder):
    calls = []

    def tracking_filter(x):
        calls.append(x)
        return is_even(x)

    collection = FlatObservableCollection([1, 2, 3, 4])
    recorder.attach(collection)

    collection.filter_function = tracking_filter
    collection.sort_compare_function = lambda a, b: b - a

    assert calls == []
    assert recorder.events == [(CHANGE,), (FILTER_CHANGE,), (CHANGE,), (SORT_CHANGE,)]

    assert collection.length == 2
    assert list(collection) == [4, 2]
    # one rebuild for both settings
    assert calls == [1, 2, 3, 4]


def test_setting_same_filter_is_silent(recorder):
    collection = FlatObservableCollection([1, 2], filter_function=is_even)
    recorder.attach(collection)
    collection.filter_function = is_even
    assert recorder.events == []


def test_filtered_lookup_hides_excluded_items():
    collection = FlatObservableCollection([1, 2, 3], filter_function=is_even)
    assert collection.get_item_index(2) == 0
    assert collection.get_item_index(3) == NOT_FOUND
    # contains() answers for the raw source
    assert collection.contains(3)
    assert 3 in collection
    assert not collection.contains(5)


def test_clearing_filter_restores_raw_view():
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    assert collection.length == 1
    collection.filter_function = None
    assert list(collection) == [1, 2, 3]
    assert collection.length == 3


def test_filtered_add_after_last_visible_item(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    assert list(collection) == [2]
    recorder.attach(collection)

    collection.add_item_at(4, 1)

    assert list(collection) == [2, 4]
    assert raw.index(4) > raw.index(2)
    assert recorder.events == [(CHANGE,), (ADD_ITEM, 1)]


def test_filtered_add_before_visible_item_translates_to_raw_index():
    raw = [1, 2, 3, 4]
    collection = FlatObservableCollection(raw, filter_function=is_even)

    collection.add_item_at(6, 1)

    assert raw == [1, 2, 3, 6, 4]
    assert list(collection) == [2, 6, 4]


def test_filtered_out_add_emits_nothing(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.length
    recorder.attach(collection)

    collection.add_item_at(5, 0)

    assert raw == [1, 5, 2, 3]
    assert list(collection) == [2]
    assert recorder.events == []


def test_filtered_remove_also_removes_from_raw(recorder):
    raw = [1, 2, 3, 4]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.length
    recorder.attach(collection)

    assert collection.remove_item_at(1) == 4

    assert raw == [1, 2, 3]
    assert list(collection) == [2]
    assert recorder.events == [(CHANGE,), (REMOVE_ITEM, 1)]


def test_remove_item_ignores_hidden_items(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.length
    recorder.attach(collection)

    collection.remove_item(3)
    assert raw == [1, 2, 3]
    assert recorder.events == []

    collection.remove_item(2)
    assert raw == [1, 3]
    assert recorder.names() == [CHANGE, REMOVE_ITEM]


def test_replace_that_fails_filter_is_a_removal(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.length
    recorder.attach(collection)

    collection.set_item_at(5, 0)

    assert raw == [1, 5, 3]
    assert list(collection) == []
    assert recorder.events == [(CHANGE,), (REMOVE_ITEM, 0)]


def test_replace_that_passes_filter_stays_in_place(recorder):
    raw = [1, 2, 3, 4]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.length
    recorder.attach(collection)

    collection.set_item_at(8, 0)

    assert raw == [1, 8, 3, 4]
    assert list(collection) == [8, 4]
    assert recorder.events == [(REPLACE_ITEM, 0), (CHANGE,)]


def test_filter_invariant_holds_after_mutations():
    collection = FlatObservableCollection(list(range(10)), filter_function=is_even)
    collection.add_item_at(11, 2)
    collection.add_item_at(12, 0)
    collection.remove_item_at(1)
    collection.set_item_at(13, 0)
    collection.push(14)

    visible = list(collection)
    assert all(is_even(x) for x in visible)
    assert sorted(visible) == sorted(x for x in collection.data if is_even(x))


def test_refresh_picks_up_external_state(recorder):
    threshold = {"min": 0}
    raw = [1, 5, 10]
    collection = FlatObservableCollection(raw, filter_function=lambda x: x >= threshold["min"])
    assert collection.length == 3

    threshold["min"] = 5
    assert collection.length == 3

    recorder.attach(collection)
    collection.refresh()
    assert list(collection) == [5, 10]
    assert recorder.events == [(CHANGE,), (FILTER_CHANGE,)]


def test_refresh_is_idempotent(recorder):
    collection = FlatObservableCollection([3, 1, 2], sort_compare_function=ascending)
    recorder.attach(collection)

    collection.refresh()
    first = list(collection)
    first_events = list(recorder.events)
    recorder.clear()

    collection.refresh()
    assert list(collection) == first == [1, 2, 3]
    assert recorder.events == first_events == [(CHANGE,), (SORT_CHANGE,)]


def test_refresh_without_view_is_a_no_op(recorder):
    collection = FlatObservableCollection([1])
    recorder.attach(collection)
    collection.refresh()
    assert recorder.events == []


def test_external_raw_mutation_needs_refresh():
    raw = [1, 2]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    assert list(collection) == [2]
    raw.append(4)
    assert list(collection) == [2]
    collection.refresh()
    assert list(collection) == [2, 4]


def test_failed_rebuild_is_retried_on_next_read():
    broken = {"on": True}

    def flaky_even(x):
        if broken["on"]:
            raise RuntimeError("filter inputs not ready")
        return is_even(x)

    collection = FlatObservableCollection([1, 2, 3, 4])
    collection.filter_function = flaky_even
    with pytest.raises(RuntimeError):
        collection.length

    broken["on"] = False
    assert collection.length == 2
    assert list(collection) == [2, 4]


def test_failed_sort_rebuild_is_retried_on_next_read():
    broken = {"on": True}

    def flaky_ascending(a, b):
        if broken["on"]:
            raise RuntimeError("comparator inputs not ready")
        return ascending(a, b)

    collection = FlatObservableCollection([3, 1, 2], sort_compare_function=flaky_ascending)
    with pytest.raises(RuntimeError):
        collection.get_item_at(0)

    broken["on"] = False
    assert list(collection) == [1, 2, 3]


# =============================================================================
# Sorting
# =============================================================================

def test_sorted_view_leaves_raw_order():
    raw = [3, 1, 2]
    collection = FlatObservableCollection(raw, sort_compare_function=ascending)
    assert list(collection) == [1, 2, 3]
    assert raw == [3, 1, 2]
    assert collection.get_item_index(3) == 2


def test_sorted_add_goes_to_sorted_position(recorder):
    raw = [5, 1, 3]
    collection = FlatObservableCollection(raw, sort_compare_function=ascending)
    collection.length
    recorder.attach(collection)

    collection.add_item_at(4, 0)

    assert list(collection) == [1, 3, 4, 5]
    assert recorder.events == [(CHANGE,), (ADD_ITEM, 2)]


def test_equal_items_insert_before_existing_equals():
    collection = FlatObservableCollection(sort_compare_function=lambda a, b: 0)
    a, b = Item("A"), Item("B")

    collection.push(a)
    collection.push(b)

    assert list(collection) == [b, a]


def test_sort_invariant_after_mutations():
    collection = FlatObservableCollection([9, 4, 7], sort_compare_function=ascending)
    collection.push(1)
    collection.unshift(8)
    collection.set_item_at(10, 0)
    collection.remove_item_at(1)
    collection.add_all([6, 2])

    visible = list(collection)
    assert all(ascending(a, b) <= 0 for a, b in zip(visible, visible[1:]))


def test_sorted_replace_keeps_original_index_payload(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw, sort_compare_function=ascending)
    collection.length
    recorder.attach(collection)

    collection.set_item_at(10, 0)

    assert list(collection) == [2, 3, 10]
    assert raw == [10, 2, 3]
    assert recorder.events == [(REPLACE_ITEM, 0), (CHANGE,)]


def test_filtered_and_sorted_replace_keeps_sort_order():
    collection = FlatObservableCollection(
        [4, 2, 6, 3], filter_function=is_even, sort_compare_function=ascending
    )
    assert list(collection) == [2, 4, 6]

    collection.set_item_at(8, 0)

    assert list(collection) == [4, 6, 8]


# =============================================================================
# Updates, bulk operations, identity
# =============================================================================

def test_update_events_carry_no_structural_change(recorder):
    calls = []
    collection = FlatObservableCollection([1, 2], filter_function=lambda x: calls.append(x) or True)
    collection.length
    calls.clear()
    recorder.attach(collection)

    collection.update_item_at(1)
    collection.update_all()

    assert recorder.events == [(UPDATE_ITEM, 1), (UPDATE_ALL,)]
    assert calls == []


def test_add_all_marks_view_pending(recorder):
    raw = [2]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.length
    recorder.attach(collection)

    collection.add_all([3, 4, 6])

    assert raw == [2, 3, 4, 6]
    assert recorder.events == [(CHANGE,), (RESET,)]
    assert list(collection) == [2, 4, 6]


def test_add_all_at_translates_visible_index():
    raw = [1, 2, 3, 4]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.add_all_at([10, 11], 1)
    assert raw == [1, 2, 3, 10, 11, 4]
    assert list(collection) == [2, 10, 4]


def test_add_all_with_nothing_is_silent(recorder):
    collection = FlatObservableCollection([1])
    recorder.attach(collection)
    collection.add_all([])
    assert recorder.events == []


def test_reset_keeps_raw_object(recorder):
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw, sort_compare_function=lambda a, b: b - a)
    assert list(collection) == [3, 2, 1]
    recorder.attach(collection)

    collection.reset([7, 9, 8])

    assert collection.data is raw
    assert raw == [7, 9, 8]
    assert list(collection) == [9, 8, 7]
    assert recorder.events == [(CHANGE,), (RESET,)]


def test_remove_all_with_filter_keeps_hidden_items(recorder):
    raw = [1, 2, 3, 4]
    collection = FlatObservableCollection(raw, filter_function=is_even)
    collection.length
    recorder.attach(collection)

    collection.remove_all()

    assert raw == [1, 3]
    assert collection.length == 0
    assert recorder.events == [(CHANGE,), (REMOVE_ALL,)]

    recorder.clear()
    collection.remove_all()
    assert recorder.events == []


def test_remove_all_without_filter_clears_raw():
    raw = [1, 2, 3]
    collection = FlatObservableCollection(raw)
    collection.remove_all()
    assert raw == []


def test_lookup_is_by_identity_for_objects():
    a1, a2 = Item("a"), Item("a")
    collection = FlatObservableCollection([a1])
    assert collection.get_item_index(a1) == 0
    assert collection.get_item_index(a2) == NOT_FOUND
    assert not collection.contains(a2)


def test_lookup_is_by_value_for_numbers():
    big = 10 ** 12
    collection = FlatObservableCollection([big + 0])
    assert collection.get_item_index(int(str(big))) == 0
    assert collection.get_item_index(True) == NOT_FOUND


# =============================================================================
# Disposal & config
# =============================================================================

def test_dispose_visits_every_raw_item_in_raw_order():
    raw = [3, 1, 2, 5]
    collection = FlatObservableCollection(
        raw, filter_function=lambda x: x > 2, sort_compare_function=ascending
    )
    assert list(collection) == [3, 5]

    disposed = []
    collection.dispose(disposed.append)

    assert disposed == [3, 1, 2, 5]
    assert collection.filter_function is None


def test_handler_errors_propagate_with_strict_config(strict_config):
    collection = FlatObservableCollection([1], config=strict_config)

    def broken(index):
        raise RuntimeError("renderer failed")

    collection.connect(ADD_ITEM, broken)
    with pytest.raises(RuntimeError):
        collection.push(2)


def test_log_events_config_logs_signals(caplog):
    collection = FlatObservableCollection([1], config=CollectionConfig(log_events=True))
    with caplog.at_level(logging.DEBUG, logger='uikit.core.signal'):
        collection.push(2)
    assert "SIGNAL: add_item(1)" in caplog.text
