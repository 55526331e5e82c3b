"""
Tests for eventflow.events.registry — Listener storage and ordering.

Covers:
- Lazy sort with SortState tag
- Stable ordering (priority desc, registration order)
- Removal semantics and empty-name cleanup
- Duplicate policy
"""

import pytest

from eventflow.events.errors import (
    DuplicateListenerError,
    InvalidListenerError,
    InvalidPriorityError,
)
from eventflow.events.registry import ListenerRegistry, SortState


def make_listener(name):
    def listener(event):
        return None

    listener.__qualname__ = name
    return listener


@pytest.fixture
def registry():
    return ListenerRegistry()


# ══════════════════════════════════════════════════════════════
# SORTING
# ══════════════════════════════════════════════════════════════

class TestSorting:
    def test_descending_priority(self, registry):
        low, high, mid = make_listener("low"), make_listener("high"), make_listener("mid")
        registry.add("x", low, 0)
        registry.add("x", high, 10)
        registry.add("x", mid, 5)
        assert registry.listeners("x") == [high, mid, low]

    def test_ties_keep_registration_order(self, registry):
        a, b, c = make_listener("a"), make_listener("b"), make_listener("c")
        registry.add("x", a, 1)
        registry.add("x", b, 1)
        registry.add("x", c, 1)
        assert registry.listeners("x") == [a, b, c]

    def test_ties_stable_across_resorts(self, registry):
        a, b, c, d = (make_listener(n) for n in "abcd")
        registry.add("x", a, 0)
        registry.add("x", b, 5)
        registry.listeners("x")
        registry.add("x", c, 0)
        registry.add("x", d, 5)
        assert registry.listeners("x") == [b, d, a, c]

    def test_negative_priorities_run_last(self, registry):
        late, normal = make_listener("late"), make_listener("normal")
        registry.add("x", late, -10)
        registry.add("x", normal)
        assert registry.listeners("x") == [normal, late]


class TestSortState:
    def test_add_marks_dirty(self, registry):
        registry.add("x", make_listener("a"))
        assert registry.state_of("x") is SortState.DIRTY

    def test_lookup_marks_sorted(self, registry):
        registry.add("x", make_listener("a"))
        registry.listeners("x")
        assert registry.state_of("x") is SortState.SORTED

    def test_remove_marks_dirty(self, registry):
        a, b = make_listener("a"), make_listener("b")
        registry.add("x", a)
        registry.add("x", b)
        registry.listeners("x")
        registry.remove("x", a)
        assert registry.state_of("x") is SortState.DIRTY

    def test_unknown_name_has_no_state(self, registry):
        assert registry.state_of("missing") is None

    def test_states_are_per_name(self, registry):
        registry.add("x", make_listener("a"))
        registry.add("y", make_listener("b"))
        registry.listeners("x")
        assert registry.state_of("x") is SortState.SORTED
        assert registry.state_of("y") is SortState.DIRTY


# ══════════════════════════════════════════════════════════════
# MUTATION
# ══════════════════════════════════════════════════════════════

class TestRemoval:
    def test_remove_returns_true_when_found(self, registry):
        a = make_listener("a")
        registry.add("x", a)
        assert registry.remove("x", a) is True

    def test_remove_unknown_is_noop(self, registry):
        assert registry.remove("x", make_listener("a")) is False

    def test_remove_last_drops_name(self, registry):
        a = make_listener("a")
        registry.add("x", a)
        registry.remove("x", a)
        assert "x" not in registry.names()
        assert registry.state_of("x") is None
        assert not registry.has("x")

    def test_remove_earliest_duplicate_only(self, registry):
        a = make_listener("a")
        registry.add("x", a, 1)
        registry.add("x", a, 2)
        registry.remove("x", a)
        assert registry.count("x") == 1
        assert registry.priority_of("x", a) == 2

    def test_duplicate_lookup_independent_of_sort_state(self, registry):
        a = make_listener("a")
        registry.add("x", a, 0)
        registry.add("x", a, 10)
        assert registry.state_of("x") is SortState.DIRTY
        assert registry.priority_of("x", a) == 0

        registry.listeners("x")
        assert registry.state_of("x") is SortState.SORTED
        assert registry.priority_of("x", a) == 0

        registry.remove("x", a)
        assert registry.priority_of("x", a) == 10

    def test_remove_entry_by_identity(self, registry):
        a = make_listener("a")
        first = registry.add("x", a, 1)
        second = registry.add("x", a, 2)
        assert registry.remove_entry("x", second) is True
        assert registry.entries("x") == [first]

    def test_clear_one_name(self, registry):
        registry.add("x", make_listener("a"))
        registry.add("y", make_listener("b"))
        registry.clear("x")
        assert registry.names() == frozenset({"y"})

    def test_clear_all(self, registry):
        registry.add("x", make_listener("a"))
        registry.clear()
        assert not registry.has()


class TestAddValidation:
    def test_non_callable_rejected(self, registry):
        with pytest.raises(InvalidListenerError, match="must be callable"):
            registry.add("x", "not-a-function")
        assert not registry.has("x")

    @pytest.mark.parametrize("priority", [2.7, True, "10", None])
    def test_non_int_priority_rejected(self, registry, priority):
        with pytest.raises(InvalidPriorityError, match="must be an int"):
            registry.add("x", make_listener("a"), priority)
        assert not registry.has("x")

    def test_negative_priority_accepted(self, registry):
        a = make_listener("a")
        registry.add("x", a, -5)
        assert registry.priority_of("x", a) == -5

    def test_duplicates_allowed_by_default(self, registry):
        a = make_listener("a")
        registry.add("x", a)
        registry.add("x", a)
        assert registry.count("x") == 2

    def test_duplicates_rejected_when_disabled(self):
        registry = ListenerRegistry(allow_duplicates=False)
        a = make_listener("a")
        registry.add("x", a)
        with pytest.raises(DuplicateListenerError, match="already registered"):
            registry.add("x", a, 10)
        assert registry.count("x") == 1

    def test_same_listener_on_other_name_is_not_duplicate(self):
        registry = ListenerRegistry(allow_duplicates=False)
        a = make_listener("a")
        registry.add("x", a)
        registry.add("y", a)
        assert registry.names() == frozenset({"x", "y"})

    def test_sequence_is_monotonic(self, registry):
        first = registry.add("x", make_listener("a"))
        second = registry.add("y", make_listener("b"))
        assert second.sequence > first.sequence


# ══════════════════════════════════════════════════════════════
# LOOKUP
# ══════════════════════════════════════════════════════════════

class TestLookup:
    def test_unknown_name_returns_empty(self, registry):
        assert registry.listeners("nope") == []
        assert registry.entries("nope") == []

    def test_listeners_returns_copy(self, registry):
        a = make_listener("a")
        registry.add("x", a)
        snapshot = registry.listeners("x")
        snapshot.clear()
        assert registry.listeners("x") == [a]

    def test_priority_of(self, registry):
        a = make_listener("a")
        registry.add("x", a, 7)
        assert registry.priority_of("x", a) == 7
        assert registry.priority_of("x", make_listener("b")) is None
        assert registry.priority_of("y", a) is None

    def test_all_listeners(self, registry):
        a, b = make_listener("a"), make_listener("b")
        registry.add("x", a)
        registry.add("y", b)
        assert registry.all_listeners() == {"x": [a], "y": [b]}

    def test_has_global(self, registry):
        assert not registry.has()
        registry.add("x", make_listener("a"))
        assert registry.has()
