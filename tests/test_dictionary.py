"""Tests for the Dict cache container."""

from __future__ import annotations

import pytest

from pterolink.dictionary import Dict
from pterolink.errors import CapacityExceededError, LimitAlreadySetError


def make(*pairs: tuple[str, int]) -> Dict[str, int]:
    return Dict(pairs)


class TestLimit:
    """Tests for the write-once capacity limit."""

    def test_unlimited_by_default(self):
        d = make(("a", 1))
        assert d.limit == 0
        assert not d.is_limited()

    def test_set_limit_once(self):
        d: Dict[str, int] = Dict()
        d.set_limit(2)
        with pytest.raises(LimitAlreadySetError, match="Cannot override a set limit."):
            d.set_limit(5)
        assert d.limit == 2

    def test_set_limit_zero_still_locks(self):
        d: Dict[str, int] = Dict()
        d.set_limit(0)
        with pytest.raises(LimitAlreadySetError):
            d.set_limit(3)

    def test_new_key_over_limit_raises(self):
        d: Dict[str, int] = Dict()
        d.set_limit(2)
        d["a"] = 1
        d.set("b", 2)
        assert d.is_limited()
        with pytest.raises(CapacityExceededError):
            d["c"] = 3
        assert list(d) == ["a", "b"]

    def test_overwrite_existing_key_when_full(self):
        d: Dict[str, int] = Dict()
        d.set_limit(1)
        d["a"] = 1
        d["a"] = 2
        assert d["a"] == 2

    def test_update_respects_limit(self):
        d: Dict[str, int] = Dict()
        d.set_limit(1)
        with pytest.raises(CapacityExceededError):
            d.update({"a": 1, "b": 2})


class TestPositional:
    """Tests for first/last/random."""

    def test_first_and_last(self):
        d = make(("a", 1), ("b", 2), ("c", 3))
        assert d.first() == 1
        assert d.first(2) == [1, 2]
        assert d.last() == 3
        assert d.last(2) == [2, 3]
        assert d.first_key() == "a"
        assert d.last_key(1) == ["c"]

    def test_empty(self):
        d: Dict[str, int] = Dict()
        assert d.first() is None
        assert d.last() is None
        assert d.random() is None
        assert d.first(3) == []
        assert d.last(3) == []

    def test_amount_past_size_truncates(self):
        d = make(("a", 1), ("b", 2))
        assert d.first(5) == [1, 2]
        assert d.last(5) == [1, 2]
        assert sorted(d.random(5)) == [1, 2]

    def test_random_has_no_duplicates(self):
        d = make(*((str(i), i) for i in range(10)))
        picked = d.random(10)
        assert sorted(picked) == list(range(10))

    def test_non_positive_amount(self):
        d = make(("a", 1))
        assert d.first(0) == []
        assert d.last(-1) == []
        assert d.random(0) == []


class TestTransformations:
    """Tests for the query and set helpers."""

    def test_filter_and_find(self):
        d = make(("a", 1), ("b", 2), ("c", 3))
        odd = d.filter(lambda v, _: v % 2 == 1)
        assert isinstance(odd, Dict)
        assert list(odd.items()) == [("a", 1), ("c", 3)]
        assert d.find(lambda v, k: k == "b") == 2
        assert d.find(lambda v, _: v > 10) is None

    def test_part(self):
        d = make(("a", 1), ("b", 2), ("c", 3))
        passed, failed = d.part(lambda v, _: v > 1)
        assert list(passed) == ["b", "c"]
        assert list(failed) == ["a"]
        assert len(d) == 3

    def test_sweep_deletes_in_place(self):
        d = make(("a", 1), ("b", 2), ("c", 3))
        assert d.sweep(lambda v, _: v >= 2) == 2
        assert list(d) == ["a"]

    def test_reduce_is_a_left_fold(self):
        d = make(("a", 1), ("b", 2), ("c", 3))
        assert d.reduce(lambda acc, v, k: acc + k * v, "") == "abbccc"

    def test_some_every_has(self):
        d = make(("a", 1), ("b", 2))
        assert d.some(lambda v, _: v == 2)
        assert not d.every(lambda v, _: v == 2)
        assert d.has_any("x", "a")
        assert not d.has_all("a", "x")
        assert d.has("b")

    def test_map(self):
        d = make(("a", 1), ("b", 2))
        assert d.map(lambda v, k: f"{k}{v}") == ["a1", "b2"]

    def test_join_later_wins_and_is_unlimited(self):
        d: Dict[str, int] = Dict()
        d.set_limit(1)
        d["a"] = 1
        joined = d.join({"a": 10, "b": 2}, {"c": 3})
        assert dict(joined) == {"a": 10, "b": 2, "c": 3}
        assert joined.limit == 0
        assert dict(d) == {"a": 1}

    def test_difference_is_symmetric(self):
        d = make(("a", 1), ("b", 2))
        diff = d.difference({"b": 20, "c": 3})
        assert dict(diff) == {"a": 1, "c": 3}

    def test_difference_with_itself_is_empty(self):
        d = make(("a", 1), ("b", 2))
        assert len(d.difference(d)) == 0
        assert len(d.difference(d.clone())) == 0

    def test_part_matches_filter(self):
        d = make(("a", 1), ("b", 2), ("c", 3), ("d", 4))
        even = lambda v, _: v % 2 == 0  # noqa: E731
        passed, failed = d.part(even)
        assert dict(passed) == dict(d.filter(even))
        assert dict(failed) == dict(d.filter(lambda v, k: not even(v, k)))
        assert list(failed) == ["a", "c"]

    def test_clone_is_shallow_and_ordered(self):
        inner = {"x": 1}
        d: Dict[str, dict] = Dict([("b", inner), ("a", {})])
        c = d.clone()
        assert list(c) == ["b", "a"]
        assert c["b"] is inner
        assert c is not d

    def test_delete(self):
        d = make(("a", 1))
        assert d.delete("a")
        assert not d.delete("a")
