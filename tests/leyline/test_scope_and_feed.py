"""Tests for leyline Scope, Variable and InMemoryDataFeed."""

import pytest
import torch

from scry.leyline import DataFeed, InMemoryDataFeed, Scope, ScopeLike


class TestScope:

    def test_find_missing_returns_none(self):
        assert Scope().find_var("nope") is None

    def test_var_creates_once(self):
        scope = Scope()
        first = scope.var("w")
        assert scope.var("w") is first
        assert scope.find_var("w") is first
        assert "w" in scope

    def test_child_scope_falls_through_to_parent(self):
        root = Scope()
        root.var("w").get_tensor().set(torch.ones(1, 1))
        child = root.new_scope()

        assert child.find_var("w") is root.find_var("w")
        assert child.local_var_names() == []

    def test_child_shadows_parent(self):
        root = Scope()
        root.var("x")
        child = root.new_scope()
        local = child.var("x")

        assert child.find_var("x") is local
        assert root.find_var("x") is not local

    def test_get_tensor_starts_uninitialized(self):
        tensor = Scope().var("x").get_tensor()
        assert not tensor.is_initialized

    def test_scope_satisfies_protocol(self):
        assert isinstance(Scope(), ScopeLike)


class TestInMemoryDataFeed:

    def test_walks_batches(self):
        feed = InMemoryDataFeed(["a", "b", "c", "d", "e"], batch_size=2)

        assert feed.next() == 2
        assert [feed.get_line_id(i) for i in range(feed.get_cur_batch_size())] == ["a", "b"]
        assert feed.next() == 2
        assert feed.next() == 1
        assert feed.get_line_id(0) == "e"
        assert feed.next() == 0

    def test_set_batch(self):
        feed = InMemoryDataFeed([], batch_size=1)
        feed.set_batch(["x", "y y"])

        assert feed.get_cur_batch_size() == 2
        assert feed.get_line_id(1) == "y y"

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError, match="batch_size must be positive"):
            InMemoryDataFeed(["a"], batch_size=0)

    def test_feed_satisfies_protocol(self):
        assert isinstance(InMemoryDataFeed(["a"], 1), DataFeed)
