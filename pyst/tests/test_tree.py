"""Unit tests for the stack tree model."""

import random
from typing import List

import pytest
import yaml

from pyst.errors import BranchNotTracked, StError, TreeCorrupted
from pyst.tree import RemoteMetadata, StackTree, TrackedBranch


def linear_tree(*names: str) -> StackTree:
    tree = StackTree.fresh("main", "origin")
    parent = "main"
    for name in names:
        tree.insert(name, parent)
        parent = name
    return tree


def random_tree(seed: int, size: int = 25) -> StackTree:
    rng = random.Random(seed)
    tree = StackTree.fresh("main", "origin")
    names: List[str] = ["main"]
    for i in range(size):
        name = f"b{i}"
        tree.insert(name, rng.choice(names))
        names.append(name)
    return tree


class TestTreeMutations:
    """Tests for insert/delete/reparent."""

    def test_fresh_tree_has_only_trunk(self) -> None:
        tree = StackTree.fresh("main", "upstream")
        assert list(tree.branches) == ["main"]
        assert tree.must_get("main").parent is None
        assert tree.remote_name == "upstream"
        tree.check_invariants()

    def test_insert_links_both_directions(self) -> None:
        tree = linear_tree("A", "B")
        assert tree.must_get("B").parent == "A"
        assert tree.must_get("A").children == ["B"]
        assert tree.must_get("main").children == ["A"]
        tree.check_invariants()

    def test_insert_under_untracked_parent_fails(self) -> None:
        tree = linear_tree("A")
        with pytest.raises(BranchNotTracked):
            tree.insert("B", "missing")

    def test_insert_existing_branch_fails(self) -> None:
        tree = linear_tree("A")
        with pytest.raises(StError):
            tree.insert("A", "main")

    def test_delete_relinks_children_to_grandparent(self) -> None:
        tree = linear_tree("A", "B", "C")
        tree.insert("D", "B")

        tree.delete("B")

        assert "B" not in tree.branches
        assert tree.must_get("C").parent == "A"
        assert tree.must_get("D").parent == "A"
        assert set(tree.must_get("A").children) == {"C", "D"}
        tree.check_invariants()

    def test_delete_leaf(self) -> None:
        tree = linear_tree("A", "B")
        tree.delete("B")
        assert tree.must_get("A").children == []
        tree.check_invariants()

    def test_delete_trunk_refused(self) -> None:
        tree = linear_tree("A")
        with pytest.raises(StError):
            tree.delete("main")

    def test_delete_untracked_fails(self) -> None:
        with pytest.raises(BranchNotTracked):
            linear_tree("A").delete("nope")

    def test_random_deletions_keep_invariants(self) -> None:
        for seed in range(10):
            tree = random_tree(seed)
            rng = random.Random(seed)
            for name in rng.sample([n for n in tree.branches if n != "main"], 10):
                tree.delete(name)
                tree.check_invariants()

    def test_reparent_moves_subtree(self) -> None:
        tree = linear_tree("A", "B", "C")
        tree.reparent("B", "main")

        assert tree.must_get("B").parent == "main"
        assert tree.must_get("A").children == []
        assert set(tree.must_get("main").children) == {"A", "B"}
        assert tree.discover_stack("C") == ["main", "B", "C"]
        tree.check_invariants()

    def test_reparent_onto_descendant_refused(self) -> None:
        tree = linear_tree("A", "B", "C")
        with pytest.raises(StError):
            tree.reparent("A", "C")
        with pytest.raises(StError):
            tree.reparent("A", "A")
        tree.check_invariants()

    def test_reparent_trunk_refused(self) -> None:
        with pytest.raises(StError):
            linear_tree("A").reparent("main", "A")

    def test_clear_remote_metadata(self) -> None:
        tree = linear_tree("A", "B")
        tree.must_get("A").remote = RemoteMetadata(pr_number=1, comment_id=5)
        tree.clear_remote_metadata()
        assert all(b.remote is None for b in tree.branches.values())


class TestDiscoverStack:
    """Tests for stack discovery."""

    def test_linear_stack(self) -> None:
        tree = linear_tree("A", "B")
        assert tree.discover_stack("B") == ["main", "A", "B"]
        assert tree.discover_stack("main") == ["main"]

    def test_untracked_branch(self) -> None:
        with pytest.raises(BranchNotTracked) as exc_info:
            linear_tree("A").discover_stack("other")
        assert exc_info.value.branch == "other"

    def test_missing_ancestor(self) -> None:
        tree = linear_tree("A", "B")
        del tree.branches["A"]
        with pytest.raises(BranchNotTracked):
            tree.discover_stack("B")

    def test_cycle_detected(self) -> None:
        tree = linear_tree("A", "B")
        tree.must_get("A").parent = "B"
        with pytest.raises(TreeCorrupted):
            tree.discover_stack("B")

    def test_every_stack_is_a_parent_chain(self) -> None:
        for seed in range(20):
            tree = random_tree(seed)
            for name in tree.branches:
                stack = tree.discover_stack(name)
                assert stack[0] == "main"
                assert stack[-1] == name
                assert len(stack) == len(set(stack))
                for parent, child in zip(stack, stack[1:]):
                    assert tree.must_get(child).parent == parent
                    assert child in tree.must_get(parent).children


class TestInvariants:
    """Tests for check_invariants."""

    def test_two_roots(self) -> None:
        tree = linear_tree("A")
        tree.branches["orphan"] = TrackedBranch(name="orphan")
        with pytest.raises(TreeCorrupted):
            tree.check_invariants()

    def test_dangling_child(self) -> None:
        tree = linear_tree("A")
        tree.must_get("A").children.append("ghost")
        with pytest.raises(TreeCorrupted):
            tree.check_invariants()

    def test_missing_back_reference(self) -> None:
        tree = linear_tree("A", "B")
        tree.must_get("A").children.clear()
        with pytest.raises(TreeCorrupted):
            tree.check_invariants()

    def test_trunk_with_pull_request(self) -> None:
        tree = linear_tree("A")
        tree.must_get("main").remote = RemoteMetadata(pr_number=3)
        with pytest.raises(TreeCorrupted):
            tree.check_invariants()

    def test_yaml_round_trip(self) -> None:
        tree = linear_tree("A", "B")
        tree.must_get("A").remote = RemoteMetadata(pr_number=7, remote_name="fork", comment_id=99)

        dumped = yaml.safe_dump(tree.model_dump(mode="json"))
        restored = StackTree.model_validate(yaml.safe_load(dumped))

        assert restored == tree
        restored.check_invariants()
