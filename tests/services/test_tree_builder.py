"""Unit tests for building task forests from the flat collection."""

from __future__ import annotations

import pytest
from conftest import make_task

from tasktree.exceptions import IntegrityError
from tasktree.services.tree_builder import build_tree, flatten, iter_subtree_ids


def _ids(forest):
    return [node.task.id for node in forest]


class TestBuildTree:
    def test_empty_input(self):
        assert build_tree([]) == []

    def test_nests_children_under_parents(self):
        tasks = [
            make_task(1),
            make_task(2, parent_id=1),
            make_task(3, parent_id=2),
            make_task(4),
        ]
        forest = build_tree(tasks)

        assert _ids(forest) == [1, 4]
        assert _ids(forest[0].children) == [2]
        assert _ids(forest[0].children[0].children) == [3]
        assert forest[1].children == []

    def test_levels_match_depth(self):
        tasks = [make_task(1), make_task(2, parent_id=1), make_task(3, parent_id=2)]
        levels = {node.task.id: node.level for node in flatten(build_tree(tasks))}
        assert levels == {1: 0, 2: 1, 3: 2}

    def test_levels_do_not_depend_on_input_order(self):
        tasks = [make_task(3, parent_id=2), make_task(2, parent_id=1), make_task(1)]
        levels = {node.task.id: node.level for node in flatten(build_tree(tasks))}
        assert levels == {1: 0, 2: 1, 3: 2}

    def test_children_keep_input_order(self):
        tasks = [make_task(1), make_task(5, parent_id=1), make_task(2, parent_id=1)]
        assert _ids(build_tree(tasks)[0].children) == [5, 2]

    def test_missing_parent_becomes_root(self):
        tasks = [make_task(2, parent_id=99), make_task(3, parent_id=2)]
        forest = build_tree(tasks)
        assert _ids(forest) == [2]
        assert forest[0].level == 0
        assert _ids(forest[0].children) == [3]

    def test_every_task_appears_once(self):
        tasks = [make_task(i, parent_id=(i - 1 if i % 3 else None)) for i in range(1, 10)]
        seen = [node.task.id for node in flatten(build_tree(tasks))]
        assert sorted(seen) == list(range(1, 10))

    def test_cycle_is_reported(self):
        tasks = [make_task(1), make_task(2, parent_id=3), make_task(3, parent_id=2)]
        with pytest.raises(IntegrityError, match=r"\[2, 3\]"):
            build_tree(tasks)

    def test_deep_chain_does_not_recurse(self):
        tasks = [make_task(1)] + [make_task(i, parent_id=i - 1) for i in range(2, 3001)]
        nodes = list(flatten(build_tree(tasks)))
        assert len(nodes) == 3000
        assert nodes[-1].level == 2999


class TestFlatten:
    def test_pre_order(self):
        tasks = [
            make_task(1),
            make_task(2, parent_id=1),
            make_task(3, parent_id=2),
            make_task(4, parent_id=1),
            make_task(5),
        ]
        assert [node.task.id for node in flatten(build_tree(tasks))] == [1, 2, 3, 4, 5]


class TestIterSubtreeIds:
    def test_root_first_then_descendants(self):
        tasks = [
            make_task(1),
            make_task(2, parent_id=1),
            make_task(3, parent_id=2),
            make_task(4, parent_id=1),
            make_task(5),
        ]
        assert iter_subtree_ids(tasks, 1) == [1, 2, 4, 3]

    def test_leaf(self):
        assert iter_subtree_ids([make_task(1), make_task(2, parent_id=1)], 2) == [2]

    def test_missing_root(self):
        assert iter_subtree_ids([make_task(1)], 42) == []
