import math
from BalancedTree import AVLTree, build_avl
from hypothesis import given, settings  # type: ignore
from hypothesis.strategies import (  # type: ignore
    booleans,
    integers,
    lists,
    text,
    tuples,
)
import unittest


operations = lists(tuples(booleans(), integers(min_value=-40, max_value=40)))


class TestTreeProperties(unittest.TestCase):
    @given(operations)
    @settings(max_examples=200, deadline=None)
    def test_matches_set_model(self, ops) -> None:
        tree = AVLTree(capacity=4)
        model = set()
        for is_insert, key in ops:
            if is_insert:
                tree.insert(key)
                model.add(key)
            else:
                self.assertEqual(key in model, tree.delete(key))
                model.discard(key)
            self.assertTrue(tree.is_valid())
            self.assertEqual(len(model), tree.size)
        self.assertEqual(sorted(model), list(tree.inorder()))

    @given(lists(integers(), unique=True))
    @settings(deadline=None)
    def test_height_bound(self, keys) -> None:
        tree = build_avl(keys)
        self.assertLessEqual(tree.height, 1.44 * math.log2(len(keys) + 2))

    @given(lists(integers()), integers())
    @settings(deadline=None)
    def test_duplicate_insert_is_idempotent(self, keys, extra) -> None:
        tree = build_avl(keys + [extra])
        before, height = list(tree), tree.height
        tree.insert(extra)
        self.assertEqual(before, list(tree))
        self.assertEqual(height, tree.height)

    @given(lists(integers(min_value=0, max_value=100)), integers(101, 200))
    @settings(deadline=None)
    def test_absent_delete_changes_nothing(self, keys, absent) -> None:
        tree = build_avl(keys)
        shape = tree.render()
        self.assertFalse(tree.delete(absent))
        self.assertEqual(shape, tree.render())

    @given(lists(integers(), min_size=1, unique=True), integers(min_value=0))
    @settings(deadline=None)
    def test_delete_removes_exactly_one(self, keys, choice) -> None:
        tree = build_avl(keys)
        victim = keys[choice % len(keys)]
        self.assertTrue(tree.delete(victim))
        expected = sorted(keys)
        expected.remove(victim)
        self.assertEqual(expected, list(tree))
        self.assertFalse(tree.search(victim))

    @given(lists(text()))
    @settings(deadline=None)
    def test_string_keys(self, keys) -> None:
        tree = build_avl(keys)
        self.assertEqual(sorted(set(keys)), list(tree))
        self.assertTrue(all(tree.search(key) for key in keys))
