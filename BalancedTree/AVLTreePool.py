import numpy as np
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from BalancedTree.kernels import (
    balance_factor,
    compile_kernels,
    inorder_indices,
    left_rotation,
    rebalance_removal,
    right_rotation,
    update_height,
    verify_structure,
)
from BalancedTree.log import get_logger
from BalancedTree.ordering import Compare, natural_order



DEFAULT_CAPACITY = 16

_logger = get_logger(__name__)



# --------- AVLTree API ---------
class AVLTree:
    """
    Generic AVL Tree over any totally ordered keys, backed by a node pool.

    Child links and heights are kept in NumPy arrays so that the balancing
    kernels (rotations, height accounting, removal rebalancing) run as
    JIT-compiled code. Keys stay Python objects and are compared with an
    injectable three-way comparison, so the tree places no constraint on the
    key type beyond a total order.

    Slot 0 of the pool is the absent subtree. Freed slots are recycled
    through a free list and the pool doubles when it runs out of slots.

    Attributes:
        size (int): Number of keys stored in the tree.
        root (int): Slot of the current root node (0 if empty).
        capacity (int): Number of node slots currently allocated.
    """

    def __init__(
        self,
        compare:  Optional[Compare] = None,
        capacity: int = DEFAULT_CAPACITY

    ) -> None:

        if compare is not None and not callable(compare):
            raise TypeError(
                f"compare must be a three-way comparison function, not {compare!r}"
            )

        if capacity < 0:
            raise ValueError(
                f"The capacity value must be non-negative, not {capacity}"
            )

        slots = capacity + 1

        self.size                  = 0
        self.root                  = 0
        self._compare              = compare if compare is not None else natural_order
        self._keys: List[Any]      = [None] * slots
        self._left                 = np.zeros(slots, dtype=np.int64)
        self._right                = np.zeros(slots, dtype=np.int64)
        self._height               = np.zeros(slots, dtype=np.int64)
        self._free                 = 1
        self._free_list: List[int] = []

    @property
    def capacity(self) -> int:
        return len(self._keys) - 1

    @property
    def height(self) -> int:
        return int(self._height[self.root])

    @property
    def root_key(self) -> Any:
        return self._keys[self.root]

    @property
    def root_info(self) -> Tuple[Any, int, int]:
        """(root key, root height, balance factor at the root)."""
        return (
            self._keys[self.root],
            int(self._height[self.root]),
            int(balance_factor(self._left, self._right, self._height, self.root))
        )

    # ---------- Node pool ----------
    def _grow(self) -> None:
        extra = len(self._keys)

        self._keys.extend([None] * extra)
        self._left   = np.concatenate((self._left,   np.zeros(extra, dtype=np.int64)))
        self._right  = np.concatenate((self._right,  np.zeros(extra, dtype=np.int64)))
        self._height = np.concatenate((self._height, np.zeros(extra, dtype=np.int64)))

        _logger.debug('node pool grown to {} slots', self.capacity)

    def _allocate(
        self,
        key: Any

    ) -> int:

        if self._free_list:
            index = self._free_list.pop()
        else:
            if self._free == len(self._keys):
                self._grow()
            index = self._free
            self._free += 1

        self._keys[index]   = key
        self._left[index]   = 0
        self._right[index]  = 0
        self._height[index] = 1

        return index

    def _release(
        self,
        index: int

    ) -> None:

        self._keys[index]   = None
        self._left[index]   = 0
        self._right[index]  = 0
        self._height[index] = 0
        self._free_list.append(index)

    # ---------- Insertion ----------
    def insert(
        self,
        key: Any

    ) -> None:
        """Inserts a key with auto-rebalancing. Duplicate keys are ignored."""

        self.root = self._insert(self.root, key)

    def _insert(
        self,
        index: int,
        key:   Any

    ) -> int:

        """
        Insert `key` below the node at `index` and rebalance on the way back.

        Returns the slot of the (possibly rotated) subtree root, which the
        caller re-attaches in place of `index`.
        """

        if index == 0:
            self.size += 1
            return self._allocate(key)

        order = self._compare(key, self._keys[index])

        if order < 0:
            self._left[index] = self._insert(int(self._left[index]), key)
        elif order > 0:
            self._right[index] = self._insert(int(self._right[index]), key)

        update_height(self._left, self._right, self._height, index)
        bf = balance_factor(self._left, self._right, self._height, index)

        if bf > 1: # L
            child = int(self._left[index])
            side  = self._compare(key, self._keys[child])

            if side < 0: # LL
                _logger.debug('LL rotation at {!r}', self._keys[index])
                return int(right_rotation(self._left, self._right, self._height, index))

            if side > 0: # LR
                _logger.debug('LR rotation at {!r}', self._keys[index])
                self._left[index] = left_rotation(self._left, self._right, self._height, child)
                return int(right_rotation(self._left, self._right, self._height, index))

        elif bf < -1: # R
            child = int(self._right[index])
            side  = self._compare(key, self._keys[child])

            if side > 0: # RR
                _logger.debug('RR rotation at {!r}', self._keys[index])
                return int(left_rotation(self._left, self._right, self._height, index))

            if side < 0: # RL
                _logger.debug('RL rotation at {!r}', self._keys[index])
                self._right[index] = right_rotation(self._left, self._right, self._height, child)
                return int(left_rotation(self._left, self._right, self._height, index))

        return index

    # ---------- Deletion ----------
    def delete(
        self,
        key: Any

    ) -> bool:
        """Deletes a key and stabilizes the tree. Returns True if it was found and removed."""

        count     = self.size
        self.root = self._delete(self.root, key)

        return count != self.size

    def _delete(
        self,
        index: int,
        key:   Any

    ) -> int:

        """
        Remove `key` from the subtree rooted at `index`.

        A node with two children takes over the largest key of its left
        subtree, which is then removed from that subtree instead; only nodes
        with at most one child are ever unlinked and released. Every node on
        the way back up is rebalanced independently.
        """

        if index == 0:
            return 0

        order = self._compare(key, self._keys[index])

        if order < 0:
            self._left[index] = self._delete(int(self._left[index]), key)

        elif order > 0:
            self._right[index] = self._delete(int(self._right[index]), key)

        else:
            lt, rt = int(self._left[index]), int(self._right[index])

            if lt == 0 or rt == 0:
                self.size -= 1
                self._release(index)
                return lt if lt != 0 else rt

            predecessor        = self._rightmost(lt)
            self._keys[index]  = self._keys[predecessor]
            self._left[index]  = self._delete(lt, self._keys[index])

        new_root = int(rebalance_removal(self._left, self._right, self._height, index))

        if new_root != index:
            _logger.debug(
                'rebalanced {!r} after removal, new subtree root {!r}',
                self._keys[index], self._keys[new_root]
            )

        return new_root

    # ---------- Search ----------
    def _find(
        self,
        key: Any

    ) -> int:
        """Locates a key using iterative BST search. Returns the node slot or 0 if not found."""

        current_index = self.root
        while current_index != 0:
            order = self._compare(key, self._keys[current_index])

            if order == 0:
                return current_index

            elif order < 0:
                current_index = int(self._left[current_index])

            else:
                current_index = int(self._right[current_index])

        return 0

    def search(
        self,
        key: Any

    ) -> bool:

        return self._find(key) != 0

    def search_many(
        self,
        keys: Iterable[Any]

    ) -> np.ndarray:
        """Membership test for a batch of keys, as a boolean array in input order."""

        return np.fromiter((self._find(key) != 0 for key in keys), dtype=np.bool_)

    def _leftmost(
        self,
        index: int

    ) -> int:

        while self._left[index] != 0:
            index = int(self._left[index])

        return index

    def _rightmost(
        self,
        index: int

    ) -> int:

        while self._right[index] != 0:
            index = int(self._right[index])

        return index

    def minimum(self) -> Any:
        """Smallest key in the tree, or None if the tree is empty."""

        if self.root == 0:
            return None

        return self._keys[self._leftmost(self.root)]

    def maximum(self) -> Any:
        """Largest key in the tree, or None if the tree is empty."""

        if self.root == 0:
            return None

        return self._keys[self._rightmost(self.root)]

    def replace(
        self,
        old_key: Any,
        new_key: Any

    ) -> bool:
        """Replaces a key by removal and re-insertion to maintain AVL properties."""

        if self.delete(old_key):
            self.insert(new_key)
            return True

        return False

    # ---------- Traversal / Inspection ----------
    def inorder(self) -> Iterator[Any]:
        """
        Yields every key in ascending order.

        Each call starts a fresh traversal. The node order is taken when
        iteration starts, so the tree must not be modified while iterating.
        """

        for index in inorder_indices(self._left, self._right, self.root, self.size):
            yield self._keys[index]

    def is_valid(self) -> bool:
        """
        Checks height bookkeeping, AVL balance, size and key order.
        Intended for tests and debugging; it walks the whole tree.
        """

        if verify_structure(self._left, self._right, self._height, self.root) != self.size:
            return False

        previous = None
        for position, key in enumerate(self.inorder()):
            if position > 0 and self._compare(previous, key) >= 0:
                return False
            previous = key

        return True

    def render(self) -> str:
        """
        Text picture of the tree: right subtree above, left subtree below,
        four spaces of indentation per level.
        """

        lines: List[str] = []
        self._render(self.root, 0, lines)

        return "".join(lines)

    def _render(
        self,
        index: int,
        level: int,
        lines: List[str]

    ) -> None:

        if index == 0:
            return

        self._render(int(self._right[index]), level + 1, lines)
        lines.append(" " * (4 * level) + str(self._keys[index]) + "\n")
        self._render(int(self._left[index]), level + 1, lines)

    def __contains__(self, key: Any) -> bool:
        return self.search(key)

    def __iter__(self) -> Iterator[Any]:
        return self.inorder()

    def __len__(self) -> int:
        return self.size

    def __str__(self) -> str:
        return "AVLTree(size=" + str(self.size) + ", root=" + repr(self.root_key) + ", height=" + str(self.height) + ")"



# --------- Utils ---------
def warmup() -> bool:
    """
    Minimally triggers JIT compilation for core AVL operations.
    """

    compile_kernels()

    avl = AVLTree(capacity=4)
    for x in (30, 20, 10, 40, 50, 25):
        avl.insert(x)

    avl.search(20)
    avl.search_many([10, 25, 99])
    avl.delete(10)

    _logger.info('kernels compiled')

    return avl.is_valid()

def build_avl(
    keys:     Iterable[Any],
    compare:  Optional[Compare] = None,
    capacity: Optional[int] = None

) -> AVLTree:

    """
    Builds and populates an AVLTree from an iterable of keys.

    Args:
        keys (Iterable): Keys to insert; duplicates are ignored.
        compare (Compare, optional): Three-way comparison, natural order by default.
        capacity (int, optional): Initial slot count. Defaults to len(keys)
            when keys is sized, DEFAULT_CAPACITY otherwise.

    Returns:
        AVLTree: A balanced tree containing every distinct key.
    """

    if capacity is None:
        capacity = len(keys) if hasattr(keys, "__len__") else DEFAULT_CAPACITY

    avl = AVLTree(compare, capacity)
    fill_avl(avl, keys)

    return avl

def fill_avl(
    avl:  AVLTree,
    keys: Iterable[Any]

) -> None:

    """
    Populates an existing AVLTree with multiple keys.
    """

    for key in keys:
        avl.insert(key)

def remove_avl(
    avl:  AVLTree,
    keys: Iterable[Any]

) -> int:
    """
    Perform batch removal of multiple keys from the AVL tree.

    Keys that are not in the tree are silently skipped.

    Returns:
        int: The number of keys that were actually removed.
    """

    return sum(1 for key in keys if avl.delete(key))
