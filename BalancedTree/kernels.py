import numpy as np
from numba import njit



# Node pool layout (one slot per node, shared index across arrays):
#     left[i]   -> slot of the left child   (0 = absent)
#     right[i]  -> slot of the right child  (0 = absent)
#     height[i] -> height of the subtree rooted at i (leaf = 1)
#     Slot 0 is the absent subtree: left[0] = right[0] = height[0] = 0.
#     Keys are arbitrary Python objects and live outside the pool.



# Deeper than any AVL tree over 2**63 nodes (1.44 * log2(n + 2) < 92).
MAX_DEPTH = 128



# ---------- JIT-Compiled Height / Balance Accounting ----------
@njit(inline="always")
def update_height(
    left:   np.ndarray,
    right:  np.ndarray,
    height: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Recompute height[index] from its children and return it.

    height(index) = max(height(index->left), height(index->right)) + 1
    """

    new_height    = max(height[left[index]], height[right[index]]) + 1
    height[index] = new_height

    return new_height

@njit(inline="always")
def balance_factor(
    left:   np.ndarray,
    right:  np.ndarray,
    height: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Height of the left subtree minus height of the right subtree.
    The absent subtree (slot 0) has a balance factor of 0.
    """

    return np.int64(height[left[index]]) - np.int64(height[right[index]])



# ---------- JIT-Compiled Rotation Primitives ----------
@njit(inline="always")
def right_rotation( # SRR: Single Right Rotation
    left:   np.ndarray,
    right:  np.ndarray,
    height: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Perform a single right rotation (SRR) around the node at `index`.

    The left child of the target node becomes the new root of the subtree,
    the target node becomes its right child, and the left child's former
    right subtree is reattached as the target's new left subtree.

    Only the heights of the two nodes whose subtree sets changed are
    recomputed: the old root first (it is now the lower node), then the
    new root.

    :param left: Left-child slots of the node pool
    :type left: np.ndarray
    :param right: Right-child slots of the node pool
    :type right: np.ndarray
    :param height: Subtree heights of the node pool
    :type height: np.ndarray
    :param index: Slot of the subtree root to rotate
    :type index: np.int64
    :return: Slot of the new root of the rotated subtree
    :rtype: np.int64
    """

    pivot = left[index]

    # Rotate
    left[index]  = right[pivot]
    right[pivot] = index

    # Update heights
    update_height(left, right, height, index)
    update_height(left, right, height, pivot)

    return pivot # new root

@njit(inline="always")
def left_rotation( # SLR: Single Left Rotation
    left:   np.ndarray,
    right:  np.ndarray,
    height: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Perform a single left rotation (SLR) around the node at `index`.

    This rotation is applied when a node becomes right-heavy.
    The right child of the target node becomes the new root of the subtree,
    and the target node becomes the left child of that node.

    :param left: Left-child slots of the node pool
    :type left: np.ndarray
    :param right: Right-child slots of the node pool
    :type right: np.ndarray
    :param height: Subtree heights of the node pool
    :type height: np.ndarray
    :param index: Slot of the subtree root to rotate
    :type index: np.int64
    :return: Slot of the new root after rotation
    :rtype: np.int64
    """

    pivot = right[index]

    # Rotate
    right[index] = left[pivot]
    left[pivot]  = index

    # Update heights
    update_height(left, right, height, index)
    update_height(left, right, height, pivot)

    return pivot # new root

@njit(inline="always")
def rebalance_removal(
    left:   np.ndarray,
    right:  np.ndarray,
    height: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Restore the AVL property at `index` after a removal below it.

    A removal can unbalance either side regardless of where the key was,
    so the rotation case is chosen from the balance factor of the heavy
    child of this node:

    - LL: bf > 1  and bf(left)  >= 0 -> right rotation
    - LR: bf > 1  and bf(left)  <  0 -> left-rotate left, then right rotation
    - RR: bf < -1 and bf(right) <= 0 -> left rotation
    - RL: bf < -1 and bf(right) >  0 -> right-rotate right, then left rotation

    Returns the slot of the (possibly new) subtree root.
    """

    update_height(left, right, height, index)
    bf = balance_factor(left, right, height, index)

    if bf > 1: # L
        if balance_factor(left, right, height, left[index]) < 0: # LR
            left[index] = left_rotation(left, right, height, left[index])

        return right_rotation(left, right, height, index)

    elif bf < -1: # R
        if balance_factor(left, right, height, right[index]) > 0: # RL
            right[index] = right_rotation(left, right, height, right[index])

        return left_rotation(left, right, height, index)

    return np.int64(index)



# ---------- JIT-Compiled Traversal / Verification ----------
@njit(boundscheck=False)
def inorder_indices( # LVR
    left:         np.ndarray,
    right:        np.ndarray,
    root:         np.int64,
    current_size: np.int64

) -> np.ndarray:

    """
    Extracts the slots of all reachable nodes in ascending key order.
    Key lookup is left to the caller since keys are Python objects.
    """

    traverse = np.zeros(current_size, dtype=np.int64)
    stack    = np.zeros(MAX_DEPTH, dtype=np.int64)

    current_index = root
    stack_idx     = 0
    traverse_idx  = 0

    while traverse_idx < current_size:

        while current_index != 0:
            stack[stack_idx] = current_index
            stack_idx += 1
            current_index = left[current_index]

        if stack_idx > 0:
            stack_idx -= 1
            current_index = stack[stack_idx]

            traverse[traverse_idx] = current_index
            traverse_idx += 1

            current_index = right[current_index]

        else:
            break

    return traverse[:traverse_idx]

@njit
def verify_structure(
    left:   np.ndarray,
    right:  np.ndarray,
    height: np.ndarray,
    root:   np.int64

) -> np.int64:

    """
    Walk every node reachable from `root` and check its bookkeeping.

    For each node the stored height must equal 1 + max(children heights)
    and the balance factor must lie in [-1, 1].

    Returns:
        np.int64: The number of reachable nodes, or -1 as soon as a node
                  violates one of the checks (or the walk exceeds MAX_DEPTH).
    """

    if height[0] != 0 or left[0] != 0 or right[0] != 0:
        return np.int64(-1)

    stack = np.zeros(MAX_DEPTH, dtype=np.int64)

    current_index = root
    stack_idx     = 0
    count         = 0

    while True:

        while current_index != 0:
            if stack_idx >= MAX_DEPTH:
                return np.int64(-1)

            stack[stack_idx] = current_index
            stack_idx += 1
            current_index = left[current_index]

        if stack_idx == 0:
            break

        stack_idx -= 1
        current_index = stack[stack_idx]

        expected = max(height[left[current_index]], height[right[current_index]]) + 1
        bf       = np.int64(height[left[current_index]]) - np.int64(height[right[current_index]])

        if height[current_index] != expected or bf > 1 or bf < -1:
            return np.int64(-1)

        count += 1
        current_index = right[current_index]

    return np.int64(count)



# --------- Utils ---------
def compile_kernels() -> bool:
    """
    Minimally triggers JIT compilation of every kernel on a three-node pool.
    """

    left   = np.array([0, 0, 1, 0], dtype=np.int64)
    right  = np.array([0, 0, 0, 0], dtype=np.int64)
    height = np.array([0, 1, 2, 0], dtype=np.int64)

    root = right_rotation(left, right, height, np.int64(2))
    root = left_rotation(left, right, height, root)
    root = rebalance_removal(left, right, height, root)

    update_height(left, right, height, root)
    balance_factor(left, right, height, root)
    inorder_indices(left, right, root, np.int64(2))

    return verify_structure(left, right, height, root) == 2
