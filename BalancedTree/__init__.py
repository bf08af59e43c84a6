from BalancedTree.AVLTreePool import (
    DEFAULT_CAPACITY,
    AVLTree,
    build_avl,
    fill_avl,
    remove_avl,
    warmup,
)
from BalancedTree.ordering import Compare, natural_order, reverse_order

version = '0.1.0'
