"""Sparse-checkout pruning of a working tree."""
from tagsnap.sparse.pruner import is_covered, is_hidden, prune, read_sparse_entries

__all__ = [
    "is_covered",
    "is_hidden",
    "prune",
    "read_sparse_entries",
]
