"""
Test fixtures package.

- trees.py: off-line sorted-pair tree building and proofs
- claims.py: engine and allow-list factories

Usage:
    from fixtures import make_allowlist

    def test_something():
        allowlist = make_allowlist()
        result = allowlist.engine.submit(
            allowlist.commitment_id, allowlist.items[0], allowlist.proof_for(0)
        )
"""

from .trees import SortedPairTree, build_tree, build_item_tree

from .claims import (
    CONFIGURER,
    Allowlist,
    make_address,
    make_addresses,
    make_allowlist,
    make_engine,
)

__all__ = [
    # Trees
    "SortedPairTree",
    "build_tree",
    "build_item_tree",
    # Claims
    "CONFIGURER",
    "Allowlist",
    "make_address",
    "make_addresses",
    "make_allowlist",
    "make_engine",
]
