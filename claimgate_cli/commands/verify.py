"""
CLI Verify Command

Check a candidate item and proof against a root, offline. No state is
read or written.

Usage:
    claimgate verify --kind address 0xabc... --root 0x... --proof 0x... 0x... [--json]
"""

from __future__ import annotations

import logging
from argparse import Namespace

from claimgate_cli.common import (
    EXIT_REJECTED,
    EXIT_SUCCESS,
    emit,
    parse_candidate,
    parse_digests,
    runtime_config,
)
from core.claims.encoding import LeafEncoder
from core.crypto.hashing import get_hasher, to_hex
from core.merkle.verifier import MerkleVerifier
from core.schemas.errors import MerkleVerificationException


logger = logging.getLogger(__name__)


def verify_cmd(args: Namespace) -> int:
    config = runtime_config(args)
    hasher = get_hasher(config.engine.hash_algorithm)
    item = parse_candidate(args)
    root = parse_digests([args.root], what="root")[0]
    proof = parse_digests(args.proof)

    leaf = LeafEncoder(hasher).encode(item)
    verifier = MerkleVerifier(max_depth=config.engine.max_proof_depth, hasher=hasher)

    failure = None
    try:
        verifier.check(leaf, proof, root)
    except MerkleVerificationException as e:
        failure = e.reason
        logger.debug(f"Verification failed: {e.message}")

    data = {
        "ok": failure is None,
        "identity": item.identity(),
        "leaf": to_hex(leaf),
        "root": to_hex(root),
        "depth": len(proof),
        "failure": failure,
    }
    emit(args, data, [
        f"{'VALID' if failure is None else 'INVALID'}: {item.identity()}",
        f"  leaf:  {data['leaf']}",
        f"  root:  {data['root']}",
        f"  depth: {len(proof)}" + (f" ({failure})" if failure else ""),
    ])
    return EXIT_SUCCESS if failure is None else EXIT_REJECTED
