"""
CLI Leaf Command

Print the leaf digest and identity of a candidate item, as the engine
computes them. Useful when building trees off-line.

Usage:
    claimgate leaf --kind token_id 42 [--json]
"""

from __future__ import annotations

from argparse import Namespace

from claimgate_cli.common import EXIT_SUCCESS, emit, parse_candidate, runtime_config
from core.claims.encoding import LeafEncoder, encode_candidate
from core.crypto.hashing import get_hasher, to_hex


def leaf_cmd(args: Namespace) -> int:
    config = runtime_config(args)
    item = parse_candidate(args)
    encoder = LeafEncoder(get_hasher(config.engine.hash_algorithm))
    leaf = encoder.encode(item)

    data = {
        "kind": item.kind.value,
        "identity": item.identity(),
        "encoding": to_hex(encode_candidate(item)),
        "leaf": to_hex(leaf),
        "hash_algorithm": config.engine.hash_algorithm,
    }
    emit(args, data, [
        f"identity: {data['identity']}",
        f"leaf:     {data['leaf']}",
    ])
    return EXIT_SUCCESS
