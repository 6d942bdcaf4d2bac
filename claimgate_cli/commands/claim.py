"""
CLI Claim Commands

Submit a claim against a commitment stored in a state file, or ask
whether an identity has already claimed.

Usage:
    claimgate claim --commitment cm_1 --kind address 0xabc... --proof 0x... --state s.json
    claimgate status --commitment cm_1 --identity address:0xabc... --state s.json
"""

from __future__ import annotations

import json
from argparse import Namespace

from claimgate_cli.common import (
    EXIT_REJECTED,
    EXIT_SUCCESS,
    emit,
    open_engine,
    parse_candidate,
    parse_digests,
)
from core.schemas.claims import ClaimAuthorized


def claim_cmd(args: Namespace) -> int:
    engine = open_engine(args)
    item = parse_candidate(args)
    proof = parse_digests(args.proof)

    result = engine.submit(args.commitment, item, proof)

    if isinstance(result, ClaimAuthorized):
        emit(args, result.model_dump(mode="json"), [
            f"AUTHORIZED: {result.identity} on {result.commitment_id} (epoch {result.epoch})",
            f"  metadata: {json.dumps(result.metadata, sort_keys=True)}",
        ])
        return EXIT_SUCCESS

    emit(args, result.model_dump(mode="json"), [
        f"REJECTED: {result.reason.value}",
        f"  {result.message}",
    ])
    return EXIT_REJECTED


def status_cmd(args: Namespace) -> int:
    engine = open_engine(args)
    consumed = engine.is_consumed(args.commitment, args.identity)
    emit(
        args,
        {"commitment_id": args.commitment, "identity": args.identity, "consumed": consumed},
        [f"{args.identity}: {'claimed' if consumed else 'unclaimed'} on {args.commitment}"],
    )
    return EXIT_SUCCESS
