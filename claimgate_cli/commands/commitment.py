"""
CLI Commitment Commands

Manage commitments in a state file.

Usage:
    claimgate commitment create --root 0x... [--metadata '{"amount": 100}'] --state s.json --as ops
    claimgate commitment list --state s.json [--active-only]
    claimgate commitment show cm_1 --state s.json
    claimgate commitment activate cm_1 --state s.json --as ops
    claimgate commitment deactivate cm_1 --state s.json --as ops
    claimgate commitment replace cm_1 --root 0x... --state s.json --as ops
"""

from __future__ import annotations

import json
from argparse import Namespace
from typing import Any

from claimgate_cli.common import (
    EXIT_SUCCESS,
    CLIUsageError,
    emit,
    open_engine,
    parse_digests,
)
from core.schemas.claims import Commitment


def _parse_metadata(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CLIUsageError(f"--metadata is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise CLIUsageError("--metadata must be a JSON object")
    return value


def _describe(c: Commitment) -> list[str]:
    return [
        f"{c.commitment_id} (epoch {c.epoch}) {'active' if c.active else 'inactive'}",
        f"  root:     {c.root}",
        f"  metadata: {json.dumps(c.metadata, sort_keys=True)}",
    ]


def create_cmd(args: Namespace) -> int:
    engine = open_engine(args)
    root = parse_digests([args.root], what="root")[0]
    commitment_id = engine.create_commitment(
        root, _parse_metadata(args.metadata), caller=args.caller
    )
    c = engine.get_commitment(commitment_id)
    emit(args, c.model_dump(mode="json"), [f"Created {commitment_id}", *_describe(c)[1:]])
    return EXIT_SUCCESS


def replace_cmd(args: Namespace) -> int:
    engine = open_engine(args)
    root = parse_digests([args.root], what="root")[0]
    new_id = engine.replace_commitment(
        args.commitment_id, root, _parse_metadata(args.metadata), caller=args.caller
    )
    c = engine.get_commitment(new_id)
    emit(
        args,
        {"replaced": args.commitment_id, "commitment": c.model_dump(mode="json")},
        [f"Replaced {args.commitment_id} with {new_id}", *_describe(c)[1:]],
    )
    return EXIT_SUCCESS


def list_cmd(args: Namespace) -> int:
    engine = open_engine(args)
    commitments = engine.list_commitments(active_only=args.active_only)
    lines: list[str] = []
    for c in commitments:
        lines.extend(_describe(c))
    emit(
        args,
        {"commitments": [c.model_dump(mode="json") for c in commitments]},
        lines or ["No commitments"],
    )
    return EXIT_SUCCESS


def show_cmd(args: Namespace) -> int:
    engine = open_engine(args)
    c = engine.get_commitment(args.commitment_id)
    claims = engine.claims_for(args.commitment_id)
    data = c.model_dump(mode="json")
    data["claims"] = [r.model_dump(mode="json") for r in claims]
    lines = _describe(c) + [f"  claims:   {len(claims)}"]
    lines += [f"    - {r.identity}" for r in claims]
    emit(args, data, lines)
    return EXIT_SUCCESS


def activate_cmd(args: Namespace) -> int:
    return _set_active(args, True)


def deactivate_cmd(args: Namespace) -> int:
    return _set_active(args, False)


def _set_active(args: Namespace, active: bool) -> int:
    engine = open_engine(args)
    c = engine.set_active(args.commitment_id, active, caller=args.caller)
    emit(args, c.model_dump(mode="json"), _describe(c))
    return EXIT_SUCCESS


__all__ = [
    "create_cmd",
    "replace_cmd",
    "list_cmd",
    "show_cmd",
    "activate_cmd",
    "deactivate_cmd",
]
