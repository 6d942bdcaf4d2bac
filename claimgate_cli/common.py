"""
Helpers shared by CLI commands: exit codes, argument parsing into engine
types, engine construction and output.
"""

from __future__ import annotations

import json
from argparse import ArgumentParser, Namespace
from typing import Any, Iterable

from pydantic import ValidationError

from core.claims.engine import ClaimEngine
from core.config.runtime import RuntimeConfig
from core.crypto.hashing import digest_from_hex
from core.schemas.claims import CandidateItem, CandidateKind


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_REJECTED = 2


class CLIUsageError(Exception):
    """Bad command-line input; printed without a traceback."""


def add_candidate_args(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--kind", "-k",
        type=str,
        choices=[k.value for k in CandidateKind],
        default=CandidateKind.ADDRESS.value,
        help="Kind of candidate item (default: address)",
    )
    parser.add_argument(
        "value",
        type=str,
        help="Candidate value: 0x address, token id (decimal or 0x), or 0x bytes32",
    )


def add_proof_args(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--proof", "-p",
        type=str,
        nargs="*",
        default=[],
        help="Sibling digests, bottom-up (0x + 64 hex each)",
    )


def add_output_args(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )


def parse_candidate(args: Namespace) -> CandidateItem:
    try:
        return CandidateItem(kind=args.kind, value=args.value)
    except ValidationError as e:
        raise CLIUsageError(f"Invalid {args.kind}: {e.errors()[0]['msg']}") from e


def parse_digests(values: Iterable[str], what: str = "proof") -> list[bytes]:
    digests = []
    for i, value in enumerate(values):
        try:
            digests.append(digest_from_hex(value.lower()))
        except ValueError as e:
            raise CLIUsageError(f"Invalid {what}[{i}]: {e}") from e
    return digests


def runtime_config(args: Namespace) -> RuntimeConfig:
    """The config loaded by main(), with --state forcing the file store."""
    config: RuntimeConfig = args.runtime_config
    state = getattr(args, "state", None)
    if state:
        config.store.backend = "file"
        config.store.path = state
    return config


def open_engine(args: Namespace, *, require_state: bool = True) -> ClaimEngine:
    """Engine over the configured store; stateful commands need a file store."""
    config = runtime_config(args)
    if require_state and config.store.backend != "file":
        raise CLIUsageError(
            "This command needs persistent state: pass --state FILE "
            "or configure store.backend=file"
        )
    return ClaimEngine.from_config(config)


def emit(args: Namespace, data: dict[str, Any], lines: Iterable[str]) -> None:
    """Print `data` as JSON with --json, otherwise the human-readable lines."""
    if getattr(args, "json", False):
        print(json.dumps(data, indent=2, default=str))
    else:
        for line in lines:
            print(line)
