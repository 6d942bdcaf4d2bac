"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    claimgate leaf --kind K VALUE [--json]
    claimgate verify --kind K VALUE --root HEX [--proof HEX ...] [--json]
    claimgate commitment create --root HEX [--metadata JSON] --state FILE --as CALLER
    claimgate commitment list|show|activate|deactivate|replace ...
    claimgate claim --commitment ID --kind K VALUE [--proof HEX ...] --state FILE
    claimgate status --commitment ID --identity IDENTITY --state FILE
    claimgate serve [--host HOST] [--port PORT] [--state FILE]
    claimgate config --show

Environment Variables:
    CLAIMGATE_MAX_PROOF_DEPTH   Longest accepted proof (default: 32)
    CLAIMGATE_HASH_ALGORITHM    sha256 or keccak256 (default: sha256)
    CLAIMGATE_STORE_BACKEND     memory or file
    CLAIMGATE_STORE_PATH        State file for the file backend
    CLAIMGATE_CONFIGURERS       Comma-separated names allowed to configure
    CLAIMGATE_LOG_LEVEL         Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from claimgate_cli.commands import claim, commitment, leaf, serve, verify
from claimgate_cli.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    CLIUsageError,
    add_candidate_args,
    add_output_args,
    add_proof_args,
)
from core.config.runtime import load_runtime_config
from core.schemas.errors import ClaimGateException


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _add_state_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--state", "-s",
        type=str,
        default=None,
        help="JSON state file (default: store.path from config)",
    )


def _add_caller_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--as",
        dest="caller",
        type=str,
        required=True,
        help="Configurer name checked against the configured policy",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="claimgate",
        description="Claimgate CLI - Merkle membership claims with at-most-once consumption.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./claimgate.json or ~/.config/claimgate/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- leaf command ---
    leaf_parser = subparsers.add_parser(
        "leaf",
        help="Print the leaf digest of a candidate item",
    )
    add_candidate_args(leaf_parser)
    add_output_args(leaf_parser)
    leaf_parser.set_defaults(func=leaf.leaf_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof against a root offline",
    )
    add_candidate_args(verify_parser)
    verify_parser.add_argument("--root", "-r", type=str, required=True, help="Merkle root (0x hex)")
    add_proof_args(verify_parser)
    add_output_args(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- commitment commands ---
    commitment_parser = subparsers.add_parser(
        "commitment",
        help="Manage commitments",
    )
    commitment_sub = commitment_parser.add_subparsers(dest="commitment_action")

    c_create = commitment_sub.add_parser("create", help="Publish a new root")
    c_create.add_argument("--root", "-r", type=str, required=True, help="Merkle root (0x hex)")
    c_create.add_argument("--metadata", "-m", type=str, default=None, help="JSON object payload")
    _add_state_arg(c_create)
    _add_caller_arg(c_create)
    add_output_args(c_create)
    c_create.set_defaults(func=commitment.create_cmd)

    c_replace = commitment_sub.add_parser("replace", help="Retire a commitment and publish its successor")
    c_replace.add_argument("commitment_id", type=str)
    c_replace.add_argument("--root", "-r", type=str, required=True, help="New Merkle root (0x hex)")
    c_replace.add_argument("--metadata", "-m", type=str, default=None, help="JSON object payload")
    _add_state_arg(c_replace)
    _add_caller_arg(c_replace)
    add_output_args(c_replace)
    c_replace.set_defaults(func=commitment.replace_cmd)

    c_list = commitment_sub.add_parser("list", help="List commitments")
    c_list.add_argument("--active-only", action="store_true", default=False)
    _add_state_arg(c_list)
    add_output_args(c_list)
    c_list.set_defaults(func=commitment.list_cmd)

    c_show = commitment_sub.add_parser("show", help="Show a commitment and its claims")
    c_show.add_argument("commitment_id", type=str)
    _add_state_arg(c_show)
    add_output_args(c_show)
    c_show.set_defaults(func=commitment.show_cmd)

    for name, func in (("activate", commitment.activate_cmd), ("deactivate", commitment.deactivate_cmd)):
        p = commitment_sub.add_parser(name, help=f"{name.capitalize()} a commitment")
        p.add_argument("commitment_id", type=str)
        _add_state_arg(p)
        _add_caller_arg(p)
        add_output_args(p)
        p.set_defaults(func=func)

    commitment_parser.set_defaults(
        func=lambda args: commitment_parser.print_help() or EXIT_SUCCESS
    )

    # --- claim command ---
    claim_parser = subparsers.add_parser(
        "claim",
        help="Claim / fulfill against a commitment",
    )
    claim_parser.add_argument("--commitment", type=str, required=True, help="Commitment id")
    add_candidate_args(claim_parser)
    add_proof_args(claim_parser)
    _add_state_arg(claim_parser)
    add_output_args(claim_parser)
    claim_parser.set_defaults(func=claim.claim_cmd)

    # --- status command ---
    status_parser = subparsers.add_parser(
        "status",
        help="Whether an identity has claimed under a commitment",
    )
    status_parser.add_argument("--commitment", type=str, required=True, help="Commitment id")
    status_parser.add_argument("--identity", type=str, required=True, help="e.g. address:0xabc...")
    _add_state_arg(status_parser)
    add_output_args(status_parser)
    status_parser.set_defaults(func=claim.status_cmd)

    # --- serve command ---
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    _add_state_arg(serve_parser)
    serve_parser.set_defaults(func=serve.serve_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser("config", help="Show the effective configuration")
    config_parser.add_argument("--show", action="store_true", default=True)
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Print the effective configuration (file + environment)."""
    print(json.dumps(args.runtime_config.to_dict(), indent=2))
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code (0=success, 1=error, 2=claim rejected / proof invalid)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_runtime_config(args.config)
    except (OSError, ValueError, ClaimGateException) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(level=args.log_level or config.log_level)
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (CLIUsageError, ClaimGateException) as e:
        if args.debug:
            traceback.print_exc()
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
