"""
CLI command modules.
"""

from claimgate_cli.commands import leaf, verify, commitment, claim, serve

__all__ = ["leaf", "verify", "commitment", "claim", "serve"]
