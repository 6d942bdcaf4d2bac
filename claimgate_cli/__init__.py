"""
Claimgate CLI

Command-line interface for the membership claim engine.

Usage:
    python -m claimgate_cli leaf --kind address 0xabc...
    python -m claimgate_cli verify --kind address 0xabc... --root 0x... --proof 0x... 0x...
    python -m claimgate_cli commitment create --root 0x... --state state.json --as ops
    python -m claimgate_cli claim --commitment cm_1 --kind address 0xabc... --proof 0x... --state state.json
    python -m claimgate_cli serve --port 8000
"""

__version__ = "0.1.0"
