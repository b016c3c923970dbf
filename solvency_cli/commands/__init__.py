"""
CLI command modules.
"""

from solvency_cli.commands import params, verify

__all__ = ["params", "verify"]
