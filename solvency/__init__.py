"""
Merkle sum tree for proof of solvency.

An exchange commits to its total liabilities per currency with a single
root; every user receives an inclusion proof showing their balances were
counted in that total.
"""

__version__ = "0.1.0"
