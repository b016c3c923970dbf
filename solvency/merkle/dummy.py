"""
Random entries for benchmarks and tests, standing in for a real
liabilities snapshot.
"""
from __future__ import annotations

import random
import string
from typing import Optional

from solvency.merkle.entry import Entry

USERNAME_LENGTH = 10
MIN_BALANCE = 1000
MAX_BALANCE = 90000

_ALPHANUMERIC = string.ascii_letters + string.digits


def generate_dummy_entries(
    n_users: int,
    n_currencies: int,
    seed: Optional[int] = None,
) -> list[Entry]:
    """
    Generate `n_users` entries with random 10-character alphanumeric
    usernames and balances in [MIN_BALANCE, MAX_BALANCE).

    A seed makes the output reproducible.
    """
    if n_currencies < 1:
        raise ValueError("n_currencies must be greater than 0")
    rng = random.Random(seed)
    entries = []
    for _ in range(n_users):
        username = "".join(rng.choice(_ALPHANUMERIC) for _ in range(USERNAME_LENGTH))
        balances = [rng.randrange(MIN_BALANCE, MAX_BALANCE) for _ in range(n_currencies)]
        entries.append(Entry(username, balances, n_currencies))
    return entries


__all__ = ["generate_dummy_entries"]
