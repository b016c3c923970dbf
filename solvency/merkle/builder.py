"""
Merkle Sum Tree - Builder
Level-synchronous construction of the full node matrix.

Algorithm:
1. Level 0: one leaf per entry. Entries are independent, so leaves are
   hashed in chunks across the worker pool. The empty padding leaf is
   hashed once and reused.
2. Level L (1..depth): pair nodes (2i, 2i + 1) of level L - 1, sum the
   balances exactly, reject any currency above the level bound, hash.
   Pairs are split into chunks across the pool; each level is a barrier,
   level L starts only once level L - 1 is fully materialized.
3. The single node of level `depth` is the root.

A failed build raises BalanceOverflowException and returns no tree.
"""
from __future__ import annotations

import concurrent.futures
import logging
from contextlib import nullcontext
from typing import Any, Callable, Optional, Sequence

from solvency.crypto.hashing import SumTreeHasher, get_hasher
from solvency.merkle.bounds import max_balance_at_level, validate_tree_parameters
from solvency.merkle.entry import Entry
from solvency.merkle.node import Node
from solvency.schemas.errors import BalanceOverflowException


logger = logging.getLogger(__name__)

# Smallest number of items worth shipping to a worker process
MIN_CHUNK = 8

# (pair index, currency, value) of the first bound violation in a chunk
Violation = tuple[int, int, int]


def is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def pad_entries(entries: Sequence[Entry], n_currencies: int) -> list[Entry]:
    """Append empty entries until the count is a power of two."""
    padded = list(entries)
    target = next_power_of_two(len(padded))
    padded.extend(Entry.init_empty(n_currencies) for _ in range(target - len(padded)))
    return padded


def _chunk_ranges(count: int, workers: int, step: int = 1) -> list[tuple[int, int]]:
    """Split [0, count) into contiguous ranges whose starts are multiples of step."""
    if count == 0:
        return []
    if workers <= 1:
        return [(0, count)]
    size = max(MIN_CHUNK, -(-count // (workers * 4)))
    size += (-size) % step
    return [(start, min(start + size, count)) for start in range(0, count, size)]


def make_executor(workers: int):
    if workers > 1:
        return concurrent.futures.ProcessPoolExecutor(max_workers=workers)
    return nullcontext(None)


def _run_chunks(
    executor: Optional[concurrent.futures.Executor],
    fn: Callable[..., Any],
    *arg_lists: Sequence[Any],
) -> list[Any]:
    if executor is None:
        return [fn(*args) for args in zip(*arg_lists)]
    return list(executor.map(fn, *arg_lists))


def _hash_leaf_chunk(
    hasher: SumTreeHasher,
    records: list[tuple[int, tuple[int, ...]]],
) -> list[Node]:
    return [Node.leaf(identity, balances, hasher) for identity, balances in records]


def _combine_pair_chunk(
    hasher: SumTreeHasher,
    bound: int,
    first_pair: int,
    children: list[Node],
) -> tuple[list[Node], Optional[Violation]]:
    """
    Build the parents of consecutive child pairs.

    Stops at the first pair whose exact balance sum exceeds `bound` and
    reports it instead of raising, so the result crosses process
    boundaries as plain data.
    """
    parents: list[Node] = []
    for k in range(0, len(children), 2):
        left, right = children[k], children[k + 1]
        sums = tuple(l + r for l, r in zip(left.balances, right.balances))
        for currency, value in enumerate(sums):
            if value > bound:
                return parents, (first_pair + k // 2, currency, value)
        parents.append(
            Node(
                hash=hasher.middle_hash(left.hash, left.balances, right.hash, right.balances),
                balances=sums,
            )
        )
    return parents, None


def _overflow(level: int, pair: int, currency: int, value: int, bound: int) -> BalanceOverflowException:
    logger.warning(
        f"Balance overflow at level {level}, node {pair}, currency {currency}: "
        f"{value} > {bound}"
    )
    return BalanceOverflowException(
        f"Aggregate balance {value} of currency {currency} exceeds the "
        f"level {level} bound {bound}",
        level=level,
        currency=currency,
        value=value,
        bound=bound,
    )


def build_leaves(
    entries: Sequence[Entry],
    hasher: SumTreeHasher | None = None,
    workers: int = 0,
    executor: Optional[concurrent.futures.Executor] = None,
) -> list[Node]:
    """
    Hash every entry into its leaf node.

    Args:
        entries: Entries in leaf order
        hasher: Hash aggregator (defaults to Poseidon for len(balances))
        workers: Worker process count; 0 or 1 hashes in this process
        executor: Existing executor to reuse instead of creating one

    Returns:
        Leaves, index-aligned with entries
    """
    if not entries:
        return []
    n_currencies = entries[0].n_currencies
    hasher = hasher or get_hasher(n_currencies)

    leaves: list[Optional[Node]] = [None] * len(entries)
    pending: list[int] = []
    empty_leaf: Optional[Node] = None
    for index, entry in enumerate(entries):
        if entry.n_currencies != n_currencies:
            raise ValueError(
                f"Entry {index} holds {entry.n_currencies} balances, expected {n_currencies}"
            )
        if entry.is_empty:
            if empty_leaf is None:
                empty_leaf = entry.compute_leaf(hasher)
            leaves[index] = empty_leaf
        else:
            pending.append(index)

    ranges = _chunk_ranges(len(pending), workers)
    records = [
        [(entries[i].identity, entries[i].balances) for i in pending[start:end]]
        for start, end in ranges
    ]
    with (nullcontext(executor) if executor is not None else make_executor(workers)) as pool:
        chunks = _run_chunks(pool, _hash_leaf_chunk, [hasher] * len(records), records)

    for (start, _end), chunk in zip(ranges, chunks):
        for offset, leaf in enumerate(chunk):
            leaves[pending[start + offset]] = leaf
    return leaves  # type: ignore[return-value]


def build_tree(
    leaves: Sequence[Node],
    byte_width: int,
    hasher: SumTreeHasher | None = None,
    workers: int = 0,
    executor: Optional[concurrent.futures.Executor] = None,
) -> list[list[Node]]:
    """
    Build every level above the leaves.

    Args:
        leaves: Level 0; the count must be a power of two
        byte_width: Leaf balance width used for the per-level bounds
        hasher: Hash aggregator (defaults to Poseidon for the leaf width)
        workers: Worker process count; 0 or 1 builds in this process
        executor: Existing executor to reuse instead of creating one

    Returns:
        Levels from leaves (index 0) to root (index depth)

    Raises:
        ValueError: If the leaf count is not a power of two
        BalanceOverflowException: If the configuration is unsound or an
            aggregate exceeds its level bound
    """
    if not is_power_of_two(len(leaves)):
        raise ValueError(
            f"Leaf count must be a power of two, got {len(leaves)}"
        )
    depth = len(leaves).bit_length() - 1
    validate_tree_parameters(byte_width, depth)
    hasher = hasher or get_hasher(leaves[0].n_currencies)

    logger.info(
        f"Building Merkle sum tree: {len(leaves)} leaves, depth {depth}, "
        f"byte_width {byte_width}, workers {workers}"
    )

    levels: list[list[Node]] = [list(leaves)]
    with (nullcontext(executor) if executor is not None else make_executor(workers)) as pool:
        for level in range(1, depth + 1):
            children = levels[level - 1]
            bound = max_balance_at_level(byte_width, level)
            ranges = _chunk_ranges(len(children), workers, step=2)

            results = _run_chunks(
                pool,
                _combine_pair_chunk,
                [hasher] * len(ranges),
                [bound] * len(ranges),
                [start // 2 for start, _ in ranges],
                [children[start:end] for start, end in ranges],
            )

            buffer: list[Optional[Node]] = [None] * (len(children) // 2)
            for (start, _end), (parents, violation) in zip(ranges, results):
                if violation is not None:
                    pair, currency, value = violation
                    raise _overflow(level, pair, currency, value, bound)
                buffer[start // 2:start // 2 + len(parents)] = parents

            levels.append(buffer)  # type: ignore[arg-type]
            logger.debug(f"Level {level} built: {len(buffer)} nodes, bound {bound}")

    logger.info(f"Merkle sum tree built: root {levels[-1][0].hash:#066x}")
    return levels


def rebuild_path(
    levels: Sequence[Sequence[Node]],
    index: int,
    leaf: Node,
    byte_width: int,
    hasher: SumTreeHasher | None = None,
) -> list[list[Node]]:
    """
    Replace one leaf and recompute its ancestors, without touching `levels`.

    Returns:
        New level matrix sharing every untouched node with the original

    Raises:
        BalanceOverflowException: If an updated ancestor exceeds its bound
    """
    hasher = hasher or get_hasher(leaf.n_currencies)
    new_levels = [list(level) for level in levels]
    new_levels[0][index] = leaf
    current = index
    for level in range(1, len(new_levels)):
        pair = current // 2
        bound = max_balance_at_level(byte_width, level)
        parents, violation = _combine_pair_chunk(
            hasher, bound, pair, new_levels[level - 1][2 * pair:2 * pair + 2]
        )
        if violation is not None:
            _, currency, value = violation
            raise _overflow(level, pair, currency, value, bound)
        new_levels[level][pair] = parents[0]
        current = pair
    return new_levels


__all__ = [
    "is_power_of_two",
    "next_power_of_two",
    "pad_entries",
    "build_leaves",
    "build_tree",
    "rebuild_path",
    "make_executor",
]
