"""Block-range and batching utilities.

Functions
---------
- iter_chunks: split an inclusive [start, end] block range into steps.
- iter_batches: split a sequence into bounded, order-preserving batches.
- fetch_grouped: fetch once per distinct key in bounded waves and broadcast
  each result back to every item sharing that key.

All block intervals are inclusive on both ends: [start, end].
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator, Hashable, MutableMapping, Sequence
from typing import TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def iter_chunks(a: int, b: int, step: int) -> Generator[tuple[int, int], None, None]:
    """Yield inclusive [start, end] block ranges of size at most `step`."""
    x = a
    while x <= b:
        y = min(b, x + step - 1)
        yield (x, y)
        x = y + 1


def iter_batches(items: Sequence[T], size: int) -> Generator[Sequence[T], None, None]:
    """Yield consecutive slices of at most `size` items, preserving order."""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    for i in range(0, len(items), size):
        yield items[i : i + size]


async def fetch_grouped(
    items: Sequence[T],
    key: Callable[[T], K],
    fetch: Callable[[K], Awaitable[V]],
    *,
    batch_size: int,
    cache: MutableMapping[K, V] | None = None,
    on_missing: Callable[[K], Exception] | None = None,
) -> list[V]:
    """Group `items` by `key`, fetch each distinct key once and join results in item order.

    Parameters
    ----------
    items : Sequence[T]
        Requests, in the order results must be returned.
    key : Callable[[T], K]
        Derives the lookup key of an item.
    fetch : Callable[[K], Awaitable[V]]
        Performs one external lookup.
    batch_size : int
        Max lookups awaited together. Each batch is a barrier: either every
        lookup of the batch succeeds or the first failure propagates.
    cache : MutableMapping[K, V] | None
        Results already known; keys found here are not fetched again. New
        results are stored into it.
    on_missing : Callable[[K], Exception] | None
        Builds the exception raised when a key has no result at join time
        (defaults to `KeyError`).

    Returns
    -------
    list[V]
        One result per item, same order as `items`.
    """
    known: MutableMapping[K, V] = {} if cache is None else cache
    keys = [key(it) for it in items]
    missing = [k for k in dict.fromkeys(keys) if k not in known]

    for batch in iter_batches(missing, batch_size):
        results = await asyncio.gather(*(fetch(k) for k in batch))
        known.update(zip(batch, results))

    out: list[V] = []
    for k in keys:
        if k not in known:
            raise on_missing(k) if on_missing else KeyError(k)
        out.append(known[k])
    return out
