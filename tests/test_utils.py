import asyncio
from collections import UserDict

import pytest

from attestind.core.errors import JoinInvariantViolation
from attestind.orchestration.utils import fetch_grouped, iter_batches, iter_chunks


def test_iter_chunks_inclusive() -> None:
    assert list(iter_chunks(0, 10, 4)) == [(0, 3), (4, 7), (8, 10)]
    assert list(iter_chunks(5, 5, 100)) == [(5, 5)]
    assert list(iter_chunks(6, 5, 100)) == []


def test_iter_batches() -> None:
    assert [list(b) for b in iter_batches(list(range(7)), 3)] == [[0, 1, 2], [3, 4, 5], [6]]
    assert list(iter_batches([], 3)) == []
    with pytest.raises(ValueError):
        list(iter_batches([1], 0))


@pytest.mark.asyncio
async def test_fetch_grouped_fetches_each_key_once() -> None:
    fetched: list[str] = []

    async def fetch(k: str) -> str:
        fetched.append(k)
        return k.upper()

    out = await fetch_grouped(["a", "b", "a", "c", "b"], key=lambda x: x, fetch=fetch, batch_size=2)

    assert out == ["A", "B", "A", "C", "B"]
    assert sorted(fetched) == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_fetch_grouped_uses_cache() -> None:
    fetched: list[int] = []

    async def fetch(k: int) -> int:
        fetched.append(k)
        return k * 10

    cache = {1: 10}
    out = await fetch_grouped([1, 2, 2], key=lambda x: x, fetch=fetch, batch_size=10, cache=cache)

    assert out == [10, 20, 20]
    assert fetched == [2]
    assert cache == {1: 10, 2: 20}


@pytest.mark.asyncio
async def test_fetch_grouped_batch_is_a_barrier() -> None:
    events: list[tuple[str, int]] = []

    async def fetch(k: int) -> int:
        events.append(("start", k))
        # later keys of a batch finish first
        for _ in range(10 - k % 4):
            await asyncio.sleep(0)
        events.append(("end", k))
        return k

    await fetch_grouped(list(range(10)), key=lambda x: x, fetch=fetch, batch_size=4)

    batches = [range(0, 4), range(4, 8), range(8, 10)]
    for done, nxt in zip(batches, batches[1:]):
        last_end = max(events.index(("end", k)) for k in done)
        first_start = min(events.index(("start", k)) for k in nxt)
        assert last_end < first_start
    assert len(events) == 20


@pytest.mark.asyncio
async def test_fetch_grouped_propagates_failure() -> None:
    async def fetch(k: int) -> int:
        if k == 3:
            raise RuntimeError("boom")
        return k

    with pytest.raises(RuntimeError):
        await fetch_grouped(list(range(5)), key=lambda x: x, fetch=fetch, batch_size=2)


@pytest.mark.asyncio
async def test_fetch_grouped_missing_key_raises_on_missing() -> None:
    class ForgetfulCache(UserDict):
        def __setitem__(self, key, value) -> None:
            pass

    async def fetch(k: str) -> str:
        return k

    with pytest.raises(JoinInvariantViolation):
        await fetch_grouped(
            ["x"],
            key=lambda x: x,
            fetch=fetch,
            batch_size=1,
            cache=ForgetfulCache(),
            on_missing=lambda k: JoinInvariantViolation(k),
        )
