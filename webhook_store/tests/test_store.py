import asyncio

import pytest

from webhook_store.store import ReadWriteLock, WebhookStore


def test_add_then_get_by_id_round_trips():
    async def scenario():
        store = WebhookStore(max_size=5)
        payloads = [{"event": "ping"}, [1, "two", None], "text", 3.25, False, None]
        ids = [await store.add(p) for p in payloads]
        found = [await store.get_by_id(i) for i in ids]
        return ids, payloads, found

    ids, payloads, found = asyncio.run(scenario())
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    # the first payload was evicted by the sixth
    assert found[0] is None
    for payload, webhook in zip(payloads[1:], found[1:]):
        assert webhook is not None
        assert webhook.payload == payload
        assert webhook.received.tzinfo is not None


def test_get_by_id_missing_returns_none():
    async def scenario():
        store = WebhookStore()
        await store.add({"a": 1})
        return await store.get_by_id(0), await store.get_by_id(2)

    assert asyncio.run(scenario()) == (None, None)


def test_bounded_store_evicts_oldest_and_lists_newest_first():
    async def scenario():
        store = WebhookStore(max_size=3)
        for i in range(10):
            await store.add({"n": i})
        return await store.get_all(), await store.count()

    webhooks, count = asyncio.run(scenario())
    assert count == 3
    assert [w.id for w in webhooks] == [10, 9, 8]
    assert [w.payload for w in webhooks] == [{"n": 9}, {"n": 8}, {"n": 7}]


def test_unbounded_store_lists_in_insertion_order():
    async def scenario():
        store = WebhookStore(max_size=0)
        for i in range(20):
            await store.add(i)
        return store, await store.get_all()

    store, webhooks = asyncio.run(scenario())
    assert not store.bounded
    assert store.max_size is None
    assert [w.payload for w in webhooks] == list(range(20))


def test_get_all_returns_snapshot():
    async def scenario():
        store = WebhookStore(max_size=5)
        await store.add("a")
        snapshot = await store.get_all()
        await store.add("b")
        return snapshot, await store.get_all()

    snapshot, current = asyncio.run(scenario())
    assert [w.payload for w in snapshot] == ["a"]
    assert [w.payload for w in current] == ["b", "a"]


def test_clear_resets_ids():
    async def scenario():
        store = WebhookStore(max_size=5)
        for _ in range(4):
            await store.add({})
        cleared = await store.clear()
        count = await store.count()
        next_id = await store.add({"after": "clear"})
        return cleared, count, next_id

    assert asyncio.run(scenario()) == (4, 0, 1)


def test_negative_max_size_rejected():
    with pytest.raises(ValueError):
        WebhookStore(max_size=-1)


def test_concurrent_adds_get_unique_ids():
    async def scenario():
        store = WebhookStore(max_size=5)
        ids = await asyncio.gather(*(store.add({"n": i}) for i in range(100)))
        return ids, await store.get_all()

    ids, webhooks = asyncio.run(scenario())
    assert sorted(ids) == list(range(1, 101))
    assert [w.id for w in webhooks] == [100, 99, 98, 97, 96]


def test_readers_share_the_lock():
    async def scenario():
        lock = ReadWriteLock()
        both_in = asyncio.Event()

        async def reader():
            async with lock.reading():
                if lock.readers == 2:
                    both_in.set()
                await asyncio.wait_for(both_in.wait(), timeout=1)

        await asyncio.gather(reader(), reader())
        return lock.readers

    assert asyncio.run(scenario()) == 0


def test_writer_waits_for_readers_and_blocks_new_ones():
    async def scenario():
        lock = ReadWriteLock()
        order = []
        release = asyncio.Event()

        async def first_reader():
            async with lock.reading():
                order.append("read-start")
                await release.wait()
                order.append("read-end")

        async def writer():
            async with lock.writing():
                order.append("write")

        async def late_reader():
            async with lock.reading():
                order.append("late-read")

        r1 = asyncio.create_task(first_reader())
        await asyncio.sleep(0)
        w = asyncio.create_task(writer())
        await asyncio.sleep(0)
        r2 = asyncio.create_task(late_reader())
        await asyncio.sleep(0)
        assert order == ["read-start"]
        assert not lock.writing_now

        release.set()
        await asyncio.gather(r1, w, r2)
        return order

    assert asyncio.run(scenario()) == ["read-start", "read-end", "write", "late-read"]
