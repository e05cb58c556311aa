"""SQLite inscription store."""

from __future__ import annotations

from inscribememaybe.storage.sqlite import SQLiteInscriptionStore

from tests.conftest import MINT_CALLDATA
from tests.factories import make_event
from tests.mocks import MOCK_ADDRESS


async def test_insert_and_read_back(store):
    event = make_event(nonce=3, block_number=77)
    row_id = await store.insert_one(event)

    [record] = await store.get_inscriptions()
    assert record.id == row_id
    assert record.sender == MOCK_ADDRESS
    assert record.chain_id == 31337
    assert record.nonce == 3
    assert record.tx_hash == event.tx_hash
    assert record.calldata == MINT_CALLDATA
    assert record.calldata_text == MINT_CALLDATA.decode()
    assert record.block_number == 77
    assert record.created_at


async def test_newest_first_with_limit(store):
    for nonce in range(5):
        await store.insert_one(make_event(nonce=nonce))

    records = await store.get_inscriptions(limit=2)
    assert [r.nonce for r in records] == [4, 3]
    assert await store.count() == 5


async def test_filter_by_sender_and_chain(store):
    other = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
    await store.insert_one(make_event(nonce=0))
    await store.insert_one(make_event(nonce=1, chain_id=1))
    await store.insert_one(make_event(nonce=0, sender=other))

    assert await store.count(sender=MOCK_ADDRESS) == 2
    # Sender matching ignores checksum case
    assert await store.count(sender=MOCK_ADDRESS.lower()) == 2
    assert await store.count(chain_id=1) == 1
    assert await store.count(sender=MOCK_ADDRESS, chain_id=31337) == 1

    records = await store.get_inscriptions(sender=other)
    assert [r.sender for r in records] == [other]


async def test_empty_store(store):
    assert await store.get_inscriptions() == []
    assert await store.count() == 0


async def test_file_backed_store_persists(tmp_path):
    db_path = str(tmp_path / "nested" / "inscriptions.sqlite")

    s = SQLiteInscriptionStore(db_path)
    await s.initialize()
    await s.insert_one(make_event(nonce=12))
    await s.close()

    s = SQLiteInscriptionStore(db_path)
    await s.initialize()
    try:
        assert [r.nonce for r in await s.get_inscriptions()] == [12]
    finally:
        await s.close()
