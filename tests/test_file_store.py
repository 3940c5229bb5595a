"""End-to-end tests for the FileStore facade over the fake data layer."""

import math

import httpx
import pytest

from common.types import ProgressPhase
from filestore.chunk_codec import decode_part, encode_key
from filestore.config import FileStoreConfig
from filestore.exceptions import BatchCommitError, CancelledByUserError
from filestore.file_store import FileStore
from filestore.rpc_client import DataLayerClient


@pytest.mark.asyncio
@pytest.mark.parametrize('size', [1, 9, 10, 11, 57, 100])
async def test_round_trip(file_store, store_id, make_file, random_bytes, size):
    """Test inserting then getting returns the original bytes."""
    content = random_bytes(size)
    file_path = make_file(content)

    inserted = await file_store.insert_file(store_id, file_path)
    assert inserted.success, inserted.error
    assert inserted.message == 'File stored in data layer'

    retrieved = await file_store.get_file(store_id, file_path.name)
    assert retrieved.success, retrieved.error
    assert retrieved.content == content


@pytest.mark.asyncio
async def test_chain_integrity(file_store, fake_layer, store_id, make_file, random_bytes):
    """Test following next_root_hash from the head reaches the null-linked part in N-1 steps."""
    content = random_bytes(73)
    await file_store.insert_file(store_id, make_file(content))
    key = encode_key('sample.bin')
    total_parts = math.ceil(73 / 10)

    part = decode_part(fake_layer.value_at(store_id, key))
    assert part.part_number == 1
    seen = [part.part_number]
    for _ in range(total_parts - 1):
        part = decode_part(fake_layer.value_at(store_id, key, part.next_root_hash))
        seen.append(part.part_number)
        assert part.total_parts == total_parts

    assert part.next_root_hash is None
    assert seen == list(range(1, total_parts + 1))


@pytest.mark.asyncio
async def test_two_part_example(fake_layer, store_id, make_file, random_bytes):
    """Test a 9,000,000 byte file with 5,000,000 byte chunks."""
    config = FileStoreConfig(overrides={
        'host': 'datalayer.test', 'chunk_size': 5_000_000, 'timeout_pending': 0,
    })
    store = FileStore(config, client=DataLayerClient(config, transport=fake_layer.transport))
    content = random_bytes(9_000_000)
    file_path = make_file(content, name='big.bin')

    inserted = await store.insert_file(store_id, file_path)
    assert inserted.success, inserted.error

    writes = fake_layer.writes()
    assert [endpoint for endpoint, _ in writes] == ['insert', 'batch_update']
    first = decode_part(writes[0][1]['value'])
    second = decode_part(writes[1][1]['changelist'][1]['value'])
    assert (first.part_number, first.total_parts, first.next_root_hash) == (2, 2, None)
    assert (second.part_number, second.next_root_hash) == (1, fake_layer.history(store_id)[1]['root_hash'])

    retrieved = await store.get_file(store_id, 'big.bin')
    assert retrieved.success
    assert len(retrieved.content) == 9_000_000
    assert retrieved.content == content
    await store.close()


@pytest.mark.asyncio
async def test_failures_are_results(file_store, fake_layer, store_id, make_file):
    """Test errors come back as results carrying error, cause and progress."""
    fake_layer.failures['batch_update'] = 'Insufficient funds'

    result = await file_store.insert_file(store_id, make_file(b'x' * 30))

    assert not result.success
    assert result.progress == '2/3'
    assert 'Error batch...2/3' in result.error
    assert isinstance(result.cause, BatchCommitError)


@pytest.mark.asyncio
async def test_transport_failure_is_result(config, store_id, make_file):
    """Test connection refusal surfaces as a failed result, not an exception."""
    def refuse(request):
        raise httpx.ConnectError("Connection refused")

    store = FileStore(config, client=DataLayerClient(config, transport=httpx.MockTransport(refuse)))

    result = await store.insert_file(store_id, make_file(b'data'))

    assert not result.success
    assert result.error == 'Connection refused'
    assert isinstance(result.cause, httpx.ConnectError)


@pytest.mark.asyncio
async def test_missing_local_file_result(file_store, store_id, tmp_path):
    """Test a missing local file is reported in the result."""
    result = await file_store.insert_file(store_id, tmp_path / 'absent.bin')

    assert not result.success
    assert 'File not found' in result.error


@pytest.mark.asyncio
async def test_get_missing_file_result(file_store, store_id):
    """Test retrieving an unknown name fails cleanly."""
    result = await file_store.get_file(store_id, 'ghost.bin')

    assert not result.success
    assert 'File not found' in result.error


@pytest.mark.asyncio
async def test_cancel_insertion_with_default_token_then_resume(file_store, store_id, make_file, events):
    """Test cancel_insertion stops the running insert; re-inserting completes the file."""
    content = b'r' * 50
    file_path = make_file(content)

    original_on_progress = file_store.on_progress

    def cancel_on_second_insert(event):
        original_on_progress(event)
        if event.phase == ProgressPhase.INSERTED and event.part_number == 4:
            file_store.cancel_insertion()

    file_store.on_progress = cancel_on_second_insert
    cancelled = await file_store.insert_file(store_id, file_path)

    assert not cancelled.success
    assert cancelled.error == 'Cancel by user'
    assert isinstance(cancelled.cause, CancelledByUserError)
    assert not file_store.insertion_token.cancelled

    file_store.on_progress = original_on_progress
    resumed = await file_store.insert_file(store_id, file_path)
    assert resumed.success, resumed.error

    retrieved = await file_store.get_file(store_id, file_path.name)
    assert retrieved.content == content


@pytest.mark.asyncio
async def test_cancel_retrieval_with_default_token(file_store, store_id, make_file):
    """Test a cancelled retrieval reports cancellation and the default token is rearmed."""
    await file_store.insert_file(store_id, make_file(b'k' * 30))

    file_store.cancel_retrieval()
    result = await file_store.get_file(store_id, 'sample.bin')

    assert not result.success
    assert result.error == 'Cancel by user'
    assert not file_store.retrieval_token.cancelled
    assert (await file_store.get_file(store_id, 'sample.bin')).success


@pytest.mark.asyncio
async def test_progress_events(file_store, store_id, make_file, events):
    """Test insertion and retrieval emit progress events for every part."""
    await file_store.insert_file(store_id, make_file(b'e' * 25))
    inserted = [e for e in events if e.phase == ProgressPhase.INSERTED]
    assert [e.part_number for e in inserted] == [3, 2, 1]
    assert all(e.file_name == 'sample.bin' and e.total_parts == 3 for e in inserted)

    events.clear()
    await file_store.get_file(store_id, 'sample.bin')
    fetched = [e for e in events if e.phase == ProgressPhase.FETCHED]
    assert sorted(e.part_number for e in fetched) == [1, 2, 3]


@pytest.mark.asyncio
async def test_file_list_and_delete(file_store, fake_layer, store_id, make_file):
    """Test listing decodes key names and delete removes the key."""
    await file_store.insert_file(store_id, make_file(b'one', name='a.txt'))
    await file_store.insert_file(store_id, make_file(b'two', name='b.txt'))

    listed = await file_store.get_file_list(store_id)
    assert listed.success
    assert sorted(listed.file_list) == ['a.txt', 'b.txt']

    deleted = await file_store.delete_file(store_id, 'a.txt')
    assert deleted.success
    fake_layer.confirm_all(store_id)

    assert (await file_store.get_file_list(store_id)).file_list == ['b.txt']
    assert not (await file_store.get_file(store_id, 'a.txt')).success


@pytest.mark.asyncio
async def test_delete_missing_key(file_store, store_id):
    """Test deleting an unknown name reports the store's error."""
    result = await file_store.delete_file(store_id, 'ghost.bin')

    assert not result.success
    assert result.error == 'Key not found'


@pytest.mark.asyncio
async def test_create_data_store(file_store, fake_layer):
    """Test a new store id is returned and exists in the service."""
    result = await file_store.create_data_store()

    assert result.success
    assert result.store_id in fake_layer.stores


@pytest.mark.asyncio
async def test_context_manager_closes_client(config, fake_layer):
    """Test leaving the async context closes the HTTP session."""
    client = DataLayerClient(config, transport=fake_layer.transport)
    async with FileStore(config, client=client):
        pass

    assert client.session.is_closed
