"""Shared pytest fixtures for all tests."""

import os

import pytest

from common.types import ProgressEvent
from fake_datalayer import FakeDataLayer
from filestore.config import FileStoreConfig
from filestore.file_store import FileStore
from filestore.rpc_client import DataLayerClient


@pytest.fixture
def fake_layer():
    """In-memory data layer service."""
    return FakeDataLayer()


@pytest.fixture
def store_id(fake_layer):
    """A data store whose initial root is confirmed."""
    return fake_layer.create_store()


@pytest.fixture
def config():
    """
    Configuration with a tiny chunk size and no polling delay.

    Returns:
        FileStoreConfig not backed by any file
    """
    return FileStoreConfig(overrides={
        'host': 'datalayer.test',
        'port': 8562,
        'chunk_size': 10,
        'timeout_pending': 0,
        'get_rpc_max_connections': 2,
        'max_retries': 1,
        'retry_backoff_multiplier': 0.01,
    })


@pytest.fixture
def client(config, fake_layer):
    """DataLayerClient talking to the fake data layer."""
    return DataLayerClient(config, transport=fake_layer.transport)


@pytest.fixture
def events():
    """List collecting progress events."""
    return []


@pytest.fixture
def file_store(config, client, events):
    """FileStore wired to the fake data layer, recording progress events."""
    def record(event: ProgressEvent) -> None:
        events.append(event)

    return FileStore(config, client=client, on_progress=record)


@pytest.fixture
def make_file(tmp_path):
    """
    Factory writing a local file with the given content.

    Returns:
        Callable (content, name) -> Path
    """
    def _make(content: bytes, name: str = 'sample.bin'):
        file_path = tmp_path / name
        file_path.write_bytes(content)
        return file_path

    return _make


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a small local file to insert.

    Returns:
        Path to a 25 byte file
    """
    file_path = tmp_path / 'test_document.txt'
    file_path.write_bytes(b'This is a test document.\n')
    return file_path


@pytest.fixture
def random_bytes():
    """Factory for reproducible-length random content."""
    return os.urandom
