"""Chunked file storage on top of a versioned data layer key-value store."""

from filestore.cancellation import CancellationToken
from filestore.config import FileStoreConfig
from filestore.file_store import FileStore
from filestore.rpc_client import DataLayerClient

__all__ = [
    "CancellationToken",
    "DataLayerClient",
    "FileStore",
    "FileStoreConfig",
]
