"""Custom exception classes for the file store."""

from typing import Optional

from common.protocol import RpcResult


class FileStoreError(Exception):
    """
    Base exception class for all file store errors.

    progress is the "k/N" fraction of parts handled when the error occurred,
    if the operation had started processing parts.
    """

    def __init__(self, message: str, progress: Optional[str] = None):
        super().__init__(message)
        self.progress = progress


class TransportError(FileStoreError):
    """
    Raised when a data layer RPC fails (connection refused, timeout, malformed response or server error).
    """

    def __init__(self, result: RpcResult, progress: Optional[str] = None):
        super().__init__(result.error or 'Unknown error', progress)
        self.result = result
        self.__cause__ = result.cause


class StoreNotFoundError(FileStoreError):
    """
    Raised when the data store has no root versions.
    """
    pass


class StoreNotConfirmedError(FileStoreError):
    """
    Raised when the data store's only root version is still unconfirmed.
    """
    pass


class LocalFileNotFoundError(FileStoreError):
    """
    Raised when the file to insert does not exist locally.
    """
    pass


class EmptyFileError(FileStoreError):
    """
    Raised when the file to insert has no content.
    """
    pass


class StoredFileNotFoundError(FileStoreError):
    """
    Raised when no value is stored under the requested file name.
    """
    pass


class HashMismatchError(FileStoreError):
    """
    Raised when a partially stored chain belongs to a different file.
    """
    pass


class ChunkSizeMismatchError(FileStoreError):
    """
    Raised when a partially stored chain was split with a different chunk size.
    """
    pass


class IncompleteFileError(FileStoreError):
    """
    Raised when fewer parts than total_parts could be recovered.
    """
    pass


class RootHistoryNotFoundError(FileStoreError):
    """
    Raised when the root hash a part links to is missing from the store history.
    """
    pass


class PartDecodeError(FileStoreError):
    """
    Raised when a stored value cannot be decoded as a file part.
    """
    pass


class InsertCommitError(FileStoreError):
    """
    Raised when the plain insert of the first part fails.
    """
    pass


class BatchCommitError(FileStoreError):
    """
    Raised when a batch update publishing a part fails.
    """
    pass


class HistoryQueryError(FileStoreError):
    """
    Raised when the root history cannot be read during insertion.
    """
    pass


class AlreadyStoredError(FileStoreError):
    """
    Raised when the file's chain already ends at part 1.
    """
    pass


class CancelledByUserError(FileStoreError):
    """
    Raised when an operation is cancelled through its cancellation token.
    """
    pass
