"""File store facade: chunked files on top of a data layer store."""

from pathlib import Path
from typing import Optional, Union

from common.constants import DEFAULT_FEE
from common.logging_config import get_logger
from common.types import OperationResult, ProgressCallback
from filestore.cancellation import CancellationToken
from filestore.chunk_codec import decode_key, encode_key
from filestore.config import FileStoreConfig
from filestore.exceptions import CancelledByUserError, FileStoreError
from filestore.insertion import InsertionStateMachine
from filestore.retrieval import RetrievalCoordinator
from filestore.root_history import RootHistoryResolver
from filestore.rpc_client import DataLayerClient

logger = get_logger(__name__)


def _failure(error: FileStoreError) -> OperationResult:
    return OperationResult(
        success=False,
        error=str(error),
        cause=error.__cause__ or error,
        progress=error.progress,
    )


def _unexpected(operation: str, error: Exception) -> OperationResult:
    logger.error(f"Unexpected error during {operation}: {error}", exc_info=True)
    return OperationResult(success=False, error=f"Unexpected error: {error}", cause=error)


class FileStore:
    """
    Stores files larger than a single data layer value.

    Every public coroutine returns an OperationResult; failures are reported
    through it and never raised.
    """

    def __init__(
        self,
        config: Optional[FileStoreConfig] = None,
        client: Optional[DataLayerClient] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the file store.

        Args:
            config: Configuration instance (defaults from the environment when omitted)
            client: Data layer client (built from config when omitted)
            on_progress: Callback receiving ProgressEvent notifications
        """
        self.config = config or FileStoreConfig()
        self.client = client or DataLayerClient(self.config)
        self.resolver = RootHistoryResolver(self.client)
        self.on_progress = on_progress
        self.insertion_token = CancellationToken()
        self.retrieval_token = CancellationToken()

    def cancel_insertion(self) -> None:
        """Cancel insertions started without an explicit token."""
        self.insertion_token.cancel()

    def cancel_retrieval(self) -> None:
        """Cancel retrievals started without an explicit token."""
        self.retrieval_token.cancel()

    async def insert_file(
        self,
        store_id: str,
        file_path: Union[str, Path],
        fee: int = DEFAULT_FEE,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OperationResult:
        """
        Insert a local file, or resume a previously interrupted insertion.

        Args:
            store_id: Data store identifier
            file_path: Local file; its base name becomes the key
            fee: Transaction fee for each write
            cancel_token: Token to cancel this insertion (the store's default token if omitted)

        Returns:
            OperationResult with progress set on mid-chain failures
        """
        machine = InsertionStateMachine(
            client=self.client,
            resolver=self.resolver,
            store_id=store_id,
            file_path=Path(file_path),
            chunk_size=self.config.get_chunk_size(),
            poll_interval=self.config.get_poll_interval(),
            fee=fee,
            cancel_token=cancel_token or self.insertion_token,
            on_progress=self.on_progress,
        )
        try:
            await machine.run()
        except FileStoreError as e:
            logger.warning(f"Insertion of {machine.file_name} failed: {e} [state={machine.state.value}]")
            return _failure(e)
        except Exception as e:
            return _unexpected('insert_file', e)
        return OperationResult(success=True, message='File stored in data layer', progress=machine.progress)

    async def get_file(
        self,
        store_id: str,
        file_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OperationResult:
        """
        Retrieve a stored file.

        Args:
            store_id: Data store identifier
            file_name: Key the file was stored under (its base name)
            cancel_token: Token to cancel this retrieval (the store's default token if omitted)

        Returns:
            OperationResult with content set to the file bytes on success
        """
        token = cancel_token or self.retrieval_token
        coordinator = RetrievalCoordinator(
            client=self.client,
            resolver=self.resolver,
            store_id=store_id,
            file_name=file_name,
            max_connections=self.config.get_max_connections(),
            cancel_token=token,
            on_progress=self.on_progress,
        )
        try:
            content = await coordinator.run()
        except CancelledByUserError as e:
            if cancel_token is None:
                token.reset()
            return _failure(e)
        except FileStoreError as e:
            logger.warning(f"Retrieval of {file_name} failed: {e}")
            return _failure(e)
        except Exception as e:
            return _unexpected('get_file', e)
        return OperationResult(success=True, message='File Loaded', content=content, progress=coordinator.progress)

    async def get_file_list(self, store_id: str) -> OperationResult:
        """List the file names stored in a data store."""
        result = await self.client.get_keys(store_id)
        if not result.success:
            return OperationResult(success=False, error=result.error, cause=result.cause)
        try:
            names = [decode_key(key) for key in result.payload.keys]
        except ValueError as e:
            return OperationResult(success=False, error=f"Undecodable key: {e}", cause=e)
        return OperationResult(success=True, file_list=names)

    async def delete_file(self, store_id: str, file_name: str, fee: int = DEFAULT_FEE) -> OperationResult:
        """
        Delete a file's key. Historical parts stay in the store history.
        """
        result = await self.client.delete_key(store_id, encode_key(file_name), fee)
        if not result.success:
            return OperationResult(success=False, error=result.error, cause=result.cause)
        logger.info(f"Deleted {file_name} [store={store_id}]")
        return OperationResult(success=True, message=f'File deleted: {file_name}')

    async def create_data_store(self, fee: int = DEFAULT_FEE) -> OperationResult:
        """Create a new data store and return its id."""
        result = await self.client.create_data_store(fee)
        if not result.success:
            return OperationResult(success=False, error=result.error, cause=result.cause)
        logger.info(f"Created data store {result.payload.id}")
        return OperationResult(success=True, message='Data store created', store_id=result.payload.id)

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> 'FileStore':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
