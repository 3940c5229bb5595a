"""Reassembling a stored file from its head value and its historical parts."""

import asyncio
from typing import Optional

from common.logging_config import get_logger
from common.types import FilePart, ProgressCallback, ProgressEvent, ProgressPhase
from filestore.cancellation import CancellationToken
from filestore.chunk_codec import decode_part, encode_key
from filestore.exceptions import (
    CancelledByUserError,
    IncompleteFileError,
    PartDecodeError,
    RootHistoryNotFoundError,
    StoredFileNotFoundError,
    TransportError,
)
from filestore.root_history import RootHistoryResolver
from filestore.rpc_client import DataLayerClient

logger = get_logger(__name__)

CANCEL_CHECK_INTERVAL = 0.1


class RetrievalCoordinator:
    """
    Fetches every part of one stored file with at most max_connections
    requests in flight, and joins them in part order.
    """

    def __init__(
        self,
        client: DataLayerClient,
        resolver: RootHistoryResolver,
        store_id: str,
        file_name: str,
        max_connections: int,
        cancel_token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.client = client
        self.resolver = resolver
        self.store_id = store_id
        self.file_name = file_name
        self.key = encode_key(file_name)
        self.max_connections = max_connections
        self.cancel_token = cancel_token or CancellationToken()
        self.on_progress = on_progress

        self.head: Optional[FilePart] = None
        self.chunks: list[Optional[bytes]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def total_parts(self) -> int:
        return len(self.chunks)

    @property
    def filled(self) -> int:
        return sum(1 for chunk in self.chunks if chunk is not None)

    @property
    def progress(self) -> str:
        return f"{self.filled}/{self.total_parts}"

    async def run(self) -> bytes:
        """
        Retrieve the full file content.

        Returns:
            The original file bytes

        Raises:
            StoredFileNotFoundError: If nothing is stored under the file name
            RootHistoryNotFoundError: If the head's link is missing from history
            IncompleteFileError: If some parts could not be fetched
            CancelledByUserError: If cancelled before all fetches were dispatched
            TransportError: If the head value cannot be read
        """
        stored = await self.client.get_value(self.store_id, self.key)
        if not stored.success:
            if stored.is_transport_failure:
                raise TransportError(stored)
            raise StoredFileNotFoundError(f"File not found in data store: {self.file_name}")

        head = decode_part(stored.payload.value)
        self.head = head
        self.chunks = [None] * head.total_parts
        self.chunks[head.part_number - 1] = head.data
        label = 'Full' if head.total_parts == 1 else 'Part'
        self._emit(head.part_number, ProgressPhase.FETCHED,
                   f"Get {label} file...{head.part_number}/{head.total_parts}")

        root_hashes: list[str] = []
        if head.next_root_hash is not None and head.total_parts > 1:
            root_hashes = await self.resolver.resolve(self.store_id, head.next_root_hash, head.total_parts)
            if not root_hashes:
                raise RootHistoryNotFoundError("Root history not found", self.progress)

        logger.info(
            f"Fetching {len(root_hashes)} historical parts of {self.file_name} "
            f"[store={self.store_id}, max_connections={self.max_connections}]"
        )
        semaphore = asyncio.Semaphore(self.max_connections)
        tasks = {
            asyncio.create_task(self._fetch_part(semaphore, root_hash)): root_hash
            for root_hash in root_hashes
        }
        pending = set(tasks)
        while pending and not self.cancel_token.cancelled:
            done, pending = await asyncio.wait(pending, timeout=CANCEL_CHECK_INTERVAL)
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    logger.error(f"Fetch at root {tasks[task]} raised", exc_info=task.exception())

        if self.cancel_token.cancelled:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info(f"Retrieval of {self.file_name} cancelled, {len(pending)} fetches dropped")
            raise CancelledByUserError("Cancel by user", self.progress)

        if self.filled != head.total_parts:
            raise IncompleteFileError(f"File incomplete...{self.progress}", self.progress)

        return b''.join(self.chunks)

    async def _fetch_part(self, semaphore: asyncio.Semaphore, root_hash: str) -> None:
        if self.cancel_token.cancelled:
            return
        async with semaphore:
            if self.cancel_token.cancelled:
                return
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                result = await self.client.get_value(self.store_id, self.key, root_hash)
            finally:
                self.in_flight -= 1

        if self.cancel_token.cancelled:
            return

        if not result.success:
            logger.warning(f"Could not fetch {self.file_name} at root {root_hash}: {result.error}")
            self._emit(0, ProgressPhase.FETCH_FAILED, f"Get Part file failed...{self.progress}")
            return

        try:
            part = decode_part(result.payload.value)
        except PartDecodeError as e:
            logger.warning(f"Undecodable part of {self.file_name} at root {root_hash}: {e}")
            self._emit(0, ProgressPhase.FETCH_FAILED, f"Get Part file failed...{self.progress}")
            return

        if part.hash != self.head.hash or part.total_parts != self.head.total_parts:
            logger.warning(f"Part at root {root_hash} belongs to a different version of {self.file_name}")
            self._emit(part.part_number, ProgressPhase.FETCH_FAILED, f"Get Part file failed...{self.progress}")
            return

        self.chunks[part.part_number - 1] = part.data
        self._emit(part.part_number, ProgressPhase.FETCHED, f"Get Part file...{self.progress}")

    def _emit(self, part_number: int, phase: ProgressPhase, message: str) -> None:
        logger.debug(f"{self.file_name}: {message}")
        if self.on_progress is not None:
            self.on_progress(ProgressEvent(
                file_name=self.file_name,
                part_number=part_number,
                total_parts=self.total_parts,
                phase=phase,
                message=message,
            ))
