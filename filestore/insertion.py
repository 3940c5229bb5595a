"""
Publishing a file as a reverse-linked chain of parts, one confirmed root per part.

Parts are written from the last chunk to the first. Each write replaces the
value under the file's key; once the root holding it is confirmed, the next
older part is written with that root's hash as its next_root_hash. Reading
the head value and walking those links backward through the root history
recovers every part.
"""

import asyncio
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from common.constants import DEFAULT_FEE
from common.logging_config import get_logger
from common.protocol import replace_changelist
from common.types import FilePart, ProgressCallback, ProgressEvent, ProgressPhase, RootHistoryEntry
from filestore.cancellation import CancellationToken
from filestore.chunk_codec import count_parts, decode_part, encode_key, encode_part, file_digest, read_chunk
from filestore.exceptions import (
    AlreadyStoredError,
    BatchCommitError,
    CancelledByUserError,
    ChunkSizeMismatchError,
    EmptyFileError,
    HashMismatchError,
    HistoryQueryError,
    InsertCommitError,
    LocalFileNotFoundError,
    StoreNotConfirmedError,
    StoreNotFoundError,
    TransportError,
)
from filestore.root_history import RootHistoryResolver
from filestore.rpc_client import DataLayerClient

logger = get_logger(__name__)


class InsertionState(str, Enum):
    IDLE = "idle"
    FIRST_COMMIT = "first_commit"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    POLLING_HISTORY = "polling_history"
    BATCH_COMMIT = "batch_commit"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


class InsertionStateMachine:
    """
    Drives the insertion of one local file into one data store.

    A machine is single use: construct it, await run(), then inspect state
    and progress. Only one writer per file name and store is supported.
    """

    def __init__(
        self,
        client: DataLayerClient,
        resolver: RootHistoryResolver,
        store_id: str,
        file_path: Path,
        chunk_size: int,
        poll_interval: float,
        fee: int = DEFAULT_FEE,
        cancel_token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.resolver = resolver
        self.store_id = store_id
        self.file_path = Path(file_path)
        self.file_name = self.file_path.name
        self.key = encode_key(self.file_name)
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval
        self.fee = fee
        self.cancel_token = cancel_token or CancellationToken()
        self.on_progress = on_progress
        self._sleep = sleep

        self.state = InsertionState.IDLE
        self.size = 0
        self.file_hash = ""
        self.total_parts = 0
        self.part_number = 0
        self.next_root_hash: Optional[str] = None
        self.resumed = False
        self._write_pending = False

    @property
    def progress(self) -> str:
        """Fraction of parts handled so far, counting the part being processed."""
        if self.total_parts == 0:
            return "0/0"
        return f"{self.total_parts - self.part_number + 1}/{self.total_parts}"

    async def run(self) -> None:
        """
        Insert the file, resuming a partially stored chain if one exists.

        Raises:
            FileStoreError: On precondition, integrity, commit or transport
                failure, or CancelledByUserError when cancelled
        """
        try:
            await self._check_preconditions()
            await self._detect_resume()

            if self.part_number == self.total_parts:
                await self._commit_first_part()

            while self.part_number != 0:
                self._check_cancelled()
                tail = await self._wait_for_confirmed_tail()

                if self._write_pending:
                    self._write_pending = False
                    self._emit(ProgressPhase.CONFIRMED, f"Transaction confirmed...{self.progress}")
                    self.part_number -= 1
                    if self.part_number == 0:
                        break

                self.next_root_hash = tail.root_hash
                await self._commit_batch()
        except CancelledByUserError:
            self.state = InsertionState.CANCELLED
            logger.info(f"Insertion of {self.file_name} cancelled at {self.progress}")
            raise
        except Exception:
            self.state = InsertionState.FAILED
            raise

        self.state = InsertionState.DONE
        logger.info(f"File {self.file_name} stored in data layer [store={self.store_id}, parts={self.total_parts}]")

    async def _check_preconditions(self) -> None:
        if not self.file_path.is_file():
            raise LocalFileNotFoundError(f"File not found: {self.file_path}")

        self.size = self.file_path.stat().st_size
        if self.size == 0:
            raise EmptyFileError(f"File is empty: {self.file_path}")

        result = await self.resolver.fetch_history(self.store_id)
        if not result.success:
            raise TransportError(result)

        history: list[RootHistoryEntry] = result.payload
        if not history:
            raise StoreNotFoundError("Data store not found")
        if len(history) == 1 and not history[-1].confirmed:
            raise StoreNotConfirmedError("Data store not confirmed")

    async def _detect_resume(self) -> None:
        self.file_hash = file_digest(self.file_path)
        self.total_parts = count_parts(self.size, self.chunk_size)
        self.part_number = self.total_parts

        # the head read only sees confirmed roots, so a pending tail is settled first
        await self._wait_for_confirmed_tail()

        stored = await self.client.get_value(self.store_id, self.key)
        if not stored.success:
            if stored.is_transport_failure:
                raise TransportError(stored)
            self.part_number = self.total_parts
            self.next_root_hash = None
            logger.info(
                f"Inserting {self.file_name} [store={self.store_id}, size={self.size}, parts={self.total_parts}]"
            )
            return

        head = decode_part(stored.payload.value)
        if head.hash != self.file_hash:
            raise HashMismatchError(f"Hash file not match: {self.file_name}")
        if head.part_number == 1:
            raise AlreadyStoredError(f"File already stored: {self.file_name}")
        if head.total_parts != self.total_parts:
            raise ChunkSizeMismatchError(
                f"Stored chain has {head.total_parts} parts but chunk size "
                f"{self.chunk_size} gives {self.total_parts}"
            )

        self.resumed = True
        self.part_number = head.part_number - 1
        self.next_root_hash = head.next_root_hash
        self.total_parts = head.total_parts
        logger.info(
            f"Resuming {self.file_name} at part {self.part_number}/{self.total_parts} [store={self.store_id}]"
        )

    def _build_part(self) -> FilePart:
        return FilePart(
            size=self.size,
            hash=self.file_hash,
            next_root_hash=self.next_root_hash,
            part_number=self.part_number,
            total_parts=self.total_parts,
            data=read_chunk(self.file_path, self.part_number, self.chunk_size),
        )

    async def _commit_first_part(self) -> None:
        # nothing to delete yet, so a plain insert
        self.state = InsertionState.FIRST_COMMIT
        result = await self.client.insert(self.store_id, self.key, encode_part(self._build_part()), self.fee)
        if not result.success:
            raise InsertCommitError(
                f"Error insert...{self.progress} {result.error}", self.progress
            ) from result.cause
        self._write_pending = True
        self._emit(ProgressPhase.INSERTED, f"Insert Part file...{self.progress}")

    async def _commit_batch(self) -> None:
        self.state = InsertionState.BATCH_COMMIT
        changelist = replace_changelist(self.key, encode_part(self._build_part()))
        result = await self.client.batch_update(self.store_id, changelist, self.fee)
        if not result.success:
            raise BatchCommitError(
                f"Error batch...{self.progress} {result.error}", self.progress
            ) from result.cause
        self._write_pending = True
        self._emit(ProgressPhase.INSERTED, f"Insert Part file...{self.progress}")

    async def _wait_for_confirmed_tail(self) -> RootHistoryEntry:
        self.state = InsertionState.AWAITING_CONFIRMATION
        tail = await self._latest_root()
        while not tail.confirmed:
            self._check_cancelled()
            self.state = InsertionState.POLLING_HISTORY
            self._emit(ProgressPhase.PENDING, f"Pending transaction...{self.progress}")
            await self._sleep(self.poll_interval)
            self._check_cancelled()
            tail = await self._latest_root()
        return tail

    async def _latest_root(self) -> RootHistoryEntry:
        result = await self.resolver.fetch_history(self.store_id)
        if not result.success or not result.payload:
            raise HistoryQueryError(
                f"Error get root history...{self.progress}", self.progress
            ) from result.cause
        return result.payload[-1]

    def _check_cancelled(self) -> None:
        if self.cancel_token.cancelled:
            self.cancel_token.reset()
            raise CancelledByUserError("Cancel by user", self.progress)

    def _emit(self, phase: ProgressPhase, message: str) -> None:
        logger.debug(f"{self.file_name}: {message}")
        if self.on_progress is not None:
            self.on_progress(ProgressEvent(
                file_name=self.file_name,
                part_number=self.part_number,
                total_parts=self.total_parts,
                phase=phase,
                message=message,
            ))
