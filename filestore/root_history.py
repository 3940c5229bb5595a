"""Resolving a file's part chain from a data store's root history."""

from common.logging_config import get_logger
from common.protocol import RpcResult
from common.types import RootHistoryEntry
from filestore.rpc_client import DataLayerClient

logger = get_logger(__name__)


class RootHistoryResolver:
    """Maps a part's next_root_hash to the root versions holding the remaining parts."""

    def __init__(self, client: DataLayerClient):
        self.client = client

    async def fetch_history(self, store_id: str) -> RpcResult:
        """
        Fetch the store's full root history.

        Returns:
            RpcResult whose payload is a list of RootHistoryEntry, oldest first
        """
        result = await self.client.get_root_history(store_id)
        if not result.success:
            return result
        entries = [item.to_entry() for item in result.payload.root_history]
        return RpcResult(success=True, payload=entries)

    async def resolve(self, store_id: str, next_root_hash: str, total_parts: int) -> list[str]:
        """
        Root hashes holding parts 2..total_parts, in that order.

        The root at next_root_hash holds part 2; each older root holds the
        next higher part. An empty list means the chain cannot be resolved.

        Args:
            store_id: Data store identifier
            next_root_hash: Root hash referenced by the head part
            total_parts: Number of parts of the file

        Returns:
            Root hashes ordered from part 2 upward, or [] if unresolvable
        """
        result = await self.fetch_history(store_id)
        if not result.success:
            logger.warning(f"Root history unavailable for store {store_id}: {result.error}")
            return []

        history: list[RootHistoryEntry] = result.payload
        index = next(
            (i for i, entry in enumerate(history) if entry.root_hash == next_root_hash),
            -1,
        )
        if index == -1:
            logger.warning(f"Root hash {next_root_hash} not found in history of store {store_id}")
            return []

        start = max(index - (total_parts - 2), 0)
        if start != index - (total_parts - 2):
            logger.warning(
                f"Root history too short for {total_parts} parts [store={store_id}, index={index}]"
            )
        chain = [entry.root_hash for entry in history[start:index + 1]]
        chain.reverse()
        return chain
