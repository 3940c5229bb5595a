"""Response schemas for the data layer RPC endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.types import RootHistoryEntry


class RpcResponse(BaseModel):
    """Envelope shared by every data layer response."""
    model_config = ConfigDict(extra='ignore')

    success: bool
    error: Optional[str] = None


class GetKeysResponse(RpcResponse):
    keys: List[str] = Field(default_factory=list)


class RootHistoryItem(BaseModel):
    model_config = ConfigDict(extra='ignore')

    root_hash: str
    confirmed: bool
    timestamp: int = 0

    def to_entry(self) -> RootHistoryEntry:
        return RootHistoryEntry(
            root_hash=self.root_hash,
            confirmed=self.confirmed,
            timestamp=self.timestamp,
        )


class RootHistoryResponse(RpcResponse):
    root_history: List[RootHistoryItem] = Field(default_factory=list)


class GetValueResponse(RpcResponse):
    value: Optional[str] = None


class MutationResponse(RpcResponse):
    """Response for insert, batch_update and delete_key."""
    tx_id: Optional[str] = None


class CreateDataStoreResponse(RpcResponse):
    id: Optional[str] = None
