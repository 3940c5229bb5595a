"""Shared data type definitions (FilePart, RootHistoryEntry, ProgressEvent, OperationResult)."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional


@dataclass(frozen=True)
class FilePart:
    """
    One chunk of a stored file plus its chain linkage.

    Parts are written from total_parts down to 1. The first written part
    carries next_root_hash=None; every later part points at the confirmed
    root that held its predecessor.
    """
    size: int
    hash: str
    next_root_hash: Optional[str]
    part_number: int
    total_parts: int
    data: bytes


@dataclass(frozen=True)
class RootHistoryEntry:
    """
    A single root version of a data store.
    """
    root_hash: str
    confirmed: bool
    timestamp: int


class ProgressPhase(str, Enum):
    INSERTED = "inserted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FETCHED = "fetched"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification emitted while inserting or fetching a file."""
    file_name: str
    part_number: int
    total_parts: int
    phase: ProgressPhase
    message: str = ""


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class OperationResult:
    """
    Structured outcome of a FileStore operation.

    Failures never raise; they set success=False with an error message, the
    underlying cause and, for mid-chain failures, the progress fraction.
    """
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    cause: Optional[BaseException] = None
    progress: Optional[str] = None
    content: Optional[bytes] = None
    file_list: List[str] = field(default_factory=list)
    store_id: Optional[str] = None
