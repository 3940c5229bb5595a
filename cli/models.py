"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class CreateStoreCommand:
    """Create a new data store."""

    fee: int = 0
    command: Literal["create-store"] = "create-store"


@dataclass(frozen=True)
class ListCommand:
    """List files in a data store."""

    store_id: str
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class InsertCommand:
    """Insert a local file into a data store."""

    store_id: str
    file_path: str
    fee: int = 0
    command: Literal["insert"] = "insert"


@dataclass(frozen=True)
class GetCommand:
    """Retrieve a file from a data store."""

    store_id: str
    file_name: str
    output_path: str | None = None
    command: Literal["get"] = "get"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a file's key from a data store."""

    store_id: str
    file_name: str
    fee: int = 0
    command: Literal["delete"] = "delete"


CommandRequest = (
    CreateStoreCommand
    | ListCommand
    | InsertCommand
    | GetCommand
    | DeleteCommand
)
