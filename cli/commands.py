"""Command handler functions for CLI operations."""

import asyncio
import os
import signal
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.constants import CONFIG_PATH
from cli.models import (
    CommandRequest,
    CreateStoreCommand,
    DeleteCommand,
    GetCommand,
    InsertCommand,
    ListCommand,
)
from cli.utils import ProgressPrinter, format_file_size
from filestore import CancellationToken, FileStore, FileStoreConfig

logger = get_logger(__name__)


def _format_failure(action: str, result) -> str:
    message = f"Error {action}: {result.error}"
    if result.progress:
        message += f" (progress {result.progress})"
    return message


async def handle_create_store(cmd: CreateStoreCommand, store: FileStore) -> str:
    """
    Handle 'create-store' command.

    Returns:
        Success message with the new store id, or error message
    """
    result = await store.create_data_store(cmd.fee)
    if not result.success:
        return _format_failure("creating data store", result)
    return f"Data store created: {result.store_id}\nWait for its first root to confirm before inserting."


async def handle_list(cmd: ListCommand, store: FileStore) -> str:
    """
    Handle 'list' command.

    Returns:
        Formatted list of file names
    """
    result = await store.get_file_list(cmd.store_id)
    if not result.success:
        return _format_failure("listing files", result)
    if not result.file_list:
        return f"No files found in store {cmd.store_id}"

    output = [f"Found {len(result.file_list)} file(s):"]
    output.extend(f"  - {name}" for name in result.file_list)
    return '\n'.join(output)


async def handle_insert(
    cmd: InsertCommand,
    store: FileStore,
    cancel_token: Optional[CancellationToken] = None
) -> str:
    """
    Handle 'insert' command.

    Args:
        cmd: InsertCommand with store id, file path and fee
        store: FileStore to insert into
        cancel_token: Token signalled by Ctrl-C

    Returns:
        Success or error message
    """
    logger.info(f"Executing insert command: store={cmd.store_id} file={cmd.file_path}")
    file_path = Path(os.path.expanduser(cmd.file_path))
    result = await store.insert_file(cmd.store_id, file_path, fee=cmd.fee, cancel_token=cancel_token)
    if not result.success:
        return _format_failure(f"inserting {file_path.name}", result)
    return f"Stored: {file_path.name} ({format_file_size(file_path.stat().st_size)})"


async def handle_get(
    cmd: GetCommand,
    store: FileStore,
    cancel_token: Optional[CancellationToken] = None
) -> str:
    """
    Handle 'get' command.

    Args:
        cmd: GetCommand with store id, file name and optional output path
        store: FileStore to read from
        cancel_token: Token signalled by Ctrl-C

    Returns:
        Success message with output location, or error message
    """
    logger.info(f"Executing get command: store={cmd.store_id} file={cmd.file_name}")
    result = await store.get_file(cmd.store_id, cmd.file_name, cancel_token=cancel_token)
    if not result.success:
        return _format_failure(f"getting {cmd.file_name}", result)

    output_file = Path(os.path.expanduser(cmd.output_path)) if cmd.output_path else Path.cwd() / cmd.file_name
    if output_file.is_dir():
        output_file = output_file / cmd.file_name
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(result.content)
    except OSError as e:
        return f"Error writing file: {e}"

    return (
        f"Retrieved: {cmd.file_name} ({format_file_size(len(result.content))})\n"
        f"Saved to: {output_file.absolute()}"
    )


async def handle_delete(cmd: DeleteCommand, store: FileStore) -> str:
    """
    Handle 'delete' command.

    Returns:
        Success or error message
    """
    result = await store.delete_file(cmd.store_id, cmd.file_name, fee=cmd.fee)
    if not result.success:
        return _format_failure(f"deleting {cmd.file_name}", result)
    return f"Deleted: {cmd.file_name}"


async def execute_command(
    cmd_obj: CommandRequest,
    store: FileStore,
    cancel_token: Optional[CancellationToken] = None
) -> str:
    """Route a parsed command to its handler."""
    if isinstance(cmd_obj, CreateStoreCommand):
        return await handle_create_store(cmd_obj, store)
    elif isinstance(cmd_obj, ListCommand):
        return await handle_list(cmd_obj, store)
    elif isinstance(cmd_obj, InsertCommand):
        return await handle_insert(cmd_obj, store, cancel_token)
    elif isinstance(cmd_obj, GetCommand):
        return await handle_get(cmd_obj, store, cancel_token)
    elif isinstance(cmd_obj, DeleteCommand):
        return await handle_delete(cmd_obj, store)
    else:
        return f"Unknown command type: {type(cmd_obj)}"


async def run_command(cmd_obj: CommandRequest, config: Optional[FileStoreConfig] = None) -> str:
    """
    Execute one command against a fresh FileStore.

    Ctrl-C while the command runs cancels the insert or get in progress
    instead of interrupting the REPL.
    """
    config = config or FileStoreConfig(CONFIG_PATH)
    printer = ProgressPrinter()
    cancel_token = CancellationToken()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_token.cancel)
        signal_installed = True
    except (NotImplementedError, RuntimeError):
        signal_installed = False

    try:
        async with FileStore(config, on_progress=printer) as store:
            return await execute_command(cmd_obj, store, cancel_token)
    finally:
        printer.finish()
        if signal_installed:
            loop.remove_signal_handler(signal.SIGINT)
