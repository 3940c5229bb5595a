"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    CreateStoreCommand,
    DeleteCommand,
    GetCommand,
    InsertCommand,
    ListCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of CreateStore/List/Insert/Get/Delete)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "create-store":
        return _parse_create_store(tokens[1:])
    elif command_name == "list":
        return _parse_list(tokens[1:])
    elif command_name == "insert":
        return _parse_insert(tokens[1:])
    elif command_name == "get":
        return _parse_get(tokens[1:])
    elif command_name == "delete":
        return _parse_delete(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_fee(value: str) -> int:
    """Parse a non-negative integer fee."""
    try:
        fee = int(value)
    except ValueError:
        raise ParseError(f"Invalid fee: {value}")
    if fee < 0:
        raise ParseError(f"Fee must not be negative: {value}")
    return fee


def _parse_create_store(args: list[str]) -> CreateStoreCommand:
    """Parse 'create-store [fee]' command."""
    if len(args) > 1:
        raise ParseError("create-store takes at most 1 argument: [fee]")
    if args:
        return CreateStoreCommand(fee=_parse_fee(args[0]))
    return CreateStoreCommand()


def _parse_list(args: list[str]) -> ListCommand:
    """Parse 'list <store_id>' command."""
    if len(args) != 1:
        raise ParseError("list requires exactly 1 argument: <store_id>")
    return ListCommand(store_id=args[0])


def _parse_insert(args: list[str]) -> InsertCommand:
    """Parse 'insert <store_id> <file_path> [fee]' command."""
    if len(args) not in (2, 3):
        raise ParseError("insert requires 2 or 3 arguments: <store_id> <file_path> [fee]")

    store_id, file_path = args[0], args[1]
    if len(args) == 3:
        return InsertCommand(store_id=store_id, file_path=file_path, fee=_parse_fee(args[2]))
    return InsertCommand(store_id=store_id, file_path=file_path)


def _parse_get(args: list[str]) -> GetCommand:
    """Parse 'get <store_id> <file_name> [output_path]' command."""
    if len(args) not in (2, 3):
        raise ParseError("get requires 2 or 3 arguments: <store_id> <file_name> [output_path]")

    output_path = args[2] if len(args) == 3 else None
    return GetCommand(store_id=args[0], file_name=args[1], output_path=output_path)


def _parse_delete(args: list[str]) -> DeleteCommand:
    """Parse 'delete <store_id> <file_name> [fee]' command."""
    if len(args) not in (2, 3):
        raise ParseError("delete requires 2 or 3 arguments: <store_id> <file_name> [fee]")

    if len(args) == 3:
        return DeleteCommand(store_id=args[0], file_name=args[1], fee=_parse_fee(args[2]))
    return DeleteCommand(store_id=args[0], file_name=args[1])
