"""Splitting files into chunks and encoding file parts as data layer values."""

import hashlib
import json
import math
from pathlib import Path

from common.protocol import hex_to_bytes, hex_to_string, string_to_hex
from common.types import FilePart
from filestore.exceptions import PartDecodeError

DIGEST_READ_SIZE = 1024 * 1024


def split(data: bytes, chunk_size: int) -> list[bytes]:
    """
    Split a buffer into fixed-size chunks; the last chunk may be shorter.

    Args:
        data: Bytes to split
        chunk_size: Chunk size in bytes, must be > 0

    Returns:
        List of chunks in original order
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
    return [data[offset:offset + chunk_size] for offset in range(0, len(data), chunk_size)]


def count_parts(size: int, chunk_size: int) -> int:
    """Number of chunks a file of the given size splits into."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
    return math.ceil(size / chunk_size)


def read_chunk(file_path: Path, part_number: int, chunk_size: int) -> bytes:
    """Read the bytes of a 1-based part from disk."""
    with open(file_path, 'rb') as f:
        f.seek((part_number - 1) * chunk_size)
        return f.read(chunk_size)


def file_digest(file_path: Path) -> str:
    """SHA-256 hex digest of a file's full content."""
    digest = hashlib.sha256()
    with open(file_path, 'rb') as f:
        for block in iter(lambda: f.read(DIGEST_READ_SIZE), b''):
            digest.update(block)
    return digest.hexdigest()


def encode_key(file_name: str) -> str:
    return string_to_hex(file_name)


def decode_key(key_hex: str) -> str:
    return hex_to_string(key_hex)


def encode_part(part: FilePart) -> str:
    """
    Encode a FilePart as a hex data layer value.

    The camelCase JSON field names are the established on-store format;
    changing them would make existing stores unreadable.
    """
    obj = {
        'size': part.size,
        'Hash': part.hash,
        'nextRootHash': part.next_root_hash,
        'partNumber': part.part_number,
        'totalParts': part.total_parts,
        'hexData': part.data.hex(),
    }
    return string_to_hex(json.dumps(obj))


def decode_part(value: str) -> FilePart:
    """
    Decode a hex data layer value into a FilePart.

    Raises:
        PartDecodeError: If the value is not a hex-encoded file part
    """
    try:
        obj = json.loads(hex_to_string(value))
        part = FilePart(
            size=int(obj['size']),
            hash=str(obj['Hash']),
            next_root_hash=obj.get('nextRootHash'),
            part_number=int(obj['partNumber']),
            total_parts=int(obj['totalParts']),
            data=hex_to_bytes(obj['hexData']),
        )
    except (ValueError, KeyError, TypeError) as e:
        raise PartDecodeError(f"Stored value is not a file part: {e}") from e

    if not 1 <= part.part_number <= part.total_parts:
        raise PartDecodeError(
            f"Invalid part number {part.part_number} for {part.total_parts} parts"
        )
    return part
