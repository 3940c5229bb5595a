"""Shared RPC/protocol message definitions (wire encodings, RPC results)."""

from dataclasses import dataclass
from typing import Any, Optional


def string_to_hex(text: str) -> str:
    """Hex-encode the UTF-8 bytes of a string."""
    return text.encode('utf-8').hex()


def hex_to_string(hex_text: str) -> str:
    """Decode a hex string (optionally 0x-prefixed) back to text."""
    return hex_to_bytes(hex_text).decode('utf-8')


def hex_to_bytes(hex_text: str) -> bytes:
    """Decode a hex string, tolerating the 0x prefix used by the data layer."""
    if hex_text.startswith(('0x', '0X')):
        hex_text = hex_text[2:]
    return bytes.fromhex(hex_text)


@dataclass(frozen=True)
class ChangeListItem:
    """A single action in a batch_update changelist."""
    action: str
    key: str
    value: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize to the JSON shape expected by batch_update."""
        obj = {'action': self.action, 'key': self.key}
        if self.value is not None:
            obj['value'] = self.value
        return obj


def replace_changelist(key_hex: str, value_hex: str) -> list[ChangeListItem]:
    """Delete-then-insert changelist that atomically replaces a key's value."""
    return [
        ChangeListItem(action='delete', key=key_hex),
        ChangeListItem(action='insert', key=key_hex, value=value_hex),
    ]


@dataclass
class RpcResult:
    """
    Outcome of one data layer RPC call.

    Transport failures set cause to the originating exception; server-side
    failures carry the server's error text with no cause.
    """
    success: bool
    payload: Any = None
    error: Optional[str] = None
    cause: Optional[BaseException] = None

    @property
    def is_transport_failure(self) -> bool:
        return not self.success and self.cause is not None

    @classmethod
    def failure(cls, error: str, cause: Optional[BaseException] = None) -> 'RpcResult':
        return cls(success=False, error=error, cause=cause)
