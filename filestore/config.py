"""Configuration management for the data layer file store."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import (
    CERT_FILE_NAME,
    CHUNK_SIZE_BYTES,
    DATALAYER_HOST,
    DATALAYER_PORT,
    GET_RPC_MAX_CONNECTIONS,
    KEY_FILE_NAME,
    MAX_RETRIES,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_BACKOFF_MULTIPLIER,
    SSL_DIR_PARTS,
    TIMEOUT_PENDING_SECONDS,
)
from common.logging_config import get_logger

logger = get_logger(__name__)


def default_ssl_path(file_name: str) -> str:
    """Location of the data layer's private SSL material under the user's home."""
    return str(Path.home().joinpath(*SSL_DIR_PARTS, file_name))


class FileStoreConfig:
    """Manages file store configuration, optionally persisted in a JSON file."""

    DEFAULT_CONFIG = {
        "host": os.environ.get("DLFS_HOST", DATALAYER_HOST),
        "port": int(os.environ.get("DLFS_PORT", str(DATALAYER_PORT))),
        "cert_path": os.environ.get("DLFS_CERT_PATH", default_ssl_path(CERT_FILE_NAME)),
        "key_path": os.environ.get("DLFS_KEY_PATH", default_ssl_path(KEY_FILE_NAME)),
        "get_rpc_max_connections": GET_RPC_MAX_CONNECTIONS,
        "timeout_pending": TIMEOUT_PENDING_SECONDS,
        "request_timeout": REQUEST_TIMEOUT_SECONDS,
        "chunk_size": CHUNK_SIZE_BYTES,
        "max_retries": MAX_RETRIES,
        "retry_backoff_multiplier": RETRY_BACKOFF_MULTIPLIER,
    }

    def __init__(self, config_path: Optional[Path] = None, overrides: Optional[dict] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to a config JSON file (typically ~/.dlfilestore/config.json)
            overrides: Values taking precedence over both defaults and the file
        """
        self.config_path = config_path
        self.data = self._load()
        if overrides:
            self.data.update(overrides)

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        if self.config_path is None:
            return self.DEFAULT_CONFIG.copy()

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Config file unreadable, backing up to {backup_path}: {e}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not write default config to {self.config_path}: {e}")
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        if self.config_path is None:
            return
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get_base_url(self) -> str:
        """
        Get data layer RPC base URL.

        Returns:
            Base URL string (e.g., "https://localhost:8562")
        """
        return f"https://{self.data['host']}:{self.data['port']}"

    def get_cert(self) -> Optional[tuple[str, str]]:
        """
        Get the client certificate and key paths.

        Returns:
            (cert_path, key_path) or None when either file is missing
        """
        cert_path = os.path.expanduser(self.data['cert_path'])
        key_path = os.path.expanduser(self.data['key_path'])
        if not os.path.exists(cert_path):
            logger.warning(f"Certificate file not found: {cert_path}")
            return None
        if not os.path.exists(key_path):
            logger.warning(f"Key file not found: {key_path}")
            return None
        return cert_path, key_path

    def get_timeout(self) -> float:
        """Per-request timeout in seconds."""
        return float(self.data['request_timeout'])

    def get_poll_interval(self) -> float:
        """Seconds to wait between root history polls while a transaction is pending."""
        return float(self.data['timeout_pending'])

    def get_max_connections(self) -> int:
        """Maximum number of concurrent part fetches."""
        max_connections = int(self.data['get_rpc_max_connections'])
        if max_connections < 1:
            raise ValueError(f"get_rpc_max_connections must be >= 1, got {max_connections}")
        return max_connections

    def get_chunk_size(self) -> int:
        """Chunk size in bytes."""
        chunk_size = int(self.data['chunk_size'])
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        return chunk_size

    def get_retry_config(self) -> dict:
        """
        Get retry configuration for read-only RPCs.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': int(self.data['max_retries']),
            'retry_backoff_multiplier': self.data['retry_backoff_multiplier'],
        }
