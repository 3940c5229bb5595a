"""Project-wide constants (default chunk size, data layer port, polling)."""

CHUNK_SIZE_BYTES: int = 2_000_000  # 2 MB default chunk size

DATALAYER_HOST: str = "localhost"
DATALAYER_PORT: int = 8562

GET_RPC_MAX_CONNECTIONS: int = 5
TIMEOUT_PENDING_SECONDS: float = 5.0
REQUEST_TIMEOUT_SECONDS: float = 5.0

MAX_RETRIES: int = 2
RETRY_BACKOFF_MULTIPLIER: float = 2

DEFAULT_FEE: int = 0

SSL_DIR_PARTS = (".chia", "mainnet", "config", "ssl", "data_layer")
CERT_FILE_NAME = "private_data_layer.crt"
KEY_FILE_NAME = "private_data_layer.key"
