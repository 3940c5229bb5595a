"""Async HTTPS client for the data layer RPC service."""

import asyncio
import ssl
import uuid
from typing import Optional, Type

import httpx
from pydantic import ValidationError

from common.constants import DEFAULT_FEE
from common.logging_config import get_logger
from common.protocol import ChangeListItem, RpcResult
from filestore.config import FileStoreConfig
from filestore.schemas import (
    CreateDataStoreResponse,
    GetKeysResponse,
    GetValueResponse,
    MutationResponse,
    RootHistoryResponse,
    RpcResponse,
)

logger = get_logger(__name__)


def build_ssl_context(cert: Optional[tuple[str, str]]) -> ssl.SSLContext:
    """
    TLS context for the local data layer service.

    The service presents a self-signed certificate, so peer verification is
    disabled; the client authenticates with the private data layer cert/key.
    """
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    if cert is not None:
        context.load_cert_chain(certfile=cert[0], keyfile=cert[1])
    return context


class DataLayerClient:
    """Data layer RPC client; every call returns an RpcResult instead of raising."""

    def __init__(self, config: FileStoreConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize data layer client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (used by tests to stub the service)
        """
        self.config = config
        if transport is None:
            verify = build_ssl_context(config.get_cert())
        else:
            verify = False
        self.session = httpx.AsyncClient(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            verify=verify,
            transport=transport,
            headers={'Content-Type': 'application/json'},
        )
        logger.info(f"Initialized DataLayerClient [base_url={config.get_base_url()}]")

    async def call(self, endpoint: str, request_body: Optional[dict] = None, retry: bool = False) -> RpcResult:
        """
        POST a JSON request to an RPC endpoint.

        Args:
            endpoint: RPC endpoint name (e.g. 'get_root_history')
            request_body: JSON body; 'fee' defaults to 0 when absent
            retry: Retry connection failures and timeouts with backoff

        Returns:
            RpcResult whose payload is the decoded JSON object
        """
        body = dict(request_body or {})
        body.setdefault('fee', DEFAULT_FEE)

        retry_config = self.config.get_retry_config()
        max_retries = retry_config['max_retries'] if retry else 0
        backoff = retry_config['retry_backoff_multiplier']
        request_id = str(uuid.uuid4())

        logger.debug(f"RPC call: {endpoint} [request_id={request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = await self.session.post(f'/{endpoint}', json=body)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if attempt < max_retries:
                    delay = backoff ** (attempt + 1)
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={request_id}]"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"Network error: {endpoint} error={e!r} [request_id={request_id}]")
                if isinstance(e, httpx.ConnectError):
                    return RpcResult.failure('Connection refused', e)
                return RpcResult.failure('Request timed out', e)
            except httpx.HTTPError as e:
                logger.error(f"Transport error: {endpoint} error={e!r} [request_id={request_id}]")
                return RpcResult.failure('Unknown error', e)

            logger.debug(f"RPC response: {endpoint} status={response.status_code} [request_id={request_id}]")
            try:
                data = response.json()
            except ValueError as e:
                logger.error(f"Malformed response: {endpoint} status={response.status_code} [request_id={request_id}]")
                return RpcResult.failure('Malformed response', e)
            if not isinstance(data, dict):
                return RpcResult.failure('Malformed response', ValueError(f"unexpected JSON: {type(data).__name__}"))
            return RpcResult(success=True, payload=data)

        return RpcResult.failure('Max retries exceeded')

    async def _call_typed(
        self,
        endpoint: str,
        request_body: dict,
        model: Type[RpcResponse],
        retry: bool = False
    ) -> RpcResult:
        """Call an endpoint and validate the response against its schema."""
        result = await self.call(endpoint, request_body, retry=retry)
        if not result.success:
            return result
        try:
            parsed = model.model_validate(result.payload)
        except ValidationError as e:
            logger.error(f"Malformed response from {endpoint}: {e}")
            return RpcResult.failure('Malformed response', e)
        if not parsed.success:
            logger.debug(f"{endpoint} reported failure: {parsed.error}")
            return RpcResult(success=False, payload=parsed, error=parsed.error or f'{endpoint} failed')
        return RpcResult(success=True, payload=parsed)

    async def get_keys(self, store_id: str) -> RpcResult:
        return await self._call_typed('get_keys', {'id': store_id}, GetKeysResponse, retry=True)

    async def get_root_history(self, store_id: str) -> RpcResult:
        return await self._call_typed('get_root_history', {'id': store_id}, RootHistoryResponse, retry=True)

    async def get_value(self, store_id: str, key: str, root_hash: Optional[str] = None) -> RpcResult:
        """
        Read the value under a hex key, optionally as of a historical root hash.
        """
        body = {'id': store_id, 'key': key}
        if root_hash is not None:
            body['root_hash'] = root_hash
        result = await self._call_typed('get_value', body, GetValueResponse, retry=True)
        if result.success and result.payload.value is None:
            return RpcResult(success=False, payload=result.payload, error='Key not found')
        return result

    async def insert(self, store_id: str, key: str, value: str, fee: int = DEFAULT_FEE) -> RpcResult:
        body = {'id': store_id, 'key': key, 'value': value, 'fee': fee}
        return await self._call_typed('insert', body, MutationResponse)

    async def batch_update(self, store_id: str, changelist: list[ChangeListItem], fee: int = DEFAULT_FEE) -> RpcResult:
        body = {
            'id': store_id,
            'changelist': [change.to_dict() for change in changelist],
            'fee': fee,
        }
        return await self._call_typed('batch_update', body, MutationResponse)

    async def delete_key(self, store_id: str, key: str, fee: int = DEFAULT_FEE) -> RpcResult:
        body = {'id': store_id, 'key': key, 'fee': fee}
        return await self._call_typed('delete_key', body, MutationResponse)

    async def create_data_store(self, fee: int = DEFAULT_FEE) -> RpcResult:
        return await self._call_typed('create_data_store', {'fee': fee}, CreateDataStoreResponse)

    async def close(self) -> None:
        """Close the HTTP session."""
        await self.session.aclose()
