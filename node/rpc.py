"""
JSON-RPC client for dashd.

Talks to the node over HTTP with basic authentication and maps the few
calls the explorer needs onto the ``BlockNode`` contract.
"""
import asyncio
import itertools
from typing import Any, List, Optional

import aiohttp
import structlog

from chain.constants import NOT_FOUND_CODES
from chain.errors import BlockNotFoundError, UpstreamError
from chain.serialization import RawBlock, parse_block
from chain.types import BlockHeaderInfo

from .base import BlockIdentifier, BlockNode

logger = structlog.get_logger()


class DashdRPCNode(BlockNode):
    """``BlockNode`` backed by the dashd JSON-RPC interface."""

    def __init__(
        self,
        url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0
    ):
        """
        Initialize the RPC client.

        Args:
            url: RPC endpoint, e.g. http://127.0.0.1:9998
            user: RPC user name
            password: RPC password
            timeout: Total timeout in seconds for a single call
        """
        super().__init__()
        self.url = url
        self.auth = aiohttp.BasicAuth(user, password or "") if user else None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None
        self._ids = itertools.count(1)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(auth=self.auth, timeout=self.timeout)
        return self.session

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
            logger.info("rpc_session_closed", url=self.url)
        self.session = None

    async def call(self, method: str, *params: Any, identifier: Optional[str] = None) -> Any:
        """
        Perform a JSON-RPC call.

        Args:
            method: RPC method name
            *params: Positional RPC parameters
            identifier: Block hash or height the call is about, used in errors

        Returns:
            The ``result`` member of the response

        Raises:
            BlockNotFoundError: If the node reports a missing block or index
            UpstreamError: For any other failure
        """
        payload = {
            "jsonrpc": "1.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params)
        }
        session = await self._get_session()

        try:
            async with session.post(self.url, json=payload) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
                if not isinstance(body, dict):
                    raise UpstreamError(
                        f"Unexpected response from node: HTTP {response.status}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("rpc_transport_error", method=method, error=str(e),
                         error_type=type(e).__name__)
            raise UpstreamError(f"Node request failed: {e}") from e

        error = body.get("error")
        if error:
            code = error.get("code")
            message = error.get("message", "Unknown node error")
            if code in NOT_FOUND_CODES:
                logger.debug("rpc_not_found", method=method, code=code, identifier=identifier)
                raise BlockNotFoundError(identifier, code)
            logger.error("rpc_error", method=method, code=code, message=message)
            raise UpstreamError(message, code)

        return body.get("result")

    async def refresh_height(self) -> int:
        self._height = await self.call("getblockcount")
        return self._height

    async def get_raw_block(self, block_hash: str) -> bytes:
        raw_hex = await self.call("getblock", block_hash, 0, identifier=block_hash)
        try:
            return bytes.fromhex(raw_hex)
        except (TypeError, ValueError) as e:
            raise UpstreamError(f"Node returned invalid block hex for {block_hash}") from e

    async def get_block(self, block_hash: str) -> RawBlock:
        raw = await self.get_raw_block(block_hash)
        return parse_block(raw, block_hash)

    async def get_block_hash(self, height: int) -> str:
        return await self.call("getblockhash", height, identifier=str(height))

    async def _resolve_hash(self, identifier: BlockIdentifier) -> str:
        if isinstance(identifier, int):
            return await self.get_block_hash(identifier)
        return identifier

    async def get_block_header(self, identifier: BlockIdentifier) -> BlockHeaderInfo:
        block_hash = await self._resolve_hash(identifier)
        result = await self.call("getblockheader", block_hash, True, identifier=block_hash)
        return BlockHeaderInfo.from_rpc(result)

    async def get_block_headers(self, identifier: BlockIdentifier, count: int) -> List[BlockHeaderInfo]:
        block_hash = await self._resolve_hash(identifier)
        result = await self.call("getblockheaders", block_hash, count, True, identifier=block_hash)
        return [BlockHeaderInfo.from_rpc(header) for header in result]

    async def get_block_hashes_by_timestamp(self, low: int, high: int) -> List[str]:
        result = await self.call("getblockhashes", high, low)
        return list(result or [])
