"""Helius enhanced-transactions client with retries and caching.

This module provides the transaction history source used for live scans:
- Enhanced transaction history from the Helius REST API
- SOL balance via Solana JSON-RPC ``getBalance``
- Retry logic with exponential backoff on transient errors
- Optional Redis caching of raw history payloads
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from solana_privacy_scanner.errors import DataUnavailableError
from solana_privacy_scanner.ingestor.models import LAMPORTS_PER_SOL, Transaction

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from solana_privacy_scanner.config import Settings

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_HELIUS_URL = "https://api.helius.xyz"
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_HISTORY_LIMIT = 100
DEFAULT_CACHE_TTL_SECONDS = 300  # 5 minutes
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0
DEFAULT_REQUEST_TIMEOUT = 30.0
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


class HeliusClient:
    """Transaction source backed by Helius and a Solana RPC endpoint.

    Example:
        ```python
        async with HeliusClient(api_key, redis=redis) as client:
            transactions = await client.get_history(address, limit=100)
            balance = await client.get_balance(address)
        ```
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_HELIUS_URL,
        rpc_url: str = DEFAULT_RPC_URL,
        redis: Redis | None = None,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Helius client.

        Args:
            api_key: Helius API key. History requests fail without one.
            base_url: Helius REST API base URL.
            rpc_url: Solana JSON-RPC endpoint for balance lookups.
            redis: Optional Redis client for caching history payloads.
            cache_ttl_seconds: Cache TTL in seconds.
            max_retries: Maximum attempts per request.
            retry_delay_seconds: Initial delay between retries.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport, used in tests.
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._rpc_url = rpc_url
        self._redis = redis
        self._cache_ttl = cache_ttl_seconds
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay_seconds
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._cache_prefix = "helius:"

    @classmethod
    def from_settings(cls, settings: Settings, redis: Redis | None = None) -> HeliusClient:
        """Create a client from application settings."""
        api_key = settings.helius.api_key
        return cls(
            api_key.get_secret_value() if api_key else None,
            base_url=settings.helius.api_url,
            rpc_url=settings.solana_rpc.rpc_url,
            redis=redis,
            cache_ttl_seconds=settings.redis.cache_ttl_seconds,
        )

    @property
    def is_configured(self) -> bool:
        """Return True if an API key is available."""
        return bool(self._api_key)

    async def __aenter__(self) -> HeliusClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _cache_key(self, key_type: str, address: str, limit: int) -> str:
        # Solana addresses are case-sensitive, so no normalization
        return f"{self._cache_prefix}{key_type}:{address}:{limit}"

    async def _get_cached(self, key: str) -> str | None:
        """Get value from cache."""
        if not self._redis:
            return None
        try:
            value = await self._redis.get(key)
            if isinstance(value, bytes):
                return value.decode()
            return str(value) if value is not None else None
        except Exception as e:
            logger.warning("Cache get failed: %s", e)
            return None

    async def _set_cached(self, key: str, value: str) -> None:
        """Set value in cache."""
        if not self._redis:
            return
        try:
            await self._redis.set(key, value, ex=self._cache_ttl)
        except Exception as e:
            logger.warning("Cache set failed: %s", e)

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request with retry and return the decoded JSON body.

        Transport errors and 429/5xx responses are retried with exponential
        backoff. Other error statuses fail immediately.

        Raises:
            DataUnavailableError: If the request cannot be completed.
        """
        last_error: str = "no attempts made"
        delay = self._retry_delay

        for attempt in range(self._max_retries):
            try:
                response = await self._client.request(method, url, params=params, json=payload)
            except httpx.HTTPError as e:
                last_error = f"{type(e).__name__}: {e}"
            else:
                if response.status_code not in RETRY_STATUS_CODES:
                    if response.is_error:
                        raise DataUnavailableError(
                            f"Request to {url} failed with status {response.status_code}"
                        )
                    try:
                        return response.json()
                    except ValueError as e:
                        raise DataUnavailableError(f"Invalid JSON from {url}") from e
                last_error = f"status {response.status_code}"

            logger.warning(
                "Request %s %s failed (attempt %d/%d): %s",
                method,
                url,
                attempt + 1,
                self._max_retries,
                last_error,
            )
            if attempt < self._max_retries - 1:
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff

        raise DataUnavailableError(
            f"Request to {url} failed after {self._max_retries} attempts: {last_error}"
        )

    async def get_history(
        self, address: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[Transaction]:
        """Fetch enhanced transaction history for an address.

        Args:
            address: Wallet address.
            limit: Maximum number of transactions to fetch.

        Returns:
            Parsed transactions, newest first as returned by the API.

        Raises:
            DataUnavailableError: If no API key is configured or the API fails.
        """
        if not self._api_key:
            raise DataUnavailableError("Helius API key is not configured")

        cache_key = self._cache_key("history", address, limit)
        cached = await self._get_cached(cache_key)
        if cached is not None:
            logger.debug("History cache hit for %s", address)
            raw = json.loads(cached)
        else:
            raw = await self._request_json(
                "GET",
                f"{self._base_url}/v0/addresses/{address}/transactions",
                params={"api-key": self._api_key, "limit": limit},
            )
            if not isinstance(raw, list):
                raise DataUnavailableError("Unexpected history payload from Helius")
            await self._set_cached(cache_key, json.dumps(raw))

        transactions: list[Transaction] = []
        for item in raw:
            try:
                transactions.append(Transaction.from_helius(item))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed transaction payload: %s", e)

        logger.info("Fetched %d transactions for %s", len(transactions), address)
        return transactions

    async def get_balance(self, address: str) -> float:
        """Fetch the SOL balance of an address.

        Args:
            address: Wallet address.

        Returns:
            Balance in SOL.

        Raises:
            DataUnavailableError: If the RPC call fails.
        """
        body = await self._request_json(
            "POST",
            self._rpc_url,
            payload={
                "jsonrpc": "2.0",
                "id": 1,
                "method": "getBalance",
                "params": [address],
            },
        )

        if not isinstance(body, dict) or "error" in body:
            error = body.get("error") if isinstance(body, dict) else body
            raise DataUnavailableError(f"getBalance failed: {error}")

        try:
            lamports = int(body["result"]["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise DataUnavailableError("Unexpected getBalance response") from e

        return lamports / LAMPORTS_PER_SOL
