"""Compliance screening of wallet addresses.

The screener is a deterministic stand-in for a sanctions screening
service: fixed fixture sets decide Sanctioned and Flagged, and every
other well-formed address is Clean with a pseudo-score derived from a
stable hash of the address. It makes no claim of legal accuracy.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from solana_privacy_scanner.detector.models import (
    ComplianceResult,
    ComplianceStatus,
    CounterpartyRisks,
)

logger = logging.getLogger(__name__)

SANCTIONED_ADDRESSES: frozenset[str] = frozenset(
    {
        "7eEqn3zGpQqq8fYjzqhfvwRRRVrBe3D3P4YfZ12GsAC1",  # mixer
        "CnK9VjRNgSJcq1UR89J8RmMNPSYKe2qkM4eRLmWMKPxn",  # exploit
        "Hp9SQbMoEhN9GwK1fY8xEyJBpDHZtCxXhpKA5KZjKekW",  # OFAC listed
    }
)

FLAGGED_ADDRESSES: frozenset[str] = frozenset(
    {
        "E6tYH8TcVpzWS7YfcM9cKH8NbxRcPQjKJqvUTWKD9FqN",
        "3JQRMn5sFjE7M3YPdCkL8KZKvN2qnhXTxmRYJWPsZKaB",
    }
)

MIN_ADDRESS_LENGTH = 32
MAX_ADDRESS_LENGTH = 44

SANCTIONED_RISK_SCORE = 100
FLAGGED_RISK_SCORE = 65
CLEAN_RISK_MODULUS = 30
# Failed screens assume moderate risk
SCREEN_ERROR_RISK_SCORE = 50
DEFAULT_MAX_CONCURRENCY = 10

INVALID_FORMAT_FLAG = "Invalid address format"
SCREEN_ERROR_FLAG = "Error during risk check"


def address_hash(address: str) -> int:
    """Return a stable non-negative hash of an address.

    Polynomial rolling hash ``h = h * 31 + ord(c)`` wrapped to a signed
    32-bit integer after each step, then made absolute. Independent of
    ``PYTHONHASHSEED``.
    """
    h = 0
    for char in address:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
        if h >= 0x80000000:
            h -= 0x100000000
    return abs(h)


class ComplianceScreener:
    """Classifies addresses as Clean, Flagged, Sanctioned or Unknown.

    Classification is a pure function of the address. The only
    non-deterministic field, ``checked_at``, comes from an injectable
    clock so tests can pin it.

    Example:
        ```python
        screener = ComplianceScreener()
        result = await screener.screen(address)
        risks = await screener.screen_counterparties(counterparties)
        ```
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        """Initialize the screener.

        Args:
            clock: Returns the timestamp stored in results. Defaults to UTC now.
            max_concurrency: Maximum screens running at once in a batch.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._clock = clock or (lambda: datetime.now(UTC))
        self.max_concurrency = max_concurrency

    def classify(self, address: str) -> ComplianceResult:
        """Classify a single address synchronously.

        Args:
            address: The address to screen.

        Returns:
            ComplianceResult for the address.
        """
        checked_at = self._clock()

        if not address or not MIN_ADDRESS_LENGTH <= len(address) <= MAX_ADDRESS_LENGTH:
            return ComplianceResult.unknown(address, INVALID_FORMAT_FLAG, checked_at)

        if address in SANCTIONED_ADDRESSES:
            logger.warning("Sanctioned address detected: %s", address)
            return ComplianceResult(
                address=address,
                status=ComplianceStatus.SANCTIONED,
                risk_score=SANCTIONED_RISK_SCORE,
                checked_at=checked_at,
                sanction_lists=("OFAC SDN", "EU Sanctions List"),
                flags=("Linked to illicit activities", "On government watchlist"),
                linked_to_mixer=True,
            )

        if address in FLAGGED_ADDRESSES:
            logger.warning("Flagged address detected: %s", address)
            return ComplianceResult(
                address=address,
                status=ComplianceStatus.FLAGGED,
                risk_score=FLAGGED_RISK_SCORE,
                checked_at=checked_at,
                flags=("Suspicious activity patterns", "Under investigation"),
            )

        risk_score = address_hash(address) % CLEAN_RISK_MODULUS
        logger.debug("Address %s is clean (risk=%d)", address, risk_score)
        return ComplianceResult(
            address=address,
            status=ComplianceStatus.CLEAN,
            risk_score=risk_score,
            checked_at=checked_at,
        )

    async def screen(self, address: str) -> ComplianceResult:
        """Screen a single address.

        Async so a networked screening backend can replace the fixture
        lookup without changing callers.
        """
        return self.classify(address)

    async def screen_safely(self, address: str) -> ComplianceResult:
        """Screen an address, returning Unknown if the screen raises."""
        try:
            return await self.screen(address)
        except Exception:
            logger.exception("Compliance screen failed for %s", address)
            return ComplianceResult.unknown(
                address, SCREEN_ERROR_FLAG, self._clock(), risk_score=SCREEN_ERROR_RISK_SCORE
            )

    async def screen_counterparties(self, addresses: Iterable[str]) -> CounterpartyRisks:
        """Screen every counterparty concurrently.

        Screens run with at most ``max_concurrency`` in flight. A screen
        that raises is logged and treated as Unknown.

        Args:
            addresses: Distinct counterparty addresses.

        Returns:
            CounterpartyRisks with sanctioned and flagged addresses in input order.
        """
        unique = list(dict.fromkeys(addresses))
        if not unique:
            return CounterpartyRisks()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(address: str) -> ComplianceResult:
            async with semaphore:
                return await self.screen_safely(address)

        results = await asyncio.gather(*(bounded(address) for address in unique))

        sanctioned = tuple(
            r.address for r in results if r.status is ComplianceStatus.SANCTIONED
        )
        flagged = tuple(r.address for r in results if r.status is ComplianceStatus.FLAGGED)

        logger.debug(
            "Screened %d counterparties: sanctioned=%d flagged=%d",
            len(unique),
            len(sanctioned),
            len(flagged),
        )
        return CounterpartyRisks(
            sanctioned_addresses=sanctioned,
            flagged_addresses=flagged,
            total_checked=len(unique),
        )
