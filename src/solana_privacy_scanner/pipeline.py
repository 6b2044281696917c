"""Analysis pipeline orchestrating data fetch, detection and scoring.

This module wires together:
- A transaction source (Helius, demo data or a test double)
- The exchange, clustering, wash trading and asset detectors
- Compliance screening of the wallet and every counterparty
- The risk aggregator that produces the final report
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

from solana_privacy_scanner.detector.assets import IdentityAssetDetector
from solana_privacy_scanner.detector.clustering import ClusteringDetector, WashTradingDetector
from solana_privacy_scanner.detector.compliance import ComplianceScreener
from solana_privacy_scanner.detector.exchange import ExchangeInteractionDetector
from solana_privacy_scanner.detector.scorer import DetectionBundle, RiskAggregator
from solana_privacy_scanner.errors import (
    DataUnavailableError,
    InvalidAddressError,
    validate_address,
)
from solana_privacy_scanner.ingestor.demo import DemoTransactionSource
from solana_privacy_scanner.ingestor.models import Transaction, extract_counterparties
from solana_privacy_scanner.metrics import DATA_SOURCE_FAILURES, SCAN_DURATION, SCANS_TOTAL
from solana_privacy_scanner.profiler.entities import KnownExchangeRegistry
from solana_privacy_scanner.report.models import (
    DEFAULT_SOL_PRICE_USD,
    AnalysisMetadata,
    FinancialExposure,
    Report,
)

if TYPE_CHECKING:
    from solana_privacy_scanner.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100
DEFAULT_FETCH_TIMEOUT_SECONDS = 60.0


class TransactionSource(Protocol):
    """Protocol for transaction history providers."""

    async def get_history(
        self, address: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[Transaction]:
        """Return parsed transactions for an address."""
        ...

    async def get_balance(self, address: str) -> float:
        """Return the SOL balance of an address."""
        ...


class PrivacyAnalyzer:
    """Runs the full privacy analysis for a wallet.

    Every collaborator is injectable. Detectors run synchronously on the
    same inputs; only compliance screening is awaited, with the wallet
    and all counterparties screened concurrently.

    Example:
        ```python
        async with HeliusClient(api_key) as client:
            analyzer = PrivacyAnalyzer(client)
            report = await analyzer.scan(address)
            print(report.score, report.risk_tier)
        ```
    """

    def __init__(
        self,
        source: TransactionSource | None = None,
        *,
        registry: KnownExchangeRegistry | None = None,
        screener: ComplianceScreener | None = None,
        aggregator: RiskAggregator | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        sol_price_usd: float = DEFAULT_SOL_PRICE_USD,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            source: Transaction source used by ``scan``.
            registry: Exchange registry. Creates the default if None.
            screener: Compliance screener. Creates one sharing ``clock`` if None.
            aggregator: Risk aggregator. Creates the default if None.
            history_limit: Maximum transactions fetched per scan.
            sol_price_usd: SOL price used for financial exposure.
            fetch_timeout_seconds: Time allowed for fetching history.
            clock: Returns the report timestamp. Defaults to UTC now.
        """
        self._source = source
        self._clock = clock or (lambda: datetime.now(UTC))
        self._registry = registry or KnownExchangeRegistry()
        self._screener = screener or ComplianceScreener(clock=self._clock)
        self._aggregator = aggregator or RiskAggregator()
        self.history_limit = history_limit
        self.sol_price_usd = sol_price_usd
        self.fetch_timeout_seconds = fetch_timeout_seconds

        self._exchange_detector = ExchangeInteractionDetector(self._registry)
        self._clustering_detector = ClusteringDetector()
        self._wash_trading_detector = WashTradingDetector()
        self._asset_detector = IdentityAssetDetector()

    @classmethod
    def from_settings(
        cls, settings: Settings, source: TransactionSource | None = None
    ) -> PrivacyAnalyzer:
        """Create an analyzer configured from application settings."""
        return cls(
            source,
            screener=ComplianceScreener(
                max_concurrency=settings.analysis.compliance_concurrency
            ),
            history_limit=settings.analysis.max_transactions,
            sol_price_usd=settings.analysis.sol_price_usd,
        )

    @property
    def demo_mode(self) -> bool:
        """Return True if the configured source produces demo data."""
        return isinstance(self._source, DemoTransactionSource)

    async def analyze(
        self,
        address: str,
        transactions: Sequence[Transaction],
        *,
        balance: float = 0.0,
    ) -> Report:
        """Analyze an already-fetched transaction history.

        Never raises for bad input: an invalid address yields a degraded
        report with score 0 and tier CRITICAL.

        Args:
            address: Wallet address to analyze.
            transactions: Transaction history (may be empty).
            balance: Current SOL balance, used for financial exposure only.

        Returns:
            The complete privacy report.
        """
        return await self._run(address, transactions, balance, data_source_available=True)

    async def scan(self, address: str) -> Report:
        """Fetch a wallet's history and balance, then analyze it.

        If history cannot be fetched the analysis runs on an empty
        history and the report metadata records the data source as
        unavailable.

        Args:
            address: Wallet address to analyze.

        Returns:
            The complete privacy report.
        """
        try:
            validate_address(address)
        except InvalidAddressError:
            return await self._run(address, (), 0.0, data_source_available=False)

        transactions, available = await self._fetch_history(address)
        balance = await self._fetch_balance(address)
        return await self._run(address, transactions, balance, data_source_available=available)

    async def _fetch_history(self, address: str) -> tuple[list[Transaction], bool]:
        if self._source is None:
            logger.warning("No transaction source configured, analyzing empty history")
            return [], False

        try:
            transactions = await asyncio.wait_for(
                self._source.get_history(address, limit=self.history_limit),
                timeout=self.fetch_timeout_seconds,
            )
        except DataUnavailableError as e:
            logger.warning("Transaction history unavailable for %s: %s", address, e)
        except TimeoutError:
            logger.warning(
                "Transaction history fetch timed out after %.1fs for %s",
                self.fetch_timeout_seconds,
                address,
            )
        except Exception:
            logger.exception("Transaction source failed for %s", address)
        else:
            return list(transactions), True

        DATA_SOURCE_FAILURES.inc()
        return [], False

    async def _fetch_balance(self, address: str) -> float:
        if self._source is None:
            return 0.0
        try:
            return await self._source.get_balance(address)
        except DataUnavailableError as e:
            logger.warning("Balance unavailable for %s: %s", address, e)
        except Exception:
            logger.exception("Balance lookup failed for %s", address)
        DATA_SOURCE_FAILURES.inc()
        return 0.0

    async def _run(
        self,
        address: str,
        transactions: Sequence[Transaction],
        balance: float,
        *,
        data_source_available: bool,
    ) -> Report:
        start = time.perf_counter()

        try:
            validate_address(address)
        except InvalidAddressError as e:
            logger.warning("Rejecting analysis: %s", e)
            report = Report.failed(
                address,
                str(e),
                analyzed_at=self._clock(),
                metadata=AnalysisMetadata(
                    data_source_available=False,
                    demo_mode=self.demo_mode,
                    analysis_time_ms=_elapsed_ms(start),
                ),
            )
            SCANS_TOTAL.labels(tier=report.risk_tier.value).inc()
            return report

        logger.info("Analyzing %s (%d transactions)", address, len(transactions))

        cex = self._exchange_detector.detect(transactions, address)
        clustering = self._clustering_detector.detect(transactions, address)
        wash_trading = self._wash_trading_detector.detect(transactions, address)
        assets = self._asset_detector.detect(transactions, address)

        counterparties = extract_counterparties(transactions, address)
        compliance, counterparty_risks = await asyncio.gather(
            self._screener.screen_safely(address),
            self._screener.screen_counterparties(counterparties),
        )

        assessment = self._aggregator.assess(
            DetectionBundle(
                cex=cex,
                clustering=clustering,
                wash_trading=wash_trading,
                assets=assets,
                compliance=compliance,
                counterparty_risks=counterparty_risks,
            )
        )

        elapsed = time.perf_counter() - start
        SCAN_DURATION.observe(elapsed)
        SCANS_TOTAL.labels(tier=assessment.tier.value).inc()

        return Report(
            address=address,
            analyzed_at=self._clock(),
            balance=balance,
            transactions_analyzed=len(transactions),
            score=assessment.score,
            risk_tier=assessment.tier,
            risk_description=assessment.description,
            warnings=assessment.warnings,
            recommendations=assessment.recommendations,
            breakdown=assessment.breakdown,
            cex=cex,
            clustering=clustering,
            wash_trading=wash_trading,
            assets=assets,
            compliance=compliance,
            counterparty_risks=counterparty_risks,
            financial_exposure=FinancialExposure.calculate(cex, balance, self.sol_price_usd),
            metadata=AnalysisMetadata(
                data_source_available=data_source_available,
                demo_mode=self.demo_mode,
                analysis_time_ms=int(elapsed * 1000),
            ),
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
