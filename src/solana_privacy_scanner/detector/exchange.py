"""Centralized exchange interaction detection.

Direct transfers between a wallet and an exchange hot wallet tie the
wallet to a KYC-verified exchange account. Deposits (exchange -> wallet)
are weighted more heavily than withdrawals (wallet -> exchange).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from solana_privacy_scanner.detector.models import (
    CEXResult,
    ExchangeTransfer,
    TransferDirection,
)
from solana_privacy_scanner.ingestor.models import LAMPORTS_PER_SOL, Transaction
from solana_privacy_scanner.metrics import DETECTOR_FAILURES
from solana_privacy_scanner.profiler.entities import KnownExchangeRegistry

logger = logging.getLogger(__name__)

DEPOSIT_POINTS = 15
WITHDRAWAL_POINTS = 10
MAX_CONTRIBUTION = 50


class ExchangeInteractionDetector:
    """Detects deposits from and withdrawals to known exchange addresses.

    Scoring:
        risk_contribution = min(deposits * 15 + withdrawals * 10, 50)

    Example:
        ```python
        detector = ExchangeInteractionDetector()
        result = detector.detect(transactions, wallet)
        if result.detected:
            print(result.exchanges_involved)
        ```
    """

    def __init__(self, registry: KnownExchangeRegistry | None = None) -> None:
        """Initialize the detector.

        Args:
            registry: Exchange address registry. Creates the default if None.
        """
        self.registry = registry or KnownExchangeRegistry()

    def detect(self, transactions: Sequence[Transaction], address: str) -> CEXResult:
        """Scan transaction history for exchange interactions.

        Never raises: any unexpected error yields ``CEXResult.empty()``.

        Args:
            transactions: Parsed transaction history.
            address: The wallet being analyzed.

        Returns:
            CEXResult with every deposit and withdrawal found.
        """
        try:
            result = self._scan(transactions, address)
        except Exception:
            logger.exception("Exchange detection failed for %s", address)
            DETECTOR_FAILURES.labels(detector="exchange").inc()
            return CEXResult.empty()

        if result.detected:
            logger.info(
                "Exchange activity detected: deposits=%d withdrawals=%d exchanges=%s",
                len(result.deposits),
                len(result.withdrawals),
                ", ".join(result.exchanges_involved),
            )
        else:
            logger.debug("No exchange activity detected for %s", address)
        return result

    def _scan(self, transactions: Sequence[Transaction], address: str) -> CEXResult:
        deposits: list[ExchangeTransfer] = []
        withdrawals: list[ExchangeTransfer] = []
        # dict keeps first-seen order
        exchanges: dict[str, None] = {}

        for tx in transactions:
            transfers: list[tuple[str, str, float]] = [
                (t.from_address, t.to_address, t.amount / LAMPORTS_PER_SOL)
                for t in tx.native_transfers
            ]
            transfers.extend(
                (t.from_address, t.to_address, float(t.amount)) for t in tx.token_transfers
            )

            for from_address, to_address, amount in transfers:
                source_name = self.registry.lookup(from_address)
                if source_name is not None and to_address == address:
                    deposits.append(
                        ExchangeTransfer(
                            signature=tx.signature,
                            timestamp=tx.timestamp,
                            exchange_name=source_name,
                            exchange_address=from_address,
                            direction=TransferDirection.DEPOSIT,
                            amount=amount,
                        )
                    )
                    exchanges[source_name] = None

                destination_name = self.registry.lookup(to_address)
                if destination_name is not None and from_address == address:
                    withdrawals.append(
                        ExchangeTransfer(
                            signature=tx.signature,
                            timestamp=tx.timestamp,
                            exchange_name=destination_name,
                            exchange_address=to_address,
                            direction=TransferDirection.WITHDRAWAL,
                            amount=amount,
                        )
                    )
                    exchanges[destination_name] = None

            # Exchanges often pay the fee on their own payouts
            fee_payer_name = self.registry.lookup(tx.fee_payer)
            if fee_payer_name is not None and tx.fee_payer != address:
                already_tracked = any(d.signature == tx.signature for d in deposits)
                if not already_tracked:
                    deposits.append(
                        ExchangeTransfer(
                            signature=tx.signature,
                            timestamp=tx.timestamp,
                            exchange_name=fee_payer_name,
                            exchange_address=tx.fee_payer,
                            direction=TransferDirection.DEPOSIT,
                        )
                    )
                    exchanges[fee_payer_name] = None

        risk = min(
            len(deposits) * DEPOSIT_POINTS + len(withdrawals) * WITHDRAWAL_POINTS,
            MAX_CONTRIBUTION,
        )

        return CEXResult(
            detected=bool(deposits or withdrawals),
            deposits=tuple(deposits),
            withdrawals=tuple(withdrawals),
            exchanges_involved=tuple(exchanges),
            risk_contribution=risk,
        )


def exchange_warnings(result: CEXResult) -> list[str]:
    """Generate warning messages for exchange interactions."""
    warnings: list[str] = []

    for deposit in result.deposits:
        warnings.append(
            f"Direct deposit from {deposit.exchange_name} detected. "
            "This links your CEX KYC identity to this wallet."
        )

    for withdrawal in result.withdrawals:
        warnings.append(
            f"Withdrawal to {withdrawal.exchange_name} detected. "
            "Your wallet activity is now linked to your exchange account."
        )

    return warnings


def exchange_actions(result: CEXResult) -> list[str]:
    """Generate remediation actions for exchange interactions."""
    actions: list[str] = []

    if result.deposits:
        actions.append(
            "Consider using Privacy Cash to create a clean wallet for future DeFi activities."
        )
        actions.append("Use intermediate wallets between CEX and your main DeFi wallet.")

    if result.withdrawals:
        actions.append("Before depositing to CEX, route through an intermediate wallet.")
        actions.append(
            "Consider using compliant privacy solutions like Elusiv for future transactions."
        )

    if len(result.exchanges_involved) > 1:
        actions.append(
            "Multiple exchanges linked to this wallet - "
            "consider compartmentalizing with separate wallets."
        )

    return actions
