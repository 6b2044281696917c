"""Counterparty clustering and wash trading detection.

Concentrating activity among a few counterparties makes it easy to link
wallets through graph analysis. This module classifies the counterparty
distribution of a wallet and separately looks for back-and-forth
transfer patterns with a single counterparty.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field

from solana_privacy_scanner.detector.models import (
    AddressFrequency,
    ClusteringResult,
    ClusterPattern,
    WashTradePair,
    WashTradingResult,
)
from solana_privacy_scanner.ingestor.models import Transaction, extract_counterparties
from solana_privacy_scanner.metrics import DETECTOR_FAILURES

logger = logging.getLogger(__name__)

# Default configuration
MIN_INTERACTIONS_FOR_PATTERN = 5
CLUSTER_THRESHOLD_PERCENTAGE = 50.0
TOP_ADDRESS_COUNT = 5

SMALL_CLUSTER_MIN_ADDRESSES = 3
SMALL_CLUSTER_THRESHOLD = 80.0
FUNNEL_MIN_ADDRESSES = 10
FUNNEL_THRESHOLD = 70.0

# Risk contribution per pattern
CLUSTER_DETECTED_POINTS = 20
HIGH_FREQUENCY_SAME_ADDRESS_POINTS = 8
PATTERN_POINTS: dict[ClusterPattern, int] = {
    ClusterPattern.SINGLE_COUNTERPARTY: CLUSTER_DETECTED_POINTS,
    ClusterPattern.WASH_TRADING: CLUSTER_DETECTED_POINTS + 10,
    ClusterPattern.SMALL_CLUSTER: CLUSTER_DETECTED_POINTS * 7 // 10,
    ClusterPattern.FUNNEL: CLUSTER_DETECTED_POINTS * 5 // 10,
}

MIN_WASH_SENDS = 2
MIN_WASH_RECEIVES = 2
MIN_WASH_ALTERNATIONS = 3


def classify_pattern(frequencies: Sequence[AddressFrequency]) -> ClusterPattern:
    """Classify a counterparty distribution.

    Rules are evaluated in order and the first match wins:

    1. single_counterparty: top address share >= 50%
    2. small_cluster: at least 3 counterparties, top 3 shares sum >= 80%
    3. funnel: at least 10 counterparties, top 5 shares sum >= 70%
    4. none

    Args:
        frequencies: Counterparties sorted by descending count.

    Returns:
        The matching ClusterPattern.
    """
    if not frequencies:
        return ClusterPattern.NONE

    if frequencies[0].percentage >= CLUSTER_THRESHOLD_PERCENTAGE:
        return ClusterPattern.SINGLE_COUNTERPARTY

    if len(frequencies) >= SMALL_CLUSTER_MIN_ADDRESSES:
        top3 = sum(f.percentage for f in frequencies[:3])
        if top3 >= SMALL_CLUSTER_THRESHOLD:
            return ClusterPattern.SMALL_CLUSTER

    if len(frequencies) >= FUNNEL_MIN_ADDRESSES:
        top5 = sum(f.percentage for f in frequencies[:5])
        if top5 >= FUNNEL_THRESHOLD:
            return ClusterPattern.FUNNEL

    return ClusterPattern.NONE


class ClusteringDetector:
    """Detects concentration of activity among few counterparties.

    Percentages are relative to total counterparty interactions (one per
    native or token transfer), not to the number of transactions.

    Attributes:
        min_interactions: Minimum interactions before any pattern is reported.
    """

    def __init__(self, *, min_interactions: int = MIN_INTERACTIONS_FOR_PATTERN) -> None:
        """Initialize the clustering detector.

        Args:
            min_interactions: Interactions required for analysis (default 5).
        """
        self.min_interactions = min_interactions

    def detect(self, transactions: Sequence[Transaction], address: str) -> ClusteringResult:
        """Analyze the counterparty distribution of a wallet.

        Never raises: any unexpected error yields ``ClusteringResult.empty()``.

        Args:
            transactions: Parsed transaction history.
            address: The wallet being analyzed.

        Returns:
            ClusteringResult with the classified pattern.
        """
        try:
            result = self._analyze(transactions, address)
        except Exception:
            logger.exception("Clustering detection failed for %s", address)
            DETECTOR_FAILURES.labels(detector="clustering").inc()
            return ClusteringResult.empty(total_transactions=len(transactions))

        if result.detected:
            logger.info(
                "Clustering pattern detected: %s (top=%.1f%%, unique=%d)",
                result.pattern.value,
                result.clustering_percentage,
                result.total_unique_addresses,
            )
        else:
            logger.debug(
                "No significant clustering: %d unique counterparties",
                result.total_unique_addresses,
            )
        return result

    def _analyze(self, transactions: Sequence[Transaction], address: str) -> ClusteringResult:
        counts = extract_counterparties(transactions, address)
        total_interactions = sum(counts.values())

        if total_interactions < self.min_interactions:
            logger.debug(
                "Not enough interactions for clustering analysis (%d)", total_interactions
            )
            return ClusteringResult.empty(
                total_transactions=len(transactions),
                total_unique_addresses=len(counts),
            )

        # sorted() is stable: ties keep first-seen order
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        frequencies = [
            AddressFrequency(
                address=other,
                count=count,
                percentage=(count / total_interactions) * 100,
            )
            for other, count in ranked
        ]

        top = frequencies[0]
        pattern = classify_pattern(frequencies)
        detected = (
            top.percentage >= CLUSTER_THRESHOLD_PERCENTAGE or pattern is not ClusterPattern.NONE
        )

        risk = 0
        if detected:
            risk = PATTERN_POINTS.get(pattern, HIGH_FREQUENCY_SAME_ADDRESS_POINTS)

        return ClusteringResult(
            detected=detected,
            pattern=pattern,
            clustering_percentage=top.percentage,
            top_addresses=tuple(frequencies[:TOP_ADDRESS_COUNT]),
            dominant_address=top.address,
            total_unique_addresses=len(counts),
            total_interactions=total_interactions,
            total_transactions=len(transactions),
            risk_contribution=risk,
        )


@dataclass
class _Timeline:
    sent: list[int] = field(default_factory=list)
    received: list[int] = field(default_factory=list)


class WashTradingDetector:
    """Detects back-and-forth SOL transfers with a single counterparty.

    For each counterparty with at least two sends and two receives, the
    send/receive events are merged chronologically and the number of
    direction changes between neighbours is counted. Three or more
    alternations flag the counterparty.
    """

    def __init__(
        self,
        *,
        min_sends: int = MIN_WASH_SENDS,
        min_receives: int = MIN_WASH_RECEIVES,
        min_alternations: int = MIN_WASH_ALTERNATIONS,
    ) -> None:
        self.min_sends = min_sends
        self.min_receives = min_receives
        self.min_alternations = min_alternations

    def detect(self, transactions: Sequence[Transaction], address: str) -> WashTradingResult:
        """Look for alternating send/receive patterns.

        Only native transfers are considered. Never raises.

        Args:
            transactions: Parsed transaction history.
            address: The wallet being analyzed.

        Returns:
            WashTradingResult listing every flagged counterparty.
        """
        try:
            pairs = self._find_pairs(transactions, address)
        except Exception:
            logger.exception("Wash trading detection failed for %s", address)
            DETECTOR_FAILURES.labels(detector="wash_trading").inc()
            return WashTradingResult.empty()

        if pairs:
            logger.info("Wash trading pattern detected with %d counterparties", len(pairs))
        return WashTradingResult(detected=bool(pairs), pairs=tuple(pairs))

    def _find_pairs(
        self, transactions: Sequence[Transaction], address: str
    ) -> list[WashTradePair]:
        timelines: dict[str, _Timeline] = defaultdict(_Timeline)

        for tx in transactions:
            for transfer in tx.native_transfers:
                if transfer.from_address == address and transfer.to_address:
                    timelines[transfer.to_address].sent.append(tx.timestamp)
                if transfer.to_address == address and transfer.from_address:
                    timelines[transfer.from_address].received.append(tx.timestamp)

        pairs: list[WashTradePair] = []
        for other, timeline in timelines.items():
            if len(timeline.sent) < self.min_sends or len(timeline.received) < self.min_receives:
                continue

            alternations = count_alternations(timeline.sent, timeline.received)
            if alternations >= self.min_alternations:
                pairs.append(
                    WashTradePair(
                        address=other,
                        send_count=len(timeline.sent),
                        receive_count=len(timeline.received),
                        alternations=alternations,
                    )
                )

        return pairs


def count_alternations(sent: Sequence[int], received: Sequence[int]) -> int:
    """Count direction changes in the merged, time-ordered event sequence.

    Events at equal timestamps keep sent-before-received order.
    """
    events = sorted(
        [(t, "sent") for t in sent] + [(t, "received") for t in received],
        key=lambda event: event[0],
    )
    return sum(1 for prev, cur in zip(events, events[1:]) if prev[1] != cur[1])


def clustering_warnings(result: ClusteringResult) -> list[str]:
    """Generate warning messages for a clustering result."""
    if not result.detected:
        return []

    match result.pattern:
        case ClusterPattern.SINGLE_COUNTERPARTY:
            return [
                f"{result.clustering_percentage:.1f}% of transactions are with a single address. "
                "This creates a clear link between your wallets."
            ]
        case ClusterPattern.SMALL_CLUSTER:
            return [
                f"Your transactions are concentrated among just {len(result.top_addresses)} "
                "addresses. This clustering pattern can be used to link your wallets."
            ]
        case ClusterPattern.WASH_TRADING:
            return [
                "Suspicious back-and-forth transaction pattern detected. "
                "This behavior is easily identifiable on-chain."
            ]
        case ClusterPattern.FUNNEL:
            return [
                "Funnel pattern detected: many sources funneling to few destinations. "
                "This pattern suggests wallet consolidation."
            ]
        case ClusterPattern.NONE:
            return []


def clustering_actions(result: ClusteringResult) -> list[str]:
    """Generate remediation actions for a clustering result."""
    if not result.detected:
        return []

    actions = [
        "Use Radr Labs to break wallet clustering patterns and obfuscate your transaction graph."
    ]

    if result.pattern is ClusterPattern.SINGLE_COUNTERPARTY:
        actions.append("Diversify your transaction patterns - use multiple intermediate wallets.")

    if result.pattern is ClusterPattern.WASH_TRADING:
        actions.append("Avoid repetitive back-and-forth transactions with the same address.")

    actions.append(
        "Consider using Elusiv for private transactions that don't create linkable patterns."
    )
    return actions
