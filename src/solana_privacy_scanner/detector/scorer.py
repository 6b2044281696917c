"""Risk aggregator combining all detector results into a privacy score.

This module provides the RiskAggregator class that turns the outputs of
the exchange, clustering, wash trading, asset and compliance detectors
into a single 0-100 privacy score with a risk tier, warnings and
recommendations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import assert_never

from solana_privacy_scanner.detector.assets import asset_actions, asset_warnings
from solana_privacy_scanner.detector.clustering import clustering_actions, clustering_warnings
from solana_privacy_scanner.detector.exchange import exchange_actions, exchange_warnings
from solana_privacy_scanner.detector.models import (
    AssetsResult,
    CEXResult,
    ClusteringResult,
    ComplianceResult,
    ComplianceStatus,
    CounterpartyRisks,
    Deduction,
    Priority,
    PrivacyWarning,
    Recommendation,
    RiskAssessment,
    RiskTier,
    ScoreBreakdown,
    Severity,
    WashTradingResult,
)
from solana_privacy_scanner.detector.recommendations import UseCase, tool_for

logger = logging.getLogger(__name__)

MAX_SCORE = 100
MIN_SCORE = 0

# Tier upper bounds (inclusive)
CRITICAL_THRESHOLD = 25
HIGH_THRESHOLD = 50
MEDIUM_THRESHOLD = 75

SANCTIONED_WALLET_POINTS = 50
FLAGGED_WALLET_POINTS = 25
SANCTIONED_COUNTERPARTY_POINTS = 20
MAX_SANCTIONED_COUNTERPARTY_POINTS = 40
WASH_TRADING_POINTS = 15

# Scores below this get a general fresh-wallet recommendation
GENERAL_RECOMMENDATION_THRESHOLD = 50

TIER_DESCRIPTIONS: dict[RiskTier, str] = {
    RiskTier.CRITICAL: (
        "Critical privacy risk. Your wallet is highly traceable "
        "and may be linked to your identity."
    ),
    RiskTier.HIGH: (
        "High privacy risk. Significant linkages exist that could compromise your anonymity."
    ),
    RiskTier.MEDIUM: (
        "Moderate privacy risk. Some patterns could be used to link your activities."
    ),
    RiskTier.LOW: "Good privacy posture. Minimal identifiable patterns detected.",
}


@dataclass(frozen=True)
class DetectionBundle:
    """All detector outputs for a single wallet.

    Collects every result the aggregator needs so scoring is a pure
    function of one value.
    """

    cex: CEXResult = field(default_factory=CEXResult.empty)
    clustering: ClusteringResult = field(default_factory=ClusteringResult.empty)
    wash_trading: WashTradingResult = field(default_factory=WashTradingResult.empty)
    assets: AssetsResult = field(default_factory=AssetsResult.empty)
    compliance: ComplianceResult | None = None
    counterparty_risks: CounterpartyRisks = field(default_factory=CounterpartyRisks)

    @property
    def compliance_status(self) -> ComplianceStatus:
        """Return the target's compliance status, Unknown if unscreened."""
        return self.compliance.status if self.compliance else ComplianceStatus.UNKNOWN


def determine_tier(score: int) -> RiskTier:
    """Map a score to its risk tier.

    Boundaries are inclusive on the riskier side: 25 is CRITICAL,
    50 is HIGH and 75 is MEDIUM.
    """
    if score <= CRITICAL_THRESHOLD:
        return RiskTier.CRITICAL
    if score <= HIGH_THRESHOLD:
        return RiskTier.HIGH
    if score <= MEDIUM_THRESHOLD:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def describe_tier(tier: RiskTier) -> str:
    """Return the fixed description for a risk tier."""
    match tier:
        case RiskTier.CRITICAL | RiskTier.HIGH | RiskTier.MEDIUM | RiskTier.LOW:
            return TIER_DESCRIPTIONS[tier]
        case _:
            assert_never(tier)


def compliance_deduction(status: ComplianceStatus) -> Deduction | None:
    """Return the deduction for the wallet's own compliance status."""
    match status:
        case ComplianceStatus.SANCTIONED:
            return Deduction("Wallet on sanctions list", SANCTIONED_WALLET_POINTS)
        case ComplianceStatus.FLAGGED:
            return Deduction("Wallet flagged for suspicious activity", FLAGGED_WALLET_POINTS)
        case ComplianceStatus.CLEAN | ComplianceStatus.UNKNOWN:
            return None
        case _:
            assert_never(status)


class RiskAggregator:
    """Combines detector results into a privacy score.

    Scoring Formula:
        score = 100
        score -= cex.risk_contribution
        score -= clustering.risk_contribution
        score -= assets.risk_contribution
        score -= 50 if wallet sanctioned, 25 if flagged
        score -= min(sanctioned_counterparties * 20, 40)
        score -= 15 if wash trading detected

        final_score = clamp(score, 0, 100)

    Each deduction is recorded only when its points are positive, in
    the order above.

    Example:
        ```python
        aggregator = RiskAggregator()
        assessment = aggregator.assess(
            DetectionBundle(cex=cex, clustering=clustering, compliance=compliance)
        )
        print(assessment.score, assessment.tier)
        ```
    """

    def assess(self, bundle: DetectionBundle) -> RiskAssessment:
        """Score a wallet and build its warnings and recommendations.

        Args:
            bundle: Every detector result for the wallet.

        Returns:
            RiskAssessment with breakdown, tier and user-facing text.
        """
        breakdown = self.calculate_score(bundle)
        tier = determine_tier(breakdown.score)

        logger.info(
            "Privacy score calculated: score=%d tier=%s deductions=%d",
            breakdown.score,
            tier.value,
            len(breakdown.deductions),
        )

        return RiskAssessment(
            breakdown=breakdown,
            tier=tier,
            description=describe_tier(tier),
            warnings=tuple(self.collect_warnings(bundle)),
            recommendations=tuple(self.collect_recommendations(bundle, breakdown.score)),
        )

    def calculate_score(self, bundle: DetectionBundle) -> ScoreBreakdown:
        """Apply deductions in order and clamp the result.

        Args:
            bundle: Every detector result for the wallet.

        Returns:
            ScoreBreakdown with the deduction log and final score.
        """
        deductions: list[Deduction] = []

        if bundle.cex.risk_contribution > 0:
            deductions.append(
                Deduction(
                    f"CEX activity ({bundle.cex.total_transactions} transactions)",
                    bundle.cex.risk_contribution,
                )
            )

        if bundle.clustering.risk_contribution > 0:
            deductions.append(
                Deduction(
                    f"Clustering pattern: {bundle.clustering.pattern.value}",
                    bundle.clustering.risk_contribution,
                )
            )

        if bundle.assets.risk_contribution > 0:
            deductions.append(
                Deduction("Identity-revealing assets", bundle.assets.risk_contribution)
            )

        wallet_deduction = compliance_deduction(bundle.compliance_status)
        if wallet_deduction is not None:
            deductions.append(wallet_deduction)

        sanctioned_count = len(bundle.counterparty_risks.sanctioned_addresses)
        if sanctioned_count > 0:
            deductions.append(
                Deduction(
                    f"Interacted with {sanctioned_count} sanctioned address(es)",
                    min(
                        sanctioned_count * SANCTIONED_COUNTERPARTY_POINTS,
                        MAX_SANCTIONED_COUNTERPARTY_POINTS,
                    ),
                )
            )

        if bundle.wash_trading.detected:
            deductions.append(Deduction("Wash trading pattern detected", WASH_TRADING_POINTS))

        raw = MAX_SCORE - sum(d.points for d in deductions)
        score = max(MIN_SCORE, min(MAX_SCORE, raw))
        return ScoreBreakdown(deductions=tuple(deductions), score=score)

    def collect_warnings(self, bundle: DetectionBundle) -> list[PrivacyWarning]:
        """Build warnings in detector order."""
        warnings = [
            PrivacyWarning(Severity.HIGH, "CEX", message)
            for message in exchange_warnings(bundle.cex)
        ]
        warnings.extend(
            PrivacyWarning(Severity.MEDIUM, "Clustering", message)
            for message in clustering_warnings(bundle.clustering)
        )

        if bundle.wash_trading.detected:
            warnings.append(
                PrivacyWarning(
                    Severity.HIGH,
                    "Clustering",
                    f"Back-and-forth transfers detected with {len(bundle.wash_trading.pairs)} "
                    "address(es). This wash trading pattern is easily identifiable on-chain.",
                )
            )

        warnings.extend(
            PrivacyWarning(Severity.MEDIUM, "Identity", message)
            for message in asset_warnings(bundle.assets)
        )

        match bundle.compliance_status:
            case ComplianceStatus.SANCTIONED:
                warnings.append(
                    PrivacyWarning(
                        Severity.CRITICAL,
                        "Compliance",
                        "CRITICAL: This wallet is on a sanctions list!",
                    )
                )
            case ComplianceStatus.FLAGGED:
                warnings.append(
                    PrivacyWarning(
                        Severity.HIGH,
                        "Compliance",
                        "This wallet has been flagged for suspicious activity.",
                    )
                )
            case ComplianceStatus.CLEAN | ComplianceStatus.UNKNOWN:
                pass
            case _:
                assert_never(bundle.compliance_status)

        sanctioned_count = len(bundle.counterparty_risks.sanctioned_addresses)
        if sanctioned_count > 0:
            warnings.append(
                PrivacyWarning(
                    Severity.CRITICAL,
                    "Compliance",
                    f"This wallet has interacted with {sanctioned_count} sanctioned address(es).",
                )
            )

        return warnings

    def collect_recommendations(
        self, bundle: DetectionBundle, score: int
    ) -> list[Recommendation]:
        """Build recommendations in detector order."""
        recommendations: list[Recommendation] = []

        cex_tool = tool_for(UseCase.CEX_DEPOSIT)
        recommendations.extend(
            Recommendation(
                Priority.HIGH,
                "CEX",
                action,
                tool=cex_tool.name if cex_tool else None,
                tool_url=cex_tool.url if cex_tool else None,
            )
            for action in exchange_actions(bundle.cex)
        )

        cluster_tool = tool_for(UseCase.CLUSTER_DETECTED)
        recommendations.extend(
            Recommendation(
                Priority.MEDIUM,
                "Clustering",
                action,
                tool=cluster_tool.name if cluster_tool else None,
                tool_url=cluster_tool.url if cluster_tool else None,
            )
            for action in clustering_actions(bundle.clustering)
        )

        recommendations.extend(
            Recommendation(Priority.MEDIUM, "Identity", action)
            for action in asset_actions(bundle.assets)
        )

        if bundle.compliance_status is not ComplianceStatus.CLEAN:
            compliance_tool = tool_for(UseCase.SANCTIONED_INTERACTION)
            recommendations.append(
                Recommendation(
                    Priority.HIGH,
                    "Compliance",
                    "Consult Range Protocol for compliance review and remediation options.",
                    tool=compliance_tool.name if compliance_tool else None,
                    tool_url=compliance_tool.url if compliance_tool else None,
                )
            )

        if score < GENERAL_RECOMMENDATION_THRESHOLD:
            general_tool = tool_for(UseCase.GENERAL_PRIVACY)
            recommendations.append(
                Recommendation(
                    Priority.HIGH,
                    "General",
                    "Consider creating a fresh wallet and using privacy-preserving tools "
                    "for future transactions.",
                    tool=general_tool.name if general_tool else None,
                    tool_url=general_tool.url if general_tool else None,
                )
            )

        return recommendations
