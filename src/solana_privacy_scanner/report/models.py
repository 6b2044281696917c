"""Data models for the privacy report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from solana_privacy_scanner.detector.models import (
    AssetsResult,
    CEXResult,
    ClusteringResult,
    ComplianceResult,
    CounterpartyRisks,
    PrivacyWarning,
    Recommendation,
    RiskTier,
    ScoreBreakdown,
    Severity,
    WashTradingResult,
)

DEFAULT_SOL_PRICE_USD = 150.0
FAILED_ANALYSIS_DESCRIPTION = "Analysis failed - unable to assess privacy risk"


@dataclass(frozen=True)
class FinancialExposure:
    """Funds exposed by identity-linking activity.

    Attributes:
        exposed_sol: Larger of exchange volume and current balance.
        exposed_usd: exposed_sol at the configured SOL price.
        cex_volume_sol: Total deposit and withdrawal volume.
    """

    exposed_sol: float = 0.0
    exposed_usd: float = 0.0
    cex_volume_sol: float = 0.0

    @classmethod
    def calculate(
        cls, cex: CEXResult, balance: float, sol_price_usd: float = DEFAULT_SOL_PRICE_USD
    ) -> FinancialExposure:
        """Derive exposure from exchange volume and balance.

        A wallet linked to an exchange is treated as fully exposed, so the
        larger of the two amounts counts.
        """
        volume = cex.volume
        exposed = max(volume, balance)
        return cls(exposed_sol=exposed, exposed_usd=exposed * sol_price_usd, cex_volume_sol=volume)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "exposed_sol": self.exposed_sol,
            "exposed_usd": self.exposed_usd,
            "cex_volume_sol": self.cex_volume_sol,
        }


@dataclass(frozen=True)
class AnalysisMetadata:
    """How an analysis was run.

    Attributes:
        data_source_available: Whether transaction history was fetched successfully.
        demo_mode: Whether synthetic demo history was analyzed.
        analysis_time_ms: Wall-clock analysis duration in milliseconds.
    """

    data_source_available: bool = True
    demo_mode: bool = False
    analysis_time_ms: int = 0

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "data_source_available": self.data_source_available,
            "demo_mode": self.demo_mode,
            "analysis_time_ms": self.analysis_time_ms,
        }


@dataclass(frozen=True)
class Report:
    """Complete privacy report for one wallet.

    Attributes:
        address: Analyzed wallet.
        analyzed_at: When the analysis completed (UTC).
        balance: SOL balance at analysis time.
        transactions_analyzed: Number of transactions examined.
        score: Privacy score, 0-100 (higher is more private).
        risk_tier: Tier derived from the score.
        risk_description: Fixed description of the tier.
        warnings: Warnings in detector order.
        recommendations: Recommendations in detector order.
        breakdown: Ordered score deductions.
        cex: Exchange interaction result.
        clustering: Counterparty clustering result.
        wash_trading: Wash trading result.
        assets: Identity asset result.
        compliance: Compliance result for the wallet itself.
        counterparty_risks: Screening summary of all counterparties.
        financial_exposure: Funds exposed by linkage.
        metadata: Run metadata.
    """

    address: str
    analyzed_at: datetime
    balance: float
    transactions_analyzed: int
    score: int
    risk_tier: RiskTier
    risk_description: str
    warnings: tuple[PrivacyWarning, ...]
    recommendations: tuple[Recommendation, ...]
    breakdown: ScoreBreakdown
    cex: CEXResult
    clustering: ClusteringResult
    wash_trading: WashTradingResult
    assets: AssetsResult
    compliance: ComplianceResult
    counterparty_risks: CounterpartyRisks = field(default_factory=CounterpartyRisks)
    financial_exposure: FinancialExposure = field(default_factory=FinancialExposure)
    metadata: AnalysisMetadata = field(default_factory=AnalysisMetadata)

    @classmethod
    def failed(
        cls,
        address: str,
        message: str,
        *,
        analyzed_at: datetime | None = None,
        metadata: AnalysisMetadata | None = None,
    ) -> Report:
        """Build the degraded report returned when analysis cannot run.

        Score 0, tier CRITICAL, a single critical warning and zero-risk
        detector defaults.
        """
        analyzed_at = analyzed_at or datetime.now(UTC)
        return cls(
            address=address,
            analyzed_at=analyzed_at,
            balance=0.0,
            transactions_analyzed=0,
            score=0,
            risk_tier=RiskTier.CRITICAL,
            risk_description=FAILED_ANALYSIS_DESCRIPTION,
            warnings=(
                PrivacyWarning(Severity.CRITICAL, "error", f"Analysis error: {message}"),
            ),
            recommendations=(),
            breakdown=ScoreBreakdown(deductions=(), score=0),
            cex=CEXResult.empty(),
            clustering=ClusteringResult.empty(),
            wash_trading=WashTradingResult.empty(),
            assets=AssetsResult.empty(),
            compliance=ComplianceResult.unknown(address, message, analyzed_at),
            metadata=metadata or AnalysisMetadata(data_source_available=False),
        )

    @property
    def is_degraded(self) -> bool:
        """Return True if this report describes a failed analysis."""
        return self.risk_description == FAILED_ANALYSIS_DESCRIPTION

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "wallet_address": self.address,
            "analyzed_at": self.analyzed_at.isoformat(),
            "balance": self.balance,
            "transactions_analyzed": self.transactions_analyzed,
            "score": self.score,
            "risk_level": self.risk_tier.value,
            "risk_description": self.risk_description,
            "warnings": [w.to_dict() for w in self.warnings],
            "actions": [r.to_dict() for r in self.recommendations],
            "score_breakdown": self.breakdown.to_dict(),
            "detector_results": {
                "cex": self.cex.to_dict(),
                "clustering": self.clustering.to_dict(),
                "wash_trading": self.wash_trading.to_dict(),
                "assets": self.assets.to_dict(),
                "compliance": self.compliance.to_dict(),
                "interacting_address_risks": self.counterparty_risks.to_dict(),
            },
            "analysis_metadata": self.metadata.to_dict(),
            "financial_exposure": self.financial_exposure.to_dict(),
        }
