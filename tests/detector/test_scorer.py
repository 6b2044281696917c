"""Tests for the risk aggregator."""

from datetime import UTC, datetime

import pytest

from solana_privacy_scanner.detector.models import (
    AddressFrequency,
    AssetKind,
    AssetsResult,
    CEXResult,
    ClusteringResult,
    ClusterPattern,
    ComplianceResult,
    ComplianceStatus,
    CounterpartyRisks,
    ExchangeTransfer,
    ExposureLevel,
    NFTAsset,
    Priority,
    RiskTier,
    Severity,
    TransferDirection,
    WashTradePair,
    WashTradingResult,
)
from solana_privacy_scanner.detector.scorer import (
    TIER_DESCRIPTIONS,
    DetectionBundle,
    RiskAggregator,
    determine_tier,
)

CHECKED_AT = datetime(2024, 1, 1, tzinfo=UTC)
WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
SANCTIONED = "7eEqn3zGpQqq8fYjzqhfvwRRRVrBe3D3P4YfZ12GsAC1"
SANCTIONED_2 = "CnK9VjRNgSJcq1UR89J8RmMNPSYKe2qkM4eRLmWMKPxn"
SANCTIONED_3 = "Hp9SQbMoEhN9GwK1fY8xEyJBpDHZtCxXhpKA5KZjKekW"


def compliance(status: ComplianceStatus) -> ComplianceResult:
    """Create a compliance result for the wallet."""
    return ComplianceResult(address=WALLET, status=status, risk_score=0, checked_at=CHECKED_AT)


def cex_result(deposits: int = 0, withdrawals: int = 0, risk: int = 0) -> CEXResult:
    """Create an exchange result with the given transfer counts."""

    def transfer(i: int, direction: TransferDirection) -> ExchangeTransfer:
        return ExchangeTransfer(
            signature=f"sig{i}",
            timestamp=1_700_000_000 + i,
            exchange_name="Binance",
            exchange_address="5tzFkiKscXHK5ZXCGbXZxdw7gTjjD1mBwuoFbhUvuAi9",
            direction=direction,
            amount=1.0,
        )

    return CEXResult(
        detected=bool(deposits or withdrawals),
        deposits=tuple(transfer(i, TransferDirection.DEPOSIT) for i in range(deposits)),
        withdrawals=tuple(
            transfer(i, TransferDirection.WITHDRAWAL) for i in range(withdrawals)
        ),
        exchanges_involved=("Binance",) if deposits or withdrawals else (),
        risk_contribution=risk,
    )


def clustering_result(pattern: ClusterPattern, risk: int) -> ClusteringResult:
    """Create a detected clustering result."""
    return ClusteringResult(
        detected=True,
        pattern=pattern,
        clustering_percentage=60.0,
        top_addresses=(AddressFrequency("peer", 6, 60.0),),
        dominant_address="peer",
        total_unique_addresses=5,
        total_interactions=10,
        total_transactions=10,
        risk_contribution=risk,
    )


def assets_result(domains: tuple[str, ...] = (), poaps: int = 0) -> AssetsResult:
    """Create an asset result with domains and POAPs."""
    return AssetsResult(
        detected=bool(domains or poaps),
        nfts=(),
        poaps=tuple(NFTAsset(f"poap{i}", AssetKind.POAP) for i in range(poaps)),
        domains=domains,
        exposure_level=ExposureLevel.MEDIUM if domains or poaps else ExposureLevel.NONE,
        risk_contribution=min(poaps * 5 + len(domains) * 10, 30),
    )


WASH_TRADING = WashTradingResult(
    detected=True,
    pairs=(WashTradePair(address="peer", send_count=2, receive_count=2, alternations=3),),
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def aggregator() -> RiskAggregator:
    """Create a risk aggregator."""
    return RiskAggregator()


@pytest.fixture
def clean_bundle() -> DetectionBundle:
    """Create a bundle with no findings and a clean wallet."""
    return DetectionBundle(compliance=compliance(ComplianceStatus.CLEAN))


# ============================================================================
# Tier Tests
# ============================================================================


class TestDetermineTier:
    """Tests for tier boundaries."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (0, RiskTier.CRITICAL),
            (25, RiskTier.CRITICAL),
            (26, RiskTier.HIGH),
            (50, RiskTier.HIGH),
            (51, RiskTier.MEDIUM),
            (75, RiskTier.MEDIUM),
            (76, RiskTier.LOW),
            (100, RiskTier.LOW),
        ],
    )
    def test_boundaries(self, score: int, expected: RiskTier) -> None:
        """Boundary scores fall into the riskier tier."""
        assert determine_tier(score) is expected

    def test_every_tier_described(self) -> None:
        """Each tier has a description."""
        assert set(TIER_DESCRIPTIONS) == set(RiskTier)


# ============================================================================
# Score Calculation Tests
# ============================================================================


class TestCalculateScore:
    """Tests for RiskAggregator.calculate_score."""

    def test_clean_wallet(
        self, aggregator: RiskAggregator, clean_bundle: DetectionBundle
    ) -> None:
        """No findings leaves a perfect score and no deductions."""
        breakdown = aggregator.calculate_score(clean_bundle)

        assert breakdown.score == 100
        assert breakdown.deductions == ()

    def test_detector_deductions_in_order(self, aggregator: RiskAggregator) -> None:
        """Deductions follow detector order with descriptive reasons."""
        bundle = DetectionBundle(
            cex=cex_result(deposits=1, withdrawals=1, risk=25),
            clustering=clustering_result(ClusterPattern.SINGLE_COUNTERPARTY, 20),
            assets=assets_result(poaps=1),
            compliance=compliance(ComplianceStatus.CLEAN),
            wash_trading=WASH_TRADING,
        )

        breakdown = aggregator.calculate_score(bundle)

        assert [(d.reason, d.points) for d in breakdown.deductions] == [
            ("CEX activity (2 transactions)", 25),
            ("Clustering pattern: single_counterparty", 20),
            ("Identity-revealing assets", 5),
            ("Wash trading pattern detected", 15),
        ]
        assert breakdown.score == 35
        assert breakdown.total_deducted == 65

    def test_sanctioned_wallet(self, aggregator: RiskAggregator) -> None:
        """A sanctioned wallet loses 50 points."""
        bundle = DetectionBundle(compliance=compliance(ComplianceStatus.SANCTIONED))

        breakdown = aggregator.calculate_score(bundle)

        assert breakdown.score == 50
        assert breakdown.deductions[0].reason == "Wallet on sanctions list"

    def test_flagged_wallet(self, aggregator: RiskAggregator) -> None:
        """A flagged wallet loses 25 points."""
        bundle = DetectionBundle(compliance=compliance(ComplianceStatus.FLAGGED))

        assert aggregator.calculate_score(bundle).score == 75

    def test_unknown_wallet_not_penalized(self, aggregator: RiskAggregator) -> None:
        """Unknown compliance status carries no deduction."""
        assert aggregator.calculate_score(DetectionBundle()).score == 100

    @pytest.mark.parametrize(
        ("sanctioned", "points"),
        [
            ((SANCTIONED,), 20),
            ((SANCTIONED, SANCTIONED_2), 40),
            ((SANCTIONED, SANCTIONED_2, SANCTIONED_3), 40),
        ],
    )
    def test_sanctioned_counterparties_capped(
        self, aggregator: RiskAggregator, sanctioned: tuple[str, ...], points: int
    ) -> None:
        """Each sanctioned counterparty costs 20 points, up to 40."""
        bundle = DetectionBundle(
            compliance=compliance(ComplianceStatus.CLEAN),
            counterparty_risks=CounterpartyRisks(
                sanctioned_addresses=sanctioned, total_checked=len(sanctioned)
            ),
        )

        breakdown = aggregator.calculate_score(bundle)

        assert breakdown.deductions[0].points == points
        assert breakdown.deductions[0].reason == (
            f"Interacted with {len(sanctioned)} sanctioned address(es)"
        )

    def test_flagged_counterparties_not_penalized(self, aggregator: RiskAggregator) -> None:
        """Only sanctioned counterparties affect the score."""
        bundle = DetectionBundle(
            compliance=compliance(ComplianceStatus.CLEAN),
            counterparty_risks=CounterpartyRisks(flagged_addresses=(WALLET,), total_checked=1),
        )

        assert aggregator.calculate_score(bundle).score == 100

    def test_score_clamped_at_zero(self, aggregator: RiskAggregator) -> None:
        """Deductions beyond 100 clamp the score to 0."""
        bundle = DetectionBundle(
            cex=cex_result(deposits=4, risk=50),
            clustering=clustering_result(ClusterPattern.SINGLE_COUNTERPARTY, 20),
            compliance=compliance(ComplianceStatus.SANCTIONED),
            counterparty_risks=CounterpartyRisks(
                sanctioned_addresses=(SANCTIONED, SANCTIONED_2), total_checked=2
            ),
        )

        breakdown = aggregator.calculate_score(bundle)

        assert breakdown.score == 0
        assert breakdown.total_deducted == 160


# ============================================================================
# Assessment Tests
# ============================================================================


class TestAssess:
    """Tests for RiskAggregator.assess."""

    def test_clean_assessment(
        self, aggregator: RiskAggregator, clean_bundle: DetectionBundle
    ) -> None:
        """A clean wallet is LOW with no warnings or recommendations."""
        assessment = aggregator.assess(clean_bundle)

        assert assessment.score == 100
        assert assessment.tier is RiskTier.LOW
        assert assessment.description == TIER_DESCRIPTIONS[RiskTier.LOW]
        assert assessment.warnings == ()
        assert assessment.recommendations == ()

    def test_warning_order(self, aggregator: RiskAggregator) -> None:
        """Warnings follow detector order with category and severity."""
        bundle = DetectionBundle(
            cex=cex_result(withdrawals=1, risk=10),
            clustering=clustering_result(ClusterPattern.SINGLE_COUNTERPARTY, 20),
            wash_trading=WASH_TRADING,
            assets=assets_result(domains=("alice.sol",)),
            compliance=compliance(ComplianceStatus.SANCTIONED),
            counterparty_risks=CounterpartyRisks(sanctioned_addresses=(SANCTIONED,)),
        )

        warnings = aggregator.assess(bundle).warnings

        assert [(w.category, w.severity) for w in warnings] == [
            ("CEX", Severity.HIGH),
            ("Clustering", Severity.MEDIUM),
            ("Clustering", Severity.HIGH),
            ("Identity", Severity.MEDIUM),
            ("Compliance", Severity.CRITICAL),
            ("Compliance", Severity.CRITICAL),
        ]
        assert warnings[4].message == "CRITICAL: This wallet is on a sanctions list!"
        assert warnings[5].message == "This wallet has interacted with 1 sanctioned address(es)."

    def test_flagged_warning(self, aggregator: RiskAggregator) -> None:
        """A flagged wallet gets a high-severity warning."""
        warnings = aggregator.assess(
            DetectionBundle(compliance=compliance(ComplianceStatus.FLAGGED))
        ).warnings

        assert len(warnings) == 1
        assert warnings[0].severity is Severity.HIGH
        assert warnings[0].message == "This wallet has been flagged for suspicious activity."

    def test_recommendation_order_and_tools(self, aggregator: RiskAggregator) -> None:
        """Recommendations follow detector order and name their tools."""
        bundle = DetectionBundle(
            cex=cex_result(deposits=1, risk=15),
            clustering=clustering_result(ClusterPattern.SINGLE_COUNTERPARTY, 20),
            assets=assets_result(domains=("alice.sol",)),
            compliance=compliance(ComplianceStatus.FLAGGED),
        )

        recommendations = aggregator.assess(bundle).recommendations

        categories = [r.category for r in recommendations]
        assert categories == sorted(
            categories, key=["CEX", "Clustering", "Identity", "Compliance", "General"].index
        )
        cex = [r for r in recommendations if r.category == "CEX"]
        assert all(r.tool == "Privacy Cash" and r.priority is Priority.HIGH for r in cex)
        clustering = [r for r in recommendations if r.category == "Clustering"]
        assert all(r.tool == "Radr Labs" and r.priority is Priority.MEDIUM for r in clustering)
        identity = [r for r in recommendations if r.category == "Identity"]
        assert identity
        assert all(r.tool is None for r in identity)
        assert recommendations[-2].category == "Compliance"
        assert recommendations[-2].tool == "Range Protocol"
        assert recommendations[-2].tool_url == "https://range.org"
        # 100 - 15 - 20 - 10 - 25 = 30
        assert recommendations[-1].category == "General"
        assert recommendations[-1].tool == "Elusiv"

    def test_unscreened_wallet_gets_compliance_recommendation(
        self, aggregator: RiskAggregator
    ) -> None:
        """Missing compliance counts as Unknown and is not Clean."""
        recommendations = aggregator.assess(DetectionBundle()).recommendations

        assert [r.category for r in recommendations] == ["Compliance"]

    def test_general_recommendation_threshold(self, aggregator: RiskAggregator) -> None:
        """A score of exactly 50 gets no general recommendation."""
        bundle = DetectionBundle(compliance=compliance(ComplianceStatus.SANCTIONED))

        assessment = aggregator.assess(bundle)

        assert assessment.score == 50
        assert assessment.tier is RiskTier.HIGH
        assert "General" not in [r.category for r in assessment.recommendations]

    def test_deterministic(self, aggregator: RiskAggregator) -> None:
        """Equal bundles produce equal assessments."""
        bundle = DetectionBundle(
            cex=cex_result(deposits=1, risk=15),
            compliance=compliance(ComplianceStatus.CLEAN),
        )

        assert aggregator.assess(bundle) == aggregator.assess(bundle)
