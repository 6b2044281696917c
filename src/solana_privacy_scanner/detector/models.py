"""Data models for the detector module.

Every detector result is a frozen, self-contained value object with a
``detected`` flag, a capped ``risk_contribution`` and a zero-risk
``empty()`` default returned when the detector fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class TransferDirection(Enum):
    """Direction of a transfer relative to an exchange."""

    DEPOSIT = "deposit"  # exchange -> wallet
    WITHDRAWAL = "withdrawal"  # wallet -> exchange


class ClusterPattern(Enum):
    """Counterparty concentration patterns."""

    NONE = "none"
    SINGLE_COUNTERPARTY = "single_counterparty"  # 50%+ with one address
    SMALL_CLUSTER = "small_cluster"  # top 3 make up 80%+
    WASH_TRADING = "wash_trading"  # back-and-forth transfers
    FUNNEL = "funnel"  # many counterparties, top 5 make up 70%+


class AssetKind(Enum):
    """Kind of identity-revealing asset."""

    NFT = "nft"
    POAP = "poap"


class ExposureLevel(Enum):
    """Identity exposure from held assets."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ComplianceStatus(Enum):
    """Compliance screening outcome."""

    CLEAN = "Clean"
    FLAGGED = "Flagged"
    SANCTIONED = "Sanctioned"
    UNKNOWN = "Unknown"


# ============================================================================
# Exchange interaction
# ============================================================================


@dataclass(frozen=True)
class ExchangeTransfer:
    """A transfer between the wallet and a known exchange.

    Attributes:
        signature: Transaction signature.
        timestamp: Block time as unix seconds.
        exchange_name: Exchange display name.
        exchange_address: Exchange hot wallet address.
        direction: Deposit (from exchange) or withdrawal (to exchange).
        amount: Amount in natural units, None when only the fee payer matched.
    """

    signature: str
    timestamp: int
    exchange_name: str
    exchange_address: str
    direction: TransferDirection
    amount: float | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "signature": self.signature,
            "timestamp": self.timestamp,
            "exchange_name": self.exchange_name,
            "exchange_address": self.exchange_address,
            "direction": self.direction.value,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class CEXResult:
    """Result of exchange interaction detection."""

    detected: bool
    deposits: tuple[ExchangeTransfer, ...]
    withdrawals: tuple[ExchangeTransfer, ...]
    exchanges_involved: tuple[str, ...]
    risk_contribution: int

    @property
    def total_transactions(self) -> int:
        """Return the number of exchange transfers found."""
        return len(self.deposits) + len(self.withdrawals)

    @property
    def volume(self) -> float:
        """Return total deposit and withdrawal volume (missing amounts count 0)."""
        return sum(t.amount or 0.0 for t in (*self.deposits, *self.withdrawals))

    @classmethod
    def empty(cls) -> CEXResult:
        """Return the zero-risk default."""
        return cls(
            detected=False,
            deposits=(),
            withdrawals=(),
            exchanges_involved=(),
            risk_contribution=0,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "detected": self.detected,
            "deposits": [d.to_dict() for d in self.deposits],
            "withdrawals": [w.to_dict() for w in self.withdrawals],
            "total_cex_transactions": self.total_transactions,
            "exchanges_involved": list(self.exchanges_involved),
            "risk_contribution": self.risk_contribution,
        }


# ============================================================================
# Clustering
# ============================================================================


@dataclass(frozen=True)
class AddressFrequency:
    """Interaction frequency with one counterparty.

    Attributes:
        address: Counterparty address.
        count: Raw interaction count.
        percentage: Share of total counterparty interactions (0-100).
    """

    address: str
    count: int
    percentage: float

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {"address": self.address, "count": self.count, "percentage": self.percentage}


@dataclass(frozen=True)
class ClusteringResult:
    """Result of counterparty clustering analysis.

    Attributes:
        detected: Whether a clustering signal was found.
        pattern: Classified concentration pattern.
        clustering_percentage: Share of the most frequent counterparty.
        top_addresses: Up to five most frequent counterparties.
        dominant_address: Most frequent counterparty, if any.
        total_unique_addresses: Number of distinct counterparties.
        total_interactions: Sum of all counterparty interaction counts.
        total_transactions: Number of transactions analyzed.
        risk_contribution: Points deducted from the privacy score.
    """

    detected: bool
    pattern: ClusterPattern
    clustering_percentage: float
    top_addresses: tuple[AddressFrequency, ...]
    dominant_address: str | None
    total_unique_addresses: int
    total_interactions: int
    total_transactions: int
    risk_contribution: int

    @classmethod
    def empty(
        cls, total_transactions: int = 0, total_unique_addresses: int = 0
    ) -> ClusteringResult:
        """Return the zero-risk default."""
        return cls(
            detected=False,
            pattern=ClusterPattern.NONE,
            clustering_percentage=0.0,
            top_addresses=(),
            dominant_address=None,
            total_unique_addresses=total_unique_addresses,
            total_interactions=0,
            total_transactions=total_transactions,
            risk_contribution=0,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "detected": self.detected,
            "pattern": self.pattern.value,
            "clustering_percentage": self.clustering_percentage,
            "top_addresses": [a.to_dict() for a in self.top_addresses],
            "dominant_address": self.dominant_address,
            "total_unique_addresses": self.total_unique_addresses,
            "total_interactions": self.total_interactions,
            "total_transactions": self.total_transactions,
            "risk_contribution": self.risk_contribution,
        }


@dataclass(frozen=True)
class WashTradePair:
    """A counterparty with an alternating send/receive history."""

    address: str
    send_count: int
    receive_count: int
    alternations: int

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "address": self.address,
            "send_count": self.send_count,
            "receive_count": self.receive_count,
            "alternations": self.alternations,
        }


@dataclass(frozen=True)
class WashTradingResult:
    """Result of wash trading detection."""

    detected: bool
    pairs: tuple[WashTradePair, ...] = ()

    @classmethod
    def empty(cls) -> WashTradingResult:
        """Return the zero-risk default."""
        return cls(detected=False)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {"detected": self.detected, "pairs": [p.to_dict() for p in self.pairs]}


# ============================================================================
# Identity assets
# ============================================================================


@dataclass(frozen=True)
class NFTAsset:
    """An NFT received by the wallet."""

    mint: str
    kind: AssetKind
    name: str | None = None
    received_timestamp: int | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "mint": self.mint,
            "type": self.kind.value,
            "name": self.name,
            "received_timestamp": self.received_timestamp,
        }


@dataclass(frozen=True)
class AssetsResult:
    """Result of identity-revealing asset detection."""

    detected: bool
    nfts: tuple[NFTAsset, ...]
    poaps: tuple[NFTAsset, ...]
    domains: tuple[str, ...]
    exposure_level: ExposureLevel
    risk_contribution: int

    @classmethod
    def empty(cls) -> AssetsResult:
        """Return the zero-risk default."""
        return cls(
            detected=False,
            nfts=(),
            poaps=(),
            domains=(),
            exposure_level=ExposureLevel.NONE,
            risk_contribution=0,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "detected": self.detected,
            "nfts_detected": [n.to_dict() for n in self.nfts],
            "poaps_detected": [p.to_dict() for p in self.poaps],
            "sol_domains_detected": list(self.domains),
            "identity_exposure_level": self.exposure_level.value,
            "risk_contribution": self.risk_contribution,
        }


# ============================================================================
# Compliance
# ============================================================================


@dataclass(frozen=True)
class ComplianceResult:
    """Compliance screening result for a single address.

    Attributes:
        address: Screened address.
        status: Screening outcome.
        risk_score: 0-100, where 100 is highest risk.
        checked_at: When the screen ran.
        sanction_lists: Lists the address appears on.
        flags: Free-text findings.
        linked_to_mixer: Whether the address is linked to a mixer.
        linked_to_exploit: Whether the address is linked to an exploit.
    """

    address: str
    status: ComplianceStatus
    risk_score: int
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    sanction_lists: tuple[str, ...] = ()
    flags: tuple[str, ...] = ()
    linked_to_mixer: bool = False
    linked_to_exploit: bool = False

    @property
    def detected(self) -> bool:
        """Return True if the address is sanctioned or flagged."""
        return self.status in (ComplianceStatus.SANCTIONED, ComplianceStatus.FLAGGED)

    @classmethod
    def unknown(
        cls,
        address: str,
        flag: str,
        checked_at: datetime | None = None,
        risk_score: int = 0,
    ) -> ComplianceResult:
        """Return an Unknown result carrying an explanatory flag."""
        return cls(
            address=address,
            status=ComplianceStatus.UNKNOWN,
            risk_score=risk_score,
            checked_at=checked_at or datetime.now(UTC),
            flags=(flag,),
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "address": self.address,
            "status": self.status.value,
            "risk_score": self.risk_score,
            "checked_at": self.checked_at.isoformat(),
            "details": {
                "sanction_lists": list(self.sanction_lists),
                "flags": list(self.flags),
                "linked_to_mixer": self.linked_to_mixer,
                "linked_to_exploit": self.linked_to_exploit,
            },
        }


@dataclass(frozen=True)
class CounterpartyRisks:
    """Partitioned outcome of screening every counterparty."""

    sanctioned_addresses: tuple[str, ...] = ()
    flagged_addresses: tuple[str, ...] = ()
    total_checked: int = 0

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "sanctioned_addresses": list(self.sanctioned_addresses),
            "flagged_addresses": list(self.flagged_addresses),
            "total_checked": self.total_checked,
        }


# ============================================================================
# Scoring
# ============================================================================


class RiskTier(Enum):
    """Privacy risk tier derived from the final score."""

    LOW = "LOW"  # 76-100
    MEDIUM = "MEDIUM"  # 51-75
    HIGH = "HIGH"  # 26-50
    CRITICAL = "CRITICAL"  # 0-25


class Severity(Enum):
    """Warning severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Priority(Enum):
    """Recommendation priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Deduction:
    """A single entry in the score deduction log."""

    reason: str
    points: int

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {"reason": self.reason, "points": self.points}


@dataclass(frozen=True)
class ScoreBreakdown:
    """Ordered deductions and the clamped final score."""

    deductions: tuple[Deduction, ...]
    score: int

    @property
    def total_deducted(self) -> int:
        """Return the sum of all deductions before clamping."""
        return sum(d.points for d in self.deductions)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "deductions": [d.to_dict() for d in self.deductions],
            "score": self.score,
        }


@dataclass(frozen=True)
class PrivacyWarning:
    """A user-facing privacy warning."""

    severity: Severity
    category: str
    message: str

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "severity": self.severity.value,
            "category": self.category,
            "message": self.message,
        }


@dataclass(frozen=True)
class Recommendation:
    """A remediation action, optionally pointing at a privacy tool."""

    priority: Priority
    category: str
    action: str
    tool: str | None = None
    tool_url: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "priority": self.priority.value,
            "category": self.category,
            "action": self.action,
            "tool": self.tool,
            "tool_url": self.tool_url,
        }


@dataclass(frozen=True)
class RiskAssessment:
    """Aggregated outcome of scoring one wallet.

    Attributes:
        breakdown: Ordered deductions and the final score.
        tier: Risk tier for the score.
        description: Fixed description of the tier.
        warnings: Warnings in detector order.
        recommendations: Recommendations in detector order.
    """

    breakdown: ScoreBreakdown
    tier: RiskTier
    description: str
    warnings: tuple[PrivacyWarning, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()

    @property
    def score(self) -> int:
        """Return the final privacy score (0-100, higher is more private)."""
        return self.breakdown.score
