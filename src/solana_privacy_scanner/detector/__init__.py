"""Privacy detection layer - Identity-linking pattern detectors and scoring."""

from solana_privacy_scanner.detector.assets import IdentityAssetDetector
from solana_privacy_scanner.detector.clustering import ClusteringDetector, WashTradingDetector
from solana_privacy_scanner.detector.compliance import ComplianceScreener
from solana_privacy_scanner.detector.exchange import ExchangeInteractionDetector
from solana_privacy_scanner.detector.models import (
    AssetsResult,
    CEXResult,
    ClusteringResult,
    ClusterPattern,
    ComplianceResult,
    ComplianceStatus,
    CounterpartyRisks,
    ExposureLevel,
    RiskAssessment,
    RiskTier,
    WashTradingResult,
)
from solana_privacy_scanner.detector.scorer import DetectionBundle, RiskAggregator

__all__ = [
    "AssetsResult",
    "CEXResult",
    "ClusterPattern",
    "ClusteringDetector",
    "ClusteringResult",
    "ComplianceResult",
    "ComplianceScreener",
    "ComplianceStatus",
    "CounterpartyRisks",
    "DetectionBundle",
    "ExchangeInteractionDetector",
    "ExposureLevel",
    "IdentityAssetDetector",
    "RiskAggregator",
    "RiskAssessment",
    "RiskTier",
    "WashTradingDetector",
    "WashTradingResult",
]
