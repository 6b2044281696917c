"""Identity-revealing asset detection.

Attendance badges (POAPs), collectible NFTs and ``.sol`` name-service
domains are public and often tie a wallet to a real-world identity.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from solana_privacy_scanner.detector.models import (
    AssetKind,
    AssetsResult,
    ExposureLevel,
    NFTAsset,
)
from solana_privacy_scanner.ingestor.models import Transaction
from solana_privacy_scanner.metrics import DETECTOR_FAILURES
from solana_privacy_scanner.profiler.entity_data import NAME_SERVICE_PROGRAMS

logger = logging.getLogger(__name__)

POAP_INDICATORS = (
    "poap",
    "proof of attendance",
    "event",
    "badge",
    "attendance",
    "participated",
    "hackathon",
    "conference",
    "meetup",
)
DOMAIN_INDICATORS = (".sol", "domain", "name service")

DOMAIN_PATTERN = re.compile(r"([a-zA-Z0-9_-]+\.sol)")
NAME_PATTERNS = (
    re.compile(r"received\s+(.+?)(?:\s+from|\s*$)", re.IGNORECASE),
    re.compile(r"minted\s+(.+?)(?:\s+from|\s*$)", re.IGNORECASE),
    re.compile(r"bought\s+(.+?)(?:\s+for|\s*$)", re.IGNORECASE),
)

POAP_POINTS = 5
DOMAIN_POINTS = 10
MAX_CONTRIBUTION = 30


def is_poap_description(description: str) -> bool:
    """Check whether a description indicates an attendance badge."""
    lowered = description.lower()
    return any(indicator in lowered for indicator in POAP_INDICATORS)


def is_domain_transaction(tx: Transaction) -> bool:
    """Check whether a transaction touches the Solana name service."""
    lowered = tx.description.lower()
    if any(indicator in lowered for indicator in DOMAIN_INDICATORS):
        return True
    return any(account in NAME_SERVICE_PROGRAMS for account in tx.referenced_accounts)


def extract_domain_name(description: str) -> str | None:
    """Return the first ``name.sol`` token in a description, if any."""
    match = DOMAIN_PATTERN.search(description)
    return match.group(1) if match else None


def extract_nft_name(description: str) -> str | None:
    """Extract an NFT name from phrases like "received X from Y"."""
    if not description:
        return None
    for pattern in NAME_PATTERNS:
        match = pattern.search(description)
        if match and match.group(1):
            return match.group(1).strip()
    return None


def calculate_exposure_level(nft_count: int, poap_count: int, domain_count: int) -> ExposureLevel:
    """Map weighted asset counts to an exposure level.

    Weights: NFT 1, POAP 2, domain 3. A total of 0 is none, up to 2 is
    low, up to 5 is medium, anything above is high.
    """
    total = nft_count + poap_count * 2 + domain_count * 3
    if total == 0:
        return ExposureLevel.NONE
    if total <= 2:
        return ExposureLevel.LOW
    if total <= 5:
        return ExposureLevel.MEDIUM
    return ExposureLevel.HIGH


class IdentityAssetDetector:
    """Detects NFTs, POAPs and name-service domains held by a wallet.

    NFTs are discovered two ways: from indexer NFT events where the wallet
    is the buyer (or the description says "received"), and from
    single-unit NonFungible token transfers into the wallet. Assets whose
    description mentions an event or badge are classified as POAPs.

    Scoring:
        risk_contribution = min(poaps * 5 + domains * 10, 30)

    Plain NFTs affect the exposure level but carry no points.
    """

    def detect(self, transactions: Sequence[Transaction], address: str) -> AssetsResult:
        """Scan transaction history for identity-revealing assets.

        Never raises: any unexpected error yields ``AssetsResult.empty()``.

        Args:
            transactions: Parsed transaction history.
            address: The wallet being analyzed.

        Returns:
            AssetsResult with every asset found.
        """
        try:
            result = self._scan(transactions, address)
        except Exception:
            logger.exception("Asset detection failed for %s", address)
            DETECTOR_FAILURES.labels(detector="assets").inc()
            return AssetsResult.empty()

        if result.detected:
            logger.info(
                "Identity-revealing assets detected: nfts=%d poaps=%d domains=%s",
                len(result.nfts),
                len(result.poaps),
                ", ".join(result.domains) or "-",
            )
        else:
            logger.debug("No identity-revealing assets detected for %s", address)
        return result

    def _scan(self, transactions: Sequence[Transaction], address: str) -> AssetsResult:
        nfts: list[NFTAsset] = []
        poaps: list[NFTAsset] = []
        domains: list[str] = []

        def add(mint: str, kind: AssetKind, name: str | None, timestamp: int) -> None:
            target = poaps if kind is AssetKind.POAP else nfts
            if any(existing.mint == mint for existing in target):
                return
            target.append(
                NFTAsset(mint=mint, kind=kind, name=name, received_timestamp=timestamp)
            )

        for tx in transactions:
            kind = AssetKind.POAP if is_poap_description(tx.description) else AssetKind.NFT

            event = tx.nft_event
            if event is not None and (
                event.buyer == address or "received" in tx.description.lower()
            ):
                name = extract_nft_name(tx.description)
                for mint in event.mints:
                    add(mint, kind, name, tx.timestamp)

            if is_domain_transaction(tx):
                domain = extract_domain_name(tx.description)
                if domain and domain not in domains:
                    domains.append(domain)

            for transfer in tx.token_transfers:
                if (
                    transfer.to_address == address
                    and transfer.amount == 1
                    and transfer.is_non_fungible
                ):
                    add(transfer.mint, kind, None, tx.timestamp)

        risk = min(len(poaps) * POAP_POINTS + len(domains) * DOMAIN_POINTS, MAX_CONTRIBUTION)

        return AssetsResult(
            detected=bool(nfts or poaps or domains),
            nfts=tuple(nfts),
            poaps=tuple(poaps),
            domains=tuple(domains),
            exposure_level=calculate_exposure_level(len(nfts), len(poaps), len(domains)),
            risk_contribution=risk,
        )


def asset_warnings(result: AssetsResult) -> list[str]:
    """Generate warning messages for identity-revealing assets."""
    warnings: list[str] = []

    if result.poaps:
        warnings.append(
            f"{len(result.poaps)} POAPs/event badges detected. "
            "These can reveal your real-world identity and event attendance."
        )

    for domain in result.domains:
        warnings.append(
            f'.sol domain "{domain}" linked to this wallet. '
            "Domains are public and can deanonymize your wallet."
        )

    if len(result.nfts) >= 5:
        warnings.append(
            f"{len(result.nfts)} NFTs detected. "
            "NFT ownership patterns can be used for fingerprinting."
        )

    return warnings


def asset_actions(result: AssetsResult) -> list[str]:
    """Generate remediation actions for identity-revealing assets."""
    actions: list[str] = []

    if result.poaps:
        actions.append("Transfer POAPs and event badges to a separate public-facing wallet.")

    if result.domains:
        actions.append(
            "Use a dedicated public wallet for .sol domains, separate from your DeFi wallet."
        )

    if result.exposure_level is ExposureLevel.HIGH:
        actions.append("Consider creating a new anonymous wallet for privacy-sensitive activities.")

    return actions
