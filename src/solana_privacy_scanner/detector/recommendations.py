"""Catalogue of privacy tools referenced by recommendations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UseCase(Enum):
    """Situations a privacy tool is recommended for."""

    CEX_DEPOSIT = "cex_deposit"
    CLUSTER_DETECTED = "cluster_detected"
    SANCTIONED_INTERACTION = "sanctioned_interaction"
    GENERAL_PRIVACY = "general_privacy"


@dataclass(frozen=True)
class PrivacyTool:
    """A third-party privacy tool."""

    name: str
    description: str
    url: str
    use_case: UseCase


RECOMMENDED_TOOLS: tuple[PrivacyTool, ...] = (
    PrivacyTool(
        name="Privacy Cash",
        description="Break the on-chain link between your wallets using Privacy Cash mixer",
        url="https://privacycash.io",
        use_case=UseCase.CEX_DEPOSIT,
    ),
    PrivacyTool(
        name="Radr Labs",
        description="Advanced wallet obfuscation and privacy-preserving transactions",
        url="https://radrlabs.io",
        use_case=UseCase.CLUSTER_DETECTED,
    ),
    PrivacyTool(
        name="Range Protocol",
        description="Compliance-friendly privacy layer with regulatory clarity",
        url="https://range.org",
        use_case=UseCase.SANCTIONED_INTERACTION,
    ),
    PrivacyTool(
        name="Elusiv",
        description="Zero-knowledge private transactions on Solana",
        url="https://elusiv.io",
        use_case=UseCase.GENERAL_PRIVACY,
    ),
    PrivacyTool(
        name="Light Protocol",
        description="ZK compression for private state on Solana",
        url="https://lightprotocol.com",
        use_case=UseCase.GENERAL_PRIVACY,
    ),
)


def tool_for(use_case: UseCase) -> PrivacyTool | None:
    """Return the first catalogued tool for a use case."""
    return next((tool for tool in RECOMMENDED_TOOLS if tool.use_case is use_case), None)
