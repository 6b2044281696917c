"""Privacy report formatter for console output.

This module renders Report objects as plain text, in either a compact
one-paragraph summary or a detailed multi-section layout.
"""

from __future__ import annotations

from typing import Literal

from solana_privacy_scanner.detector.models import Severity
from solana_privacy_scanner.report.models import Report

SOLSCAN_ACCOUNT_URL = "https://solscan.io/account/{address}"

HEAVY_RULE = "=" * 60
LIGHT_RULE = "-" * 60

SEVERITY_MARKERS: dict[Severity, str] = {
    Severity.CRITICAL: "!!",
    Severity.HIGH: "! ",
    Severity.MEDIUM: "- ",
    Severity.LOW: "- ",
}


def truncate_address(address: str, chars: int = 4) -> str:
    """Truncate a Solana address to 5tzF...uAi9 format."""
    if len(address) <= chars * 2 + 3:
        return address
    return f"{address[:chars]}...{address[-chars:]}"


def format_sol(amount: float) -> str:
    """Format a SOL amount with 4 decimal places."""
    return f"{amount:,.4f} SOL"


def format_usd(amount: float) -> str:
    """Format a USD amount with commas and 2 decimal places."""
    return f"${amount:,.2f}"


class ReportFormatter:
    """Formats privacy reports as plain text.

    Supports two verbosity levels:
    - compact: Score, tier and warning count on a few lines
    - detailed: Full report with warnings, recommendations and exposure
    """

    def __init__(self, verbosity: Literal["compact", "detailed"] = "detailed") -> None:
        """Initialize the formatter.

        Args:
            verbosity: Level of detail in formatted output.
        """
        self.verbosity = verbosity

    def format(self, report: Report) -> str:
        """Format a report.

        Args:
            report: The report to format.

        Returns:
            Plain text rendering of the report.
        """
        if self.verbosity == "compact":
            return self._build_compact(report)
        return self._build_detailed(report)

    def _build_compact(self, report: Report) -> str:
        return "\n".join(
            [
                f"Wallet {truncate_address(report.address)}: "
                f"{report.score}/100 ({report.risk_tier.value})",
                report.risk_description,
                f"{len(report.warnings)} warning(s), "
                f"{len(report.recommendations)} recommendation(s)",
            ]
        )

    def _build_detailed(self, report: Report) -> str:
        lines = [
            HEAVY_RULE,
            "SOLANA PRIVACY SCORE REPORT".center(60).rstrip(),
            HEAVY_RULE,
            "",
            f"Wallet: {report.address}",
            f"Analyzed: {report.analyzed_at.isoformat()}",
            f"Transactions Analyzed: {report.transactions_analyzed}",
        ]

        if report.metadata.demo_mode:
            lines.append("Mode: demo data")
        elif not report.metadata.data_source_available:
            lines.append("Mode: transaction history unavailable")

        lines.extend(
            [
                "",
                LIGHT_RULE,
                f"PRIVACY SCORE: {report.score}/100",
                f"Risk Level: {report.risk_tier.value}",
                report.risk_description,
            ]
        )

        if report.warnings:
            lines.extend(["", LIGHT_RULE, "WARNINGS:"])
            for warning in report.warnings:
                marker = SEVERITY_MARKERS[warning.severity]
                lines.append(f"  {marker} [{warning.category}] {warning.message}")

        if report.recommendations:
            lines.extend(["", LIGHT_RULE, "RECOMMENDATIONS:"])
            for recommendation in report.recommendations:
                lines.append(f"  * {recommendation.action}")
                if recommendation.tool:
                    lines.append(f"    -> Use {recommendation.tool}: {recommendation.tool_url}")

        exposure = report.financial_exposure
        if exposure.exposed_sol > 0:
            lines.extend(
                [
                    "",
                    LIGHT_RULE,
                    f"Exposed funds: {format_sol(exposure.exposed_sol)} "
                    f"({format_usd(exposure.exposed_usd)})",
                ]
            )

        lines.extend(
            [
                "",
                f"Explorer: {SOLSCAN_ACCOUNT_URL.format(address=report.address)}",
                HEAVY_RULE,
            ]
        )
        return "\n".join(lines)
