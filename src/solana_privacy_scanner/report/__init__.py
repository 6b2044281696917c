"""Report layer - Privacy report models and text rendering."""

from solana_privacy_scanner.report.formatter import ReportFormatter, truncate_address
from solana_privacy_scanner.report.models import AnalysisMetadata, FinancialExposure, Report

__all__ = [
    "AnalysisMetadata",
    "FinancialExposure",
    "Report",
    "ReportFormatter",
    "truncate_address",
]
