"""Data ingestion layer - Solana transaction history sources."""

from solana_privacy_scanner.ingestor.demo import DemoTransactionSource
from solana_privacy_scanner.ingestor.helius import HeliusClient
from solana_privacy_scanner.ingestor.models import (
    LAMPORTS_PER_SOL,
    AccountData,
    NativeTransfer,
    NFTEvent,
    TokenTransfer,
    Transaction,
    extract_counterparties,
)

__all__ = [
    "AccountData",
    "DemoTransactionSource",
    "HeliusClient",
    "LAMPORTS_PER_SOL",
    "NFTEvent",
    "NativeTransfer",
    "TokenTransfer",
    "Transaction",
    "extract_counterparties",
]
