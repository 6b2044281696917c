"""Solana Privacy Scanner - On-chain privacy exposure analysis for wallets."""

__version__ = "0.1.0"
