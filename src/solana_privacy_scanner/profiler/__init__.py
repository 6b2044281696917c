"""Entity profiling - Known exchange and program address data."""

from solana_privacy_scanner.profiler.entities import KnownExchangeRegistry
from solana_privacy_scanner.profiler.entity_data import (
    BONFIDA_PROGRAM_ID,
    NAME_SERVICE_PROGRAMS,
    SNS_PROGRAM_ID,
    Exchange,
)

__all__ = [
    "BONFIDA_PROGRAM_ID",
    "Exchange",
    "KnownExchangeRegistry",
    "NAME_SERVICE_PROGRAMS",
    "SNS_PROGRAM_ID",
]
