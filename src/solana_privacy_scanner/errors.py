"""Exception hierarchy for the privacy scanner."""

from __future__ import annotations

import re

# Base58 alphabet (no 0, O, I, l), 32-44 characters
SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


class ScannerError(Exception):
    """Base exception for privacy scanner errors."""


class InvalidAddressError(ScannerError):
    """Raised when a wallet address is not a valid Solana address."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Invalid Solana address format: {address!r}")
        self.address = address


class DataUnavailableError(ScannerError):
    """Raised when the transaction data source cannot provide data."""


def is_valid_address(address: str) -> bool:
    """Return True if address is a base58 string of 32-44 characters."""
    return bool(SOLANA_ADDRESS_PATTERN.match(address))


def validate_address(address: str) -> str:
    """Validate a Solana address.

    Args:
        address: The address to validate.

    Returns:
        The address unchanged.

    Raises:
        InvalidAddressError: If the address is malformed.
    """
    if not isinstance(address, str) or not is_valid_address(address):
        raise InvalidAddressError(str(address))
    return address
