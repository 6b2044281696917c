"""Known exchange registry for Solana address classification.

This module provides the KnownExchangeRegistry class for identifying
centralized exchange custodial addresses, the anchor of the
exchange-interaction detector.
"""

from __future__ import annotations

import logging

from solana_privacy_scanner.profiler.entity_data import Exchange, get_all_known_exchanges

logger = logging.getLogger(__name__)


class KnownExchangeRegistry:
    """Registry of known exchange hot wallets.

    Lookups are exact and case-sensitive: Solana addresses are base58,
    so two addresses differing only in case are different accounts.

    The registry is populated once at construction and treated as
    read-only while an analysis runs.
    """

    def __init__(
        self,
        custom_exchanges: dict[str, Exchange] | None = None,
        *,
        include_defaults: bool = True,
    ) -> None:
        """Initialize the registry.

        Args:
            custom_exchanges: Additional address mappings to include.
            include_defaults: Whether to include the built-in hot wallet table.
        """
        self._exchanges: dict[str, Exchange] = {}

        if include_defaults:
            self._exchanges.update(get_all_known_exchanges())

        if custom_exchanges:
            self._exchanges.update(custom_exchanges)

        logger.debug("KnownExchangeRegistry initialized with %d addresses", len(self._exchanges))

    def classify(self, address: str) -> Exchange | None:
        """Return the exchange owning an address, or None if unknown."""
        if not address:
            return None
        return self._exchanges.get(address)

    def lookup(self, address: str) -> str | None:
        """Return the exchange display name for an address.

        Args:
            address: The Solana address to look up.

        Returns:
            Display name such as "Binance", or None if not an exchange address.
        """
        exchange = self.classify(address)
        return exchange.value if exchange is not None else None
