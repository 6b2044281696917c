"""Known Solana entity address mappings.

This module contains address-to-entity mappings for known Solana
entities: centralized exchange hot wallets and name-service programs.

Addresses are base58 and case-sensitive; they must be compared exactly.

Sources:
- Solscan labels
- Public exchange disclosures
- Solana Name Service / Bonfida documentation
"""

from __future__ import annotations

from enum import Enum


class Exchange(Enum):
    """Centralized exchanges with known Solana hot wallets.

    Values are the display names shown in reports.
    """

    BINANCE = "Binance"
    COINBASE = "Coinbase"
    KRAKEN = "Kraken"
    FTX = "FTX (defunct)"
    OKX = "OKX"
    KUCOIN = "KuCoin"


# CEX hot wallet addresses on Solana
CEX_ADDRESSES: dict[str, Exchange] = {
    # Binance
    "5tzFkiKscXHK5ZXCGbXZxdw7gTjjD1mBwuoFbhUvuAi9": Exchange.BINANCE,
    "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM": Exchange.BINANCE,
    "2ojv9BAiHUrvsm9gxDe7fJSzbNZSJcxZvf8dqmWGHG8S": Exchange.BINANCE,
    # Coinbase
    "H8sMJSCQxfKiFTCfDR3DUMLPwcRbM61LGFJ8N4dK3WjS": Exchange.COINBASE,
    "GJRs4FwHtemZ5ZE9x3FNvJ8TMwitKTh21yxdRPqn7npE": Exchange.COINBASE,
    "2AQdpHJ2JpcEgPiATUXjQxA8QmafFegfQwSLWSprPicm": Exchange.COINBASE,
    # Kraken
    "FWznbcNXWQuHTawe9RxvQ2LdCENssh12dsznf4RiouN5": Exchange.KRAKEN,
    "7hUdUTkJLwdcmt3jSEeqx4ep91sm1XwBxMDaJae6bD5D": Exchange.KRAKEN,
    # FTX (defunct, still relevant for historical activity)
    "CuieVDEDtLo7FypA9SbLM9saXFdb1dsshEkyErMqkRQq": Exchange.FTX,
    # OKX
    "5VCwKtCXgCJ6kit5FybXjvriW3xELsFDhYrPSqtJNmcD": Exchange.OKX,
    # KuCoin
    "BmFdpraQhkiDQE6SnfG5omcA1VwzqfXrwtNYBwWTymy6": Exchange.KUCOIN,
}

# Name service programs (.sol domains)
SNS_PROGRAM_ID = "namesLPneVptA9Z5rqUDD9tMTWEJwofgaYwp8cawRkX"
BONFIDA_PROGRAM_ID = "jCebN34bUfdeUYJT13J1yG16XWQpt5PDx6Mse9GUqhR"

NAME_SERVICE_PROGRAMS: frozenset[str] = frozenset([SNS_PROGRAM_ID, BONFIDA_PROGRAM_ID])


def get_all_known_exchanges() -> dict[str, Exchange]:
    """Get all known exchange addresses.

    Returns:
        Dictionary mapping addresses to their exchange, as a fresh copy.
    """
    return dict(CEX_ADDRESSES)
