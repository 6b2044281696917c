"""Synthetic transaction history for demo runs.

Used when no Helius API key is configured or ``--demo`` is passed. The
history exercises every detector: an exchange withdrawal and deposit, a
hackathon badge mint and a back-and-forth exchange of SOL with a single
counterparty. Timestamps are fixed offsets from an anchor so output is
reproducible.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from solana_privacy_scanner.ingestor.models import (
    LAMPORTS_PER_SOL,
    NativeTransfer,
    NFTEvent,
    TokenTransfer,
    Transaction,
)

logger = logging.getLogger(__name__)

DEMO_ANCHOR_TIMESTAMP = 1_700_000_000  # 2023-11-14T22:13:20Z
DAY_SECONDS = 86_400
DEMO_FEE_LAMPORTS = 5_000

DEMO_BINANCE_ADDRESS = "5tzFkiKscXHK5ZXCGbXZxdw7gTjjD1mBwuoFbhUvuAi9"
DEMO_COINBASE_ADDRESS = "2AQdpHJ2JpcEgPiATUXjQxA8QmafFegfQwSLWSprPicm"
DEMO_PEER_ADDRESS = "DemoPeer" + "1" * 36
DEMO_MINTER_ADDRESS = "DemoMinter" + "1" * 34
DEMO_BADGE_MINT = "DemoBadgeMint" + "1" * 31


class DemoTransactionSource:
    """Transaction source returning a fixed synthetic history.

    Implements the same interface as HeliusClient so the analyzer treats
    it like any other source.
    """

    def __init__(self, anchor_timestamp: int = DEMO_ANCHOR_TIMESTAMP) -> None:
        """Initialize the demo source.

        Args:
            anchor_timestamp: Unix time of the oldest demo transaction.
        """
        self.anchor_timestamp = anchor_timestamp

    async def get_history(self, address: str, limit: int = 100) -> list[Transaction]:
        """Return the synthetic history for an address."""
        transactions = self.build_history(address)[:limit]
        logger.info("Generated %d demo transactions for %s", len(transactions), address)
        return transactions

    async def get_balance(self, address: str) -> float:
        """Return a zero balance."""
        return 0.0

    def build_history(self, address: str) -> list[Transaction]:
        """Build the synthetic history, oldest first."""
        t0 = self.anchor_timestamp

        history = [
            Transaction(
                signature="demo_sig_withdrawal",
                timestamp=t0,
                description="Transferred 2.5 SOL",
                fee_payer=address,
                native_transfers=(
                    NativeTransfer(address, DEMO_BINANCE_ADDRESS, 5 * LAMPORTS_PER_SOL // 2),
                ),
                tx_type="TRANSFER",
                source="SYSTEM_PROGRAM",
                fee=DEMO_FEE_LAMPORTS,
            ),
            Transaction(
                signature="demo_sig_deposit",
                timestamp=t0 + DAY_SECONDS,
                description="Received 1 SOL",
                fee_payer=DEMO_COINBASE_ADDRESS,
                native_transfers=(
                    NativeTransfer(DEMO_COINBASE_ADDRESS, address, LAMPORTS_PER_SOL),
                ),
                tx_type="TRANSFER",
                source="SYSTEM_PROGRAM",
                fee=DEMO_FEE_LAMPORTS,
            ),
            Transaction(
                signature="demo_sig_badge",
                timestamp=t0 + 2 * DAY_SECONDS,
                description="Minted Solana Hackathon Badge",
                fee_payer=address,
                token_transfers=(
                    TokenTransfer(
                        DEMO_MINTER_ADDRESS,
                        address,
                        Decimal(1),
                        DEMO_BADGE_MINT,
                        "NonFungible",
                    ),
                ),
                nft_event=NFTEvent(
                    buyer=address,
                    mints=(DEMO_BADGE_MINT,),
                    description="Minted Solana Hackathon Badge",
                    event_type="NFT_MINT",
                ),
                tx_type="NFT_MINT",
                source="CANDY_MACHINE_V3",
                fee=DEMO_FEE_LAMPORTS,
            ),
        ]

        # Alternating transfers with one peer
        for i in range(4):
            outgoing = i % 2 == 0
            transfer = (
                NativeTransfer(address, DEMO_PEER_ADDRESS, LAMPORTS_PER_SOL // 10)
                if outgoing
                else NativeTransfer(DEMO_PEER_ADDRESS, address, LAMPORTS_PER_SOL // 10)
            )
            history.append(
                Transaction(
                    signature=f"demo_sig_peer_{i}",
                    timestamp=t0 + (3 + i) * DAY_SECONDS,
                    description="Transferred 0.1 SOL",
                    fee_payer=address if outgoing else DEMO_PEER_ADDRESS,
                    native_transfers=(transfer,),
                    tx_type="TRANSFER",
                    source="SYSTEM_PROGRAM",
                    fee=DEMO_FEE_LAMPORTS,
                )
            )

        return history
