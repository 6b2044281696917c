"""Data models for Solana transaction history.

These mirror the Helius enhanced-transactions payload, reduced to the
fields the detectors read. All models are immutable.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class NativeTransfer:
    """A SOL transfer between two accounts.

    Attributes:
        from_address: Sending account.
        to_address: Receiving account.
        amount: Amount in lamports.
    """

    from_address: str
    to_address: str
    amount: int

    @property
    def amount_sol(self) -> float:
        """Return amount in SOL (10^9 lamports = 1 SOL)."""
        return self.amount / LAMPORTS_PER_SOL

    @classmethod
    def from_helius(cls, data: dict[str, Any]) -> NativeTransfer:
        """Create from a Helius ``nativeTransfers`` entry."""
        return cls(
            from_address=data.get("fromUserAccount") or "",
            to_address=data.get("toUserAccount") or "",
            amount=int(data.get("amount") or 0),
        )


@dataclass(frozen=True)
class TokenTransfer:
    """An SPL token transfer between two accounts.

    Attributes:
        from_address: Sending account.
        to_address: Receiving account.
        amount: Amount in the token's natural units.
        mint: Token mint address.
        token_standard: Standard tag, e.g. "Fungible" or "NonFungible".
    """

    from_address: str
    to_address: str
    amount: Decimal
    mint: str
    token_standard: str = ""

    @property
    def is_non_fungible(self) -> bool:
        """Return True if the token standard is NonFungible."""
        return self.token_standard == "NonFungible"

    @classmethod
    def from_helius(cls, data: dict[str, Any]) -> TokenTransfer:
        """Create from a Helius ``tokenTransfers`` entry."""
        return cls(
            from_address=data.get("fromUserAccount") or "",
            to_address=data.get("toUserAccount") or "",
            amount=_to_decimal(data.get("tokenAmount")),
            mint=data.get("mint") or "",
            token_standard=data.get("tokenStandard") or "",
        )


@dataclass(frozen=True)
class AccountData:
    """An account referenced by a transaction."""

    account: str
    native_balance_change: int = 0

    @classmethod
    def from_helius(cls, data: dict[str, Any]) -> AccountData:
        """Create from a Helius ``accountData`` entry."""
        return cls(
            account=data.get("account") or "",
            native_balance_change=int(data.get("nativeBalanceChange") or 0),
        )


@dataclass(frozen=True)
class NFTEvent:
    """NFT sale/mint event attached to a transaction.

    Attributes:
        buyer: Buyer account, if any.
        seller: Seller account, if any.
        mints: Mint addresses of the NFTs involved.
        description: Event description from the indexer.
        event_type: Event type tag, e.g. "NFT_MINT" or "NFT_SALE".
    """

    buyer: str | None = None
    seller: str | None = None
    mints: tuple[str, ...] = ()
    description: str = ""
    event_type: str = ""

    @classmethod
    def from_helius(cls, data: dict[str, Any]) -> NFTEvent:
        """Create from a Helius ``events.nft`` object."""
        return cls(
            buyer=data.get("buyer") or None,
            seller=data.get("seller") or None,
            mints=tuple(nft["mint"] for nft in data.get("nfts") or [] if nft.get("mint")),
            description=data.get("description") or "",
            event_type=data.get("type") or "",
        )


@dataclass(frozen=True)
class Transaction:
    """A parsed Solana transaction.

    Attributes:
        signature: Unique transaction signature.
        timestamp: Block time as unix seconds.
        description: Human-readable description from the indexer.
        fee_payer: Account that paid the transaction fee.
        native_transfers: SOL transfers, in instruction order.
        token_transfers: SPL token transfers, in instruction order.
        account_data: Accounts referenced by the transaction.
        nft_event: NFT event payload, if the indexer produced one.
        tx_type: Indexer transaction type, e.g. "TRANSFER".
        source: Indexer source program tag, e.g. "SYSTEM_PROGRAM".
        fee: Fee in lamports.
    """

    signature: str
    timestamp: int
    description: str = ""
    fee_payer: str = ""
    native_transfers: tuple[NativeTransfer, ...] = ()
    token_transfers: tuple[TokenTransfer, ...] = ()
    account_data: tuple[AccountData, ...] = ()
    nft_event: NFTEvent | None = None
    tx_type: str = ""
    source: str = ""
    fee: int = 0

    @property
    def referenced_accounts(self) -> tuple[str, ...]:
        """Return every account referenced in ``account_data``."""
        return tuple(entry.account for entry in self.account_data)

    @classmethod
    def from_helius(cls, data: dict[str, Any]) -> Transaction:
        """Parse one item of a Helius enhanced-transactions response.

        Missing keys fall back to empty values.

        Args:
            data: Raw transaction dictionary from the API.

        Returns:
            Parsed Transaction.
        """
        events = data.get("events") or {}
        nft = events.get("nft")
        return cls(
            signature=data.get("signature") or "",
            timestamp=int(data.get("timestamp") or 0),
            description=data.get("description") or "",
            fee_payer=data.get("feePayer") or "",
            native_transfers=tuple(
                NativeTransfer.from_helius(t) for t in data.get("nativeTransfers") or []
            ),
            token_transfers=tuple(
                TokenTransfer.from_helius(t) for t in data.get("tokenTransfers") or []
            ),
            account_data=tuple(
                AccountData.from_helius(a) for a in data.get("accountData") or []
            ),
            nft_event=NFTEvent.from_helius(nft) if nft else None,
            tx_type=data.get("type") or "",
            source=data.get("source") or "",
            fee=int(data.get("fee") or 0),
        )


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal(0)


def iter_counterparties(transactions: Iterable[Transaction], address: str) -> Iterator[str]:
    """Yield the counterparty of every native and token transfer.

    The counterparty is the destination when the wallet is the source,
    otherwise the source. Empty and self counterparties are skipped.
    """
    for tx in transactions:
        transfers: tuple[NativeTransfer | TokenTransfer, ...] = (
            *tx.native_transfers,
            *tx.token_transfers,
        )
        for transfer in transfers:
            other = (
                transfer.to_address
                if transfer.from_address == address
                else transfer.from_address
            )
            if other and other != address:
                yield other


def extract_counterparties(
    transactions: Iterable[Transaction], address: str
) -> dict[str, int]:
    """Map each counterparty address to its interaction count.

    Keys are ordered by first appearance.

    Args:
        transactions: Transaction history.
        address: The wallet being analyzed.

    Returns:
        Dictionary of counterparty address to interaction count.
    """
    counts: dict[str, int] = {}
    for other in iter_counterparties(transactions, address):
        counts[other] = counts.get(other, 0) + 1
    return counts
