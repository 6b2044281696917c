"""Tests for ingestor data models."""

from decimal import Decimal

import pytest

from solana_privacy_scanner.ingestor.models import (
    AccountData,
    NativeTransfer,
    NFTEvent,
    TokenTransfer,
    Transaction,
    extract_counterparties,
)

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
PEER_A = "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"
PEER_B = "FWznbcNXWQuHTawe9RxvQ2LdCENssh12dsznf4RiouN5"


HELIUS_TRANSACTION = {
    "signature": "5h6xBEauJ3PK6SWCZ1PGjBvj8vDdWG3KpwATGy1ARAXFSDwt8GFXM7W5Ncn16wmqokgpiKRL",
    "timestamp": 1_700_000_000,
    "description": "Wallet received Mad Lad #42 from seller",
    "type": "NFT_SALE",
    "source": "MAGIC_EDEN",
    "fee": 5000,
    "feePayer": WALLET,
    "nativeTransfers": [
        {"fromUserAccount": WALLET, "toUserAccount": PEER_A, "amount": 2_500_000_000},
    ],
    "tokenTransfers": [
        {
            "fromUserAccount": PEER_A,
            "toUserAccount": WALLET,
            "tokenAmount": 1,
            "mint": "MadLad42Mint",
            "tokenStandard": "NonFungible",
        },
    ],
    "accountData": [
        {"account": WALLET, "nativeBalanceChange": -2_500_005_000},
        {"account": PEER_A, "nativeBalanceChange": 2_500_000_000},
    ],
    "events": {
        "nft": {
            "buyer": WALLET,
            "seller": PEER_A,
            "description": "Wallet received Mad Lad #42 from seller",
            "type": "NFT_SALE",
            "nfts": [{"mint": "MadLad42Mint", "tokenStandard": "NonFungible"}],
        }
    },
}


class TestNativeTransfer:
    """Tests for NativeTransfer model."""

    def test_from_helius(self) -> None:
        """Test parsing a native transfer."""
        transfer = NativeTransfer.from_helius(
            {"fromUserAccount": WALLET, "toUserAccount": PEER_A, "amount": 1_500_000_000}
        )

        assert transfer.from_address == WALLET
        assert transfer.to_address == PEER_A
        assert transfer.amount == 1_500_000_000
        assert transfer.amount_sol == 1.5

    def test_from_helius_missing_fields(self) -> None:
        """Test that missing fields become empty values."""
        transfer = NativeTransfer.from_helius({"fromUserAccount": None})

        assert transfer.from_address == ""
        assert transfer.to_address == ""
        assert transfer.amount == 0

    def test_frozen(self) -> None:
        """Test that NativeTransfer is immutable."""
        transfer = NativeTransfer(WALLET, PEER_A, 1)
        with pytest.raises(AttributeError):
            transfer.amount = 2  # type: ignore[misc]


class TestTokenTransfer:
    """Tests for TokenTransfer model."""

    def test_from_helius(self) -> None:
        """Test parsing a token transfer with a float amount."""
        transfer = TokenTransfer.from_helius(
            {
                "fromUserAccount": WALLET,
                "toUserAccount": PEER_A,
                "tokenAmount": 12.5,
                "mint": "USDCmint",
                "tokenStandard": "Fungible",
            }
        )

        assert transfer.amount == Decimal("12.5")
        assert transfer.mint == "USDCmint"
        assert transfer.is_non_fungible is False

    def test_invalid_amount_defaults_to_zero(self) -> None:
        """Test that unparseable amounts become zero."""
        transfer = TokenTransfer.from_helius({"tokenAmount": "not-a-number"})

        assert transfer.amount == Decimal(0)
        assert transfer.token_standard == ""

    def test_non_fungible(self) -> None:
        """Test the NonFungible standard check."""
        transfer = TokenTransfer(PEER_A, WALLET, Decimal(1), "mint", "NonFungible")

        assert transfer.is_non_fungible is True


class TestNFTEvent:
    """Tests for NFTEvent model."""

    def test_from_helius(self) -> None:
        """Test parsing an NFT event."""
        event = NFTEvent.from_helius(HELIUS_TRANSACTION["events"]["nft"])  # type: ignore[index]

        assert event.buyer == WALLET
        assert event.seller == PEER_A
        assert event.mints == ("MadLad42Mint",)
        assert event.event_type == "NFT_SALE"

    def test_from_helius_empty(self) -> None:
        """Test that empty buyer and seller become None."""
        event = NFTEvent.from_helius({"buyer": "", "nfts": [{"mint": ""}]})

        assert event.buyer is None
        assert event.seller is None
        assert event.mints == ()


class TestTransaction:
    """Tests for Transaction model."""

    def test_from_helius_full(self) -> None:
        """Test parsing a complete enhanced transaction."""
        tx = Transaction.from_helius(HELIUS_TRANSACTION)

        assert tx.signature.startswith("5h6xBEau")
        assert tx.timestamp == 1_700_000_000
        assert tx.fee_payer == WALLET
        assert tx.tx_type == "NFT_SALE"
        assert tx.source == "MAGIC_EDEN"
        assert tx.fee == 5000
        assert len(tx.native_transfers) == 1
        assert len(tx.token_transfers) == 1
        assert tx.token_transfers[0].amount == Decimal(1)
        assert tx.nft_event is not None
        assert tx.nft_event.buyer == WALLET
        assert tx.referenced_accounts == (WALLET, PEER_A)

    def test_from_helius_minimal(self) -> None:
        """Test parsing with only required keys."""
        tx = Transaction.from_helius({"signature": "sig1", "timestamp": 1})

        assert tx.description == ""
        assert tx.fee_payer == ""
        assert tx.native_transfers == ()
        assert tx.token_transfers == ()
        assert tx.account_data == ()
        assert tx.nft_event is None

    def test_from_helius_null_collections(self) -> None:
        """Test that null arrays and events are tolerated."""
        tx = Transaction.from_helius(
            {
                "signature": "sig1",
                "timestamp": None,
                "nativeTransfers": None,
                "tokenTransfers": None,
                "accountData": None,
                "events": None,
            }
        )

        assert tx.timestamp == 0
        assert tx.native_transfers == ()
        assert tx.nft_event is None

    def test_account_data(self) -> None:
        """Test parsing account data entries."""
        entry = AccountData.from_helius({"account": PEER_A, "nativeBalanceChange": -10})

        assert entry.account == PEER_A
        assert entry.native_balance_change == -10


class TestExtractCounterparties:
    """Tests for extract_counterparties."""

    def test_counts_native_and_token(self) -> None:
        """Test that both transfer kinds count as interactions."""
        counts = extract_counterparties([Transaction.from_helius(HELIUS_TRANSACTION)], WALLET)

        assert counts == {PEER_A: 2}

    def test_first_seen_order(self) -> None:
        """Test that keys keep first-appearance order."""
        txs = [
            Transaction(
                signature="sig1",
                timestamp=1,
                native_transfers=(
                    NativeTransfer(PEER_B, WALLET, 1),
                    NativeTransfer(WALLET, PEER_A, 1),
                    NativeTransfer(WALLET, PEER_B, 1),
                ),
            )
        ]

        counts = extract_counterparties(txs, WALLET)

        assert list(counts) == [PEER_B, PEER_A]
        assert counts[PEER_B] == 2

    def test_skips_self_and_empty(self) -> None:
        """Test that self transfers and empty accounts are skipped."""
        txs = [
            Transaction(
                signature="sig1",
                timestamp=1,
                native_transfers=(
                    NativeTransfer(WALLET, WALLET, 1),
                    NativeTransfer(WALLET, "", 1),
                ),
            )
        ]

        assert extract_counterparties(txs, WALLET) == {}

    def test_third_party_transfer_uses_source(self) -> None:
        """Test that transfers not sent by the wallet count their source."""
        txs = [
            Transaction(
                signature="sig1",
                timestamp=1,
                native_transfers=(NativeTransfer(PEER_A, PEER_B, 1),),
            )
        ]

        assert extract_counterparties(txs, WALLET) == {PEER_A: 1}
