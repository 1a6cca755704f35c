"""
Tests for Web3LedgerClient with a mocked Web3 instance.

Transport and node errors must come out as wallet errors: read failures as
NetworkError, node refusals as RejectedTransaction and a missing receipt as
Timeout.
"""
import asyncio
from unittest.mock import MagicMock, PropertyMock

import pytest
from web3.exceptions import TransactionNotFound, Web3RPCError

from wallet.errors import NetworkError, RejectedTransaction, Timeout
from wallet.ledger import LedgerClient, Web3LedgerClient
from wallet.mnemonic import KeyDeriver
from wallet.models import TransferIntent

TEST_PHRASE = "test test test test test test test test test test test junk"
SIGNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
RAW_HASH = bytes.fromhex("12" * 32)


@pytest.fixture
def w3() -> MagicMock:
    w3 = MagicMock()
    w3.eth.get_balance.return_value = 10**18
    w3.eth.gas_price = 7
    w3.eth.get_transaction_count.return_value = 4
    w3.eth.chain_id = 1
    w3.eth.send_raw_transaction.return_value = RAW_HASH
    w3.eth.get_transaction_receipt.return_value = {'blockNumber': 321, 'status': 1}
    return w3


@pytest.fixture
def intent() -> TransferIntent:
    return TransferIntent(
        sender=KeyDeriver().derive(TEST_PHRASE, 0),
        recipient=RECIPIENT,
        value=10**17,
        gas=21000,
        fee_rate=7
    )


def test_satisfies_ledger_protocol(w3: MagicMock) -> None:
    assert isinstance(Web3LedgerClient(w3), LedgerClient)


@pytest.mark.asyncio
async def test_get_balance_uses_checksum_address(w3: MagicMock) -> None:
    client = Web3LedgerClient(w3)

    assert await client.get_balance(SIGNER_ADDRESS.lower()) == 10**18
    w3.eth.get_balance.assert_called_once_with(SIGNER_ADDRESS)


@pytest.mark.asyncio
async def test_get_balance_connection_error_is_network_error(w3: MagicMock) -> None:
    w3.eth.get_balance.side_effect = ConnectionError("connection refused")

    with pytest.raises(NetworkError):
        await Web3LedgerClient(w3).get_balance(SIGNER_ADDRESS)


@pytest.mark.asyncio
async def test_get_balance_rpc_error_is_network_error(w3: MagicMock) -> None:
    w3.eth.get_balance.side_effect = Web3RPCError("upstream unavailable")

    with pytest.raises(NetworkError):
        await Web3LedgerClient(w3).get_balance(SIGNER_ADDRESS)


@pytest.mark.asyncio
async def test_get_fee_rate_reads_gas_price(w3: MagicMock) -> None:
    assert await Web3LedgerClient(w3).get_fee_rate() == 7


@pytest.mark.asyncio
async def test_submit_signs_with_pending_nonce_and_broadcasts_once(w3: MagicMock, intent: TransferIntent) -> None:
    tx_hash = await Web3LedgerClient(w3).submit(intent)

    assert tx_hash == "0x" + "12" * 32
    w3.eth.get_transaction_count.assert_called_once_with(SIGNER_ADDRESS, 'pending')
    w3.eth.send_raw_transaction.assert_called_once()
    raw = w3.eth.send_raw_transaction.call_args.args[0]
    assert raw == intent.sign(4, 1).raw_transaction


@pytest.mark.asyncio
async def test_submit_node_refusal_is_rejected_transaction(w3: MagicMock, intent: TransferIntent) -> None:
    w3.eth.send_raw_transaction.side_effect = Web3RPCError("nonce too low")

    with pytest.raises(RejectedTransaction):
        await Web3LedgerClient(w3).submit(intent)
    assert w3.eth.send_raw_transaction.call_count == 1


@pytest.mark.asyncio
async def test_submit_prepare_failure_sends_nothing(w3: MagicMock, intent: TransferIntent) -> None:
    w3.eth.get_transaction_count.side_effect = ConnectionError("connection reset")

    with pytest.raises(NetworkError):
        await Web3LedgerClient(w3).submit(intent)
    w3.eth.send_raw_transaction.assert_not_called()


@pytest.mark.asyncio
async def test_get_fee_rate_connection_error_is_network_error(w3: MagicMock) -> None:
    type(w3.eth).gas_price = PropertyMock(side_effect=ConnectionError("connection refused"))

    with pytest.raises(NetworkError):
        await Web3LedgerClient(w3).get_fee_rate()


@pytest.mark.asyncio
async def test_submit_transport_failure_is_ambiguous_network_error(w3: MagicMock, intent: TransferIntent) -> None:
    w3.eth.send_raw_transaction.side_effect = ConnectionError("connection reset")

    with pytest.raises(NetworkError, match="may or may not have been sent") as exc_info:
        await Web3LedgerClient(w3).submit(intent)

    assert not isinstance(exc_info.value, RejectedTransaction)
    assert w3.eth.send_raw_transaction.call_count == 1


@pytest.mark.asyncio
async def test_await_confirmation_returns_receipt(w3: MagicMock) -> None:
    client = Web3LedgerClient(w3, confirmation_timeout=30, poll_latency=0.5)

    receipt = await client.await_confirmation("0xabc")

    assert receipt.block_number == 321
    assert receipt.status == 1
    w3.eth.get_transaction_receipt.assert_called_once_with("0xabc")


@pytest.mark.asyncio
async def test_await_confirmation_polls_until_receipt_appears(w3: MagicMock) -> None:
    w3.eth.get_transaction_receipt.side_effect = [
        TransactionNotFound("pending"),
        TransactionNotFound("pending"),
        {'blockNumber': 322, 'status': 0},
    ]
    client = Web3LedgerClient(w3, poll_latency=0.01)

    receipt = await client.await_confirmation("0xabc", timeout=5)

    assert receipt.block_number == 322
    assert receipt.status == 0
    assert w3.eth.get_transaction_receipt.call_count == 3


@pytest.mark.asyncio
async def test_await_confirmation_not_found_in_time_is_timeout(w3: MagicMock) -> None:
    w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("pending")
    client = Web3LedgerClient(w3, confirmation_timeout=30, poll_latency=0.01)

    with pytest.raises(Timeout) as exc_info:
        await client.await_confirmation("0xabc", timeout=0.05)

    assert exc_info.value.tx_hash == "0xabc"
    assert "not confirmed within 0.05 seconds" in exc_info.value.message


@pytest.mark.asyncio
async def test_await_confirmation_transport_error_is_timeout(w3: MagicMock) -> None:
    w3.eth.get_transaction_receipt.side_effect = ConnectionError("connection reset")

    with pytest.raises(Timeout) as exc_info:
        await Web3LedgerClient(w3).await_confirmation("0xabc", timeout=1)

    assert exc_info.value.tx_hash == "0xabc"
    assert not isinstance(exc_info.value, RejectedTransaction)


@pytest.mark.asyncio
async def test_cancelling_await_confirmation_stops_polling(w3: MagicMock) -> None:
    w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("pending")
    client = Web3LedgerClient(w3, confirmation_timeout=30, poll_latency=0.01)

    task = asyncio.create_task(client.await_confirmation("0xabc"))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    polls_at_cancel = w3.eth.get_transaction_receipt.call_count
    await asyncio.sleep(0.05)
    assert polls_at_cancel > 0
    assert w3.eth.get_transaction_receipt.call_count == polls_at_cancel
