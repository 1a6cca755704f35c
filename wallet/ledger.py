"""
Remote ledger access.

LedgerClient is the capability the wallet core needs from the network:
balance lookup, fee price lookup, transaction submission and receipt
polling. Web3LedgerClient implements it over JSON-RPC with web3 and maps
web3/transport exceptions onto the wallet error types.
"""
import asyncio
import logging
from typing import Any, Optional, Protocol, Tuple, runtime_checkable
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception, Web3RPCError
from utils.config import CONFIRMATION_TIMEOUT, POLL_LATENCY, WalletConfig
from utils.web3_connection import get_web3_connection
from wallet.errors import NetworkError, RejectedTransaction, Timeout
from wallet.models import Receipt, TransferIntent

logger = logging.getLogger(__name__)


@runtime_checkable
class LedgerClient(Protocol):
    """Operations the wallet core requires from the ledger transport."""

    async def get_balance(self, address: str) -> int:
        """Balance of `address` in wei. Raises NetworkError."""
        ...

    async def get_fee_rate(self) -> int:
        """Current gas price in wei. Raises NetworkError."""
        ...

    async def submit(self, intent: TransferIntent) -> str:
        """Sign and broadcast `intent`, return the 0x hash. Raises RejectedTransaction."""
        ...

    async def await_confirmation(self, tx_hash: str, timeout: Optional[float] = None) -> Receipt:
        """Block until `tx_hash` is included. Raises Timeout."""
        ...


class Web3LedgerClient:
    """LedgerClient backed by a web3 HTTP connection."""

    def __init__(
        self,
        w3: Web3,
        confirmation_timeout: float = CONFIRMATION_TIMEOUT,
        poll_latency: float = POLL_LATENCY
    ) -> None:
        self.w3 = w3
        self.confirmation_timeout = confirmation_timeout
        self.poll_latency = poll_latency

    @classmethod
    def from_config(cls, config: WalletConfig) -> 'Web3LedgerClient':
        """Connect to `config.rpc_url` and build a client from the config."""
        w3 = get_web3_connection(config.rpc_url, inject_poa=config.inject_poa_middleware)
        logger.info("Web3LedgerClient initialized")
        return cls(
            w3,
            confirmation_timeout=config.confirmation_timeout,
            poll_latency=config.poll_latency
        )

    async def get_balance(self, address: str) -> int:
        checksum_address = Web3.to_checksum_address(address)
        try:
            balance = await asyncio.to_thread(self.w3.eth.get_balance, checksum_address)
        except (Web3Exception, OSError) as e:
            raise NetworkError(f"Failed to fetch balance of {checksum_address}: {e}") from e
        return int(balance)

    async def get_fee_rate(self) -> int:
        try:
            gas_price = await asyncio.to_thread(lambda: self.w3.eth.gas_price)
        except (Web3Exception, OSError) as e:
            raise NetworkError(f"Failed to fetch gas price: {e}") from e
        return int(gas_price)

    def _next_nonce_and_chain(self, address: str) -> Tuple[int, int]:
        nonce = self.w3.eth.get_transaction_count(address, 'pending')
        return int(nonce), int(self.w3.eth.chain_id)

    async def submit(self, intent: TransferIntent) -> str:
        """
        Sign and broadcast a transfer exactly once.

        Nonce and chain id lookups happen before anything is broadcast, so a
        failure there is a plain NetworkError with no effect on chain. If the
        transport fails during the broadcast itself the transaction may or
        may not have reached the node; that NetworkError says so and the
        caller must check the sender's transactions before trying again.
        """
        sender = Web3.to_checksum_address(intent.sender.address)
        try:
            nonce, chain_id = await asyncio.to_thread(self._next_nonce_and_chain, sender)
        except (Web3Exception, OSError) as e:
            raise NetworkError(f"Failed to prepare transaction for {sender}: {e}") from e

        signed_tx = intent.sign(nonce, chain_id)

        try:
            tx_hash = await asyncio.to_thread(self.w3.eth.send_raw_transaction, signed_tx.raw_transaction)
        except (Web3RPCError, ValueError) as e:
            raise RejectedTransaction(f"Transaction rejected by node: {e}") from e
        except (Web3Exception, OSError) as e:
            raise NetworkError(
                f"Broadcast failed, transaction may or may not have been sent (nonce {nonce}): {e}"
            ) from e

        tx_hash_hex = "0x" + bytes(tx_hash).hex()
        logger.info(f"Transaction sent: {tx_hash_hex}")
        return tx_hash_hex

    async def _poll_receipt(self, tx_hash: str) -> Any:
        while True:
            try:
                receipt = await asyncio.to_thread(self.w3.eth.get_transaction_receipt, tx_hash)
            except TransactionNotFound:
                receipt = None
            if receipt is not None:
                return receipt
            await asyncio.sleep(self.poll_latency)

    async def await_confirmation(self, tx_hash: str, timeout: Optional[float] = None) -> Receipt:
        """
        Poll for the receipt of `tx_hash`.

        Each poll is one receipt lookup in a worker thread followed by an
        asyncio sleep; cancelling the awaiting task stops polling at the
        next await.

        Transport failures while polling are reported as Timeout as well:
        either way the inclusion was not observed and the hash must be
        re-queried later.
        """
        wait_s = self.confirmation_timeout if timeout is None else timeout
        try:
            receipt = await asyncio.wait_for(self._poll_receipt(tx_hash), timeout=wait_s)
        except asyncio.TimeoutError as e:
            raise Timeout(
                f"Transaction {tx_hash} not confirmed within {wait_s} seconds; it may still confirm later",
                tx_hash=tx_hash
            ) from e
        except (Web3Exception, OSError) as e:
            raise Timeout(
                f"Lost connection while waiting for {tx_hash}; it may still confirm later: {e}",
                tx_hash=tx_hash
            ) from e

        return Receipt(
            block_number=int(receipt['blockNumber']),
            status=int(receipt.get('status', 1))
        )
