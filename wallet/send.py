"""
Native ETH transfers from accounts derived from a seed phrase.

TransferEngine runs one transfer through a fixed sequence of steps:

    VALIDATING -> DERIVING -> CHECKING_BALANCE -> ESTIMATING_FEE
        -> SUBMITTING -> CONFIRMING -> DONE

Any error ends the transfer in FAILED and is re-raised with `error.state`
set to the step it happened in. Nothing is retried. SUBMITTING is the only
step with an effect on chain and it calls the ledger exactly once.

The balance and fee checks are a best-effort pre-check: the balance can
still change before the transaction lands, in which case the node's
RejectedTransaction is the authoritative answer.

The engine does not serialize transfers per signer. Callers must not run
two transfers from the same account at once unless the ledger transport
assigns nonces safely.
"""
import logging
from typing import Optional
from utils.config import TRANSFER_GAS, WalletConfig
from utils.status_updates import StatusCallback, report_status
from wallet.errors import InsufficientFunds, WalletError
from wallet.ledger import LedgerClient
from wallet.mnemonic import KeyDeriver
from wallet.models import TransferIntent, TransferRequest, TransferResult, TransferState
from wallet.utils import format_ether, parse_amount, validate_address, validate_index

logger = logging.getLogger(__name__)


class TransferEngine:
    """Validates, prices, submits and confirms native transfers."""

    def __init__(
        self,
        ledger: LedgerClient,
        deriver: Optional[KeyDeriver] = None,
        config: Optional[WalletConfig] = None
    ) -> None:
        self.ledger = ledger
        self.deriver = deriver or KeyDeriver(config)
        self.transfer_gas: int = config.transfer_gas if config else TRANSFER_GAS
        self.confirmation_timeout: Optional[float] = config.confirmation_timeout if config else None

    async def transfer(
        self,
        request: TransferRequest,
        status_callback: Optional[StatusCallback] = None,
        confirmation_timeout: Optional[float] = None
    ) -> TransferResult:
        """
        Send ETH from the signer account to the recipient and wait for inclusion.

        Args:
            request (TransferRequest): Signer phrase and index, recipient, amount in ETH
            status_callback: Receives progress updates
            confirmation_timeout (Optional[float]): Seconds to wait for the receipt,
                overriding the configured value

        Returns:
            TransferResult: Transaction hash, block number and receipt status

        Raises:
            InvalidInput: Bad recipient, amount or index (no remote call made)
            InvalidSeedPhrase: The signer phrase is invalid
            NetworkError: Balance or fee lookup failed (nothing was sent)
            InsufficientFunds: Amount, or amount plus fee, exceeds the balance
            RejectedTransaction: The node refused the transaction
            Timeout: No confirmation in time; the transaction may still land
        """
        state = TransferState.VALIDATING
        try:
            recipient = validate_address(request.recipient_address)
            amount_wei = parse_amount(request.amount_display)
            signer_index = validate_index(request.signer_index)

            state = TransferState.DERIVING
            signer = self.deriver.derive(request.signer_seed_phrase, signer_index)
            await report_status(status_callback, f"Sender: {signer.address} (index {signer_index})")

            state = TransferState.CHECKING_BALANCE
            await report_status(status_callback, "Checking ETH balance...")
            balance_wei = await self.ledger.get_balance(signer.address)
            if amount_wei > balance_wei:
                raise InsufficientFunds(
                    f"Insufficient balance. Available: {format_ether(balance_wei)} ETH, "
                    f"Requested: {format_ether(amount_wei)} ETH",
                    available=balance_wei,
                    required=amount_wei
                )

            state = TransferState.ESTIMATING_FEE
            await report_status(status_callback, "Estimating gas fees...")
            fee_rate = await self.ledger.get_fee_rate()
            intent = TransferIntent(
                sender=signer,
                recipient=recipient,
                value=amount_wei,
                gas=self.transfer_gas,
                fee_rate=fee_rate
            )
            if intent.total_cost > balance_wei:
                max_wei = max(balance_wei - intent.fee, 0)
                raise InsufficientFunds(
                    f"Insufficient balance for transfer + gas. Available: {format_ether(balance_wei)} ETH, "
                    f"maximum you can send is {format_ether(max_wei)} ETH after gas",
                    available=balance_wei,
                    required=intent.total_cost
                )
            await report_status(status_callback, f"Total gas cost: {format_ether(intent.fee)} ETH")

            state = TransferState.SUBMITTING
            logger.info(
                f"Transferring {format_ether(amount_wei)} ETH from {signer.address} to {recipient}"
            )
            tx_hash = await self.ledger.submit(intent)
            await report_status(status_callback, f"Transaction sent: {tx_hash}")

            state = TransferState.CONFIRMING
            await report_status(status_callback, "Waiting for confirmation...")
            timeout = confirmation_timeout if confirmation_timeout is not None else self.confirmation_timeout
            receipt = await self.ledger.await_confirmation(tx_hash, timeout=timeout)
        except WalletError as e:
            e.state = state
            logger.error(f"Transfer failed while {state.value}: {e}")
            raise

        if receipt.status != 1:
            logger.warning(f"Transaction {tx_hash} was included in block {receipt.block_number} but reverted")
        logger.info(f"Transaction confirmed in block: {receipt.block_number}")
        await report_status(status_callback, f"Transaction confirmed in block {receipt.block_number}")

        return TransferResult(
            transaction_hash=tx_hash,
            confirmed_block=receipt.block_number,
            status=receipt.status
        )
