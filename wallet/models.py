"""
Value types shared by the wallet core.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any
from eth_account import Account
from eth_account.datastructures import SignedTransaction


class TransferState(str, Enum):
    """States a single transfer moves through, in order."""
    VALIDATING = "validating"
    DERIVING = "deriving"
    CHECKING_BALANCE = "checking_balance"
    ESTIMATING_FEE = "estimating_fee"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class KeyPair:
    """
    An account derived from a seed phrase.

    The private key is kept out of repr() so a KeyPair can be logged safely.
    Use KeyDeriver.reveal_private_key to get it as text.
    """
    address: str
    private_key: bytes = field(repr=False)
    account_index: int = 0
    derivation_path: str = ""


@dataclass(frozen=True)
class WalletInfo:
    """Snapshot of one derived wallet that holds a nonzero balance."""
    address: str
    balance_raw: int
    balance_display: str
    account_index: int
    seed_phrase_label: str


@dataclass(frozen=True)
class TransferRequest:
    """A request to move `amount_display` ETH from a derived account."""
    signer_seed_phrase: str = field(repr=False)
    signer_index: int
    recipient_address: str
    amount_display: str


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a confirmed transfer."""
    transaction_hash: str
    confirmed_block: int
    status: int = 1


@dataclass(frozen=True)
class Receipt:
    """Inclusion data reported by the ledger for a transaction."""
    block_number: int
    status: int = 1


@dataclass(frozen=True)
class TransferIntent:
    """
    A native-currency transfer ready to be signed.

    The transport supplies the nonce and chain id at submission time and
    calls sign(); the intent never exposes the sender's private key.
    """
    sender: KeyPair
    recipient: str
    value: int
    gas: int
    fee_rate: int

    @property
    def fee(self) -> int:
        """Maximum fee in wei (gas units x fee rate)."""
        return self.gas * self.fee_rate

    @property
    def total_cost(self) -> int:
        """Value plus maximum fee in wei."""
        return self.value + self.fee

    def build_transaction(self, nonce: int, chain_id: int) -> Dict[str, Any]:
        """
        Build the legacy transaction dict for this intent.

        Args:
            nonce (int): Sender nonce to use
            chain_id (int): Chain id of the connected network

        Returns:
            Dict[str, Any]: Transaction fields accepted by Account.sign_transaction
        """
        return {
            'nonce': nonce,
            'to': self.recipient,
            'value': self.value,
            'gas': self.gas,
            'gasPrice': self.fee_rate,
            'chainId': chain_id,
        }

    def sign(self, nonce: int, chain_id: int) -> SignedTransaction:
        """Sign the transaction with the sender's key."""
        tx = self.build_transaction(nonce, chain_id)
        return Account.sign_transaction(tx, self.sender.private_key)
