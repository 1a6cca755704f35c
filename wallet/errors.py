"""
Wallet exceptions.

Every failure raised by the wallet core derives from WalletError and carries
a stable `kind` tag, so callers can branch on the type (or the tag) instead
of matching message strings.
"""
from typing import Optional, Any


class WalletError(Exception):
    """Base exception for wallet errors."""

    kind: str = "wallet_error"

    def __init__(self, message: str) -> None:
        """
        Initialize wallet error.

        Args:
            message: Error message
        """
        self.message = message
        # Set by TransferEngine to the state the transfer failed in
        self.state: Optional[Any] = None
        super().__init__(self.message)


class InvalidSeedPhrase(WalletError):
    """The seed phrase does not decode to a valid BIP39 seed."""

    kind = "invalid_seed_phrase"


class InvalidInput(WalletError):
    """Malformed address, amount or index. Raised before any remote call."""

    kind = "invalid_input"


class InsufficientFunds(WalletError):
    """
    Balance too low for the amount, or for the amount plus the fee.

    Both values are in wei.
    """

    kind = "insufficient_funds"

    def __init__(self, message: str, available: int, required: int) -> None:
        """
        Initialize insufficient funds error.

        Args:
            message: Error message
            available: Balance of the signer in wei
            required: Amount (or amount + fee) that was needed in wei
        """
        self.available = available
        self.required = required
        super().__init__(message)


class NetworkError(WalletError):
    """Transport-level failure talking to the ledger."""

    kind = "network_error"


class RejectedTransaction(WalletError):
    """
    The node explicitly refused the signed transaction.

    Do not retry blindly: the cause may be a nonce conflict or an
    underpriced transaction and a retry can double spend.
    """

    kind = "rejected_transaction"


class Timeout(WalletError):
    """
    Confirmation was not observed in time.

    The outcome is ambiguous: the transaction may still be included later.
    Re-query `tx_hash` instead of resubmitting.
    """

    kind = "timeout"

    def __init__(self, message: str, tx_hash: Optional[str] = None) -> None:
        """
        Initialize timeout error.

        Args:
            message: Error message
            tx_hash: Hash of the submitted transaction, if known
        """
        self.tx_hash = tx_hash
        super().__init__(message)
