"""
Wallet module.
Provides functionality for deriving accounts from seed phrases, scanning
their balances, and sending ETH transactions.
"""

from wallet.errors import (
    WalletError,
    InvalidSeedPhrase,
    InvalidInput,
    InsufficientFunds,
    NetworkError,
    RejectedTransaction,
    Timeout
)
from wallet.models import (
    KeyPair,
    WalletInfo,
    TransferRequest,
    TransferResult,
    TransferIntent,
    TransferState,
    Receipt
)
from wallet.mnemonic import KeyDeriver
from wallet.ledger import LedgerClient, Web3LedgerClient
from wallet.balance import BalanceScanner
from wallet.send import TransferEngine
from wallet.utils import validate_address, parse_amount, format_ether

# Export all functions
__all__ = [
    'WalletError',
    'InvalidSeedPhrase',
    'InvalidInput',
    'InsufficientFunds',
    'NetworkError',
    'RejectedTransaction',
    'Timeout',
    'KeyPair',
    'WalletInfo',
    'TransferRequest',
    'TransferResult',
    'TransferIntent',
    'TransferState',
    'Receipt',
    'KeyDeriver',
    'LedgerClient',
    'Web3LedgerClient',
    'BalanceScanner',
    'TransferEngine',
    'validate_address',
    'parse_amount',
    'format_ether'
]
