"""
Deterministic key derivation from BIP39 seed phrases.

KeyDeriver turns (seed phrase, account index) into a KeyPair. It makes no
network calls and keeps no state besides its configuration, so the same
inputs always produce the same address and key.
"""
import logging
from typing import Any, Optional
from eth_account import Account
from mnemonic import Mnemonic
from utils.config import ACCOUNT_PATH_TEMPLATE, WalletConfig
from wallet.errors import InvalidSeedPhrase
from wallet.models import KeyPair
from wallet.utils import validate_index

# Import BIP functionality
Account.enable_unaudited_hdwallet_features()

logger = logging.getLogger(__name__)


def normalize_seed_phrase(seed_phrase: Any) -> str:
    """Collapse surrounding and repeated whitespace in a seed phrase."""
    if not isinstance(seed_phrase, str):
        raise InvalidSeedPhrase("Seed phrase must be a string")
    return " ".join(seed_phrase.split())


class KeyDeriver:
    """
    Derives accounts from seed phrases along a BIP44 path template.

    The template receives the account index, e.g. the default
    "m/44'/60'/{}'/0/0" places it at the hardened account level.
    """

    def __init__(self, config: Optional[WalletConfig] = None) -> None:
        self.account_path_template: str = config.account_path_template if config else ACCOUNT_PATH_TEMPLATE
        self.passphrase: str = config.passphrase if config else ""
        self._mnemo = Mnemonic("english")

    def derivation_path(self, account_index: int) -> str:
        """
        Render the derivation path for an account index.

        Args:
            account_index (int): Non-negative account index

        Returns:
            str: The derivation path, e.g. "m/44'/60'/0'/0/0"
        """
        index = validate_index(account_index)
        return self.account_path_template.format(index, index=index)

    def derive(self, seed_phrase: str, account_index: int = 0) -> KeyPair:
        """
        Derive the key pair at `account_index`.

        Args:
            seed_phrase (str): Space-separated BIP39 mnemonic
            account_index (int): Non-negative account index

        Returns:
            KeyPair: Address and private key of the account

        Raises:
            InvalidSeedPhrase: Wrong word count, unknown word or bad checksum
            InvalidInput: If the index is not a non-negative integer
        """
        phrase = normalize_seed_phrase(seed_phrase)
        path = self.derivation_path(account_index)

        if not self._mnemo.check(phrase):
            raise InvalidSeedPhrase("Invalid mnemonic phrase")

        account = Account.from_mnemonic(
            mnemonic=phrase,
            passphrase=self.passphrase,
            account_path=path
        )

        return KeyPair(
            address=account.address,
            private_key=bytes(account.key),
            account_index=account_index,
            derivation_path=path
        )

    def derive_address(self, seed_phrase: str, account_index: int = 0) -> str:
        """Derive only the checksum address at `account_index`."""
        return self.derive(seed_phrase, account_index).address

    def reveal_private_key(self, seed_phrase: str, account_index: int = 0) -> str:
        """
        Return the private key at `account_index` as 0x-prefixed hex.

        This is the only place the secret key leaves derivation as text.
        Treat the result as a secret: never log, store or transmit it.
        """
        key_pair = self.derive(seed_phrase, account_index)
        logger.warning(f"Private key revealed for account index {account_index} ({key_pair.address})")
        return "0x" + key_pair.private_key.hex()
