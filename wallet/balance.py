"""
Balance checking for addresses derived from seed phrases.
"""
import asyncio
import logging
from typing import List, Optional, Sequence, Tuple
from utils.config import DEFAULT_MAX_INDEX, WalletConfig
from utils.status_updates import StatusCallback, report_status
from wallet.errors import InvalidInput, NetworkError
from wallet.ledger import LedgerClient
from wallet.mnemonic import KeyDeriver, normalize_seed_phrase
from wallet.models import WalletInfo
from wallet.utils import format_ether, seed_phrase_label, validate_address

logger = logging.getLogger(__name__)


class BalanceScanner:
    """
    Finds funded accounts among the first `max_index` indices of each phrase.

    Results always come back in (phrase, index) order, whether the balance
    queries run one at a time or concurrently.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        deriver: Optional[KeyDeriver] = None,
        config: Optional[WalletConfig] = None
    ) -> None:
        self.ledger = ledger
        self.config = config
        self.deriver = deriver or KeyDeriver(config)
        self.concurrency: int = max(1, config.scan_concurrency) if config else 1

    async def check_balance(self, address: str) -> str:
        """
        Get the ETH balance of an address.

        Args:
            address (str): The address to check

        Returns:
            str: Balance in ETH as a plain decimal string

        Raises:
            InvalidInput: If the address is malformed (no remote call is made)
            NetworkError: If the ledger cannot be reached
        """
        checksum_address = validate_address(address)
        raw_balance = await self.ledger.get_balance(checksum_address)
        return format_ether(raw_balance)

    async def scan(
        self,
        seed_phrases: Optional[Sequence[str]] = None,
        max_index: Optional[int] = None,
        status_callback: Optional[StatusCallback] = None
    ) -> List[WalletInfo]:
        """
        List derived wallets that hold a nonzero balance.

        Args:
            seed_phrases: Phrases to scan (defaults to the configured ones)
            max_index (int): Indices 0..max_index-1 are checked per phrase
                (defaults to the configured value, 20)
            status_callback: Receives progress updates

        Returns:
            List[WalletInfo]: Funded wallets in phrase order, then index order

        Raises:
            InvalidSeedPhrase: If any phrase is invalid, before any query is made
            InvalidInput: If max_index is negative
        """
        if seed_phrases is None:
            seed_phrases = self.config.seed_phrases if self.config else []
        if max_index is None:
            max_index = self.config.max_index if self.config else DEFAULT_MAX_INDEX
        if isinstance(max_index, bool) or not isinstance(max_index, int) or max_index < 0:
            raise InvalidInput(f"max_index must be a non-negative integer, got {max_index!r}")

        # A phrase given twice would report the same wallets twice; keep the first
        phrases: List[str] = []
        for seed_phrase in seed_phrases:
            phrase = normalize_seed_phrase(seed_phrase)
            if phrase not in phrases:
                phrases.append(phrase)

        # Derive every address up front so a bad phrase fails before any network traffic
        targets: List[Tuple[str, int, str]] = []
        for phrase in phrases:
            label = seed_phrase_label(phrase)
            for index in range(max_index):
                targets.append((label, index, self.deriver.derive_address(phrase, index)))

        logger.info(f"Scanning {len(targets)} addresses across {len(phrases)} seed phrase(s)")
        await report_status(status_callback, f"Scanning {len(targets)} addresses...")

        semaphore = asyncio.Semaphore(self.concurrency)

        async def query(label: str, index: int, address: str) -> Optional[WalletInfo]:
            async with semaphore:
                try:
                    raw_balance = await self.ledger.get_balance(address)
                except NetworkError as e:
                    logger.error(f"Error checking wallet index {index} ({label}): {e}")
                    await report_status(status_callback, f"Index {index}: balance unavailable, skipped")
                    return None

            if raw_balance <= 0:
                return None

            info = WalletInfo(
                address=address,
                balance_raw=raw_balance,
                balance_display=format_ether(raw_balance),
                account_index=index,
                seed_phrase_label=label
            )
            await report_status(status_callback, f"Index {index}: {info.balance_display} ETH at {address}")
            return info

        results = await asyncio.gather(*(query(label, index, address) for label, index, address in targets))
        wallets = [info for info in results if info is not None]

        logger.info(f"Scan completed: checked {len(targets)} addresses, {len(wallets)} with balance")
        return wallets
