"""
Utility functions for the wallet module.
"""
from decimal import Context, Decimal, InvalidOperation
from typing import Any
from web3 import Web3
from wallet.errors import InvalidInput

# Wei per ether; amounts with more fractional digits cannot be represented
ETHER_DECIMALS = 18

# BIP32 child indices at or above 2**31 are hardened, so 2**31 - 1 is the last usable index
MAX_ACCOUNT_INDEX = 2**31 - 1


def validate_address(address: Any) -> str:
    """
    Validate an Ethereum address and convert it to checksum format.

    Args:
        address (str): 0x-prefixed hex address. All-lowercase and all-uppercase
            forms are accepted; mixed case must carry a valid EIP-55 checksum.

    Returns:
        str: The address converted to checksum format

    Raises:
        InvalidInput: If the address is not a valid Ethereum address
    """
    if not address or not isinstance(address, str):
        raise InvalidInput("Address must be a non-empty string")

    if not address.startswith('0x') or len(address) != 42:
        raise InvalidInput(f"Invalid address: {address}")

    if not Web3.is_address(address):
        raise InvalidInput(f"Invalid address: {address}")

    hex_part = address[2:]
    is_mixed_case = hex_part != hex_part.lower() and hex_part != hex_part.upper()
    if is_mixed_case and not Web3.is_checksum_address(address):
        raise InvalidInput(f"Invalid address checksum: {address}")

    return Web3.to_checksum_address(address)


def validate_index(index: Any) -> int:
    """
    Check that an account index is an integer in 0..MAX_ACCOUNT_INDEX.

    Raises:
        InvalidInput: If it is not
    """
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise InvalidInput(f"Account index must be a non-negative integer, got {index!r}")
    if index > MAX_ACCOUNT_INDEX:
        raise InvalidInput(f"Account index must be at most {MAX_ACCOUNT_INDEX}, got {index}")
    return index


def parse_amount(amount: Any) -> int:
    """
    Convert a human-readable ETH amount to wei.

    Args:
        amount (str): Decimal string in ether, e.g. "0.1"

    Returns:
        int: Amount in wei

    Raises:
        InvalidInput: If the amount is not a finite non-negative decimal with
            at most 18 fractional digits
    """
    if isinstance(amount, bool) or not isinstance(amount, (str, int, Decimal)):
        raise InvalidInput(f"Invalid amount: {amount!r}")

    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidInput(f"Invalid amount: {amount!r}")

    if not value.is_finite():
        raise InvalidInput(f"Invalid amount: {amount!r}")
    if value < 0:
        raise InvalidInput(f"Amount must not be negative: {amount}")

    # Trailing zeros do not count: "0.100000000000000000000" is exactly 0.1 ETH
    exact = Context(prec=max(1, len(value.as_tuple().digits)))
    exponent = value.normalize(exact).as_tuple().exponent
    if isinstance(exponent, int) and -exponent > ETHER_DECIMALS:
        raise InvalidInput(f"Amount has more than {ETHER_DECIMALS} decimal places: {amount}")

    try:
        return int(Web3.to_wei(value, 'ether'))
    except ValueError as e:
        raise InvalidInput(f"Invalid amount: {amount}") from e


def format_ether(raw_amount: int) -> str:
    """
    Format a wei amount as a plain decimal ETH string.

    No exponent notation and no trailing zeros: 1500000000000000000 -> "1.5",
    1000 -> "0.000000000000001", 0 -> "0".
    """
    value = Web3.from_wei(raw_amount, 'ether')
    text = format(Decimal(value), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def seed_phrase_label(seed_phrase: str, words: int = 3) -> str:
    """Non-secret preview of a seed phrase: its first words followed by '...'."""
    return " ".join(seed_phrase.split()[:words]) + "..."
