"""
Configuration module to handle environment variables.

Nothing is read at import time: call load_config() to build a WalletConfig
from the environment (and an optional .env file) and pass it to the
components that need it.
"""
import os
import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional
from dotenv import load_dotenv

# Wallet derivation path settings
# Account index goes in the hardened account level: m/44'/60'/{index}'/0/0
ACCOUNT_PATH_TEMPLATE: str = "m/44'/60'/{}'/0/0"

# Scan settings
DEFAULT_MAX_INDEX: int = 20  # Addresses checked per seed phrase

# Transaction settings
TRANSFER_GAS: int = 21000  # Gas units of a plain ETH transfer
CONFIRMATION_TIMEOUT: float = 120.0  # Seconds to wait for a receipt
POLL_LATENCY: float = 0.1  # Seconds between receipt polls

# Numbered seed phrase keys: PHRASE_1, PHRASE_2, ...
_NUMBERED_PHRASE_KEY = re.compile(r"^PHRASE_(\d+)$")


@dataclass
class WalletConfig:
    """Settings shared by the key deriver, balance scanner and transfer engine."""
    rpc_url: str
    seed_phrases: List[str] = field(default_factory=list, repr=False)
    max_index: int = DEFAULT_MAX_INDEX
    account_path_template: str = ACCOUNT_PATH_TEMPLATE
    passphrase: str = field(default="", repr=False)
    transfer_gas: int = TRANSFER_GAS
    confirmation_timeout: float = CONFIRMATION_TIMEOUT
    poll_latency: float = POLL_LATENCY
    scan_concurrency: int = 1
    inject_poa_middleware: bool = False


def get_env_var(name: str, default: Any = None) -> Any:
    """
    Get an environment variable or return a default value if not found.

    Args:
        name (str): The name of the environment variable
        default: The default value to return if the variable is not found

    Returns:
        The value of the environment variable or the default value
    """
    value = os.getenv(name, default)
    if value is None:
        raise ValueError(f"Environment variable {name} not found and no default provided")
    return value


def _get_int(name: str, default: int, minimum: int) -> int:
    raw = get_env_var(name, str(default))
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"Environment variable {name} must be >= {minimum}, got {value}")
    return value


def _get_float(name: str, default: float) -> float:
    raw = get_env_var(name, str(default))
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"Environment variable {name} must be positive, got {value}")
    return value


def parse_seed_phrases(raw: Optional[str]) -> List[str]:
    """
    Split a delimited PHRASES value into individual seed phrases.

    Phrases are separated by semicolons or newlines. Empty entries are
    dropped and the words of each phrase are joined by single spaces.
    """
    if not raw:
        return []
    phrases = []
    for part in re.split(r"[;\n]", raw):
        phrase = " ".join(part.split())
        if phrase:
            phrases.append(phrase)
    return phrases


def collect_seed_phrases(environ: Mapping[str, str]) -> List[str]:
    """
    Collect seed phrases from both supported formats.

    PHRASES (delimited) comes first, followed by PHRASE_1, PHRASE_2, ... in
    numeric order. A phrase that appears twice is kept once, at its first
    position.
    """
    phrases = parse_seed_phrases(environ.get("PHRASES"))

    numbered = []
    for key, value in environ.items():
        match = _NUMBERED_PHRASE_KEY.match(key)
        if match:
            numbered.append((int(match.group(1)), value))
    for _, value in sorted(numbered):
        phrases.extend(parse_seed_phrases(value))

    unique: List[str] = []
    for phrase in phrases:
        if phrase not in unique:
            unique.append(phrase)
    return unique


def load_config(env_file: Optional[str] = None) -> WalletConfig:
    """
    Build a WalletConfig from environment variables.

    Args:
        env_file (Optional[str]): Path of a .env file to load first. When None
            the default .env lookup of python-dotenv is used.

    Returns:
        WalletConfig: The loaded configuration

    Raises:
        ValueError: If a required variable is missing or a value is invalid
    """
    load_dotenv(env_file)

    rpc_url: str = get_env_var('RPC_URL', '').strip()
    if not rpc_url:
        raise ValueError("RPC_URL is not set in the environment or .env file")

    seed_phrases = collect_seed_phrases(os.environ)
    if not seed_phrases:
        raise ValueError("No seed phrases found: set PHRASES or PHRASE_1, PHRASE_2, ...")

    template: str = get_env_var('ACCOUNT_PATH_TEMPLATE', ACCOUNT_PATH_TEMPLATE)
    if "{" not in template:
        raise ValueError(f"ACCOUNT_PATH_TEMPLATE must contain an index placeholder, got {template!r}")

    return WalletConfig(
        rpc_url=rpc_url,
        seed_phrases=seed_phrases,
        max_index=_get_int('MAX_INDEX', DEFAULT_MAX_INDEX, minimum=0),
        account_path_template=template,
        passphrase=get_env_var('MNEMONIC_PASSPHRASE', ''),
        transfer_gas=_get_int('TRANSFER_GAS', TRANSFER_GAS, minimum=21000),
        confirmation_timeout=_get_float('CONFIRMATION_TIMEOUT', CONFIRMATION_TIMEOUT),
        poll_latency=_get_float('POLL_LATENCY', POLL_LATENCY),
        scan_concurrency=_get_int('SCAN_CONCURRENCY', 1, minimum=1),
        inject_poa_middleware=get_env_var('POA_MIDDLEWARE', 'false').strip().lower() in ('1', 'true', 'yes'),
    )
