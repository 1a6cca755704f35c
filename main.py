#!/usr/bin/env python3
"""
Command-line front end for the seed wallet.

Usage:
    python main.py list [--max-index N]          List all wallets with balance
    python main.py balance <address>             Check balance of an address
    python main.py transfer <index> <to> <amount> [--timeout S]
                                                 Transfer ETH (uses first seed phrase)
    python main.py address [index]               Get wallet address (default index: 0)
    python main.py export-key [index]            Show a wallet's private key

Configuration is read from the environment or a .env file:
    RPC_URL    JSON-RPC endpoint
    PHRASES    Seed phrases separated by ';' or newlines
               (or PHRASE_1, PHRASE_2, ...)
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from utils.config import WalletConfig, load_config
from utils.status_updates import create_status_callback
from wallet.balance import BalanceScanner
from wallet.errors import Timeout, WalletError
from wallet.ledger import Web3LedgerClient
from wallet.mnemonic import KeyDeriver
from wallet.models import TransferRequest
from wallet.send import TransferEngine

USAGE_EXAMPLES = """
Examples:
  python main.py list
  python main.py balance 0x70997970C51812dc3A010C7d01b50e0d17dc79C8
  python main.py transfer 0 0x70997970C51812dc3A010C7d01b50e0d17dc79C8 0.1
  python main.py address 0
"""


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(
        prog='seed-wallet',
        description='Simple Ethereum wallet CLI',
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--env-file', type=str, default=None,
                        help='Path of the .env file to load (default: search for .env)')
    subparsers = parser.add_subparsers(dest='command')

    list_parser = subparsers.add_parser('list', help='List all wallets with balance')
    list_parser.add_argument('--max-index', type=int, default=None,
                             help='Addresses to check per seed phrase (default: MAX_INDEX or 20)')

    balance_parser = subparsers.add_parser('balance', help='Check balance of an address')
    balance_parser.add_argument('address', type=str)

    transfer_parser = subparsers.add_parser('transfer', help='Transfer ETH (uses first seed phrase)')
    transfer_parser.add_argument('index', type=int)
    transfer_parser.add_argument('to', type=str)
    transfer_parser.add_argument('amount', type=str, help='Amount in ETH')
    transfer_parser.add_argument('--timeout', type=float, default=None,
                                 help='Seconds to wait for confirmation')

    address_parser = subparsers.add_parser('address', help='Get wallet address')
    address_parser.add_argument('index', type=int, nargs='?', default=0)

    export_parser = subparsers.add_parser('export-key', help="Show a wallet's private key")
    export_parser.add_argument('index', type=int, nargs='?', default=0)

    return parser


async def run_list(config: WalletConfig, max_index: Optional[int]) -> None:
    scanner = BalanceScanner(Web3LedgerClient.from_config(config), config=config)
    print("Scanning wallets for balances...\n")
    wallets = await scanner.scan(max_index=max_index)

    if not wallets:
        print("No wallets with balance found.")
        return

    print(f"Found {len(wallets)} wallet(s) with balance:\n")
    for number, info in enumerate(wallets, start=1):
        print(f"{number}. Address: {info.address}")
        print(f"   Balance: {info.balance_display} ETH")
        print(f"   Index: {info.account_index}")
        print(f"   Seed: {info.seed_phrase_label}\n")


async def run_balance(config: WalletConfig, address: str) -> None:
    scanner = BalanceScanner(Web3LedgerClient.from_config(config), config=config)
    balance = await scanner.check_balance(address)
    print(f"Balance: {balance} ETH")


async def run_transfer(config: WalletConfig, index: int, to_address: str, amount: str,
                       timeout: Optional[float]) -> None:
    engine = TransferEngine(Web3LedgerClient.from_config(config), config=config)
    request = TransferRequest(
        signer_seed_phrase=config.seed_phrases[0],
        signer_index=index,
        recipient_address=to_address,
        amount_display=amount
    )
    print(f"Transferring {amount} ETH from wallet index {index} to {to_address}...")
    result = await engine.transfer(
        request,
        status_callback=create_status_callback(prefix="  "),
        confirmation_timeout=timeout
    )
    if result.status == 1:
        print(f"Transfer successful! Transaction hash: {result.transaction_hash}")
    else:
        print(f"Transaction {result.transaction_hash} was included in block "
              f"{result.confirmed_block} but reverted.")


def run_address(config: WalletConfig, index: int) -> None:
    deriver = KeyDeriver(config)
    address = deriver.derive_address(config.seed_phrases[0], index)
    print(f"Wallet address (index {index}): {address}")


def run_export_key(config: WalletConfig, index: int) -> None:
    deriver = KeyDeriver(config)
    address = deriver.derive_address(config.seed_phrases[0], index)
    private_key = deriver.reveal_private_key(config.seed_phrases[0], index)
    print("⚠️  Anyone with this key has full control of the wallet. Never share it.")
    print(f"Address (index {index}): {address}")
    print(f"Private key: {private_key}")


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the command and return the exit code."""
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(args.env_file)

        if args.command == 'list':
            asyncio.run(run_list(config, args.max_index))
        elif args.command == 'balance':
            asyncio.run(run_balance(config, args.address))
        elif args.command == 'transfer':
            asyncio.run(run_transfer(config, args.index, args.to, args.amount, args.timeout))
        elif args.command == 'address':
            run_address(config, args.index)
        elif args.command == 'export-key':
            run_export_key(config, args.index)
    except Timeout as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.tx_hash:
            print(f"Check the status of {e.tx_hash} before sending again.", file=sys.stderr)
        return 1
    except (WalletError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
