"""
Mock objects for testing the seed wallet.
"""
from tests.mocks.mock_ledger import MockLedgerClient, create_mock_ledger

__all__ = [
    'MockLedgerClient',
    'create_mock_ledger',
]
