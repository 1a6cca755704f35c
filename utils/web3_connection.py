"""
Web3 connection utility.
"""
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware


def get_web3_connection(rpc_url: str, inject_poa: bool = False) -> Web3:
    """
    Create a Web3 connection to the configured RPC endpoint.

    Args:
        rpc_url (str): HTTP(S) JSON-RPC endpoint
        inject_poa (bool): Inject the PoA extra-data middleware, needed for
            proof-of-authority chains such as BNB Chain

    Returns:
        Web3: The Web3 connection instance
    """
    if not rpc_url:
        raise ValueError("RPC URL must not be empty")

    w3 = Web3(Web3.HTTPProvider(rpc_url))

    if inject_poa:
        # Inject the PoA middleware at layer 0 (innermost layer)
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    return w3
