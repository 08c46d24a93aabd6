from unittest.mock import MagicMock

import pytest
from web3 import Web3

# Test keys only, never funded
AUTHORIZER_KEY = "0x" + "1" * 64
SPONSOR_KEY = "0x" + "2" * 64
ROUTER = Web3.to_checksum_address("0x66c488c48ff2cb17450391d24b923a92e5f6da5c")
CHAIN_ID = 97


@pytest.fixture
def mock_w3():
    """A web3 client stand-in answering the calls the demo makes."""
    w3 = MagicMock()
    w3.eth.chain_id = CHAIN_ID
    w3.eth.gas_price = Web3.to_wei(5, "gwei")
    w3.eth.block_number = 100
    w3.eth.get_transaction_count.return_value = 5
    w3.eth.get_block.return_value = {"baseFeePerGas": Web3.to_wei(1, "gwei")}
    w3.eth.send_raw_transaction.return_value = b"\xaa" * 32
    w3.to_wei = Web3.to_wei
    return w3
