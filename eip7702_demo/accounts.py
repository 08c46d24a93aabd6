"""
Local accounts that sign EIP-7702 authorizations and send transactions.
"""

import logging

import rlp
from eth_account import Account
from eth_keys import keys
from web3 import Web3

logger = logging.getLogger(__name__)

# EIP-7702 authorization tuple format:
# [chain_id, address, nonce]
# MAGIC = 0x05 as per EIP-7702
MAGIC = b"\x05"

# Code of a delegated EOA: 0xef0100 || address
DELEGATION_PREFIX = b"\xef\x01\x00"

DEFAULT_GAS = 3_000_000


class AuthorizationError(ValueError):
    pass


def delegation_target(code):
    """Return the delegate address encoded in an account's code, or None."""
    code = bytes(code or b"")
    if len(code) != len(DELEGATION_PREFIX) + 20 or not code.startswith(DELEGATION_PREFIX):
        return None
    return Web3.to_checksum_address("0x" + code[len(DELEGATION_PREFIX):].hex())


class ChainAccount:
    """An externally owned account bound to a web3 client."""

    def __init__(self, w3: Web3, private_key: str):
        self.w3 = w3
        self.account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return self.account.address

    def sign_authorization(self, contract: str, chain_id: int | None = None, nonce: int | None = None,
                           self_sponsored: bool = False) -> dict:
        """
        Sign an authorization letting ``contract`` act as this account's code.

        The chain id defaults to the connected chain and the nonce to the
        account's pending transaction count. When this account also sends
        the transaction carrying the authorization, that transaction uses
        the current nonce first, so the authorization must sign the next one.
        """
        if not Web3.is_address(contract):
            raise AuthorizationError(f"invalid contract address: {contract!r}")
        contract = Web3.to_checksum_address(contract)

        if chain_id is None:
            chain_id = self.w3.eth.chain_id
        if nonce is None:
            nonce = self.w3.eth.get_transaction_count(self.address, "pending")
            if self_sponsored:
                nonce += 1

        encoded = rlp.encode([chain_id, bytes.fromhex(contract[2:]), nonce])
        msg_hash = Web3.keccak(MAGIC + encoded)

        private_key = keys.PrivateKey(self.account.key)
        signature = private_key.sign_msg_hash(msg_hash)

        # eth_keys returns v as 0 or 1 (y_parity), not 27/28
        y_parity = signature.v
        if y_parity not in (0, 1):
            raise AuthorizationError(f"Unexpected y_parity={y_parity}")

        logger.debug("Signed authorization for %s -> %s (chain %s, nonce %s)",
                     self.address, contract, chain_id, nonce)
        return {
            "chainId": chain_id,
            "address": contract,
            "nonce": nonce,
            "yParity": y_parity,
            "r": signature.r,
            "s": signature.s,
        }

    def build_set_code_tx(self, authorizations, to: str | None = None, data: bytes = b"",
                          value: int = 0, gas: int = DEFAULT_GAS) -> dict:
        """Build a type 4 transaction carrying ``authorizations``."""
        # EIP-7702 transactions must use EIP-1559 fees
        base_fee = self.w3.eth.get_block("latest")["baseFeePerGas"]
        max_priority_fee = self.w3.to_wei(2, "gwei")
        max_fee = base_fee * 2 + max_priority_fee

        return {
            "type": 4,
            "from": self.address,
            "to": to or self.address,
            "value": value,
            "data": data,
            "gas": gas,
            "maxFeePerGas": max_fee,
            "maxPriorityFeePerGas": max_priority_fee,
            "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
            "chainId": self.w3.eth.chain_id,
            "authorizationList": list(authorizations),
        }

    def send_set_code_tx(self, authorizations, to: str | None = None, data: bytes = b"",
                         value: int = 0, gas: int = DEFAULT_GAS):
        tx = self.build_set_code_tx(authorizations, to=to, data=data, value=value, gas=gas)
        return self._sign_and_send(tx)

    def send_transaction(self, tx: dict):
        """Fill in sender defaults, sign and submit a transaction dict."""
        tx = dict(tx)
        tx.setdefault("from", self.address)
        tx.setdefault("value", 0)
        tx.setdefault("gas", DEFAULT_GAS)
        if "nonce" not in tx:
            tx["nonce"] = self.w3.eth.get_transaction_count(self.address, "pending")
        if "chainId" not in tx:
            tx["chainId"] = self.w3.eth.chain_id
        if "gasPrice" not in tx and "maxFeePerGas" not in tx:
            tx["gasPrice"] = self.w3.eth.gas_price
        return self._sign_and_send(tx)

    def _sign_and_send(self, tx: dict):
        signed_tx = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        logger.info("Sent transaction %s from %s", Web3.to_hex(tx_hash), self.address)
        return tx_hash
