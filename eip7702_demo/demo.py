"""
EIP-7702 delegated swap demo.

One account authorizes the router contract as its code, a second account
submits that authorization, and the first account then swaps tokens by
calling the router ABI on its own address.
"""

import argparse
import logging
import time

from web3 import Web3

from .accounts import AuthorizationError, ChainAccount, delegation_target
from .config import ConfigError, DemoConfig, load_config
from .contracts import router_contract, token_contract
from .precise import ParseError, format_units, to_int_by_precise, to_string_by_precise
from .receipts import Confirmed, Reverted, TimedOut, wait_for_receipt

logger = logging.getLogger(__name__)


class DemoError(RuntimeError):
    pass


def build_swap_args(config: DemoConfig, decimals_in: int, recipient: str, now: int | None = None) -> tuple:
    """Arguments for swapExactTokensForTokens(amountIn, amountOutMin, path, to, deadline)."""
    if now is None:
        now = int(time.time())
    amount_in = to_int_by_precise(config.amount_in, decimals_in)
    amount_out_min = to_int_by_precise(config.amount_out_min, config.amount_out_min_decimals)
    path = [
        Web3.to_checksum_address(config.token_address(config.token_in)),
        Web3.to_checksum_address(config.token_address(config.token_out)),
    ]
    return amount_in, amount_out_min, path, recipient, now + config.deadline_seconds


def _require_confirmed(outcome, what):
    if isinstance(outcome, Confirmed):
        return outcome
    if isinstance(outcome, Reverted):
        raise DemoError(f"{what} transaction {outcome.tx_hash} reverted")
    if isinstance(outcome, TimedOut):
        raise DemoError(f"{what} transaction {outcome.tx_hash} timed out after {outcome.timeout}s")
    raise DemoError(f"{what} transaction: unexpected receipt outcome {outcome!r}")


def _print_balance(label, balance, decimals):
    print(f"  {label}: {to_string_by_precise(balance, decimals)} ({format_units(balance, decimals)})")


def run_demo(config: DemoConfig, w3: Web3 | None = None) -> None:
    if w3 is None:
        w3 = Web3(Web3.HTTPProvider(config.rpc_endpoint))

    print("=" * 60)
    print("EIP-7702: Delegated Router Swap")
    print("=" * 60)
    print(f"Connected to: {config.rpc_endpoint}")

    bob = ChainAccount(w3, config.authorizer_key)
    joe = ChainAccount(w3, config.sponsor_key)
    print(f"Authorizer (Bob): {bob.address}")
    print(f"Sponsor (Joe): {joe.address}")
    print()

    router_address = Web3.to_checksum_address(config.router_address)
    self_sponsored = bob.address == joe.address

    print("Step 1: Sign EIP-7702 authorization")
    authorization = bob.sign_authorization(router_address, self_sponsored=self_sponsored)
    print(f"✓ Authorization signed by {bob.address}")
    print(f"  Delegate to: {router_address}")
    print(f"  Chain ID: {authorization['chainId']}")
    print(f"  Nonce: {authorization['nonce']}")
    print()

    print("Step 2: Send transaction with EIP-7702 authorization")
    tx_hash = joe.send_set_code_tx([authorization], gas=config.gas_limit)
    print(f"✓ Transaction sent: {Web3.to_hex(tx_hash)}")
    outcome = _require_confirmed(
        wait_for_receipt(w3, tx_hash, config.authorization_timeout, config.poll_interval),
        "EIP-7702",
    )
    print(f"  Gas used: {outcome.receipt['gasUsed']}")
    print(f"  Confirmations: {outcome.confirmations}")
    print()

    print("Step 3: Verify delegation")
    code = w3.eth.get_code(bob.address)
    print(f"  Bob code: {Web3.to_hex(code)}")
    target = delegation_target(code)
    if target != router_address:
        raise DemoError(f"expected delegation to {router_address}, found {target}")
    print(f"✓ {bob.address} delegates to {target}")
    print()

    token_in = token_contract(w3, config.token_address(config.token_in))
    token_out = token_contract(w3, config.token_address(config.token_out))
    decimals_in = token_in.functions.decimals().call()
    decimals_out = token_out.functions.decimals().call()

    print("Step 4: Check initial balances")
    _print_balance(config.token_in, token_in.functions.balanceOf(bob.address).call(), decimals_in)
    print()

    print("Step 5: Swap through the delegated account")
    swap_args = build_swap_args(config, decimals_in, bob.address)
    logger.info("Swap args: %s", swap_args)
    # Bob's code is now the router, so the router ABI is called at Bob's address
    router = router_contract(w3, bob.address)
    swap_tx = router.functions.swapExactTokensForTokens(*swap_args).build_transaction({
        "from": bob.address,
        "gas": config.gas_limit,
        "gasPrice": w3.eth.gas_price,
    })
    tx_hash = bob.send_transaction(swap_tx)
    print(f"✓ Swap transaction sent: {Web3.to_hex(tx_hash)}")
    outcome = _require_confirmed(
        wait_for_receipt(w3, tx_hash, config.swap_timeout, config.poll_interval),
        "Swap",
    )
    print(f"  Gas used: {outcome.receipt['gasUsed']}")
    print()

    print("Step 6: Check final balances")
    _print_balance(config.token_out, token_out.functions.balanceOf(bob.address).call(), decimals_out)
    _print_balance(config.token_in, token_in.functions.balanceOf(bob.address).call(), decimals_in)

    print("\n" + "=" * 60)
    print("✓✓✓ SUCCESS: DELEGATED SWAP COMPLETE ✓✓✓")
    print("=" * 60)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the EIP-7702 delegated swap demo")
    parser.add_argument("--env-file", help="path to a .env file with demo settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.env_file)
        run_demo(config)
    except (ConfigError, ParseError, AuthorizationError, DemoError) as e:
        print(f"\n✗ {e}")
        print("\n" + "=" * 60)
        print("✗✗✗ DEMO FAILED ✗✗✗")
        print("=" * 60)
        return 1
    return 0
