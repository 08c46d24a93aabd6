"""
Demo configuration.

Values come from the environment, optionally seeded from a .env file.
Defaults point at the BSC testnet deployment the demo was written against.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv
from eth_account import Account
from eth_keys.exceptions import ValidationError
from web3 import Web3

logger = logging.getLogger(__name__)

BSC_TESTNET_RPC = "https://bsc-testnet.bnbchain.org"
ROUTER_ADDRESS = "0x66c488c48fF2CB17450391D24b923A92e5f6da5C"
USDT_ADDRESS = "0x11952129E0583F4d1DF5E93384Be07C405C11D6b"
WBNB_ADDRESS = "0xae13d989daC2f0dEbFf460aC112a837C89BAa7cd"

DEFAULT_TOKENS = {
    "WBNB": WBNB_ADDRESS,
    "USDT": USDT_ADDRESS,
}


class ConfigError(ValueError):
    pass


def _check_key(role, key):
    try:
        Account.from_key(key)
    except (ValueError, TypeError, ValidationError) as e:
        raise ConfigError(f"invalid {role} private key") from e


def _check_address(label, address):
    # Format only: mixed-case addresses are normalized, not checksum-verified
    if not isinstance(address, str) or not Web3.is_address(address.lower()):
        raise ConfigError(f"invalid {label} address: {address!r}")


@dataclass
class DemoConfig:
    authorizer_key: str
    sponsor_key: str | None = None
    rpc_endpoint: str = BSC_TESTNET_RPC
    router_address: str = ROUTER_ADDRESS
    token_addresses: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TOKENS))
    token_in: str = "WBNB"
    token_out: str = "USDT"
    amount_in: str = "0.01"
    amount_out_min: str = "1"
    amount_out_min_decimals: int = 2
    gas_limit: int = 3_000_000
    deadline_seconds: int = 300
    authorization_timeout: float = 120
    swap_timeout: float = 30
    poll_interval: float = 1.0

    def __post_init__(self):
        if not self.authorizer_key:
            raise ConfigError("authorizer private key is required")
        # The same account may both authorize and sponsor
        if not self.sponsor_key:
            self.sponsor_key = self.authorizer_key
        _check_key("authorizer", self.authorizer_key)
        _check_key("sponsor", self.sponsor_key)

        _check_address("router", self.router_address)
        self.token_addresses = {k.upper(): v for k, v in self.token_addresses.items()}
        for symbol, address in self.token_addresses.items():
            _check_address(f"token {symbol}", address)

    def token_address(self, symbol: str) -> str:
        try:
            return self.token_addresses[symbol.upper()]
        except KeyError:
            raise ConfigError(f"unknown token symbol: {symbol}") from None


def parse_token_addresses(raw: str) -> dict[str, str]:
    """Parse "SYM=0x..,SYM=0x.." into a symbol to address mapping."""
    tokens = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        symbol, sep, address = item.partition("=")
        if not sep or not symbol.strip() or not address.strip():
            raise ConfigError(f"malformed token entry: {item!r}")
        tokens[symbol.strip().upper()] = address.strip()
    return tokens


def _env_number(name, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def load_config(env_file: str | None = None) -> DemoConfig:
    """Build a DemoConfig from the environment."""
    if env_file:
        load_dotenv(env_file)
        logger.debug("Loaded environment from %s", env_file)
    else:
        load_dotenv()

    tokens = dict(DEFAULT_TOKENS)
    raw_tokens = os.getenv("TOKEN_ADDRESSES")
    if raw_tokens:
        tokens.update(parse_token_addresses(raw_tokens))

    return DemoConfig(
        authorizer_key=os.getenv("AUTHORIZER_PRIVATE_KEY") or "",
        sponsor_key=os.getenv("SPONSOR_PRIVATE_KEY"),
        rpc_endpoint=os.getenv("RPC_URL") or BSC_TESTNET_RPC,
        router_address=os.getenv("ROUTER_ADDRESS") or ROUTER_ADDRESS,
        token_addresses=tokens,
        token_in=os.getenv("TOKEN_IN") or "WBNB",
        token_out=os.getenv("TOKEN_OUT") or "USDT",
        amount_in=os.getenv("AMOUNT_IN") or "0.01",
        amount_out_min=os.getenv("AMOUNT_OUT_MIN") or "1",
        amount_out_min_decimals=_env_number("AMOUNT_OUT_MIN_DECIMALS", 2, int),
        gas_limit=_env_number("GAS_LIMIT", 3_000_000, int),
        deadline_seconds=_env_number("DEADLINE_SECONDS", 300, int),
        authorization_timeout=_env_number("AUTHORIZATION_TIMEOUT", 120.0, float),
        swap_timeout=_env_number("SWAP_TIMEOUT", 30.0, float),
        poll_interval=_env_number("POLL_INTERVAL", 1.0, float),
    )
