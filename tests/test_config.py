"""Unit tests for demo configuration loading."""

from unittest.mock import patch

import pytest

from eip7702_demo.config import (
    BSC_TESTNET_RPC,
    ROUTER_ADDRESS,
    USDT_ADDRESS,
    WBNB_ADDRESS,
    ConfigError,
    DemoConfig,
    load_config,
    parse_token_addresses,
)
from tests.conftest import AUTHORIZER_KEY, ROUTER, SPONSOR_KEY

BUSD = "0x" + "03" * 20

ENV_VARS = [
    "RPC_URL",
    "ROUTER_ADDRESS",
    "TOKEN_ADDRESSES",
    "AUTHORIZER_PRIVATE_KEY",
    "SPONSOR_PRIVATE_KEY",
    "TOKEN_IN",
    "TOKEN_OUT",
    "AMOUNT_IN",
    "AMOUNT_OUT_MIN",
    "AMOUNT_OUT_MIN_DECIMALS",
    "GAS_LIMIT",
    "DEADLINE_SECONDS",
    "AUTHORIZATION_TIMEOUT",
    "SWAP_TIMEOUT",
    "POLL_INTERVAL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    with patch("eip7702_demo.config.load_dotenv") as mock_load:
        yield mock_load


def test_sponsor_defaults_to_authorizer():
    config = DemoConfig(authorizer_key=AUTHORIZER_KEY)
    assert config.sponsor_key == AUTHORIZER_KEY


def test_missing_authorizer_key():
    with pytest.raises(ConfigError):
        DemoConfig(authorizer_key="")


def test_token_lookup_is_case_insensitive():
    config = DemoConfig(authorizer_key=AUTHORIZER_KEY, token_addresses={"wbnb": WBNB_ADDRESS})
    assert config.token_address("WBNB") == WBNB_ADDRESS
    assert config.token_address("wBnB") == WBNB_ADDRESS


def test_unknown_token():
    config = DemoConfig(authorizer_key=AUTHORIZER_KEY)
    with pytest.raises(ConfigError, match="DOGE"):
        config.token_address("DOGE")


def test_parse_token_addresses():
    tokens = parse_token_addresses(" busd=0x01, CAKE = 0x02 ,")
    assert tokens == {"BUSD": "0x01", "CAKE": "0x02"}


@pytest.mark.parametrize("raw", ["BUSD", "=0x01", "BUSD="])
def test_parse_token_addresses_malformed(raw):
    with pytest.raises(ConfigError):
        parse_token_addresses(raw)


def test_load_config_defaults(clean_env, monkeypatch):
    monkeypatch.setenv("AUTHORIZER_PRIVATE_KEY", AUTHORIZER_KEY)

    config = load_config()

    clean_env.assert_called_once_with()
    assert config.rpc_endpoint == BSC_TESTNET_RPC
    assert config.router_address == ROUTER_ADDRESS
    assert config.token_addresses == {"WBNB": WBNB_ADDRESS, "USDT": USDT_ADDRESS}
    assert config.sponsor_key == AUTHORIZER_KEY
    assert config.amount_in == "0.01"
    assert config.amount_out_min == "1"
    assert config.amount_out_min_decimals == 2
    assert config.gas_limit == 3_000_000
    assert config.authorization_timeout == 120
    assert config.swap_timeout == 30


def test_load_config_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("AUTHORIZER_PRIVATE_KEY", AUTHORIZER_KEY)
    monkeypatch.setenv("SPONSOR_PRIVATE_KEY", SPONSOR_KEY)
    monkeypatch.setenv("RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("TOKEN_ADDRESSES", f"BUSD={BUSD}")
    monkeypatch.setenv("TOKEN_OUT", "BUSD")
    monkeypatch.setenv("SWAP_TIMEOUT", "12.5")
    monkeypatch.setenv("GAS_LIMIT", "500000")

    config = load_config(".env.local")

    clean_env.assert_called_once_with(".env.local")
    assert config.sponsor_key == SPONSOR_KEY
    assert config.rpc_endpoint == "http://localhost:8545"
    assert config.token_address(config.token_out) == BUSD
    assert config.token_address("USDT") == USDT_ADDRESS
    assert config.swap_timeout == 12.5
    assert config.gas_limit == 500000


def test_load_config_bad_number(clean_env, monkeypatch):
    monkeypatch.setenv("AUTHORIZER_PRIVATE_KEY", AUTHORIZER_KEY)
    monkeypatch.setenv("GAS_LIMIT", "lots")

    with pytest.raises(ConfigError, match="GAS_LIMIT"):
        load_config()


def test_load_config_requires_authorizer(clean_env):
    with pytest.raises(ConfigError):
        load_config()


@pytest.mark.parametrize("key", ["not-a-key", "0x1234", "0x" + "0" * 64])
def test_invalid_private_key(key):
    with pytest.raises(ConfigError, match="private key"):
        DemoConfig(authorizer_key=key)


def test_invalid_sponsor_key():
    with pytest.raises(ConfigError, match="sponsor"):
        DemoConfig(authorizer_key=AUTHORIZER_KEY, sponsor_key="0xzz")


@pytest.mark.parametrize("address", ["0x1234", "router", "0x" + "g" * 40])
def test_invalid_router_address(address):
    with pytest.raises(ConfigError, match="router"):
        DemoConfig(authorizer_key=AUTHORIZER_KEY, router_address=address)


def test_invalid_token_address():
    with pytest.raises(ConfigError, match="token BUSD"):
        DemoConfig(authorizer_key=AUTHORIZER_KEY, token_addresses={"busd": "0x03"})


def test_lowercase_router_address_accepted():
    config = DemoConfig(authorizer_key=AUTHORIZER_KEY, router_address=ROUTER.lower())
    assert config.router_address == ROUTER.lower()


def test_load_config_empty_values_use_defaults(clean_env, monkeypatch):
    monkeypatch.setenv("AUTHORIZER_PRIVATE_KEY", AUTHORIZER_KEY)
    for name in ["RPC_URL", "ROUTER_ADDRESS", "TOKEN_IN", "TOKEN_OUT", "AMOUNT_IN", "AMOUNT_OUT_MIN"]:
        monkeypatch.setenv(name, "")

    config = load_config()

    assert config.rpc_endpoint == BSC_TESTNET_RPC
    assert config.router_address == ROUTER_ADDRESS
    assert config.token_in == "WBNB"
    assert config.token_out == "USDT"
    assert config.amount_in == "0.01"
    assert config.amount_out_min == "1"


def test_load_config_bad_router_address(clean_env, monkeypatch):
    monkeypatch.setenv("AUTHORIZER_PRIVATE_KEY", AUTHORIZER_KEY)
    monkeypatch.setenv("ROUTER_ADDRESS", "0x1234")

    with pytest.raises(ConfigError, match="router"):
        load_config()
