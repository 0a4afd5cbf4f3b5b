"""Token metadata for the supported chains.

Symbols are resolved against this table; anything that already looks like a
contract address is passed through as-is (lowercased).
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from swapquote.errors import ValidationError, ValidationErrorCodes

NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

# Sentinel address for the chain's native asset
ETH_TOKEN_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"

ETH_SYMBOL = "ETH"
WETH_SYMBOL = "WETH"

MAINNET = 1
KOVAN = 42

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class TokenNotFoundError(ValueError):
    """Raised when a symbol or address is not in the token table."""


@dataclass(frozen=True)
class TokenMetadata:
    """A token and its contract address on each supported chain."""

    symbol: str
    name: str
    decimals: int
    token_addresses: dict[int, str] = field(default_factory=dict)

    def address_on(self, chain_id: int) -> str:
        return self.token_addresses.get(chain_id, NULL_ADDRESS)


# ======================
# Token Table
# ======================

TOKEN_METADATAS: list[TokenMetadata] = [
    TokenMetadata(
        symbol="ETH",
        name="Ether",
        decimals=18,
        token_addresses={MAINNET: ETH_TOKEN_ADDRESS, KOVAN: ETH_TOKEN_ADDRESS},
    ),
    TokenMetadata(
        symbol="WETH",
        name="Wrapped Ether",
        decimals=18,
        token_addresses={
            MAINNET: "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
            KOVAN: "0xd0a1e359811322d97991e03f863a0c30c2cf029c",
        },
    ),
    TokenMetadata(
        symbol="DAI",
        name="Dai Stablecoin",
        decimals=18,
        token_addresses={
            MAINNET: "0x6b175474e89094c44da98b954eedeac495271d0f",
            KOVAN: "0x4f96fe3b7a6cf9725f59d353f723c1bdb64ca6aa",
        },
    ),
    TokenMetadata(
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        token_addresses={
            MAINNET: "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
            KOVAN: "0x75b0622cec14130172eae9cf166b92e5c112faff",
        },
    ),
    TokenMetadata(
        symbol="USDT",
        name="Tether USD",
        decimals=6,
        token_addresses={MAINNET: "0xdac17f958d2ee523a2206206994597c13d831ec7", KOVAN: NULL_ADDRESS},
    ),
    TokenMetadata(
        symbol="WBTC",
        name="Wrapped Bitcoin",
        decimals=8,
        token_addresses={MAINNET: "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599", KOVAN: NULL_ADDRESS},
    ),
    TokenMetadata(
        symbol="ZRX",
        name="0x Protocol Token",
        decimals=18,
        token_addresses={
            MAINNET: "0xe41d2489571d322189246dafa5ebde1f4699f498",
            KOVAN: "0x2002d3812f58e35f0ea1ffbf80a75a38c32175fa",
        },
    ),
    TokenMetadata(
        symbol="MKR",
        name="Maker",
        decimals=18,
        token_addresses={
            MAINNET: "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2",
            KOVAN: "0xaaf64bfcc32d0f15873a02163e7e500671a4ffcd",
        },
    ),
    TokenMetadata(
        symbol="UNI",
        name="Uniswap",
        decimals=18,
        token_addresses={MAINNET: "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984", KOVAN: NULL_ADDRESS},
    ),
    TokenMetadata(
        symbol="LINK",
        name="ChainLink Token",
        decimals=18,
        token_addresses={
            MAINNET: "0x514910771af9ca656af840dff83e8264ecf986ca",
            KOVAN: "0xa36085f69e2889c224210f603d836748e7dc0088",
        },
    ),
]


def is_token_address(value: Optional[str]) -> bool:
    """Check whether a string is a 20-byte hex address."""
    return bool(value) and bool(_ADDRESS_RE.match(value))


def get_token_metadata_if_exists(symbol_or_address: str, chain_id: int) -> Optional[TokenMetadata]:
    """Look up a token by address (on chain_id) or by case-insensitive symbol."""
    if is_token_address(symbol_or_address):
        address = symbol_or_address.lower()
        for metadata in TOKEN_METADATAS:
            if metadata.address_on(chain_id) == address:
                return metadata
        return None

    symbol = symbol_or_address.upper()
    for metadata in TOKEN_METADATAS:
        if metadata.symbol == symbol and metadata.address_on(chain_id) != NULL_ADDRESS:
            return metadata
    return None


def find_token_address_or_throw(symbol_or_address: str, chain_id: int) -> str:
    """Resolve a symbol or address to a lowercase contract address."""
    if is_token_address(symbol_or_address):
        return symbol_or_address.lower()

    metadata = get_token_metadata_if_exists(symbol_or_address, chain_id)
    if metadata is None:
        raise TokenNotFoundError(f"Could not find token `{symbol_or_address}`")
    return metadata.address_on(chain_id)


def find_token_address_or_throw_api_error(symbol_or_address: str, field_name: str, chain_id: int) -> str:
    """Same as ``find_token_address_or_throw`` but fails as a ValidationError on ``field_name``."""
    try:
        return find_token_address_or_throw(symbol_or_address, chain_id)
    except TokenNotFoundError as e:
        raise ValidationError.single(field_name, ValidationErrorCodes.VALUE_OUT_OF_RANGE, str(e)) from e


def is_eth_symbol_or_address(symbol_or_address: Optional[str]) -> bool:
    if not symbol_or_address:
        return False
    return symbol_or_address.upper() == ETH_SYMBOL or symbol_or_address.lower() == ETH_TOKEN_ADDRESS


def is_weth_symbol_or_address(symbol_or_address: Optional[str], chain_id: int) -> bool:
    if not symbol_or_address:
        return False
    if symbol_or_address.upper() == WETH_SYMBOL:
        return True
    return symbol_or_address.lower() == get_wrapped_native_address(chain_id)


def get_wrapped_native_address(chain_id: int) -> str:
    """Contract address of WETH on the given chain."""
    for metadata in TOKEN_METADATAS:
        if metadata.symbol == WETH_SYMBOL:
            return metadata.address_on(chain_id)
    return NULL_ADDRESS


def list_tokens(chain_id: int) -> list[tuple[TokenMetadata, str]]:
    """All tokens deployed on a chain, with their address there."""
    tokens = []
    for metadata in TOKEN_METADATAS:
        address = metadata.address_on(chain_id)
        if address != NULL_ADDRESS:
            tokens.append((metadata, address))
    return tokens
