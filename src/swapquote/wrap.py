"""Native-asset wrap/unwrap detection.

The quoting engine only understands WETH, so ETH legs are substituted with
the WETH address before anything else looks at the pair.
"""

from dataclasses import dataclass
from enum import Enum

from swapquote.tokens import (
    WETH_SYMBOL,
    find_token_address_or_throw_api_error,
    is_eth_symbol_or_address,
    is_weth_symbol_or_address,
)


class PairKind(str, Enum):
    WRAP = "wrap"
    UNWRAP = "unwrap"
    ORDINARY = "ordinary"


@dataclass(frozen=True)
class TokenPairClassification:
    """A token pair with native legs already replaced by WETH."""

    kind: PairKind
    sell_token_address: str
    buy_token_address: str
    is_eth_sell: bool
    is_eth_buy: bool

    @property
    def tokens_must_differ(self) -> bool:
        # Wrap/unwrap resolve to the same WETH address on both legs
        return self.kind == PairKind.ORDINARY


def classify_token_pair(sell_token: str, buy_token: str, chain_id: int) -> TokenPairClassification:
    """Classify a sell/buy pair as wrap, unwrap or an ordinary swap.

    Raises:
        ValidationError: if either side cannot be resolved to an address
    """
    is_eth_sell = is_eth_symbol_or_address(sell_token)
    is_eth_buy = is_eth_symbol_or_address(buy_token)

    sell_token_address = find_token_address_or_throw_api_error(
        WETH_SYMBOL if is_eth_sell else sell_token, "sellToken", chain_id
    )
    buy_token_address = find_token_address_or_throw_api_error(
        WETH_SYMBOL if is_eth_buy else buy_token, "buyToken", chain_id
    )

    if is_eth_sell and is_weth_symbol_or_address(buy_token, chain_id):
        kind = PairKind.WRAP
    elif is_weth_symbol_or_address(sell_token, chain_id) and is_eth_buy:
        kind = PairKind.UNWRAP
    else:
        kind = PairKind.ORDINARY

    return TokenPairClassification(
        kind=kind,
        sell_token_address=sell_token_address,
        buy_token_address=buy_token_address,
        is_eth_sell=is_eth_sell,
        is_eth_buy=is_eth_buy,
    )
