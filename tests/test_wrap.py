"""Tests for wrap/unwrap pair classification."""

import pytest

from swapquote.errors import ValidationError
from swapquote.tokens import ETH_TOKEN_ADDRESS, get_wrapped_native_address
from swapquote.wrap import PairKind, classify_token_pair

WETH = get_wrapped_native_address(1)
DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"


class TestClassifyTokenPair:
    def test_wrap(self):
        pair = classify_token_pair("ETH", "WETH", 1)

        assert pair.kind == PairKind.WRAP
        assert pair.sell_token_address == WETH
        assert pair.buy_token_address == WETH
        assert pair.is_eth_sell is True
        assert not pair.tokens_must_differ

    def test_unwrap_by_address(self):
        pair = classify_token_pair(WETH, ETH_TOKEN_ADDRESS, 1)

        assert pair.kind == PairKind.UNWRAP
        assert pair.is_eth_buy is True
        assert pair.sell_token_address == pair.buy_token_address == WETH

    def test_eth_to_token_substitutes_weth(self):
        pair = classify_token_pair(ETH_TOKEN_ADDRESS, DAI, 1)

        assert pair.kind == PairKind.ORDINARY
        assert pair.sell_token_address == WETH
        assert pair.buy_token_address == DAI
        assert pair.tokens_must_differ

    def test_same_token_is_ordinary(self):
        pair = classify_token_pair(DAI, DAI, 1)
        assert pair.kind == PairKind.ORDINARY

    def test_unknown_symbol(self):
        with pytest.raises(ValidationError) as exc_info:
            classify_token_pair("NOPE", "DAI", 1)
        assert exc_info.value.field_names == ["sellToken"]
