"""Tests for PingPongConfig validation and anchors."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from pingpong.contracts import Direction
from pingpong.errors import ConfigurationError, MissingAnchorError
from pingpong.strategy import PingPongConfig
from tests.fakes import TOKEN_A, TOKEN_B, make_config


class TestPingPongConfig:
    """Tests for PingPongConfig."""

    def test_defaults(self) -> None:
        config = PingPongConfig()

        assert config.tokens_info == ()
        assert config.amount == 0
        assert config.slippage_bps == 50
        assert config.target_profit_percent == Decimal("1")
        assert config.in_token is None
        assert config.out_token is None

    def test_amount_parsed_from_string(self) -> None:
        config = make_config(amount="12.5")

        assert config.amount == Decimal("12.5")

    def test_profit_multiplier(self) -> None:
        assert make_config(target_profit_percent="2.5").profit_multiplier == Decimal("1.025")
        assert make_config(target_profit_percent=0).profit_multiplier == 1

    @pytest.mark.parametrize("value", ["-100", "-150", "NaN"])
    def test_invalid_target_profit(self, value: str) -> None:
        with pytest.raises(ValidationError):
            make_config(anchors=False, target_profit_percent=value)

    def test_slippage_bounds(self) -> None:
        with pytest.raises(ValidationError):
            make_config(anchors=False, slippage_bps=10_001)

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            make_config(anchors=False, leverage=2)

    def test_token_pair(self) -> None:
        config = make_config()

        assert config.token_pair(Direction.BUY) == (TOKEN_A, TOKEN_B)
        assert config.token_pair(Direction.SELL) == (TOKEN_B, TOKEN_A)

    def test_same_token_rejected(self) -> None:
        config = make_config(anchors=False, tokens_info=(TOKEN_A, TOKEN_A))

        with pytest.raises(ConfigurationError, match="must differ"):
            config.require_tokens()

    def test_anchors(self) -> None:
        config = make_config(anchors=False).with_anchors(10_000000, 95_000000000, reset_at=5)

        assert config.in_token is not None
        assert config.in_token.token == TOKEN_A
        assert config.anchor_out_amount(Direction.SELL) == 10_000000
        assert config.anchor_out_amount(Direction.BUY) == 95_000000000
        assert config.reset_at == 5

    def test_with_anchors_keeps_reset_at(self) -> None:
        config = make_config(anchors=False).with_anchors(1, 2, reset_at=5).with_anchors(3, 4)

        assert config.reset_at == 5

    def test_missing_anchor(self) -> None:
        with pytest.raises(MissingAnchorError):
            make_config(anchors=False).anchor_out_amount(Direction.SELL)

    def test_frozen(self) -> None:
        config = make_config()

        with pytest.raises(ValidationError):
            config.amount = Decimal("5")  # type: ignore[misc]
