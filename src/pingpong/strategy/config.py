"""Ping-pong strategy configuration.

PingPongConfig is frozen. Initialization and the reset signal replace it with
an updated copy (model_copy); nothing mutates it in place.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pingpong.contracts import Direction, TokenInfo
from pingpong.contracts.base import parse_decimal
from pingpong.errors import ConfigurationError, MissingAnchorError

_HUNDRED = Decimal("100")


class TokenAnchor(BaseModel):
    """Out-amount baseline captured once at initialization.

    ``initial_out_amount`` is in base units of the token that a first order
    in the matching direction receives.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: TokenInfo
    initial_out_amount: int = Field(gt=0, description="Baseline out-amount (base units)")


class PingPongConfig(BaseModel):
    """Strategy configuration (frozen).

    tokens_info[0] is token A (spent by buys), tokens_info[1] is token B
    (spent by sells). ``amount`` is in human units of token A.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tokens_info: tuple[TokenInfo, ...] = Field(default=(), description="Token A and token B")
    amount: Annotated[Decimal, Field(description="Trade amount of token A (human units)")] = Field(
        default=Decimal("0")
    )
    slippage_bps: int = Field(default=50, ge=0, le=10_000, description="Slippage (bps)")
    target_profit_percent: Annotated[
        Decimal,
        Field(description="Required improvement over the baseline out-amount, percent (1 = 1%)"),
    ] = Field(default=Decimal("1"))
    enable_auto_slippage: bool = Field(
        default=False,
        description="Reject executions returning less than the recent out-amount",
    )
    enable_compounding: bool = Field(
        default=False,
        description="Size buys with the proceeds of the most recent sell",
    )
    priority_fee_micro_lamports: int | None = Field(default=None, ge=0)

    in_token: TokenAnchor | None = Field(default=None, description="Baseline for sell orders")
    out_token: TokenAnchor | None = Field(default=None, description="Baseline for buy orders")
    reset_at: int | None = Field(
        default=None,
        description="Last reset (ms); fills before it are ignored for baselines",
    )

    @field_validator("amount", "target_profit_percent", mode="before")
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)

    @field_validator("target_profit_percent")
    @classmethod
    def check_target_profit(cls, v: Decimal) -> Decimal:
        """Target profit cannot make the desired out-amount non-positive."""
        if not v.is_finite() or v <= -_HUNDRED:
            raise ValueError(f"target_profit_percent must be > -100, got {v}")
        return v

    def require_tokens(self) -> tuple[TokenInfo, TokenInfo]:
        """Return (token A, token B) or raise ConfigurationError."""
        if len(self.tokens_info) < 2:
            raise ConfigurationError(
                "not enough tokens provided", tokens=len(self.tokens_info)
            )
        token_a, token_b = self.tokens_info[0], self.tokens_info[1]
        if token_a.address == token_b.address:
            raise ConfigurationError("token A and token B must differ", address=token_a.address)
        return token_a, token_b

    def token_pair(self, direction: Direction) -> tuple[TokenInfo, TokenInfo]:
        """Return (in token, out token) for a direction. Buy: A->B, sell: B->A."""
        token_a, token_b = self.require_tokens()
        if direction == Direction.BUY:
            return token_a, token_b
        return token_b, token_a

    def anchor_out_amount(self, direction: Direction) -> int:
        """Baseline out-amount (base units) used when no fill exists in ``direction``."""
        anchor = self.out_token if direction == Direction.BUY else self.in_token
        if anchor is None:
            raise MissingAnchorError(
                "out-amount anchor was never captured", direction=direction.value
            )
        return anchor.initial_out_amount

    @property
    def profit_multiplier(self) -> Decimal:
        """1 + target_profit_percent / 100."""
        return 1 + self.target_profit_percent / _HUNDRED

    def with_anchors(
        self,
        in_initial_out_amount: int,
        out_initial_out_amount: int,
        *,
        reset_at: int | None = None,
    ) -> PingPongConfig:
        """Return a copy with freshly captured anchors."""
        token_a, token_b = self.require_tokens()
        return self.model_copy(
            update={
                "in_token": TokenAnchor(token=token_a, initial_out_amount=in_initial_out_amount),
                "out_token": TokenAnchor(token=token_b, initial_out_amount=out_initial_out_amount),
                "reset_at": reset_at if reset_at is not None else self.reset_at,
            }
        )
