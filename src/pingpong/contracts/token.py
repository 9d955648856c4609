"""TokenInfo contract.

Identity and precision of one tradable token. Loaded once at initialization.
"""

from __future__ import annotations

from pydantic import Field

from pingpong.contracts.base import ContractBase


class TokenInfo(ContractBase):
    """A token: address (unique), symbol and fixed decimals."""

    address: str = Field(min_length=1, description="Mint/contract address")
    symbol: str = Field(default="n/a", description="Display symbol")
    decimals: int = Field(ge=0, description="Base-unit exponent, fixed for the token's lifetime")
