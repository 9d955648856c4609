"""Base configuration for ping-pong contracts.

All contracts inherit from ContractBase which enforces:
- schema_version is always present
- Extra fields are forbidden
- Instances are frozen (changes are expressed as copies)
- Decimal serialization as strings
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Schema version for all persisted/journaled contracts
SCHEMA_VERSION = "1.0.0"


class ContractBase(BaseModel):
    """Base class for all ping-pong contracts."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    schema_version: str = Field(
        default=SCHEMA_VERSION,
        description="Contract schema version",
    )

    @field_validator("schema_version", mode="before")
    @classmethod
    def validate_schema_version(cls, v: Any) -> str:
        """Ensure schema_version is provided."""
        if v is None:
            raise ValueError("schema_version is required")
        return str(v)


def parse_decimal(v: Any) -> Decimal:
    """Parse value to Decimal safely.

    Accepts:
    - Decimal (passthrough)
    - str (parsed to Decimal)
    - int (converted via string to avoid precision loss)
    - float (NOT recommended, converted via its shortest string repr)
    """
    if isinstance(v, Decimal):
        return v
    if isinstance(v, str):
        return Decimal(v.strip())
    if isinstance(v, int):
        return Decimal(str(v))
    if isinstance(v, float):
        return Decimal(str(v))
    raise ValueError(f"Cannot convert {type(v).__name__} to Decimal")


def parse_optional_decimal(v: Any) -> Decimal | None:
    """Parse value to Decimal, passing None through."""
    if v is None:
        return None
    return parse_decimal(v)
