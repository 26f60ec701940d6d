# Trackr_app/schemas.py
"""
Request body schemas for the trade API.

Each model accepts camelCase keys (entryPrice, exitPrice, ...) as well as
snake_case ones. pnl, status and exit_time are derived by TradeStorage and
are never read from the client.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .utils import to_local_naive

# trades.quantity is a 32-bit INTEGER column
QUANTITY_MAX = 2_147_483_647


class _TradeFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    notes: Optional[str] = None
    entry_time: Optional[datetime] = None

    @field_validator('entry_time')
    @classmethod
    def _naive_entry_time(cls, value):
        # timestamps are stored as naive wall time on the app clock
        if value is not None:
            return to_local_naive(value)
        return value


class InsertTrade(_TradeFields):
    symbol: str = Field(min_length=1, max_length=50)
    direction: Literal['long', 'short'] = Field(validation_alias=AliasChoices('direction', 'type'))
    quantity: int = Field(gt=0, le=QUANTITY_MAX)
    entry_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    exit_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)


class UpdateTrade(_TradeFields):
    symbol: Optional[str] = Field(default=None, min_length=1, max_length=50)
    direction: Optional[Literal['long', 'short']] = Field(
        default=None, validation_alias=AliasChoices('direction', 'type'))
    quantity: Optional[int] = Field(default=None, gt=0, le=QUANTITY_MAX)
    entry_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    exit_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)

    @field_validator('symbol', 'direction', 'quantity', 'entry_price', 'exit_price')
    @classmethod
    def _not_null(cls, value, info):
        # a closed trade cannot be reopened and required columns cannot be cleared
        if value is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return value


class UpsertUser(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


def dump_supplied(model: BaseModel) -> Dict[str, Any]:
    """Only the fields present in the request body, keyed by attribute name"""
    return model.model_dump(exclude_unset=True)
