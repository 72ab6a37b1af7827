# gpu_pricing/models/prices.py

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from gpu_pricing.models.base import CamelModel


class PriceUpdateItem(CamelModel):
    instance_id: str
    new_price: float = Field(ge=0, strict=True, allow_inf_nan=False)
    currency: str = "USD"


class PriceUpdateRequest(CamelModel):
    updates: List[PriceUpdateItem]


class PriceEntry(CamelModel):
    price_per_hour: float = Field(ge=0)
    currency: str = "USD"
    last_updated: datetime

    class Config:
        frozen = True


class PriceUpdateLog(CamelModel):
    id: str
    instance_id: str
    old_price: float
    new_price: float
    updated_at: datetime
    updated_by: str

    class Config:
        frozen = True


class PriceUpdateResult(CamelModel):
    instance_id: str
    success: bool
    old_price: Optional[float] = None
    new_price: Optional[float] = None
    change: Optional[float] = None
    # absent when the old price was zero
    change_percent: Optional[float] = None
    error: Optional[str] = None


class PriceUpdateResponse(CamelModel):
    success: bool = True
    message: str
    results: List[PriceUpdateResult]
    updated_at: datetime


class PriceSnapshotResponse(CamelModel):
    prices: Dict[str, PriceEntry]
    last_updated: datetime
    logs: Optional[List[PriceUpdateLog]] = None
