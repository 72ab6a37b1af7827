# gpu_pricing/models/health.py

from datetime import datetime
from typing import List, Optional

from gpu_pricing.models.base import CamelModel


class DbStats(CamelModel):
    providers: int
    regions: int
    gpu_models: int
    instance_types: int
    prices: int


class LatestPriceSample(CamelModel):
    instance_name: str
    provider: str
    region: str
    gpu_model: str
    gpu_count: int
    price_per_hour: float
    # None when gpu_count is 0
    price_per_gpu: Optional[float] = None
    currency: str


class DbHealthData(CamelModel):
    stats: DbStats
    latest_prices: List[LatestPriceSample]


class DbHealthResponse(CamelModel):
    success: bool = True
    message: str
    data: DbHealthData
    timestamp: datetime
