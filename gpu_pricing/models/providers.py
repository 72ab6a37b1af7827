# gpu_pricing/models/providers.py

from typing import List, Optional

from gpu_pricing.models.base import CamelModel


class InstanceTypeSummary(CamelModel):
    instance_name: str
    gpu_model: str
    gpu_count: int
    vcpu: Optional[int] = None
    ram: Optional[int] = None
    price: Optional[float] = None
    price_per_gpu: Optional[float] = None


class RegionSummary(CamelModel):
    code: str
    name: str
    country_code: Optional[str] = None
    instance_types: List[InstanceTypeSummary]


class ProviderSummary(CamelModel):
    code: str
    name: str
    region_count: int
    regions: List[RegionSummary]


class CatalogTotals(CamelModel):
    total_providers: int
    total_regions: int
    total_instances: int


class ProvidersResponse(CamelModel):
    success: bool = True
    data: List[ProviderSummary]
    summary: CatalogTotals
