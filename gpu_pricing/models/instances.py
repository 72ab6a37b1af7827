# gpu_pricing/models/instances.py

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from gpu_pricing.models.base import CamelModel

SortField = Literal["pricePerHour", "pricePerGpu", "gpuCount", "vcpu", "ramGB"]


class InstanceSpecs(CamelModel):
    """One entry of data/instance-specs.json."""

    family: str
    gpu_model: str
    gpu_count: int
    # "GB" suffixes are upper case on the wire
    gpu_memory_gb: Optional[int] = Field(None, alias="gpuMemoryGB")
    vcpu: int
    ram_gb: int = Field(alias="ramGB")
    local_ssd_gb: Optional[int] = Field(None, alias="localSsdGB")
    network_performance: Optional[str] = None
    interconnect: Optional[str] = None


class InstanceListing(CamelModel):
    id: str
    provider: str
    region: str
    instance_name: str
    specs: InstanceSpecs
    price_per_hour: float
    price_per_gpu: Optional[float] = None
    currency: str
    last_updated: datetime


class InstancesQuery(CamelModel):
    provider: Optional[str] = None
    region: Optional[str] = None
    gpu_model: Optional[str] = None
    sort_by: SortField = "pricePerGpu"
    sort_direction: Literal["asc", "desc"] = "asc"
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=1000)
    search: Optional[str] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class FilterOptions(CamelModel):
    providers: List[str]
    regions: List[str]
    gpu_models: List[str]


class ListingMeta(CamelModel):
    currency: str = "USD"
    last_updated: datetime
    api_version: str


class InstancesResponse(CamelModel):
    success: bool = True
    instances: List[InstanceListing]
    pagination: Pagination
    filters: FilterOptions
    meta: ListingMeta


# ---- Comparison ----

class CompareRequest(CamelModel):
    instance_ids: List[str] = Field(min_length=2, max_length=4)


class ComparisonPricing(CamelModel):
    price_per_hour: float
    price_per_gpu: Optional[float] = None
    price_per_vcpu: Optional[float] = None
    price_per_ram_gb: Optional[float] = Field(None, alias="pricePerRamGB")
    currency: str


class PerformanceSummary(CamelModel):
    total_gpu_memory: Optional[int] = None
    memory_bandwidth: str
    interconnect_type: Optional[str] = None
    compute_capability: str


class CostEfficiency(CamelModel):
    price_performance_ratio: Optional[float] = None
    memory_price_ratio: Optional[float] = None
    vcpu_price_ratio: Optional[float] = None


class ComparedInstance(CamelModel):
    id: str
    provider: str
    region: str
    instance_name: str
    specs: InstanceSpecs
    pricing: ComparisonPricing
    performance: PerformanceSummary
    cost_efficiency: CostEfficiency
    last_updated: datetime


class PriceRange(CamelModel):
    min: float
    max: float
    currency: str


class GpuCountRange(CamelModel):
    min: int
    max: int


class ComparisonSummary(CamelModel):
    total_instances: int
    price_range: PriceRange
    gpu_count_range: GpuCountRange


class Recommendations(CamelModel):
    # instance ids
    best_value: str
    most_powerful: str
    cheapest: str


class ComparisonAnalysis(CamelModel):
    summary: ComparisonSummary
    recommendations: Recommendations


class ComparisonMeta(CamelModel):
    comparison_id: str
    currency: str = "USD"
    generated_at: datetime
    api_version: str


class ComparisonResponse(CamelModel):
    success: bool = True
    instances: List[ComparedInstance]
    analysis: ComparisonAnalysis
    meta: ComparisonMeta
