# gpu_pricing/api/instances.py

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from gpu_pricing.api.prices import validation_details
from gpu_pricing.calc import per_unit
from gpu_pricing.catalog import (
    build_catalog,
    build_listing,
    find_specs,
    load_instance_specs,
)
from gpu_pricing.models.instances import (
    CompareRequest,
    ComparedInstance,
    ComparisonAnalysis,
    ComparisonMeta,
    ComparisonPricing,
    ComparisonResponse,
    ComparisonSummary,
    CostEfficiency,
    FilterOptions,
    GpuCountRange,
    InstanceListing,
    InstanceSpecs,
    InstancesQuery,
    InstancesResponse,
    ListingMeta,
    Pagination,
    PerformanceSummary,
    PriceRange,
    Recommendations,
)
from gpu_pricing.models.prices import PriceEntry
from gpu_pricing.registry import get_registry

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
UNKNOWN = "Unknown"

# rough per-GPU figures, keyed by gpu model
MEMORY_BANDWIDTH = {
    "H100": "3.35 TB/s",
    "A100": "1.93 TB/s",
    "A10G": "600 GB/s",
    "V100": "900 GB/s",
    "L4": "300 GB/s",
}
COMPUTE_CAPABILITY = {
    "H100": "165 TFLOPS (BF16)",
    "A100": "77 TFLOPS (BF16)",
    "A10G": "31.2 TFLOPS (FP16)",
    "V100": "28 TFLOPS (FP16)",
    "L4": "30.3 TFLOPS (FP16)",
}

SORT_KEYS = {
    "pricePerHour": lambda listing: listing.price_per_hour,
    "pricePerGpu": lambda listing: listing.price_per_gpu,
    "gpuCount": lambda listing: listing.specs.gpu_count,
    "vcpu": lambda listing: listing.specs.vcpu,
    "ramGB": lambda listing: listing.specs.ram_gb,
}

router = APIRouter(prefix="/api/instances", tags=["instances"])


def _internal_error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "message": message,
        },
    )


def _matches(listing: InstanceListing, query: InstancesQuery) -> bool:
    if query.provider and listing.provider.lower() != query.provider.lower():
        return False
    if query.region and listing.region != query.region:
        return False
    if query.gpu_model and listing.specs.gpu_model != query.gpu_model:
        return False
    if query.search:
        needle = query.search.lower()
        if needle not in listing.instance_name.lower() and needle not in listing.specs.gpu_model.lower():
            return False
    return True


def _sorted(listings: List[InstanceListing], sort_by: str, direction: str) -> List[InstanceListing]:
    # listings without a value for the key go last in either direction
    key = SORT_KEYS[sort_by]
    present = [listing for listing in listings if key(listing) is not None]
    missing = [listing for listing in listings if key(listing) is None]
    present.sort(key=key, reverse=direction == "desc")
    return present + missing


@router.get("", response_model=InstancesResponse)
def list_instances(request: Request):
    """
    Priced instances with their specs, filtered, sorted and paginated.

    Query parameters: provider (case-insensitive), region, gpuModel,
    search (substring of instance name or gpu model), sortBy,
    sortDirection, page, limit.
    """
    # empty parameters count as not given
    params = {key: value for key, value in request.query_params.items() if value}
    try:
        query = InstancesQuery.model_validate(params)
    except ValidationError as exc:
        logger.warning("Rejected instances query: %s", exc.error_count())
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid query parameters",
                "details": validation_details(exc),
            },
        )

    try:
        catalog = build_catalog(get_registry().snapshot(), load_instance_specs())
    except Exception:
        logger.exception("Instances API error")
        return _internal_error("Failed to fetch instances")

    filtered = _sorted(
        [listing for listing in catalog if _matches(listing, query)],
        query.sort_by,
        query.sort_direction,
    )

    total = len(filtered)
    total_pages = math.ceil(total / query.limit)
    start = (query.page - 1) * query.limit

    return InstancesResponse(
        instances=filtered[start:start + query.limit],
        pagination=Pagination(
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=total_pages,
            has_next=query.page < total_pages,
            has_prev=query.page > 1,
        ),
        filters=FilterOptions(
            providers=sorted({listing.provider for listing in catalog}),
            regions=sorted({listing.region for listing in catalog}),
            gpu_models=sorted({listing.specs.gpu_model for listing in catalog}),
        ),
        meta=ListingMeta(
            last_updated=datetime.now(timezone.utc),
            api_version=API_VERSION,
        ),
    )


def _compared_instance(instance_id: str, entry: PriceEntry, spec: InstanceSpecs) -> ComparedInstance:
    listing = build_listing(instance_id, entry, spec)
    price = entry.price_per_hour

    total_gpu_memory = None
    if spec.gpu_memory_gb is not None:
        total_gpu_memory = spec.gpu_count * spec.gpu_memory_gb

    return ComparedInstance(
        id=listing.id,
        provider=listing.provider,
        region=listing.region,
        instance_name=listing.instance_name,
        specs=spec,
        pricing=ComparisonPricing(
            price_per_hour=price,
            price_per_gpu=per_unit(price, spec.gpu_count),
            price_per_vcpu=per_unit(price, spec.vcpu),
            price_per_ram_gb=per_unit(price, spec.ram_gb),
            currency=entry.currency,
        ),
        performance=PerformanceSummary(
            total_gpu_memory=total_gpu_memory,
            memory_bandwidth=MEMORY_BANDWIDTH.get(spec.gpu_model, UNKNOWN),
            interconnect_type=spec.interconnect,
            compute_capability=COMPUTE_CAPABILITY.get(spec.gpu_model, UNKNOWN),
        ),
        cost_efficiency=CostEfficiency(
            price_performance_ratio=per_unit(price, spec.gpu_count),
            memory_price_ratio=per_unit(price, total_gpu_memory),
            vcpu_price_ratio=per_unit(price, spec.vcpu),
        ),
        last_updated=entry.last_updated,
    )


def _analysis(compared: List[ComparedInstance]) -> ComparisonAnalysis:
    hourly = [c.pricing.price_per_hour for c in compared]
    gpu_counts = [c.specs.gpu_count for c in compared]

    # ties go to the instance listed first; instances with no ratio rank last
    best_value = min(
        compared,
        key=lambda c: (
            c.cost_efficiency.price_performance_ratio is None,
            c.cost_efficiency.price_performance_ratio or 0.0,
        ),
    )
    most_powerful = max(compared, key=lambda c: c.specs.gpu_count)
    cheapest = min(compared, key=lambda c: c.pricing.price_per_hour)

    return ComparisonAnalysis(
        summary=ComparisonSummary(
            total_instances=len(compared),
            price_range=PriceRange(
                min=min(hourly),
                max=max(hourly),
                currency=compared[0].pricing.currency,
            ),
            gpu_count_range=GpuCountRange(min=min(gpu_counts), max=max(gpu_counts)),
        ),
        recommendations=Recommendations(
            best_value=best_value.id,
            most_powerful=most_powerful.id,
            cheapest=cheapest.id,
        ),
    )


def _compare(instance_ids: Sequence[str]):
    prices = get_registry().snapshot()
    specs = load_instance_specs()

    compared: List[ComparedInstance] = []
    not_found: List[str] = []
    for instance_id in instance_ids:
        entry = prices.get(instance_id)
        spec = find_specs(specs, instance_id)
        if entry is None or spec is None:
            not_found.append(instance_id)
            continue
        compared.append(_compared_instance(instance_id, entry, spec))

    if not_found:
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": "Some instances not found",
                "notFoundInstances": not_found,
                "message": f"The following instances could not be found: {', '.join(not_found)}",
            },
        )

    return ComparisonResponse(
        instances=compared,
        analysis=_analysis(compared),
        meta=ComparisonMeta(
            comparison_id=f"cmp_{uuid.uuid4().hex[:12]}",
            generated_at=datetime.now(timezone.utc),
            api_version=API_VERSION,
        ),
    )


@router.post("/compare", response_model=ComparisonResponse)
async def compare_instances(request: Request):
    """
    Side-by-side pricing and per-unit cost ratios for 2 to 4 instances.

    Every id must be priced in the registry and have a specs entry,
    otherwise nothing is compared and the missing ids are listed (404).
    """
    try:
        body = await request.json()
        payload = CompareRequest.model_validate(body)
        return _compare(payload.instance_ids)
    except ValidationError as exc:
        logger.warning("Rejected compare request: %s", exc.error_count())
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request body",
                "details": validation_details(exc),
            },
        )
    except Exception:
        logger.exception("Comparison API error")
        return _internal_error("Failed to compare instances")


@router.get("/compare", response_model=ComparisonResponse)
def compare_instances_by_ids(
    ids: Optional[str] = Query(None, description="2 to 4 comma-separated instance ids"),
):
    instance_ids = [part.strip() for part in ids.split(",")] if ids else []
    if not 2 <= len(instance_ids) <= 4:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid instance IDs",
                "message": "Please provide 2-4 instance IDs separated by commas",
            },
        )

    try:
        return _compare(instance_ids)
    except Exception:
        logger.exception("Comparison API error")
        return _internal_error("Failed to compare instances")
